# =============================================================================
# loyalty_core/data/supabase_client.py
# Supabase Client for LoyaltyHub
# Handles authentication and the point ledger tables
# =============================================================================

from __future__ import annotations
from typing import Optional, Dict, Any

from supabase import create_client, Client

from loyalty_core.config import Settings, TABLES
from loyalty_core.logging import get_logger
from loyalty_core.models import (
    User,
    UserRole,
    LoyaltyPoints,
    TransactionType,
    AuthResult,
    PointsResult,
    utc_now_iso,
    MAPPING_ERRORS,
)
from loyalty_core.models.entities import to_iso

logger = get_logger(__name__)


def get_supabase_client(settings: Settings) -> Client:
    """
    Create a Supabase client from resolved settings.

    The client keeps the auth session of whoever signs in through it, so
    each browser session needs its own instance.

    Settings loading already refused to continue without credentials,
    so a failure here is a genuine connection/configuration problem and
    is left to propagate.
    """
    return create_client(settings.supabase_url, settings.supabase_key)


class SupabaseService:
    """
    Auth and point-ledger operations against Supabase.

    Every public method reports failure through the returned result
    (success=False plus a message) rather than raising; sign_out and
    get_current_user never raise at all.
    """

    def __init__(self, client: Client):
        self.client = client

    # =========================================================================
    # AUTHENTICATION
    # =========================================================================

    def sign_up(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        phone_number: Optional[str] = None,
    ) -> AuthResult:
        """
        Create an identity, a profile row and a zero-balance points row.

        Profile and points inserts are not rolled back with the identity:
        if either insert fails the error is logged and sign-up still
        succeeds.
        """
        try:
            response = self.client.auth.sign_up({
                "email": email,
                "password": password,
                "options": {
                    "data": {
                        "first_name": first_name,
                        "last_name": last_name,
                        "phone_number": phone_number,
                        "role": UserRole.USER.value,
                    },
                },
            })
        except Exception as e:
            logger.warning(f"Supabase sign-up failed for {email}: {e}")
            return AuthResult(success=False, message=str(e))

        auth_user = response.user
        if auth_user is None:
            return AuthResult(
                success=False,
                message="Signup completed but no user data received",
            )

        profile = {
            "id": auth_user.id,
            "email": auth_user.email or email,
            "first_name": first_name,
            "last_name": last_name,
            "phone_number": phone_number,
            "role": UserRole.USER.value,
            "is_active": True,
        }
        try:
            self.client.table(TABLES["PROFILES"]).insert(profile).execute()
        except Exception as e:
            logger.error(f"Profile creation error for {auth_user.id}: {e}")

        points = LoyaltyPoints(
            id="",
            user_id=auth_user.id,
            points_balance=0,
            total_earned=0,
            total_redeemed=0,
        )
        try:
            inserted = (
                self.client.table(TABLES["LOYALTY_POINTS"])
                .insert({
                    "user_id": auth_user.id,
                    "points_balance": 0,
                    "total_earned": 0,
                    "total_redeemed": 0,
                })
                .execute()
            )
            if inserted.data:
                points = LoyaltyPoints.from_row(inserted.data[0])
        except Exception as e:
            logger.error(f"Loyalty points initialization error for {auth_user.id}: {e}")

        logger.info(f"Supabase sign-up succeeded for {email}")
        return AuthResult(
            success=True,
            message="Account created successfully!",
            user=self._map_user(auth_user, profile),
            session=response.session,
            points=points,
        )

    def sign_in(self, email: str, password: str) -> AuthResult:
        """Authenticate and join the profile row."""
        try:
            response = self.client.auth.sign_in_with_password({
                "email": email,
                "password": password,
            })
        except Exception as e:
            logger.warning(f"Supabase sign-in failed for {email}: {e}")
            return AuthResult(success=False, message=str(e))

        auth_user = response.user
        if auth_user is None:
            return AuthResult(success=False, message="Login failed - no user data received")

        profile = self._fetch_profile(auth_user.id)
        if profile is None:
            return AuthResult(success=False, message="Failed to fetch user profile")

        try:
            user = self._map_user(auth_user, profile)
        except MAPPING_ERRORS as e:
            logger.error(f"Invalid profile for {auth_user.id}: {e}")
            return AuthResult(success=False, message=f"Invalid user profile: {e}")

        return AuthResult(
            success=True,
            message="Login successful!",
            user=user,
            session=response.session,
        )

    def sign_out(self) -> None:
        try:
            self.client.auth.sign_out()
        except Exception as e:
            logger.error(f"Signout error: {e}")

    def get_current_user(self) -> Optional[User]:
        """Return the user of the active Supabase session, or None."""
        try:
            response = self.client.auth.get_user()
            if response is None or response.user is None:
                return None

            profile = self._fetch_profile(response.user.id)
            if profile is None:
                return None

            return self._map_user(response.user, profile)
        except Exception as e:
            logger.error(f"Get current user error: {e}")
            return None

    # =========================================================================
    # LOYALTY POINTS
    # =========================================================================

    def get_loyalty_points(self, user_id: str) -> PointsResult:
        try:
            response = (
                self.client.table(TABLES["LOYALTY_POINTS"])
                .select("*")
                .eq("user_id", user_id)
                .single()
                .execute()
            )
        except Exception as e:
            logger.warning(f"Get loyalty points error for {user_id}: {e}")
            return PointsResult(success=False, message=str(e))

        if not response.data:
            return PointsResult(success=False, message="No loyalty points found for user")

        try:
            ledger = LoyaltyPoints.from_row(response.data)
        except MAPPING_ERRORS as e:
            logger.error(f"Invalid loyalty points row for {user_id}: {e}")
            return PointsResult(success=False, message=f"Invalid loyalty points row: {e}")

        return PointsResult(
            success=True,
            message="Points retrieved successfully",
            points=ledger,
        )

    def add_points(
        self,
        user_id: str,
        points: int,
        reason: str,
        partner_id: Optional[str] = None,
    ) -> PointsResult:
        """
        Credit points to a user.

        Read-modify-write: the balance row is read, incremented locally
        and written back, then a transaction row is inserted. There is no
        version check, so concurrent calls for one user can lose updates,
        and a failed transaction insert leaves the balance change without
        an audit row.
        """
        current = self.get_loyalty_points(user_id)
        if not current.success:
            return current

        ledger = current.points
        new_balance = ledger.points_balance + points
        new_total_earned = ledger.total_earned + points
        updated_at = utc_now_iso()

        try:
            (
                self.client.table(TABLES["LOYALTY_POINTS"])
                .update({
                    "points_balance": new_balance,
                    "total_earned": new_total_earned,
                    "updated_at": updated_at,
                })
                .eq("user_id", user_id)
                .execute()
            )
        except Exception as e:
            logger.warning(f"Points update failed for {user_id}: {e}")
            return PointsResult(success=False, message=str(e))

        transaction: Dict[str, Any] = {
            "user_id": user_id,
            "type": TransactionType.EARN.value,
            "points": points,
            "reason": reason,
        }
        if partner_id:
            transaction["partner_id"] = partner_id
        try:
            self.client.table(TABLES["TRANSACTIONS"]).insert(transaction).execute()
        except Exception as e:
            logger.error(f"Transaction record creation error for {user_id}: {e}")

        return PointsResult(
            success=True,
            message=f"Successfully added {points} points",
            points=LoyaltyPoints(
                id=ledger.id,
                user_id=ledger.user_id,
                points_balance=new_balance,
                total_earned=new_total_earned,
                total_redeemed=ledger.total_redeemed,
                created_at=ledger.created_at,
                updated_at=updated_at,
            ),
        )

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _fetch_profile(self, user_id: str) -> Optional[Dict[str, Any]]:
        try:
            response = (
                self.client.table(TABLES["PROFILES"])
                .select("*")
                .eq("id", user_id)
                .single()
                .execute()
            )
            return response.data or None
        except Exception as e:
            logger.error(f"Profile fetch error for {user_id}: {e}")
            return None

    @staticmethod
    def _map_user(auth_user: Any, profile: Dict[str, Any]) -> User:
        created_at = to_iso(getattr(auth_user, "created_at", None))
        updated_at = to_iso(getattr(auth_user, "updated_at", None)) or created_at
        return User(
            id=auth_user.id,
            email=auth_user.email or profile.get("email", ""),
            first_name=profile.get("first_name", ""),
            last_name=profile.get("last_name", ""),
            role=UserRole(str(profile.get("role") or "USER").upper()),
            is_active=bool(profile.get("is_active", True)),
            created_at=created_at,
            updated_at=updated_at,
            phone_number=profile.get("phone_number"),
        )
