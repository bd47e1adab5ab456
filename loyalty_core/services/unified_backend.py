# =============================================================================
# loyalty_core/services/unified_backend.py
# Unified Backend Service - Single API for Supabase, REST, AI and Guest Mode
# =============================================================================
"""
UnifiedBackendService - the only object the pages talk to.

It owns the session store and an ordered list of providers:
- Supabase first for auth and the point ledger
- the REST backend second, and alone for quizzes, partners, ads, payments,
  QR codes and admin CRUD
- the AI microservice for analyses
- a static fixture provider that replaces all of the above for guests

Usage:
------
from loyalty_core.bootstrap import build_backend

backend = build_backend(load_settings())

result = backend.login("a@b.com", "secret")
if result.success:
    points = backend.get_loyalty_points(backend.get_current_user_id())

backend.logout()
"""

from __future__ import annotations
import copy
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from loyalty_core.errors import (
    LoyaltyHubError,
    UnsupportedOperationError,
)
from loyalty_core.logging import get_logger
from loyalty_core.models import (
    AddPointsResult,
    AIRecommendation,
    LoginResult,
    LoyaltyPoints,
    PredictiveInsight,
    SentimentResult,
    Transaction,
    User,
    UserBehaviorPattern,
)
from loyalty_core.state import GUEST_USER_ID, SessionStore
from . import guest_fixtures as fixtures
from .providers import BackendProvider

logger = get_logger(__name__)

# Markers: no default (re-raise the last provider error), no user argument
_RAISE = object()
_NO_USER = object()

GUEST_TOKEN = "guest-token"


class AuthStatus(str, Enum):
    ANONYMOUS = "anonymous"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"
    AUTH_FAILED = "auth_failed"


class UnifiedBackendService:
    """
    Facade over the provider chain for one browser session.

    Everything per-user (token, user, auth status) lives in ``store``, and
    the providers hold the clients of that session only. Build one facade
    per session with ``bootstrap.session_backend``.

    Mutations and point reads raise the last provider error when every
    provider failed. List reads degrade to an empty list, and the admin
    overview to zero counts.
    """

    def __init__(
        self,
        store: SessionStore,
        providers: Sequence[BackendProvider],
        guest_provider: Optional[BackendProvider] = None,
    ):
        self.store = store
        self.providers = list(providers)
        self.guest_provider = guest_provider
        self._initialized = False
        self._status: Dict[str, Any] = {}

    @property
    def auth_status(self) -> AuthStatus:
        """Login state of this session, kept in the session store."""
        stored = self.store.get_auth_status()
        if stored:
            return AuthStatus(stored)
        return AuthStatus.AUTHENTICATED if self.store.get_user() else AuthStatus.ANONYMOUS

    @auth_status.setter
    def auth_status(self, status: AuthStatus) -> None:
        # anonymous is the default, so it leaves no key behind
        self.store.set_auth_status(None if status is AuthStatus.ANONYMOUS else status.value)

    # =========================================================================
    # DISPATCH
    # =========================================================================

    def _is_guest_call(self, user_id: Any) -> bool:
        if user_id is not _NO_USER and user_id is not None:
            return user_id == GUEST_USER_ID
        return self.store.is_guest()

    def _chain(self, operation: str, guest: bool) -> List[BackendProvider]:
        if guest and self.guest_provider is not None:
            return [self.guest_provider]
        return [p for p in self.providers if p.supports(operation)]

    def _dispatch(
        self,
        operation: str,
        *args,
        user_id: Any = _NO_USER,
        default: Any = _RAISE,
        guest_allowed: bool = True,
        **kwargs,
    ) -> Any:
        """
        Run ``operation`` against the first provider that succeeds.

        ``user_id`` (when the operation is per-user) is passed as the first
        positional argument and decides whether the guest chain is used.
        """
        guest = guest_allowed and self._is_guest_call(user_id)
        chain = self._chain(operation, guest)
        call_args = args if user_id is _NO_USER else (user_id,) + args

        if not chain:
            error: Exception = UnsupportedOperationError("unified", operation)
            if default is _RAISE:
                raise error
            logger.warning(str(error))
            return copy.deepcopy(default)

        last_error: Optional[Exception] = None
        for provider in chain:
            try:
                result = provider.invoke(operation, *call_args, **kwargs)
            except LoyaltyHubError as e:
                logger.warning(f"{provider.name} failed for {operation}: {e.message}")
                last_error = e
                continue

            if getattr(result, "success", True) is False:
                message = getattr(result, "message", "unsuccessful result")
                logger.warning(f"{provider.name} rejected {operation}: {message}")
                last_error = LoyaltyHubError(message, code="PROVIDER_003")
                continue

            return result

        if default is _RAISE:
            logger.error(f"All providers failed for {operation}")
            raise last_error
        logger.error(f"All providers failed for {operation}; returning default")
        return copy.deepcopy(default)

    # =========================================================================
    # INITIALIZATION
    # =========================================================================

    def initialize(self) -> Dict[str, Any]:
        """Probe every provider once. Never raises."""
        status = {}
        for provider in self.providers:
            try:
                status[provider.name] = provider.probe()
            except LoyaltyHubError as e:
                status[provider.name] = {"status": "error", "message": e.message}
        self._status = status
        self._initialized = True
        logger.info(f"UnifiedBackendService initialized: {sorted(status)}")
        return status

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def get_status(self) -> Dict[str, Any]:
        return {
            "initialized": self._initialized,
            "auth_status": self.auth_status.value,
            "guest": self.is_guest(),
            "providers": dict(self._status),
        }

    # =========================================================================
    # AUTH & SESSION
    # =========================================================================

    def login(self, email: str, password: str) -> LoginResult:
        """Authenticate against Supabase, then the REST backend."""
        self.auth_status = AuthStatus.AUTHENTICATING
        try:
            result = self._dispatch("login", email, password, guest_allowed=False)
        except LoyaltyHubError as e:
            self.auth_status = AuthStatus.AUTH_FAILED
            return LoginResult(success=False, message=e.message or "Login failed")

        self.store.save_session(result.token, result.user)
        self.auth_status = AuthStatus.AUTHENTICATED
        logger.info(f"User logged in: {result.user.email}")
        return result

    def signup(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        phone_number: Optional[str] = None,
    ) -> LoginResult:
        self.auth_status = AuthStatus.AUTHENTICATING
        try:
            result = self._dispatch(
                "signup", email, password, first_name, last_name, phone_number,
                guest_allowed=False,
            )
        except LoyaltyHubError as e:
            self.auth_status = AuthStatus.AUTH_FAILED
            return LoginResult(success=False, message=e.message or "Sign up failed")

        self.store.save_session(result.token, result.user)
        self.auth_status = (
            AuthStatus.AUTHENTICATED if result.token else AuthStatus.ANONYMOUS
        )
        return result

    def start_guest_session(self) -> User:
        user = fixtures.guest_user()
        self.store.save_session(GUEST_TOKEN, user)
        self.auth_status = AuthStatus.AUTHENTICATED
        logger.info("Guest session started")
        return user

    def logout(self) -> None:
        """Clear the cached session and sign out of every provider. Idempotent."""
        was_guest = self.store.is_guest()
        self.store.clear()
        self.auth_status = AuthStatus.ANONYMOUS
        if was_guest:
            return

        for provider in self.providers:
            if not provider.supports("logout"):
                continue
            try:
                provider.invoke("logout")
            except LoyaltyHubError as e:
                logger.warning(f"{provider.name} logout failed: {e.message}")

    def get_current_user(self) -> Optional[User]:
        return self.store.get_user()

    def get_current_user_id(self) -> Optional[str]:
        user = self.get_current_user()
        return user.id if user else None

    def is_authenticated(self) -> bool:
        return self.get_current_user() is not None

    def is_guest(self) -> bool:
        return self.store.is_guest()

    def reset_data(self) -> None:
        self.store.reset()
        self.auth_status = AuthStatus.ANONYMOUS

    def complete_onboarding(self) -> None:
        self.store.mark_onboarding_completed()

    def has_completed_onboarding(self) -> bool:
        return self.store.has_completed_onboarding()

    # =========================================================================
    # LOYALTY POINTS
    # =========================================================================

    def get_loyalty_points(self, user_id: str) -> LoyaltyPoints:
        return self._dispatch("get_loyalty_points", user_id=user_id)

    def add_loyalty_points(
        self,
        user_id: str,
        points: int,
        reason: str,
        partner_id: Optional[str] = None,
    ) -> AddPointsResult:
        return self._dispatch(
            "add_loyalty_points", points, reason, partner_id, user_id=user_id
        )

    def get_user_transactions(self, user_id: str) -> List[Transaction]:
        return self._dispatch("get_user_transactions", user_id=user_id, default=[])

    # =========================================================================
    # ADMIN
    # =========================================================================

    def get_admin_overview(self) -> Dict[str, Any]:
        return self._dispatch("get_admin_overview", default=fixtures.EMPTY_ADMIN_OVERVIEW)

    def list_admin(self, resource: str) -> List[Dict[str, Any]]:
        return self._dispatch("list_admin", resource, default=[])

    def create_admin(self, resource: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._dispatch("create_admin", resource, payload)

    def update_admin(self, resource: str, item_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._dispatch("update_admin", resource, item_id, payload)

    def delete_admin(self, resource: str, item_id: str) -> None:
        self._dispatch("delete_admin", resource, item_id)

    def regenerate_quiz_questions(self, quiz_id: str) -> None:
        self._dispatch("regenerate_quiz_questions", quiz_id)

    # =========================================================================
    # QUIZZES
    # =========================================================================

    def generate_quiz_questions(
        self,
        category: str,
        difficulty: str,
        question_count: int = 5,
        partner_context: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        return self._dispatch(
            "generate_quiz_questions",
            category, difficulty, question_count, partner_context,
            user_id=self.get_current_user_id(),
        )

    def submit_quiz_answers(
        self,
        questions: List[Dict[str, Any]],
        answers: List[int],
        time_taken: int,
        category: str,
        difficulty: str,
    ) -> Dict[str, Any]:
        return self._dispatch(
            "submit_quiz_answers",
            questions, answers, time_taken, category, difficulty,
            user_id=self.get_current_user_id(),
        )

    def get_quiz_categories(self) -> List[str]:
        return self._dispatch("get_quiz_categories", default=[])

    def get_quiz_difficulty_levels(self) -> List[str]:
        return self._dispatch("get_quiz_difficulty_levels", default=[])

    def get_quiz(self, quiz_id: str) -> Dict[str, Any]:
        return self._dispatch("get_quiz", quiz_id)

    def get_quiz_questions(self, quiz_id: str) -> List[Dict[str, Any]]:
        return self._dispatch("get_quiz_questions", quiz_id, default=[])

    # =========================================================================
    # LOCATION & PARTNERS
    # =========================================================================

    def get_nearby_partners(self) -> List[Dict[str, Any]]:
        return self._dispatch("get_nearby_partners", default=[])

    def get_partner(self, partner_id: str) -> Dict[str, Any]:
        return self._dispatch("get_partner", partner_id)

    def check_in(self, partner_id: str) -> Dict[str, Any]:
        return self._dispatch("check_in", partner_id)

    def verify_location(
        self,
        latitude: float,
        longitude: float,
        partner_id: str,
        verification_method: str = "GPS",
        device_info: Optional[str] = None,
    ) -> Dict[str, Any]:
        return self._dispatch(
            "verify_location",
            latitude, longitude, partner_id, verification_method, device_info,
            user_id=self.get_current_user_id(),
        )

    # =========================================================================
    # ADS
    # =========================================================================

    def watch_ad(self, ad_id: str, ad_title: str) -> Dict[str, Any]:
        return self._dispatch(
            "watch_ad", ad_id, ad_title, user_id=self.get_current_user_id()
        )

    def get_ad_progress(self, user_id: str) -> Dict[str, Any]:
        return self._dispatch("get_ad_progress", user_id=user_id)

    def get_available_ads(self) -> List[Dict[str, Any]]:
        return self._dispatch("get_available_ads", default=[])

    # =========================================================================
    # PAYMENTS & SUBSCRIPTIONS
    # =========================================================================

    def get_payment_methods(self) -> List[Dict[str, Any]]:
        return self._dispatch("get_payment_methods", default=[])

    def add_payment_method(self, payment_data: Dict[str, Any]) -> Dict[str, Any]:
        return self._dispatch("add_payment_method", payment_data)

    def get_subscription_plans(self) -> List[Dict[str, Any]]:
        return self._dispatch("get_subscription_plans", default=[])

    def subscribe_to_plan(self, plan_id: str, payment_method_id: str) -> Dict[str, Any]:
        return self._dispatch("subscribe_to_plan", plan_id, payment_method_id)

    # =========================================================================
    # QR CODES
    # =========================================================================

    def generate_qr_code(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return self._dispatch("generate_qr_code", data)

    def scan_qr_code(self, qr_data: str) -> Dict[str, Any]:
        return self._dispatch("scan_qr_code", qr_data)

    def get_qr_history(self) -> List[Dict[str, Any]]:
        return self._dispatch("get_qr_history", default=[])

    # =========================================================================
    # AI SERVICE
    # =========================================================================

    def analyze_sentiment(self, text: str) -> SentimentResult:
        return self._dispatch("analyze_sentiment", text)

    def generate_recommendations(
        self,
        user_id: str,
        user_data: Dict[str, Any],
        max_recommendations: int = 5,
    ) -> List[AIRecommendation]:
        return self._dispatch(
            "generate_recommendations", user_data, max_recommendations, user_id=user_id
        )

    def generate_predictive_insights(
        self,
        user_id: str,
        user_data: Dict[str, Any],
    ) -> List[PredictiveInsight]:
        return self._dispatch("generate_predictive_insights", user_data, user_id=user_id)

    def analyze_user_behavior(
        self,
        user_id: str,
        user_data: Dict[str, Any],
    ) -> List[UserBehaviorPattern]:
        return self._dispatch("analyze_user_behavior", user_data, user_id=user_id)

    def finetune_model(self, model_type: str, training_data: Any) -> bool:
        return self._dispatch("finetune_model", model_type, training_data)
