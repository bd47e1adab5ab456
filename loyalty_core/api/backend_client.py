"""
REST Backend Client
Bearer-token authenticated access to the LoyaltyHub REST API

Every method performs exactly one HTTP call and returns the decoded
body. Failures surface as BackendRequestError; the caller decides
whether to re-raise or degrade to an empty result.
"""
import time
from typing import Optional, Dict, Any, List, Callable

import requests

from loyalty_core.errors import ResponseValidationError
from loyalty_core.models import (
    User,
    LoyaltyPoints,
    Transaction,
    LoginResult,
    AddPointsResult,
)
from .base_connector import BaseAPIConnector, APIConfig, BearerTokenAuth

ADMIN_RESOURCES = ("users", "partners", "quizzes", "promotions")


def _admin_endpoint(resource: str, item_id: Optional[str] = None) -> str:
    if resource not in ADMIN_RESOURCES:
        raise ValueError(f"Unknown admin resource: {resource!r}")
    if item_id is None:
        return f"api/admin/{resource}"
    return f"api/admin/{resource}/{item_id}"


class BackendClient(BaseAPIConnector):
    """
    Client for the custom REST backend.

    Usage:
        client = BackendClient(
            APIConfig(api_name="LoyaltyHub backend", base_url="http://localhost:8080"),
            token_getter=store.get_token,
        )
        partners = client.get_nearby_partners()
    """

    def __init__(
        self,
        config: APIConfig,
        token_getter: Callable[[], Optional[str]],
        session: Optional[requests.Session] = None,
    ):
        super().__init__(config, session=session)
        self.session.auth = BearerTokenAuth(token_getter)

    # =========================================================================
    # HEALTH / AUTH
    # =========================================================================

    def health(self) -> Any:
        return self._make_request("api/public/health")

    def login(self, email: str, password: str) -> LoginResult:
        """POST /api/auth/login -> {token, user}"""
        data = self._make_request(
            "api/auth/login",
            method="POST",
            data={"email": email, "password": password},
        )

        if not isinstance(data, dict) or not data.get("token") or not data.get("user"):
            return LoginResult(success=False, message="Login failed - no response from backend")

        return LoginResult(
            success=True,
            message="Login successful",
            token=data["token"],
            user=self._map_payload(User.from_dict, data["user"], "api/auth/login"),
        )

    # =========================================================================
    # LOYALTY POINTS
    # =========================================================================

    def get_loyalty_points(self, user_id: str) -> LoyaltyPoints:
        data = self._make_request(f"api/loyalty-points/{user_id}")
        if not data:
            raise ResponseValidationError(
                f"No loyalty points returned for user {user_id}",
                endpoint="api/loyalty-points",
            )
        return self._map_payload(LoyaltyPoints.from_dict, data, "api/loyalty-points")

    def add_loyalty_points(self, user_id: str, points: int, reason: str) -> AddPointsResult:
        data = self._make_request(
            "api/loyalty-points/add",
            method="POST",
            data={"userId": user_id, "points": points, "reason": reason},
        )
        if not data:
            return AddPointsResult(
                success=False,
                message="Failed to add points - invalid response from backend",
            )
        return self._map_payload(AddPointsResult.from_dict, data, "api/loyalty-points/add")

    def get_user_transactions(self, user_id: str) -> List[Transaction]:
        data = self._make_request(f"api/transactions/{user_id}")
        return self._map_payload(
            lambda items: [Transaction.from_dict(item) for item in items],
            data or [],
            "api/transactions",
        )

    # =========================================================================
    # ADMIN
    # =========================================================================

    def get_admin_overview(self) -> Dict[str, Any]:
        return self._make_request("api/admin/overview")

    def list_admin(self, resource: str) -> List[Dict[str, Any]]:
        """GET /api/admin/{users|partners|quizzes|promotions}"""
        return self._make_request(_admin_endpoint(resource)) or []

    def create_admin(self, resource: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._make_request(_admin_endpoint(resource), method="POST", data=payload)

    def update_admin(self, resource: str, item_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._make_request(_admin_endpoint(resource, item_id), method="PUT", data=payload)

    def delete_admin(self, resource: str, item_id: str) -> None:
        self._make_request(_admin_endpoint(resource, item_id), method="DELETE")

    def regenerate_quiz_questions(self, quiz_id: str) -> None:
        self._make_request(f"api/admin/quizzes/{quiz_id}/regenerate", method="POST")

    # =========================================================================
    # QUIZZES
    # =========================================================================

    def generate_quiz_questions(
        self,
        user_id: Optional[str],
        category: str,
        difficulty: str,
        question_count: int,
        partner_context: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        data = self._make_request(
            "api/quiz/generate",
            method="POST",
            data={
                "category": category,
                "difficulty": difficulty,
                "questionCount": question_count,
                "partnerContext": partner_context,
                "userId": user_id,
            },
        )
        return (data or {}).get("questions") or []

    def submit_quiz_answers(
        self,
        user_id: Optional[str],
        questions: List[Dict[str, Any]],
        answers: List[int],
        time_taken: int,
        category: str,
        difficulty: str,
    ) -> Dict[str, Any]:
        return self._make_request(
            "api/quiz/submit",
            method="POST",
            data={
                "userId": user_id,
                "questions": questions,
                "answers": answers,
                "timeTaken": time_taken,
                "category": category,
                "difficulty": difficulty,
            },
        )

    def get_quiz_categories(self) -> List[str]:
        data = self._make_request("api/quiz/categories")
        return (data or {}).get("categories") or []

    def get_quiz_difficulty_levels(self) -> List[str]:
        data = self._make_request("api/quiz/difficulty-levels")
        return (data or {}).get("difficultyLevels") or []

    def get_quiz(self, quiz_id: str) -> Dict[str, Any]:
        return self._make_request(f"api/quizzes/{quiz_id}")

    def get_quiz_questions(self, quiz_id: str) -> List[Dict[str, Any]]:
        return self._make_request(f"api/quizzes/{quiz_id}/questions") or []

    # =========================================================================
    # LOCATION & PARTNERS
    # =========================================================================

    def get_nearby_partners(self) -> List[Dict[str, Any]]:
        return self._make_request("api/partners/nearby") or []

    def get_partner(self, partner_id: str) -> Dict[str, Any]:
        return self._make_request(f"api/partners/{partner_id}")

    def check_in(self, partner_id: str) -> Dict[str, Any]:
        return self._make_request(f"api/location/checkin/{partner_id}", method="POST")

    def verify_location(
        self,
        user_id: Optional[str],
        latitude: float,
        longitude: float,
        partner_id: str,
        verification_method: str,
        device_info: Optional[str] = None,
    ) -> Dict[str, Any]:
        return self._make_request(
            "api/quiz/location/verify",
            method="POST",
            data={
                "userId": user_id,
                "latitude": latitude,
                "longitude": longitude,
                "partnerId": partner_id,
                "verificationMethod": verification_method,
                "deviceInfo": device_info or self.session.headers.get("User-Agent", ""),
                "timestamp": int(time.time() * 1000),
            },
        )

    # =========================================================================
    # ADS
    # =========================================================================

    def watch_ad(self, user_id: Optional[str], ad_id: str, ad_title: str) -> Dict[str, Any]:
        return self._make_request(
            "api/quiz/ads/watch",
            method="POST",
            data={"userId": user_id, "adId": ad_id, "adTitle": ad_title},
        )

    def get_ad_progress(self, user_id: str) -> Dict[str, Any]:
        return self._make_request(f"api/quiz/ads/progress/{user_id}")

    def get_available_ads(self) -> List[Dict[str, Any]]:
        data = self._make_request("api/quiz/ads/available")
        return (data or {}).get("ads") or []

    # =========================================================================
    # PAYMENTS & SUBSCRIPTIONS
    # =========================================================================

    def get_payment_methods(self) -> List[Dict[str, Any]]:
        return self._make_request("api/payments/methods") or []

    def add_payment_method(self, payment_data: Dict[str, Any]) -> Dict[str, Any]:
        return self._make_request("api/payments/methods", method="POST", data=payment_data)

    def get_subscription_plans(self) -> List[Dict[str, Any]]:
        return self._make_request("api/subscriptions/plans") or []

    def subscribe_to_plan(self, plan_id: str, payment_method_id: str) -> Dict[str, Any]:
        return self._make_request(
            "api/subscriptions/subscribe",
            method="POST",
            data={"planId": plan_id, "paymentMethodId": payment_method_id},
        )

    # =========================================================================
    # QR CODES
    # =========================================================================

    def generate_qr_code(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return self._make_request("api/qr/generate", method="POST", data=data)

    def scan_qr_code(self, qr_data: str) -> Dict[str, Any]:
        return self._make_request("api/qr/scan", method="POST", data={"qrData": qr_data})

    def get_qr_history(self) -> List[Dict[str, Any]]:
        return self._make_request("api/qr/history") or []
