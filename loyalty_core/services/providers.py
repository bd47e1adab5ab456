# =============================================================================
# loyalty_core/services/providers.py
# Backend provider strategies used by the unified facade
# =============================================================================
"""
Each provider answers a subset of the facade's operations.

The facade walks an ordered list of providers and asks each one that
``supports()`` an operation to ``invoke()`` it, moving on when the
provider raises or returns an unsuccessful result. The guest provider
answers everything except authentication from static fixtures and never
touches the network.
"""

from __future__ import annotations
import copy
from typing import Any, Dict, FrozenSet, List, Optional

from loyalty_core.api import BackendClient, AIServiceClient
from loyalty_core.data import SupabaseService
from loyalty_core.errors import (
    AuthError,
    ProviderError,
    UnsupportedOperationError,
)
from loyalty_core.logging import get_logger
from loyalty_core.models import (
    AddPointsResult,
    LoginResult,
    LoyaltyPoints,
    Transaction,
)
from . import guest_fixtures as fixtures

logger = get_logger(__name__)


AUTH_OPERATIONS = frozenset({"login", "signup", "logout"})

POINTS_OPERATIONS = frozenset({
    "get_loyalty_points",
    "add_loyalty_points",
    "get_user_transactions",
})

REST_OPERATIONS = frozenset({
    # admin
    "get_admin_overview",
    "list_admin",
    "create_admin",
    "update_admin",
    "delete_admin",
    "regenerate_quiz_questions",
    # quizzes
    "generate_quiz_questions",
    "submit_quiz_answers",
    "get_quiz_categories",
    "get_quiz_difficulty_levels",
    "get_quiz",
    "get_quiz_questions",
    # location & partners
    "get_nearby_partners",
    "get_partner",
    "check_in",
    "verify_location",
    # ads
    "watch_ad",
    "get_ad_progress",
    "get_available_ads",
    # payments
    "get_payment_methods",
    "add_payment_method",
    "get_subscription_plans",
    "subscribe_to_plan",
    # qr
    "generate_qr_code",
    "scan_qr_code",
    "get_qr_history",
})

AI_OPERATIONS = frozenset({
    "analyze_sentiment",
    "generate_recommendations",
    "generate_predictive_insights",
    "analyze_user_behavior",
    "finetune_model",
})


class BackendProvider:
    """
    Common interface of every provider.

    Subclasses set ``name`` and ``capabilities`` and implement one method
    per supported operation (or delegate to ``target``).
    """

    name: str = "provider"
    capabilities: FrozenSet[str] = frozenset()

    def __init__(self, target: Any = None):
        self.target = target

    def supports(self, operation: str) -> bool:
        return operation in self.capabilities

    def invoke(self, operation: str, *args, **kwargs) -> Any:
        if not self.supports(operation):
            raise UnsupportedOperationError(self.name, operation)

        handler = getattr(self, operation, None)
        if handler is None:
            handler = getattr(self.target, operation)
        return handler(*args, **kwargs)

    def probe(self) -> Dict[str, Any]:
        """Connectivity check used by the facade's initialize(); never raises."""
        return {"status": "unknown"}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"


# =============================================================================
# SUPABASE
# =============================================================================

class SupabaseProvider(BackendProvider):
    """Primary provider for auth and the point ledger."""

    name = "supabase"
    capabilities = frozenset({
        "login",
        "signup",
        "logout",
        "get_loyalty_points",
        "add_loyalty_points",
    })

    def __init__(self, service: SupabaseService):
        super().__init__(service)
        self.service = service

    def login(self, email: str, password: str) -> LoginResult:
        result = self.service.sign_in(email, password)
        if not result.success or result.user is None:
            raise AuthError(result.message, email=email)
        return LoginResult(
            success=True,
            message=result.message,
            token=result.access_token,
            user=result.user,
        )

    def signup(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        phone_number: Optional[str] = None,
    ) -> LoginResult:
        result = self.service.sign_up(email, password, first_name, last_name, phone_number)
        if not result.success or result.user is None:
            raise AuthError(result.message, email=email)
        return LoginResult(
            success=True,
            message=result.message,
            token=result.access_token,
            user=result.user,
            points=result.points,
        )

    def logout(self) -> None:
        self.service.sign_out()

    def get_loyalty_points(self, user_id: str) -> LoyaltyPoints:
        result = self.service.get_loyalty_points(user_id)
        if not result.success or result.points is None:
            raise ProviderError(result.message, provider=self.name, operation="get_loyalty_points")
        return result.points

    def add_loyalty_points(
        self,
        user_id: str,
        points: int,
        reason: str,
        partner_id: Optional[str] = None,
    ) -> AddPointsResult:
        result = self.service.add_points(user_id, points, reason, partner_id)
        if not result.success or result.points is None:
            raise ProviderError(result.message, provider=self.name, operation="add_loyalty_points")
        return AddPointsResult(
            success=True,
            message=result.message,
            new_balance=result.points.points_balance,
        )

    def probe(self) -> Dict[str, Any]:
        return {"status": "configured", "message": "Supabase client created"}


# =============================================================================
# REST BACKEND
# =============================================================================

class RestProvider(BackendProvider):
    """Secondary provider for auth/points and sole provider for domain endpoints."""

    name = "rest"
    capabilities = frozenset({"login"}) | POINTS_OPERATIONS | REST_OPERATIONS

    def __init__(self, client: BackendClient):
        super().__init__(client)
        self.client = client

    def login(self, email: str, password: str) -> LoginResult:
        result = self.client.login(email, password)
        if not result.success:
            raise AuthError(result.message, email=email)
        return result

    def add_loyalty_points(
        self,
        user_id: str,
        points: int,
        reason: str,
        partner_id: Optional[str] = None,
    ) -> AddPointsResult:
        result = self.client.add_loyalty_points(user_id, points, reason)
        if not result.success:
            raise ProviderError(
                result.message or "Failed to add points - invalid response from backend",
                provider=self.name,
                operation="add_loyalty_points",
            )
        return result

    def probe(self) -> Dict[str, Any]:
        return self.client.test_connection("api/public/health")


# =============================================================================
# AI SERVICE
# =============================================================================

class AIProvider(BackendProvider):
    name = "ai"
    capabilities = AI_OPERATIONS

    def __init__(self, client: AIServiceClient):
        super().__init__(client)
        self.client = client

    # user_id is accepted for a uniform facade signature; only the
    # per-user endpoints forward it
    def analyze_sentiment(self, text: str, user_id: Optional[str] = None):
        return self.client.analyze_sentiment(text)

    def probe(self) -> Dict[str, Any]:
        status = self.client.initialize()
        return {
            "status": "success" if status["python_ai"] else "error",
            **status,
        }


# =============================================================================
# GUEST FIXTURES
# =============================================================================

class GuestFixtureProvider(BackendProvider):
    """Answers every non-auth operation from static fixtures."""

    name = "guest"
    capabilities = POINTS_OPERATIONS | REST_OPERATIONS | AI_OPERATIONS

    # Points ----------------------------------------------------------------

    def get_loyalty_points(self, user_id: str) -> LoyaltyPoints:
        return fixtures.guest_points()

    def add_loyalty_points(
        self,
        user_id: str,
        points: int,
        reason: str,
        partner_id: Optional[str] = None,
    ) -> AddPointsResult:
        balance = fixtures.guest_points().points_balance
        return AddPointsResult(
            success=True,
            message=f"Successfully added {points} points",
            new_balance=balance + points,
        )

    def get_user_transactions(self, user_id: str) -> List[Transaction]:
        return []

    # Admin -----------------------------------------------------------------

    def get_admin_overview(self) -> Dict[str, Any]:
        return dict(fixtures.ADMIN_OVERVIEW)

    def list_admin(self, resource: str) -> List[Dict[str, Any]]:
        return fixtures.admin_list(resource)

    def create_admin(self, resource: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        logger.info(f"Guest: create {resource} simulated.")
        return fixtures.created_admin_item(resource, payload)

    def update_admin(self, resource: str, item_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        logger.info(f"Guest: update {resource} simulated.")
        return {"id": item_id, **payload}

    def delete_admin(self, resource: str, item_id: str) -> None:
        logger.info(f"Guest: delete {resource} simulated.")

    def regenerate_quiz_questions(self, quiz_id: str) -> None:
        logger.info("Guest: regenerate quiz questions simulated.")

    # Quizzes ---------------------------------------------------------------

    def generate_quiz_questions(self, user_id, category, difficulty, question_count, partner_context=None):
        return copy.deepcopy(fixtures.GENERATED_QUESTIONS)

    def submit_quiz_answers(self, user_id, questions, answers, time_taken, category, difficulty):
        return dict(fixtures.QUIZ_SUBMISSION)

    def get_quiz_categories(self) -> List[str]:
        return list(fixtures.QUIZ_CATEGORIES)

    def get_quiz_difficulty_levels(self) -> List[str]:
        return list(fixtures.QUIZ_DIFFICULTY_LEVELS)

    def get_quiz(self, quiz_id: str) -> Dict[str, Any]:
        return fixtures.quiz(quiz_id)

    def get_quiz_questions(self, quiz_id: str) -> List[Dict[str, Any]]:
        return copy.deepcopy(fixtures.QUIZ_QUESTIONS)

    # Location & partners ---------------------------------------------------

    def get_nearby_partners(self) -> List[Dict[str, Any]]:
        return copy.deepcopy(fixtures.NEARBY_PARTNERS)

    def get_partner(self, partner_id: str) -> Dict[str, Any]:
        return fixtures.partner(partner_id)

    def check_in(self, partner_id: str) -> Dict[str, Any]:
        return fixtures.simulated("check-in")

    def verify_location(self, user_id, latitude, longitude, partner_id, verification_method, device_info=None):
        return fixtures.simulated("location verification")

    # Ads -------------------------------------------------------------------

    def watch_ad(self, user_id, ad_id, ad_title):
        return fixtures.simulated("ad watch")

    def get_ad_progress(self, user_id: str) -> Dict[str, Any]:
        return dict(fixtures.AD_PROGRESS)

    def get_available_ads(self) -> List[Dict[str, Any]]:
        return copy.deepcopy(fixtures.AVAILABLE_ADS)

    # Payments --------------------------------------------------------------

    def get_payment_methods(self) -> List[Dict[str, Any]]:
        return fixtures.payment_methods()

    def add_payment_method(self, payment_data: Dict[str, Any]) -> Dict[str, Any]:
        return fixtures.simulated("add payment method")

    def get_subscription_plans(self) -> List[Dict[str, Any]]:
        return copy.deepcopy(fixtures.SUBSCRIPTION_PLANS)

    def subscribe_to_plan(self, plan_id: str, payment_method_id: str) -> Dict[str, Any]:
        return fixtures.simulated("subscription")

    # QR codes --------------------------------------------------------------

    def generate_qr_code(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return fixtures.simulated("QR code generation")

    def scan_qr_code(self, qr_data: str) -> Dict[str, Any]:
        return dict(fixtures.QR_SCAN)

    def get_qr_history(self) -> List[Dict[str, Any]]:
        return fixtures.qr_history()

    # AI --------------------------------------------------------------------

    def analyze_sentiment(self, text: str, user_id: Optional[str] = None):
        return fixtures.sentiment()

    def generate_recommendations(self, user_id, user_data, max_recommendations=5):
        return fixtures.recommendations()[:max_recommendations]

    def generate_predictive_insights(self, user_id, user_data):
        return fixtures.predictive_insights()

    def analyze_user_behavior(self, user_id, user_data):
        return fixtures.behavior_patterns()

    def finetune_model(self, model_type, training_data) -> bool:
        logger.info("Guest: model finetuning simulated.")
        return True

    def probe(self) -> Dict[str, Any]:
        return {"status": "success", "message": "Static fixtures"}
