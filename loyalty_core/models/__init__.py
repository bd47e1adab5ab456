# =============================================================================
# loyalty_core/models/__init__.py
# =============================================================================

from .entities import (
    UserRole,
    TransactionType,
    User,
    LoyaltyPoints,
    Transaction,
    Session,
    AuthResult,
    PointsResult,
    LoginResult,
    AddPointsResult,
    SentimentResult,
    AIRecommendation,
    PredictiveInsight,
    UserBehaviorPattern,
    InsightMetrics,
    utc_now_iso,
    MAPPING_ERRORS,
)

__all__ = [
    "UserRole",
    "TransactionType",
    "User",
    "LoyaltyPoints",
    "Transaction",
    "Session",
    "AuthResult",
    "PointsResult",
    "LoginResult",
    "AddPointsResult",
    "SentimentResult",
    "AIRecommendation",
    "PredictiveInsight",
    "UserBehaviorPattern",
    "InsightMetrics",
    "utc_now_iso",
    "MAPPING_ERRORS",
]
