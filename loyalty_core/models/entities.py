# =============================================================================
# loyalty_core/models/entities.py
# Domain records for LoyaltyHub
# Plain dataclasses shared by the Supabase, REST and AI clients
# =============================================================================

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Dict, Any, List

# What from_dict/from_row/from_payload raise on a record of the wrong shape
MAPPING_ERRORS = (ValueError, KeyError, TypeError, AttributeError)


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string"""
    return datetime.now(timezone.utc).isoformat()


def to_iso(value: Any) -> Optional[str]:
    """Normalize datetimes coming back from the clients to ISO strings"""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def _pick(data: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first key present in data (camelCase or snake_case)"""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


class UserRole(str, Enum):
    ADMIN = "ADMIN"
    USER = "USER"


class TransactionType(str, Enum):
    EARN = "EARN"
    REDEEM = "REDEEM"


# =============================================================================
# CORE ENTITIES
# =============================================================================

@dataclass
class User:
    """Identity as cached in the session and returned by both backends"""
    id: str
    email: str
    first_name: str
    last_name: str
    role: UserRole = UserRole.USER
    is_active: bool = True
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    phone_number: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> User:
        """Build from a camelCase payload (REST backend, cached session)"""
        return cls(
            id=str(_pick(data, "id", "userId", "user_id")),
            email=_pick(data, "email", default=""),
            first_name=_pick(data, "firstName", "first_name", default=""),
            last_name=_pick(data, "lastName", "last_name", default=""),
            role=UserRole(str(_pick(data, "role", default="USER")).upper()),
            is_active=bool(_pick(data, "isActive", "is_active", default=True)),
            created_at=to_iso(_pick(data, "createdAt", "created_at")),
            updated_at=to_iso(_pick(data, "updatedAt", "updated_at")),
            phone_number=_pick(data, "phoneNumber", "phone_number"),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "email": self.email,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "role": self.role.value,
            "isActive": self.is_active,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
        if self.phone_number:
            data["phoneNumber"] = self.phone_number
        return data


@dataclass
class LoyaltyPoints:
    """
    Point ledger snapshot for one user.

    balance = earned - redeemed is maintained by whichever backend
    performs the update; it is not checked here.
    """
    id: str
    user_id: str
    points_balance: int = 0
    total_earned: int = 0
    total_redeemed: int = 0
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> LoyaltyPoints:
        return cls(
            id=str(_pick(data, "id", default="")),
            user_id=str(_pick(data, "userId", "user_id", default="")),
            points_balance=int(_pick(data, "pointsBalance", "points_balance", default=0)),
            total_earned=int(_pick(data, "totalEarned", "total_earned", default=0)),
            total_redeemed=int(_pick(data, "totalRedeemed", "total_redeemed", default=0)),
            created_at=to_iso(_pick(data, "created_at", "createdAt")),
            updated_at=to_iso(_pick(data, "updated_at", "updatedAt")),
        )

    # Supabase rows use the same snake_case names from_dict already accepts
    from_row = from_dict

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "pointsBalance": self.points_balance,
            "totalEarned": self.total_earned,
            "totalRedeemed": self.total_redeemed,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


@dataclass
class Transaction:
    """Append-only ledger entry"""
    id: str
    user_id: str
    type: TransactionType
    points: int
    reason: str = ""
    timestamp: Optional[str] = None
    partner_id: Optional[str] = None

    @property
    def is_earn(self) -> bool:
        return self.type == TransactionType.EARN

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Transaction:
        return cls(
            id=str(_pick(data, "id", default="")),
            user_id=str(_pick(data, "userId", "user_id", default="")),
            type=TransactionType(str(_pick(data, "type", default="EARN")).upper()),
            points=int(_pick(data, "points", default=0)),
            reason=_pick(data, "reason", default=""),
            timestamp=to_iso(_pick(data, "timestamp", "created_at", "createdAt")),
            partner_id=_pick(data, "partnerId", "partner_id"),
        )

    from_row = from_dict

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "type": self.type.value,
            "points": self.points,
            "reason": self.reason,
            "timestamp": self.timestamp,
            "partnerId": self.partner_id,
        }


@dataclass
class Session:
    """Bearer token plus the user it belongs to"""
    token: str
    user: User


# =============================================================================
# OPERATION RESULTS
# =============================================================================

@dataclass
class AuthResult:
    """Outcome of a Supabase sign-up or sign-in"""
    success: bool
    message: str
    user: Optional[User] = None
    session: Optional[Any] = None
    points: Optional[LoyaltyPoints] = None

    @property
    def access_token(self) -> Optional[str]:
        return getattr(self.session, "access_token", None)


@dataclass
class PointsResult:
    """Outcome of a Supabase point read or update"""
    success: bool
    message: str
    points: Optional[LoyaltyPoints] = None


@dataclass
class LoginResult:
    success: bool
    message: str
    token: Optional[str] = None
    user: Optional[User] = None
    points: Optional[LoyaltyPoints] = None


@dataclass
class AddPointsResult:
    success: bool
    message: str
    new_balance: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> AddPointsResult:
        new_balance = _pick(data, "newBalance", "new_balance")
        return cls(
            success=bool(data.get("success", False)),
            message=data.get("message", ""),
            new_balance=int(new_balance) if new_balance is not None else None,
        )


# =============================================================================
# AI SERVICE RECORDS
# =============================================================================

@dataclass
class SentimentResult:
    sentiment: str
    score: float
    confidence: float = 0.85
    positive_words: List[str] = field(default_factory=list)
    negative_words: List[str] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)
    emotional_tone: str = "neutral"

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> SentimentResult:
        return cls(
            sentiment=data.get("sentiment", "neutral"),
            score=float(data.get("score", 0.0)),
            confidence=float(data.get("confidence") or 0.85),
            positive_words=list(data.get("positive_words") or []),
            negative_words=list(data.get("negative_words") or []),
            suggestions=list(data.get("suggestions") or []),
            emotional_tone=data.get("emotional_tone") or "neutral",
        )


@dataclass
class AIRecommendation:
    id: str
    type: str
    title: str
    description: str
    confidence: float
    priority: str
    action_required: bool
    estimated_value: float
    category: str

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> AIRecommendation:
        return cls(
            id=str(data.get("id", "")),
            type=data.get("type", ""),
            title=data.get("title", ""),
            description=data.get("description", ""),
            confidence=float(data.get("confidence", 0.0)),
            priority=data.get("priority", "LOW"),
            action_required=bool(data.get("action_required", False)),
            estimated_value=float(data.get("estimated_value", 0)),
            category=data.get("category", ""),
        )


@dataclass
class PredictiveInsight:
    id: str
    type: str
    title: str
    description: str
    probability: float
    timeframe: str
    actionable: bool
    recommended_actions: List[str] = field(default_factory=list)
    impact: str = "LOW"

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> PredictiveInsight:
        return cls(
            id=str(data.get("id", "")),
            type=data.get("type", ""),
            title=data.get("title", ""),
            description=data.get("description", ""),
            probability=float(data.get("probability", 0.0)),
            timeframe=data.get("timeframe", ""),
            actionable=bool(data.get("actionable", False)),
            recommended_actions=list(data.get("recommended_actions") or []),
            impact=data.get("impact", "LOW"),
        )


@dataclass
class UserBehaviorPattern:
    category: str
    frequency: float
    average_value: float
    trend: str
    seasonality: bool
    peak_times: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> UserBehaviorPattern:
        return cls(
            category=data.get("category", ""),
            frequency=float(data.get("frequency", 0)),
            average_value=float(data.get("average_value", 0)),
            trend=data.get("trend", "STABLE"),
            seasonality=bool(data.get("seasonality", False)),
            peak_times=list(data.get("peak_times") or []),
            recommendations=list(data.get("recommendations") or []),
        )


@dataclass
class InsightMetrics:
    total_recommendations: int
    high_priority_actions: int
    estimated_value: float
    accuracy_score: float
    last_updated: str
