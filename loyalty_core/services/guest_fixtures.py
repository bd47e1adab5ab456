# =============================================================================
# loyalty_core/services/guest_fixtures.py
# Static payloads served to guest sessions
# =============================================================================
"""
Literal data returned to guest sessions in place of any network call.

Every accessor returns a fresh copy so callers may mutate the result.
Only timestamps vary between calls; values and shapes never do.
"""

from __future__ import annotations
import copy
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List

from loyalty_core.models import (
    User,
    UserRole,
    LoyaltyPoints,
    SentimentResult,
    AIRecommendation,
    PredictiveInsight,
    UserBehaviorPattern,
)

GUEST_ID = "guest"


def _now(offset_seconds: int = 0) -> str:
    return (datetime.now(timezone.utc) + timedelta(seconds=offset_seconds)).isoformat()


# =============================================================================
# IDENTITY & POINTS
# =============================================================================

def guest_user() -> User:
    now = _now()
    return User(
        id=GUEST_ID,
        email="guest@loyaltyhub.local",
        first_name="Guest",
        last_name="User",
        role=UserRole.USER,
        is_active=True,
        created_at=now,
        updated_at=now,
    )


def guest_points() -> LoyaltyPoints:
    now = _now()
    return LoyaltyPoints(
        id="guest-points",
        user_id=GUEST_ID,
        points_balance=1500,
        total_earned=2000,
        total_redeemed=500,
        created_at=now,
        updated_at=now,
    )


ADMIN_OVERVIEW = {
    "totalUsers": 100,
    "activeUsers": 50,
    "totalPointsIssued": 10000,
    "totalPointsRedeemed": 2000,
    "activePoints": 8000,
    "totalPartners": 10,
    "activePartners": 8,
    "totalQuizzes": 5,
    "activeQuizzes": 3,
    "totalPromotions": 12,
    "activePromotions": 7,
}

EMPTY_ADMIN_OVERVIEW = {key: 0 for key in ADMIN_OVERVIEW}


# =============================================================================
# ADMIN LISTS
# =============================================================================

_ADMIN_LISTS: Dict[str, List[Dict[str, Any]]] = {
    "users": [
        {"id": "gu1", "email": "guest1@example.com", "firstName": "Guest", "lastName": "One",
         "role": "USER", "isActive": True},
        {"id": "gu2", "email": "guest2@example.com", "firstName": "Guest", "lastName": "Two",
         "role": "USER", "isActive": True},
    ],
    "partners": [
        {"id": "gp1", "name": "Guest Partner 1", "type": "RESTAURANT", "status": "ACTIVE"},
        {"id": "gp2", "name": "Guest Partner 2", "type": "RETAIL", "status": "ACTIVE"},
    ],
    "quizzes": [
        {"id": "gq1", "title": "Guest Quiz 1", "category": "General", "difficultyLevel": "easy"},
        {"id": "gq2", "title": "Guest Quiz 2", "category": "Science", "difficultyLevel": "medium"},
    ],
    "promotions": [
        {"id": "gpr1", "name": "Guest Promo 1", "type": "DISCOUNT", "status": "ACTIVE"},
        {"id": "gpr2", "name": "Guest Promo 2", "type": "BONUS_POINTS", "status": "ACTIVE"},
    ],
}

# Singular form used in the ids of simulated creates
_ADMIN_SINGULAR = {
    "users": "user",
    "partners": "partner",
    "quizzes": "quiz",
    "promotions": "promotion",
}


def admin_list(resource: str) -> List[Dict[str, Any]]:
    items = copy.deepcopy(_ADMIN_LISTS.get(resource, []))
    if resource == "users":
        for item in items:
            item["createdAt"] = _now()
    return items


def created_admin_item(resource: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    singular = _ADMIN_SINGULAR.get(resource, resource)
    return {"id": f"new-guest-{singular}", **payload}


# =============================================================================
# QUIZZES
# =============================================================================

GENERATED_QUESTIONS = [
    {
        "id": "gq1",
        "questionText": "Guest Question 1",
        "questionType": "MULTIPLE_CHOICE",
        "options": "Option A|Option B|Option C",
        "correctAnswer": "Option A",
        "explanation": "This is a dummy explanation.",
        "difficulty": "easy",
        "points": 10,
    },
    {
        "id": "gq2",
        "questionText": "Guest Question 2",
        "questionType": "TRUE_FALSE",
        "options": "True|False",
        "correctAnswer": "True",
        "explanation": "Another dummy explanation.",
        "difficulty": "medium",
        "points": 20,
    },
]

QUIZ_QUESTIONS = [
    {
        "id": "q1",
        "questionText": "What is the capital of France?",
        "questionType": "MULTIPLE_CHOICE",
        "options": "Paris|London|Berlin|Madrid",
        "correctAnswer": "Paris",
        "explanation": "Paris is the capital and most populous city of France.",
        "difficulty": "easy",
        "points": 10,
    },
    {
        "id": "q2",
        "questionText": "Which planet is known as the Red Planet?",
        "questionType": "MULTIPLE_CHOICE",
        "options": "Earth|Mars|Jupiter|Venus",
        "correctAnswer": "Mars",
        "explanation": "Mars is often referred to as the Red Planet due to its reddish appearance.",
        "difficulty": "medium",
        "points": 20,
    },
    {
        "id": "q3",
        "questionText": "What is the largest ocean on Earth?",
        "questionType": "MULTIPLE_CHOICE",
        "options": "Atlantic|Indian|Arctic|Pacific",
        "correctAnswer": "Pacific",
        "explanation": "The Pacific Ocean is the largest and deepest of Earth's five oceanic divisions.",
        "difficulty": "hard",
        "points": 30,
    },
]

QUIZ_SUBMISSION = {"success": True, "score": 80, "pointsEarned": 50}
QUIZ_CATEGORIES = ["General", "Science", "History", "Technology"]
QUIZ_DIFFICULTY_LEVELS = ["easy", "medium", "hard"]


def quiz(quiz_id: str) -> Dict[str, Any]:
    return {
        "id": quiz_id,
        "title": "Guest Quiz Title",
        "description": "This is a dummy quiz for guest users.",
        "category": "General",
        "difficultyLevel": "easy",
        "pointsReward": 100,
        "timeLimitMinutes": 5,
    }


# =============================================================================
# PARTNERS, ADS, PAYMENTS
# =============================================================================

NEARBY_PARTNERS = [
    {
        "id": "p1",
        "name": "Guest Restaurant",
        "type": "RESTAURANT",
        "location": "Guest City",
        "status": "ACTIVE",
        "commission": 0.1,
        "rating": 4.5,
        "contactEmail": "guest@example.com",
        "contactPhone": "123-456-7890",
        "businessHours": "9 AM - 10 PM",
        "latitude": -17.8252,
        "longitude": 31.0335,
        "distance": 1.2,
        "currentPromotions": [{"title": "Guest Discount"}],
    },
    {
        "id": "p2",
        "name": "Guest Shop",
        "type": "RETAIL",
        "location": "Guest City",
        "status": "ACTIVE",
        "commission": 0.05,
        "rating": 4.0,
        "contactEmail": "guest2@example.com",
        "contactPhone": "098-765-4321",
        "businessHours": "10 AM - 8 PM",
        "latitude": -17.8300,
        "longitude": 31.0400,
        "distance": 2.5,
        "currentPromotions": [{"title": "Guest Offer"}],
    },
]


def partner(partner_id: str) -> Dict[str, Any]:
    return {
        "id": partner_id,
        "name": "Guest Partner",
        "type": "GENERIC",
        "location": "Guest Location",
        "status": "ACTIVE",
        "commission": 0,
        "rating": 0,
        "contactEmail": "",
        "contactPhone": "",
        "businessHours": "",
        "latitude": 0,
        "longitude": 0,
        "distance": 0,
        "currentPromotions": [],
    }


AD_PROGRESS = {"watchedAds": 5, "totalAds": 10, "progress": 0.5}

AVAILABLE_ADS = [
    {"id": "ad1", "title": "Guest Ad 1", "description": "Watch this ad for points!"},
    {"id": "ad2", "title": "Guest Ad 2", "description": "Another exciting ad!"},
]


def payment_methods() -> List[Dict[str, Any]]:
    now = _now()
    return [
        {
            "id": "pm1",
            "type": "CREDIT_CARD",
            "last4": "1111",
            "brand": "Visa",
            "expiryMonth": 12,
            "expiryYear": 2025,
            "isDefault": True,
            "isActive": True,
            "createdAt": now,
        },
        {
            "id": "pm2",
            "type": "MOBILE_MONEY",
            "last4": "5555",
            "brand": "EcoCash",
            "isDefault": False,
            "isActive": True,
            "createdAt": now,
        },
    ]


SUBSCRIPTION_PLANS = [
    {
        "id": "plan1",
        "name": "Basic Plan",
        "description": "Access to core features",
        "price": 9.99,
        "currency": "USD",
        "interval": "MONTHLY",
        "features": ["Feature A", "Feature B"],
        "isPopular": False,
        "isActive": True,
    },
    {
        "id": "plan2",
        "name": "Premium Plan",
        "description": "Unlock all features",
        "price": 19.99,
        "currency": "USD",
        "interval": "MONTHLY",
        "features": ["Feature A", "Feature B", "Feature C", "Feature D"],
        "isPopular": True,
        "isActive": True,
    },
]


# =============================================================================
# QR CODES
# =============================================================================

QR_SCAN = {"success": True, "message": "Guest QR code scan simulated.", "pointsEarned": 25}


def qr_history() -> List[Dict[str, Any]]:
    return [
        {
            "id": "qr1",
            "type": "POINTS",
            "data": "guest-points-qr",
            "pointsAmount": 50,
            "status": "ACTIVE",
            "expiresAt": _now(3600),
            "createdAt": _now(),
            "description": "Guest points QR code",
        },
        {
            "id": "qr2",
            "type": "CHECKIN",
            "data": "guest-checkin-qr",
            "status": "USED",
            "usedAt": _now(),
            "usedBy": GUEST_ID,
            "createdAt": _now(-86400),
            "description": "Guest check-in QR code",
        },
    ]


def simulated(action: str) -> Dict[str, Any]:
    return {"success": True, "message": f"Guest {action} simulated."}


# =============================================================================
# AI
# =============================================================================

def sentiment() -> SentimentResult:
    return SentimentResult(
        sentiment="positive",
        score=0.8,
        confidence=0.95,
        positive_words=["love", "amazing", "great"],
        negative_words=[],
        suggestions=["Share your positive feedback with the merchant!"],
        emotional_tone="joyful",
    )


def recommendations() -> List[AIRecommendation]:
    return [
        AIRecommendation(
            id="rec1", type="EARNING_TIP", title="Double Points at Nandos",
            description="Visit Nandos this weekend to earn double points on all purchases.",
            confidence=0.95, priority="HIGH", action_required=True,
            estimated_value=100, category="Dining",
        ),
        AIRecommendation(
            id="rec2", type="REDEMPTION_OPPORTUNITY", title="Discount on Pick n Pay",
            description="You have enough points to get a $5 discount at Pick n Pay.",
            confidence=0.9, priority="MEDIUM", action_required=True,
            estimated_value=50, category="Groceries",
        ),
        AIRecommendation(
            id="rec3", type="PERSONALIZED_OFFER", title="Edgars Fashion Offer",
            description="Based on your shopping habits, here is a 10% discount voucher for Edgars.",
            confidence=0.85, priority="MEDIUM", action_required=True,
            estimated_value=75, category="Retail",
        ),
    ]


def predictive_insights() -> List[PredictiveInsight]:
    return [
        PredictiveInsight(
            id="pi1", type="CHURN_RISK", title="Potential Churn Risk",
            description="Your engagement has been decreasing. We miss you!",
            probability=0.75, timeframe="Next 30 days", actionable=True,
            recommended_actions=["Complete a quiz", "Visit a partner store"], impact="HIGH",
        ),
        PredictiveInsight(
            id="pi2", type="ENGAGEMENT_OPPORTUNITY", title="New Partner Nearby",
            description='A new partner store, "The Book Nook", has opened near you. '
                        "Visit them to earn bonus points.",
            probability=0.9, timeframe="This week", actionable=True,
            recommended_actions=["Visit The Book Nook"], impact="MEDIUM",
        ),
    ]


def behavior_patterns() -> List[UserBehaviorPattern]:
    return [
        UserBehaviorPattern(
            category="Dining", frequency=2, average_value=75, trend="STABLE", seasonality=True,
            peak_times=["Weekends", "Evenings"],
            recommendations=["Try the new menu at Nandos", "Look for dining offers on weekdays"],
        ),
        UserBehaviorPattern(
            category="Groceries", frequency=1, average_value=120, trend="INCREASING",
            seasonality=False, peak_times=["Saturday mornings"],
            recommendations=["Buy fresh produce to earn bonus points",
                             "Create a shopping list to maximize savings"],
        ),
    ]
