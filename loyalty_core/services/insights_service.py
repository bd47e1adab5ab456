# =============================================================================
# loyalty_core/services/insights_service.py
# Insights Service - user profile and AI insight aggregation
# =============================================================================
"""
Builds the ``user_data`` profile the AI service expects from the point
ledger and transaction history, then collects recommendations,
predictive insights and behaviour patterns into one bundle.

Usage:
    service = InsightsService(backend)
    bundle = service.load_insights(backend.get_current_user_id())
    st.metric("Recommendations", bundle.metrics.total_recommendations)
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import pandas as pd

from loyalty_core.errors import LoyaltyHubError
from loyalty_core.logging import get_logger, LogContext
from loyalty_core.models import (
    AIRecommendation,
    InsightMetrics,
    LoyaltyPoints,
    PredictiveInsight,
    Transaction,
    UserBehaviorPattern,
    utc_now_iso,
)

logger = get_logger(__name__)

TRANSACTION_COLUMNS = ["id", "user_id", "type", "points", "reason", "timestamp", "partner_id"]

# Reported model accuracy shown beside the insight metrics
ACCURACY_SCORE = 0.87

# Transactions in the last 30 days needed for each engagement level
ENGAGEMENT_THRESHOLDS = (("high", 20), ("medium", 5))


# =============================================================================
# TRANSACTION FRAMES
# =============================================================================

def transactions_frame(transactions: List[Transaction]) -> pd.DataFrame:
    """Transactions as a DataFrame sorted newest first."""
    if not transactions:
        return pd.DataFrame(columns=TRANSACTION_COLUMNS)

    df = pd.DataFrame([
        {
            "id": t.id,
            "user_id": t.user_id,
            "type": t.type.value,
            "points": t.points,
            "reason": t.reason,
            "timestamp": t.timestamp,
            "partner_id": t.partner_id,
        }
        for t in transactions
    ])
    df["timestamp"] = pd.to_datetime(df["timestamp"], utc=True, errors="coerce")
    return df.sort_values("timestamp", ascending=False, na_position="last").reset_index(drop=True)


def recent_activity(transactions: List[Transaction], limit: int = 5) -> List[Dict[str, Any]]:
    """Most recent ledger entries shaped as activity feed items."""
    df = transactions_frame(transactions).head(limit)
    activity = []
    for row in df.itertuples(index=False):
        activity.append({
            "id": row.id,
            "type": "POINTS_EARNED" if row.type == "EARN" else "POINTS_REDEEMED",
            "points": int(row.points),
            "description": row.reason,
            "timestamp": row.timestamp.isoformat() if not pd.isna(row.timestamp) else None,
        })
    return activity


def _earn_streak(df: pd.DataFrame, today) -> int:
    """Consecutive days with an EARN entry, ending today or yesterday."""
    earned = df[(df["type"] == "EARN") & df["timestamp"].notna()]
    if earned.empty:
        return 0

    days = set(earned["timestamp"].dt.date)
    cursor = today if today in days else today - timedelta(days=1)
    streak = 0
    while cursor in days:
        streak += 1
        cursor -= timedelta(days=1)
    return streak


def _engagement_level(df: pd.DataFrame, now: datetime) -> str:
    recent = df[df["timestamp"] >= pd.Timestamp(now - timedelta(days=30))]
    for level, minimum in ENGAGEMENT_THRESHOLDS:
        if len(recent) >= minimum:
            return level
    return "low"


def _preferred_categories(df: pd.DataFrame, top: int = 3) -> List[str]:
    reasons = df.loc[df["type"] == "EARN", "reason"].dropna()
    reasons = reasons[reasons != ""]
    return reasons.value_counts().head(top).index.tolist()


def build_user_profile(
    points: Optional[LoyaltyPoints],
    transactions: List[Transaction],
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Assemble the user_data payload for the AI endpoints.

    Args:
        points: Current ledger snapshot (None counts as zero)
        transactions: Full transaction history
        now: Reference time, defaults to the current UTC time

    Returns:
        Dict with pointsBalance, totalPoints, recentActivity,
        engagementLevel, streak, lastLogin and preferredCategories
    """
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    df = transactions_frame(transactions)

    return {
        "pointsBalance": points.points_balance if points else 0,
        "totalPoints": points.total_earned if points else 0,
        "recentActivity": recent_activity(transactions),
        "engagementLevel": _engagement_level(df, now) if not df.empty else "low",
        "streak": _earn_streak(df, now.date()) if not df.empty else 0,
        "lastLogin": now.isoformat(),
        "preferredCategories": _preferred_categories(df) if not df.empty else [],
    }


# =============================================================================
# INSIGHTS BUNDLE
# =============================================================================

@dataclass
class InsightsBundle:
    recommendations: List[AIRecommendation] = field(default_factory=list)
    predictive_insights: List[PredictiveInsight] = field(default_factory=list)
    behavior_patterns: List[UserBehaviorPattern] = field(default_factory=list)
    metrics: Optional[InsightMetrics] = None
    profile: Dict[str, Any] = field(default_factory=dict)


def summarize(
    recommendations: List[AIRecommendation],
    predictive_insights: List[PredictiveInsight],
) -> InsightMetrics:
    high_priority = [r for r in recommendations if r.priority.upper() == "HIGH"]
    return InsightMetrics(
        total_recommendations=len(recommendations) + len(predictive_insights),
        high_priority_actions=len(high_priority),
        estimated_value=float(sum(r.estimated_value for r in recommendations)),
        accuracy_score=ACCURACY_SCORE,
        last_updated=utc_now_iso(),
    )


class InsightsService:
    """Loads the AI insight bundle for one user through the facade."""

    def __init__(self, backend):
        self.backend = backend

    def build_profile(self, user_id: str) -> Dict[str, Any]:
        try:
            points = self.backend.get_loyalty_points(user_id)
        except LoyaltyHubError as e:
            logger.warning(f"Could not load points for insights: {e.message}")
            points = None
        transactions = self.backend.get_user_transactions(user_id)
        return build_user_profile(points, transactions)

    def load_insights(self, user_id: str) -> InsightsBundle:
        """
        Fetch the three AI analyses for a user.

        Raises whatever the facade raises when the AI service is down; the
        page shows the failure as a notification.
        """
        with LogContext(logger, f"Loading insights for {user_id}"):
            profile = self.build_profile(user_id)
            recommendations = self.backend.generate_recommendations(user_id, profile)
            insights = self.backend.generate_predictive_insights(user_id, profile)
            patterns = self.backend.analyze_user_behavior(user_id, profile)

        return InsightsBundle(
            recommendations=recommendations,
            predictive_insights=insights,
            behavior_patterns=patterns,
            metrics=summarize(recommendations, insights),
            profile=profile,
        )
