# =============================================================================
# loyalty_core/services/__init__.py
# Service Layer for LoyaltyHub
# =============================================================================
"""
Service layer the Streamlit pages talk to.

Usage Example:
-------------
    from loyalty_core.bootstrap import build_backend
    from loyalty_core.services import InsightsService

    backend = build_backend(load_settings())
    backend.start_guest_session()

    points = backend.get_loyalty_points("guest")
    print(points.points_balance)  # 1500

    bundle = InsightsService(backend).load_insights("guest")
"""

from .providers import (
    BackendProvider,
    SupabaseProvider,
    RestProvider,
    AIProvider,
    GuestFixtureProvider,
)
from .unified_backend import UnifiedBackendService, AuthStatus
from .insights_service import (
    InsightsService,
    InsightsBundle,
    build_user_profile,
    recent_activity,
    transactions_frame,
)

__all__ = [
    # Providers
    "BackendProvider",
    "SupabaseProvider",
    "RestProvider",
    "AIProvider",
    "GuestFixtureProvider",
    # Facade
    "UnifiedBackendService",
    "AuthStatus",
    # Insights
    "InsightsService",
    "InsightsBundle",
    "build_user_profile",
    "recent_activity",
    "transactions_frame",
]
