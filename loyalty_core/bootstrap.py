# =============================================================================
# loyalty_core/bootstrap.py
# Wiring of clients, providers and the unified facade
# =============================================================================

from __future__ import annotations
from typing import Callable, MutableMapping, Optional

from supabase import Client

from loyalty_core.api import AIConfig, AIServiceClient, APIConfig, BackendClient
from loyalty_core.config import Settings
from loyalty_core.data import SupabaseService, get_supabase_client
from loyalty_core.logging import get_logger
from loyalty_core.services import (
    AIProvider,
    GuestFixtureProvider,
    RestProvider,
    SupabaseProvider,
    UnifiedBackendService,
)
from loyalty_core.state import SessionStore

# st.session_state key holding the facade of the current browser session
BACKEND_KEY = "loyalty_backend"

logger = get_logger(__name__)


def build_backend(
    settings: Settings,
    storage: Optional[MutableMapping] = None,
    supabase_client: Optional[Client] = None,
) -> UnifiedBackendService:
    """
    Build the facade with Supabase first, then REST, then AI.

    Args:
        settings: Resolved service settings
        storage: Session storage (defaults to st.session_state)
        supabase_client: Pre-built client, mainly for tests

    Returns:
        A ready UnifiedBackendService; call initialize() to probe services
    """
    store = SessionStore(storage)

    supabase = SupabaseService(supabase_client or get_supabase_client(settings))
    rest = BackendClient(
        APIConfig(
            api_name="LoyaltyHub backend",
            base_url=settings.backend_url,
            timeout=settings.backend_timeout,
        ),
        token_getter=store.get_token,
    )
    ai = AIServiceClient(
        APIConfig(
            api_name="AI service",
            base_url=settings.ai_service_url,
            timeout=settings.ai_timeout,
        ),
        ai_config=AIConfig(openai_api_key=settings.openai_api_key),
    )

    backend = UnifiedBackendService(
        store,
        providers=[SupabaseProvider(supabase), RestProvider(rest), AIProvider(ai)],
        guest_provider=GuestFixtureProvider(),
    )
    logger.info("Unified backend wired: supabase -> rest -> ai")
    return backend


def session_backend(
    settings: Settings,
    storage: Optional[MutableMapping] = None,
    client_factory: Callable[[Settings], Client] = get_supabase_client,
) -> UnifiedBackendService:
    """
    Get the facade of the current browser session, building it on first use.

    The facade and its Supabase client are stored next to the session they
    serve, so one user's sign-in or sign-out never touches another's.
    Only ``settings`` should be shared across sessions.

    Args:
        settings: Resolved service settings
        storage: Session storage (defaults to st.session_state)
        client_factory: Builds the per-session Supabase client

    Returns:
        The initialized UnifiedBackendService for this session
    """
    if storage is None:
        import streamlit as st
        storage = st.session_state

    backend = storage.get(BACKEND_KEY)
    if backend is None:
        backend = build_backend(
            settings,
            storage=storage,
            supabase_client=client_factory(settings),
        )
        backend.initialize()
        storage[BACKEND_KEY] = backend
    return backend
