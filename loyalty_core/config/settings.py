# =============================================================================
# loyalty_core/config/settings.py
# Service endpoints and credentials for LoyaltyHub
# =============================================================================
"""
Settings are resolved once at start-up, in this order:

1. Streamlit secrets (.streamlit/secrets.toml):

    [supabase]
    url = "https://your-project.supabase.co"
    key = "your-anon-key"

    [backend]
    url = "https://api.loyaltyhub.example"

    [ai]
    url = "https://ai.loyaltyhub.example"
    openai_api_key = "sk-..."

2. Environment variables (a local .env file is loaded first):
   SUPABASE_URL, SUPABASE_ANON_KEY (or SUPABASE_KEY), BACKEND_URL,
   AI_SERVICE_URL, OPENAI_API_KEY, LOYALTY_LOG_LEVEL.

Missing Supabase credentials are fatal.
"""

from __future__ import annotations
import os
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from dotenv import load_dotenv

from loyalty_core.errors import ConfigurationError
from loyalty_core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_BACKEND_URL = "http://localhost:8080"
DEFAULT_AI_SERVICE_URL = "http://localhost:8000"

# Supabase table names
TABLES = {
    "PROFILES": "profiles",
    "LOYALTY_POINTS": "loyalty_points",
    "TRANSACTIONS": "transactions",
    "PARTNERS": "partners",
    "QUIZZES": "quizzes",
    "PROMOTIONS": "promotions",
    "REFERRALS": "referrals",
    "QR_CODES": "qr_codes",
}


@dataclass(frozen=True)
class Settings:
    """Resolved configuration for the three remote services"""
    supabase_url: str
    supabase_key: str
    backend_url: str = DEFAULT_BACKEND_URL
    ai_service_url: str = DEFAULT_AI_SERVICE_URL
    openai_api_key: Optional[str] = None
    backend_timeout: int = 10
    ai_timeout: int = 15
    log_level: str = "INFO"


def _streamlit_secrets() -> Mapping[str, Any]:
    """Return st.secrets, or an empty mapping when no secrets file exists."""
    try:
        import streamlit as st
        # Touching the mapping forces the secrets file to be parsed
        if len(st.secrets) == 0:
            return {}
        return st.secrets
    except Exception:
        return {}


def _section_value(secrets: Mapping[str, Any], section: str, key: str) -> Optional[str]:
    try:
        if section in secrets:
            value = secrets[section].get(key)
            return str(value) if value else None
    except Exception as e:
        logger.debug(f"Could not read secret {section}.{key}: {e}")
    return None


def load_settings(
    secrets: Optional[Mapping[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """
    Build Settings from Streamlit secrets and the environment.

    Args:
        secrets: Secrets mapping (defaults to st.secrets)
        environ: Environment mapping (defaults to os.environ after loading .env)

    Raises:
        ConfigurationError: if the Supabase URL or key cannot be found
    """
    if environ is None:
        load_dotenv()
        environ = os.environ
    if secrets is None:
        secrets = _streamlit_secrets()

    supabase_url = _section_value(secrets, "supabase", "url") or environ.get("SUPABASE_URL")
    supabase_key = (
        _section_value(secrets, "supabase", "key")
        or environ.get("SUPABASE_ANON_KEY")
        or environ.get("SUPABASE_KEY")
    )

    if not supabase_url:
        raise ConfigurationError(
            "Missing Supabase URL. Set [supabase] url in secrets.toml or SUPABASE_URL.",
            config_key="SUPABASE_URL",
        )
    if not supabase_key:
        raise ConfigurationError(
            "Missing Supabase anon key. Set [supabase] key in secrets.toml or SUPABASE_ANON_KEY.",
            config_key="SUPABASE_ANON_KEY",
        )

    settings = Settings(
        supabase_url=supabase_url,
        supabase_key=supabase_key,
        backend_url=(
            _section_value(secrets, "backend", "url")
            or environ.get("BACKEND_URL")
            or DEFAULT_BACKEND_URL
        ).rstrip("/"),
        ai_service_url=(
            _section_value(secrets, "ai", "url")
            or environ.get("AI_SERVICE_URL")
            or DEFAULT_AI_SERVICE_URL
        ).rstrip("/"),
        openai_api_key=(
            _section_value(secrets, "ai", "openai_api_key")
            or environ.get("OPENAI_API_KEY")
            or None
        ),
        log_level=environ.get("LOYALTY_LOG_LEVEL", "INFO"),
    )

    logger.info(f"Backend URL: {settings.backend_url}")
    logger.info(f"AI service URL: {settings.ai_service_url}")
    return settings
