from .session import (
    SessionStore,
    GUEST_USER_ID,
    AUTH_TOKEN_KEY,
    USER_ID_KEY,
    USER_DATA_KEY,
    ONBOARDING_KEY,
    AUTH_STATUS_KEY,
)

__all__ = [
    "SessionStore",
    "GUEST_USER_ID",
    "AUTH_TOKEN_KEY",
    "USER_ID_KEY",
    "USER_DATA_KEY",
    "ONBOARDING_KEY",
    "AUTH_STATUS_KEY",
]
