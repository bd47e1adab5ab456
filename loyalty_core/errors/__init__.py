# =============================================================================
# loyalty_core/errors/__init__.py
# Centralized Error Handling for LoyaltyHub
# =============================================================================

from .exceptions import (
    LoyaltyHubError,
    BackendRequestError,
    ResponseValidationError,
    AuthError,
    ProviderError,
    UnsupportedOperationError,
    AIServiceError,
    ConfigurationError,
)

from .handlers import (
    handle_error,
    notify_user,
    safe_execute,
)

__all__ = [
    # Exceptions
    "LoyaltyHubError",
    "BackendRequestError",
    "ResponseValidationError",
    "AuthError",
    "ProviderError",
    "UnsupportedOperationError",
    "AIServiceError",
    "ConfigurationError",
    # Handlers
    "handle_error",
    "notify_user",
    "safe_execute",
]
