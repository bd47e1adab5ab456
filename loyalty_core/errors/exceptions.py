# =============================================================================
# loyalty_core/errors/exceptions.py
# Custom Exception Hierarchy for LoyaltyHub
# =============================================================================

from typing import Optional, Dict, Any


class LoyaltyHubError(Exception):
    """
    Base exception for all LoyaltyHub client errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code (e.g., "HTTP_001")
        details: Additional context as a dictionary
        recoverable: Whether the error can be recovered from
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        recoverable: bool = True,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or "LH_000"
        self.details = details or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        base = f"[{self.code}] {self.message}"
        if self.details:
            base += f" | Details: {self.details}"
        return base

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization"""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
        }


# =============================================================================
# TRANSPORT EXCEPTIONS
# =============================================================================

class BackendRequestError(LoyaltyHubError):
    """
    Raised when an HTTP call to the REST backend or AI service fails.

    Covers timeouts, refused connections and non-2xx responses alike;
    an expired bearer token surfaces here as a 401/403 status.
    """

    def __init__(
        self,
        message: str,
        service: Optional[str] = None,
        endpoint: Optional[str] = None,
        status_code: Optional[int] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if service:
            details["service"] = service
        if endpoint:
            details["endpoint"] = endpoint
        if status_code is not None:
            details["status_code"] = status_code

        super().__init__(
            message=message,
            code="HTTP_001",
            details=details,
            **kwargs,
        )
        self.status_code = status_code


class ResponseValidationError(LoyaltyHubError):
    """Raised when a successful response carries an unusable payload"""

    def __init__(
        self,
        message: str,
        endpoint: Optional[str] = None,
        missing: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if endpoint:
            details["endpoint"] = endpoint
        if missing:
            details["missing"] = missing

        super().__init__(
            message=message,
            code="DATA_001",
            details=details,
            **kwargs,
        )


# =============================================================================
# PROVIDER EXCEPTIONS
# =============================================================================

class AuthError(LoyaltyHubError):
    """Raised when credentials are rejected or the user profile is missing"""

    def __init__(self, message: str, email: Optional[str] = None, **kwargs):
        details = kwargs.pop("details", {})
        if email:
            details["email"] = email

        super().__init__(
            message=message,
            code="AUTH_001",
            details=details,
            **kwargs,
        )


class ProviderError(LoyaltyHubError):
    """Raised when a backend provider reports an error or a missing record"""

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        operation: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if provider:
            details["provider"] = provider
        if operation:
            details["operation"] = operation

        super().__init__(
            message=message,
            code="PROVIDER_001",
            details=details,
            **kwargs,
        )


class UnsupportedOperationError(LoyaltyHubError):
    """Raised when a provider is asked for a capability it does not have"""

    def __init__(self, provider: str, operation: str, **kwargs):
        super().__init__(
            message=f"{provider} does not support '{operation}'",
            code="PROVIDER_002",
            details={"provider": provider, "operation": operation},
            **kwargs,
        )


class AIServiceError(LoyaltyHubError):
    """Raised when the analytics service returns no usable data"""

    def __init__(self, message: str, endpoint: Optional[str] = None, **kwargs):
        details = kwargs.pop("details", {})
        if endpoint:
            details["endpoint"] = endpoint

        super().__init__(
            message=message,
            code="AI_001",
            details=details,
            **kwargs,
        )


# =============================================================================
# CONFIGURATION EXCEPTIONS
# =============================================================================

class ConfigurationError(LoyaltyHubError):
    """Raised when configuration is invalid or missing"""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        expected_type: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if config_key:
            details["config_key"] = config_key
        if expected_type:
            details["expected_type"] = expected_type

        super().__init__(
            message=message,
            code="CONFIG_001",
            details=details,
            recoverable=False,
            **kwargs,
        )
