# =============================================================================
# loyalty_core/errors/handlers.py
# Error Handling Utilities for LoyaltyHub
# =============================================================================

from __future__ import annotations
import traceback
from typing import Optional, Callable, TypeVar

from loyalty_core.logging import get_logger
from .exceptions import LoyaltyHubError

logger = get_logger(__name__)

T = TypeVar("T")


def notify_user(message: str, icon: str = "⚠️") -> None:
    """
    Show a transient toast notification.

    Outside a running Streamlit script the toast call has nowhere to
    render, so it is only logged.
    """
    try:
        import streamlit as st
        st.toast(message, icon=icon)
    except Exception as e:
        logger.debug(f"Toast not shown ({e}): {message}")


def handle_error(
    error: Exception,
    notify: bool = False,
    log_error: bool = True,
    user_message: Optional[str] = None,
) -> None:
    """
    Centralized error handling function.

    Args:
        error: The exception to handle
        notify: Whether to show the error to the user as a toast
        log_error: Whether to log the error
        user_message: Custom message to show user (uses error message if None)
    """
    if isinstance(error, LoyaltyHubError):
        message = user_message or error.message
        code = error.code
        details = error.details
        recoverable = error.recoverable
    else:
        message = user_message or str(error)
        code = "UNKNOWN"
        details = {"traceback": traceback.format_exc()}
        recoverable = True

    if log_error:
        logger.error(
            f"[{code}] {message}",
            extra={"details": details},
            exc_info=error,
        )

    if notify:
        if recoverable:
            notify_user(f"Error: {message}")
        else:
            notify_user(f"Critical Error: {message}. Please contact support.", icon="🚨")


def safe_execute(
    func: Callable[..., T],
    *args,
    default: Optional[T] = None,
    error_message: Optional[str] = None,
    notify: bool = False,
    reraise: bool = False,
    **kwargs,
) -> Optional[T]:
    """
    Execute a function with automatic error handling.

    Usage:
        status = safe_execute(
            client.health,
            default=None,
            error_message="Backend health probe failed",
        )
    """
    try:
        return func(*args, **kwargs)
    except Exception as e:
        handle_error(e, notify=notify, user_message=error_message)
        if reraise:
            raise
        return default
