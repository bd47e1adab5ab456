# =============================================================================
# tests/unit/test_errors.py
# Unit Tests for the error hierarchy and handlers
# =============================================================================

import pytest

from loyalty_core.errors import (
    AuthError,
    BackendRequestError,
    ConfigurationError,
    UnsupportedOperationError,
    handle_error,
    safe_execute,
)


class TestExceptions:

    def test_request_error_details(self):
        error = BackendRequestError("down", service="backend", endpoint="api/qr/history", status_code=503)

        data = error.to_dict()

        assert data["code"] == "HTTP_001"
        assert data["details"]["status_code"] == 503
        assert error.status_code == 503
        assert "[HTTP_001] down" in str(error)

    def test_unsupported_operation(self):
        error = UnsupportedOperationError("supabase", "get_quiz")

        assert error.details == {"provider": "supabase", "operation": "get_quiz"}

    def test_configuration_error_not_recoverable(self):
        assert not ConfigurationError("missing").recoverable


class TestHandlers:

    def test_handle_error_toasts_recoverable(self, mock_streamlit):
        handle_error(AuthError("Invalid login credentials"), notify=True)

        message = mock_streamlit.toast.call_args.args[0]
        assert message == "Error: Invalid login credentials"

    def test_handle_error_critical_icon(self, mock_streamlit):
        handle_error(ConfigurationError("Missing Supabase URL"), notify=True)

        assert mock_streamlit.toast.call_args.kwargs["icon"] == "🚨"

    def test_handle_error_silent_by_default(self, mock_streamlit):
        handle_error(ValueError("boom"))

        mock_streamlit.toast.assert_not_called()

    def test_safe_execute_default(self):
        def failing():
            raise BackendRequestError("down")

        assert safe_execute(failing, default=[]) == []

    def test_safe_execute_reraise(self):
        def failing():
            raise BackendRequestError("down")

        with pytest.raises(BackendRequestError):
            safe_execute(failing, reraise=True)

    def test_safe_execute_passes_arguments(self):
        assert safe_execute(lambda a, b=0: a + b, 1, b=2) == 3
