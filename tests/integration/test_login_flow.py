# =============================================================================
# tests/integration/test_login_flow.py
# Integration Tests for the facade wired by build_backend
# (Sign up / Login -> Session -> Points -> REST with bearer token -> Logout)
# =============================================================================

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
import requests

from loyalty_core.bootstrap import build_backend, session_backend
from loyalty_core.models import User, UserRole
from loyalty_core.services import AuthStatus


pytestmark = pytest.mark.integration


class TestLoginFlowIntegration:
    """
    Integration tests for the complete client flow.

    Supabase is a mocked client; the REST and AI clients run their real
    requests.Session code with only the transport (Session.send) stubbed.
    """

    @pytest.fixture
    def backend(self, settings, memory_storage, mock_supabase):
        return build_backend(settings, storage=memory_storage, supabase_client=mock_supabase)

    @pytest.fixture
    def rest_send(self, backend):
        rest = next(p for p in backend.providers if p.name == "rest")
        send = MagicMock(name="send")
        rest.client.session.send = send
        return send

    @pytest.fixture
    def ai_send(self, backend):
        ai = next(p for p in backend.providers if p.name == "ai")
        send = MagicMock(name="send")
        ai.client.session.send = send
        return send

    def test_signup_creates_user_with_zero_balance(
        self, backend, mock_supabase, supabase_tables, make_auth_user
    ):
        mock_supabase.auth.sign_up.return_value = SimpleNamespace(
            user=make_auth_user(), session=SimpleNamespace(access_token="jwt-1"),
        )
        supabase_tables["loyalty_points"].insert.return_value.execute.return_value = SimpleNamespace(
            data=[{"id": "lp-1", "user_id": "u1", "points_balance": 0,
                   "total_earned": 0, "total_redeemed": 0}]
        )

        result = backend.signup("a@b.com", "x", "A", "B")

        assert result.success
        assert result.user.role == UserRole.USER
        assert result.user.is_active
        assert result.points.points_balance == 0
        assert backend.get_current_user().email == "a@b.com"

    def test_add_points_from_100_to_150(
        self, backend, supabase_tables, points_row, set_single_row
    ):
        set_single_row(supabase_tables["loyalty_points"], points_row)

        result = backend.add_loyalty_points("u1", 50, "Quiz completed")

        assert result.success
        assert result.new_balance == 150
        transaction = supabase_tables["transactions"].insert.call_args.args[0]
        assert transaction["type"] == "EARN"
        assert transaction["points"] == 50

    def test_rest_login_token_used_for_next_request(
        self, backend, mock_supabase, rest_send, make_response
    ):
        mock_supabase.auth.sign_in_with_password.side_effect = RuntimeError("Invalid login credentials")
        rest_send.side_effect = [
            make_response(body={
                "token": "rest-jwt",
                "user": {"id": "u1", "email": "a@b.com", "firstName": "A",
                         "lastName": "B", "role": "USER", "isActive": True},
            }),
            make_response(body=[{"id": "p1", "name": "Cafe"}]),
        ]

        result = backend.login("a@b.com", "x")
        partners = backend.get_nearby_partners()

        assert result.success
        assert backend.auth_status == AuthStatus.AUTHENTICATED
        assert partners == [{"id": "p1", "name": "Cafe"}]

        login_request = rest_send.call_args_list[0].args[0]
        partners_request = rest_send.call_args_list[1].args[0]
        assert "Authorization" not in login_request.headers
        assert partners_request.headers["Authorization"] == "Bearer rest-jwt"
        assert partners_request.url == "http://backend.test/api/partners/nearby"

    def test_unknown_role_from_rest_fails_login(
        self, backend, mock_supabase, rest_send, make_response, session_store
    ):
        mock_supabase.auth.sign_in_with_password.side_effect = RuntimeError("Invalid login credentials")
        rest_send.return_value = make_response(body={
            "token": "rest-jwt",
            "user": {"id": "u1", "email": "a@b.com", "role": "MERCHANT"},
        })

        result = backend.login("a@b.com", "x")

        assert not result.success
        assert "MERCHANT" in result.message
        assert backend.auth_status == AuthStatus.AUTH_FAILED
        assert session_store.get_token() is None

    def test_unknown_transaction_type_degrades_to_empty(self, backend, rest_send, make_response):
        rest_send.return_value = make_response(body=[
            {"id": "t1", "userId": "u1", "type": "BONUS", "points": 10},
        ])

        assert backend.get_user_transactions("u1") == []

    def test_logout_drops_bearer_token(
        self, backend, session_store, rest_send, make_response
    ):
        session_store.save_session("jwt-1", User(id="u1", email="a@b.com", first_name="A", last_name="B"))
        backend.logout()
        backend.logout()
        rest_send.return_value = make_response(body=[])

        backend.get_qr_history()

        assert "Authorization" not in rest_send.call_args.args[0].headers
        assert backend.get_current_user() is None

    def test_guest_session_never_sends(self, backend, rest_send, ai_send, mock_supabase):
        backend.start_guest_session()

        backend.get_loyalty_points("guest")
        backend.get_nearby_partners()
        backend.generate_recommendations("guest", {})

        rest_send.assert_not_called()
        ai_send.assert_not_called()
        mock_supabase.table.assert_not_called()

    def test_list_read_degrades_when_backend_down(self, backend, rest_send):
        rest_send.side_effect = requests.exceptions.ConnectionError("refused")

        assert backend.get_nearby_partners() == []


class TestPerSessionBackends:
    """session_backend gives every browser session its own facade and Supabase client"""

    @pytest.fixture(autouse=True)
    def offline(self, monkeypatch):
        send = MagicMock(name="send", side_effect=requests.exceptions.ConnectionError("offline"))
        monkeypatch.setattr(requests.Session, "send", send)
        return send

    def test_sessions_do_not_share_auth(
        self, settings, mock_supabase, supabase_tables, profile_row, set_single_row, make_auth_user
    ):
        other_client = MagicMock(name="other_supabase")
        clients = iter([mock_supabase, other_client])

        def factory(_settings):
            return next(clients)

        storage_a, storage_b = {}, {}
        backend_a = session_backend(settings, storage_a, client_factory=factory)
        backend_b = session_backend(settings, storage_b, client_factory=factory)

        set_single_row(supabase_tables["profiles"], profile_row)
        mock_supabase.auth.sign_in_with_password.return_value = SimpleNamespace(
            user=make_auth_user(), session=SimpleNamespace(access_token="jwt-a"),
        )
        assert backend_a.login("a@b.com", "x").success

        backend_b.logout()

        assert backend_a is not backend_b
        assert backend_a.auth_status == AuthStatus.AUTHENTICATED
        assert backend_a.get_current_user().id == "u1"
        assert backend_b.auth_status == AuthStatus.ANONYMOUS
        mock_supabase.auth.sign_out.assert_not_called()
        other_client.auth.sign_out.assert_called_once()

    def test_same_session_reuses_backend(self, settings):
        factory = MagicMock(name="client_factory")
        storage = {}

        first = session_backend(settings, storage, client_factory=factory)
        second = session_backend(settings, storage, client_factory=factory)

        assert first is second
        assert first.is_initialized
        factory.assert_called_once_with(settings)
