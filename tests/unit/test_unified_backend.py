# =============================================================================
# tests/unit/test_unified_backend.py
# Unit Tests for UnifiedBackendService
# =============================================================================

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from loyalty_core.api import AIServiceClient, BackendClient
from loyalty_core.data import SupabaseService
from loyalty_core.errors import (
    BackendRequestError,
    LoyaltyHubError,
    ResponseValidationError,
    UnsupportedOperationError,
)
from loyalty_core.models import (
    AddPointsResult,
    AuthResult,
    LoginResult,
    LoyaltyPoints,
    PointsResult,
    User,
)
from loyalty_core.services import (
    AIProvider,
    AuthStatus,
    GuestFixtureProvider,
    RestProvider,
    SupabaseProvider,
    UnifiedBackendService,
)
from loyalty_core.state import SessionStore


def _user(user_id="u1"):
    return User(id=user_id, email="a@b.com", first_name="A", last_name="B")


@pytest.fixture
def supabase():
    return MagicMock(spec=SupabaseService)


@pytest.fixture
def rest():
    return MagicMock(spec=BackendClient)


@pytest.fixture
def ai():
    return MagicMock(spec=AIServiceClient)


@pytest.fixture
def backend(session_store, supabase, rest, ai):
    return UnifiedBackendService(
        session_store,
        providers=[SupabaseProvider(supabase), RestProvider(rest), AIProvider(ai)],
        guest_provider=GuestFixtureProvider(),
    )


def _assert_no_network(supabase, rest, ai):
    for client in (supabase, rest, ai):
        assert client.method_calls == []


class TestGuestMode:
    """Guest calls are answered from fixtures without network I/O"""

    def test_guest_points_fixture(self, backend, supabase, rest, ai):
        points = backend.get_loyalty_points("guest")

        assert points.points_balance == 1500
        assert points.total_earned == 2000
        assert points.total_redeemed == 500
        _assert_no_network(supabase, rest, ai)

    def test_guest_payload_is_stable(self, backend):
        first = backend.get_loyalty_points("guest")
        second = backend.get_loyalty_points("guest")

        assert first.points_balance == second.points_balance
        assert first.user_id == second.user_id

    def test_guest_session_routes_everything_to_fixtures(self, backend, supabase, rest, ai):
        backend.start_guest_session()

        assert backend.is_guest()
        assert backend.get_current_user().first_name == "Guest"
        assert len(backend.get_nearby_partners()) > 0
        assert backend.get_quiz_categories()
        assert backend.scan_qr_code("anything")["pointsEarned"] == 25
        assert backend.get_admin_overview()["totalUsers"] > 0
        assert backend.analyze_sentiment("great").sentiment
        assert backend.finetune_model("sentiment", []) is True
        _assert_no_network(supabase, rest, ai)

    def test_guest_fixtures_not_shared_between_calls(self, backend):
        backend.start_guest_session()

        partners = backend.get_nearby_partners()
        partners.clear()

        assert backend.get_nearby_partners()

    def test_guest_add_points(self, backend):
        result = backend.add_loyalty_points("guest", 50, "Quiz completed")

        assert result.success
        assert result.new_balance == 1550

    def test_guest_logout_skips_providers(self, backend, supabase):
        backend.start_guest_session()

        backend.logout()

        supabase.sign_out.assert_not_called()
        assert backend.get_current_user() is None


class TestFallback:
    """Primary failures hand over to the REST backend"""

    def test_points_read_falls_back_once(self, backend, supabase, rest):
        supabase.get_loyalty_points.return_value = PointsResult(success=False, message="boom")
        rest.get_loyalty_points.return_value = LoyaltyPoints(id="lp-1", user_id="u1", points_balance=100)

        points = backend.get_loyalty_points("u1")

        assert points.points_balance == 100
        rest.get_loyalty_points.assert_called_once_with("u1")

    def test_primary_success_skips_rest(self, backend, supabase, rest):
        supabase.get_loyalty_points.return_value = PointsResult(
            success=True, message="ok",
            points=LoyaltyPoints(id="lp-1", user_id="u1", points_balance=100),
        )

        backend.get_loyalty_points("u1")

        rest.get_loyalty_points.assert_not_called()

    def test_add_points_falls_back_without_partner(self, backend, supabase, rest):
        supabase.add_points.return_value = PointsResult(success=False, message="rls")
        rest.add_loyalty_points.return_value = AddPointsResult(success=True, message="ok", new_balance=150)

        result = backend.add_loyalty_points("u1", 50, "Quiz completed", partner_id="p1")

        assert result.new_balance == 150
        rest.add_loyalty_points.assert_called_once_with("u1", 50, "Quiz completed")

    def test_add_points_rest_rejection_raises(self, backend, supabase, rest):
        supabase.add_points.return_value = PointsResult(success=False, message="rls")
        rest.add_loyalty_points.return_value = AddPointsResult(success=False, message="")

        with pytest.raises(LoyaltyHubError):
            backend.add_loyalty_points("u1", 50, "Quiz completed")

    def test_points_read_raises_when_all_fail(self, backend, supabase, rest):
        supabase.get_loyalty_points.return_value = PointsResult(success=False, message="boom")
        rest.get_loyalty_points.side_effect = BackendRequestError("down", status_code=503)

        with pytest.raises(BackendRequestError):
            backend.get_loyalty_points("u1")

    def test_transactions_are_rest_only(self, backend, rest):
        rest.get_user_transactions.return_value = []

        backend.get_user_transactions("u1")

        rest.get_user_transactions.assert_called_once_with("u1")


class TestPropagationPolicy:
    """List reads degrade, mutations raise"""

    @pytest.mark.parametrize("method", [
        "get_nearby_partners",
        "get_qr_history",
        "get_payment_methods",
        "get_subscription_plans",
        "get_available_ads",
        "get_quiz_categories",
    ])
    def test_list_reads_return_empty(self, backend, rest, method):
        getattr(rest, method).side_effect = BackendRequestError("down")

        assert getattr(backend, method)() == []

    def test_malformed_transactions_return_empty(self, backend, rest):
        rest.get_user_transactions.side_effect = ResponseValidationError(
            "Malformed response from LoyaltyHub backend", endpoint="api/transactions",
        )

        assert backend.get_user_transactions("u1") == []

    def test_admin_list_returns_empty(self, backend, rest):
        rest.list_admin.side_effect = BackendRequestError("down")

        assert backend.list_admin("users") == []

    def test_admin_overview_zero_filled(self, backend, rest):
        rest.get_admin_overview.side_effect = BackendRequestError("down")

        overview = backend.get_admin_overview()

        assert overview
        assert set(overview.values()) == {0}

    def test_mutations_raise(self, backend, rest):
        rest.create_admin.side_effect = BackendRequestError("down", status_code=500)

        with pytest.raises(BackendRequestError):
            backend.create_admin("partners", {"name": "Cafe"})

    def test_ai_failure_raises(self, backend, ai):
        ai.generate_recommendations.side_effect = BackendRequestError("down")

        with pytest.raises(BackendRequestError):
            backend.generate_recommendations("u1", {})

    def test_unsupported_operation(self, session_store):
        backend = UnifiedBackendService(session_store, providers=[])

        with pytest.raises(UnsupportedOperationError):
            backend.get_partner("p1")


class TestAuthFlow:
    """Test login, signup, logout and session reads"""

    def test_supabase_login_stores_token(self, backend, supabase, session_store):
        supabase.sign_in.return_value = AuthResult(
            success=True, message="ok", user=_user(),
            session=SimpleNamespace(access_token="jwt-1"),
        )

        result = backend.login("a@b.com", "x")

        assert result.success
        assert session_store.get_token() == "jwt-1"
        assert backend.get_current_user().id == "u1"
        assert backend.auth_status == AuthStatus.AUTHENTICATED

    def test_login_falls_back_to_rest(self, backend, supabase, rest):
        supabase.sign_in.return_value = AuthResult(success=False, message="Invalid login credentials")
        rest.login.return_value = LoginResult(success=True, message="ok", token="rest-jwt", user=_user())

        result = backend.login("a@b.com", "x")

        assert result.token == "rest-jwt"
        rest.login.assert_called_once_with("a@b.com", "x")

    def test_login_failure_reports_and_caches_no_session(
        self, backend, supabase, rest, memory_storage
    ):
        supabase.sign_in.return_value = AuthResult(success=False, message="Invalid login credentials")
        rest.login.side_effect = BackendRequestError("unauthorized", status_code=401)

        result = backend.login("a@b.com", "bad")

        assert not result.success
        assert result.message
        assert backend.auth_status == AuthStatus.AUTH_FAILED
        assert memory_storage == {"auth_status": "auth_failed"}

    def test_malformed_login_payload_fails_login(self, backend, supabase, rest, session_store):
        supabase.sign_in.return_value = AuthResult(success=False, message="Invalid login credentials")
        rest.login.side_effect = ResponseValidationError(
            "Malformed response from LoyaltyHub backend: 'MERCHANT' is not a valid UserRole",
            endpoint="api/auth/login",
        )

        result = backend.login("a@b.com", "x")

        assert not result.success
        assert "MERCHANT" in result.message
        assert backend.auth_status == AuthStatus.AUTH_FAILED
        assert session_store.get_token() is None

    def test_login_never_uses_guest_chain(self, backend, supabase, rest):
        backend.start_guest_session()
        supabase.sign_in.return_value = AuthResult(success=False, message="nope")
        rest.login.return_value = LoginResult(success=False, message="nope")

        result = backend.login("a@b.com", "x")

        assert not result.success
        supabase.sign_in.assert_called_once()

    def test_signup_returns_points(self, backend, supabase):
        supabase.sign_up.return_value = AuthResult(
            success=True, message="Account created successfully!", user=_user(),
            session=SimpleNamespace(access_token="jwt-1"),
            points=LoyaltyPoints(id="lp-1", user_id="u1"),
        )

        result = backend.signup("a@b.com", "x", "A", "B")

        assert result.success
        assert result.points.points_balance == 0
        assert backend.is_authenticated()

    def test_logout_twice(self, backend, supabase, session_store, memory_storage):
        session_store.save_session("jwt-1", _user())
        supabase.sign_out.side_effect = [None, None]

        backend.logout()
        backend.logout()

        assert memory_storage == {}
        assert backend.get_current_user() is None
        assert backend.auth_status == AuthStatus.ANONYMOUS

    def test_current_user_none_without_session(self, backend):
        assert backend.get_current_user() is None
        assert backend.get_current_user_id() is None

    def test_current_user_id_needs_complete_session(self, backend, session_store):
        # sign-up without a Supabase session caches the user but no token
        session_store.save_session(None, _user())

        assert backend.get_current_user() is None
        assert backend.get_current_user_id() is None

    def test_current_user_id_from_session(self, backend, session_store):
        session_store.save_session("jwt-1", _user("u7"))

        assert backend.get_current_user_id() == "u7"

    def test_reset_data(self, backend, session_store):
        session_store.save_session("jwt-1", _user())

        backend.reset_data()

        assert backend.get_current_user() is None
        assert session_store.get_item("user_data") is not None

    def test_onboarding_flag(self, backend):
        assert not backend.has_completed_onboarding()

        backend.complete_onboarding()

        assert backend.has_completed_onboarding()


class TestInitialize:

    def test_initialize_probes_without_raising(self, backend, rest, ai):
        rest.test_connection.return_value = {"status": "error", "message": "Connection failed"}
        ai.initialize.return_value = {"openai": False, "python_ai": False, "initialized": True}

        status = backend.initialize()

        assert status["rest"]["status"] == "error"
        assert status["ai"]["status"] == "error"
        assert status["supabase"]["status"] == "configured"
        assert backend.is_initialized
        rest.test_connection.assert_called_once_with("api/public/health")


class TestPerSessionState:
    """Auth status belongs to the session store, not the facade"""

    def _backend(self, store, supabase):
        return UnifiedBackendService(store, providers=[SupabaseProvider(supabase)])

    def test_status_survives_facade_rebuild(self, session_store, supabase):
        supabase.sign_in.return_value = AuthResult(success=False, message="Invalid login credentials")
        self._backend(session_store, supabase).login("a@b.com", "bad")

        rebuilt = self._backend(session_store, supabase)

        assert rebuilt.auth_status == AuthStatus.AUTH_FAILED

    def test_other_session_logout_leaves_status_alone(self, session_store, supabase):
        supabase.sign_in.return_value = AuthResult(
            success=True, message="ok", user=_user(),
            session=SimpleNamespace(access_token="jwt-1"),
        )
        backend_a = self._backend(session_store, supabase)
        backend_b = self._backend(SessionStore({}), MagicMock(spec=SupabaseService))
        backend_a.login("a@b.com", "x")

        backend_b.logout()

        assert backend_a.auth_status == AuthStatus.AUTHENTICATED
        assert backend_b.auth_status == AuthStatus.ANONYMOUS
        supabase.sign_out.assert_not_called()
