# =============================================================================
# tests/conftest.py
# Pytest Configuration and Fixtures
# =============================================================================

import json
import sys
from types import SimpleNamespace
from typing import Any, Dict, Optional
from unittest.mock import MagicMock

import pytest
import requests

from loyalty_core.config import Settings
from loyalty_core.state import SessionStore


# =============================================================================
# SAMPLE DATA FIXTURES
# =============================================================================

@pytest.fixture
def settings():
    """Settings pointing at local services"""
    return Settings(
        supabase_url="https://test.supabase.co",
        supabase_key="anon-key",
        backend_url="http://backend.test",
        ai_service_url="http://ai.test",
    )


@pytest.fixture
def profile_row():
    """Supabase profiles row for user u1"""
    return {
        "id": "u1",
        "email": "a@b.com",
        "first_name": "A",
        "last_name": "B",
        "phone_number": None,
        "role": "USER",
        "is_active": True,
    }


@pytest.fixture
def points_row():
    """Supabase loyalty_points row with a balance of 100"""
    return {
        "id": "lp-1",
        "user_id": "u1",
        "points_balance": 100,
        "total_earned": 120,
        "total_redeemed": 20,
        "created_at": "2024-01-01T00:00:00+00:00",
        "updated_at": "2024-01-02T00:00:00+00:00",
    }


def _auth_user(user_id: str = "u1", email: str = "a@b.com") -> SimpleNamespace:
    """Shape of supabase-py's auth User"""
    return SimpleNamespace(
        id=user_id,
        email=email,
        created_at="2024-01-01T00:00:00+00:00",
        updated_at="2024-01-01T00:00:00+00:00",
    )


# =============================================================================
# MOCK FIXTURES
# =============================================================================

@pytest.fixture
def mock_streamlit(monkeypatch):
    """Mock Streamlit for testing"""
    mock_st = MagicMock()
    mock_st.session_state = {}
    mock_st.secrets = {}
    mock_st.cache_data = lambda f: f
    mock_st.cache_resource = lambda f: f

    monkeypatch.setitem(sys.modules, "streamlit", mock_st)
    return mock_st


@pytest.fixture
def memory_storage() -> Dict[str, Any]:
    """Plain dict standing in for st.session_state"""
    return {}


@pytest.fixture
def session_store(memory_storage):
    return SessionStore(memory_storage)


@pytest.fixture
def supabase_tables():
    """One MagicMock per Supabase table"""
    return {
        "profiles": MagicMock(name="profiles"),
        "loyalty_points": MagicMock(name="loyalty_points"),
        "transactions": MagicMock(name="transactions"),
    }


@pytest.fixture
def mock_supabase(supabase_tables):
    """Mock Supabase client routing table() calls to supabase_tables"""
    mock_client = MagicMock()
    mock_client.table.side_effect = lambda name: supabase_tables[name]
    return mock_client


def _set_single_row(table: MagicMock, row: Optional[Dict[str, Any]]) -> None:
    """Make table.select().eq().single().execute() return row"""
    chain = table.select.return_value.eq.return_value.single.return_value
    chain.execute.return_value = SimpleNamespace(data=row)


@pytest.fixture
def http_session():
    """requests.Session with request() replaced by a mock"""
    session = requests.Session()
    session.request = MagicMock(name="request")
    return session


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def _response(status_code: int = 200, body: Any = None, url: str = "http://test/") -> requests.Response:
    """Build a real requests.Response with a JSON body"""
    response = requests.Response()
    response.status_code = status_code
    response.url = url
    response._content = b"" if body is None else json.dumps(body).encode("utf-8")
    return response


def _last_request(session: requests.Session) -> Dict[str, Any]:
    """Keyword arguments of the most recent session.request call"""
    return session.request.call_args.kwargs


@pytest.fixture
def make_auth_user():
    return _auth_user


@pytest.fixture
def set_single_row():
    return _set_single_row


@pytest.fixture
def make_response():
    return _response


@pytest.fixture
def last_request():
    return _last_request
