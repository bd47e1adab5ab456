# =============================================================================
# loyalty_core/state/session.py
# Persisted client state: session token, user id, serialized user
# =============================================================================

from __future__ import annotations
import json
from typing import MutableMapping, Optional

from loyalty_core.logging import get_logger
from loyalty_core.models import MAPPING_ERRORS, Session, User

logger = get_logger(__name__)

# Storage keys (same names the web client kept in local storage)
AUTH_TOKEN_KEY = "auth_token"
USER_ID_KEY = "user_id"
USER_DATA_KEY = "user_data"
ONBOARDING_KEY = "onboarding_completed"
AUTH_STATUS_KEY = "auth_status"

SESSION_KEYS = (AUTH_TOKEN_KEY, USER_ID_KEY, USER_DATA_KEY)

GUEST_USER_ID = "guest"


class SessionStore:
    """
    String key/value view over the session storage.

    By default this is ``st.session_state``; tests and scripts pass a
    plain dict. There is no expiry: a cached token is presented as valid
    until a server rejects it.
    """

    def __init__(self, storage: Optional[MutableMapping] = None):
        self._storage = storage

    @property
    def storage(self) -> MutableMapping:
        if self._storage is None:
            import streamlit as st
            self._storage = st.session_state
        return self._storage

    # -------------------------------------------------------------------------
    # Raw access
    # -------------------------------------------------------------------------

    def get_item(self, key: str) -> Optional[str]:
        value = self.storage.get(key)
        return value if value not in (None, "") else None

    def set_item(self, key: str, value: str) -> None:
        self.storage[key] = value

    def remove_item(self, key: str) -> None:
        if key in self.storage:
            del self.storage[key]

    # -------------------------------------------------------------------------
    # Session
    # -------------------------------------------------------------------------

    def save_session(self, token: Optional[str], user: User) -> None:
        """Cache a freshly authenticated session."""
        if token:
            self.set_item(AUTH_TOKEN_KEY, token)
        self.save_user(user)

    def save_user(self, user: User) -> None:
        self.set_item(USER_ID_KEY, user.id)
        self.set_item(USER_DATA_KEY, json.dumps(user.to_dict()))

    def get_token(self) -> Optional[str]:
        return self.get_item(AUTH_TOKEN_KEY)

    def get_user_id(self) -> Optional[str]:
        return self.get_item(USER_ID_KEY)

    def get_session(self) -> Optional[Session]:
        """
        Return the cached session, or None when it is incomplete.

        A session needs a token, a user id and parsable user data.
        """
        token = self.get_token()
        if not token or not self.get_user_id():
            return None

        raw = self.get_item(USER_DATA_KEY)
        if raw is None:
            return None

        try:
            user = User.from_dict(json.loads(raw))
        except MAPPING_ERRORS as e:
            logger.error(f"Error parsing stored user data: {e}")
            return None
        return Session(token=token, user=user)

    def get_user(self) -> Optional[User]:
        session = self.get_session()
        return session.user if session else None

    def is_guest(self) -> bool:
        return self.get_user_id() == GUEST_USER_ID

    def clear(self) -> None:
        """Remove the cached session. Safe to call repeatedly."""
        for key in SESSION_KEYS:
            self.remove_item(key)

    def reset(self) -> None:
        """Drop token and user id but keep the serialized user."""
        self.remove_item(AUTH_TOKEN_KEY)
        self.remove_item(USER_ID_KEY)

    # -------------------------------------------------------------------------
    # Auth status
    # -------------------------------------------------------------------------

    def get_auth_status(self) -> Optional[str]:
        return self.get_item(AUTH_STATUS_KEY)

    def set_auth_status(self, status: Optional[str]) -> None:
        """Record the login state machine; None forgets it."""
        if status is None:
            self.remove_item(AUTH_STATUS_KEY)
        else:
            self.set_item(AUTH_STATUS_KEY, status)

    # -------------------------------------------------------------------------
    # Onboarding
    # -------------------------------------------------------------------------

    def mark_onboarding_completed(self) -> None:
        self.set_item(ONBOARDING_KEY, "true")

    def has_completed_onboarding(self) -> bool:
        return self.get_item(ONBOARDING_KEY) == "true"
