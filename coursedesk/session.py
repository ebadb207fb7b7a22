"""Sign-in state for the dashboard.

The session object lives under one key of a mapping (Streamlit's
``st.session_state`` in the app) and only ``SessionCoordinator`` writes it.
"""

import logging
from collections.abc import Iterable, MutableMapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from coursedesk.config import AdminUser
from coursedesk.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

SESSION_KEY = "admin_session"


@dataclass(frozen=True)
class AdminSession:
    email: str
    signed_in_at: datetime


class SessionCoordinator:
    def __init__(self, store: MutableMapping[str, Any], users: Iterable[AdminUser]):
        self._store = store
        self._users = list(users)

    @property
    def current(self) -> AdminSession | None:
        session = self._store.get(SESSION_KEY)
        return session if isinstance(session, AdminSession) else None

    @property
    def signed_in(self) -> bool:
        return self.current is not None

    def sign_in(self, email: str, password: str) -> AdminSession:
        email = (email or "").strip()
        for user in self._users:
            if user.email.lower() == email.lower() and user.password == password:
                session = AdminSession(email=user.email, signed_in_at=datetime.now())
                self._store[SESSION_KEY] = session
                logger.info("Signed in: %s", user.email)
                return session
        logger.warning("Rejected sign-in for %s", email or "<blank>")
        raise AuthenticationError("Invalid email or password")

    def sign_out(self) -> None:
        session = self._store.pop(SESSION_KEY, None)
        if session is not None:
            logger.info("Signed out: %s", session.email)
