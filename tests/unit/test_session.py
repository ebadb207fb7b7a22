"""Unit tests for the sign-in coordinator."""

import pytest

from coursedesk.config import AdminUser
from coursedesk.exceptions import AuthenticationError
from coursedesk.session import SESSION_KEY, AdminSession, SessionCoordinator

USERS = [AdminUser(email="ops@example.com", password="s3cret")]


def test_sign_in_stores_session():
    store: dict = {}
    coordinator = SessionCoordinator(store, USERS)

    session = coordinator.sign_in(" OPS@example.com ", "s3cret")

    assert isinstance(session, AdminSession)
    assert session.email == "ops@example.com"
    assert store[SESSION_KEY] is session
    assert coordinator.signed_in


def test_bad_password_is_rejected():
    store: dict = {}
    coordinator = SessionCoordinator(store, USERS)

    with pytest.raises(AuthenticationError) as exc_info:
        coordinator.sign_in("ops@example.com", "wrong")

    assert exc_info.value.message == "Invalid email or password"
    assert SESSION_KEY not in store
    assert coordinator.current is None


def test_sign_out_clears_session():
    store: dict = {}
    coordinator = SessionCoordinator(store, USERS)
    coordinator.sign_in("ops@example.com", "s3cret")

    coordinator.sign_out()
    assert not coordinator.signed_in
    coordinator.sign_out()  # no-op when already signed out


def test_foreign_value_under_key_is_not_a_session():
    coordinator = SessionCoordinator({SESSION_KEY: "junk"}, USERS)
    assert coordinator.current is None
