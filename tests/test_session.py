"""
Tests for SessionManager: bootstrap, login/register, logout and transitions.
"""

from unittest.mock import MagicMock

import pytest

from models import Role, SessionStatus
from state.session import SessionManager
from state.store import build_app_state
from state.tokens import MemoryTokenStore
from utils.errors import ApiError, SessionStateError

CUSTOMER = {"_id": "u1", "name": "Asha", "email": "asha@example.com", "role": "customer"}


def make_session(client=None, token=None):
    tokens = MemoryTokenStore(token)
    return SessionManager(client or MagicMock(), tokens), tokens


def logged_out(client=None):
    session, tokens = make_session(client)
    session.bootstrap()
    return session, tokens


class TestBootstrap:

    def test_no_token_goes_straight_to_logged_out(self):
        client = MagicMock()
        session, _ = make_session(client)

        session.bootstrap()

        assert session.status is SessionStatus.LOGGED_OUT
        assert not session.is_authenticated
        client.get_current_user.assert_not_called()

    def test_valid_token_signs_in(self):
        client = MagicMock()
        client.get_current_user.return_value = CUSTOMER
        session, tokens = make_session(client, token="good")

        session.bootstrap()

        assert session.is_authenticated
        assert session.role is Role.CUSTOMER
        assert tokens.load() == "good"

    def test_expired_token_is_never_authenticated(self):
        client = MagicMock()
        client.get_current_user.side_effect = ApiError("Token expired", 401)
        session, tokens = make_session(client, token="expired")
        seen = []
        session.subscribe(lambda s: seen.append(s.is_authenticated))

        session.bootstrap()

        assert session.status is SessionStatus.LOGGED_OUT
        assert tokens.load() is None
        assert not any(seen)

    def test_unknown_role_is_rejected(self):
        client = MagicMock()
        client.get_current_user.return_value = dict(CUSTOMER, role="admin")
        session, tokens = make_session(client, token="t")

        session.bootstrap()

        assert session.status is SessionStatus.LOGGED_OUT
        assert tokens.load() is None

    def test_bootstrap_runs_once(self):
        client = MagicMock()
        client.get_current_user.return_value = CUSTOMER
        session, _ = make_session(client, token="t")

        session.bootstrap()
        session.bootstrap()

        assert client.get_current_user.call_count == 1


class TestLogin:

    def test_wrong_password(self):
        client = MagicMock()
        client.login.side_effect = ApiError("Wrong password or email. Please try again.", 401)
        session, tokens = logged_out(client)

        assert session.login("asha@example.com", "nope", "customer") is None
        assert session.error == "Wrong password or email. Please try again."
        assert not session.is_authenticated
        assert session.loading is False
        assert tokens.load() is None

    def test_success_persists_token(self):
        client = MagicMock()
        client.login.return_value = {"token": "abc", "user": CUSTOMER}
        session, tokens = logged_out(client)

        user = session.login(" asha@example.com ", "secret", "Customer")

        assert user.name == "Asha"
        assert session.is_authenticated
        assert tokens.load() == "abc"
        client.login.assert_called_once_with("asha@example.com", "secret", "customer")

    def test_missing_token_in_response(self):
        client = MagicMock()
        client.login.return_value = {"user": CUSTOMER}
        session, tokens = logged_out(client)

        assert session.login("a@b.c", "pw", "customer") is None
        assert session.error == "Invalid auth response from server"
        assert tokens.load() is None

    def test_invalid_role_sends_nothing(self):
        client = MagicMock()
        session, _ = logged_out(client)

        session.login("a@b.c", "pw", "admin")

        assert session.error == "Please choose customer, tailor or shop"
        client.login.assert_not_called()

    def test_login_before_bootstrap_is_refused(self):
        client = MagicMock()
        session, _ = make_session(client)

        assert session.login("a@b.c", "pw", "customer") is None
        client.login.assert_not_called()


class TestRegister:

    def test_duplicate_email_message(self):
        client = MagicMock()
        client.register.side_effect = ApiError("User already exists with this email or Role", 500)
        session, _ = logged_out(client)

        data = {"name": "Asha", "email": "asha@example.com", "password": "pw", "role": "customer"}
        assert session.register(data) is None
        assert session.error == "User already exists with this email or Role"

    def test_missing_fields(self):
        client = MagicMock()
        session, _ = logged_out(client)

        session.register({"name": "Asha", "role": "tailor"})

        assert session.error == "Please fill in: email, password"
        client.register.assert_not_called()

    def test_success(self):
        client = MagicMock()
        client.register.return_value = {"token": "t", "user": dict(CUSTOMER, role="shop")}
        session, tokens = logged_out(client)

        session.register({"name": "Asha", "email": "a@b.c", "password": "pw", "role": "shop"})

        assert session.role is Role.SHOP
        assert tokens.load() == "t"


class TestLogout:

    def test_logout_clears_everything(self):
        client = MagicMock()
        client.login.return_value = {"token": "abc", "user": CUSTOMER}
        session, tokens = logged_out(client)
        session.login("a@b.c", "pw", "customer")

        session.logout()

        assert session.status is SessionStatus.LOGGED_OUT
        assert session.user is None
        assert tokens.load() is None

    def test_logout_when_logged_out_is_harmless(self):
        session, _ = logged_out()
        session.logout()
        assert session.status is SessionStatus.LOGGED_OUT

    def test_illegal_transition_raises(self):
        session, _ = make_session()
        with pytest.raises(SessionStateError):
            session._transition(SessionStatus.LOGGED_IN)


class TestAppStateWiring:
    """The composition root keeps the cart in step with the session."""

    def test_cart_follows_session(self, cart_backend):
        client = MagicMock()
        client.login.return_value = {"token": "abc", "user": CUSTOMER}
        client.get_cart.side_effect = cart_backend.get_cart
        cart_backend.lines = {"F1": 2}
        settings = MagicMock(api_url="http://test")

        app = build_app_state(settings, tokens=MemoryTokenStore(), client=client)
        app.session.bootstrap()
        app.session.login("a@b.c", "pw", "customer")

        assert app.cart.total_items == 2

        app.session.logout()

        assert app.cart.snapshot.is_empty
        assert app.cart.last_synced is None
