"""
Session State Management
Tracks who is signed in, derived from the persisted token and ``/auth/me``.

State machine:
    UNKNOWN   -> LOGGED_OUT           (no persisted token)
    UNKNOWN   -> VERIFYING            (token found, /auth/me pending)
    VERIFYING -> LOGGED_IN            (token accepted)
    VERIFYING -> LOGGED_OUT           (token rejected or backend unreachable)
    LOGGED_OUT -> LOGGED_IN           (login / register)
    LOGGED_IN -> LOGGED_OUT           (logout)

Anything else raises ``SessionStateError``.
"""

import logging
from dataclasses import dataclass, replace
from typing import Optional, Tuple

from models import Role, SessionStatus, User
from state.observable import Observable
from state.tokens import TokenStore
from utils.errors import ApiError, MarketplaceError, SessionStateError, ValidationError

logger = logging.getLogger(__name__)

_TRANSITIONS = {
    SessionStatus.UNKNOWN: {SessionStatus.LOGGED_OUT, SessionStatus.VERIFYING},
    SessionStatus.VERIFYING: {SessionStatus.LOGGED_IN, SessionStatus.LOGGED_OUT},
    SessionStatus.LOGGED_OUT: {SessionStatus.LOGGED_IN},
    SessionStatus.LOGGED_IN: {SessionStatus.LOGGED_OUT},
}

REGISTER_REQUIRED_FIELDS = ("name", "email", "password", "role")


# =============================================================================
# State Schema
# =============================================================================

@dataclass(frozen=True)
class Session:
    """Immutable snapshot of the session"""
    user: Optional[User] = None
    status: SessionStatus = SessionStatus.UNKNOWN
    loading: bool = False
    error: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.status is SessionStatus.LOGGED_IN and self.user is not None

    @property
    def role(self) -> Optional[Role]:
        return self.user.role if self.is_authenticated else None


# =============================================================================
# Session Manager
# =============================================================================

class SessionManager(Observable):
    """
    Owns the session and the persisted token.

    Usage:
        session = SessionManager(client, FileTokenStore(path))
        session.bootstrap()

        if session.login(email, password, "customer"):
            ...
        else:
            st.error(session.error)
    """

    def __init__(self, client, tokens: TokenStore):
        super().__init__()
        self._client = client
        self._tokens = tokens
        self.state = Session()

    # =========================================================================
    # Property Accessors
    # =========================================================================

    @property
    def user(self) -> Optional[User]:
        return self.state.user

    @property
    def status(self) -> SessionStatus:
        return self.state.status

    @property
    def is_authenticated(self) -> bool:
        return self.state.is_authenticated

    @property
    def role(self) -> Optional[Role]:
        return self.state.role

    @property
    def loading(self) -> bool:
        return self.state.loading

    @property
    def error(self) -> Optional[str]:
        return self.state.error

    # =========================================================================
    # State Updates
    # =========================================================================

    def _set(self, **changes) -> None:
        self.state = replace(self.state, **changes)
        self._notify()

    def _transition(self, status: SessionStatus, **changes) -> None:
        current = self.state.status
        if status not in _TRANSITIONS[current]:
            raise SessionStateError(f"Illegal session transition {current.value} -> {status.value}")
        logger.info("Session %s -> %s", current.value, status.value)
        self._set(status=status, **changes)

    def clear_error(self) -> None:
        self._set(error=None)

    # =========================================================================
    # Operations
    # =========================================================================

    def bootstrap(self) -> Session:
        """Restore the session from the persisted token, once per app start"""
        if self.state.status is not SessionStatus.UNKNOWN:
            return self.state

        self._set(loading=True, error=None)
        try:
            with self._tokens.restore() as token:
                if token is None:
                    self._transition(SessionStatus.LOGGED_OUT, user=None, loading=False)
                    return self.state
                self._transition(SessionStatus.VERIFYING)
                user = User.from_dict(self._client.get_current_user())
        except (MarketplaceError, ValueError) as e:
            logger.info("Stored session rejected: %s", e)
            self._transition(SessionStatus.LOGGED_OUT, user=None, loading=False)
            return self.state

        self._transition(SessionStatus.LOGGED_IN, user=user, loading=False)
        return self.state

    def login(self, email: str, password: str, role) -> Optional[User]:
        """Sign in; returns the user, or None with ``error`` set"""
        try:
            self._require_logged_out()
            role = self._parse_role(role)
            if not (email or "").strip() or not password:
                raise ValidationError("Please enter your email and password")
            self._set(loading=True, error=None)
            result = self._client.login(email.strip(), password, role.value)
            token, user = self._accept(result)
        except MarketplaceError as e:
            self._set(loading=False, error=str(e))
            return None

        self._sign_in(token, user)
        return user

    def register(self, user_data: dict) -> Optional[User]:
        """Create an account and sign in; returns the user, or None with ``error`` set"""
        try:
            self._require_logged_out()
            missing = [f for f in REGISTER_REQUIRED_FIELDS if not str(user_data.get(f) or "").strip()]
            if missing:
                raise ValidationError(f"Please fill in: {', '.join(missing)}")
            payload = dict(user_data, role=self._parse_role(user_data["role"]).value)
            self._set(loading=True, error=None)
            result = self._client.register(payload)
            token, user = self._accept(result)
        except MarketplaceError as e:
            self._set(loading=False, error=str(e))
            return None

        self._sign_in(token, user)
        return user

    def logout(self) -> None:
        """Forget the token and the user; no backend call"""
        self._tokens.clear()
        if self.state.status is SessionStatus.LOGGED_OUT:
            self._set(user=None, loading=False, error=None)
            return
        self._transition(SessionStatus.LOGGED_OUT, user=None, loading=False, error=None)

    def update_account(self, account_data: dict) -> Optional[User]:
        """Update name/phone/city of the signed-in account"""
        if not self.is_authenticated:
            return None
        try:
            result = self._client.update_account(account_data)
            payload = result.get("user", result) if isinstance(result, dict) else result
            user = User.from_dict(payload)
        except MarketplaceError as e:
            self._set(error=str(e))
            return None
        except ValueError:
            self._set(error="Unexpected response from server")
            return None
        self._set(user=user, error=None)
        return user

    # =========================================================================
    # Internals
    # =========================================================================

    def _require_logged_out(self) -> None:
        if self.state.status is SessionStatus.LOGGED_IN:
            raise ValidationError("You are already signed in")
        if self.state.status is not SessionStatus.LOGGED_OUT:
            raise ValidationError("Still checking your saved session, please retry")

    @staticmethod
    def _parse_role(role) -> Role:
        try:
            return Role.parse(role)
        except ValueError:
            raise ValidationError("Please choose customer, tailor or shop") from None

    @staticmethod
    def _accept(result) -> Tuple[str, User]:
        token = result.get("token") if isinstance(result, dict) else None
        try:
            user = User.from_dict(result.get("user") if isinstance(result, dict) else None)
        except ValueError:
            user = None
        if not token or user is None:
            raise ApiError("Invalid auth response from server")
        return token, user

    def _sign_in(self, token: str, user: User) -> None:
        self._tokens.save(token)
        self._transition(SessionStatus.LOGGED_IN, user=user, loading=False, error=None)
