"""Session/auth state.

Holds the current user and token with an explicit lifecycle:

    uninitialized -> loading -> authenticated | unauthenticated

The store is created by the container and torn down with close(); there
is no module-level session.
"""

from relevant.core.exceptions import APIResponseError, MalformedResponseError, RelevantError
from relevant.core.logging import get_logger
from relevant.core.state_machine import StateMachine, create_session_state_machine
from relevant.infrastructure.api_client import RelevantAPI
from relevant.infrastructure.token_store import TokenStore
from relevant.models.auth import AuthResponse, LoginForm, RegisterForm, SessionStatus
from relevant.models.user import User
from relevant.services.notifications import Notifier

logger = get_logger(__name__)


def _failure_message(error: Exception, default: str) -> str:
    if isinstance(error, MalformedResponseError):
        return default
    if isinstance(error, APIResponseError) and str(error):
        return str(error)
    return default


class SessionStore:
    """Current identity plus the session state machine.

    Example:
        >>> session = SessionStore(api, token_store, notifier)
        >>> await session.initialize()
        >>> await session.login(LoginForm(email="a@b.co", password="pw"))
        >>> session.status
        <SessionStatus.AUTHENTICATED: 'authenticated'>
    """

    def __init__(self, api: RelevantAPI, token_store: TokenStore, notifier: Notifier) -> None:
        """Initialize session store.

        Args:
            api: API client used for login/register/me
            token_store: Persisted credential
            notifier: Sink for user-facing notifications
        """
        self.api = api
        self.token_store = token_store
        self.notifier = notifier
        self.user: User | None = None
        self._machine: StateMachine[SessionStatus] = create_session_state_machine()

    # ============================================
    # State
    # ============================================

    @property
    def status(self) -> SessionStatus:
        return self._machine.current

    @property
    def token(self) -> str | None:
        return self.token_store.load()

    @property
    def is_authenticated(self) -> bool:
        return self.status == SessionStatus.AUTHENTICATED

    @property
    def is_loading(self) -> bool:
        return self.status in (SessionStatus.UNINITIALIZED, SessionStatus.LOADING)

    def _move(self, target: SessionStatus) -> None:
        if self._machine.current != target:
            self._machine.transition(target)
            logger.debug("Session status changed", status=target.value)

    def _begin(self) -> None:
        if self._machine.current == SessionStatus.LOADING:
            return
        self._move(SessionStatus.LOADING)

    def _set_authenticated(self, user: User, token: str | None = None) -> None:
        if token is not None:
            self.token_store.save(token)
        self.user = user
        self._move(SessionStatus.AUTHENTICATED)

    def _set_unauthenticated(self) -> None:
        self.token_store.clear()
        self.user = None
        if self._machine.current == SessionStatus.UNINITIALIZED:
            self._move(SessionStatus.LOADING)
        self._move(SessionStatus.UNAUTHENTICATED)

    # ============================================
    # Lifecycle
    # ============================================

    async def initialize(self) -> SessionStatus:
        """Resolve the stored credential into a session.

        Returns:
            The resulting status (authenticated or unauthenticated)
        """
        self._begin()
        if not self.token_store.load():
            self._move(SessionStatus.UNAUTHENTICATED)
            return self.status

        try:
            user = await self.api.get_current_user()
        except RelevantError as e:
            logger.warning("Session restore failed", error=str(e))
            self._set_unauthenticated()
            return self.status

        self._set_authenticated(user)
        logger.info("Session restored", user_id=user.id)
        return self.status

    async def _authenticate(self, response_coro, success: str, failure: str) -> User:
        previous_user = self.user
        self._begin()
        try:
            response: AuthResponse = await response_coro
        except RelevantError as e:
            self.user = previous_user
            if previous_user is not None and self.token_store.load():
                self._move(SessionStatus.AUTHENTICATED)
            else:
                self._move(SessionStatus.UNAUTHENTICATED)
            self.notifier.error(_failure_message(e, failure))
            raise

        self._set_authenticated(response.user, response.token)
        self.notifier.success(success)
        logger.info("Authenticated", user_id=response.user.id)
        return response.user

    async def login(self, form: LoginForm) -> User:
        """Log in and persist the returned token.

        Raises:
            APIError: On failure, after notifying the user
        """
        return await self._authenticate(
            self.api.login(form), "Login successful!", "Login failed"
        )

    async def register(self, form: RegisterForm) -> User:
        """Register, then behave like login.

        Raises:
            APIError: On failure, after notifying the user
        """
        return await self._authenticate(
            self.api.register(form), "Registration successful!", "Registration failed"
        )

    def logout(self) -> None:
        """Clear the credential immediately; no server round trip."""
        self._set_unauthenticated()
        self.notifier.success("Logged out successfully")
        logger.info("Logged out")

    def session_expired(self) -> bool:
        """Drop a session the API no longer accepts.

        Returns:
            True only for the call that actually ended a live session
        """
        if self.status == SessionStatus.UNAUTHENTICATED:
            self.token_store.clear()
            return False
        self._set_unauthenticated()
        logger.info("Session expired")
        return True

    def update_user(self, user: User) -> None:
        """Replace the cached identity (after profile edits)."""
        self.user = user

    def close(self) -> None:
        """Forget in-memory state. The persisted token is left alone."""
        self.user = None
        self._machine.reset(SessionStatus.UNINITIALIZED)


__all__ = ["SessionStore"]
