"""
Session context.

Holds the authenticated identity for one run of the tool. It is created
explicitly, hydrated from local storage, and handed to whatever needs to know
who is reporting. Lifecycle:

    session = SessionContext(store, client)
    session.hydrate()            # restore a previous login, if any
    await session.login(...)     # or signup(...)
    session.logout()             # forget the stored identity
"""

from typing import Optional

from pydantic import ValidationError

from placement_tracker.api_client import PlacementAPIClient
from placement_tracker.exceptions import (
    NotAuthenticatedError,
    ReportStoreError,
    StorageCorruptError,
)
from placement_tracker.logging_config import logger, set_reporter
from placement_tracker.models import UserSession
from placement_tracker.storage import LocalStore, SESSION_KEY


LOGIN_FAILED = "Login failed. Please try again."
SIGNUP_FAILED = "Signup failed. Please try again."
PASSWORD_MISMATCH = "Passwords do not match"
LOAD_FAILED = "Error loading user data"


class SessionContext:
    """Authenticated identity plus the last auth error"""

    def __init__(self, store: LocalStore, client: PlacementAPIClient):
        self.store = store
        self.client = client
        self.user: Optional[UserSession] = None
        self.error: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def is_admin(self) -> bool:
        return self.user is not None and self.user.is_admin

    def require_user(self) -> UserSession:
        if self.user is None:
            raise NotAuthenticatedError()
        return self.user

    def hydrate(self) -> Optional[UserSession]:
        """Restore the stored session; a corrupt entry is discarded"""
        try:
            data = self.store.read(SESSION_KEY)
            user = UserSession.model_validate(data) if data is not None else None
        except (StorageCorruptError, ValidationError) as e:
            logger.warning(f"Discarding stored session: {e}")
            self.store.remove(SESSION_KEY)
            self._set_user(None, LOAD_FAILED)
            return None

        self._set_user(user, None)
        return user

    async def login(self, email: str, password: str) -> Optional[UserSession]:
        try:
            user = await self.client.login(email, password)
        except ReportStoreError as e:
            message = self._server_error(e) or LOGIN_FAILED
            logger.log_auth_event("login", False, user_email=email, reason=e.message)
            self._set_user(None, message)
            return None

        self._persist(user)
        logger.log_auth_event("login", True, user_email=email)
        return user

    async def signup(self, username: str, email: str, password: str,
                     confirm_password: str) -> Optional[UserSession]:
        if password != confirm_password:
            self._set_user(None, PASSWORD_MISMATCH)
            return None

        try:
            user = await self.client.signup(username, email, password)
        except ReportStoreError as e:
            message = self._server_error(e) or SIGNUP_FAILED
            logger.log_auth_event("signup", False, user_email=email, reason=e.message)
            self._set_user(None, message)
            return None

        self._persist(user)
        logger.log_auth_event("signup", True, user_email=email)
        return user

    def logout(self) -> None:
        self.store.remove(SESSION_KEY)
        self._set_user(None, None)

    def _persist(self, user: UserSession) -> None:
        self.store.write(SESSION_KEY, user.model_dump(mode="json"), private=True)
        self._set_user(user, None)

    def _set_user(self, user: Optional[UserSession], error: Optional[str]) -> None:
        self.user = user
        self.error = error
        set_reporter(user.username if user else "")

    @staticmethod
    def _server_error(error: ReportStoreError) -> Optional[str]:
        if isinstance(error.payload, dict) and error.payload.get("error"):
            return str(error.payload["error"])
        return None
