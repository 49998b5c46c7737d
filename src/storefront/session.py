"""Login session tracking for storefront."""

import logging
from enum import Enum
from typing import Awaitable, Callable

from .errors import StorageError
from .schemas import Credentials, validate_input
from .storage import KeyValueStore

logger = logging.getLogger(__name__)

LAST_USER_KEY = "last_logged_in_user"

SessionListener = Callable[[str | None], Awaitable[None]]


class SessionState(Enum):
    UNKNOWN = "unknown"  # restore() has not finished yet
    AUTHENTICATED = "authenticated"
    ANONYMOUS = "anonymous"


class SessionManager:
    """
    Owns the current user and notifies listeners when it changes.

    Listeners are awaited in registration order with the new username, or
    None after logout. Repositories register their on_session_change here.
    """

    def __init__(self, store: KeyValueStore):
        self.store = store
        self.state = SessionState.UNKNOWN
        self.username: str | None = None
        self._listeners: list[SessionListener] = []

    @property
    def is_logged_in(self) -> bool:
        return self.state is SessionState.AUTHENTICATED

    @property
    def is_loading(self) -> bool:
        return self.state is SessionState.UNKNOWN

    def subscribe(self, listener: SessionListener) -> None:
        self._listeners.append(listener)

    async def _notify(self) -> None:
        for listener in self._listeners:
            await listener(self.username)

    async def restore(self) -> SessionState:
        """
        Resolve the startup state from the last logged-in user marker.

        Runs once; later calls return the current state. A store failure is
        logged and treated as no stored user.
        """
        if self.state is not SessionState.UNKNOWN:
            return self.state

        try:
            stored = await self.store.get(LAST_USER_KEY)
        except StorageError as e:
            logger.warning("Failed to restore user: %s", e)
            stored = None

        if stored:
            self.username = stored
            self.state = SessionState.AUTHENTICATED
        else:
            self.state = SessionState.ANONYMOUS
        await self._notify()
        return self.state

    async def login(self, username: str, password: str) -> str:
        """
        Log a user in. This is a mock: any non-empty credentials are accepted.

        Returns:
            The username, stripped of surrounding whitespace.

        Raises:
            ValidationError: If username or password is empty.
            StorageError: If the marker cannot be persisted; the session is unchanged.
        """
        credentials = validate_input(Credentials, username=username, password=password)
        try:
            await self.store.set(LAST_USER_KEY, credentials.username)
        except StorageError:
            logger.error("Failed to persist login for %s", credentials.username)
            raise

        self.username = credentials.username
        self.state = SessionState.AUTHENTICATED
        logger.info("Logged in as %s", self.username)
        await self._notify()
        return self.username

    async def logout(self) -> None:
        """
        Clear the marker and tell listeners to drop their views.

        Raises:
            StorageError: If the marker cannot be removed; the user stays logged in.
        """
        if self.username is None:
            self.state = SessionState.ANONYMOUS
            return

        await self.store.remove(LAST_USER_KEY)
        logger.info("Logged out %s", self.username)
        self.username = None
        self.state = SessionState.ANONYMOUS
        await self._notify()
