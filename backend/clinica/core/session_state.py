"""
Observable holder of the authenticated identity.

The presentation layer owns one ``SessionState``: it starts unauthenticated,
is set on successful login/registration and cleared on logout. Core services
never read it; callers pass ``user_id``/``role`` explicitly.
"""

import logging
import threading
from typing import Callable, List, Optional

from clinica.domain.entities import ROLE_ADMIN, User

logger = logging.getLogger(__name__)

SessionListener = Callable[[Optional[User]], None]


class SessionState:
    def __init__(self) -> None:
        self._current_user: Optional[User] = None
        self._listeners: List[SessionListener] = []
        self._lock = threading.Lock()

    @property
    def current_user(self) -> Optional[User]:
        return self._current_user

    @property
    def is_authenticated(self) -> bool:
        return self._current_user is not None

    @property
    def is_admin(self) -> bool:
        return self._current_user is not None and self._current_user.role == ROLE_ADMIN

    def set_current_user(self, user: Optional[User]) -> None:
        with self._lock:
            self._current_user = user
            listeners = list(self._listeners)
        logger.info(
            "Session identity changed",
            extra={"context": {"user_id": getattr(user, "id", None)}},
        )
        for listener in listeners:
            listener(user)

    def clear(self) -> None:
        """Logout: drop the current identity."""
        self.set_current_user(None)

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register a listener; it immediately receives the current identity.

        Returns a callable that removes the listener.
        """
        with self._lock:
            self._listeners.append(listener)
            current = self._current_user
        listener(current)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe
