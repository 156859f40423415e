"""
Session manager: tracks signed-in sessions and publishes auth state changes.

One instance is created at application start and injected where needed;
listeners attach with ``subscribe`` and detach through the returned
Subscription.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from api.auth import AuthHandler

SIGNED_IN = "signed_in"
SIGNED_OUT = "signed_out"
SNAPSHOT = "snapshot"


@dataclass(frozen=True)
class AuthEvent:
    """Auth state change delivered to listeners"""
    type: str
    user: Optional[Dict[str, Any]]


AuthListener = Callable[[AuthEvent], None]


class Subscription:
    """Handle returned by SessionManager.subscribe"""

    def __init__(self, manager: 'SessionManager', listener: AuthListener):
        self._manager = manager
        self._listener = listener
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        if self._active:
            self._manager._remove_listener(self._listener)
            self._active = False


class SessionManager:
    """Sign-in/sign-out on top of AuthHandler, with an event channel."""

    def __init__(self, auth_handler: AuthHandler, clock: Callable[[], float] = time.time):
        self.logger = logging.getLogger(__name__)
        self.auth_handler = auth_handler
        self._listeners: List[AuthListener] = []
        self._clock = clock
        self._sessions: Dict[str, Tuple[str, float]] = {}  # token -> (user_id, exp)
        self._revoked: Dict[str, float] = {}  # token -> exp
        self._lock = threading.Lock()

    def subscribe(self, listener: AuthListener) -> Subscription:
        """
        Attach a listener.

        The listener is called right away with a ``snapshot`` event, then
        with every sign-in and sign-out.
        """
        with self._lock:
            self._listeners.append(listener)
        self._deliver(listener, AuthEvent(SNAPSHOT, None))
        return Subscription(self, listener)

    def _remove_listener(self, listener: AuthListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def _deliver(self, listener: AuthListener, event: AuthEvent) -> None:
        try:
            listener(event)
        except Exception:
            self.logger.exception("Auth listener failed on %s event", event.type)

    def _publish(self, event: AuthEvent) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            self._deliver(listener, event)

    def _prune(self) -> None:
        # caller holds the lock
        now = self._clock()
        for token in [t for t, (_, exp) in self._sessions.items() if exp <= now]:
            del self._sessions[token]
        for token in [t for t, exp in self._revoked.items() if exp <= now]:
            del self._revoked[token]

    def _start_session(self, result: Dict[str, Any]) -> Dict[str, Any]:
        token = result["data"]["token"]
        user = result["data"]["user"]
        exp = self.auth_handler.token_expiry(token) or self._clock()
        with self._lock:
            self._prune()
            self._sessions[token] = (user["id"], exp)
        self._publish(AuthEvent(SIGNED_IN, user))
        return result

    async def sign_up(self, email: str, password: str) -> Dict[str, Any]:
        result = await self.auth_handler.register(email, password)
        return self._start_session(result)

    async def sign_in(self, email: str, password: str) -> Dict[str, Any]:
        result = await self.auth_handler.login(email, password)
        return self._start_session(result)

    def sign_out(self, token: str) -> bool:
        """
        Revoke a token.

        Returns:
            True if the token belonged to a valid session. Invalid tokens are
            rejected without being recorded.
        """
        user = self.current_user(token)
        if user is None:
            return False
        exp = self.auth_handler.token_expiry(token)
        with self._lock:
            self._sessions.pop(token, None)
            if exp is not None:
                self._revoked[token] = exp
            self._prune()
        self._publish(AuthEvent(SIGNED_OUT, user))
        return True

    def current_user(self, token: str) -> Optional[Dict[str, Any]]:
        """User profile for a token, None if invalid, expired or revoked."""
        with self._lock:
            if token in self._revoked:
                return None
        user_id = self.auth_handler.verify_token(token)
        if not user_id:
            return None
        return self.auth_handler.get_user_by_id(user_id)

    @property
    def active_sessions(self) -> int:
        with self._lock:
            return len(self._sessions)
