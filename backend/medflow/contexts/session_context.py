import threading
from dataclasses import dataclass
from typing import Callable, Optional
from medflow.schemas.account import Account
from medflow.services.identity_store import IdentityStore


@dataclass(frozen=True)
class SessionState:
    """Snapshot of the active account published to the rest of the app."""
    user: Optional[Account] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def user_id(self) -> Optional[str]:
        return self.user.id if self.user else None


SessionListener = Callable[[SessionState], None]


class SessionContext:
    """Process-wide holder of the active account.

    The published state is replaced, never mutated, and every change is
    pushed to subscribers while ``_lock`` is held. Store errors propagate to
    the caller.
    """

    def __init__(self, identity_store: IdentityStore):
        self.identity_store = identity_store
        self._listeners: list[SessionListener] = []
        self._lock = threading.RLock()
        self.state = SessionState(user=identity_store.current_session())

    @property
    def user(self) -> Optional[Account]:
        return self.state.user

    def subscribe(self, listener: SessionListener) -> None:
        self._listeners.append(listener)

    def login(self, username: str, password: str) -> SessionState:
        with self._lock:
            return self._publish(SessionState(user=self.identity_store.login(username, password)))

    def register(self, username: str, password: str) -> SessionState:
        with self._lock:
            return self._publish(SessionState(user=self.identity_store.register(username, password)))

    def logout(self) -> SessionState:
        with self._lock:
            self.identity_store.logout()
            return self._publish(SessionState())

    def _publish(self, state: SessionState) -> SessionState:
        with self._lock:
            self.state = state
            for listener in self._listeners:
                listener(state)
        return state
