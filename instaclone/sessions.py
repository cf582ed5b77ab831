"""Per-client session controllers."""

from __future__ import annotations

import threading
import uuid
from collections import OrderedDict
from typing import TYPE_CHECKING, Any, Callable

from .controller import SessionController

if TYPE_CHECKING:
    from google.cloud.firestore_v1.client import Client
    from google.cloud.storage.bucket import Bucket

    from .auth import AuthClient


class ControllerRegistry:
    """Keep one ``SessionController`` per browser session.

    Controllers are looked up by an opaque key stored in the Flask session
    cookie. The least recently used controller is dropped once
    ``max_sessions`` is reached; its client is restored from the user ID kept
    in the cookie on its next request.
    """

    def __init__(
        self,
        auth_factory: Callable[..., AuthClient],
        db: Client,
        bucket: Bucket,
        max_sessions: int = 1000,
    ) -> None:
        """Initialize the registry with the shared Firebase clients."""
        self.auth_factory = auth_factory
        self.db = db
        self.bucket = bucket
        self.max_sessions = max_sessions
        self._controllers: OrderedDict[str, SessionController] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._controllers)

    def create(self, user_id: str | None = None) -> SessionController:
        """Build a controller, signed in as ``user_id`` if one is given."""
        return SessionController(
            self.auth_factory(user_id=user_id), self.db, self.bucket
        )

    def get(self, key: Any) -> SessionController | None:
        """Return the controller stored under ``key``, if it is still held."""
        if not isinstance(key, str):
            return None
        with self._lock:
            controller = self._controllers.get(key)
            if controller is not None:
                self._controllers.move_to_end(key)
            return controller

    def add(self, controller: SessionController) -> str:
        """Store a controller and return its new key."""
        key = uuid.uuid4().hex
        with self._lock:
            self._controllers[key] = controller
            while len(self._controllers) > self.max_sessions:
                self._controllers.popitem(last=False)
        return key
