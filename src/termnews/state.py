from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator, Optional

from .datamodels import SessionState


class SharedState:
    """The single SessionState plus the lock that serializes access to it."""

    def __init__(self, state: Optional[SessionState] = None):
        self._state = state or SessionState()
        self._lock = threading.Lock()

    @contextmanager
    def locked(self) -> Iterator[SessionState]:
        with self._lock:
            yield self._state

    def snapshot(self) -> SessionState:
        with self._lock:
            return self._state.snapshot()
