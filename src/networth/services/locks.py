"""Per-user critical sections for snapshot computation."""

import threading
from contextlib import contextmanager
from typing import Iterator


class UserLocks:
    """
    Registry of one re-entrant lock per user id.

    Snapshot writes for the same user are serialized; different users
    proceed in parallel.
    """

    def __init__(self):
        self._locks: dict[str, threading.RLock] = {}
        self._registry_lock = threading.Lock()

    def lock_for(self, user_id: str) -> threading.RLock:
        with self._registry_lock:
            lock = self._locks.get(user_id)
            if lock is None:
                lock = threading.RLock()
                self._locks[user_id] = lock
            return lock

    @contextmanager
    def hold(self, user_id: str) -> Iterator[None]:
        """Context manager holding the user's lock."""
        lock = self.lock_for(user_id)
        with lock:
            yield


# Process-wide registry shared by request handlers and the scheduler
_user_locks = UserLocks()


def get_user_locks() -> UserLocks:
    """Return the process-wide lock registry."""
    return _user_locks


def reset_user_locks() -> None:
    """Replace the registry with an empty one (tests)."""
    global _user_locks
    _user_locks = UserLocks()
