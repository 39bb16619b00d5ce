"""Per-entity serialization helpers."""

import logging
import threading
from contextlib import contextmanager
from typing import Callable, Hashable, Iterator, TypeVar

from famledger.domain.errors import ConcurrencyConflictError, retries_exhausted

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 3


class KeyedLocks:
    """Registry handing out one lock per key (e.g. per loan id).

    A key's lock lives only while some thread holds or waits for it, so the
    registry stays as small as the number of entities in use.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[Hashable, threading.Lock] = {}
        self._users: dict[Hashable, int] = {}

    def _acquire_entry(self, key: Hashable) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
                self._users[key] = 0
            self._users[key] += 1
            return lock

    def _release_entry(self, key: Hashable) -> None:
        with self._guard:
            self._users[key] -= 1
            if self._users[key] == 0:
                del self._users[key]
                del self._locks[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        """Hold the lock for key for the duration of the block."""
        lock = self._acquire_entry(key)
        try:
            with lock:
                yield
        finally:
            self._release_entry(key)


def retry_on_conflict(
    operation: Callable[[], T],
    entity: str,
    entity_id: int,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> T:
    """Run a read-modify-write, re-running it from a fresh read on conflict.

    Args:
        operation: Callable doing the full read-modify-write
        entity: Entity name for messages
        entity_id: Entity ID for messages
        max_attempts: Total attempts before giving up

    Returns:
        Whatever operation returns

    Raises:
        ConcurrencyConflictError: If every attempt conflicted
    """
    for attempt in range(1, max_attempts + 1):
        try:
            return operation()
        except ConcurrencyConflictError:
            logger.info("Version conflict on %s %s (attempt %d/%d)", entity, entity_id, attempt, max_attempts)
    raise ConcurrencyConflictError(retries_exhausted(entity, entity_id, max_attempts))
