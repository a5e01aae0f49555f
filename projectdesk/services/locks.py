"""Per-key asyncio locks for check-then-act sequences.

A lock exists only while someone holds or waits for it, so the table does
not grow with the number of keys ever seen.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Hashable


class KeyedLock:
    """Mutual exclusion per hashable key."""

    def __init__(self) -> None:
        self._locks: dict[Hashable, asyncio.Lock] = {}
        self._users: dict[Hashable, int] = {}

    @asynccontextmanager
    async def hold(self, key: Hashable) -> AsyncIterator[None]:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if self._users[key] == 0:
                del self._users[key]
                del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)

    def is_locked(self, key: Hashable) -> bool:
        lock = self._locks.get(key)
        return lock is not None and lock.locked()


# Shared by every service instance in the process.
default_locks = KeyedLock()


def application_key(user_id: str, project_id) -> tuple:
    return ("application", user_id, str(project_id))


def submission_key(user_id: str, project_id) -> tuple:
    return ("submission", user_id, str(project_id))


def review_key(submission_id) -> tuple:
    return ("review", str(submission_id))
