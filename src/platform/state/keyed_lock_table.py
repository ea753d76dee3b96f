"""
Keyed Lock Table

Process-local exclusive locks addressed by string key, used by the in-memory
booking store in place of database row locks.
"""

import asyncio
from typing import Dict

from src.platform.logging.loguru_io import Logger


class LockTimeoutError(TimeoutError):
    def __init__(self, key: str, timeout: float) -> None:
        self.key = key
        self.timeout = timeout
        super().__init__(f'Timed out after {timeout}s waiting for lock: {key}')


class KeyedLockTable:
    """
    One asyncio.Lock per key, alive only while someone holds or waits for it.

    Each entry counts its holder plus waiters; the entry is dropped when the
    count returns to zero, so the table never outgrows the set of keys in use.

    Locks are not reentrant and carry no owner; callers track what they hold
    and release exactly what they acquired.
    """

    def __init__(self) -> None:
        self._locks: Dict[str, asyncio.Lock] = {}
        self._users: Dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    def _checkout(self, key: str) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        self._users[key] = self._users.get(key, 0) + 1
        return lock

    def _checkin(self, key: str) -> None:
        remaining = self._users[key] - 1
        if remaining:
            self._users[key] = remaining
        else:
            del self._users[key]
            del self._locks[key]

    async def acquire(self, *, key: str, timeout: float) -> None:
        """
        Wait up to `timeout` seconds for the lock on `key`.

        Raises:
            LockTimeoutError: the lock was not granted in time
        """
        lock = self._checkout(key)
        try:
            await asyncio.wait_for(lock.acquire(), timeout=timeout)
        except asyncio.TimeoutError:
            self._checkin(key)
            Logger.base.warning(f'⏳ [LOCK] Timed out waiting for {key} ({timeout}s)')
            raise LockTimeoutError(key, timeout) from None
        except BaseException:
            # Cancelled while waiting
            self._checkin(key)
            raise
        Logger.base.debug(f'🔒 [LOCK] Acquired {key}')

    def release(self, *, key: str) -> None:
        self._locks[key].release()
        self._checkin(key)
        Logger.base.debug(f'🔓 [LOCK] Released {key}')

    def locked(self, key: str) -> bool:
        lock = self._locks.get(key)
        return lock is not None and lock.locked()
