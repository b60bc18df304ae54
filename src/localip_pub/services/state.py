"""Process-wide in-memory state shared by all requests.

A single :class:`SessionState` is built at startup and handed to every
:class:`~localip_pub.services.session_engine.SessionEngine`. It owns the write
token table, the read token throttle and the per-id locks that make
check-then-act sequences atomic.
"""
from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from threading import Lock, RLock

from localip_pub.core.settings import settings
from localip_pub.db.time import now_ms

logger = logging.getLogger(__name__)

__all__ = ["IdLocks", "ReadTokenThrottle", "SessionState", "WriteTokenTable"]

DEFAULT_LOCK_SHARDS = 64


class IdLocks:
    """Fixed set of re-entrant locks sharded by address id.

    Operations on the same id always map to the same lock. Unrelated ids only
    share a lock when their hashes collide on a shard.
    """

    def __init__(self, shards: int = DEFAULT_LOCK_SHARDS) -> None:
        if shards < 1:
            raise ValueError("at least one lock shard is required")
        self._locks = tuple(RLock() for _ in range(shards))

    def lock_for(self, address_id: str) -> RLock:
        return self._locks[hash(address_id) % len(self._locks)]


class WriteTokenTable:
    """Maps an address id to its single registered write token."""

    def __init__(self) -> None:
        self._tokens: dict[str, str] = {}
        self._lock = Lock()

    def get(self, address_id: str) -> str | None:
        with self._lock:
            return self._tokens.get(address_id)

    def put(self, address_id: str, token: str) -> None:
        with self._lock:
            self._tokens[address_id] = token

    def remove_if_equal(self, address_id: str, token: str) -> bool:
        """Remove the entry for ``address_id`` only if it holds ``token``."""
        with self._lock:
            if self._tokens.get(address_id) != token:
                return False
            del self._tokens[address_id]
            return True

    def discard(self, token: str) -> int:
        """Remove every entry holding ``token`` and return how many were removed."""
        with self._lock:
            owners = [key for key, value in self._tokens.items() if value == token]
            for key in owners:
                del self._tokens[key]
        return len(owners)

    def revoke(self, address_id: str) -> None:
        with self._lock:
            self._tokens.pop(address_id, None)

    def __contains__(self, address_id: object) -> bool:
        with self._lock:
            return address_id in self._tokens

    def __len__(self) -> int:
        with self._lock:
            return len(self._tokens)


@dataclass
class _Bucket:
    tokens: float
    last_refill: int
    lock: Lock = field(default_factory=Lock)


class ReadTokenThrottle:
    """Per-id token bucket bounding how often read tokens may be minted.

    Buckets start full with ``capacity`` tokens and regain one token every
    ``refill_seconds``. Each bucket has its own lock, so throttling one id never
    blocks acquisitions for another.
    """

    def __init__(
        self,
        capacity: int | None = None,
        refill_seconds: float | None = None,
        *,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.capacity = settings.read_token_capacity if capacity is None else capacity
        refill = settings.read_token_refill_seconds if refill_seconds is None else refill_seconds
        if self.capacity < 1 or refill <= 0:
            raise ValueError("throttle capacity and refill interval must be positive")
        self._refill_ms = refill * 1000
        self._clock = clock
        self._buckets: dict[str, _Bucket] = {}
        self._table_lock = Lock()

    def _bucket(self, address_id: str) -> _Bucket:
        with self._table_lock:
            bucket = self._buckets.get(address_id)
            if bucket is None:
                bucket = _Bucket(tokens=float(self.capacity), last_refill=self._clock())
                self._buckets[address_id] = bucket
            return bucket

    def try_acquire(self, address_id: str) -> bool:
        """Consume one token for ``address_id``; return False when none is left."""
        bucket = self._bucket(address_id)
        with bucket.lock:
            now = self._clock()
            elapsed = max(now - bucket.last_refill, 0)
            bucket.tokens = min(float(self.capacity), bucket.tokens + elapsed / self._refill_ms)
            bucket.last_refill = now
            if bucket.tokens < 1:
                return False
            bucket.tokens -= 1
            return True

    def reset(self, address_id: str) -> None:
        """Start ``address_id`` over with a full bucket."""
        with self._table_lock:
            self._buckets[address_id] = _Bucket(
                tokens=float(self.capacity), last_refill=self._clock()
            )

    def forget(self, address_id: str) -> None:
        with self._table_lock:
            self._buckets.pop(address_id, None)

    def __contains__(self, address_id: object) -> bool:
        with self._table_lock:
            return address_id in self._buckets


class SessionState:
    """Long-lived state owned by one process and shared across requests."""

    def __init__(
        self,
        *,
        write_tokens: WriteTokenTable | None = None,
        throttle: ReadTokenThrottle | None = None,
        locks: IdLocks | None = None,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.clock = clock
        self.write_tokens = write_tokens or WriteTokenTable()
        self.throttle = throttle or ReadTokenThrottle(clock=clock)
        self.locks = locks or IdLocks()
        self._last_stamp = 0
        self._stamp_lock = Lock()

    def stamp(self) -> int:
        """Return a strictly increasing ms timestamp.

        Used for ``created_on`` and token ``issued_at`` so that a record recreated
        in the same millisecond still postdates every token of its predecessor.
        Lifetime arithmetic uses :attr:`clock` directly.
        """
        with self._stamp_lock:
            self._last_stamp = max(self.clock(), self._last_stamp + 1)
            return self._last_stamp

    def lock_for(self, address_id: str) -> RLock:
        return self.locks.lock_for(address_id)

    def forget(self, address_id: str) -> None:
        """Drop the write token and throttle entries kept for ``address_id``."""
        self.write_tokens.revoke(address_id)
        self.throttle.forget(address_id)
        logger.debug("Dropped in-memory state for %s", address_id)
