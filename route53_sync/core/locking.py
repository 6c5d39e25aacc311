"""
Lease based locks guarding synchronization operations.

Every pull, push and bidirectional run holds a lock keyed by operation
kind, account and optional zone. Leases live in Redis so that separate
processes exclude each other, and a holder which dies without releasing
only blocks other callers until the lease runs out.
"""

import logging
import math
import threading
import time
import uuid
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Callable, Dict, Iterator, Optional, Tuple

import redis

from .exceptions import ConfigurationError, Route53ClientError

logger = logging.getLogger(__name__)

PULL_LOCK_TTL = 1800
PUSH_LOCK_TTL = 1800
# Wraps a pull and a push, so it outlives both sub-operation leases.
BIDIRECTIONAL_LOCK_TTL = 3600


class LeaseStore(ABC):
    """Lease table shared by all locks of a LockFactory."""

    @abstractmethod
    def save(self, key: str, token: str, ttl: float) -> bool:
        """Take the lease for key unless another live token holds it."""

    @abstractmethod
    def delete(self, key: str, token: str) -> None:
        """Drop the lease for key if token still holds it."""

    @abstractmethod
    def exists(self, key: str, token: str) -> bool:
        """Whether token holds a live lease on key."""


class MemoryLeaseStore(LeaseStore):
    """In-process lease table, only excludes callers of one process."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._leases: Dict[str, Tuple[str, float]] = {}
        self._mutex = threading.Lock()

    def save(self, key: str, token: str, ttl: float) -> bool:
        with self._mutex:
            now = self._clock()
            current = self._leases.get(key)
            if current and current[0] != token and current[1] > now:
                return False
            if current and current[0] != token:
                logger.warning(f"Reclaiming expired lock lease '{key}'")
            self._leases[key] = (token, now + ttl)
            return True

    def delete(self, key: str, token: str) -> None:
        with self._mutex:
            current = self._leases.get(key)
            if current and current[0] == token:
                del self._leases[key]

    def exists(self, key: str, token: str) -> bool:
        with self._mutex:
            current = self._leases.get(key)
            return bool(current and current[0] == token and current[1] > self._clock())


class RedisLeaseStore(LeaseStore):
    """Lease table in Redis, shared by every process using the same server.

    Leases are plain keys set with NX and an expiry, so a holder that dies
    blocks others only until the key expires.
    """

    def __init__(self, client: redis.Redis, prefix: str = "lock:"):
        self.client = client
        self.prefix = prefix

    def save(self, key: str, token: str, ttl: float) -> bool:
        name = self.prefix + key
        seconds = max(1, math.ceil(ttl))
        if self.client.set(name, token, nx=True, ex=seconds):
            return True
        # Re-acquiring with the same token extends the lease
        if self._holder(name) == token:
            self.client.expire(name, seconds)
            return True
        return False

    def delete(self, key: str, token: str) -> None:
        name = self.prefix + key
        if self._holder(name) == token:
            self.client.delete(name)
        else:
            logger.warning(f"Lock lease '{key}' expired or was taken over before release")

    def exists(self, key: str, token: str) -> bool:
        return self._holder(self.prefix + key) == token

    def _holder(self, name: str) -> Optional[str]:
        value = self.client.get(name)
        if isinstance(value, bytes):
            return value.decode()
        return value


class Lock:
    """A non-blocking lock on one key with a lease duration."""

    def __init__(self, store: LeaseStore, key: str, ttl: float):
        self.store = store
        self.key = key
        self.ttl = ttl
        self._token = uuid.uuid4().hex

    def acquire(self) -> bool:
        acquired = self.store.save(self.key, self._token, self.ttl)
        if acquired:
            logger.debug(f"Acquired lock '{self.key}' for {self.ttl}s")
        else:
            logger.debug(f"Lock '{self.key}' is held by another caller")
        return acquired

    def release(self) -> None:
        self.store.delete(self.key, self._token)
        logger.debug(f"Released lock '{self.key}'")

    def is_acquired(self) -> bool:
        return self.store.exists(self.key, self._token)


class LockFactory:
    """Creates locks backed by a shared lease store."""

    def __init__(self, store: Optional[LeaseStore] = None):
        self.store = store or MemoryLeaseStore()

    def create_lock(self, key: str, ttl: float = 300.0) -> Lock:
        return Lock(self.store, key, ttl)


DEFAULT_REDIS_URL = "redis://localhost:6379/0"


def create_lock_factory(config: Dict) -> LockFactory:
    """Get a lock factory for the configured lease backend.

    ``locks.backend`` is ``redis`` or ``memory``. Without it, the mock
    provider gets in-process leases and every other provider Redis at
    ``locks.redis_url``.
    """
    locks = config.get("locks") or {}
    default_backend = "memory" if config.get("provider") == "mock" else "redis"
    backend = locks.get("backend", default_backend)

    if backend == "redis":
        url = locks.get("redis_url", DEFAULT_REDIS_URL)
        logger.info(f"Using Redis lock leases at {url}")
        return LockFactory(RedisLeaseStore(redis.Redis.from_url(url)))
    elif backend == "memory":
        logger.debug("Using in-process lock leases")
        return LockFactory(MemoryLeaseStore())
    else:
        raise ConfigurationError.invalid_configuration(
            "locks.backend", f"unknown lock backend '{backend}'"
        )


def lock_key(kind: str, account, zone=None) -> str:
    """Build the lock key for an operation kind on an account and zone.

    Args:
        kind: Operation kind (pull, push, bidirectional)
        account: Account the operation runs against
        zone: Optional hosted zone narrowing the operation

    Returns:
        Key of the form route53_<kind>_<account id>[_<zone remote id>]
    """
    key = f"route53_{kind}_{account.id}"
    if zone is not None:
        key += f"_{zone.remote_id}"
    return key


@contextmanager
def hold_lock(factory: LockFactory, key: str, ttl: float, operation: str) -> Iterator[Lock]:
    """Hold a lock for the duration of the block, failing fast if taken."""
    lock = factory.create_lock(key, ttl)
    if not lock.acquire():
        raise Route53ClientError.lock_acquisition_failed(operation)
    try:
        yield lock
    finally:
        lock.release()
