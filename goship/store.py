"""Key-value store seam used by the deployment locking subsystem.

The notification path never touches the store. It exists so that locking
code can depend on :class:`KeyValueStore` and tests can substitute
:class:`InMemoryKeyValueStore` for a real Redis server.
"""

from __future__ import annotations

import time
import typing as typ

from redis.exceptions import RedisError

from goship.errors import StoreError

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from redis import Redis


class KeyValueStore(typ.Protocol):
    """Minimal get/set capability over a key-value backend."""

    def get(self, key: str) -> str | None:
        """Return the value stored under ``key``, or ``None`` when absent."""
        ...

    def set(self, key: str, value: str, ttl: int = 0) -> None:
        """Store ``value`` under ``key``; ``ttl`` seconds, 0 for no expiry."""
        ...


class RedisKeyValueStore:
    """Redis implementation of :class:`KeyValueStore`.

    Expects a client created with ``decode_responses=True`` so values come
    back as ``str``.
    """

    def __init__(self, client: Redis) -> None:
        """Initialise with a synchronous Redis client."""
        self._client = client

    @classmethod
    def from_url(cls, url: str) -> RedisKeyValueStore:
        """Build a store connected to ``url``."""
        from redis import Redis

        return cls(Redis.from_url(url, encoding="utf-8", decode_responses=True))

    def get(self, key: str) -> str | None:
        """Return the value stored under ``key``, or ``None`` when absent."""
        value = self._client.get(key)
        return None if value is None else str(value)

    def set(self, key: str, value: str, ttl: int = 0) -> None:
        """Store ``value`` under ``key``.

        Raises
        ------
        StoreError
            If ``ttl`` is negative or Redis refuses the write.

        """
        if ttl < 0:
            raise StoreError(key, f"ttl must not be negative, got {ttl}")
        try:
            if ttl > 0:
                self._client.setex(key, ttl, value)
            else:
                self._client.set(key, value)
        except RedisError as exc:
            raise StoreError(key, str(exc)) from exc


class InMemoryKeyValueStore:
    """Process-local :class:`KeyValueStore` for tests."""

    def __init__(self, clock: cabc.Callable[[], float] = time.monotonic) -> None:
        """Initialise an empty store using ``clock`` to expire entries."""
        self._clock = clock
        self._entries: dict[str, tuple[str, float | None]] = {}

    def get(self, key: str) -> str | None:
        """Return the value stored under ``key``, or ``None`` when absent."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and self._clock() >= expires_at:
            del self._entries[key]
            return None
        return value

    def set(self, key: str, value: str, ttl: int = 0) -> None:
        """Store ``value`` under ``key``; a negative ``ttl`` is rejected."""
        if ttl < 0:
            raise StoreError(key, f"ttl must not be negative, got {ttl}")
        expires_at = self._clock() + ttl if ttl else None
        self._entries[key] = (value, expires_at)
