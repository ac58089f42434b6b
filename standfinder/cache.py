"""
Two-tier cache for stand resolutions.

Tier 1 is a thread-safe in-process dict: always available, and the
authority for correctness within a single process.
Tier 2 is an optional Redis instance shared across processes. It is
best-effort: if it is disabled, unreachable, or fails mid-operation,
the cache silently behaves as tier 1 only.

Entries carry their own expiry, so a value backfilled from Redis into
memory keeps the TTL it was written with.
"""

import json
import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import redis

from standfinder.config import CacheConfig, RedisConfig
from standfinder.errors import CacheError

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    """Cached value plus write and expiry timestamps (UTC)."""
    data: Any
    timestamp: datetime
    expires_at: datetime

    @property
    def is_expired(self) -> bool:
        return self.expires_at <= datetime.now(timezone.utc)

    def to_json(self) -> str:
        return json.dumps({
            'data': self.data,
            'timestamp': self.timestamp.isoformat(),
            'expires_at': self.expires_at.isoformat(),
        })

    @classmethod
    def from_json(cls, raw: str) -> 'CacheEntry':
        parsed = json.loads(raw)
        return cls(
            data=parsed['data'],
            timestamp=datetime.fromisoformat(parsed['timestamp']),
            expires_at=datetime.fromisoformat(parsed['expires_at']),
        )


class RedisTier:
    """
    Thin wrapper over a Redis client.

    Every Redis failure surfaces as CacheError so StandCache has a single
    exception type to absorb.
    """

    def __init__(self, client: redis.Redis, key_prefix: str = 'standfinder:'):
        self.client = client
        self.key_prefix = key_prefix

    @classmethod
    def connect(cls, redis_config: RedisConfig) -> Optional['RedisTier']:
        """
        Connect to the configured Redis server.

        Returns None (fast tier only) when Redis is disabled or unreachable.
        """
        if not redis_config.is_configured:
            return None

        try:
            client = redis.from_url(
                redis_config.url,
                decode_responses=True,
                socket_connect_timeout=2,
                socket_timeout=2,
            )
            client.ping()
        except (redis.RedisError, ValueError) as e:
            logger.warning(f'Redis not available: {e}. Using memory cache only.')
            return None

        logger.info('Redis connected')
        return cls(client, key_prefix=redis_config.key_prefix)

    def _key(self, key: str) -> str:
        return f'{self.key_prefix}{key}'

    def get(self, key: str) -> Optional[CacheEntry]:
        try:
            raw = self.client.get(self._key(key))
        except redis.RedisError as e:
            raise CacheError('get', key, str(e)) from e
        if raw is None:
            return None
        try:
            return CacheEntry.from_json(raw)
        except (ValueError, KeyError, TypeError) as e:
            raise CacheError('get', key, f'Corrupt entry: {e}') from e

    def set(self, key: str, entry: CacheEntry, ttl_seconds: int) -> None:
        try:
            self.client.setex(self._key(key), ttl_seconds, entry.to_json())
        except (redis.RedisError, TypeError) as e:
            raise CacheError('set', key, str(e)) from e

    def delete(self, key: str) -> None:
        try:
            self.client.delete(self._key(key))
        except redis.RedisError as e:
            raise CacheError('delete', key, str(e)) from e

    def clear(self) -> None:
        # Only our namespace; the Redis database may be shared
        try:
            keys = list(self.client.scan_iter(match=f'{self.key_prefix}*'))
            if keys:
                self.client.delete(*keys)
        except redis.RedisError as e:
            raise CacheError('clear', message=str(e)) from e


class StandCache:
    """
    Memory-first cache with an optional shared Redis tier.

    Values must be JSON-serializable when the shared tier is enabled.
    """

    def __init__(
        self,
        ttl_seconds: int = 3600,
        max_entries: int = 1000,
        shared: Optional[RedisTier] = None,
    ):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self.shared = shared

        self._cache: Dict[str, CacheEntry] = {}
        self._lock = threading.RLock()

        # Statistics
        self._hits = 0
        self._misses = 0

    @classmethod
    def from_config(cls, cache_config: CacheConfig, redis_config: RedisConfig) -> 'StandCache':
        """Create a cache from application configuration."""
        return cls(
            ttl_seconds=cache_config.ttl_seconds,
            max_entries=cache_config.max_entries,
            shared=RedisTier.connect(redis_config),
        )

    def get(self, key: str) -> Optional[Any]:
        """
        Get a cached value.

        Returns None if not cached (in either tier) or expired.
        """
        with self._lock:
            entry = self._cache.get(key)
            if entry is not None:
                if not entry.is_expired:
                    self._hits += 1
                    return entry.data
                # Expired
                del self._cache[key]

        if self.shared is not None:
            try:
                entry = self.shared.get(key)
            except CacheError as e:
                logger.error(f'Redis get error for {key}: {e}')
                entry = None

            if entry is not None and not entry.is_expired:
                # Backfill memory for faster access next time
                with self._lock:
                    self._store(key, entry)
                    self._hits += 1
                return entry.data

        with self._lock:
            self._misses += 1
        return None

    def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
        """Write a value to both tiers with the same TTL."""
        ttl = ttl_seconds or self.ttl_seconds
        now = datetime.now(timezone.utc)
        entry = CacheEntry(
            data=value,
            timestamp=now,
            expires_at=now + timedelta(seconds=ttl),
        )

        with self._lock:
            self._store(key, entry)

        if self.shared is not None:
            try:
                self.shared.set(key, entry, ttl)
            except CacheError as e:
                logger.error(f'Redis set error for {key}: {e}')

    def delete(self, key: str) -> None:
        """Remove an entry from both tiers."""
        with self._lock:
            self._cache.pop(key, None)

        if self.shared is not None:
            try:
                self.shared.delete(key)
            except CacheError as e:
                logger.error(f'Redis delete error for {key}: {e}')

    def clear(self) -> None:
        """Clear entire cache."""
        with self._lock:
            self._cache.clear()

        if self.shared is not None:
            try:
                self.shared.clear()
            except CacheError as e:
                logger.error(f'Redis clear error: {e}')

    def _store(self, key: str, entry: CacheEntry) -> None:
        """Insert into the memory tier. Caller holds the lock."""
        self._cache[key] = entry

        # Evict if over capacity
        if len(self._cache) > self.max_entries:
            self._evict_oldest()

    def _evict_oldest(self) -> None:
        """Remove oldest entries when over capacity."""
        entries = sorted(
            self._cache.items(),
            key=lambda x: x[1].timestamp
        )
        # Remove oldest 10%
        to_remove = max(1, len(entries) // 10)
        for key, _ in entries[:to_remove]:
            del self._cache[key]

    @property
    def stats(self) -> dict:
        """Get cache statistics."""
        with self._lock:
            return {
                'entries': len(self._cache),
                'hits': self._hits,
                'misses': self._misses,
                'hit_rate': self._hits / (self._hits + self._misses) if (self._hits + self._misses) > 0 else 0,
                'shared_tier': self.shared is not None,
            }
