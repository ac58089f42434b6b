"""
Tests for the two-tier stand cache.

Redis is replaced with a MagicMock client; no server is needed.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock, patch

import redis

from standfinder.cache import CacheEntry, RedisTier, StandCache
from standfinder.config import CacheConfig, RedisConfig


def make_entry(data, ttl_seconds=60) -> CacheEntry:
    now = datetime.now(timezone.utc)
    return CacheEntry(data=data, timestamp=now, expires_at=now + timedelta(seconds=ttl_seconds))


# =============================================================================
# MEMORY TIER
# =============================================================================


class TestMemoryTier:
    def test_get_after_set(self):
        cache = StandCache()
        cache.set('stand:BA1489:EGLL:2024-01-15', {'stand': '515'})

        assert cache.get('stand:BA1489:EGLL:2024-01-15') == {'stand': '515'}

    def test_missing_key_returns_none(self):
        assert StandCache().get('nope') is None

    def test_expired_entry_is_dropped(self):
        cache = StandCache()
        cache._cache['old'] = make_entry('value', ttl_seconds=-1)

        assert cache.get('old') is None
        assert 'old' not in cache._cache

    def test_delete_and_clear(self):
        cache = StandCache()
        cache.set('a', 1)
        cache.set('b', 2)

        cache.delete('a')
        assert cache.get('a') is None
        assert cache.get('b') == 2

        cache.clear()
        assert cache.get('b') is None

    def test_eviction_removes_oldest(self):
        cache = StandCache(max_entries=10)
        for i in range(11):
            cache.set(f'k{i}', i)

        assert cache.stats['entries'] == 10
        assert cache.get('k0') is None
        assert cache.get('k10') == 10

    def test_stats_track_hits_and_misses(self):
        cache = StandCache()
        cache.set('a', 1)
        cache.get('a')
        cache.get('b')

        stats = cache.stats
        assert stats['hits'] == 1
        assert stats['misses'] == 1
        assert stats['hit_rate'] == 0.5
        assert stats['shared_tier'] is False


# =============================================================================
# SHARED TIER
# =============================================================================


class TestSharedTier:
    def test_set_writes_both_tiers_with_same_ttl(self):
        client = MagicMock()
        cache = StandCache(ttl_seconds=3600, shared=RedisTier(client, key_prefix='sf:'))

        cache.set('k', {'stand': 'B32'}, ttl_seconds=86400)

        key, ttl, payload = client.setex.call_args.args
        assert key == 'sf:k'
        assert ttl == 86400
        assert CacheEntry.from_json(payload).data == {'stand': 'B32'}
        assert cache._cache['k'].data == {'stand': 'B32'}

    def test_shared_hit_backfills_memory(self):
        client = MagicMock()
        client.get.return_value = make_entry({'stand': 'B32'}).to_json()
        cache = StandCache(shared=RedisTier(client))

        assert cache.get('k') == {'stand': 'B32'}
        assert 'k' in cache._cache

        client.get.reset_mock()
        assert cache.get('k') == {'stand': 'B32'}
        client.get.assert_not_called()

    def test_shared_failures_degrade_to_memory(self):
        client = MagicMock()
        client.get.side_effect = redis.ConnectionError('down')
        client.setex.side_effect = redis.ConnectionError('down')
        client.delete.side_effect = redis.ConnectionError('down')
        cache = StandCache(shared=RedisTier(client))

        cache.set('k', 1)
        assert cache.get('k') == 1
        assert cache.get('missing') is None
        cache.delete('k')
        assert cache.get('k') is None

    def test_corrupt_shared_entry_is_a_miss(self):
        client = MagicMock()
        client.get.return_value = 'not json'
        cache = StandCache(shared=RedisTier(client))

        assert cache.get('k') is None

    def test_clear_only_touches_own_namespace(self):
        client = MagicMock()
        client.scan_iter.return_value = iter(['sf:a', 'sf:b'])
        cache = StandCache(shared=RedisTier(client, key_prefix='sf:'))

        cache.clear()

        client.scan_iter.assert_called_once_with(match='sf:*')
        client.delete.assert_called_once_with('sf:a', 'sf:b')


class TestConnect:
    def test_disabled_returns_none(self):
        assert RedisTier.connect(RedisConfig(url='redis://localhost:6379', enabled=False)) is None

    def test_unreachable_returns_none(self):
        with patch('standfinder.cache.redis.from_url') as from_url:
            from_url.return_value.ping.side_effect = redis.ConnectionError('refused')

            assert RedisTier.connect(RedisConfig(url='redis://localhost:6379', enabled=True)) is None

    def test_connected_tier_used_by_cache(self):
        with patch('standfinder.cache.redis.from_url') as from_url:
            cache = StandCache.from_config(
                CacheConfig(ttl_seconds=120, max_entries=5),
                RedisConfig(url='redis://localhost:6379', enabled=True, key_prefix='t:'),
            )

        from_url.assert_called_once()
        assert cache.shared is not None
        assert cache.shared.key_prefix == 't:'
        assert cache.ttl_seconds == 120
        assert cache.stats['shared_tier'] is True
