"""
Unit tests for the adjacency TTL cache.
"""

from socialgraph.core.cache import AdjacencyCache


class FakeTimer:
    """Manually advanced clock for TTL expiry."""

    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def test_miss_then_hit():
    cache = AdjacencyCache(ttl=60)

    assert cache.get_following("alice") is None
    cache.set_following("alice", ["bob", "carol"])

    assert cache.get_following("alice") == frozenset({"bob", "carol"})
    stats = cache.stats()
    assert stats.hits == 1
    assert stats.misses == 1


def test_directions_are_separate():
    cache = AdjacencyCache(ttl=60)
    cache.set_following("alice", ["bob"])

    assert cache.get_followers("alice") is None
    cache.set_followers("alice", ["dan"])
    assert cache.get_followers("alice") == frozenset({"dan"})
    assert cache.get_following("alice") == frozenset({"bob"})


def test_empty_set_is_a_hit():
    cache = AdjacencyCache(ttl=60)
    cache.set_following("loner", [])

    assert cache.get_following("loner") == frozenset()
    assert cache.stats().hits == 1


def test_entries_expire_after_ttl():
    timer = FakeTimer()
    cache = AdjacencyCache(ttl=10, timer=timer)
    cache.set_following("alice", ["bob"])

    timer.now = 9.0
    assert cache.get_following("alice") == frozenset({"bob"})

    timer.now = 11.0
    assert cache.get_following("alice") is None


def test_invalidate_drops_both_directions():
    cache = AdjacencyCache(ttl=60)
    cache.set_following("alice", ["bob"])
    cache.set_followers("alice", ["carol"])
    cache.set_following("bob", ["alice"])

    cache.invalidate("alice", "nobody")

    assert cache.get_following("alice") is None
    assert cache.get_followers("alice") is None
    assert cache.get_following("bob") == frozenset({"alice"})


def test_clear_and_size():
    cache = AdjacencyCache(ttl=60, maxsize=100)
    cache.set_following("alice", ["bob"])
    cache.set_followers("bob", ["alice"])

    stats = cache.stats()
    assert stats.size == 2
    assert stats.maxsize == 100
    assert stats.ttl == 60

    cache.clear()
    assert cache.stats().size == 0


def test_maxsize_evicts():
    cache = AdjacencyCache(ttl=60, maxsize=2)
    for user_id in ("a", "b", "c"):
        cache.set_following(user_id, ["x"])

    assert cache.stats().size == 2


def test_fill_after_invalidation_is_dropped():
    cache = AdjacencyCache(ttl=60)
    version = cache.version("alice")

    # A write lands between the store read and the fill
    cache.invalidate("alice")
    served = cache.set_following("alice", ["bob"], version=version)

    assert served == frozenset({"bob"})
    assert cache.get_following("alice") is None
    assert cache.stats().stale_fills == 1


def test_fill_with_current_version_is_kept():
    cache = AdjacencyCache(ttl=60)
    cache.invalidate("alice")
    version = cache.version("alice")

    cache.set_followers("alice", ["dan"], version=version)

    assert cache.get_followers("alice") == frozenset({"dan"})
    assert cache.stats().stale_fills == 0


def test_invalidating_other_users_keeps_fill():
    cache = AdjacencyCache(ttl=60)
    version = cache.version("alice")
    cache.invalidate("bob")

    cache.set_following("alice", ["carol"], version=version)
    assert cache.get_following("alice") == frozenset({"carol"})
