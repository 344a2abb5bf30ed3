"""Tests for wren.prerender.cache — LRU + TTL cache with single-flight loads."""

import anyio
import pytest

from wren.prerender.cache import PrerenderCache


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def _loader(value: str, calls: list[str]):
    async def load() -> str:
        calls.append(value)
        return value

    return load


class TestConstruction:
    def test_rejects_zero_capacity(self) -> None:
        with pytest.raises(ValueError):
            PrerenderCache(max_entries=0)

    def test_rejects_non_positive_ttl(self) -> None:
        with pytest.raises(ValueError):
            PrerenderCache(ttl=0)


class TestLRU:
    def test_overflow_evicts_exactly_one(self) -> None:
        cache = PrerenderCache(max_entries=3)
        for key in ("a", "b", "c"):
            cache.set(key, key.upper())

        cache.set("d", "D")

        assert len(cache) == 3
        assert "a" not in cache
        assert all(k in cache for k in ("b", "c", "d"))

    def test_evicts_least_recently_accessed(self) -> None:
        cache = PrerenderCache(max_entries=3)
        for key in ("a", "b", "c"):
            cache.set(key, key.upper())

        assert cache.peek("a") == "A"  # "b" is now least recently used
        cache.set("d", "D")

        assert "b" not in cache
        assert cache.peek("a") == "A"

    def test_replace_refreshes_recency(self) -> None:
        cache = PrerenderCache(max_entries=2)
        cache.set("a", "1")
        cache.set("b", "2")
        cache.set("a", "3")
        cache.set("c", "4")

        assert cache.peek("a") == "3"
        assert "b" not in cache

    def test_invalidate_and_clear(self) -> None:
        cache = PrerenderCache()
        cache.set("a", "1")
        cache.set("b", "2")

        cache.invalidate("a")
        assert "a" not in cache
        cache.clear()
        assert len(cache) == 0


class TestTTL:
    def test_present_before_expiry_absent_after(self) -> None:
        clock = FakeClock()
        cache = PrerenderCache(ttl=10, clock=clock)
        cache.set("/a", "<html>")

        clock.advance(9.9)
        assert cache.peek("/a") == "<html>"

        clock.advance(0.1)
        assert cache.peek("/a") is None

    def test_measured_from_insertion_not_access(self) -> None:
        clock = FakeClock()
        cache = PrerenderCache(ttl=10, clock=clock)
        cache.set("/a", "<html>")

        for _ in range(4):
            clock.advance(2)
            assert cache.peek("/a") == "<html>"

        clock.advance(2)  # 10s since insertion despite recent reads
        assert cache.peek("/a") is None

    def test_expired_entries_not_counted(self) -> None:
        clock = FakeClock()
        cache = PrerenderCache(ttl=5, clock=clock)
        cache.set("a", "1")
        clock.advance(6)
        cache.set("b", "2")

        assert len(cache) == 1

    @pytest.mark.anyio
    async def test_expired_entry_is_reloaded(self) -> None:
        clock = FakeClock()
        cache = PrerenderCache(ttl=10, clock=clock)
        calls: list[str] = []

        await cache.get("/a", _loader("v1", calls))
        clock.advance(11)
        assert await cache.get("/a", _loader("v2", calls)) == "v2"
        assert calls == ["v1", "v2"]


class TestReadThrough:
    @pytest.mark.anyio
    async def test_miss_loads_and_stores(self) -> None:
        cache = PrerenderCache()
        calls: list[str] = []

        assert await cache.get("/a", _loader("html", calls)) == "html"
        assert cache.peek("/a") == "html"
        assert calls == ["html"]

    @pytest.mark.anyio
    async def test_hit_skips_load(self) -> None:
        cache = PrerenderCache()
        cache.set("/a", "cached")
        calls: list[str] = []

        assert await cache.get("/a", _loader("fresh", calls)) == "cached"
        assert calls == []

    @pytest.mark.anyio
    async def test_failed_load_not_cached(self) -> None:
        cache = PrerenderCache()

        async def boom() -> str:
            raise OSError("disk")

        with pytest.raises(OSError, match="disk"):
            await cache.get("/a", boom)
        assert "/a" not in cache

        calls: list[str] = []
        assert await cache.get("/a", _loader("ok", calls)) == "ok"


class TestSingleFlight:
    @pytest.mark.anyio
    async def test_fifty_concurrent_gets_one_read(self) -> None:
        cache = PrerenderCache()
        reads = 0
        results: list[str] = []

        async def slow_read() -> str:
            nonlocal reads
            reads += 1
            await anyio.sleep(0.05)
            return "<html>detail</html>"

        async def request() -> None:
            results.append(await cache.get("/detail/42", slow_read))

        async with anyio.create_task_group() as tg:
            for _ in range(50):
                tg.start_soon(request)

        assert reads == 1
        assert results == ["<html>detail</html>"] * 50

    @pytest.mark.anyio
    async def test_waiters_share_leader_error(self) -> None:
        cache = PrerenderCache()
        reads = 0
        errors: list[Exception] = []

        async def failing_read() -> str:
            nonlocal reads
            reads += 1
            await anyio.sleep(0.05)
            raise OSError("gone")

        async def request() -> None:
            try:
                await cache.get("/a", failing_read)
            except OSError as exc:
                errors.append(exc)

        async with anyio.create_task_group() as tg:
            for _ in range(10):
                tg.start_soon(request)

        assert reads == 1
        assert len(errors) == 10

    @pytest.mark.anyio
    async def test_independent_keys_do_not_block(self) -> None:
        cache = PrerenderCache()
        release = anyio.Event()
        finished: list[str] = []

        async def blocked_read() -> str:
            await release.wait()
            return "slow"

        async def fast_read() -> str:
            return "fast"

        async def slow_request() -> None:
            finished.append(await cache.get("/slow", blocked_read))

        async def fast_request() -> None:
            finished.append(await cache.get("/fast", fast_read))
            release.set()

        async with anyio.create_task_group() as tg:
            tg.start_soon(slow_request)
            await anyio.sleep(0.01)
            tg.start_soon(fast_request)

        assert finished == ["fast", "slow"]

    @pytest.mark.anyio
    async def test_clear_during_load_discards_result(self) -> None:
        cache = PrerenderCache()
        release = anyio.Event()
        results: list[str] = []

        async def stale_read() -> str:
            await release.wait()
            return "old"

        async def request() -> None:
            results.append(await cache.get("/a", stale_read))

        async with anyio.create_task_group() as tg:
            tg.start_soon(request)
            await anyio.sleep(0.01)
            cache.clear()
            release.set()

        assert results == ["old"]
        assert cache.peek("/a") is None

    @pytest.mark.anyio
    async def test_invalidate_during_load_discards_result(self) -> None:
        cache = PrerenderCache()
        release = anyio.Event()

        async def stale_read() -> str:
            await release.wait()
            return "old"

        async with anyio.create_task_group() as tg:
            tg.start_soon(cache.get, "/a", stale_read)
            await anyio.sleep(0.01)
            cache.invalidate("/a")
            release.set()

        assert "/a" not in cache

    @pytest.mark.anyio
    async def test_load_after_clear_does_not_join_stale_flight(self) -> None:
        cache = PrerenderCache()
        release = anyio.Event()
        calls: list[str] = []
        results: list[str] = []

        async def stale_read() -> str:
            await release.wait()
            return "old"

        async def stale_request() -> None:
            results.append(await cache.get("/a", stale_read))

        async with anyio.create_task_group() as tg:
            tg.start_soon(stale_request)
            await anyio.sleep(0.01)
            cache.clear()
            assert await cache.get("/a", _loader("new", calls)) == "new"
            release.set()

        assert calls == ["new"]
        assert results == ["old"]
        assert cache.peek("/a") == "new"

    @pytest.mark.anyio
    async def test_cancelled_leader_hands_over(self) -> None:
        cache = PrerenderCache()
        reads = 0

        async def read() -> str:
            nonlocal reads
            reads += 1
            await anyio.sleep(0.05)
            return "html"

        results: list[str] = []

        async def follower() -> None:
            results.append(await cache.get("/a", read))

        async with anyio.create_task_group() as tg:
            with anyio.move_on_after(0.01):
                await cache.get("/a", read)
            # leader above was cancelled; a new caller must still succeed
            tg.start_soon(follower)

        assert results == ["html"]
        assert reads == 2
