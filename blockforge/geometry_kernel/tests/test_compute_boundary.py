"""Tests for the async compute boundary and the geometry cache."""
import asyncio
import threading
import time

import pytest

from blockforge.geometry_kernel import compute_boundary
from blockforge.geometry_kernel.cache import GeometryCache, GeometryKey
from blockforge.geometry_kernel.compute_boundary import GeometryComputeBoundary
from blockforge.geometry_kernel.schemas import GeometryBuffers
from blockforge.geometry_kernel.service import compute_model_geometry
from blockforge.model_resolver.schemas import ResolvedModel, ResolvedModelPart

FACES = ("down", "up", "north", "south", "east", "west")


def _model(block_id, height=16, rotation_angle=None):
    element = {
        "from": [0, 0, 0], "to": [16, height, 16],
        "faces": {d: {"texture": "#all", "tintindex": 0 if d == "up" else None} for d in FACES},
    }
    element["faces"] = {d: {k: v for k, v in f.items() if v is not None} for d, f in element["faces"].items()}
    element["faces"]["north"]["uv"] = [0, 0, 8, 8]
    element["faces"]["north"]["rotation"] = 270
    if rotation_angle is not None:
        element["rotation"] = {"origin": [8, 8, 8], "axis": "z", "angle": rotation_angle}
    part = ResolvedModelPart(model_id=f"{block_id}_model", elements=[element], textures={"all": "minecraft:block/stone"})
    return ResolvedModel(block_id=block_id, parts=[part])


class TestSyncAsyncSymmetry:
    """Inline and async outputs must match exactly."""

    def test_async_matches_inline(self):
        model = _model("minecraft:a", height=5, rotation_angle=-22.5)

        async def run():
            boundary = GeometryComputeBoundary(max_workers=2, timeout=10)
            try:
                return await boundary.compute("req-1", model, tint=[1, 2, 3])
            finally:
                boundary.close()

        result = asyncio.run(run())
        inline = compute_model_geometry(model, [1, 2, 3])
        assert result.source == "async"
        assert result.request_id == "req-1"
        assert result.buffers.model_dump() == inline.model_dump()
        assert result.buffers.digest() == inline.digest()
        for name, array in result.buffers.packed().items():
            assert array.tobytes() == inline.packed()[name].tobytes()

    def test_concurrent_requests_keep_their_own_results(self):
        models = {f"req-{i}": _model(f"minecraft:block_{i}", height=i + 1) for i in range(8)}

        async def run():
            boundary = GeometryComputeBoundary(max_workers=4, timeout=10)
            try:
                return await asyncio.gather(*(boundary.compute(rid, m) for rid, m in models.items()))
            finally:
                boundary.close()

        for result in asyncio.run(run()):
            expected = compute_model_geometry(models[result.request_id])
            assert result.buffers.digest() == expected.digest()

    def test_timeout_falls_back_inline(self, monkeypatch):
        real = compute_boundary.compute_model_geometry

        def slow_off_main_thread(model, tint=None):
            if threading.current_thread() is not threading.main_thread():
                time.sleep(0.5)
            return real(model, tint)

        monkeypatch.setattr(compute_boundary, "compute_model_geometry", slow_off_main_thread)
        model = _model("minecraft:slow")

        async def run():
            boundary = GeometryComputeBoundary(max_workers=1, timeout=0.05)
            try:
                return await boundary.compute("req-slow", model)
            finally:
                boundary.close()

        result = asyncio.run(run())
        assert result.source == "inline"
        assert result.fallback_reason == "geometry.compute_timeout"
        assert result.buffers.digest() == real(model).digest()

    def test_closed_boundary_and_disabled_flag_compute_inline(self, monkeypatch):
        model = _model("minecraft:x")

        async def run(boundary):
            return await boundary.compute("r", model)

        closed = GeometryComputeBoundary(max_workers=1)
        closed.close()
        assert asyncio.run(run(closed)).source == "inline"

        monkeypatch.setenv("BLOCKFORGE_ASYNC_COMPUTE", "off")
        disabled = GeometryComputeBoundary(max_workers=1)
        try:
            assert asyncio.run(run(disabled)).source == "inline"
        finally:
            disabled.close()


def _marker(value):
    return GeometryBuffers(positions=[float(value)])


class TestGeometryCache:
    """Keyed, superseding, invalidatable cache."""

    def test_key_normalizes_properties(self):
        a = GeometryKey.of("stone", {"b": True, "a": 1}, seed=3)
        b = GeometryKey.of("minecraft:stone", {"a": "1", "b": "true"}, seed=3)
        assert a == b

    def test_cached_result_skips_factory(self):
        calls = []

        async def factory():
            calls.append(1)
            return _marker(1)

        async def run():
            cache = GeometryCache()
            key = GeometryKey.of("minecraft:stone")
            first = await cache.get_or_compute(key, factory)
            second = await cache.get_or_compute(key, factory)
            return first, second

        first, second = asyncio.run(run())
        assert first is second
        assert len(calls) == 1

    def test_superseding_request_resolves_all_waiters_to_latest(self):
        async def run():
            cache = GeometryCache()
            key = GeometryKey.of("minecraft:stone")
            gate = asyncio.Event()

            async def slow():
                await gate.wait()
                return _marker(1)

            async def fresh():
                return _marker(2)

            w1 = asyncio.create_task(cache.get_or_compute(key, slow))
            await asyncio.sleep(0)
            await asyncio.sleep(0)
            assert cache.pending(key)
            w2 = asyncio.create_task(cache.get_or_compute(key, fresh))
            results = await asyncio.gather(w1, w2)
            gate.set()
            return results, cache.get(key)

        (r1, r2), cached = asyncio.run(run())
        assert r1 is r2
        assert r1.positions == [2.0]
        assert cached is r1

    def test_result_for_inactive_key_is_discarded(self):
        async def run():
            cache = GeometryCache()
            old = GeometryKey.of("minecraft:stone", {"lit": "false"})
            new = GeometryKey.of("minecraft:stone", {"lit": "true"})
            cache.set_active_key(old)
            gate = asyncio.Event()

            async def slow():
                await gate.wait()
                return _marker(1)

            waiter = asyncio.create_task(cache.get_or_compute(old, slow))
            await asyncio.sleep(0)
            cache.set_active_key(new)
            gate.set()
            return await waiter, cache.get(old)

        result, cached = asyncio.run(run())
        assert result is None
        assert cached is None

    def test_invalidate_drops_results_and_inflight(self):
        async def run():
            cache = GeometryCache()
            stone = GeometryKey.of("minecraft:stone")
            dirt = GeometryKey.of("minecraft:dirt")

            async def make(v):
                return _marker(v)

            await cache.get_or_compute(stone, lambda: make(1))
            await cache.get_or_compute(dirt, lambda: make(2))
            dropped = cache.invalidate("stone")
            gate = asyncio.Event()

            async def slow():
                await gate.wait()
                return _marker(3)

            waiter = asyncio.create_task(cache.get_or_compute(stone, slow))
            await asyncio.sleep(0)
            cache.invalidate()
            gate.set()
            return dropped, await waiter, len(cache)

        dropped, stale, remaining = asyncio.run(run())
        assert dropped == 1
        assert stale is None
        assert remaining == 0

    def test_factory_errors_reach_waiters(self):
        async def broken():
            raise ValueError("boom")

        async def run():
            cache = GeometryCache()
            key = GeometryKey.of("minecraft:stone")
            with pytest.raises(ValueError):
                await cache.get_or_compute(key, broken)
            return cache.pending(key)

        assert asyncio.run(run()) is False

    def test_results_are_bounded_least_recently_used(self):
        async def run():
            cache = GeometryCache(max_entries=2)
            keys = [GeometryKey.of(f"minecraft:block_{i}") for i in range(3)]
            for i, key in enumerate(keys[:2]):
                await cache.get_or_compute(key, lambda i=i: asyncio.sleep(0, result=_marker(i)))
            cache.get(keys[0])
            await cache.get_or_compute(keys[2], lambda: asyncio.sleep(0, result=_marker(2)))
            return cache, keys

        cache, keys = asyncio.run(run())
        assert len(cache) == 2
        assert cache.get(keys[1]) is None
        assert cache.get(keys[0]).positions == [0.0]
        assert cache.get(keys[2]).positions == [2.0]
