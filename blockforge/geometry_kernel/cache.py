"""Session-scoped geometry cache with per-key request superseding."""
from __future__ import annotations

import asyncio
import logging
from collections import OrderedDict
from typing import Any, Awaitable, Callable, Dict, Mapping, NamedTuple, Optional, Sequence, Tuple

from blockforge.common.asset_ids import normalize_asset_id
from blockforge.config.runtime_config import get_geometry_cache_size
from blockforge.geometry_kernel.schemas import GeometryBuffers

logger = logging.getLogger(__name__)


class GeometryKey(NamedTuple):
    asset_id: str
    properties: Tuple[Tuple[str, str], ...]
    seed: Optional[int]
    tint: Optional[Tuple[int, int, int]]

    @classmethod
    def of(
        cls,
        asset_id: str,
        properties: Optional[Mapping[str, Any]] = None,
        seed: Optional[int] = None,
        tint: Optional[Sequence[int]] = None,
    ) -> "GeometryKey":
        props = tuple(sorted((str(k), str(v).lower() if isinstance(v, bool) else str(v))
                             for k, v in (properties or {}).items()))
        return cls(normalize_asset_id(asset_id), props, seed, tuple(tint) if tint is not None else None)


class _InFlight:
    """Shared future for every waiter on a key, plus the task currently feeding it."""

    def __init__(self, future: asyncio.Future):
        self.future = future
        self.task: Optional[asyncio.Task] = None
        self.stale = False


Factory = Callable[[], Awaitable[GeometryBuffers]]


class GeometryCache:
    """
    At most one in-flight computation per key.
    A new request for a pending key cancels the old task; all waiters get the
    latest result. Results for keys that are no longer active, or that were
    invalidated mid-flight, are discarded (waiters receive None). Stored results
    are kept least-recently-used first and trimmed to max_entries.
    """

    def __init__(self, max_entries: Optional[int] = None):
        self.max_entries = max_entries if max_entries is not None else get_geometry_cache_size()
        self._results: OrderedDict[GeometryKey, GeometryBuffers] = OrderedDict()
        self._inflight: Dict[GeometryKey, _InFlight] = {}
        self._active_key: Optional[GeometryKey] = None

    # --- Keys ---

    @property
    def active_key(self) -> Optional[GeometryKey]:
        return self._active_key

    def set_active_key(self, key: Optional[GeometryKey]) -> None:
        self._active_key = key

    # --- Reads ---

    def get(self, key: GeometryKey) -> Optional[GeometryBuffers]:
        buffers = self._results.get(key)
        if buffers is not None:
            self._results.move_to_end(key)
        return buffers

    def pending(self, key: GeometryKey) -> bool:
        return key in self._inflight

    def __len__(self) -> int:
        return len(self._results)

    # --- Compute ---

    async def get_or_compute(self, key: GeometryKey, factory: Factory, force: bool = False) -> Optional[GeometryBuffers]:
        if not force and key in self._results:
            self._results.move_to_end(key)
            return self._results[key]

        slot = self._inflight.get(key)
        if slot is not None and slot.stale:
            self._retire(key, slot)
            slot = None
        if slot is None:
            slot = _InFlight(asyncio.get_running_loop().create_future())
            self._inflight[key] = slot
        elif slot.task is not None and not slot.task.done():
            logger.debug("Superseding pending geometry for %s", key.asset_id)
            slot.task.cancel()

        slot.task = asyncio.create_task(self._run(key, slot, factory))
        return await asyncio.shield(slot.future)

    async def _run(self, key: GeometryKey, slot: _InFlight, factory: Factory) -> None:
        me = asyncio.current_task()
        try:
            buffers = await factory()
        except asyncio.CancelledError:
            if slot.task is me and not slot.future.done():
                # Cancelled from outside rather than superseded.
                self._release(key, slot)
                slot.future.set_result(None)
            raise
        except Exception as exc:
            if slot.task is me:
                self._release(key, slot)
                if not slot.future.done():
                    slot.future.set_exception(exc)
            return

        if slot.task is not me:
            return
        self._release(key, slot)
        if slot.future.done():
            return
        if slot.stale or (self._active_key is not None and key != self._active_key):
            logger.debug("Discarding stale geometry for %s", key.asset_id)
            slot.future.set_result(None)
            return
        self._store(key, buffers)
        slot.future.set_result(buffers)

    def _store(self, key: GeometryKey, buffers: GeometryBuffers) -> None:
        self._results[key] = buffers
        self._results.move_to_end(key)
        while len(self._results) > self.max_entries:
            evicted, _ = self._results.popitem(last=False)
            logger.debug("Evicted cached geometry for %s", evicted.asset_id)

    def _release(self, key: GeometryKey, slot: _InFlight) -> None:
        if self._inflight.get(key) is slot:
            del self._inflight[key]

    def _retire(self, key: GeometryKey, slot: _InFlight) -> None:
        self._release(key, slot)
        if slot.task is not None and not slot.task.done():
            slot.task.cancel()
        if not slot.future.done():
            slot.future.set_result(None)

    # --- Invalidation ---

    def invalidate(self, asset_id: Optional[str] = None) -> int:
        """Drop cached and in-flight entries (all, or those of one asset). Returns dropped count."""
        target = normalize_asset_id(asset_id) if asset_id else None

        def matches(key: GeometryKey) -> bool:
            return target is None or key.asset_id == target

        dropped = [key for key in self._results if matches(key)]
        for key in dropped:
            del self._results[key]
        for key, slot in list(self._inflight.items()):
            if matches(key):
                slot.stale = True
        if dropped:
            logger.info("Invalidated %d cached geometries%s", len(dropped), f" for {target}" if target else "")
        return len(dropped)
