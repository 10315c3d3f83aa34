"""Texture loading with per-id cancellation."""
from __future__ import annotations

import asyncio
import logging
from typing import Dict, Optional

from blockforge.common.asset_ids import PLACEHOLDER_TEXTURE_ID, normalize_asset_id
from blockforge.common.errors import NotFound
from blockforge.pack_resolver.service import PackResolver
from blockforge.texture_core.backend import decode_texture, placeholder_info
from blockforge.texture_core.models import TextureInfo

logger = logging.getLogger(__name__)


class TextureLoader:
    """
    Loads texture bytes through the pack winner map and decodes them off the event loop.
    Each texture id has at most one load task; cancel() drops it, and anyone awaiting
    a cancelled load gets None instead of an error.
    """

    def __init__(self, packs: PackResolver):
        self._packs = packs
        self._tasks: Dict[str, asyncio.Future] = {}

    def rebind(self, packs: PackResolver) -> None:
        """Pack order changed: pending loads are for stale winners."""
        self._packs = packs
        self.cancel_all()

    def load_sync(self, texture_id: str) -> TextureInfo:
        if texture_id == PLACEHOLDER_TEXTURE_ID:
            return placeholder_info()
        texture_id = normalize_asset_id(texture_id)
        try:
            data = self._packs.lookup_texture(texture_id)
        except NotFound:
            logger.warning("Texture %s missing from every pack; using placeholder", texture_id)
            return placeholder_info(texture_id)
        return decode_texture(texture_id, data)

    async def load(self, texture_id: str) -> Optional[TextureInfo]:
        key = texture_id if texture_id == PLACEHOLDER_TEXTURE_ID else normalize_asset_id(texture_id)
        task = self._tasks.get(key)
        if task is None or task.cancelled():
            loop = asyncio.get_running_loop()
            task = asyncio.ensure_future(loop.run_in_executor(None, self.load_sync, key))
            self._tasks[key] = task
            task.add_done_callback(lambda done, k=key: self._forget(k, done))

        # asyncio.wait does not re-raise the task's own cancellation.
        await asyncio.wait({task})
        if task.cancelled():
            logger.debug("Texture load for %s was cancelled", key)
            return None
        return task.result()

    def _forget(self, key: str, task: asyncio.Future) -> None:
        if self._tasks.get(key) is task:
            del self._tasks[key]

    def cancel(self, texture_id: str) -> bool:
        """Cancel a pending load. Unknown or finished ids are a silent no-op."""
        key = texture_id if texture_id == PLACEHOLDER_TEXTURE_ID else normalize_asset_id(texture_id)
        task = self._tasks.get(key)
        if task is None or task.done():
            return False
        return task.cancel()

    def cancel_all(self) -> None:
        for key in list(self._tasks):
            self.cancel(key)

    def pending(self, texture_id: str) -> bool:
        task = self._tasks.get(normalize_asset_id(texture_id))
        return task is not None and not task.done()
