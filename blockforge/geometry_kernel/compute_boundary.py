"""Non-blocking compute boundary for geometry, with inline fallback."""
from __future__ import annotations

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Literal, Optional, Sequence

from pydantic import BaseModel

from blockforge.common.errors import ComputeTimeout
from blockforge.config.runtime_config import (
    get_compute_timeout_seconds, get_compute_workers, is_async_compute_enabled,
)
from blockforge.geometry_kernel.schemas import GeometryBuffers
from blockforge.geometry_kernel.service import compute_model_geometry
from blockforge.model_resolver.schemas import ResolvedModel

logger = logging.getLogger(__name__)


class ComputeResult(BaseModel):
    """Buffers tagged with the id of the request that asked for them."""
    request_id: str
    buffers: GeometryBuffers
    source: Literal["async", "inline"]
    fallback_reason: Optional[str] = None


class GeometryComputeBoundary:
    """
    Runs compute_model_geometry on a worker pool.
    Results never cross requests: each call awaits its own executor future.
    """

    def __init__(self, max_workers: Optional[int] = None, timeout: Optional[float] = None):
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers or get_compute_workers(),
            thread_name_prefix="blockforge-geometry",
        )
        self._timeout = timeout
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def compute_inline(
        self, request_id: str, model: ResolvedModel, tint: Optional[Sequence[int]] = None,
        fallback_reason: Optional[str] = None,
    ) -> ComputeResult:
        return ComputeResult(
            request_id=request_id,
            buffers=compute_model_geometry(model, tint),
            source="inline",
            fallback_reason=fallback_reason,
        )

    async def submit(
        self, request_id: str, model: ResolvedModel, tint: Optional[Sequence[int]] = None,
    ) -> ComputeResult:
        """Async path only; raises ComputeTimeout past the deadline."""
        if self._closed:
            raise RuntimeError("compute boundary is closed")
        loop = asyncio.get_running_loop()
        timeout = self._timeout if self._timeout is not None else get_compute_timeout_seconds()
        future = loop.run_in_executor(self._executor, compute_model_geometry, model, tint)
        try:
            buffers = await asyncio.wait_for(future, timeout=timeout)
        except asyncio.TimeoutError as exc:
            raise ComputeTimeout(
                f"Geometry request {request_id} exceeded {timeout}s",
                asset_id=model.block_id,
                details={"request_id": request_id, "timeout_s": timeout},
            ) from exc
        return ComputeResult(request_id=request_id, buffers=buffers, source="async")

    async def compute(
        self, request_id: str, model: ResolvedModel, tint: Optional[Sequence[int]] = None,
    ) -> ComputeResult:
        """Async path with transparent fallback to the inline path."""
        if self._closed or not is_async_compute_enabled():
            return self.compute_inline(request_id, model, tint, fallback_reason="async compute unavailable")
        try:
            return await self.submit(request_id, model, tint)
        except ComputeTimeout as exc:
            logger.warning("%s; computing inline", exc.message)
            return self.compute_inline(request_id, model, tint, fallback_reason=exc.code)
        except RuntimeError as exc:
            # Executor shut down underneath us.
            logger.warning("Async geometry for %s failed (%s); computing inline", request_id, exc)
            return self.compute_inline(request_id, model, tint, fallback_reason=str(exc))

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._executor.shutdown(wait=False, cancel_futures=True)
