"""Runtime configuration helpers for blockforge."""
from __future__ import annotations

import logging
import os
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_PACK_ID = "minecraft:vanilla"


def _get_env(name: str, default: Optional[str] = None) -> Optional[str]:
    return os.getenv(name, default)


def _get_float(name: str, default: float) -> float:
    raw = _get_env(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Invalid %s=%r; using %s", name, raw, default)
        return default


def _get_int(name: str, default: int) -> int:
    raw = _get_env(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Invalid %s=%r; using %s", name, raw, default)
        return default


def get_compute_timeout_seconds() -> float:
    return _get_float("BLOCKFORGE_COMPUTE_TIMEOUT_S", 5.0)


def get_compute_workers() -> int:
    return max(1, _get_int("BLOCKFORGE_COMPUTE_WORKERS", 2))


def is_async_compute_enabled() -> bool:
    raw = (_get_env("BLOCKFORGE_ASYNC_COMPUTE") or "1").strip().lower()
    return raw not in {"0", "false", "off", "no"}


def get_max_parent_depth() -> int:
    return _get_int("BLOCKFORGE_MAX_PARENT_DEPTH", 20)


def get_max_texture_indirection() -> int:
    return _get_int("BLOCKFORGE_MAX_TEXTURE_INDIRECTION", 10)


def get_geometry_cache_size() -> int:
    return max(1, _get_int("BLOCKFORGE_GEOMETRY_CACHE_SIZE", 64))


def get_default_pack_id() -> str:
    return _get_env("BLOCKFORGE_DEFAULT_PACK") or DEFAULT_PACK_ID


def get_log_level() -> str:
    return (_get_env("BLOCKFORGE_LOG_LEVEL") or "INFO").upper()
