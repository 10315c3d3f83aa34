"""Namespaced asset id helpers."""
from __future__ import annotations

import re
from typing import Optional, Tuple

DEFAULT_NAMESPACE = "minecraft"
PLACEHOLDER_TEXTURE_ID = "blockforge:placeholder/missing"
PLACEHOLDER_MODEL_ID = "blockforge:placeholder/cube"

_FACE_SUFFIXES = (
    "_top", "_bottom", "_side", "_front", "_back", "_end",
    "_north", "_south", "_east", "_west", "_up", "_down",
    "_inner", "_outer", "_upper", "_lower",
    "_0", "_1", "_2", "_3", "_4", "_5",
)
_TRAILING_DIGITS = re.compile(r"\d+$")


def split_asset_id(asset_id: str) -> Tuple[str, str]:
    """'ns:path' -> (ns, path); bare paths get the default namespace."""
    if ":" in asset_id:
        namespace, path = asset_id.split(":", 1)
        return namespace or DEFAULT_NAMESPACE, path
    return DEFAULT_NAMESPACE, asset_id


def normalize_asset_id(asset_id: str) -> str:
    namespace, path = split_asset_id(asset_id.strip())
    return f"{namespace}:{path}"


def is_texture_variable(ref: str) -> bool:
    return ref.startswith("#")


def model_id_to_path(model_id: str) -> str:
    namespace, path = split_asset_id(model_id)
    return f"assets/{namespace}/models/{path}.json"


def blockstate_path(block_id: str) -> str:
    namespace, path = split_asset_id(block_id)
    return f"assets/{namespace}/blockstates/{path}.json"


def texture_path(texture_id: str) -> str:
    namespace, path = split_asset_id(texture_id)
    return f"assets/{namespace}/textures/{path}.png"


def asset_path_leaf(asset_id: str) -> str:
    _, path = split_asset_id(asset_id)
    return path.rsplit("/", 1)[-1]


def texture_id_to_block_id(texture_id: str) -> Optional[str]:
    """Best-effort guess of the block a texture belongs to.

    'minecraft:block/oak_log_top' -> 'minecraft:oak_log'; non-block textures give None.
    """
    namespace, path = split_asset_id(texture_id)
    if not path.startswith("block/"):
        return None
    path = path[len("block/"):]
    for suffix in _FACE_SUFFIXES:
        if path.endswith(suffix):
            path = path[: -len(suffix)]
            break
    path = _TRAILING_DIGITS.sub("", path).rstrip("_")
    return f"{namespace}:{path}"
