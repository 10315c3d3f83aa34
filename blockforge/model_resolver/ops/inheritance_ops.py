"""Model parent-chain merging."""
from __future__ import annotations

from typing import Any, Callable, Dict, List

from blockforge.common.asset_ids import normalize_asset_id
from blockforge.common.errors import CircularReference, MalformedDefinition
from blockforge.model_resolver.schemas import MergedModel

BUILTIN_PREFIX = "builtin/"

ModelLoader = Callable[[str], Dict[str, Any]]


def normalize_model_id(model_id: str) -> str:
    """'block/dirt' -> 'minecraft:block/dirt'; builtin parents stay bare."""
    if model_id.startswith(BUILTIN_PREFIX) or model_id.startswith("minecraft:" + BUILTIN_PREFIX):
        return model_id.split(":", 1)[-1]
    return normalize_asset_id(model_id)


def load_chain(model_id: str, loader: ModelLoader, max_depth: int) -> List[tuple]:
    """
    Walk child -> root and return [(model_id, definition)].
    Revisiting an id, or going deeper than max_depth, is a CircularReference.
    """
    chain: List[tuple] = []
    seen: List[str] = []
    current = normalize_model_id(model_id)
    while current:
        if current in seen:
            raise CircularReference(
                f"Model parent chain loops back to {current}",
                asset_id=normalize_model_id(model_id),
                details={"chain": seen + [current]},
            )
        if len(seen) >= max_depth:
            raise CircularReference(
                f"Model parent chain deeper than {max_depth}",
                asset_id=normalize_model_id(model_id),
                details={"chain": seen},
            )
        seen.append(current)
        if current.startswith(BUILTIN_PREFIX):
            chain.append((current, {}))
            break
        definition = loader(current)
        if not isinstance(definition, dict):
            raise MalformedDefinition(f"Model {current} is not a JSON object", asset_id=current)
        chain.append((current, definition))
        parent = definition.get("parent")
        current = normalize_model_id(parent) if isinstance(parent, str) and parent else ""
    return chain


def merge_model_chain(model_id: str, loader: ModelLoader, max_depth: int = 20) -> MergedModel:
    """
    Flatten a model with its ancestors.
    Textures: child overrides parent. Elements: the nearest level that defines any wins.
    Scalar settings (ambientocclusion, gui_light, display slots): child wins.
    """
    chain = load_chain(model_id, loader, max_depth)
    merged = MergedModel(model_id=chain[0][0], parent_chain=[entry_id for entry_id, _ in chain])

    textures: Dict[str, str] = {}
    elements_found = False
    ao_set = False
    # Root first so each child level overwrites its parent.
    for entry_id, definition in reversed(chain):
        if entry_id.startswith(BUILTIN_PREFIX):
            merged.builtin = entry_id
            continue
        textures.update({name: ref for name, ref in (definition.get("textures") or {}).items() if isinstance(ref, str)})
        if "ambientocclusion" in definition:
            merged.ambientocclusion = bool(definition["ambientocclusion"])
            ao_set = True
        if "gui_light" in definition:
            merged.gui_light = definition["gui_light"]
        merged.display.update(definition.get("display") or {})

    for _, definition in chain:
        elements = definition.get("elements")
        if isinstance(elements, list):
            merged.elements = list(elements)
            elements_found = True
            break

    if not elements_found:
        merged.elements = []
    if not ao_set:
        merged.ambientocclusion = True
    merged.textures = textures
    return merged
