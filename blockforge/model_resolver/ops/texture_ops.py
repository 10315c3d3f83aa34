"""Texture-variable indirection (#name lookups)."""
from __future__ import annotations

from typing import Any, Dict, List, Tuple

from blockforge.common.asset_ids import is_texture_variable, normalize_asset_id
from blockforge.common.errors import UnresolvedTextureVariable


def resolve_reference(ref: str, textures: Dict[str, str], max_indirection: int = 10) -> str:
    """Follow '#name' hops until a concrete id; raises when the chain dead-ends or loops."""
    current = ref
    visited: List[str] = []
    for _ in range(max_indirection + 1):
        if not is_texture_variable(current):
            return normalize_asset_id(current)
        name = current[1:]
        if name in visited or name not in textures:
            break
        visited.append(name)
        current = textures[name]
    raise UnresolvedTextureVariable(
        f"Texture variable {ref} does not resolve",
        details={"variable": ref, "visited": visited},
    )


def resolve_texture_variables(
    textures: Dict[str, str],
    max_indirection: int = 10,
) -> Tuple[Dict[str, str], List[str]]:
    """
    Resolve every entry of a merged texture map.
    Unresolved entries keep their '#ref' value and are listed by name.
    """
    resolved: Dict[str, str] = {}
    unresolved: List[str] = []
    for name in sorted(textures):
        try:
            resolved[name] = resolve_reference(textures[name], textures, max_indirection)
        except UnresolvedTextureVariable:
            resolved[name] = textures[name]
            unresolved.append(name)
    return resolved, unresolved


def resolve_face_texture(ref: str, resolved: Dict[str, str], max_indirection: int = 10) -> str:
    """Face references use the already-resolved map; '#missing' raises."""
    return resolve_reference(ref, resolved, max_indirection)


def face_texture_ids(
    elements: List[Dict[str, Any]],
    textures: Dict[str, str],
    max_indirection: int = 10,
) -> List[str]:
    """Concrete texture ids the elements' faces draw with, in first-use order."""
    found: List[str] = []
    for element in elements:
        faces = element.get("faces") if isinstance(element, dict) else None
        if not isinstance(faces, dict):
            continue
        for face in faces.values():
            ref = face.get("texture") if isinstance(face, dict) else None
            if not isinstance(ref, str):
                continue
            try:
                texture_id = resolve_face_texture(ref, textures, max_indirection)
            except UnresolvedTextureVariable:
                continue
            if texture_id not in found:
                found.append(texture_id)
    return found
