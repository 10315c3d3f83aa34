"""Feature-layer detection and base texture normalization for entity textures.

Entity texture ids follow loose folder conventions (``entity/<dir>/<leaf>``).
Overlay textures (eyes, wool, saddles, villager outfits, banner patterns...) are
recognised here so the resolver can map them back to the entity they decorate.
"""
from __future__ import annotations

import re
from typing import AbstractSet, Iterable, List, Optional, Sequence, Set, Tuple

from blockforge.common.asset_ids import split_asset_id
from blockforge.entity_composite.dye_colors import DYE_COLOR_IDS, DYE_COLORS

WOOD_TYPES = (
    "oak", "spruce", "birch", "jungle", "acacia", "dark_oak", "mangrove",
    "cherry", "pale_oak", "bamboo", "crimson", "warped",
)
CAT_SKINS = (
    "tabby", "black", "red", "siamese", "british_shorthair", "calico",
    "persian", "ragdoll", "white", "jellie", "all_black",
)
WOOD_TYPE_IDS = frozenset(WOOD_TYPES)
CAT_SKIN_IDS = frozenset(CAT_SKINS)

BEE_STATE_LEAVES = frozenset({
    "bee_angry", "bee_nectar", "bee_angry_nectar", "bee_stinger",
    "bee_angry_stinger", "bee_nectar_stinger", "bee_angry_nectar_stinger",
})
VILLAGER_LAYER_PREFIXES = (
    "villager/type/", "villager/profession/", "villager/profession_level/",
    "zombie_villager/type/", "zombie_villager/profession/", "zombie_villager/profession_level/",
)
BANNER_BASE_LEAVES = frozenset({"base", "banner_base"})

# Longer suffixes first so "_wool_undercoat" is not mistaken for "_undercoat".
OVERLAY_SUFFIXES = (
    "_eyes", "_overlay", "_outer_layer", "_outer", "_fur", "_wool_undercoat",
    "_wool", "_undercoat", "_collar", "_saddle", "_armor", "_charge",
    "_crackiness_low", "_crackiness_medium", "_crackiness_high",
)
_CRACKINESS = re.compile(r"_crackiness_(low|medium|high)$")


# --- Path helpers ---

def entity_path(asset_id: str) -> Optional[str]:
    """'minecraft:entity/cow/cow' -> 'cow/cow'; non-entity textures give None."""
    _, path = split_asset_id(asset_id)
    if not path.startswith("entity/"):
        return None
    return path[len("entity/"):]


def dir_and_leaf(path: str) -> Tuple[str, str]:
    parts = path.split("/")
    return "/".join(parts[:-1]), parts[-1]


def direct_dir_and_leaf(path: str) -> Optional[Tuple[str, str]]:
    """Only paths exactly one folder deep ('cat/tabby') count as direct."""
    parts = path.split("/")
    if len(parts) != 2 or not parts[0] or not parts[1]:
        return None
    return parts[0], parts[1]


def stable_unique(values: Iterable[str]) -> List[str]:
    seen: Set[str] = set()
    out = []
    for value in values:
        if value not in seen:
            seen.add(value)
            out.append(value)
    return out


def title_label(value: str) -> str:
    return " ".join(word.capitalize() for word in value.split("_") if word)


def find_asset_id(namespace: str, paths: Sequence[str], all_ids: AbstractSet[str]) -> Optional[str]:
    for path in paths:
        candidate = f"{namespace}:{path}"
        if candidate in all_ids:
            return candidate
    return None


def sort_by_preferred_order(values: Iterable[str], preferred: Sequence[str]) -> List[str]:
    order = {value: index for index, value in enumerate(preferred)}
    return sorted(values, key=lambda v: (0, order[v], "") if v in order else (1, 0, v))


# --- Detection ---

def is_feature_layer_asset_id(asset_id: str) -> bool:
    """True for textures drawn as overlays on another entity rather than on their own."""
    path = entity_path(asset_id)
    if path is None:
        return False
    leaf = path.rsplit("/", 1)[-1]

    if path.startswith("bee/") and leaf in BEE_STATE_LEAVES:
        return True
    if path.startswith(VILLAGER_LAYER_PREFIXES):
        return True
    if path.startswith("banner/"):
        return leaf not in BANNER_BASE_LEAVES
    if any(leaf.endswith(suffix) for suffix in OVERLAY_SUFFIXES):
        return True
    if _CRACKINESS.search(leaf):
        return True
    return "/overlay/" in path


def likely_base_asset_id_for_layer(layer_asset_id: str, all_ids: Iterable[str]) -> Optional[str]:
    if not is_feature_layer_asset_id(layer_asset_id):
        return None
    path = entity_path(layer_asset_id)
    if path is None:
        return None
    namespace, _ = split_asset_id(layer_asset_id)
    present = set(all_ids)

    family_bases = (
        ("bee/", ("entity/bee/bee", "entity/bee")),
        ("zombie_villager/", ("entity/zombie_villager/zombie_villager", "entity/zombie_villager")),
        ("villager/", ("entity/villager/villager", "entity/villager")),
        ("banner/", ("entity/banner/base", "entity/banner/banner_base", "entity/banner_base", "entity/banner")),
    )
    for prefix, candidates in family_bases:
        if path.startswith(prefix):
            found = find_asset_id(namespace, candidates, present)
            if found:
                return found

    folder, leaf = dir_and_leaf(path)
    for suffix in OVERLAY_SUFFIXES:
        if not leaf.endswith(suffix) or leaf == suffix:
            continue
        base_leaf = leaf[: -len(suffix)]
        candidates = [f"entity/{folder}/{base_leaf}" if folder else f"entity/{base_leaf}", f"entity/{base_leaf}"]
        found = find_asset_id(namespace, candidates, present)
        if found:
            return found
    return None


def direct_leaves(all_ids: Iterable[str], folder: str, include_features: bool = False) -> List[str]:
    """Leaves of the direct (one folder deep) entity textures under ``folder``."""
    leaves = []
    for asset_id in all_ids:
        if not include_features and is_feature_layer_asset_id(asset_id):
            continue
        path = entity_path(asset_id)
        direct = direct_dir_and_leaf(path) if path else None
        if direct and direct[0] == folder:
            leaves.append(direct[1])
    return stable_unique(leaves)


def is_variant_leaf(folder: str, leaf: str) -> bool:
    return leaf == folder or leaf.startswith(f"{folder}_") or leaf.endswith(f"_{folder}")


def classify_variant_directory(folder: str, leaves: Sequence[str]) -> Optional[str]:
    """'dye', 'wood', 'cat' or 'pattern' when the folder holds interchangeable skins."""
    if len(leaves) <= 1:
        return None
    if all(leaf in DYE_COLOR_IDS for leaf in leaves):
        return "dye"
    if all(leaf in WOOD_TYPE_IDS for leaf in leaves):
        return "wood"
    if folder == "cat" and all(leaf in CAT_SKIN_IDS for leaf in leaves):
        return "cat"
    if all(is_variant_leaf(folder, leaf) for leaf in leaves):
        return "pattern"
    return None


def sorted_variant_leaves(kind: str, leaves: Sequence[str]) -> List[str]:
    if kind == "dye":
        return sort_by_preferred_order(leaves, [dye.id for dye in DYE_COLORS])
    return list(leaves)


def canonical_variant_leaf(folder: str, kind: str, leaves: Sequence[str]) -> str:
    if kind == "dye":
        return "red" if "red" in leaves else sort_by_preferred_order(leaves, [d.id for d in DYE_COLORS])[0]
    if kind == "wood":
        return "oak" if "oak" in leaves else sort_by_preferred_order(leaves, WOOD_TYPES)[0]
    if kind == "cat":
        return "tabby" if "tabby" in leaves else sort_by_preferred_order(leaves, CAT_SKINS)[0]
    if folder == "frog" and "temperate_frog" in leaves:
        return "temperate_frog"
    if folder in leaves:
        return folder
    return leaves[0]


def is_horse_coat_leaf(leaf: str) -> bool:
    if not leaf.startswith("horse_") or leaf.startswith("horse_markings_"):
        return False
    return "skeleton" not in leaf and "zombie" not in leaf


# --- Base normalization ---

def _normalize_variant_directory(path: str, namespace: str, all_ids: List[str]) -> Optional[str]:
    direct = direct_dir_and_leaf(path)
    if direct is None or direct[0] in ("bee", "banner"):
        return None
    folder = direct[0]
    leaves = direct_leaves(all_ids, folder)
    kind = classify_variant_directory(folder, leaves)
    if kind is None:
        return None
    leaf = canonical_variant_leaf(folder, kind, leaves)
    return find_asset_id(namespace, [f"entity/{folder}/{leaf}"], set(all_ids))


def _normalize_llama(path: str, namespace: str, all_ids: List[str]) -> Optional[str]:
    if not path.startswith("llama/"):
        return None
    leaves = direct_leaves(all_ids, "llama")
    if not leaves:
        return None
    preferred = "creamy" if "creamy" in leaves else "white" if "white" in leaves else leaves[0]
    return find_asset_id(namespace, [f"entity/llama/{preferred}"], set(all_ids))


def _normalize_horse(path: str, namespace: str, all_ids: List[str]) -> Optional[str]:
    direct = direct_dir_and_leaf(path)
    if direct is None or direct[0] != "horse" or not is_horse_coat_leaf(direct[1]):
        return None
    coats = [leaf for leaf in direct_leaves(all_ids, "horse") if is_horse_coat_leaf(leaf)]
    if not coats:
        return None
    preferred = "horse_brown" if "horse_brown" in coats else coats[0]
    return find_asset_id(namespace, [f"entity/horse/{preferred}"], set(all_ids))


def normalize_base_asset_id(selected_asset_id: str, all_ids: Iterable[str]) -> str:
    """Map a selected texture (overlay or skin variant) to the canonical base texture."""
    ids = list(all_ids)
    present = set(ids)
    base = likely_base_asset_id_for_layer(selected_asset_id, ids) or selected_asset_id
    namespace, path = split_asset_id(base)

    if path.startswith("entity/decorated_pot/") and not path.endswith("/decorated_pot_base"):
        candidate = f"{namespace}:entity/decorated_pot/decorated_pot_base"
        if candidate in present:
            base = candidate

    path_in_entity = entity_path(base)
    if path_in_entity is None:
        return base
    base = _normalize_variant_directory(path_in_entity, namespace, ids) or base
    if path_in_entity.startswith("fox/"):
        base = find_asset_id(namespace, ["entity/fox/fox"], present) or base
    base = _normalize_llama(path_in_entity, namespace, ids) or base
    base = _normalize_horse(path_in_entity, namespace, ids) or base
    return base
