"""Variant selection and seeded weighted picks."""
from __future__ import annotations

import random
from typing import Any, Dict, List, Mapping, Optional, Tuple

from blockforge.common.errors import MalformedDefinition, NotFound
from blockforge.model_resolver.schemas import VariantModelRef

DEFAULT_VARIANT_KEYS = ("", "normal")


def stringify_value(value: Any) -> str:
    """JSON booleans and numbers compare as their lowercase string form."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def make_variant_key(properties: Mapping[str, Any]) -> str:
    """{'half': 'bottom', 'facing': 'north'} -> 'facing=north,half=bottom'"""
    return ",".join(f"{name}={stringify_value(properties[name])}" for name in sorted(properties))


def parse_variant_key(key: str) -> Dict[str, str]:
    pairs: Dict[str, str] = {}
    if key in DEFAULT_VARIANT_KEYS:
        return pairs
    for chunk in key.split(","):
        if "=" not in chunk:
            continue
        name, value = chunk.split("=", 1)
        pairs[name.strip()] = value.strip()
    return pairs


def normalize_candidates(entry: Any, block_id: Optional[str] = None) -> List[VariantModelRef]:
    """A variant entry is a single model object or an array of weighted ones."""
    raw = entry if isinstance(entry, list) else [entry]
    if not raw:
        raise MalformedDefinition("Variant has no model candidates", asset_id=block_id)
    candidates: List[VariantModelRef] = []
    for item in raw:
        if not isinstance(item, dict) or "model" not in item:
            raise MalformedDefinition(
                "Variant candidate must be an object with a model", asset_id=block_id, details={"entry": item},
            )
        candidates.append(VariantModelRef(**item))
    return candidates


def select_variant(
    variants: Dict[str, Any],
    properties: Mapping[str, Any],
    block_id: Optional[str] = None,
) -> Tuple[str, Any]:
    """
    Pick the variant entry for a property assignment.
    Order: single default variant, exact key, best subset match, "" then "normal".
    """
    if not variants:
        raise NotFound("Blockstate declares no variants", asset_id=block_id)

    if len(variants) == 1:
        (only_key,) = variants.keys()
        if only_key in DEFAULT_VARIANT_KEYS:
            return only_key, variants[only_key]

    wanted = {name: stringify_value(value) for name, value in properties.items()}
    exact = make_variant_key(wanted)
    if exact in variants:
        return exact, variants[exact]

    best_key: Optional[str] = None
    best_size = -1
    for key in sorted(variants):
        pairs = parse_variant_key(key)
        if not pairs:
            continue
        if all(wanted.get(name) == value for name, value in pairs.items()):
            if len(pairs) > best_size:
                best_key, best_size = key, len(pairs)
    if best_key is not None:
        return best_key, variants[best_key]

    for fallback in DEFAULT_VARIANT_KEYS:
        if fallback in variants:
            return fallback, variants[fallback]

    raise NotFound(
        f"No variant matches {exact or '<empty>'}",
        asset_id=block_id,
        details={"properties": wanted, "variant_keys": sorted(variants)},
    )


def pick_weighted(candidates: List[VariantModelRef], seed: Optional[int]) -> VariantModelRef:
    """
    Deterministic weight-proportional pick.
    No seed -> first candidate. Otherwise random.Random(seed) draws one ticket
    in [0, total) and the cumulative walk selects its owner.
    """
    if not candidates:
        raise MalformedDefinition("Cannot pick from an empty candidate list")
    if seed is None or len(candidates) == 1:
        return candidates[0]

    total = sum(candidate.weight for candidate in candidates)
    roll = random.Random(seed).randrange(total)
    cumulative = 0
    for candidate in candidates:
        cumulative += candidate.weight
        if roll < cumulative:
            return candidate
    return candidates[-1]
