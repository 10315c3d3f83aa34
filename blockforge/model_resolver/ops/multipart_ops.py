"""Multipart condition evaluation."""
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from blockforge.common.errors import MalformedDefinition
from blockforge.model_resolver.ops.variant_ops import normalize_candidates, pick_weighted, stringify_value
from blockforge.model_resolver.schemas import VariantModelRef


def _value_matches(expected: Any, actual: Optional[str]) -> bool:
    if actual is None:
        return False
    if isinstance(expected, list):
        return any(_value_matches(item, actual) for item in expected)
    options = stringify_value(expected).split("|")
    return actual in options


def matches_when(when: Optional[Mapping[str, Any]], properties: Mapping[str, Any]) -> bool:
    """
    `when` is AND across its keys; "OR"/"AND" keys nest lists of sub-clauses.
    A missing clause always applies.
    """
    if when is None:
        return True
    if not isinstance(when, Mapping):
        raise MalformedDefinition("Multipart 'when' must be an object", details={"when": when})

    state = {name: stringify_value(value) for name, value in properties.items()}
    for key, expected in when.items():
        if key in ("OR", "AND"):
            if not isinstance(expected, list):
                raise MalformedDefinition(f"'{key}' must hold a list of clauses", details={"when": dict(when)})
            results = (matches_when(clause, properties) for clause in expected)
            ok = any(results) if key == "OR" else all(results)
            if not ok:
                return False
            continue
        if not _value_matches(expected, state.get(key)):
            return False
    return True


def select_multipart(
    multipart: List[Dict[str, Any]],
    properties: Mapping[str, Any],
    seed: Optional[int],
    block_id: Optional[str] = None,
) -> List[VariantModelRef]:
    """Every case whose predicate holds contributes one model; case i picks with seed + i."""
    applied: List[VariantModelRef] = []
    for index, case in enumerate(multipart):
        if not isinstance(case, dict) or "apply" not in case:
            raise MalformedDefinition("Multipart case needs an 'apply' entry", asset_id=block_id, details={"case": index})
        if not matches_when(case.get("when"), properties):
            continue
        candidates = normalize_candidates(case["apply"], block_id)
        case_seed = None if seed is None else seed + index
        applied.append(pick_weighted(candidates, case_seed))
    return applied
