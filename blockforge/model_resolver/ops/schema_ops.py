"""Block property schema extraction from blockstate definitions."""
from __future__ import annotations

from typing import Any, Dict, List, Set

from blockforge.common.asset_ids import split_asset_id
from blockforge.model_resolver.ops.variant_ops import DEFAULT_VARIANT_KEYS, parse_variant_key, stringify_value
from blockforge.model_resolver.schemas import BlockPropertySchema, BlockStateSchema, PropertyType

WALL_MOUNTABLE_SUFFIXES = ("_torch", "_sign", "_banner", "_skull", "_head")
HORIZONTAL_FACINGS = ["north", "south", "east", "west"]


def _collect_when(when: Any, values: Dict[str, Set[str]]) -> None:
    if not isinstance(when, dict):
        return
    for key, expected in when.items():
        if key in ("OR", "AND"):
            for clause in expected if isinstance(expected, list) else []:
                _collect_when(clause, values)
            continue
        bucket = values.setdefault(key, set())
        items = expected if isinstance(expected, list) else [expected]
        for item in items:
            for option in stringify_value(item).split("|"):
                bucket.add(option)


def _is_int(value: str) -> bool:
    try:
        int(value)
    except ValueError:
        return False
    return True


def _build_property(name: str, raw_values: Set[str]) -> BlockPropertySchema:
    if raw_values == {"true", "false"}:
        values = ["false", "true"]
        return BlockPropertySchema(name=name, property_type=PropertyType.BOOLEAN, values=values, default=values[0])
    if raw_values and all(_is_int(v) for v in raw_values):
        values = sorted(raw_values, key=int)
        return BlockPropertySchema(
            name=name, property_type=PropertyType.INT, values=values,
            min=int(values[0]), max=int(values[-1]), default=values[0],
        )
    values = sorted(raw_values)
    return BlockPropertySchema(
        name=name, property_type=PropertyType.ENUM, values=values, default=values[0] if values else "",
    )


def _enhance(block_path: str, properties: Dict[str, BlockPropertySchema]) -> None:
    """Runtime-only properties the blockstate file does not spell out."""
    if block_path == "redstone_wire" and "power" not in properties:
        properties["power"] = BlockPropertySchema(
            name="power", property_type=PropertyType.INT,
            values=[str(i) for i in range(16)], min=0, max=15, default="15",
        )

    if block_path in ("redstone_ore", "deepslate_redstone_ore") and "lit" not in properties:
        properties["lit"] = BlockPropertySchema(
            name="lit", property_type=PropertyType.BOOLEAN, values=["false", "true"], default="false",
        )

    if block_path == "torch" or block_path.endswith(WALL_MOUNTABLE_SUFFIXES):
        if "wall" not in properties:
            properties["wall"] = BlockPropertySchema(
                name="wall", property_type=PropertyType.BOOLEAN, values=["false", "true"], default="false",
            )
        if "facing" not in properties:
            properties["facing"] = BlockPropertySchema(
                name="facing", property_type=PropertyType.ENUM, values=list(HORIZONTAL_FACINGS), default="south",
            )


def build_block_state_schema(blockstate: Dict[str, Any], block_id: str) -> BlockStateSchema:
    values: Dict[str, Set[str]] = {}
    variants_map: Dict[str, int] = {}

    variants = blockstate.get("variants")
    if isinstance(variants, dict):
        only_default = len(variants) == 1 and next(iter(variants)) in DEFAULT_VARIANT_KEYS
        for key, entry in variants.items():
            variants_map[key] = len(entry) if isinstance(entry, list) else 1
            if only_default:
                continue
            for name, value in parse_variant_key(key).items():
                values.setdefault(name, set()).add(value)

    multipart = blockstate.get("multipart")
    if isinstance(multipart, list):
        for case in multipart:
            if isinstance(case, dict):
                _collect_when(case.get("when"), values)

    properties = {name: _build_property(name, raw) for name, raw in values.items()}
    _, block_path = split_asset_id(block_id)
    _enhance(block_path.rsplit("/", 1)[-1], properties)

    ordered: List[BlockPropertySchema] = [properties[name] for name in sorted(properties)]
    return BlockStateSchema(
        block_id=block_id,
        properties=ordered,
        default_state={prop.name: prop.default for prop in ordered},
        variants_map=variants_map or None,
    )
