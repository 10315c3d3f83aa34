"""Tests for block property schema extraction."""
from blockforge.model_resolver.ops.schema_ops import build_block_state_schema
from blockforge.model_resolver.schemas import PropertyType


def test_variant_properties_are_typed_and_sorted():
    blockstate = {"variants": {
        "facing=north,lit=false,level=0": {"model": "a"},
        "facing=south,lit=true,level=10": {"model": "b"},
        "facing=east,lit=false,level=2": [{"model": "c"}, {"model": "d"}],
    }}
    schema = build_block_state_schema(blockstate, "minecraft:thing")
    assert [p.name for p in schema.properties] == ["facing", "level", "lit"]
    assert schema.property("lit").property_type == PropertyType.BOOLEAN
    level = schema.property("level")
    assert level.property_type == PropertyType.INT
    assert (level.min, level.max) == (0, 10)
    assert level.values == ["0", "2", "10"]
    assert schema.property("facing").default == "east"
    assert schema.variants_map["facing=east,lit=false,level=2"] == 2


def test_multipart_when_clauses_contribute_values():
    blockstate = {"multipart": [
        {"when": {"OR": [{"north": "low"}, {"north": "tall|none"}]}, "apply": {"model": "a"}},
        {"when": {"up": True}, "apply": {"model": "b"}},
    ]}
    schema = build_block_state_schema(blockstate, "minecraft:wall")
    assert schema.property("north").values == ["low", "none", "tall"]
    assert schema.property("up").values == ["true"]
    assert schema.property("up").property_type == PropertyType.ENUM


def test_single_default_variant_has_no_properties():
    schema = build_block_state_schema({"variants": {"": {"model": "a"}}}, "minecraft:oak_leaves")
    assert schema.properties == []
    assert schema.default_state == {}


def test_redstone_wire_power_enhancement():
    schema = build_block_state_schema({"multipart": []}, "minecraft:redstone_wire")
    power = schema.property("power")
    assert (power.min, power.max, power.default) == (0, 15, "15")
    assert schema.default_state["power"] == "15"


def test_redstone_ore_lit_and_wall_mountables():
    assert build_block_state_schema({}, "minecraft:deepslate_redstone_ore").default_state == {"lit": "false"}
    torch = build_block_state_schema({"variants": {"": {"model": "a"}}}, "minecraft:soul_torch")
    assert torch.default_state == {"facing": "south", "wall": "false"}
