"""Tests for blockstate, inheritance and texture-variable resolution."""
import pytest

from blockforge.common.asset_ids import PLACEHOLDER_TEXTURE_ID
from blockforge.common.errors import CircularReference, NotFound, UnresolvedTextureVariable
from blockforge.model_resolver.ops.inheritance_ops import merge_model_chain
from blockforge.model_resolver.ops.multipart_ops import matches_when, select_multipart
from blockforge.model_resolver.ops.texture_ops import resolve_face_texture, resolve_texture_variables
from blockforge.model_resolver.ops.variant_ops import make_variant_key, pick_weighted, select_variant
from blockforge.model_resolver.schemas import VariantModelRef
from blockforge.model_resolver.service import ModelResolverService
from blockforge.pack_resolver.schemas import AssetCatalog, PackContents, PackDescriptor
from blockforge.pack_resolver.service import PackResolver

CUBE = {
    "elements": [{
        "from": [0, 0, 0], "to": [16, 16, 16],
        "faces": {d: {"texture": f"#{d}"} for d in ("down", "up", "north", "south", "east", "west")},
    }],
}
CUBE_ALL = {
    "parent": "block/cube",
    "textures": {"particle": "#all", "down": "#all", "up": "#all", "north": "#all",
                 "south": "#all", "east": "#all", "west": "#all"},
}


def _service(blockstates=None, models=None):
    catalog = AssetCatalog()
    catalog.add_pack(PackContents(
        descriptor=PackDescriptor(id="minecraft:vanilla", is_default=True),
        blockstates=blockstates or {},
        models={
            "minecraft:block/cube": CUBE,
            "minecraft:block/cube_all": CUBE_ALL,
            **(models or {}),
        },
    ))
    return ModelResolverService(PackResolver(catalog, []))


class TestVariantSelection:
    """Variant key matching."""

    def test_variant_key_is_sorted(self):
        assert make_variant_key({"half": "bottom", "facing": "north", "open": True}) == "facing=north,half=bottom,open=true"

    def test_exact_match(self):
        variants = {"facing=north": {"model": "a"}, "facing=south": {"model": "b"}}
        assert select_variant(variants, {"facing": "south"})[0] == "facing=south"

    def test_extra_properties_use_subset_match(self):
        variants = {"facing=north": {"model": "a"}, "facing=south": {"model": "b"}}
        key, entry = select_variant(variants, {"facing": "north", "waterlogged": "false"})
        assert key == "facing=north"
        assert entry == {"model": "a"}

    def test_single_default_variant_always_applies(self):
        assert select_variant({"": {"model": "a"}}, {"snowy": "true"})[0] == ""
        assert select_variant({"normal": {"model": "a"}}, {})[0] == "normal"

    def test_no_match_raises_not_found(self):
        with pytest.raises(NotFound):
            select_variant({"facing=north": {"model": "a"}}, {"facing": "up"})


class TestWeightedPick:
    """Deterministic weighted candidate choice."""

    CANDIDATES = [VariantModelRef(model="a", weight=1), VariantModelRef(model="b", weight=3), VariantModelRef(model="c")]

    def test_same_seed_same_pick(self):
        picks = {pick_weighted(self.CANDIDATES, 1234).model for _ in range(20)}
        assert len(picks) == 1

    def test_no_seed_picks_first(self):
        assert pick_weighted(self.CANDIDATES, None).model == "a"

    def test_every_candidate_reachable(self):
        seen = {pick_weighted(self.CANDIDATES, seed).model for seed in range(200)}
        assert seen == {"a", "b", "c"}

    def test_zero_weight_counts_as_one(self):
        assert VariantModelRef(model="a", weight=0).weight == 1


class TestMultipart:
    """Multipart predicates and accumulation."""

    def test_or_matches_either(self):
        when = {"OR": [{"north": "true"}, {"south": "true"}]}
        assert matches_when(when, {"north": "true", "south": "false"})
        assert matches_when(when, {"north": "false", "south": "true"})
        assert not matches_when(when, {"north": "false", "south": "false"})

    def test_and_requires_both(self):
        when = {"AND": [{"north": "true"}, {"south": "true"}]}
        assert matches_when(when, {"north": "true", "south": "true"})
        assert not matches_when(when, {"north": "true", "south": "false"})

    def test_plain_object_is_conjunction(self):
        assert matches_when({"north": "true", "up": "false"}, {"north": "true", "up": "false"})
        assert not matches_when({"north": "true", "up": "false"}, {"north": "true", "up": "true"})

    def test_pipe_alternatives_and_booleans(self):
        assert matches_when({"east": "low|tall"}, {"east": "tall"})
        assert matches_when({"lit": True}, {"lit": "true"})
        assert not matches_when({"east": "low|tall"}, {})

    def test_missing_when_always_applies(self):
        assert matches_when(None, {})

    def test_all_matching_parts_accumulate(self):
        multipart = [
            {"apply": {"model": "post"}},
            {"when": {"north": "true"}, "apply": {"model": "side", "y": 0}},
            {"when": {"east": "true"}, "apply": {"model": "side", "y": 90}},
        ]
        applied = select_multipart(multipart, {"north": "true", "east": "true"}, seed=7)
        assert [(ref.model, ref.y) for ref in applied] == [("post", 0), ("side", 0), ("side", 90)]


class TestInheritance:
    """Parent chain merging."""

    def test_child_textures_override_parent(self):
        models = {
            "minecraft:block/base": {"parent": "block/cube_all", "textures": {"all": "block/stone"}},
            "minecraft:block/child": {"parent": "block/base", "textures": {"all": "block/dirt"}},
        }
        service = _service(models=models)
        merged = merge_model_chain("block/child", service.packs.lookup_model)
        assert merged.textures["all"] == "block/dirt"
        assert merged.parent_chain == ["minecraft:block/child", "minecraft:block/base",
                                       "minecraft:block/cube_all", "minecraft:block/cube"]
        assert len(merged.elements) == 1

    def test_nearest_elements_win(self):
        models = {"minecraft:block/slab": {"parent": "block/cube", "elements": [{"from": [0, 0, 0], "to": [16, 8, 16], "faces": {}}]}}
        merged = merge_model_chain("block/slab", _service(models=models).packs.lookup_model)
        assert merged.elements[0]["to"] == [16, 8, 16]

    def test_cycle_raises_circular_reference(self):
        models = {
            "minecraft:block/a": {"parent": "block/b"},
            "minecraft:block/b": {"parent": "block/a"},
        }
        with pytest.raises(CircularReference) as exc:
            merge_model_chain("block/a", _service(models=models).packs.lookup_model)
        assert exc.value.details["chain"][-1] == "minecraft:block/a"

    def test_depth_guard(self):
        models = {f"minecraft:block/m{i}": {"parent": f"block/m{i + 1}"} for i in range(30)}
        with pytest.raises(CircularReference):
            merge_model_chain("block/m0", _service(models=models).packs.lookup_model, max_depth=20)

    def test_builtin_parent_ends_chain(self):
        models = {"minecraft:item/thing": {"parent": "builtin/generated", "textures": {"layer0": "item/thing"}}}
        merged = merge_model_chain("item/thing", _service(models=models).packs.lookup_model)
        assert merged.builtin == "builtin/generated"
        assert merged.elements == []


class TestTextureVariables:
    """'#name' indirection."""

    def test_recursive_resolution(self):
        resolved, unresolved = resolve_texture_variables({"all": "block/dirt", "side": "#all", "north": "#side"})
        assert resolved["north"] == "minecraft:block/dirt"
        assert unresolved == []

    def test_unresolved_kept_and_listed(self):
        resolved, unresolved = resolve_texture_variables({"side": "#missing", "loop": "#loop"})
        assert resolved["side"] == "#missing"
        assert sorted(unresolved) == ["loop", "side"]

    def test_face_lookup_raises_for_missing(self):
        with pytest.raises(UnresolvedTextureVariable):
            resolve_face_texture("#nope", {"all": "minecraft:block/dirt"})


class TestResolveBlockState:
    """End-to-end blockstate resolution."""

    def test_variant_block_passes_rotation_through(self):
        blockstates = {"minecraft:furnace": {"variants": {
            "facing=east": {"model": "block/stone_block", "y": 90, "uvlock": True},
        }}}
        models = {"minecraft:block/stone_block": {"parent": "block/cube_all", "textures": {"all": "block/stone"}}}
        model = _service(blockstates, models).resolve_block_state("furnace", {"facing": "east"})
        assert model.rotation == [0, 90, 0]
        assert model.uvlock is True
        assert model.textures["north"] == "minecraft:block/stone"
        assert model.variant_key == "facing=east"

    def test_unresolved_texture_recorded_in_diagnostics(self):
        blockstates = {"minecraft:odd": {"variants": {"": {"model": "block/odd"}}}}
        models = {"minecraft:block/odd": {"parent": "block/cube", "textures": {"north": "block/stone"}}}
        model = _service(blockstates, models).resolve_block_state("odd")
        assert "up" in model.parts[0].unresolved_textures
        assert any("#up" in line for line in model.diagnostics)

    def test_missing_block_degrades_to_placeholder(self):
        model = _service().resolve_or_placeholder("minecraft:does_not_exist")
        assert model.is_placeholder
        assert model.textures["missing"] == PLACEHOLDER_TEXTURE_ID
        assert model.diagnostics[0].startswith("asset.not_found")
