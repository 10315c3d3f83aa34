"""Tests for Pack Resolver winner selection."""
import pytest

from blockforge.common.errors import NotFound
from blockforge.pack_resolver.schemas import AssetCatalog, AssetKind, PackContents, PackDescriptor
from blockforge.pack_resolver.service import PackResolver, resolve_winners, winners_by_pack


def _pack(pack_id, textures=None, models=None, blockstates=None, is_default=False):
    return PackContents(
        descriptor=PackDescriptor(id=pack_id, is_default=is_default),
        textures=textures or {},
        models=models or {},
        blockstates=blockstates or {},
    )


def _catalog(*packs):
    catalog = AssetCatalog()
    for pack in packs:
        catalog.add_pack(pack)
    return catalog


def test_highest_priority_wins_regardless_of_insertion_order():
    a = _pack("A", textures={"minecraft:block/stone": b"a"})
    b = _pack("B", textures={"minecraft:block/stone": b"b"})

    for catalog in (_catalog(a, b), _catalog(b, a)):
        winners = resolve_winners(catalog, ["A", "B"])
        assert winners.textures["minecraft:block/stone"] == "B"


def test_default_pack_is_lowest_priority():
    vanilla = _pack("minecraft:vanilla", textures={"minecraft:block/dirt": b"v", "minecraft:block/sand": b"v"}, is_default=True)
    custom = _pack("custom", textures={"minecraft:block/dirt": b"c"})
    winners = resolve_winners(_catalog(custom, vanilla), ["custom"])

    assert winners.textures["minecraft:block/dirt"] == "custom"
    assert winners.textures["minecraft:block/sand"] == "minecraft:vanilla"
    assert winners.pack_order == ["minecraft:vanilla", "custom"]


def test_disabled_packs_are_ignored():
    catalog = _catalog(_pack("A", textures={"minecraft:block/x": b"a"}), _pack("B", textures={"minecraft:block/x": b"b"}))
    winners = resolve_winners(catalog, ["A"])
    assert winners.textures == {"minecraft:block/x": "A"}


def test_kinds_are_resolved_independently():
    a = _pack("A", textures={"minecraft:block/dirt": b"a"})
    b = _pack("B", models={"minecraft:block/dirt": {"parent": "block/cube_all"}})
    winners = resolve_winners(_catalog(a, b), ["A", "B"])
    assert winners.owner(AssetKind.TEXTURE, "minecraft:block/dirt") == "A"
    assert winners.owner(AssetKind.MODEL, "minecraft:block/dirt") == "B"


def test_resolve_is_deterministic():
    catalog = _catalog(_pack("A", textures={"minecraft:b": b"", "minecraft:a": b""}))
    first = resolve_winners(catalog, ["A"])
    second = resolve_winners(catalog, ["A"])
    assert first == second
    assert list(first.textures) == ["minecraft:a", "minecraft:b"]


class TestPackLookup:
    """Lookup fallbacks through PackResolver."""

    def test_lookup_normalizes_ids(self):
        resolver = PackResolver(_catalog(_pack("A", models={"minecraft:block/dirt": {"x": 1}})), ["A"])
        assert resolver.lookup_model("block/dirt") == {"x": 1}

    def test_missing_asset_raises_not_found(self):
        resolver = PackResolver(_catalog(_pack("A")), ["A"])
        with pytest.raises(NotFound) as exc:
            resolver.lookup_texture("minecraft:block/nope")
        assert exc.value.asset_id == "minecraft:block/nope"
        assert exc.value.to_envelope().error.http_status == 404

    def test_stale_winner_falls_back_to_default(self):
        vanilla = _pack("minecraft:vanilla", textures={"minecraft:block/dirt": b"v"}, is_default=True)
        custom = _pack("custom", textures={"minecraft:block/dirt": b"c"})
        catalog = _catalog(vanilla, custom)
        resolver = PackResolver(catalog, ["custom"])
        del catalog.packs["custom"].textures["minecraft:block/dirt"]
        assert resolver.lookup_texture("minecraft:block/dirt") == b"v"

    def test_has_and_inversion(self):
        resolver = PackResolver(_catalog(_pack("A", textures={"minecraft:t": b""})), ["A"])
        assert resolver.has(AssetKind.TEXTURE, "minecraft:t")
        assert not resolver.has(AssetKind.MODEL, "minecraft:t")
        assert winners_by_pack(resolver.winners, AssetKind.TEXTURE) == {"A": ["minecraft:t"]}

    def test_default_pack_follows_environment(self, monkeypatch):
        monkeypatch.setenv("BLOCKFORGE_DEFAULT_PACK", "base")
        base = _pack("base", textures={"minecraft:block/dirt": b"base"})
        custom = _pack("custom", textures={"minecraft:block/stone": b"c"})
        catalog = _catalog(custom, base)
        assert catalog.default_pack_id == "base"

        winners = resolve_winners(catalog, ["custom"])
        assert winners.pack_order == ["base", "custom"]
        assert PackResolver(catalog, ["custom"]).lookup_texture("minecraft:block/dirt") == b"base"
