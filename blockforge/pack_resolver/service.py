"""Pack Resolver: merges prioritized packs into a single winner map."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from blockforge.common.asset_ids import normalize_asset_id
from blockforge.common.errors import NotFound
from blockforge.pack_resolver.schemas import AssetCatalog, AssetKind, WinnerMap

logger = logging.getLogger(__name__)


def resolve_winners(catalog: AssetCatalog, enabled_pack_order: Sequence[str]) -> WinnerMap:
    """
    Pure winner computation.
    `enabled_pack_order` is ascending priority: index 0 is the lowest enabled pack,
    the last entry wins ties. The catalog's default pack sits below all of them.
    """
    ranked: List[str] = []
    default_id = catalog.default_pack_id
    if default_id in catalog.packs:
        ranked.append(default_id)
    for pack_id in enabled_pack_order:
        if pack_id == default_id or pack_id in ranked:
            continue
        if pack_id not in catalog.packs:
            logger.debug("Enabled pack %s has no catalog entry; skipping", pack_id)
            continue
        ranked.append(pack_id)

    winners = WinnerMap(pack_order=list(ranked))
    for kind in AssetKind:
        target = winners.for_kind(kind)
        # Ascending rank: later packs overwrite earlier owners.
        for pack_id in ranked:
            for asset_id in catalog.packs[pack_id].assets(kind):
                target[asset_id] = pack_id
        # Stable output independent of catalog insertion order.
        ordered = {asset_id: target[asset_id] for asset_id in sorted(target)}
        target.clear()
        target.update(ordered)

    logger.debug(
        "Resolved winners: %d textures, %d blockstates, %d models across %d packs",
        len(winners.textures), len(winners.blockstates), len(winners.models), len(ranked),
    )
    return winners


def winners_by_pack(winners: WinnerMap, kind: AssetKind) -> Dict[str, List[str]]:
    """Invert the winner map for diagnostics: pack id -> owned asset ids."""
    out: Dict[str, List[str]] = {}
    for asset_id, pack_id in winners.for_kind(kind).items():
        out.setdefault(pack_id, []).append(asset_id)
    return out


class PackResolver:
    """
    Read side over a catalog + winner map.
    Lookups that miss the winner fall back to the default pack before failing.
    """

    def __init__(self, catalog: AssetCatalog, enabled_pack_order: Sequence[str]):
        self.catalog = catalog
        self.enabled_pack_order = list(enabled_pack_order)
        self.winners = resolve_winners(catalog, self.enabled_pack_order)

    def owner(self, kind: AssetKind, asset_id: str) -> Optional[str]:
        return self.winners.owner(kind, normalize_asset_id(asset_id))

    def lookup(self, kind: AssetKind, asset_id: str) -> Any:
        asset_id = normalize_asset_id(asset_id)
        pack_id = self.winners.owner(kind, asset_id)
        if pack_id is not None:
            pack = self.catalog.packs.get(pack_id)
            if pack is not None and asset_id in pack.assets(kind):
                return pack.assets(kind)[asset_id]
            logger.warning("Winner %s no longer provides %s %s; using default pack", pack_id, kind.value, asset_id)

        default = self.catalog.default_pack
        if default is not None and asset_id in default.assets(kind):
            return default.assets(kind)[asset_id]

        raise NotFound(
            f"{kind.value} {asset_id} is not provided by any pack",
            asset_id=asset_id,
            details={"kind": kind.value, "packs": self.winners.pack_order},
        )

    def lookup_texture(self, texture_id: str) -> bytes:
        return self.lookup(AssetKind.TEXTURE, texture_id)

    def lookup_blockstate(self, block_id: str) -> Dict[str, Any]:
        return self.lookup(AssetKind.BLOCKSTATE, block_id)

    def lookup_model(self, model_id: str) -> Dict[str, Any]:
        return self.lookup(AssetKind.MODEL, model_id)

    def has(self, kind: AssetKind, asset_id: str) -> bool:
        try:
            self.lookup(kind, asset_id)
        except NotFound:
            return False
        return True

    def texture_ids(self) -> List[str]:
        """All texture ids visible through the winner map (entity composites scan these)."""
        return list(self.winners.textures.keys())
