"""Entity Composite Service: selected entity texture -> composite schema."""
from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Union

from blockforge.common.asset_ids import normalize_asset_id, split_asset_id
from blockforge.entity_composite.families.banner import BannerFamily
from blockforge.entity_composite.families.base import EntityFamily, FamilyContext
from blockforge.entity_composite.families.base_variant import BaseVariantFamily
from blockforge.entity_composite.families.bee import BeeFamily
from blockforge.entity_composite.families.decorated_pot import DecoratedPotFamily
from blockforge.entity_composite.families.effects import BreezeFamily, HappyGhastFamily
from blockforge.entity_composite.families.equipment import EquipmentFamily
from blockforge.entity_composite.families.feature_overlays import FeatureOverlayFamily
from blockforge.entity_composite.families.horse import DonkeyFamily, HorseFamily
from blockforge.entity_composite.families.mob_armor import PiglinArmorFamily
from blockforge.entity_composite.families.mob_states import mob_state_controls, mob_state_profile
from blockforge.entity_composite.families.sheep import SheepFamily
from blockforge.entity_composite.families.villager import VillagerFamily
from blockforge.entity_composite.layer_detection import dir_and_leaf, entity_path, normalize_base_asset_id
from blockforge.entity_composite.schemas import EntityCompositeSchema
from blockforge.pack_resolver.schemas import AssetCatalog, AssetKind
from blockforge.pack_resolver.service import PackResolver

logger = logging.getLogger(__name__)

# Evaluated in order; the first family whose predicate matches owns the asset.
FAMILY_TABLE: List[EntityFamily] = [
    EquipmentFamily(),
    SheepFamily(),
    VillagerFamily("villager"),
    VillagerFamily("zombie_villager"),
    HorseFamily(),
    DonkeyFamily(),
    BannerFamily(),
    PiglinArmorFamily(),
    BreezeFamily(),
    HappyGhastFamily(),
    DecoratedPotFamily(),
    BeeFamily(),
    FeatureOverlayFamily(),
    BaseVariantFamily(),
]
_FAMILIES: Dict[str, EntityFamily] = {family.family_id: family for family in FAMILY_TABLE}

TextureSource = Union[PackResolver, AssetCatalog, Iterable[str]]


def get_family(family_id: str) -> EntityFamily:
    try:
        return _FAMILIES[family_id]
    except KeyError:
        raise KeyError(f"Unknown entity family: {family_id}") from None


def _texture_ids(source: TextureSource) -> List[str]:
    if isinstance(source, PackResolver):
        return source.texture_ids()
    if isinstance(source, AssetCatalog):
        return source.asset_ids(AssetKind.TEXTURE)
    return [normalize_asset_id(asset_id) for asset_id in source]


def build_context(selected_asset_id: str, texture_ids: List[str]) -> Optional[FamilyContext]:
    selected = normalize_asset_id(selected_asset_id)
    base = normalize_base_asset_id(selected, texture_ids)
    path = entity_path(base)
    if path is None:
        return None
    folder, leaf = dir_and_leaf(path)
    return FamilyContext(
        selected_asset_id=selected,
        base_asset_id=base,
        namespace=split_asset_id(base)[0],
        entity_path=path,
        entity_root=path.split("/")[0],
        dir=folder,
        leaf=leaf,
        all_ids=frozenset(texture_ids),
        ordered_ids=texture_ids,
    )


def resolve_composite(asset_id: str, catalog: TextureSource) -> Optional[EntityCompositeSchema]:
    """
    Composite schema for an entity texture, or None when nothing about it is
    configurable (the caller then renders it as a plain entity).
    """
    ctx = build_context(asset_id, _texture_ids(catalog))
    if ctx is None:
        return None

    family = next((f for f in FAMILY_TABLE if f.matches(ctx)), None)
    result = family.build(ctx) if family is not None else None
    profile = mob_state_profile(ctx)
    if result is None and profile is None:
        logger.debug("No composite for %s (family=%s)", asset_id, family.family_id if family else None)
        return None

    controls = list(result.controls) if result is not None else []
    if profile is not None:
        controls.extend(mob_state_controls(profile))
    schema = EntityCompositeSchema(
        family_id=family.family_id if result is not None else None,
        base_asset_id=(result.base_asset_id if result is not None else None) or ctx.base_asset_id,
        entity_root=ctx.entity_root,
        controls=controls,
        context=result.context if result is not None else {},
        mob_states=profile,
    )
    logger.debug(
        "Composite for %s: family=%s base=%s controls=%d",
        asset_id, schema.family_id, schema.base_asset_id, len(schema.controls),
    )
    return schema
