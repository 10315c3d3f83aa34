"""Villager and zombie villager outfits: biome type, profession and level badges."""
from __future__ import annotations

from typing import List, Optional

from blockforge.common.asset_ids import asset_path_leaf
from blockforge.entity_composite.families.base import FamilyContext, FamilyResult, select_control
from blockforge.entity_composite.layer_detection import stable_unique, title_label
from blockforge.entity_composite.schemas import ControlState, EntityCompositeSchema, Layer, LayerKind

LEVEL_LABELS = {
    "novice": "Stone",
    "apprentice": "Iron",
    "journeyman": "Gold",
    "expert": "Emerald",
    "master": "Diamond",
    "stone": "Stone",
    "iron": "Iron",
    "gold": "Gold",
    "emerald": "Emerald",
    "diamond": "Diamond",
}

# (control suffix, folder, label, preferred default, z-index)
_SLOTS = (
    ("type", "type", "Villager Type", "plains", 80),
    ("profession", "profession", "Profession", "none", 90),
    ("level", "profession_level", "Level", "none", 95),
)


class VillagerFamily:
    def __init__(self, root: str):
        self.root = root
        self.family_id = root

    def matches(self, ctx: FamilyContext) -> bool:
        return ctx.entity_root == self.root

    def build(self, ctx: FamilyContext) -> Optional[FamilyResult]:
        controls = []
        available = {}
        for suffix, folder, label, preferred, _ in _SLOTS:
            values = stable_unique(asset_path_leaf(i) for i in ctx.ids_under(f"{self.root}/{folder}/"))
            if not values:
                continue
            options = ["none"] + [v for v in values if v != "none"]
            default = preferred if preferred in options else options[1] if len(options) > 1 else "none"
            labels = {v: LEVEL_LABELS.get(v, title_label(v)) if suffix == "level" else title_label(v) for v in options}
            labels["none"] = "None"
            controls.append(select_control(f"{self.root}.{suffix}", label, options, default, labels=labels))
            available[suffix] = values
        if not controls:
            return None
        return FamilyResult(controls=controls, context={"available": available, "namespace": ctx.namespace})

    def active_layers(self, schema: EntityCompositeSchema, state: ControlState) -> List[Layer]:
        layers = []
        namespace = schema.context["namespace"]
        for suffix, folder, label, _, z_index in _SLOTS:
            chosen = state.select(f"{self.root}.{suffix}", "none")
            if chosen == "none" or chosen not in schema.context["available"].get(suffix, []):
                continue
            layers.append(Layer(
                id=f"{self.root}_{suffix}",
                label=label,
                kind=LayerKind.CLONE_TEXTURE,
                texture_asset_id=f"{namespace}:entity/{self.root}/{folder}/{chosen}",
                z_index=z_index,
            ))
        return layers
