"""Decorated pots: pottery sherd textures swapped onto the side panels."""
from __future__ import annotations

from typing import Dict, Optional

from blockforge.entity_composite.families.base import FamilyContext, FamilyResult, select_control
from blockforge.entity_composite.layer_detection import entity_path, stable_unique, title_label
from blockforge.entity_composite.schemas import CemEntityType, ControlState, EntityCompositeSchema

_FIXED_LEAVES = ("decorated_pot_base", "decorated_pot_side")
SIDE_PARTS = ("front", "back", "left", "right")
BASE_PARTS = ("neck", "top", "bottom")


class DecoratedPotFamily:
    family_id = "decorated_pot"

    def matches(self, ctx: FamilyContext) -> bool:
        return ctx.entity_root == "decorated_pot" or ctx.dir == "decorated_pot"

    def build(self, ctx: FamilyContext) -> Optional[FamilyResult]:
        base = ctx.find("entity/decorated_pot/decorated_pot_base", "entity/decorated_pot_base") or ctx.base_asset_id
        side = ctx.find("entity/decorated_pot/decorated_pot_side", "entity/decorated_pot_side") or base
        leaves = []
        for asset_id in ctx.ordered_ids:
            path = entity_path(asset_id)
            if not path or not path.startswith("decorated_pot/"):
                continue
            leaf = path.rsplit("/", 1)[-1]
            if leaf not in _FIXED_LEAVES:
                leaves.append(leaf)
        patterns = stable_unique(leaves)
        labels = {p: title_label(p[: -len("_pottery_pattern")] if p.endswith("_pottery_pattern") else p) for p in patterns}
        labels["none"] = "None"
        return FamilyResult(
            controls=[select_control("decorated_pot.pattern", "Pottery Sherd", ["none"] + patterns, "none", labels=labels)],
            context={"namespace": ctx.namespace, "base": base, "side": side, "patterns": patterns},
        )

    def base_texture_asset_id(self, schema: EntityCompositeSchema, state: ControlState) -> str:
        return schema.context["base"]

    def cem_entity_type(self, schema: EntityCompositeSchema, state: ControlState) -> CemEntityType:
        return CemEntityType(entity_type="decorated_pot")

    def part_texture_overrides(self, schema: EntityCompositeSchema, state: ControlState) -> Dict[str, str]:
        chosen = state.select("decorated_pot.pattern", "none")
        if chosen in schema.context["patterns"]:
            side = f"{schema.context['namespace']}:entity/decorated_pot/{chosen}"
        else:
            side = schema.context["side"]
        overrides = {part: schema.context["base"] for part in BASE_PARTS}
        overrides.update({part: side for part in SIDE_PARTS})
        return overrides
