"""Sheep wool and undercoat, dyed with the sixteen dye colours."""
from __future__ import annotations

from typing import List, Optional

from blockforge.entity_composite.dye_colors import DYE_COLORS, get_dye_rgb
from blockforge.entity_composite.families.base import FamilyContext, FamilyResult, select_control
from blockforge.entity_composite.schemas import (
    ControlState, EntityCompositeSchema, Layer, LayerKind, MaterialMode,
)

COAT_STATES = ("full", "sheared", "bare")


class SheepFamily:
    family_id = "sheep"

    def matches(self, ctx: FamilyContext) -> bool:
        return ctx.entity_root == "sheep"

    def build(self, ctx: FamilyContext) -> Optional[FamilyResult]:
        stem = f"entity/{ctx.dir}/{ctx.leaf}" if ctx.dir else f"entity/{ctx.leaf}"
        wool = ctx.find(f"{stem}_wool", f"{stem}_fur", "entity/sheep/sheep_fur", "entity/sheep/sheep_wool")
        undercoat = ctx.find(f"{stem}_wool_undercoat", f"{stem}_undercoat") or wool
        if not wool and not undercoat:
            return None
        controls = [
            select_control(
                "sheep.coat_state", "Coat", COAT_STATES, "full",
                labels={state: state.capitalize() for state in COAT_STATES},
            ),
            select_control(
                "sheep.color", "Wool Color", [d.id for d in DYE_COLORS], "white",
                labels={d.id: d.label for d in DYE_COLORS},
            ),
        ]
        return FamilyResult(controls=controls, context={"wool": wool, "undercoat": undercoat})

    def active_layers(self, schema: EntityCompositeSchema, state: ControlState) -> List[Layer]:
        coat = state.select("sheep.coat_state", "full")
        tint = MaterialMode(kind="tint", color=get_dye_rgb(state.select("sheep.color", "white")))
        layers = []
        undercoat = schema.context["undercoat"]
        wool = schema.context["wool"]
        if coat in ("full", "sheared") and undercoat:
            layers.append(Layer(
                id="sheep_undercoat",
                label="Undercoat",
                kind=LayerKind.CEM_MODEL,
                cem_entity_type_candidates=["sheep_wool_undercoat", "sheep_fur", "sheep_wool"],
                texture_asset_id=undercoat,
                z_index=120,
                material_mode=tint,
                sync_to_base_pose=True,
            ))
        if coat == "full" and wool:
            layers.append(Layer(
                id="sheep_wool",
                label="Wool",
                kind=LayerKind.CEM_MODEL,
                cem_entity_type_candidates=["sheep_wool", "sheep_fur"],
                texture_asset_id=wool,
                z_index=130,
                material_mode=tint,
                sync_to_base_pose=True,
            ))
        return layers
