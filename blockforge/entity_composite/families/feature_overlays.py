"""Same-UV overlays found next to the base texture: glowing eyes, outer layers,
charged auras and damage cracks."""
from __future__ import annotations

from typing import Dict, List, Optional

from blockforge.entity_composite.families.base import FamilyContext, FamilyResult, select_control
from blockforge.entity_composite.layer_detection import title_label
from blockforge.entity_composite.schemas import (
    ControlState, EntityCompositeSchema, Layer, LayerBlend, LayerKind, MaterialMode, ToggleControl,
)

CRACK_LEVELS = ("low", "medium", "high")
SWIRL_SCROLL = {"u_per_sec": 0.01, "v_per_sec": 0.01}


def _stem(ctx: FamilyContext) -> str:
    return f"entity/{ctx.dir}/{ctx.leaf}" if ctx.dir else f"entity/{ctx.leaf}"


def find_overlays(ctx: FamilyContext) -> Dict[str, object]:
    stem = _stem(ctx)
    cracks = {level: ctx.find(f"{stem}_crackiness_{level}") for level in CRACK_LEVELS}
    return {
        "eyes": ctx.find(f"{stem}_eyes"),
        "outer": ctx.find(f"{stem}_outer_layer", f"{stem}_outer"),
        "charge": ctx.find(f"{stem}_charge", f"{stem}_armor") if ctx.entity_root == "creeper" else ctx.find(f"{stem}_charge"),
        "cracks": {level: tex for level, tex in cracks.items() if tex},
    }


class FeatureOverlayFamily:
    family_id = "feature_overlays"

    def matches(self, ctx: FamilyContext) -> bool:
        found = find_overlays(ctx)
        return bool(found["eyes"] or found["outer"] or found["charge"] or found["cracks"])

    def build(self, ctx: FamilyContext) -> Optional[FamilyResult]:
        found = find_overlays(ctx)
        controls: List = []
        if found["eyes"]:
            controls.append(ToggleControl(id="feature.glowing_eyes", label="Glowing Eyes", default=True))
        if found["outer"]:
            controls.append(ToggleControl(id="feature.outer_layer", label="Outer Layer", default=True))
        if found["charge"]:
            controls.append(ToggleControl(id=f"{ctx.entity_root}.charge", label="Charged"))
        if found["cracks"]:
            levels = ["none"] + [level for level in CRACK_LEVELS if level in found["cracks"]]
            controls.append(select_control(
                "feature.crackiness", "Damage", levels, "none",
                labels={level: title_label(level) for level in levels},
            ))
        return FamilyResult(
            controls=controls,
            context={**found, "charge_control": f"{ctx.entity_root}.charge", "leaf": ctx.leaf},
        )

    def active_layers(self, schema: EntityCompositeSchema, state: ControlState) -> List[Layer]:
        context = schema.context
        layers = []
        if context["outer"] and state.toggle("feature.outer_layer", True):
            leaf = context["leaf"]
            layers.append(Layer(
                id="outer_layer",
                label="Outer Layer",
                kind=LayerKind.CEM_MODEL,
                cem_entity_type_candidates=[f"{leaf}_outer_layer", f"{leaf}_outer"],
                texture_asset_id=context["outer"],
                z_index=110,
                sync_to_base_pose=True,
            ))
        crack = state.select("feature.crackiness", "none")
        if crack in context["cracks"]:
            layers.append(Layer(
                id="crackiness",
                label="Damage",
                kind=LayerKind.CLONE_TEXTURE,
                texture_asset_id=context["cracks"][crack],
                z_index=150,
            ))
        if context["charge"] and state.toggle(context["charge_control"]):
            layers.append(Layer(
                id=f"{schema.entity_root}_charge",
                label="Charge",
                kind=LayerKind.CEM_MODEL,
                cem_entity_type_candidates=[f"{schema.entity_root}_charge", f"{schema.entity_root}_armor"],
                texture_asset_id=context["charge"],
                blend=LayerBlend.ADDITIVE,
                z_index=190,
                opacity=0.5,
                material_mode=MaterialMode(kind="energy_swirl", intensity=1.0, repeat=2.0, scroll=dict(SWIRL_SCROLL)),
                sync_to_base_pose=True,
            ))
        if context["eyes"] and state.toggle("feature.glowing_eyes", True):
            layers.append(Layer(
                id="glowing_eyes",
                label="Glowing Eyes",
                kind=LayerKind.CLONE_TEXTURE,
                texture_asset_id=context["eyes"],
                blend=LayerBlend.ADDITIVE,
                z_index=200,
                material_mode=MaterialMode(kind="emissive", intensity=1.0),
            ))
        return layers
