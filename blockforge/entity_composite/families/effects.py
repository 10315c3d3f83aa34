"""Breeze wind shells and the happy ghast harness."""
from __future__ import annotations

from typing import List, Optional

from blockforge.common.asset_ids import asset_path_leaf
from blockforge.entity_composite.families.base import FamilyContext, FamilyResult, select_control
from blockforge.entity_composite.layer_detection import stable_unique, title_label
from blockforge.entity_composite.schemas import (
    ControlState, EntityCompositeSchema, Layer, LayerBlend, LayerKind, MaterialMode, ToggleControl,
)


class BreezeFamily:
    family_id = "breeze"

    def matches(self, ctx: FamilyContext) -> bool:
        return ctx.entity_root == "breeze"

    def build(self, ctx: FamilyContext) -> Optional[FamilyResult]:
        wind = ctx.find("entity/breeze/breeze_wind", "entity/breeze/wind", "entity/breeze/breeze_air")
        charge = ctx.find("entity/breeze/breeze_wind_charge", "entity/breeze/wind_charge")
        controls = []
        if wind:
            controls.append(ToggleControl(id="breeze.wind", label="Wind"))
        if charge:
            controls.append(ToggleControl(id="breeze.wind_charge", label="Wind Charge"))
        if not controls:
            return None
        return FamilyResult(controls=controls, context={"wind": wind, "wind_charge": charge})

    def active_layers(self, schema: EntityCompositeSchema, state: ControlState) -> List[Layer]:
        layers = []
        wind = schema.context["wind"]
        charge = schema.context["wind_charge"]
        if wind and state.toggle("breeze.wind"):
            layers.append(Layer(
                id="breeze_wind",
                label="Wind",
                kind=LayerKind.CEM_MODEL,
                cem_entity_type_candidates=["breeze_wind", "breeze_air", "wind"],
                texture_asset_id=wind,
                blend=LayerBlend.ADDITIVE,
                z_index=170,
                material_mode=MaterialMode(kind="emissive", intensity=0.9),
            ))
        if charge and state.toggle("breeze.wind_charge"):
            layers.append(Layer(
                id="breeze_wind_charge",
                label="Wind Charge",
                kind=LayerKind.CEM_MODEL,
                cem_entity_type_candidates=["breeze_wind_charge", "wind_charge"],
                texture_asset_id=charge,
                blend=LayerBlend.ADDITIVE,
                z_index=175,
                material_mode=MaterialMode(kind="emissive", intensity=1.0),
            ))
        return layers


class HappyGhastFamily:
    family_id = "happy_ghast"

    def matches(self, ctx: FamilyContext) -> bool:
        return ctx.entity_root == "happy_ghast"

    def build(self, ctx: FamilyContext) -> Optional[FamilyResult]:
        colors = stable_unique(
            leaf[: -len("_harness")]
            for leaf in (asset_path_leaf(i) for i in ctx.ids_under("equipment/happy_ghast_body/"))
            if leaf.endswith("_harness")
        )
        if not colors:
            return None
        controls = [
            ToggleControl(id="happy_ghast.harness", label="Harness"),
            select_control(
                "happy_ghast.harness_color", "Harness Color", colors,
                "brown" if "brown" in colors else colors[0],
                labels={c: title_label(c) for c in colors},
            ),
        ]
        return FamilyResult(controls=controls, context={"namespace": ctx.namespace, "colors": colors})

    def active_layers(self, schema: EntityCompositeSchema, state: ControlState) -> List[Layer]:
        if not state.toggle("happy_ghast.harness"):
            return []
        color = state.select("happy_ghast.harness_color", schema.context["colors"][0])
        if color not in schema.context["colors"]:
            return []
        return [Layer(
            id="happy_ghast_harness",
            label="Harness",
            kind=LayerKind.CEM_MODEL,
            cem_entity_type_candidates=["happy_ghast_harness"],
            texture_asset_id=f"{schema.context['namespace']}:entity/equipment/happy_ghast_body/{color}_harness",
            z_index=140,
            bone_alias_map={"goggles": "body", "harness": "body"},
        )]
