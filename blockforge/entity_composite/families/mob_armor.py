"""Piglin and piglin brute wearing humanoid armor."""
from __future__ import annotations

from typing import List, Optional

from blockforge.common.asset_ids import asset_path_leaf
from blockforge.entity_composite.families.base import (
    FamilyContext, FamilyResult, select_control, visible,
)
from blockforge.entity_composite.families.equipment import armor_layer_1_overrides
from blockforge.entity_composite.layer_detection import stable_unique, title_label
from blockforge.entity_composite.schemas import (
    ControlState, EntityCompositeSchema, Layer, LayerKind, ToggleControl, Vec3,
)


class PiglinArmorFamily:
    family_id = "piglin_armor"

    def matches(self, ctx: FamilyContext) -> bool:
        return ctx.entity_root == "piglin" and ctx.leaf in ("piglin", "piglin_brute")

    def build(self, ctx: FamilyContext) -> Optional[FamilyResult]:
        materials = stable_unique(asset_path_leaf(i) for i in ctx.ids_under("equipment/humanoid/"))
        if not materials:
            return None
        controls = [
            ToggleControl(id="mob_armor.enabled", label="Armor"),
            select_control(
                "mob_armor.material", "Armor Material", materials,
                "diamond" if "diamond" in materials else materials[0],
                labels={m: title_label(m) for m in materials},
            ),
            ToggleControl(id="mob_armor.show_helmet", label="Helmet", default=True),
            ToggleControl(id="mob_armor.show_chestplate", label="Chestplate", default=True),
            ToggleControl(id="mob_armor.show_leggings", label="Leggings", default=True),
            ToggleControl(id="mob_armor.show_boots", label="Boots", default=True),
        ]
        leggings = [m for m in materials if ctx.find(f"entity/equipment/humanoid_leggings/{m}")]
        return FamilyResult(
            controls=controls,
            context={"namespace": ctx.namespace, "materials": materials, "leggings": leggings},
        )

    def active_layers(self, schema: EntityCompositeSchema, state: ControlState) -> List[Layer]:
        if not state.toggle("mob_armor.enabled"):
            return []
        namespace = schema.context["namespace"]
        material = state.select("mob_armor.material", schema.context["materials"][0])
        layers = []
        if material in schema.context["materials"]:
            layers.append(Layer(
                id="mob_armor_layer_1",
                label="Armor",
                kind=LayerKind.CEM_MODEL,
                cem_entity_type_candidates=["armor_layer_1"],
                texture_asset_id=f"{namespace}:entity/equipment/humanoid/{material}",
                z_index=130,
                bone_render_overrides=armor_layer_1_overrides(
                    state.toggle("mob_armor.show_helmet", True),
                    state.toggle("mob_armor.show_chestplate", True),
                    state.toggle("mob_armor.show_boots", True),
                ),
                bone_scale_multipliers={"head": Vec3(x=1.01, y=1.01, z=1.01)},
            ))
        if material in schema.context["leggings"]:
            layers.append(Layer(
                id="mob_armor_layer_2",
                label="Leggings",
                kind=LayerKind.CEM_MODEL,
                cem_entity_type_candidates=["armor_layer_2"],
                texture_asset_id=f"{namespace}:entity/equipment/humanoid_leggings/{material}",
                z_index=125,
                bone_render_overrides={"*": visible(state.toggle("mob_armor.show_leggings", True))},
            ))
        return layers
