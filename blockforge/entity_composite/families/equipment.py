"""Humanoid armor textures (entity/equipment/humanoid*/<material>)."""
from __future__ import annotations

from typing import Dict, List, Optional

from blockforge.entity_composite.families.base import FamilyContext, FamilyResult, visible
from blockforge.entity_composite.schemas import (
    BoneRender, CemEntityType, ControlState, EntityCompositeSchema, Layer, LayerKind, ToggleControl, Vec3,
)

PLAYER_TEXTURE_ID = "minecraft:entity/player/wide/steve"
DEFAULT_ARMOR_STAND_TEXTURE_ID = "minecraft:entity/armor_stand"
HELMET_LIFT = 0.5 / 16


def armor_layer_1_overrides(show_helmet: bool, show_chest: bool, show_boots: bool) -> Dict[str, BoneRender]:
    """Per-piece visibility on the outer armor model."""
    if show_helmet and show_chest and show_boots:
        return {"*": visible(True)}
    overrides = {"*": visible(False)}
    if show_helmet:
        overrides["head"] = visible(True)
    if show_chest:
        for bone in ("body", "left_arm", "right_arm"):
            overrides[bone] = visible(True)
    if show_boots:
        overrides["left_shoe"] = visible(True)
        overrides["right_shoe"] = visible(True)
    return overrides


class EquipmentFamily:
    family_id = "equipment"

    def matches(self, ctx: FamilyContext) -> bool:
        if ctx.entity_root != "equipment":
            return False
        kind = ctx.entity_path.split("/")[1] if "/" in ctx.entity_path else ""
        return "humanoid" in kind or "leggings" in kind

    def build(self, ctx: FamilyContext) -> Optional[FamilyResult]:
        kind = ctx.entity_path.split("/")[1].lower()
        is_leggings = "leggings" in kind
        is_humanoid = "humanoid" in kind
        is_layer1 = is_humanoid and not is_leggings
        leggings = ctx.find(f"entity/equipment/humanoid_leggings/{ctx.leaf}") if is_layer1 else None

        controls: List = []
        if is_humanoid:
            controls += [
                ToggleControl(id="equipment.add_player", label="Show Player"),
                ToggleControl(id="equipment.add_armor_stand", label="Show Armor Stand"),
            ]
        if is_layer1:
            controls += [
                ToggleControl(id="equipment.show_helmet", label="Helmet", default=True),
                ToggleControl(id="equipment.show_chestplate", label="Chestplate", default=True),
            ]
            if leggings:
                controls.append(ToggleControl(id="equipment.show_leggings", label="Leggings", default=True))
            controls.append(ToggleControl(id="equipment.show_boots", label="Boots", default=True))
        else:
            controls.append(ToggleControl(id="equipment.show_leggings", label="Leggings", default=True))

        armor_stand = ctx.find(
            "entity/armorstand/armorstand", "entity/armorstand/wood",
            "entity/armor_stand", "entity/armor_stand/armor_stand",
        ) or DEFAULT_ARMOR_STAND_TEXTURE_ID
        return FamilyResult(
            controls=controls,
            context={
                "is_humanoid": is_humanoid,
                "is_layer1": is_layer1,
                "layer1_texture": ctx.base_asset_id if is_layer1 else None,
                "layer2_texture": leggings if is_layer1 else ctx.base_asset_id,
                "armor_stand_texture": armor_stand,
            },
        )

    def base_texture_asset_id(self, schema: EntityCompositeSchema, state: ControlState) -> str:
        if state.toggle("equipment.add_player"):
            return PLAYER_TEXTURE_ID
        return schema.context["armor_stand_texture"]

    def cem_entity_type(self, schema: EntityCompositeSchema, state: ControlState) -> CemEntityType:
        if state.toggle("equipment.add_player"):
            return CemEntityType(entity_type="player")
        return CemEntityType(entity_type="armor_stand")

    def bone_render_overrides(self, schema: EntityCompositeSchema, state: ControlState) -> Dict[str, BoneRender]:
        if not schema.context["is_humanoid"]:
            return {}
        overrides = {}
        if not (state.toggle("equipment.add_player") or state.toggle("equipment.add_armor_stand")):
            overrides["*"] = visible(False)
        if schema.context["is_layer1"] and state.toggle("equipment.show_helmet", True):
            overrides["headwear"] = visible(False)
        return overrides

    def active_layers(self, schema: EntityCompositeSchema, state: ControlState) -> List[Layer]:
        layers = []
        layer1 = schema.context["layer1_texture"]
        layer2 = schema.context["layer2_texture"]
        if schema.context["is_layer1"] and layer1:
            show_player = state.toggle("equipment.add_player")
            layers.append(Layer(
                id="equipment_armor_layer_1",
                label="Armor",
                kind=LayerKind.CEM_MODEL,
                cem_entity_type_candidates=["armor_layer_1"],
                texture_asset_id=layer1,
                z_index=100,
                sync_to_base_pose=True,
                bone_render_overrides=armor_layer_1_overrides(
                    state.toggle("equipment.show_helmet", True),
                    state.toggle("equipment.show_chestplate", True),
                    state.toggle("equipment.show_boots", True),
                ),
                bone_position_offsets={"head": Vec3(y=HELMET_LIFT)} if show_player else {},
                bone_scale_multipliers={"head": Vec3(x=1.01, y=1.01, z=1.01)},
            ))
        if layer2:
            layers.append(Layer(
                id="equipment_armor_layer_2",
                label="Leggings",
                kind=LayerKind.CEM_MODEL,
                cem_entity_type_candidates=["armor_layer_2"],
                texture_asset_id=layer2,
                z_index=90,
                sync_to_base_pose=True,
                bone_render_overrides={"*": visible(state.toggle("equipment.show_leggings", True))},
            ))
        return layers
