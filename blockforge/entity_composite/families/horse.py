"""Horses (coat, markings, armor, saddle) and the chested donkey/mule family."""
from __future__ import annotations

from typing import Dict, List, Optional, Union

from blockforge.common.asset_ids import asset_path_leaf
from blockforge.entity_composite.families.base import (
    FamilyContext, FamilyResult, select_control, visible,
)
from blockforge.entity_composite.layer_detection import (
    direct_leaves, entity_path, direct_dir_and_leaf, is_horse_coat_leaf, stable_unique, title_label,
)
from blockforge.entity_composite.schemas import (
    BoneRender, ControlState, EntityCompositeSchema, Layer, LayerKind, ToggleControl, Vec3,
)

SADDLE_BONES = ("headpiece", "noseband", "left_bit", "right_bit", "left_rein", "right_rein", "saddle")
SADDLE_BONE_ALIASES = {
    "headpiece": "head",
    "noseband": "head",
    "left_bit": "head",
    "right_bit": "head",
    "left_rein": "head",
    "right_rein": "head",
    "saddle": "body",
}
CHEST_BONES = ("left_chest", "right_chest", "left_chest2", "right_chest2", "mule_left_chest", "mule_right_chest")
MARKING_SCALE = 1.001
ARMOR_SCALE = 1.004


def _markings(ctx: FamilyContext) -> List[str]:
    leaves = []
    for asset_id in ctx.ordered_ids:
        path = entity_path(asset_id)
        direct = direct_dir_and_leaf(path) if path else None
        if direct and direct[0] == "horse" and direct[1].startswith("horse_markings_"):
            leaves.append(direct[1])
    return stable_unique(leaves)


class HorseFamily:
    family_id = "horse"

    def matches(self, ctx: FamilyContext) -> bool:
        return ctx.entity_root == "horse" and is_horse_coat_leaf(ctx.leaf)

    def build(self, ctx: FamilyContext) -> Optional[FamilyResult]:
        coats = [leaf for leaf in direct_leaves(ctx.ordered_ids, "horse") if is_horse_coat_leaf(leaf)]
        markings = _markings(ctx)
        armor = stable_unique(asset_path_leaf(i) for i in ctx.ids_under("equipment/horse_body/"))
        saddle = ctx.find("entity/equipment/horse_saddle/saddle")

        controls: List = []
        if len(coats) > 1:
            controls.append(select_control(
                "horse.coat", "Coat Color", coats, "horse_brown" if "horse_brown" in coats else coats[0],
                labels={c: title_label(c[len("horse_"):]) for c in coats},
            ))
        if markings:
            labels = {m: title_label(m[len("horse_markings_"):]) for m in markings}
            labels["none"] = "None"
            controls.append(select_control("horse.markings", "Spot Type", ["none"] + markings, "none", labels=labels))
        if armor:
            labels = {a: title_label(a) for a in armor}
            labels["none"] = "None"
            controls.append(select_control("horse.armor", "Horse Armor", ["none"] + armor, "none", labels=labels))
        if saddle:
            controls.append(ToggleControl(id="horse.saddle", label="Saddle"))
            controls.append(ToggleControl(id="horse.rider", label="Rider"))
        if not controls:
            return None
        return FamilyResult(
            controls=controls,
            context={
                "namespace": ctx.namespace,
                "coats": coats,
                "markings": markings,
                "armor": armor,
                "saddle": saddle,
            },
        )

    def base_texture_asset_id(self, schema: EntityCompositeSchema, state: ControlState) -> str:
        coats = schema.context["coats"]
        if len(coats) <= 1:
            return schema.base_asset_id
        chosen = state.select("horse.coat", coats[0])
        if chosen in coats:
            return f"{schema.context['namespace']}:entity/horse/{chosen}"
        return schema.base_asset_id

    def bone_render_overrides(self, schema: EntityCompositeSchema, state: ControlState) -> Dict[str, BoneRender]:
        saddled = state.toggle("horse.saddle")
        return {bone: visible(saddled) for bone in SADDLE_BONES}

    def entity_state_overrides(self, schema: EntityCompositeSchema, state: ControlState) -> Dict[str, Union[bool, float]]:
        return {"is_ridden": state.toggle("horse.rider")}

    def active_layers(self, schema: EntityCompositeSchema, state: ControlState) -> List[Layer]:
        namespace = schema.context["namespace"]
        layers = []
        marking = state.select("horse.markings", "none")
        if marking in schema.context["markings"]:
            layers.append(Layer(
                id="horse_markings",
                label="Markings",
                kind=LayerKind.CLONE_TEXTURE,
                texture_asset_id=f"{namespace}:entity/horse/{marking}",
                z_index=80,
                bone_scale_multipliers={"*": Vec3(x=MARKING_SCALE, y=MARKING_SCALE, z=MARKING_SCALE)},
            ))
        armor = state.select("horse.armor", "none")
        if armor in schema.context["armor"]:
            layers.append(Layer(
                id="horse_armor",
                label="Armor",
                kind=LayerKind.CEM_MODEL,
                cem_entity_type_candidates=["horse_armor"],
                texture_asset_id=f"{namespace}:entity/equipment/horse_body/{armor}",
                z_index=140,
                sync_to_base_pose=True,
                bone_scale_multipliers={"*": Vec3(x=ARMOR_SCALE, y=ARMOR_SCALE, z=ARMOR_SCALE)},
            ))
        saddle = schema.context["saddle"]
        if saddle and state.toggle("horse.saddle"):
            layers.append(Layer(
                id="horse_saddle",
                label="Saddle",
                kind=LayerKind.CEM_MODEL,
                cem_entity_type_candidates=["horse_saddle"],
                texture_asset_id=saddle,
                z_index=135,
                allow_vanilla_fallback=False,
                replaces_base_bones=list(SADDLE_BONES),
                bone_alias_map={**SADDLE_BONE_ALIASES, "head": "head", "body": "body", "neck": "neck", "mouth": "mouth"},
            ))
        return layers


class DonkeyFamily:
    """Donkeys and mules share chest bones and the donkey saddle."""

    family_id = "donkey"

    def matches(self, ctx: FamilyContext) -> bool:
        return ctx.entity_root in ("donkey", "mule") or (
            ctx.entity_root == "horse" and ctx.leaf in ("donkey", "mule")
        )

    def build(self, ctx: FamilyContext) -> Optional[FamilyResult]:
        saddle = ctx.find("entity/equipment/donkey_saddle/saddle")
        controls: List = []
        if saddle:
            controls.append(ToggleControl(id="donkey.saddle", label="Saddle"))
        controls.append(ToggleControl(id="donkey.chest", label="Chest"))
        return FamilyResult(controls=controls, context={"saddle": saddle})

    def bone_render_overrides(self, schema: EntityCompositeSchema, state: ControlState) -> Dict[str, BoneRender]:
        if state.toggle("donkey.chest"):
            return {}
        return {bone: visible(False) for bone in CHEST_BONES}

    def entity_state_overrides(self, schema: EntityCompositeSchema, state: ControlState) -> Dict[str, Union[bool, float]]:
        if not schema.context["saddle"]:
            return {}
        return {"is_ridden": state.toggle("donkey.saddle")}

    def active_layers(self, schema: EntityCompositeSchema, state: ControlState) -> List[Layer]:
        saddle = schema.context["saddle"]
        if not saddle or not state.toggle("donkey.saddle"):
            return []
        return [Layer(
            id="donkey_saddle",
            label="Saddle",
            kind=LayerKind.CEM_MODEL,
            cem_entity_type_candidates=["donkey_saddle"],
            texture_asset_id=saddle,
            z_index=135,
            bone_alias_map=dict(SADDLE_BONE_ALIASES),
        )]
