"""Banners: placement, 16-step facing, base colour and one tinted pattern."""
from __future__ import annotations

import math
from typing import Dict, List, Optional

from blockforge.common.asset_ids import asset_path_leaf, split_asset_id
from blockforge.entity_composite.dye_colors import DYE_COLORS, get_dye_rgb
from blockforge.entity_composite.families.base import (
    FamilyContext, FamilyResult, select_control, visible,
)
from blockforge.entity_composite.layer_detection import BANNER_BASE_LEAVES, stable_unique, title_label
from blockforge.entity_composite.schemas import (
    BoneRender, CemEntityType, ControlState, EntityCompositeSchema, Layer, LayerKind, MaterialMode,
    RootTransform, Vec3,
)

FACING_STEPS = 16


class BannerFamily:
    family_id = "banner"

    def matches(self, ctx: FamilyContext) -> bool:
        if ctx.leaf in ("banner", "banner_base"):
            return True
        return split_asset_id(ctx.base_asset_id)[1].startswith("entity/banner")

    def build(self, ctx: FamilyContext) -> Optional[FamilyResult]:
        patterns_all = ctx.ids_under("banner/")
        if not patterns_all:
            return None
        full_texture = ctx.find("entity/banner_base") or ctx.find("entity/banner/base", "entity/banner/banner_base")
        mask_texture = ctx.find("entity/banner/base", "entity/banner/banner_base") or full_texture
        dye_ids = [d.id for d in DYE_COLORS]
        dye_labels = {d.id: d.label for d in DYE_COLORS}

        controls = [
            select_control("banner.placement", "Placement", ["standing", "wall"], "standing",
                           labels={"standing": "Standing", "wall": "Wall"}),
            select_control("banner.facing", "Facing", [str(i) for i in range(FACING_STEPS)], "0"),
            select_control("banner.base_color", "Base Color", dye_ids, "white", labels=dye_labels),
        ]
        patterns = [
            leaf for leaf in stable_unique(asset_path_leaf(i) for i in patterns_all)
            if leaf not in BANNER_BASE_LEAVES
        ]
        if patterns:
            labels = {p: title_label(p) for p in patterns}
            labels["none"] = "None"
            controls.append(select_control("banner.pattern", "Pattern", ["none"] + patterns, "none", labels=labels))
            controls.append(select_control("banner.pattern_color", "Pattern Color", dye_ids, "black", labels=dye_labels))
        return FamilyResult(
            controls=controls,
            context={
                "namespace": ctx.namespace,
                "full_texture": full_texture,
                "mask_texture": mask_texture,
                "patterns": patterns,
            },
        )

    def base_texture_asset_id(self, schema: EntityCompositeSchema, state: ControlState) -> str:
        return schema.context["full_texture"] or schema.base_asset_id

    def cem_entity_type(self, schema: EntityCompositeSchema, state: ControlState) -> CemEntityType:
        return CemEntityType(entity_type="banner")

    def root_transform(self, schema: EntityCompositeSchema, state: ControlState) -> RootTransform:
        try:
            step = int(state.select("banner.facing", "0"))
        except ValueError:
            step = 0
        return RootTransform(rotation=Vec3(y=-step * (math.pi / 8)))

    def bone_render_overrides(self, schema: EntityCompositeSchema, state: ControlState) -> Dict[str, BoneRender]:
        if state.select("banner.placement", "standing") != "wall":
            return {}
        return {"stand": visible(False)}

    def active_layers(self, schema: EntityCompositeSchema, state: ControlState) -> List[Layer]:
        layers = []
        mask = schema.context["mask_texture"]
        base_color = state.select("banner.base_color", "white")
        if mask and base_color != "white":
            layers.append(Layer(
                id="banner_base_tint",
                label="Base Color",
                kind=LayerKind.CLONE_TEXTURE,
                texture_asset_id=mask,
                z_index=50,
                material_mode=MaterialMode(kind="tint", color=get_dye_rgb(base_color)),
            ))
        pattern = state.select("banner.pattern", "none")
        if pattern in schema.context["patterns"]:
            layers.append(Layer(
                id="banner_pattern",
                label="Pattern",
                kind=LayerKind.CLONE_TEXTURE,
                texture_asset_id=f"{schema.context['namespace']}:entity/banner/{pattern}",
                z_index=60,
                material_mode=MaterialMode(
                    kind="tint", color=get_dye_rgb(state.select("banner.pattern_color", "black")),
                ),
            ))
        return layers
