"""Interchangeable skins in one folder (bed colours, boat woods, cat skins, axolotls...)."""
from __future__ import annotations

from typing import Optional

from blockforge.entity_composite.dye_colors import get_dye
from blockforge.entity_composite.families.base import FamilyContext, FamilyResult, select_control
from blockforge.entity_composite.layer_detection import (
    classify_variant_directory, direct_dir_and_leaf, direct_leaves, sorted_variant_leaves, title_label,
)
from blockforge.entity_composite.schemas import ControlState, EntityCompositeSchema

_LABELS = {"dye": "Color", "wood": "Wood Type", "cat": "Cat Type", "pattern": "Variant"}
_EXCLUDED_DIRS = ("bee", "banner", "horse")


def variant_option_label(folder: str, kind: str, leaf: str) -> str:
    if kind == "dye":
        return get_dye(leaf).label if leaf == get_dye(leaf).id else title_label(leaf)
    if leaf == folder:
        return "Default"
    if leaf.startswith(f"{folder}_"):
        return title_label(leaf[len(folder) + 1:])
    if leaf.endswith(f"_{folder}"):
        return title_label(leaf[: -(len(folder) + 1)])
    return title_label(leaf)


class BaseVariantFamily:
    family_id = "base_variant"

    def matches(self, ctx: FamilyContext) -> bool:
        direct = direct_dir_and_leaf(ctx.entity_path)
        return direct is not None and direct[0] not in _EXCLUDED_DIRS

    def build(self, ctx: FamilyContext) -> Optional[FamilyResult]:
        folder, leaf = direct_dir_and_leaf(ctx.entity_path)
        leaves = direct_leaves(ctx.ordered_ids, folder)
        kind = classify_variant_directory(folder, leaves)
        if kind is None:
            return None
        options = sorted_variant_leaves(kind, leaves)
        default = leaf if leaf in options else options[0]
        control = select_control(
            "entity.variant", _LABELS[kind], options, default,
            labels={option: variant_option_label(folder, kind, option) for option in options},
        )
        return FamilyResult(
            controls=[control],
            context={"namespace": ctx.namespace, "folder": folder, "kind": kind, "variants": options},
        )

    def base_texture_asset_id(self, schema: EntityCompositeSchema, state: ControlState) -> str:
        chosen = state.select("entity.variant", "")
        if chosen in schema.context["variants"]:
            return f"{schema.context['namespace']}:entity/{schema.context['folder']}/{chosen}"
        return schema.base_asset_id
