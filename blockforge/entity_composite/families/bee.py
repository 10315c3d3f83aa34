"""Bees: angry/nectar state textures and the stinger bone."""
from __future__ import annotations

from typing import Dict, Optional

from blockforge.entity_composite.families.base import FamilyContext, FamilyResult
from blockforge.entity_composite.schemas import ControlState, EntityCompositeSchema, ToggleControl


class BeeFamily:
    family_id = "bee"

    def matches(self, ctx: FamilyContext) -> bool:
        return ctx.entity_root == "bee"

    def build(self, ctx: FamilyContext) -> Optional[FamilyResult]:
        folder = f"entity/{ctx.dir}" if ctx.dir else "entity/bee"
        textures = {
            state: ctx.find(f"{folder}/{leaf}")
            for state, leaf in (
                ("angry", "bee_angry"), ("nectar", "bee_nectar"), ("angry_nectar", "bee_angry_nectar"),
            )
        }
        controls = []
        if textures["angry"] or textures["angry_nectar"]:
            controls.append(ToggleControl(id="bee.angry", label="Angry"))
        if textures["nectar"] or textures["angry_nectar"]:
            controls.append(ToggleControl(id="bee.nectar", label="Nectar"))
        controls.append(ToggleControl(id="bee.has_stinger", label="Stinger", default=True))
        return FamilyResult(controls=controls, context={"textures": textures})

    def base_texture_asset_id(self, schema: EntityCompositeSchema, state: ControlState) -> str:
        angry = state.toggle("bee.angry")
        nectar = state.toggle("bee.nectar")
        key = "angry_nectar" if angry and nectar else "angry" if angry else "nectar" if nectar else None
        if key is None:
            return schema.base_asset_id
        return schema.context["textures"].get(key) or schema.base_asset_id

    def bone_input_overrides(self, schema: EntityCompositeSchema, state: ControlState) -> Dict[str, Dict[str, float]]:
        return {"stinger": {"visible": 1.0 if state.toggle("bee.has_stinger", True) else 0.0}}
