"""Entity Composite Schemas.

A composite schema is plain data: controls, catalog-derived context and the id of
the family that produced it. Hook methods look the family up at call time, so two
schemas built from the same catalog compare equal field by field.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Union
from pydantic import BaseModel, Field


class SelectOption(BaseModel):
    value: str
    label: str


class ToggleControl(BaseModel):
    kind: Literal["toggle"] = "toggle"
    id: str
    label: str
    default: bool = False
    description: Optional[str] = None


class SelectControl(BaseModel):
    kind: Literal["select"] = "select"
    id: str
    label: str
    default: str
    options: List[SelectOption] = Field(default_factory=list)
    description: Optional[str] = None


Control = Union[ToggleControl, SelectControl]


class ControlState(BaseModel):
    """User-chosen control values; missing ids fall back to control defaults."""
    toggles: Dict[str, bool] = Field(default_factory=dict)
    selects: Dict[str, str] = Field(default_factory=dict)

    def toggle(self, control_id: str, default: bool = False) -> bool:
        return bool(self.toggles.get(control_id, default))

    def select(self, control_id: str, default: str = "") -> str:
        return self.selects.get(control_id, default)

    def overlaid(self, other: Optional["ControlState"]) -> "ControlState":
        if other is None:
            return self.model_copy(deep=True)
        return ControlState(
            toggles={**self.toggles, **other.toggles},
            selects={**self.selects, **other.selects},
        )


class LayerKind(str, Enum):
    CLONE_TEXTURE = "clone_texture"
    CEM_MODEL = "cem_model"


class LayerBlend(str, Enum):
    NORMAL = "normal"
    ADDITIVE = "additive"


class RGB(BaseModel):
    """sRGB colour, components in 0..1."""
    r: float
    g: float
    b: float


class MaterialMode(BaseModel):
    kind: Literal["default", "tint", "emissive", "energy_swirl"] = "default"
    color: Optional[RGB] = None
    intensity: Optional[float] = None
    repeat: Optional[float] = None
    scroll: Optional[Dict[str, float]] = None


class BoneRender(BaseModel):
    visible: bool = True


class Vec3(BaseModel):
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0


class Layer(BaseModel):
    id: str
    label: str
    kind: LayerKind
    texture_asset_id: str
    blend: LayerBlend = LayerBlend.NORMAL
    z_index: int = 0
    opacity: float = Field(default=1.0, ge=0.0, le=1.0)
    material_mode: MaterialMode = Field(default_factory=MaterialMode)
    # overlay bone name -> base bone name
    bone_alias_map: Dict[str, str] = Field(default_factory=dict)
    cem_entity_type_candidates: List[str] = Field(default_factory=list)
    sync_to_base_pose: bool = False
    replaces_base_bones: List[str] = Field(default_factory=list)
    bone_render_overrides: Dict[str, BoneRender] = Field(default_factory=dict)
    bone_scale_multipliers: Dict[str, Vec3] = Field(default_factory=dict)
    bone_position_offsets: Dict[str, Vec3] = Field(default_factory=dict)
    allow_vanilla_fallback: bool = True


class CemEntityType(BaseModel):
    entity_type: str
    parent_entity: Optional[str] = None


class RootTransform(BaseModel):
    position: Vec3 = Field(default_factory=Vec3)
    rotation: Vec3 = Field(default_factory=Vec3)
    scale: Vec3 = Field(default_factory=lambda: Vec3(x=1.0, y=1.0, z=1.0))


class MobStateProfile(BaseModel):
    """Generic mob state switches appended to every composite for known mobs."""
    entity_type: str
    aggressive: bool = False
    child: bool = False
    sitting: bool = False
    in_water: bool = False
    sneaking: bool = False
    sleeping: bool = False


class EntityCompositeSchema(BaseModel):
    family_id: Optional[str] = None
    base_asset_id: str
    entity_root: str
    controls: List[Control] = Field(default_factory=list)
    context: Dict[str, Any] = Field(default_factory=dict)
    mob_states: Optional[MobStateProfile] = None

    # --- Hooks ---

    def _family(self):
        from blockforge.entity_composite.service import get_family

        return get_family(self.family_id) if self.family_id else None

    def _hook(self, hook: str, state: Optional[ControlState], default: Any) -> Any:
        from blockforge.entity_composite.families.base import call_hook

        return call_hook(self._family(), hook, self, self.effective_state(state), default)

    def effective_state(self, state: Optional[ControlState] = None) -> ControlState:
        return default_state(self).overlaid(state)

    def get_active_layers(self, state: Optional[ControlState] = None) -> List[Layer]:
        layers = self._hook("active_layers", state, [])
        return sorted(layers, key=lambda layer: layer.z_index)

    def get_base_texture_asset_id(self, state: Optional[ControlState] = None) -> str:
        return self._hook("base_texture_asset_id", state, self.base_asset_id)

    def get_cem_entity_type(self, state: Optional[ControlState] = None) -> Optional[CemEntityType]:
        return self._hook("cem_entity_type", state, None)

    def get_root_transform(self, state: Optional[ControlState] = None) -> Optional[RootTransform]:
        return self._hook("root_transform", state, None)

    def get_bone_render_overrides(self, state: Optional[ControlState] = None) -> Dict[str, BoneRender]:
        """Per-bone visibility; the '*' key applies to every bone not named explicitly."""
        return self._hook("bone_render_overrides", state, {})

    def get_bone_input_overrides(self, state: Optional[ControlState] = None) -> Dict[str, Dict[str, float]]:
        return self._hook("bone_input_overrides", state, {})

    def get_part_texture_overrides(self, state: Optional[ControlState] = None) -> Dict[str, str]:
        return self._hook("part_texture_overrides", state, {})

    def get_entity_state_overrides(self, state: Optional[ControlState] = None) -> Dict[str, Union[bool, float]]:
        """Animation channel patches; generic mob states are applied last."""
        from blockforge.entity_composite.families.mob_states import mob_state_overrides

        overrides: Dict[str, Union[bool, float]] = dict(self._hook("entity_state_overrides", state, {}))
        if self.mob_states is not None:
            overrides.update(mob_state_overrides(self.mob_states, self.effective_state(state)))
        return overrides


def default_state(schema: EntityCompositeSchema) -> ControlState:
    state = ControlState()
    for control in schema.controls:
        if isinstance(control, ToggleControl):
            state.toggles[control.id] = control.default
        else:
            state.selects[control.id] = control.default
    return state
