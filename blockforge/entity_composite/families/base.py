"""Entity family plumbing shared by every family module."""
from __future__ import annotations

from typing import Any, Dict, FrozenSet, List, Optional, Protocol, Sequence
from pydantic import BaseModel, Field

from blockforge.entity_composite.layer_detection import find_asset_id
from blockforge.entity_composite.schemas import (
    BoneRender, Control, ControlState, EntityCompositeSchema, SelectControl, SelectOption,
)


class FamilyContext(BaseModel):
    """Path facts about the selected asset plus the visible texture ids."""
    selected_asset_id: str
    base_asset_id: str
    namespace: str
    entity_path: str
    entity_root: str
    dir: str
    leaf: str
    all_ids: FrozenSet[str]
    ordered_ids: List[str] = Field(default_factory=list)

    def find(self, *paths: str) -> Optional[str]:
        return find_asset_id(self.namespace, paths, self.all_ids)

    def has(self, asset_id: str) -> bool:
        return asset_id in self.all_ids

    def ids_under(self, prefix: str) -> List[str]:
        """Texture ids beneath 'entity/<prefix>' in catalog order."""
        full = f"{self.namespace}:entity/{prefix}"
        return [asset_id for asset_id in self.ordered_ids if asset_id.startswith(full)]


class FamilyResult(BaseModel):
    controls: List[Control] = Field(default_factory=list)
    context: Dict[str, Any] = Field(default_factory=dict)
    base_asset_id: Optional[str] = None


def select_control(
    control_id: str,
    label: str,
    values: Sequence[str],
    default: str,
    labels: Optional[Dict[str, str]] = None,
    description: Optional[str] = None,
) -> SelectControl:
    labels = labels or {}
    return SelectControl(
        id=control_id,
        label=label,
        default=default,
        options=[SelectOption(value=v, label=labels.get(v, v)) for v in values],
        description=description,
    )


def visible(flag: bool) -> BoneRender:
    return BoneRender(visible=flag)


class EntityFamily(Protocol):
    """
    One entity family: a path-shape predicate and a catalog scan. Families hold
    no state; anything they learn from the catalog goes into the schema context.

    The per-state hooks (active_layers, base_texture_asset_id, cem_entity_type,
    root_transform, bone_render_overrides, bone_input_overrides,
    part_texture_overrides, entity_state_overrides) are optional; a family
    defines only the ones it needs and call_hook supplies the rest.
    """

    family_id: str

    def matches(self, ctx: FamilyContext) -> bool:
        ...

    def build(self, ctx: FamilyContext) -> Optional[FamilyResult]:
        ...


def call_hook(
    family: Optional[EntityFamily], hook: str, schema: EntityCompositeSchema, state: ControlState, default: Any,
) -> Any:
    fn = getattr(family, hook, None) if family is not None else None
    if fn is None:
        return default
    return fn(schema, state)
