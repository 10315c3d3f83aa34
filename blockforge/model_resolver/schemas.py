"""Model Resolver Schemas (blockstates, models, resolved output)."""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, field_validator

from blockforge.config.runtime_config import get_max_texture_indirection
from blockforge.model_resolver.ops.texture_ops import face_texture_ids


# --- Blockstate References ---

class VariantModelRef(BaseModel):
    """One model candidate inside a variant or multipart `apply` entry."""
    model: str
    x: int = 0
    y: int = 0
    z: int = 0
    uvlock: bool = False
    weight: int = 1

    @field_validator("weight", mode="before")
    @classmethod
    def _min_weight(cls, value: Any) -> int:
        # Weights below 1 still count as a single ticket.
        try:
            return max(1, int(value))
        except (TypeError, ValueError):
            return 1


class PropertyType(str, Enum):
    BOOLEAN = "boolean"
    INT = "int"
    ENUM = "enum"


class BlockPropertySchema(BaseModel):
    name: str
    property_type: PropertyType
    values: List[str] = Field(default_factory=list)
    min: Optional[int] = None
    max: Optional[int] = None
    default: str = ""


class BlockStateSchema(BaseModel):
    """Editable property surface of a block (used to drive preview controls)."""
    block_id: str
    properties: List[BlockPropertySchema] = Field(default_factory=list)
    default_state: Dict[str, str] = Field(default_factory=dict)
    variants_map: Optional[Dict[str, int]] = None  # variant key -> candidate count

    def property(self, name: str) -> Optional[BlockPropertySchema]:
        for prop in self.properties:
            if prop.name == name:
                return prop
        return None


# --- Model Output ---

class MergedModel(BaseModel):
    """A model with its parent chain flattened."""
    model_id: str
    parent_chain: List[str] = Field(default_factory=list)  # child first
    elements: List[Dict[str, Any]] = Field(default_factory=list)
    textures: Dict[str, str] = Field(default_factory=dict)
    ambientocclusion: bool = True
    gui_light: Optional[str] = None
    display: Dict[str, Any] = Field(default_factory=dict)
    builtin: Optional[str] = None  # e.g. "builtin/entity"


class ResolvedModelPart(BaseModel):
    """One applied model with its blockstate transform."""
    model_id: str
    x: int = 0
    y: int = 0
    z: int = 0
    uvlock: bool = False
    elements: List[Dict[str, Any]] = Field(default_factory=list)  # raw, validated per element downstream
    textures: Dict[str, str] = Field(default_factory=dict)        # name -> concrete id or "#unresolved"
    unresolved_textures: List[str] = Field(default_factory=list)
    ambientocclusion: bool = True
    parent_chain: List[str] = Field(default_factory=list)

    @property
    def rotation(self) -> List[int]:
        return [self.x, self.y, self.z]


class ResolvedModel(BaseModel):
    """
    Output of blockstate resolution.
    Variant blocks carry one part; multipart blocks carry every applicable part.
    """
    block_id: str
    properties: Dict[str, str] = Field(default_factory=dict)
    seed: Optional[int] = None
    parts: List[ResolvedModelPart] = Field(default_factory=list)
    variant_key: Optional[str] = None
    is_placeholder: bool = False
    diagnostics: List[str] = Field(default_factory=list)

    @property
    def elements(self) -> List[Dict[str, Any]]:
        return [element for part in self.parts for element in part.elements]

    @property
    def textures(self) -> Dict[str, str]:
        merged: Dict[str, str] = {}
        for part in self.parts:
            merged.update(part.textures)
        return merged

    @property
    def texture_ids(self) -> List[str]:
        """Sorted concrete textures drawn by any part; each part resolves against its own map."""
        max_hops = get_max_texture_indirection()
        found = set()
        for part in self.parts:
            found.update(face_texture_ids(part.elements, part.textures, max_hops))
        return sorted(found)

    @property
    def rotation(self) -> List[int]:
        return self.parts[0].rotation if self.parts else [0, 0, 0]

    @property
    def uvlock(self) -> bool:
        return self.parts[0].uvlock if self.parts else False
