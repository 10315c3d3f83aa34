"""Geometry Kernel Schemas (element input, buffer output)."""
from __future__ import annotations

import hashlib
import json
from enum import Enum
from typing import Any, Dict, List, Literal, Optional

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, field_validator

MINECRAFT_UNIT = 16.0
VALID_ELEMENT_ANGLES = (-45.0, -22.5, 0.0, 22.5, 45.0)
VALID_FACE_ROTATIONS = (0, 90, 180, 270)
COORD_MIN, COORD_MAX = -16.0, 32.0


class FaceDirection(str, Enum):
    EAST = "east"
    WEST = "west"
    UP = "up"
    DOWN = "down"
    SOUTH = "south"
    NORTH = "north"


# Emission order; the position doubles as the per-face material index.
FACE_ORDER: List[FaceDirection] = [
    FaceDirection.EAST, FaceDirection.WEST, FaceDirection.UP,
    FaceDirection.DOWN, FaceDirection.SOUTH, FaceDirection.NORTH,
]


# --- Element Input ---

class ElementFace(BaseModel):
    model_config = ConfigDict(extra="ignore")

    texture: str
    uv: Optional[List[float]] = None  # [x1, y1, x2, y2] in pixel space
    tintindex: Optional[int] = None
    rotation: int = 0
    cullface: Optional[str] = None

    @field_validator("uv")
    @classmethod
    def _uv_rect(cls, value: Optional[List[float]]) -> Optional[List[float]]:
        if value is not None and len(value) != 4:
            raise ValueError("uv must have 4 components")
        return value

    @field_validator("rotation")
    @classmethod
    def _quarter_turns(cls, value: int) -> int:
        if value not in VALID_FACE_ROTATIONS:
            raise ValueError(f"face rotation must be one of {VALID_FACE_ROTATIONS}")
        return value


class ElementRotation(BaseModel):
    origin: List[float] = Field(default_factory=lambda: [8.0, 8.0, 8.0])
    axis: Literal["x", "y", "z"]
    angle: float
    rescale: bool = False

    @field_validator("origin")
    @classmethod
    def _origin_xyz(cls, value: List[float]) -> List[float]:
        if len(value) != 3:
            raise ValueError("rotation origin must have 3 components")
        return value

    @field_validator("angle")
    @classmethod
    def _angle_step(cls, value: float) -> float:
        if float(value) not in VALID_ELEMENT_ANGLES:
            raise ValueError(f"angle must be one of {VALID_ELEMENT_ANGLES}")
        return float(value)


class ModelElement(BaseModel):
    """A cuboid in 0..16 pixel space (overhang allowed down to -16 / up to 32)."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    from_: List[float] = Field(alias="from")
    to: List[float]
    rotation: Optional[ElementRotation] = None
    faces: Dict[FaceDirection, ElementFace] = Field(default_factory=dict)
    shade: bool = True

    @field_validator("from_", "to")
    @classmethod
    def _corner(cls, value: List[float]) -> List[float]:
        if len(value) != 3:
            raise ValueError("corner must have 3 components")
        for coord in value:
            if not COORD_MIN <= float(coord) <= COORD_MAX:
                raise ValueError(f"coordinate {coord} outside [{COORD_MIN}, {COORD_MAX}]")
        return [float(coord) for coord in value]


# --- Buffer Output ---

class MaterialGroup(BaseModel):
    """Index range drawn with one texture; one group per emitted face."""
    start: int
    count: int = 6
    texture_id: str
    tint_index: Optional[int] = None
    tint_color: Optional[List[int]] = None
    face: FaceDirection
    material_index: int
    element_index: int
    part_index: int = 0


class ElementTransform(BaseModel):
    """Per-element transform metadata, kept out of the vertex data."""
    part_index: int = 0
    element_index: int
    center: List[float]
    size: List[float]
    rotation_origin: Optional[List[float]] = None
    rotation_axis: Optional[str] = None
    rotation_angle: float = 0.0
    rescale: bool = False
    shade: bool = True


class ElementFailure(BaseModel):
    part_index: int = 0
    element_index: int
    code: str
    message: str


class SkippedFace(BaseModel):
    part_index: int = 0
    element_index: int
    face: FaceDirection
    reason: str


class GeometryBuffers(BaseModel):
    """Flat render buffers: 3 floats/vertex for positions and normals, 2 for uvs."""
    positions: List[float] = Field(default_factory=list)
    normals: List[float] = Field(default_factory=list)
    uvs: List[float] = Field(default_factory=list)
    indices: List[int] = Field(default_factory=list)
    material_groups: List[MaterialGroup] = Field(default_factory=list)
    element_transforms: List[ElementTransform] = Field(default_factory=list)
    failures: List[ElementFailure] = Field(default_factory=list)
    skipped_faces: List[SkippedFace] = Field(default_factory=list)
    model_rotations: List[List[int]] = Field(default_factory=list)  # per part [x, y, z]
    uvlock: List[bool] = Field(default_factory=list)                # per part

    @property
    def vertex_count(self) -> int:
        return len(self.positions) // 3

    def packed(self) -> Dict[str, np.ndarray]:
        """Typed arrays as handed to a renderer."""
        return {
            "positions": np.asarray(self.positions, dtype=np.float32),
            "normals": np.asarray(self.normals, dtype=np.float32),
            "uvs": np.asarray(self.uvs, dtype=np.float32),
            "indices": np.asarray(self.indices, dtype=np.uint32),
        }

    def digest(self) -> str:
        """sha256 over packed buffer bytes plus the serialized metadata."""
        h = hashlib.sha256()
        for name, array in self.packed().items():
            h.update(name.encode())
            h.update(array.tobytes())
        meta: Dict[str, Any] = self.model_dump(
            mode="json", include={"material_groups", "element_transforms", "failures",
                                  "skipped_faces", "model_rotations", "uvlock"},
        )
        h.update(json.dumps(meta, sort_keys=True).encode())
        return h.hexdigest()
