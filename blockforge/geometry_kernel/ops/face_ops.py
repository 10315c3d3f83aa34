"""Face quad construction in model-local space."""
from __future__ import annotations

from typing import Dict, List, Sequence, Tuple

from blockforge.geometry_kernel.schemas import MINECRAFT_UNIT, FaceDirection

Vec3 = Tuple[float, float, float]

FACE_NORMALS: Dict[FaceDirection, Vec3] = {
    FaceDirection.EAST: (1.0, 0.0, 0.0),
    FaceDirection.WEST: (-1.0, 0.0, 0.0),
    FaceDirection.UP: (0.0, 1.0, 0.0),
    FaceDirection.DOWN: (0.0, -1.0, 0.0),
    FaceDirection.SOUTH: (0.0, 0.0, 1.0),
    FaceDirection.NORTH: (0.0, 0.0, -1.0),
}

# Unit-cube corner signs per face, ordered bottom-left, bottom-right, top-right,
# top-left as seen from outside (counter-clockwise -> outward winding).
_FACE_CORNERS: Dict[FaceDirection, Tuple[Vec3, Vec3, Vec3, Vec3]] = {
    FaceDirection.EAST: ((1, -1, 1), (1, -1, -1), (1, 1, -1), (1, 1, 1)),
    FaceDirection.WEST: ((-1, -1, -1), (-1, -1, 1), (-1, 1, 1), (-1, 1, -1)),
    FaceDirection.UP: ((-1, 1, 1), (1, 1, 1), (1, 1, -1), (-1, 1, -1)),
    FaceDirection.DOWN: ((-1, -1, -1), (1, -1, -1), (1, -1, 1), (-1, -1, 1)),
    FaceDirection.SOUTH: ((-1, -1, 1), (1, -1, 1), (1, 1, 1), (-1, 1, 1)),
    FaceDirection.NORTH: ((1, -1, -1), (-1, -1, -1), (-1, 1, -1), (1, 1, -1)),
}

QUAD_INDICES = (0, 1, 2, 0, 2, 3)


def element_center(from_: Sequence[float], to: Sequence[float]) -> List[float]:
    """Midpoint in block units, re-centred so the block spans [-0.5, 0.5]."""
    return [(a + b) / 2.0 / MINECRAFT_UNIT - 0.5 for a, b in zip(from_, to)]


def element_size(from_: Sequence[float], to: Sequence[float]) -> List[float]:
    return [(b - a) / MINECRAFT_UNIT for a, b in zip(from_, to)]


def face_vertices(face: FaceDirection, center: Sequence[float], size: Sequence[float]) -> List[Vec3]:
    half = [s / 2.0 for s in size]
    return [
        (center[0] + sx * half[0], center[1] + sy * half[1], center[2] + sz * half[2])
        for sx, sy, sz in _FACE_CORNERS[face]
    ]
