"""UV Operations (auto-unwrap, normalization, quarter-turn rotation)."""
from __future__ import annotations

from typing import List, Sequence, Tuple

from blockforge.geometry_kernel.schemas import MINECRAFT_UNIT, FaceDirection

UVPair = Tuple[float, float]


def generate_auto_uv(face: FaceDirection, from_: Sequence[float], to: Sequence[float]) -> List[float]:
    """Project the element extents onto the face plane -> [x1, y1, x2, y2] in pixels."""
    x1, y1, z1 = from_
    x2, y2, z2 = to
    s = MINECRAFT_UNIT
    if face == FaceDirection.UP:
        return [x1, z1, x2, z2]
    if face == FaceDirection.DOWN:
        return [x1, s - z2, x2, s - z1]
    if face == FaceDirection.NORTH:
        return [s - x2, s - y2, s - x1, s - y1]
    if face == FaceDirection.SOUTH:
        return [x1, s - y2, x2, s - y1]
    if face == FaceDirection.EAST:
        return [s - z2, s - y2, s - z1, s - y1]
    return [z1, s - y2, z2, s - y1]  # west


def normalize_uv_rect(uv: Sequence[float]) -> List[UVPair]:
    """
    Pixel rect -> 4 corner pairs in [0,1]^2 with the vertical flip
    (texture origin is top-left, mesh origin bottom-left).
    Corner order: bottom-left, bottom-right, top-right, top-left.
    """
    x1, y1, x2, y2 = (float(c) for c in uv)
    u1, u2 = x1 / MINECRAFT_UNIT, x2 / MINECRAFT_UNIT
    v1, v2 = 1.0 - y1 / MINECRAFT_UNIT, 1.0 - y2 / MINECRAFT_UNIT
    return [(u1, v2), (u2, v2), (u2, v1), (u1, v1)]


def rotate_uv_corners(corners: Sequence[UVPair], rotation: int) -> List[UVPair]:
    """Quarter turns shift the corner assignment by one vertex each; 4 turns is identity."""
    steps = (rotation // 90) % 4
    return [corners[(i + steps) % 4] for i in range(4)]


def face_uvs(face: FaceDirection, uv, rotation: int, from_: Sequence[float], to: Sequence[float]) -> List[UVPair]:
    rect = uv if uv is not None else generate_auto_uv(face, from_, to)
    return rotate_uv_corners(normalize_uv_rect(rect), rotation)
