"""The sixteen dye colours with their texture diffuse values."""
from __future__ import annotations

from typing import List, NamedTuple, Tuple

from blockforge.entity_composite.schemas import RGB


class DyeColor(NamedTuple):
    id: str
    label: str
    rgb: Tuple[int, int, int]


DYE_COLORS: List[DyeColor] = [
    DyeColor("white", "White", (249, 255, 254)),
    DyeColor("orange", "Orange", (249, 128, 29)),
    DyeColor("magenta", "Magenta", (199, 78, 189)),
    DyeColor("light_blue", "Light Blue", (58, 179, 218)),
    DyeColor("yellow", "Yellow", (254, 216, 61)),
    DyeColor("lime", "Lime", (128, 199, 31)),
    DyeColor("pink", "Pink", (243, 139, 170)),
    DyeColor("gray", "Gray", (71, 79, 82)),
    DyeColor("light_gray", "Light Gray", (157, 157, 151)),
    DyeColor("cyan", "Cyan", (22, 156, 156)),
    DyeColor("purple", "Purple", (137, 50, 184)),
    DyeColor("blue", "Blue", (60, 68, 170)),
    DyeColor("brown", "Brown", (131, 84, 50)),
    DyeColor("green", "Green", (94, 124, 22)),
    DyeColor("red", "Red", (176, 46, 38)),
    DyeColor("black", "Black", (29, 29, 33)),
]

DYE_COLOR_IDS = frozenset(dye.id for dye in DYE_COLORS)
_BY_ID = {dye.id: dye for dye in DYE_COLORS}


def get_dye(dye_id: str) -> DyeColor:
    """Unknown ids fall back to white."""
    return _BY_ID.get(dye_id, _BY_ID["white"])


def get_dye_rgb(dye_id: str) -> RGB:
    r, g, b = get_dye(dye_id).rgb
    return RGB(r=r / 255.0, g=g / 255.0, b=b / 255.0)


def dye_options() -> List[Tuple[str, str]]:
    return [(dye.id, dye.label) for dye in DYE_COLORS]
