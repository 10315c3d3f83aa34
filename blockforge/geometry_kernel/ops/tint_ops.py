"""Tint colours for tintindex faces."""
from __future__ import annotations

from typing import Dict, List, Mapping, Optional, Sequence

# Fallback biome colours when no explicit tint is supplied.
DEFAULT_GRASS_TINT = [124, 189, 107]
DEFAULT_FOLIAGE_TINT = [72, 181, 24]
DEFAULT_WATER_TINT = [63, 118, 228]
SPRUCE_FOLIAGE_TINT = [97, 153, 97]
BIRCH_FOLIAGE_TINT = [128, 167, 85]

_FIXED_TINTS: Dict[str, List[int]] = {
    "spruce_leaves": SPRUCE_FOLIAGE_TINT,
    "birch_leaves": BIRCH_FOLIAGE_TINT,
    "water": DEFAULT_WATER_TINT,
    "water_cauldron": DEFAULT_WATER_TINT,
    "lily_pad": [32, 128, 48],
}
_BYTE_EPSILON = 1e-6
_GRASS_BLOCKS = {"grass_block", "short_grass", "grass", "tall_grass", "fern", "large_fern",
                 "potted_fern", "sugar_cane", "pink_petals"}


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def _to_byte(value: float) -> int:
    return int(value * 255 + _BYTE_EPSILON)


def redstone_power_tint(power: int) -> List[int]:
    """
    Wire colour for a signal strength 0..15.
    r = f*0.6 + (0.4 if f > 0 else 0.3); g = f^2*0.7 - 0.5; b = f^2*0.6 - 0.7 (clamped),
    each scaled to 0..255 and truncated (with a tolerance so 0.7 - 0.5 lands on 51, not 50).
    """
    f = max(0, min(15, int(power))) / 15.0
    r = f * 0.6 + (0.4 if f > 0 else 0.3)
    g = _clamp01(f * f * 0.7 - 0.5)
    b = _clamp01(f * f * 0.6 - 0.7)
    return [_to_byte(_clamp01(r)), _to_byte(g), _to_byte(b)]


def default_tint_for_block(block_path: str, properties: Optional[Mapping[str, str]] = None) -> Optional[List[int]]:
    """Contextual colour for well-known tinted blocks; None if the block is not tinted."""
    name = block_path.rsplit("/", 1)[-1]
    if name == "redstone_wire":
        power = (properties or {}).get("power", "15")
        try:
            return redstone_power_tint(int(power))
        except ValueError:
            return redstone_power_tint(15)
    if name in _FIXED_TINTS:
        return list(_FIXED_TINTS[name])
    if name in _GRASS_BLOCKS:
        return list(DEFAULT_GRASS_TINT)
    if name.endswith("_leaves") or name == "vine":
        return list(DEFAULT_FOLIAGE_TINT)
    return None


def normalize_tint(tint: Optional[Sequence[int]]) -> Optional[List[int]]:
    if tint is None:
        return None
    if len(tint) != 3:
        raise ValueError("tint must be an RGB triple")
    return [max(0, min(255, int(channel))) for channel in tint]
