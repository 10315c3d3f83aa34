"""Texture Core Models."""
from __future__ import annotations

from typing import List, Literal, Optional
from pydantic import BaseModel

BlendMode = Literal["normal", "additive", "multiply"]


class TextureInfo(BaseModel):
    """Decoded texture summary (pixels stay as PNG bytes)."""
    texture_id: str
    width: int
    height: int
    frame_count: int = 1
    animated: bool = False
    mode: str = "RGBA"
    is_placeholder: bool = False
    png: bytes = b""


class TextureLayer(BaseModel):
    """One image in a flattened stack, painted in list order."""
    texture_id: str
    png: bytes
    blend: BlendMode = "normal"
    opacity: float = 1.0
    tint: Optional[List[int]] = None
    emissive: float = 0.0
