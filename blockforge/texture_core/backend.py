"""Pillow-backed texture decoding, placeholders, tinting and layer flattening."""
from __future__ import annotations

import io
import logging
from typing import List, Optional, Sequence

from PIL import Image, ImageChops, ImageEnhance, UnidentifiedImageError

from blockforge.common.asset_ids import PLACEHOLDER_TEXTURE_ID
from blockforge.texture_core.models import TextureInfo, TextureLayer

logger = logging.getLogger(__name__)

CHECKER_A = (248, 0, 248, 255)
CHECKER_B = (0, 0, 0, 255)


def _to_png(img: Image.Image) -> bytes:
    out_io = io.BytesIO()
    img.save(out_io, format="PNG")
    return out_io.getvalue()


def _open_rgba(data: bytes) -> Image.Image:
    img = Image.open(io.BytesIO(data))
    img.load()
    return img.convert("RGBA")


def checkerboard_placeholder(size: int = 16) -> bytes:
    """Magenta/black 2x2 checkerboard, the missing-texture look."""
    img = Image.new("RGBA", (size, size), CHECKER_B)
    half = max(1, size // 2)
    for x in range(size):
        for y in range(size):
            if (x // half + y // half) % 2 == 0:
                img.putpixel((x, y), CHECKER_A)
    return _to_png(img)


def placeholder_info(texture_id: str = PLACEHOLDER_TEXTURE_ID) -> TextureInfo:
    return TextureInfo(texture_id=texture_id, width=16, height=16, is_placeholder=True, png=checkerboard_placeholder())


def decode_texture(texture_id: str, data: bytes) -> TextureInfo:
    """
    Decode PNG bytes. Vertical strips (height a multiple of width) are animated
    frame sheets. Undecodable bytes degrade to the placeholder.
    """
    try:
        img = _open_rgba(data)
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        logger.warning("Texture %s is not a readable image (%s); using placeholder", texture_id, exc)
        return placeholder_info(texture_id)
    width, height = img.size
    frames = height // width if width and height > width and height % width == 0 else 1
    return TextureInfo(
        texture_id=texture_id,
        width=width,
        height=height,
        frame_count=frames,
        animated=frames > 1,
        mode=img.mode,
        png=data,
    )


def tint_texture(data: bytes, rgb: Sequence[int]) -> bytes:
    """Multiply colour channels by rgb, alpha untouched."""
    img = _open_rgba(data)
    color = Image.new("RGBA", img.size, (int(rgb[0]), int(rgb[1]), int(rgb[2]), 255))
    tinted = ImageChops.multiply(img, color)
    r, g, b, _ = tinted.split()
    return _to_png(Image.merge("RGBA", (r, g, b, img.getchannel("A"))))


def _with_opacity(img: Image.Image, opacity: float) -> Image.Image:
    opacity = max(0.0, min(opacity, 1.0))
    if opacity >= 1.0:
        return img
    r, g, b, a = img.split()
    a = a.point(lambda p: int(p * opacity))
    return Image.merge("RGBA", (r, g, b, a))


def flatten_layers(base_png: bytes, layers: List[TextureLayer]) -> bytes:
    """Paint layers over a base texture in list order; sizes follow the base."""
    canvas = _open_rgba(base_png)
    for layer in layers:
        try:
            src = _open_rgba(layer.png)
        except (UnidentifiedImageError, OSError, ValueError):
            logger.warning("Skipping undecodable layer %s", layer.texture_id)
            continue
        if src.size != canvas.size:
            src = src.resize(canvas.size, Image.Resampling.NEAREST)
        if layer.tint is not None:
            src = _open_rgba(tint_texture(_to_png(src), layer.tint))
        if layer.emissive > 0:
            src = ImageEnhance.Brightness(src).enhance(1.0 + layer.emissive)
        src = _with_opacity(src, layer.opacity)

        if layer.blend == "normal":
            canvas = Image.alpha_composite(canvas, src)
        elif layer.blend == "additive":
            added = ImageChops.add(canvas, src)
            mask = src.getchannel("A")
            canvas = Image.composite(added, canvas, mask)
        else:
            canvas = Image.alpha_composite(canvas, ImageChops.multiply(canvas, src))
    return _to_png(canvas)
