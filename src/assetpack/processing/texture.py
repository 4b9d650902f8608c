"""Texture processing: decode, power-of-two base resampling and mip chains.

Pixels are RGBA8, sRGB-encoded, rows top-down. Filtering happens in linear
light with colour premultiplied by alpha; alpha itself is filtered linearly.
Every mip level is resampled straight from the decoded source so error does
not compound from level to level.
"""

from __future__ import annotations

import io
from dataclasses import dataclass, field
from typing import List, Tuple

import numpy as np
from PIL import Image, UnidentifiedImageError

from ..color import linear_to_srgb, srgb_to_linear
from ..errors import ImageDecodeError, E_IMAGE_DECODE
from ..models import FORMAT_RGBA8_UNORM_SRGB, TextureMeta

__all__ = [
    "is_pow2",
    "pow2_ceil",
    "mip_level_count",
    "mip_dimensions",
    "decode_image",
    "resample_srgb",
    "MipChain",
    "build_mip_chain",
    "single_level",
]

RESAMPLE_FILTER = Image.Resampling.BICUBIC


def is_pow2(n: int) -> bool:
    return n > 0 and (n & (n - 1)) == 0


def pow2_ceil(n: int) -> int:
    if n <= 1:
        return 1
    return 1 << (n - 1).bit_length()


def mip_level_count(width: int, height: int) -> int:
    """floor(log2(max(width, height))) + 1"""
    return max(width, height).bit_length()


def mip_dimensions(width: int, height: int, level: int) -> Tuple[int, int]:
    return max(1, width >> level), max(1, height >> level)


def decode_image(data: bytes, source: str = "<memory>") -> np.ndarray:
    """Decode an encoded image into an ``(h, w, 4)`` uint8 RGBA array."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            rgba = img.convert("RGBA")
    except (
        UnidentifiedImageError,
        Image.DecompressionBombError,
        OSError,
        ValueError,
    ) as exc:
        raise ImageDecodeError(
            code=E_IMAGE_DECODE,
            message=f"Couldn't decode image {source}: {exc}",
            context={"path": source},
        ) from exc
    return np.asarray(rgba, dtype=np.uint8).copy()


def _resize_plane(plane: np.ndarray, width: int, height: int) -> np.ndarray:
    img = Image.fromarray(np.ascontiguousarray(plane, dtype=np.float32))
    return np.asarray(img.resize((width, height), RESAMPLE_FILTER), dtype=np.float32)


def resample_srgb(pixels: np.ndarray, width: int, height: int) -> np.ndarray:
    """Resize an sRGB RGBA8 image, filtering in linear space."""
    src_h, src_w = pixels.shape[:2]
    if (src_w, src_h) == (width, height):
        return pixels.copy()
    normalized = pixels.astype(np.float32) / np.float32(255.0)
    alpha = normalized[..., 3]
    color = srgb_to_linear(normalized[..., :3]) * alpha[..., None]

    alpha_out = np.clip(_resize_plane(alpha, width, height), 0.0, 1.0)
    color_out = np.stack(
        [_resize_plane(color[..., c], width, height) for c in range(3)], axis=-1
    )
    out = np.zeros_like(color_out)
    np.divide(
        color_out, alpha_out[..., None], out=out, where=alpha_out[..., None] > 0
    )
    srgb = linear_to_srgb(np.clip(out, 0.0, 1.0))
    result = np.empty((height, width, 4), dtype=np.uint8)
    result[..., :3] = np.rint(np.clip(srgb, 0.0, 1.0) * 255.0)
    result[..., 3] = np.rint(alpha_out * 255.0)
    return result


@dataclass(slots=True)
class MipChain:
    width: int
    height: int
    levels: List[np.ndarray] = field(default_factory=list)
    format: int = FORMAT_RGBA8_UNORM_SRGB

    @property
    def mip_levels(self) -> int:
        return len(self.levels)

    def meta(self) -> TextureMeta:
        return TextureMeta(self.width, self.height, self.mip_levels, self.format)


def build_mip_chain(pixels: np.ndarray) -> MipChain:
    """Resample to power-of-two base dimensions and derive every mip level."""
    src_h, src_w = pixels.shape[:2]
    base_w, base_h = src_w, src_h
    if not (is_pow2(src_w) and is_pow2(src_h)):
        base_w, base_h = pow2_ceil(src_w), pow2_ceil(src_h)
    chain = MipChain(base_w, base_h)
    for level in range(mip_level_count(base_w, base_h)):
        w, h = mip_dimensions(base_w, base_h, level)
        chain.levels.append(resample_srgb(pixels, w, h))
    return chain


def single_level(pixels: np.ndarray) -> MipChain:
    """Wrap decoded pixels untouched as a one-level chain (raw textures)."""
    h, w = pixels.shape[:2]
    return MipChain(w, h, [np.ascontiguousarray(pixels, dtype=np.uint8)])
