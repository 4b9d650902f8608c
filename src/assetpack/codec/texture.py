"""Texture metadata and pixel blob codec.

``<key>/meta`` holds ``<iiii>`` width, height, mip count, format tag.
``<key>/<level>`` holds the raw RGBA8 rows of that mip level, top-down.
"""

from __future__ import annotations

import struct

from ..errors import corrupt, E_INVALID_PARAM, E_SIZE_MISMATCH
from ..models import FORMAT_RGBA8_UNORM_SRGB, TextureMeta

__all__ = [
    "SUFFIX_META",
    "META_SIZE",
    "mip_suffix",
    "encode_texture_meta",
    "decode_texture_meta",
    "check_level_size",
]

SUFFIX_META = "/meta"

_META = struct.Struct("<iiii")
META_SIZE = _META.size


def mip_suffix(level: int) -> str:
    return f"/{level}"


def encode_texture_meta(meta: TextureMeta) -> bytes:
    return _META.pack(meta.width, meta.height, meta.mip_levels, meta.format)


def decode_texture_meta(data: bytes | memoryview) -> TextureMeta:
    if len(data) != META_SIZE:
        raise corrupt(
            E_SIZE_MISMATCH,
            f"Texture metadata is {len(data)} bytes, expected {META_SIZE}",
        )
    width, height, mips, fmt = _META.unpack(bytes(data))
    if width <= 0 or height <= 0:
        raise corrupt(E_INVALID_PARAM, f"Invalid texture dimensions {width}x{height}")
    if mips < 1 or mips > max(width, height).bit_length():
        raise corrupt(
            E_INVALID_PARAM,
            f"Invalid mip count {mips} for {width}x{height}",
        )
    if fmt != FORMAT_RGBA8_UNORM_SRGB:
        raise corrupt(E_INVALID_PARAM, f"Unsupported texture format tag {fmt}")
    return TextureMeta(width, height, mips, fmt)


def check_level_size(meta: TextureMeta, level: int, size: int) -> None:
    expected = meta.level_size(level)
    if size != expected:
        raise corrupt(
            E_SIZE_MISMATCH,
            f"Mip level {level} is {size} bytes, expected {expected}",
            {"level": level},
        )
