"""Plain data records shared by the parsers, codecs and runtime loaders."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple

import numpy as np

RGB = Tuple[float, float, float]

FORMAT_RGBA8_UNORM_SRGB = 29  # DXGI_FORMAT_R8G8B8A8_UNORM_SRGB
BYTES_PER_PIXEL = 4


def float32(value: float) -> float:
    """Round ``value`` to the nearest 32-bit float (what the codecs store)."""
    return float(np.float32(value))


@dataclass(slots=True)
class MaterialRecord:
    name: str = ""
    diffuse_texture: str = ""
    specular_texture: str = ""
    height_texture: str = ""
    diffuse_color: RGB = (0.0, 0.0, 0.0)
    specular_color: RGB = (0.0, 0.0, 0.0)
    specular_power: float = 0.0

    def texture_slots(self) -> dict[str, str]:
        return {
            "diffuse": self.diffuse_texture,
            "specular": self.specular_texture,
            "height": self.height_texture,
        }


@dataclass(slots=True)
class TextureMeta:
    width: int
    height: int
    mip_levels: int
    format: int = FORMAT_RGBA8_UNORM_SRGB

    def level_dimensions(self, level: int) -> Tuple[int, int]:
        return max(1, self.width >> level), max(1, self.height >> level)

    def level_size(self, level: int) -> int:
        w, h = self.level_dimensions(level)
        return w * h * BYTES_PER_PIXEL


@dataclass(slots=True)
class BoundingBox:
    minimum: Tuple[float, float, float] = (np.inf, np.inf, np.inf)
    maximum: Tuple[float, float, float] = (-np.inf, -np.inf, -np.inf)

    @classmethod
    def from_points(cls, points: np.ndarray) -> "BoundingBox":
        if len(points) == 0:
            return cls()
        lo = points.min(axis=0)
        hi = points.max(axis=0)
        return cls(
            tuple(float(v) for v in lo),  # type: ignore[arg-type]
            tuple(float(v) for v in hi),  # type: ignore[arg-type]
        )

    @property
    def is_empty(self) -> bool:
        return any(lo > hi for lo, hi in zip(self.minimum, self.maximum))


@dataclass(slots=True)
class CompiledBlob:
    """One archive entry produced by a compiler: ``<asset key><suffix>``."""

    suffix: str
    data: bytes = field(repr=False)


__all__ = [
    "RGB",
    "FORMAT_RGBA8_UNORM_SRGB",
    "BYTES_PER_PIXEL",
    "float32",
    "MaterialRecord",
    "TextureMeta",
    "BoundingBox",
    "CompiledBlob",
]
