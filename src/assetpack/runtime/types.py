"""Runtime objects handed to the renderer after loading from a pack."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

import numpy as np

from ..diagnostics import DiagnosticLog
from ..models import RGB, FORMAT_RGBA8_UNORM_SRGB

__all__ = ["Texture2D", "Material", "MaterialLib"]


@dataclass(slots=True)
class Texture2D:
    """Mip levels as read-only ``(h, w, 4)`` uint8 views into the pack."""

    name: str
    width: int
    height: int
    levels: List[np.ndarray] = field(default_factory=list, repr=False)
    format: int = FORMAT_RGBA8_UNORM_SRGB

    @property
    def mip_levels(self) -> int:
        return len(self.levels)

    def level_dimensions(self, level: int) -> Tuple[int, int]:
        return max(1, self.width >> level), max(1, self.height >> level)


@dataclass(slots=True)
class Material:
    name: str
    diffuse_color: RGB = (0.0, 0.0, 0.0)
    specular_color: RGB = (0.0, 0.0, 0.0)
    specular_power: float = 0.0
    diffuse_texture: Optional[Texture2D] = None
    specular_texture: Optional[Texture2D] = None
    height_texture: Optional[Texture2D] = None


@dataclass(slots=True)
class MaterialLib:
    path: str
    materials: Dict[str, Material] = field(default_factory=dict)
    diagnostics: Optional[DiagnosticLog] = field(default=None, repr=False)

    def __len__(self) -> int:
        return len(self.materials)

    def __iter__(self) -> Iterator[Material]:
        return iter(self.materials.values())

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self.materials

    def __getitem__(self, name: str) -> Material:
        return self.materials[name.lower()]

    def get(self, name: str) -> Optional[Material]:
        return self.materials.get(name.lower())
