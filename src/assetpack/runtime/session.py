"""A loading session: one pack plus the registries that resolve names in it."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List

from ..archive import AssetPack
from ..processing.mesh import Mesh
from . import loaders
from .registry import MaterialRegistry, TextureRegistry
from .types import MaterialLib, Texture2D

__all__ = ["PackSession"]


class PackSession:
    """Owns the texture and material registries for one loaded pack.

    Load textures before the material libraries that reference them.
    """

    def __init__(self, pack: AssetPack) -> None:
        self.pack = pack
        self.textures = TextureRegistry()
        self.materials = MaterialRegistry()

    @classmethod
    def open(cls, path: str | Path) -> "PackSession":
        return cls(AssetPack.load(path))

    def load_texture(self, path: str, name: str | None = None) -> Texture2D:
        tex = loaders.load_texture(self.pack, path, name)
        self.textures.register(tex.name, tex)
        return tex

    def load_textures(self, paths: Iterable[str]) -> List[Texture2D]:
        return [self.load_texture(p) for p in paths]

    def load_material_lib(self, path: str) -> MaterialLib:
        return loaders.load_material_lib(
            self.pack, path, self.textures, self.materials
        )

    def load_mesh(self, path: str) -> Mesh:
        return loaders.load_mesh(self.pack, path)
