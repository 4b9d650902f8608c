"""Runtime loaders turning pack entries back into usable objects."""

from .loaders import load_material_lib, load_mesh, load_texture
from .registry import MaterialRegistry, Registry, TextureRegistry
from .session import PackSession
from .types import Material, MaterialLib, Texture2D

__all__ = [
    "load_material_lib",
    "load_mesh",
    "load_texture",
    "MaterialRegistry",
    "Registry",
    "TextureRegistry",
    "PackSession",
    "Material",
    "MaterialLib",
    "Texture2D",
]
