"""Geometry and image processing stages of the compiler."""

from .mesh import Mesh, build_mesh, triangulate_fan
from .texture import MipChain, build_mip_chain, decode_image, resample_srgb

__all__ = [
    "Mesh",
    "build_mesh",
    "triangulate_fan",
    "MipChain",
    "build_mip_chain",
    "decode_image",
    "resample_srgb",
]
