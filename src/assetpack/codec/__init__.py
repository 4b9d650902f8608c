"""Binary encodings of compiled assets."""

from .material import (
    SUFFIX_MATERIAL_LIB,
    decode_material_lib,
    encode_material_lib,
)
from .mesh import SUFFIX_MESH, decode_mesh, encode_mesh
from .texture import (
    SUFFIX_META,
    decode_texture_meta,
    encode_texture_meta,
    mip_suffix,
)

__all__ = [
    "SUFFIX_MATERIAL_LIB",
    "decode_material_lib",
    "encode_material_lib",
    "SUFFIX_MESH",
    "decode_mesh",
    "encode_mesh",
    "SUFFIX_META",
    "decode_texture_meta",
    "encode_texture_meta",
    "mip_suffix",
]
