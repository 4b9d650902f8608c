"""Deserialise pack entries into runtime objects.

Every loader takes the pack explicitly; name resolution goes through the
registries passed in, never through module state.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from ..archive import AssetPack, normalize_key
from ..codec import (
    SUFFIX_MATERIAL_LIB,
    SUFFIX_MESH,
    SUFFIX_META,
    decode_material_lib,
    decode_mesh,
    decode_texture_meta,
    mip_suffix,
)
from ..codec.texture import check_level_size
from ..diagnostics import DiagnosticLog, W_DUPLICATE_NAME, W_UNRESOLVED
from ..logging import get_logger
from ..processing.mesh import Mesh
from .registry import MaterialRegistry, TextureRegistry
from .types import Material, MaterialLib, Texture2D

__all__ = ["load_texture", "load_material_lib", "load_mesh"]


def load_texture(pack: AssetPack, path: str, name: str | None = None) -> Texture2D:
    meta = decode_texture_meta(pack.require(path, SUFFIX_META))
    levels = []
    for level in range(meta.mip_levels):
        view = pack.require(path, mip_suffix(level))
        check_level_size(meta, level, len(view))
        w, h = meta.level_dimensions(level)
        levels.append(np.frombuffer(view, dtype=np.uint8).reshape(h, w, 4))
    tex = Texture2D(
        name=normalize_key(name or path),
        width=meta.width,
        height=meta.height,
        levels=levels,
        format=meta.format,
    )
    get_logger("runtime").debug(
        "Loaded texture %s %dx%d mips=%d", tex.name, tex.width, tex.height, tex.mip_levels
    )
    return tex


def _resolve(
    textures: TextureRegistry,
    material: str,
    slot: str,
    tex_name: str,
    log: DiagnosticLog,
) -> Optional[Texture2D]:
    if not tex_name:
        return None
    tex = textures.lookup(tex_name)
    if tex is None:
        log.warn(
            W_UNRESOLVED,
            f"Material {material}: couldn't find {slot} texture {tex_name}",
        )
    return tex


def load_material_lib(
    pack: AssetPack,
    path: str,
    textures: TextureRegistry | None = None,
    materials: MaterialRegistry | None = None,
) -> MaterialLib:
    """Decode ``<path>/material_lib`` into a :class:`MaterialLib`.

    With ``textures`` given, non-empty texture names are resolved against it;
    a miss is a warning and leaves that slot ``None``. Without a registry no
    resolution is attempted. Materials are also registered in ``materials``
    when supplied. A repeated material name keeps the first record.
    """
    key = normalize_key(path)
    records = decode_material_lib(pack.require(key, SUFFIX_MATERIAL_LIB))
    log = DiagnosticLog(key + SUFFIX_MATERIAL_LIB)
    lib = MaterialLib(path=key, diagnostics=log)
    for rec in records:
        mat = Material(
            name=rec.name,
            diffuse_color=rec.diffuse_color,
            specular_color=rec.specular_color,
            specular_power=rec.specular_power,
        )
        if textures is not None:
            for slot, tex_name in rec.texture_slots().items():
                tex = _resolve(textures, rec.name, slot, tex_name, log)
                setattr(mat, f"{slot}_texture", tex)
        if rec.name in lib.materials:
            log.warn(W_DUPLICATE_NAME, f"Duplicate material {rec.name}; keeping the first")
            continue
        lib.materials[rec.name] = mat
        if materials is not None:
            materials.register(rec.name, mat)
    get_logger("runtime").debug(
        "Loaded material lib %s materials=%d warnings=%d", key, len(lib), len(log)
    )
    return lib


def load_mesh(pack: AssetPack, path: str) -> Mesh:
    return decode_mesh(pack.require(path, SUFFIX_MESH))
