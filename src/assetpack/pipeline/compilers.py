"""Per-kind asset compilers: source file in, archive blobs out.

Each compiler is a pure function of its source file. Fatal problems raise
:class:`~assetpack.errors.AssetCompileError` (or ``CorruptDataError``); the
orchestrator turns those into per-asset failures.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict

from ..codec import (
    SUFFIX_MATERIAL_LIB,
    SUFFIX_MESH,
    SUFFIX_META,
    encode_material_lib,
    encode_mesh,
    encode_texture_meta,
    mip_suffix,
)
from ..errors import AssetCompileError, SourceReadError, E_INVALID_PARAM, E_SOURCE_READ
from ..logging import get_logger
from ..models import CompiledBlob
from ..parsing import parse_mtl_file, parse_obj_file
from ..processing.mesh import build_mesh
from ..processing.texture import MipChain, build_mip_chain, decode_image, single_level
from .assets import AssetCompileInfo, AssetKind, CompiledAsset

__all__ = [
    "COMPILERS",
    "compile_asset",
    "compile_mtl_lib",
    "compile_obj_mesh",
    "compile_texture_raw",
    "compile_texture_mips",
]

Compiler = Callable[[AssetCompileInfo, Path], CompiledAsset]


def compile_mtl_lib(info: AssetCompileInfo, source: Path) -> CompiledAsset:
    result = parse_mtl_file(source)
    try:
        data = encode_material_lib(result.materials)
    except ValueError as exc:
        raise AssetCompileError(
            code=E_INVALID_PARAM,
            message=f"Couldn't encode material lib {source}: {exc}",
            context={"path": str(source)},
        ) from exc
    get_logger("compile").debug(
        "Compiled material lib %s - %d materials", source, len(result.materials)
    )
    return CompiledAsset(
        info,
        [CompiledBlob(SUFFIX_MATERIAL_LIB, data)],
        list(result.diagnostics),
    )


def compile_obj_mesh(info: AssetCompileInfo, source: Path) -> CompiledAsset:
    src = parse_obj_file(source)
    mesh = build_mesh(src)
    return CompiledAsset(
        info,
        [CompiledBlob(SUFFIX_MESH, encode_mesh(mesh))],
        list(src.diagnostics),
    )


def _read_image(source: Path):
    try:
        data = source.read_bytes()
    except OSError as exc:
        raise SourceReadError(
            code=E_SOURCE_READ,
            message=f"Couldn't read {source}: {exc.strerror or exc}",
            context={"path": str(source)},
        ) from exc
    return decode_image(data, str(source))


def _texture_blobs(chain: MipChain) -> list[CompiledBlob]:
    blobs = [CompiledBlob(SUFFIX_META, encode_texture_meta(chain.meta()))]
    for level, pixels in enumerate(chain.levels):
        blobs.append(CompiledBlob(mip_suffix(level), pixels.tobytes()))
    return blobs


def compile_texture_raw(info: AssetCompileInfo, source: Path) -> CompiledAsset:
    chain = single_level(_read_image(source))
    return CompiledAsset(info, _texture_blobs(chain))


def compile_texture_mips(info: AssetCompileInfo, source: Path) -> CompiledAsset:
    pixels = _read_image(source)
    chain = build_mip_chain(pixels)
    get_logger("compile").debug(
        "Compiled texture %s - %dx%d -> %dx%d, %d mips",
        source,
        pixels.shape[1],
        pixels.shape[0],
        chain.width,
        chain.height,
        chain.mip_levels,
    )
    return CompiledAsset(info, _texture_blobs(chain))


COMPILERS: Dict[AssetKind, Compiler] = {
    AssetKind.MTL_LIB: compile_mtl_lib,
    AssetKind.OBJ_MESH: compile_obj_mesh,
    AssetKind.TEXTURE_RAW: compile_texture_raw,
    AssetKind.TEXTURE_MIPS: compile_texture_mips,
}


def compile_asset(info: AssetCompileInfo, base_dir: Path | None = None) -> CompiledAsset:
    return COMPILERS[info.kind](info, info.source_path(base_dir))
