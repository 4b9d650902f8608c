"""Batch compilation of source assets into a pack."""

from .assets import AssetCompileInfo, AssetKind, CompiledAsset
from .compilers import COMPILERS, compile_asset
from .loader import AssetList, load_asset_list, parse_asset_list
from .orchestrator import (
    AssetFailure,
    CompileReport,
    compile_full_pack,
    load_pack_or_compile,
)

__all__ = [
    "AssetCompileInfo",
    "AssetKind",
    "CompiledAsset",
    "COMPILERS",
    "compile_asset",
    "AssetList",
    "load_asset_list",
    "parse_asset_list",
    "AssetFailure",
    "CompileReport",
    "compile_full_pack",
    "load_pack_or_compile",
]
