"""Asset descriptors and compiled results passed through the pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List

from ..archive import normalize_key
from ..diagnostics import Diagnostic
from ..models import CompiledBlob

__all__ = ["AssetKind", "AssetCompileInfo", "CompiledAsset"]


class AssetKind(str, Enum):
    MTL_LIB = "mtllib"
    OBJ_MESH = "obj_mesh"
    TEXTURE_RAW = "texture_raw"
    TEXTURE_MIPS = "texture_mips"

    @property
    def family(self) -> str:
        """Kinds in one family write the same entry suffixes for a key."""
        if self in (AssetKind.TEXTURE_RAW, AssetKind.TEXTURE_MIPS):
            return "texture"
        return self.value

    @classmethod
    def parse(cls, value: str) -> "AssetKind":
        return cls(value.strip().lower())


@dataclass(frozen=True, slots=True)
class AssetCompileInfo:
    """One source asset: its logical path (also its pack key) and kind."""

    path: str
    kind: AssetKind

    @property
    def key(self) -> str:
        return normalize_key(self.path)

    def source_path(self, base_dir: Path | None = None) -> Path:
        p = Path(self.path)
        if base_dir is not None and not p.is_absolute():
            return base_dir / p
        return p


@dataclass(slots=True)
class CompiledAsset:
    info: AssetCompileInfo
    blobs: List[CompiledBlob] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def total_bytes(self) -> int:
        return sum(len(b.data) for b in self.blobs)
