"""Asset list loading (JSON/YAML).

Format::

    base_dir: optional, relative to the list file
    assets:
      - {path: models/sponza.mtl, kind: mtllib}
      - {path: models/sponza.obj, kind: obj_mesh}
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Set, Tuple

import yaml

from ..errors import ManifestError, E_MANIFEST, E_SOURCE_READ, E_UNKNOWN_KIND
from .assets import AssetCompileInfo, AssetKind

__all__ = ["AssetList", "load_asset_list", "parse_asset_list"]


@dataclass(slots=True)
class AssetList:
    base_dir: Path
    assets: List[AssetCompileInfo] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.assets)


def _fail(message: str, code: str = E_MANIFEST, **context: Any) -> ManifestError:
    return ManifestError(code=code, message=message, context=context or None)


def load_asset_list(path: str | Path) -> AssetList:
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as exc:
        raise _fail(f"Cannot read asset list {p}: {exc}", E_SOURCE_READ, path=str(p)) from exc
    try:
        if p.suffix.lower() in {".yaml", ".yml"}:
            data: Any = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (yaml.YAMLError, json.JSONDecodeError) as exc:
        raise _fail(f"Cannot parse asset list {p}: {exc}", path=str(p)) from exc
    return parse_asset_list(data, p.parent)


def parse_asset_list(data: Any, root: Path) -> AssetList:
    if not isinstance(data, dict):
        raise _fail("Root of asset list must be an object")
    base = data.get("base_dir")
    if base is not None and not isinstance(base, str):
        raise _fail("base_dir must be a string")
    base_dir = root / base if base else root
    raw_assets = data.get("assets")
    if not isinstance(raw_assets, list):
        raise _fail("assets must be a list")
    result = AssetList(base_dir=base_dir)
    seen: Set[Tuple[str, str]] = set()
    for i, item in enumerate(raw_assets):
        where = f"assets[{i}]"
        if not isinstance(item, dict):
            raise _fail(f"{where} must be an object", index=i)
        path = item.get("path")
        if not isinstance(path, str) or not path.strip():
            raise _fail(f"{where}.path must be a non-empty string", index=i)
        kind_value = item.get("kind")
        if not isinstance(kind_value, str):
            raise _fail(f"{where}.kind must be a string", index=i)
        try:
            kind = AssetKind.parse(kind_value)
        except ValueError as exc:
            raise _fail(
                f"{where}.kind: unknown asset kind {kind_value!r}",
                E_UNKNOWN_KIND,
                index=i,
            ) from exc
        info = AssetCompileInfo(path.strip(), kind)
        marker = (info.key, kind.family)
        if marker in seen:
            raise _fail(
                f"{where}: {info.key} declared twice as a {kind.family}",
                index=i,
                key=info.key,
            )
        seen.add(marker)
        result.assets.append(info)
    return result
