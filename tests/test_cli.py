import json
from pathlib import Path

from assetpack import cli
from assetpack.api import BuildOptions, build_pack, validate_pack


def _asset_list(tmp: Path, src: Path, extra: list | None = None) -> Path:
    data = {
        "base_dir": str(src),
        "assets": [
            {"path": "scene.mtl", "kind": "mtllib"},
            {"path": "quad.obj", "kind": "obj_mesh"},
            {"path": "brick.png", "kind": "texture_mips"},
        ]
        + (extra or []),
    }
    p = tmp / "assets.json"
    p.write_text(json.dumps(data), encoding="utf-8")
    return p


def test_cli_build_inspect_validate(asset_tree: Path, tmp_path: Path, capsys):
    assets = _asset_list(tmp_path, asset_tree)
    out = tmp_path / "cli.pak"
    assert cli.main(["-r", "silent", "build", str(assets), str(out), "-j", "2"]) == 0
    assert out.exists()
    capsys.readouterr()
    assert cli.main(["-r", "silent", "inspect", str(out), "--json"]) == 0
    info = json.loads(capsys.readouterr().out)
    assert info["issues"] == []
    assert info["header"]["entry_count"] == 11
    assert cli.main(["-r", "silent", "validate", str(out)]) == 0


def test_cli_build_with_failures_exits_nonzero(asset_tree: Path, tmp_path: Path):
    assets = _asset_list(
        tmp_path, asset_tree, [{"path": "missing.obj", "kind": "obj_mesh"}]
    )
    out = tmp_path / "partial.pak"
    assert cli.main(["-r", "silent", "build", str(assets), str(out)]) == 1
    assert out.exists()


def test_cli_bad_asset_list_exits_nonzero(tmp_path: Path):
    p = tmp_path / "assets.json"
    p.write_text('{"assets": [{"path": "x", "kind": "nope"}]}', encoding="utf-8")
    assert cli.main(["-r", "silent", "build", str(p), str(tmp_path / "x.pak")]) == 1


def test_cli_validate_corrupt_pack(asset_tree: Path, tmp_path: Path):
    out = tmp_path / "c.pak"
    build_pack(BuildOptions(asset_list=_asset_list(tmp_path, asset_tree), output_path=out))
    data = bytearray(out.read_bytes())
    data[0:8] = b"XXXXXXXX"
    out.write_bytes(bytes(data))
    assert validate_pack(out) == ["Header magic mismatch"]
    assert cli.main(["-r", "silent", "validate", str(out)]) == 1


def test_cli_json_reporter_emits_summaries(asset_tree: Path, tmp_path: Path, capsys):
    assets = _asset_list(tmp_path, asset_tree)
    out = tmp_path / "j.pak"
    assert cli.main(["-r", "json", "build", str(assets), str(out)]) == 0
    events = [json.loads(line) for line in capsys.readouterr().out.splitlines() if line]
    kinds = {e.get("summary_type") for e in events if e.get("event") == "summary"}
    assert {"compile", "pack"} <= kinds


def test_manifest_emission(asset_tree: Path, tmp_path: Path):
    out = tmp_path / "m.pak"
    manifest = tmp_path / "meta" / "m.manifest.json"
    result = build_pack(
        BuildOptions(
            asset_list=_asset_list(tmp_path, asset_tree),
            output_path=out,
            manifest_path=manifest,
            compression_level=9,
        )
    )
    assert result.ok
    data = json.loads(manifest.read_text(encoding="utf-8"))
    assert data["counts"]["entries"] == 11
    assert data["counts"]["failed"] == 0
    assert data["file_size"] == out.stat().st_size
    keys = [e["key"] for e in data["entries"]]
    assert keys[0] == "scene.mtl/material_lib"
    assert "brick.png/meta" in keys
    assert len(data["sha256"]) == 64
    assert "failures" not in data
