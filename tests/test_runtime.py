from pathlib import Path

import numpy as np
import pytest

from assetpack.archive import ArchiveBuilder, AssetPack
from assetpack.codec import encode_texture_meta
from assetpack.diagnostics import W_DUPLICATE_NAME, W_UNRESOLVED
from assetpack.errors import (
    CorruptDataError,
    MissingEntryError,
    E_SIZE_MISMATCH,
    E_UNTERMINATED_STRING,
)
from assetpack.models import TextureMeta
from assetpack.pipeline import AssetCompileInfo, AssetKind, compile_full_pack
from assetpack.runtime import (
    PackSession,
    TextureRegistry,
    Texture2D,
    load_material_lib,
    load_mesh,
    load_texture,
)

ASSETS = [
    AssetCompileInfo("scene.mtl", AssetKind.MTL_LIB),
    AssetCompileInfo("quad.obj", AssetKind.OBJ_MESH),
    AssetCompileInfo("brick.png", AssetKind.TEXTURE_MIPS),
    AssetCompileInfo("icon.png", AssetKind.TEXTURE_RAW),
]


@pytest.fixture
def pack(asset_tree: Path, tmp_path: Path) -> AssetPack:
    out = tmp_path / "scene.pak"
    assert compile_full_pack(out, ASSETS, base_dir=asset_tree).ok
    return AssetPack.load(out)


def test_load_texture_levels(pack: AssetPack):
    tex = load_texture(pack, "brick.png")
    assert (tex.width, tex.height, tex.mip_levels) == (128, 128, 8)
    for level, pixels in enumerate(tex.levels):
        w, h = tex.level_dimensions(level)
        assert pixels.shape == (h, w, 4)
        assert not pixels.flags.writeable


def test_load_raw_texture(pack: AssetPack):
    tex = load_texture(pack, "icon.png")
    assert (tex.width, tex.height, tex.mip_levels) == (3, 5, 1)
    assert tuple(tex.levels[0][4, 2]) == (200, 100, 50, 255)


def test_load_mesh(pack: AssetPack):
    mesh = load_mesh(pack, "quad.obj")
    assert mesh.vertex_count == 4
    np.testing.assert_array_equal(mesh.indices, [0, 1, 2, 0, 2, 3])
    np.testing.assert_allclose(mesh.uvs, [[0, 1], [1, 1], [1, 0], [0, 0]])
    assert mesh.bounds.maximum == (1.0, 1.0, 0.0)


def test_session_resolves_textures_and_warns_on_missing(pack: AssetPack):
    session = PackSession(pack)
    brick = session.load_texture("brick.png")
    lib = session.load_material_lib("scene.mtl")
    assert len(lib) == 2
    mat = lib["BRICK"]
    assert mat.diffuse_texture is brick
    assert mat.specular_texture is None
    assert mat.height_texture is None
    assert mat.specular_power == 16.0
    assert [d.code for d in lib.diagnostics] == [W_UNRESOLVED]
    assert "missing_spec.png" in lib.diagnostics.records[0].message
    assert session.materials.lookup("glass") is lib["glass"]


def test_material_lib_without_registry_skips_resolution(pack: AssetPack):
    lib = load_material_lib(pack, "scene.mtl")
    assert lib["brick"].diffuse_texture is None
    assert len(lib.diagnostics) == 0


def test_session_open(pack: AssetPack):
    session = PackSession.open(pack.path)
    assert len(session.pack) == len(pack)
    session.load_textures(["brick.png", "icon.png"])
    assert session.textures.names() == ["brick.png", "icon.png"]


def test_missing_entries_raise(pack: AssetPack):
    with pytest.raises(MissingEntryError):
        load_mesh(pack, "scene.mtl")
    with pytest.raises(MissingEntryError):
        load_texture(pack, "nothing.png")


def _pack_with(tmp_path: Path, entries: dict) -> AssetPack:
    b = ArchiveBuilder()
    for key, data in entries.items():
        b.add(key, data)
    out = tmp_path / "custom.pak"
    b.write(out)
    return AssetPack.load(out)


def test_corrupt_material_lib_fails_load(tmp_path: Path):
    pack = _pack_with(tmp_path, {"m.mtl/material_lib": b"abc"})
    with pytest.raises(CorruptDataError) as ei:
        load_material_lib(pack, "m.mtl")
    assert ei.value.code == E_UNTERMINATED_STRING


def test_texture_level_size_mismatch(tmp_path: Path):
    pack = _pack_with(
        tmp_path,
        {
            "t.png/meta": encode_texture_meta(TextureMeta(4, 4, 1)),
            "t.png/0": b"\x00" * 10,
        },
    )
    with pytest.raises(CorruptDataError) as ei:
        load_texture(pack, "t.png")
    assert ei.value.code == E_SIZE_MISMATCH


def test_duplicate_material_in_lib_keeps_first(tmp_path: Path):
    from assetpack.codec import encode_material_lib
    from assetpack.models import MaterialRecord

    data = encode_material_lib(
        [
            MaterialRecord(name="m", specular_power=1.0),
            MaterialRecord(name="m", specular_power=2.0),
        ]
    )
    pack = _pack_with(tmp_path, {"d.mtl/material_lib": data})
    lib = load_material_lib(pack, "d.mtl")
    assert len(lib) == 1
    assert lib["m"].specular_power == 1.0
    assert [d.code for d in lib.diagnostics] == [W_DUPLICATE_NAME]


def test_registry_first_registration_wins():
    reg = TextureRegistry()
    a = Texture2D("a", 1, 1)
    b = Texture2D("a", 2, 2)
    assert reg.register("Tex\\A.png", a)
    assert not reg.register("tex/a.png", b)
    assert reg.lookup("TEX/A.PNG") is a
    assert "tex/a.png" in reg
    assert len(reg) == 1
