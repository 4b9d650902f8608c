import pytest

from assetpack.reporting import SilentReporter, using_reporter


@pytest.fixture(autouse=True)
def _quiet_reporter():
    with using_reporter(SilentReporter()):
        yield


MTL_TEXT = """\
# scene materials
newmtl Brick
Kd 0.8 0.4 0.2
Ks 0.5 0.5 0.5
Ns 16
map_Kd brick.png
map_Ks missing_spec.png

newmtl Glass
Kd 1.0 1.0 1.0
"""

OBJ_TEXT = """\
v 0 0 0
v 1 0 0
v 1 1 0
v 0 1 0
vt 0 0
vt 1 0
vt 1 1
vt 0 1
f 1/1 2/2 3/3 4/4
"""


def write_png(path, width, height, color=(200, 100, 50, 255)):
    from PIL import Image

    Image.new("RGBA", (width, height), color).save(path, format="PNG")


@pytest.fixture
def asset_tree(tmp_path):
    """A small source tree: one .mtl, one .obj and one image."""
    src = tmp_path / "src"
    src.mkdir()
    (src / "scene.mtl").write_text(MTL_TEXT, encoding="utf-8")
    (src / "quad.obj").write_text(OBJ_TEXT, encoding="utf-8")
    write_png(src / "brick.png", 100, 100)
    write_png(src / "icon.png", 3, 5)
    return src
