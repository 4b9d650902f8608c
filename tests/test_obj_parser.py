import numpy as np

from assetpack.diagnostics import (
    W_BAD_NUMBER,
    W_DEGENERATE_FACE,
    W_MISSING_TOKEN,
    W_SYNTAX,
)
from assetpack.parsing import parse_obj


def _codes(src):
    return [d.code for d in src.diagnostics]


def test_reads_vertex_streams():
    src = parse_obj(
        "v 1 2 3\n"
        "v -1 -2 -3\n"
        "vn 0 0 1\n"
        "vt 0.25 0.75\n"
    )
    assert _codes(src) == []
    np.testing.assert_array_equal(src.positions, [[1, 2, 3], [-1, -2, -3]])
    np.testing.assert_array_equal(src.normals, [[0, 0, 1]])
    # V is flipped
    np.testing.assert_allclose(src.uvs, [[0.25, 0.25]])
    assert src.has_normals


def test_face_corner_formats():
    src = parse_obj("f 1/2/3 4//5 6/7 8\n")
    np.testing.assert_array_equal(
        src.corners, [[1, 2, 3], [4, 0, 5], [6, 7, 0], [8, 0, 0]]
    )
    assert len(src.faces) == 1
    face = src.faces[0]
    assert (face.start, face.end, face.line) == (0, 4, 1)
    assert face.corner_count == 4


def test_faces_are_recorded_as_ranges():
    src = parse_obj("f 1 2 3\nf 1 3 4 5\n")
    assert [(f.start, f.end) for f in src.faces] == [(0, 3), (3, 7)]
    assert src.corners.shape == (7, 3)


def test_negative_index_is_unset_with_diagnostic():
    src = parse_obj("f -1 2 3\n")
    assert _codes(src) == [W_SYNTAX]
    assert src.corners[0, 0] == 0


def test_bad_index_is_unset_with_diagnostic():
    src = parse_obj("f a 2 3\n")
    assert _codes(src) == [W_BAD_NUMBER]
    assert src.corners[0, 0] == 0


def test_face_with_two_corners_is_degenerate():
    src = parse_obj("f 1 2\n")
    assert _codes(src) == [W_DEGENERATE_FACE]
    assert src.faces[0].corner_count == 2


def test_missing_coordinates_default_to_zero():
    src = parse_obj("v 1 2\nvt\n")
    assert _codes(src) == [W_MISSING_TOKEN, W_MISSING_TOKEN]
    np.testing.assert_array_equal(src.positions, [[1, 2, 0]])
    np.testing.assert_allclose(src.uvs, [[0.0, 1.0]])


def test_unknown_directives_ignored():
    src = parse_obj("o cube\ng side\nusemtl red\ns off\nmtllib a.mtl\nv 0 0 0\n")
    assert _codes(src) == []
    assert len(src.positions) == 1
    assert not src.has_normals


def test_empty_source():
    src = parse_obj("")
    assert src.positions.shape == (0, 3)
    assert src.corners.shape == (0, 3)
    assert src.faces == []
