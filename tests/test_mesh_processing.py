import numpy as np
import pytest

from assetpack.codec import decode_mesh, encode_mesh
from assetpack.errors import (
    CorruptDataError,
    MeshIndexError,
    E_BAD_MAGIC,
    E_INDEX_OUT_OF_RANGE,
    E_INVALID_PARAM,
    E_SIZE_MISMATCH,
)
from assetpack.parsing import parse_obj
from assetpack.processing import build_mesh, triangulate_fan
from assetpack.processing.mesh import resolve_vertices

QUAD = "v 0 0 0\nv 1 0 0\nv 1 1 0\nv 0 1 0\nf 1 2 3 4\n"


def test_fan_triangulation():
    np.testing.assert_array_equal(triangulate_fan(3), [[0, 1, 2]])
    np.testing.assert_array_equal(triangulate_fan(4), [[0, 1, 2], [0, 2, 3]])
    np.testing.assert_array_equal(
        triangulate_fan(5), [[0, 1, 2], [0, 2, 3], [0, 3, 4]]
    )
    assert triangulate_fan(2).shape == (0, 3)


def test_quad_becomes_two_triangles():
    mesh = build_mesh(parse_obj(QUAD))
    assert mesh.vertex_count == 4
    np.testing.assert_array_equal(mesh.indices, [0, 1, 2, 0, 2, 3])
    assert mesh.indices.dtype == np.uint32
    assert mesh.triangle_count == 2


def test_missing_normals_are_synthesised():
    mesh = build_mesh(parse_obj(QUAD))
    assert not mesh.has_source_normals
    np.testing.assert_allclose(mesh.normals, [[0, 0, 1]] * 4, atol=1e-6)


def test_synthesised_normals_are_unit_length():
    src = parse_obj(
        "v 0 0 0\nv 1 0 0\nv 0 1 0\nv 0 0 1\n"
        "f 1 3 2\nf 1 2 4\nf 1 4 3\nf 2 3 4\n"
    )
    mesh = build_mesh(src)
    lengths = np.linalg.norm(mesh.normals, axis=1)
    np.testing.assert_allclose(lengths, 1.0, atol=1e-6)


def test_source_normals_are_kept():
    src = parse_obj("v 0 0 0\nv 1 0 0\nv 0 1 0\nvn 1 0 0\nf 1//1 2//1 3//1\n")
    mesh = build_mesh(src)
    assert mesh.has_source_normals
    np.testing.assert_array_equal(mesh.normals, [[1, 0, 0]] * 3)


def test_degenerate_triangle_leaves_zero_normal():
    mesh = build_mesh(parse_obj("v 1 1 1\nf 1 1 1\n"))
    assert mesh.vertex_count == 1
    np.testing.assert_array_equal(mesh.normals, [[0, 0, 0]])


def test_shared_corners_are_deduplicated_in_first_seen_order():
    src = parse_obj("v 0 0 0\nv 1 0 0\nv 1 1 0\nv 0 1 0\nf 1 2 3\nf 1 3 4\n")
    assert len(src.corners) == 6
    mesh = build_mesh(src)
    assert mesh.vertex_count == 4
    np.testing.assert_array_equal(mesh.indices, [0, 1, 2, 0, 2, 3])
    np.testing.assert_array_equal(
        mesh.positions, [[0, 0, 0], [1, 0, 0], [1, 1, 0], [0, 1, 0]]
    )


def test_deduplication_is_idempotent():
    src = parse_obj("v 0 0 0\nv 1 0 0\nv 1 1 0\nv 0 1 0\nf 1 2 3\nf 1 3 4\n")
    mesh = build_mesh(src)
    vertices = mesh.vertices.copy()
    indices = mesh.indices.copy()
    assert mesh.deduplicate_vertices() == 0
    np.testing.assert_array_equal(mesh.vertices, vertices)
    np.testing.assert_array_equal(mesh.indices, indices)


def test_corners_differing_in_uv_stay_distinct():
    src = parse_obj("v 0 0 0\nv 1 0 0\nv 0 1 0\nvt 0 0\nvt 1 0\nf 1/1 2/1 3/1\nf 1/2 3/1 2/1\n")
    mesh = build_mesh(src)
    assert mesh.vertex_count == 4


def test_unset_indices_resolve_to_zero():
    src = parse_obj("v 1 2 3\nvn 0 1 0\nf 1 1 1\n")
    verts = resolve_vertices(src)
    assert verts.shape == (3, 8)
    np.testing.assert_array_equal(verts[0], [1, 2, 3, 0, 0, 0, 0, 0])


def test_index_out_of_range_fails_the_asset():
    src = parse_obj("v 0 0 0\nv 1 0 0\n\nf 1 2 3\n", source="bad.obj")
    with pytest.raises(MeshIndexError) as ei:
        build_mesh(src)
    err = ei.value
    assert err.code == E_INDEX_OUT_OF_RANGE
    assert err.context["line"] == 4
    assert "bad.obj: line 4" in err.message


def test_index_beyond_int64_is_out_of_range():
    src = parse_obj("v 0 0 0\nf 1 1 99999999999999999999\n")
    with pytest.raises(MeshIndexError) as ei:
        build_mesh(src)
    assert ei.value.code == E_INDEX_OUT_OF_RANGE
    assert ei.value.context["line"] == 2


def test_uv_index_out_of_range():
    src = parse_obj("v 0 0 0\nf 1/2 1 1\n")
    with pytest.raises(MeshIndexError) as ei:
        build_mesh(src)
    assert ei.value.context["kind"] == "texcoord"


def test_bounds_cover_all_positions():
    src = parse_obj("v 0 0 0\nv 1 2 3\nv -5 0 0\nv 10 10 10\nf 1 2 3\n")
    mesh = build_mesh(src)
    assert mesh.bounds.minimum == (-5.0, 0.0, 0.0)
    assert mesh.bounds.maximum == (10.0, 10.0, 10.0)


def test_empty_mesh():
    mesh = build_mesh(parse_obj(""))
    assert mesh.vertex_count == 0
    assert mesh.index_count == 0
    assert mesh.bounds.is_empty


def test_mesh_blob_roundtrip():
    mesh = build_mesh(parse_obj(QUAD))
    decoded = decode_mesh(encode_mesh(mesh))
    np.testing.assert_array_equal(decoded.vertices, mesh.vertices)
    np.testing.assert_array_equal(decoded.indices, mesh.indices)
    assert decoded.bounds == mesh.bounds
    assert decoded.has_source_normals is False


def test_mesh_blob_bad_magic():
    data = bytearray(encode_mesh(build_mesh(parse_obj(QUAD))))
    data[0:4] = b"HSEM"
    with pytest.raises(CorruptDataError) as ei:
        decode_mesh(bytes(data))
    assert ei.value.code == E_BAD_MAGIC


def test_mesh_blob_truncated():
    data = encode_mesh(build_mesh(parse_obj(QUAD)))
    with pytest.raises(CorruptDataError) as ei:
        decode_mesh(data[:-4])
    assert ei.value.code == E_SIZE_MISMATCH


def test_mesh_blob_index_out_of_range():
    mesh = build_mesh(parse_obj(QUAD))
    mesh.indices = mesh.indices.copy()
    mesh.indices[-1] = 99
    with pytest.raises(CorruptDataError) as ei:
        decode_mesh(encode_mesh(mesh))
    assert ei.value.code == E_INVALID_PARAM


def test_validate_rejects_partial_triangle():
    mesh = build_mesh(parse_obj(QUAD))
    mesh.indices = mesh.indices[:-1]
    with pytest.raises(CorruptDataError) as ei:
        mesh.validate()
    assert ei.value.code == E_INVALID_PARAM
    with pytest.raises(CorruptDataError):
        decode_mesh(encode_mesh(mesh))
