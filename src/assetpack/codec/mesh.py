"""Compiled mesh blob codec (``<key>/mesh``).

::

    <4sHHII6f  magic "MESH", version, flags, vertex count, index count,
               bounding box min xyz, max xyz
    vertex count * <8f   position, normal, uv
    index count * <I
"""

from __future__ import annotations

import struct

import numpy as np

from ..errors import corrupt, E_BAD_MAGIC, E_BAD_VERSION, E_SIZE_MISMATCH
from ..models import BoundingBox
from ..processing.mesh import VERTEX_FLOATS, Mesh

__all__ = ["SUFFIX_MESH", "MESH_MAGIC", "encode_mesh", "decode_mesh"]

SUFFIX_MESH = "/mesh"
MESH_MAGIC = b"MESH"
MESH_VERSION = 1
FLAG_SOURCE_NORMALS = 0x1

_HEADER = struct.Struct("<4sHHII6f")
_VERTEX_SIZE = VERTEX_FLOATS * 4


def encode_mesh(mesh: Mesh) -> bytes:
    flags = FLAG_SOURCE_NORMALS if mesh.has_source_normals else 0
    header = _HEADER.pack(
        MESH_MAGIC,
        MESH_VERSION,
        flags,
        mesh.vertex_count,
        mesh.index_count,
        *mesh.bounds.minimum,
        *mesh.bounds.maximum,
    )
    vertices = np.ascontiguousarray(mesh.vertices, dtype="<f4").tobytes()
    indices = np.ascontiguousarray(mesh.indices, dtype="<u4").tobytes()
    return header + vertices + indices


def decode_mesh(data: bytes | memoryview) -> Mesh:
    buf = bytes(data)
    if len(buf) < _HEADER.size:
        raise corrupt(E_SIZE_MISMATCH, f"Mesh blob too small ({len(buf)} bytes)")
    magic, version, flags, n_verts, n_indices, *box = _HEADER.unpack_from(buf, 0)
    if magic != MESH_MAGIC:
        raise corrupt(E_BAD_MAGIC, f"Mesh blob has bad magic {magic!r}")
    if version != MESH_VERSION:
        raise corrupt(E_BAD_VERSION, f"Unsupported mesh blob version {version}")
    expected = _HEADER.size + n_verts * _VERTEX_SIZE + n_indices * 4
    if len(buf) != expected:
        raise corrupt(
            E_SIZE_MISMATCH,
            f"Mesh blob is {len(buf)} bytes, header implies {expected}",
        )
    vert_end = _HEADER.size + n_verts * _VERTEX_SIZE
    vertices = (
        np.frombuffer(buf, dtype="<f4", count=n_verts * VERTEX_FLOATS, offset=_HEADER.size)
        .reshape(n_verts, VERTEX_FLOATS)
        .astype(np.float32)
    )
    indices = np.frombuffer(buf, dtype="<u4", count=n_indices, offset=vert_end).astype(
        np.uint32
    )
    mesh = Mesh(
        vertices=vertices,
        indices=indices,
        bounds=BoundingBox(tuple(box[0:3]), tuple(box[3:6])),  # type: ignore[arg-type]
        has_source_normals=bool(flags & FLAG_SOURCE_NORMALS),
    )
    mesh.validate()
    return mesh
