"""Mesh processing: triangulation, vertex deduplication, normal synthesis.

Everything here is deterministic: the same parsed source always produces
bit-for-bit the same vertex and index buffers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

import numpy as np

from ..errors import MeshIndexError, corrupt, E_INDEX_OUT_OF_RANGE, E_INVALID_PARAM
from ..logging import get_logger
from ..models import BoundingBox
from ..parsing.obj import CORNER_NORMAL, CORNER_POS, CORNER_UV, ObjFace, ObjSource

__all__ = [
    "VERTEX_FLOATS",
    "Mesh",
    "triangulate_fan",
    "triangulate_faces",
    "resolve_vertices",
    "build_mesh",
]

# position (3) + normal (3) + uv (2)
VERTEX_FLOATS = 8


def triangulate_fan(corner_count: int) -> np.ndarray:
    """Fan-triangulate a convex n-gon from its first corner.

    Returns local corner indices shaped ``(n - 2, 3)``: (0,1,2), (0,2,3), ...
    Fewer than three corners yields no triangles.
    """
    if corner_count < 3:
        return np.zeros((0, 3), dtype=np.int64)
    tail = np.arange(2, corner_count, dtype=np.int64)
    return np.stack([np.zeros_like(tail), tail - 1, tail], axis=1)


def triangulate_faces(faces: Iterable[ObjFace]) -> np.ndarray:
    parts = [triangulate_fan(f.corner_count) + f.start for f in faces]
    if not parts:
        return np.zeros(0, dtype=np.uint32)
    return np.concatenate(parts).reshape(-1).astype(np.uint32)


def _normalize_rows(v: np.ndarray) -> np.ndarray:
    length = np.sqrt(np.sum(v * v, axis=1, keepdims=True))
    out = np.zeros_like(v)
    np.divide(v, length, out=out, where=length > 0)
    return out


@dataclass(slots=True)
class Mesh:
    vertices: np.ndarray  # (n, 8) float32
    indices: np.ndarray  # (k,) uint32, k % 3 == 0
    bounds: BoundingBox
    has_source_normals: bool = True

    @property
    def positions(self) -> np.ndarray:
        return self.vertices[:, 0:3]

    @property
    def normals(self) -> np.ndarray:
        return self.vertices[:, 3:6]

    @property
    def uvs(self) -> np.ndarray:
        return self.vertices[:, 6:8]

    @property
    def vertex_count(self) -> int:
        return int(self.vertices.shape[0])

    @property
    def index_count(self) -> int:
        return int(self.indices.shape[0])

    @property
    def triangle_count(self) -> int:
        return self.index_count // 3

    def deduplicate_vertices(self) -> int:
        """Collapse bit-identical vertices, keeping first occurrences in order.

        Returns the number of vertices removed. Running it twice is a no-op.
        """
        before = self.vertex_count
        if before == 0:
            return 0
        rows = np.ascontiguousarray(self.vertices, dtype=np.float32)
        bits = rows.view(np.uint32)
        _, first, inverse = np.unique(
            bits, axis=0, return_index=True, return_inverse=True
        )
        # np.unique orders groups by value; reorder them by first occurrence.
        order = np.argsort(first, kind="stable")
        rank = np.empty(len(order), dtype=np.int64)
        rank[order] = np.arange(len(order), dtype=np.int64)
        remap = rank[inverse.reshape(-1)]
        self.vertices = rows[first[order]]
        self.indices = remap[self.indices.astype(np.int64)].astype(np.uint32)
        return before - self.vertex_count

    def calculate_normals(self) -> None:
        """Replace vertex normals with the normalised sum of adjacent face normals.

        Face normals are unit length (no area weighting). Degenerate triangles
        contribute nothing and vertices with a zero sum keep a zero normal.
        """
        if self.index_count % 3:
            get_logger().warning(
                "Index count %d is not a multiple of 3; trailing indices ignored",
                self.index_count,
            )
        tri = self.indices[: self.triangle_count * 3].astype(np.int64).reshape(-1, 3)
        p = self.positions
        edge0 = p[tri[:, 1]] - p[tri[:, 0]]
        edge1 = p[tri[:, 2]] - p[tri[:, 0]]
        face_normals = _normalize_rows(np.cross(edge0, edge1).astype(np.float32))
        accum = np.zeros((self.vertex_count, 3), dtype=np.float32)
        # Unbuffered add in triangle order keeps the float summation order fixed.
        np.add.at(accum, tri.reshape(-1), np.repeat(face_normals, 3, axis=0))
        self.vertices[:, 3:6] = _normalize_rows(accum)

    def validate(self) -> None:
        """Raise :class:`CorruptDataError` unless the index buffer is well formed."""
        if self.index_count % 3:
            raise corrupt(
                E_INVALID_PARAM,
                f"Index count {self.index_count} is not a multiple of 3",
            )
        if self.index_count and int(self.indices.max()) >= self.vertex_count:
            raise corrupt(E_INVALID_PARAM, "Mesh index references a missing vertex")


def _corner_lines(src: ObjSource) -> np.ndarray:
    lines = np.zeros(len(src.corners), dtype=np.int64)
    for face in src.faces:
        lines[face.start : face.end] = face.line
    return lines


def resolve_vertices(src: ObjSource) -> np.ndarray:
    """Expand the corner table into an ``(m, 8)`` vertex array.

    Raises :class:`MeshIndexError` when a corner points past its array.
    """
    count = len(src.corners)
    columns = []
    lines = None
    for column, table, label in (
        (CORNER_POS, src.positions, "position"),
        (CORNER_NORMAL, src.normals, "normal"),
        (CORNER_UV, src.uvs, "texcoord"),
    ):
        idx = src.corners[:, column] if count else np.zeros(0, dtype=np.int64)
        bad = np.flatnonzero(idx > len(table))
        if bad.size:
            if lines is None:
                lines = _corner_lines(src)
            i = int(bad[0])
            line = int(lines[i])
            raise MeshIndexError(
                code=E_INDEX_OUT_OF_RANGE,
                message=(
                    f"{src.source}: line {line}: {label} index {int(idx[i])}"
                    f" out of range ({len(table)} defined)"
                ),
                context={"path": src.source, "line": line, "kind": label},
            )
        values = np.zeros((count, table.shape[1]), dtype=np.float32)
        used = idx > 0
        values[used] = table[idx[used] - 1]
        columns.append(values)
    return np.hstack(columns).astype(np.float32)


def build_mesh(src: ObjSource) -> Mesh:
    """Turn a parsed .obj into a deduplicated, normal-complete :class:`Mesh`."""
    mesh = Mesh(
        vertices=resolve_vertices(src),
        indices=triangulate_faces(src.faces),
        bounds=BoundingBox.from_points(src.positions),
        has_source_normals=src.has_normals,
    )
    removed = mesh.deduplicate_vertices()
    if not src.has_normals:
        mesh.calculate_normals()
    get_logger().debug(
        "Processed %s - %d verts (%d duplicates removed), %d indices",
        src.source,
        mesh.vertex_count,
        removed,
        mesh.index_count,
    )
    return mesh
