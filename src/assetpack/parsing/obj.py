"""Wavefront .obj mesh parser.

Reads positions (``v``), normals (``vn``), texture coordinates (``vt``) and
polygon faces (``f``). Faces are kept as ranges over a flat corner table and
are not expanded here; see :mod:`assetpack.processing.mesh`.

Corner indices stay 1-based as authored. A missing or empty sub-index is
stored as 0, meaning "unset", and resolves to a zero component later.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Tuple

import numpy as np

from ..diagnostics import (
    Diagnostic,
    DiagnosticLog,
    W_BAD_NUMBER,
    W_DEGENERATE_FACE,
    W_MISSING_TOKEN,
    W_SYNTAX,
)
from .tokenizer import Tokenizer, iter_lines, read_source_text

__all__ = ["ObjFace", "ObjSource", "parse_obj", "parse_obj_file"]

# Corner table columns.
CORNER_POS, CORNER_UV, CORNER_NORMAL = 0, 1, 2

# Larger indices are stored as this and rejected as out of range on resolve.
MAX_INDEX = int(np.iinfo(np.int64).max)


@dataclass(frozen=True, slots=True)
class ObjFace:
    start: int  # first corner (inclusive)
    end: int  # last corner (exclusive)
    line: int

    @property
    def corner_count(self) -> int:
        return self.end - self.start


@dataclass(slots=True)
class ObjSource:
    source: str
    positions: np.ndarray  # (n, 3) float32
    normals: np.ndarray  # (n, 3) float32
    uvs: np.ndarray  # (n, 2) float32, V already flipped
    corners: np.ndarray  # (m, 3) int64: pos, uv, normal (1-based, 0 = unset)
    faces: List[ObjFace] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def has_normals(self) -> bool:
        return len(self.normals) > 0


class _ObjParser:
    def __init__(self, source: str) -> None:
        self.log = DiagnosticLog(source)
        self.positions: List[Tuple[float, ...]] = []
        self.normals: List[Tuple[float, ...]] = []
        self.uvs: List[Tuple[float, ...]] = []
        self.corners: List[Tuple[int, int, int]] = []
        self.faces: List[ObjFace] = []

    def run(self, text: str) -> None:
        for line_no, line in iter_lines(text):
            cursor = Tokenizer(line)
            keyword = cursor.next()
            if keyword is None:
                continue
            keyword = keyword.lower()
            if keyword == "v":
                self.positions.append(self._floats(cursor, 3, line_no))
            elif keyword == "vn":
                self.normals.append(self._floats(cursor, 3, line_no))
            elif keyword == "vt":
                u, v = self._floats(cursor, 2, line_no)
                self.uvs.append((u, 1.0 - v))
            elif keyword == "f":
                self._face(cursor, line_no)

    def _number(self, token: str, line: int) -> float:
        try:
            value = float(token)
        except ValueError:
            value = math.nan
        if not math.isfinite(value):
            self.log.warn(W_BAD_NUMBER, f'invalid number "{token}"; using 0', line)
            return 0.0
        return value

    def _floats(self, cursor: Tokenizer, count: int, line: int) -> Tuple[float, ...]:
        values = []
        for _ in range(count):
            token = cursor.next()
            if token is None:
                self.log.warn(
                    W_MISSING_TOKEN,
                    f"syntax error: expected {count} numbers",
                    line,
                )
                values.extend([0.0] * (count - len(values)))
                break
            values.append(self._number(token, line))
        return tuple(values)

    def _index(self, text: str, line: int) -> int:
        if not text:
            return 0
        try:
            value = int(text)
        except ValueError:
            self.log.warn(W_BAD_NUMBER, f'invalid index "{text}"; treating as unset', line)
            return 0
        if value < 0:
            self.log.warn(
                W_SYNTAX,
                f"relative index {value} is not supported; treating as unset",
                line,
            )
            return 0
        return min(value, MAX_INDEX)

    def _face(self, cursor: Tokenizer, line: int) -> None:
        start = len(self.corners)
        for corner in cursor:
            parts = corner.split("/")
            parts += [""] * (3 - len(parts))
            self.corners.append(
                (
                    self._index(parts[0], line),
                    self._index(parts[1], line),
                    self._index(parts[2], line),
                )
            )
        face = ObjFace(start, len(self.corners), line)
        if face.corner_count < 3:
            self.log.warn(
                W_DEGENERATE_FACE,
                f"face has {face.corner_count} corners; no triangles emitted",
                line,
            )
        self.faces.append(face)


def _array(rows: list, width: int, dtype) -> np.ndarray:
    if not rows:
        return np.zeros((0, width), dtype=dtype)
    return np.asarray(rows, dtype=dtype).reshape(-1, width)


def parse_obj(text: str, source: str = "<memory>") -> ObjSource:
    parser = _ObjParser(source)
    parser.run(text)
    return ObjSource(
        source=source,
        positions=_array(parser.positions, 3, np.float32),
        normals=_array(parser.normals, 3, np.float32),
        uvs=_array(parser.uvs, 2, np.float32),
        corners=_array(parser.corners, 3, np.int64),
        faces=parser.faces,
        diagnostics=list(parser.log),
    )


def parse_obj_file(path: str | Path) -> ObjSource:
    """Parse a mesh description from disk; raises ``SourceReadError``."""
    return parse_obj(read_source_text(path), source=str(path))
