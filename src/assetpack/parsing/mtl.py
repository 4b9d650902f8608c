"""Wavefront .mtl material library parser.

One directive per line; unknown directives are skipped. The parser is
forgiving: malformed lines produce a diagnostic and are applied as far as
they go. Only an unreadable file is fatal.

Supported directives (keywords are case-insensitive)::

    newmtl <name>
    map_Kd <texture>      map_Ks <texture>      map_bump|bump <texture>
    Kd <r> <g> <b>        Ks <r> <g> <b>        Ns <power>
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional

from ..color import saturate, srgb_to_linear
from ..diagnostics import (
    Diagnostic,
    DiagnosticLog,
    W_BAD_NUMBER,
    W_CLAMPED,
    W_DUPLICATE_NAME,
    W_EXTRA_TOKEN,
    W_MISSING_TOKEN,
    W_NO_ACTIVE_RECORD,
)
from ..models import RGB, MaterialRecord, float32
from .tokenizer import Tokenizer, iter_lines, read_source_text

__all__ = ["MaterialRecord", "MtlParseResult", "parse_mtl", "parse_mtl_file"]


@dataclass(slots=True)
class MtlParseResult:
    source: str
    materials: List[MaterialRecord] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)

    def find(self, name: str) -> Optional[MaterialRecord]:
        name = name.lower()
        for mtl in self.materials:
            if mtl.name == name:
                return mtl
        return None


class _MtlParser:
    def __init__(self, source: str) -> None:
        self.log = DiagnosticLog(source)
        self.materials: List[MaterialRecord] = []
        self._by_name: Dict[str, int] = {}
        self.current: Optional[MaterialRecord] = None
        self._handlers: Dict[str, Callable[[Tokenizer, int], None]] = {
            "newmtl": self._newmtl,
            "map_kd": self._texture("diffuse_texture"),
            "map_ks": self._texture("specular_texture"),
            "map_bump": self._texture("height_texture"),
            "bump": self._texture("height_texture"),
            "kd": self._color("diffuse_color"),
            "ks": self._color("specular_color"),
            "ns": self._specular_power,
        }

    def run(self, text: str) -> None:
        for line_no, line in iter_lines(text):
            cursor = Tokenizer(line)
            keyword = cursor.next()
            if keyword is None:
                continue
            handler = self._handlers.get(keyword.lower())
            if handler is not None:
                handler(cursor, line_no)

    # helpers -----------------------------------------------------------------
    def _expect_end(self, cursor: Tokenizer, line: int) -> None:
        extra = cursor.next()
        if extra is not None:
            self.log.warn(
                W_EXTRA_TOKEN,
                f'syntax error: unexpected extra token "{extra}"; ignoring',
                line,
            )

    def _require_record(self, line: int) -> Optional[MaterialRecord]:
        if self.current is None:
            self.log.warn(
                W_NO_ACTIVE_RECORD,
                'syntax error: material parameters specified before any "newmtl" command; ignoring',
                line,
            )
        return self.current

    def _number(self, token: str, line: int) -> float:
        try:
            value = float(token)
        except ValueError:
            value = math.nan
        if not math.isfinite(value):
            self.log.warn(W_BAD_NUMBER, f'invalid number "{token}"; using 0', line)
            return 0.0
        return value

    def _name_token(self, cursor: Tokenizer, line: int, what: str) -> str:
        name = cursor.next()
        if name is None:
            self.log.warn(W_MISSING_TOKEN, f"syntax error: missing {what}", line)
            name = ""
        self._expect_end(cursor, line)
        return name.lower()

    # directives --------------------------------------------------------------
    def _newmtl(self, cursor: Tokenizer, line: int) -> None:
        name = self._name_token(cursor, line, "material name")
        record = MaterialRecord(name=name)
        index = self._by_name.get(name)
        if index is None:
            self._by_name[name] = len(self.materials)
            self.materials.append(record)
        else:
            self.log.warn(
                W_DUPLICATE_NAME,
                f'material "{name}" redefined; replacing earlier definition',
                line,
            )
            self.materials[index] = record
        self.current = record

    def _texture(self, attr: str) -> Callable[[Tokenizer, int], None]:
        def handler(cursor: Tokenizer, line: int) -> None:
            record = self._require_record(line)
            if record is None:
                return
            setattr(record, attr, self._name_token(cursor, line, "texture name"))

        return handler

    def _color(self, attr: str) -> Callable[[Tokenizer, int], None]:
        def handler(cursor: Tokenizer, line: int) -> None:
            record = self._require_record(line)
            if record is None:
                return
            tokens = [cursor.next() for _ in range(3)]
            if any(t is None for t in tokens):
                self.log.warn(W_MISSING_TOKEN, "syntax error: missing RGB color", line)
            self._expect_end(cursor, line)
            srgb = [0.0 if t is None else self._number(t, line) for t in tokens]
            if any(c < 0.0 or c > 1.0 for c in srgb):
                self.log.warn(
                    W_CLAMPED, "RGB color is outside [0, 1]; clamping", line
                )
            linear = srgb_to_linear(saturate(srgb))
            setattr(record, attr, _rgb(linear))

        return handler

    def _specular_power(self, cursor: Tokenizer, line: int) -> None:
        record = self._require_record(line)
        if record is None:
            return
        token = cursor.next()
        if token is None:
            self.log.warn(W_MISSING_TOKEN, "syntax error: missing number", line)
        self._expect_end(cursor, line)
        power = 0.0 if token is None else self._number(token, line)
        if power < 0.0:
            self.log.warn(W_CLAMPED, "specular power is below zero; clamping", line)
            power = 0.0
        record.specular_power = float32(power)


def _rgb(values) -> RGB:
    r, g, b = (float(v) for v in values)
    return (r, g, b)


def parse_mtl(text: str, source: str = "<memory>") -> MtlParseResult:
    parser = _MtlParser(source)
    parser.run(text)
    return MtlParseResult(
        source=source,
        materials=parser.materials,
        diagnostics=list(parser.log),
    )


def parse_mtl_file(path: str | Path) -> MtlParseResult:
    """Parse a material library from disk; raises ``SourceReadError``."""
    return parse_mtl(read_source_text(path), source=str(path))
