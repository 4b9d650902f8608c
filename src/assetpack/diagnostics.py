"""Recoverable diagnostics raised while parsing authored text formats.

A diagnostic never stops the parse: the caller applies a default or clamp and
keeps going. Each one goes to the active reporter and is kept on the parse
result so the orchestrator can count them per asset.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from .reporting import get_reporter

W_SYNTAX = "W_SYNTAX"
W_MISSING_TOKEN = "W_MISSING_TOKEN"
W_EXTRA_TOKEN = "W_EXTRA_TOKEN"
W_BAD_NUMBER = "W_BAD_NUMBER"
W_CLAMPED = "W_CLAMPED"
W_NO_ACTIVE_RECORD = "W_NO_ACTIVE_RECORD"
W_DUPLICATE_NAME = "W_DUPLICATE_NAME"
W_DEGENERATE_FACE = "W_DEGENERATE_FACE"
W_UNRESOLVED = "W_UNRESOLVED"


@dataclass(frozen=True, slots=True)
class Diagnostic:
    code: str
    message: str
    source: str = ""
    line: Optional[int] = None

    def __str__(self) -> str:
        if self.line is None:
            return f"{self.source}: {self.message}"
        return f"{self.source}: line {self.line}: {self.message}"

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "source": self.source,
            "line": self.line,
        }


class DiagnosticLog:
    """Collects diagnostics for a single source file."""

    def __init__(self, source: str) -> None:
        self.source = source
        self.records: List[Diagnostic] = []

    def warn(self, code: str, message: str, line: Optional[int] = None) -> None:
        diag = Diagnostic(code, message, self.source, line)
        self.records.append(diag)
        get_reporter().diagnostic(diag)

    def codes(self) -> List[str]:
        return [d.code for d in self.records]

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self):
        return iter(self.records)


__all__ = [
    "Diagnostic",
    "DiagnosticLog",
    "W_SYNTAX",
    "W_MISSING_TOKEN",
    "W_EXTRA_TOKEN",
    "W_BAD_NUMBER",
    "W_CLAMPED",
    "W_NO_ACTIVE_RECORD",
    "W_DUPLICATE_NAME",
    "W_DEGENERATE_FACE",
    "W_UNRESOLVED",
]
