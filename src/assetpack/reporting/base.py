"""Reporter protocol and the process-wide active reporter.

Library code never prints. It talks to whatever reporter the CLI (or a test)
installed through :func:`set_reporter`; the default is a plain stderr
reporter. Every hook on :class:`Reporter` is a no-op unless overridden.
"""

from __future__ import annotations

import sys
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import TYPE_CHECKING, Any, Dict, Iterator, Optional

if TYPE_CHECKING:
    from ..diagnostics import Diagnostic
    from ..errors import AssetPackError

__all__ = [
    "TaskStatus",
    "TaskRecord",
    "Reporter",
    "SilentReporter",
    "set_reporter",
    "get_reporter",
    "using_reporter",
    "set_verbosity",
    "get_verbosity",
    "task",
    "format_task_stats",
    "format_summary",
]

# Task meta keys surfaced in completion lines, in display order.
STAT_KEYS = ("assets", "failed", "entries", "warnings", "bytes")


class TaskStatus(Enum):
    RUNNING = auto()
    SUCCESS = auto()
    FAILED = auto()
    SKIPPED = auto()


@dataclass(slots=True)
class TaskRecord:
    task_id: str
    name: str
    total: Optional[int] = None
    completed: int = 0
    status: TaskStatus = TaskStatus.RUNNING
    start_time: float = field(default_factory=time.time)
    end_time: float | None = None
    meta: Dict[str, Any] = field(default_factory=dict)

    @property
    def duration(self) -> float:
        if self.end_time is None:
            return 0.0
        return self.end_time - self.start_time

    def finish(self, status: TaskStatus, meta: Dict[str, Any]) -> "TaskRecord":
        self.status = status
        self.end_time = time.time()
        self.meta.update(meta)
        return self


def format_task_stats(rec: TaskRecord) -> str:
    stats = [f"{k}={rec.meta[k]}" for k in STAT_KEYS if k in rec.meta]
    return f" [{' '.join(stats)}]" if stats else ""


def format_summary(kind: str, **fields: Any) -> str:
    """``"Compile summary: assets=3 failed=0"``"""
    pairs = " ".join(f"{k}={v}" for k, v in fields.items())
    return f"{kind.capitalize()} summary: {pairs}"


_VERBOSITY: int = 0


def set_verbosity(level: int) -> None:
    global _VERBOSITY
    _VERBOSITY = max(0, level)


def get_verbosity() -> int:
    return _VERBOSITY


class Reporter:
    supports_progress: bool = False

    # tasks ---------------------------------------------------------------
    def start_task(
        self, task_id: str, name: str, total: int | None = None, **meta: Any
    ) -> None:
        pass

    def advance(self, task_id: str, step: int = 1, **meta: Any) -> None:
        pass

    def end_task(
        self,
        task_id: str,
        status: TaskStatus = TaskStatus.SUCCESS,
        **final_meta: Any,
    ) -> None:
        pass

    # messages ------------------------------------------------------------
    def status(self, message: str, **fields: Any) -> None:
        pass

    def verbose(self, message: str, *, level: int = 1, **fields: Any) -> None:
        pass

    def warning(self, message: str, **fields: Any) -> None:
        self.status(message, **fields)

    def error(self, message: str, **fields: Any) -> None:
        pass

    def section(self, title: str) -> None:
        pass

    # asset pipeline events -------------------------------------------------
    def diagnostic(self, diag: "Diagnostic") -> None:
        """A recoverable problem in one source file (clamped value, bad token...)."""
        self.warning(str(diag), code=diag.code)

    def asset_failed(self, path: str, error: "AssetPackError") -> None:
        self.error(f"Couldn't compile asset {path}: {error}", code=error.code)

    def summary(self, kind: str, **fields: Any) -> None:
        self.status(format_summary(kind, **fields))

    def flush(self) -> None:
        pass


class SilentReporter(Reporter):
    """Discards everything (quiet mode, tests)."""

    def warning(self, message: str, **fields: Any) -> None:
        pass


_ACTIVE_REPORTER: Reporter | None = None


def set_reporter(rep: Reporter) -> None:
    global _ACTIVE_REPORTER
    _ACTIVE_REPORTER = rep


def get_reporter() -> Reporter:
    global _ACTIVE_REPORTER
    if _ACTIVE_REPORTER is None:
        from .plain import PlainReporter  # local import to avoid cycle

        _ACTIVE_REPORTER = PlainReporter(stream=sys.stderr)
    return _ACTIVE_REPORTER


@contextmanager
def using_reporter(rep: Reporter) -> Iterator[Reporter]:
    """Install ``rep`` for the duration of the block, then restore the previous one."""
    global _ACTIVE_REPORTER
    previous = _ACTIVE_REPORTER
    _ACTIVE_REPORTER = rep
    try:
        yield rep
    finally:
        _ACTIVE_REPORTER = previous


@contextmanager
def task(task_id: str, name: str, total: int | None = None, **meta: Any):
    """Wrap a unit of work; the task ends FAILED if the body raises."""
    rep = get_reporter()
    rep.start_task(task_id, name, total, **meta)
    try:
        yield
    except Exception:
        rep.end_task(task_id, TaskStatus.FAILED)
        raise
    else:
        rep.end_task(task_id, TaskStatus.SUCCESS)
