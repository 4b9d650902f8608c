"""Progress and message reporting backends (plain, rich, JSON lines, silent)."""

from .base import (
    Reporter,
    SilentReporter,
    TaskRecord,
    TaskStatus,
    format_summary,
    get_reporter,
    get_verbosity,
    set_reporter,
    set_verbosity,
    task,
    using_reporter,
)
from .jsonl import JsonLinesReporter
from .plain import PlainReporter
from .rich_reporter import RichReporter

__all__ = [
    "Reporter",
    "SilentReporter",
    "TaskRecord",
    "TaskStatus",
    "format_summary",
    "get_reporter",
    "get_verbosity",
    "set_reporter",
    "set_verbosity",
    "task",
    "using_reporter",
    "JsonLinesReporter",
    "PlainReporter",
    "RichReporter",
]
