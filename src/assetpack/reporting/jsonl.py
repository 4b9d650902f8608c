"""JSON lines reporter: one event object per line on stdout.

Every event has an ``event`` field (``task_start``, ``task_progress``,
``task_end``, ``message``, ``section``, ``diagnostic``, ``asset_failed`` or
``summary``). Values that JSON can't represent (paths) are stringified.
"""

from __future__ import annotations

import json
import sys
from typing import Any, Dict

from .base import Reporter, TaskRecord, TaskStatus, format_summary, get_verbosity


class JsonLinesReporter(Reporter):
    def __init__(self, stream=None):
        self.stream = stream or sys.stdout
        self._tasks: Dict[str, TaskRecord] = {}

    def _emit(self, event: str, **payload: Any) -> None:
        payload["event"] = event
        self.stream.write(json.dumps(payload, sort_keys=True, default=str) + "\n")

    def _message(self, level: str, message: str, fields: Dict[str, Any]) -> None:
        self._emit("message", level=level, message=message, **fields)

    # tasks ---------------------------------------------------------------
    def start_task(
        self, task_id: str, name: str, total: int | None = None, **meta: Any
    ) -> None:
        self._tasks[task_id] = TaskRecord(task_id, name, total, meta=dict(meta))
        self._emit("task_start", id=task_id, name=name, total=total, **meta)

    def advance(self, task_id: str, step: int = 1, **meta: Any) -> None:
        rec = self._tasks.get(task_id)
        if rec is None:
            return
        rec.completed += step
        rec.meta.update(meta)
        self._emit("task_progress", id=task_id, completed=rec.completed, **meta)

    def end_task(
        self,
        task_id: str,
        status: TaskStatus = TaskStatus.SUCCESS,
        **final_meta: Any,
    ) -> None:
        rec = self._tasks.pop(task_id, None)
        if rec is None:
            return
        rec.finish(status, final_meta)
        meta = {k: v for k, v in rec.meta.items() if k != "current_item"}
        self._emit(
            "task_end",
            id=task_id,
            status=status.name.lower(),
            completed=rec.completed,
            total=rec.total,
            seconds=round(rec.duration, 4),
            **meta,
        )

    # messages ------------------------------------------------------------
    def status(self, message: str, **fields: Any) -> None:
        self._message("info", message, fields)

    def verbose(self, message: str, *, level: int = 1, **fields: Any) -> None:
        if get_verbosity() >= level:
            self._message(f"verbose{level}", message, fields)

    def warning(self, message: str, **fields: Any) -> None:
        self._message("warning", message, fields)

    def error(self, message: str, **fields: Any) -> None:
        self._message("error", message, fields)

    def section(self, title: str) -> None:
        self._emit("section", title=title)

    # asset pipeline events -------------------------------------------------
    def diagnostic(self, diag) -> None:
        self._emit("diagnostic", **diag.to_dict())

    def asset_failed(self, path: str, error) -> None:
        self._emit("asset_failed", path=path, **error.to_dict())

    def summary(self, kind: str, **fields: Any) -> None:
        self._emit(
            "summary",
            summary_type=kind,
            message=format_summary(kind, **fields),
            **fields,
        )
