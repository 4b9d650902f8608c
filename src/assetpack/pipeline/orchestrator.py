"""Full-pack compilation and the load-or-compile entry point."""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Sequence

from ..archive import ArchiveBuilder, AssetPack, DEFAULT_COMPRESSION_LEVEL
from ..errors import (
    AssetCompileError,
    AssetPackError,
    CorruptDataError,
    E_BUILD_FAILED,
)
from ..logging import get_logger, section
from ..reporting import TaskStatus, get_reporter
from .assets import AssetCompileInfo, CompiledAsset
from .compilers import compile_asset

__all__ = ["AssetFailure", "CompileReport", "compile_full_pack", "load_pack_or_compile"]


@dataclass(slots=True)
class AssetFailure:
    info: AssetCompileInfo
    error: AssetPackError

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.info.path,
            "kind": self.info.kind.value,
            **self.error.to_dict(),
        }


@dataclass(slots=True)
class CompileReport:
    pack_path: Path
    total: int = 0
    compiled: int = 0
    failures: List[AssetFailure] = field(default_factory=list)
    entries: int = 0
    warnings: int = 0
    bytes_written: int = 0

    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def ok(self) -> bool:
        return not self.failures


def compile_full_pack(
    pack_path: str | Path,
    assets: Sequence[AssetCompileInfo],
    *,
    base_dir: Path | None = None,
    jobs: int = 1,
    compression_level: int = DEFAULT_COMPRESSION_LEVEL,
) -> CompileReport:
    """Compile every asset and write the pack.

    A failing asset is logged, counted and skipped; the pack is still written
    with everything that did compile. ``report.ok`` is true only if every
    asset compiled.
    """
    logger = get_logger()
    rep = get_reporter()
    out = Path(pack_path)
    report = CompileReport(pack_path=out, total=len(assets))
    builder = ArchiveBuilder(compression_level)
    with section(f"Compile {len(assets)} assets"):
        rep.start_task("compile.assets", "Compile assets", total=len(assets))
        executor = ThreadPoolExecutor(max_workers=jobs) if jobs > 1 else None
        try:
            if executor is not None:
                pending: List[Future[CompiledAsset]] = [
                    executor.submit(compile_asset, info, base_dir) for info in assets
                ]
            for i, info in enumerate(assets):
                try:
                    if executor is not None:
                        compiled = pending[i].result()
                    else:
                        compiled = compile_asset(info, base_dir)
                except (AssetCompileError, CorruptDataError) as exc:
                    rep.asset_failed(info.path, exc)
                    report.failures.append(AssetFailure(info, exc))
                    rep.advance("compile.assets", current_item=info.path)
                    continue
                for blob in compiled.blobs:
                    builder.add(info.key + blob.suffix, blob.data)
                report.compiled += 1
                report.warnings += len(compiled.diagnostics)
                rep.advance("compile.assets", current_item=info.path)
        except Exception:
            rep.end_task("compile.assets", TaskStatus.FAILED)
            raise
        finally:
            if executor is not None:
                executor.shutdown(wait=True, cancel_futures=True)
        rep.end_task(
            "compile.assets",
            TaskStatus.SUCCESS if report.ok else TaskStatus.FAILED,
            assets=report.compiled,
            failed=report.failed,
            warnings=report.warnings,
        )
    if report.failures:
        logger.warning("Failed to compile %d of %d assets", report.failed, report.total)
    report.entries = len(builder)
    report.bytes_written = builder.write(out)
    rep.summary(
        "compile",
        assets=report.total,
        compiled=report.compiled,
        failed=report.failed,
        warnings=report.warnings,
        entries=report.entries,
        bytes=report.bytes_written,
    )
    return report


def load_pack_or_compile(
    pack_path: str | Path,
    assets: Sequence[AssetCompileInfo],
    **options: Any,
) -> AssetPack:
    """Load ``pack_path``, compiling it from ``assets`` first if it is missing.

    Raises ``AssetPackError(E_BUILD_FAILED)`` when compilation had failures;
    the partial pack is left on disk but not loaded.
    """
    p = Path(pack_path)
    if not p.exists():
        get_logger().info("Pack %s not found; compiling %d assets", p, len(assets))
        report = compile_full_pack(p, assets, **options)
        if not report.ok:
            raise AssetPackError(
                code=E_BUILD_FAILED,
                message=f"Failed to compile {report.failed} of {report.total} assets",
                context={"failures": [f.to_dict() for f in report.failures]},
            )
    return AssetPack.load(p)
