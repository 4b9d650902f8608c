"""Command line interface for assetpack."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Callable, Dict

from .api import BuildOptions, build_pack, inspect_pack, validate_pack
from .archive import DEFAULT_COMPRESSION_LEVEL
from .archive.inspector import validate_pack as _validate_info
from .errors import AssetPackError
from .logging import configure_logging, step
from .reporting import (
    JsonLinesReporter,
    PlainReporter,
    Reporter,
    RichReporter,
    SilentReporter,
    get_reporter,
    set_reporter,
    set_verbosity,
)

_REPORTERS: Dict[str, Callable[[], Reporter]] = {
    "plain": PlainReporter,
    "rich": RichReporter,
    "json": JsonLinesReporter,
    "silent": SilentReporter,
}


def _build_cmd(args: argparse.Namespace) -> int:
    opts = BuildOptions(
        asset_list=args.assets,
        output_path=args.output,
        jobs=args.jobs,
        compression_level=args.compression_level,
        manifest_path=args.emit_manifest,
    )
    result = build_pack(opts)
    return 0 if result.ok else 1


def _inspect_cmd(args: argparse.Namespace) -> int:
    step(f"inspecting {args.pack}")
    info = inspect_pack(args.pack)
    issues = _validate_info(info)
    rep = get_reporter()
    rep.flush()
    if args.json:
        print(json.dumps({**info, "issues": issues}, indent=2, sort_keys=True))
        return 1 if issues else 0
    header = info.get("header") or {}
    rep.status(
        f"Pack {args.pack.name}: file_size={info['file_size']} "
        + f"version={header.get('version')} compressed={header.get('compressed')} "
        + f"data_size={header.get('data_size')}"
    )
    for e in info.get("entries", []):
        rep.status(f"  {e['key']} @{e['offset']}+{e['length']}")
    for issue in issues:
        rep.warning(issue)
    return 1 if issues else 0


def _validate_cmd(args: argparse.Namespace) -> int:
    step(f"validating {args.pack}")
    issues = validate_pack(args.pack)
    rep = get_reporter()
    for issue in issues:
        rep.error(issue)
    rep.summary("validate", file=args.pack.name, issues=len(issues))
    return 1 if issues else 0


def _compression_level(value: str) -> int:
    level = int(value)
    if not 0 <= level <= 9:
        raise argparse.ArgumentTypeError("compression level must be 0..9")
    return level


def _positive_int(value: str) -> int:
    n = int(value)
    if n < 1:
        raise argparse.ArgumentTypeError("must be >= 1")
    return n


def _make_reporter(name: str) -> Reporter:
    if name == "rich" and not sys.stderr.isatty():
        name = "plain"
    return _REPORTERS[name]()


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="assetpack", description="Compile source assets into a pack file"
    )
    p.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (repeatable)",
    )
    p.add_argument(
        "-r",
        "--reporter",
        choices=sorted(_REPORTERS),
        default="plain",
        help="Select reporter backend: plain (default), rich, json (JSONL events), silent",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    b = sub.add_parser("build", help="Compile an asset list into a pack")
    b.add_argument("assets", type=Path, help="Asset list (.json/.yaml)")
    b.add_argument("output", type=Path)
    b.add_argument(
        "-j",
        "--jobs",
        type=_positive_int,
        default=1,
        help="Compile assets on N worker threads",
    )
    b.add_argument(
        "--compression-level",
        dest="compression_level",
        type=_compression_level,
        default=DEFAULT_COMPRESSION_LEVEL,
        help="zlib level for the data region (0 stores uncompressed)",
    )
    b.add_argument(
        "--emit-manifest",
        dest="emit_manifest",
        type=Path,
        help="Optional path to write manifest JSON (opt-in)",
    )
    b.set_defaults(func=_build_cmd)

    i = sub.add_parser("inspect", help="Inspect a pack file")
    i.add_argument("pack", type=Path)
    i.add_argument("--json", action="store_true", help="Emit JSON")
    i.set_defaults(func=_inspect_cmd)

    v = sub.add_parser("validate", help="Check a pack file's integrity")
    v.add_argument("pack", type=Path)
    v.set_defaults(func=_validate_cmd)

    return p


def main(argv: list[str] | None = None) -> int:
    argv = argv if argv is not None else sys.argv[1:]
    parser = build_parser()
    args = parser.parse_args(argv)
    set_reporter(_make_reporter(args.reporter))
    set_verbosity(args.verbose)
    configure_logging(args.verbose)
    try:
        return args.func(args)
    except AssetPackError as exc:
        get_reporter().error(str(exc))
        return 1
    except OSError as exc:
        get_reporter().error(f"{exc.__class__.__name__}: {exc}")
        return 1
    finally:
        get_reporter().flush()


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
