from __future__ import annotations

import argparse
import json
import logging
import sys

from result import Err
from rich.console import Console
from rich.markup import escape

from repobloat import __version__
from repobloat.config.loader import load_config, sample_config_json
from repobloat.config.schema import clamp_field
from repobloat.models.enums import ObjectScope
from repobloat.models.report import AnalyzeOptions
from repobloat.services.analyze import analyze_bloat
from repobloat.services.summary import render_report, report_to_dict


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="repobloat", description="Find large objects in git history.")
    parser.add_argument("path", nargs="?", default=".", help="Repository path (default: .)")
    parser.add_argument("--include-deleted", action="store_true", help="Scan all history, not only HEAD")
    parser.add_argument("--limit", type=int, default=None, help="Number of largest objects to show")
    parser.add_argument("--min-size", type=int, default=None, help="Minimum object size in bytes")
    parser.add_argument("--output", choices=("text", "json"), default="text")
    parser.add_argument("--workers", type=int, default=None, help="Concurrent size batches")
    parser.add_argument("--config", default=None, help="Path to a JSON config file")
    parser.add_argument("--sample-config", action="store_true", help="Print the default config and exit")
    parser.add_argument("-v", "--verbose", action="count", default=0)
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    level = logging.DEBUG if args.verbose > 1 else logging.INFO if args.verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)

    console = Console()
    err_console = Console(stderr=True)

    if args.sample_config:
        print(sample_config_json())
        return 0

    loaded = load_config(args.config)
    if isinstance(loaded, Err):
        err_console.print(f"[red]{escape(loaded.unwrap_err())}[/red]")
        return 1
    config = loaded.unwrap()

    if args.workers is not None:
        config.resolve_workers = clamp_field(args.workers, "resolve_workers")
    min_size = config.min_size_bytes if args.min_size is None else clamp_field(args.min_size, "min_size_bytes")
    limit = config.result_limit if args.limit is None else clamp_field(args.limit, "result_limit")
    include_deleted = args.include_deleted or config.include_deleted

    options = AnalyzeOptions(
        scope=ObjectScope.ALL_HISTORY if include_deleted else ObjectScope.REACHABLE_FROM_TIP,
        min_size_bytes=min_size,
        result_limit=limit,
    )

    if args.output == "json":
        result = analyze_bloat(args.path, options, config=config)
    else:
        with console.status("Analyzing repository objects...") as status:

            def _progress(phase: str, done: int, total: int) -> None:
                if phase == "resolve":
                    status.update(f"Calculating sizes... {done}/{total} batches")

            result = analyze_bloat(args.path, options, config=config, progress_callback=_progress)

    if isinstance(result, Err):
        error = result.unwrap_err()
        err_console.print(f"[red]Failed to analyze repository:[/red] {escape(error.message)} ({escape(error.path)})")
        return 1

    report = result.unwrap()
    if args.output == "json":
        print(json.dumps(report_to_dict(report), indent=2))
    else:
        render_report(console, report, min_size)
    return 0
