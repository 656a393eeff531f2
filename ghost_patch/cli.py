"""
`ghostpatch` command-line harness.

Commands
--------
ghostpatch apply FILE RESPONSE              -- show suggestions for FILE
ghostpatch apply FILE RESPONSE --line 12    -- select the group closest to line 12
ghostpatch apply FILE RESPONSE --review     -- step through groups in a TUI
ghostpatch apply FILE RESPONSE --write      -- save the suggested content
ghostpatch bench DIR                        -- run benchmark cases
ghostpatch bench DIR --category refactor
ghostpatch stats --last-n 100               -- rolling suggestion metrics
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Optional

from .api import SuggestionContext, build_suggestions
from .config import Config
from .diff_display import compute_diff, format_colored_diff, format_groups, review_groups
from .errors import GhostError
from .editing.document import Range, StringDocument

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _read_text(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def _load_config(args: argparse.Namespace) -> Config:
    config = Config.load(getattr(args, "config", None))
    if getattr(args, "group_max_gap", None) is not None:
        config.GROUP_MAX_GAP = args.group_max_gap
    return config


# ---------------------------------------------------------------------------
# Sub-command handlers
# ---------------------------------------------------------------------------

def _cmd_apply(args: argparse.Namespace) -> int:
    """Run the pipeline for one file and one response."""
    config = _load_config(args)
    source = _read_text(args.file)
    response = _read_text(args.response)

    document = StringDocument(source, uri=args.file)
    selection = None
    if args.line is not None:
        selection = Range.from_lines(max(args.line - 1, 0))

    result = build_suggestions(response, SuggestionContext(document, selection, config))

    if result.apply_result:
        for warning in result.apply_result.warnings:
            print(f"warning: {warning}", file=sys.stderr)

    primary = result.primary_file
    if primary is None:
        print(f"No suggestions for {args.file} ({result.parsed.format.value}).")
        return 1

    diff = compute_diff(args.file, source, primary.apply_to(source), config.DIFF_CONTEXT_LINES)
    if diff:
        print(diff if args.no_color else format_colored_diff(diff))
    print(f"\n{len(primary.groups)} group(s):")
    print(format_groups(primary))

    if args.review and not review_groups(primary, interactive=True):
        print("Suggestions rejected.")
        return 1

    if args.write:
        with open(args.file, "w", encoding="utf-8") as f:
            f.write(primary.apply_to(source))
        print(f"\nWrote {args.file}")
    return 0


def _cmd_bench(args: argparse.Namespace) -> int:
    """Run benchmark cases and print a summary table."""
    from .bench import run_benchmarks

    config = _load_config(args)
    summary = run_benchmarks(args.directory, category=args.category, config=config)

    if summary.total == 0:
        print(f"No benchmark cases found in {args.directory}")
        return 1

    print(f"\nBenchmark results  [{summary.total} case(s)]")
    print("-" * 60)
    for r in summary.results:
        status = "PASS" if r.passed else "FAIL"
        detail = r.error or f"{r.groups} group(s), {r.applied} applied, {r.dropped} dropped"
        print(f"  {status}  {r.case.name:<30}  {detail}")
    print("-" * 60)
    print(f"  Passed: {summary.passed}/{summary.total} ({summary.pass_rate:.0f}%)")
    return 0 if summary.failed == 0 else 1


def _cmd_stats(args: argparse.Namespace) -> int:
    """Show rolling suggestion statistics."""
    from .editing.metrics import read_suggestion_stats

    config = _load_config(args)
    last_n = getattr(args, "last_n", 50)
    stats = read_suggestion_stats(last_n=last_n, metrics_dir=config.METRICS_DIR,
                                  project_root=os.getcwd())

    if stats["total_runs"] == 0:
        print("No suggestion metrics found yet.")
        print("Enable them with `metrics_enabled: true` in .ghostpatch.yaml.")
        return 0

    print(f"\nSuggestion stats (last {last_n} runs)")
    print("=" * 40)
    print(f"  Total runs:        {stats['total_runs']}")
    print(f"  Suggestion rate:   {stats['suggestion_rate']:.0f}%")
    print(f"  Apply rate:        {stats['apply_rate']:.0f}%")
    print(f"  Drop rate:         {stats['drop_rate']:.0f}%")
    print(f"  Fuzzy match rate:  {stats['fuzzy_rate']:.0f}%")
    for title, counts in (("Formats", stats["formats"]), ("Strategies", stats["strategies"])):
        if counts:
            print(f"  {title}:")
            for name, count in sorted(counts.items(), key=lambda kv: -kv[1]):
                print(f"    {name:<22} {count}")
    print()
    return 0


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ghostpatch",
        description="Turn LLM edit responses into grouped, navigable suggestions",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--config", default=None, help="Path to a .ghostpatch.yaml file")
    parser.add_argument(
        "--group-max-gap", dest="group_max_gap", type=int, default=None,
        help="Override the line gap that separates suggestion groups",
    )
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    # --- apply ---
    apply_p = subparsers.add_parser("apply", help="Show suggestions for a file")
    apply_p.add_argument("file", help="Document the response refers to")
    apply_p.add_argument("response", help="File holding the model response ('-' for stdin)")
    apply_p.add_argument(
        "--line", type=int, default=None,
        help="1-based cursor line; selects the closest group",
    )
    apply_p.add_argument("--write", action="store_true", help="Write the result back to FILE")
    apply_p.add_argument("--review", action="store_true",
                         help="Review groups interactively before writing")
    apply_p.add_argument("--no-color", dest="no_color", action="store_true",
                         help="Print the diff without ANSI colors")
    apply_p.set_defaults(func=_cmd_apply)

    # --- bench ---
    bench_p = subparsers.add_parser("bench", help="Run benchmark cases")
    bench_p.add_argument("directory", help="Directory holding one sub-directory per case")
    bench_p.add_argument("--category", default=None, help="Only run cases of this category")
    bench_p.set_defaults(func=_cmd_bench)

    # --- stats ---
    stats_p = subparsers.add_parser("stats", help="Show rolling suggestion metrics")
    stats_p.add_argument(
        "--last-n", dest="last_n", type=int, default=50,
        help="Number of recent runs to include (default: 50)",
    )
    stats_p.set_defaults(func=_cmd_stats)

    return parser


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point for the `ghostpatch` command.

    Parameters
    ----------
    argv:
        Argument list without the program name. Defaults to sys.argv.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    # Configure logging if not already configured
    if not logging.root.handlers:
        logging.basicConfig(
            level=logging.DEBUG if args.verbose else logging.WARNING,
            format="%(levelname)s  %(name)s  %(message)s",
        )

    try:
        return args.func(args)
    except GhostError as exc:
        logger.debug("[CLI] %s", exc.details())
        print(f"Error: {exc}", file=sys.stderr)
        return 2
    except OSError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
