#!/usr/bin/env python3
"""
pngquant-task: Walk a directory of PNG images, quantize each one with the
external pngquant command and write the results to a destination tree,
falling back to a plain copy when processing is disabled, unavailable or
fails (depending on --process).

Usage:
    python pngquant_task.py --source img/ --dest build/img --colors 128 --process try
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from batch import process_batch
from config import (
    DEFAULT_COLORS,
    DEFAULT_COMMAND,
    DEFAULT_TIMEOUT_MS,
    TaskConfig,
    resolve_config,
)
from errors import BatchFailedError, ConfigurationError, TaskError
from filters import load_pattern_file
from logging_config import setup_logging
from models import BatchOutcome
from prober import probe_command
from scanner import list_candidates

logger = logging.getLogger(__name__)


# ── Core pipeline ─────────────────────────────────────────────────────────────

def run_task(config: TaskConfig) -> BatchOutcome:
    """
    Full validate-probe-process pipeline.

    Raises ConfigurationError or CommandUnavailableError before any file
    is touched, and BatchFailedError after the whole batch has run if any
    file failed.
    """
    resolved = resolve_config(config)
    probe = probe_command(resolved.spec, resolved.policy)

    candidates = list_candidates(resolved.source_dir, resolved.patterns)
    logger.debug(f"{len(candidates)} candidate file(s); filters: {resolved.patterns.describe()}.")

    outcome = process_batch(candidates, resolved, probe)

    if outcome.failed > 0:
        raise BatchFailedError(outcome)
    logger.info(outcome.success_message())
    return outcome


# ── CLI ───────────────────────────────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pngquant_task.py",
        description=(
            "Quantize PNG images from a source directory into a destination "
            "directory using the external pngquant command, copying files "
            "unchanged when processing is disabled, unavailable or fails."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Process policy (--process):\n"
            "  true / yes   every file must be processed; failures fail the run (default)\n"
            "  false / no   never run the command, copy every file\n"
            "  try          process where possible, otherwise copy\n"
            "\n"
            "Examples:\n"
            "  python pngquant_task.py --source img --dest build/img\n"
            "  python pngquant_task.py --source img --dest build/img --process try --colors 64\n"
            "  python pngquant_task.py --source img --exclude 'originals/' --verbose\n"
        ),
    )
    parser.add_argument(
        "--source", "--dir",
        dest="source",
        default=".",
        metavar="PATH",
        help="Source directory to scan (default: current directory).",
    )
    parser.add_argument(
        "--dest", "--to-dir",
        dest="dest",
        default=None,
        metavar="PATH",
        help="Destination directory (default: the source directory).",
    )
    parser.add_argument(
        "--overwrite",
        action="store_true",
        help="Process files even when the destination is newer than the source.",
    )
    parser.add_argument(
        "--command",
        default=DEFAULT_COMMAND,
        help=f"Quantization command to run (default: {DEFAULT_COMMAND}).",
    )
    parser.add_argument(
        "--colors",
        type=int,
        default=DEFAULT_COLORS,
        help=f"Number of colors, 2-256 (default: {DEFAULT_COLORS}).",
    )
    parser.add_argument(
        "--timeout",
        type=int,
        default=DEFAULT_TIMEOUT_MS,
        metavar="MS",
        help=f"Per-invocation timeout in milliseconds, <= 0 disables it (default: {DEFAULT_TIMEOUT_MS}).",
    )
    parser.add_argument(
        "--process",
        default=None,
        metavar="POLICY",
        help="true/yes, false/no or try (default: true).",
    )
    parser.add_argument(
        "--include",
        action="append",
        default=[],
        metavar="PATTERN",
        help="Only consider files matching PATTERN (repeatable).",
    )
    parser.add_argument(
        "--exclude",
        action="append",
        default=[],
        metavar="PATTERN",
        help="Ignore files matching PATTERN (repeatable).",
    )
    parser.add_argument(
        "--exclude-file",
        metavar="PATH",
        default=None,
        help="Read additional exclude patterns from PATH, one per line.",
    )
    parser.add_argument(
        "--temp-dir",
        metavar="PATH",
        default=None,
        help="Directory for temporary input files (default: system temp dir).",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log each file's decision and every command line.",
    )
    parser.add_argument(
        "--log-file",
        metavar="PATH",
        default=None,
        help="Also write a detailed log to PATH.",
    )
    parser.add_argument(
        "--no-progress",
        action="store_true",
        help="Disable the progress bar (useful when piping output to log files).",
    )
    return parser


def _path_or_none(raw: Optional[str]) -> Optional[Path]:
    if raw is None:
        return None
    return Path(raw).expanduser().resolve()


def config_from_args(args: argparse.Namespace) -> TaskConfig:
    excludes: List[str] = list(args.exclude)
    if args.exclude_file:
        excludes = load_pattern_file(_path_or_none(args.exclude_file)) + excludes

    return TaskConfig(
        source_dir=_path_or_none(args.source),
        dest_dir=_path_or_none(args.dest),
        overwrite=args.overwrite,
        command=args.command,
        colors=args.colors,
        timeout_ms=args.timeout,
        process=args.process,
        includes=list(args.include),
        excludes=excludes,
        temp_dir=_path_or_none(args.temp_dir),
        use_progress=not args.no_progress,
    )


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(verbose=args.verbose, log_file=_path_or_none(args.log_file))

    try:
        run_task(config_from_args(args))
    except ConfigurationError as e:
        parser.error(str(e))
    except BatchFailedError as e:
        for path, message in e.outcome.errors[:20]:
            logger.error(f"  ! {path}: {message}")
        if len(e.outcome.errors) > 20:
            logger.error(f"  ... and {len(e.outcome.errors) - 20} more errors")
        print(f"BUILD FAILED: {e}", file=sys.stderr)
        return 1
    except TaskError as e:
        print(f"BUILD FAILED: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
