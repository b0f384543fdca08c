"""
Per-file decisions for a pngquant run.

Files are handled one at a time, in enumeration order. Each file that
still exists when its turn comes ends up in exactly one of the processed,
copied, skipped or failed buckets.
"""

import logging
import os
import re
import time
from pathlib import Path
from typing import List, Optional, Sequence

from tqdm import tqdm

from config import ResolvedConfig
from copier import (
    copy_file,
    delete_file,
    destination_name,
    materialize_temp_input,
    quantized_output_path,
)
from errors import LaunchError
from models import BatchOutcome, CommandSpec, FileStatus, FileTask, ProbeResult, ProcessPolicy
from supervisor import quote, run_command

logger = logging.getLogger(__name__)

_PNG_NAME = re.compile(r"\.png$", re.IGNORECASE)


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


def is_png(rel_path: str) -> bool:
    return _PNG_NAME.search(rel_path) is not None


def make_file_task(source_dir: Path, dest_dir: Path, rel_path: str) -> Optional[FileTask]:
    """
    Stat the source; None if it has disappeared since the scan.
    Other stat errors propagate to the caller.
    """
    source_path = source_dir / rel_path
    try:
        stat = source_path.stat()
    except FileNotFoundError:
        return None
    return FileTask(
        rel_path=rel_path,
        source_path=source_path,
        dest_path=dest_dir / destination_name(rel_path),
        source_mtime=stat.st_mtime,
        source_size=stat.st_size,
    )


def _should_skip(task: FileTask, overwrite: bool) -> bool:
    name = quote(task.rel_path)
    if not is_png(task.rel_path):
        logger.debug(f"Skipping {name} because the file does not end in \".png\" (case-insensitive).")
        return True
    if not overwrite:
        try:
            dest_mtime = task.dest_path.stat().st_mtime
        except OSError:
            # Missing or unreadable; any real problem surfaces when writing.
            dest_mtime = None
        if dest_mtime is not None and dest_mtime > task.source_mtime:
            logger.debug(f"Skipping {name} because output file is newer.")
            return True
    if task.source_size < 1:
        logger.warning(f"Skipping {name} because the file is completely empty.")
        return True
    return False


def transform_file(task: FileTask, spec: CommandSpec, temp_dir: Optional[Path] = None) -> Optional[str]:
    """
    Quantize task.source_path into task.dest_path.

    Returns None on success or a short description of what went wrong.
    Temporary files are always removed before returning.
    """
    try:
        temp_in = materialize_temp_input(task.source_path, temp_dir)
    except OSError as e:
        return f"Failed to create temporary input file: {e}"
    logger.debug(f"Created temporary input file \"{temp_in}\".")

    temp_out = quantized_output_path(temp_in)
    try:
        return _quantize(task, spec, temp_in, temp_out)
    finally:
        delete_file(temp_in)
        delete_file(temp_out)


def _quantize(task: FileTask, spec: CommandSpec, temp_in: Path, temp_out: Path) -> Optional[str]:
    cmdline = [spec.command, str(spec.colors), str(temp_in)]
    try:
        result = run_command(cmdline, timeout=spec.timeout_seconds)
    except LaunchError as e:
        return str(e)

    stderr = result.stderr_text.strip()
    if result.timed_out:
        return f"Killed after exceeding the timeout of {spec.timeout_ms} ms."
    if result.exit_code != 0:
        message = f"Command exited with code {result.exit_code}."
        return f"{message} {stderr}" if stderr else message
    if stderr:
        # pngquant sometimes exits 0 after printing an error.
        return stderr
    if not temp_out.exists():
        return "No output produced."
    if temp_out.stat().st_size < 1:
        return "No output produced."

    try:
        copy_file(temp_out, task.dest_path)
    except OSError as e:
        delete_file(task.dest_path)
        return f"Failed to copy {quote(temp_out)} to {quote(task.dest_path)}: {e}"
    return None


def _same_file(a: Path, b: Path) -> bool:
    try:
        return os.path.samefile(a, b)
    except OSError:
        return False


def _plain_copy(task: FileTask, start: float, errors: List) -> FileStatus:
    if _same_file(task.source_path, task.dest_path):
        logger.debug(f"Not copying {quote(task.rel_path)} onto itself.")
        return FileStatus.COPIED
    try:
        copy_file(task.source_path, task.dest_path)
    except OSError as e:
        message = f"Failed to copy {quote(task.source_path)} to {quote(task.dest_path)}: {e}"
        logger.error(message)
        errors.append((str(task.source_path), message))
        return FileStatus.FAILED
    logger.debug(f"Copied {quote(task.rel_path)} in {_elapsed_ms(start)} ms.")
    return FileStatus.COPIED


def process_file(
    task: FileTask,
    config: ResolvedConfig,
    transform: bool,
    errors: List,
) -> FileStatus:
    """Decide and carry out what happens to a single existing source file."""
    start = time.monotonic()

    if _should_skip(task, config.overwrite):
        return FileStatus.SKIPPED

    if not transform:
        return _plain_copy(task, start, errors)

    problem = transform_file(task, config.spec, config.temp_dir)
    if problem is None:
        logger.debug(f"Processed {quote(task.rel_path)} in {_elapsed_ms(start)} ms.")
        return FileStatus.PROCESSED

    logger.error(
        f"Failed to process {quote(task.source_path)} (took {_elapsed_ms(start)} ms): {problem}"
    )

    if config.policy is ProcessPolicy.MUST:
        errors.append((str(task.source_path), problem))
        return FileStatus.FAILED
    return _plain_copy(task, start, errors)


def process_batch(
    candidates: Sequence[str],
    config: ResolvedConfig,
    probe: ProbeResult,
) -> BatchOutcome:
    """Run every candidate through process_file and return the counts."""
    outcome = BatchOutcome()
    transform = config.policy is not ProcessPolicy.MUST_NOT and probe.available
    if not transform and config.policy is not ProcessPolicy.MUST_NOT:
        logger.warning(f"Command {quote(config.spec.command)} is unavailable; files will be copied.")

    logger.debug(f"Transforming from {config.source_dir} to {config.dest_dir}.")
    start = time.monotonic()

    with tqdm(
        total=len(candidates),
        unit="file",
        desc=config.source_dir.name,
        ncols=80,
        disable=not config.use_progress,
    ) as bar:
        for rel_path in candidates:
            bar.update(1)
            try:
                task = make_file_task(config.source_dir, config.dest_dir, rel_path)
            except OSError as e:
                message = f"Cannot read {quote(rel_path)}: {e}"
                logger.error(message)
                outcome.errors.append((str(config.source_dir / rel_path), message))
                outcome.record(FileStatus.FAILED)
                continue
            if task is None:
                continue
            outcome.record(process_file(task, config, transform, outcome.errors))
            bar.set_postfix(
                processed=outcome.processed,
                copied=outcome.copied,
                skipped=outcome.skipped,
                failed=outcome.failed,
            )

    outcome.duration_ms = _elapsed_ms(start)
    return outcome
