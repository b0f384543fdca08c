"""
Runs an external command with captured output and an optional timeout.

The supervisor only reports what happened: exit code, captured bytes,
duration and whether the timeout fired. Deciding whether that counts as
success is up to the caller.
"""

import logging
import subprocess
import time
from typing import Optional, Sequence

from capture import StreamCapture
from errors import LaunchError
from models import ExecutionResult

logger = logging.getLogger(__name__)


def quote(value) -> str:
    return "(null)" if value is None else f"\"{value}\""


def format_cmdline(cmdline: Sequence[str]) -> str:
    return quote(" ".join(str(arg) for arg in cmdline))


def run_command(cmdline: Sequence[str], timeout: Optional[float] = None) -> ExecutionResult:
    """
    Run cmdline (program first, never through a shell) and wait for it.

    timeout is in seconds; None or <= 0 waits indefinitely. When the
    deadline passes the process is killed and the result comes back with
    timed_out=True and exit_code=None.

    Raises LaunchError if the program cannot be started.
    """
    args = [str(arg) for arg in cmdline]
    logger.debug(f"Command line: {format_cmdline(args)}.")

    start = time.monotonic()
    try:
        proc = subprocess.Popen(
            args,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        )
    except OSError as e:
        raise LaunchError(args[0], e.strerror or str(e)) from e

    capture = StreamCapture(proc.stdout, proc.stderr).start()

    timed_out = False
    if timeout is not None and timeout <= 0:
        timeout = None
    try:
        proc.wait(timeout=timeout)
    except subprocess.TimeoutExpired:
        timed_out = True
        logger.warning(
            f"Command {quote(args[0])} did not finish within {int(timeout * 1000)} ms, killing it."
        )
        proc.kill()
        proc.wait()

    # Drains must be complete before anyone looks at the result.
    capture.join()
    duration_ms = int((time.monotonic() - start) * 1000)

    return ExecutionResult(
        exit_code=None if timed_out else proc.returncode,
        stdout=capture.stdout,
        stderr=capture.stderr,
        duration_ms=duration_ms,
        timed_out=timed_out,
    )
