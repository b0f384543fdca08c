"""
One-off availability check of the quantization command.

The command is run without arguments. pngquant prints its usage (with the
version on the first line) and exits with 0 or 1 in that case; there is no
portable --version flag to rely on.
"""

import logging
import re

from errors import CommandUnavailableError, LaunchError
from models import CommandSpec, ProbeResult, ProcessPolicy
from supervisor import quote, run_command

logger = logging.getLogger(__name__)

ACCEPTED_EXIT_CODES = {0, 1}

# Leading non-digits, then a dotted numeric sequence, e.g. "pngquant, 2.12.0"
VERSION_PATTERN = re.compile(r"^[^0-9]*([0-9]+(?:\.[0-9]+)*)")

UNAVAILABLE = ProbeResult(available=False)


def parse_version(text: str):
    """Return the version token found at the start of text, or None."""
    match = VERSION_PATTERN.match(text)
    return match.group(1) if match else None


def _unavailable(message: str, policy: ProcessPolicy, cause=None) -> ProbeResult:
    if policy is ProcessPolicy.MUST:
        raise CommandUnavailableError(message) from cause
    logger.error(message)
    return UNAVAILABLE


def probe_command(spec: CommandSpec, policy: ProcessPolicy) -> ProbeResult:
    """
    Determine whether spec.command can be used for this run.

    Under MUST a missing or misbehaving command raises
    CommandUnavailableError. A command that runs but does not report a
    version is never fatal; it is just treated as unavailable.
    Under MUST_NOT the command is not run at all.
    """
    if policy is ProcessPolicy.MUST_NOT:
        return UNAVAILABLE

    command = spec.command
    try:
        result = run_command([command], timeout=spec.timeout_seconds)
    except LaunchError as e:
        return _unavailable(f"Unable to execute command {quote(command)}.", policy, e)

    if result.timed_out:
        return _unavailable(
            f"Unable to execute command {quote(command)}. Running '{command}' "
            f"timed out after {result.duration_ms} ms.",
            policy,
        )

    if result.exit_code not in ACCEPTED_EXIT_CODES:
        return _unavailable(
            f"Unable to execute command {quote(command)}. Running '{command}' "
            f"resulted in exit code {result.exit_code}.",
            policy,
        )

    version = parse_version(result.output_text)
    if version is None:
        logger.error(
            f"Unable to execute command {quote(command)}. No version output found "
            f"when running the command without arguments."
        )
        return UNAVAILABLE

    logger.debug(f"Using command {quote(command)}, version is {quote(version)}.")
    return ProbeResult(available=True, version=version)
