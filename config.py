"""
Task configuration and its validation.

Everything here runs before the first file is looked at: a bad policy
string, an out-of-range color count or an unusable directory aborts the
run with a ConfigurationError.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from errors import ConfigurationError
from filters import PatternSet
from models import CommandSpec, ProcessPolicy

logger = logging.getLogger(__name__)

DEFAULT_COMMAND = "pngquant"
DEFAULT_COLORS = 256
DEFAULT_TIMEOUT_MS = 60 * 1000
MIN_COLORS = 2
MAX_COLORS = 256


@dataclass
class TaskConfig:
    source_dir: Optional[Path] = None
    dest_dir: Optional[Path] = None          # defaults to source_dir
    overwrite: bool = False
    command: Optional[str] = None            # defaults to DEFAULT_COMMAND
    colors: int = DEFAULT_COLORS
    timeout_ms: int = DEFAULT_TIMEOUT_MS     # <= 0 disables the timeout
    process: Optional[str] = None            # true/yes, false/no, try; unset means true
    includes: List[str] = field(default_factory=list)
    excludes: List[str] = field(default_factory=list)
    temp_dir: Optional[Path] = None
    use_progress: bool = True


@dataclass(frozen=True)
class ResolvedConfig:
    source_dir: Path
    dest_dir: Path
    overwrite: bool
    policy: ProcessPolicy
    spec: CommandSpec
    patterns: PatternSet
    temp_dir: Optional[Path]
    use_progress: bool


def check_dir(
    description: str,
    path: Optional[Path],
    must_be_readable: bool,
    must_be_writable: bool,
) -> None:
    if path is None:
        raise ConfigurationError(f"{description} is not set.")
    if not path.exists():
        raise ConfigurationError(f"{description} (\"{path}\") does not exist.")
    if not path.is_dir():
        raise ConfigurationError(f"{description} (\"{path}\") is not a directory.")
    if must_be_readable and not os.access(path, os.R_OK | os.X_OK):
        raise ConfigurationError(f"{description} (\"{path}\") is not readable.")
    if must_be_writable and not os.access(path, os.W_OK | os.X_OK):
        raise ConfigurationError(f"{description} (\"{path}\") is not writable.")


def validate_colors(colors: int) -> int:
    if colors < MIN_COLORS:
        raise ConfigurationError(
            f"Number of colors ({colors}) is invalid, it is too low. "
            f"It should be between {MIN_COLORS} and {MAX_COLORS}."
        )
    if colors > MAX_COLORS:
        raise ConfigurationError(
            f"Number of colors ({colors}) is invalid, it is too high. "
            f"It should be between {MIN_COLORS} and {MAX_COLORS}."
        )
    return colors


def resolve_config(config: TaskConfig) -> ResolvedConfig:
    """Apply defaults and validate. Raises ConfigurationError."""
    source_dir = config.source_dir
    dest_dir = config.dest_dir if config.dest_dir is not None else source_dir

    check_dir("Source directory", source_dir, must_be_readable=True, must_be_writable=False)
    check_dir("Destination directory", dest_dir, must_be_readable=False, must_be_writable=True)
    if config.temp_dir is not None:
        check_dir("Temporary directory", config.temp_dir, must_be_readable=True, must_be_writable=True)

    policy = ProcessPolicy.from_string(config.process)
    colors = validate_colors(config.colors)
    command = config.command if config.command else DEFAULT_COMMAND

    logger.debug(f"Source directory: \"{source_dir}\".")
    logger.debug(f"Destination directory: \"{dest_dir}\".")
    logger.debug(f"Command: \"{command}\", colors: {colors}, timeout: {config.timeout_ms} ms.")
    logger.debug(f"Process policy: {policy.name}, overwrite: {config.overwrite}.")

    return ResolvedConfig(
        source_dir=source_dir,
        dest_dir=dest_dir,
        overwrite=config.overwrite,
        policy=policy,
        spec=CommandSpec(command=command, colors=colors, timeout_ms=config.timeout_ms),
        patterns=PatternSet(config.includes, config.excludes),
        temp_dir=config.temp_dir,
        use_progress=config.use_progress,
    )
