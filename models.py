from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

from errors import ConfigurationError


class ProcessPolicy(Enum):
    MUST = "must"            # processing required, failures are fatal for the file
    MUST_NOT = "must_not"    # never invoke the command, always copy
    SHOULD = "should"        # try, fall back to a plain copy on failure

    @staticmethod
    def from_string(value: Optional[str]) -> "ProcessPolicy":
        """
        Map the "process" setting to a policy.
        Unset means MUST; true/yes, false/no and try are accepted
        case-insensitively. Anything else is a configuration error.
        """
        if value is None:
            return ProcessPolicy.MUST
        normalized = value.strip().lower()
        if normalized in ("true", "yes"):
            return ProcessPolicy.MUST
        if normalized in ("false", "no"):
            return ProcessPolicy.MUST_NOT
        if normalized == "try":
            return ProcessPolicy.SHOULD
        raise ConfigurationError(f"Invalid value for \"process\" option: \"{value}\".")


@dataclass(frozen=True)
class CommandSpec:
    command: str
    colors: int
    timeout_ms: int          # <= 0 disables the timeout

    @property
    def timeout_seconds(self) -> Optional[float]:
        if self.timeout_ms <= 0:
            return None
        return self.timeout_ms / 1000.0


@dataclass(frozen=True)
class FileTask:
    rel_path: str            # relative to the source directory
    source_path: Path
    dest_path: Path
    source_mtime: float
    source_size: int


@dataclass
class ExecutionResult:
    exit_code: Optional[int]  # None when the process was killed by the timeout
    stdout: bytes = b""
    stderr: bytes = b""
    duration_ms: int = 0
    timed_out: bool = False

    @property
    def stdout_text(self) -> str:
        return self.stdout.decode("utf-8", errors="replace")

    @property
    def stderr_text(self) -> str:
        return self.stderr.decode("utf-8", errors="replace")

    @property
    def output_text(self) -> str:
        """stdout followed by stderr, as one string."""
        return self.stdout_text + self.stderr_text


@dataclass(frozen=True)
class ProbeResult:
    available: bool
    version: Optional[str] = None


class FileStatus(Enum):
    PROCESSED = "processed"
    COPIED = "copied"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class BatchOutcome:
    processed: int = 0
    copied: int = 0
    skipped: int = 0
    failed: int = 0
    duration_ms: int = 0
    errors: list = field(default_factory=list)   # (path, message) pairs

    def record(self, status: FileStatus) -> None:
        """Count one decided file in exactly one bucket."""
        setattr(self, status.value, getattr(self, status.value) + 1)

    @property
    def total(self) -> int:
        return self.processed + self.copied + self.skipped + self.failed

    def success_message(self) -> str:
        return (
            f"{self.processed} file(s) processed and {self.copied} file(s) copied "
            f"in {self.duration_ms} ms; {self.skipped} file(s) skipped."
        )

    def failure_message(self) -> str:
        return (
            f"{self.failed} file(s) failed to be processed and/or copied; "
            f"{self.processed} file(s) processed; {self.copied} file(s) copied; "
            f"{self.skipped} file(s) skipped. Total duration is {self.duration_ms} ms."
        )
