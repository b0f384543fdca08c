"""
Exception hierarchy for the pngquant task.

Configuration and availability errors abort the run before any file is
touched. Per-file problems never surface as exceptions from the batch; they
are folded into the aggregate BatchFailedError at the end of the run.
"""


class TaskError(Exception):
    """Base class for all errors raised by the task."""


class ConfigurationError(TaskError):
    """Bad policy string, out-of-range color count or unusable directory."""


class CommandUnavailableError(TaskError):
    """The external command cannot be used and the policy requires it."""


class LaunchError(TaskError):
    """The external process could not be started at all."""

    def __init__(self, command: str, reason: str) -> None:
        super().__init__(f"Unable to execute command \"{command}\": {reason}")
        self.command = command
        self.reason = reason


class BatchFailedError(TaskError):
    """At least one file failed to be processed and/or copied."""

    def __init__(self, outcome) -> None:
        super().__init__(outcome.failure_message())
        self.outcome = outcome
