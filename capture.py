"""
In-memory capture of a child process's stdout and stderr.

Each stream is drained by its own daemon thread so the child never blocks
on a full pipe. The captured bytes are only handed out once both streams
have been read to EOF and the drain threads have been joined.
"""

import logging
import threading
from typing import IO, List, Optional

logger = logging.getLogger(__name__)

READ_SIZE = 8192


class _Drain:
    """Reads one stream to EOF on a background thread."""

    def __init__(self, name: str, stream: Optional[IO[bytes]]) -> None:
        self.name = name
        self._stream = stream
        self._chunks: List[bytes] = []
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        if self._stream is None:
            return
        self._thread = threading.Thread(
            target=self._run, name=f"drain-{self.name}", daemon=True
        )
        self._thread.start()

    def _run(self) -> None:
        try:
            while True:
                chunk = self._stream.read(READ_SIZE)
                if not chunk:
                    break
                self._chunks.append(chunk)
        except (OSError, ValueError) as e:
            # Stream torn down underneath us, typically after a kill.
            logger.debug(f"Stopped reading {self.name}: {e}")
        finally:
            try:
                self._stream.close()
            except OSError:
                pass

    def join(self) -> None:
        if self._thread is not None:
            self._thread.join()

    def is_done(self) -> bool:
        return self._thread is None or not self._thread.is_alive()

    def getvalue(self) -> bytes:
        return b"".join(self._chunks)


class StreamCapture:
    """
    Captures stdout and stderr of one invocation.

    Usage:
        capture = StreamCapture(proc.stdout, proc.stderr)
        capture.start()
        ...
        capture.join()
        capture.stdout, capture.stderr
    """

    def __init__(self, stdout: Optional[IO[bytes]], stderr: Optional[IO[bytes]]) -> None:
        self._out = _Drain("stdout", stdout)
        self._err = _Drain("stderr", stderr)
        self._joined = False

    def start(self) -> "StreamCapture":
        self._out.start()
        self._err.start()
        return self

    def join(self) -> None:
        """Block until both streams are closed."""
        self._out.join()
        self._err.join()
        self._joined = True

    @property
    def closed(self) -> bool:
        return self._out.is_done() and self._err.is_done()

    def _require_joined(self) -> None:
        if not self._joined:
            raise RuntimeError("Captured output is not available before join()")

    @property
    def stdout(self) -> bytes:
        self._require_joined()
        return self._out.getvalue()

    @property
    def stderr(self) -> bytes:
        self._require_joined()
        return self._err.getvalue()

    @property
    def stdout_size(self) -> int:
        return len(self.stdout)

    @property
    def stderr_size(self) -> int:
        return len(self.stderr)
