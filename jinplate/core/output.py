# jinplate/core/output.py
"""Destination handles for rendered templates."""
import sys
from pathlib import Path
from typing import IO, Optional
import structlog

from jinplate.config.settings import STDIO_PATH
from jinplate.exceptions import OutputError

log = structlog.get_logger(__name__)


class OutputTarget:
    """A writable destination: a file path, an existing stream, or standard output.

    `is_stdout` and `closeable` are fixed at construction; `release()` closes the
    underlying stream only when it is closeable and not standard output.
    """

    def __init__(self, name: str, path: Optional[Path] = None, stream: Optional[IO[str]] = None,
                 is_stdout: bool = False, closeable: bool = False):
        self.name = name
        self.path = path
        self.is_stdout = is_stdout
        self.closeable = closeable and not is_stdout
        self._stream = stream

    @classmethod
    def stdout(cls) -> "OutputTarget":
        return cls("<stdout>", is_stdout=True)

    @classmethod
    def for_path(cls, path: str) -> "OutputTarget":
        if path == STDIO_PATH:
            return cls.stdout()
        return cls(path, path=Path(path), closeable=True)

    @classmethod
    def for_stream(cls, stream: IO[str], name: str = "<stream>") -> "OutputTarget":
        # the caller owns the stream, so it's never closed here.
        return cls(name, stream=stream, is_stdout=stream is sys.stdout)

    def open(self) -> IO[str]:
        if self._stream is not None:
            return self._stream
        if self.is_stdout:
            # resolved late so redirected sys.stdout (tests, embedding) is honoured.
            self._stream = sys.stdout
            return self._stream
        log.debug("opening_output_file", path=str(self.path))
        try:
            self._stream = self.path.open("w", encoding="utf-8", newline="")
        except OSError as e:
            raise OutputError(f"failed to open output file '{self.path}': {e}") from e
        return self._stream

    def release(self) -> None:
        if self._stream is None:
            return
        if self.closeable:
            self._stream.close()
            self._stream = None
        else:
            self._stream.flush()

    def __repr__(self) -> str:
        return f"OutputTarget({self.name!r}, is_stdout={self.is_stdout}, closeable={self.closeable})"
