"""Injected logging handle backed by an in-memory ring buffer.

Every component that logs receives a :class:`DebugLog` through its
constructor. There is no module-level logger: the CLI builds one handle at
startup and passes it down, and tests build their own throwaway handles.

Each handle owns a private :class:`logging.Logger` (not registered with
:func:`logging.getLogger`, so handles never share sinks) with a
:class:`RingBufferHandler` always attached. The TUI's logs panel reads the
buffer. Extra sinks are opt-in:

* :meth:`DebugLog.enable_stderr` -- Rich-formatted output on stderr
  (``--debug``).
* :meth:`DebugLog.set_log_file` -- append to a file (``--log FILE``).

Structured fields are passed as keyword arguments and rendered as
``key=value`` pairs after the message::

    log.debug("Cache hit", key="incidents:page=1:pageSize=25")
"""

from __future__ import annotations

import json
import logging
from collections import deque
from pathlib import Path
from typing import Any, Optional

from rich.console import Console
from rich.logging import RichHandler

DEFAULT_CAPACITY = 1000
"""Number of entries the ring buffer keeps."""

MAX_LOG_LINES = 1000
"""Maximum number of lines :meth:`DebugLog.read_log_file` returns."""

_TAIL_BYTES = 100 * 1024

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class RingBufferHandler(logging.Handler):
    """Logging handler that keeps the last *capacity* formatted records."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        super().__init__(level=logging.DEBUG)
        self._entries: deque[str] = deque(maxlen=capacity)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self._entries.append(self.format(record))
        except Exception:
            self.handleError(record)

    def entries(self) -> list[str]:
        """Return buffered entries, oldest first."""
        self.acquire()
        try:
            return list(self._entries)
        finally:
            self.release()

    def clear(self) -> None:
        self.acquire()
        try:
            self._entries.clear()
        finally:
            self.release()


class DebugLog:
    """Explicitly constructed logging handle.

    Args:
        name: Logger name shown in each entry.
        capacity: Ring buffer size.

    Example::

        log = DebugLog()
        log.info("Starting rootly-tui", version="0.3.0")
        log.entries()[-1]  # '... INFO rootly-tui: Starting rootly-tui version=0.3.0'
    """

    def __init__(self, name: str = "rootly-tui", capacity: int = DEFAULT_CAPACITY) -> None:
        self._logger = logging.Logger(name, level=logging.DEBUG)
        self._logger.propagate = False
        self._buffer = RingBufferHandler(capacity)
        self._buffer.setFormatter(logging.Formatter(_FORMAT))
        self._logger.addHandler(self._buffer)
        self._stderr_handler: Optional[logging.Handler] = None
        self._file_handler: Optional[logging.FileHandler] = None
        self.log_file_path: Optional[Path] = None

    # ------------------------------------------------------------------ #
    # Logging
    # ------------------------------------------------------------------ #

    def debug(self, message: str, **fields: Any) -> None:
        self._log(logging.DEBUG, message, fields)

    def info(self, message: str, **fields: Any) -> None:
        self._log(logging.INFO, message, fields)

    def warning(self, message: str, **fields: Any) -> None:
        self._log(logging.WARNING, message, fields)

    def error(self, message: str, **fields: Any) -> None:
        self._log(logging.ERROR, message, fields)

    def _log(self, level: int, message: str, fields: dict[str, Any]) -> None:
        if fields:
            rendered = " ".join(f"{key}={value}" for key, value in fields.items())
            message = f"{message} {rendered}"
        self._logger.log(level, message)

    # ------------------------------------------------------------------ #
    # Sinks
    # ------------------------------------------------------------------ #

    @property
    def stderr_enabled(self) -> bool:
        """Whether entries are also written to stderr."""
        return self._stderr_handler is not None

    def enable_stderr(self, console: Optional[Console] = None) -> None:
        """Also write entries to stderr using Rich formatting."""
        if self._stderr_handler is not None:
            return
        handler = RichHandler(
            console=console or Console(stderr=True),
            show_path=False,
            markup=False,
        )
        handler.setLevel(logging.DEBUG)
        self._logger.addHandler(handler)
        self._stderr_handler = handler
        self.debug("Debug mode enabled")

    def disable_stderr(self) -> None:
        """Stop writing to stderr. The ring buffer keeps capturing."""
        if self._stderr_handler is not None:
            self._logger.removeHandler(self._stderr_handler)
            self._stderr_handler = None

    def set_log_file(self, path: str | Path) -> None:
        """Append entries to *path* in addition to the ring buffer.

        Raises:
            OSError: If the file cannot be opened for appending.
        """
        path = Path(path)
        handler = logging.FileHandler(path, mode="a", encoding="utf-8")
        handler.setFormatter(logging.Formatter(_FORMAT))
        handler.setLevel(logging.DEBUG)
        if self._file_handler is not None:
            self._logger.removeHandler(self._file_handler)
            self._file_handler.close()
        self._logger.addHandler(handler)
        self._file_handler = handler
        self.log_file_path = path

    def add_sink(self, handler: logging.Handler) -> None:
        """Attach an arbitrary :class:`logging.Handler` as an extra sink."""
        self._logger.addHandler(handler)

    def close(self) -> None:
        """Detach and close every sink except the ring buffer."""
        self.disable_stderr()
        if self._file_handler is not None:
            self._logger.removeHandler(self._file_handler)
            self._file_handler.close()
            self._file_handler = None

    # ------------------------------------------------------------------ #
    # Reading
    # ------------------------------------------------------------------ #

    def entries(self) -> list[str]:
        """Return the ring buffer contents, oldest first."""
        return self._buffer.entries()

    def clear(self) -> None:
        """Empty the ring buffer."""
        self._buffer.clear()

    @property
    def has_log_file(self) -> bool:
        return self.log_file_path is not None

    def read_log_file(self, max_lines: int = MAX_LOG_LINES) -> str:
        """Return the last *max_lines* lines of the log file, or ``""`` without one.

        Only the final 100 KB of the file is read.
        """
        if self.log_file_path is None:
            return ""
        with open(self.log_file_path, "rb") as f:
            f.seek(0, 2)
            size = f.tell()
            f.seek(max(0, size - _TAIL_BYTES))
            data = f.read().decode("utf-8", errors="replace")
        lines = data.splitlines()
        return "\n".join(lines[-max_lines:])


def pretty_json(data: bytes | str) -> str:
    """Indent a JSON document for logging; return it unchanged if it does not parse."""
    text = data.decode("utf-8", errors="replace") if isinstance(data, bytes) else data
    try:
        return json.dumps(json.loads(text), indent=2)
    except (json.JSONDecodeError, TypeError):
        return text
