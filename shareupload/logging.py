# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Progress and diagnostic output for shareupload.

The upload pipeline reports what it is doing through a small Logger
protocol instead of printing directly, so the same code runs quietly when
embedded in a workflow and chattily under the CLI.

Each message carries a short prefix naming the pipeline area that produced
it: AUTH (credential resolution), SHARE (connection and directory walk),
TRANSFER (delete, allocate and stream), SOURCE (repository reads and stream
release), HTTP, CONFIG and UPLOAD (the final outcome).

Levels:

- step: numbered pipeline stage, e.g. "[2/4] Connecting to file share..."
- verbose: one line per remote action (directory created, file deleted)
- debug: per-chunk detail and tracebacks of unexpected failures
- warning: recoverable oddities such as an unparsable Content-Length
- error: the failed-upload line and source release failures (stderr)

Access tokens are never passed to a logger. Endpoints are logged only in
the form returned by redact_endpoint().

Example:
    The CLI installs a printing logger; library callers can pass their own:
        ```python
        from shareupload.logging import get_logger, set_global_logger

        set_global_logger(get_logger(verbose=True))
        outcome = upload_document(request, repository=repo)
        ```
"""

from __future__ import annotations

import sys
from typing import Protocol


class Logger(Protocol):
    """Anything the pipeline can report progress to."""

    def step(self, step: int, total: int, message: str) -> None:
        """Report the start of pipeline stage step of total."""
        ...

    def verbose(self, prefix: str, message: str) -> None:
        """Report a remote or source action.

        Args:
            prefix: Pipeline area (e.g., "SHARE", "AUTH").
            message: What happened.
        """
        ...

    def debug(self, prefix: str, message: str) -> None:
        """Report low-level detail (e.g., "TRANSFER" chunk offsets)."""
        ...

    def warning(self, prefix: str, message: str) -> None:
        ...

    def error(self, prefix: str, message: str) -> None:
        ...


class DefaultLogger:
    """Prints "[PREFIX] message" lines; errors go to stderr.

    Step, warning and error lines are always printed. Verbose and debug
    lines depend on the flags given at construction.
    """

    def __init__(self, verbose: bool = False, debug: bool = False) -> None:
        # debug output is a superset of verbose output
        self._verbose = verbose or debug
        self._debug = debug

    def step(self, step: int, total: int, message: str) -> None:
        print(f"[{step}/{total}] {message}")

    def verbose(self, prefix: str, message: str) -> None:
        if self._verbose:
            print(f"[{prefix}] {message}")

    def debug(self, prefix: str, message: str) -> None:
        if self._debug:
            print(f"[{prefix}] {message}")

    def warning(self, prefix: str, message: str) -> None:
        print(f"[{prefix}] WARNING: {message}")

    def error(self, prefix: str, message: str) -> None:
        print(f"[{prefix}] ERROR: {message}", file=sys.stderr)


class SilentLogger:
    """Discards everything. Default for library use, so upload_document()
    called from a workflow prints nothing unless a logger is configured."""

    def step(self, step: int, total: int, message: str) -> None:
        pass

    def verbose(self, prefix: str, message: str) -> None:
        pass

    def debug(self, prefix: str, message: str) -> None:
        pass

    def warning(self, prefix: str, message: str) -> None:
        pass

    def error(self, prefix: str, message: str) -> None:
        pass


_global_logger: Logger = SilentLogger()


def get_logger(verbose: bool = False, debug: bool = False) -> Logger:
    """Return a printing logger for the CLI's -v/-d flags."""
    return DefaultLogger(verbose=verbose, debug=debug)


def get_global_logger() -> Logger:
    """Return the logger used when a pipeline function gets logger=None."""
    return _global_logger


def set_global_logger(logger: Logger) -> None:
    """Replace the fallback logger for the whole process.

    The CLI calls this once per command. Tests and embedding code should
    prefer passing logger= to upload_document() so runs stay isolated.
    """
    global _global_logger
    _global_logger = logger
