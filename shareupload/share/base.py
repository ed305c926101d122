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

"""Remote file share protocols for shareupload.

The upload pipeline talks to the remote share only through the protocols in
this module, so any client library can be plugged in behind them:

- RemoteDirectory: exists(), create(), get_subdirectory(), get_file()
- RemoteFile: exists(), delete(), create(size), open_write_stream()
- WriteStream: write(data), close()
- ShareConnector: callable turning an endpoint URL into the share root

Protocols use structural subtyping, so adapters do not need to inherit from
anything here. The Azure Files adapter lives in shareupload.share.azure.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Protocol

from shareupload.exceptions import RemoteIOError, ShareUploadError


class WriteStream(Protocol):
    """Sequential write stream into an allocated remote file."""

    def write(self, data: bytes) -> int | None: ...

    def close(self) -> None: ...


class RemoteFile(Protocol):
    """A file reference under a remote directory."""

    path: str

    def exists(self) -> bool: ...

    def delete(self) -> None: ...

    def create(self, size: int) -> None:
        """Allocate the file at its final size before any bytes are written."""
        ...

    def open_write_stream(self) -> WriteStream: ...


class RemoteDirectory(Protocol):
    """A directory cursor on the remote share."""

    path: str

    def exists(self) -> bool: ...

    def create(self) -> None: ...

    def get_subdirectory(self, name: str) -> RemoteDirectory: ...

    def get_file(self, name: str) -> RemoteFile: ...


ShareConnector = Callable[[str], RemoteDirectory]


@contextmanager
def remote_operation(description: str) -> Iterator[None]:
    """Report any failure inside the block as a RemoteIOError.

    Errors that already belong to the shareupload taxonomy pass through
    untouched; everything else is chained under a RemoteIOError.

    Example:
        ```python
        with remote_operation(f"checking {directory.path}"):
            present = directory.exists()
        ```
    """
    try:
        yield
    except ShareUploadError:
        raise
    except Exception as err:
        raise RemoteIOError(f"{description} failed: {err}") from err
