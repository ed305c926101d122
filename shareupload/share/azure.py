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

"""Azure Files adapter for the remote share protocols.

Wraps the azure-storage-file-share clients so the upload pipeline can drive
an Azure file share through RemoteDirectory and RemoteFile. The share is
reached through a SAS-bearing endpoint built by
shareupload.auth.build_endpoint():

    https://<account>.file.core.windows.net/<share>?<sas-token>

Azure SDK errors (azure.core.exceptions.AzureError) are reported as
RemoteIOError. Transport, authentication headers, and retry/backoff are left
to the SDK's own pipeline.

Writes go through AzureRangeWriter, which turns each write() into one
"Put Range" request at the current offset. Azure limits a single range to
4 MiB, which is why the transfer layer streams in chunks of that size.

Example:
    ```python
    from shareupload.share.azure import connect_share

    root = connect_share(endpoint)
    target = root.get_subdirectory("reports").get_file("report.pdf")
    target.create(len(payload))
    with target.open_write_stream() as stream:
        stream.write(payload)
    ```
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from azure.core.exceptions import AzureError
from azure.storage.fileshare import ShareClient, ShareDirectoryClient, ShareFileClient

from shareupload.exceptions import RemoteIOError


@contextmanager
def _azure_errors(description: str) -> Iterator[None]:
    try:
        yield
    except AzureError as err:
        raise RemoteIOError(f"{description} failed: {err}") from err


def _join(parent: str, name: str) -> str:
    return f"{parent}/{name}" if parent else name


class AzureRangeWriter:
    """Sequential writer issuing one upload_range() call per write."""

    def __init__(self, client: ShareFileClient, path: str) -> None:
        self._client = client
        self._path = path
        self._offset = 0
        self._closed = False

    @property
    def offset(self) -> int:
        """Number of bytes written so far."""
        return self._offset

    def write(self, data: bytes) -> int:
        if self._closed:
            raise RemoteIOError(f"write to closed stream for {self._path!r}")
        if not data:
            return 0
        length = len(data)
        with _azure_errors(f"writing {length} bytes at offset {self._offset} of {self._path!r}"):
            self._client.upload_range(data, offset=self._offset, length=length)
        self._offset += length
        return length

    def close(self) -> None:
        # Every range is committed by its own request; nothing is buffered.
        self._closed = True

    def __enter__(self) -> AzureRangeWriter:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


class AzureFile:
    """RemoteFile backed by a ShareFileClient."""

    def __init__(self, client: ShareFileClient, path: str) -> None:
        self._client = client
        self.path = path

    def exists(self) -> bool:
        with _azure_errors(f"checking file {self.path!r}"):
            return bool(self._client.exists())

    def delete(self) -> None:
        with _azure_errors(f"deleting file {self.path!r}"):
            self._client.delete_file()

    def create(self, size: int) -> None:
        with _azure_errors(f"allocating {size} bytes for {self.path!r}"):
            self._client.create_file(size)

    def open_write_stream(self) -> AzureRangeWriter:
        return AzureRangeWriter(self._client, self.path)


class AzureDirectory:
    """RemoteDirectory backed by a ShareDirectoryClient."""

    def __init__(self, client: ShareDirectoryClient, path: str = "") -> None:
        self._client = client
        self.path = path

    def exists(self) -> bool:
        with _azure_errors(f"checking directory {self.path!r}"):
            return bool(self._client.exists())

    def create(self) -> None:
        with _azure_errors(f"creating directory {self.path!r}"):
            self._client.create_directory()

    def get_subdirectory(self, name: str) -> AzureDirectory:
        return AzureDirectory(
            self._client.get_subdirectory_client(name), _join(self.path, name)
        )

    def get_file(self, name: str) -> AzureFile:
        return AzureFile(self._client.get_file_client(name), _join(self.path, name))


def connect_share(endpoint: str, **client_kwargs: Any) -> AzureDirectory:
    """Open the root directory of the share addressed by endpoint.

    Args:
        endpoint: Share URL including the SAS token query string.
        **client_kwargs: Passed through to ShareClient.from_share_url()
            (e.g., retry or transport settings).

    Returns:
        AzureDirectory positioned at the share root.

    Raises:
        RemoteIOError: If the endpoint cannot be turned into a client.
    """
    try:
        share = ShareClient.from_share_url(endpoint, **client_kwargs)
    except (AzureError, ValueError) as err:
        raise RemoteIOError(f"connecting to share failed: {err}") from err
    return AzureDirectory(share.get_directory_client())
