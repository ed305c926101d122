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

"""Document repository protocols for shareupload.

The pipeline reads the source document through DocumentRepository:

- resolve_current_version(document_id) -> DocumentVersion
- open_read_stream(document_id) -> SourceStream

open_source() wraps the read stream in scoped acquisition: the stream is
closed exactly once on every exit path, and a failure to close is logged as
a ResourceReleaseError without replacing whatever the block already raised
or returned.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Protocol

from shareupload.exceptions import (
    ResourceReleaseError,
    ShareUploadError,
    SourceReadError,
)
from shareupload.logging import Logger, get_global_logger


@dataclass(frozen=True)
class DocumentVersion:
    """Metadata for the current version of a source document.

    Attributes:
        document_id: Repository identifier of the document.
        size: Declared size in bytes, or None when the repository does not
            report one.
        label: Optional version label (e.g., an ETag).
    """

    document_id: int
    size: int | None = None
    label: str | None = None

    @property
    def declared_size(self) -> int:
        """Size to allocate remotely; a missing size counts as 0."""
        return self.size if self.size is not None else 0


class SourceStream(Protocol):
    """Byte-readable handle bound to a source document."""

    def read(self, size: int = -1) -> bytes: ...

    def close(self) -> None: ...


class DocumentRepository(Protocol):
    """Protocol for the repository holding source documents."""

    def resolve_current_version(self, document_id: int) -> DocumentVersion: ...

    def open_read_stream(self, document_id: int) -> SourceStream: ...


@contextmanager
def source_operation(description: str) -> Iterator[None]:
    """Report any failure inside the block as a SourceReadError."""
    try:
        yield
    except ShareUploadError:
        raise
    except Exception as err:
        raise SourceReadError(f"{description} failed: {err}") from err


def release_source(stream: SourceStream, logger: Logger | None = None) -> None:
    """Close a source stream, logging instead of raising on failure."""
    if logger is None:
        logger = get_global_logger()
    try:
        stream.close()
    except Exception as err:
        failure = ResourceReleaseError(f"Failed to close document input stream: {err}")
        logger.error("SOURCE", failure.describe())
    else:
        logger.debug("SOURCE", "Document input stream closed")


@contextmanager
def open_source(
    repository: DocumentRepository,
    document_id: int,
    logger: Logger | None = None,
) -> Iterator[SourceStream]:
    """Open the read stream for a document and release it on exit.

    Args:
        repository: Repository holding the document.
        document_id: Identifier of the document to read.
        logger: Logger for release diagnostics. Defaults to the global logger.

    Yields:
        The open source stream.

    Raises:
        SourceReadError: If the stream cannot be opened.
    """
    with source_operation(f"opening document {document_id}"):
        stream = repository.open_read_stream(document_id)
    try:
        yield stream
    finally:
        release_source(stream, logger)
