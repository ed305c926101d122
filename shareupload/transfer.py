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

"""Chunked transfer of a source document into a remote file.

transfer_document() performs the file half of an upload once the target
directory exists:

1. Idempotency: delete the target file if it already exists, so a re-run
   never trips over stale content or "already exists" errors.
2. Metadata: resolve the document's current version and declared size
   (a missing size counts as 0).
3. Open the source stream (released exactly once on every exit path).
4. Allocation: create the remote file at the declared size. The remote
   protocol needs the final size before any range is written.
5. Streaming: copy the source in CHUNK_SIZE pieces, in order, one write per
   chunk. Short reads are accumulated so every chunk but the last is full.
6. Completion: close the write stream, on the failure path too.

A failed read or write aborts the transfer and leaves the remote file
allocated but incomplete; nothing is cleaned up remotely.

Constants:

- CHUNK_SIZE (int): 4 MiB, the largest payload the remote service accepts
  in a single range write.
"""

from __future__ import annotations

from collections.abc import Iterator

from shareupload.exceptions import ConfigurationError, RemoteIOError
from shareupload.logging import Logger, get_global_logger
from shareupload.results import TransferReport
from shareupload.share.base import RemoteDirectory, RemoteFile, remote_operation
from shareupload.source.base import (
    DocumentRepository,
    SourceStream,
    open_source,
    source_operation,
)

CHUNK_SIZE = 4 * 1024 * 1024


def read_chunk(source: SourceStream, size: int) -> bytes:
    """Read up to size bytes, retrying short reads until size or EOF.

    Raises:
        SourceReadError: If the source fails while reading.
    """
    parts: list[bytes] = []
    remaining = size
    while remaining > 0:
        with source_operation("reading document stream"):
            data = source.read(remaining)
        if not data:
            break
        parts.append(data)
        remaining -= len(data)
    return b"".join(parts)


def iter_chunks(source: SourceStream, chunk_size: int = CHUNK_SIZE) -> Iterator[bytes]:
    """Yield the source as consecutive chunks of chunk_size bytes.

    The last chunk may be shorter. An empty source yields nothing.
    """
    while True:
        chunk = read_chunk(source, chunk_size)
        if not chunk:
            return
        yield chunk
        if len(chunk) < chunk_size:
            return


def prepare_target(
    directory: RemoteDirectory, file_name: str, logger: Logger | None = None
) -> RemoteFile:
    """Return the target file handle, deleting any existing file first.

    Raises:
        RemoteIOError: If the existence check or deletion fails.
    """
    if logger is None:
        logger = get_global_logger()

    with remote_operation(f"opening file {file_name!r}"):
        target = directory.get_file(file_name)
    with remote_operation(f"checking file {target.path!r}"):
        present = target.exists()
    if present:
        logger.verbose("TRANSFER", f"Deleting existing file: {target.path}")
        with remote_operation(f"deleting file {target.path!r}"):
            target.delete()
    return target


def stream_to_file(
    source: SourceStream,
    target: RemoteFile,
    chunk_size: int = CHUNK_SIZE,
    logger: Logger | None = None,
) -> tuple[int, int]:
    """Copy source into the allocated target file chunk by chunk.

    The write stream is closed whether or not the copy completes. When the
    copy already failed, a close error is logged and the copy error wins.

    Args:
        source: Open source stream.
        target: Remote file, already allocated.
        chunk_size: Bytes per write call.
        logger: Logger for progress output. Defaults to the global logger.

    Returns:
        A tuple (bytes_written, chunk_count).

    Raises:
        SourceReadError: If reading the source fails.
        RemoteIOError: If opening, writing, or closing the stream fails.
    """
    if logger is None:
        logger = get_global_logger()

    with remote_operation(f"opening write stream for {target.path!r}"):
        sink = target.open_write_stream()

    written = 0
    chunks = 0
    completed = False
    try:
        for chunk in iter_chunks(source, chunk_size):
            with remote_operation(
                f"writing chunk {chunks + 1} at offset {written} of {target.path!r}"
            ):
                sink.write(chunk)
            chunks += 1
            written += len(chunk)
            logger.debug("TRANSFER", f"Chunk {chunks}: {len(chunk)} bytes ({written} total)")
        completed = True
    finally:
        if completed:
            with remote_operation(f"finalizing {target.path!r}"):
                sink.close()
        else:
            try:
                sink.close()
            except Exception as err:
                logger.error(
                    "TRANSFER",
                    f"Failed to close write stream for {target.path} after error: {err}",
                )
    return written, chunks


def transfer_document(
    directory: RemoteDirectory,
    file_name: str,
    repository: DocumentRepository,
    document_id: int,
    *,
    chunk_size: int = CHUNK_SIZE,
    verify_size: bool = False,
    logger: Logger | None = None,
) -> TransferReport:
    """Write the current version of a document into directory/file_name.

    Args:
        directory: Fully walked target directory.
        file_name: Name of the remote file.
        repository: Repository holding the source document.
        document_id: Identifier of the source document.
        chunk_size: Bytes per write call. Default is CHUNK_SIZE (4 MiB).
        verify_size: If True, fail when the bytes streamed differ from the
            allocated size. Default is False.
        logger: Logger for progress output. Defaults to the global logger.

    Returns:
        TransferReport with allocated size, bytes written and chunk count.

    Raises:
        ConfigurationError: If chunk_size is not positive.
        SourceReadError: If metadata lookup, opening, or reading fails.
        RemoteIOError: On any remote failure, or a size mismatch when
            verify_size is set.
    """
    if logger is None:
        logger = get_global_logger()
    if chunk_size <= 0:
        raise ConfigurationError(f"chunk_size must be positive, got {chunk_size}")

    target = prepare_target(directory, file_name, logger)

    with source_operation(f"resolving document {document_id}"):
        version = repository.resolve_current_version(document_id)
        size = version.declared_size
    if version.size is None:
        logger.verbose("TRANSFER", f"Document {document_id} has no size; allocating 0 bytes")

    with open_source(repository, document_id, logger) as source:
        logger.verbose("TRANSFER", f"Allocating {size} bytes for {target.path}")
        with remote_operation(f"allocating {size} bytes for {target.path!r}"):
            target.create(size)
        written, chunks = stream_to_file(source, target, chunk_size, logger)

    if verify_size and written != size:
        raise RemoteIOError(
            f"size mismatch for {target.path!r}: allocated {size} bytes, wrote {written}"
        )

    return TransferReport(
        file_name=file_name,
        allocated_size=size,
        bytes_written=written,
        chunk_count=chunks,
    )
