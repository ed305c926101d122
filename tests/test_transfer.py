"""
Tests for shareupload.transfer module.

Tests the chunked transfer including:
- Idempotent deletion of an existing target
- Chunk counts and byte-exact reassembly
- Short reads from the source
- Allocation from declared size
- Write stream finalization on success and failure
- Optional size verification
"""

from __future__ import annotations

import math

import pytest

from conftest import FakeRepository, FakeStream
from shareupload.exceptions import (
    ConfigurationError,
    RemoteIOError,
    SourceReadError,
)
from shareupload.transfer import (
    CHUNK_SIZE,
    iter_chunks,
    prepare_target,
    read_chunk,
    stream_to_file,
    transfer_document,
)


def test_chunk_size_is_four_mib():
    """Test the fixed chunk size constant."""
    assert CHUNK_SIZE == 4 * 1024 * 1024


class TestChunking:
    """Tests for reading the source in chunks."""

    @pytest.mark.parametrize("size", [0, 1, 7, 8, 9, 16, 17, 63])
    def test_chunk_count_and_content(self, size):
        """Test ceil(N / C) chunks whose concatenation equals the source."""
        data = bytes(range(256))[:size] if size <= 256 else b"x" * size
        chunks = list(iter_chunks(FakeStream(data), chunk_size=8))

        assert len(chunks) == math.ceil(size / 8)
        assert b"".join(chunks) == data
        assert all(len(c) == 8 for c in chunks[:-1])

    def test_short_reads_are_accumulated(self):
        """Test that a source returning 3 bytes per read still yields full chunks."""
        data = b"abcdefghijklmnopqrstu"  # 21 bytes
        chunks = list(iter_chunks(FakeStream(data, max_read=3), chunk_size=8))

        assert [len(c) for c in chunks] == [8, 8, 5]
        assert b"".join(chunks) == data

    def test_read_chunk_stops_at_eof(self):
        """Test that read_chunk returns what is left at end of stream."""
        stream = FakeStream(b"abc")

        assert read_chunk(stream, 8) == b"abc"
        assert read_chunk(stream, 8) == b""

    def test_read_failure_is_source_read_error(self):
        """Test that a read exception is reported as SourceReadError."""
        stream = FakeStream(b"abcdefgh" * 3, fail_on_read=2)

        with pytest.raises(SourceReadError, match="document store went away"):
            list(iter_chunks(stream, chunk_size=8))


class TestPrepareTarget:
    """Tests for idempotent target preparation."""

    def test_existing_file_is_deleted(self, share):
        """Test that a pre-existing target is removed."""
        share.files["report.pdf"] = b"old"
        share.allocated["report.pdf"] = 3
        root = share.connect("endpoint")

        target = prepare_target(root, "report.pdf")

        assert target.path == "report.pdf"
        assert "report.pdf" not in share.files
        assert share.calls_for("file.delete") == ["report.pdf"]

    def test_missing_file_is_not_deleted(self, share):
        """Test that no delete is issued when the target is absent."""
        root = share.connect("endpoint")

        prepare_target(root, "report.pdf")

        assert share.calls_for("file.delete") == []

    def test_delete_failure_is_remote_io_error(self, share):
        """Test that a failed delete is a RemoteIOError."""
        share.files["report.pdf"] = b"old"
        share.allocated["report.pdf"] = 3
        share.failures[("file.delete", "report.pdf")] = OSError("lease held")
        root = share.connect("endpoint")

        with pytest.raises(RemoteIOError, match="deleting file 'report.pdf'"):
            prepare_target(root, "report.pdf")

    def test_file_lookup_failure_is_remote_io_error(self, share):
        """Test that a failing file handle lookup is a RemoteIOError."""
        share.failures[("dir.get_file", "report.pdf")] = ValueError("bad name")
        root = share.connect("endpoint")

        with pytest.raises(RemoteIOError, match="opening file 'report.pdf' failed: bad name"):
            prepare_target(root, "report.pdf")

        assert share.calls == []


class TestStreamToFile:
    """Tests for streaming into an allocated file."""

    def test_writes_in_order_and_closes(self, share):
        """Test ordered writes followed by one close."""
        root = share.connect("endpoint")
        target = root.get_file("a.bin")
        target.create(20)

        written, chunks = stream_to_file(FakeStream(b"0123456789abcdefghij"), target, 8)

        assert (written, chunks) == (20, 3)
        assert [data for _, data in share.writes] == [b"01234567", b"89abcdef", b"ghij"]
        assert share.files["a.bin"] == b"0123456789abcdefghij"
        assert share.closed_streams == 1

    def test_empty_source_makes_no_writes(self, share):
        """Test that N = 0 issues no writes but still finalizes."""
        root = share.connect("endpoint")
        target = root.get_file("empty.bin")
        target.create(0)

        assert stream_to_file(FakeStream(b""), target, 8) == (0, 0)
        assert share.writes == []
        assert share.closed_streams == 1

    def test_write_failure_closes_stream_and_raises(self, share):
        """Test that a write error still finalizes the stream."""
        share.fail_write_at = 2
        root = share.connect("endpoint")
        target = root.get_file("a.bin")
        target.create(24)

        with pytest.raises(RemoteIOError, match="writing chunk 2 at offset 8"):
            stream_to_file(FakeStream(b"x" * 24), target, 8)

        assert share.closed_streams == 1
        assert len(share.writes) == 1

    def test_close_error_after_failure_does_not_mask_it(self, share, logger):
        """Test that the primary error wins over a close error."""
        share.fail_write_at = 1
        share.fail_close = OSError("close failed")
        root = share.connect("endpoint")
        target = root.get_file("a.bin")
        target.create(8)

        with pytest.raises(RemoteIOError, match="writing chunk 1"):
            stream_to_file(FakeStream(b"x" * 8), target, 8, logger)

        assert any("close failed" in message for message in logger.errors())

    def test_close_error_after_success_is_remote_io_error(self, share):
        """Test that a failed finalize fails the transfer."""
        share.fail_close = OSError("flush failed")
        root = share.connect("endpoint")
        target = root.get_file("a.bin")
        target.create(8)

        with pytest.raises(RemoteIOError, match="finalizing 'a.bin' failed: flush failed"):
            stream_to_file(FakeStream(b"x" * 8), target, 8)


class TestTransferDocument:
    """Tests for the full file transfer."""

    def test_allocates_declared_size_and_streams(self, share, repository):
        """Test allocation, streaming and the returned report."""
        root = share.connect("endpoint")

        report = transfer_document(root, "report.pdf", repository, 42, chunk_size=8)

        payload = repository.documents[42]
        assert share.allocated["report.pdf"] == len(payload)
        assert share.files["report.pdf"] == payload
        assert report.bytes_written == len(payload)
        assert report.chunk_count == math.ceil(len(payload) / 8)
        assert report.allocated_size == len(payload)
        assert repository.streams[0].close_calls == 1

    def test_missing_size_allocates_zero(self, share, repository):
        """Test that an absent declared size allocates 0 bytes without error."""
        repository.sizes[42] = None
        root = share.connect("endpoint")

        report = transfer_document(root, "report.pdf", repository, 42)

        assert share.allocated["report.pdf"] == 0
        assert report.bytes_written == len(repository.documents[42])

    def test_size_mismatch_ignored_by_default(self, share, repository):
        """Test that a stale size is not verified unless asked."""
        repository.sizes[42] = 5
        root = share.connect("endpoint")

        report = transfer_document(root, "report.pdf", repository, 42)

        assert report.allocated_size == 5
        assert report.bytes_written > 5

    def test_size_mismatch_fails_with_verify_size(self, share, repository):
        """Test the opt-in post-transfer size check."""
        repository.sizes[42] = 5
        root = share.connect("endpoint")

        with pytest.raises(RemoteIOError, match="size mismatch"):
            transfer_document(root, "report.pdf", repository, 42, verify_size=True)

    def test_metadata_failure_is_source_read_error(self, share, repository):
        """Test that an unknown document fails before allocation."""
        root = share.connect("endpoint")

        with pytest.raises(SourceReadError, match="resolving document 7"):
            transfer_document(root, "report.pdf", repository, 7)

        assert share.calls_for("file.create") == []

    def test_allocation_failure_releases_source(self, share, repository):
        """Test that the source stream is closed when allocation fails."""
        share.failures[("file.create", "report.pdf")] = OSError("quota exceeded")
        root = share.connect("endpoint")

        with pytest.raises(RemoteIOError, match="quota exceeded"):
            transfer_document(root, "report.pdf", repository, 42)

        assert repository.streams[0].close_calls == 1

    def test_source_close_failure_is_logged_not_raised(self, share, logger):
        """Test that a release failure never changes the result."""
        repository = FakeRepository({1: b"abc"}, close_error=OSError("close boom"))
        root = share.connect("endpoint")

        report = transfer_document(root, "a.txt", repository, 1, logger=logger)

        assert report.bytes_written == 3
        assert any("ResourceReleaseError" in message for message in logger.errors())

    @pytest.mark.parametrize("chunk_size", [0, -1])
    def test_invalid_chunk_size(self, share, repository, chunk_size):
        """Test that a non-positive chunk size is rejected up front."""
        root = share.connect("endpoint")

        with pytest.raises(ConfigurationError):
            transfer_document(root, "report.pdf", repository, 42, chunk_size=chunk_size)

        assert share.calls == []
