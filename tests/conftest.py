"""
Pytest configuration and shared fixtures for shareupload tests.

This module provides in-memory stand-ins for the remote share, the document
repository and the vault, plus small factories used across the test suite.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
import yaml

from shareupload.request import UploadRequest
from shareupload.source.base import DocumentVersion


class MemoryShare:
    """In-memory remote share recording every remote call."""

    def __init__(self) -> None:
        self.directories: set[str] = {""}
        self.files: dict[str, bytes] = {}
        self.allocated: dict[str, int] = {}
        self.calls: list[tuple[str, str]] = []
        self.writes: list[tuple[str, bytes]] = []
        self.failures: dict[tuple[str, str], Exception] = {}
        self.fail_write_at: int | None = None
        self.fail_close: Exception | None = None
        self.closed_streams = 0

    def record(self, op: str, path: str) -> None:
        self.calls.append((op, path))
        failure = self.failures.get((op, path))
        if failure is not None:
            raise failure

    def check_lookup(self, op: str, path: str) -> None:
        failure = self.failures.get((op, path))
        if failure is not None:
            raise failure

    def connect(self, endpoint: str) -> MemoryDirectory:
        self.endpoint = endpoint
        return MemoryDirectory(self, "")

    def calls_for(self, op: str) -> list[str]:
        return [path for name, path in self.calls if name == op]


def _join(parent: str, name: str) -> str:
    return f"{parent}/{name}" if parent else name


class MemoryDirectory:
    def __init__(self, share: MemoryShare, path: str) -> None:
        self.share = share
        self.path = path

    def exists(self) -> bool:
        self.share.record("dir.exists", self.path)
        return self.path in self.share.directories

    def create(self) -> None:
        self.share.record("dir.create", self.path)
        parent = self.path.rpartition("/")[0]
        if parent not in self.share.directories:
            raise RuntimeError(f"parent missing for {self.path}")
        if self.path in self.share.directories:
            raise RuntimeError(f"directory exists: {self.path}")
        self.share.directories.add(self.path)

    def get_subdirectory(self, name: str) -> MemoryDirectory:
        self.share.check_lookup("dir.get_subdirectory", _join(self.path, name))
        return MemoryDirectory(self.share, _join(self.path, name))

    def get_file(self, name: str) -> MemoryFile:
        self.share.check_lookup("dir.get_file", _join(self.path, name))
        return MemoryFile(self.share, _join(self.path, name))


class MemoryFile:
    def __init__(self, share: MemoryShare, path: str) -> None:
        self.share = share
        self.path = path

    def exists(self) -> bool:
        self.share.record("file.exists", self.path)
        return self.path in self.share.files

    def delete(self) -> None:
        self.share.record("file.delete", self.path)
        del self.share.files[self.path]
        del self.share.allocated[self.path]

    def create(self, size: int) -> None:
        self.share.record("file.create", self.path)
        if self.path in self.share.files:
            raise RuntimeError(f"file exists: {self.path}")
        self.share.files[self.path] = b""
        self.share.allocated[self.path] = size

    def open_write_stream(self) -> MemoryWriteStream:
        self.share.record("file.open_write_stream", self.path)
        return MemoryWriteStream(self.share, self.path)


class MemoryWriteStream:
    def __init__(self, share: MemoryShare, path: str) -> None:
        self.share = share
        self.path = path
        self.closed = False

    def write(self, data: bytes) -> int:
        if self.closed:
            raise RuntimeError("stream closed")
        if (
            self.share.fail_write_at is not None
            and len(self.share.writes) + 1 == self.share.fail_write_at
        ):
            raise OSError("connection reset by peer")
        self.share.writes.append((self.path, bytes(data)))
        self.share.files[self.path] += bytes(data)
        return len(data)

    def close(self) -> None:
        self.share.closed_streams += 1
        self.closed = True
        if self.share.fail_close is not None:
            raise self.share.fail_close


class FakeStream:
    """Source stream with optional read failure, short reads and close errors."""

    def __init__(
        self,
        data: bytes,
        *,
        fail_on_read: int | None = None,
        max_read: int | None = None,
        close_error: Exception | None = None,
    ) -> None:
        self.data = data
        self.pos = 0
        self.reads = 0
        self.close_calls = 0
        self.fail_on_read = fail_on_read
        self.max_read = max_read
        self.close_error = close_error

    def read(self, size: int = -1) -> bytes:
        self.reads += 1
        if self.fail_on_read is not None and self.reads == self.fail_on_read:
            raise OSError("document store went away")
        if size < 0:
            size = len(self.data) - self.pos
        if self.max_read is not None:
            size = min(size, self.max_read)
        chunk = self.data[self.pos : self.pos + size]
        self.pos += len(chunk)
        return chunk

    def close(self) -> None:
        self.close_calls += 1
        if self.close_error is not None:
            raise self.close_error


class FakeRepository:
    """Document repository serving bytes from a dict."""

    def __init__(self, documents: dict[int, bytes] | None = None, **stream_options: Any):
        self.documents = dict(documents or {})
        self.sizes: dict[int, int | None] = {}
        self.stream_options = stream_options
        self.streams: list[FakeStream] = []
        self.version_calls: list[int] = []

    def resolve_current_version(self, document_id: int) -> DocumentVersion:
        self.version_calls.append(document_id)
        if document_id not in self.documents:
            raise KeyError(f"document {document_id} not found")
        size = self.sizes.get(document_id, len(self.documents[document_id]))
        return DocumentVersion(document_id=document_id, size=size)

    def open_read_stream(self, document_id: int) -> FakeStream:
        stream = FakeStream(self.documents[document_id], **self.stream_options)
        self.streams.append(stream)
        return stream


class DictVault:
    """Vault backed by a dict, counting lookups."""

    def __init__(self, secrets: dict[str, dict[str, str]] | None = None) -> None:
        self.secrets = secrets or {}
        self.lookups: list[str] = []

    def get_secrets(self, key: str) -> dict[str, str] | None:
        self.lookups.append(key)
        return self.secrets.get(key)


class RecordingLogger:
    """Logger capturing messages by level."""

    def __init__(self) -> None:
        self.messages: list[tuple[str, str, str]] = []

    def step(self, step: int, total: int, message: str) -> None:
        self.messages.append(("step", f"{step}/{total}", message))

    def verbose(self, prefix: str, message: str) -> None:
        self.messages.append(("verbose", prefix, message))

    def debug(self, prefix: str, message: str) -> None:
        self.messages.append(("debug", prefix, message))

    def warning(self, prefix: str, message: str) -> None:
        self.messages.append(("warning", prefix, message))

    def error(self, prefix: str, message: str) -> None:
        self.messages.append(("error", prefix, message))

    def text(self) -> str:
        return "\n".join(message for _, _, message in self.messages)

    def errors(self) -> list[str]:
        return [message for level, _, message in self.messages if level == "error"]


@pytest.fixture
def share() -> MemoryShare:
    return MemoryShare()


@pytest.fixture
def repository() -> FakeRepository:
    return FakeRepository({42: b"%PDF-1.7 quarterly report"})


@pytest.fixture
def vault() -> DictVault:
    return DictVault({"azure-creds": {"sasToken": "sv=2024&sig=vault"}})


@pytest.fixture
def logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def make_request():
    """
    Factory fixture for upload requests with sensible defaults.

    Usage:
        request = make_request(directory_path="reports/2024")
    """

    def _make(**overrides: Any) -> UploadRequest:
        values: dict[str, Any] = {
            "account_url": "https://acct.file.core.windows.net",
            "share_name": "documents",
            "file_name": "report.pdf",
            "document_id": 42,
            "directory_path": "",
            "manual_token": "sv=2024&sig=abc",
        }
        values.update(overrides)
        return UploadRequest(**values)

    return _make


@pytest.fixture
def create_yaml_file(tmp_path: Path):
    """
    Factory fixture for creating temporary YAML files.

    Usage:
        yaml_path = create_yaml_file("job.yaml", {"key": "value"})
    """

    def _create(filename: str, data: dict[str, Any]) -> Path:
        path = tmp_path / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            yaml.dump(data, f)
        return path

    return _create


@pytest.fixture
def sample_job_data() -> dict[str, Any]:
    """Provide a complete job configuration."""
    return {
        "share": {
            "account_url": "https://acct.file.core.windows.net",
            "share_name": "documents",
            "directory_path": "reports/2024",
        },
        "upload": {"file_name": "report.pdf", "document_id": 42},
        "credentials": {"vault_key": "azure-creds", "vault_field": "sasToken"},
        "repository": {
            "url_template": "https://dms.example.com/api/documents/{document_id}/content",
        },
    }
