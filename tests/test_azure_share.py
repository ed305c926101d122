"""
Tests for shareupload.share.azure module.

Tests the Azure Files adapter against mocked SDK clients:
- Share connection from a SAS endpoint
- Directory and file operations mapped onto SDK calls
- Range writes at advancing offsets
- Translation of Azure SDK errors into RemoteIOError
"""

from __future__ import annotations

from unittest.mock import MagicMock, call, patch

from azure.core.exceptions import HttpResponseError, ResourceNotFoundError
import pytest

from shareupload.exceptions import RemoteIOError
from shareupload.share.azure import (
    AzureDirectory,
    AzureFile,
    AzureRangeWriter,
    connect_share,
)
from shareupload.share.walker import ensure_directory_path
from shareupload.transfer import stream_to_file

ENDPOINT = "https://acct.file.core.windows.net/documents?sv=2024&sig=abc"


class TestConnect:
    """Tests for connect_share."""

    def test_connect_uses_share_url_and_root(self):
        """Test that the endpoint is handed to ShareClient.from_share_url."""
        with patch("shareupload.share.azure.ShareClient") as share_client:
            root = connect_share(ENDPOINT)

        share_client.from_share_url.assert_called_once_with(ENDPOINT)
        share_client.from_share_url.return_value.get_directory_client.assert_called_once_with()
        assert isinstance(root, AzureDirectory)
        assert root.path == ""

    def test_connect_failure_is_remote_io_error(self):
        """Test that a malformed endpoint is reported as RemoteIOError."""
        with patch("shareupload.share.azure.ShareClient") as share_client:
            share_client.from_share_url.side_effect = ValueError("bad url")

            with pytest.raises(RemoteIOError, match="connecting to share failed"):
                connect_share("not a url")


class TestAzureDirectory:
    """Tests for directory operations."""

    def test_subdirectory_paths(self):
        """Test that subdirectory handles track their full path."""
        client = MagicMock()
        root = AzureDirectory(client)

        child = root.get_subdirectory("reports").get_subdirectory("2024")

        assert child.path == "reports/2024"
        client.get_subdirectory_client.assert_called_once_with("reports")

    def test_walk_creates_missing_directories(self):
        """Test the walker driving the SDK directory clients."""
        reports = MagicMock()
        reports.exists.return_value = True
        year = MagicMock()
        year.exists.return_value = False
        reports.get_subdirectory_client.return_value = year
        client = MagicMock()
        client.get_subdirectory_client.return_value = reports

        result = ensure_directory_path(AzureDirectory(client), "reports/2024")

        assert result.path == "reports/2024"
        reports.create_directory.assert_not_called()
        year.create_directory.assert_called_once_with()

    def test_sdk_error_is_remote_io_error(self):
        """Test that Azure errors are translated."""
        client = MagicMock()
        client.create_directory.side_effect = HttpResponseError("403 forbidden")

        with pytest.raises(RemoteIOError, match="creating directory 'x'") as exc_info:
            AzureDirectory(client, "x").create()

        assert isinstance(exc_info.value.__cause__, HttpResponseError)


class TestAzureFile:
    """Tests for file operations."""

    def test_file_operations(self):
        """Test exists/delete/create mapping onto the SDK."""
        client = MagicMock()
        client.exists.return_value = True
        f = AzureDirectory(MagicMock(), "reports").get_file("report.pdf")
        f._client = client

        assert f.path == "reports/report.pdf"
        assert f.exists() is True
        f.delete()
        f.create(1024)

        client.delete_file.assert_called_once_with()
        client.create_file.assert_called_once_with(1024)

    def test_delete_missing_file_is_remote_io_error(self):
        """Test that a not-found delete surfaces as RemoteIOError."""
        client = MagicMock()
        client.delete_file.side_effect = ResourceNotFoundError("gone")

        with pytest.raises(RemoteIOError, match="deleting file"):
            AzureFile(client, "a.txt").delete()


class TestAzureRangeWriter:
    """Tests for range writes."""

    def test_writes_advance_offset(self):
        """Test one upload_range call per write at increasing offsets."""
        client = MagicMock()
        writer = AzureRangeWriter(client, "a.bin")

        writer.write(b"abcd")
        writer.write(b"ef")
        writer.write(b"")

        assert client.upload_range.call_args_list == [
            call(b"abcd", offset=0, length=4),
            call(b"ef", offset=4, length=2),
        ]
        assert writer.offset == 6

    def test_write_after_close_raises(self):
        """Test that a closed writer refuses writes."""
        writer = AzureRangeWriter(MagicMock(), "a.bin")
        writer.close()

        with pytest.raises(RemoteIOError, match="closed stream"):
            writer.write(b"x")

    def test_range_failure_is_remote_io_error(self):
        """Test that a failed range write is translated."""
        client = MagicMock()
        client.upload_range.side_effect = HttpResponseError("413 request entity too large")
        writer = AzureRangeWriter(client, "a.bin")

        with pytest.raises(RemoteIOError, match="at offset 0"):
            writer.write(b"x")

    def test_stream_to_file_through_adapter(self):
        """Test the transfer layer writing through the Azure adapter."""
        client = MagicMock()
        target = AzureFile(client, "a.bin")

        class Source:
            def __init__(self):
                self.data = b"0123456789"

            def read(self, size=-1):
                chunk, self.data = self.data[:size], self.data[size:]
                return chunk

            def close(self):
                pass

        written, chunks = stream_to_file(Source(), target, chunk_size=4)

        assert (written, chunks) == (10, 3)
        assert [c.kwargs["offset"] for c in client.upload_range.call_args_list] == [0, 4, 8]
