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

"""HTTP document repository.

Reads source documents from an HTTP endpoint addressed by a URL template
containing "{document_id}":

    https://dms.example.com/api/documents/{document_id}/content

- resolve_current_version() sends HEAD and reads Content-Length (size) and
  ETag (version label). A missing Content-Length yields size None.
- open_read_stream() sends a streaming GET and returns a ResponseStream,
  a file-like reader over the response body.

Requests go through make_session(), which retries transient failures with
exponential backoff for idempotent methods. HTTP and connection errors are
reported as SourceReadError.

Example:
    ```python
    from shareupload.source.http import HttpDocumentRepository

    repo = HttpDocumentRepository(
        "https://dms.example.com/api/documents/{document_id}/content",
        headers={"Authorization": "Bearer ..."},
    )
    version = repo.resolve_current_version(42)
    stream = repo.open_read_stream(42)
    ```
"""

from __future__ import annotations

from collections.abc import Mapping

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from shareupload import __version__
from shareupload.exceptions import ConfigurationError, SourceReadError
from shareupload.logging import Logger, get_global_logger
from shareupload.source.base import DocumentVersion

# Network read size per iteration (1 MiB). Independent of the upload chunk.
DEFAULT_CHUNK = 1024 * 1024


def make_session() -> requests.Session:
    """
    Create a requests.Session with sane retry/backoff defaults.

    - Retries on common transient status codes.
    - Applies exponential backoff.
    - Sets a User-Agent identifying shareupload.
    - Forces 'Accept-Encoding: identity' so Content-Length matches the
      bytes that will be streamed.
    """
    s = requests.Session()
    retries = Retry(
        total=5,
        backoff_factor=0.5,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=("GET", "HEAD"),
        raise_on_status=False,
    )
    s.headers.update(
        {
            "User-Agent": f"shareupload/{__version__}",
            "Accept-Encoding": "identity",
        }
    )
    s.mount("http://", HTTPAdapter(max_retries=retries))
    s.mount("https://", HTTPAdapter(max_retries=retries))
    return s


class ResponseStream:
    """File-like reader over a streaming HTTP response body."""

    def __init__(self, response: requests.Response, chunk_size: int = DEFAULT_CHUNK):
        self._response = response
        self._chunks = response.iter_content(chunk_size=chunk_size)
        self._buffer = bytearray()
        self._exhausted = False

    def read(self, size: int = -1) -> bytes:
        """Read up to size bytes; b"" once the body is exhausted."""
        while not self._exhausted and (size < 0 or len(self._buffer) < size):
            try:
                chunk = next(self._chunks)
            except StopIteration:
                self._exhausted = True
                break
            except requests.RequestException as err:
                raise SourceReadError(f"reading document body failed: {err}") from err
            self._buffer.extend(chunk)

        if size < 0 or size >= len(self._buffer):
            data = bytes(self._buffer)
            self._buffer.clear()
        else:
            data = bytes(self._buffer[:size])
            del self._buffer[:size]
        return data

    def close(self) -> None:
        self._response.close()


class HttpDocumentRepository:
    """DocumentRepository reading documents over HTTP."""

    def __init__(
        self,
        url_template: str,
        *,
        headers: Mapping[str, str] | None = None,
        timeout: int = 60,
        session: requests.Session | None = None,
        logger: Logger | None = None,
    ) -> None:
        if "{document_id}" not in url_template:
            raise ConfigurationError(
                f"url_template must contain '{{document_id}}': {url_template!r}"
            )
        self.url_template = url_template
        self.timeout = timeout
        self._headers = dict(headers or {})
        self._session = session if session is not None else make_session()
        self._logger = logger

    @property
    def logger(self) -> Logger:
        return self._logger if self._logger is not None else get_global_logger()

    def document_url(self, document_id: int) -> str:
        return self.url_template.format(document_id=document_id)

    def resolve_current_version(self, document_id: int) -> DocumentVersion:
        url = self.document_url(document_id)
        self.logger.verbose("HTTP", f"HEAD {url}")
        try:
            resp = self._session.head(
                url, headers=self._headers, timeout=self.timeout, allow_redirects=True
            )
            resp.raise_for_status()
        except requests.RequestException as err:
            raise SourceReadError(
                f"metadata lookup for document {document_id} failed: {err}"
            ) from err

        raw_length = resp.headers.get("Content-Length")
        size: int | None = None
        if raw_length:
            try:
                size = int(raw_length)
            except ValueError:
                self.logger.warning(
                    "HTTP", f"Ignoring invalid Content-Length: {raw_length!r}"
                )
        label = resp.headers.get("ETag")
        self.logger.debug("HTTP", f"Document {document_id}: size={size} etag={label}")
        return DocumentVersion(document_id=document_id, size=size, label=label)

    def open_read_stream(self, document_id: int) -> ResponseStream:
        url = self.document_url(document_id)
        self.logger.verbose("HTTP", f"GET {url}")
        try:
            resp = self._session.get(
                url, headers=self._headers, timeout=self.timeout, stream=True
            )
        except requests.RequestException as err:
            raise SourceReadError(
                f"opening document {document_id} failed: {err}"
            ) from err
        try:
            resp.raise_for_status()
        except requests.HTTPError as err:
            resp.close()
            raise SourceReadError(
                f"opening document {document_id} failed: {err}"
            ) from err
        return ResponseStream(resp)
