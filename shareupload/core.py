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

"""Core orchestration for shareupload.

This module runs the upload pipeline for one request and converts every
failure into a TransferOutcome. Nothing raised inside the pipeline escapes
to the caller.

Pipeline:

1. Check required inputs and resolve the access token
   (manual token first, then the vault)
2. Build the share endpoint and connect to the share root
3. Walk the directory path, creating missing directories
4. Transfer the document: idempotent delete, allocate, stream in 4 MiB
   chunks, finalize

Outcome:

- Success: TransferOutcome(success=True, message=None)
- Failure: TransferOutcome(success=False, message="<kind>: <detail>"),
  where kind is the exception class name (ConfigurationError,
  RemoteIOError, SourceReadError, ...). An exception from outside the
  hierarchy is reported as "RemoteIOError: unexpected <TypeName>: <detail>".

The source stream is released exactly once whatever happens; a failure to
release it is logged and does not change the outcome.

The pipeline is synchronous and does no retries. Concurrent uploads to the
same target path are not coordinated and must be serialized by the caller.

Example:
    Programmatic usage:
        ```python
        from shareupload.core import upload_document
        from shareupload.request import UploadRequest
        from shareupload.source import HttpDocumentRepository

        request = UploadRequest(
            account_url="https://acct.file.core.windows.net",
            share_name="documents",
            directory_path="reports/2024",
            file_name="report.pdf",
            document_id=42,
            manual_token="sv=...&sig=...",
        )
        outcome = upload_document(
            request,
            repository=HttpDocumentRepository(
                "https://dms.example.com/api/documents/{document_id}/content"
            ),
        )
        print(outcome.success, outcome.message)
        ```

    Workflow-style invocation:
        ```python
        outputs = invoke({"accountUrl": ..., "documentId": 42, ...}, repository=repo)
        # {"isSuccess": False, "errorMessage": "ConfigurationError: ..."}
        ```
"""

from __future__ import annotations

from collections.abc import Mapping
import traceback
from typing import Any

from shareupload.auth import (
    build_endpoint,
    credential_sources,
    redact_endpoint,
    resolve_credential,
)
from shareupload.auth.vault import Vault
from shareupload.exceptions import ConfigurationError, RemoteIOError, ShareUploadError
from shareupload.logging import Logger, get_global_logger
from shareupload.request import UploadRequest
from shareupload.results import TransferOutcome, TransferReport
from shareupload.share.base import ShareConnector, remote_operation
from shareupload.share.walker import ensure_directory_path
from shareupload.source.base import DocumentRepository
from shareupload.transfer import CHUNK_SIZE, transfer_document

TOTAL_STEPS = 4


def _default_connector() -> ShareConnector:
    from shareupload.share.azure import connect_share

    return connect_share


def _run_pipeline(
    request: UploadRequest,
    repository: DocumentRepository,
    vault: Vault | None,
    connect: ShareConnector | None,
    chunk_size: int,
    verify_size: bool,
    logger: Logger,
) -> TransferReport:
    logger.step(1, TOTAL_STEPS, "Resolving credentials...")
    request.check_required()
    token = resolve_credential(credential_sources(request, vault), logger)

    logger.step(2, TOTAL_STEPS, "Connecting to file share...")
    endpoint = build_endpoint(request.account_url, request.share_name, token)
    logger.verbose("SHARE", f"Endpoint: {redact_endpoint(endpoint)}")
    if connect is None:
        connect = _default_connector()
    with remote_operation("connecting to share"):
        root = connect(endpoint)

    logger.step(3, TOTAL_STEPS, "Preparing directory path...")
    directory = ensure_directory_path(root, request.directory_path, logger)

    logger.step(4, TOTAL_STEPS, "Uploading document...")
    return transfer_document(
        directory,
        request.file_name,
        repository,
        request.document_id,
        chunk_size=chunk_size,
        verify_size=verify_size,
        logger=logger,
    )


def upload_document(
    request: UploadRequest,
    *,
    repository: DocumentRepository,
    vault: Vault | None = None,
    connect: ShareConnector | None = None,
    chunk_size: int = CHUNK_SIZE,
    verify_size: bool = False,
    logger: Logger | None = None,
) -> TransferOutcome:
    """Upload one document into the remote share and report the outcome.

    Args:
        request: What to upload and where.
        repository: Repository holding the source document.
        vault: Vault consulted when the request has no manual token.
        connect: Turns the share endpoint into the share root directory.
            Defaults to the Azure Files connector.
        chunk_size: Bytes per remote write. Default is 4 MiB.
        verify_size: If True, fail when the bytes streamed differ from the
            allocated size. Default is False.
        logger: Logger for progress output. Defaults to the global logger.

    Returns:
        TransferOutcome; never raises.
    """
    if logger is None:
        logger = get_global_logger()

    try:
        report = _run_pipeline(
            request, repository, vault, connect, chunk_size, verify_size, logger
        )
    except ShareUploadError as err:
        message = err.describe()
    except Exception as err:
        # Repository and vault calls are classified at their call sites, so
        # anything left is reported against the share.
        message = RemoteIOError(f"unexpected {type(err).__name__}: {err}").describe()
        logger.debug("UPLOAD", traceback.format_exc())
    else:
        logger.verbose(
            "UPLOAD",
            f"Uploaded {report.bytes_written} bytes in {report.chunk_count} chunk(s) "
            f"to {request.file_name}",
        )
        return TransferOutcome.ok()

    logger.error(
        "UPLOAD",
        f"Error uploading file into share. Document id is {request.document_id} "
        f"and file name is {request.file_name}: {message}",
    )
    return TransferOutcome.fail(message)


def invoke(
    inputs: Mapping[str, Any],
    *,
    repository: DocumentRepository,
    vault: Vault | None = None,
    connect: ShareConnector | None = None,
    **options: Any,
) -> dict[str, Any]:
    """Run an upload from workflow-style inputs and return workflow outputs.

    Args:
        inputs: Workflow inputs (accountUrl, shareName, directoryPath,
            fileName, documentId, manualToken, vaultKey, vaultField).
        repository: Repository holding the source document.
        vault: Vault consulted when no manual token is given.
        connect: Share connector. Defaults to the Azure Files connector.
        **options: Passed through to upload_document() (chunk_size,
            verify_size, logger).

    Returns:
        {"isSuccess": True} or {"isSuccess": False, "errorMessage": "..."}.
    """
    try:
        request = UploadRequest.from_inputs(inputs)
    except ConfigurationError as err:
        return TransferOutcome.fail(err.describe()).to_outputs()

    outcome = upload_document(
        request, repository=repository, vault=vault, connect=connect, **options
    )
    return outcome.to_outputs()
