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

"""Public API return types for shareupload.

This module defines dataclasses for return values from public API functions:
the outcome of an upload, the transfer statistics behind it, and the result
of validating a job file.

All dataclasses are frozen (immutable) to prevent accidental mutation of
return values.

Example:
    Using result types:
        ```python
        from shareupload.core import upload_document
        from shareupload.results import TransferOutcome

        outcome: TransferOutcome = upload_document(request, repository=repo)
        if not outcome.success:
            print(outcome.message)  # "RemoteIOError: ..."
        ```

Note:
    Only public API return types belong in this module. Domain types (like
    UploadRequest and DocumentVersion) remain co-located with their related
    logic.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class TransferOutcome:
    """Result reported back to the invoking workflow.

    Exactly two states are valid: success with no message, or failure with
    a "<kind>: <detail>" message. Use ok() and fail() to construct.

    Attributes:
        success: True if the document was fully uploaded.
        message: Failure description, None on success.
    """

    success: bool
    message: str | None = None

    def __post_init__(self) -> None:
        if self.success and self.message is not None:
            raise ValueError("successful outcome cannot carry a message")
        if not self.success and not self.message:
            raise ValueError("failed outcome requires a message")

    @classmethod
    def ok(cls) -> TransferOutcome:
        return cls(success=True, message=None)

    @classmethod
    def fail(cls, message: str) -> TransferOutcome:
        return cls(success=False, message=message)

    def to_outputs(self) -> dict[str, Any]:
        """Map the outcome onto the workflow output names.

        Returns:
            A dict with "isSuccess", plus "errorMessage" only on failure.
        """
        outputs: dict[str, Any] = {"isSuccess": self.success}
        if not self.success:
            outputs["errorMessage"] = self.message
        return outputs


@dataclass(frozen=True)
class TransferReport:
    """Statistics from a completed chunked transfer.

    Attributes:
        file_name: Name of the remote file that was written.
        allocated_size: Size declared to the remote share before writing.
        bytes_written: Total bytes streamed into the remote file.
        chunk_count: Number of write calls issued.
    """

    file_name: str
    allocated_size: int
    bytes_written: int
    chunk_count: int


@dataclass(frozen=True)
class ValidationResult:
    """Result from validating a job file.

    Attributes:
        status: Validation status ("valid" or "invalid").
        errors: List of error messages (empty if valid).
        warnings: List of warning messages.
        job_path: String path to the validated job file.
    """

    status: str
    errors: list[str]
    warnings: list[str]
    job_path: str
