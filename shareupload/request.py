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

"""Upload request model.

UploadRequest is the immutable input bundle for one upload. It replaces the
workflow engine's parameter binding with a plain typed struct, and can be
built from the workflow's key/value inputs with from_inputs().

Input names accepted by from_inputs():

- accountUrl (required)
- shareName (required)
- directoryPath (optional, "/" or "\\" separated)
- fileName (required)
- documentId (required, integer)
- manualToken (optional)
- vaultKey (optional)
- vaultField (optional)
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from shareupload.exceptions import ConfigurationError

__all__ = ["UploadRequest"]

# Workflow input name -> UploadRequest field
INPUT_NAMES: dict[str, str] = {
    "accountUrl": "account_url",
    "shareName": "share_name",
    "directoryPath": "directory_path",
    "fileName": "file_name",
    "documentId": "document_id",
    "manualToken": "manual_token",
    "vaultKey": "vault_key",
    "vaultField": "vault_field",
}


def _blank(value: str | None) -> bool:
    return value is None or not value.strip()


@dataclass(frozen=True)
class UploadRequest:
    """Everything needed to upload one document into a file share.

    Attributes:
        account_url: Base URL of the storage account
            (e.g., "https://acct.file.core.windows.net").
        share_name: Name of the file share.
        file_name: Name of the target file in the final directory.
        document_id: Identifier of the source document in the repository.
        directory_path: Directory under the share root. Empty or None
            targets the share root.
        manual_token: Access token supplied directly; wins over the vault.
        vault_key: Vault key whose secret set holds the token.
        vault_field: Field within the vault secret set.
    """

    account_url: str
    share_name: str
    file_name: str
    document_id: int | None
    directory_path: str | None = None
    manual_token: str | None = None
    vault_key: str | None = None
    vault_field: str | None = None

    def __repr__(self) -> str:
        # Keep the manual token out of tracebacks and log lines.
        token = "***" if self.manual_token else None
        return (
            f"UploadRequest(account_url={self.account_url!r}, "
            f"share_name={self.share_name!r}, "
            f"directory_path={self.directory_path!r}, "
            f"file_name={self.file_name!r}, document_id={self.document_id!r}, "
            f"manual_token={token!r}, vault_key={self.vault_key!r}, "
            f"vault_field={self.vault_field!r})"
        )

    def check_required(self) -> None:
        """Check required inputs before any remote call is made.

        Raises:
            ConfigurationError: If account URL, share name, or file name is
                blank, or the document id is missing.
        """
        if _blank(self.account_url):
            raise ConfigurationError("Account URL is null or missing.")
        if _blank(self.share_name):
            raise ConfigurationError("Share name is null or missing.")
        if _blank(self.file_name):
            raise ConfigurationError("File name is null or missing.")
        if self.document_id is None:
            raise ConfigurationError("Document id is null or missing.")

    @classmethod
    def from_inputs(cls, inputs: Mapping[str, Any]) -> UploadRequest:
        """Build a request from workflow-style inputs.

        Unknown keys are ignored. Missing keys become None and are reported
        by check_required() when the pipeline runs.

        Args:
            inputs: Mapping of workflow input names to values.

        Returns:
            The UploadRequest for those inputs.

        Raises:
            ConfigurationError: If documentId is present but not an integer.
        """
        values = {field: inputs.get(name) for name, field in INPUT_NAMES.items()}

        raw_id = values["document_id"]
        if isinstance(raw_id, bool):
            raise ConfigurationError(f"Document id must be an integer, got {raw_id!r}")
        if raw_id is not None and not isinstance(raw_id, int):
            try:
                values["document_id"] = int(str(raw_id).strip())
            except ValueError as err:
                raise ConfigurationError(
                    f"Document id must be an integer, got {raw_id!r}"
                ) from err

        return cls(**values)
