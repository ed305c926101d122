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

"""Exception hierarchy for shareupload.

This module defines the failure taxonomy used by the upload pipeline. The
class name of each exception is the failure kind reported back to the
invoking workflow, so the names are part of the public contract:

- ConfigurationError: No resolvable credential or missing required input
- RemoteIOError: Any failure talking to the remote file share
- SourceReadError: Failure reading from the document repository
- ResourceReleaseError: Failure closing the source stream after the upload

All exceptions inherit from ShareUploadError, allowing library users to catch
every pipeline error with a single except clause if needed.

Example:
    Reporting an error the way the pipeline does:
        ```python
        from shareupload.exceptions import ShareUploadError

        try:
            ensure_directory_path(root, "reports/2024")
        except ShareUploadError as e:
            print(e.describe())  # "RemoteIOError: ..."
        ```
"""

from __future__ import annotations

__all__ = [
    "ShareUploadError",
    "ConfigurationError",
    "RemoteIOError",
    "SourceReadError",
    "ResourceReleaseError",
]


class ShareUploadError(Exception):
    """Base exception for all shareupload errors.

    All shareupload-specific exceptions inherit from this class, allowing
    users to catch all pipeline errors with a single except clause.
    """

    @property
    def kind(self) -> str:
        """Taxonomy category reported to the workflow (the class name)."""
        return type(self).__name__

    def describe(self) -> str:
        """Return the short "<kind>: <detail>" form used in outcomes."""
        return f"{self.kind}: {self}"


class ConfigurationError(ShareUploadError):
    """Raised for invalid or incomplete upload configuration.

    This exception is raised before any remote call is made, when:

    - No access token can be resolved from the manual input or the vault
    - The vault lookup itself fails
    - A required input (account URL, share name, file name, document id)
        is missing or malformed
    - A job file cannot be found, parsed, or is not a mapping

    Example:
        Catching configuration errors:
            ```python
            from shareupload.exceptions import ConfigurationError

            try:
                token = resolve_credential(sources)
            except ConfigurationError as e:
                print(f"Config error: {e}")
            ```
    """

    pass


class RemoteIOError(ShareUploadError):
    """Raised for failures against the remote file share.

    This exception covers every remote operation in the pipeline:

    - Directory existence checks and creation during the path walk
    - Target file existence checks and deletion
    - Allocation of the remote file
    - Opening, writing to, or finalizing the remote write stream

    Directories created before the failure are left in place.
    """

    pass


class SourceReadError(ShareUploadError):
    """Raised when the source document cannot be read.

    This includes metadata lookups, opening the read stream, and reads that
    fail part way through a transfer. The remote file may be left allocated
    but incompletely written.
    """

    pass


class ResourceReleaseError(ShareUploadError):
    """Raised when the source stream fails to close.

    The pipeline logs this error and never lets it replace the outcome that
    was already computed for the upload.
    """

    pass
