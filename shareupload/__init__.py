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

"""shareupload - chunked document uploads into remote file shares

A Python library and CLI that uploads a single document from a document
repository into an Azure-style network file share. It is designed to run as
one step of a larger workflow and always reports a definite outcome instead
of raising.

shareupload provides:

- Layered credential resolution (manual token, then vault)
- Directory path walking with creation of missing directories
- Idempotent overwrite of the target file
- Pre-allocated, chunked streaming in 4 MiB pieces
- Structured (success, message) outcomes
- YAML job files with organization defaults

Quick Start:
Validate a job file:

    $ shareupload validate jobs/monthly-report.yaml

Upload the document:

    $ shareupload upload jobs/monthly-report.yaml

For full CLI documentation:

    $ shareupload --help
"""

__version__ = "0.1.0"
__author__ = "Roger Cibrian"
__license__ = "Apache-2.0"
__description__ = "Chunked document uploads into remote file shares"

# Re-export commonly used functions for convenience
from shareupload.core import invoke, upload_document
from shareupload.exceptions import (
    ConfigurationError,
    RemoteIOError,
    ResourceReleaseError,
    ShareUploadError,
    SourceReadError,
)
from shareupload.request import UploadRequest
from shareupload.results import TransferOutcome, TransferReport, ValidationResult
from shareupload.transfer import CHUNK_SIZE

__all__ = [
    "__version__",
    "__author__",
    "__license__",
    "__description__",
    "CHUNK_SIZE",
    "invoke",
    "upload_document",
    "UploadRequest",
    "TransferOutcome",
    "TransferReport",
    "ValidationResult",
    "ShareUploadError",
    "ConfigurationError",
    "RemoteIOError",
    "SourceReadError",
    "ResourceReleaseError",
]
