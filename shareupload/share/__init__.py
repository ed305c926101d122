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

"""Remote file share access for shareupload.

Public API:

- RemoteDirectory, RemoteFile, WriteStream, ShareConnector: Protocols the
    pipeline depends on
- ensure_directory_path: Walk and create a directory path
- split_directory_path: Normalize a raw path into segments

The Azure Files adapter (shareupload.share.azure) is imported on demand so
the Azure SDK is only loaded when it is actually used.
"""

from .base import (
    RemoteDirectory,
    RemoteFile,
    ShareConnector,
    WriteStream,
    remote_operation,
)
from .walker import ensure_directory_path, split_directory_path

__all__ = [
    "RemoteDirectory",
    "RemoteFile",
    "ShareConnector",
    "WriteStream",
    "remote_operation",
    "ensure_directory_path",
    "split_directory_path",
]
