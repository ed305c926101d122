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

"""Source document access for shareupload.

Public API:

- DocumentRepository, SourceStream: Protocols the pipeline depends on
- DocumentVersion: Current-version metadata (declared size)
- open_source: Scoped acquisition of a document read stream
- HttpDocumentRepository: Repository reading documents over HTTP
"""

from .base import (
    DocumentRepository,
    DocumentVersion,
    SourceStream,
    open_source,
    release_source,
    source_operation,
)
from .http import HttpDocumentRepository, make_session

__all__ = [
    "DocumentRepository",
    "DocumentVersion",
    "SourceStream",
    "open_source",
    "release_source",
    "source_operation",
    "HttpDocumentRepository",
    "make_session",
]
