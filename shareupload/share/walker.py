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

"""Directory path walking on the remote share.

ensure_directory_path() turns a raw directory path into a directory handle,
creating each missing segment on the way down. Paths may use either "/" or
"\\" as separator; empty segments from leading, trailing, or repeated
separators are ignored, so "a/b", "a\\b", "/a/b/" and "a//b" all reach the
same directory.

Segments are processed strictly left to right. If a remote call fails the
walk stops with RemoteIOError, and directories created for earlier segments
are left in place.
"""

from __future__ import annotations

from shareupload.logging import Logger, get_global_logger
from shareupload.share.base import RemoteDirectory, remote_operation


def split_directory_path(raw_path: str | None) -> list[str]:
    """Split a raw directory path into its non-empty segments.

    Args:
        raw_path: Path using "/" or "\\" separators, or None.

    Returns:
        Ordered list of segments; empty for None or blank paths.

    Example:
        ```python
        split_directory_path("\\\\reports//2024/")  # ["reports", "2024"]
        ```
    """
    if raw_path is None or not raw_path.strip():
        return []
    normalized = raw_path.replace("\\", "/").strip()
    return [segment for segment in normalized.split("/") if segment]


def ensure_directory_path(
    root: RemoteDirectory,
    raw_path: str | None,
    logger: Logger | None = None,
) -> RemoteDirectory:
    """Walk from root down raw_path, creating missing directories.

    A None or blank path returns root itself without any remote call.

    Args:
        root: Handle for the share root.
        raw_path: Directory path relative to the share root.
        logger: Logger for progress output. Defaults to the global logger.

    Returns:
        Handle for the fully realized directory.

    Raises:
        RemoteIOError: If an existence check or creation fails.
    """
    if logger is None:
        logger = get_global_logger()

    current = root
    for segment in split_directory_path(raw_path):
        with remote_operation(f"opening directory {segment!r}"):
            current = current.get_subdirectory(segment)
        with remote_operation(f"checking directory {current.path!r}"):
            present = current.exists()
        if present:
            logger.debug("SHARE", f"Directory exists: {current.path}")
            continue
        logger.verbose("SHARE", f"Creating directory: {current.path}")
        with remote_operation(f"creating directory {current.path!r}"):
            current.create()
    return current
