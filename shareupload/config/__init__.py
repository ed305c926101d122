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

"""Job configuration loading for shareupload.

This module loads YAML job files layered on top of organization defaults
(defaults/org.yaml, found by walking upward from the job file) and turns the
merged result into the objects the upload pipeline needs.

Public API:

- load_job_config: Load and merge configuration for a job file
- request_from_config: Build the UploadRequest
- repository_from_config: Build the HTTP document repository
- vault_from_config: Build the environment vault
- verify_size_from_config: Read the upload.verify_size flag

Example:
    Basic usage:

        from pathlib import Path
        from shareupload.config import load_job_config, request_from_config

        cfg = load_job_config(Path("jobs/monthly-report.yaml"))
        request = request_from_config(cfg)
        print(request.file_name)  # "report.pdf"

"""

from .loader import (
    load_job_config,
    repository_from_config,
    request_from_config,
    vault_from_config,
    verify_size_from_config,
)

__all__ = [
    "load_job_config",
    "repository_from_config",
    "request_from_config",
    "vault_from_config",
    "verify_size_from_config",
]
