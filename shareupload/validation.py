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

"""Job file validation module.

This module checks a job file without making network calls or touching the
remote share. Useful for quick feedback while writing jobs and in CI.

Validation Checks:

- Job file exists and YAML syntax is valid (defaults merged in)
- Known sections are mappings
- Required fields present (share.account_url, share.share_name,
  upload.file_name, upload.document_id, repository.url_template)
- upload.document_id is an integer
- repository.url_template contains {document_id}
- repository.timeout is a positive integer and repository.headers a mapping
- upload.verify_size is a real boolean
- A credential is configured: a manual token or a complete vault pair

Warnings:

- Unknown top-level sections
- A manual token stored in the job file
- An account URL that is not https

Example:
    Validate a job and handle results:
        ```python
        from pathlib import Path
        from shareupload.validation import validate_job

        result = validate_job(Path("jobs/monthly-report.yaml"))
        if result.status == "valid":
            print("Job is valid")
        else:
            for error in result.errors:
                print(f"Error: {error}")
        ```

"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from shareupload.config.loader import (
    coerce_headers,
    coerce_timeout,
    coerce_verify_size,
    load_job_config,
)
from shareupload.exceptions import ConfigurationError
from shareupload.results import ValidationResult

__all__ = ["validate_job"]

KNOWN_SECTIONS = ("share", "upload", "credentials", "repository")

REQUIRED_FIELDS = (
    ("share", "account_url"),
    ("share", "share_name"),
    ("upload", "file_name"),
    ("upload", "document_id"),
    ("repository", "url_template"),
)


def _present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def validate_job(job_path: Path) -> ValidationResult:
    """Validate a job file without uploading anything.

    Does NOT:

    - Resolve vault secrets
    - Contact the document repository
    - Contact the remote share

    Args:
        job_path: Path to the job YAML file to validate.

    Returns:
        ValidationResult with status "valid" or "invalid", error and warning
            messages, and the job path.
    """
    errors: list[str] = []
    warnings: list[str] = []

    try:
        cfg = load_job_config(job_path)
    except ConfigurationError as err:
        return ValidationResult(
            status="invalid", errors=[str(err)], warnings=[], job_path=str(job_path)
        )

    for name in cfg:
        if name not in KNOWN_SECTIONS:
            warnings.append(f"Unknown section ignored: {name!r}")

    sections: dict[str, dict[str, Any]] = {}
    for name in KNOWN_SECTIONS:
        value = cfg.get(name) or {}
        if not isinstance(value, dict):
            errors.append(f"Section '{name}' must be a mapping")
            value = {}
        sections[name] = value

    for section, field in REQUIRED_FIELDS:
        if not _present(sections[section].get(field)):
            errors.append(f"Missing required field: {section}.{field}")

    document_id = sections["upload"].get("document_id")
    if _present(document_id):
        if isinstance(document_id, bool) or not isinstance(document_id, int):
            try:
                int(str(document_id).strip())
            except ValueError:
                errors.append(
                    f"upload.document_id must be an integer, got {document_id!r}"
                )

    url_template = sections["repository"].get("url_template")
    if _present(url_template) and "{document_id}" not in str(url_template):
        errors.append("repository.url_template must contain '{document_id}'")

    for check, value in (
        (coerce_timeout, sections["repository"].get("timeout")),
        (coerce_headers, sections["repository"].get("headers")),
        (coerce_verify_size, sections["upload"].get("verify_size")),
    ):
        try:
            check(value)
        except ConfigurationError as err:
            errors.append(str(err))

    credentials = sections["credentials"]
    has_manual = _present(credentials.get("manual_token"))
    has_vault = _present(credentials.get("vault_key")) and _present(
        credentials.get("vault_field")
    )
    if not has_manual and not has_vault:
        errors.append(
            "No credential configured: set credentials.manual_token or both "
            "credentials.vault_key and credentials.vault_field"
        )
    if has_manual:
        warnings.append("credentials.manual_token is stored in the job file")

    account_url = sections["share"].get("account_url")
    if _present(account_url) and not str(account_url).lower().startswith("https://"):
        warnings.append(f"share.account_url is not https: {account_url}")

    return ValidationResult(
        status="invalid" if errors else "valid",
        errors=errors,
        warnings=warnings,
        job_path=str(job_path),
    )
