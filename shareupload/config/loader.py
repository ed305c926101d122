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

"""Job configuration loader for shareupload.

A job file describes one upload in YAML. It is merged on top of optional
organization defaults so shared settings (account URL, repository endpoint,
vault names) live in one place.

Layers (last wins):

1. **Organization defaults** (defaults/org.yaml)
   - Found by walking upward from the job file's directory
   - Optional

2. **Job file** (e.g., jobs/monthly-report.yaml)
   - Always required

3. **Overrides** (mapping passed by the caller, e.g., CLI flags)
   - Optional

Merge Behavior
--------------
  - **Dicts**: Recursively merged (keys from overlay override base)
  - **Lists**: Completely replaced (NOT appended/extended)
  - **Scalars**: Overwritten (strings, numbers, booleans)

Schema
------
    share:
      account_url: https://acct.file.core.windows.net
      share_name: documents
      directory_path: reports/2024
    upload:
      file_name: report.pdf
      document_id: 42
      verify_size: false
    credentials:
      manual_token: null
      vault_key: azure-creds
      vault_field: sasToken
      env_prefix: SHAREUPLOAD_VAULT_
    repository:
      url_template: https://dms.example.com/api/documents/{document_id}/content
      timeout: 60
      headers: {}

Functions
---------
load_job_config : Load and merge configuration for a job file.
request_from_config : Build the UploadRequest for a merged config.
repository_from_config : Build the HTTP document repository.
vault_from_config : Build the environment vault.
verify_size_from_config : Read the upload.verify_size flag.
coerce_timeout, coerce_headers, coerce_verify_size : Type checks shared with
    validation.

Error Handling
--------------
Missing files, YAML parse errors, empty files, non-mapping documents and
mistyped fields (timeout, headers, verify_size) raise ConfigurationError, chained with "from err" where there is a cause.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from shareupload.auth.vault import DEFAULT_ENV_PREFIX, EnvironmentVault
from shareupload.exceptions import ConfigurationError
from shareupload.logging import Logger, get_global_logger
from shareupload.request import UploadRequest
from shareupload.source.http import HttpDocumentRepository

# -------------------------------
# YAML helpers
# -------------------------------


def _load_yaml_file(p: Path) -> dict[str, Any]:
    """
    Load a YAML file that must contain a mapping.

    Raises:
      ConfigurationError - when the file is missing, unparsable, empty,
                           or its top level is not a mapping
    """
    if not p.exists():
        raise ConfigurationError(f"file not found: {p}")
    try:
        with p.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as err:
        raise ConfigurationError(f"invalid YAML in {p}: {err}") from err
    if data is None:
        raise ConfigurationError(f"YAML file is empty: {p}")
    if not isinstance(data, dict):
        raise ConfigurationError(f"top-level YAML must be a mapping (dict): {p}")
    return data


# -------------------------------
# Merge logic
# -------------------------------


def _deep_merge_dicts(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """
    Deep-merge two dicts with "overlay wins".

    Rules:
      - dict + dict -> deep merge
      - list + list -> overlay REPLACES base (not concatenated)
      - everything else -> overlay overwrites base

    This function does not mutate inputs; returns a new dict.
    """
    result: dict[str, Any] = dict(base)
    for k, v in overlay.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge_dicts(result[k], v)
        else:
            result[k] = v
    return result


def _find_defaults_file(start_dir: Path) -> Path | None:
    """
    Walk upward from 'start_dir' looking for 'defaults/org.yaml'.
    Returns the path to org.yaml or None if not found.
    """
    for parent in [start_dir] + list(start_dir.parents):
        candidate = parent / "defaults" / "org.yaml"
        if candidate.exists():
            return candidate
    return None


def _section(cfg: dict[str, Any], name: str) -> dict[str, Any]:
    value = cfg.get(name) or {}
    if not isinstance(value, dict):
        raise ConfigurationError(f"'{name}' must be a mapping")
    return value


# -------------------------------
# Public API
# -------------------------------


def load_job_config(
    job_path: Path,
    *,
    overrides: dict[str, Any] | None = None,
    logger: Logger | None = None,
) -> dict[str, Any]:
    """
    Load and merge the effective configuration for a job file.

    Steps
      1) Read job YAML.
      2) Find defaults/org.yaml by scanning upwards from the job directory.
      3) Merge: org defaults -> job -> overrides (dicts deep-merge).

    Overrides whose leaf value is None are dropped before merging, so unset
    CLI flags never clear configured values.

    Returns
      The merged configuration dict.

    Raises
      ConfigurationError on missing or invalid YAML files.
    """
    if logger is None:
        logger = get_global_logger()

    job_path = Path(job_path).resolve()
    logger.verbose("CONFIG", f"Loading job: {job_path}")
    job = _load_yaml_file(job_path)

    merged: dict[str, Any] = {}
    defaults_path = _find_defaults_file(job_path.parent)
    if defaults_path is not None:
        logger.verbose("CONFIG", f"Loading defaults: {defaults_path}")
        merged = _deep_merge_dicts(merged, _load_yaml_file(defaults_path))

    merged = _deep_merge_dicts(merged, job)

    if overrides:
        merged = _deep_merge_dicts(merged, _drop_unset(overrides))

    logger.debug("CONFIG", f"Sections: {', '.join(merged.keys())}")
    return merged


def _drop_unset(overrides: dict[str, Any]) -> dict[str, Any]:
    cleaned: dict[str, Any] = {}
    for k, v in overrides.items():
        if isinstance(v, dict):
            nested = _drop_unset(v)
            if nested:
                cleaned[k] = nested
        elif v is not None:
            cleaned[k] = v
    return cleaned


def coerce_timeout(raw: Any, default: int = 60) -> int:
    """
    Validate repository.timeout and return it as whole seconds.

    None means the default. Booleans, non-integers and values below 1 are
    rejected.

    Raises
      ConfigurationError when the value is not a positive integer.
    """
    if raw is None:
        return default
    if isinstance(raw, bool):
        raise ConfigurationError(f"repository.timeout must be an integer, got {raw!r}")
    try:
        timeout = int(str(raw).strip())
    except ValueError as err:
        raise ConfigurationError(
            f"repository.timeout must be an integer, got {raw!r}"
        ) from err
    if timeout < 1:
        raise ConfigurationError(f"repository.timeout must be positive, got {timeout}")
    return timeout


def coerce_headers(raw: Any) -> dict[str, str] | None:
    """
    Validate repository.headers and return a str -> str mapping.

    Raises
      ConfigurationError when the value is set but is not a mapping.
    """
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise ConfigurationError(
            f"repository.headers must be a mapping, got {type(raw).__name__}"
        )
    return {str(k): str(v) for k, v in raw.items()} or None


def coerce_verify_size(raw: Any) -> bool:
    """
    Validate upload.verify_size. Only real YAML booleans are accepted, so a
    quoted "false" is an error rather than a truthy string.

    Raises
      ConfigurationError when the value is set but is not a boolean.
    """
    if raw is None:
        return False
    if not isinstance(raw, bool):
        raise ConfigurationError(f"upload.verify_size must be true or false, got {raw!r}")
    return raw


def request_from_config(cfg: dict[str, Any]) -> UploadRequest:
    """Build the UploadRequest described by a merged job config.

    Raises:
        ConfigurationError: If a section is not a mapping or the document
            id is not an integer.
    """
    share = _section(cfg, "share")
    upload = _section(cfg, "upload")
    credentials = _section(cfg, "credentials")
    return UploadRequest.from_inputs(
        {
            "accountUrl": share.get("account_url"),
            "shareName": share.get("share_name"),
            "directoryPath": share.get("directory_path"),
            "fileName": upload.get("file_name"),
            "documentId": upload.get("document_id"),
            "manualToken": credentials.get("manual_token"),
            "vaultKey": credentials.get("vault_key"),
            "vaultField": credentials.get("vault_field"),
        }
    )


def repository_from_config(
    cfg: dict[str, Any], logger: Logger | None = None
) -> HttpDocumentRepository:
    """Build the HTTP document repository described by a merged job config.

    Raises:
        ConfigurationError: If repository.url_template is missing or lacks
            the {document_id} placeholder, repository.timeout is not a
            positive integer, or repository.headers is not a mapping.
    """
    repository = _section(cfg, "repository")
    url_template = repository.get("url_template")
    if not url_template:
        raise ConfigurationError("Missing required field: repository.url_template")
    return HttpDocumentRepository(
        str(url_template),
        headers=coerce_headers(repository.get("headers")),
        timeout=coerce_timeout(repository.get("timeout")),
        logger=logger,
    )


def vault_from_config(cfg: dict[str, Any]) -> EnvironmentVault:
    """Build the environment vault described by a merged job config."""
    credentials = _section(cfg, "credentials")
    return EnvironmentVault(credentials.get("env_prefix") or DEFAULT_ENV_PREFIX)


def verify_size_from_config(cfg: dict[str, Any]) -> bool:
    """Return upload.verify_size from a merged job config (default False)."""
    return coerce_verify_size(_section(cfg, "upload").get("verify_size"))
