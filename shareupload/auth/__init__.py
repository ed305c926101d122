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

"""Credential resolution and vault access for shareupload.

Public API:

- credential_sources: Build the ordered sources for a request
- resolve_credential: First non-blank token wins
- build_endpoint / redact_endpoint: Share endpoint construction and logging
- EnvironmentVault: Vault backed by environment variables and .env files
"""

from .resolver import (
    MISSING_CREDENTIAL,
    CredentialSource,
    ManualTokenSource,
    VaultTokenSource,
    build_endpoint,
    credential_sources,
    redact_endpoint,
    resolve_credential,
)
from .vault import EnvironmentVault, Vault

__all__ = [
    "MISSING_CREDENTIAL",
    "CredentialSource",
    "ManualTokenSource",
    "VaultTokenSource",
    "build_endpoint",
    "credential_sources",
    "redact_endpoint",
    "resolve_credential",
    "EnvironmentVault",
    "Vault",
]
