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

"""Secret vault access for shareupload.

The pipeline only needs one thing from a vault: given a key, the set of named
secret fields stored under it. Vault is the protocol for that lookup;
EnvironmentVault is the bundled implementation, reading secrets from
environment variables (optionally loaded from a .env file).

Environment layout:

    <prefix><KEY>__<field>=<value>

where KEY is the vault key upper-cased with "-" replaced by "_". With the
default prefix, the field "sasToken" under the key "azure-creds" is read
from SHAREUPLOAD_VAULT_AZURE_CREDS__sasToken.
"""

from __future__ import annotations

from collections.abc import Mapping
import os
from typing import Protocol

from dotenv import load_dotenv

DEFAULT_ENV_PREFIX = "SHAREUPLOAD_VAULT_"


class Vault(Protocol):
    """Protocol for secret stores keyed by an opaque name."""

    def get_secrets(self, key: str) -> Mapping[str, str] | None:
        """Return the named secret fields stored under key, or None."""
        ...


class EnvironmentVault:
    """Vault backed by environment variables.

    Attributes:
        env_prefix: Prefix shared by all vault variables.
    """

    def __init__(
        self,
        env_prefix: str = DEFAULT_ENV_PREFIX,
        *,
        environ: Mapping[str, str] | None = None,
        load_env: bool = True,
    ) -> None:
        """
        :param env_prefix: Prefix used for vault environment variables.
        :param environ: Mapping to read instead of os.environ.
        :param load_env: Load a .env file into os.environ first.
        """
        if load_env:
            load_dotenv()
        self.env_prefix = env_prefix
        self._environ = os.environ if environ is None else environ

    def _key_prefix(self, key: str) -> str:
        return f"{self.env_prefix}{key.strip().upper().replace('-', '_')}__"

    def get_secrets(self, key: str) -> dict[str, str] | None:
        prefix = self._key_prefix(key)
        secrets = {
            name[len(prefix) :]: value
            for name, value in self._environ.items()
            if name.startswith(prefix) and len(name) > len(prefix)
        }
        return secrets or None
