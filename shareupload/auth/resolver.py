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

"""Credential resolution for the remote file share.

The access token (a SAS token for Azure Files) is resolved from an ordered
list of credential sources. Each source returns a token or None, and the
first non-blank result wins:

1. ManualTokenSource: token supplied directly with the request
2. VaultTokenSource: token stored in a vault under (key, field)

A manual token short-circuits the list, so the vault is never read when one
is supplied. New credential sources only need a resolve() method and a place
in the list built by credential_sources().

The resolved token is spliced into the share endpoint by build_endpoint().
It is never logged; use redact_endpoint() before printing an endpoint.

Example:
    Resolving a token for a request:
        ```python
        from shareupload.auth import credential_sources, resolve_credential

        token = resolve_credential(credential_sources(request, vault))
        endpoint = build_endpoint(request.account_url, request.share_name, token)
        ```
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol

from shareupload.auth.vault import Vault
from shareupload.exceptions import ConfigurationError, ShareUploadError
from shareupload.logging import Logger, get_global_logger
from shareupload.request import UploadRequest

MISSING_CREDENTIAL = "No SAS Token provided via SCS or Manual Input."


class CredentialSource(Protocol):
    """Protocol for a single place an access token may come from."""

    name: str

    def resolve(self) -> str | None:
        """Return a token, or None if this source has nothing to offer.

        Raises:
            ConfigurationError: If the source is configured but broken.
        """
        ...


def _clean(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass(frozen=True)
class ManualTokenSource:
    """Token supplied directly with the request."""

    token: str | None
    name: str = "manual"

    def resolve(self) -> str | None:
        return _clean(self.token)


@dataclass(frozen=True)
class VaultTokenSource:
    """Token stored in a vault as field `field` of secret set `key`.

    Only consulted when both key and field are present.
    """

    vault: Vault | None
    key: str | None
    field: str | None
    name: str = "vault"

    def resolve(self) -> str | None:
        if self.vault is None or _clean(self.key) is None or _clean(self.field) is None:
            return None
        try:
            secrets = self.vault.get_secrets(self.key)
        except ShareUploadError:
            raise
        except Exception as err:
            raise ConfigurationError(
                f"Vault lookup failed for key {self.key!r}: {err}"
            ) from err
        if not secrets or self.field not in secrets:
            return None
        return _clean(secrets[self.field])


def credential_sources(
    request: UploadRequest, vault: Vault | None = None
) -> list[CredentialSource]:
    """Build the ordered credential sources for a request.

    Args:
        request: The upload request carrying manual token and vault names.
        vault: Vault to consult when no manual token is given.

    Returns:
        Sources in priority order (manual first, then vault).
    """
    return [
        ManualTokenSource(request.manual_token),
        VaultTokenSource(vault, request.vault_key, request.vault_field),
    ]


def resolve_credential(
    sources: Iterable[CredentialSource], logger: Logger | None = None
) -> str:
    """Return the first non-blank token offered by sources.

    Sources are consulted lazily in order; later sources are not touched
    once a token is found.

    Args:
        sources: Credential sources in priority order.
        logger: Logger for progress output. Defaults to the global logger.

    Returns:
        The access token.

    Raises:
        ConfigurationError: If no source yields a token, or a source fails.
    """
    if logger is None:
        logger = get_global_logger()

    for source in sources:
        token = source.resolve()
        if token:
            logger.verbose("AUTH", f"Access token resolved from {source.name} source")
            return token
        logger.debug("AUTH", f"No token from {source.name} source")

    raise ConfigurationError(MISSING_CREDENTIAL)


def build_endpoint(account_url: str, share_name: str, token: str) -> str:
    """Build the share endpoint URL carrying the access token.

    The format is "<account_url>/<share_name>?<token>" with no normalization
    of either part; the remote service expects exactly this shape.
    """
    return account_url + "/" + share_name + "?" + token


def redact_endpoint(endpoint: str) -> str:
    """Strip the token from an endpoint so it can be logged."""
    base, sep, _ = endpoint.partition("?")
    return f"{base}?***" if sep else base
