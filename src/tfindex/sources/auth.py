"""GitHub token lookup.

``GitHubConfig.token`` accepts either a literal token or a reference of
the form ``$SCHEME:key``:

- ``$ENV:GITHUB_TOKEN`` reads the process environment
- ``$STATIC:name`` reads values registered with ``set_static`` (tests)

Anything not starting with ``$`` is taken as the token itself.
"""

from __future__ import annotations

import os
from typing import Callable

from loguru import logger

from ..core.exceptions import TfIndexError


class CredentialNotFoundError(TfIndexError):
    """A required token reference resolved to nothing."""

    def __init__(self, key: str, provider: str):
        self.key = key
        self.provider = provider
        super().__init__(f"No value for '{key}' (source: {provider})")


class CredentialResolver:
    """Turns a token reference into the token value.

    Example:
        resolver = CredentialResolver()
        token = resolver.resolve("$ENV:GITHUB_TOKEN", required=False)
    """

    def __init__(self):
        self._static: dict[str, str] = {}
        self._lookups: dict[str, Callable[[str], str | None]] = {
            "ENV": os.environ.get,
            "STATIC": self._static.get,
        }

    def resolve(self, reference: str | None, required: bool = True) -> str | None:
        """Look up ``reference``.

        Raises:
            CredentialNotFoundError: When ``required`` and nothing resolves.
        """
        if not reference:
            if required:
                raise CredentialNotFoundError("(empty)", "none")
            return None

        if not reference.startswith("$"):
            return reference

        scheme, sep, key = reference[1:].partition(":")
        if not sep:
            logger.warning(f"Token reference has no scheme separator: reference={reference}")
            return reference

        scheme = scheme.upper()
        lookup = self._lookups.get(scheme)
        if lookup is None:
            logger.warning(f"Unknown token scheme: scheme={scheme}")
            value = None
        else:
            value = lookup(key)

        if value is None and required:
            raise CredentialNotFoundError(key, scheme)
        return value

    def set_static(self, key: str, value: str) -> None:
        self._static[key] = value


def bearer_headers(token: str | None, resolver: CredentialResolver | None = None) -> dict[str, str]:
    """Authorization header for ``token``; empty for anonymous access."""
    resolved = (resolver or CredentialResolver()).resolve(token, required=False)
    if not resolved:
        return {}
    return {"Authorization": f"Bearer {resolved}"}
