"""Service tokens stored in the OS secret store, one entry per endpoint URL."""

from __future__ import annotations

from typing import Any, Protocol

import keyring
from keyring.errors import KeyringError

from . import PROG_NAME
from .errors import CredentialDeletionFailed, CredentialStorageFailed, InvalidAccount

SERVICE_NAME = PROG_NAME


class CredentialStore(Protocol):
    service: str

    def get(self, url: str) -> str: ...

    def set(self, url: str, token: str) -> None: ...

    def delete(self, url: str) -> None: ...


class KeyringCredentialStore:
    """Credential store backed by ``keyring`` entries keyed by (service, url).

    ``backend`` is anything exposing keyring's get/set/delete_password
    functions; it defaults to the keyring module itself.
    """

    def __init__(self, service: str = SERVICE_NAME, backend: Any = keyring):
        self.service = service
        self._backend = backend

    def get(self, url: str) -> str:
        try:
            secret = self._backend.get_password(self.service, url)
        except KeyringError as e:
            raise InvalidAccount(f"no stored token for {url} ({e})") from e
        if not secret:
            raise InvalidAccount(f"no stored token for {url}")
        return secret

    def set(self, url: str, token: str) -> None:
        try:
            self._backend.set_password(self.service, url, token)
        except KeyringError as e:
            raise CredentialStorageFailed(f"failed to store token for {url}: {e}") from e

    def delete(self, url: str) -> None:
        self.get(url)
        try:
            self._backend.delete_password(self.service, url)
        except KeyringError as e:
            raise CredentialDeletionFailed(f"failed to delete token for {url}: {e}") from e
