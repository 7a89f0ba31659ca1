import pytest
from keyring.errors import KeyringError, PasswordDeleteError, PasswordSetError

from provisioning_cli.credentials import SERVICE_NAME, KeyringCredentialStore
from provisioning_cli.errors import CredentialDeletionFailed, CredentialStorageFailed, InvalidAccount


class _Backend:
    def __init__(self, *, fail_get=False, fail_set=False, fail_delete=False):
        self.entries: dict[tuple[str, str], str] = {}
        self.fail_get = fail_get
        self.fail_set = fail_set
        self.fail_delete = fail_delete

    def get_password(self, service, username):
        if self.fail_get:
            raise KeyringError("locked")
        return self.entries.get((service, username))

    def set_password(self, service, username, password):
        if self.fail_set:
            raise PasswordSetError("read-only")
        self.entries[(service, username)] = password

    def delete_password(self, service, username):
        if self.fail_delete:
            raise PasswordDeleteError("read-only")
        del self.entries[(service, username)]


URL = "https://dracoon.example.com"


def test_service_name_is_program_name():
    assert SERVICE_NAME == "dcprov"
    assert KeyringCredentialStore(backend=_Backend()).service == "dcprov"


def test_set_then_get_round_trips_per_url():
    backend = _Backend()
    store = KeyringCredentialStore(backend=backend)
    store.set(URL, "tok-1")
    store.set("https://other.example.com", "tok-2")

    assert store.get(URL) == "tok-1"
    assert store.get("https://other.example.com") == "tok-2"
    assert backend.entries[("dcprov", URL)] == "tok-1"


def test_set_overwrites_existing_entry():
    store = KeyringCredentialStore(backend=_Backend())
    store.set(URL, "old")
    store.set(URL, "new")
    assert store.get(URL) == "new"


def test_get_missing_entry_is_invalid_account():
    with pytest.raises(InvalidAccount):
        KeyringCredentialStore(backend=_Backend()).get(URL)


def test_get_backend_failure_is_invalid_account():
    with pytest.raises(InvalidAccount):
        KeyringCredentialStore(backend=_Backend(fail_get=True)).get(URL)


def test_set_failure_is_storage_failure():
    with pytest.raises(CredentialStorageFailed, match="failed to store token"):
        KeyringCredentialStore(backend=_Backend(fail_set=True)).set(URL, "tok")


def test_delete_removes_entry():
    backend = _Backend()
    store = KeyringCredentialStore(backend=backend)
    store.set(URL, "tok")
    store.delete(URL)

    assert backend.entries == {}
    with pytest.raises(InvalidAccount):
        store.get(URL)


def test_delete_missing_entry_is_invalid_account():
    backend = _Backend()
    with pytest.raises(InvalidAccount):
        KeyringCredentialStore(backend=backend).delete(URL)


def test_delete_failure_is_deletion_failure():
    backend = _Backend(fail_delete=True)
    backend.entries[("dcprov", URL)] = "tok"
    with pytest.raises(CredentialDeletionFailed):
        KeyringCredentialStore(backend=backend).delete(URL)
