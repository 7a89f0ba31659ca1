import pytest

from fakes import FakeApi, MemoryCredentialStore


@pytest.fixture
def fake_api(monkeypatch):
    api = FakeApi()
    monkeypatch.setattr("provisioning_cli.client._http_request", api)
    return api


@pytest.fixture
def memory_store(monkeypatch):
    store = MemoryCredentialStore()
    monkeypatch.setattr("provisioning_cli.commands._credential_store", lambda: store)
    return store


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("DCPROV_SERVICE_TOKEN", "DCPROV_HTTP_TIMEOUT_SECONDS", "DCPROV_QUIET"):
        monkeypatch.delenv(name, raising=False)
