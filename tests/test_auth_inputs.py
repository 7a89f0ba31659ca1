import pytest

from provisioning_cli.auth_inputs import init_provisioning, normalize_url, resolve_service_token
from provisioning_cli.errors import CredentialStorageFailed, InputError, InvalidUrl, Unauthorized

from fakes import MemoryCredentialStore

URL = "https://dracoon.example.com"


class _Prompt:
    def __init__(self, answer="prompted-token"):
        self.answer = answer
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return self.answer


def _factory(created: list):
    def inner(base_url, token, **kwargs):
        created.append((base_url, token, kwargs))
        return object()

    return inner


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("dracoon.example.com", URL),
        ("http://dracoon.example.com", URL),
        ("https://dracoon.example.com/", URL),
        ("  https://dracoon.example.com  ", URL),
        ("dracoon.example.com:8443/base", "https://dracoon.example.com:8443/base"),
        ("HTTPS://dracoon.example.com", URL),
        ("Http://dracoon.example.com/", URL),
    ],
)
def test_normalize_url_forces_https(raw, expected):
    assert normalize_url(raw) == expected


@pytest.mark.parametrize("raw", ["", "   ", None, "https://", "bad host.example.com"])
def test_normalize_url_rejects_invalid(raw):
    with pytest.raises(InvalidUrl):
        normalize_url(raw)


def test_resolve_prefers_explicit_token_and_never_persists():
    store = MemoryCredentialStore({URL: "stored"})
    prompt = _Prompt()
    resolved = resolve_service_token(url=URL, token="explicit", store=store, prompt=prompt)

    assert (resolved.token, resolved.source, resolved.persist) == ("explicit", "explicit", False)
    assert prompt.calls == 0


def test_resolve_uses_stored_token_without_prompt():
    prompt = _Prompt()
    resolved = resolve_service_token(url=URL, token=None, store=MemoryCredentialStore({URL: "stored"}), prompt=prompt)

    assert (resolved.token, resolved.source, resolved.persist) == ("stored", "stored", False)
    assert prompt.calls == 0


def test_resolve_prompts_when_nothing_stored():
    prompt = _Prompt()
    resolved = resolve_service_token(url=URL, token="  ", store=MemoryCredentialStore(), prompt=prompt)

    assert (resolved.token, resolved.source, resolved.persist) == ("prompted-token", "prompt", True)
    assert prompt.calls == 1


def test_init_provisioning_stores_prompted_token_then_reuses_it():
    store = MemoryCredentialStore()
    prompt = _Prompt()
    created: list = []

    init_provisioning("dracoon.example.com", store=store, prompt=prompt, client_factory=_factory(created))
    init_provisioning("http://dracoon.example.com/", store=store, prompt=prompt, client_factory=_factory(created))

    assert prompt.calls == 1
    assert store.entries == {URL: "prompted-token"}
    assert [(c[0], c[1]) for c in created] == [(URL, "prompted-token"), (URL, "prompted-token")]


def test_init_provisioning_explicit_token_is_not_stored():
    store = MemoryCredentialStore()
    created: list = []
    init_provisioning(URL, "explicit", store=store, prompt=_Prompt(), client_factory=_factory(created))

    assert store.set_calls == []
    assert created[0][1] == "explicit"


def test_init_provisioning_storage_failure_is_fatal():
    store = MemoryCredentialStore(fail_set=True)
    created: list = []
    with pytest.raises(CredentialStorageFailed):
        init_provisioning(URL, store=store, prompt=_Prompt(), client_factory=_factory(created))
    assert created == []


def test_init_provisioning_forwards_timeout_and_log():
    created: list = []
    logs: list[str] = []
    init_provisioning(
        URL,
        "explicit",
        store=MemoryCredentialStore(),
        client_factory=_factory(created),
        timeout_seconds=7,
        log=logs.append,
    )

    assert created[0][2] == {"log": logs.append, "timeout_seconds": 7}
    assert logs == [f"using explicit service token for {URL}"]


def test_init_provisioning_propagates_client_errors():
    def failing_factory(base_url, token, **kwargs):
        raise Unauthorized(None)

    with pytest.raises(Unauthorized):
        init_provisioning(URL, "bad", store=MemoryCredentialStore(), client_factory=failing_factory)


def test_init_provisioning_prompt_failure_propagates():
    def prompt():
        raise InputError("empty service token")

    with pytest.raises(InputError):
        init_provisioning(URL, store=MemoryCredentialStore(), prompt=prompt)


def test_init_provisioning_builds_real_client(fake_api):
    client = init_provisioning("dracoon.example.com", "explicit", store=MemoryCredentialStore())

    assert client.base_url == URL
    assert fake_api.calls[0].url == f"{URL}/api/v4/provisioning/customers?limit=1"
