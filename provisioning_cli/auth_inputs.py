from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from .client import ProvisioningClient, validate_base_url
from .credentials import CredentialStore
from .errors import InvalidAccount, InvalidUrl
from .prompts import prompt_service_token


@dataclass(frozen=True)
class ResolvedToken:
    token: str
    source: str
    persist: bool


def normalize_url(url: str | None) -> str:
    """Force https and strip trailing slashes; bare hosts get https://."""
    raw = (url or "").strip()
    if not raw:
        raise InvalidUrl("missing endpoint url")
    lowered = raw.lower()
    if lowered.startswith("http://"):
        raw = "https://" + raw[len("http://"):]
    elif lowered.startswith("https://"):
        raw = "https://" + raw[len("https://"):]
    else:
        raw = f"https://{raw}"
    return validate_base_url(raw)


def resolve_service_token(
    *,
    url: str,
    token: str | None,
    store: CredentialStore,
    prompt: Callable[[], str] = prompt_service_token,
) -> ResolvedToken:
    """Pick the token for this invocation.

    An explicit token wins and is never stored. A stored token is reused as
    is. Otherwise the user is prompted and the answer is marked for storage.
    """
    explicit = (token or "").strip()
    if explicit:
        return ResolvedToken(token=explicit, source="explicit", persist=False)
    try:
        return ResolvedToken(token=store.get(url), source="stored", persist=False)
    except InvalidAccount:
        pass
    return ResolvedToken(token=prompt(), source="prompt", persist=True)


def init_provisioning(
    url: str,
    token: str | None = None,
    *,
    store: CredentialStore,
    prompt: Callable[[], str] = prompt_service_token,
    client_factory: Callable[..., ProvisioningClient] = ProvisioningClient,
    timeout_seconds: int | None = None,
    log: Callable[[str], None] | None = None,
) -> ProvisioningClient:
    emit = log or (lambda _msg: None)
    base_url = normalize_url(url)
    resolved = resolve_service_token(url=base_url, token=token, store=store, prompt=prompt)
    emit(f"using {resolved.source} service token for {base_url}")
    if resolved.persist:
        store.set(base_url, resolved.token)
        emit(f"stored service token for {base_url}")

    kwargs: dict[str, object] = {"log": log}
    if timeout_seconds is not None:
        kwargs["timeout_seconds"] = timeout_seconds
    return client_factory(base_url, resolved.token, **kwargs)
