from __future__ import annotations

import json
import os
import sys
from dataclasses import dataclass
from typing import Any

from dotenv import load_dotenv

from .errors import InputError


DCPROV_SERVICE_TOKEN = "DCPROV_SERVICE_TOKEN"
DCPROV_HTTP_TIMEOUT_SECONDS = "DCPROV_HTTP_TIMEOUT_SECONDS"
DCPROV_QUIET = "DCPROV_QUIET"

DEFAULT_HTTP_TIMEOUT_SECONDS = 30


def _eprint(msg: str) -> None:
    print(msg, file=sys.stderr)


@dataclass(frozen=True)
class GlobalOpts:
    token: str | None
    quiet: bool
    timeout_seconds: int = DEFAULT_HTTP_TIMEOUT_SECONDS

    def log(self, msg: str) -> None:
        if not self.quiet:
            _eprint(msg)


def _env_or_none(*names: str) -> str | None:
    for n in names:
        v = (os.environ.get(n) or "").strip()
        if v:
            return v
    return None


def _truthy(raw: str | None) -> bool:
    return str(raw or "").strip().lower() in {"1", "true", "yes", "on"}


def _bootstrap_env() -> None:
    # python-dotenv defaults: discover and load .env without overriding
    # already-exported process environment values.
    load_dotenv()


def _timeout_from_env() -> int:
    raw = _env_or_none(DCPROV_HTTP_TIMEOUT_SECONDS)
    if raw is None:
        return DEFAULT_HTTP_TIMEOUT_SECONDS
    try:
        val = int(raw)
    except ValueError as e:
        raise InputError(f"invalid {DCPROV_HTTP_TIMEOUT_SECONDS}: {raw!r} is not an integer") from e
    if val <= 0:
        raise InputError(f"invalid {DCPROV_HTTP_TIMEOUT_SECONDS}: must be positive")
    return val


def _global_opts(*, token: str | None, quiet: bool) -> GlobalOpts:
    return GlobalOpts(
        token=(token or "").strip() or _env_or_none(DCPROV_SERVICE_TOKEN),
        quiet=bool(quiet) or _truthy(os.environ.get(DCPROV_QUIET)),
        timeout_seconds=_timeout_from_env(),
    )


def _print_json(obj: Any, *, pretty: bool = True) -> None:
    if pretty:
        sys.stdout.write(json.dumps(obj, indent=2, sort_keys=True) + "\n")
    else:
        sys.stdout.write(json.dumps(obj, separators=(",", ":"), sort_keys=True) + "\n")


def _load_json_object(*, raw: str, label: str) -> dict[str, Any]:
    try:
        val = json.loads(raw)
    except Exception as e:
        raise InputError(f"invalid {label}: {e}") from e
    if not isinstance(val, dict):
        raise InputError(f"invalid {label}: expected JSON object")
    return val


def _parse_key_val(raw: str) -> tuple[str, str]:
    key, sep, value = raw.partition("=")
    key = key.strip()
    if not sep:
        raise ValueError(f"invalid KEY=value: no '=' found in {raw!r}")
    if not key:
        raise ValueError(f"invalid KEY=value: empty key in {raw!r}")
    return key, value
