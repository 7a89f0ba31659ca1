"""HTTP client for the DRACOON provisioning API.

Every call sends one request and either returns a decoded record or raises
an error from ``errors``. Nothing is retried and nothing is cached.

Usage:
    client = ProvisioningClient("https://dracoon.example.com", token)
    customers = client.get_customers(limit=10)
"""

from __future__ import annotations

import json
from http.client import HTTPException
from typing import Any, Callable
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode, urlparse
from urllib.request import Request, urlopen

from . import PROG_NAME, __version__
from .cli_shared import DEFAULT_HTTP_TIMEOUT_SECONDS
from .errors import InvalidUrl, TransportFailure, Unauthorized, error_for_status
from .models import (
    AttributeList,
    Customer,
    CustomerAttributes,
    CustomerList,
    NewCustomerRequest,
    NewCustomerResponse,
    Range,
    UpdateCustomerRequest,
    UpdateCustomerResponse,
    UserList,
)

SERVICE_TOKEN_HEADER = "X-Sds-Service-Token"
USER_AGENT = f"{PROG_NAME}/{__version__}"

PROVISIONING_API = "api/v4/provisioning/"
CUSTOMERS = "customers"
ATTRIBUTES = "customerAttributes"
USERS = "users"

DEFAULT_LIMIT = 500
DEFAULT_OFFSET = 0
PAGE_SIZE = 500


def _http_request(
    *,
    method: str,
    url: str,
    headers: dict[str, str],
    body: bytes | None = None,
    timeout_seconds: int = DEFAULT_HTTP_TIMEOUT_SECONDS,
) -> tuple[int, dict[str, str], bytes]:
    req = Request(url, data=body, method=str(method).upper())
    for k, v in headers.items():
        req.add_header(k, v)
    try:
        with urlopen(req, timeout=timeout_seconds) as resp:
            status = getattr(resp, "status", 200)
            hdrs = {k.lower(): v for k, v in dict(resp.headers).items()}
            data = resp.read()
            return int(status), hdrs, data
    except HTTPError as e:
        hdrs = {k.lower(): v for k, v in dict(e.headers or {}).items()}
        data = e.read() if hasattr(e, "read") else b""
        return int(getattr(e, "code", 0) or 0), hdrs, data
    except URLError as e:
        raise TransportFailure(f"http request failed: {method} {url}: {e.reason}") from e
    except (OSError, HTTPException) as e:
        raise TransportFailure(f"http request failed: {method} {url}: {e}") from e


def validate_base_url(url: str) -> str:
    raw = str(url or "").strip()
    try:
        parsed = urlparse(raw)
        host = parsed.hostname
    except ValueError as e:
        raise InvalidUrl(f"invalid url {raw!r}: {e}") from e
    if parsed.scheme not in {"http", "https"} or not host:
        raise InvalidUrl(f"invalid url {raw!r}: expected http(s)://host")
    if any(c.isspace() for c in raw):
        raise InvalidUrl(f"invalid url {raw!r}: contains whitespace")
    return raw.rstrip("/")


def _list_query(
    *,
    limit: int | None,
    offset: int | None,
    filter: str | None,
    sort: str | None,
) -> dict[str, Any]:
    query: dict[str, Any] = {
        "limit": DEFAULT_LIMIT if limit is None else int(limit),
        "offset": DEFAULT_OFFSET if offset is None else int(offset),
    }
    if filter:
        query["filter"] = filter
    if sort:
        query["sort"] = sort
    return query


def _bool_param(val: bool) -> str:
    return "true" if val else "false"


def _decode(raw: bytes, record: Any, *, label: str) -> Any:
    text = raw.decode("utf-8", errors="replace")
    try:
        return record.from_dict(json.loads(text))
    except ValueError as e:
        raise TransportFailure(f"invalid {label} response: {e}") from e


class ProvisioningClient:
    """Provisioning API client bound to one endpoint and one service token.

    Construction checks the token with a one-item customer listing and
    raises Unauthorized (without a body) unless the server answers 200.
    """

    def __init__(
        self,
        base_url: str,
        service_token: str,
        *,
        timeout_seconds: int = DEFAULT_HTTP_TIMEOUT_SECONDS,
        log: Callable[[str], None] | None = None,
    ):
        self.base_url = validate_base_url(base_url)
        self._service_token = service_token
        self.timeout_seconds = timeout_seconds
        self._log = log or (lambda _msg: None)
        self._check_token_validity()

    def _check_token_validity(self) -> None:
        status, _raw = self._send("GET", CUSTOMERS, query={"limit": 1})
        if status != 200:
            self._log(f"token check failed: status={status}")
            raise Unauthorized(None)

    def _url(self, path: str, query: dict[str, Any] | None = None) -> str:
        url = f"{self.base_url}/{PROVISIONING_API}{path}"
        if query:
            url += f"?{urlencode(query)}"
        return url

    def _send(
        self,
        method: str,
        path: str,
        *,
        query: dict[str, Any] | None = None,
        body_obj: dict[str, Any] | None = None,
    ) -> tuple[int, bytes]:
        body = None
        if body_obj is not None:
            body = json.dumps(body_obj, separators=(",", ":")).encode("utf-8")
        headers = {
            SERVICE_TOKEN_HEADER: self._service_token,
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
        }
        status, _hdrs, data = _http_request(
            method=method,
            url=self._url(path, query),
            headers=headers,
            body=body,
            timeout_seconds=self.timeout_seconds,
        )
        return status, data

    def _checked(
        self,
        method: str,
        path: str,
        *,
        query: dict[str, Any] | None = None,
        body_obj: dict[str, Any] | None = None,
        expected: int = 200,
    ) -> bytes:
        # Each operation has exactly one success status; anything else,
        # other 2xx included, goes through the error body path.
        status, data = self._send(method, path, query=query, body_obj=body_obj)
        if status != expected:
            raise error_for_status(status, data)
        return data

    def get_customers(
        self,
        *,
        filter: str | None = None,
        sort: str | None = None,
        limit: int | None = None,
        offset: int | None = None,
        include_attributes: bool = False,
    ) -> CustomerList:
        query = _list_query(limit=limit, offset=offset, filter=filter, sort=sort)
        query["include_attributes"] = _bool_param(include_attributes)
        raw = self._checked("GET", CUSTOMERS, query=query)
        return _decode(raw, CustomerList, label="customer list")

    def get_all_customers(
        self,
        *,
        filter: str | None = None,
        sort: str | None = None,
        include_attributes: bool = False,
    ) -> CustomerList:
        """Fetch every customer page by page, in server order.

        Any failing page aborts the whole listing.
        """
        items: list[Customer] = []
        offset = 0
        while True:
            self._log(f"fetching customers offset={offset} limit={PAGE_SIZE}")
            page = self.get_customers(
                filter=filter,
                sort=sort,
                limit=PAGE_SIZE,
                offset=offset,
                include_attributes=include_attributes,
            )
            items.extend(page.items)
            total = page.range.total
            offset += PAGE_SIZE
            if offset >= total:
                break
        return CustomerList(range=Range(offset=0, limit=len(items), total=total), items=tuple(items))

    def get_customer(self, customer_id: int, *, include_attributes: bool = False) -> Customer:
        raw = self._checked(
            "GET",
            f"{CUSTOMERS}/{int(customer_id)}",
            query={"include_attributes": _bool_param(include_attributes)},
        )
        return _decode(raw, Customer, label="customer")

    def create_customer(self, customer: NewCustomerRequest) -> NewCustomerResponse:
        raw = self._checked("POST", CUSTOMERS, body_obj=customer.to_dict(), expected=201)
        return _decode(raw, NewCustomerResponse, label="new customer")

    def update_customer(self, customer_id: int, update: UpdateCustomerRequest) -> UpdateCustomerResponse:
        raw = self._checked("PUT", f"{CUSTOMERS}/{int(customer_id)}", body_obj=update.to_dict())
        return _decode(raw, UpdateCustomerResponse, label="update customer")

    def delete_customer(self, customer_id: int) -> None:
        self._checked("DELETE", f"{CUSTOMERS}/{int(customer_id)}", expected=204)

    def get_customer_attributes(
        self,
        customer_id: int,
        *,
        filter: str | None = None,
        sort: str | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> AttributeList:
        raw = self._checked(
            "GET",
            f"{CUSTOMERS}/{int(customer_id)}/{ATTRIBUTES}",
            query=_list_query(limit=limit, offset=offset, filter=filter, sort=sort),
        )
        return _decode(raw, AttributeList, label="customer attributes")

    def update_customer_attributes(self, customer_id: int, attribs: CustomerAttributes) -> Customer:
        raw = self._checked(
            "PUT",
            f"{CUSTOMERS}/{int(customer_id)}/{ATTRIBUTES}",
            body_obj=attribs.to_dict(),
        )
        return _decode(raw, Customer, label="customer")

    def get_customer_users(
        self,
        customer_id: int,
        *,
        filter: str | None = None,
        sort: str | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> UserList:
        raw = self._checked(
            "GET",
            f"{CUSTOMERS}/{int(customer_id)}/{USERS}",
            query=_list_query(limit=limit, offset=offset, filter=filter, sort=sort),
        )
        return _decode(raw, UserList, label="customer users")
