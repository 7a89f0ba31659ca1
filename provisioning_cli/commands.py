from __future__ import annotations

import argparse
import csv
import sys
from datetime import datetime
from pathlib import Path
from typing import Any

from . import PROG_NAME, __version__
from .auth_inputs import init_provisioning, normalize_url
from .cli_shared import GlobalOpts, _load_json_object, _print_json
from .client import ProvisioningClient
from .credentials import CredentialStore, KeyringCredentialStore
from .errors import InputError, OtherError
from .models import (
    AttributeList,
    Customer,
    CustomerAttributes,
    CustomerList,
    NewCustomerRequest,
    UpdateCustomerRequest,
    UserList,
)
from .prompts import prompt_new_customer

CUSTOMER_CSV_HEADER = ["companyName", "contractType", "userUsed", "userMax", "quotaUsed", "quotaMax", "id", "createdAt"]
CUSTOMER_USERS_CSV_HEADER = ["id", "firstName", "lastName", "userName", "isLocked"]
CUSTOMER_ATTRIBUTES_CSV_HEADER = ["key", "value"]

OUTPUT_PRETTY = "pretty"
OUTPUT_CSV = "csv"
OUTPUT_JSON = "json"

UPDATE_COMPANY_NAME = "company-name"
UPDATE_QUOTA_MAX = "quota-max"
UPDATE_USER_MAX = "user-max"


def _credential_store() -> CredentialStore:
    return KeyringCredentialStore()


def _client_for_args(args: argparse.Namespace, g: GlobalOpts) -> ProvisioningClient:
    return init_provisioning(
        args.url,
        g.token,
        store=_credential_store(),
        timeout_seconds=g.timeout_seconds,
        log=g.log,
    )


def _output(args: argparse.Namespace) -> str:
    return str(getattr(args, "output", None) or OUTPUT_PRETTY)


def _cell(value: Any) -> str:
    if value is None:
        return "-"
    if isinstance(value, datetime):
        return value.isoformat().replace("+00:00", "Z")
    if isinstance(value, bool):
        return "true" if value else "false"
    text = str(value).strip()
    return text or "-"


def _print_table(*, headers: list[str], rows: list[list[str]], empty_message: str) -> None:
    if not rows:
        sys.stdout.write(f"{empty_message}\n")
        return
    widths: list[int] = [len(h) for h in headers]
    for row in rows:
        for i, val in enumerate(row):
            widths[i] = max(widths[i], len(val))
    header_line = "  ".join(h.ljust(widths[i]) for i, h in enumerate(headers))
    divider_line = "  ".join("-" * widths[i] for i in range(len(headers)))
    sys.stdout.write(header_line.rstrip() + "\n")
    sys.stdout.write(divider_line + "\n")
    for row in rows:
        sys.stdout.write("  ".join(row[i].ljust(widths[i]) for i in range(len(headers))).rstrip() + "\n")


def _print_csv(*, header: list[str], rows: list[list[str]]) -> None:
    writer = csv.writer(sys.stdout, lineterminator="\n")
    writer.writerow(header)
    writer.writerows(rows)


def _customer_row(c: Customer) -> list[str]:
    return [
        _cell(c.company_name),
        _cell(c.customer_contract_type),
        _cell(c.user_used),
        _cell(c.user_max),
        _cell(c.quota_used),
        _cell(c.quota_max),
        _cell(c.id),
        _cell(c.created_at),
    ]


def _render_customers(customers: list[Customer], *, output: str) -> None:
    rows = [_customer_row(c) for c in customers]
    if output == OUTPUT_CSV:
        _print_csv(header=CUSTOMER_CSV_HEADER, rows=rows)
        return
    _print_table(
        headers=["COMPANY", "CONTRACT", "USERS USED", "USERS MAX", "QUOTA USED", "QUOTA MAX", "ID", "CREATED"],
        rows=rows,
        empty_message="No customers.",
    )


def _render_customer_list(result: CustomerList, *, output: str) -> None:
    if output == OUTPUT_JSON:
        _print_json(result.to_dict())
        return
    if output == OUTPUT_PRETTY:
        r = result.range
        sys.stdout.write(f"total customers: {r.total} | offset: {r.offset} | limit: {r.limit}\n")
    _render_customers(list(result.items), output=output)


def _render_attributes(items: list[Any], *, output: str, empty_message: str) -> None:
    rows = [[_cell(a.key), _cell(a.value)] for a in items]
    if output == OUTPUT_CSV:
        _print_csv(header=CUSTOMER_ATTRIBUTES_CSV_HEADER, rows=rows)
        return
    _print_table(headers=["KEY", "VALUE"], rows=rows, empty_message=empty_message)


def _render_users(result: UserList, *, output: str) -> None:
    if output == OUTPUT_JSON:
        _print_json(result.to_dict())
        return
    rows = [
        [_cell(u.id), _cell(u.first_name), _cell(u.last_name), _cell(u.user_name), _cell(u.is_locked)]
        for u in result.items
    ]
    if output == OUTPUT_CSV:
        _print_csv(header=CUSTOMER_USERS_CSV_HEADER, rows=rows)
        return
    r = result.range
    sys.stdout.write(f"total users: {r.total} | offset: {r.offset} | limit: {r.limit}\n")
    _print_table(
        headers=["ID", "FIRST NAME", "LAST NAME", "USER NAME", "LOCKED"],
        rows=rows,
        empty_message="No users.",
    )


def cmd_list(args: argparse.Namespace, g: GlobalOpts) -> int:
    client = _client_for_args(args, g)
    if args.all:
        result = client.get_all_customers(filter=args.filter, sort=args.sort)
    else:
        result = client.get_customers(
            filter=args.filter,
            sort=args.sort,
            limit=args.limit,
            offset=args.offset,
        )
    _render_customer_list(result, output=_output(args))
    return 0


def cmd_get(args: argparse.Namespace, g: GlobalOpts) -> int:
    client = _client_for_args(args, g)
    customer = client.get_customer(args.id, include_attributes=bool(args.include_attributes))
    output = _output(args)
    if output == OUTPUT_JSON:
        _print_json(customer.to_dict())
        return 0
    _render_customers([customer], output=output)
    if output == OUTPUT_PRETTY and customer.customer_attributes is not None:
        sys.stdout.write("\n")
        _render_attributes(
            list(customer.customer_attributes.items),
            output=output,
            empty_message="Customer has no customer attributes.",
        )
    return 0


def _load_new_customer_file(path: str) -> NewCustomerRequest:
    p = Path(path).expanduser()
    try:
        raw = p.read_text(encoding="utf-8")
    except OSError as e:
        raise InputError(f"could not open file from path {p}: {e}") from e
    obj = _load_json_object(raw=raw, label=f"customer JSON at {p}")
    try:
        return NewCustomerRequest.from_dict(obj)
    except ValueError as e:
        raise InputError(f"could not parse customer from file {p}: {e}") from e


def _create(client: ProvisioningClient, new_customer: NewCustomerRequest) -> int:
    customer = client.create_customer(new_customer)
    sys.stdout.write("Success: customer created.\n")
    sys.stdout.write(
        f"company name: {customer.company_name} | user max: {customer.user_max}"
        f" | quota max: {customer.quota_max} | id: {customer.id}\n"
    )
    return 0


def cmd_create_from_file(args: argparse.Namespace, g: GlobalOpts) -> int:
    new_customer = _load_new_customer_file(args.path)
    client = _client_for_args(args, g)
    return _create(client, new_customer)


def cmd_create_prompt(args: argparse.Namespace, g: GlobalOpts) -> int:
    client = _client_for_args(args, g)
    return _create(client, prompt_new_customer())


def _update_request(kind: str, value: Any) -> UpdateCustomerRequest:
    if kind == UPDATE_COMPANY_NAME:
        return UpdateCustomerRequest(company_name=str(value))
    if kind == UPDATE_QUOTA_MAX:
        return UpdateCustomerRequest(quota_max=int(value))
    if kind == UPDATE_USER_MAX:
        return UpdateCustomerRequest(user_max=int(value))
    raise OtherError(f"unsupported update type: {kind}")


def cmd_update(args: argparse.Namespace, g: GlobalOpts) -> int:
    update = _update_request(args.kind, args.value)
    client = _client_for_args(args, g)
    customer = client.update_customer(args.id, update)
    sys.stdout.write(f"Success: updated customer with id {args.id}\n")
    sys.stdout.write(
        f"company: {customer.company_name} | contract: {customer.customer_contract_type}"
        f" | users max: {customer.user_max} | quota max: {customer.quota_max} | id: {customer.id}\n"
    )
    return 0


def cmd_delete(args: argparse.Namespace, g: GlobalOpts) -> int:
    client = _client_for_args(args, g)
    client.delete_customer(args.id)
    sys.stdout.write(f"Success: deleted customer with id {args.id}\n")
    return 0


def cmd_get_attributes(args: argparse.Namespace, g: GlobalOpts) -> int:
    client = _client_for_args(args, g)
    result: AttributeList = client.get_customer_attributes(
        args.id,
        filter=args.filter,
        sort=args.sort,
        limit=args.limit,
        offset=args.offset,
    )
    output = _output(args)
    if output == OUTPUT_JSON:
        _print_json(result.to_dict())
        return 0
    if output == OUTPUT_PRETTY:
        sys.stdout.write(f"Customer attributes for customer with id: {args.id}\n")
    _render_attributes(list(result.items), output=output, empty_message="Customer has no customer attributes.")
    return 0


def cmd_set_attributes(args: argparse.Namespace, g: GlobalOpts) -> int:
    attribs = CustomerAttributes.from_pairs(list(args.attribs))
    client = _client_for_args(args, g)
    customer = client.update_customer_attributes(args.id, attribs)
    sys.stdout.write(f"Success: updated customer attributes of customer with id {customer.id}\n")
    return 0


def cmd_get_users(args: argparse.Namespace, g: GlobalOpts) -> int:
    client = _client_for_args(args, g)
    result = client.get_customer_users(
        args.id,
        filter=args.filter,
        sort=args.sort,
        limit=args.limit,
        offset=args.offset,
    )
    _render_users(result, output=_output(args))
    return 0


def cmd_config_set(args: argparse.Namespace, g: GlobalOpts) -> int:
    url = normalize_url(args.url)
    _credential_store().set(url, args.token)
    sys.stdout.write(f"Stored credentials for {url}\n")
    return 0


def cmd_config_get(args: argparse.Namespace, g: GlobalOpts) -> int:
    url = normalize_url(args.url)
    token = _credential_store().get(url)
    sys.stdout.write(f"Stored token for {url} is {token}\n")
    return 0


def cmd_config_delete(args: argparse.Namespace, g: GlobalOpts) -> int:
    url = normalize_url(args.url)
    _credential_store().delete(url)
    sys.stdout.write(f"Deleted credentials for {url}\n")
    return 0


def cmd_version(args: argparse.Namespace, g: GlobalOpts) -> int:
    sys.stdout.write(f"{PROG_NAME} version {__version__}\n")
    sys.stdout.write("DRACOON Provisioning CLI tool\n")
    return 0
