from __future__ import annotations

import click
import typer

from .errors import InputError
from .models import FirstAdminUser, NewCustomerRequest

DEFAULT_CONTRACT_TYPE = "pay"


def _ask(text: str, **kwargs) -> str:
    try:
        return str(typer.prompt(text, **kwargs)).strip()
    except click.Abort as e:
        raise InputError(f"input aborted: {text}") from e


def _confirm(text: str) -> bool:
    try:
        return bool(typer.confirm(text, default=False))
    except click.Abort as e:
        raise InputError(f"input aborted: {text}") from e


def _ask_positive_int(text: str) -> int:
    while True:
        raw = _ask(text)
        try:
            num = int(raw)
        except ValueError:
            typer.echo("error: please enter a valid positive number.", err=True)
            continue
        if num > 0:
            return num
        typer.echo("error: please enter a valid positive number.", err=True)


def prompt_service_token() -> str:
    token = _ask("Please enter X-SDS-Service-Token", hide_input=True)
    if not token:
        raise InputError("empty service token")
    return token


def prompt_new_customer() -> NewCustomerRequest:
    typer.echo("Step 1: Enter first admin user")
    first_name = _ask("Please enter first name")
    last_name = _ask("Please enter last name")
    email = _ask("Please enter email address")
    user_name = None
    if _confirm("Provide username?"):
        user_name = _ask("Please enter username")

    typer.echo("Step 2: Configure customer")
    company_name = _ask("Please enter company name")
    quota_max = _ask_positive_int("Please enter maximum quota (in bytes)")
    user_max = _ask_positive_int("Please enter maximum users")

    first_admin_user = FirstAdminUser.new_local(
        first_name=first_name,
        last_name=last_name,
        email=email,
        user_name=user_name,
        notify_user=True,
    )
    return NewCustomerRequest(
        customer_contract_type=DEFAULT_CONTRACT_TYPE,
        quota_max=quota_max,
        user_max=user_max,
        first_admin_user=first_admin_user,
        company_name=company_name,
    )
