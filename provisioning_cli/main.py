from __future__ import annotations

import argparse
import sys
from typing import Any

import click
import typer
from rich.console import Console
from rich.markup import escape

from . import PROG_NAME, __version__
from .cli_shared import DCPROV_SERVICE_TOKEN, GlobalOpts, _bootstrap_env, _eprint, _global_opts, _parse_key_val
from .commands import (
    OUTPUT_CSV,
    OUTPUT_JSON,
    OUTPUT_PRETTY,
    UPDATE_COMPANY_NAME,
    UPDATE_QUOTA_MAX,
    UPDATE_USER_MAX,
    cmd_config_delete,
    cmd_config_get,
    cmd_config_set,
    cmd_create_from_file,
    cmd_create_prompt,
    cmd_delete,
    cmd_get,
    cmd_get_attributes,
    cmd_get_users,
    cmd_list,
    cmd_set_attributes,
    cmd_update,
    cmd_version,
)
from .errors import ApiError, DcProvError


_ERROR_CONSOLE = Console(stderr=True)


def _rich_error(msg: str) -> None:
    _ERROR_CONSOLE.print(f"[bold red]error:[/bold red] {escape(msg)}")


def _render_error(e: DcProvError, *, failure: str = "") -> None:
    msg = str(e) or type(e).__name__
    _rich_error(f"{failure}: {msg}" if failure else msg)
    if isinstance(e, ApiError) and e.error is not None:
        _eprint(f"  code: {e.error.code}")
        _eprint(f"  message: {e.error.message}")
        if e.error.debug_info:
            _eprint(f"  debug info: {e.error.debug_info}")
        if e.error.error_code is not None:
            _eprint(f"  error code: {e.error.error_code}")


def _namespace(**kwargs: Any) -> argparse.Namespace:
    return argparse.Namespace(**kwargs)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"{PROG_NAME} {__version__}")
        raise typer.Exit(code=0)


app = typer.Typer(
    name=PROG_NAME,
    help="DRACOON Provisioning API CLI tool.",
    no_args_is_help=True,
    add_completion=False,
)
create_app = typer.Typer(help="Create a new customer for a DRACOON url.", no_args_is_help=True)
update_app = typer.Typer(help="Update a customer by id for a DRACOON url.", no_args_is_help=True)
config_app = typer.Typer(help="Manage the stored X-SDS-Service-Token for a DRACOON url.", no_args_is_help=True)

app.add_typer(create_app, name="create")
app.add_typer(update_app, name="update")
app.add_typer(config_app, name="config")


@app.callback()
def app_callback(
    ctx: typer.Context,
    token: str | None = typer.Option(
        None,
        "--token",
        "-t",
        help=f"X-SDS-Service-Token for this call only, never stored (env override: {DCPROV_SERVICE_TOKEN})",
    ),
    quiet: bool = typer.Option(False, "--quiet", help="Reduce stderr logging"),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    del version
    try:
        g = _global_opts(token=token, quiet=quiet)
    except DcProvError as e:
        _render_error(e)
        raise typer.Exit(code=1)
    ctx.obj = {"g": g}


def _ctx_obj(ctx: typer.Context) -> dict[str, Any]:
    if not isinstance(ctx.obj, dict):
        ctx.obj = {}
    return ctx.obj


def _ctx_global(ctx: typer.Context) -> GlobalOpts:
    obj = _ctx_obj(ctx)
    if isinstance(obj.get("g"), GlobalOpts):
        return obj["g"]
    g = _global_opts(token=None, quiet=False)
    obj["g"] = g
    return g


def _invoke(ctx: typer.Context, func: Any, *, failure: str = "", **kwargs: Any) -> None:
    args = _namespace(**kwargs)
    try:
        g = _ctx_global(ctx)
        code = int(func(args, g))
    except DcProvError as e:
        _render_error(e, failure=failure)
        raise typer.Exit(code=1)

    if code:
        raise typer.Exit(code=code)


def _output_mode(*, csv: bool, json_output: bool) -> str:
    if csv and json_output:
        raise typer.BadParameter("--csv and --json are mutually exclusive")
    if csv:
        return OUTPUT_CSV
    if json_output:
        return OUTPUT_JSON
    return OUTPUT_PRETTY


_URL_ARG = typer.Argument(..., help="DRACOON url (https:// is assumed when omitted)")
_ID_ARG = typer.Argument(..., min=0, help="Customer id")
_FILTER_OPT = typer.Option(None, "--filter", "-f", help="Filter option, see API docs for details")
_SORT_OPT = typer.Option(None, "--sort", "-s", help="Sort option, see API docs for details")
_OFFSET_OPT = typer.Option(None, "--offset", "-o", min=0, help="Offset (default 0)")
_LIMIT_OPT = typer.Option(None, "--limit", "-l", min=1, help="Limit, max. 500 items returned (default 500)")
_CSV_OPT = typer.Option(False, "--csv", help="Comma-separated output")
_JSON_OPT = typer.Option(False, "--json", help="Raw JSON output")


@app.command("list", help="List customers for a DRACOON url.")
def list_customers(
    ctx: typer.Context,
    url: str = _URL_ARG,
    filter: str | None = _FILTER_OPT,
    sort: str | None = _SORT_OPT,
    offset: int | None = _OFFSET_OPT,
    limit: int | None = _LIMIT_OPT,
    fetch_all: bool = typer.Option(False, "--all", help="Fetch all customers (default: one page of 500)"),
    csv: bool = _CSV_OPT,
    json_output: bool = _JSON_OPT,
) -> None:
    _invoke(
        ctx,
        cmd_list,
        failure="could not list customers",
        url=url,
        filter=filter,
        sort=sort,
        offset=offset,
        limit=limit,
        all=fetch_all,
        output=_output_mode(csv=csv, json_output=json_output),
    )


@app.command("get", help="Get a customer by id for a DRACOON url.")
def get_customer(
    ctx: typer.Context,
    url: str = _URL_ARG,
    customer_id: int = _ID_ARG,
    include_attributes: bool = typer.Option(False, "--include-attributes", help="Include customer attributes"),
    csv: bool = _CSV_OPT,
    json_output: bool = _JSON_OPT,
) -> None:
    _invoke(
        ctx,
        cmd_get,
        failure="could not get customer info",
        url=url,
        id=customer_id,
        include_attributes=include_attributes,
        output=_output_mode(csv=csv, json_output=json_output),
    )


@create_app.callback()
def create_callback(ctx: typer.Context, url: str = _URL_ARG) -> None:
    _ctx_obj(ctx)["url"] = url


@create_app.command("from-file", help="Create a new customer from a JSON file.")
def create_from_file(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="Path to a new customer JSON file"),
) -> None:
    _invoke(ctx, cmd_create_from_file, failure="could not create customer", url=_ctx_obj(ctx)["url"], path=path)


@create_app.command("prompt", help="Create a new customer via interactive prompt.")
def create_prompt(ctx: typer.Context) -> None:
    _invoke(ctx, cmd_create_prompt, failure="could not create customer", url=_ctx_obj(ctx)["url"])


@update_app.callback()
def update_callback(ctx: typer.Context, url: str = _URL_ARG, customer_id: int = _ID_ARG) -> None:
    obj = _ctx_obj(ctx)
    obj["url"] = url
    obj["id"] = customer_id


def _invoke_update(ctx: typer.Context, kind: str, value: Any) -> None:
    obj = _ctx_obj(ctx)
    _invoke(
        ctx,
        cmd_update,
        failure="could not update customer",
        url=obj["url"],
        id=obj["id"],
        kind=kind,
        value=value,
    )


@update_app.command("company-name", help="Update company name.")
def update_company_name(ctx: typer.Context, company_name: str = typer.Argument(..., help="New company name")) -> None:
    _invoke_update(ctx, UPDATE_COMPANY_NAME, company_name)


@update_app.command("quota-max", help="Update maximum quota (in bytes).")
def update_quota_max(ctx: typer.Context, quota_max: int = typer.Argument(..., min=1, help="Maximum quota in bytes")) -> None:
    _invoke_update(ctx, UPDATE_QUOTA_MAX, quota_max)


@update_app.command("user-max", help="Update maximum users.")
def update_user_max(ctx: typer.Context, user_max: int = typer.Argument(..., min=1, help="Maximum users")) -> None:
    _invoke_update(ctx, UPDATE_USER_MAX, user_max)


@app.command("delete", help="Delete a customer by id for a DRACOON url.")
def delete_customer(ctx: typer.Context, url: str = _URL_ARG, customer_id: int = _ID_ARG) -> None:
    _invoke(ctx, cmd_delete, failure="could not delete customer", url=url, id=customer_id)


@app.command("get-attributes", help="Get customer attributes by customer id for a DRACOON url.")
def get_attributes(
    ctx: typer.Context,
    url: str = _URL_ARG,
    customer_id: int = _ID_ARG,
    filter: str | None = _FILTER_OPT,
    sort: str | None = _SORT_OPT,
    offset: int | None = _OFFSET_OPT,
    limit: int | None = _LIMIT_OPT,
    csv: bool = _CSV_OPT,
    json_output: bool = _JSON_OPT,
) -> None:
    _invoke(
        ctx,
        cmd_get_attributes,
        failure="could not get customer attributes",
        url=url,
        id=customer_id,
        filter=filter,
        sort=sort,
        offset=offset,
        limit=limit,
        output=_output_mode(csv=csv, json_output=json_output),
    )


def _parse_attribs(raw: list[str]) -> list[tuple[str, str]]:
    pairs: list[tuple[str, str]] = []
    for item in raw:
        try:
            pairs.append(_parse_key_val(item))
        except ValueError as e:
            raise typer.BadParameter(str(e), param_hint="--attrib") from e
    return pairs


@app.command("set-attributes", help="Set customer attributes by customer id for a DRACOON url.")
def set_attributes(
    ctx: typer.Context,
    url: str = _URL_ARG,
    customer_id: int = _ID_ARG,
    attribs: list[str] = typer.Option(..., "--attrib", "-a", help="Attribute as KEY=value (repeatable)"),
) -> None:
    _invoke(
        ctx,
        cmd_set_attributes,
        failure="could not update customer attributes",
        url=url,
        id=customer_id,
        attribs=_parse_attribs(attribs),
    )


@app.command("get-users", help="Get customer users by customer id for a DRACOON url.")
def get_users(
    ctx: typer.Context,
    url: str = _URL_ARG,
    customer_id: int = _ID_ARG,
    filter: str | None = _FILTER_OPT,
    sort: str | None = _SORT_OPT,
    offset: int | None = _OFFSET_OPT,
    limit: int | None = _LIMIT_OPT,
    csv: bool = _CSV_OPT,
    json_output: bool = _JSON_OPT,
) -> None:
    _invoke(
        ctx,
        cmd_get_users,
        failure="could not get customer users",
        url=url,
        id=customer_id,
        filter=filter,
        sort=sort,
        offset=offset,
        limit=limit,
        output=_output_mode(csv=csv, json_output=json_output),
    )


@config_app.callback()
def config_callback(ctx: typer.Context, url: str = _URL_ARG) -> None:
    _ctx_obj(ctx)["url"] = url


@config_app.command("set", help="Store an X-SDS-Service-Token.")
def config_set(ctx: typer.Context, token: str = typer.Argument(..., help="X-SDS-Service-Token")) -> None:
    _invoke(ctx, cmd_config_set, failure="error storing credentials", url=_ctx_obj(ctx)["url"], token=token)


@config_app.command("get", help="Print the stored X-SDS-Service-Token.")
def config_get(ctx: typer.Context) -> None:
    _invoke(ctx, cmd_config_get, failure="account not found", url=_ctx_obj(ctx)["url"])


@config_app.command("delete", help="Delete the stored X-SDS-Service-Token.")
def config_delete(ctx: typer.Context) -> None:
    _invoke(ctx, cmd_config_delete, failure="error deleting credentials", url=_ctx_obj(ctx)["url"])


@app.command("version", help="Print version info.")
def print_version(ctx: typer.Context) -> None:
    _invoke(ctx, cmd_version)


def main(argv: list[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    try:
        _bootstrap_env()
        result = app(args=argv, prog_name=PROG_NAME, standalone_mode=False)
        if result is None:
            return 0
        return int(result)
    except typer.Exit as e:
        return int(e.exit_code)
    except click.exceptions.Abort:
        _rich_error("aborted")
        return 1
    except click.ClickException as e:
        _rich_error(e.format_message())
        return int(e.exit_code)
    except DcProvError as e:
        _render_error(e)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
