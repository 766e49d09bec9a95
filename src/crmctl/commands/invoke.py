"""Command: drive the request bridge from the shell."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import click

from crmctl.commands._base import CrmCommand

if TYPE_CHECKING:
    from crmctl.commands._context import AppContext


@click.command(
    cls=CrmCommand,
    examples="""\
  crmctl invoke --list
  crmctl invoke person.create '{"first_name": "Jane", "last_name": "Doe"}'
  crmctl invoke person.list '{"sort_by": "last_name", "page_size": 10}'
  crmctl invoke dashboard.get""",
)
@click.argument("operation", required=False)
@click.argument("payload", required=False, default="{}")
@click.option("--list", "list_ops", is_flag=True, help="List available operations.")
@click.pass_obj
def invoke(app: AppContext, operation: str | None, payload: str, list_ops: bool) -> None:
    """Run a named bridge operation with a JSON payload; prints the JSON response."""
    from crmctl.bridge import dispatch, operation_names

    if list_ops or operation is None:
        click.echo("\n".join(operation_names()))
        return

    try:
        arguments: Any = json.loads(payload)
    except json.JSONDecodeError as exc:
        msg = f"Payload is not valid JSON: {exc}"
        raise click.BadParameter(msg, param_hint="PAYLOAD") from exc

    response = dispatch(app.store, operation, arguments)
    text = json.dumps(response, indent=2, default=str)
    if response["ok"]:
        click.echo(text)
    else:
        click.echo(text, err=True)
        raise SystemExit(1)
