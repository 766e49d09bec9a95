"""Command: typeahead search over people and organizations."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from crmctl.commands._base import CrmCommand
from crmctl.services.search import SearchService

if TYPE_CHECKING:
    from crmctl.commands._context import AppContext


@click.command(
    cls=CrmCommand,
    examples="""\
  crmctl search jan
  crmctl search acme --kind organization
  crmctl --json search doe --limit 5""",
)
@click.argument("query_text")
@click.option("--limit", type=int, default=None, help="Max hits.")
@click.option(
    "--kind",
    type=click.Choice(["person", "organization"]),
    default=None,
    help="Only this kind of entity.",
)
@click.pass_obj
def search(app: AppContext, query_text: str, limit: int | None, kind: str | None) -> None:
    """Find people and organizations by name."""
    app.emit(SearchService(app.store).typeahead(query_text, limit=limit, kind=kind))
