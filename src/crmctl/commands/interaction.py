"""Command group: interactions."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

import click

from crmctl.commands._base import CrmGroup, parse_assignments
from crmctl.services.interactions import INTERACTION_SORT_FIELDS, InteractionService

if TYPE_CHECKING:
    from crmctl.commands._context import AppContext

_INTERACTION_EXAMPLES = """\
  crmctl lookup interaction-types
  crmctl interaction create 1 --type 2 --date 2026-10-01 --notes "Coffee"
  crmctl interaction list --person 1
  crmctl interaction update 5 --set interaction_date=2026-10-02
  crmctl interaction delete 5"""


@click.group(cls=CrmGroup, examples=_INTERACTION_EXAMPLES)
def interaction() -> None:
    """Log and manage interactions with people."""


@interaction.command(
    examples="""\
  crmctl interaction create 1 --type 1
  crmctl interaction create 1 --type 2 --date 2026-10-01 --notes "Quick call\""""
)
@click.argument("person_id", type=int)
@click.option("--type", "interaction_type_id", type=int, required=True, help="Interaction type id.")
@click.option(
    "--date",
    "interaction_date",
    default=None,
    help="YYYY-MM-DD (defaults to today).",
)
@click.option("--notes", default=None, help="Free-form notes.")
@click.pass_obj
def create(
    app: AppContext,
    person_id: int,
    interaction_type_id: int,
    interaction_date: str | None,
    notes: str | None,
) -> None:
    """Log an interaction with a person."""
    data = {
        "person_id": person_id,
        "interaction_type_id": interaction_type_id,
        "interaction_date": interaction_date or date.today().isoformat(),
        "notes": notes,
    }
    app.emit(InteractionService(app.store).create(data))


@interaction.command(examples="  crmctl interaction get 5")
@click.argument("interaction_id", type=int)
@click.pass_obj
def get(app: AppContext, interaction_id: int) -> None:
    """Show one interaction."""
    app.emit(InteractionService(app.store).get(interaction_id))


@interaction.command(
    "list",
    examples="""\
  crmctl interaction list
  crmctl interaction list --person 1 --sort created_at""",
)
@click.option("--page", type=int, default=1, help="1-based page number.")
@click.option("--page-size", type=int, default=None, help="Rows per page.")
@click.option(
    "--sort",
    "sort_by",
    default=None,
    help=f"Sort field: {', '.join(sorted(INTERACTION_SORT_FIELDS))}.",
)
@click.option("--asc", "ascending", is_flag=True, help="Oldest first.")
@click.option("--person", "person_id", type=int, default=None, help="Only this person.")
@click.pass_obj
def list_cmd(
    app: AppContext,
    page: int,
    page_size: int | None,
    sort_by: str | None,
    ascending: bool,
    person_id: int | None,
) -> None:
    """List interactions, newest first."""
    result = InteractionService(app.store).list(
        page=page,
        page_size=page_size,
        sort_by=sort_by,
        direction="asc" if ascending else None,
        person_id=person_id,
    )
    app.emit(result)


@interaction.command(examples='  crmctl interaction update 5 --set notes="Lunch, not coffee"')
@click.argument("interaction_id", type=int)
@click.option("--set", "assignments", multiple=True, help="field=value (empty value clears).")
@click.pass_obj
def update(app: AppContext, interaction_id: int, assignments: tuple[str, ...]) -> None:
    """Update fields on an interaction."""
    changes = parse_assignments(assignments)
    app.emit(InteractionService(app.store).update(interaction_id, changes))


@interaction.command(examples="  crmctl interaction delete 5")
@click.argument("interaction_id", type=int)
@click.pass_obj
def delete(app: AppContext, interaction_id: int) -> None:
    """Delete an interaction."""
    app.emit(InteractionService(app.store).delete(interaction_id))
