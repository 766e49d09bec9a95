"""Command group: people."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from crmctl.commands._base import CrmGroup, parse_assignments
from crmctl.services.people import PERSON_SORT_FIELDS, PersonService

if TYPE_CHECKING:
    from crmctl.commands._context import AppContext

_PERSON_EXAMPLES = """\
  crmctl person create Jane Doe --cadence 30
  crmctl person get 1
  crmctl person list --sort latest_interaction_date --desc
  crmctl person update 1 --set follow_up_cadence_days=14
  crmctl person delete 1"""


@click.group(cls=CrmGroup, examples=_PERSON_EXAMPLES)
def person() -> None:
    """Create, view, list, update, and delete people."""


@person.command(
    examples="""\
  crmctl person create Jane Doe
  crmctl person create Jane Doe --middle Q --cadence 30 --notes "Met at PyCon"
  crmctl --json person create Ada Lovelace"""
)
@click.argument("first_name")
@click.argument("last_name")
@click.option("--middle", "middle_name", default=None, help="Middle name.")
@click.option("--notes", default=None, help="Free-form notes.")
@click.option(
    "--cadence",
    "follow_up_cadence_days",
    type=int,
    default=None,
    help="Follow up every N days.",
)
@click.pass_obj
def create(
    app: AppContext,
    first_name: str,
    last_name: str,
    middle_name: str | None,
    notes: str | None,
    follow_up_cadence_days: int | None,
) -> None:
    """Add a person."""
    data = {
        "first_name": first_name,
        "last_name": last_name,
        "middle_name": middle_name,
        "notes": notes,
        "follow_up_cadence_days": follow_up_cadence_days,
    }
    app.emit(PersonService(app.store).create(data))


@person.command(examples="  crmctl person get 1\n  crmctl --json person get 1")
@click.argument("person_id", type=int)
@click.pass_obj
def get(app: AppContext, person_id: int) -> None:
    """Show a person with history, follow-up status, and relationships."""
    app.emit(PersonService(app.store).get(person_id))


@person.command(
    "list",
    examples="""\
  crmctl person list
  crmctl person list --query doe
  crmctl person list --sort follow_up_cadence_days --page 2 --page-size 10
  crmctl -q person list""",
)
@click.option("--page", type=int, default=1, help="1-based page number.")
@click.option("--page-size", type=int, default=None, help="Rows per page.")
@click.option(
    "--sort",
    "sort_by",
    default=None,
    help=f"Sort field: {', '.join(sorted(PERSON_SORT_FIELDS))}.",
)
@click.option("--desc", "descending", is_flag=True, help="Sort descending.")
@click.option("--query", default=None, help="Filter by name substring.")
@click.pass_obj
def list_cmd(
    app: AppContext,
    page: int,
    page_size: int | None,
    sort_by: str | None,
    descending: bool,
    query: str | None,
) -> None:
    """List people, paginated and sorted."""
    result = PersonService(app.store).list(
        page=page,
        page_size=page_size,
        sort_by=sort_by,
        direction="desc" if descending else None,
        query=query,
    )
    app.emit(result)


@person.command(
    examples="""\
  crmctl person update 1 --set notes="Moved to Berlin"
  crmctl person update 1 --set follow_up_cadence_days=
  crmctl person update 1 --set first_name=Janet --set last_name=Doe"""
)
@click.argument("person_id", type=int)
@click.option("--set", "assignments", multiple=True, help="field=value (empty value clears).")
@click.pass_obj
def update(app: AppContext, person_id: int, assignments: tuple[str, ...]) -> None:
    """Update fields on a person."""
    app.emit(PersonService(app.store).update(person_id, parse_assignments(assignments)))


@person.command(examples="  crmctl person delete 1")
@click.argument("person_id", type=int)
@click.pass_obj
def delete(app: AppContext, person_id: int) -> None:
    """Delete a person, their interactions, and their relationships."""
    app.emit(PersonService(app.store).delete(person_id))
