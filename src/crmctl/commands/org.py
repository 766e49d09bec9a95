"""Command group: organizations."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from crmctl.commands._base import CrmGroup, parse_assignments
from crmctl.services.organizations import ORGANIZATION_SORT_FIELDS, OrganizationService

if TYPE_CHECKING:
    from crmctl.commands._context import AppContext

_ORG_EXAMPLES = """\
  crmctl lookup org-types
  crmctl org create Acme --type 1
  crmctl org get 1
  crmctl org list --sort org_type
  crmctl org update 1 --set name="Acme Corp"
  crmctl org delete 1"""


@click.group(cls=CrmGroup, examples=_ORG_EXAMPLES)
def org() -> None:
    """Create, view, list, update, and delete organizations."""


@org.command(
    examples="""\
  crmctl org create Acme --type 1
  crmctl org create "Python Software Foundation" --type 2 --notes "PyCon organizers\""""
)
@click.argument("name")
@click.option("--type", "org_type_id", type=int, required=True, help="Org type id.")
@click.option("--notes", default=None, help="Free-form notes.")
@click.pass_obj
def create(app: AppContext, name: str, org_type_id: int, notes: str | None) -> None:
    """Add an organization."""
    data = {"name": name, "org_type_id": org_type_id, "notes": notes}
    app.emit(OrganizationService(app.store).create(data))


@org.command(examples="  crmctl org get 1")
@click.argument("organization_id", type=int)
@click.pass_obj
def get(app: AppContext, organization_id: int) -> None:
    """Show an organization and its members."""
    app.emit(OrganizationService(app.store).get(organization_id))


@org.command(
    "list",
    examples="""\
  crmctl org list
  crmctl org list --query acme --sort created_at --desc""",
)
@click.option("--page", type=int, default=1, help="1-based page number.")
@click.option("--page-size", type=int, default=None, help="Rows per page.")
@click.option(
    "--sort",
    "sort_by",
    default=None,
    help=f"Sort field: {', '.join(sorted(ORGANIZATION_SORT_FIELDS))}.",
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
    """List organizations, paginated and sorted."""
    result = OrganizationService(app.store).list(
        page=page,
        page_size=page_size,
        sort_by=sort_by,
        direction="desc" if descending else None,
        query=query,
    )
    app.emit(result)


@org.command(examples='  crmctl org update 1 --set name="Acme Corp" --set org_type_id=2')
@click.argument("organization_id", type=int)
@click.option("--set", "assignments", multiple=True, help="field=value (empty value clears).")
@click.pass_obj
def update(app: AppContext, organization_id: int, assignments: tuple[str, ...]) -> None:
    """Update fields on an organization."""
    changes = parse_assignments(assignments)
    app.emit(OrganizationService(app.store).update(organization_id, changes))


@org.command(examples="  crmctl org delete 1")
@click.argument("organization_id", type=int)
@click.pass_obj
def delete(app: AppContext, organization_id: int) -> None:
    """Delete an organization and its memberships."""
    app.emit(OrganizationService(app.store).delete(organization_id))
