"""Command group: relationships between people and organizations."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from crmctl.commands._base import CrmGroup
from crmctl.services.relationships import RelationshipService

if TYPE_CHECKING:
    from crmctl.commands._context import AppContext

_RELATE_EXAMPLES = """\
  crmctl relate people 1 2 --notes "College roommates"
  crmctl relate org 3 1 --role CTO
  crmctl relate show 1
  crmctl relate unlink-people 2 1
  crmctl relate unlink-org 3 1"""


@click.group(cls=CrmGroup, examples=_RELATE_EXAMPLES)
def relate() -> None:
    """Link people to each other and to organizations."""


@relate.command(examples='  crmctl relate people 1 2 --notes "Introduced by Sam"')
@click.argument("person_a_id", type=int)
@click.argument("person_b_id", type=int)
@click.option("--notes", default=None, help="How they know each other.")
@click.pass_obj
def people(app: AppContext, person_a_id: int, person_b_id: int, notes: str | None) -> None:
    """Relate two people (order does not matter)."""
    app.emit(RelationshipService(app.store).link_people(person_a_id, person_b_id, notes))


@relate.command("org", examples="  crmctl relate org 3 1 --role Advisor")
@click.argument("organization_id", type=int)
@click.argument("person_id", type=int)
@click.option("--role", default=None, help="Role at the organization.")
@click.pass_obj
def org_member(app: AppContext, organization_id: int, person_id: int, role: str | None) -> None:
    """Add a person to an organization."""
    app.emit(RelationshipService(app.store).link_organization(organization_id, person_id, role))


@relate.command("unlink-people")
@click.argument("person_a_id", type=int)
@click.argument("person_b_id", type=int)
@click.pass_obj
def unlink_people(app: AppContext, person_a_id: int, person_b_id: int) -> None:
    """Remove the relationship between two people."""
    app.emit(RelationshipService(app.store).unlink_people(person_a_id, person_b_id))


@relate.command("unlink-org")
@click.argument("organization_id", type=int)
@click.argument("person_id", type=int)
@click.pass_obj
def unlink_org(app: AppContext, organization_id: int, person_id: int) -> None:
    """Remove a person from an organization."""
    app.emit(RelationshipService(app.store).unlink_organization(organization_id, person_id))


@relate.command("show")
@click.argument("person_id", type=int)
@click.pass_obj
def show(app: AppContext, person_id: int) -> None:
    """List everyone and every organization linked to a person."""
    app.emit(RelationshipService(app.store).list_for_person(person_id))
