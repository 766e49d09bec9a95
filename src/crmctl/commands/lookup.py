"""Command group: org type and interaction type lookups."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from crmctl.commands._base import CrmGroup
from crmctl.services.lookups import LookupService

if TYPE_CHECKING:
    from crmctl.commands._context import AppContext

_LOOKUP_EXAMPLES = """\
  crmctl lookup org-types
  crmctl lookup add-org-type Cooperative
  crmctl lookup interaction-types
  crmctl lookup remove-interaction-type 7"""


@click.group(cls=CrmGroup, examples=_LOOKUP_EXAMPLES)
def lookup() -> None:
    """Manage org types and interaction types."""


@lookup.command("org-types")
@click.pass_obj
def org_types(app: AppContext) -> None:
    """List org types and how many organizations use each."""
    app.emit(LookupService(app.store).list_org_types())


@lookup.command("interaction-types")
@click.pass_obj
def interaction_types(app: AppContext) -> None:
    """List interaction types and how many interactions use each."""
    app.emit(LookupService(app.store).list_interaction_types())


@lookup.command("add-org-type", examples="  crmctl lookup add-org-type Cooperative")
@click.argument("name")
@click.pass_obj
def add_org_type(app: AppContext, name: str) -> None:
    """Add an org type."""
    app.emit(LookupService(app.store).create_org_type(name))


@lookup.command(
    "add-interaction-type", examples='  crmctl lookup add-interaction-type "Video call"'
)
@click.argument("name")
@click.pass_obj
def add_interaction_type(app: AppContext, name: str) -> None:
    """Add an interaction type."""
    app.emit(LookupService(app.store).create_interaction_type(name))


@lookup.command("remove-org-type")
@click.argument("lookup_id", type=int)
@click.pass_obj
def remove_org_type(app: AppContext, lookup_id: int) -> None:
    """Remove an org type (refused while organizations use it)."""
    app.emit(LookupService(app.store).delete_org_type(lookup_id))


@lookup.command("remove-interaction-type")
@click.argument("lookup_id", type=int)
@click.pass_obj
def remove_interaction_type(app: AppContext, lookup_id: int) -> None:
    """Remove an interaction type (refused while interactions use it)."""
    app.emit(LookupService(app.store).delete_interaction_type(lookup_id))
