"""Command group: relationship graph."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from crmctl.commands._base import CrmGroup
from crmctl.services.graph import MAX_NEIGHBORHOOD_DEPTH, GraphService

if TYPE_CHECKING:
    from crmctl.commands._context import AppContext

_GRAPH_EXAMPLES = """\
  crmctl graph network
  crmctl --json graph network
  crmctl graph neighborhood 1 --depth 2"""


@click.group(cls=CrmGroup, examples=_GRAPH_EXAMPLES)
def graph() -> None:
    """Inspect the network of people and organizations."""


@graph.command()
@click.pass_obj
def network(app: AppContext) -> None:
    """Every node and edge in the relationship graph."""
    app.emit(GraphService(app.store).network())


@graph.command(examples="  crmctl graph neighborhood 1 --depth 2")
@click.argument("person_id", type=int)
@click.option(
    "--depth",
    type=click.IntRange(1, MAX_NEIGHBORHOOD_DEPTH),
    default=1,
    help="Hops from the person.",
)
@click.pass_obj
def neighborhood(app: AppContext, person_id: int, depth: int) -> None:
    """The ego network around one person."""
    app.emit(GraphService(app.store).neighborhood(person_id, depth=depth))
