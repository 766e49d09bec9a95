"""Subcommand modules for crmctl.

Provides register_commands() which uses deferred imports to keep
``crmctl --help`` fast as the codebase grows.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all command groups and standalone commands on the root CLI group."""
    # --- Groups ---
    from crmctl.commands.graph import graph
    from crmctl.commands.interaction import interaction
    from crmctl.commands.lookup import lookup
    from crmctl.commands.org import org
    from crmctl.commands.person import person
    from crmctl.commands.relate import relate

    cli.add_command(person)
    cli.add_command(org)
    cli.add_command(interaction)
    cli.add_command(lookup)
    cli.add_command(relate)
    cli.add_command(graph)

    # --- Standalone commands ---
    from crmctl.commands.dashboard import dashboard, follow_ups
    from crmctl.commands.init_cmd import init_cmd
    from crmctl.commands.invoke import invoke
    from crmctl.commands.search import search
    from crmctl.commands.upgrade import upgrade

    cli.add_command(init_cmd)
    cli.add_command(upgrade)
    cli.add_command(dashboard)
    cli.add_command(follow_ups)
    cli.add_command(search)
    cli.add_command(invoke)
