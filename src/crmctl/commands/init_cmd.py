"""Command: database initialization (named init_cmd to avoid shadowing builtins)."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from crmctl.commands._base import CrmCommand

if TYPE_CHECKING:
    from crmctl.commands._context import AppContext

_INIT_EXAMPLES = """\
  crmctl init
  crmctl init --write-config
  crmctl -c ~/crm/crmctl.toml init"""


@click.command("init", cls=CrmCommand, examples=_INIT_EXAMPLES)
@click.option(
    "--write-config",
    is_flag=True,
    help="Also write a crmctl.toml with the defaults into the data root.",
)
@click.pass_obj
def init_cmd(app: AppContext, write_config: bool) -> None:
    """Create the database, seed lookups, and stamp the schema version."""
    from crmctl.services.upgrade import UpgradeService

    config_file = None
    if write_config:
        from crmctl.config.discovery import write_default_config

        config_file = write_default_config(app.settings.data_root)

    result = UpgradeService(app.store).stamp_current()
    if result.ok:
        data = {**result.data, "db_path": str(app.store.db_path)}
        if config_file is not None:
            data["config_path"] = str(config_file)
        result = result.model_copy(update={"op": "init", "data": data})
    app.emit(result)
