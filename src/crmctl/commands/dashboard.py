"""Commands: dashboard and follow-ups."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

import click

from crmctl.commands._base import CrmCommand
from crmctl.services.dashboard import DashboardService

if TYPE_CHECKING:
    from crmctl.commands._context import AppContext


def _parse_today(value: str | None) -> date | None:
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        msg = f"Expected YYYY-MM-DD, got {value!r}"
        raise click.BadParameter(msg, param_hint="--today") from exc


@click.command(
    cls=CrmCommand,
    examples="""\
  crmctl dashboard
  crmctl dashboard --today 2026-12-01
  crmctl --json dashboard""",
)
@click.option("--today", "today_text", default=None, help="Evaluate as of YYYY-MM-DD.")
@click.pass_obj
def dashboard(app: AppContext, today_text: str | None) -> None:
    """Counts, overdue and upcoming follow-ups, and recent interactions."""
    app.emit(DashboardService(app.store).dashboard(_parse_today(today_text)))


@click.command(
    "follow-ups",
    cls=CrmCommand,
    examples="""\
  crmctl follow-ups
  crmctl -q follow-ups""",
)
@click.option("--today", "today_text", default=None, help="Evaluate as of YYYY-MM-DD.")
@click.pass_obj
def follow_ups(app: AppContext, today_text: str | None) -> None:
    """Only the overdue and upcoming follow-up lists."""
    app.emit(DashboardService(app.store).follow_ups(_parse_today(today_text)))
