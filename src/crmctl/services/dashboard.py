"""DashboardService: follow-ups, entity counts, and recent activity.

Follow-up status is never stored. Each call reads every person with a
cadence plus their latest interaction date (one grouped LEFT JOIN) and
classifies them in :mod:`crmctl.domain.followup`.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy.exc import SQLAlchemyError

from crmctl.domain.followup import partition_follow_ups
from crmctl.services._helpers import follow_up_candidate, local_today
from crmctl.services.base import BaseService
from crmctl.services.contracts import DashboardData, FollowUpsData, dump_validated
from crmctl.services.interactions import interaction_record
from crmctl.services.result import ServiceResult
from crmctl.services.telemetry import trace_span, traced

if TYPE_CHECKING:
    from datetime import date

logger = logging.getLogger(__name__)


class DashboardService(BaseService):
    """Read-only summary views."""

    def _follow_up_payload(self, today: date) -> dict[str, Any]:
        window = self._store.settings.dashboard.upcoming_window_days
        with trace_span("follow_up_candidates") as span:
            rows = self._queries.follow_up_rows()
            if span:
                span.annotate("candidates", len(rows))

        overdue, upcoming = partition_follow_ups(
            [follow_up_candidate(r) for r in rows], today, window_days=window
        )
        return {
            "today": today.isoformat(),
            "upcoming_window_days": window,
            "overdue": [f.to_dict() for f in overdue],
            "upcoming": [f.to_dict() for f in upcoming],
        }

    @traced
    def follow_ups(self, today: date | None = None) -> ServiceResult:
        """Overdue and upcoming follow-ups as of *today* (default: local date)."""
        op = "follow_ups"
        try:
            payload = self._follow_up_payload(today or local_today())
        except SQLAlchemyError as exc:
            return self._storage(op, exc)
        return ServiceResult(ok=True, op=op, data=dump_validated(FollowUpsData, payload))

    @traced
    def dashboard(self, today: date | None = None) -> ServiceResult:
        """Counts, follow-ups, and the most recent interactions."""
        op = "dashboard"
        recent_limit = self._store.settings.dashboard.recent_limit
        try:
            payload = self._follow_up_payload(today or local_today())
            payload["counts"] = self._queries.entity_counts()
            payload["recent_interactions"] = [
                interaction_record(r) for r in self._queries.recent_interactions(recent_limit)
            ]
        except SQLAlchemyError as exc:
            return self._storage(op, exc)

        logger.debug(
            "Dashboard: %d overdue, %d upcoming",
            len(payload["overdue"]),
            len(payload["upcoming"]),
        )
        return ServiceResult(ok=True, op=op, data=dump_validated(DashboardData, payload))
