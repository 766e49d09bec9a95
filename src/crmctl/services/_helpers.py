"""Shared service-layer helper functions."""

from __future__ import annotations

from datetime import UTC, date, datetime
from typing import TYPE_CHECKING, Any

from crmctl.domain.followup import FollowUpCandidate
from crmctl.services.result import ErrorCode

if TYPE_CHECKING:
    from sqlalchemy.exc import IntegrityError


def local_today() -> date:
    """Today's local date (follow-ups are computed in the user's calendar)."""
    return date.today()


def now_iso() -> str:
    """Current UTC time as standard ISO 8601 (created_at / updated_at)."""
    return datetime.now(UTC).isoformat()


def now_compact() -> str:
    """Current UTC time as compact ISO (YYYYMMDDTHHmmss, for backup filenames)."""
    return datetime.now(UTC).strftime("%Y%m%dT%H%M%S")


def integrity_error_code(exc: IntegrityError) -> ErrorCode:
    """Classify a SQLite ``IntegrityError`` by its message.

    Examples:
        UNIQUE constraint failed -> DUPLICATE
        FOREIGN KEY constraint failed -> INVALID_REFERENCE (insert/update)
        CHECK constraint failed / NOT NULL -> VALIDATION_FAILED
    """
    text = str(exc.orig if exc.orig is not None else exc).upper()
    if "UNIQUE" in text:
        return ErrorCode.DUPLICATE
    if "FOREIGN KEY" in text:
        return ErrorCode.INVALID_REFERENCE
    return ErrorCode.VALIDATION_FAILED


def clamp_limit(limit: int | None, *, default: int, maximum: int) -> int:
    """Resolve an optional caller limit into ``1..maximum``.

    Examples:
        >>> clamp_limit(None, default=10, maximum=50)
        10
        >>> clamp_limit(500, default=10, maximum=50)
        50
    """
    if limit is None:
        return default
    return max(1, min(limit, maximum))


def parse_day(value: str | date | None) -> date | None:
    """Coerce a stored ``YYYY-MM-DD`` column value into a date."""
    if value is None or isinstance(value, date):
        return value
    return date.fromisoformat(value[:10])


def follow_up_candidate(row: dict[str, Any]) -> FollowUpCandidate:
    """Build a follow-up candidate from a person row with a cadence."""
    return FollowUpCandidate(
        person_id=row["id"],
        first_name=row["first_name"],
        middle_name=row.get("middle_name"),
        last_name=row["last_name"],
        cadence_days=row["follow_up_cadence_days"],
        latest_interaction_date=parse_day(row.get("latest_interaction_date")),
    )
