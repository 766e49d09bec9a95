"""Follow-up scheduling rules.

A person with a follow-up cadence of ``C`` days is *overdue* when more than
``C`` days have passed since the latest interaction, and *upcoming* when the
due date (``latest + C``) falls inside ``[today, today + window]``. A person
with a cadence and no interactions at all is always overdue.

Everything here is pure date arithmetic; the caller supplies ``today``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from enum import StrEnum
from typing import Any


class FollowUpState(StrEnum):
    """Where a person sits relative to their follow-up due date."""

    OVERDUE = "overdue"
    UPCOMING = "upcoming"
    OK = "ok"


@dataclass(frozen=True)
class FollowUpCandidate:
    """A person with a cadence, plus the date of their latest interaction."""

    person_id: int
    first_name: str
    last_name: str
    cadence_days: int
    latest_interaction_date: date | None = None
    middle_name: str | None = None

    @property
    def display_name(self) -> str:
        return display_name(self.first_name, self.last_name, self.middle_name)


@dataclass(frozen=True)
class FollowUp:
    """Evaluated follow-up status for one person."""

    candidate: FollowUpCandidate
    state: FollowUpState
    days_since: int | None
    due_date: date | None
    days_overdue: int | None
    days_until_due: int | None

    @property
    def never_contacted(self) -> bool:
        return self.candidate.latest_interaction_date is None

    def to_dict(self) -> dict[str, Any]:
        latest = self.candidate.latest_interaction_date
        return {
            "person_id": self.candidate.person_id,
            "name": self.candidate.display_name,
            "follow_up_cadence_days": self.candidate.cadence_days,
            "latest_interaction_date": latest.isoformat() if latest else None,
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "days_since": self.days_since,
            "days_overdue": self.days_overdue,
            "days_until_due": self.days_until_due,
            "never_contacted": self.never_contacted,
            "state": self.state.value,
        }


def display_name(first_name: str, last_name: str, middle_name: str | None = None) -> str:
    """Join name parts into a display label, skipping a blank middle name."""
    parts = [first_name, middle_name, last_name]
    return " ".join(p for p in parts if p)


def is_overdue(cadence_days: int, latest: date | None, today: date) -> bool:
    """True when ``today - latest > cadence_days`` (or there is no latest)."""
    if latest is None:
        return True
    return (today - latest).days > cadence_days


def evaluate(candidate: FollowUpCandidate, today: date, *, window_days: int = 14) -> FollowUp:
    """Classify one candidate as overdue, upcoming, or ok.

    ``days_until_due`` is only set for upcoming people, ``days_overdue``
    only for overdue people that have at least one interaction.
    """
    latest = candidate.latest_interaction_date
    cadence = candidate.cadence_days

    if latest is None:
        return FollowUp(
            candidate=candidate,
            state=FollowUpState.OVERDUE,
            days_since=None,
            due_date=None,
            days_overdue=None,
            days_until_due=None,
        )

    days_since = (today - latest).days
    due = latest + timedelta(days=cadence)

    if days_since > cadence:
        return FollowUp(
            candidate=candidate,
            state=FollowUpState.OVERDUE,
            days_since=days_since,
            due_date=due,
            days_overdue=days_since - cadence,
            days_until_due=None,
        )

    until_due = cadence - days_since
    state = FollowUpState.UPCOMING if until_due <= window_days else FollowUpState.OK
    return FollowUp(
        candidate=candidate,
        state=state,
        days_since=days_since,
        due_date=due,
        days_overdue=None,
        days_until_due=until_due if state is FollowUpState.UPCOMING else None,
    )


def _name_key(f: FollowUp) -> tuple[str, str, int]:
    c = f.candidate
    return (c.last_name.lower(), c.first_name.lower(), c.person_id)


def partition_follow_ups(
    candidates: list[FollowUpCandidate],
    today: date,
    *,
    window_days: int = 14,
) -> tuple[list[FollowUp], list[FollowUp]]:
    """Split candidates into sorted ``(overdue, upcoming)`` lists.

    Overdue: never-contacted first, then by ``days_overdue`` descending.
    Upcoming: by ``days_until_due`` ascending. Ties fall back to name order.
    """
    overdue: list[FollowUp] = []
    upcoming: list[FollowUp] = []
    for candidate in candidates:
        result = evaluate(candidate, today, window_days=window_days)
        if result.state is FollowUpState.OVERDUE:
            overdue.append(result)
        elif result.state is FollowUpState.UPCOMING:
            upcoming.append(result)

    overdue.sort(key=_name_key)
    overdue.sort(
        key=lambda f: (not f.never_contacted, -(f.days_overdue or 0)),
    )
    upcoming.sort(key=_name_key)
    upcoming.sort(key=lambda f: f.days_until_due or 0)
    return overdue, upcoming
