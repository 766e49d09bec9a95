"""Tests for follow-up classification and ordering."""

from __future__ import annotations

from datetime import date, timedelta

from crmctl.domain.followup import (
    FollowUpCandidate,
    FollowUpState,
    display_name,
    evaluate,
    is_overdue,
    partition_follow_ups,
)

TODAY = date(2026, 3, 1)


def _candidate(
    person_id: int,
    cadence: int,
    days_ago: int | None,
    *,
    first: str = "Jane",
    last: str = "Doe",
) -> FollowUpCandidate:
    latest = None if days_ago is None else TODAY - timedelta(days=days_ago)
    return FollowUpCandidate(
        person_id=person_id,
        first_name=first,
        last_name=last,
        cadence_days=cadence,
        latest_interaction_date=latest,
    )


class TestDisplayName:
    def test_two_parts(self) -> None:
        assert display_name("Jane", "Doe") == "Jane Doe"

    def test_middle_name(self) -> None:
        assert display_name("Jane", "Doe", "Q") == "Jane Q Doe"

    def test_blank_middle_skipped(self) -> None:
        assert display_name("Jane", "Doe", "") == "Jane Doe"


class TestIsOverdue:
    def test_never_contacted(self) -> None:
        assert is_overdue(30, None, TODAY)

    def test_exactly_on_cadence_is_not_overdue(self) -> None:
        assert not is_overdue(30, TODAY - timedelta(days=30), TODAY)

    def test_one_day_past(self) -> None:
        assert is_overdue(30, TODAY - timedelta(days=31), TODAY)


class TestEvaluate:
    def test_overdue_by_fifteen(self) -> None:
        status = evaluate(_candidate(1, 30, 45), TODAY)
        assert status.state is FollowUpState.OVERDUE
        assert status.days_since == 45
        assert status.days_overdue == 15
        assert status.days_until_due is None
        assert status.due_date == TODAY - timedelta(days=15)

    def test_never_contacted_is_overdue(self) -> None:
        status = evaluate(_candidate(1, 30, None), TODAY)
        assert status.state is FollowUpState.OVERDUE
        assert status.never_contacted
        assert status.days_since is None
        assert status.days_overdue is None
        assert status.due_date is None

    def test_due_today_is_upcoming(self) -> None:
        status = evaluate(_candidate(1, 30, 30), TODAY)
        assert status.state is FollowUpState.UPCOMING
        assert status.days_until_due == 0

    def test_window_edge_is_upcoming(self) -> None:
        status = evaluate(_candidate(1, 30, 16), TODAY, window_days=14)
        assert status.state is FollowUpState.UPCOMING
        assert status.days_until_due == 14

    def test_outside_window_is_ok(self) -> None:
        status = evaluate(_candidate(1, 30, 15), TODAY, window_days=14)
        assert status.state is FollowUpState.OK
        assert status.days_until_due is None

    def test_zero_window(self) -> None:
        assert evaluate(_candidate(1, 30, 29), TODAY, window_days=0).state is FollowUpState.OK
        assert evaluate(_candidate(1, 30, 30), TODAY, window_days=0).state is FollowUpState.UPCOMING

    def test_to_dict(self) -> None:
        data = evaluate(_candidate(7, 30, 45), TODAY).to_dict()
        assert data["person_id"] == 7
        assert data["name"] == "Jane Doe"
        assert data["state"] == "overdue"
        assert data["latest_interaction_date"] == "2026-01-15"
        assert data["never_contacted"] is False


class TestPartition:
    def test_never_contacted_first_then_most_overdue(self) -> None:
        candidates = [
            _candidate(1, 10, 12, last="Alpha"),
            _candidate(2, 10, 40, last="Bravo"),
            _candidate(3, 10, None, last="Charlie"),
            _candidate(4, 10, 20, last="Delta"),
        ]
        overdue, upcoming = partition_follow_ups(candidates, TODAY)
        assert [f.candidate.person_id for f in overdue] == [3, 2, 4, 1]
        assert upcoming == []

    def test_upcoming_sorted_by_days_until_due(self) -> None:
        candidates = [
            _candidate(1, 30, 20, last="Alpha"),
            _candidate(2, 30, 29, last="Bravo"),
            _candidate(3, 30, 25, last="Charlie"),
        ]
        overdue, upcoming = partition_follow_ups(candidates, TODAY)
        assert overdue == []
        assert [f.days_until_due for f in upcoming] == [1, 5, 10]

    def test_ties_fall_back_to_name(self) -> None:
        candidates = [
            _candidate(1, 10, None, first="Zed", last="Smith"),
            _candidate(2, 10, None, first="Amy", last="Smith"),
            _candidate(3, 10, None, first="Bob", last="Adams"),
        ]
        overdue, _ = partition_follow_ups(candidates, TODAY)
        assert [f.candidate.person_id for f in overdue] == [3, 2, 1]

    def test_ok_people_excluded(self) -> None:
        overdue, upcoming = partition_follow_ups([_candidate(1, 365, 1)], TODAY)
        assert overdue == []
        assert upcoming == []
