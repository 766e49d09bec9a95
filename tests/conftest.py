"""Shared pytest fixtures and test helpers for crmctl tests."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner
from sqlalchemy.engine import Engine

from crmctl.config.settings import CrmSettings
from crmctl.infrastructure.database.engine import init_database
from crmctl.infrastructure.store import Store


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's CRMCTL_* variables out of every test."""
    for key in list(os.environ):
        if key.startswith("CRMCTL_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def _reset_telemetry() -> None:
    """``-v`` turns telemetry on for the process; switch it back off."""
    from crmctl.services.telemetry import disable_telemetry

    yield
    disable_telemetry()


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def db_engine(tmp_path: Path) -> Engine:
    """Initialized SQLite engine with all tables created and lookups seeded."""
    engine = init_database(tmp_path / "crm.db")
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def settings(tmp_path: Path) -> CrmSettings:
    return CrmSettings.from_cli(data_root=tmp_path)


@pytest.fixture
def store(settings: CrmSettings) -> Store:
    """Store over a fresh database in a temp directory."""
    s = Store(settings)
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def _isolated_store(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to a temp directory so the CLI creates an isolated database.

    Use via ``@pytest.mark.usefixtures("_isolated_store")`` on command test
    classes.
    """
    monkeypatch.chdir(tmp_path)


# ---------------------------------------------------------------------------
# Shared test helpers (used across service test modules)
# ---------------------------------------------------------------------------


def lookup_id(store: Store, kind: str, name: str) -> int:
    """Id of a seeded lookup value (``kind`` is ``org_type`` or ``interaction_type``)."""
    from crmctl.services.lookups import LookupService

    svc = LookupService(store)
    result = svc.list_org_types() if kind == "org_type" else svc.list_interaction_types()
    assert result.ok, result.error
    for item in result.data["items"]:
        if item["name"] == name:
            return item["id"]
    msg = f"No {kind} named {name!r}"
    raise AssertionError(msg)


def make_person(store: Store, first: str, last: str, **kwargs: Any) -> dict[str, Any]:
    """Create a person via PersonService, asserting success."""
    from crmctl.services.people import PersonService

    result = PersonService(store).create({"first_name": first, "last_name": last, **kwargs})
    assert result.ok, result.error
    return result.data


def make_organization(
    store: Store, name: str, org_type: str = "Company", **kwargs: Any
) -> dict[str, Any]:
    """Create an organization via OrganizationService, asserting success."""
    from crmctl.services.organizations import OrganizationService

    payload = {"name": name, "org_type_id": lookup_id(store, "org_type", org_type), **kwargs}
    result = OrganizationService(store).create(payload)
    assert result.ok, result.error
    return result.data


def log_interaction(
    store: Store,
    person_id: int,
    interaction_date: str,
    interaction_type: str = "Meeting",
    **kwargs: Any,
) -> dict[str, Any]:
    """Log an interaction via InteractionService, asserting success."""
    from crmctl.services.interactions import InteractionService

    payload = {
        "person_id": person_id,
        "interaction_type_id": lookup_id(store, "interaction_type", interaction_type),
        "interaction_date": interaction_date,
        **kwargs,
    }
    result = InteractionService(store).create(payload)
    assert result.ok, result.error
    return result.data
