"""Tests for structlog configuration."""

from __future__ import annotations

import json
import logging

import pytest

from crmctl.config.logging import component_for, configure_logging


@pytest.fixture(autouse=True)
def _restore_root_logger() -> None:
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    named = {n: logging.getLogger(n).level for n in ("crmctl", "alembic", "sqlalchemy.engine")}
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    for name, saved in named.items():
        logging.getLogger(name).setLevel(saved)


class TestConfigureLogging:
    def test_quiet_by_default(self) -> None:
        configure_logging()
        assert logging.getLogger("crmctl").level == logging.WARNING

    def test_verbose_enables_debug(self) -> None:
        configure_logging(verbose=True)
        assert logging.getLogger("crmctl").level == logging.DEBUG

    def test_library_loggers_stay_at_warning(self) -> None:
        configure_logging(verbose=True)
        assert logging.getLogger("alembic").level == logging.WARNING
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING

    def test_json_renderer(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(log_json=True)
        logging.getLogger("crmctl.test").warning("hello %s", "world")
        err = capsys.readouterr().err
        assert '"event": "hello world"' in err

    def test_log_sql_raises_engine_logger(self) -> None:
        configure_logging(log_sql=True)
        assert logging.getLogger("sqlalchemy.engine").level == logging.INFO
        configure_logging()
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING

    def test_records_carry_component(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(log_json=True)
        logging.getLogger("crmctl.services.people").warning("slow")
        logging.getLogger("alembic.runtime.migration").warning("stamped")
        lines = [json.loads(line) for line in capsys.readouterr().err.splitlines()]
        assert [line["component"] for line in lines] == ["services", "migrations"]


class TestComponentFor:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("crmctl.infrastructure.database.engine", "db"),
            ("crmctl.infrastructure.store", "store"),
            ("crmctl.bridge.operations", "bridge"),
            ("crmctl", "crmctl"),
            ("sqlalchemy.engine.Engine", "sql"),
            ("crmctlx", "other"),
            (None, "other"),
        ],
    )
    def test_mapping(self, name: str | None, expected: str) -> None:
        assert component_for(name) == expected
