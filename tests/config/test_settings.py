"""Tests for settings resolution, config discovery, and section models."""

from __future__ import annotations

from pathlib import Path

import click
import pytest
from pydantic import ValidationError

from crmctl.config.discovery import CONFIG_FILENAME, find_config, write_default_config
from crmctl.config.models import DashboardConfig, PaginationConfig, SearchConfig
from crmctl.config.settings import CrmSettings


class TestSectionModels:
    def test_defaults(self) -> None:
        assert DashboardConfig().upcoming_window_days == 14
        assert PaginationConfig().default_page_size == 25
        assert SearchConfig().max_limit == 50

    def test_default_page_size_over_max(self) -> None:
        with pytest.raises(ValidationError):
            PaginationConfig(default_page_size=200, max_page_size=100)

    def test_search_default_over_max(self) -> None:
        with pytest.raises(ValidationError):
            SearchConfig(default_limit=60, max_limit=50)

    def test_window_bounds(self) -> None:
        with pytest.raises(ValidationError):
            DashboardConfig(upcoming_window_days=-1)


class TestDiscovery:
    def test_walks_up(self, tmp_path: Path) -> None:
        (tmp_path / CONFIG_FILENAME).write_text("")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        assert find_config(nested) == tmp_path / CONFIG_FILENAME

    def test_env_var_wins(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        other = tmp_path / "elsewhere.toml"
        other.write_text("")
        monkeypatch.setenv("CRMCTL_CONFIG", str(other))
        assert find_config(tmp_path) == other

    def test_write_default_config_is_loadable(self, tmp_path: Path) -> None:
        path = write_default_config(tmp_path)
        settings = CrmSettings.from_cli(config_path=str(path))
        assert settings.dashboard.upcoming_window_days == 14
        assert settings.database.backup_max_count == 10

    def test_write_default_config_keeps_existing(self, tmp_path: Path) -> None:
        (tmp_path / CONFIG_FILENAME).write_text("[search]\ndefault_limit = 3\n")
        write_default_config(tmp_path)
        assert "default_limit = 3" in (tmp_path / CONFIG_FILENAME).read_text()


class TestCrmSettings:
    def test_default_db_path(self, tmp_path: Path) -> None:
        settings = CrmSettings.from_cli(data_root=tmp_path)
        assert settings.db_path == tmp_path / ".crmctl" / "crmctl.db"

    def test_toml_sections(self, tmp_path: Path) -> None:
        (tmp_path / CONFIG_FILENAME).write_text(
            '[database]\npath = "data/my.db"\n\n[dashboard]\nupcoming_window_days = 7\n'
        )
        settings = CrmSettings.from_cli(data_root=tmp_path)
        assert settings.config_path == tmp_path / CONFIG_FILENAME
        assert settings.dashboard.upcoming_window_days == 7
        assert settings.db_path == tmp_path / "data" / "my.db"

    def test_data_root_from_config_location(self, tmp_path: Path) -> None:
        (tmp_path / CONFIG_FILENAME).write_text("")
        settings = CrmSettings.from_cli(config_path=str(tmp_path / CONFIG_FILENAME))
        assert settings.data_root == tmp_path

    def test_env_overrides_toml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / CONFIG_FILENAME).write_text("[search]\ndefault_limit = 5\n")
        monkeypatch.setenv("CRMCTL_SEARCH__DEFAULT_LIMIT", "8")
        settings = CrmSettings.from_cli(data_root=tmp_path)
        assert settings.search.default_limit == 8

    def test_log_sql_from_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        assert CrmSettings.from_cli(data_root=tmp_path).database.log_sql is False
        monkeypatch.setenv("CRMCTL_DATABASE__LOG_SQL", "true")
        assert CrmSettings.from_cli(data_root=tmp_path).database.log_sql is True

    def test_cli_flags_win(self, tmp_path: Path) -> None:
        settings = CrmSettings.from_cli(data_root=tmp_path, json_output=True, quiet=True)
        assert settings.json_output
        assert settings.quiet

    def test_invalid_toml(self, tmp_path: Path) -> None:
        (tmp_path / CONFIG_FILENAME).write_text("[dashboard\n")
        with pytest.raises(click.ClickException, match="Invalid TOML"):
            CrmSettings.from_cli(data_root=tmp_path)

    def test_frozen(self, tmp_path: Path) -> None:
        settings = CrmSettings.from_cli(data_root=tmp_path)
        with pytest.raises(ValidationError):
            settings.quiet = True  # type: ignore[misc]
