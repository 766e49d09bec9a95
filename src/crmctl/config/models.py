"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, crmctl.toml only contains
overrides. A fresh data directory needs no config file at all.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, model_validator

# --- crmctl.toml sections ---


class DatabaseConfig(BaseModel):
    """[database] section."""

    model_config = {"frozen": True}

    # Relative paths resolve against the data root.
    path: Path | None = None
    backup_max_count: int = Field(default=10, ge=1)
    # Route every SQL statement through the log at INFO.
    log_sql: bool = False


class DashboardConfig(BaseModel):
    """[dashboard] section."""

    model_config = {"frozen": True}

    upcoming_window_days: int = Field(default=14, ge=0, le=365)
    recent_limit: int = Field(default=10, ge=0, le=100)


class PaginationConfig(BaseModel):
    """[pagination] section."""

    model_config = {"frozen": True}

    default_page_size: int = Field(default=25, ge=1)
    max_page_size: int = Field(default=100, ge=1)

    @model_validator(mode="after")
    def _default_within_max(self) -> PaginationConfig:
        if self.default_page_size > self.max_page_size:
            msg = "default_page_size cannot exceed max_page_size"
            raise ValueError(msg)
        return self


class SearchConfig(BaseModel):
    """[search] section."""

    model_config = {"frozen": True}

    default_limit: int = Field(default=10, ge=1)
    max_limit: int = Field(default=50, ge=1)

    @model_validator(mode="after")
    def _default_within_max(self) -> SearchConfig:
        if self.default_limit > self.max_limit:
            msg = "default_limit cannot exceed max_limit"
            raise ValueError(msg)
        return self
