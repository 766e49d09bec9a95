"""Alembic migration infrastructure for crmctl.

Provides programmatic Alembic configuration, so no alembic.ini is needed.
The migration scripts live alongside this module.
"""

from __future__ import annotations

from pathlib import Path

from alembic.config import Config


def db_url(db_path: Path) -> str:
    return f"sqlite:///{db_path}"


def build_config(url: str) -> Config:
    """Build an Alembic Config pointing at our migration scripts."""
    cfg = Config()
    cfg.set_main_option("script_location", str(Path(__file__).parent))
    cfg.set_main_option("sqlalchemy.url", url)
    return cfg

