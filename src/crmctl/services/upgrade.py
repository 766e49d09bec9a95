"""UpgradeService: database migration with Alembic.

Pipeline: BACKUP → MIGRATE → VALIDATE → REPORT
"""

from __future__ import annotations

import logging
import shutil
from typing import TYPE_CHECKING, Any

from alembic import command
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from alembic.util import CommandError
from sqlalchemy import inspect, text
from sqlalchemy.exc import SQLAlchemyError

from crmctl.infrastructure.database.migrations import build_config, db_url
from crmctl.services._helpers import now_compact
from crmctl.services.base import BaseService
from crmctl.services.result import ServiceResult, failure
from crmctl.services.telemetry import traced

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

BACKUP_PREFIX = "crmctl-"


class UpgradeService(BaseService):
    """Handles database schema migrations via Alembic."""

    def _db_url(self) -> str:
        return db_url(self._store.db_path)

    def _tables_exist(self) -> bool:
        """Check if core tables exist (databases created before version tracking)."""
        return "person" in inspect(self._store.engine).get_table_names()

    def _backup_db(self) -> Path:
        """Checkpoint the WAL and copy the database file to ``backups/``."""
        db_path = self._store.db_path
        backup_dir = db_path.parent / "backups"
        backup_dir.mkdir(parents=True, exist_ok=True)

        with self._store.connect() as conn:
            conn.execute(text("PRAGMA wal_checkpoint(TRUNCATE)"))

        backup_path = backup_dir / f"{BACKUP_PREFIX}{now_compact()}.db"
        shutil.copy2(str(db_path), str(backup_path))
        self._prune_backups(backup_dir)
        logger.info("Backed up database to %s", backup_path)
        return backup_path

    def _prune_backups(self, backup_dir: Path) -> None:
        """Keep only the newest ``database.backup_max_count`` backups."""
        keep = self._store.settings.database.backup_max_count
        backups = sorted(backup_dir.glob(f"{BACKUP_PREFIX}*.db"))
        if len(backups) > keep:
            for old in backups[: len(backups) - keep]:
                old.unlink(missing_ok=True)

    @traced
    def check_pending(self) -> ServiceResult:
        """List pending migrations without applying."""
        op = "upgrade_check"

        try:
            cfg = build_config(self._db_url())
            script = ScriptDirectory.from_config(cfg)
            head = script.get_current_head()

            with self._store.connect() as conn:
                ctx = MigrationContext.configure(conn)
                current = ctx.get_current_revision()

            # Walk from head down to current
            pending: list[dict[str, Any]] = []
            if current != head and head is not None:
                rev_obj = script.get_revision(head)
                while rev_obj is not None and rev_obj.revision != current:
                    pending.append(
                        {
                            "revision": rev_obj.revision,
                            "description": (rev_obj.doc or "").strip(),
                        }
                    )
                    down = rev_obj.down_revision
                    if down is None:
                        break
                    rev_obj = script.get_revision(str(down))
        except CommandError as exc:
            return failure(op, "CHECK_FAILED", f"Failed to check migrations: {exc}")
        except SQLAlchemyError as exc:
            return self._storage(op, exc)

        return ServiceResult(
            ok=True,
            op=op,
            data={
                "pending_count": len(pending),
                "pending": pending,
                "current": current,
                "head": head,
            },
        )

    @traced
    def apply(self) -> ServiceResult:
        """BACKUP → MIGRATE → VALIDATE → REPORT pipeline."""
        op = "upgrade"
        warnings: list[str] = []

        check_result = self.check_pending()
        if not check_result.ok:
            return check_result.model_copy(update={"op": op})

        pending_count = check_result.data["pending_count"]
        if pending_count == 0:
            return ServiceResult(
                ok=True,
                op=op,
                data={
                    "applied_count": 0,
                    "current": check_result.data["head"],
                    "message": "Database is already up to date",
                },
            )

        # BACKUP
        try:
            backup_path = self._backup_db()
        except (OSError, SQLAlchemyError) as exc:
            return failure(op, "BACKUP_FAILED", f"Backup failed: {exc}")

        # MIGRATE (or STAMP when the tables already exist without version tracking)
        try:
            cfg = build_config(self._db_url())
            if check_result.data.get("current") is None and self._tables_exist():
                command.stamp(cfg, "head")
            else:
                command.upgrade(cfg, "head")
        except (CommandError, SQLAlchemyError) as exc:
            return failure(
                op,
                "MIGRATION_FAILED",
                f"Migration failed: {exc}. Backup at: {backup_path}",
                detail={"backup_path": str(backup_path)},
            )

        # VALIDATE
        with self._store.connect() as conn:
            integrity = conn.execute(text("PRAGMA integrity_check")).scalar()
            dangling = conn.execute(text("PRAGMA foreign_key_check")).fetchall()
        if integrity != "ok":
            warnings.append(f"Post-migration integrity check reported: {integrity}")
        if dangling:
            warnings.append(f"Post-migration foreign key check found {len(dangling)} rows")

        return ServiceResult(
            ok=True,
            op=op,
            data={
                "applied_count": pending_count,
                "current": check_result.data["head"],
                "backup_path": str(backup_path),
            },
            warnings=warnings,
        )

    @traced
    def stamp_current(self) -> ServiceResult:
        """Stamp DB as at current head (for freshly created DBs)."""
        op = "upgrade_stamp"

        try:
            cfg = build_config(self._db_url())
            command.stamp(cfg, "head")
            head = ScriptDirectory.from_config(cfg).get_current_head()
        except (CommandError, SQLAlchemyError) as exc:
            return failure(op, "STAMP_FAILED", f"Failed to stamp database: {exc}")

        return ServiceResult(ok=True, op=op, data={"stamped": True, "current": head})
