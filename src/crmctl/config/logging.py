"""structlog configuration for crmctl.

Two output modes:
- Human (default): colored console output to stderr
- JSON (--log-json): Structured JSON lines to stderr

Every record is tagged with a ``component`` derived from its logger name,
so service, bridge, SQL, and migration lines can be told apart (or filtered
with ``jq``) without parsing dotted logger paths.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

# Checked in order, most specific prefix first.
_COMPONENTS: tuple[tuple[str, str], ...] = (
    ("crmctl.infrastructure.database", "db"),
    ("crmctl.infrastructure", "store"),
    ("crmctl.services", "services"),
    ("crmctl.bridge", "bridge"),
    ("crmctl.commands", "commands"),
    ("crmctl.config", "config"),
    ("crmctl", "crmctl"),
    ("sqlalchemy", "sql"),
    ("alembic", "migrations"),
)


def component_for(logger_name: str | None) -> str:
    """Map a dotted logger name to its crmctl component.

    Examples:
        >>> component_for("crmctl.services.people")
        'services'
        >>> component_for("alembic.runtime.migration")
        'migrations'
    """
    if not logger_name:
        return "other"
    for prefix, component in _COMPONENTS:
        if logger_name == prefix or logger_name.startswith(prefix + "."):
            return component
    return "other"


def _add_component(
    _logger: Any, _method: str, event_dict: structlog.types.EventDict
) -> structlog.types.EventDict:
    event_dict.setdefault("component", component_for(event_dict.get("logger")))
    return event_dict


def configure_logging(
    *,
    verbose: bool = False,
    log_json: bool = False,
    log_sql: bool = False,
) -> None:
    """Configure structlog processors and output routing.

    Args:
        verbose: Enable DEBUG-level output for crmctl. When False, only WARNING+.
        log_json: Use JSON renderer instead of console renderer.
        log_sql: Emit every SQL statement (``sqlalchemy.engine`` at INFO).
    """
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        _add_component,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if log_json:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.WARNING)

    levels = {
        "crmctl": logging.DEBUG if verbose else logging.WARNING,
        # Alembic logs each revision step at INFO during init and upgrade.
        "alembic": logging.WARNING,
        "sqlalchemy.engine": logging.INFO if log_sql else logging.WARNING,
    }
    for name, level in levels.items():
        logging.getLogger(name).setLevel(level)
