"""Request bridge: dispatch named operations with small payload dicts.

An embedding shell (desktop UI, script, ``crmctl invoke``) calls
:func:`dispatch` with an operation name and a payload; it always gets back
a plain dict: ``{"ok", "op", "data", "warnings"?, "error"?}``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from crmctl.bridge.operations import OPERATIONS, to_response
from crmctl.domain.models import validation_message
from crmctl.services.result import failure

if TYPE_CHECKING:
    from crmctl.infrastructure.store import Store

logger = logging.getLogger(__name__)

UNKNOWN_OPERATION = "UNKNOWN_OPERATION"
INVALID_ARGUMENTS = "INVALID_ARGUMENTS"


def operation_names() -> list[str]:
    """Every dispatchable operation name, sorted."""
    return sorted(OPERATIONS)


def dispatch(store: Store, name: str, payload: dict[str, Any] | None = None) -> dict[str, Any]:
    """Run operation *name* with *payload* keys as keyword arguments."""
    impl = OPERATIONS.get(name)
    if impl is None:
        return to_response(
            failure(
                name,
                UNKNOWN_OPERATION,
                f"Unknown operation: {name}",
                detail={"available": operation_names()},
            )
        )

    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        return to_response(failure(name, INVALID_ARGUMENTS, "Payload must be a JSON object"))

    logger.debug("Dispatching %s with keys %s", name, sorted(payload))
    try:
        return impl(store, **payload)
    except ValidationError as exc:
        return to_response(
            failure(
                name,
                INVALID_ARGUMENTS,
                validation_message(exc),
                detail={
                    "errors": exc.errors(
                        include_url=False, include_context=False, include_input=False
                    )
                },
            )
        )


__all__ = ["INVALID_ARGUMENTS", "UNKNOWN_OPERATION", "dispatch", "operation_names"]
