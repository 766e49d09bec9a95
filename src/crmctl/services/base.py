"""BaseService: foundation for all crmctl services.

Every service receives a :class:`Store` at construction time. The Store
provides mutex-guarded access to the database and the relationship graph.
Services own their transaction boundaries via ``self._store.transaction()``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from crmctl.domain.models import validation_message
from crmctl.domain.paging import PageRequest, resolve_sort, total_pages, validate_page
from crmctl.infrastructure.repositories.query import QueryRepository
from crmctl.services._helpers import integrity_error_code
from crmctl.services.contracts import PageData, dump_validated
from crmctl.services.result import ErrorCode, ServiceResult, failure

if TYPE_CHECKING:
    from collections.abc import Callable

    from crmctl.domain.types import SortDirection
    from crmctl.infrastructure.store import Store

logger = logging.getLogger(__name__)


class BaseService:
    """Base for all service-layer classes.

    Subclasses implement entity operations using the store for all data
    access and the shared :class:`QueryRepository` for read-side SQL.

    Usage::

        class PersonService(BaseService):
            def create(self, payload) -> ServiceResult:
                with self._store.transaction() as conn:
                    ...
    """

    def __init__(self, store: Store) -> None:
        self._store = store
        self._queries = QueryRepository(store)

    # ------------------------------------------------------------------
    # Error mapping shared by every write path
    # ------------------------------------------------------------------

    @staticmethod
    def _invalid(op: str, exc: ValidationError) -> ServiceResult:
        return failure(
            op,
            ErrorCode.VALIDATION_FAILED,
            validation_message(exc),
            detail={
                "errors": exc.errors(
                    include_url=False, include_context=False, include_input=False
                )
            },
        )

    @staticmethod
    def _not_found(op: str, entity: str, entity_id: Any) -> ServiceResult:
        return failure(
            op,
            ErrorCode.NOT_FOUND,
            f"{entity.capitalize()} not found: {entity_id}",
            detail={"entity": entity, "id": entity_id},
        )

    @staticmethod
    def _integrity(
        op: str,
        exc: IntegrityError,
        *,
        messages: dict[str, str],
        code: ErrorCode | None = None,
    ) -> ServiceResult:
        """Map a constraint violation onto a domain error code.

        *messages* maps an :class:`ErrorCode` value to the user-facing text
        for this operation; unmapped codes fall back to the raw SQLite text.
        Deletes pass *code* explicitly since a RESTRICT violation reads the
        same as a dangling reference.
        """
        code = code or integrity_error_code(exc)
        raw = str(exc.orig) if exc.orig is not None else str(exc)
        logger.debug("Integrity error in %s: %s", op, raw)
        return failure(op, code, messages.get(code, raw), detail={"constraint": raw})

    @staticmethod
    def _storage(op: str, exc: SQLAlchemyError | OSError) -> ServiceResult:
        logger.exception("Storage failure in %s", op)
        return failure(op, ErrorCode.STORAGE_ERROR, f"Storage error: {exc}")

    # ------------------------------------------------------------------
    # Pagination shared by every list operation
    # ------------------------------------------------------------------

    def _paginate(
        self,
        op: str,
        *,
        page: int,
        page_size: int | None,
        sort_by: str | None,
        direction: str | None,
        allowed: frozenset[str],
        default_field: str,
        default_direction: SortDirection,
        count: Callable[[], int],
        fetch: Callable[[str, bool, int, int], list[dict[str, Any]]],
        shape: Callable[[dict[str, Any]], dict[str, Any]],
        item_model: type[Any],
    ) -> ServiceResult:
        """Validate paging, resolve sort, and assemble a :class:`PageData` result.

        *fetch* receives ``(sort_field, descending, limit, offset)``.
        """
        pagination = self._store.settings.pagination
        size = pagination.default_page_size if page_size is None else page_size
        problems = validate_page(page, size, max_page_size=pagination.max_page_size)
        if problems:
            return failure(
                op,
                ErrorCode.VALIDATION_FAILED,
                "; ".join(problems),
                detail={"page": page, "page_size": size},
            )

        request = PageRequest(page=page, page_size=size)
        sort = resolve_sort(
            sort_by,
            direction,
            allowed=allowed,
            default_field=default_field,
            default_direction=default_direction,
        )
        for warning in sort.warnings:
            logger.info("%s: %s", op, warning)

        try:
            total = count()
            rows = fetch(sort.field, sort.descending, request.page_size, request.offset)
        except SQLAlchemyError as exc:
            return self._storage(op, exc)

        items = [dump_validated(item_model, shape(row)) for row in rows]
        data = dump_validated(
            PageData,
            {
                "items": items,
                "page": request.page,
                "page_size": request.page_size,
                "total": total,
                "total_pages": total_pages(total, request.page_size),
                "sort_by": sort.field,
                "sort_direction": sort.direction.value,
            },
        )
        return ServiceResult(ok=True, op=op, data=data, warnings=list(sort.warnings))
