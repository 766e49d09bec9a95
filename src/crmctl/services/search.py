"""SearchService: typeahead over people and organizations.

Matching is a case-insensitive substring ``LIKE`` with the user's ``%``
and ``_`` escaped. Prefix matches rank ahead of inner matches, then hits
sort by label.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from crmctl.domain.followup import display_name
from crmctl.domain.types import EntityKind
from crmctl.services._helpers import clamp_limit
from crmctl.services.base import BaseService
from crmctl.services.contracts import SearchResultData, dump_validated
from crmctl.services.result import ErrorCode, ServiceResult, failure
from crmctl.services.telemetry import traced

logger = logging.getLogger(__name__)


class SearchService(BaseService):
    """Global name search for the typeahead box."""

    @traced
    def typeahead(
        self,
        query: str,
        *,
        limit: int | None = None,
        kind: str | None = None,
    ) -> ServiceResult:
        """Return ``{id, label, type}`` hits for *query*.

        Args:
            query: Text typed so far. Blank input yields no hits.
            limit: Maximum hits (default ``search.default_limit``, capped
                at ``search.max_limit``).
            kind: Restrict to ``"person"`` or ``"organization"``.
        """
        op = "search"
        cfg = self._store.settings.search
        text = (query or "").strip()
        capped = clamp_limit(limit, default=cfg.default_limit, maximum=cfg.max_limit)

        kinds = set(EntityKind)
        if kind:
            try:
                kinds = {EntityKind(kind.lower())}
            except ValueError:
                return failure(
                    op,
                    ErrorCode.VALIDATION_FAILED,
                    f"kind must be one of {[k.value for k in EntityKind]}, got {kind!r}",
                )

        if not text:
            return ServiceResult(
                ok=True,
                op=op,
                data=dump_validated(SearchResultData, {"query": text, "count": 0, "items": []}),
            )

        ranked: list[tuple[int, str, dict[str, Any]]] = []
        try:
            if EntityKind.PERSON in kinds:
                for row in self._queries.typeahead_people(text, limit=capped):
                    label = display_name(row["first_name"], row["last_name"], row["middle_name"])
                    ranked.append(
                        (row["rank"], label, {"id": row["id"], "label": label, "type": "person"})
                    )
            if EntityKind.ORGANIZATION in kinds:
                for row in self._queries.typeahead_organizations(text, limit=capped):
                    ranked.append(
                        (
                            row["rank"],
                            row["name"],
                            {"id": row["id"], "label": row["name"], "type": "organization"},
                        )
                    )
        except SQLAlchemyError as exc:
            return self._storage(op, exc)

        ranked.sort(key=lambda hit: (hit[0], hit[1].lower(), hit[2]["type"], hit[2]["id"]))
        items = [hit[2] for hit in ranked[:capped]]
        logger.debug("Typeahead %r: %d hits", text, len(items))
        return ServiceResult(
            ok=True,
            op=op,
            data=dump_validated(
                SearchResultData, {"query": text, "count": len(items), "items": items}
            ),
        )
