"""Pagination arithmetic and sort allow-list resolution.

Sort keys arrive from the caller as plain strings. They are only ever
looked up in an allow-list; anything unrecognized falls back to the
listing's default and is reported as a warning.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from crmctl.domain.types import SortDirection


@dataclass(frozen=True)
class PageRequest:
    """Validated 1-based page request."""

    page: int
    page_size: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


@dataclass(frozen=True)
class SortSpec:
    """Resolved sort field and direction, plus any fallback warnings."""

    field: str
    direction: SortDirection
    warnings: list[str] = field(default_factory=list)

    @property
    def descending(self) -> bool:
        return self.direction is SortDirection.DESC


def total_pages(total: int, page_size: int) -> int:
    """``ceil(total / page_size)``; zero rows means zero pages.

    Examples:
        >>> total_pages(0, 25)
        0
        >>> total_pages(26, 25)
        2
    """
    if page_size <= 0:
        msg = f"page_size must be positive, got {page_size}"
        raise ValueError(msg)
    return math.ceil(total / page_size)


def validate_page(page: int, page_size: int, *, max_page_size: int) -> list[str]:
    """Return validation errors for a page request (empty list when valid)."""
    errors: list[str] = []
    if page < 1:
        errors.append(f"page must be >= 1, got {page}")
    if page_size < 1 or page_size > max_page_size:
        errors.append(f"page_size must be between 1 and {max_page_size}, got {page_size}")
    return errors


def resolve_sort(
    sort_by: str | None,
    direction: str | None,
    *,
    allowed: frozenset[str],
    default_field: str,
    default_direction: SortDirection = SortDirection.ASC,
) -> SortSpec:
    """Map caller-supplied sort options onto the allow-list.

    Unknown fields and directions are ignored in favour of the defaults.
    """
    warnings: list[str] = []

    resolved_field = default_field
    if sort_by:
        if sort_by in allowed:
            resolved_field = sort_by
        else:
            warnings.append(
                f"Unknown sort field {sort_by!r}; using {default_field!r}. "
                f"Allowed: {sorted(allowed)}"
            )

    resolved_direction = default_direction
    if direction:
        try:
            resolved_direction = SortDirection(direction.lower())
        except ValueError:
            warnings.append(
                f"Unknown sort direction {direction!r}; using {default_direction.value!r}"
            )

    return SortSpec(field=resolved_field, direction=resolved_direction, warnings=warnings)
