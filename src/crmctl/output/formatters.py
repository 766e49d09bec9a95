"""Output mode selection for ServiceResult.

The CLI renders ServiceResult for humans (Rich tables and panels), for
scripts (``--quiet``: ids only), or for machines (``--json``).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from crmctl.output.renderers import render_quiet, render_result

if TYPE_CHECKING:
    from crmctl.services.result import ServiceResult


@dataclass(frozen=True)
class OutputSettings:
    """The three global flags that shape output."""

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False


def format_result(result: ServiceResult, *, settings: OutputSettings | None = None) -> str:
    """Format a ServiceResult for display.

    ``--json`` wins over ``--quiet``, which wins over the Rich renderers.
    """
    settings = settings or OutputSettings()
    if settings.json_output:
        return result.model_dump_json(indent=2)
    if settings.quiet:
        return render_quiet(result)
    return render_result(result, verbose=settings.verbose)
