"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO).  The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json as _json
from typing import TYPE_CHECKING, Any

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from crmctl.output.console import create_console, get_output, style_for_kind

if TYPE_CHECKING:
    from rich.console import Console

    from crmctl.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op}: {msg}"

    # Lists print one id per line; single records print their id.
    for key in ("items", "overdue", "nodes"):
        items = result.data.get(key)
        if isinstance(items, list):
            return "\n".join(_extract_id(item) for item in items if _extract_id(item))

    if result.data.get("id") is not None:
        return str(result.data["id"])
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _extract_id(item: Any) -> str:
    """Extract an ID from a dict item (list rows, follow-ups, graph nodes)."""
    if isinstance(item, dict):
        for key in ("id", "person_id"):
            val = item.get(key)
            if val is not None:
                return str(val)
    return ""


def _status_line(console: Console, result: ServiceResult) -> None:
    """Print the OK status line."""
    label = Text("OK", style="crm.ok")
    op = Text(f"  {result.op}", style="crm.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="crm.key")
    if key == "id" or key.endswith("_id"):
        v = Text(str(value), style="crm.id")
    elif key == "name":
        v = Text(str(value), style="crm.name")
    elif key.endswith("_date"):
        v = Text(str(value), style="crm.date")
    else:
        v = Text("" if value is None else str(value))
    console.print(k, v, end="")
    console.print()


def _cell(value: Any) -> str:
    return "" if value is None else str(value)


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print meta block including telemetry span tree (verbose only)."""
    if not result.meta:
        return

    console.print()
    console.print(Text("  meta:", style="dim"))

    for k, v in result.meta.items():
        if k == "telemetry":
            _render_telemetry_tree(console, v, indent=4)
        else:
            console.print(f"    {k}: {v}")


def _render_telemetry_tree(
    console: Console,
    span_data: dict[str, Any],
    indent: int = 4,
) -> None:
    """Render a hierarchical span tree with color-coded timing."""
    prefix = " " * indent
    name = span_data.get("name", "?")
    duration = span_data.get("duration_ms", 0.0)

    if duration > 1000:
        style = "bold red"
    elif duration > 100:
        style = "yellow"
    else:
        style = "dim"

    line = f"{prefix}[{style}]{duration:>8.2f}ms[/{style}]  {name}"
    annotations = span_data.get("annotations") or {}
    if annotations:
        line += "  (" + ", ".join(f"{k}={v}" for k, v in annotations.items()) + ")"
    console.print(line)

    for child in span_data.get("children", []):
        _render_telemetry_tree(console, child, indent=indent + 4)


def _page_footer(console: Console, data: dict[str, Any]) -> None:
    total_pages = data.get("total_pages", 0)
    page = data.get("page", 1)
    console.print(
        Text(
            f"  page {page} of {total_pages}  ({data.get('total', 0)} total, "
            f"sorted by {data.get('sort_by')} {data.get('sort_direction')})",
            style="dim",
        )
    )


def _table(*columns: str) -> Table:
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    for column in columns:
        style = "crm.id" if column == "ID" else None
        table.add_column(column, style=style, no_wrap=column == "ID")
    return table


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="crm.error")
    op = Text(f"  {result.op}", style="crm.op")
    code = Text(f" [{err.code}] " if err else " ", style="crm.key")
    console.print(label, op, code, msg)
    if verbose and err and err.detail:
        for key, value in err.detail.items():
            _field(console, key, value)


# ── Record renderers ─────────────────────────────────────────────────

_RECORD_KEYS = (
    "id",
    "name",
    "person_name",
    "interaction_type",
    "interaction_date",
    "org_type",
    "follow_up_cadence_days",
    "latest_interaction_date",
    "person_1_id",
    "person_2_id",
    "organization_id",
    "person_id",
    "role",
    "notes",
)


def _render_mutation(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render create/update/link results."""
    _status_line(console, result)
    d = result.data
    for key in _RECORD_KEYS:
        if d.get(key) is not None:
            _field(console, key, d[key])
    if verbose:
        for key in ("created_at", "updated_at"):
            if d.get(key):
                _field(console, key, d[key])
        _render_meta(console, result)


def _render_deleted(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render delete and unlink results."""
    _status_line(console, result)
    for key, value in result.data.items():
        if key != "deleted":
            _field(console, key, value)
    if verbose:
        _render_meta(console, result)


def _render_person(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render person detail as a panel plus history and relationship tables."""
    d = result.data
    lines = [f"[crm.key]id:[/crm.key] [crm.id]{d['id']}[/crm.id]"]
    cadence = d.get("follow_up_cadence_days")
    lines.append(f"[crm.key]cadence:[/crm.key] {f'{cadence} days' if cadence else 'none'}")
    lines.append(
        f"[crm.key]last contact:[/crm.key] {d.get('latest_interaction_date') or 'never'}"
    )
    follow_up = d.get("follow_up")
    if follow_up:
        state = follow_up["state"]
        style = {"overdue": "crm.overdue", "upcoming": "crm.upcoming"}.get(state, "crm.ok")
        lines.append(f"[crm.key]follow-up:[/crm.key] [{style}]{state}[/{style}]")
    if d.get("notes"):
        lines.append("")
        lines.append(Text(d["notes"]).markup)
    console.print(Panel("\n".join(lines), title=d.get("name", ""), expand=False))

    interactions = d.get("interactions", [])
    if interactions:
        table = _table("ID", "Date", "Type", "Notes")
        for i in interactions:
            table.add_row(
                str(i["id"]), i["interaction_date"], i["interaction_type"], _cell(i.get("notes"))
            )
        console.print(table)

    related = d.get("related_people", [])
    orgs = d.get("organizations", [])
    if related:
        console.print(Text("  related people:", style="crm.key"))
        for r in related:
            note = f"  ({r['notes']})" if r.get("notes") else ""
            console.print(f"    [crm.id]{r['id']}[/crm.id]  {Text(r['name']).markup}{note}")
    if orgs:
        console.print(Text("  organizations:", style="crm.key"))
        for o in orgs:
            role = f"  ({o['role']})" if o.get("role") else ""
            console.print(f"    [crm.id]{o['id']}[/crm.id]  {Text(o['name']).markup}{role}")
    if verbose:
        _render_meta(console, result)


def _render_organization(
    result: ServiceResult, console: Console, *, verbose: bool = False
) -> None:
    """Render organization detail with its members."""
    d = result.data
    lines = [
        f"[crm.key]id:[/crm.key] [crm.id]{d['id']}[/crm.id]",
        f"[crm.key]type:[/crm.key] {d.get('org_type', '')}",
        f"[crm.key]members:[/crm.key] {d.get('member_count', 0)}",
    ]
    if d.get("notes"):
        lines.append("")
        lines.append(Text(d["notes"]).markup)
    console.print(Panel("\n".join(lines), title=d.get("name", ""), expand=False))

    members = d.get("members", [])
    if members:
        table = _table("ID", "Name", "Role")
        for m in members:
            table.add_row(str(m["id"]), m["name"], _cell(m.get("role")))
        console.print(table)
    if verbose:
        _render_meta(console, result)


# ── List renderers ───────────────────────────────────────────────────


def _render_people(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    table = _table("ID", "Name", "Cadence", "Last contact")
    for p in result.data.get("items", []):
        table.add_row(
            str(p["id"]),
            p["name"],
            _cell(p.get("follow_up_cadence_days")),
            _cell(p.get("latest_interaction_date")),
        )
    console.print(table)
    _page_footer(console, result.data)
    if verbose:
        _render_meta(console, result)


def _render_organizations(
    result: ServiceResult, console: Console, *, verbose: bool = False
) -> None:
    table = _table("ID", "Name", "Type", "Members")
    for o in result.data.get("items", []):
        table.add_row(str(o["id"]), o["name"], o["org_type"], str(o.get("member_count", 0)))
    console.print(table)
    _page_footer(console, result.data)
    if verbose:
        _render_meta(console, result)


def _render_interactions(
    result: ServiceResult, console: Console, *, verbose: bool = False
) -> None:
    table = _table("ID", "Date", "Person", "Type", "Notes")
    for i in result.data.get("items", []):
        table.add_row(
            str(i["id"]),
            i["interaction_date"],
            i["person_name"],
            i["interaction_type"],
            _cell(i.get("notes")),
        )
    console.print(table)
    _page_footer(console, result.data)
    if verbose:
        _render_meta(console, result)


def _render_lookups(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    table = _table("ID", "Name", "In use")
    for item in result.data.get("items", []):
        table.add_row(str(item["id"]), item["name"], str(item.get("usage_count", 0)))
    console.print(table)


def _render_relationships(
    result: ServiceResult, console: Console, *, verbose: bool = False
) -> None:
    _status_line(console, result)
    d = result.data
    _field(console, "person_id", d.get("person_id"))
    table = _table("Kind", "ID", "Name", "Notes / role")
    for p in d.get("people", []):
        table.add_row("person", str(p["id"]), p["name"], _cell(p.get("notes")))
    for o in d.get("organizations", []):
        table.add_row("organization", str(o["id"]), o["name"], _cell(o.get("role")))
    console.print(table)


def _render_search(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    items = result.data.get("items", [])
    if not items:
        console.print(Text("  no matches", style="dim"))
        return
    for item in items:
        kind = item["type"]
        console.print(
            Text(f"  {kind:<13}", style=style_for_kind(kind)),
            Text(f"{item['id']:>5}  ", style="crm.id"),
            Text(item["label"]),
        )


# ── Dashboard renderers ──────────────────────────────────────────────


def _follow_up_table(rows: list[dict[str, Any]], *, overdue: bool) -> Table:
    if overdue:
        table = _table("ID", "Name", "Cadence", "Last contact", "Days overdue")
    else:
        table = _table("ID", "Name", "Cadence", "Last contact", "Due in")
    for f in rows:
        if overdue:
            tail = "never contacted" if f["never_contacted"] else str(f["days_overdue"])
        else:
            tail = "today" if f["days_until_due"] == 0 else f"{f['days_until_due']} days"
        table.add_row(
            str(f["person_id"]),
            f["name"],
            str(f["follow_up_cadence_days"]),
            _cell(f.get("latest_interaction_date")),
            tail,
        )
    return table


def _render_dashboard(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render dashboard and follow_ups results."""
    d = result.data
    counts = d.get("counts")
    if counts:
        console.print(
            Text("  " + "   ".join(f"{k.replace('_', ' ')}: {v}" for k, v in counts.items()))
        )
        console.print()

    overdue = d.get("overdue", [])
    console.print(Text(f"Overdue ({len(overdue)})", style="crm.overdue"))
    if overdue:
        console.print(_follow_up_table(overdue, overdue=True))

    upcoming = d.get("upcoming", [])
    window = d.get("upcoming_window_days")
    console.print(Text(f"Upcoming, next {window} days ({len(upcoming)})", style="crm.upcoming"))
    if upcoming:
        console.print(_follow_up_table(upcoming, overdue=False))

    recent = d.get("recent_interactions")
    if recent:
        console.print(Text("Recent interactions", style="crm.name"))
        table = _table("Date", "Person", "Type", "Notes")
        for i in recent:
            table.add_row(
                i["interaction_date"], i["person_name"], i["interaction_type"], _cell(i["notes"])
            )
        console.print(table)
    if verbose:
        _render_meta(console, result)


# ── Graph renderers ──────────────────────────────────────────────────


def _render_graph(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    d = result.data
    for key in ("center", "depth", "node_count", "edge_count"):
        if key in d:
            _field(console, key, d[key])

    nodes = d.get("nodes", [])
    if nodes:
        table = _table("Node", "Label", "Degree")
        for n in sorted(nodes, key=lambda n: (-n["degree"], n["label"].lower())):
            table.add_row(
                Text(n["id"], style=style_for_kind(n["type"])), n["label"], str(n["degree"])
            )
        console.print(table)
    if verbose:
        for e in d.get("edges", []):
            extra = e.get("notes") or e.get("role") or ""
            console.print(f"    {e['source']} -- {e['target']}  {extra}".rstrip())
        _render_meta(console, result)


# ── Maintenance renderers ────────────────────────────────────────────


def _render_upgrade(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render upgrade/migration results."""
    _status_line(console, result)
    d = result.data
    for key in (
        "db_path",
        "applied_count",
        "pending_count",
        "current",
        "head",
        "backup_path",
        "config_path",
        "message",
    ):
        if key in d:
            _field(console, key, d[key])
    if verbose and d.get("pending"):
        console.print()
        for p in d["pending"]:
            console.print(f"  {p['revision']}: {p['description']}")


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, _json.dumps(value, separators=(",", ":"), default=str))
        else:
            _field(console, key, value)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    # People
    "create_person": _render_mutation,
    "update_person": _render_mutation,
    "get_person": _render_person,
    "list_people": _render_people,
    "delete_person": _render_deleted,
    # Organizations
    "create_organization": _render_mutation,
    "update_organization": _render_mutation,
    "get_organization": _render_organization,
    "list_organizations": _render_organizations,
    "delete_organization": _render_deleted,
    # Interactions
    "create_interaction": _render_mutation,
    "update_interaction": _render_mutation,
    "get_interaction": _render_mutation,
    "list_interactions": _render_interactions,
    "delete_interaction": _render_deleted,
    # Lookups
    "list_org_types": _render_lookups,
    "list_interaction_types": _render_lookups,
    "create_org_type": _render_mutation,
    "create_interaction_type": _render_mutation,
    "delete_org_type": _render_deleted,
    "delete_interaction_type": _render_deleted,
    # Relationships
    "link_people": _render_mutation,
    "link_organization": _render_mutation,
    "unlink_people": _render_deleted,
    "unlink_organization": _render_deleted,
    "list_relationships": _render_relationships,
    # Dashboard, search, graph
    "dashboard": _render_dashboard,
    "follow_ups": _render_dashboard,
    "search": _render_search,
    "graph_network": _render_graph,
    "graph_neighborhood": _render_graph,
    # Maintenance
    "init": _render_upgrade,
    "upgrade": _render_upgrade,
    "upgrade_check": _render_upgrade,
    "upgrade_stamp": _render_upgrade,
}
