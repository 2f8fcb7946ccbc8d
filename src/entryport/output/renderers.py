"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console backed by StringIO; the caller
extracts the text via ``get_output(console)``. Renderers are dispatched by
``result.op`` in :func:`render_result` and unknown ops fall through to a
generic key-value renderer.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from entryport.output.console import create_console, get_output

if TYPE_CHECKING:
    from rich.console import Console

    from entryport.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich."""
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

    draft_id = result.data.get("draftId")
    if draft_id is not None:
        return str(draft_id)
    handlers = result.data.get("handlers")
    if isinstance(handlers, list):
        return "\n".join(str(h.get("name", "")) for h in handlers)
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    label = Text("OK", style="ep.ok")
    op = Text(f"  {result.op}", style="ep.op")
    console.print(label, op, sep="")


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="ep.key")
    if key == "id" or key.endswith("_id") or key.endswith("Id"):
        v = Text(str(value), style="ep.id")
    elif key == "title":
        v = Text(str(value), style="ep.title")
    elif key.endswith("url") or key.endswith("Url"):
        v = Text(str(value), style="ep.url")
    elif isinstance(value, (dict, list)):
        v = Text(json.dumps(value, separators=(",", ":"), default=str))
    else:
        v = Text(str(value))
    console.print(k, v, sep="")


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print the meta block including the telemetry span tree (verbose only)."""
    if not result.meta:
        return

    console.print()
    console.print(Text("  meta:", style="dim"))
    for k, v in result.meta.items():
        if k == "telemetry":
            _render_telemetry_tree(console, v, indent=4)
        else:
            console.print(f"    {k}: {v}")


def _render_telemetry_tree(console: Console, span_data: dict[str, Any], indent: int = 4) -> None:
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
        line += f"  ({', '.join(f'{k}={v}' for k, v in annotations.items())})"
    console.print(line)

    for child in span_data.get("children", []):
        _render_telemetry_tree(console, child, indent=indent + 4)


def _render_field_errors(console: Console, errors: dict[str, list[str]]) -> None:
    for handle, messages in errors.items():
        for message in messages:
            console.print(f"  [ep.error]invalid[/ep.error] {handle}: {message}")


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="ep.error")
    op = Text(f"  {result.op}", style="ep.op")
    console.print(label, op, Text(": "), msg, sep="")

    field_errors = result.data.get("errors")
    if isinstance(field_errors, dict):
        _render_field_errors(console, field_errors)

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


# ── Export / import ───────────────────────────────────────────────────


def _render_export(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    d = result.data
    for key in ("id", "site_id", "title", "field_count"):
        if key in d:
            _field(console, key, d[key])
    if verbose:
        documents = d.get("document") or []
        if documents:
            console.print()
            console.print(json.dumps(documents, indent=2, default=str), markup=False)
        _render_meta(console, result)


def _render_import(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    d = result.data
    for key in ("entryId", "draftId", "message", "cpEditUrl"):
        if d.get(key) is not None:
            _field(console, key, d[key])
    updated = d.get("updatedFields")
    if updated:
        _field(console, "updatedFields", ", ".join(updated))
    if verbose:
        _render_meta(console, result)


# ── Registry / store ──────────────────────────────────────────────────


def _render_handlers(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    handlers = result.data.get("handlers", [])
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Name", style="ep.handler", no_wrap=True)
    table.add_column("Priority", justify="right")
    table.add_column("Native")
    if verbose:
        table.add_column("Placeholder", style="dim")

    for handler in handlers:
        native = Text("yes", style="ep.native") if handler.get("native") else Text("no")
        row: list[Any] = [str(handler.get("name", "")), str(handler.get("priority", "")), native]
        if verbose:
            row.append(str(handler.get("placeholder_type") or ""))
        table.add_row(*row)

    console.print(table)
    console.print(f"\n{result.data.get('count', len(handlers))} handlers")


def _render_seed(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key in ("source", "assets", "entries"):
        if key in result.data:
            _field(console, key, result.data[key])
    if verbose:
        _render_meta(console, result)


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    "export_entry": _render_export,
    "import_entry": _render_import,
    "list_handlers": _render_handlers,
    "seed_store": _render_seed,
}
