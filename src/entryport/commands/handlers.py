"""Command: list the registered field handlers."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from entryport.services.result import ServiceResult

if TYPE_CHECKING:
    from entryport.commands._context import AppContext


@click.command(
    epilog="""\
\b
Examples:
  entryport handlers
  entryport --json handlers
  entryport -v handlers""",
)
@click.pass_obj
def handlers(app: AppContext) -> None:
    """List field handlers in resolution order."""
    rows = [
        {
            "name": handler.name,
            "priority": handler.priority,
            "native": handler.use_native_serialization(),
            "placeholder_type": handler.placeholder_type,
        }
        for handler in app.workspace.registry.get_handlers()
    ]
    app.emit(
        ServiceResult(ok=True, op="list_handlers", data={"count": len(rows), "handlers": rows})
    )
