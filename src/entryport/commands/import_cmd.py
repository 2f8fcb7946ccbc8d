"""Command: import an edited export document as a draft."""

from __future__ import annotations

from typing import IO, TYPE_CHECKING

import click

if TYPE_CHECKING:
    from entryport.commands._context import AppContext


@click.command(
    "import",
    epilog="""\
\b
Examples:
  entryport import entry-42.json
  entryport import entry-42.json --user 7
  entryport export 42 | jq '.[0].title = "New"' | entryport import -""",
)
@click.argument("source", type=click.File("rb"), default="-")
@click.option("--user", "acting_user_id", type=int, default=None, help="Draft creator id.")
@click.pass_obj
def import_cmd(app: AppContext, source: IO[bytes], acting_user_id: int | None) -> None:
    """Create a draft from the changed fields of SOURCE (``-`` for stdin)."""
    from entryport.services.importer import ImportService

    raw = source.read()
    app.emit(ImportService(app.workspace).import_json(raw, acting_user_id=acting_user_id))
