"""Command: load a JSON fixture of entries and assets into the store."""

from __future__ import annotations

import json
from typing import IO, TYPE_CHECKING

import click
from pydantic import ValidationError

from entryport.services.errors import ErrorCode
from entryport.services.result import ServiceResult, failure

if TYPE_CHECKING:
    from entryport.commands._context import AppContext


@click.command(
    epilog="""\
\b
Examples:
  entryport seed fixtures/blog.json
  cat fixtures/blog.json | entryport seed -""",
)
@click.argument("source", type=click.File("rb"))
@click.pass_obj
def seed(app: AppContext, source: IO[bytes]) -> None:
    """Create or replace the entries and assets described in SOURCE."""
    from entryport.infrastructure.fixtures import load_fixture

    op = "seed_store"
    try:
        data = json.loads(source.read())
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        app.emit(failure(op, ErrorCode.BAD_INPUT, f"Invalid JSON format: {exc}"))
        return
    if not isinstance(data, dict):
        app.emit(failure(op, ErrorCode.BAD_INPUT, "Fixture must be a JSON object"))
        return

    try:
        counts = load_fixture(app.workspace.store, data)  # type: ignore[arg-type]
    except ValidationError as exc:
        app.emit(
            failure(
                op,
                ErrorCode.BAD_INPUT,
                "Invalid fixture",
                errors=exc.errors(include_url=False, include_context=False),
            )
        )
        return
    source_name = getattr(source, "name", "<stdin>")
    app.emit(ServiceResult(ok=True, op=op, data={"source": source_name, **counts}))
