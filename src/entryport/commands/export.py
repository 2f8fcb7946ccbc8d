"""Command: export an entry as a JSON document."""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING

import click

if TYPE_CHECKING:
    from entryport.commands._context import AppContext


@click.command(
    epilog="""\
\b
Examples:
  entryport export 42
  entryport export 42 --site 2 --output entry-42.json
  entryport export --path blog/hello-world
  entryport --json export 42""",
)
@click.argument("entry_id", type=int, required=False)
@click.option("--path", "path_or_slug", default=None, help="Look the entry up by slug or URI.")
@click.option("--site", "site_id", type=int, default=None, help="Site id (default: first site).")
@click.option(
    "--output",
    "output_file",
    type=click.Path(dir_okay=False),
    default=None,
    help="Write the document to a file instead of stdout.",
)
@click.pass_obj
def export(
    app: AppContext,
    entry_id: int | None,
    path_or_slug: str | None,
    site_id: int | None,
    output_file: str | None,
) -> None:
    """Export an entry's title and custom fields as JSON."""
    if (entry_id is None) == (path_or_slug is None):
        raise click.UsageError("Pass exactly one of ENTRY_ID or --path.")

    from entryport.services.export import ExportService

    service = ExportService(app.workspace)
    if entry_id is not None:
        result = service.export_by_id(entry_id, site_id=site_id)
    else:
        result = service.export_by_path(path_or_slug or "", site_id=site_id)

    if not result.ok or app.settings.json_output:
        app.emit(result)
        return

    text = json.dumps(
        result.data["document"],
        indent=app.settings.export.indent,
        ensure_ascii=False,
        default=str,
    )
    if output_file:
        Path(output_file).write_text(text + "\n", encoding="utf-8")
        app.emit(result.model_copy(update={"data": {**result.data, "output_file": output_file}}))
    else:
        # Pipe-friendly: the raw document on stdout
        click.echo(text)
        for warning in result.warnings:
            click.echo(f"WARNING: {warning}", err=True)
