"""Rich Console factory and theme for entryport output.

Consoles render into a StringIO buffer so renderers can return plain
strings. Rich drops color codes on its own when there is no terminal.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

EP_THEME = Theme(
    {
        "ep.ok": "bold green",
        "ep.error": "bold red",
        "ep.warning": "bold yellow",
        "ep.op": "bold cyan",
        "ep.key": "dim",
        "ep.id": "bold blue",
        "ep.title": "bold",
        "ep.url": "underline blue",
        "ep.handler": "magenta",
        "ep.native": "green",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer."""
    return Console(
        file=StringIO(),
        theme=EP_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()
