"""Rich Console factory and theme for scenariodb output.

Creates Console instances that render to a StringIO buffer so commands can
route the text through ``click.echo``. In non-TTY environments (tests, pipes)
Rich automatically disables color codes.
"""

from __future__ import annotations

import json
from io import StringIO
from typing import Any

from rich.console import Console
from rich.text import Text
from rich.theme import Theme

SCENARIO_THEME = Theme(
    {
        "sc.ok": "bold green",
        "sc.error": "bold red",
        "sc.warning": "bold yellow",
        "sc.kind": "bold cyan",
        "sc.id": "bold blue",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes (used in tests).
        width: Override terminal width (useful for consistent test output).
    """
    return Console(
        file=StringIO(),
        theme=SCENARIO_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def render_document(document: dict[str, Any]) -> str:
    """Render a canonical entity document as indented JSON."""
    console = create_console()
    console.print_json(json.dumps(document), indent=2)
    return get_output(console).rstrip("\n")


def render_message(style: str, label: str, message: str) -> str:
    """Render ``label: message`` with *label* styled by a theme key."""
    console = create_console()
    console.print(Text.assemble((label, style), " ", message), soft_wrap=True)
    return get_output(console).rstrip("\n")
