"""
ClassLens Console Interface
============================

Rich-powered console abstraction giving every ClassLens command the same
section headers, severity-coloured messages and table styling.

References:
    - Rich library: https://github.com/Textualize/rich
"""

from __future__ import annotations

from typing import Any, Sequence

from rich.console import Console
from rich.table import Table
from rich.theme import Theme

_LENS_THEME = Theme(
    {
        "lens.section": "bold bright_magenta",
        "lens.error": "bold red",
        "lens.info": "bold bright_blue",
        "lens.dim": "dim white",
        "lens.highlight": "bold bright_white",
    }
)


class LensConsole:
    """Unified console interface for ClassLens output.

    Usage::

        con = LensConsole()
        con.section("com.example.Square")
        con.table("Methods", ["Name", "Signature"], rows)
    """

    def __init__(self, *, width: int | None = None) -> None:
        """Initialise the console.

        Args:
            width:  Fixed console width; ``None`` detects the terminal.
        """
        self._console = Console(
            theme=_LENS_THEME,
            highlight=False,
            width=width,
        )

    def section(self, title: str) -> None:
        """Print a prominent section header."""
        self._console.rule(
            f"  {title}  ",
            style="lens.section",
            characters="─",
        )
        self._console.print()

    # ------------------------------------------------------------------ #
    #  Message helpers (severity-coloured)
    # ------------------------------------------------------------------ #

    def error(self, message: str) -> None:
        self._console.print(
            f"[lens.error][✘] ERROR:[/lens.error] {message}"
        )

    def info(self, message: str) -> None:
        self._console.print(
            f"[lens.info][ℹ] INFO:[/lens.info] {message}"
        )

    # ------------------------------------------------------------------ #
    #  Table display
    # ------------------------------------------------------------------ #

    def table(
        self,
        title: str,
        columns: Sequence[str],
        rows: Sequence[Sequence[Any]],
        *,
        styles: Sequence[str] | None = None,
    ) -> None:
        """Render a styled Rich table.

        Args:
            title:    Table title.
            columns:  Column header labels.
            rows:     Iterable of row tuples; each element is stringified.
            styles:   Optional per-column Rich style strings.
        """
        tbl = Table(
            title=title,
            border_style="bright_cyan",
            header_style="bold bright_magenta",
            show_lines=False,
            padding=(0, 1),
        )
        for idx, col_name in enumerate(columns):
            style = styles[idx] if styles and idx < len(styles) else ""
            tbl.add_column(col_name, style=style)

        for row in rows:
            tbl.add_row(*(str(cell) for cell in row))

        self._console.print(tbl)
