"""
ClassLens Console Output
=========================

Rich terminal rendering of :class:`ClassSummary` objects: a header with
the class's identity, then optional method, field and ancestry tables.

Uses the :class:`LensConsole` abstraction for consistent styling.
"""

from __future__ import annotations

from classlens.output.report import ClassSummary
from shared.console import LensConsole

_KIND_STYLES: dict[str, str] = {
    "Extends": "bright_green",
    "Implements": "bright_cyan",
}


class ClassConsoleOutput:
    """Terminal display for decoded classes.

    Usage::

        output = ClassConsoleOutput()
        output.display(summary, methods=True)
    """

    def __init__(self, console: LensConsole | None = None) -> None:
        self._console: LensConsole = console or LensConsole()

    def display(
        self,
        summary: ClassSummary,
        *,
        methods: bool = False,
        fields: bool = False,
        inherits: bool = False,
    ) -> None:
        self.display_header(summary)
        if methods:
            self.display_methods(summary)
        if fields:
            self.display_fields(summary)
        if inherits:
            self.display_ancestors(summary)

    def display_header(self, summary: ClassSummary) -> None:
        self._console.section(summary.dotted_name)
        rows = [
            ("Class", summary.name),
            ("Version", summary.version),
            ("Modifiers", " ".join(summary.modifiers) or "-"),
            ("Superclass", summary.super_name or "-"),
            ("Interfaces", ", ".join(summary.interfaces) or "-"),
            ("Source file", summary.source_file or "-"),
            ("Fields", len(summary.fields)),
            ("Methods", len(summary.methods)),
        ]
        self._console.table("Class", ["Property", "Value"], rows, styles=["lens.info", ""])

    def display_methods(self, summary: ClassSummary) -> None:
        if not summary.methods:
            self._console.info(f"{summary.name} declares no methods.")
            return
        rows = [
            (
                " ".join(method.modifiers),
                method.display,
                method.descriptor,
                "-" if method.code_length is None else method.code_length,
            )
            for method in summary.methods
        ]
        self._console.table(
            "Methods",
            ["Modifiers", "Method", "Descriptor", "Code bytes"],
            rows,
            styles=["lens.dim", "lens.highlight", "", ""],
        )

    def display_fields(self, summary: ClassSummary) -> None:
        if not summary.fields:
            self._console.info(f"{summary.name} declares no fields.")
            return
        rows = [(" ".join(field.modifiers), field.display, field.descriptor) for field in summary.fields]
        self._console.table(
            "Fields",
            ["Modifiers", "Field", "Descriptor"],
            rows,
            styles=["lens.dim", "lens.highlight", ""],
        )

    def display_ancestors(self, summary: ClassSummary) -> None:
        if not summary.ancestors:
            self._console.info(f"No ancestors of {summary.name} are on the classpath.")
            return
        rows = [
            (depth, f"[{_KIND_STYLES.get(ancestor.kind, 'white')}]{ancestor.kind}[/]", ancestor.name)
            for depth, ancestor in enumerate(summary.ancestors, start=1)
        ]
        self._console.table("Inheritance", ["#", "Kind", "Ancestor"], rows)
