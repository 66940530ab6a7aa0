"""
ClassLens Report Generation
=============================

Pydantic summary models describing a decoded class and the generator that
serialises them to JSON.  The same summaries feed the console renderer,
so both outputs always agree.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

from classlens.analyzers.inheritance import InheritanceGraph
from classlens.core.java_class import JavaClass, Method
from shared.config import LensConfig, get_config


# ---------------------------------------------------------------------------
# Summary models
# ---------------------------------------------------------------------------

class FieldSummary(BaseModel):
    name: str
    descriptor: str
    display: str
    modifiers: list[str] = Field(default_factory=list)


class MethodSummary(BaseModel):
    name: str
    descriptor: str
    display: str
    modifiers: list[str] = Field(default_factory=list)
    max_stack: Optional[int] = None
    max_locals: Optional[int] = None
    code_length: Optional[int] = None


class AncestorSummary(BaseModel):
    name: str
    kind: str


class ClassSummary(BaseModel):
    """Everything ClassLens reports about one class."""

    name: str
    version: str
    modifiers: list[str] = Field(default_factory=list)
    super_name: Optional[str] = None
    interfaces: list[str] = Field(default_factory=list)
    source_file: Optional[str] = None
    fields: list[FieldSummary] = Field(default_factory=list)
    methods: list[MethodSummary] = Field(default_factory=list)
    ancestors: list[AncestorSummary] = Field(default_factory=list)

    @property
    def dotted_name(self) -> str:
        return self.name.replace("/", ".")


def _method_summary(method: Method) -> MethodSummary:
    signature = method.signature
    arguments = ", ".join(str(arg) for arg in signature.args)
    summary = MethodSummary(
        name=method.name,
        descriptor=method.descriptor,
        display=f"{signature.return_type} {method.name}({arguments})",
        modifiers=method.modifiers,
    )
    code = method.code()
    if code is not None:
        summary.max_stack = code.max_stack
        summary.max_locals = code.max_locals
        summary.code_length = len(code.code)
    return summary


def summarize_class(java_class: JavaClass, graph: InheritanceGraph | None = None) -> ClassSummary:
    """Project *java_class* (and optionally its ancestry) onto a summary."""
    major, minor = java_class.version
    summary = ClassSummary(
        name=java_class.this_name,
        version=f"{major}.{minor}",
        modifiers=java_class.modifiers,
        super_name=java_class.super_name,
        interfaces=java_class.interfaces(),
        source_file=java_class.source_file,
        fields=[
            FieldSummary(
                name=field.name,
                descriptor=field.descriptor,
                display=f"{field.signature} {field.name}",
                modifiers=field.modifiers,
            )
            for field in java_class.fields()
        ],
        methods=[_method_summary(method) for method in java_class.methods()],
    )
    if graph is not None:
        summary.ancestors = [
            AncestorSummary(name=ancestor.this_name, kind=kind.value)
            for ancestor, kind in graph.inherits(java_class.this_name)
        ]
    return summary


# ---------------------------------------------------------------------------
# JSON report
# ---------------------------------------------------------------------------

class LensReportGenerator:
    """Serialise class summaries as JSON.

    Usage::

        generator = LensReportGenerator()
        text = generator.to_json(summary)
        generator.generate_json(summary, "square.json")
    """

    def __init__(self, config: LensConfig | None = None) -> None:
        self._config = config or get_config()

    def to_json(self, summary: ClassSummary, indent: int = 2) -> str:
        report = {
            "report_type": "classlens_class_summary",
            "version": self._config.global_settings.version,
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "class": summary.model_dump(mode="json"),
        }
        return json.dumps(report, indent=indent)

    def generate_json(self, summary: ClassSummary, output_path: str | Path) -> str:
        """Write the JSON report and return its absolute path."""
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.to_json(summary), encoding="utf-8")
        return str(path.resolve())
