"""Integration tests: the shape hierarchy end to end.

Each test lays Square, Rectangle and Shape out on disk (as a jar or a
class directory), then looks them up, decodes them and walks their
ancestry through the public API or the ``classlens`` command.
"""

import json
import os
from pathlib import Path

import pytest
from click.testing import CliRunner

from classlens.analyzers.inheritance import InheritKind, build_inheritance_graph
from classlens.cli import classlens_cli
from classlens.collectors.classpath import Classpath
from classlens.core.engine import ClassParser
from classlens.output.report import LensReportGenerator, summarize_class
from shared.config import GlobalConfig, LensConfig
from tests.factories import make_shape_classes, write_classes, write_jar


@pytest.fixture(params=["jar", "directory"])
def shape_classpath(request: pytest.FixtureRequest, tmp_path: Path) -> Path:
    """The shape classes packaged either as a jar or as a class directory."""
    if request.param == "jar":
        return write_jar(tmp_path / "shapes.jar", make_shape_classes())
    return write_classes(tmp_path / "classes", make_shape_classes())


class TestShapeHierarchy:
    """Lookup, decode and ancestry over both classpath layouts."""

    def test_square_ancestry(self, shape_classpath: Path) -> None:
        with ClassParser(Classpath([shape_classpath])) as parser:
            square = parser.find("Square")
            graph = build_inheritance_graph(square, parser)

            ancestors = [(cls.this_name, kind) for cls, kind in graph.inherits("Square")]

        assert ancestors == [("Rectangle", InheritKind.EXTENDS), ("Shape", InheritKind.IMPLEMENTS)]

    def test_square_members(self, shape_classpath: Path) -> None:
        with ClassParser(Classpath([shape_classpath])) as parser:
            square = parser.find("Square")

        assert square.source_file == "Square.java"
        assert [field.name for field in square.fields()] == ["side"]
        constructor = square.find_method("<init>", "(D)V")
        assert constructor.code().line_numbers.pc_to_line(3) == 10
        assert str(constructor.signature) == "void (double)"

    def test_summary(self, shape_classpath: Path) -> None:
        with ClassParser(Classpath([shape_classpath])) as parser:
            square = parser.find("Square")
            summary = summarize_class(square, build_inheritance_graph(square, parser))

        assert summary.name == "Square"
        assert summary.super_name == "Rectangle"
        assert summary.interfaces == ["Shape", "java/lang/Comparable"]
        assert [method.display for method in summary.methods] == [
            "void <init>(double)",
            "double area()",
            "int compareTo(Square)",
        ]
        assert summary.methods[0].max_stack == 5
        assert summary.methods[2].code_length is None
        assert [(a.name, a.kind) for a in summary.ancestors] == [
            ("Rectangle", "Extends"),
            ("Shape", "Implements"),
        ]

    def test_json_report(self, shape_classpath: Path, tmp_path: Path) -> None:
        with ClassParser(Classpath([shape_classpath])) as parser:
            summary = summarize_class(parser.find("Rectangle"))

        path = LensReportGenerator().generate_json(summary, tmp_path / "out" / "rectangle.json")
        report = json.loads(Path(path).read_text(encoding="utf-8"))

        assert report["report_type"] == "classlens_class_summary"
        assert report["class"]["name"] == "Rectangle"
        assert [field["name"] for field in report["class"]["fields"]] == ["width", "height"]

    def test_report_version_from_config(self, shape_classpath: Path) -> None:
        config = LensConfig(global_settings=GlobalConfig(version="9.9.9"))
        with ClassParser(Classpath([shape_classpath])) as parser:
            summary = summarize_class(parser.find("Shape"))

        report = json.loads(LensReportGenerator(config=config).to_json(summary))

        assert report["version"] == "9.9.9"


class TestCommandLine:
    """The classlens command over the shape classpath."""

    def test_json_with_ancestry(self, shape_classpath: Path, tmp_path: Path) -> None:
        classpath = os.pathsep.join([str(tmp_path / "missing"), str(shape_classpath)])

        result = CliRunner().invoke(classlens_cli, [classpath, "Square", "--inherits", "--json"])

        assert result.exit_code == 0, result.output
        report = json.loads(result.stdout)
        assert report["class"]["name"] == "Square"
        assert report["class"]["ancestors"] == [
            {"name": "Rectangle", "kind": "Extends"},
            {"name": "Shape", "kind": "Implements"},
        ]

    def test_config_version_in_json(self, shape_classpath: Path, tmp_path: Path) -> None:
        config_path = tmp_path / "lens.toml"
        config_path.write_text('[global]\nversion = "2.0.0"\n')

        result = CliRunner().invoke(
            classlens_cli, [str(shape_classpath), "Square", "--json", "--config", str(config_path)]
        )

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["version"] == "2.0.0"

    def test_console_output(self, shape_classpath: Path) -> None:
        result = CliRunner().invoke(
            classlens_cli, [str(shape_classpath), "Square", "--methods", "--fields", "--inherits"]
        )

        assert result.exit_code == 0, result.output
        assert "Rectangle" in result.output
        assert "compareTo" in result.output
        assert "side" in result.output

    def test_interface_json(self, shape_classpath: Path) -> None:
        result = CliRunner().invoke(classlens_cli, [str(shape_classpath), "Shape", "--json"])

        assert result.exit_code == 0, result.output
        assert "interface" in json.loads(result.stdout)["class"]["modifiers"]

    def test_not_found(self, shape_classpath: Path) -> None:
        result = CliRunner().invoke(classlens_cli, [str(shape_classpath), "com.example.Circle"])

        assert result.exit_code == 1
        assert "com/example/Circle" in result.output
