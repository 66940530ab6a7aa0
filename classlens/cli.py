"""
ClassLens CLI -- JVM Class File Inspector
==========================================

Click-based command-line interface.  Looks a class up on a classpath,
decodes it and prints a summary, optionally with its methods, fields and
ancestry.

Usage::

    # Class summary
    classlens build/classes:lib/shapes.jar com.example.Square

    # Methods and fields
    classlens build/classes com/example/Square --methods --fields

    # Ancestry, nearest first
    classlens build/classes com.example.Square --inherits

    # Machine-readable output
    classlens build/classes com.example.Square --inherits --json

References:
    - Click documentation: https://click.palletsprojects.com/
"""

from __future__ import annotations

import sys

import click

from classlens.analyzers.inheritance import InheritanceGraph, build_inheritance_graph
from classlens.core.engine import ClassParser
from classlens.core.errors import ClassLensError, ClassNotFoundError
from classlens.output.console import ClassConsoleOutput
from classlens.output.report import LensReportGenerator, summarize_class
from shared.config import LensConfig
from shared.console import LensConsole
from shared.logger import LensLogger, set_global_level


# ---------------------------------------------------------------------------
# Command
# ---------------------------------------------------------------------------

@click.command("classlens")
@click.argument("classpath")
@click.argument("name")
@click.option(
    "--methods", "-m",
    is_flag=True,
    default=False,
    help="List the methods the class declares.",
)
@click.option(
    "--fields", "-f",
    is_flag=True,
    default=False,
    help="List the fields the class declares.",
)
@click.option(
    "--inherits", "-i",
    is_flag=True,
    default=False,
    help="List the ancestors found on the classpath, nearest first.",
)
@click.option(
    "--json", "json_output",
    is_flag=True,
    default=False,
    help="Print the summary as JSON to stdout.",
)
@click.option(
    "--config", "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Path to a config.toml.  Default: config.toml in the project root.",
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    default=False,
    help="Enable debug logging.",
)
def classlens_cli(
    classpath: str,
    name: str,
    methods: bool,
    fields: bool,
    inherits: bool,
    json_output: bool,
    config_path: str | None,
    verbose: bool,
) -> None:
    """ClassLens -- JVM class file inspector.

    CLASSPATH is a list of directories, .jar/.zip archives and .class
    files separated by the platform path separator.  NAME is a fully
    qualified class name using either '/' or '.' separators.
    """
    console = LensConsole()

    try:
        config = LensConfig.load(config_path)
    except (OSError, ValueError) as exc:
        console.error(f"Cannot load configuration: {exc}")
        sys.exit(2)

    settings = config.global_settings
    log_level = "DEBUG" if verbose else settings.log_level
    logger = LensLogger(
        "cli",
        log_level=log_level,
        log_file=settings.log_file,
        json_logs=settings.log_json,
    )
    set_global_level(log_level)

    try:
        with ClassParser.from_string(classpath, config=config, logger=logger) as parser:
            java_class = parser.find(name)
            graph: InheritanceGraph | None = None
            if inherits:
                graph = build_inheritance_graph(java_class, parser, logger=logger)
            summary = summarize_class(java_class, graph)
    except ClassNotFoundError as exc:
        console.error(f"{exc.name} is not on the classpath {classpath!r}")
        sys.exit(1)
    except ClassLensError as exc:
        logger.exception(f"Decoding {name} failed")
        console.error(str(exc))
        sys.exit(1)

    if json_output:
        click.echo(LensReportGenerator(config=config).to_json(summary))
        return

    ClassConsoleOutput(console=console).display(
        summary,
        methods=methods,
        fields=fields,
        inherits=inherits,
    )


# ---------------------------------------------------------------------------
# Module entry point
# ---------------------------------------------------------------------------

def main() -> None:
    """Entry point for the ``classlens`` script and ``python -m classlens``."""
    classlens_cli()


if __name__ == "__main__":
    main()
