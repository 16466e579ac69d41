"""Analyze command - Detect version conflicts in a dependency report."""

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from depdoctor_common import (
    SUPPORTED_OUTPUT_FORMATS,
    MalformedInputError,
    UnresolvableConflictError,
)
from depdoctor_common.constants import (
    EXIT_FAILURE,
    EXIT_INTERRUPTED,
    EXIT_MALFORMED_INPUT,
)
from depdoctor_sdk import AnalysisResult, Analyzer, load_settings, render_shade_config, render_text

from .utils import console, error, handle_error, info, success, warning


def _status_label(advice) -> str:
    if not advice.needs_action:
        return "[green]ok[/green]"
    if advice.unresolvable:
        return "[bold red]unresolvable[/bold red]"
    return "[red]fail[/red]"


def print_result(result: AnalysisResult, verbose: bool = False) -> None:
    """Print an analysis result as rich tables."""
    graph = result.graph
    console.print(
        f"[bold]Graph:[/bold] {graph['artifacts']} artifacts, {graph['edges']} edges, "
        f"{graph['cycles']} cycle(s)  [dim]run {result.run_id}[/dim]"
    )

    if not result.advice:
        success("No version conflicts found")
    else:
        table = Table(title="Version Conflicts", show_header=True, header_style="bold cyan")
        table.add_column("Artifact", style="cyan", no_wrap=True)
        table.add_column("Versions")
        table.add_column("Winner", style="green")
        table.add_column("Rule")
        table.add_column("Status")
        table.add_column("Recommendation")

        for advice in result.advice:
            report = advice.report
            winner = report.winner + (" *" if report.marked else "")
            if report.low_confidence:
                winner += " [yellow](?)[/yellow]"
            evaluation = advice.evaluation
            rule = evaluation.verdict.rule.describe() if evaluation.verdict else "[dim]-[/dim]"
            recommendation = advice.recommendation.describe() if advice.recommendation else "[dim]-[/dim]"
            table.add_row(
                str(report.artifact),
                ", ".join(report.versions),
                winner,
                rule,
                _status_label(advice),
                recommendation,
            )
        console.print(table)
        console.print("[dim]* selected by the build tool   (?) compared lexically[/dim]")

        for advice in result.advice:
            for request in advice.evaluation.non_conforming:
                warning(
                    f"{advice.report.artifact} {request.version} requested by "
                    f"{', '.join(request.parents)} violates {advice.evaluation.verdict.rule.describe()}"
                )

    for violation in result.violations:
        warning(f"{violation.artifact} {violation.version} violates {violation.rule.describe()}")

    for diagnostic in result.diagnostics:
        if diagnostic.severity == "info" and not verbose:
            continue
        location = f" (line {diagnostic.line})" if diagnostic.line else ""
        warning(f"{diagnostic.code}: {diagnostic.message}{location}")


def analyze(
    report: str = typer.Argument(..., help="Dependency tree output (Maven/Gradle) or JSON edge list"),
    rules: Optional[str] = typer.Option(
        None, "--rules", "-r", help="Rule-set YAML file (built-in rules when omitted)"
    ),
    config: Optional[str] = typer.Option(
        None, "--config", "-c", help="Settings file (default: ./depdoctor.yaml if present)"
    ),
    strategy: Optional[str] = typer.Option(
        None, "--strategy", "-s", help="strict fails on failing conflicts, lenient only reports"
    ),
    resolution: Optional[str] = typer.Option(
        None, "--resolution", help="Winner policy without build-tool markers: highest or nearest"
    ),
    output_format: str = typer.Option("text", "--format", "-f", help="Output format: text or json"),
    output_file: Optional[str] = typer.Option(None, "--output", "-o", help="Write the report to a file"),
    shade_config: Optional[str] = typer.Option(
        None, "--shade-config", help="Write a shading stub for Shade recommendations to this file"
    ),
    shade_style: Optional[str] = typer.Option(None, "--shade-style", help="Shading stub style: maven or gradle"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed output"),
):
    """
    Analyze a dependency report for version conflicts.

    Examples:
        mvn dependency:tree -Dverbose > tree.txt
        depdoctor analyze tree.txt

        # Fail the build on conflicts that violate a rule
        depdoctor analyze tree.txt --strategy strict --rules rules.yaml

        # Machine-readable report and a Maven Shade stub
        depdoctor analyze tree.txt -f json -o report.json --shade-config shade.xml
    """
    if verbose:
        logging.getLogger("depdoctor").setLevel(logging.DEBUG)

    try:
        if output_format not in SUPPORTED_OUTPUT_FORMATS:
            error(f"Unsupported format: {output_format}. Use one of: {', '.join(SUPPORTED_OUTPUT_FORMATS)}")
            raise typer.Exit(EXIT_FAILURE)

        if not Path(report).exists():
            error(f"Dependency report not found: {report}")
            raise typer.Exit(EXIT_FAILURE)

        settings = load_settings(
            config,
            overrides={
                "rule_set": rules,
                "strategy": strategy,
                "resolution": resolution,
                "shade_style": shade_style,
            },
        )
        if verbose:
            info(f"Strategy: {settings.strategy}, resolution: {settings.resolution}")

        analyzer = Analyzer(settings=settings)
        with console.status("[bold green]Analyzing dependency graph..."):
            result = analyzer.analyze_file(report)

        if output_format == "json":
            rendered = result.to_json()
            if output_file:
                Path(output_file).write_text(rendered + "\n", encoding="utf-8")
                success(f"Report saved to {output_file}")
            else:
                console.print_json(rendered)
        else:
            print_result(result, verbose=verbose)
            if output_file:
                Path(output_file).write_text(render_text(result), encoding="utf-8")
                success(f"Report saved to {output_file}")

        if shade_config:
            stub = render_shade_config(result.advice, style=settings.shade_style)
            if stub:
                Path(shade_config).write_text(stub, encoding="utf-8")
                success(f"Shading stub saved to {shade_config}")
                if verbose:
                    lexer = "xml" if settings.shade_style == "maven" else "groovy"
                    console.print(Panel(Syntax(stub, lexer, theme="monokai"), title="Shading stub"))
            else:
                info("No shading needed, stub not written")

        if result.exit_code():
            error(f"{len(result.failing)} conflict(s) violate compatibility rules (strict mode)")
            raise typer.Exit(result.exit_code())

    except typer.Exit:
        raise
    except MalformedInputError as e:
        handle_error(e, verbose)
        raise typer.Exit(EXIT_MALFORMED_INPUT)
    except UnresolvableConflictError as e:
        handle_error(e, verbose)
        raise typer.Exit(EXIT_FAILURE)
    except KeyboardInterrupt:
        info("\nAnalysis cancelled by user")
        raise typer.Exit(EXIT_INTERRUPTED)
    except Exception as e:
        handle_error(e, verbose)
        raise typer.Exit(EXIT_FAILURE)
