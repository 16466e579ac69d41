"""Rule commands - Inspect rule sets and check single coordinates."""

from typing import Optional

import typer
from rich.table import Table

from depdoctor_common import DepdoctorError
from depdoctor_sdk import RuleEngine, load_rule_set
from depdoctor_sdk.dependencies import parse_coordinate

from .utils import console, error, handle_error, success, warning


def rules(
    rules_file: Optional[str] = typer.Option(
        None, "--rules", "-r", help="Rule-set YAML file (built-in rules when omitted)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed output"),
):
    """
    Validate a rule set and list its rules in evaluation order.

    Examples:
        depdoctor rules
        depdoctor rules --rules rules.yaml
    """
    try:
        rule_set = load_rule_set(rules_file)
    except DepdoctorError as e:
        handle_error(e, verbose)
        raise typer.Exit(1)

    if rule_set.problems:
        warning(f"Rule set loaded with {len(rule_set.problems)} skipped entries: {rule_set.source}")
        for problem in rule_set.problems:
            warning(problem)
    else:
        success(f"Rule set is valid: {rule_set.source}")

    table = Table(title="Compatibility Rules", show_header=True, header_style="bold cyan")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Artifact", style="cyan", no_wrap=True)
    table.add_column("Policy")
    table.add_column("Version", style="green")
    table.add_column("Description", style="dim")
    for position, rule in enumerate(rule_set.rules, start=1):
        table.add_row(str(position), rule.pattern, rule.policy, rule.version, rule.description or "")
    console.print(table)

    if rule_set.boms:
        boms = Table(title="Bills of Materials", show_header=True, header_style="bold cyan")
        boms.add_column("BOM", style="cyan", no_wrap=True)
        boms.add_column("Version", style="green")
        boms.add_column("Covers")
        for bom in rule_set.boms:
            boms.add_row(bom.coordinates, bom.version, ", ".join(bom.covers))
        console.print(boms)


def check(
    coordinate: str = typer.Argument(..., help="Artifact to check, e.g. io.projectreactor:reactor-core:3.5.0"),
    rules_file: Optional[str] = typer.Option(
        None, "--rules", "-r", help="Rule-set YAML file (built-in rules when omitted)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed output"),
):
    """
    Check one artifact version against the rule set.

    Exits with status 1 when the version violates its rule.

    Examples:
        depdoctor check com.fasterxml.jackson.core:jackson-core:2.9.0
        depdoctor check reactor-core@3.4.1 --rules rules.yaml
    """
    parsed = parse_coordinate(coordinate)
    if parsed is None or not parsed.version:
        error(f"Expected 'group:name:version' or 'name@version', got '{coordinate}'")
        raise typer.Exit(1)

    try:
        engine = RuleEngine(load_rule_set(rules_file))
    except DepdoctorError as e:
        handle_error(e, verbose)
        raise typer.Exit(1)

    verdict = engine.evaluate(parsed.key, parsed.version)
    if verdict is None:
        success(f"{parsed.key} {parsed.version}: no known constraint")
        return

    note = " (compared lexically)" if verdict.low_confidence else ""
    if verdict.satisfied:
        success(f"{parsed.key} {parsed.version} satisfies {verdict.rule.describe()}{note}")
        return

    warning(f"{parsed.key} {parsed.version} violates {verdict.rule.describe()}{note}")
    raise typer.Exit(1)
