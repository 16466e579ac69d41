"""Tests for the analyze command."""
import json

from typer.testing import CliRunner

from depdoctor_cli.main import app

runner = CliRunner()


def test_analyze_maven_tree(maven_report):
    """Conflict with a passing winner exits cleanly."""
    result = runner.invoke(app, ["analyze", str(maven_report)])
    assert result.exit_code == 0, result.output
    assert "Graph:" in result.output


def test_analyze_text_report_file(maven_report, tmp_path):
    """Text output written to a file uses the summary template."""
    output = tmp_path / "report.txt"
    result = runner.invoke(app, ["analyze", str(maven_report), "-o", str(output)])
    assert result.exit_code == 0, result.output
    text = output.read_text(encoding="utf-8")
    assert "[OK] com.fasterxml.jackson.core:jackson-core -> 2.11.0" in text


def test_analyze_json_file(maven_report, tmp_path):
    """JSON output carries the full result."""
    output = tmp_path / "report.json"
    result = runner.invoke(app, ["analyze", str(maven_report), "--format", "json", "--output", str(output)])
    assert result.exit_code == 0, result.output
    data = json.loads(output.read_text(encoding="utf-8"))
    assert data["summary"]["conflicts"] == 1
    assert data["conflicts"][0]["winner"] == "2.11.0"


def test_lenient_failing_conflict_exits_zero(reactor_report, reactor_rules):
    """Lenient mode only reports."""
    result = runner.invoke(app, ["analyze", str(reactor_report), "--rules", str(reactor_rules)])
    assert result.exit_code == 0, result.output


def test_strict_failing_conflict_exits_one(reactor_report, reactor_rules):
    """Strict mode fails the build on a failing conflict."""
    result = runner.invoke(
        app, ["analyze", str(reactor_report), "--rules", str(reactor_rules), "--strategy", "strict"]
    )
    assert result.exit_code == 1


def test_strategy_from_environment(reactor_report, reactor_rules):
    """DEPDOCTOR_STRATEGY selects strict mode."""
    result = runner.invoke(
        app,
        ["analyze", str(reactor_report), "--rules", str(reactor_rules)],
        env={"DEPDOCTOR_STRATEGY": "strict"},
    )
    assert result.exit_code == 1


def test_strategy_from_settings_file(reactor_report, reactor_rules, tmp_path):
    """depdoctor.yaml in the working directory is picked up."""
    (tmp_path / "depdoctor.yaml").write_text(f"strategy: strict\nruleSet: {reactor_rules.name}\n", encoding="utf-8")
    result = runner.invoke(app, ["analyze", str(reactor_report)])
    assert result.exit_code == 1


def test_shade_config_written(reactor_report, reactor_rules, tmp_path):
    """Shade recommendations produce a Maven Shade stub."""
    stub = tmp_path / "shade.xml"
    result = runner.invoke(
        app, ["analyze", str(reactor_report), "--rules", str(reactor_rules), "--shade-config", str(stub)]
    )
    assert result.exit_code == 0, result.output
    content = stub.read_text(encoding="utf-8")
    assert "maven-shade-plugin" in content
    assert "<shadedPattern>shaded.io.projectreactor</shadedPattern>" in content


def test_gradle_shade_style(reactor_report, reactor_rules, tmp_path):
    """--shade-style gradle renders a Shadow relocate block."""
    stub = tmp_path / "shadow.gradle"
    result = runner.invoke(
        app,
        [
            "analyze",
            str(reactor_report),
            "--rules",
            str(reactor_rules),
            "--shade-config",
            str(stub),
            "--shade-style",
            "gradle",
        ],
    )
    assert result.exit_code == 0, result.output
    assert "relocate 'io.projectreactor', 'shaded.io.projectreactor'" in stub.read_text(encoding="utf-8")


def test_no_shade_stub_without_shade_recommendation(maven_report, tmp_path):
    """No stub is written when nothing needs shading."""
    stub = tmp_path / "shade.xml"
    result = runner.invoke(app, ["analyze", str(maven_report), "--shade-config", str(stub)])
    assert result.exit_code == 0, result.output
    assert not stub.exists()


def test_strict_unresolvable_conflict(tmp_path):
    """An artifact without a group cannot be mitigated."""
    report = tmp_path / "edges.json"
    report.write_text(json.dumps([["app", "x@1.0"], ["app", "lib@1"], ["lib", "x@2.0"]]), encoding="utf-8")
    rules = tmp_path / "x-rules.yaml"
    rules.write_text('rules:\n  - artifact: x\n    version: "3.0"\n', encoding="utf-8")
    result = runner.invoke(app, ["analyze", str(report), "--rules", str(rules), "--strategy", "strict"])
    assert result.exit_code == 1
    assert "UNRESOLVABLE_CONFLICT" in result.output


def test_malformed_report_exits_two(tmp_path):
    """A report without coordinates is malformed."""
    report = tmp_path / "empty.txt"
    report.write_text("BUILD SUCCESS\n", encoding="utf-8")
    result = runner.invoke(app, ["analyze", str(report)])
    assert result.exit_code == 2
    assert "MALFORMED_INPUT" in result.output


def test_missing_report():
    """A missing report file is an error."""
    result = runner.invoke(app, ["analyze", "missing.txt"])
    assert result.exit_code == 1
    assert "not found" in result.output


def test_unsupported_format(maven_report):
    """Only text and json formats exist."""
    result = runner.invoke(app, ["analyze", str(maven_report), "--format", "xml"])
    assert result.exit_code == 1
    assert "Unsupported format" in result.output


def test_invalid_strategy(maven_report):
    """Invalid option values are reported, not raised."""
    result = runner.invoke(app, ["analyze", str(maven_report), "--strategy", "paranoid"])
    assert result.exit_code == 1
    assert "VALIDATION_ERROR" in result.output
