"""
Tests for the template renderer: shading stubs and text summaries.
"""

import pytest

from depdoctor_common import DepdoctorError, ValidationError
from depdoctor_schema import AnalyzerSettings
from depdoctor_sdk import Analyzer, RuleSet, render_shade_config, render_text
from depdoctor_sdk.templates import TemplateRenderer, shade_relocations

SHADE_EDGES = [
    ("app", "io.projectreactor:reactor-core:3.5.0"),
    ("app", "io.projectreactor:reactor-test:3.5.0"),
    ("app", "lib:lib:1"),
    ("lib:lib", "io.projectreactor:reactor-core:3.6.0"),
    ("lib:lib", "io.projectreactor:reactor-test:3.6.0"),
]

SHADE_RULES = {"rules": [{"artifact": "io.projectreactor:*", "policy": "exact-major-minor", "version": "3.4"}]}


@pytest.fixture
def shade_result():
    settings = AnalyzerSettings(shade_prefix="com.acme.shaded")
    return Analyzer(settings=settings, rule_set=RuleSet.from_dict(SHADE_RULES)).analyze(SHADE_EDGES)


class TestShadeConfig:
    """Tests for shading stubs."""

    def test_relocations_grouped_by_package(self, shade_result):
        relocations = shade_relocations(shade_result.advice)
        assert relocations == [
            {
                "pattern": "io.projectreactor",
                "shaded_pattern": "com.acme.shaded.io.projectreactor",
                "artifacts": ["io.projectreactor:reactor-core", "io.projectreactor:reactor-test"],
            }
        ]

    def test_maven_plugin(self, shade_result):
        xml = render_shade_config(shade_result.advice, style="maven")
        assert "<artifactId>maven-shade-plugin</artifactId>" in xml
        assert "<include>io.projectreactor:reactor-core</include>" in xml
        assert "<pattern>io.projectreactor</pattern>" in xml
        assert "<shadedPattern>com.acme.shaded.io.projectreactor</shadedPattern>" in xml
        assert xml.count("<relocation>") == 1
        assert "1 relocation -->" in xml

    def test_gradle_shadow(self, shade_result):
        gradle = render_shade_config(shade_result.advice, style="gradle")
        assert gradle.startswith("// Generated by depdoctor")
        assert "relocate 'io.projectreactor', 'com.acme.shaded.io.projectreactor'" in gradle

    def test_nothing_to_shade(self, maven_tree):
        result = Analyzer().analyze(maven_tree)
        assert render_shade_config(result.advice) == ""

    def test_unknown_style(self, shade_result):
        with pytest.raises(ValidationError, match="Unsupported shade style"):
            render_shade_config(shade_result.advice, style="ant")


class TestTextReport:
    """Tests for the plain-text summary."""

    def test_summary_lists_conflicts(self, shade_result):
        text = render_text(shade_result)
        assert "2 conflicts, 2 failing" in text
        assert "[FAIL] io.projectreactor:reactor-core -> 3.6.0" in text
        assert "3.5.0 via app" in text
        assert "recommendation: Shade io.projectreactor into com.acme.shaded.io.projectreactor" in text

    def test_summary_without_conflicts(self):
        result = Analyzer(rule_set=RuleSet()).analyze([("app", "a@1.0")])
        text = render_text(result)
        assert "No version conflicts found." in text
        assert "Rules: none" in text

    def test_marked_and_passing(self, maven_tree):
        text = render_text(Analyzer().analyze(maven_tree))
        assert "[OK] com.fasterxml.jackson.core:jackson-core -> 2.11.0 (selected by build tool)" in text


class TestTemplateRenderer:
    """Tests for TemplateRenderer."""

    def test_override_directory(self, tmp_path, shade_result):
        shade_dir = tmp_path / "shade"
        shade_dir.mkdir()
        (shade_dir / "gradle-shadow.gradle.j2").write_text(
            "{% for r in relocations %}{{ r.pattern }}{% endfor %}", encoding="utf-8"
        )
        renderer = TemplateRenderer(template_dirs=[tmp_path])
        assert render_shade_config(shade_result.advice, style="gradle", renderer=renderer) == "io.projectreactor"

    def test_missing_template(self):
        with pytest.raises(DepdoctorError) as exc_info:
            TemplateRenderer().render("missing.j2", {})
        assert exc_info.value.code == "TEMPLATE_NOT_FOUND"

    def test_undefined_variable(self, tmp_path):
        (tmp_path / "broken.j2").write_text("{{ nope }}", encoding="utf-8")
        with pytest.raises(DepdoctorError) as exc_info:
            TemplateRenderer(template_dirs=[tmp_path]).render("broken.j2", {})
        assert exc_info.value.code == "TEMPLATE_ERROR"
