"""
Tests for rule-set and settings schema models.

Tests cover:
- Valid rule sets (minimal and full)
- Field validators (artifact pattern, policy, version quoting)
- BOM coverage defaults
- Analyzer settings aliases and choices
"""

import pydantic
import pytest

from depdoctor_common import ValidationError
from depdoctor_schema import AnalyzerSettings, BomSpec, RuleSetSpec, RuleSpec


# =============================================================================
# RULE SET
# =============================================================================


class TestRuleSetSpec:
    """Tests for the rule-set root model"""

    def test_minimal(self, minimal_rule_set):
        spec = RuleSetSpec.model_validate(minimal_rule_set)
        assert spec.version == "1"
        assert len(spec.rules) == 1
        assert spec.rules[0].policy == "minimum"
        assert spec.boms == []

    def test_full(self, full_rule_set):
        spec = RuleSetSpec.model_validate(full_rule_set)
        assert [r.policy for r in spec.rules] == ["exact-major-minor", "range"]
        assert spec.rules[0].description == "Spring Boot 2.7 line"
        assert spec.boms[0].covers == ["com.fasterxml.jackson.core:*"]

    def test_empty_document(self):
        spec = RuleSetSpec.model_validate({})
        assert spec.rules == []

    def test_numeric_format_version(self):
        """version: 1 in YAML is an int"""
        assert RuleSetSpec.model_validate({"version": 1}).version == "1"

    def test_unsupported_format_version(self):
        with pytest.raises(ValidationError, match="Unsupported rule-set version"):
            RuleSetSpec.model_validate({"version": "2"})

    def test_unknown_top_level_keys_allowed(self, minimal_rule_set):
        minimal_rule_set["owner"] = "platform-team"
        spec = RuleSetSpec.model_validate(minimal_rule_set)
        assert len(spec.rules) == 1


class TestRuleSpec:
    """Tests for a single rule"""

    @pytest.mark.parametrize(
        "pattern",
        ["jackson-core", "io.projectreactor:reactor-core", "io.netty:netty-*", "*:guava"],
    )
    def test_valid_patterns(self, pattern):
        assert RuleSpec(artifact=pattern, version="1.0").artifact == pattern

    @pytest.mark.parametrize("pattern", ["a b", "a:b:c", "g:"])
    def test_invalid_patterns(self, pattern):
        with pytest.raises(ValidationError, match="Invalid artifact pattern"):
            RuleSpec(artifact=pattern, version="1.0")

    def test_empty_pattern(self):
        with pytest.raises(ValidationError, match="cannot be empty"):
            RuleSpec(artifact="  ", version="1.0")

    def test_policy_is_normalized(self):
        assert RuleSpec(artifact="a", policy=" Range ", version="[1,2)").policy == "range"

    def test_unknown_policy(self):
        with pytest.raises(ValidationError, match="Unsupported rule policy"):
            RuleSpec(artifact="a", policy="latest", version="1.0")

    def test_unquoted_version_rejected(self):
        """2.10 would silently become 2.1"""
        with pytest.raises(ValidationError, match="must be quoted"):
            RuleSpec(artifact="a", version=2.10)

    def test_empty_version(self):
        with pytest.raises(ValidationError, match="cannot be empty"):
            RuleSpec(artifact="a", version=" ")

    def test_missing_version(self):
        with pytest.raises(pydantic.ValidationError):
            RuleSpec(artifact="a")

    def test_unknown_field_rejected(self):
        with pytest.raises(pydantic.ValidationError):
            RuleSpec(artifact="a", version="1.0", severity="high")


class TestBomSpec:
    """Tests for BOM entries"""

    def test_default_covers_own_group(self):
        bom = BomSpec(coordinates="io.netty:netty-bom", version="4.1.100.Final")
        assert bom.covers == ["io.netty:*"]

    def test_explicit_covers_kept(self):
        bom = BomSpec(coordinates="g:bom", version="1", covers=["other:*"])
        assert bom.covers == ["other:*"]

    @pytest.mark.parametrize("coordinates", ["netty-bom", "a:b:c", ":bom"])
    def test_invalid_coordinates(self, coordinates):
        with pytest.raises(ValidationError, match="group:name"):
            BomSpec(coordinates=coordinates, version="1")


# =============================================================================
# SETTINGS
# =============================================================================


class TestAnalyzerSettings:
    """Tests for analyzer settings"""

    def test_defaults(self):
        settings = AnalyzerSettings()
        assert settings.rule_set is None
        assert settings.strategy == "lenient"
        assert settings.resolution == "highest"
        assert settings.shade_prefix == "shaded"
        assert settings.shade_style == "maven"
        assert settings.is_strict is False

    def test_camel_case_aliases(self):
        settings = AnalyzerSettings.model_validate(
            {"ruleSet": "rules.yaml", "shadePrefix": "com.acme.shaded", "shadeStyle": "gradle"}
        )
        assert settings.rule_set == "rules.yaml"
        assert settings.shade_prefix == "com.acme.shaded"
        assert settings.shade_style == "gradle"

    def test_snake_case_names(self):
        settings = AnalyzerSettings(rule_set="rules.yaml", strategy="STRICT")
        assert settings.rule_set == "rules.yaml"
        assert settings.is_strict is True

    def test_dump_by_alias(self):
        data = AnalyzerSettings().model_dump(by_alias=True)
        assert "ruleSet" in data
        assert "shadePrefix" in data

    @pytest.mark.parametrize(
        "field,value,message",
        [
            ("strategy", "paranoid", "Unsupported strategy"),
            ("resolution", "oldest", "Unsupported resolution policy"),
            ("shade_style", "ant", "Unsupported shade style"),
            ("shade_prefix", "1bad.prefix", "Invalid shade prefix"),
            ("shade_prefix", "com..acme", "Invalid shade prefix"),
        ],
    )
    def test_invalid_values(self, field, value, message):
        with pytest.raises(ValidationError, match=message):
            AnalyzerSettings(**{field: value})

    def test_frozen(self):
        settings = AnalyzerSettings()
        with pytest.raises(pydantic.ValidationError):
            settings.strategy = "strict"

    def test_unknown_key_rejected(self):
        with pytest.raises(pydantic.ValidationError):
            AnalyzerSettings.model_validate({"mode": "strict"})
