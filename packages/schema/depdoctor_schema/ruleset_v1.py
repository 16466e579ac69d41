"""
depdoctor Rule-Set Schema v1

Pydantic models for validating rule-set files and analyzer settings.

Design Principles:
- Pure validation: receives dicts, validates structure, returns typed objects
- No file I/O: reading YAML is the SDK's responsibility
- Extensible: unknown top-level keys are accepted for forward compatibility

Usage:
    from depdoctor_schema import RuleSetSpec

    data = yaml.safe_load(text)
    spec = RuleSetSpec.model_validate(data)
"""

import re
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing_extensions import Self

from depdoctor_common import (
    DEFAULT_RESOLUTION,
    DEFAULT_SHADE_PREFIX,
    DEFAULT_SHADE_STYLE,
    DEFAULT_STRATEGY,
    SUPPORTED_POLICIES,
    SUPPORTED_RESOLUTIONS,
    SUPPORTED_RULESET_VERSIONS,
    SUPPORTED_SHADE_STYLES,
    SUPPORTED_STRATEGIES,
    ValidationError,
)

# group:name, name, or globs over either; no whitespace
ARTIFACT_PATTERN = r"^[\w.*?\[\]-]+(:[\w.*?\[\]-]+)?$"

# Java package prefix: dotted identifiers
SHADE_PREFIX_PATTERN = r"^[A-Za-z_][\w]*(\.[A-Za-z_][\w]*)*$"


def _check_choice(value: str, choices: List[str], label: str) -> str:
    normalized = value.strip().lower()
    if normalized not in choices:
        raise ValidationError(
            f"Unsupported {label}: '{value}'. Supported values: {', '.join(choices)}"
        )
    return normalized


# =============================================================================
# RULE-SET MODELS
# =============================================================================


class RuleSpec(BaseModel):
    """
    One compatibility rule.

    ``artifact`` is an exact ``group:name``, a bare artifact name, or a glob
    over either (``io.projectreactor:*``). ``version`` is interpreted by the
    policy: a minimum version, a ``major.minor`` pair, or a range expression.
    """

    artifact: str
    policy: str = "minimum"
    version: str
    description: Optional[str] = None

    model_config = ConfigDict(extra="forbid")

    @field_validator("artifact")
    @classmethod
    def validate_artifact(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValidationError("Rule artifact pattern cannot be empty")
        if not re.match(ARTIFACT_PATTERN, v):
            raise ValidationError(
                f"Invalid artifact pattern: '{v}'. Expected 'group:name', 'name' or a glob"
            )
        return v

    @field_validator("policy")
    @classmethod
    def validate_policy(cls, v: str) -> str:
        return _check_choice(v, SUPPORTED_POLICIES, "rule policy")

    @field_validator("version", mode="before")
    @classmethod
    def coerce_version(cls, v):
        # YAML reads `version: 2.10` as the float 2.1
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            raise ValidationError(
                f"Rule version {v!r} must be quoted in YAML, otherwise '2.10' reads as 2.1"
            )
        return v

    @field_validator("version")
    @classmethod
    def validate_version(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValidationError("Rule version cannot be empty")
        return v


class BomSpec(BaseModel):
    """A bill of materials that pins mutually compatible versions."""

    coordinates: str
    version: str
    covers: List[str] = []

    model_config = ConfigDict(extra="forbid")

    @field_validator("coordinates")
    @classmethod
    def validate_coordinates(cls, v: str) -> str:
        v = v.strip()
        parts = v.split(":")
        if len(parts) != 2 or not all(parts):
            raise ValidationError(f"BOM coordinates must be 'group:name', got '{v}'")
        return v

    @model_validator(mode="after")
    def default_covers(self) -> Self:
        """A BOM without explicit coverage covers its own group."""
        if not self.covers:
            group = self.coordinates.split(":", 1)[0]
            self.covers = [f"{group}:*"]
        return self


class RuleSetSpec(BaseModel):
    """Root model of a rule-set file."""

    version: str = "1"
    rules: List[RuleSpec] = []
    boms: List[BomSpec] = []

    model_config = ConfigDict(extra="allow")

    @field_validator("version", mode="before")
    @classmethod
    def validate_format_version(cls, v) -> str:
        v = str(v).strip()
        if v not in SUPPORTED_RULESET_VERSIONS:
            raise ValidationError(
                f"Unsupported rule-set version: '{v}'. "
                f"Supported versions: {', '.join(SUPPORTED_RULESET_VERSIONS)}"
            )
        return v


# =============================================================================
# ANALYZER SETTINGS
# =============================================================================


class AnalyzerSettings(BaseModel):
    """
    Analyzer options.

    Field aliases follow the camelCase keys of ``depdoctor.yaml``
    (``ruleSet``, ``shadePrefix``); snake_case names are accepted as well.
    """

    rule_set: Optional[str] = Field(default=None, alias="ruleSet")
    strategy: str = DEFAULT_STRATEGY
    resolution: str = DEFAULT_RESOLUTION
    shade_prefix: str = Field(default=DEFAULT_SHADE_PREFIX, alias="shadePrefix")
    shade_style: str = Field(default=DEFAULT_SHADE_STYLE, alias="shadeStyle")

    model_config = ConfigDict(populate_by_name=True, extra="forbid", frozen=True)

    @field_validator("strategy")
    @classmethod
    def validate_strategy(cls, v: str) -> str:
        return _check_choice(v, SUPPORTED_STRATEGIES, "strategy")

    @field_validator("resolution")
    @classmethod
    def validate_resolution(cls, v: str) -> str:
        return _check_choice(v, SUPPORTED_RESOLUTIONS, "resolution policy")

    @field_validator("shade_style")
    @classmethod
    def validate_shade_style(cls, v: str) -> str:
        return _check_choice(v, SUPPORTED_SHADE_STYLES, "shade style")

    @field_validator("shade_prefix")
    @classmethod
    def validate_shade_prefix(cls, v: str) -> str:
        v = v.strip()
        if not re.match(SHADE_PREFIX_PATTERN, v):
            raise ValidationError(
                f"Invalid shade prefix: '{v}'. Expected a dotted Java package name"
            )
        return v

    @property
    def is_strict(self) -> bool:
        return self.strategy == "strict"
