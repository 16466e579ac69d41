"""
Configuration Loading
=====================

Reads analyzer settings and rule-set files.

Settings sources, lowest to highest precedence:
1. Defaults from depdoctor_schema.AnalyzerSettings
2. A YAML settings file (explicit path, or depdoctor.yaml in the working
   directory when present)
3. DEPDOCTOR_* environment variables
4. Explicit overrides (CLI options)
"""

import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml
from pydantic import ValidationError as PydanticValidationError

from depdoctor_common import (
    DEFAULT_SETTINGS_FILE,
    ENV_RESOLUTION,
    ENV_RULE_SET,
    ENV_STRATEGY,
    RuleConfigError,
    ValidationError,
)
from depdoctor_common.logger import get_logger
from depdoctor_schema import AnalyzerSettings

from ..dependencies.rules import RuleSet, describe_validation_error

logger = get_logger(__name__)

DEFAULT_RULESET_PATH = Path(__file__).parent.parent / "rules" / "default.yaml"

_ENV_FIELDS = {
    ENV_RULE_SET: "rule_set",
    ENV_STRATEGY: "strategy",
    ENV_RESOLUTION: "resolution",
}


def _read_yaml(path: Path) -> Any:
    content = path.read_text(encoding="utf-8")
    return yaml.safe_load(content)


def load_rule_set(path: Optional[Union[str, Path]] = None) -> RuleSet:
    """
    Load and validate a rule-set file.

    Args:
        path: Rule-set YAML file; the built-in default rules when None

    Returns:
        Frozen RuleSet ordered by specificity

    Raises:
        RuleConfigError: If the file is missing, not YAML, not a mapping or
            has a malformed document structure. Invalid rule and BOM
            entries are skipped and listed in ``RuleSet.problems``.
    """
    rule_path = Path(path) if path else DEFAULT_RULESET_PATH
    if not rule_path.exists():
        raise RuleConfigError("Rule-set file not found", path=str(rule_path))

    try:
        data = _read_yaml(rule_path)
    except yaml.YAMLError as e:
        raise RuleConfigError(f"Invalid YAML in rule-set file ({e})", path=str(rule_path)) from e
    except OSError as e:
        raise RuleConfigError(f"Cannot read rule-set file ({e})", path=str(rule_path)) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise RuleConfigError("Rule-set file must contain a mapping", path=str(rule_path))

    try:
        rule_set = RuleSet.from_dict(data, source=str(rule_path))
    except ValidationError as e:
        raise RuleConfigError(e.message, path=str(rule_path)) from e
    except PydanticValidationError as e:
        raise RuleConfigError(describe_validation_error(e), path=str(rule_path)) from e

    logger.info(
        "Loaded rule set",
        path=str(rule_path),
        rules=len(rule_set.rules),
        boms=len(rule_set.boms),
        skipped=len(rule_set.problems),
    )
    return rule_set


def load_settings(
    path: Optional[Union[str, Path]] = None,
    overrides: Optional[Dict[str, Any]] = None,
    env: Optional[Mapping[str, str]] = None,
) -> AnalyzerSettings:
    """
    Build analyzer settings from file, environment and overrides.

    Args:
        path: Settings YAML file. When None, ``depdoctor.yaml`` in the
            working directory is used if it exists.
        overrides: Highest-precedence values; None entries are ignored
        env: Environment mapping (defaults to os.environ)

    Returns:
        Validated AnalyzerSettings

    Raises:
        ValidationError: If a value is invalid
        RuleConfigError: If an explicit settings file is missing or unreadable
    """
    env = os.environ if env is None else env
    values: Dict[str, Any] = {}

    settings_path = Path(path) if path else Path.cwd() / DEFAULT_SETTINGS_FILE
    if settings_path.exists():
        try:
            data = _read_yaml(settings_path) or {}
        except yaml.YAMLError as e:
            raise RuleConfigError(f"Invalid YAML in settings file ({e})", path=str(settings_path)) from e
        if not isinstance(data, dict):
            raise RuleConfigError("Settings file must contain a mapping", path=str(settings_path))
        values.update(data)
        rule_set = values.get("ruleSet", values.get("rule_set"))
        if rule_set and not Path(rule_set).is_absolute():
            # relative rule-set paths are relative to the settings file
            values.pop("rule_set", None)
            values["ruleSet"] = str(settings_path.parent / rule_set)
        logger.debug("Loaded settings file", path=str(settings_path))
    elif path:
        raise RuleConfigError("Settings file not found", path=str(settings_path))

    for variable, field_name in _ENV_FIELDS.items():
        value = env.get(variable)
        if value:
            _assign(values, field_name, value)

    for field_name, value in (overrides or {}).items():
        if value is not None:
            _assign(values, field_name, value)

    try:
        return AnalyzerSettings.model_validate(values)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid settings: {describe_validation_error(e)}") from e


def _assign(values: Dict[str, Any], field_name: str, value: Any) -> None:
    """Set a field, dropping any alias spelling already present."""
    alias = AnalyzerSettings.model_fields[field_name].alias
    if alias:
        values.pop(alias, None)
    values[field_name] = value
