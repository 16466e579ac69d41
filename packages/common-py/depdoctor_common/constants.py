"""
depdoctor Shared Constants

This module defines constants used across depdoctor packages.
It is the single source of truth for supported values and defaults.

Usage:
    from depdoctor_common.constants import SUPPORTED_STRATEGIES

    if strategy not in SUPPORTED_STRATEGIES:
        raise ValidationError(f"Unsupported strategy: {strategy}")
"""

# =============================================================================
# VERSION INFORMATION
# =============================================================================

DEPDOCTOR_VERSION = "0.1.0"
"""Current depdoctor release"""

SUPPORTED_RULESET_VERSIONS = ["1"]
"""Rule-set file format versions this release can read"""


# =============================================================================
# SUPPORTED VALUES (must match schema definitions)
# =============================================================================

SUPPORTED_STRATEGIES = ["strict", "lenient"]
"""strict fails the run on unresolved conflicts, lenient only reports"""

SUPPORTED_RESOLUTIONS = ["highest", "nearest"]
"""Winner policies used when the build tool did not mark a selection"""

SUPPORTED_POLICIES = ["minimum", "exact-major-minor", "range"]
"""Compatibility rule policies"""

SUPPORTED_SHADE_STYLES = ["maven", "gradle"]
"""Build tools a shading stub can be generated for"""

SUPPORTED_OUTPUT_FORMATS = ["text", "json"]
"""Report output formats"""

LOG_LEVELS = ["debug", "info", "warning", "error"]
"""Valid log levels"""


# =============================================================================
# DEFAULT VALUES
# =============================================================================

DEFAULT_STRATEGY = "lenient"
DEFAULT_RESOLUTION = "highest"
DEFAULT_SHADE_PREFIX = "shaded"
DEFAULT_SHADE_STYLE = "maven"
DEFAULT_LOG_LEVEL = "warning"

DEFAULT_SETTINGS_FILE = "depdoctor.yaml"
"""Settings file picked up from the working directory when present"""


# =============================================================================
# ENVIRONMENT VARIABLE NAMES
# =============================================================================

ENV_RULE_SET = "DEPDOCTOR_RULE_SET"
ENV_STRATEGY = "DEPDOCTOR_STRATEGY"
ENV_RESOLUTION = "DEPDOCTOR_RESOLUTION"
ENV_LOG_LEVEL = "DEPDOCTOR_LOG_LEVEL"


# =============================================================================
# EXIT CODES
# =============================================================================

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_MALFORMED_INPUT = 2
EXIT_INTERRUPTED = 130
