"""
depdoctor Common Package

Shared utilities and primitives used across all depdoctor packages.

This package provides:
- Exception classes for consistent error handling
- Constants for supported values and defaults
- A structured logger with per-run ids

Usage:
    from depdoctor_common import MalformedInputError, get_logger
    from depdoctor_common import SUPPORTED_STRATEGIES
"""

# Error classes
from .errors import (
    DepdoctorError,
    ValidationError,
    MalformedInputError,
    RuleConfigError,
    UnresolvableConflictError,
    CyclicDependencyWarning,
)

# Constants
from .constants import (
    DEPDOCTOR_VERSION,
    SUPPORTED_RULESET_VERSIONS,
    SUPPORTED_STRATEGIES,
    SUPPORTED_RESOLUTIONS,
    SUPPORTED_POLICIES,
    SUPPORTED_SHADE_STYLES,
    SUPPORTED_OUTPUT_FORMATS,
    LOG_LEVELS,
    DEFAULT_STRATEGY,
    DEFAULT_RESOLUTION,
    DEFAULT_SHADE_PREFIX,
    DEFAULT_SHADE_STYLE,
    DEFAULT_LOG_LEVEL,
    DEFAULT_SETTINGS_FILE,
    ENV_RULE_SET,
    ENV_STRATEGY,
    ENV_RESOLUTION,
    ENV_LOG_LEVEL,
)

# Logger
from .logger import (
    DepdoctorLogger,
    get_logger,
    configure_logging,
    set_run_id,
    get_run_id,
    clear_run_id,
)

__version__ = DEPDOCTOR_VERSION

__all__ = [
    # Errors
    "DepdoctorError",
    "ValidationError",
    "MalformedInputError",
    "RuleConfigError",
    "UnresolvableConflictError",
    "CyclicDependencyWarning",
    # Constants
    "DEPDOCTOR_VERSION",
    "SUPPORTED_RULESET_VERSIONS",
    "SUPPORTED_STRATEGIES",
    "SUPPORTED_RESOLUTIONS",
    "SUPPORTED_POLICIES",
    "SUPPORTED_SHADE_STYLES",
    "SUPPORTED_OUTPUT_FORMATS",
    "LOG_LEVELS",
    "DEFAULT_STRATEGY",
    "DEFAULT_RESOLUTION",
    "DEFAULT_SHADE_PREFIX",
    "DEFAULT_SHADE_STYLE",
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_SETTINGS_FILE",
    "ENV_RULE_SET",
    "ENV_STRATEGY",
    "ENV_RESOLUTION",
    "ENV_LOG_LEVEL",
    # Logger
    "DepdoctorLogger",
    "get_logger",
    "configure_logging",
    "set_run_id",
    "get_run_id",
    "clear_run_id",
]
