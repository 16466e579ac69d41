"""
depdoctor Exception Classes

All depdoctor errors derive from DepdoctorError so callers (the CLI in
particular) can catch a single base class and still get a machine-readable
code for each failure.

Usage:
    from depdoctor_common.errors import MalformedInputError

    raise MalformedInputError("No artifact coordinates found in report")
"""

from typing import Any, Dict, List, Optional


class DepdoctorError(Exception):
    """
    Base exception for all depdoctor errors.

    Attributes:
        message: Human-readable error message
        code: Machine-readable error code
    """

    def __init__(self, message: str, code: str = "INTERNAL_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize error for JSON reports."""
        return {
            "error": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class ValidationError(DepdoctorError):
    """Raised when a configuration value fails validation."""

    def __init__(self, message: str):
        super().__init__(message, code="VALIDATION_ERROR")


class MalformedInputError(DepdoctorError):
    """
    Raised when a dependency report cannot be tokenized into
    artifact/version pairs at all.

    Fatal: the loader never returns a partial graph.
    """

    def __init__(self, message: str, line_number: Optional[int] = None):
        self.line_number = line_number
        if line_number is not None:
            message = f"{message} (line {line_number})"
        super().__init__(message, code="MALFORMED_INPUT")


class RuleConfigError(DepdoctorError):
    """Raised when a rule-set file is missing, unreadable or invalid."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        if path:
            message = f"{message}: {path}"
        super().__init__(message, code="RULE_CONFIG_ERROR")


class UnresolvableConflictError(DepdoctorError):
    """
    Raised in strict mode when a failing conflict has no applicable
    recommendation.

    Provides the offending artifacts and resolution hints.
    """

    def __init__(
        self,
        artifacts: List[str],
        message: Optional[str] = None,
        resolution_hints: Optional[List[str]] = None,
    ):
        self.artifacts = list(artifacts)
        self.resolution_hints = resolution_hints or []

        text = message or (
            f"No applicable mitigation for {len(self.artifacts)} conflicting "
            f"artifact(s): {', '.join(self.artifacts)}"
        )
        if self.resolution_hints:
            text += "\n\nHow to resolve:\n" + "\n".join(
                f"  {i+1}. {h}" for i, h in enumerate(self.resolution_hints)
            )
        super().__init__(text, code="UNRESOLVABLE_CONFLICT")

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["artifacts"] = self.artifacts
        data["resolution_hints"] = self.resolution_hints
        return data


class CyclicDependencyWarning(UserWarning):
    """
    A dependency cycle was detected and broken.

    Non-fatal: recorded as a diagnostic, analysis continues.
    """

    def __init__(self, cycle: List[str]):
        self.cycle = list(cycle)
        super().__init__(f"Dependency cycle broken: {' -> '.join(self.cycle)}")
