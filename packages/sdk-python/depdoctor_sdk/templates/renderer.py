"""
depdoctor Template Renderer
===========================

Renders analysis output from Jinja2 templates:
- Maven Shade plugin configuration stubs
- Gradle Shadow relocation blocks
- Plain-text analysis summaries
"""

from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from jinja2 import (
    Environment,
    FileSystemLoader,
    StrictUndefined,
    TemplateError,
    TemplateNotFound,
    select_autoescape,
)

from depdoctor_common import DEPDOCTOR_VERSION, SUPPORTED_SHADE_STYLES, DepdoctorError, ValidationError
from depdoctor_common.logger import get_logger

from ..dependencies.advisor import Advice, RecommendationKind

logger = get_logger(__name__)

# ============================================================================
# Constants
# ============================================================================

MAVEN_SHADE_PLUGIN_VERSION = "3.5.1"

# Package templates (same directory as this renderer.py file)
PACKAGE_TEMPLATE_DIR = Path(__file__).parent

TEMPLATE_FILES = {
    "maven": "shade/maven-shade-plugin.xml.j2",
    "gradle": "shade/gradle-shadow.gradle.j2",
    "summary": "report/summary.txt.j2",
}


# ============================================================================
# Custom Jinja2 Filters
# ============================================================================


def plural_filter(count: int, singular: str, plural: Optional[str] = None) -> str:
    """Render "1 conflict" / "2 conflicts"."""
    word = singular if count == 1 else (plural or f"{singular}s")
    return f"{count} {word}"


# ============================================================================
# Renderer
# ============================================================================


class TemplateRenderer:
    """
    Jinja2 renderer for depdoctor templates.

    Additional template directories are searched before the package
    templates, so a project can override any template by file name.
    """

    def __init__(self, template_dirs: Optional[List[Path]] = None):
        dirs = [Path(d) for d in (template_dirs or [])] + [PACKAGE_TEMPLATE_DIR]
        self.template_dirs = [d for d in dirs if d.exists()]
        self.env = Environment(
            loader=FileSystemLoader([str(d) for d in self.template_dirs]),
            undefined=StrictUndefined,
            autoescape=select_autoescape(enabled_extensions=("xml.j2",), default_for_string=False),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        self.env.filters["plural"] = plural_filter

    def render(self, template_name: str, context: Dict[str, Any]) -> str:
        """
        Render a template by name.

        Raises:
            DepdoctorError: If the template is missing or fails to render
        """
        try:
            template = self.env.get_template(template_name)
            return template.render(**context)
        except TemplateNotFound as e:
            raise DepdoctorError(f"Template not found: {e.name}", code="TEMPLATE_NOT_FOUND") from e
        except TemplateError as e:
            raise DepdoctorError(f"Failed to render {template_name}: {e}", code="TEMPLATE_ERROR") from e


@lru_cache(maxsize=1)
def get_renderer() -> TemplateRenderer:
    """Shared renderer over the package templates."""
    return TemplateRenderer()


def shade_relocations(advice: Iterable[Advice]) -> List[Dict[str, Any]]:
    """
    Collect relocations from Shade recommendations.

    Artifacts of the same group share one relocation.
    """
    relocations: Dict[str, Dict[str, Any]] = {}
    for item in advice:
        recommendation = item.recommendation
        if recommendation is None or recommendation.kind != RecommendationKind.SHADE:
            continue
        pattern = recommendation.relocation_pattern
        entry = relocations.setdefault(
            pattern,
            {"pattern": pattern, "shaded_pattern": recommendation.namespace_prefix, "artifacts": []},
        )
        entry["artifacts"].append(str(recommendation.artifact))
    return [relocations[p] for p in sorted(relocations)]


def render_shade_config(
    advice: Iterable[Advice],
    style: str = "maven",
    renderer: Optional[TemplateRenderer] = None,
) -> str:
    """
    Render a shading stub for every Shade recommendation.

    Args:
        advice: Advice entries of an analysis
        style: maven (Shade plugin XML) or gradle (Shadow relocate block)
        renderer: Renderer to use (shared package renderer when None)

    Returns:
        Configuration snippet, or an empty string when nothing needs shading
    """
    if style not in SUPPORTED_SHADE_STYLES:
        raise ValidationError(
            f"Unsupported shade style: '{style}'. Supported values: {', '.join(SUPPORTED_SHADE_STYLES)}"
        )
    relocations = shade_relocations(advice)
    if not relocations:
        return ""

    context = {
        "tool_version": DEPDOCTOR_VERSION,
        "plugin_version": MAVEN_SHADE_PLUGIN_VERSION,
        "relocations": relocations,
    }
    logger.debug("Rendering shade config", style=style, relocations=len(relocations))
    return (renderer or get_renderer()).render(TEMPLATE_FILES[style], context)


def render_text(result: Any, renderer: Optional[TemplateRenderer] = None) -> str:
    """
    Render a plain-text summary of an AnalysisResult.

    Args:
        result: The analysis result
        renderer: Renderer to use (shared package renderer when None)
    """
    data = result.to_dict()
    return (renderer or get_renderer()).render(TEMPLATE_FILES["summary"], data)
