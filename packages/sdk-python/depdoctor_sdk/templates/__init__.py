"""
Template System Module
======================

Renders shading stubs (Maven Shade plugin, Gradle Shadow) and plain-text
analysis summaries from Jinja2 templates.
"""

from .renderer import (
    MAVEN_SHADE_PLUGIN_VERSION,
    TEMPLATE_FILES,
    TemplateRenderer,
    get_renderer,
    render_shade_config,
    render_text,
    shade_relocations,
)

__all__ = [
    "TemplateRenderer",
    "get_renderer",
    "render_shade_config",
    "render_text",
    "shade_relocations",
    "MAVEN_SHADE_PLUGIN_VERSION",
    "TEMPLATE_FILES",
]
