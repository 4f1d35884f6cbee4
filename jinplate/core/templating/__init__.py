# jinplate/core/templating/__init__.py
"""
Templating module for jinplate.

Provides the TemplateRenderer (the Jinja2-backed compile/execute capability)
and the rendering context builder shared by every template in a run.
"""
from .renderer import TemplateRenderer
from .context_builder import (
    NamedSources,
    RootValue,
    RenderingContext,
    build_rendering_context,
    template_variables,
)
from .helpers import build_function_table

__all__ = [
    "TemplateRenderer",
    "NamedSources",
    "RootValue",
    "RenderingContext",
    "build_rendering_context",
    "template_variables",
    "build_function_table",
]
