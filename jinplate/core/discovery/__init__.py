# jinplate/core/discovery/__init__.py
"""
Template discovery for directory mode.

Walks an input directory, honouring nested ignore files and include/exclude
glob patterns.
"""
from .walker import discover_templates, list_templates
from .pattern_matching import process_includes

__all__ = ["discover_templates", "list_templates", "process_includes"]
