"""jinplate: render Jinja2 templates from files, directories or inline strings
against named data sources."""
import logging

__version__ = "0.3.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

from jinplate.config.settings import RenderConfig  # noqa: E402
from jinplate.core.metrics import Metrics  # noqa: E402
from jinplate.core.pipeline import TemplateRunner, run_templates, render_template  # noqa: E402

__all__ = [
    "__version__",
    "RenderConfig",
    "Metrics",
    "TemplateRunner",
    "run_templates",
    "render_template",
]
