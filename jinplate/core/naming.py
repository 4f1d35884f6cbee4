# jinplate/core/naming.py
"""
Output naming strategies for directory mode: a static join onto the output
directory, or an output-map template rendered once per input file.
"""
import os
from typing import Callable, Optional

import jinja2
import structlog

from jinplate.config.settings import RenderConfig, DEFAULT_OUTPUT_DIR
from jinplate.core.templating.context_builder import RenderingContext, mapping_context
from jinplate.core.templating.renderer import TemplateRenderer
from jinplate.exceptions import NamingError, TemplateError, DataSourceError

log = structlog.get_logger(__name__)

OUTPUT_MAP_TEMPLATE_NAME = "<OutputMap>"

OutputNamer = Callable[[str], str]


class StaticNamer:
    """Joins the input path onto the output directory."""

    def __init__(self, output_dir: str):
        self.output_dir = output_dir

    def __call__(self, in_path: str) -> str:
        return os.path.normpath(os.path.join(self.output_dir, in_path))


class MappingNamer:
    """Renders the output-map template with `in` set to the input path.

    The template is compiled once, on first use. It sees the non-reserved context
    entries directly and the whole original context under `ctx`.
    """

    def __init__(self, output_map: str, renderer: TemplateRenderer, context: Optional[RenderingContext]):
        self.output_map = output_map
        self.renderer = renderer
        self.context = context
        self._template: Optional[jinja2.Template] = None

    def _compiled(self) -> jinja2.Template:
        if self._template is None:
            try:
                self._template = self.renderer.compile(OUTPUT_MAP_TEMPLATE_NAME, self.output_map)
            except TemplateError as e:
                raise NamingError(f"failed to compile output map {self.output_map!r}: {e}") from e
        return self._template

    def __call__(self, in_path: str) -> str:
        template = self._compiled()
        try:
            derived = mapping_context(self.context, in_path)
        except DataSourceError as e:
            raise NamingError(f"failed to build output map context for {in_path}: {e}", in_path) from e
        try:
            rendered = self.renderer.render_to_string(template, derived)
        except Exception as e:
            raise NamingError(
                f"failed to render output map with ctx {sorted(derived)} and in path {in_path}: {e}",
                in_path,
                sorted(derived),
            ) from e
        out_path = os.path.normpath(rendered.strip())
        log.debug("output_path_mapped", in_path=in_path, out_path=out_path)
        return out_path


def choose_namer(config: RenderConfig, renderer: TemplateRenderer,
                 context: Optional[RenderingContext]) -> OutputNamer:
    if config.output_map:
        return MappingNamer(config.output_map, renderer, context)
    return StaticNamer(config.output_dir or DEFAULT_OUTPUT_DIR)
