# jinplate/core/templating/renderer.py
"""
Contains the TemplateRenderer class responsible for compiling templates and
executing them against a rendering context.
"""
import io
from collections import ChainMap
from pathlib import Path
from typing import Any, Callable, Dict, IO, Mapping, Optional, Tuple

import jinja2
from jinja2.runtime import Context
import structlog

from jinplate.config.settings import DEFAULT_LEFT_DELIM, DEFAULT_RIGHT_DELIM
from jinplate.exceptions import TemplateError

from .helpers import BUILTIN_FILTERS

log = structlog.get_logger(__name__)


class AliasLoader(jinja2.BaseLoader):
    """Loads auxiliary templates by alias so any template can include or import them."""

    def __init__(self, aliases: Optional[Mapping[str, str]] = None):
        self.aliases = dict(aliases or {})

    def get_source(self, environment: jinja2.Environment, template: str) -> Tuple[str, str, Callable[[], bool]]:
        path_str = self.aliases.get(template)
        if path_str is None:
            raise jinja2.TemplateNotFound(template)
        path = Path(path_str)
        try:
            source = path.read_text(encoding="utf-8")
            mtime = path.stat().st_mtime
        except OSError as e:
            raise jinja2.TemplateNotFound(template, f"cannot read '{path_str}' for template '{template}': {e}") from e
        return source, str(path), lambda: path.exists() and path.stat().st_mtime == mtime

    def list_templates(self):
        return sorted(self.aliases)


class LazyContext(Context):
    """Jinja context that never materialises its parent mapping.

    Jinja builds `dict(parent, **vars)` for includes, imports and traceback
    rewriting, which would fetch every data source in the rendering context.
    """

    def get_all(self) -> ChainMap:
        return ChainMap(self.vars, self.parent)


class TemplateRenderer:
    """Manages the shared Jinja2 environment: delimiters, function table and auxiliary templates."""

    def __init__(
        self,
        left_delim: str = DEFAULT_LEFT_DELIM,
        right_delim: str = DEFAULT_RIGHT_DELIM,
        functions: Optional[Dict[str, Any]] = None,
        nested_templates: Optional[Mapping[str, str]] = None,
    ):
        self.left_delim = left_delim or DEFAULT_LEFT_DELIM
        self.right_delim = right_delim or DEFAULT_RIGHT_DELIM
        self.environment = jinja2.Environment(
            loader=AliasLoader(nested_templates),
            variable_start_string=self.left_delim,
            variable_end_string=self.right_delim,
            undefined=jinja2.StrictUndefined,
            autoescape=False,
            keep_trailing_newline=True,
        )
        self.environment.context_class = LazyContext
        self.environment.filters.update(BUILTIN_FILTERS)
        self.environment.globals.update(functions or {})

    def compile(self, name: str, source: str) -> jinja2.Template:
        """Compiles `source` under `name` so errors point at the right template."""
        try:
            code = self.environment.compile(source, name=name, filename=name)
        except jinja2.TemplateSyntaxError as e:
            log.error("template_compilation_failed", template=name, line=e.lineno, error=e.message)
            raise TemplateError(f"failed to compile template '{name}' (line {e.lineno}): {e.message}", name) from e
        template = self.environment.template_class.from_code(
            self.environment, code, self.environment.make_globals(None)
        )
        log.debug("template_compiled_successfully", template=name)
        return template

    def execute(self, template: jinja2.Template, variables: Mapping[str, Any], stream: IO[str]) -> None:
        """Streams the rendered output of `template` into `stream`.

        `variables` is consulted lazily, so values backed by data sources are only
        fetched when the template references them.
        """
        context = template.new_context(ChainMap(variables, template.globals), shared=True)
        try:
            for chunk in template.root_render_func(context):
                stream.write(chunk)
        except Exception:
            self.environment.handle_exception()

    def render_to_string(self, template: jinja2.Template, variables: Mapping[str, Any]) -> str:
        buffer = io.StringIO()
        self.execute(template, variables, buffer)
        return buffer.getvalue()
