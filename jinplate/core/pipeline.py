# jinplate/core/pipeline.py
import sys
import time
from contextlib import ExitStack
from typing import IO, List, Optional

from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn
from rich.console import Console as RichConsole
import structlog
import logging as stdlib_logging

from jinplate.config.settings import RenderConfig, DEFAULT_LEFT_DELIM, DEFAULT_RIGHT_DELIM
from jinplate.core.aliases import parse_template_args
from jinplate.core.datasources import Data
from jinplate.core.gathering import TemplateDescriptor, gather_templates
from jinplate.core.metrics import Metrics
from jinplate.core.naming import choose_namer
from jinplate.core.output import OutputTarget
from jinplate.core.templating import (
    TemplateRenderer,
    RenderingContext,
    build_function_table,
    build_rendering_context,
    template_variables,
)
from jinplate.exceptions import JinplateError, TemplateError
from jinplate.logging_setup import LOGGER_NAME

log = structlog.get_logger(__name__)


class TemplateRunner:
    # orchestrates one run: setup, gathering, then fail-fast rendering.
    def __init__(self, config: RenderConfig):
        self.config: RenderConfig = config
        self.log = structlog.get_logger(f"{__name__}.{self.__class__.__name__}")
        self.metrics = Metrics()
        self.renderer: Optional[TemplateRenderer] = None
        self.context: Optional[RenderingContext] = None

    def run(self) -> Metrics:
        """Renders every configured template. Raises the first error; `self.metrics` is kept either way."""
        self.metrics = Metrics()
        try:
            self.config.validate()
            self.config.apply_defaults()
            self._run_all()
        except JinplateError as e:
            e.metrics = self.metrics
            raise
        return self.metrics

    def _run_all(self) -> None:
        with ExitStack() as release_actions:
            data = Data.from_declarations(
                self.config.datasources + self.config.contexts, self.config.datasource_headers
            )
            release_actions.callback(data.cleanup)

            nested_templates = parse_template_args(self.config.templates)
            self.context = build_rendering_context(data, self.config.contexts)
            self.renderer = TemplateRenderer(
                self.config.left_delim,
                self.config.right_delim,
                functions=build_function_table(data),
                nested_templates=nested_templates,
            )
            self._run_templates()

    def _gather(self) -> List[TemplateDescriptor]:
        start = time.perf_counter()
        try:
            namer = choose_namer(self.config, self.renderer, self.context)
            templates = gather_templates(self.config, namer)
        except JinplateError:
            self.metrics.errors += 1
            raise
        finally:
            self.metrics.gather_duration = time.perf_counter() - start
        self.metrics.templates_gathered = len(templates)
        return templates

    def _run_templates(self) -> None:
        templates = self._gather()

        app_log_level = stdlib_logging.getLogger(LOGGER_NAME).getEffectiveLevel()
        progress_disabled = app_log_level > stdlib_logging.INFO or not sys.stderr.isatty()
        stderr_console = RichConsole(file=sys.stderr)

        start = time.perf_counter()
        try:
            with Progress(
                SpinnerColumn(), TextColumn("[bold blue]{task.description}"), BarColumn(),
                transient=True, disable=progress_disabled, console=stderr_console
            ) as progress:
                render_task = progress.add_task("rendering templates...", total=len(templates))
                for template in templates:
                    template_start = time.perf_counter()
                    try:
                        self.run_template(template)
                    except Exception:
                        self.metrics.errors += 1
                        raise
                    finally:
                        self.metrics.render_durations[template.name] = time.perf_counter() - template_start
                    self.metrics.templates_processed += 1
                    progress.update(render_task, advance=1, description=f"rendered {template.name}")
        finally:
            self.metrics.total_render_duration = time.perf_counter() - start
        self.log.info("templates_rendered", processed=self.metrics.templates_processed,
                      duration=round(self.metrics.total_render_duration, 4))

    def run_template(self, template: TemplateDescriptor) -> None:
        compiled = self.renderer.compile(template.name, template.contents)
        target = template.target
        try:
            stream = target.open()
            self.renderer.execute(compiled, template_variables(self.context), stream)
        except TemplateError:
            raise
        except Exception as e:
            self.log.error("template_rendering_error_occurred", template=template.name, error=str(e))
            raise TemplateError(f"failed to render template '{template.name}': {e}", template.name) from e
        finally:
            target.release()
        self.log.debug("template_rendered", template=template.name, target=target.name)


def run_templates(config: RenderConfig) -> Metrics:
    """Runs every template the configuration describes and returns the run's metrics.

    On failure the raised `JinplateError` carries the same metrics as `.metrics`.
    """
    return TemplateRunner(config).run()


def render_template(in_stream: IO[str], out_stream: IO[str],
                    left_delim: str = DEFAULT_LEFT_DELIM, right_delim: str = DEFAULT_RIGHT_DELIM) -> None:
    """Renders a single template read from `in_stream` into `out_stream`.

    No data sources or auxiliary templates are configured; the caller keeps
    ownership of both streams.
    """
    with ExitStack() as release_actions:
        data = Data()
        release_actions.callback(data.cleanup)
        renderer = TemplateRenderer(left_delim, right_delim, functions=build_function_table(data))
        template = TemplateDescriptor("<input>", in_stream.read(), OutputTarget.for_stream(out_stream))
        compiled = renderer.compile(template.name, template.contents)
        try:
            renderer.execute(compiled, {}, template.target.open())
        except Exception as e:
            raise TemplateError(f"failed to render template '{template.name}': {e}", template.name) from e
        finally:
            template.target.release()
