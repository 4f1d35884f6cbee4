# jinplate/cli/interface.py
import sys
from dataclasses import fields as dataclass_fields
from typing import Any, Dict

import click
from click.core import ParameterSource
from click_option_group import optgroup
import structlog

from jinplate import __version__ as app_version
from jinplate.cli.console_output import print_config_output, print_run_summary_output
from jinplate.cli.post_exec import run_post_exec
from jinplate.config.loader import load_and_merge_configs, resolve_config_options
from jinplate.config.settings import RenderConfig, LEFT_DELIM_ENV_VAR, RIGHT_DELIM_ENV_VAR
from jinplate.core.pipeline import TemplateRunner
from jinplate.exceptions import JinplateError
from jinplate.logging_setup import configure_logging, level_for_verbosity

log = structlog.get_logger(__name__)

EXEC_ARGS_KEY = "jinplate.exec_args"
RENDER_CONFIG_FIELDS = [f.name for f in dataclass_fields(RenderConfig)]


class ExecCommand(click.Command):
    """Splits off everything after `--` as the command to run once rendering succeeds."""

    def _value_options(self, ctx: click.Context):
        # option strings that consume the following argument as their value.
        names = set()
        for param in self.get_params(ctx):
            if isinstance(param, click.Option) and not param.is_flag and not param.count:
                names.update(param.opts)
        return names

    def parse_args(self, ctx: click.Context, args):
        value_options = self._value_options(ctx)
        expects_value = False
        for index, arg in enumerate(args):
            if expects_value:
                expects_value = False
                continue
            if arg == "--":
                ctx.meta[EXEC_ARGS_KEY] = args[index + 1:]
                args = args[:index]
                break
            expects_value = arg in value_options
        return super().parse_args(ctx, args)


def _build_render_config(ctx: click.Context, cli_params: Dict[str, Any]) -> RenderConfig:
    # config files and profile first, then anything set on the command line or via env vars.
    raw_configs = load_and_merge_configs()
    options = resolve_config_options(raw_configs, cli_params.get("active_config_profile_name"))
    for name in RENDER_CONFIG_FIELDS:
        if ctx.get_parameter_source(name) in (ParameterSource.COMMANDLINE, ParameterSource.ENVIRONMENT):
            value = cli_params[name]
            options[name] = list(value) if isinstance(value, tuple) else value
    return RenderConfig(**options)


@click.command(cls=ExecCommand, context_settings=dict(help_option_names=["-h", "--help"]))
@optgroup.group("Input Options", help="Choose the template(s) to render.")
@optgroup.option("-f", "--file", "input_files", multiple=True, metavar="FILE", help="Template file to process. Omit to use standard input, or use --in or --input-dir. Repeatable.")
@optgroup.option("-i", "--in", "input", default=None, metavar="STRING", help="Template string to process (alternative to --file and --input-dir).")
@optgroup.option("--input-dir", "input_dir", default=None, metavar="DIR", help="Directory which is examined recursively for templates (alternative to --file and --in).")
@optgroup.option("--exclude", "exclude_globs", multiple=True, metavar="GLOB", help="Glob of files not to render. Repeatable.")
@optgroup.option("--include", "include_globs", multiple=True, metavar="GLOB", help="Glob of files to render; everything else is excluded. Repeatable.")
@optgroup.group("Output Options", help="Choose where rendered output goes.")
@optgroup.option("-o", "--out", "output_files", multiple=True, metavar="FILE", help="Output file name. Omit to use standard output. Repeatable, one per --file.")
@optgroup.option("--output-dir", "output_dir", default=None, metavar="DIR", help="Directory to store the processed templates. Only used with --input-dir. Default: '.'.")
@optgroup.option("--output-map", "output_map", default=None, metavar="TEMPLATE", help="Template string mapping each input file ('in') to an output path.")
@optgroup.group("Data Options", help="Named data sources available to templates.")
@optgroup.option("-d", "--datasource", "datasources", multiple=True, metavar="ALIAS=URL", help="Datasource in alias=URL form. Repeatable.")
@optgroup.option("-H", "--datasource-header", "datasource_headers", multiple=True, metavar="ALIAS=NAME: VALUE", help="HTTP header for an HTTP-based datasource. Repeatable.")
@optgroup.option("-c", "--context", "contexts", multiple=True, metavar="ALIAS=URL", help="Datasource exposed in the template context. Use the alias '.' to set the root context. Repeatable.")
@optgroup.group("Template Options", help="Auxiliary templates and syntax.")
@optgroup.option("-t", "--template", "templates", multiple=True, metavar="[ALIAS=]PATH", help="Additional template file or directory, includable by alias. Repeatable.")
@optgroup.option("--left-delim", "left_delim", default=None, envvar=LEFT_DELIM_ENV_VAR, show_envvar=True, metavar="DELIM", help="Override the left expression delimiter. Default: '{{'.")
@optgroup.option("--right-delim", "right_delim", default=None, envvar=RIGHT_DELIM_ENV_VAR, show_envvar=True, metavar="DELIM", help="Override the right expression delimiter. Default: '}}'.")
@optgroup.group("Application Behavior", help="Configuration profiles and logging.")
@optgroup.option("--config-profile", "active_config_profile_name", default=None, help="Load a profile from config file(s).")
@optgroup.option("-V", "--verbose", "verbosity_level", count=True, help="Verbosity: -V info, -VV debug.")
@optgroup.option("--force-json-logs", "force_json_logs", is_flag=True, default=False, help="Force JSON logs.")
@click.version_option(app_version, "-v", "--version", prog_name="jinplate", message="%(prog)s version %(version)s", help="Show version and exit.")
@click.pass_context
def main_cli(ctx: click.Context, **cli_params: Any):
    """jinplate: render Jinja2 templates from files, directories or strings
    against named data sources.

    Anything after '--' is run as a command once rendering succeeds."""

    verbosity = cli_params.get("verbosity_level", 0)
    configure_logging(log_level_str=level_for_verbosity(verbosity), force_json_logs=cli_params.get("force_json_logs", False))

    log.debug("cli_command_invoked", params=cli_params, exec_args=ctx.meta.get(EXEC_ARGS_KEY))

    try:
        config = _build_render_config(ctx, cli_params)
        config.validate()

        if verbosity:
            print_config_output(config)

        runner = TemplateRunner(config)
        try:
            runner.run()
        finally:
            if verbosity:
                print_run_summary_output(runner.metrics)

        ctx.exit(run_post_exec(ctx.meta.get(EXEC_ARGS_KEY, [])))

    except click.exceptions.Exit as e: raise e
    except JinplateError as e:
        log.error("handled_application_error_in_cli", error_type=type(e).__name__, message=str(e))
        click.secho(f"Error: {e}", fg="red", err=True)
        sys.exit(1)
    except click.ClickException as e:
        log.error("click_exception_in_cli", error_type=type(e).__name__, message=str(e))
        e.show(); sys.exit(e.exit_code)
    except Exception as e:
        log.critical("unexpected_critical_error_in_cli", message=str(e), exc_info=True)
        click.secho(f"Unexpected critical error: {e}. Please report this.", fg="red", err=True)
        sys.exit(1)
