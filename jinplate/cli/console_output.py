# jinplate/cli/console_output.py
"""
Handles printing the effective configuration and run summary to the console
(stderr) when the CLI runs verbosely.
"""
import click
import structlog

from jinplate import __version__ as app_version

log = structlog.get_logger(__name__)


def print_config_output(config):
    # 'config' is a RenderConfig; printed before anything is rendered.
    click.echo(f"jinplate version {app_version}", err=True)
    click.secho("--- Effective Configuration ---", fg="cyan", err=True)
    click.echo(config.describe(), err=True)


def print_run_summary_output(metrics):
    """Prints counters and timings of a (possibly failed) run."""
    log.debug("console_summary_output_requested")
    click.secho("--- Execution Summary ---", fg="cyan", err=True)
    click.echo(metrics.summary(), err=True)
    if metrics.templates_gathered:
        click.echo(
            f"templates gathered: {metrics.templates_gathered} in {metrics.gather_duration:.3f}s",
            err=True,
        )
    slowest = sorted(metrics.render_durations.items(), key=lambda item: item[1], reverse=True)[:3]
    for name, duration in slowest:
        click.echo(f"  {duration:.3f}s  {name}", err=True)
