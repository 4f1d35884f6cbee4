import logging
import sys
from typing import IO, Optional
import structlog

LOGGER_NAME = "jinplate"
VERBOSITY_LEVELS = {0: "warning", 1: "info"}


def level_for_verbosity(verbosity: int) -> str:
    # -V is info, -VV and up is debug.
    return VERBOSITY_LEVELS.get(verbosity, "debug")


def _build_renderer(force_json_logs: bool, stream: IO[str]):
    if force_json_logs:
        return structlog.processors.JSONRenderer(sort_keys=True)
    return structlog.dev.ConsoleRenderer(colors=stream.isatty())


def configure_logging(log_level_str: str = "warning", force_json_logs: bool = False,
                      stream: Optional[IO[str]] = None):
    """Routes structlog events through the stdlib `jinplate` logger onto stderr.

    Template output goes to stdout, so nothing here may ever write there.
    """
    stream = stream or sys.stderr
    log_level = getattr(logging, log_level_str.upper(), logging.WARNING)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(stream)
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(
        processor=_build_renderer(force_json_logs, stream),
        foreign_pre_chain=[structlog.stdlib.add_logger_name, structlog.stdlib.add_log_level],
    ))

    app_logger = logging.getLogger(LOGGER_NAME)
    app_logger.handlers.clear()
    app_logger.addHandler(handler)
    app_logger.setLevel(log_level)
    app_logger.propagate = False

    structlog.get_logger(__name__).debug("logging_configured", level=log_level_str, json=force_json_logs)
