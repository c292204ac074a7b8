"""Log setup for the Lambda function and the CLI.

Every entry carries ``service``. Entries written while an invocation is being
handled also carry that invocation's ``request_id``; the binding is dropped
when the invocation ends so a warm container never reuses it.
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

SERVICE_NAME = "event-notifier"

# Libraries that log every HTTP call at INFO
QUIET_LOGGERS = ("httpx", "httpcore")


def add_service(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def _pre_chain() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        add_service,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]


def configure_logging(level: str = "INFO", json_output: bool | None = None) -> None:
    """Route structlog and stdlib records through one handler on stdout.

    Args:
        level: A stdlib level name, already validated by ``Config``
        json_output: Render JSON lines; defaults to True unless stdout is a TTY,
            so CloudWatch Logs gets JSON and a terminal gets console output
    """
    if json_output is None:
        json_output = not sys.stdout.isatty()
    numeric_level = logging.getLevelName(level.upper())

    structlog.configure(
        processors=_pre_chain()
        + [
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    renderer: Processor = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer()
    )
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(foreign_pre_chain=_pre_chain(), processor=renderer)
    )

    # The Lambda runtime installs its own root handler
    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(numeric_level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))


@contextmanager
def invocation_context(request_id: str | None = None) -> Iterator[None]:
    """Bind ``request_id`` for the duration of one invocation.

    Context left over from a previous invocation is discarded on entry, and
    everything bound inside is discarded on exit.
    """
    structlog.contextvars.clear_contextvars()
    if request_id:
        structlog.contextvars.bind_contextvars(request_id=request_id)
    try:
        yield
    finally:
        structlog.contextvars.clear_contextvars()
