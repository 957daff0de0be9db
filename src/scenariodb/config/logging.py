"""Log routing for the CLI.

scenariodb modules log through stdlib loggers (``scenariodb.*``) and the
store emits structlog events (``transaction.begin``, ``transaction.commit``,
``transaction.rollback`` with ``duration_ms``). Both end up in one stderr
handler, rendered for a terminal or as JSON lines with ``--log-json``.

Every event carries the database it concerns, with any password masked.
"""

from __future__ import annotations

import logging
import sys

import structlog
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError


def _masked(url: str) -> str:
    try:
        return make_url(url).render_as_string(hide_password=True)
    except ArgumentError:
        # not a URL, so there is no password part to hide
        return url


def configure_logging(
    *,
    verbose: bool = False,
    log_json: bool = False,
    database_url: str | None = None,
) -> None:
    """Route scenariodb and store events to stderr.

    Args:
        verbose: Show DEBUG events from ``scenariodb.*``, including
            transaction timings. Otherwise only warnings and errors.
        log_json: One JSON object per event instead of console lines.
        database_url: Bound as ``database`` on every event.
    """
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if log_json:
        renderers: list[structlog.types.Processor] = [
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]
    else:
        renderers = [structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())]

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *renderers],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.WARNING)

    logging.getLogger("scenariodb").setLevel(logging.DEBUG if verbose else logging.WARNING)
    # Engine echo attaches its own handler; keep the rest of sqlalchemy quiet.
    logging.getLogger("sqlalchemy").setLevel(logging.WARNING)

    structlog.contextvars.clear_contextvars()
    if database_url:
        structlog.contextvars.bind_contextvars(database=_masked(database_url))
