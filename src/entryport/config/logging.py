"""Log routing for entryport.

Services log through the standard library and telemetry logs through
structlog; both end at one stderr handler so stdout only ever carries
documents and results. The structlog formatter merges the bound context
(``operation``, ``record_id``, ``site_id``) into every line, which ties a
field warning to the entry it came from.
"""

from __future__ import annotations

import logging
import sys

import structlog
from structlog.types import Processor

# Loggers that stay at WARNING whatever the verbosity.
_NOISY_LOGGERS = ("sqlalchemy.engine", "pluggy")


def _level(*, verbose: bool, quiet: bool) -> int:
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.ERROR
    return logging.WARNING


def _renderer(log_json: bool) -> list[Processor]:
    if log_json:
        # Handler failures are logged with exc_info; keep them on one line.
        return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return [structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())]


def configure_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    log_json: bool = False,
) -> None:
    """Install the stderr handler and set entryport's log level.

    Args:
        verbose: DEBUG for ``entryport`` loggers (wins over *quiet*).
        quiet: ERROR only, hiding per-field warnings.
        log_json: One JSON object per line instead of console output.
    """
    pre_chain: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                *_renderer(log_json),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.WARNING)

    logging.getLogger("entryport").setLevel(_level(verbose=verbose, quiet=quiet))
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
