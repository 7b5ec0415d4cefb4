import logging

import structlog
from structlog.stdlib import add_log_level, add_logger_name


def level_from_verbosity(verbosity: int) -> int:
    """Map a ``-v`` count onto a stdlib logging level."""
    if verbosity >= 2:
        return logging.DEBUG
    if verbosity == 1:
        return logging.INFO
    return logging.WARNING


def setup_logging(level: int = logging.INFO, json_output: bool = False) -> None:
    """Configure structlog and standard logging with the given level.

    ``json_output`` swaps the coloured console renderer for one JSON object per
    line, which is easier to diff between two generation runs.
    """
    logging.basicConfig(level=level, format="%(message)s")
    renderer = (
        structlog.processors.JSONRenderer(sort_keys=True)
        if json_output
        else structlog.dev.ConsoleRenderer(colors=True)
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            add_logger_name,
            add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=False),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
