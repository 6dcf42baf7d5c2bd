"""Structured logging for the graph components using structlog.

The graph components log snake_case events (``vertex_added``,
``strongly_connected_components_computed``, ``cyclic_graph_detected``, ...)
through loggers obtained from ``get_logger``. Each SCC computation and each
topological ordering runs under its own ``run_id`` so the events of one run
can be grouped. ``configure_logging`` routes everything into the standard
library logging system, rendered as JSON or for the console.

Example:
    >>> from depcycle.log_config import configure_logging
    >>> configure_logging(level="INFO")
    >>> CycleAnalyzer(graph).has_cycle()  # logs with a run_id such as scc-1f2e3d4c5b6a
"""

import logging
import sys
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog


def configure_logging(level: str = "INFO", json_logs: bool = True) -> None:
    """Configure structlog for the depcycle package.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL), applied to
            the ``depcycle`` logger hierarchy
        json_logs: If True, use JSONRenderer; if False, use ConsoleRenderer for development

    Raises:
        ValueError: If an invalid log level is provided
    """
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        msg = f"Invalid log level: {level}"
        raise ValueError(msg)

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=numeric_level)
    logging.getLogger("depcycle").setLevel(numeric_level)

    # run_id and any caller-bound context come from contextvars
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
    ]

    if json_logs:
        processors.append(structlog.processors.JSONRenderer(sort_keys=True))
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    # Module-level loggers stay lazy so reconfiguration reaches them
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get the structlog logger for a depcycle module.

    Args:
        name: Module name, i.e. ``__name__`` of the caller
    """
    return structlog.get_logger(name)


def new_run_id(kind: str) -> str:
    """Generate an identifier for one analysis or ordering run.

    Args:
        kind: Short label for the computation, e.g. "scc" or "order"

    Returns:
        A unique run ID such as ``scc-1f2e3d4c5b6a``
    """
    return f"{kind}-{uuid.uuid4().hex[:12]}"


@contextmanager
def analysis_run(kind: str) -> Iterator[str]:
    """Bind a fresh ``run_id`` to the logging context for one computation.

    Every event logged inside the block carries the run ID. A ``run_id``
    bound by the caller beforehand is restored on exit.

    Args:
        kind: Short label for the computation

    Yields:
        The run ID bound for the duration of the block
    """
    run_id = new_run_id(kind)
    with structlog.contextvars.bound_contextvars(run_id=run_id):
        yield run_id
