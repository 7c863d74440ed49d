"""
picasort.observability.logging

Structured logging configuration.

Responsibilities:
- Configure `structlog` for one JSON object per line on stdout, or a console
  format for local runs.
- Provide a small wrapper for obtaining bound loggers.

The bootstrap CLI runs as a one-shot container step before the API starts. Its
only record is what the container runtime collects from stdout, so failures are
logged as JSON events (`bootstrap.connect_failed`, `bootstrap.step_failed`) with
the failing step as a field rather than as free text.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog


def configure_logging(*, service_name: str, level: str, json_logs: bool = True) -> None:
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
    )
    # SQL echo stays off unless explicitly asked for at DEBUG.
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    renderer: Any
    if json_logs:
        renderer = structlog.processors.JSONRenderer()
        tracebacks: list[Any] = [structlog.processors.dict_tracebacks]
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)
        tracebacks = []

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            _add_service_name(service_name),
            *tracebacks,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def _add_service_name(service_name: str):
    def processor(_: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
        event_dict.setdefault("service", service_name)
        return event_dict

    return processor


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


# --- Module Notes -----------------------------------------------------------
# The API and the bootstrap CLI share this setup; `service` tells their lines apart
# when both write to the same collector.
