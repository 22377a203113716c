from __future__ import annotations

import logging
from typing import cast

import structlog
from structlog.typing import EventDict, Processor, WrappedLogger

from governance_sync.observability.redaction import redact_sensitive


class RedactionProcessor:
    def __call__(self, _: WrappedLogger, __: str, event_dict: EventDict) -> EventDict:
        return cast(EventDict, redact_sensitive(dict(event_dict)))


def _resolve_level(level: str) -> int:
    return getattr(logging, level.upper(), logging.INFO)


def configure_logging(level: str = "INFO", *, json_output: bool = True) -> None:
    numeric_level = _resolve_level(level)
    logging.basicConfig(level=numeric_level, format="%(message)s")

    renderer: Processor = (
        structlog.processors.JSONRenderer(sort_keys=True)
        if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            RedactionProcessor(),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
    )


def get_logger(name: str = "governance_sync") -> structlog.stdlib.BoundLogger:
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))
