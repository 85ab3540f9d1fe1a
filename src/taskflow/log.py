"""structlog setup.

Learn: structlog is configured once per process, before the first log
call. The contextvars processor merges per-request values (request_id,
user_id) bound by the middleware and the auth dependency into every
entry; the renderer is console for development, JSON for log shippers.
"""

import logging

import structlog


def configure_logging(level: str = "info", fmt: str = "console") -> None:
    """Configure structlog with the specified level and format."""
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
    ]
    if fmt == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper(), logging.INFO)
        ),
        cache_logger_on_first_use=False,
    )
