"""Structured logging for the intake client.

structlog events and stdlib records (httpx) share one processor chain and one
stdout handler. Every event is tagged with the service name, and values that
identify the client (name, email, raw form payloads) are masked before
rendering, so draft logs can be shipped without carrying intake answers.
"""

import logging
import logging.config

import structlog

REDACTED = "[redacted]"

# Keys whose values are client answers, in both Python and wire spelling.
SENSITIVE_KEYS = frozenset({"full_name", "fullName", "email", "form", "data"})


def redact_client_details(logger, method_name, event_dict):
    """Mask intake answers that identify the client."""
    for key in SENSITIVE_KEYS & event_dict.keys():
        event_dict[key] = REDACTED
    return event_dict


def tag_service(service: str):
    """Processor adding ``service`` unless the event already names one."""

    def _tag(logger, method_name, event_dict):
        event_dict.setdefault("service", service)
        return event_dict

    return _tag


def configure_structlog(
    log_level: str = "INFO",
    json_logs: bool = True,
    service: str = "client-intake",
) -> None:
    """Route structlog and stdlib logging through the intake processor chain.

    Call once from the composition root, before sessions start logging:
    module loggers cache their processor chain on first use.

    Args:
        log_level: Level for the root and ``intake`` loggers
        json_logs: True for one JSON object per line, False for ConsoleRenderer
        service: Value of the ``service`` key on every event
    """
    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        tag_service(service),
        redact_client_details,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    renderer = structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "intake": {
                "()": structlog.stdlib.ProcessorFormatter,
                "processors": [
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    renderer,
                ],
                "foreign_pre_chain": shared_processors,
            },
        },
        "handlers": {
            "stdout": {
                "class": "logging.StreamHandler",
                "formatter": "intake",
                "stream": "ext://sys.stdout",
            },
        },
        "root": {"handlers": ["stdout"], "level": log_level},
        "loggers": {
            "intake": {"level": log_level},
            # Request lines would repeat every autosave.
            "httpx": {"level": "WARNING"},
            "httpcore": {"level": "WARNING"},
        },
    })

    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
