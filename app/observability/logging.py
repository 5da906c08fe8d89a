"""
Structured Logging with Structlog.

Every log line carries the service name and version, the request id bound by
the HTTP middleware and, once the caller is resolved, the account id.
Secrets such as the generation API key never reach the output.
"""

import logging
import sys
from collections.abc import Mapping
from contextvars import Token
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from app.config import Settings, settings

REDACTED = "***"

# Event keys whose values are always masked
SECRET_KEYS = frozenset({"api_key", "gemini_api_key", "x-goog-api-key", "authorization"})

# Libraries that log every outbound request at INFO
NOISY_LOGGERS = ("httpx", "httpcore")


def add_app_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    event_dict["service"] = settings.service_name
    event_dict["version"] = settings.api_version
    return event_dict


def redact_secrets(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Mask secret-named keys and any value equal to the configured API key."""
    api_key = settings.gemini_api_key
    for key, value in event_dict.items():
        if key.lower() in SECRET_KEYS and value:
            event_dict[key] = REDACTED
        elif api_key and isinstance(value, str) and api_key in value:
            event_dict[key] = value.replace(api_key, REDACTED)
    return event_dict


def setup_logging(config: Settings | None = None) -> None:
    """
    Configure structlog over the standard library.

    JSON output looks like:
    {
        "event": "credits_consumed",
        "level": "info",
        "timestamp": "2025-01-08T12:00:00.123456Z",
        "logger": "app.services.ledger",
        "service": "creator-credits-api",
        "version": "0.1.0",
        "request_id": "3f2c...",
        "account_id": "acct-1",
        "pool": "DAILY",
        "cost": 5
    }
    """
    config = config or settings
    level = getattr(logging, config.log_level.upper())

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_app_context,
        redact_secrets,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if config.log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)  # type: ignore[no-any-return]


def bind_account(account_id: str) -> None:
    """Attach the resolved caller to every later log line of this request."""
    structlog.contextvars.bind_contextvars(account_id=account_id)


class log_context:
    """
    Bind logging context for the duration of a block.

    Values bound by an enclosing block are restored on exit, so nested
    contexts can override a key temporarily:

        with log_context(request_id=request_id):
            with log_context(account_id="acct-1"):
                logger.info("credits_consumed")
    """

    def __init__(self, **kwargs: Any) -> None:
        self.context = kwargs
        self._tokens: Mapping[str, Token[Any]] = {}

    def __enter__(self) -> None:
        self._tokens = structlog.contextvars.bind_contextvars(**self.context)

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        structlog.contextvars.reset_contextvars(**self._tokens)
