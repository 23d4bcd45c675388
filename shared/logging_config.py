"""
Centralized logging configuration for the click analytics service.

Sets up structured logging with:
- Environment-based configuration (dev vs production)
- JSON formatting for production, pretty console for development
- IP hashing for privacy in production
- Sampling rate configuration for high-frequency events

``setup_logging()`` is called once from ``app.create_app()``; the module-level
defaults below are read from the environment so that scripts and tests that
never build an app still get sane output.
"""

from __future__ import annotations

import hashlib
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Optional

import structlog
from structlog.types import EventDict, Processor


ENV = os.getenv("ENV", "development")
IS_PRODUCTION = ENV == "production"

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO" if IS_PRODUCTION else "DEBUG")
LOG_FORMAT = os.getenv("LOG_FORMAT", "json" if IS_PRODUCTION else "console")

# Sampling rates for high-frequency events
SAMPLING_RATES: dict[str, float] = {
    "click_recorded": float(os.getenv("SAMPLE_RATE_CLICK", "0.10")),
    "analytics_query": float(os.getenv("SAMPLE_RATE_ANALYTICS", "0.20")),
    "geo_cache": float(os.getenv("SAMPLE_RATE_GEO_CACHE", "0.01")),
}

REDACTED_FIELDS = {
    "password",
    "token",
    "authorization",
    "cookie",
    "access_token",
    "secret",
    "jwt_secret",
}

_PRESERVED_KEYS = {"level", "event", "timestamp", "logger"}


def hash_ip(ip_address: str) -> str:
    """Return a truncated SHA-256 of *ip_address* in production, the raw value otherwise."""
    if IS_PRODUCTION and ip_address:
        return hashlib.sha256(ip_address.encode()).hexdigest()[:16]
    return ip_address


def add_timestamp(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def redact_sensitive_fields(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Redact sensitive fields from logs."""
    for key in list(event_dict.keys()):
        if key in _PRESERVED_KEYS:
            continue
        lowered = key.lower()
        if lowered in REDACTED_FIELDS or any(
            sensitive in lowered for sensitive in ("password", "token", "secret")
        ):
            event_dict[key] = "***REDACTED***"
    return event_dict


def configure_structlog(log_format: str) -> None:
    """Configure structlog processors: JSON for production, console otherwise."""
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_timestamp,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        redact_sensitive_fields,
        structlog.processors.format_exc_info,
    ]

    if log_format == "json":
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=True,
            pad_event=15,
            sort_keys=False,
        )

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_stdlib_logging(log_level: str) -> None:
    """Route stdlib logging to stdout and quiet noisy third-party loggers."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper(), logging.INFO),
    )

    for noisy in ("pymongo", "pymongo.topology", "pymongo.connection", "httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def setup_logging(
    env: Optional[str] = None,
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
    sampling_rates: Optional[dict[str, float]] = None,
) -> None:
    """
    Initialize the logging system.

    Arguments override the environment-derived module defaults; the app
    factory passes values from ``LoggingSettings``.
    """
    global ENV, IS_PRODUCTION, LOG_LEVEL, LOG_FORMAT

    if env is not None:
        ENV = env
        IS_PRODUCTION = env == "production"
    if log_level is not None:
        LOG_LEVEL = log_level
    if log_format is not None:
        LOG_FORMAT = log_format
    if sampling_rates:
        SAMPLING_RATES.update(sampling_rates)

    configure_stdlib_logging(LOG_LEVEL)
    configure_structlog(LOG_FORMAT)

    structlog.get_logger(__name__).info(
        "logging_initialized",
        env=ENV,
        log_level=LOG_LEVEL,
        log_format=LOG_FORMAT,
    )
