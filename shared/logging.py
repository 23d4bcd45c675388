"""
Logger factory and helpers.

Provides:
- get_logger(): structlog logger bound to a module name
- should_sample(): probabilistic sampling for high-frequency events
- hash_ip(): privacy-preserving IP representation for log fields
"""

from __future__ import annotations

import random
from typing import Optional

import structlog
from structlog.stdlib import BoundLogger

from shared import logging_config
from shared.logging_config import SAMPLING_RATES, setup_logging


def get_logger(name: str) -> BoundLogger:
    """
    Get a configured logger instance.

    Example:
        >>> log = get_logger(__name__)
        >>> log.info("click_recorded", widget_id="w1", device_type="mobile")
    """
    return structlog.get_logger(name)


def should_sample(event_type: str) -> bool:
    """Return True if an event of *event_type* should be logged this time.

    Unknown event types are always logged.
    """
    sample_rate = SAMPLING_RATES.get(event_type, 1.0)
    if sample_rate >= 1.0:
        return True
    if sample_rate <= 0.0:
        return False
    return random.random() < sample_rate


def hash_ip(ip_address: Optional[str]) -> Optional[str]:
    """None-tolerant wrapper around ``logging_config.hash_ip``."""
    if ip_address is None:
        return None
    return logging_config.hash_ip(ip_address)


__all__ = [
    "get_logger",
    "hash_ip",
    "should_sample",
    "SAMPLING_RATES",
    "setup_logging",
]
