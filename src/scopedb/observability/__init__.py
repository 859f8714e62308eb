"""Logging helpers for scopedb."""

from .logger import JSONFormatter, configure_logging, payload_scrubber, scrub_for_log

__all__ = [
    "JSONFormatter",
    "configure_logging",
    "payload_scrubber",
    "scrub_for_log",
]
