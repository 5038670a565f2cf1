"""
Common utilities and helper functions for the Coinchan ZAMM engine.

Timestamp handling, basis-point validation and structured loggers.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union


# Timestamp utilities
def get_current_timestamp() -> float:
    """Get current Unix timestamp as float."""
    return time.time()


def timestamp_to_iso(timestamp: float) -> str:
    """Convert Unix timestamp to ISO 8601 string."""
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat()


# Validation utilities
def is_valid_basis_points(value: Any) -> bool:
    """Check if value is an integer number of basis points (0-10000)."""
    if isinstance(value, bool) or not isinstance(value, int):
        return False
    return 0 <= value <= 10000


def bps_to_pct(bps: int) -> float:
    """Convert basis points to percent. 100 bps -> 1.0%"""
    return bps / 100.0


def pct_to_bps(pct: float) -> int:
    """Convert percent to whole basis points. 1.0% -> 100 bps"""
    return int(round(pct * 100))


# Logging utilities
def get_logger(
    name: str,
    level: Union[str, int] = logging.INFO,
    extra: Optional[Dict[str, Any]] = None,
    minimal: bool = False,
) -> logging.Logger:
    """
    Get a structured logger with consistent formatting and extra context.

    Args:
        name: Logger name (typically __name__)
        level: Logging level
        extra: Additional context fields to include in all log messages
        minimal: If True, use simplified format (time + message only)

    Returns:
        Configured logger with structured output
    """
    logger = logging.getLogger(name)

    # Set level if not already set
    if logger.level == logging.NOTSET:
        logger.setLevel(level)

    # Add structured formatter if no handlers exist
    if not logger.handlers:
        handler = logging.StreamHandler()

        if minimal:
            format_str = "%(asctime)s | %(message)s"
        else:
            format_str = (
                "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | " "%(message)s"
            )

        if extra:
            extra_fields = " | ".join([f"{k}=%(extra_{k})s" for k in extra.keys()])
            format_str = format_str.replace(
                " | %(message)s", f" | {extra_fields} | %(message)s"
            )

        formatter = logging.Formatter(format_str, datefmt="%H:%M:%S")
        handler.setFormatter(formatter)
        logger.addHandler(handler)

        # Store extra context in logger
        if extra:
            logger = logging.LoggerAdapter(
                logger, {"extra_" + k: v for k, v in extra.items()}
            )

    return logger
