"""
Utility functions for the POS totals engine
"""
from __future__ import annotations
import logging
from typing import Optional, Union

import structlog

from money import Fixed, MONEY_PLACES


def parse_amount(x: Union[str, int, Fixed], places: int = MONEY_PLACES) -> Fixed:
    """Parse a decimal string such as '2.99' into a Fixed"""
    return Fixed.parse(x, places)


def safe_amount(x: str, default: Optional[Fixed] = None, places: int = MONEY_PLACES) -> Optional[Fixed]:
    """Parse a decimal string, returning default when it is not a valid amount"""
    try:
        return Fixed.parse(x, places)
    except (TypeError, ValueError, ZeroDivisionError):
        return default


def configure_logging(level: str = "INFO", fmt: str = "json") -> None:
    """Set up structlog: level, ISO timestamps, JSON or console rendering"""
    renderer = structlog.dev.ConsoleRenderer() if fmt == "console" else structlog.processors.JSONRenderer()
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level.upper(), logging.INFO)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )
