"""Assorted utility helpers."""
from __future__ import annotations

import logging
import math
from datetime import date, datetime, timedelta
from typing import Optional

logger = logging.getLogger(__name__)


def parse_closing_date(value, today: Optional[date] = None) -> date:
    """Parse a ``YYYY-MM-DD`` closing date, falling back to today.

    Date pickers hand back ``date`` objects while text fields and saved
    snapshots hand back strings; both are accepted.  Anything that is not a
    real calendar date (``2026-02-30``, blanks, junk) resolves to ``today``.
    """

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value).strip(), "%Y-%m-%d").date()
    except (TypeError, ValueError):
        fallback = today or date.today()
        if value:
            logger.debug("invalid closing date %r, using %s", value, fallback)
        return fallback


def default_closing_date(offset_days: int = 10, today: Optional[date] = None) -> date:
    """Closing date the form starts with: ``offset_days`` from today."""
    return (today or date.today()) + timedelta(days=offset_days)


def format_money(value) -> str:
    """Format dollars as ``$1,234.56``; negatives as ``-$1,234.56``."""
    try:
        v = float(value)
    except (TypeError, ValueError):
        return "$0.00"
    if not math.isfinite(v):
        return "$0.00"
    if v < 0:
        return f"-${abs(v):,.2f}"
    return f"${v:,.2f}"
