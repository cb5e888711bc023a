"""
Decoder for the ``Date(y,m,d)`` literals found in spreadsheet date cells.

The visualization endpoint serialises date values as JavaScript constructor
calls with a zero-based month, e.g. ``Date(2023,5,10)``. The decoder adds one to
the month and, as the connector always has, one to the day as well, so the
example above decodes to 2023-06-11.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Optional

from .core.logging import get_logger
from .core.types import Cell

DATE_LITERAL = re.compile(r"Date\((\d{4}),(\d{1,2}),(\d{1,2})\)")
DATE_FORMAT = "%Y-%m-%d"

logger = get_logger(__name__)


def parse_date_literal(text: str) -> Optional[Cell]:
    """
    Decode ``text`` into a date cell.

    Returns ``None`` when ``text`` holds no ``Date(...)`` literal or when the
    adjusted components do not form a valid calendar date.
    """

    match = DATE_LITERAL.search(text)
    if match is None:
        logger.debug("Input did not match expected format: %s", text)
        return None

    year = int(match.group(1))
    month = int(match.group(2)) + 1
    # TODO: confirm against dated sheets whether days are already 1-based; if so drop this +1.
    day = int(match.group(3)) + 1
    formatted = f"{year:04d}-{month:02d}-{day:02d}"

    try:
        parsed = datetime.strptime(formatted, DATE_FORMAT)
    except ValueError as exc:
        logger.warning("Failed to parse date '%s': %s", formatted, exc)
        return None
    return Cell.date(parsed.date())
