"""Date and amount normalization for ingested rows.

Both helpers return sentinel values instead of raising: a row that does not
normalize is dropped by its caller, never reported.
"""

import math
import re
from datetime import datetime

ISO_DATE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})(?:[T\s].*)?$")
DMY_DATE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})(?:\s.*)?$")
AMOUNT = re.compile(r"^-?\d+(?:\.\d+)?$")


def normalize_date(raw: str | None) -> datetime | None:
    """Parse ``YYYY-MM-DD`` or ``DD/MM/YYYY`` into local midnight of that day.

    A trailing time-of-day is accepted and ignored. Returns None for empty,
    malformed or impossible dates.
    """
    if not raw:
        return None
    text = raw.strip()

    match = ISO_DATE.match(text)
    if match:
        year, month, day = (int(g) for g in match.groups())
    else:
        match = DMY_DATE.match(text)
        if not match:
            return None
        day, month, year = (int(g) for g in match.groups())

    try:
        return datetime(year, month, day)
    except ValueError:
        return None


def normalize_amount(raw: str | None) -> float:
    """Convert ``"123.456,78"`` to ``123456.78``.

    Empty input is 0.0, unparseable input is nan.
    """
    if raw is None:
        return 0.0
    text = raw.strip().strip("€").strip()
    if not text:
        return 0.0

    clean = text.replace(".", "").replace(",", ".", 1)
    if not AMOUNT.match(clean):
        return math.nan
    return float(clean)
