"""Resolve which records are visible at a cursor instant."""

from collections.abc import Iterable
from datetime import datetime

from chronomap.models import TimedRecord


def resolve_visible(records: Iterable[TimedRecord], cursor_instant: datetime) -> frozenset[str]:
    """Identities of every record dated at or before the cursor instant."""
    return frozenset(r.id for r in records if r.timestamp <= cursor_instant)
