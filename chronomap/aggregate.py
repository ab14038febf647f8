"""Per-bucket aggregation: running ledger totals and the category ranking."""

import logging
from collections import Counter
from collections.abc import Iterable, Sequence
from datetime import datetime

from chronomap.models import RankingEntry, SecondaryEvent, TimedRecord
from chronomap.timeline import bucket_cutoff

logger = logging.getLogger(__name__)


def compute_cumulative(
    events: Sequence[SecondaryEvent],
    buckets: Sequence[datetime],
) -> list[float]:
    """Running total of event amounts at each bucket.

    Single merge pass over events (sorted ascending) and buckets: each bucket
    absorbs every not-yet-consumed event dated within or before its month.
    Amounts are non-negative, so the result never decreases.
    """
    for prev, cur in zip(events, events[1:]):
        if cur.timestamp < prev.timestamp:
            raise ValueError("events must be sorted by timestamp")

    totals: list[float] = []
    running = 0.0
    pos = 0
    for bucket in buckets:
        cutoff = bucket_cutoff(bucket)
        while pos < len(events) and events[pos].timestamp <= cutoff:
            running += events[pos].amount
            pos += 1
        totals.append(running)

    if events:
        logger.debug(
            "Cumulative totals over %d buckets: %d/%d events absorbed, final %.2f",
            len(buckets), pos, len(events), running,
        )
    return totals


def rank_categories(records: Iterable[TimedRecord], top_n: int = 10) -> list[RankingEntry]:
    """Count records per category (trimmed, upper-cased) and keep the top N."""
    counts: Counter[str] = Counter()
    for r in records:
        if not r.category or not r.category.strip():
            continue
        counts[r.category.strip().upper()] += 1

    ranked = sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))
    return [RankingEntry(name=name, count=n) for name, n in ranked[:top_n]]
