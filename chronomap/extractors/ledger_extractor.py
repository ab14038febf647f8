"""Extract the monetary ledger series from semicolon-delimited text."""

import csv
import io
import logging
import math

from chronomap.dates import normalize_amount, normalize_date
from chronomap.extractors.base import BaseExtractor
from chronomap.models import SecondaryEvent

logger = logging.getLogger(__name__)


class LedgerExtractor(BaseExtractor):
    """Parse ``date;amount`` rows (header skipped) into SecondaryEvents."""

    source_name = "ledger"

    def extract(self, text: str) -> list[SecondaryEvent]:
        reader = csv.reader(io.StringIO(text.strip()), delimiter=self.config.ledger_delimiter)
        events: list[SecondaryEvent] = []

        for line_no, row in enumerate(reader, start=1):
            if line_no == 1:
                continue  # header
            if not row or not any(cell.strip() for cell in row):
                continue
            if len(row) < 2:
                self._reject("missing amount column", line_no)
                continue

            ts = normalize_date(row[0])
            if ts is None:
                self._reject(f"unparseable date {row[0]!r}", line_no)
                continue
            amount = normalize_amount(row[1])
            if not math.isfinite(amount) or amount < 0:
                self._reject(f"unusable amount {row[1]!r}", line_no)
                continue

            events.append(SecondaryEvent(timestamp=ts, amount=amount))

        events.sort(key=lambda e: e.timestamp)
        if not events:
            logger.warning("No ledger events found; cumulative totals will stay at 0")
        else:
            logger.info("Extracted %d ledger events (%d dropped)", len(events), self.rejected)
        return events
