"""Ingestion orchestrator: loads all sources and builds the engine's dataset.

The three sources are fetched concurrently and joined: if any one of them
fails, ingestion fails as a whole and no dataset is returned.
"""

import asyncio
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import requests

from chronomap.config import Config
from chronomap.extractors.base import IngestionError
from chronomap.extractors.geojson_extractor import GeoJSONExtractor
from chronomap.extractors.ledger_extractor import LedgerExtractor
from chronomap.models import SecondaryEvent, TimedRecord

logger = logging.getLogger(__name__)

__all__ = [
    "IngestedDataset",
    "IngestionError",
    "IngestionResult",
    "fetch_text",
    "ingest",
    "ingest_sources",
    "parse_sources",
]


class IngestionResult:
    """Summary of an ingestion run."""

    def __init__(self) -> None:
        self.records_accepted = 0
        self.records_rejected = 0
        self.events_accepted = 0
        self.events_rejected = 0
        self.boundary_loaded = False

    def __repr__(self) -> str:
        return (
            f"IngestionResult(records={self.records_accepted} "
            f"(+{self.records_rejected} dropped), "
            f"ledger={self.events_accepted} (+{self.events_rejected} dropped), "
            f"boundary={'yes' if self.boundary_loaded else 'no'})"
        )


@dataclass
class IngestedDataset:
    records: list[TimedRecord]
    events: list[SecondaryEvent]
    boundary: dict[str, Any] | None = None
    result: IngestionResult = field(default_factory=IngestionResult)


def fetch_text(source: str, timeout: float = 30.0) -> str:
    """Read a source from a local path or an http(s) URL."""
    if source.startswith(("http://", "https://")):
        response = requests.get(source, timeout=timeout)
        response.raise_for_status()
        return response.text
    return Path(source).read_text(encoding="utf-8-sig")


async def _fetch(source: str, timeout: float) -> str:
    try:
        return await asyncio.to_thread(fetch_text, source, timeout)
    except (OSError, UnicodeDecodeError, requests.RequestException) as e:
        raise IngestionError(f"Failed to load {source}: {e}") from e


def parse_sources(
    records_text: str,
    ledger_text: str,
    boundary_text: str | None,
    config: Config,
) -> IngestedDataset:
    """Parse already-fetched source texts into a dataset."""
    result = IngestionResult()

    record_extractor = GeoJSONExtractor(config.ingestion)
    records = record_extractor.extract(records_text)
    result.records_accepted = len(records)
    result.records_rejected = record_extractor.rejected
    if not records:
        raise IngestionError("No records with a valid date were found")

    ledger_extractor = LedgerExtractor(config.ingestion)
    events = ledger_extractor.extract(ledger_text)
    result.events_accepted = len(events)
    result.events_rejected = ledger_extractor.rejected

    boundary = None
    if boundary_text is not None:
        try:
            boundary = json.loads(boundary_text)
        except json.JSONDecodeError as e:
            raise IngestionError(f"Boundary source is not valid JSON: {e}") from e
        if not isinstance(boundary, dict):
            raise IngestionError("Boundary source is not a GeoJSON object")
        result.boundary_loaded = True

    if result.records_rejected or result.events_rejected:
        logger.info(
            "Dropped %d records and %d ledger rows that did not normalize",
            result.records_rejected, result.events_rejected,
        )
    return IngestedDataset(records=records, events=events, boundary=boundary, result=result)


async def ingest_sources(config: Config) -> IngestedDataset:
    """Fetch records, ledger and boundary together, then parse them."""
    sources = config.sources
    timeout = sources.request_timeout
    logger.info("Loading sources: %s, %s, %s", sources.records, sources.ledger, sources.boundary)

    records_text, ledger_text, boundary_text = await asyncio.gather(
        _fetch(config.resolve_source(sources.records), timeout),
        _fetch(config.resolve_source(sources.ledger), timeout),
        _fetch(config.resolve_source(sources.boundary), timeout),
    )

    dataset = parse_sources(records_text, ledger_text, boundary_text, config)
    logger.info("Ingestion complete: %s", dataset.result)
    return dataset


def ingest(config: Config) -> IngestedDataset:
    """Blocking wrapper around ingest_sources."""
    return asyncio.run(ingest_sources(config))
