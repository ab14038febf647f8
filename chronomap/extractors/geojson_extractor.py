"""Extract timed records from a GeoJSON FeatureCollection."""

import json
import logging
import math
from datetime import datetime
from typing import Any

from chronomap.dates import normalize_amount, normalize_date
from chronomap.extractors.base import BaseExtractor, IngestionError
from chronomap.models import TimedRecord

logger = logging.getLogger(__name__)

GENERATED_ID_PREFIX = "gen_"


def _first_text(props: dict[str, Any], keys: list[str]) -> str | None:
    for key in keys:
        value = props.get(key)
        if value is None:
            continue
        text = str(value).strip()
        if text:
            return text
    return None


def _magnitude(value: Any) -> float:
    """Numeric display magnitude; anything unusable counts as 0."""
    if isinstance(value, bool) or value is None:
        return 0.0
    if isinstance(value, (int, float)):
        amount = float(value)
    elif isinstance(value, str):
        amount = normalize_amount(value)
    else:
        return 0.0
    return amount if math.isfinite(amount) else 0.0


def _generated_id(n: int, taken: set[str]) -> str:
    """``gen_<n>``, advancing n past ids the source or earlier records already use."""
    while f"{GENERATED_ID_PREFIX}{n}" in taken:
        n += 1
    return f"{GENERATED_ID_PREFIX}{n}"


def _coordinates(feature: dict[str, Any]) -> tuple[float, float] | None:
    """(lon, lat) of a Point feature, or None."""
    geometry = feature.get("geometry") or {}
    coords = geometry.get("coordinates")
    if not isinstance(coords, (list, tuple)) or len(coords) < 2:
        return None
    lon, lat = coords[0], coords[1]
    if not all(isinstance(c, (int, float)) and not isinstance(c, bool) for c in (lon, lat)):
        return None
    if not (math.isfinite(lon) and math.isfinite(lat)):
        return None
    return float(lon), float(lat)


class GeoJSONExtractor(BaseExtractor):
    """Build TimedRecords from point features carrying a date property."""

    source_name = "records"

    def extract(self, text: str) -> list[TimedRecord]:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise IngestionError(f"records source is not valid JSON: {e}") from e

        if not isinstance(data, dict) or data.get("type") != "FeatureCollection":
            raise IngestionError("records source is not a GeoJSON FeatureCollection")
        features = data.get("features")
        if not isinstance(features, list):
            raise IngestionError("records source has no features list")

        candidates: list[tuple[datetime, float, float, int, dict[str, Any]]] = []
        for position, feature in enumerate(features):
            if not isinstance(feature, dict):
                self._reject("not a feature object", position)
                continue
            props = feature.get("properties")
            if not isinstance(props, dict):
                props = {}
            raw_date = props.get(self.config.date_property)
            ts = normalize_date(raw_date) if isinstance(raw_date, str) else None
            if ts is None:
                self._reject(f"unparseable date {raw_date!r}", position)
                continue
            coords = _coordinates(feature)
            if coords is None:
                self._reject("missing point coordinates", position)
                continue
            candidates.append((ts, coords[0], coords[1], position, props))

        # Canonical order: identities must not depend on arrival order.
        candidates.sort(key=lambda c: (c[0], c[1], c[2], c[3]))

        external_ids = {
            _first_text(c[4], [self.config.id_property]) for c in candidates
        }
        external_ids.discard(None)

        records: list[TimedRecord] = []
        seen_ids: set[str] = set()
        for n, (ts, lon, lat, position, props) in enumerate(candidates):
            record_id = _first_text(props, [self.config.id_property])
            if record_id is None or record_id in seen_ids:
                if record_id is not None:
                    logger.warning(
                        "Duplicate record id %r at feature %d; assigning a generated id",
                        record_id, position,
                    )
                record_id = _generated_id(n, external_ids | seen_ids)
            seen_ids.add(record_id)

            raw_date = props.get(self.config.date_property)
            records.append(TimedRecord(
                id=record_id,
                longitude=lon,
                latitude=lat,
                timestamp=ts,
                category=_first_text(props, self.config.category_properties),
                magnitude=_magnitude(props.get(self.config.magnitude_property)),
                title=_first_text(props, [self.config.title_property]),
                location=_first_text(props, self.config.location_properties),
                date_text=raw_date.strip() if isinstance(raw_date, str) else None,
                properties=props,
            ))

        logger.info(
            "Extracted %d records (%d dropped) from %d features",
            len(records), self.rejected, len(features),
        )
        return records
