"""Shared test fixtures for chronomap tests."""

import json
from datetime import datetime

import pytest

from chronomap.config import Config, PlaybackConfig, SourcesConfig
from chronomap.models import SecondaryEvent, TimedRecord
from chronomap.playback import PlaybackController, build_timeline


def make_record(
    record_id: str,
    when: datetime,
    category: str | None = None,
    magnitude: float = 0.0,
    lon: float = -3.7,
    lat: float = 40.4,
) -> TimedRecord:
    return TimedRecord(
        id=record_id, longitude=lon, latitude=lat, timestamp=when,
        category=category, magnitude=magnitude,
    )


def make_feature(props: dict, lon: float = -3.7, lat: float = 40.4) -> dict:
    return {
        "type": "Feature",
        "geometry": {"type": "Point", "coordinates": [lon, lat]},
        "properties": props,
    }


def feature_collection(*features: dict) -> str:
    return json.dumps({"type": "FeatureCollection", "features": list(features)})


@pytest.fixture()
def two_records():
    """A in June 2017, B in July 2017."""
    return [
        make_record("A", datetime(2017, 6, 10), category="Adif"),
        make_record("B", datetime(2017, 7, 20), category="Renfe"),
    ]


@pytest.fixture()
def scenario_timeline(two_records):
    return build_timeline(two_records, [], PlaybackConfig(earliest_bucket=datetime(2017, 6, 1)))


@pytest.fixture()
def three_month_timeline():
    """One record per month, June to August 2017, plus two ledger rows."""
    records = [
        make_record("A", datetime(2017, 6, 10), category="Adif", magnitude=5000),
        make_record("B", datetime(2017, 7, 20), category="adif ", magnitude=50_000),
        make_record("C", datetime(2017, 8, 1), category="Renfe", magnitude=2_000_000),
    ]
    events = [
        SecondaryEvent(timestamp=datetime(2017, 6, 15), amount=100.0),
        SecondaryEvent(timestamp=datetime(2017, 8, 1), amount=50.0),
    ]
    return build_timeline(records, events, PlaybackConfig(earliest_bucket=datetime(2017, 6, 1)))


@pytest.fixture()
def controller(three_month_timeline):
    return PlaybackController(three_month_timeline)


@pytest.fixture()
def source_files(tmp_path):
    """Records, ledger and boundary files on disk, plus a Config pointing at them."""
    records = feature_collection(
        make_feature({"id": "A", "fecha": "2017-06-10", "titular": "Adif", "importe": 5000}),
        make_feature({"fecha": "03/08/2017", "titular": "Renfe", "importe": "120.000,00"}, lon=2.17, lat=41.38),
        make_feature({"id": "BAD", "fecha": "2017-13-40", "titular": "Adif"}),
    )
    ledger = "fecha;importe\n15/06/2017 09:00;1.000,50\n01/08/2017 12:30;250,00\nnope;10\n"
    boundary = json.dumps({
        "type": "Polygon",
        "coordinates": [[[-9.0, 43.0], [3.0, 42.0], [-2.0, 36.5], [-9.0, 43.0]]],
    })
    (tmp_path / "datos.geojson").write_text(records, encoding="utf-8")
    (tmp_path / "exec.csv").write_text(ledger, encoding="utf-8")
    (tmp_path / "Spain.geojson").write_text(boundary, encoding="utf-8")

    config = Config(
        sources=SourcesConfig(records="datos.geojson", ledger="exec.csv", boundary="Spain.geojson"),
        base_dir=str(tmp_path),
    )
    return config
