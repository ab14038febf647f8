"""Tests for configuration loading and validation."""

from datetime import datetime
from pathlib import Path

import pytest
from pydantic import ValidationError

from chronomap.config import (
    Config,
    FrameConfig,
    MarkerConfig,
    MarkerTierConfig,
    PlaybackConfig,
    load_config,
)


class TestDefaults:
    def test_playback_defaults(self):
        config = Config()
        assert config.playback.interval_ms == 500
        assert config.playback.earliest_bucket == datetime(2017, 6, 1)
        assert config.playback.ranking_size == 10
        assert [t.name for t in config.markers.tiers] == ["S", "M", "L", "XL"]

    def test_missing_file_gives_defaults(self, tmp_path):
        config = load_config(tmp_path / "nope.yaml")
        assert config.base_dir is None
        assert config.sources.records == "datos.geojson"


class TestLoadConfig:
    def test_yaml(self, tmp_path):
        path = tmp_path / "chronomap.yaml"
        path.write_text(
            "sources:\n"
            "  records: data/points.geojson\n"
            "playback:\n"
            "  earliest_bucket: 2018-01-01\n"
            "  label_locale: en\n"
            "  interval_ms: 250\n"
        )
        config = load_config(path)
        assert config.playback.earliest_bucket == datetime(2018, 1, 1)
        assert config.playback.label_locale == "en"
        assert config.playback.interval_ms == 250
        assert config.base_dir == str(tmp_path.resolve())
        assert config.resolve_source(config.sources.records) == str(
            tmp_path.resolve() / "data" / "points.geojson"
        )

    def test_empty_yaml(self, tmp_path):
        path = tmp_path / "chronomap.yaml"
        path.write_text("")
        assert load_config(path).playback.interval_ms == 500

    def test_project_config(self):
        config = load_config()
        assert Path(config.resolve_source(config.sources.records)).exists()


class TestResolveSource:
    def test_url_unchanged(self):
        config = Config(base_dir="/srv/data")
        url = "https://example.org/datos.geojson"
        assert config.resolve_source(url) == url

    def test_absolute_path_unchanged(self):
        assert Config(base_dir="/srv/data").resolve_source("/tmp/x.csv") == "/tmp/x.csv"

    def test_no_base_dir(self):
        assert Config().resolve_source("exec.csv") == "exec.csv"


class TestValidation:
    def test_earliest_bucket_string(self):
        assert PlaybackConfig(earliest_bucket="01/06/2017").earliest_bucket == datetime(2017, 6, 1)

    def test_earliest_bucket_disabled(self):
        assert PlaybackConfig(earliest_bucket=None).earliest_bucket is None

    @pytest.mark.parametrize("kwargs", [
        {"earliest_bucket": "June 2017"},
        {"interval_ms": 0},
        {"ranking_size": -1},
        {"label_locale": "fr"},
    ])
    def test_invalid_playback(self, kwargs):
        with pytest.raises(ValidationError):
            PlaybackConfig(**kwargs)

    def test_unsorted_tiers(self):
        with pytest.raises(ValidationError):
            MarkerConfig(tiers=[
                MarkerTierConfig(name="big", min_magnitude=100, radius=8, z_index=1),
                MarkerTierConfig(name="small", min_magnitude=0, radius=2, z_index=2),
            ])

    def test_no_tiers(self):
        with pytest.raises(ValidationError):
            MarkerConfig(tiers=[])

    @pytest.mark.parametrize("bounds", [
        ((40.0, -10.0), (40.0, 4.5)),
        ((34.4, 1.0), (45.0, 1.0)),
        ((45.0, -10.0), (34.4, 4.5)),
    ])
    def test_degenerate_frame_bounds(self, bounds):
        with pytest.raises(ValidationError):
            FrameConfig(bounds=bounds)

    def test_zero_frame_size(self):
        with pytest.raises(ValidationError):
            FrameConfig(map_width=0)
