"""Configuration loading for chronomap."""

from datetime import date, datetime
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

from chronomap.dates import normalize_date


class SourcesConfig(BaseModel):
    records: str = "datos.geojson"
    ledger: str = "exec.csv"
    boundary: str = "Spain.geojson"
    request_timeout: float = 30.0


class IngestionConfig(BaseModel):
    date_property: str = "fecha"
    id_property: str = "id"
    category_properties: list[str] = Field(default_factory=lambda: ["titular", "TITULAR"])
    magnitude_property: str = "importe"
    title_property: str = "obra"
    location_properties: list[str] = Field(default_factory=lambda: ["localizacion", "MUNICIPIO"])
    ledger_delimiter: str = ";"


class PlaybackConfig(BaseModel):
    interval_ms: int = 500
    # Forced first bucket; None starts at the earliest record's month.
    earliest_bucket: datetime | None = datetime(2017, 6, 1)
    ranking_size: int = 10
    label_locale: str = "es"

    @field_validator("earliest_bucket", mode="before")
    @classmethod
    def _coerce_date(cls, v: Any) -> Any:
        # YAML yields a date for 2017-06-01; strings may use either date shape.
        if isinstance(v, date) and not isinstance(v, datetime):
            return datetime(v.year, v.month, v.day)
        if isinstance(v, str):
            parsed = normalize_date(v)
            if parsed is None:
                raise ValueError(f"invalid earliest_bucket date: {v!r}")
            return parsed
        return v

    @field_validator("interval_ms", "ranking_size")
    @classmethod
    def _positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be positive")
        return v

    @field_validator("label_locale")
    @classmethod
    def _known_locale(cls, v: str) -> str:
        if v not in ("es", "en"):
            raise ValueError(f"unsupported label locale: {v}")
        return v


class MarkerTierConfig(BaseModel):
    name: str
    min_magnitude: float
    radius: int
    z_index: int


class MarkerConfig(BaseModel):
    fill_color: str = "#C4D600"
    stroke_color: str = "#00292E"
    stroke_width: float = 1.5
    fill_opacity: float = 0.8
    # Ordered from smallest to largest; smaller markers draw on top.
    tiers: list[MarkerTierConfig] = Field(default_factory=lambda: [
        MarkerTierConfig(name="S", min_magnitude=0, radius=3, z_index=503),
        MarkerTierConfig(name="M", min_magnitude=10_000, radius=6, z_index=502),
        MarkerTierConfig(name="L", min_magnitude=100_000, radius=9, z_index=501),
        MarkerTierConfig(name="XL", min_magnitude=1_000_000, radius=12, z_index=500),
    ])

    @field_validator("tiers")
    @classmethod
    def _ascending(cls, v: list[MarkerTierConfig]) -> list[MarkerTierConfig]:
        if not v:
            raise ValueError("at least one marker tier is required")
        breakpoints = [t.min_magnitude for t in v]
        if breakpoints != sorted(breakpoints):
            raise ValueError("marker tiers must be ordered by min_magnitude")
        return v


class FrameConfig(BaseModel):
    width: int = 1280
    height: int = 800
    map_width: int = 800
    # (south, west), (north, east)
    bounds: tuple[tuple[float, float], tuple[float, float]] = ((34.4, -10.0), (45.0, 4.5))
    background: str = "#00292E"
    boundary_color: str = "#FFFFFF"
    boundary_width: int = 3

    @field_validator("bounds")
    @classmethod
    def _non_empty_bounds(
        cls, v: tuple[tuple[float, float], tuple[float, float]],
    ) -> tuple[tuple[float, float], tuple[float, float]]:
        (south, west), (north, east) = v
        if not (south < north and west < east):
            raise ValueError("bounds must be ((south, west), (north, east)) with south < north and west < east")
        return v

    @field_validator("width", "height", "map_width")
    @classmethod
    def _positive_size(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be positive")
        return v


class Config(BaseModel):
    sources: SourcesConfig = Field(default_factory=SourcesConfig)
    ingestion: IngestionConfig = Field(default_factory=IngestionConfig)
    playback: PlaybackConfig = Field(default_factory=PlaybackConfig)
    markers: MarkerConfig = Field(default_factory=MarkerConfig)
    frames: FrameConfig = Field(default_factory=FrameConfig)
    base_dir: str | None = None

    def resolve_source(self, source: str) -> str:
        """Resolve a source path relative to the config file's directory.

        URLs are returned unchanged.
        """
        if source.startswith(("http://", "https://")):
            return source
        p = Path(source).expanduser()
        if p.is_absolute() or self.base_dir is None:
            return str(p)
        return str(Path(self.base_dir) / p)


def _project_root() -> Path:
    """Return the chronomap project root directory."""
    return Path(__file__).parent.parent


def load_config(config_path: Path | None = None) -> Config:
    """Load config from YAML file. Falls back to defaults if file missing."""
    if config_path is None:
        config_path = _project_root() / "chronomap.yaml"

    if config_path.exists():
        raw: dict[str, Any] = yaml.safe_load(config_path.read_text()) or {}
        raw.setdefault("base_dir", str(config_path.resolve().parent))
        return Config(**raw)

    return Config()
