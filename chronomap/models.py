"""Pydantic models for the chronomap playback engine."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PlaybackStatus(str, Enum):
    PAUSED = "paused"
    PLAYING = "playing"


# --- Ingested entities (immutable once built) ---


class TimedRecord(BaseModel):
    """A geolocated, dated record shown as a map marker."""
    model_config = ConfigDict(frozen=True)

    id: str
    longitude: float
    latitude: float
    timestamp: datetime
    category: str | None = None
    magnitude: float = 0.0
    title: str | None = None
    location: str | None = None
    date_text: str | None = None  # raw date string, shown as-is in popups
    properties: dict[str, Any] = Field(default_factory=dict)


class SecondaryEvent(BaseModel):
    """A dated monetary amount from the ledger series."""
    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    amount: float


# --- Engine outputs ---


class MarkerDiff(BaseModel):
    model_config = ConfigDict(frozen=True)

    entering: frozenset[str] = frozenset()
    leaving: frozenset[str] = frozenset()

    @property
    def is_empty(self) -> bool:
        return not self.entering and not self.leaving


class RankingEntry(BaseModel):
    name: str
    count: int


class PlaybackState(BaseModel):
    """Cursor state owned by one playback session.

    Transitions never mutate a state; they return a new one.
    """
    model_config = ConfigDict(frozen=True)

    index: int = 0
    status: PlaybackStatus = PlaybackStatus.PAUSED
    interacted: bool = False
    visible: frozenset[str] = frozenset()  # last rendered visible set

    @property
    def is_playing(self) -> bool:
        return self.status == PlaybackStatus.PLAYING


class PlaybackStep(BaseModel):
    """Everything the presentation layer needs to render one cursor position."""
    index: int
    bucket: datetime
    label: str
    cumulative_total: float
    entering: frozenset[str] = frozenset()
    leaving: frozenset[str] = frozenset()
    entering_records: list[TimedRecord] = Field(default_factory=list)
    visible_count: int = 0
    ranking: list[RankingEntry] = Field(default_factory=list)
