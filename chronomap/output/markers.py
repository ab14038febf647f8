"""Marker styling tiers and the layer that keeps rendered markers in sync."""

import logging
from dataclasses import dataclass

from pydantic import BaseModel

from chronomap.config import MarkerConfig
from chronomap.models import PlaybackStep, TimedRecord

logger = logging.getLogger(__name__)


class MarkerStyle(BaseModel):
    tier: str
    radius: int
    z_index: int
    fill_color: str
    stroke_color: str
    stroke_width: float
    fill_opacity: float


def style_for_magnitude(magnitude: float, config: MarkerConfig | None = None) -> MarkerStyle:
    """Pick the highest tier whose breakpoint the magnitude reaches."""
    config = config or MarkerConfig()
    tier = config.tiers[0]
    for candidate in config.tiers:
        if magnitude >= candidate.min_magnitude:
            tier = candidate
    return MarkerStyle(
        tier=tier.name,
        radius=tier.radius,
        z_index=tier.z_index,
        fill_color=config.fill_color,
        stroke_color=config.stroke_color,
        stroke_width=config.stroke_width,
        fill_opacity=config.fill_opacity,
    )


@dataclass
class ActiveMarker:
    record: TimedRecord
    style: MarkerStyle


class MarkerLayer:
    """Rendered markers keyed by record id, updated from step deltas.

    Unchanged markers are never touched; only entering ids are added and
    leaving ids removed.
    """

    def __init__(self, config: MarkerConfig | None = None) -> None:
        self.config = config or MarkerConfig()
        self.active: dict[str, ActiveMarker] = {}
        self.added = 0
        self.removed = 0

    def __call__(self, step: PlaybackStep) -> None:
        self.apply(step)

    def apply(self, step: PlaybackStep) -> None:
        for record_id in step.leaving:
            if self.active.pop(record_id, None) is not None:
                self.removed += 1

        for record in step.entering_records:
            if record.id in self.active:
                continue
            self.active[record.id] = ActiveMarker(
                record=record,
                style=style_for_magnitude(record.magnitude, self.config),
            )
            self.added += 1

    @property
    def ids(self) -> frozenset[str]:
        return frozenset(self.active)

    def draw_order(self) -> list[ActiveMarker]:
        """Bottom-most first: large markers under small ones, older under newer."""
        return sorted(
            self.active.values(),
            key=lambda m: (m.style.z_index, m.record.timestamp, m.record.id),
        )
