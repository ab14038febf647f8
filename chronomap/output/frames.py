"""Render playback steps to PNG frames.

Each frame has:
- the map panel: boundary outline + active markers, tiered by magnitude
- the side panel: month label, running total, top-N ranking bars and the
  cumulative total curve up to the current bucket
"""

import logging
from pathlib import Path
from typing import Any

from PIL import Image, ImageColor, ImageDraw, ImageFont

from chronomap.config import FrameConfig, MarkerConfig
from chronomap.models import PlaybackStep, RankingEntry
from chronomap.output.kpi import format_amount, format_axis_amount
from chronomap.output.markers import MarkerLayer
from chronomap.playback import PlaybackTimeline

logger = logging.getLogger(__name__)

# --- Fonts ---

_FONT_BOLD = "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf"
_FONT_REGULAR = "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf"


def _font(size: int, bold: bool = False) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    try:
        return ImageFont.truetype(_FONT_BOLD if bold else _FONT_REGULAR, size)
    except OSError:
        return ImageFont.load_default(size)


# --- Colors ---

TEXT = (255, 255, 255)
TEXT_DIM = (200, 214, 216)
BAR = (235, 240, 240)
GRID = (255, 255, 255, 60)


def _rgba(color: str, opacity: float = 1.0) -> tuple[int, int, int, int]:
    r, g, b = ImageColor.getrgb(color)[:3]
    return (r, g, b, int(round(opacity * 255)))


def _rings(geojson: dict[str, Any]) -> list[list[list[float]]]:
    """Outer and inner rings of every polygon in a GeoJSON object."""
    kind = geojson.get("type")
    if kind == "FeatureCollection":
        return [ring for f in geojson.get("features") or [] for ring in _rings(f)]
    if kind == "Feature":
        return _rings(geojson.get("geometry") or {})
    if kind == "GeometryCollection":
        return [ring for g in geojson.get("geometries") or [] for ring in _rings(g)]
    if kind == "Polygon":
        return list(geojson.get("coordinates") or [])
    if kind == "MultiPolygon":
        return [ring for poly in geojson.get("coordinates") or [] for ring in poly]
    return []


class FrameRenderer:
    """Step listener that draws each step and optionally writes it to disk."""

    def __init__(
        self,
        timeline: PlaybackTimeline,
        config: FrameConfig | None = None,
        markers: MarkerConfig | None = None,
        boundary: dict[str, Any] | None = None,
        output_dir: Path | None = None,
    ) -> None:
        self.timeline = timeline
        self.config = config or FrameConfig()
        self.layer = MarkerLayer(markers)
        self.boundary_rings = _rings(boundary) if boundary else []
        self.output_dir = output_dir
        self.frames_written = 0
        if output_dir is not None:
            output_dir.mkdir(parents=True, exist_ok=True)

    def __call__(self, step: PlaybackStep) -> None:
        self.layer.apply(step)
        image = self.render(step)
        if self.output_dir is not None:
            path = self.output_dir / f"frame_{self.frames_written:04d}_{step.index:03d}.png"
            image.save(path)
            self.frames_written += 1
            logger.debug("Wrote %s", path)

    # --- Projection ---

    def project(self, lon: float, lat: float) -> tuple[float, float]:
        """Equirectangular projection of (lon, lat) into the map panel."""
        (south, west), (north, east) = self.config.bounds
        x = (lon - west) / (east - west) * self.config.map_width
        y = (north - lat) / (north - south) * self.config.height
        return x, y

    # --- Drawing ---

    def render(self, step: PlaybackStep) -> Image.Image:
        cfg = self.config
        img = Image.new("RGBA", (cfg.width, cfg.height), _rgba(cfg.background))
        draw = ImageDraw.Draw(img, "RGBA")

        self._draw_boundary(draw)
        self._draw_markers(draw)

        x0 = cfg.map_width + 24
        panel_w = cfg.width - x0 - 24
        draw.text((x0, 20), step.label, font=_font(28, bold=True), fill=TEXT)
        draw.text((x0, 60), format_amount(step.cumulative_total), font=_font(40, bold=True), fill=TEXT)
        y = self._draw_ranking(draw, step.ranking, x0, 130, panel_w)
        self._draw_budget_curve(draw, step.index, x0, y + 30, panel_w, cfg.height - y - 50)
        return img

    def _draw_boundary(self, draw: ImageDraw.ImageDraw) -> None:
        color = _rgba(self.config.boundary_color)
        for ring in self.boundary_rings:
            points = [self.project(p[0], p[1]) for p in ring if len(p) >= 2]
            if len(points) >= 2:
                draw.line(points + points[:1], fill=color, width=self.config.boundary_width)

    def _draw_markers(self, draw: ImageDraw.ImageDraw) -> None:
        for marker in self.layer.draw_order():
            x, y = self.project(marker.record.longitude, marker.record.latitude)
            r = marker.style.radius
            draw.ellipse(
                (x - r, y - r, x + r, y + r),
                fill=_rgba(marker.style.fill_color, marker.style.fill_opacity),
                outline=_rgba(marker.style.stroke_color),
                width=max(1, round(marker.style.stroke_width)),
            )

    def _draw_ranking(
        self,
        draw: ImageDraw.ImageDraw,
        ranking: list[RankingEntry],
        x0: int, y0: int, w: int,
    ) -> int:
        """Horizontal top-N bars. Returns y after drawing."""
        label_w = w // 2
        bar_h = 22
        font = _font(12)
        max_count = max((e.count for e in ranking), default=1)

        y = y0
        for entry in ranking:
            name = entry.name
            while name and draw.textbbox((0, 0), name, font=font)[2] > label_w - 8:
                name = name[:-1]
            draw.text((x0, y + 4), name, font=font, fill=TEXT_DIM)

            bar_w = int((w - label_w - 40) * entry.count / max_count)
            draw.rounded_rectangle(
                (x0 + label_w, y, x0 + label_w + max(bar_w, 2), y + bar_h - 4),
                radius=4, fill=BAR,
            )
            draw.text((x0 + label_w + bar_w + 6, y + 4), str(entry.count), font=font, fill=TEXT)
            y += bar_h
        return y

    def _draw_budget_curve(
        self,
        draw: ImageDraw.ImageDraw,
        index: int,
        x0: int, y0: int, w: int, h: int,
    ) -> None:
        if h <= 20:
            return
        series = self.timeline.budget_series(index)
        top = max(self.timeline.totals[-1], 1.0)
        font = _font(11)

        for frac in (0.0, 0.5, 1.0):
            gy = y0 + h - frac * h
            draw.line((x0 + 50, gy, x0 + w, gy), fill=GRID, width=1)
            draw.text((x0, gy - 6), format_axis_amount(top * frac), font=font, fill=TEXT_DIM)

        span = max(self.timeline.last_index, 1)
        points = [
            (x0 + 50 + (w - 50) * i / span, y0 + h - h * total / top)
            for i, (_, total) in enumerate(series)
        ]
        if len(points) >= 2:
            draw.line(points, fill=TEXT, width=2)
        elif points:
            px, py = points[0]
            draw.ellipse((px - 2, py - 2, px + 2, py + 2), fill=TEXT)
