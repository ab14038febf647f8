"""KPI text for the running total, and the count-up tween used to animate it."""

from chronomap.models import PlaybackStep


def format_amount(value: float) -> str:
    """``1.23 M€`` / ``12.3 k€`` / ``950 €``."""
    if value >= 1_000_000:
        return f"{value / 1_000_000:.2f} M€"
    if value >= 1000:
        return f"{value / 1000:.1f} k€"
    return f"{value:.0f} €"


def format_axis_amount(value: float) -> str:
    """Compact y-axis tick: ``12M€`` / ``350k€``."""
    if value >= 1_000_000:
        return f"{value / 1_000_000:.0f}M€"
    return f"{value / 1000:.0f}k€"


class LinearTween:
    """Linear count-up between two values over a fixed duration."""

    def __init__(self, duration_ms: int = 500, frame_ms: int = 16) -> None:
        if duration_ms <= 0 or frame_ms <= 0:
            raise ValueError("duration_ms and frame_ms must be positive")
        self.duration_ms = duration_ms
        self.frame_ms = frame_ms

    def frames(self, start: float, end: float) -> list[float]:
        count = max(1, -(-self.duration_ms // self.frame_ms))
        return [start + (end - start) * min(i / count, 1.0) for i in range(1, count + 1)]


class KpiCounter:
    """Step listener holding the displayed total and its latest tween frames.

    The tween is swappable; the total itself always comes from the step.
    """

    def __init__(self, tween: LinearTween | None = None) -> None:
        self.tween = tween or LinearTween()
        self.value = 0.0
        self.frames: list[float] = []

    def __call__(self, step: PlaybackStep) -> None:
        self.frames = self.tween.frames(self.value, step.cumulative_total)
        self.value = step.cumulative_total

    @property
    def text(self) -> str:
        return format_amount(self.value)
