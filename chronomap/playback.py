"""Playback engine: turns a bucket cursor into visible sets, deltas and totals.

State lives in an explicit PlaybackState. The module-level transitions
(seek, play, tick, pause) take a timeline and a state and return the next
state plus the step to render, if any. PlaybackController wraps one state for
a session and fans steps out to listeners.
"""

import logging
from collections import deque
from collections.abc import Callable, Iterable, Sequence
from datetime import datetime

from chronomap.aggregate import compute_cumulative, rank_categories
from chronomap.config import PlaybackConfig
from chronomap.diff import diff_markers
from chronomap.models import (
    PlaybackState,
    PlaybackStatus,
    PlaybackStep,
    SecondaryEvent,
    TimedRecord,
)
from chronomap.timeline import bucket_cutoff, bucket_label, build_monthly_buckets, short_label
from chronomap.visibility import resolve_visible

logger = logging.getLogger(__name__)

StepListener = Callable[[PlaybackStep], None]
Transition = Callable[[PlaybackState], tuple[PlaybackState, PlaybackStep | None]]


class PlaybackTimeline:
    """Immutable data for one session: records, buckets and per-bucket totals."""

    def __init__(
        self,
        records: Iterable[TimedRecord],
        buckets: Sequence[datetime],
        totals: Sequence[float],
        ranking_size: int = 10,
        label_locale: str = "es",
    ) -> None:
        if not buckets:
            raise ValueError("a timeline needs at least one bucket")
        if len(totals) != len(buckets):
            raise ValueError("totals must have one value per bucket")

        self.records = tuple(sorted(records, key=lambda r: r.timestamp))
        self.buckets = tuple(buckets)
        self.totals = tuple(totals)
        self.ranking_size = ranking_size
        self.label_locale = label_locale
        self._by_id = {r.id: r for r in self.records}

    @property
    def last_index(self) -> int:
        return len(self.buckets) - 1

    def total_bucket_count(self) -> int:
        return len(self.buckets)

    def label(self, index: int) -> str:
        return bucket_label(self.buckets[index], self.label_locale)

    def record(self, record_id: str) -> TimedRecord:
        return self._by_id[record_id]

    def budget_series(self, index: int) -> list[tuple[str, float]]:
        """(date label, running total) for every bucket up to and including index."""
        return [
            (short_label(b), t)
            for b, t in zip(self.buckets[: index + 1], self.totals[: index + 1])
        ]

    def clamp(self, index: int) -> int:
        return max(0, min(index, self.last_index))


def build_timeline(
    records: Sequence[TimedRecord],
    events: Sequence[SecondaryEvent],
    config: PlaybackConfig | None = None,
) -> PlaybackTimeline:
    """Build the bucket axis and precompute the cumulative ledger totals."""
    config = config or PlaybackConfig()
    if not records:
        raise ValueError("at least one record is required to build a timeline")

    max_instant = max(r.timestamp for r in records)
    min_instant = config.earliest_bucket or min(r.timestamp for r in records)
    if max_instant < min_instant:
        logger.warning(
            "All records predate the first bucket %s; they will all show at bucket 0",
            min_instant.date(),
        )

    buckets = build_monthly_buckets(min_instant, max_instant)
    totals = compute_cumulative(events, buckets)
    logger.info(
        "Timeline: %d buckets (%s to %s), %d records, final total %.2f",
        len(buckets), short_label(buckets[0]), short_label(buckets[-1]),
        len(records), totals[-1],
    )
    return PlaybackTimeline(
        records, buckets, totals,
        ranking_size=config.ranking_size,
        label_locale=config.label_locale,
    )


def _render(
    timeline: PlaybackTimeline,
    index: int,
    previous: frozenset[str],
    show_markers: bool,
) -> tuple[frozenset[str], PlaybackStep]:
    """Resolve, diff and total one cursor position."""
    bucket = timeline.buckets[index]
    visible = resolve_visible(timeline.records, bucket_cutoff(bucket))
    rendered = visible if show_markers else frozenset()
    delta = diff_markers(previous, rendered)

    step = PlaybackStep(
        index=index,
        bucket=bucket,
        label=timeline.label(index),
        cumulative_total=timeline.totals[index],
        entering=delta.entering,
        leaving=delta.leaving,
        entering_records=[r for r in timeline.records if r.id in delta.entering],
        visible_count=len(visible),
        ranking=rank_categories(
            (timeline.record(rid) for rid in visible), timeline.ranking_size,
        ),
    )
    return rendered, step


def initial_step(timeline: PlaybackTimeline, state: PlaybackState) -> PlaybackStep:
    """Session-start render. Markers stay hidden until the user first acts."""
    _, step = _render(timeline, state.index, state.visible, show_markers=state.interacted)
    return step


def seek(
    timeline: PlaybackTimeline,
    state: PlaybackState,
    index: int,
) -> tuple[PlaybackState, PlaybackStep]:
    target = timeline.clamp(index)
    if target != index:
        logger.debug("Seek to %d clamped to %d", index, target)

    rendered, step = _render(timeline, target, state.visible, show_markers=True)
    new_state = state.model_copy(
        update={"index": target, "interacted": True, "visible": rendered},
    )
    return new_state, step


def play(
    timeline: PlaybackTimeline,
    state: PlaybackState,
) -> tuple[PlaybackState, PlaybackStep | None]:
    if state.is_playing:
        return state, None

    playing = state.model_copy(update={"status": PlaybackStatus.PLAYING})
    if not state.interacted:
        # First interaction: realize the visible set before the first tick.
        return seek(timeline, playing, state.index)
    return playing, None


def pause(state: PlaybackState) -> PlaybackState:
    if not state.is_playing:
        return state
    return state.model_copy(update={"status": PlaybackStatus.PAUSED})


def tick(
    timeline: PlaybackTimeline,
    state: PlaybackState,
) -> tuple[PlaybackState, PlaybackStep | None]:
    """Auto-advance one bucket, or stop at the last one."""
    if not state.is_playing:
        return state, None
    if state.index < timeline.last_index:
        return seek(timeline, state, state.index + 1)

    logger.info("Reached the last bucket (%s); pausing", timeline.label(state.index))
    return pause(state), None


class PlaybackController:
    """Owns the cursor state of one session and notifies step listeners.

    Cursor cycles never interleave: a transition requested while another is
    running (e.g. a listener that seeks) is queued and runs once the current
    cycle, listeners included, has finished.
    """

    def __init__(self, timeline: PlaybackTimeline, state: PlaybackState | None = None) -> None:
        self.timeline = timeline
        self.state = state or PlaybackState()
        self._listeners: list[StepListener] = []
        self._pending: deque[Transition] = deque()
        self._in_cycle = False

    def add_listener(self, listener: StepListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: StepListener) -> None:
        self._listeners.remove(listener)

    # --- Operations ---

    def start(self) -> PlaybackStep | None:
        """Render the initial cursor position without revealing markers."""
        return self._run(lambda s: (s, initial_step(self.timeline, s)))

    def seek(self, index: int) -> PlaybackStep | None:
        return self._run(lambda s: seek(self.timeline, s, index))

    def play(self) -> PlaybackStep | None:
        return self._run(lambda s: play(self.timeline, s))

    def tick(self) -> PlaybackStep | None:
        return self._run(lambda s: tick(self.timeline, s))

    def pause(self) -> None:
        self.state = pause(self.state)

    # --- Slider binding ---

    def current_bucket_index(self) -> int:
        return self.state.index

    def current_bucket_label(self) -> str:
        return self.timeline.label(self.state.index)

    def total_bucket_count(self) -> int:
        return self.timeline.total_bucket_count()

    @property
    def is_playing(self) -> bool:
        return self.state.is_playing

    # --- Internals ---

    def _run(self, transition: Transition) -> PlaybackStep | None:
        if self._in_cycle:
            logger.debug("Cursor cycle in progress; queueing transition")
            self._pending.append(transition)
            return None

        self._in_cycle = True
        try:
            step = self._cycle(transition)
            while self._pending:
                self._cycle(self._pending.popleft())
        finally:
            self._pending.clear()
            self._in_cycle = False
        return step

    def _cycle(self, transition: Transition) -> PlaybackStep | None:
        self.state, step = transition(self.state)
        if step is not None:
            self._notify(step)
        return step

    def _notify(self, step: PlaybackStep) -> None:
        logger.debug(
            "Step %d (%s): +%d -%d, total %.2f",
            step.index, step.label, len(step.entering), len(step.leaving),
            step.cumulative_total,
        )
        for listener in list(self._listeners):
            listener(step)
