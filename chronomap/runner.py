"""Cooperative auto-advance timer for a PlaybackController."""

import asyncio
import logging

from chronomap.models import PlaybackStep
from chronomap.playback import PlaybackController

logger = logging.getLogger(__name__)


class PlaybackRunResult:
    """Summary of the steps a session rendered. Register as a step listener."""

    def __init__(self) -> None:
        self.steps = 0
        self.markers_entered = 0
        self.markers_left = 0
        self.final_index: int | None = None
        self.final_total = 0.0

    def __call__(self, step: PlaybackStep) -> None:
        self.steps += 1
        self.markers_entered += len(step.entering)
        self.markers_left += len(step.leaving)
        self.final_index = step.index
        self.final_total = step.cumulative_total

    def __repr__(self) -> str:
        return (
            f"PlaybackRunResult({self.steps} steps, "
            f"+{self.markers_entered}/-{self.markers_left} markers, "
            f"final index={self.final_index}, final total={self.final_total:.2f})"
        )


class PlaybackRunner:
    """Ticks a controller on a fixed cadence while it is playing.

    Must be used from inside a running event loop. pause() cancels the
    pending tick before returning, so nothing advances afterwards even if a
    tick was already due.
    """

    def __init__(self, controller: PlaybackController, interval_ms: int = 500) -> None:
        if interval_ms < 0:
            raise ValueError("interval_ms must not be negative")
        self.controller = controller
        self.interval = interval_ms / 1000
        self.ticks = 0
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def play(self) -> None:
        self.controller.play()
        if self.controller.is_playing and not self.running:
            self._task = asyncio.get_running_loop().create_task(self._tick_loop())

    def pause(self) -> None:
        self.controller.pause()
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def wait(self) -> None:
        """Wait until playback stops on its own (end of timeline) or is paused."""
        task = self._task
        if task is None:
            return
        await asyncio.wait({task})
        if not task.cancelled():
            task.result()

    async def _tick_loop(self) -> None:
        logger.info("Playback started at bucket %d", self.controller.current_bucket_index())
        while self.controller.is_playing:
            await asyncio.sleep(self.interval)
            if not self.controller.is_playing:
                break
            self.controller.tick()
            self.ticks += 1
        logger.info("Playback stopped at bucket %d", self.controller.current_bucket_index())
