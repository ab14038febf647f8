"""Tests for the asyncio auto-advance runner."""

import asyncio

import pytest

from chronomap.runner import PlaybackRunner, PlaybackRunResult


class TestPlaybackRunner:
    def test_plays_to_the_end_and_stops(self, controller):
        summary = PlaybackRunResult()
        controller.add_listener(summary)

        async def go():
            runner = PlaybackRunner(controller, interval_ms=0)
            runner.play()
            assert runner.running
            await runner.wait()
            return runner

        runner = asyncio.run(go())
        assert not runner.running
        assert not controller.is_playing
        assert controller.current_bucket_index() == 2
        # two advancing ticks plus the one that finds the end
        assert runner.ticks == 3
        assert summary.steps == 3
        assert summary.final_index == 2
        assert summary.final_total == 150

    def test_pause_before_first_tick(self, controller):
        async def go():
            runner = PlaybackRunner(controller, interval_ms=0)
            runner.play()
            runner.pause()
            await runner.wait()
            await asyncio.sleep(0)
            return runner

        runner = asyncio.run(go())
        assert runner.ticks == 0
        assert controller.current_bucket_index() == 0
        assert not controller.is_playing

    def test_pause_from_listener_stops_advance(self, controller):
        async def go():
            runner = PlaybackRunner(controller, interval_ms=0)

            def stop_at_one(step):
                if step.index == 1:
                    runner.pause()

            controller.add_listener(stop_at_one)
            runner.play()
            task = runner._task
            await asyncio.wait({task})
            return runner

        runner = asyncio.run(go())
        assert runner.ticks == 1
        assert controller.current_bucket_index() == 1
        assert not controller.is_playing

    def test_play_twice_keeps_one_loop(self, controller):
        async def go():
            runner = PlaybackRunner(controller, interval_ms=0)
            runner.play()
            first = runner._task
            runner.play()
            assert runner._task is first
            await runner.wait()
            return runner

        runner = asyncio.run(go())
        assert runner.ticks == 3

    def test_play_at_last_bucket_ends_immediately(self, controller):
        controller.seek(2)

        async def go():
            runner = PlaybackRunner(controller, interval_ms=0)
            runner.play()
            await runner.wait()
            return runner

        runner = asyncio.run(go())
        assert runner.ticks == 1
        assert controller.current_bucket_index() == 2
        assert not controller.is_playing

    def test_negative_interval(self, controller):
        with pytest.raises(ValueError):
            PlaybackRunner(controller, interval_ms=-1)

    def test_wait_without_play(self, controller):
        runner = PlaybackRunner(controller)
        asyncio.run(runner.wait())
        assert runner.ticks == 0


class TestPlaybackRunResult:
    def test_counts_markers(self, controller):
        summary = PlaybackRunResult()
        controller.add_listener(summary)
        controller.seek(2)
        controller.seek(0)
        assert summary.steps == 2
        assert summary.markers_entered == 3
        assert summary.markers_left == 2
        assert summary.final_index == 0
        assert "2 steps" in repr(summary)
