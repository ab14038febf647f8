"""CLI entry point for chronomap."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from chronomap.config import load_config
from chronomap.ingest import IngestionError, ingest
from chronomap.models import PlaybackStep, TimedRecord
from chronomap.output.frames import FrameRenderer
from chronomap.output.kpi import KpiCounter, format_amount
from chronomap.playback import PlaybackController, build_timeline
from chronomap.runner import PlaybackRunner, PlaybackRunResult
from chronomap.timeline import short_label

logger = logging.getLogger(__name__)


class StepPrinter:
    """Step listener printing one summary line per step.

    The running total goes through a KpiCounter so the printed value matches
    what a tweened display would settle on. With ``details`` each entering
    record is listed under the step line.
    """

    def __init__(self, kpi: KpiCounter | None = None, details: bool = False) -> None:
        self.kpi = kpi or KpiCounter()
        self.details = details

    def __call__(self, step: PlaybackStep) -> None:
        self.kpi(step)
        ranking = ", ".join(f"{e.name} {e.count}" for e in step.ranking[:3])
        print(
            f"[{step.index:3d}] {step.label:<22} {self.kpi.text:>12}  "
            f"+{len(step.entering)} -{len(step.leaving)}  visible={step.visible_count}"
            + (f"  top: {ranking}" if ranking else "")
        )
        if self.details:
            for record in step.entering_records:
                print(f"      + {_describe(record)}")


def _describe(record: TimedRecord) -> str:
    """Popup-style one-liner: title, location and the date as written in the source."""
    text = record.title or record.id
    if record.location:
        text += f" ({record.location})"
    if record.date_text:
        text += f", {record.date_text}"
    if record.category:
        text += f" [{record.category}]"
    return text


async def _play_through(controller: PlaybackController, interval_ms: int) -> int:
    runner = PlaybackRunner(controller, interval_ms=interval_ms)
    runner.play()
    await runner.wait()
    return runner.ticks


def main() -> None:
    parser = argparse.ArgumentParser(description="Chronomap monthly map playback")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument(
        "-c", "--config", type=Path, default=None,
        help="Path to a YAML config file (default: chronomap.yaml in the project root)",
    )
    sub = parser.add_subparsers(dest="command")

    # play command
    play_parser = sub.add_parser("play", help="Play the timeline headlessly")
    play_parser.add_argument("-v", "--verbose", action="store_true", default=argparse.SUPPRESS, help="Debug logging")
    play_parser.add_argument(
        "--instant", action="store_true",
        help="Advance without waiting for the tick interval",
    )
    play_parser.add_argument(
        "--start", type=int, default=None,
        help="Bucket index to seek to before playing (clamped to the timeline)",
    )
    play_parser.add_argument(
        "--frames", type=Path, default=None,
        help="Directory to write one PNG frame per step",
    )
    play_parser.add_argument(
        "--details", action="store_true",
        help="List title, location and date of each record as it appears",
    )

    # stats command
    stats_parser = sub.add_parser("stats", help="Show ingestion and timeline stats")
    stats_parser.add_argument("-v", "--verbose", action="store_true", default=argparse.SUPPRESS, help="Debug logging")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return

    config = load_config(args.config)
    try:
        dataset = ingest(config)
    except IngestionError as e:
        logger.error("Ingestion failed: %s", e)
        print(f"Error loading data: {e}", file=sys.stderr)
        sys.exit(1)

    timeline = build_timeline(dataset.records, dataset.events, config.playback)

    if args.command == "stats":
        print(dataset.result)
        print(
            f"Buckets: {timeline.total_bucket_count()} "
            f"({short_label(timeline.buckets[0])} to {short_label(timeline.buckets[-1])})"
        )
        print(f"Final total: {format_amount(timeline.totals[-1])}")

    elif args.command == "play":
        controller = PlaybackController(timeline)
        summary = PlaybackRunResult()
        controller.add_listener(StepPrinter(KpiCounter(), details=args.details))
        controller.add_listener(summary)
        if args.frames is not None:
            controller.add_listener(FrameRenderer(
                timeline,
                config=config.frames,
                markers=config.markers,
                boundary=dataset.boundary,
                output_dir=args.frames,
            ))

        controller.start()
        if args.start is not None:
            controller.seek(args.start)

        interval = 0 if args.instant else config.playback.interval_ms
        asyncio.run(_play_through(controller, interval))
        print(summary)


if __name__ == "__main__":
    main()
