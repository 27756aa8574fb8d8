"""Command line entry point.

    python -m bouncy notes OUT_DIR        render the note walk to WAV files
    python -m bouncy bounce OUT_DIR       fling the ball headlessly, one WAV per wall hit
"""

from __future__ import annotations

import argparse
import logging
import sys

from bouncy.bounce import Arena, NotePlayer
from bouncy.config import FlingConfig, NoteConfig
from bouncy.scheduler import FrameScheduler, ManualFrameProvider
from bouncy.sink import SoundFileSink

logger = logging.getLogger("bouncy")


def _notes(args: argparse.Namespace) -> int:
    player = NotePlayer(
        SoundFileSink(args.out_dir),
        NoteConfig(duration=args.duration),
        spawn=lambda fn: fn(),
        seed=args.seed,
    )
    for _ in range(args.count):
        player.play_next()
    return 0


def _bounce(args: argparse.Namespace) -> int:
    provider = ManualFrameProvider()
    scheduler = FrameScheduler(provider)
    arena = Arena(scheduler, fling_config=FlingConfig(friction=args.friction))
    arena.set_bounds(0, args.width, 0, args.height)
    player = NotePlayer(
        SoundFileSink(args.out_dir),
        NoteConfig(duration=args.duration),
        spawn=lambda fn: fn(),
        seed=args.seed,
    )
    player.attach(arena.collisions)
    hits = []
    arena.collisions.subscribe(hits.append)

    arena.fling(args.velocity_x, args.velocity_y)
    frame_ms = 1000.0 / args.fps
    frame_time = 0.0
    while provider.pending:
        frame_time += frame_ms
        provider.fire(frame_time)
    logger.info("At rest after %.2f s with %d wall hits: %r", frame_time / 1000, len(hits), arena)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="bouncy")
    parser.add_argument("-v", "--verbose", action="store_true")
    parser.add_argument("--duration", type=float, default=NoteConfig().duration)
    parser.add_argument("--seed", type=int, default=None)
    commands = parser.add_subparsers(dest="command", required=True)

    notes = commands.add_parser("notes", help="render the diatonic note walk")
    notes.add_argument("out_dir")
    notes.add_argument("--count", type=int, default=len(NoteConfig().scale))
    notes.set_defaults(run=_notes)

    bounce = commands.add_parser("bounce", help="fling the ball until it comes to rest")
    bounce.add_argument("out_dir")
    bounce.add_argument("--width", type=float, default=1080)
    bounce.add_argument("--height", type=float, default=1920)
    bounce.add_argument("--velocity-x", type=float, default=6000)
    bounce.add_argument("--velocity-y", type=float, default=-9000)
    bounce.add_argument("--friction", type=float, default=FlingConfig().friction)
    bounce.add_argument("--fps", type=float, default=60)
    bounce.set_defaults(run=_bounce)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(threadName)s] [%(levelname)s] - %(message)s",
        stream=sys.stdout,
    )
    return args.run(args)


if __name__ == "__main__":
    sys.exit(main())
