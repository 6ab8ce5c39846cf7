"""
CLI entry point for Statue Lasers.

Provides interactive play through the core levels or a level file,
and a solver mode.
"""

import argparse
import logging
import sys
from typing import Optional

from core_levels import NUM_CORE_LEVELS, core_level, core_level_id
from exceptions import LevelError, ProgressError
from game import Command, LevelSession
from level_io import LevelDefinition, load_level
from outcome import LossReason
from progress import ProgressTracker
from solver import format_solution, solve_level
from visualize import LEGEND

logger = logging.getLogger(__name__)

HELP_TEXT = """Commands:
  w / a / s / d      - Move up / left / down / right (walk into things to push or press them)
  t / space          - Toggle lasers, mirrors and switches next to you
  r                  - Restart the level
  q                  - Quit
  h                  - Show this help"""


def show_level_info(level: LevelDefinition):
    """Display the level header."""
    print(f"\n--- {level.name} ---")
    if level.author:
        print(f"by {level.author}")
    if level.description:
        print(level.description)
    print("-" * (len(level.name) + 8))


def read_command() -> Optional[Command]:
    """Prompt until a valid command is typed. Returns None on end of input."""
    while True:
        try:
            raw = input("\n> ")
        except (EOFError, KeyboardInterrupt):
            return None

        if raw.strip().lower() in ('h', 'help', '?'):
            print(HELP_TEXT)
            continue
        if not raw.strip() and raw != ' ':
            continue
        try:
            return Command.from_key(raw if raw.strip() else ' ')
        except ValueError as e:
            print(f"Error: {e}")
            print("Type 'h' for available commands")


def play_level(session: LevelSession) -> bool:
    """
    Run the interactive loop for one level.

    Returns:
        True if the level was won, False if the player quit
    """
    show_level_info(session.level)
    session.show()

    while True:
        command = read_command()
        if command is None or command is Command.QUIT:
            session.quit()
            print(session.status)
            return False

        result = session.apply(command)
        session.show()

        if result.status.won:
            print(f"\n*** {result.status} ***")
            return True
        reason = result.status.lost_reason
        if reason in (LossReason.DEATH, LossReason.ZAPPER):
            print(f"\n{result.status} Restarting...")
            session.restart()
            session.show()


def interactive_mode(tracker: ProgressTracker, start_index: int):
    """Play core levels in order starting at ``start_index``."""
    print("\n=== Statue Lasers ===")
    print(HELP_TEXT)
    print(LEGEND)

    index = start_index
    while index < NUM_CORE_LEVELS:
        session = LevelSession(core_level(index), on_complete=tracker.complete_level_id)
        if not play_level(session):
            print("Goodbye!")
            return
        index += 1

    print("\nYou completed every level. Well done!")


def solve_mode(level: LevelDefinition, max_nodes: int) -> int:
    """Print a shortest solution for ``level``. Returns the exit code."""
    result = solve_level(level, max_nodes=max_nodes)
    print(f"Level: {level.name} ({level.level_id})")
    print(f"Nodes visited: {result.nodes_visited}")
    if not result.solved:
        print("No solution found" + ("" if result.exhausted else " within the node budget"))
        return 1
    print(f"Solved in {result.num_moves} move(s): {format_solution(result) or '(already won)'}")
    return 0


def load_tracker(path: Optional[str]) -> ProgressTracker:
    try:
        return ProgressTracker.load(path)
    except ProgressError as e:
        logger.warning("%s; starting with no progress", e)
        return ProgressTracker(path)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description='Statue Lasers')
    parser.add_argument('file', nargs='?', help='Level file (text or JSON) to play')
    parser.add_argument('--level', '-l', type=int, default=None,
                        help=f'Core level to start at (1-{NUM_CORE_LEVELS})')
    parser.add_argument('--progress', default=None,
                        help='Progress file (default: $STATUE_LASERS_HOME or ~/.statue_lasers)')
    parser.add_argument('--solve', action='store_true',
                        help='Print a shortest solution instead of playing')
    parser.add_argument('--max-nodes', type=int, default=200_000,
                        help='Solver node budget')
    parser.add_argument('--log-level', default='WARNING',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Logging verbosity')

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s %(name)s %(levelname)s: %(message)s',
    )

    if args.file:
        try:
            level = load_level(args.file)
        except (OSError, LevelError) as e:
            print(f"Error loading file: {e}")
            return 1
        logger.info("Loaded %s from %s", level.level_id, args.file)
        if args.solve:
            return solve_mode(level, args.max_nodes)
        play_level(LevelSession(level))
        return 0

    tracker = load_tracker(args.progress)
    if args.level is None:
        index = tracker.highest_unlocked
    else:
        index = args.level - 1
        if not 0 <= index < NUM_CORE_LEVELS:
            print(f"Error: no core level {args.level}; choose 1-{NUM_CORE_LEVELS}")
            return 1
        if not args.solve and not tracker.is_unlocked(index):
            print(f"Level {args.level} is locked. Complete {core_level_id(tracker.highest_unlocked)} first.")
            return 1

    if args.solve:
        return solve_mode(core_level(index), args.max_nodes)

    interactive_mode(tracker, index)
    return 0


if __name__ == '__main__':
    sys.exit(main())
