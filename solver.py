"""
Level solver using breadth-first search over player commands.

Key points:
1. States are deduplicated by every object's position and flags
2. Commands that change nothing are skipped
3. Lost states are dead ends and are never expanded
4. BFS order means the first winning sequence found is a shortest one
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, List, Optional, Set, Tuple

from game import PLAY_COMMANDS, Command, LevelSession
from level_io import LevelDefinition, load_level

logger = logging.getLogger(__name__)

DEFAULT_MAX_NODES = 200_000


@dataclass
class SolverResult:
    """Result of solving a level."""
    solved: bool
    solution: List[Command] = field(default_factory=list)
    nodes_visited: int = 0
    exhausted: bool = True  # False when the node budget ran out first

    @property
    def num_moves(self) -> int:
        return len(self.solution)


def solve_level(level: LevelDefinition, max_nodes: int = DEFAULT_MAX_NODES) -> SolverResult:
    """
    Find a shortest winning command sequence for a level.

    Args:
        level: Level to solve
        max_nodes: Stop after expanding this many states

    Returns:
        SolverResult; ``solution`` is empty when unsolved (or when the
        level is already won at load)
    """
    start = LevelSession(level)
    if start.status.won:
        return SolverResult(solved=True, nodes_visited=0)
    if start.status.is_terminal:
        return SolverResult(solved=False, nodes_visited=0)

    seen: Set = {start.state_key()}
    queue: Deque[Tuple[LevelSession, List[Command]]] = deque([(start, [])])
    nodes_visited = 0

    while queue:
        if nodes_visited >= max_nodes:
            logger.warning("Solver gave up on %s after %d nodes", level.level_id, nodes_visited)
            return SolverResult(solved=False, nodes_visited=nodes_visited, exhausted=False)

        session, path = queue.popleft()
        nodes_visited += 1

        for command in PLAY_COMMANDS:
            child = session.copy()
            if not child.apply(command).changed:
                continue

            key = child.state_key()
            if key in seen:
                continue
            seen.add(key)

            child_path = path + [command]
            if child.status.won:
                logger.debug("Solved %s in %d moves (%d nodes)",
                             level.level_id, len(child_path), nodes_visited)
                return SolverResult(solved=True, solution=child_path,
                                    nodes_visited=nodes_visited)
            if not child.status.is_terminal:
                queue.append((child, child_path))

    return SolverResult(solved=False, nodes_visited=nodes_visited)


def solve_level_file(filepath: str, max_nodes: int = DEFAULT_MAX_NODES) -> SolverResult:
    """
    Solve a level from a text or JSON file.

    Args:
        filepath: Path to the level file
        max_nodes: Node budget

    Returns:
        SolverResult
    """
    return solve_level(load_level(filepath), max_nodes=max_nodes)


def format_solution(result: SolverResult) -> Optional[str]:
    """Space-separated command names, or None if unsolved."""
    if not result.solved:
        return None
    return ' '.join(command.value for command in result.solution)
