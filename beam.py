"""
Beam propagation for Statue Lasers.

Traces the path of every enabled laser's beam through the arena,
turning at mirrors and stopping at the first other object.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Set

from arena import Arena
from objects import Coord, Direction, GameObject, Laser, ObjectKind

logger = logging.getLogger(__name__)

# Beam states are (cell, direction); a trace visits each at most once.
STEPS_PER_CELL = 4


@dataclass(frozen=True)
class BeamSegment:
    """One cell of a beam and the direction the beam travels when in it."""
    row: int
    col: int
    direction: Direction

    @property
    def position(self) -> Coord:
        return self.row, self.col


@dataclass
class BeamPath:
    """
    Result of tracing one laser.

    Attributes:
        laser: Emitting laser
        segments: Cells the beam enters, in order, starting one step
            beyond the laser
        target: First non-mirror object struck, or None if the beam
            reached the wall ring
        terminated: False only if the step guard cut the trace short
    """
    laser: Laser
    segments: List[BeamSegment] = field(default_factory=list)
    target: Optional[GameObject] = None
    terminated: bool = True

    @property
    def cells(self) -> List[Coord]:
        return [seg.position for seg in self.segments]

    @property
    def end(self) -> Optional[Coord]:
        """Last cell of the beam (the target's cell when there is one)."""
        return self.segments[-1].position if self.segments else None

    @property
    def is_lethal(self) -> bool:
        return self.target is not None and self.target.kind == ObjectKind.PLAYER

    @property
    def target_kind(self) -> ObjectKind:
        return self.target.kind if self.target is not None else ObjectKind.EMPTY


def blocks_beam(obj: GameObject) -> bool:
    """Whether a beam entering ``obj``'s cell stops there."""
    if obj.kind == ObjectKind.MIRROR:
        return False
    if obj.kind == ObjectKind.TOGGLE_BLOCK:
        return not obj.passable
    return True


def trace_beam(arena: Arena, laser: Laser, max_steps: Optional[int] = None) -> BeamPath:
    """
    Trace a single laser's beam.

    Args:
        arena: The arena
        laser: Laser to fire; traced whether or not it is enabled
        max_steps: Step guard, defaults to 4 per grid cell

    Returns:
        BeamPath with the visited cells and the struck object
    """
    if max_steps is None:
        max_steps = arena.rows * arena.cols * STEPS_PER_CELL

    path = BeamPath(laser=laser)
    coord = laser.position
    direction = laser.direction

    for _ in range(max_steps):
        nxt = direction.step(coord)
        if not arena.is_interior(*nxt):
            # Absorbed by the wall ring
            return path

        coord = nxt
        path.segments.append(BeamSegment(coord[0], coord[1], direction))

        occupant = arena.object_at(coord)
        if occupant is None:
            continue

        if occupant.kind == ObjectKind.MIRROR:
            direction = occupant.orientation.reflect(direction)
            # Record the outgoing direction so renderers can draw the corner
            path.segments[-1] = BeamSegment(coord[0], coord[1], direction)
            continue

        if blocks_beam(occupant):
            path.target = occupant
            return path

    logger.warning("Beam from %r exceeded %d steps", laser, max_steps)
    path.terminated = False
    return path


def fire_lasers(arena: Arena) -> List[BeamPath]:
    """Trace every enabled laser, in placement order."""
    return [
        trace_beam(arena, laser)
        for laser in arena.objects_of(ObjectKind.LASER)
        if laser.enabled
    ]


def get_beam_cells(paths: List[BeamPath]) -> Set[Coord]:
    """Get set of all cells any beam passes through."""
    return {seg.position for path in paths for seg in path.segments}


def get_beam_at_cell(paths: List[BeamPath], row: int, col: int) -> List[Direction]:
    """Get all directions beams travel through a specific cell."""
    return [
        seg.direction
        for path in paths
        for seg in path.segments
        if seg.row == row and seg.col == col
    ]
