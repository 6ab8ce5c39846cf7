"""
Player interaction for Statue Lasers.

Turns one player intent (a direction, or the toggle-adjacent action)
into changes to the arena. Illegal moves are not errors: they return a
MoveResult with ``changed`` False and leave the arena untouched.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from arena import Arena
from objects import (
    ADJACENT_TOGGLE_KINDS, PUSHABLE_KINDS, STEP_TOGGLE_KINDS,
    Direction, GameObject, ObjectKind,
)

logger = logging.getLogger(__name__)


@dataclass
class MoveResult:
    """
    Outcome of one resolved action.

    Attributes:
        changed: Whether any object moved or changed state
        moved: Whether the player changed cell
        pushed: Object pushed ahead of the player, if any
        toggled: Objects whose flags were flipped, in order
        blocked_by: Object that made the action a no-op, if any
    """
    changed: bool = False
    moved: bool = False
    pushed: Optional[GameObject] = None
    toggled: List[GameObject] = field(default_factory=list)
    blocked_by: Optional[GameObject] = None


def flip_toggle_blocks(arena: Arena) -> List[GameObject]:
    """Flip ``passable`` on every toggle block in the arena."""
    blocks = arena.objects_of(ObjectKind.TOGGLE_BLOCK)
    for block in blocks:
        block.passable = not block.passable
    return blocks


def toggle_object(arena: Arena, obj: GameObject) -> List[GameObject]:
    """
    Flip the toggleable flag of ``obj``.

    Switches and buttons also flip every toggle block in the level.

    Returns:
        Every object whose state changed (empty if ``obj`` has no toggle)
    """
    kind = obj.kind
    if kind == ObjectKind.SWITCH:
        obj.on = not obj.on
    elif kind == ObjectKind.BUTTON:
        obj.pressed = not obj.pressed
    elif kind == ObjectKind.LASER:
        obj.enabled = not obj.enabled
        return [obj]
    elif kind == ObjectKind.MIRROR:
        obj.orientation = obj.orientation.flipped()
        return [obj]
    elif kind == ObjectKind.TOGGLE_BLOCK:
        obj.passable = not obj.passable
        return [obj]
    else:
        return []

    blocks = flip_toggle_blocks(arena)
    logger.debug("%r toggled %d toggle block(s)", obj, len(blocks))
    return [obj] + blocks


def move_player(arena: Arena, direction: Direction) -> MoveResult:
    """
    Move the player one cell in ``direction``.

    Rules by what occupies the target cell:
    - nothing: the player moves
    - switch/button: it toggles (with every toggle block); the player stays
    - toggle block: the player moves onto it only while it is passable
    - block/mirror/laser: pushed one cell further if that cell is interior
      and empty, the player following; otherwise nothing happens
    - anything else: nothing happens

    Args:
        arena: The arena to mutate
        direction: Direction of travel

    Returns:
        MoveResult describing what happened
    """
    player = arena.player
    target = direction.step(player.position)
    occupant = arena.object_at(target)

    if occupant is None:
        if not arena.is_interior(*target):
            # Ring cells are always walled in a loaded level
            return MoveResult()
        arena.move(player, target)
        return MoveResult(changed=True, moved=True)

    kind = occupant.kind

    if kind in STEP_TOGGLE_KINDS:
        return MoveResult(changed=True, toggled=toggle_object(arena, occupant))

    if kind == ObjectKind.TOGGLE_BLOCK:
        if not occupant.passable:
            return MoveResult(blocked_by=occupant)
        arena.move(player, target)
        return MoveResult(changed=True, moved=True)

    if kind in PUSHABLE_KINDS:
        beyond = direction.step(target)
        if not arena.is_interior(*beyond) or not arena.is_free(beyond):
            return MoveResult(blocked_by=occupant)
        arena.move(occupant, beyond)
        arena.move(player, target)
        logger.debug("Pushed %r %s", occupant, direction.name)
        return MoveResult(changed=True, moved=True, pushed=occupant)

    # Walls, statues, zappers
    return MoveResult(blocked_by=occupant)


def toggle_adjacent(arena: Arena) -> MoveResult:
    """
    Toggle every laser, mirror and switch orthogonally next to the player.

    Neighbours are visited clockwise from Up. Each switch toggled also
    flips every toggle block once.
    """
    player = arena.player
    result = MoveResult()
    for direction in Direction:
        neighbour = arena.object_at(direction.step(player.position))
        if neighbour is None or neighbour.kind not in ADJACENT_TOGGLE_KINDS:
            continue
        result.toggled.extend(toggle_object(arena, neighbour))
        result.changed = True
    return result
