"""
Game object classes for Statue Lasers.

Every object sits on one (row, col) cell of the arena and carries only
the state that matters for its kind. Behaviour that differs by kind is
dispatched on ``ObjectKind`` by the beam engine, the interaction resolver
and the outcome evaluator; the classes here hold data and nothing else.

Direction encoding (clockwise, as (row_delta, col_delta)):
    0 = Up    (-1, 0)
    1 = Right (0, 1)
    2 = Down  (1, 0)
    3 = Left  (0, -1)
"""

from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Any, ClassVar, Dict, FrozenSet, NamedTuple, Optional, Tuple

Coord = Tuple[int, int]


class Direction(IntEnum):
    """Cardinal directions for player movement and beam travel."""
    UP = 0
    RIGHT = 1
    DOWN = 2
    LEFT = 3

    def opposite(self) -> 'Direction':
        """Return the opposite direction."""
        return Direction((self + 2) % 4)

    def rotate_cw(self) -> 'Direction':
        """Rotate 90 degrees clockwise."""
        return Direction((self + 1) % 4)

    def rotate_ccw(self) -> 'Direction':
        """Rotate 90 degrees counter-clockwise."""
        return Direction((self - 1) % 4)

    @property
    def delta(self) -> Tuple[int, int]:
        """Return (row_delta, col_delta) for moving in this direction."""
        return _DELTAS[self]

    @property
    def symbol(self) -> str:
        """Arrow symbol for this direction."""
        symbols = {
            Direction.UP: '^',
            Direction.RIGHT: '>',
            Direction.DOWN: 'v',
            Direction.LEFT: '<',
        }
        return symbols[self]

    def step(self, coord: Coord) -> Coord:
        """Return the coordinate one cell away from ``coord``."""
        dr, dc = self.delta
        return coord[0] + dr, coord[1] + dc

    @classmethod
    def from_delta(cls, delta: Tuple[int, int]) -> 'Direction':
        """Look up the direction for a unit (row_delta, col_delta) vector."""
        for direction, value in _DELTAS.items():
            if value == tuple(delta):
                return direction
        raise ValueError(f"Not a unit direction vector: {delta}")

    @classmethod
    def from_name(cls, name: str) -> 'Direction':
        try:
            return cls[name.upper()]
        except KeyError as exc:
            raise ValueError(f"Unknown direction: {name}") from exc


_DELTAS = {
    Direction.UP: (-1, 0),
    Direction.RIGHT: (0, 1),
    Direction.DOWN: (1, 0),
    Direction.LEFT: (0, -1),
}


class MirrorOrientation(IntEnum):
    """Diagonal of a mirror: FORWARD is '/', BACKWARD is '\\'."""
    FORWARD = 0
    BACKWARD = 1

    def reflect(self, incoming: Direction) -> Direction:
        """
        Return the travel direction of a beam leaving this mirror.

        With (dr, dc) the unit vector of ``incoming``:
        - FORWARD  '/':  (-dc, -dr)
        - BACKWARD '\\': (dc, dr)
        """
        dr, dc = incoming.delta
        if self is MirrorOrientation.FORWARD:
            return Direction.from_delta((-dc, -dr))
        return Direction.from_delta((dc, dr))

    def flipped(self) -> 'MirrorOrientation':
        """Return the other diagonal."""
        return MirrorOrientation(1 - self)

    @property
    def symbol(self) -> str:
        return '/' if self is MirrorOrientation.FORWARD else '\\'


class ObjectKind(IntEnum):
    """Discriminant of the game object union (also the tensor channel index)."""
    EMPTY = 0
    PLAYER = 1
    WALL = 2
    BLOCK = 3
    MIRROR = 4
    LASER = 5
    SWITCH = 6
    BUTTON = 7
    TOGGLE_BLOCK = 8
    STATUE = 9
    ZAPPER = 10


# Kinds the player can push one cell ahead.
PUSHABLE_KINDS: FrozenSet[ObjectKind] = frozenset({
    ObjectKind.BLOCK, ObjectKind.MIRROR, ObjectKind.LASER,
})

# Kinds flipped by walking into them.
STEP_TOGGLE_KINDS: FrozenSet[ObjectKind] = frozenset({
    ObjectKind.SWITCH, ObjectKind.BUTTON,
})

# Kinds flipped by the toggle-adjacent action.
ADJACENT_TOGGLE_KINDS: FrozenSet[ObjectKind] = frozenset({
    ObjectKind.LASER, ObjectKind.MIRROR, ObjectKind.SWITCH,
})


@dataclass(eq=False, repr=False)
class GameObject:
    """
    Base class for everything placed in the arena.

    Objects compare by identity: two blocks on different cells are
    different objects even though their state matches.

    Attributes:
        row: Row index (0 at the top)
        col: Column index (0 at the left)
    """
    row: int
    col: int

    kind: ClassVar[ObjectKind] = ObjectKind.EMPTY
    glyph: ClassVar[str] = '?'

    @property
    def symbol(self) -> str:
        """Character used for this object in level text."""
        return self.glyph

    @property
    def position(self) -> Coord:
        return self.row, self.col

    def copy(self) -> 'GameObject':
        """Create a copy of this object with the same position and state."""
        return replace(self)

    def state(self) -> Dict[str, Any]:
        """Mutable per-kind flags, keyed by field name."""
        return {}

    def __repr__(self) -> str:
        flags = ', '.join(f'{k}={v!r}' for k, v in self.state().items())
        return f'{type(self).__name__}({self.row}, {self.col}{", " + flags if flags else ""})'


@dataclass(eq=False, repr=False)
class Player(GameObject):
    kind: ClassVar[ObjectKind] = ObjectKind.PLAYER
    glyph: ClassVar[str] = 'X'


@dataclass(eq=False, repr=False)
class Wall(GameObject):
    kind: ClassVar[ObjectKind] = ObjectKind.WALL
    glyph: ClassVar[str] = 'I'


@dataclass(eq=False, repr=False)
class Block(GameObject):
    kind: ClassVar[ObjectKind] = ObjectKind.BLOCK
    glyph: ClassVar[str] = 'B'


@dataclass(eq=False, repr=False)
class Mirror(GameObject):
    """Redirects a beam by 90 degrees without stopping it."""
    orientation: MirrorOrientation = MirrorOrientation.FORWARD

    kind: ClassVar[ObjectKind] = ObjectKind.MIRROR

    @property
    def symbol(self) -> str:
        return self.orientation.symbol

    def state(self) -> Dict[str, Any]:
        return {'orientation': self.orientation}


@dataclass(eq=False, repr=False)
class Laser(GameObject):
    """Emits a beam in ``direction`` while ``enabled``."""
    enabled: bool = True
    direction: Direction = Direction.UP

    kind: ClassVar[ObjectKind] = ObjectKind.LASER
    glyph: ClassVar[str] = 'L'

    def state(self) -> Dict[str, Any]:
        return {'enabled': self.enabled, 'direction': self.direction}


@dataclass(eq=False, repr=False)
class Switch(GameObject):
    on: bool = False

    kind: ClassVar[ObjectKind] = ObjectKind.SWITCH
    glyph: ClassVar[str] = 's'

    def state(self) -> Dict[str, Any]:
        return {'on': self.on}


@dataclass(eq=False, repr=False)
class Button(GameObject):
    pressed: bool = False

    kind: ClassVar[ObjectKind] = ObjectKind.BUTTON
    glyph: ClassVar[str] = 'b'

    def state(self) -> Dict[str, Any]:
        return {'pressed': self.pressed}


@dataclass(eq=False, repr=False)
class ToggleBlock(GameObject):
    """Solid while ``passable`` is False; switches and buttons flip it."""
    passable: bool = False

    kind: ClassVar[ObjectKind] = ObjectKind.TOGGLE_BLOCK
    glyph: ClassVar[str] = 'T'

    def state(self) -> Dict[str, Any]:
        return {'passable': self.passable}


@dataclass(eq=False, repr=False)
class Statue(GameObject):
    """
    Beam target counted toward the win.

    A normal statue must be lit to win; a ``reversed`` statue must stay
    dark.
    """
    lit: bool = False
    reversed: bool = False

    kind: ClassVar[ObjectKind] = ObjectKind.STATUE
    glyph: ClassVar[str] = 'S'

    @property
    def symbol(self) -> str:
        return 'R' if self.reversed else 'S'

    @property
    def satisfied(self) -> bool:
        return self.lit != self.reversed

    def state(self) -> Dict[str, Any]:
        return {'lit': self.lit, 'reversed': self.reversed}


@dataclass(eq=False, repr=False)
class Zapper(GameObject):
    lit: bool = False

    kind: ClassVar[ObjectKind] = ObjectKind.ZAPPER
    glyph: ClassVar[str] = 'Z'

    def state(self) -> Dict[str, Any]:
        return {'lit': self.lit}


# Mapping from object kinds to classes
OBJECT_CLASSES = {
    ObjectKind.PLAYER: Player,
    ObjectKind.WALL: Wall,
    ObjectKind.BLOCK: Block,
    ObjectKind.MIRROR: Mirror,
    ObjectKind.LASER: Laser,
    ObjectKind.SWITCH: Switch,
    ObjectKind.BUTTON: Button,
    ObjectKind.TOGGLE_BLOCK: ToggleBlock,
    ObjectKind.STATUE: Statue,
    ObjectKind.ZAPPER: Zapper,
}

# String names used by the JSON level format
KIND_TO_NAME = {
    ObjectKind.PLAYER: 'player',
    ObjectKind.WALL: 'wall',
    ObjectKind.BLOCK: 'block',
    ObjectKind.MIRROR: 'mirror',
    ObjectKind.LASER: 'laser',
    ObjectKind.SWITCH: 'switch',
    ObjectKind.BUTTON: 'button',
    ObjectKind.TOGGLE_BLOCK: 'toggle_block',
    ObjectKind.STATUE: 'statue',
    ObjectKind.ZAPPER: 'zapper',
}

NAME_TO_KIND = {v: k for k, v in KIND_TO_NAME.items()}


def create_object(kind: ObjectKind, row: int, col: int, **state: Any) -> GameObject:
    """
    Factory function to create an object by kind.

    Args:
        kind: ObjectKind, or its JSON name ('mirror', 'laser', ...)
        row: Row position
        col: Column position
        **state: Initial per-kind flags (e.g. enabled=False, direction=2)

    Returns:
        A new GameObject instance
    """
    if isinstance(kind, str):
        if kind not in NAME_TO_KIND:
            raise ValueError(f"Unknown object type: {kind}")
        kind = NAME_TO_KIND[kind]
    if kind not in OBJECT_CLASSES:
        raise ValueError(f"Unknown object kind: {kind!r}")

    if 'direction' in state:
        state['direction'] = Direction(state['direction'])
    if 'orientation' in state:
        state['orientation'] = MirrorOrientation(state['orientation'])

    try:
        return OBJECT_CLASSES[kind](row=row, col=col, **state)
    except TypeError as exc:
        raise ValueError(f"Invalid state for {KIND_TO_NAME[kind]}: {state}") from exc


class ObjectSpec(NamedTuple):
    """One (kind, coordinate, initial state) entry supplied by a level loader."""
    kind: ObjectKind
    position: Coord
    state: Optional[Dict[str, Any]] = None

    def build(self) -> GameObject:
        """Instantiate a fresh object from this spec."""
        row, col = self.position
        return create_object(self.kind, row, col, **dict(self.state or {}))

    @classmethod
    def of(cls, obj: GameObject) -> 'ObjectSpec':
        """Capture an existing object's kind, position and state."""
        return cls(obj.kind, obj.position, obj.state())
