"""
Arena state management for Statue Lasers.

The arena is a rows x cols grid. Row 0, row rows-1, column 0 and column
cols-1 form a ring of walls; every other object lives in the interior.
Coordinates are (row, col) with (0, 0) at top-left.

The arena only stores objects and answers lookups. It never decides
whether a move is legal; that belongs to ``moves.py``.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional

from exceptions import PlacementError
from objects import Coord, GameObject, ObjectKind, ObjectSpec, Player, ToggleBlock, Wall

logger = logging.getLogger(__name__)

MIN_SIZE = 3


@dataclass
class Arena:
    """
    Owned, mutable set of game objects with a coordinate index.

    Attributes:
        rows: Grid height including the wall ring
        cols: Grid width including the wall ring
        objects: Every object in placement order

    Toggle blocks are indexed apart from everything else so that the
    player can stand on a passable one; ``object_at`` reports the other
    occupant first.
    """
    rows: int
    cols: int
    objects: List[GameObject] = field(default_factory=list)
    _index: Dict[Coord, GameObject] = field(default_factory=dict, init=False, repr=False)
    _toggle_index: Dict[Coord, ToggleBlock] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self):
        """Validate dimensions and index any objects passed in."""
        if self.rows < MIN_SIZE or self.cols < MIN_SIZE:
            raise PlacementError(
                f"Arena must be at least {MIN_SIZE}x{MIN_SIZE}, got {self.rows}x{self.cols}"
            )
        initial, self.objects = self.objects, []
        for obj in initial:
            self.place(obj)

    # === Geometry ===

    def is_inside(self, row: int, col: int) -> bool:
        """Check if position is on the grid, wall ring included."""
        return 0 <= row < self.rows and 0 <= col < self.cols

    def is_interior(self, row: int, col: int) -> bool:
        """Check if position is strictly inside the wall ring."""
        return 1 <= row <= self.rows - 2 and 1 <= col <= self.cols - 2

    def is_boundary(self, row: int, col: int) -> bool:
        return self.is_inside(row, col) and not self.is_interior(row, col)

    def interior_cells(self) -> Iterator[Coord]:
        for row in range(1, self.rows - 1):
            for col in range(1, self.cols - 1):
                yield row, col

    # === Lookup ===

    def object_at(self, coord: Coord) -> Optional[GameObject]:
        """Get the object at ``coord``, or None if empty or off the grid."""
        obj = self._index.get(coord)
        if obj is not None:
            return obj
        return self._toggle_index.get(coord)

    def objects_at(self, coord: Coord) -> List[GameObject]:
        """All objects on a cell (two only when the player stands on a toggle block)."""
        found = []
        if coord in self._index:
            found.append(self._index[coord])
        if coord in self._toggle_index:
            found.append(self._toggle_index[coord])
        return found

    def is_free(self, coord: Coord) -> bool:
        """True if nothing at all occupies ``coord``."""
        return coord not in self._index and coord not in self._toggle_index

    def all_objects(self) -> List[GameObject]:
        return list(self.objects)

    def objects_of(self, kind: ObjectKind) -> List[GameObject]:
        """Return every object of ``kind`` in placement order."""
        return [obj for obj in self.objects if obj.kind == kind]

    def count(self, kind: ObjectKind) -> int:
        return sum(1 for obj in self.objects if obj.kind == kind)

    @property
    def player(self) -> Player:
        """The single player. Raises PlacementError if there is not exactly one."""
        players = self.objects_of(ObjectKind.PLAYER)
        if len(players) != 1:
            raise PlacementError(f"Level must contain exactly one player, found {len(players)}")
        return players[0]

    def __iter__(self) -> Iterator[GameObject]:
        return iter(self.objects)

    def __len__(self) -> int:
        return len(self.objects)

    # === Mutation ===

    def place(self, obj: GameObject) -> None:
        """
        Add an object to the arena.

        Raises:
            PlacementError: If the cell is off the grid, a non-wall is on the
                wall ring, or the cell is already occupied
        """
        row, col = obj.position
        if not self.is_inside(row, col):
            raise PlacementError(f"{obj!r} is outside the {self.rows}x{self.cols} grid")
        if obj.kind != ObjectKind.WALL and not self.is_interior(row, col):
            raise PlacementError(f"{obj!r} must be placed inside the wall ring")
        if not self.is_free(obj.position):
            raise PlacementError(
                f"Cannot place {obj!r}: cell {obj.position} holds {self.object_at(obj.position)!r}"
            )

        self.objects.append(obj)
        self._index_object(obj)

    def move(self, obj: GameObject, coord: Coord) -> None:
        """
        Relocate ``obj`` to ``coord`` and update the index.

        Only the player may share a cell, and only with a toggle block.
        """
        row, col = coord
        if not self.is_interior(row, col):
            raise PlacementError(f"Cannot move {obj!r} to {coord}: outside the interior")
        occupant = self._index.get(coord)
        toggle = self._toggle_index.get(coord)
        if occupant is not None and occupant is not obj:
            raise PlacementError(f"Cannot move {obj!r} to {coord}: occupied by {occupant!r}")
        if toggle is not None and toggle is not obj and obj.kind != ObjectKind.PLAYER:
            raise PlacementError(f"Cannot move {obj!r} to {coord}: occupied by {toggle!r}")

        self._unindex_object(obj)
        obj.row, obj.col = row, col
        self._index_object(obj)

    def _index_object(self, obj: GameObject) -> None:
        if obj.kind == ObjectKind.TOGGLE_BLOCK:
            self._toggle_index[obj.position] = obj
        else:
            self._index[obj.position] = obj

    def _unindex_object(self, obj: GameObject) -> None:
        index = self._toggle_index if obj.kind == ObjectKind.TOGGLE_BLOCK else self._index
        if index.get(obj.position) is obj:
            del index[obj.position]

    # === Construction ===

    def add_boundary_walls(self) -> int:
        """Fill every empty cell of the wall ring with a Wall. Returns the number added."""
        added = 0
        for row in range(self.rows):
            for col in range(self.cols):
                if self.is_boundary(row, col) and self.is_free((row, col)):
                    self.place(Wall(row, col))
                    added += 1
        return added

    @classmethod
    def from_specs(cls, rows: int, cols: int, specs: Iterable[ObjectSpec],
                   add_boundary: bool = True) -> 'Arena':
        """
        Build an arena from loader output.

        Args:
            rows: Grid height including the wall ring
            cols: Grid width including the wall ring
            specs: (kind, coordinate, initial state) entries
            add_boundary: Create ring walls the specs leave out

        Raises:
            PlacementError: On overlaps, out-of-interior objects, or a
                player count other than one
        """
        arena = cls(rows=rows, cols=cols)
        for spec in specs:
            arena.place(spec.build())
        if add_boundary:
            arena.add_boundary_walls()

        players = arena.count(ObjectKind.PLAYER)
        if players == 0:
            raise PlacementError("Level has no player")
        if players > 1:
            raise PlacementError(f"Level has {players} players; exactly one is allowed")

        logger.debug("Built %dx%d arena with %d objects", rows, cols, len(arena))
        return arena

    def to_specs(self, include_boundary: bool = False) -> List[ObjectSpec]:
        """Snapshot the arena as loader-style specs."""
        return [
            ObjectSpec.of(obj) for obj in self.objects
            if include_boundary or not self.is_boundary(obj.row, obj.col)
        ]

    def copy(self) -> 'Arena':
        """
        Create a deep copy of the arena.

        Objects are indexed directly rather than placed, so a player
        standing on a toggle block is copied as is.
        """
        clone = Arena(rows=self.rows, cols=self.cols)
        for obj in self.objects:
            obj = obj.copy()
            clone.objects.append(obj)
            clone._index_object(obj)
        return clone
