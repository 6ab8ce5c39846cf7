"""Unit tests for arena.py - placement, lookup and the coordinate index."""

import pytest

from arena import Arena
from exceptions import LevelError, PlacementError
from objects import Block, ObjectKind, ObjectSpec, Player, Statue, ToggleBlock, Wall


def small_arena():
    """5x5 arena (3x3 interior) with walls and a player at the centre."""
    arena = Arena(rows=5, cols=5)
    arena.add_boundary_walls()
    arena.place(Player(2, 2))
    return arena


class TestArenaInit:
    """Tests for Arena construction."""

    def test_empty(self):
        """Test a fresh arena has no objects."""
        arena = Arena(rows=4, cols=6)
        assert len(arena) == 0
        assert arena.object_at((1, 1)) is None

    def test_too_small(self):
        """Test arenas smaller than 3x3 are rejected."""
        with pytest.raises(PlacementError):
            Arena(rows=2, cols=5)

    def test_boundary_walls(self):
        """Test the ring is filled with walls."""
        arena = Arena(rows=4, cols=5)
        added = arena.add_boundary_walls()
        assert added == 2 * 5 + 2 * 2
        assert all(obj.kind == ObjectKind.WALL for obj in arena)
        assert arena.object_at((0, 0)).kind == ObjectKind.WALL
        assert arena.object_at((1, 1)) is None


class TestArenaGeometry:
    """Tests for interior/boundary checks."""

    def test_interior(self):
        """Test interior excludes the ring."""
        arena = Arena(rows=5, cols=6)
        assert arena.is_interior(1, 1)
        assert arena.is_interior(3, 4)
        assert not arena.is_interior(0, 2)
        assert not arena.is_interior(2, 5)

    def test_boundary(self):
        """Test ring cells."""
        arena = Arena(rows=5, cols=5)
        assert arena.is_boundary(0, 0)
        assert arena.is_boundary(4, 2)
        assert not arena.is_boundary(2, 2)
        assert not arena.is_boundary(-1, 2)

    def test_interior_cells(self):
        """Test enumeration of interior cells."""
        arena = Arena(rows=4, cols=5)
        assert list(arena.interior_cells()) == [(1, 1), (1, 2), (1, 3), (2, 1), (2, 2), (2, 3)]


class TestArenaPlacement:
    """Tests for placing objects."""

    def test_place_and_lookup(self):
        """Test placed objects are found by coordinate."""
        arena = small_arena()
        block = Block(1, 3)
        arena.place(block)
        assert arena.object_at((1, 3)) is block
        assert arena.objects_of(ObjectKind.BLOCK) == [block]
        assert arena.count(ObjectKind.WALL) == 16

    def test_overlap_rejected(self):
        """Test two objects cannot share a cell."""
        arena = small_arena()
        with pytest.raises(PlacementError):
            arena.place(Block(2, 2))

    def test_ring_rejects_non_walls(self):
        """Test only walls may sit on the ring."""
        arena = Arena(rows=5, cols=5)
        with pytest.raises(PlacementError):
            arena.place(Statue(0, 2))
        arena.place(Wall(0, 2))

    def test_outside_grid(self):
        """Test off-grid placement."""
        arena = Arena(rows=5, cols=5)
        with pytest.raises(PlacementError):
            arena.place(Wall(5, 0))

    def test_placement_error_is_level_error(self):
        """Test the error hierarchy."""
        assert issubclass(PlacementError, LevelError)
        assert issubclass(LevelError, ValueError)

    def test_player_property(self):
        """Test the single player is returned."""
        arena = small_arena()
        assert arena.player.position == (2, 2)

    def test_player_missing(self):
        """Test a missing player raises."""
        arena = Arena(rows=5, cols=5)
        with pytest.raises(PlacementError):
            arena.player


class TestArenaMove:
    """Tests for relocating objects."""

    def test_move_updates_index(self):
        """Test the index follows the object."""
        arena = small_arena()
        player = arena.player
        arena.move(player, (1, 2))
        assert arena.object_at((1, 2)) is player
        assert arena.object_at((2, 2)) is None
        assert player.position == (1, 2)

    def test_move_onto_occupied(self):
        """Test moves onto other objects are rejected."""
        arena = small_arena()
        block = Block(1, 1)
        arena.place(block)
        with pytest.raises(PlacementError):
            arena.move(block, (2, 2))

    def test_move_outside_interior(self):
        """Test moves onto the ring are rejected."""
        arena = small_arena()
        with pytest.raises(PlacementError):
            arena.move(arena.player, (0, 2))

    def test_player_shares_with_toggle_block(self):
        """Test the player may stand on a toggle block."""
        arena = small_arena()
        toggle = ToggleBlock(2, 3, passable=True)
        arena.place(toggle)
        arena.move(arena.player, (2, 3))
        assert arena.object_at((2, 3)) is arena.player
        assert arena.objects_at((2, 3)) == [arena.player, toggle]
        assert not arena.is_free((2, 3))

        arena.move(arena.player, (2, 2))
        assert arena.object_at((2, 3)) is toggle

    def test_block_cannot_share_with_toggle_block(self):
        """Test only the player may share a cell."""
        arena = small_arena()
        arena.place(ToggleBlock(1, 2, passable=True))
        block = Block(1, 1)
        arena.place(block)
        with pytest.raises(PlacementError):
            arena.move(block, (1, 2))


class TestArenaSpecs:
    """Tests for from_specs / to_specs / copy."""

    def test_from_specs(self):
        """Test building from loader specs adds the ring."""
        specs = [
            ObjectSpec(ObjectKind.PLAYER, (1, 1)),
            ObjectSpec(ObjectKind.STATUE, (2, 3), {'reversed': True}),
        ]
        arena = Arena.from_specs(4, 5, specs)
        assert arena.player.position == (1, 1)
        assert arena.object_at((2, 3)).reversed is True
        assert arena.object_at((0, 0)).kind == ObjectKind.WALL

    def test_from_specs_no_player(self):
        """Test a level without a player is rejected."""
        with pytest.raises(PlacementError):
            Arena.from_specs(4, 4, [ObjectSpec(ObjectKind.BLOCK, (1, 1))])

    def test_from_specs_two_players(self):
        """Test a level with two players is rejected."""
        specs = [ObjectSpec(ObjectKind.PLAYER, (1, 1)), ObjectSpec(ObjectKind.PLAYER, (1, 2))]
        with pytest.raises(PlacementError):
            Arena.from_specs(4, 4, specs)

    def test_from_specs_overlap(self):
        """Test overlapping specs are rejected."""
        specs = [ObjectSpec(ObjectKind.PLAYER, (1, 1)), ObjectSpec(ObjectKind.BLOCK, (1, 1))]
        with pytest.raises(PlacementError):
            Arena.from_specs(4, 4, specs)

    def test_to_specs_skips_ring(self):
        """Test ring walls are left out by default."""
        arena = small_arena()
        specs = arena.to_specs()
        assert [spec.kind for spec in specs] == [ObjectKind.PLAYER]
        assert len(arena.to_specs(include_boundary=True)) == 17

    def test_copy_is_deep(self):
        """Test a copy does not share objects."""
        arena = small_arena()
        clone = arena.copy()
        clone.move(clone.player, (1, 1))
        assert arena.player.position == (2, 2)
        assert clone.player.position == (1, 1)

    def test_copy_player_on_toggle_block(self):
        """Test copying while the player stands on a toggle block."""
        arena = small_arena()
        arena.place(ToggleBlock(2, 3, passable=True))
        arena.move(arena.player, (2, 3))
        clone = arena.copy()
        assert clone.object_at((2, 3)).kind == ObjectKind.PLAYER
        assert len(clone.objects_at((2, 3))) == 2
