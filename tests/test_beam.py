"""Unit tests for beam.py - beam tracing."""

from beam import blocks_beam, fire_lasers, get_beam_at_cell, get_beam_cells, trace_beam
from objects import Direction, ObjectKind, ToggleBlock, Mirror, Block


class TestTraceBeam:
    """Tests for single-laser tracing."""

    def test_beam_exits_interior(self, make_arena):
        """Test a beam reaching the ring has no target and no effects."""
        arena = make_arena(
            'IIIIII',
            'I4   I',
            'I  X I',
            'IIIIII',
        )
        before = {obj: obj.state() for obj in arena}
        laser = arena.objects_of(ObjectKind.LASER)[0]
        path = trace_beam(arena, laser)
        assert path.target is None
        assert path.terminated
        assert path.cells == [(1, 2), (1, 3), (1, 4)]
        assert all(seg.direction == Direction.RIGHT for seg in path.segments)
        assert {obj: obj.state() for obj in arena} == before

    def test_beam_stops_at_first_object(self, make_arena):
        """Test the first non-mirror occupant is the target."""
        arena = make_arena(
            'IIIIIII',
            'I4 BS I',
            'I    XI',
            'IIIIIII',
        )
        laser = arena.objects_of(ObjectKind.LASER)[0]
        path = trace_beam(arena, laser)
        assert path.target_kind == ObjectKind.BLOCK
        assert path.end == (1, 3)

    def test_beam_turns_at_mirror(self, make_arena):
        """Test a '/' mirror turns a rightward beam upward."""
        arena = make_arena(
            'IIIIIII',
            'I   S I',
            'I   X I',
            'I4  / I',
            'IIIIIII',
        )
        laser = arena.objects_of(ObjectKind.LASER)[0]
        path = trace_beam(arena, laser)
        # Player at (2, 4) stands between mirror and statue
        assert path.cells == [(3, 2), (3, 3), (3, 4), (2, 4)]
        assert path.segments[2].direction == Direction.UP
        assert path.is_lethal

    def test_backward_mirror_death_scenario(self, make_arena):
        """Test the 5x5 scenario: up beam turns left at '\\' into the player."""
        arena = make_arena(
            'IIIIIII',
            'I     I',
            'I X\\  I',
            'I     I',
            'I  1  I',
            'I     I',
            'IIIIIII',
        )
        laser = arena.objects_of(ObjectKind.LASER)[0]
        assert laser.position == (4, 3)
        path = trace_beam(arena, laser)
        assert path.cells == [(3, 3), (2, 3), (2, 2)]
        assert path.segments[1].direction == Direction.LEFT
        assert path.target is arena.player
        assert path.is_lethal

    def test_passable_toggle_block_is_transparent(self, make_arena):
        """Test beams pass open toggle blocks and stop at closed ones."""
        arena = make_arena(
            'IIIIIII',
            'I4 T SI',
            'I X   I',
            'IIIIIII',
        )
        laser = arena.objects_of(ObjectKind.LASER)[0]
        toggle = arena.objects_of(ObjectKind.TOGGLE_BLOCK)[0]
        assert trace_beam(arena, laser).target is toggle

        toggle.passable = True
        path = trace_beam(arena, laser)
        assert path.target_kind == ObjectKind.STATUE
        assert (1, 3) in path.cells

    def test_disabled_laser_still_traceable(self, make_arena):
        """Test trace_beam ignores the enabled flag; fire_lasers does not."""
        arena = make_arena(
            'IIIIII',
            'I8 S I',
            'I X  I',
            'IIIIII',
        )
        laser = arena.objects_of(ObjectKind.LASER)[0]
        assert laser.enabled is False
        assert trace_beam(arena, laser).target_kind == ObjectKind.STATUE
        assert fire_lasers(arena) == []

    def test_mirror_loop_returns_to_laser(self, make_arena):
        """Test a closed mirror loop ends at the emitting laser."""
        arena = make_arena(
            'IIIIII',
            'I/  \\I',
            'I  X I',
            'I\\ 3/I',
            'IIIIII',
        )
        laser = arena.objects_of(ObjectKind.LASER)[0]
        path = trace_beam(arena, laser)
        assert path.terminated
        assert path.target is laser

    def test_step_guard(self, make_arena):
        """Test the step guard stops a trace early."""
        arena = make_arena(
            'IIIIIIII',
            'I4     I',
            'I X    I',
            'IIIIIIII',
        )
        laser = arena.objects_of(ObjectKind.LASER)[0]
        path = trace_beam(arena, laser, max_steps=2)
        assert not path.terminated
        assert len(path.segments) == 2


class TestFireLasers:
    """Tests for firing every laser."""

    def test_each_enabled_laser(self, make_arena):
        """Test one path per enabled laser."""
        arena = make_arena(
            'IIIIIII',
            'I4  S I',
            'I X   I',
            'I3   7I',
            'IIIIIII',
        )
        paths = fire_lasers(arena)
        assert len(paths) == 2

    def test_beam_cells_helpers(self, make_arena):
        """Test get_beam_cells and get_beam_at_cell."""
        arena = make_arena(
            'IIIIII',
            'I4  SI',
            'I X  I',
            'IIIIII',
        )
        paths = fire_lasers(arena)
        assert get_beam_cells(paths) == {(1, 2), (1, 3), (1, 4)}
        assert get_beam_at_cell(paths, 1, 2) == [Direction.RIGHT]
        assert get_beam_at_cell(paths, 2, 2) == []


class TestBlocksBeam:
    """Tests for blocks_beam."""

    def test_blockers(self):
        """Test which objects stop a beam."""
        assert blocks_beam(Block(1, 1))
        assert not blocks_beam(Mirror(1, 1))
        assert blocks_beam(ToggleBlock(1, 1, passable=False))
        assert not blocks_beam(ToggleBlock(1, 1, passable=True))
