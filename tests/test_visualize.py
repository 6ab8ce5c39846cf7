"""Unit tests for visualize.py."""

from beam import fire_lasers
from core_levels import core_level
from game import Command, LevelSession
from objects import (
    Direction, Laser, Mirror, MirrorOrientation, ObjectKind, Player, Statue, Switch, ToggleBlock, Wall,
)
from visualize import (
    BEAM_CROSS, BEAM_HORIZONTAL, BEAM_VERTICAL, DIR_ARROWS, WALL_FILL,
    get_beam_char, get_object_symbol, render_arena, render_cell, render_compact,
)


class TestBeamChar:
    """Tests for get_beam_char."""

    def test_no_beam(self):
        assert get_beam_char([]) == ' '

    def test_axes(self):
        """Test vertical, horizontal and crossing beams."""
        assert get_beam_char([Direction.UP]) == BEAM_VERTICAL
        assert get_beam_char([Direction.DOWN, Direction.UP]) == BEAM_VERTICAL
        assert get_beam_char([Direction.LEFT]) == BEAM_HORIZONTAL
        assert get_beam_char([Direction.RIGHT, Direction.DOWN]) == BEAM_CROSS


class TestObjectSymbol:
    """Tests for get_object_symbol."""

    def test_player(self):
        assert get_object_symbol(Player(1, 1)) == '@'

    def test_laser(self):
        """Test lasers show state and direction."""
        assert get_object_symbol(Laser(1, 1, direction=Direction.LEFT)) == 'L' + DIR_ARROWS[Direction.LEFT]
        off = Laser(1, 1, enabled=False, direction=Direction.UP)
        assert get_object_symbol(off) == 'l' + DIR_ARROWS[Direction.UP]

    def test_mirror(self):
        assert get_object_symbol(Mirror(1, 1, orientation=MirrorOrientation.FORWARD)) == '/'
        assert get_object_symbol(Mirror(1, 1, orientation=MirrorOrientation.BACKWARD)) == '\\'

    def test_statue(self):
        """Test lit and reversed statues."""
        assert get_object_symbol(Statue(1, 1)) == 'S'
        assert get_object_symbol(Statue(1, 1, lit=True)) == 'S*'
        assert get_object_symbol(Statue(1, 1, reversed=True)) == 'R'

    def test_switch_and_toggle_block(self):
        assert get_object_symbol(Switch(1, 1)) == 's'
        assert get_object_symbol(Switch(1, 1, on=True)) == 's+'
        assert get_object_symbol(ToggleBlock(1, 1)) == 'T'
        assert get_object_symbol(ToggleBlock(1, 1, passable=True)) == 't'


class TestRenderCell:
    """Tests for render_cell."""

    def test_widths(self):
        """Test every cell is three characters wide."""
        cells = [
            render_cell(None, []),
            render_cell(None, [Direction.DOWN]),
            render_cell(Wall(0, 0), []),
            render_cell(Player(1, 1), []),
            render_cell(Laser(1, 1), []),
        ]
        assert all(len(cell) == 3 for cell in cells)

    def test_contents(self):
        assert render_cell(None, []) == '   '
        assert render_cell(None, [Direction.DOWN]) == f' {BEAM_VERTICAL} '
        assert render_cell(Wall(0, 0), []) == WALL_FILL
        assert render_cell(Player(1, 1), []) == ' @ '

    def test_beam_through_open_toggle_block(self):
        """Test an open toggle block shows the beam crossing it."""
        block = ToggleBlock(1, 1, passable=True)
        assert render_cell(block, [Direction.RIGHT]) == f't{BEAM_HORIZONTAL} '
        assert render_cell(block, []) == ' t '
        assert render_cell(ToggleBlock(1, 1), [Direction.RIGHT]) == ' T '


class TestRenderArena:
    """Tests for render_arena."""

    def test_line_count(self):
        """Test borders, rows and status line."""
        session = LevelSession(core_level(0))
        lines = render_arena(session.arena, session.beams, session.evaluation).splitlines()
        assert len(lines) == 1 + 2 * session.arena.rows + 1
        assert lines[-1] == 'Statues: 0/1'

    def test_no_status(self):
        session = LevelSession(core_level(0))
        lines = render_arena(session.arena).splitlines()
        assert len(lines) == 1 + 2 * session.arena.rows

    def test_coords(self):
        """Test coordinates add a header line."""
        session = LevelSession(core_level(0))
        lines = render_arena(session.arena, show_coords=True).splitlines()
        assert len(lines) == 2 + 2 * session.arena.rows
        assert lines[0].split() == [str(col) for col in range(session.arena.cols)]

    def test_beam_drawn(self):
        """Test the beam appears below the laser."""
        session = LevelSession(core_level(0))
        row_two = render_arena(session.arena, session.beams).splitlines()[5]
        assert f' {BEAM_VERTICAL} ' in row_two

    def test_beam_over_open_toggle_block(self, make_arena):
        """Test the beam is drawn through an opened toggle block."""
        arena = make_arena(
            'IIIIIII',
            'I4 T SI',
            'I X   I',
            'IIIIIII',
        )
        arena.objects_of(ObjectKind.TOGGLE_BLOCK)[0].passable = True
        row_one = render_arena(arena, fire_lasers(arena)).splitlines()[3]
        assert f't{BEAM_HORIZONTAL} ' in row_one

    def test_loss_message(self, make_level):
        """Test a lost level shows why."""
        session = LevelSession(make_level(
            'IIIIII',
            'I4 BSI',
            'I X  I',
            'IIIIII',
        ))
        session.apply(Command.UP)
        assert 'shot' in session.render().splitlines()[-1]


class TestRenderCompact:
    """Tests for render_compact."""

    def test_first_level(self):
        session = LevelSession(core_level(0))
        assert render_compact(session.arena).splitlines() == [
            'IIIIIII',
            'I  L  I',
            'I     I',
            'I@\\  SI',
            'IIIIIII',
        ]
