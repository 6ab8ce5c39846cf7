"""
ASCII visualization for Statue Lasers.

Renders the arena, beam paths and level status to text for terminal
display. Supports both Unicode box drawing and ASCII fallback for
Windows console.
"""

import sys
from typing import Dict, List, Optional

from arena import Arena
from beam import BeamPath, get_beam_at_cell
from objects import Direction, GameObject, ObjectKind


def _supports_unicode() -> bool:
    """Check if the terminal supports Unicode output."""
    try:
        # Try to encode a box drawing character
        '┌'.encode(sys.stdout.encoding or 'utf-8')
        return True
    except (UnicodeEncodeError, LookupError):
        return False


# Detect Unicode support
USE_UNICODE = _supports_unicode()

if USE_UNICODE:
    BOX_TL = '┌'
    BOX_TR = '┐'
    BOX_BL = '└'
    BOX_BR = '┘'
    BOX_H = '─'
    BOX_V = '│'
    BOX_T = '┬'
    BOX_B = '┴'
    BOX_L = '├'
    BOX_R = '┤'
    BOX_X = '┼'

    BEAM_VERTICAL = '│'
    BEAM_HORIZONTAL = '─'
    BEAM_CROSS = '┼'
    WALL_FILL = '███'

    DIR_ARROWS = {
        Direction.UP: '↑',
        Direction.RIGHT: '→',
        Direction.DOWN: '↓',
        Direction.LEFT: '←',
    }
else:
    # ASCII fallback
    BOX_TL = '+'
    BOX_TR = '+'
    BOX_BL = '+'
    BOX_BR = '+'
    BOX_H = '-'
    BOX_V = '|'
    BOX_T = '+'
    BOX_B = '+'
    BOX_L = '+'
    BOX_R = '+'
    BOX_X = '+'

    BEAM_VERTICAL = '|'
    BEAM_HORIZONTAL = '-'
    BEAM_CROSS = '+'
    WALL_FILL = '###'

    DIR_ARROWS = {direction: direction.symbol for direction in Direction}

LEGEND = (
    "@ you   S statue   R reversed statue   Z zapper   L laser (l = off)\n"
    "/ \\ mirrors   B block   T toggle block (t = open)   s switch   b button   * lit"
)


def get_beam_char(directions: List[Direction]) -> str:
    """Get the character to display for beam directions at a cell."""
    if not directions:
        return ' '
    vertical = any(d in (Direction.UP, Direction.DOWN) for d in directions)
    horizontal = any(d in (Direction.LEFT, Direction.RIGHT) for d in directions)
    if vertical and horizontal:
        return BEAM_CROSS
    return BEAM_VERTICAL if vertical else BEAM_HORIZONTAL


def get_object_symbol(obj: GameObject) -> str:
    """Get the 1-2 character display symbol for an object."""
    kind = obj.kind
    if kind == ObjectKind.PLAYER:
        return '@'
    if kind == ObjectKind.LASER:
        return ('L' if obj.enabled else 'l') + DIR_ARROWS[obj.direction]
    if kind == ObjectKind.MIRROR:
        return obj.symbol
    if kind == ObjectKind.STATUE:
        return obj.symbol + ('*' if obj.lit else '')
    if kind == ObjectKind.ZAPPER:
        return 'Z' + ('*' if obj.lit else '')
    if kind == ObjectKind.TOGGLE_BLOCK:
        return 't' if obj.passable else 'T'
    if kind == ObjectKind.SWITCH:
        return 's' + ('+' if obj.on else '')
    if kind == ObjectKind.BUTTON:
        return 'b' + ('+' if obj.pressed else '')
    return obj.symbol


def render_cell(obj: Optional[GameObject], beam_dirs: List[Direction]) -> str:
    """
    Render a single cell's contents. An open toggle block keeps its
    marker with the beam drawn beside it.

    Args:
        obj: Visible object in the cell, or None
        beam_dirs: Directions beams travel through this cell

    Returns:
        3-character string for the cell
    """
    if obj is None:
        if beam_dirs:
            return f' {get_beam_char(beam_dirs)} '
        return '   '
    if obj.kind == ObjectKind.WALL:
        return WALL_FILL
    if obj.kind == ObjectKind.TOGGLE_BLOCK and obj.passable and beam_dirs:
        return f't{get_beam_char(beam_dirs)} '

    symbol = get_object_symbol(obj)
    if len(symbol) == 1:
        return f' {symbol} '
    return f' {symbol[:2]}'


def render_arena(arena: Arena, beams: Optional[List[BeamPath]] = None,
                 status: Optional[object] = None, show_coords: bool = False) -> str:
    """
    Render the arena as ASCII art.

    Args:
        arena: The arena to render
        beams: Optional traced beams to draw
        status: Optional status line source (an Evaluation or LevelStatus)
        show_coords: Whether to show row/column coordinates

    Returns:
        Multi-line string representation of the arena
    """
    rows, cols = arena.rows, arena.cols
    cell_width = 3
    lines = []

    beam_at_cell: Dict = {}
    for row in range(rows):
        for col in range(cols):
            dirs = get_beam_at_cell(beams or [], row, col)
            if dirs:
                beam_at_cell[(row, col)] = dirs

    # Column headers
    if show_coords:
        header = '    '
        for col in range(cols):
            header += f'{col:^3} '
        lines.append(header)

    # Top border
    top_border = BOX_TL
    for col in range(cols):
        top_border += BOX_H * cell_width
        top_border += BOX_T if col < cols - 1 else BOX_TR
    if show_coords:
        top_border = '   ' + top_border
    lines.append(top_border)

    for row in range(rows):
        row_str = BOX_V
        for col in range(cols):
            obj = arena.object_at((row, col))
            row_str += render_cell(obj, beam_at_cell.get((row, col), [])) + BOX_V

        if show_coords:
            row_str = f'{row:>2} ' + row_str
        lines.append(row_str)

        # Row separator or bottom border
        if row < rows - 1:
            sep = BOX_L
            for col in range(cols):
                sep += BOX_H * cell_width
                sep += BOX_X if col < cols - 1 else BOX_R
        else:
            sep = BOX_BL
            for col in range(cols):
                sep += BOX_H * cell_width
                sep += BOX_B if col < cols - 1 else BOX_BR

        if show_coords:
            sep = '   ' + sep
        lines.append(sep)

    if status is not None:
        lines.append(str(status))

    return '\n'.join(lines)


def print_arena(arena: Arena, beams: Optional[List[BeamPath]] = None,
                status: Optional[object] = None, show_coords: bool = False) -> None:
    """Print the arena to stdout."""
    print(render_arena(arena, beams, status, show_coords))


def render_compact(arena: Arena) -> str:
    """
    Render a compact one-character-per-cell view of the arena.
    Useful for logging or simple displays.
    """
    lines = []
    for row in range(arena.rows):
        row_str = ''
        for col in range(arena.cols):
            obj = arena.object_at((row, col))
            row_str += '.' if obj is None else get_object_symbol(obj)[0]
        lines.append(row_str)
    return '\n'.join(lines)
