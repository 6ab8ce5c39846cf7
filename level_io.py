"""
Level loading and saving for Statue Lasers.

Two formats are supported:

Text (the hand-written level format)::

    <name>
    <author>
    <description>
    IIIIIII
    IX  S I
    I 1 / I
    IIIIIII

JSON (for tools and tests), with one entry per interior object.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Tuple, Union

from arena import MIN_SIZE, Arena
from exceptions import LevelError, LevelFormatError, PlacementError
from objects import (
    KIND_TO_NAME, NAME_TO_KIND, Direction, MirrorOrientation, ObjectKind, ObjectSpec,
)

logger = logging.getLogger(__name__)

WALL_SYMBOL = 'I'
EMPTY_SYMBOLS = (' ', '.')
METADATA_LINES = 3

# Level text symbol -> (kind, initial state)
SYMBOLS: Dict[str, Tuple[ObjectKind, Dict[str, Any]]] = {
    'X': (ObjectKind.PLAYER, {}),
    'I': (ObjectKind.WALL, {}),
    'B': (ObjectKind.BLOCK, {}),
    'T': (ObjectKind.TOGGLE_BLOCK, {'passable': False}),
    's': (ObjectKind.SWITCH, {'on': False}),
    'b': (ObjectKind.BUTTON, {'pressed': False}),
    'S': (ObjectKind.STATUE, {'lit': False, 'reversed': False}),
    'R': (ObjectKind.STATUE, {'lit': False, 'reversed': True}),
    'Z': (ObjectKind.ZAPPER, {'lit': False}),
    '/': (ObjectKind.MIRROR, {'orientation': MirrorOrientation.FORWARD}),
    '\\': (ObjectKind.MIRROR, {'orientation': MirrorOrientation.BACKWARD}),
    '1': (ObjectKind.LASER, {'enabled': True, 'direction': Direction.UP}),
    '2': (ObjectKind.LASER, {'enabled': True, 'direction': Direction.DOWN}),
    '3': (ObjectKind.LASER, {'enabled': True, 'direction': Direction.LEFT}),
    '4': (ObjectKind.LASER, {'enabled': True, 'direction': Direction.RIGHT}),
    '5': (ObjectKind.LASER, {'enabled': False, 'direction': Direction.UP}),
    '6': (ObjectKind.LASER, {'enabled': False, 'direction': Direction.DOWN}),
    '7': (ObjectKind.LASER, {'enabled': False, 'direction': Direction.LEFT}),
    '8': (ObjectKind.LASER, {'enabled': False, 'direction': Direction.RIGHT}),
}

LASER_SYMBOLS = {
    (state['enabled'], state['direction']): symbol
    for symbol, (kind, state) in SYMBOLS.items()
    if kind == ObjectKind.LASER
}


@dataclass
class LevelDefinition:
    """
    Parsed, immutable description of a level's starting layout.

    Attributes:
        level_id: Identifier reported to the progress tracker
        name: Display name
        author: Level author
        description: One-line hint shown before play
        rows: Grid height including the wall ring
        cols: Grid width including the wall ring
        specs: Interior objects (interior walls included, ring walls not)
    """
    level_id: str
    name: str
    rows: int
    cols: int
    specs: List[ObjectSpec] = field(default_factory=list)
    author: str = ''
    description: str = ''

    def build_arena(self) -> Arena:
        """Create a fresh arena in the starting layout."""
        return Arena.from_specs(self.rows, self.cols, self.specs)

    @property
    def metadata(self) -> Dict[str, Any]:
        return {
            'id': self.level_id,
            'name': self.name,
            'author': self.author,
            'description': self.description,
            'dimensions': f"{self.rows}x{self.cols}",
        }


def symbol_for(spec: ObjectSpec) -> str:
    """Level text symbol for an object spec."""
    state = dict(spec.state or {})
    kind = spec.kind
    if kind == ObjectKind.LASER:
        key = (state.get('enabled', True), Direction(state.get('direction', Direction.UP)))
        return LASER_SYMBOLS[key]
    if kind == ObjectKind.MIRROR:
        return MirrorOrientation(state.get('orientation', MirrorOrientation.FORWARD)).symbol
    if kind == ObjectKind.STATUE:
        return 'R' if state.get('reversed') else 'S'
    for symbol, (symbol_kind, _) in SYMBOLS.items():
        if symbol_kind == kind:
            return symbol
    raise ValueError(f"No level symbol for {kind!r}")


def parse_level(text: str, level_id: str = 'custom') -> LevelDefinition:
    """
    Parse level text into a LevelDefinition.

    Args:
        text: Full level text (three metadata lines, then the grid)
        level_id: Identifier for the resulting level

    Raises:
        LevelFormatError: Malformed dimensions, broken wall ring, or an
            unrecognised symbol
        PlacementError: Zero or several players
    """
    if not text.strip():
        raise LevelFormatError("Empty level file.")

    lines = text.rstrip().splitlines()
    if len(lines) < METADATA_LINES + MIN_SIZE:
        raise LevelFormatError(
            "Level file must include a line for the `name`, `author`, `description`, "
            "and lines representing the level grid."
        )

    name, author, description = (line.strip() for line in lines[:METADATA_LINES])
    grid = [line.rstrip() for line in lines[METADATA_LINES:] if line.strip()]
    rows = len(grid)
    if rows < MIN_SIZE:
        raise LevelFormatError(
            f"Level grid must be at least {MIN_SIZE} rows tall, got {rows}."
        )
    cols = len(grid[0])

    if cols < MIN_SIZE:
        raise LevelFormatError(
            f"Level grid must be at least {MIN_SIZE} columns wide, got {cols}."
        )
    for row, line in enumerate(grid):
        if len(line) != cols:
            raise LevelFormatError(
                f"Grid row {row} has {len(line)} columns, expected {cols}."
            )

    specs: List[ObjectSpec] = []
    players = 0
    for row, line in enumerate(grid):
        for col, ch in enumerate(line):
            on_ring = row in (0, rows - 1) or col in (0, cols - 1)
            if on_ring:
                if ch != WALL_SYMBOL:
                    raise LevelFormatError(
                        f"Level grid must be surrounded by `{WALL_SYMBOL}` walls; "
                        f"found {ch!r} at ({row}, {col})."
                    )
                continue
            if ch in EMPTY_SYMBOLS:
                continue
            if ch not in SYMBOLS:
                raise LevelFormatError(f"Unrecognised symbol {ch!r} at ({row}, {col}).")

            kind, state = SYMBOLS[ch]
            if kind == ObjectKind.PLAYER:
                players += 1
            specs.append(ObjectSpec(kind, (row, col), dict(state)))

    if players != 1:
        raise PlacementError(f"Level must contain exactly one player `X`, found {players}.")

    logger.debug("Parsed level %s (%dx%d, %d objects)", level_id, rows, cols, len(specs))
    return LevelDefinition(
        level_id=level_id,
        name=name,
        author=author,
        description=description,
        rows=rows,
        cols=cols,
        specs=specs,
    )


def level_to_text(level: LevelDefinition) -> str:
    """Inverse of parse_level."""
    grid = [[' '] * level.cols for _ in range(level.rows)]
    for row in range(level.rows):
        for col in range(level.cols):
            if row in (0, level.rows - 1) or col in (0, level.cols - 1):
                grid[row][col] = WALL_SYMBOL
    for spec in level.specs:
        row, col = spec.position
        grid[row][col] = symbol_for(spec)

    lines = [level.name, level.author, level.description]
    lines.extend(''.join(line) for line in grid)
    return '\n'.join(lines) + '\n'


def arena_to_text(arena: Arena) -> str:
    """Grid lines for the current arena state (no metadata)."""
    grid = [[' '] * arena.cols for _ in range(arena.rows)]
    for obj in arena:
        row, col = obj.position
        # The player hides a passable toggle block it stands on
        if obj.kind == ObjectKind.TOGGLE_BLOCK and grid[row][col] == 'X':
            continue
        grid[row][col] = symbol_for(ObjectSpec.of(obj))
    return '\n'.join(''.join(line) for line in grid)


def _encode_state(state: Dict[str, Any]) -> Dict[str, Any]:
    encoded = {}
    for key, value in (state or {}).items():
        encoded[key] = value if isinstance(value, bool) else int(value)
    return encoded


def level_to_dict(level: LevelDefinition) -> dict:
    """
    Convert a level to a dictionary for JSON serialization.

    Directions and mirror orientations are stored as integers
    (Direction 0-3 = Up/Right/Down/Left, orientation 0 = '/', 1 = '\\').
    """
    return {
        'id': level.level_id,
        'name': level.name,
        'author': level.author,
        'description': level.description,
        'rows': level.rows,
        'cols': level.cols,
        'objects': [
            {
                'type': KIND_TO_NAME[spec.kind],
                'position': list(spec.position),
                'state': _encode_state(spec.state),
            }
            for spec in level.specs
        ],
    }


def level_from_dict(data: dict) -> LevelDefinition:
    """
    Create a level from a dictionary.

    Raises:
        LevelFormatError: Missing dimensions, an unknown object type, or an
            object entry without a valid position or state
        PlacementError: Zero or several players, or overlapping objects
    """
    if not isinstance(data, dict):
        raise LevelFormatError(f"Level data must be an object, got {type(data).__name__}.")
    try:
        rows = int(data['rows'])
        cols = int(data['cols'])
    except (KeyError, TypeError, ValueError) as exc:
        raise LevelFormatError(f"Level data needs integer `rows` and `cols`: {exc}") from exc

    specs = []
    for index, entry in enumerate(data.get('objects', [])):
        if not isinstance(entry, dict):
            raise LevelFormatError(f"Object {index} must be an object, got {entry!r}.")
        type_name = entry.get('type')
        if type_name not in NAME_TO_KIND:
            raise LevelFormatError(f"Unknown object type: {type_name!r}")
        try:
            row, col = (int(value) for value in entry['position'])
            state = dict(entry.get('state') or {})
        except (KeyError, TypeError, ValueError) as exc:
            raise LevelFormatError(
                f"Object {index} ({type_name}) needs a `position` [row, col] "
                f"and a `state` mapping: {exc!r}"
            ) from exc
        specs.append(ObjectSpec(NAME_TO_KIND[type_name], (row, col), state))

    level = LevelDefinition(
        level_id=str(data.get('id', 'custom')),
        name=data.get('name', ''),
        author=data.get('author', ''),
        description=data.get('description', ''),
        rows=rows,
        cols=cols,
        specs=specs,
    )
    # Fail at load time rather than at first play
    try:
        level.build_arena()
    except LevelError:
        raise
    except ValueError as exc:
        raise LevelFormatError(f"Invalid object state in level data: {exc}") from exc
    return level


def level_to_json(level: LevelDefinition) -> str:
    """Convert level to JSON string."""
    return json.dumps(level_to_dict(level), indent=2)


def level_from_json(json_str: str) -> LevelDefinition:
    """
    Create level from JSON string.

    Raises:
        LevelFormatError: Malformed JSON or level data
    """
    try:
        data = json.loads(json_str)
    except json.JSONDecodeError as exc:
        raise LevelFormatError(f"Malformed level JSON: {exc}") from exc
    return level_from_dict(data)


def save_level(level: LevelDefinition, filepath: Union[str, Path]) -> None:
    """
    Save a level to disk. ``.json`` files get JSON, anything else level text.

    Args:
        level: Level to save
        filepath: Path to output file
    """
    path = Path(filepath)
    if path.suffix == '.json':
        content = level_to_json(level)
    else:
        content = level_to_text(level)
    path.write_text(content, encoding='utf-8')


def load_level(filepath: Union[str, Path]) -> LevelDefinition:
    """
    Load a level from a text or JSON file.

    The level id defaults to the file name without its extension.

    Raises:
        OSError: If the file cannot be read
        LevelError: If its contents are not a valid level
    """
    path = Path(filepath)
    try:
        content = path.read_text(encoding='utf-8')
    except UnicodeDecodeError as exc:
        raise LevelFormatError(f"{path}: level files must be UTF-8 text: {exc}") from exc
    if path.suffix == '.json':
        try:
            data = json.loads(content)
        except json.JSONDecodeError as exc:
            raise LevelFormatError(f"{path}: malformed level JSON: {exc}") from exc
        if isinstance(data, dict):
            data.setdefault('id', path.stem)
        return level_from_dict(data)
    return parse_level(content, level_id=path.stem)
