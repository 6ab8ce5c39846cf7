"""
Built-in level sequence for Statue Lasers.

Levels are stored in the text format read by ``level_io.parse_level``
and are played in order; finishing one unlocks the next.
"""

from typing import List

from level_io import LevelDefinition, parse_level

LEVEL_AUTHOR = 'statue-lasers'

_CORE_LEVEL_TEXT = [
    r"""First Light
statue-lasers
Push the mirror into the beam to light the statue.
IIIIIII
I  2  I
I     I
IX\  SI
IIIIIII
""",
    r"""Open Sesame
statue-lasers
Walk into a switch to flip every toggle block.
IIIIIIII
I4 T  SI
I X    I
I s    I
IIIIIIII
""",
    r"""Shadows
statue-lasers
Reversed statues must stay dark.
IIIIIII
I4   RI
I  B  I
I  X  I
IS   3I
IIIIIII
""",
    r"""Crossfire
statue-lasers
A laser hit by a beam switches off after it fires. Press space next to one to turn it on.
IIIIIIII
I 2    I
I  BX  I
I 8   SI
I      I
IIIIIIII
""",
    r"""Last Stand
statue-lasers
Never let a beam reach a zapper.
IIIIIIII
I/ T SZI
I    bTI
I  XB  I
I1    1I
IIIIIIII
""",
]

NUM_CORE_LEVELS = len(_CORE_LEVEL_TEXT)


def core_level_id(index: int) -> str:
    """Progress identifier of the core level at ``index`` (0-based)."""
    return f"core-{index + 1}"


def core_level(index: int) -> LevelDefinition:
    """
    Load a built-in level.

    Args:
        index: 0-based position in the sequence

    Raises:
        IndexError: If there is no such level
    """
    if not 0 <= index < NUM_CORE_LEVELS:
        raise IndexError(f"No core level {index}; there are {NUM_CORE_LEVELS}")
    return parse_level(_CORE_LEVEL_TEXT[index], level_id=core_level_id(index))


def all_core_levels() -> List[LevelDefinition]:
    return [core_level(i) for i in range(NUM_CORE_LEVELS)]
