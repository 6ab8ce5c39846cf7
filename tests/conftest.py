"""Shared helpers for building small levels from grid text."""

import pytest

from level_io import LevelDefinition, parse_level


def level_from_grid(*rows: str, level_id: str = 'test') -> LevelDefinition:
    """Parse grid lines (wall ring included) with placeholder metadata."""
    text = '\n'.join(['Test Level', 'tests', 'A level built in a test'] + list(rows))
    return parse_level(text, level_id=level_id)


@pytest.fixture
def make_level():
    return level_from_grid


@pytest.fixture
def make_arena():
    def _make(*rows: str):
        return level_from_grid(*rows).build_arena()
    return _make
