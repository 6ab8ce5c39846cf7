"""Errors raised while building a level. Illegal moves and lost levels are not errors."""


class LevelError(ValueError):
    """A level could not be constructed; the message says why."""


class LevelFormatError(LevelError):
    """The level text or JSON is malformed (dimensions, walls, unknown symbols)."""


class PlacementError(LevelError):
    """Objects were placed illegally (player count, overlap, outside the interior)."""


class ProgressError(ValueError):
    """The saved progress file exists but cannot be read."""
