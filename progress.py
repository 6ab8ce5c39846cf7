"""
Saved progress for Statue Lasers.

Completed core levels are stored as JSON in the user's data directory.
The first level is always unlocked; completing level N unlocks N + 1.
"""

import json
import logging
import os
from pathlib import Path
from typing import Optional, Set, Union

from core_levels import NUM_CORE_LEVELS, core_level_id
from exceptions import ProgressError

logger = logging.getLogger(__name__)

HOME_ENV_VAR = 'STATUE_LASERS_HOME'
DATA_DIR_NAME = '.statue_lasers'
PROGRESS_FILE_NAME = 'progress.json'


def default_progress_path() -> Path:
    """Progress file location, honouring the STATUE_LASERS_HOME override."""
    override = os.environ.get(HOME_ENV_VAR)
    base = Path(override) if override else Path.home() / DATA_DIR_NAME
    return base / PROGRESS_FILE_NAME


class ProgressTracker:
    """
    Records which core levels have been completed.

    Usage:
        tracker = ProgressTracker.load()
        session = LevelSession(level, on_complete=tracker.complete_level_id)
    """

    def __init__(self, path: Optional[Union[str, Path]] = None,
                 completed: Optional[Set[int]] = None):
        self.path = Path(path) if path is not None else default_progress_path()
        self.completed: Set[int] = set(completed or ())

    @classmethod
    def load(cls, path: Optional[Union[str, Path]] = None) -> 'ProgressTracker':
        """
        Read saved progress. A missing file means nothing is completed yet.

        Raises:
            ProgressError: If the file exists but cannot be read or is not
                valid progress JSON
        """
        tracker = cls(path)
        if not tracker.path.exists():
            return tracker

        try:
            data = json.loads(tracker.path.read_text(encoding='utf-8'))
            completed = {int(i) for i in data.get('completed_core_levels', [])}
        except OSError as exc:
            raise ProgressError(f"Cannot read progress file {tracker.path}: {exc}") from exc
        except (ValueError, TypeError, AttributeError) as exc:
            raise ProgressError(f"Corrupt progress file {tracker.path}: {exc}") from exc

        tracker.completed = {i for i in completed if 0 <= i < NUM_CORE_LEVELS}
        return tracker

    def save(self) -> None:
        """Write progress to disk, creating the data directory if needed."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = {'completed_core_levels': sorted(self.completed)}
        self.path.write_text(json.dumps(data, indent=2), encoding='utf-8')
        logger.debug("Saved progress to %s", self.path)

    def complete(self, index: int) -> None:
        """Mark core level ``index`` (0-based) completed and persist."""
        if not 0 <= index < NUM_CORE_LEVELS:
            raise IndexError(f"No core level {index}")
        if index in self.completed:
            return
        self.completed.add(index)
        self.save()

    def complete_level_id(self, level_id: str) -> None:
        """
        Level-completed signal handler.

        Only core level ids are tracked; custom levels are ignored.
        """
        for index in range(NUM_CORE_LEVELS):
            if core_level_id(index) == level_id:
                self.complete(index)
                return
        logger.debug("Ignoring completion of non-core level %s", level_id)

    @property
    def highest_unlocked(self) -> int:
        """Highest playable core level index."""
        if not self.completed:
            return 0
        return min(max(self.completed) + 1, NUM_CORE_LEVELS - 1)

    def is_unlocked(self, index: int) -> bool:
        return 0 <= index <= self.highest_unlocked

    @property
    def all_completed(self) -> bool:
        return len(self.completed) == NUM_CORE_LEVELS
