"""
High-level game API for Statue Lasers.

Provides both an interactive play interface and the tensor encoding
used by the RL environment.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Hashable, List, Optional, Tuple

import numpy as np

from arena import Arena
from beam import BeamPath, get_beam_cells
from level_io import LevelDefinition
from moves import MoveResult, move_player, toggle_adjacent
from objects import Direction, ObjectKind
from outcome import IN_PROGRESS, Evaluation, LevelStatus, LossReason, evaluate
from visualize import print_arena, render_arena

logger = logging.getLogger(__name__)


class Command(Enum):
    """One discrete input per turn."""
    UP = 'up'
    RIGHT = 'right'
    DOWN = 'down'
    LEFT = 'left'
    TOGGLE = 'toggle'
    RESTART = 'restart'
    QUIT = 'quit'

    @property
    def direction(self) -> Optional[Direction]:
        """Movement direction, or None for non-movement commands."""
        return _COMMAND_DIRECTIONS.get(self)

    @classmethod
    def from_key(cls, key: str) -> 'Command':
        """
        Map a typed key or word to a command.

        Raises:
            ValueError: For keys with no command
        """
        lowered = key.strip().lower()
        if lowered in KEY_BINDINGS:
            return KEY_BINDINGS[lowered]
        if key == ' ':
            return cls.TOGGLE
        try:
            return cls(lowered)
        except ValueError:
            raise ValueError(f"Unknown command: {key!r}") from None


_COMMAND_DIRECTIONS = {
    Command.UP: Direction.UP,
    Command.RIGHT: Direction.RIGHT,
    Command.DOWN: Direction.DOWN,
    Command.LEFT: Direction.LEFT,
}

KEY_BINDINGS: Dict[str, Command] = {
    'w': Command.UP,
    'a': Command.LEFT,
    's': Command.DOWN,
    'd': Command.RIGHT,
    't': Command.TOGGLE,
    'space': Command.TOGGLE,
    'r': Command.RESTART,
    'q': Command.QUIT,
}

# Commands that are player actions (and RL actions, in this order)
PLAY_COMMANDS = (Command.UP, Command.RIGHT, Command.DOWN, Command.LEFT, Command.TOGGLE)

# Tensor channels: one-hot kind, then per-kind state, then beams
NUM_KIND_CHANNELS = len(ObjectKind)
ACTIVE_CHANNEL = NUM_KIND_CHANNELS
REVERSED_CHANNEL = ACTIVE_CHANNEL + 1
DIRECTION_CHANNEL = REVERSED_CHANNEL + 1
MIRROR_CHANNEL = DIRECTION_CHANNEL + len(Direction)
BEAM_CHANNEL = MIRROR_CHANNEL + 1
NUM_CHANNELS = BEAM_CHANNEL + 1


@dataclass
class TurnResult:
    """What one command did."""
    command: Command
    move: MoveResult = field(default_factory=MoveResult)
    status: LevelStatus = IN_PROGRESS

    @property
    def changed(self) -> bool:
        return self.move.changed


class LevelSession:
    """
    One play session of a level.

    Each player command runs a full turn: resolve the action, retrace
    every beam, apply lighting and classify the level. Once the level is
    won or lost, movement commands are ignored until ``restart``.

    Interactive usage:
        session = LevelSession(core_level(0), on_complete=tracker.complete_level_id)
        session.apply(Command.RIGHT)
        session.show()
        session.status.won

    RL usage:
        state = session.get_state_tensor()
        session.changes_state(Command.UP)
    """

    def __init__(self, level: LevelDefinition,
                 on_complete: Optional[Callable[[str], None]] = None):
        self.level = level
        self.on_complete = on_complete
        self.arena: Arena = level.build_arena()
        self.evaluation: Evaluation = Evaluation(status=IN_PROGRESS)
        self.turn = 0
        self.history: List[Command] = []
        self._run_cycle()

    # === Read-only views ===

    @property
    def status(self) -> LevelStatus:
        return self.evaluation.status

    @property
    def beams(self) -> List[BeamPath]:
        return self.evaluation.beams

    @property
    def level_id(self) -> str:
        return self.level.level_id

    # === Commands ===

    def apply(self, command: Command) -> TurnResult:
        """
        Run one turn for ``command``.

        Returns:
            TurnResult; ``changed`` is False for no-op moves and for moves
            attempted after the level ended
        """
        if command is Command.RESTART:
            self.restart()
            return TurnResult(command, MoveResult(changed=True), self.status)
        if command is Command.QUIT:
            return TurnResult(command, self.quit(), self.status)

        if self.status.is_terminal:
            return TurnResult(command, MoveResult(), self.status)

        if command is Command.TOGGLE:
            move = toggle_adjacent(self.arena)
        else:
            move = move_player(self.arena, command.direction)

        self.turn += 1
        self.history.append(command)
        if move.changed:
            self._run_cycle()
        logger.debug("Turn %d %s -> %s (%s)", self.turn, command.name,
                     self.status, 'changed' if move.changed else 'no-op')
        return TurnResult(command, move, self.status)

    def move(self, direction: Direction) -> TurnResult:
        return self.apply(Command[direction.name])

    def toggle(self) -> TurnResult:
        return self.apply(Command.TOGGLE)

    def quit(self) -> MoveResult:
        """Abandon the level. Has no effect once the level has ended."""
        if self.status.is_terminal:
            return MoveResult()
        self.evaluation = Evaluation(
            status=LevelStatus.lost(LossReason.QUIT),
            beams=self.evaluation.beams,
            statues_satisfied=self.evaluation.statues_satisfied,
            statues_total=self.evaluation.statues_total,
        )
        return MoveResult(changed=True)

    def restart(self) -> None:
        """Discard the current objects and rebuild the starting layout."""
        self.arena = self.level.build_arena()
        self.evaluation = Evaluation(status=IN_PROGRESS)
        self.turn = 0
        self.history = []
        self._run_cycle()
        logger.debug("Restarted level %s", self.level_id)

    def _run_cycle(self) -> None:
        was_won = self.status.won
        self.evaluation = evaluate(self.arena)
        if self.status.won and not was_won:
            logger.info("Level %s completed in %d turn(s)", self.level_id, self.turn)
            if self.on_complete is not None:
                self.on_complete(self.level_id)

    # === Lookahead ===

    def copy(self) -> 'LevelSession':
        """Independent copy of the current state, without the completion callback."""
        clone = LevelSession.__new__(LevelSession)
        clone.level = self.level
        clone.on_complete = None
        clone.arena = self.arena.copy()
        clone.turn = self.turn
        clone.history = list(self.history)
        # Re-evaluating would let lasers switched off this cycle stop firing early
        clone.evaluation = self.evaluation
        return clone

    def changes_state(self, command: Command) -> bool:
        """Whether ``command`` would change anything, without applying it."""
        if self.status.is_terminal:
            return False
        return self.copy().apply(command).changed

    def state_key(self) -> Hashable:
        """Hashable snapshot of every object's position and flags."""
        return tuple(
            (int(obj.kind), obj.row, obj.col,
             tuple(int(value) for value in obj.state().values()))
            for obj in self.arena
        )

    # === Display ===

    def render(self, show_coords: bool = False) -> str:
        """Get the arena, beams and status as a string."""
        return render_arena(self.arena, self.beams, self.evaluation, show_coords)

    def show(self, show_coords: bool = False) -> None:
        """Print the arena to console."""
        print_arena(self.arena, self.beams, self.evaluation, show_coords)

    # === RL Interface ===

    def get_state_tensor(self, pad_to: Optional[Tuple[int, int]] = None) -> np.ndarray:
        """
        Get current state as tensor for RL.

        Args:
            pad_to: Optional (rows, cols) to pad to; padding reads as wall

        Returns:
            numpy array of shape (NUM_CHANNELS, rows, cols)

        Channels:
            0-10: One-hot ObjectKind (EMPTY, PLAYER, WALL, ...)
            11: Active flag (laser enabled, switch on, button pressed,
                toggle block passable, statue/zapper lit)
            12: Reversed statue
            13-16: Laser direction one-hot (Up, Right, Down, Left)
            17: Mirror is BACKWARD ('\\')
            18: Beam passes through the cell
        """
        rows, cols = pad_to if pad_to is not None else (self.arena.rows, self.arena.cols)
        if rows < self.arena.rows or cols < self.arena.cols:
            raise ValueError(
                f"Cannot pad {self.arena.rows}x{self.arena.cols} arena into {rows}x{cols}"
            )

        state = np.zeros((NUM_CHANNELS, rows, cols), dtype=np.float32)
        state[int(ObjectKind.WALL)] = 1.0
        state[int(ObjectKind.WALL), :self.arena.rows, :self.arena.cols] = 0.0
        state[int(ObjectKind.EMPTY), :self.arena.rows, :self.arena.cols] = 1.0

        for obj in self.arena:
            row, col = obj.position
            state[int(ObjectKind.EMPTY), row, col] = 0.0
            state[int(obj.kind), row, col] = 1.0

            kind = obj.kind
            if kind == ObjectKind.LASER:
                state[ACTIVE_CHANNEL, row, col] = float(obj.enabled)
                state[DIRECTION_CHANNEL + int(obj.direction), row, col] = 1.0
            elif kind == ObjectKind.MIRROR:
                state[MIRROR_CHANNEL, row, col] = float(obj.orientation)
            elif kind == ObjectKind.SWITCH:
                state[ACTIVE_CHANNEL, row, col] = float(obj.on)
            elif kind == ObjectKind.BUTTON:
                state[ACTIVE_CHANNEL, row, col] = float(obj.pressed)
            elif kind == ObjectKind.TOGGLE_BLOCK:
                state[ACTIVE_CHANNEL, row, col] = float(obj.passable)
            elif kind == ObjectKind.STATUE:
                state[ACTIVE_CHANNEL, row, col] = float(obj.lit)
                state[REVERSED_CHANNEL, row, col] = float(obj.reversed)
            elif kind == ObjectKind.ZAPPER:
                state[ACTIVE_CHANNEL, row, col] = float(obj.lit)

        for row, col in get_beam_cells(self.beams):
            state[BEAM_CHANNEL, row, col] = 1.0

        return state
