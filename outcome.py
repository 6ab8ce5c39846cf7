"""
Win/loss evaluation for Statue Lasers.

After every turn the beams are traced again from scratch, their effects
are applied to statues, zappers and lasers, and the level status is
classified with the precedence Death > Zapper > Won > InProgress.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from arena import Arena
from beam import BeamPath, fire_lasers
from objects import GameObject, ObjectKind

logger = logging.getLogger(__name__)


class Phase(Enum):
    IN_PROGRESS = 'in_progress'
    WON = 'won'
    LOST = 'lost'


class LossReason(Enum):
    """Why a level was lost."""
    DEATH = 'death'
    ZAPPER = 'zapper'
    QUIT = 'quit'


LOSS_MESSAGES = {
    LossReason.DEATH: "Uh oh, you got shot by a laser beam!",
    LossReason.ZAPPER: "Uh oh, you lit a zapper!",
    LossReason.QUIT: "Level abandoned.",
}


@dataclass(frozen=True)
class LevelStatus:
    """Current phase of a level, with the loss reason when lost."""
    phase: Phase = Phase.IN_PROGRESS
    reason: Optional[LossReason] = None

    @classmethod
    def lost(cls, reason: LossReason) -> 'LevelStatus':
        return cls(Phase.LOST, reason)

    @property
    def is_terminal(self) -> bool:
        return self.phase is not Phase.IN_PROGRESS

    @property
    def won(self) -> bool:
        return self.phase is Phase.WON

    @property
    def lost_reason(self) -> Optional[LossReason]:
        return self.reason if self.phase is Phase.LOST else None

    def __str__(self) -> str:
        if self.phase is Phase.WON:
            return "YAY, You Won!"
        if self.phase is Phase.LOST:
            return LOSS_MESSAGES[self.reason]
        return "In progress"


IN_PROGRESS = LevelStatus()
WON = LevelStatus(Phase.WON)


@dataclass
class Evaluation:
    """
    Result of one recomputation cycle.

    Attributes:
        status: Classified level status
        beams: Beam of every laser enabled when the cycle started
        disabled_lasers: Lasers switched off by beams during this cycle
        statues_satisfied: Statues in their winning lit state
        statues_total: Statues in the level
    """
    status: LevelStatus
    beams: List[BeamPath] = field(default_factory=list)
    disabled_lasers: List[GameObject] = field(default_factory=list)
    statues_satisfied: int = 0
    statues_total: int = 0

    @property
    def statues_remaining(self) -> int:
        return self.statues_total - self.statues_satisfied

    @property
    def lit_objects(self) -> List[GameObject]:
        return [
            beam.target for beam in self.beams
            if beam.target_kind in (ObjectKind.STATUE, ObjectKind.ZAPPER)
        ]

    def __str__(self) -> str:
        if self.status.is_terminal:
            return str(self.status)
        return f"Statues: {self.statues_satisfied}/{self.statues_total}"


def disable_struck_lasers(beams: List[BeamPath]) -> List[GameObject]:
    """
    Switch off every enabled laser struck by one of ``beams``.

    ``beams`` are traced before anything is switched off, so a laser
    struck this cycle has still fired: its own beam lights, kills and
    disables as usual, and it goes dark from the next cycle. A beam that
    mirrors back into its own laser leaves it on.
    """
    disabled: List[GameObject] = []
    for beam in beams:
        target = beam.target
        if target is None or target is beam.laser or target.kind != ObjectKind.LASER:
            continue
        if target.enabled:
            target.enabled = False
            disabled.append(target)
            logger.debug("%r switched off by a beam", target)
    return disabled


def apply_lighting(arena: Arena, beams: List[BeamPath]) -> None:
    """Reset statue and zapper lighting, then light every struck one."""
    for obj in arena.objects_of(ObjectKind.STATUE) + arena.objects_of(ObjectKind.ZAPPER):
        obj.lit = False
    for beam in beams:
        if beam.target_kind in (ObjectKind.STATUE, ObjectKind.ZAPPER):
            beam.target.lit = True


def classify(arena: Arena, beams: List[BeamPath]) -> LevelStatus:
    """Classify the level from already-applied lighting and the current beams."""
    if any(beam.is_lethal for beam in beams):
        return LevelStatus.lost(LossReason.DEATH)
    if any(zapper.lit for zapper in arena.objects_of(ObjectKind.ZAPPER)):
        return LevelStatus.lost(LossReason.ZAPPER)
    if all(statue.satisfied for statue in arena.objects_of(ObjectKind.STATUE)):
        return WON
    return IN_PROGRESS


def evaluate(arena: Arena) -> Evaluation:
    """
    Run one full recomputation cycle on ``arena``.

    Steps:
        1. Trace every enabled laser
        2. Switch off lasers those beams strike (sticky)
        3. Reset and reapply statue/zapper lighting from the same beams
        4. Classify the status

    Returns:
        Evaluation with the status and the beams used to reach it
    """
    beams = fire_lasers(arena)
    disabled = disable_struck_lasers(beams)
    apply_lighting(arena, beams)
    status = classify(arena, beams)

    statues = arena.objects_of(ObjectKind.STATUE)
    return Evaluation(
        status=status,
        beams=beams,
        disabled_lasers=disabled,
        statues_satisfied=sum(1 for statue in statues if statue.satisfied),
        statues_total=len(statues),
    )
