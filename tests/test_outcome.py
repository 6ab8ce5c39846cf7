"""Unit tests for outcome.py - lighting, laser disabling and status."""

import pytest

from beam import fire_lasers
from objects import ObjectKind
from outcome import (
    IN_PROGRESS, WON, LevelStatus, LossReason, Phase, disable_struck_lasers, evaluate,
)


class TestLevelStatus:
    """Tests for LevelStatus."""

    def test_in_progress(self):
        """Test the default status."""
        assert not IN_PROGRESS.is_terminal
        assert not IN_PROGRESS.won
        assert IN_PROGRESS.lost_reason is None

    def test_won(self):
        """Test the won status."""
        assert WON.is_terminal and WON.won
        assert str(WON) == "YAY, You Won!"

    def test_lost(self):
        """Test lost statuses carry a reason."""
        status = LevelStatus.lost(LossReason.ZAPPER)
        assert status.phase is Phase.LOST
        assert status.is_terminal and not status.won
        assert status.lost_reason is LossReason.ZAPPER
        assert "zapper" in str(status)

    def test_equality(self):
        """Test statuses compare by value."""
        assert LevelStatus.lost(LossReason.DEATH) == LevelStatus.lost(LossReason.DEATH)
        assert LevelStatus.lost(LossReason.DEATH) != LevelStatus.lost(LossReason.ZAPPER)


# One normal statue lit by the top laser, one reversed statue lit by the
# bottom laser. Lasers 5-8 are the disabled variants.
STATUE_GRID = {
    (True, False): ('IIIIIII', 'I4  S I', 'I  X  I', 'I8  R I', 'IIIIIII'),
    (True, True): ('IIIIIII', 'I4  S I', 'I  X  I', 'I4  R I', 'IIIIIII'),
    (False, False): ('IIIIIII', 'I8  S I', 'I  X  I', 'I8  R I', 'IIIIIII'),
    (False, True): ('IIIIIII', 'I8  S I', 'I  X  I', 'I4  R I', 'IIIIIII'),
}


class TestWinDetection:
    """Tests for the four statue combinations."""

    @pytest.mark.parametrize("normal_lit,reversed_lit,expected", [
        (True, False, WON),
        (True, True, IN_PROGRESS),
        (False, False, IN_PROGRESS),
        (False, True, IN_PROGRESS),
    ])
    def test_combinations(self, make_arena, normal_lit, reversed_lit, expected):
        """Test Won only when the normal statue is lit and the reversed one is dark."""
        arena = make_arena(*STATUE_GRID[(normal_lit, reversed_lit)])
        evaluation = evaluate(arena)
        normal, reverse = arena.objects_of(ObjectKind.STATUE)
        assert normal.lit is normal_lit
        assert reverse.lit is reversed_lit
        assert evaluation.status == expected
        assert evaluation.statues_total == 2

    def test_zapper_beats_win(self, make_arena):
        """Test a lit zapper loses even with every statue satisfied."""
        arena = make_arena(
            'IIIIIII',
            'I4  S I',
            'I  X  I',
            'I4  Z I',
            'IIIIIII',
        )
        assert evaluate(arena).status == LevelStatus.lost(LossReason.ZAPPER)

    def test_no_statues_is_won(self, make_arena):
        """Test a level without statues is won as soon as it is evaluated."""
        arena = make_arena(
            'IIIII',
            'I X I',
            'IIIII',
        )
        assert evaluate(arena).status == WON

    def test_lighting_is_reset(self, make_arena):
        """Test lighting follows the current beams only."""
        arena = make_arena(
            'IIIIIII',
            'I4  S I',
            'I  X  I',
            'IIIIIII',
        )
        statue = arena.objects_of(ObjectKind.STATUE)[0]
        evaluate(arena)
        assert statue.lit
        arena.objects_of(ObjectKind.LASER)[0].enabled = False
        evaluation = evaluate(arena)
        assert not statue.lit
        assert evaluation.status == IN_PROGRESS
        assert evaluation.statues_remaining == 1


class TestDeath:
    """Tests for lethal beams."""

    def test_death_beats_win(self, make_arena):
        """Test a beam on the player loses even when the statue is lit."""
        arena = make_arena(
            'IIIIIII',
            'I4  S I',
            'I     I',
            'I4 X  I',
            'IIIIIII',
        )
        evaluation = evaluate(arena)
        assert arena.objects_of(ObjectKind.STATUE)[0].lit
        assert evaluation.status == LevelStatus.lost(LossReason.DEATH)

    def test_death_beats_zapper(self, make_arena):
        """Test death takes precedence over a lit zapper."""
        arena = make_arena(
            'IIIIIII',
            'I4  Z I',
            'I     I',
            'I4 X  I',
            'IIIIIII',
        )
        assert evaluate(arena).status.lost_reason is LossReason.DEATH

    def test_backward_mirror_scenario(self, make_arena):
        """Test the 5x5 scenario ends in death."""
        arena = make_arena(
            'IIIIIII',
            'I     I',
            'I X\\  I',
            'I     I',
            'I  1  I',
            'I     I',
            'IIIIIII',
        )
        assert evaluate(arena).status == LevelStatus.lost(LossReason.DEATH)


class TestLaserDisablesLaser:
    """Tests for lasers switched off by beams."""

    def test_struck_laser_disabled(self, make_arena):
        """Test a laser hit by a beam is switched off and stays off."""
        arena = make_arena(
            'IIIIIII',
            'I4  1 I',
            'I X  SI',
            'IIIIIII',
        )
        shooter = arena.object_at((1, 1))
        struck = arena.object_at((1, 4))
        evaluation = evaluate(arena)
        assert struck.enabled is False
        assert evaluation.disabled_lasers == [struck]

        shooter.enabled = False
        evaluate(arena)
        assert struck.enabled is False

    def test_struck_laser_fires_this_cycle(self, make_arena):
        """Test a laser struck this cycle still lights its target, then goes dark."""
        arena = make_arena(
            'IIIIIII',
            'I4 2  I',
            'I  S XI',
            'IIIIIII',
        )
        first, second = arena.objects_of(ObjectKind.LASER)
        statue = arena.objects_of(ObjectKind.STATUE)[0]
        evaluation = evaluate(arena)
        assert evaluation.disabled_lasers == [second]
        assert statue.lit
        assert evaluation.status == WON

        evaluation = evaluate(arena)
        assert first.enabled
        assert not statue.lit
        assert evaluation.status == IN_PROGRESS

    def test_mutual_strike(self, make_arena):
        """Test lasers facing each other are both switched off."""
        arena = make_arena(
            'IIIIIII',
            'I4  3 I',
            'I X   I',
            'IIIIIII',
        )
        disabled = disable_struck_lasers(fire_lasers(arena))
        assert len(disabled) == 2
        assert not any(laser.enabled for laser in arena.objects_of(ObjectKind.LASER))

    def test_chain_struck_together(self, make_arena):
        """Test a struck laser's beam still switches off the laser it hits."""
        arena = make_arena(
            'IIIIIII',
            'I4 2  I',
            'I  4 SI',
            'I X   I',
            'IIIIIII',
        )
        first, second, third = arena.objects_of(ObjectKind.LASER)
        statue = arena.objects_of(ObjectKind.STATUE)[0]
        evaluation = evaluate(arena)
        assert first.enabled
        assert not second.enabled
        assert not third.enabled
        assert evaluation.disabled_lasers == [second, third]
        assert statue.lit

        evaluate(arena)
        assert not statue.lit

    def test_own_beam_leaves_laser_on(self, make_arena):
        """Test a beam mirrored back into its own laser does not switch it off."""
        arena = make_arena(
            'IIIIII',
            'I/  \\I',
            'I  X I',
            'I\\ 3/I',
            'IIIIII',
        )
        laser = arena.objects_of(ObjectKind.LASER)[0]
        evaluation = evaluate(arena)
        assert laser.enabled
        assert evaluation.disabled_lasers == []

    def test_struck_after_blocker_moves(self, make_arena):
        """Test a laser struck only once a blocker is gone is switched off next cycle."""
        arena = make_arena(
            'IIIIIII',
            'I4 B 1I',
            'I X   I',
            'IIIIIII',
        )
        target = arena.object_at((1, 5))
        evaluate(arena)
        assert target.enabled
        block = arena.objects_of(ObjectKind.BLOCK)[0]
        arena.move(block, (2, 4))
        evaluate(arena)
        assert not target.enabled
