"""Unit tests for solver.py."""

import pytest

from core_levels import NUM_CORE_LEVELS, core_level
from game import Command, LevelSession
from level_io import save_level
from solver import format_solution, solve_level, solve_level_file


class TestSolveLevel:
    """Tests for solve_level."""

    def test_one_move(self):
        """Test the first level is solved in one push."""
        result = solve_level(core_level(0))
        assert result.solved
        assert result.solution == [Command.RIGHT]
        assert result.num_moves == 1
        assert format_solution(result) == 'right'

    @pytest.mark.parametrize("index", range(NUM_CORE_LEVELS))
    def test_core_levels_solvable(self, index):
        """Test every core level has a solution and replaying it wins."""
        level = core_level(index)
        result = solve_level(level)
        assert result.solved

        session = LevelSession(level)
        for command in result.solution:
            session.apply(command)
        assert session.status.won

    def test_shortest(self):
        """Test BFS does not return a longer route than necessary."""
        result = solve_level(core_level(3))
        assert result.solved
        assert result.num_moves <= 5

    def test_unsolvable(self, make_level):
        """Test a level with no way to light its statue."""
        level = make_level(
            'IIIIII',
            'IX  SI',
            'IIIIII',
        )
        result = solve_level(level)
        assert not result.solved
        assert result.exhausted
        assert result.nodes_visited > 0
        assert format_solution(result) is None

    def test_node_budget(self):
        """Test the search stops when the budget runs out."""
        result = solve_level(core_level(3), max_nodes=1)
        assert not result.solved
        assert not result.exhausted

    def test_already_won(self, make_level):
        """Test a level won at load needs no moves."""
        result = solve_level(make_level('IIIII', 'I X I', 'IIIII'))
        assert result.solved
        assert result.solution == []

    def test_solve_file(self, tmp_path):
        """Test solving a level saved to disk."""
        path = tmp_path / 'first.txt'
        save_level(core_level(0), path)
        assert solve_level_file(str(path)).solved
