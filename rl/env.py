"""
Gymnasium environment wrapper for Statue Lasers.

Provides a standard Gym interface for RL training with:
- State encoding as padded multi-channel grids
- Dense reward shaping for faster learning
- Action masking for actions that change the level
- Support for curriculum learning over the core levels
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import gymnasium as gym
import numpy as np
from gymnasium import spaces

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from core_levels import NUM_CORE_LEVELS, core_level
from game import NUM_CHANNELS, PLAY_COMMANDS, LevelSession
from level_io import LevelDefinition, load_level
from outcome import LossReason

logger = logging.getLogger(__name__)

# Observations are padded to this grid; larger levels are rejected
DEFAULT_GRID_SHAPE = (10, 10)

STEP_PENALTY = -0.01
NO_OP_PENALTY = -0.05
STATUE_REWARD = 0.2
WIN_REWARD = 1.0
LOSS_PENALTY = -1.0
TIMEOUT_PENALTY = -0.3


class StatueLasersEnv(gym.Env):
    """
    Gymnasium environment for Statue Lasers.

    Observation Space:
        Box((19, rows, cols), float32) - Multi-channel grid representation
        (see ``LevelSession.get_state_tensor``), padded with walls

    Action Space:
        Discrete(5)
        - 0-3: Move up, right, down, left
        - 4: Toggle adjacent lasers, mirrors and switches

    Rewards:
        - Step penalty: -0.01 (encourages efficiency)
        - Action that changes nothing: -0.05
        - Statue satisfied (incremental): +0.2 each, -0.2 when undone
        - Level won: +1.0
        - Shot or zapper lit: -1.0
        - Timeout: -0.3
    """

    metadata = {"render_modes": ["ansi", "human"], "render_fps": 4}

    def __init__(
        self,
        level: Optional[LevelDefinition] = None,
        level_path: Optional[str] = None,
        level_index: Optional[int] = None,
        max_level: int = 1,
        max_steps: int = 100,
        dense_rewards: bool = True,
        grid_shape: Tuple[int, int] = DEFAULT_GRID_SHAPE,
        render_mode: Optional[str] = None,
    ):
        """
        Initialize the environment.

        Args:
            level: Fixed level to play
            level_path: Path to a level file (used when ``level`` is None)
            level_index: Fixed core level index
            max_level: With no fixed level, sample core levels below this count
            max_steps: Maximum steps per episode
            dense_rewards: If True, use shaped rewards; if False, only terminal reward
            grid_shape: (rows, cols) observations are padded to
            render_mode: "ansi" for text, "human" for console output
        """
        super().__init__()

        if level is None and level_path is not None:
            level = load_level(level_path)
        self.fixed_level = level
        self.level_index = level_index
        self.max_level = max(1, min(max_level, NUM_CORE_LEVELS))
        self.max_steps = max_steps
        self.dense_rewards = dense_rewards
        self.grid_shape = tuple(grid_shape)
        self.render_mode = render_mode

        self.observation_space = spaces.Box(
            low=0.0,
            high=1.0,
            shape=(NUM_CHANNELS,) + self.grid_shape,
            dtype=np.float32,
        )
        self.action_space = spaces.Discrete(len(PLAY_COMMANDS))

        self.session: Optional[LevelSession] = None
        self._step_count = 0
        self._prev_satisfied = 0
        self._episode_reward = 0.0

    def _choose_level(self, options: Optional[Dict[str, Any]]) -> LevelDefinition:
        if options and "level" in options:
            return options["level"]
        if options and "level_index" in options:
            return core_level(options["level_index"])
        if self.fixed_level is not None:
            return self.fixed_level
        if self.level_index is not None:
            return core_level(self.level_index)
        return core_level(int(self.np_random.integers(self.max_level)))

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None,
    ) -> Tuple[np.ndarray, Dict[str, Any]]:
        """
        Reset environment to the start of a level.

        Args:
            seed: Random seed
            options: Additional options ({"level": LevelDefinition} or
                {"level_index": int} to override)

        Returns:
            Tuple of (observation, info)
        """
        super().reset(seed=seed)

        level = self._choose_level(options)
        if level.rows > self.grid_shape[0] or level.cols > self.grid_shape[1]:
            raise ValueError(
                f"Level {level.level_id} is {level.rows}x{level.cols}, "
                f"larger than the {self.grid_shape[0]}x{self.grid_shape[1]} observation grid"
            )
        self.session = LevelSession(level)

        self._step_count = 0
        self._prev_satisfied = self.session.evaluation.statues_satisfied
        self._episode_reward = 0.0

        return self._get_obs(), self._get_info()

    def step(self, action: int) -> Tuple[np.ndarray, float, bool, bool, Dict[str, Any]]:
        """
        Execute action and return results.

        Args:
            action: Integer action ID

        Returns:
            Tuple of (observation, reward, terminated, truncated, info)
        """
        self._step_count += 1
        result = self.session.apply(PLAY_COMMANDS[int(action)])
        status = result.status

        reward = 0.0
        if self.dense_rewards:
            reward = STEP_PENALTY if result.changed else NO_OP_PENALTY
            satisfied = self.session.evaluation.statues_satisfied
            reward += STATUE_REWARD * (satisfied - self._prev_satisfied)
            self._prev_satisfied = satisfied

        terminated = status.is_terminal
        truncated = False
        if status.won:
            reward = WIN_REWARD  # Override with terminal reward
        elif status.lost_reason is not None:
            reward = LOSS_PENALTY
        elif self._step_count >= self.max_steps:
            truncated = True
            if self.dense_rewards:
                reward += TIMEOUT_PENALTY

        self._episode_reward += reward

        obs = self._get_obs()
        info = self._get_info()
        info['episode_reward'] = self._episode_reward

        if self.render_mode == "human":
            self.render()

        return obs, reward, terminated, truncated, info

    def _get_obs(self) -> np.ndarray:
        """Get current observation."""
        return self.session.get_state_tensor(pad_to=self.grid_shape)

    def _get_info(self) -> Dict[str, Any]:
        """Get info dictionary."""
        evaluation = self.session.evaluation
        reason = evaluation.status.lost_reason
        return {
            'level_id': self.session.level_id,
            'step_count': self._step_count,
            'statues_satisfied': evaluation.statues_satisfied,
            'statues_total': evaluation.statues_total,
            'solved': evaluation.status.won,
            'loss_reason': reason.value if isinstance(reason, LossReason) else None,
        }

    def get_action_mask(self) -> np.ndarray:
        """
        Get mask of useful actions (1 = changes the level, 0 = no-op).

        If nothing would change the level every action is allowed, so the
        mask is never all zeros.

        Returns:
            int8 array of shape (action_space.n,)
        """
        mask = np.array(
            [self.session.changes_state(command) for command in PLAY_COMMANDS],
            dtype=np.int8,
        )
        if not mask.any():
            mask[:] = 1
        return mask

    def render(self) -> Optional[str]:
        """Render the environment."""
        if self.render_mode == "ansi":
            return self.session.render()
        elif self.render_mode == "human":
            self.session.show()
        return None


class MaskedStatueLasersEnv(StatueLasersEnv):
    """
    StatueLasers environment with action masking support for SB3.

    Uses the gymnasium action mask wrapper pattern.
    """

    def action_masks(self) -> np.ndarray:
        """Return action mask for SB3's MaskablePPO."""
        return self.get_action_mask().astype(bool)
