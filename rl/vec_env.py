"""
Vectorized Statue Lasers environments and the core-level curriculum.
"""

import logging
from collections import deque
from pathlib import Path
from typing import Callable, Optional

import gymnasium as gym
from stable_baselines3.common.monitor import Monitor
from stable_baselines3.common.vec_env import DummyVecEnv, SubprocVecEnv, VecEnv

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from core_levels import NUM_CORE_LEVELS
from rl.env import MaskedStatueLasersEnv, StatueLasersEnv

logger = logging.getLogger(__name__)

# Fewer recorded episodes than this never count as a success rate
MIN_EPISODES_FOR_RATE = 10


def make_env(
    rank: int = 0,
    seed: int = 0,
    use_action_mask: bool = False,
    log_dir: Optional[str] = None,
    **env_kwargs,
) -> Callable[[], gym.Env]:
    """
    Build a factory for one environment, as SB3 vector envs expect.

    Args:
        rank: Index of this env; seeds it with ``seed + rank``
        seed: Base random seed
        use_action_mask: Build a MaskedStatueLasersEnv
        log_dir: If set, wrap in a Monitor writing ``env_<rank>.monitor.csv``
        **env_kwargs: Passed to the environment (level_path, level_index,
            max_level, max_steps, dense_rewards, grid_shape)
    """
    env_class = MaskedStatueLasersEnv if use_action_mask else StatueLasersEnv

    def _init() -> gym.Env:
        env = env_class(**env_kwargs)
        env.reset(seed=seed + rank)
        if log_dir:
            env = Monitor(env, filename=f"{log_dir}/env_{rank}", info_keywords=('solved',))
        return env

    return _init


def make_vec_env(
    n_envs: int = 4,
    seed: int = 0,
    use_action_mask: bool = False,
    log_dir: Optional[str] = None,
    use_subprocess: bool = False,
    **env_kwargs,
) -> VecEnv:
    """
    Create ``n_envs`` environments stepped together.

    Level logic is cheap, so the in-process DummyVecEnv is the default;
    SubprocVecEnv only pays off for large ``n_envs``.
    """
    env_fns = [
        make_env(rank=rank, seed=seed, use_action_mask=use_action_mask,
                 log_dir=log_dir, **env_kwargs)
        for rank in range(n_envs)
    ]
    vec_class = SubprocVecEnv if use_subprocess else DummyVecEnv
    return vec_class(env_fns)


def unwrap_env(env) -> StatueLasersEnv:
    """Strip Monitor and other wrappers."""
    while hasattr(env, 'env'):
        env = env.env
    return env


class CurriculumVecEnv:
    """
    Vectorized envs whose core-level pool grows with the agent's success.

    Training starts on the first ``initial_levels`` core levels. Once at
    least ``min_episodes_per_level`` episodes have run on the current pool
    and the solved fraction of the last ``window_size`` of them reaches
    ``success_threshold``, the next core level joins the pool.

    The pool is widened in place by raising ``max_level`` on every
    underlying env, so a model holding ``get_env()`` keeps a valid
    reference. Only works with DummyVecEnv.
    """

    def __init__(
        self,
        n_envs: int = 4,
        initial_levels: int = 1,
        max_levels: int = NUM_CORE_LEVELS,
        success_threshold: float = 0.7,
        window_size: int = 100,
        min_episodes_per_level: int = 200,
        max_steps: int = 100,
        seed: int = 0,
        log_dir: Optional[str] = None,
        use_action_mask: bool = False,
    ):
        self.max_levels = min(max_levels, NUM_CORE_LEVELS)
        self.current_levels = max(1, min(initial_levels, self.max_levels))
        self.success_threshold = success_threshold
        self.window_size = window_size
        self.min_episodes_per_level = min_episodes_per_level

        self._outcomes = deque(maxlen=window_size)
        self._episodes_on_pool = 0
        self.total_episodes = 0

        self.vec_env = make_vec_env(
            n_envs=n_envs,
            seed=seed,
            use_action_mask=use_action_mask,
            log_dir=log_dir,
            max_level=self.current_levels,
            max_steps=max_steps,
        )

    @property
    def success_rate(self) -> float:
        """Solved fraction of the recent window, 0.0 until enough episodes ran."""
        if len(self._outcomes) < MIN_EPISODES_FOR_RATE:
            return 0.0
        return sum(self._outcomes) / len(self._outcomes)

    @property
    def difficulty_level(self) -> int:
        """Number of core levels currently sampled."""
        return self.current_levels

    def get_env(self) -> VecEnv:
        return self.vec_env

    def _ready_to_advance(self) -> bool:
        return (
            self.current_levels < self.max_levels
            and self._episodes_on_pool >= self.min_episodes_per_level
            and len(self._outcomes) == self.window_size
            and self.success_rate >= self.success_threshold
        )

    def record_episode(self, success: bool):
        """Record one finished episode; may unlock the next core level."""
        self._outcomes.append(bool(success))
        self._episodes_on_pool += 1
        self.total_episodes += 1

        if not self._ready_to_advance():
            return

        self.current_levels += 1
        self._outcomes.clear()
        self._episodes_on_pool = 0
        for env in self.vec_env.envs:
            unwrap_env(env).max_level = self.current_levels
        logger.info("Curriculum: %d core levels unlocked after %d episodes",
                    self.current_levels, self.total_episodes)
