"""RL module for Statue Lasers."""

from .env import MaskedStatueLasersEnv, StatueLasersEnv
from .vec_env import make_vec_env
from .train import train_maskable_ppo, train_ppo

__all__ = [
    'StatueLasersEnv',
    'MaskedStatueLasersEnv',
    'make_vec_env',
    'train_ppo',
    'train_maskable_ppo',
]
