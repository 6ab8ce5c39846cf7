"""
Custom neural network architectures for Statue Lasers RL.

Feature extractors for the padded multi-channel level grid produced by
``LevelSession.get_state_tensor``: NUM_CHANNELS (19) planes of
rows x cols, padding cells encoded as walls.
"""

from pathlib import Path
from typing import Dict, Sequence, Tuple, Type

import torch
import torch.nn as nn
from gymnasium import spaces
from stable_baselines3.common.torch_layers import BaseFeaturesExtractor

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from game import NUM_CHANNELS


def grid_shape(observation_space: spaces.Box) -> Tuple[int, int]:
    """
    Get (rows, cols) of a level observation space.

    Raises:
        ValueError: If the space is not a NUM_CHANNELS x rows x cols grid
    """
    shape = observation_space.shape
    if len(shape) != 3 or shape[0] != NUM_CHANNELS:
        raise ValueError(
            f"Expected a ({NUM_CHANNELS}, rows, cols) observation, got {shape}"
        )
    return shape[1], shape[2]


class StatueLasersCNN(BaseFeaturesExtractor):
    """
    CNN feature extractor for Statue Lasers.

    Convolutions keep full grid resolution and the output is flattened
    rather than pooled, so cell positions survive into the features.
    """

    def __init__(
        self,
        observation_space: spaces.Box,
        features_dim: int = 256,
    ):
        super().__init__(observation_space, features_dim)

        rows, cols = grid_shape(observation_space)

        self.cnn = nn.Sequential(
            nn.Conv2d(NUM_CHANNELS, 32, kernel_size=3, padding=1),
            nn.ReLU(),
            nn.Conv2d(32, 64, kernel_size=3, padding=1),
            nn.ReLU(),
            nn.Conv2d(64, 64, kernel_size=3, padding=1),
            nn.ReLU(),
            nn.Flatten(),
        )

        self.linear = nn.Sequential(
            nn.Linear(64 * rows * cols, features_dim),
            nn.ReLU(),
        )

    def forward(self, observations: torch.Tensor) -> torch.Tensor:
        return self.linear(self.cnn(observations))


class StatueLasersMLP(BaseFeaturesExtractor):
    """
    Cell-wise MLP feature extractor for Statue Lasers.

    Each cell's 19 channel values (one-hot kind, state flags, laser
    direction, beam) are first squeezed into ``cell_dim`` features by a
    layer shared across cells. The per-cell codes are then concatenated,
    giving ``rows * cols * cell_dim`` inputs (1600 for the default 10x10
    padding) to the fully connected layers, instead of the 1900 raw and
    mostly zero values.
    """

    def __init__(
        self,
        observation_space: spaces.Box,
        features_dim: int = 128,
        cell_dim: int = 16,
        hidden_dims: Sequence[int] = (256, 256),
    ):
        super().__init__(observation_space, features_dim)

        rows, cols = grid_shape(observation_space)
        self.cell_encoder = nn.Sequential(
            nn.Linear(NUM_CHANNELS, cell_dim),
            nn.ReLU(),
        )

        layers = []
        prev_dim = rows * cols * cell_dim
        for hidden_dim in hidden_dims:
            layers.extend([
                nn.Linear(prev_dim, hidden_dim),
                nn.ReLU(),
            ])
            prev_dim = hidden_dim

        layers.append(nn.Linear(prev_dim, features_dim))
        layers.append(nn.ReLU())

        self.mlp = nn.Sequential(*layers)

    def forward(self, observations: torch.Tensor) -> torch.Tensor:
        # (B, C, H, W) -> (B, H*W, C)
        cells = observations.flatten(start_dim=2).transpose(1, 2)
        return self.mlp(self.cell_encoder(cells).flatten(start_dim=1))


FEATURE_EXTRACTORS: Dict[str, Type[BaseFeaturesExtractor]] = {
    'cnn': StatueLasersCNN,
    'mlp': StatueLasersMLP,
}


def get_feature_extractor(name: str) -> Type[BaseFeaturesExtractor]:
    """
    Get feature extractor class by name.

    Raises:
        ValueError: For names not in FEATURE_EXTRACTORS
    """
    try:
        return FEATURE_EXTRACTORS[name]
    except KeyError:
        raise ValueError(
            f"Unknown feature extractor {name!r}, expected one of {sorted(FEATURE_EXTRACTORS)}"
        ) from None
