"""
Training script for Statue Lasers RL agent.

Two algorithms share one pipeline:
1. ppo - standard PPO over all five actions; no-ops are penalised
2. maskable_ppo - MaskablePPO, which only samples actions that change the level

Runs get a timestamped directory under ``log_dir`` holding Monitor csvs,
TensorBoard events, checkpoints, the best evaluated model and the final model.

Usage:
    python -m rl.train --algorithm maskable_ppo --timesteps 500000
    python -m rl.train --algorithm ppo --no-curriculum --max-levels 1
"""

import argparse
import logging
from dataclasses import asdict, dataclass, field, fields
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from sb3_contrib import MaskablePPO
from sb3_contrib.common.maskable.callbacks import MaskableEvalCallback
from stable_baselines3 import PPO
from stable_baselines3.common.callbacks import (
    BaseCallback,
    CallbackList,
    CheckpointCallback,
    EvalCallback,
)
from stable_baselines3.common.logger import configure
from stable_baselines3.common.vec_env import VecEnv

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from core_levels import NUM_CORE_LEVELS
from rl.networks import FEATURE_EXTRACTORS, get_feature_extractor
from rl.vec_env import CurriculumVecEnv, make_vec_env

logger = logging.getLogger(__name__)

# name -> (model class, whether envs expose action_masks)
ALGORITHMS = {
    "ppo": (PPO, False),
    "maskable_ppo": (MaskablePPO, True),
}

EVAL_ENVS = 4
EVAL_EPISODES = 20
EVAL_SEED = 10_000


@dataclass
class PPOHyperparameters:
    """Keyword arguments passed straight to the PPO / MaskablePPO constructor."""
    learning_rate: float = 3e-4
    n_steps: int = 2048
    batch_size: int = 64
    n_epochs: int = 10
    gamma: float = 0.99
    gae_lambda: float = 0.95
    clip_range: float = 0.2
    ent_coef: float = 0.01
    vf_coef: float = 0.5


@dataclass
class TrainingConfig:
    """Everything one training run needs besides the algorithm."""
    n_envs: int = 8
    max_steps: int = 100
    total_timesteps: int = 1_000_000
    hyperparameters: PPOHyperparameters = field(default_factory=PPOHyperparameters)

    # Network
    feature_extractor: str = "cnn"
    features_dim: int = 256
    net_arch: Optional[Dict[str, Any]] = None

    # Curriculum
    use_curriculum: bool = True
    initial_levels: int = 1
    max_levels: int = NUM_CORE_LEVELS
    success_threshold: float = 0.7

    # Output
    log_dir: str = "logs"
    save_freq: int = 10000
    eval_freq: int = 5000
    verbose: int = 1
    resume_from: Optional[str] = None
    device: str = "auto"

    def policy_kwargs(self) -> Dict[str, Any]:
        kwargs = {
            "features_extractor_class": get_feature_extractor(self.feature_extractor),
            "features_extractor_kwargs": {"features_dim": self.features_dim},
        }
        if self.net_arch is not None:
            kwargs["net_arch"] = self.net_arch
        return kwargs

    @classmethod
    def from_kwargs(cls, **kwargs) -> 'TrainingConfig':
        """Build a config from flat keyword arguments, hyperparameters included."""
        ppo_names = {f.name for f in fields(PPOHyperparameters)}
        ppo = {k: kwargs.pop(k) for k in list(kwargs) if k in ppo_names}
        return cls(hyperparameters=PPOHyperparameters(**ppo), **kwargs)


class EpisodeOutcomeCallback(BaseCallback):
    """Base callback calling ``on_episode(solved)`` for every finished episode."""

    def _on_step(self) -> bool:
        dones = self.locals.get('dones', [])
        infos = self.locals.get('infos', [])
        for done, info in zip(dones, infos):
            if done:
                self.on_episode(bool(info.get('solved', False)))
        self.after_step()
        return True

    def on_episode(self, solved: bool) -> None:
        raise NotImplementedError

    def after_step(self) -> None:
        pass


class CurriculumCallback(EpisodeOutcomeCallback):
    """Feeds episode outcomes to the curriculum so it can unlock levels."""

    def __init__(self, curriculum_env: CurriculumVecEnv, verbose: int = 0):
        super().__init__(verbose)
        self.curriculum_env = curriculum_env

    def on_episode(self, solved: bool) -> None:
        self.curriculum_env.record_episode(solved)

    def after_step(self) -> None:
        self.logger.record("curriculum/levels", self.curriculum_env.difficulty_level)


class SuccessRateCallback(EpisodeOutcomeCallback):
    """Logs the solved fraction of the last ``window_size`` episodes."""

    def __init__(self, window_size: int = 100, log_every: int = 1000, verbose: int = 0):
        super().__init__(verbose)
        self.window_size = window_size
        self.log_every = log_every
        self._successes: List[bool] = []

    def on_episode(self, solved: bool) -> None:
        self._successes.append(solved)
        del self._successes[:-self.window_size]

    def after_step(self) -> None:
        if self.n_calls % self.log_every == 0 and len(self._successes) >= 10:
            self.logger.record("rollout/success_rate",
                               sum(self._successes) / len(self._successes))


def _run_dir(config: TrainingConfig, algorithm: str) -> Path:
    if config.resume_from:
        # checkpoints live in <run_dir>/checkpoints/
        return Path(config.resume_from).parent.parent
    run_dir = Path(config.log_dir) / f"{algorithm}_{datetime.now():%Y%m%d_%H%M%S}"
    run_dir.mkdir(parents=True, exist_ok=True)
    return run_dir


def _build_envs(config: TrainingConfig, use_action_mask: bool,
                run_dir: Path) -> Tuple[VecEnv, VecEnv, Optional[CurriculumVecEnv]]:
    """Training env, evaluation env and the curriculum (if any)."""
    curriculum = None
    if config.use_curriculum:
        curriculum = CurriculumVecEnv(
            n_envs=config.n_envs,
            initial_levels=config.initial_levels,
            max_levels=config.max_levels,
            success_threshold=config.success_threshold,
            max_steps=config.max_steps,
            log_dir=str(run_dir / "train"),
            use_action_mask=use_action_mask,
        )
        env = curriculum.get_env()
    else:
        env = make_vec_env(
            n_envs=config.n_envs,
            max_level=config.max_levels,
            max_steps=config.max_steps,
            log_dir=str(run_dir / "train"),
            use_action_mask=use_action_mask,
        )

    # Always evaluated on the full level pool
    eval_env = make_vec_env(
        n_envs=EVAL_ENVS,
        max_level=config.max_levels,
        max_steps=config.max_steps,
        use_action_mask=use_action_mask,
        seed=EVAL_SEED,
    )
    return env, eval_env, curriculum


def _build_callbacks(config: TrainingConfig, algorithm: str, use_action_mask: bool,
                     run_dir: Path, eval_env: VecEnv,
                     curriculum: Optional[CurriculumVecEnv]) -> CallbackList:
    # SB3 counts callback frequencies in vectorized steps
    per_env = lambda steps: max(steps // config.n_envs, 1)  # noqa: E731

    eval_callback_class = MaskableEvalCallback if use_action_mask else EvalCallback
    callbacks: List[BaseCallback] = [
        SuccessRateCallback(verbose=config.verbose),
        CheckpointCallback(
            save_freq=per_env(config.save_freq),
            save_path=str(run_dir / "checkpoints"),
            name_prefix=f"{algorithm}_statue_lasers",
        ),
        eval_callback_class(
            eval_env,
            best_model_save_path=str(run_dir / "best"),
            log_path=str(run_dir / "eval"),
            eval_freq=per_env(config.eval_freq),
            n_eval_episodes=EVAL_EPISODES,
            deterministic=True,
        ),
    ]
    if curriculum is not None:
        callbacks.append(CurriculumCallback(curriculum, verbose=config.verbose))
    return CallbackList(callbacks)


def train(algorithm: str, config: Optional[TrainingConfig] = None):
    """
    Train an agent and save it as ``<run_dir>/final_model.zip``.

    Args:
        algorithm: Key of ``ALGORITHMS``
        config: Run settings; defaults to ``TrainingConfig()``

    Returns:
        The trained model
    """
    if algorithm not in ALGORITHMS:
        raise ValueError(f"Unknown algorithm: {algorithm}. Available: {list(ALGORITHMS)}")
    config = config or TrainingConfig()
    model_class, use_action_mask = ALGORITHMS[algorithm]

    run_dir = _run_dir(config, algorithm)
    env, eval_env, curriculum = _build_envs(config, use_action_mask, run_dir)

    if config.resume_from:
        logger.info("Resuming from %s in %s", config.resume_from, run_dir)
        model = model_class.load(config.resume_from, env=env, device=config.device,
                                 tensorboard_log=str(run_dir))
    else:
        model = model_class(
            policy="CnnPolicy",
            env=env,
            policy_kwargs=config.policy_kwargs(),
            verbose=config.verbose,
            device=config.device,
            tensorboard_log=str(run_dir),
            **asdict(config.hyperparameters),
        )
    model.set_logger(configure(str(run_dir), ["stdout", "tensorboard"]))

    levels = (f"{config.initial_levels} -> {config.max_levels} (curriculum)"
              if config.use_curriculum else str(config.max_levels))
    logger.info("Starting %s: %d envs, core levels %s, %s timesteps, device %s, run dir %s",
                model_class.__name__, config.n_envs, levels,
                f"{config.total_timesteps:,}", model.device, run_dir)

    model.learn(
        total_timesteps=config.total_timesteps,
        callback=_build_callbacks(config, algorithm, use_action_mask, run_dir,
                                  eval_env, curriculum),
        progress_bar=True,
        reset_num_timesteps=not config.resume_from,
    )

    model.save(run_dir / "final_model")
    logger.info("Training complete, model saved to %s", run_dir / "final_model")
    return model


def train_ppo(**kwargs) -> PPO:
    """Train a PPO agent; keyword arguments are ``TrainingConfig.from_kwargs`` fields."""
    return train("ppo", TrainingConfig.from_kwargs(**kwargs))


def train_maskable_ppo(**kwargs) -> MaskablePPO:
    """
    Train a MaskablePPO agent.

    MaskablePPO never samples moves into walls or other no-ops, which
    usually makes learning much faster than standard PPO.
    """
    return train("maskable_ppo", TrainingConfig.from_kwargs(**kwargs))


def build_parser() -> argparse.ArgumentParser:
    defaults = TrainingConfig()
    ppo = defaults.hyperparameters
    parser = argparse.ArgumentParser(
        description="Train an RL agent on the Statue Lasers core levels",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--algorithm", default="maskable_ppo", choices=list(ALGORITHMS))

    env_group = parser.add_argument_group("environment")
    env_group.add_argument("--n-envs", type=int, default=defaults.n_envs)
    env_group.add_argument("--max-steps", type=int, default=defaults.max_steps,
                           help="Steps before an episode is truncated")
    env_group.add_argument("--initial-levels", type=int, default=defaults.initial_levels,
                           help="Core levels sampled when the curriculum starts")
    env_group.add_argument("--max-levels", type=int, default=defaults.max_levels,
                           help="Core levels sampled once the curriculum finishes")
    env_group.add_argument("--no-curriculum", action="store_true",
                           help="Sample all --max-levels levels from the start")
    env_group.add_argument("--success-threshold", type=float, default=defaults.success_threshold)

    model_group = parser.add_argument_group("model")
    model_group.add_argument("--timesteps", type=int, default=defaults.total_timesteps)
    model_group.add_argument("--lr", type=float, default=ppo.learning_rate)
    model_group.add_argument("--batch-size", type=int, default=ppo.batch_size)
    model_group.add_argument("--ent-coef", type=float, default=ppo.ent_coef)
    model_group.add_argument("--network", default=defaults.feature_extractor, choices=sorted(FEATURE_EXTRACTORS))
    model_group.add_argument("--features-dim", type=int, default=defaults.features_dim)
    model_group.add_argument("--device", default=defaults.device, choices=["auto", "cuda", "cpu"])

    out_group = parser.add_argument_group("output")
    out_group.add_argument("--log-dir", default=defaults.log_dir)
    out_group.add_argument("--save-freq", type=int, default=defaults.save_freq)
    out_group.add_argument("--eval-freq", type=int, default=defaults.eval_freq)
    out_group.add_argument("--resume", default=None, help="Checkpoint .zip to continue from")
    out_group.add_argument("--log-level", default="INFO",
                           choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser


def config_from_args(args: argparse.Namespace) -> TrainingConfig:
    return TrainingConfig(
        n_envs=args.n_envs,
        max_steps=args.max_steps,
        total_timesteps=args.timesteps,
        hyperparameters=PPOHyperparameters(
            learning_rate=args.lr,
            batch_size=args.batch_size,
            ent_coef=args.ent_coef,
        ),
        feature_extractor=args.network,
        features_dim=args.features_dim,
        use_curriculum=not args.no_curriculum,
        initial_levels=args.initial_levels,
        max_levels=args.max_levels,
        success_threshold=args.success_threshold,
        log_dir=args.log_dir,
        save_freq=args.save_freq,
        eval_freq=args.eval_freq,
        resume_from=args.resume,
        device=args.device,
    )


def main(argv=None):
    """CLI entry point for training."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s %(name)s %(levelname)s: %(message)s',
    )
    train(args.algorithm, config_from_args(args))


if __name__ == "__main__":
    main()
