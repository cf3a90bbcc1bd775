"""Runtime configuration.

Hyperparameters and betting defaults are frozen dataclasses with sensible
defaults.  ``from_env()`` constructors apply overrides from environment
variables (an optional ``.env`` file is loaded at import), so a deployment
can retune without code changes::

    EDGE_EPOCHS=200 EDGE_SEED=7 python scripts/train_model.py games.csv

Override a single value in code with :func:`dataclasses.replace`::

    from dataclasses import replace
    cfg = replace(TrainingConfig(), epochs=50)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from nfl_edge.core.errors import InvalidInput
from nfl_edge.core.kelly import QUARTER_KELLY

load_dotenv()


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise InvalidInput(f"{name}={raw!r} is not a number.") from None


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise InvalidInput(f"{name}={raw!r} is not an integer.") from None


@dataclass(frozen=True)
class TrainingConfig:
    """Hyperparameters for :class:`~nfl_edge.logistic.LogisticRegressionTrainer`.

    Attributes:
        learning_rate: Adam step size.
        l2: L2 penalty coefficient on the weights (bias is not penalised).
        epochs: Full passes over the training rows.
        batch_size: Mini-batch size.
        validation_split: Share of the training rows (taken from the end)
            held back for monitoring only.  ``0`` disables it.
        seed: Seeds the per-epoch batch shuffling.  ``None`` draws fresh
            entropy on every fit.
    """

    learning_rate: float = 0.01
    l2: float = 0.01
    epochs: int = 100
    batch_size: int = 32
    validation_split: float = 0.2
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        if self.learning_rate <= 0:
            raise InvalidInput(f"learning_rate must be > 0, got {self.learning_rate!r}.")
        if self.l2 < 0:
            raise InvalidInput(f"l2 must be >= 0, got {self.l2!r}.")
        if self.epochs < 1:
            raise InvalidInput(f"epochs must be >= 1, got {self.epochs!r}.")
        if self.batch_size < 1:
            raise InvalidInput(f"batch_size must be >= 1, got {self.batch_size!r}.")
        if not (0.0 <= self.validation_split < 1.0):
            raise InvalidInput(
                f"validation_split must be in [0, 1), got {self.validation_split!r}."
            )

    @classmethod
    def from_env(cls) -> "TrainingConfig":
        defaults = cls()
        return cls(
            learning_rate=_env_float("EDGE_LEARNING_RATE", defaults.learning_rate),
            l2=_env_float("EDGE_L2_PENALTY", defaults.l2),
            epochs=_env_int("EDGE_EPOCHS", defaults.epochs),
            batch_size=_env_int("EDGE_BATCH_SIZE", defaults.batch_size),
            validation_split=_env_float("EDGE_VALIDATION_SPLIT", defaults.validation_split),
            seed=_env_int("EDGE_SEED", defaults.seed),
        )


@dataclass(frozen=True)
class BettingConfig:
    """Defaults for market pricing and influence analysis.

    Attributes:
        bankroll: Bankroll used to turn Kelly fractions into dollar stakes.
        kelly_multiplier: Fraction of full Kelly to stake (quarter Kelly).
        min_ev_edge: A side is flagged +EV only when its EV exceeds this.
        loo_sample_size: Most recent games analysed by leave-one-out (0 for all).
        top_n: Size of the influential / outlier rankings.
    """

    bankroll: float = 1000.0
    kelly_multiplier: float = QUARTER_KELLY
    min_ev_edge: float = 0.02
    loo_sample_size: int = 50
    top_n: int = 5

    @classmethod
    def from_env(cls) -> "BettingConfig":
        defaults = cls()
        return cls(
            bankroll=_env_float("STARTING_BANKROLL", defaults.bankroll),
            kelly_multiplier=_env_float("KELLY_MULTIPLIER", defaults.kelly_multiplier),
            min_ev_edge=_env_float("MIN_EV_EDGE", defaults.min_ev_edge),
            loo_sample_size=_env_int("LOO_SAMPLE_SIZE", defaults.loo_sample_size),
            top_n=_env_int("LOO_TOP_N", defaults.top_n),
        )
