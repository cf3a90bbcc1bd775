"""Probability scoring metrics: the single implementation used everywhere.

Training, test evaluation, calibration reports and leave-one-out influence
all compare Brier scores and accuracies across components, so every caller
imports these functions instead of computing them locally.
"""

from __future__ import annotations

from typing import Final, Sequence, Tuple, Union

import numpy as np

from nfl_edge.core.errors import InvalidInput

ArrayLike = Union[Sequence[float], np.ndarray]

#: Probability clip applied before taking logs in the cross-entropy.
BCE_EPSILON: Final[float] = 1e-7

#: A prediction counts as a home-win call when strictly above this value.
DECISION_THRESHOLD: Final[float] = 0.5


def paired_arrays(predictions: ArrayLike, actuals: ArrayLike) -> Tuple[np.ndarray, np.ndarray]:
    """Flatten both inputs to float arrays, rejecting empty or unequal lengths."""
    p = np.asarray(predictions, dtype=np.float64).reshape(-1)
    y = np.asarray(actuals, dtype=np.float64).reshape(-1)
    if p.shape != y.shape:
        raise InvalidInput(
            f"predictions ({p.size}) and actuals ({y.size}) differ in length."
        )
    if p.size == 0:
        raise InvalidInput("Cannot score an empty set of predictions.")
    return p, y


def brier_score(predictions: ArrayLike, actuals: ArrayLike) -> float:
    """Mean squared error between predicted probability and 0/1 outcome.

    0 is perfect; always predicting 0.5 scores 0.25.
    """
    p, y = paired_arrays(predictions, actuals)
    return float(np.mean((p - y) ** 2))


def accuracy(predictions: ArrayLike, actuals: ArrayLike) -> float:
    """Fraction of rows where ``p > 0.5`` matches the label."""
    p, y = paired_arrays(predictions, actuals)
    calls = (p > DECISION_THRESHOLD).astype(np.float64)
    return float(np.mean(calls == y))


def binary_cross_entropy(predictions: ArrayLike, actuals: ArrayLike) -> float:
    """Mean log loss with probabilities clipped to ``[eps, 1 - eps]``."""
    p, y = paired_arrays(predictions, actuals)
    p = np.clip(p, BCE_EPSILON, 1.0 - BCE_EPSILON)
    return float(-np.mean(y * np.log(p) + (1.0 - y) * np.log(1.0 - p)))
