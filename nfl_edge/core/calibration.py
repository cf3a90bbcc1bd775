"""Calibration analysis: do predicted probabilities match observed rates?

Predictions are bucketed into ``bins`` equal-width intervals over ``[0, 1]``.
A prediction ``p`` lands in bin ``i`` when ``i*w <= p < (i+1)*w``; the last
bin is closed on the right so ``p == 1.0`` is counted.  Empty bins are left
out of the report rather than zero-filled.

The report collapses to one qualitative grade using the count-weighted mean
absolute gap between each bin's midpoint and its observed win rate:

======================  ==============
weighted error          grade
======================  ==============
``< 0.05``              Excellent
``0.05 – 0.10``         Good
``0.10 – 0.15``         Fair
``>= 0.15``             Poor
no bins                 N/A
======================  ==============
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Final, List, Optional, Sequence

import numpy as np

from nfl_edge.core.errors import InvalidInput
from nfl_edge.core.metrics import ArrayLike, paired_arrays

DEFAULT_BINS: Final[int] = 10

_EXCELLENT_BELOW: Final[float] = 0.05
_GOOD_BELOW: Final[float] = 0.10
_FAIR_BELOW: Final[float] = 0.15


@dataclass(frozen=True)
class CalibrationBin:
    """One non-empty probability bucket."""

    predicted_prob: float  # bin midpoint
    actual_prob: float     # mean label of the games in the bin
    count: int


class CalibrationGrade(str, Enum):
    EXCELLENT = "Excellent"
    GOOD = "Good"
    FAIR = "Fair"
    POOR = "Poor"
    NOT_AVAILABLE = "N/A"


def calibrate(
    predictions: ArrayLike,
    actuals: ArrayLike,
    bins: int = DEFAULT_BINS,
) -> List[CalibrationBin]:
    """Bucket predictions and compare each bucket's midpoint to its hit rate.

    Args:
        predictions: Predicted home-win probabilities.
        actuals: 0/1 outcomes, same length.
        bins: Number of equal-width bins over ``[0, 1]``.

    Returns:
        Non-empty bins in ascending probability order.

    Raises:
        InvalidInput: On mismatched / empty inputs or ``bins < 1``.
    """
    if bins < 1:
        raise InvalidInput(f"bins must be >= 1, got {bins!r}.")
    p, y = paired_arrays(predictions, actuals)

    width = 1.0 / bins
    report: List[CalibrationBin] = []
    for i in range(bins):
        lo = i * width
        hi = (i + 1) * width
        in_bin = (p >= lo) & (p < hi)
        if i == bins - 1:
            in_bin |= p == hi
        count = int(np.count_nonzero(in_bin))
        if count == 0:
            continue
        report.append(
            CalibrationBin(
                predicted_prob=(lo + hi) / 2.0,
                actual_prob=float(np.mean(y[in_bin])),
                count=count,
            )
        )
    return report


def weighted_calibration_error(report: Sequence[CalibrationBin]) -> Optional[float]:
    """Count-weighted mean ``|midpoint - observed rate|``; ``None`` if empty."""
    total = sum(b.count for b in report)
    if total == 0:
        return None
    return sum(abs(b.predicted_prob - b.actual_prob) * b.count for b in report) / total


def calibration_grade(report: Sequence[CalibrationBin]) -> CalibrationGrade:
    error = weighted_calibration_error(report)
    if error is None:
        return CalibrationGrade.NOT_AVAILABLE
    if error < _EXCELLENT_BELOW:
        return CalibrationGrade.EXCELLENT
    if error < _GOOD_BELOW:
        return CalibrationGrade.GOOD
    if error < _FAIR_BELOW:
        return CalibrationGrade.FAIR
    return CalibrationGrade.POOR
