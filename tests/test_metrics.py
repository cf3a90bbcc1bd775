"""
Tests for Brier score, accuracy and cross-entropy
Run with: pytest tests/test_metrics.py -v
"""

import math

import numpy as np
import pytest

from nfl_edge.core.errors import InvalidInput
from nfl_edge.core.metrics import accuracy, binary_cross_entropy, brier_score


class TestBrierScore:

    def test_perfect(self):
        assert brier_score([1.0, 0.0], [1, 0]) == 0.0

    def test_coin_flip(self):
        assert brier_score([0.5] * 4, [1, 0, 1, 1]) == pytest.approx(0.25)

    def test_mixed(self):
        # ((0.8-1)^2 + (0.3-0)^2) / 2
        assert brier_score([0.8, 0.3], [1, 0]) == pytest.approx(0.065)

    def test_accepts_numpy(self):
        assert brier_score(np.array([0.8, 0.3]), np.array([1.0, 0.0])) == pytest.approx(0.065)

    def test_length_mismatch(self):
        with pytest.raises(InvalidInput):
            brier_score([0.5], [1, 0])

    def test_empty(self):
        with pytest.raises(InvalidInput):
            brier_score([], [])


class TestAccuracy:

    def test_threshold_is_strict(self):
        # 0.5 is a "no" call, so it only matches label 0
        assert accuracy([0.5, 0.5], [0, 1]) == pytest.approx(0.5)

    def test_all_correct(self):
        assert accuracy([0.9, 0.1, 0.51], [1, 0, 1]) == 1.0

    def test_all_wrong(self):
        assert accuracy([0.9, 0.1], [0, 1]) == 0.0


class TestBinaryCrossEntropy:

    def test_coin_flip(self):
        assert binary_cross_entropy([0.5, 0.5], [1, 0]) == pytest.approx(math.log(2))

    def test_confident_mistake_is_finite(self):
        loss = binary_cross_entropy([0.0], [1])
        assert math.isfinite(loss)
        assert loss == pytest.approx(-math.log(1e-7), rel=1e-6)
