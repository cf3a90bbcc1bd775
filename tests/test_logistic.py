"""
Tests for the logistic regression trainer and TrainedModel
Run with: pytest tests/test_logistic.py -v
"""

import threading
from unittest.mock import MagicMock, patch

import numpy as np
import pytest

from nfl_edge.config import TrainingConfig
from nfl_edge.core.errors import (
    AnalysisCancelled,
    InvalidInput,
    ModelNotTrained,
    TrainingFailure,
)
from nfl_edge.logistic import LogisticRegressionTrainer, TrainedModel

FAST = TrainingConfig(epochs=20, seed=7)


def _separable(n=40):
    """One informative column (negative → home win) and one noise column."""
    rng = np.random.default_rng(0)
    signal = np.linspace(-10, 10, n)
    X = np.column_stack([signal, rng.normal(size=n)])
    y = (signal < 0).astype(float)
    return X, y


class TestFitValidation:
    """Input checks before training"""

    def test_empty_matrix(self):
        with pytest.raises(InvalidInput):
            LogisticRegressionTrainer(FAST).fit(np.empty((0, 1)), [], ["spread"])

    def test_no_features(self):
        with pytest.raises(InvalidInput):
            LogisticRegressionTrainer(FAST).fit([[1.0]], [1], [])

    def test_row_label_mismatch(self):
        with pytest.raises(InvalidInput):
            LogisticRegressionTrainer(FAST).fit([[1.0], [2.0]], [1], ["spread"])

    def test_column_name_mismatch(self):
        with pytest.raises(InvalidInput):
            LogisticRegressionTrainer(FAST).fit([[1.0, 2.0]], [1], ["spread"])

    def test_non_binary_labels(self):
        with pytest.raises(InvalidInput):
            LogisticRegressionTrainer(FAST).fit([[1.0], [2.0]], [1, 2], ["spread"])

    def test_nan_features(self):
        with pytest.raises(InvalidInput):
            LogisticRegressionTrainer(FAST).fit([[np.nan], [2.0]], [1, 0], ["spread"])

    def test_zero_epochs(self):
        X, y = _separable()
        with pytest.raises(InvalidInput):
            LogisticRegressionTrainer(FAST).fit(X, y, ["spread", "noise"], epochs=0)


class TestTraining:
    """Mini-batch Adam on BCE + L2"""

    def test_predictions_in_unit_interval(self):
        X, y = _separable()
        trainer = LogisticRegressionTrainer(FAST)
        trainer.fit(X, y, ["spread", "noise"])
        probs = trainer.predict(X)
        assert len(probs) == len(X)
        assert np.all((probs >= 0.0) & (probs <= 1.0))

    def test_learns_sign_of_signal(self):
        X, y = _separable()
        trainer = LogisticRegressionTrainer(FAST)
        trainer.fit(X, y, ["spread", "noise"])
        assert trainer.model.weights[0] < 0

    def test_predict_one_matches_batch_exactly(self):
        X, y = _separable()
        trainer = LogisticRegressionTrainer(FAST)
        trainer.fit(X, y, ["spread", "noise"])
        for row in X[:5]:
            assert trainer.predict_one(row) == trainer.predict([row])[0]

    def test_validation_split_holds_back_tail(self):
        X, y = _separable(10)
        result = LogisticRegressionTrainer(FAST).fit(X, y, ["spread", "noise"])
        assert (result.n_train, result.n_val) == (8, 2)
        assert result.val_loss is not None
        assert 0.0 <= result.val_accuracy <= 1.0

    def test_no_validation_split(self):
        X, y = _separable(10)
        cfg = TrainingConfig(epochs=5, seed=1, validation_split=0.0)
        result = LogisticRegressionTrainer(cfg).fit(X, y, ["spread", "noise"])
        assert result.n_val == 0
        assert result.val_loss is None
        assert result.val_accuracy is None

    def test_seeded_fit_is_deterministic(self):
        X, y = _separable()
        first = LogisticRegressionTrainer(FAST)
        second = LogisticRegressionTrainer(FAST)
        first.fit(X, y, ["spread", "noise"])
        second.fit(X, y, ["spread", "noise"])
        np.testing.assert_array_equal(first.model.weights, second.model.weights)
        assert first.model.bias == second.model.bias

    def test_epoch_callback(self):
        X, y = _separable()
        callback = MagicMock()
        LogisticRegressionTrainer(FAST).fit(X, y, ["spread", "noise"], epochs=3,
                                            on_epoch_end=callback)
        assert callback.call_count == 3
        epoch, logs = callback.call_args[0]
        assert epoch == 2
        assert set(logs) == {"loss", "accuracy", "val_loss", "val_accuracy"}

    def test_refit_returns_new_model(self):
        X, y = _separable()
        trainer = LogisticRegressionTrainer(FAST)
        trainer.fit(X, y, ["spread", "noise"])
        first = trainer.model
        trainer.fit(X[:, :1], y, ["spread"])
        assert trainer.model is not first
        assert trainer.feature_names == ("spread",)
        assert first.n_features == 2

    def test_non_finite_loss_raises(self):
        X, y = _separable()
        with patch("nfl_edge.logistic.binary_cross_entropy", return_value=float("nan")):
            with pytest.raises(TrainingFailure):
                LogisticRegressionTrainer(FAST).fit(X, y, ["spread", "noise"])

    def test_cancel_between_epochs(self):
        X, y = _separable()
        cancel = threading.Event()
        cancel.set()
        trainer = LogisticRegressionTrainer(FAST)
        with pytest.raises(AnalysisCancelled):
            trainer.fit(X, y, ["spread", "noise"], cancel_event=cancel)
        assert not trainer.is_trained()


class TestTrainerLifecycle:
    """Untrained access, disposal and the context manager"""

    def test_predict_before_fit(self):
        with pytest.raises(ModelNotTrained):
            LogisticRegressionTrainer(FAST).predict([[1.0]])

    def test_feature_importance_before_fit(self):
        with pytest.raises(ModelNotTrained):
            LogisticRegressionTrainer(FAST).feature_importance()

    def test_dispose(self):
        X, y = _separable()
        trainer = LogisticRegressionTrainer(FAST)
        trainer.fit(X, y, ["spread", "noise"])
        assert trainer.is_trained()
        trainer.dispose()
        assert not trainer.is_trained()

    def test_context_manager_disposes_on_error(self):
        X, y = _separable()
        with pytest.raises(RuntimeError):
            with LogisticRegressionTrainer(FAST) as trainer:
                trainer.fit(X, y, ["spread", "noise"])
                raise RuntimeError("boom")
        assert not trainer.is_trained()


class TestTrainedModel:
    """Immutable scorer"""

    def test_weights_read_only(self):
        model = TrainedModel(weights=[1.0, -2.0], bias=0.5, feature_names=("a", "b"))
        with pytest.raises(ValueError):
            model.weights[0] = 3.0

    def test_weight_count_must_match_features(self):
        with pytest.raises(InvalidInput):
            TrainedModel(weights=[1.0], bias=0.0, feature_names=("a", "b"))

    def test_predict_is_sigmoid_of_log_odds(self):
        model = TrainedModel(weights=[1.0], bias=0.0, feature_names=("a",))
        assert model.predict([[0.0]])[0] == pytest.approx(0.5)
        assert model.predict([[np.log(3.0)]])[0] == pytest.approx(0.75)

    def test_wrong_width_rejected(self):
        model = TrainedModel(weights=[1.0], bias=0.0, feature_names=("a",))
        with pytest.raises(InvalidInput):
            model.predict([[1.0, 2.0]])

    def test_feature_importance_sorted_by_magnitude(self):
        model = TrainedModel(weights=[0.1, -2.0, 0.5], bias=0.0,
                             feature_names=("a", "b", "c"))
        assert [name for name, _ in model.feature_importance()] == ["b", "c", "a"]

    def test_dict_round_trip(self):
        model = TrainedModel(weights=[0.123456789012345, -2.0], bias=0.3,
                             feature_names=("spread", "total"))
        restored = TrainedModel.from_dict(model.to_dict())
        np.testing.assert_array_equal(restored.weights, model.weights)
        assert restored.bias == model.bias
        assert restored.feature_names == model.feature_names
