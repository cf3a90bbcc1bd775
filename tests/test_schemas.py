"""
Tests for saved-model and settings schemas
Run with: pytest tests/test_schemas.py -v
"""

import numpy as np
import pytest
from pydantic import ValidationError

from nfl_edge.config import TrainingConfig
from nfl_edge.core.splits import SplitMethod
from nfl_edge.schemas import ModelMetrics, SavedModel, SplitSettings
from nfl_edge.services.training import TrainTestSettings, train_and_evaluate


def _metrics():
    return ModelMetrics(test_accuracy=0.61, test_brier_score=0.23)


class TestSplitSettings:

    def test_defaults(self):
        settings = SplitSettings()
        assert settings.split_method == "time-based"
        assert settings.test_size == 0.2
        assert settings.random_seed is None

    @pytest.mark.parametrize("size", [0.0, 1.0, -0.1])
    def test_test_size_bounds(self, size):
        with pytest.raises(ValidationError):
            SplitSettings(test_size=size)

    def test_unknown_method(self):
        with pytest.raises(ValidationError):
            SplitSettings(split_method="k-fold")

    def test_dataclass_round_trip(self):
        settings = TrainTestSettings(SplitMethod.RANDOM, 0.3, 9)
        assert SplitSettings.from_settings(settings).to_settings() == settings


class TestSavedModel:

    def test_weight_count_must_match(self):
        with pytest.raises(ValidationError):
            SavedModel(name="m", features=["spread", "total"], weights=[0.1],
                       bias=0.0, metrics=_metrics())

    def test_duplicate_features_rejected(self):
        with pytest.raises(ValidationError):
            SavedModel(name="m", features=["spread", "spread"], weights=[0.1, 0.2],
                       bias=0.0, metrics=_metrics())

    def test_generated_id_and_timestamp(self):
        a = SavedModel(name="m", features=["spread"], weights=[0.1], bias=0.0, metrics=_metrics())
        b = SavedModel(name="m", features=["spread"], weights=[0.1], bias=0.0, metrics=_metrics())
        assert a.id != b.id
        assert a.created_at.tzinfo is not None

    def test_json_round_trip_is_lossless(self):
        saved = SavedModel(
            name="spread+total",
            features=["total", "spread"],
            weights=[0.1234567890123456, -1.9876543210987654],
            bias=0.30000000000000004,
            metrics=_metrics(),
        )
        restored = SavedModel.model_validate_json(saved.model_dump_json())
        assert restored.features == ["total", "spread"]
        assert restored.weights == saved.weights
        assert restored.bias == saved.bias
        assert restored.created_at == saved.created_at

    def test_from_report_restores_identical_scorer(self, linear_games):
        report = train_and_evaluate(linear_games, ["spread", "total"],
                                    config=TrainingConfig(epochs=10, seed=1))
        saved = SavedModel.from_report(report, name="test")
        restored = SavedModel.model_validate_json(saved.model_dump_json()).to_trained_model()

        X = np.array([[-3.0, 45.0], [4.0, 48.5]])
        np.testing.assert_array_equal(restored.predict(X), report.model.predict(X))
        assert restored.feature_names == ("spread", "total")
        assert saved.metrics.test_brier_score == report.brier_score
        assert saved.metrics.calibration_grade == report.calibration_grade.value
        assert saved.training_data.game_count == report.n_train
        assert saved.settings.split_method == "time-based"
