"""
Pydantic schemas for persisted models and training settings.

A :class:`SavedModel` holds everything needed to restore a scorer and
explain where it came from: feature order, weights, bias, headline metrics,
the split settings and a summary of the training data.  Storage is the
caller's business; these schemas only guarantee a lossless JSON round-trip::

    saved = SavedModel.from_report(report, name="spread+rest")
    blob = saved.model_dump_json()
    model = SavedModel.model_validate_json(blob).to_trained_model()
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from nfl_edge.core.splits import SplitMethod
from nfl_edge.logistic import TrainedModel
from nfl_edge.services.training import TrainingReport, TrainTestSettings


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

class SplitSettings(BaseModel):
    """How the games were partitioned into train and test."""

    split_method: Literal["time-based", "random"] = Field(
        "time-based", description="Chronological hold-out or seeded shuffle"
    )
    test_size: float = Field(0.2, gt=0.0, lt=1.0, description="Share of games held out")
    random_seed: Optional[int] = Field(None, description="Shuffle seed (random split only)")

    def to_settings(self) -> TrainTestSettings:
        return TrainTestSettings(
            split_method=SplitMethod(self.split_method),
            test_size=self.test_size,
            random_seed=self.random_seed,
        )

    @classmethod
    def from_settings(cls, settings: TrainTestSettings) -> "SplitSettings":
        return cls(
            split_method=SplitMethod(settings.split_method).value,
            test_size=settings.test_size,
            random_seed=settings.random_seed,
        )


# ---------------------------------------------------------------------------
# Metrics
# ---------------------------------------------------------------------------

class CalibrationBinOut(BaseModel):
    predicted_prob: float = Field(..., ge=0.0, le=1.0)
    actual_prob: float = Field(..., ge=0.0, le=1.0)
    count: int = Field(..., ge=1)


class ModelMetrics(BaseModel):
    test_accuracy: float = Field(..., ge=0.0, le=1.0)
    test_brier_score: float = Field(..., ge=0.0, le=1.0)
    train_accuracy: Optional[float] = Field(None, ge=0.0, le=1.0)
    val_accuracy: Optional[float] = Field(None, ge=0.0, le=1.0)
    calibration_grade: str = "N/A"
    calibration: List[CalibrationBinOut] = Field(default_factory=list)


class DataInfoOut(BaseModel):
    game_count: int = Field(..., ge=0)
    seasons: List[int] = Field(default_factory=list)
    week_min: int = 0
    week_max: int = 0

    @model_validator(mode="after")
    def check_week_range(self) -> "DataInfoOut":
        if self.week_min > self.week_max:
            raise ValueError(f"week_min {self.week_min} > week_max {self.week_max}")
        return self


# ---------------------------------------------------------------------------
# Saved model
# ---------------------------------------------------------------------------

class SavedModel(BaseModel):
    """
    A trained model plus its provenance.

    ``weights[i]`` is the coefficient of ``features[i]``; the order is the
    vectorizer contract and must be preserved exactly.
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str = Field(..., min_length=1, max_length=120)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    features: List[str] = Field(..., min_length=1)
    weights: List[float]
    bias: float
    metrics: ModelMetrics
    settings: SplitSettings = Field(default_factory=SplitSettings)
    training_data: Optional[DataInfoOut] = None

    @field_validator("features")
    @classmethod
    def validate_unique_features(cls, v: List[str]) -> List[str]:
        if len(set(v)) != len(v):
            raise ValueError(f"Duplicate feature names: {v}")
        return v

    @model_validator(mode="after")
    def check_weight_count(self) -> "SavedModel":
        if len(self.weights) != len(self.features):
            raise ValueError(
                f"{len(self.weights)} weights for {len(self.features)} features"
            )
        return self

    def to_trained_model(self) -> TrainedModel:
        return TrainedModel.from_dict({
            "feature_names": self.features,
            "weights": self.weights,
            "bias": self.bias,
        })

    @classmethod
    def from_report(cls, report: TrainingReport, name: str) -> "SavedModel":
        params = report.model.to_dict()
        info = report.data_info
        return cls(
            name=name,
            features=params["feature_names"],
            weights=params["weights"],
            bias=params["bias"],
            metrics=ModelMetrics(
                test_accuracy=report.accuracy,
                test_brier_score=report.brier_score,
                train_accuracy=report.train_accuracy,
                val_accuracy=report.fit.val_accuracy,
                calibration_grade=report.calibration_grade.value,
                calibration=[
                    CalibrationBinOut(
                        predicted_prob=b.predicted_prob,
                        actual_prob=b.actual_prob,
                        count=b.count,
                    )
                    for b in report.calibration
                ],
            ),
            settings=SplitSettings.from_settings(report.settings),
            training_data=None if info is None else DataInfoOut(
                game_count=info.game_count,
                seasons=list(info.seasons),
                week_min=info.week_min,
                week_max=info.week_max,
            ),
        )
