"""
Train-and-evaluate pipeline.

    games ──split──► train / test ──fit──► TrainedModel ──evaluate──► report

Each stage runs under :func:`~nfl_edge.core.errors.pipeline_stage`, so a
failure reaches the caller tagged ``split``, ``fit`` or ``evaluate`` and a
bad CSV can be told apart from a diverging optimiser.

All public functions return plain dataclasses; nothing here touches storage
or the network.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple, Union

from nfl_edge.config import TrainingConfig
from nfl_edge.core.calibration import (
    CalibrationBin,
    CalibrationGrade,
    calibrate,
    calibration_grade,
)
from nfl_edge.core.errors import EdgeModelError, pipeline_stage
from nfl_edge.core.features import FeatureSpec, FeatureVectorizer
from nfl_edge.core.games import GameRecord
from nfl_edge.core.metrics import accuracy, brier_score
from nfl_edge.core.splits import DEFAULT_TEST_SIZE, SplitMethod, split_games
from nfl_edge.logistic import FitResult, LogisticRegressionTrainer, TrainedModel

logger = logging.getLogger(__name__)

TrainerFactory = Callable[[TrainingConfig], LogisticRegressionTrainer]


@dataclass(frozen=True)
class TrainTestSettings:
    split_method: SplitMethod = SplitMethod.TIME_BASED
    test_size: float = DEFAULT_TEST_SIZE
    random_seed: Optional[int] = None


@dataclass(frozen=True)
class TrainingDataInfo:
    """Summary of the games a model was trained on."""

    game_count: int
    seasons: Tuple[int, ...]
    week_min: int
    week_max: int

    @classmethod
    def from_games(cls, games: Sequence[GameRecord]) -> "TrainingDataInfo":
        weeks = [g.week for g in games]
        return cls(
            game_count=len(games),
            seasons=tuple(sorted({g.season for g in games})),
            week_min=min(weeks) if weeks else 0,
            week_max=max(weeks) if weeks else 0,
        )


@dataclass(frozen=True)
class TrainingReport:
    """Everything a caller needs to display or persist a training run."""

    model: TrainedModel
    fit: FitResult
    settings: TrainTestSettings
    train_brier_score: float
    train_accuracy: float
    brier_score: float              # test split
    accuracy: float                 # test split
    calibration: List[CalibrationBin] = field(default_factory=list)
    calibration_grade: CalibrationGrade = CalibrationGrade.NOT_AVAILABLE
    data_info: Optional[TrainingDataInfo] = None
    n_train: int = 0
    n_test: int = 0


def train_and_evaluate(
    games: Sequence[GameRecord],
    features: Union[FeatureSpec, Sequence[str]],
    settings: Optional[TrainTestSettings] = None,
    config: Optional[TrainingConfig] = None,
    trainer_factory: TrainerFactory = LogisticRegressionTrainer,
    calibration_bins: int = 10,
) -> TrainingReport:
    """
    Split ``games``, fit on the train split, and score both splits.

    Test-split Brier score and accuracy are the headline metrics; the
    calibration report is built from the test split as well.

    Raises:
        InvalidSplit: stage ``split``.
        InvalidInput / TrainingFailure: stage ``fit`` or ``evaluate``.
    """
    settings = settings or TrainTestSettings()
    config = config or TrainingConfig()
    spec = features if isinstance(features, FeatureSpec) else FeatureSpec(features)
    vectorizer = FeatureVectorizer(spec)

    try:
        with pipeline_stage("split"):
            split = split_games(
                games, settings.split_method, settings.test_size, settings.random_seed
            )

        with pipeline_stage("fit"), trainer_factory(config) as trainer:
            train_set = vectorizer.dataset(split.train)
            fit = trainer.fit(train_set.X, train_set.y, spec.keys)
            model = trainer.model

        with pipeline_stage("evaluate"):
            test_set = vectorizer.dataset(split.test)
            train_pred = model.predict(train_set.X)
            test_pred = model.predict(test_set.X)
            bins = calibrate(test_pred, test_set.y, calibration_bins)
            report = TrainingReport(
                model=model,
                fit=fit,
                settings=settings,
                train_brier_score=brier_score(train_pred, train_set.y),
                train_accuracy=accuracy(train_pred, train_set.y),
                brier_score=brier_score(test_pred, test_set.y),
                accuracy=accuracy(test_pred, test_set.y),
                calibration=bins,
                calibration_grade=calibration_grade(bins),
                data_info=TrainingDataInfo.from_games(split.train),
                n_train=len(split.train),
                n_test=len(split.test),
            )
    except EdgeModelError as exc:
        logger.error("Training pipeline failed at stage %s: %s", exc.stage, exc, exc_info=True)
        raise

    logger.info(
        "Model trained on %d games, tested on %d: brier=%.4f accuracy=%.3f calibration=%s",
        report.n_train, report.n_test, report.brier_score, report.accuracy,
        report.calibration_grade.value,
    )
    return report


def retrain_on_all(
    games: Sequence[GameRecord],
    features: Union[FeatureSpec, Sequence[str]],
    config: Optional[TrainingConfig] = None,
) -> Tuple[TrainedModel, FitResult]:
    """Fit on every game (no hold-out), e.g. after features change.

    In-sample metrics are reported by the returned :class:`FitResult`.
    """
    spec = features if isinstance(features, FeatureSpec) else FeatureSpec(features)
    with pipeline_stage("fit"), LogisticRegressionTrainer(config) as trainer:
        dataset = FeatureVectorizer(spec).dataset(games)
        fit = trainer.fit(dataset.X, dataset.y, spec.keys)
        model = trainer.model
    return model, fit
