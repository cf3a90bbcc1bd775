"""
Leave-one-out influence analysis.

For each analysed game the model is retrained from scratch without it and
scored on the **full** sorted dataset.  The difference to a baseline model
trained on every game says how much that one observation matters:

    influence      = loo_brier    - baseline_brier
    accuracy_delta = loo_accuracy - baseline_accuracy

Positive influence means the model gets worse without the game (an important
point); negative influence means it improves (a likely outlier or mislabel).

Design decisions
----------------
* Games are sorted chronologically first; ``game_index`` is the position in
  that order.  A sample size restricts the analysis to the most recent N
  games; every retrain still uses all other games.
* The baseline is trained and scored exactly once and the same two numbers
  are stamped on every result.
* When the config has no seed one is drawn up front and shared by the
  baseline and every retrain, so influence reflects the withheld game rather
  than shuffle noise.
* Each retrain owns its trainer inside a ``with`` block, so the fitted model
  is released on success, on cancellation and on failure alike.
* Any retrain failure aborts the run.  A partial ranking is not returned.
"""

import logging
import threading
from dataclasses import dataclass, replace
from typing import Callable, Dict, List, Optional, Sequence, Union

import numpy as np

from nfl_edge.config import TrainingConfig
from nfl_edge.core.errors import (
    AnalysisCancelled,
    EdgeModelError,
    InsufficientData,
    pipeline_stage,
)
from nfl_edge.core.features import FeatureSpec, FeatureVectorizer
from nfl_edge.core.games import GameRecord, sort_chronologically
from nfl_edge.core.metrics import accuracy, brier_score
from nfl_edge.logistic import LogisticRegressionTrainer

logger = logging.getLogger(__name__)

#: Log a progress line every this many retrains (and on the last one).
PROGRESS_EVERY = 10

ProgressCallback = Callable[[int, int], None]
TrainerFactory = Callable[[TrainingConfig], LogisticRegressionTrainer]


@dataclass(frozen=True)
class LOOResult:
    """Effect of withholding one game from training."""

    game_index: int
    game: GameRecord
    baseline_brier: float
    loo_brier: float
    influence: float
    baseline_accuracy: float
    loo_accuracy: float
    accuracy_delta: float


class LOOInfluenceAnalyzer:
    """
    Rank games by how much withholding each one changes model quality.

    Args:
        config: Hyperparameters shared by the baseline and every retrain.
        trainer_factory: Builds a fresh trainer per model; tests inject a
            mock here.

    Example::

        analyzer = LOOInfluenceAnalyzer(TrainingConfig(seed=7))
        results = analyzer.run(games, ["spread", "total"], sample_size=50)
        ranking = influential_games(results, top_n=5)
    """

    def __init__(
        self,
        config: Optional[TrainingConfig] = None,
        trainer_factory: TrainerFactory = LogisticRegressionTrainer,
    ):
        self.config = config or TrainingConfig()
        self.trainer_factory = trainer_factory

    def run(
        self,
        games: Sequence[GameRecord],
        features: Union[FeatureSpec, Sequence[str]],
        sample_size: Optional[int] = None,
        progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> List[LOOResult]:
        """
        Run the analysis and return results sorted by ``|influence|`` descending.

        Args:
            games: Labelled games in any order.
            features: Feature keys, vectorised identically for every model.
            sample_size: Analyse only the most recent N games.  ``None``, 0 or a
                value >= ``len(games)`` analyses all of them.
            progress: Called as ``progress(done, total)`` after each retrain.
            cancel_event: Checked before each retrain; when set the run stops
                with :class:`AnalysisCancelled`.

        Raises:
            InsufficientData: Fewer than two games.
            AnalysisCancelled: ``cancel_event`` was set.
            TrainingFailure / InvalidInput: A fit failed, stage-tagged.
        """
        if not games:
            raise InsufficientData("Leave-one-out analysis needs games, got none.")
        if len(games) < 2:
            raise InsufficientData(
                f"Leave-one-out analysis needs at least 2 games, got {len(games)}."
            )
        if sample_size is not None and sample_size < 0:
            raise InsufficientData(f"sample_size must be >= 0, got {sample_size!r}.")

        spec = features if isinstance(features, FeatureSpec) else FeatureSpec(features)
        vectorizer = FeatureVectorizer(spec)
        ordered = sort_chronologically(games)
        n = len(ordered)

        first = 0
        if sample_size and n > sample_size:
            first = n - sample_size
        targets = range(first, n)
        total = len(targets)

        config = self._seeded_config()
        logger.info(
            "Starting LOO analysis on %d of %d games (seed=%s)", total, n, config.seed
        )

        try:
            with pipeline_stage("loo_baseline"):
                full = vectorizer.dataset(ordered)
                with self.trainer_factory(config) as trainer:
                    trainer.fit(full.X, full.y, spec.keys)
                    baseline_pred = trainer.predict(full.X)
                baseline_brier = brier_score(baseline_pred, full.y)
                baseline_acc = accuracy(baseline_pred, full.y)

            results: List[LOOResult] = []
            for done, index in enumerate(targets, start=1):
                if cancel_event is not None and cancel_event.is_set():
                    raise AnalysisCancelled(
                        f"LOO analysis cancelled after {done - 1} of {total} games."
                    )
                keep = np.arange(n) != index
                with self.trainer_factory(config) as trainer:
                    with pipeline_stage("loo_fit"):
                        trainer.fit(full.X[keep], full.y[keep], spec.keys)
                    with pipeline_stage("loo_evaluate"):
                        loo_pred = trainer.predict(full.X)
                        loo_brier = brier_score(loo_pred, full.y)
                        loo_acc = accuracy(loo_pred, full.y)

                results.append(LOOResult(
                    game_index=index,
                    game=ordered[index],
                    baseline_brier=baseline_brier,
                    loo_brier=loo_brier,
                    influence=loo_brier - baseline_brier,
                    baseline_accuracy=baseline_acc,
                    loo_accuracy=loo_acc,
                    accuracy_delta=loo_acc - baseline_acc,
                ))

                if done % PROGRESS_EVERY == 0 or done == total:
                    logger.info("LOO progress: %d/%d", done, total)
                if progress is not None:
                    progress(done, total)
        except EdgeModelError as exc:
            logger.error("LOO analysis aborted: %s", exc, exc_info=True)
            raise

        results.sort(key=lambda r: abs(r.influence), reverse=True)
        logger.info(
            "LOO analysis complete: baseline brier=%.4f accuracy=%.3f",
            baseline_brier, baseline_acc,
        )
        return results

    def _seeded_config(self) -> TrainingConfig:
        if self.config.seed is not None:
            return self.config
        seed = int(np.random.default_rng().integers(0, 2 ** 31 - 1))
        return replace(self.config, seed=seed)


def influential_games(
    results: Sequence[LOOResult], top_n: int = 5
) -> Dict[str, List[LOOResult]]:
    """
    Top-N games at each end of a single sort by raw influence.

    Returns:
        ``{"most_influential": [...], "most_outlier": [...]}``.  The first
        list starts with the largest positive influence, the second with the
        most negative.  With fewer than ``2 * top_n`` results the lists
        overlap.
    """
    if top_n < 1:
        return {"most_influential": [], "most_outlier": []}
    by_influence = sorted(results, key=lambda r: r.influence, reverse=True)
    return {
        "most_influential": by_influence[:top_n],
        "most_outlier": by_influence[-top_n:][::-1],
    }
