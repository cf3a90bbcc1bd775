"""
Regularized logistic regression for home-win probability.

A single linear unit with a sigmoid output, trained on binary cross-entropy
plus an L2 penalty on the weights, optimised with mini-batch Adam:

    p(home win) = sigmoid(x · w + b)
    loss        = mean BCE(p, y) + l2 · Σ w²

Training follows the familiar Keras ``fit`` loop:
- the last ``validation_split`` share of the rows is held back (monitoring
  only, never used for the final metrics a caller reports)
- the remaining rows are reshuffled every epoch and consumed in batches
- reported loss / accuracy are running averages over the epoch's batches

``fit`` produces a new immutable :class:`TrainedModel` each time; re-fitting
replaces the trainer's reference instead of mutating weights in place, so a
model handed to another component can never change underneath it.
"""

from __future__ import annotations

import logging
import math
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np
from scipy.special import expit

from nfl_edge.config import TrainingConfig
from nfl_edge.core.errors import (
    AnalysisCancelled,
    InvalidInput,
    ModelNotTrained,
    TrainingFailure,
)
from nfl_edge.core.metrics import accuracy, binary_cross_entropy

logger = logging.getLogger(__name__)

# Adam moment decay rates and denominator epsilon.
_BETA_1 = 0.9
_BETA_2 = 0.999
_ADAM_EPSILON = 1e-7

EpochCallback = Callable[[int, Dict[str, Optional[float]]], None]


@dataclass(frozen=True)
class FitResult:
    """Loss and accuracy at the final epoch."""

    train_loss: float
    train_accuracy: float
    val_loss: Optional[float]
    val_accuracy: Optional[float]
    epochs: int
    n_train: int
    n_val: int


@dataclass(frozen=True, eq=False)
class TrainedModel:
    """Immutable fitted scorer: one coefficient per feature plus a bias.

    ``weights`` is stored as a read-only float64 array in ``feature_names``
    order.  A positive coefficient raises the home-win log-odds.
    """

    weights: np.ndarray
    bias: float
    feature_names: Tuple[str, ...]

    def __post_init__(self) -> None:
        weights = np.array(self.weights, dtype=np.float64).reshape(-1)
        if weights.size != len(self.feature_names):
            raise InvalidInput(
                f"{weights.size} weights for {len(self.feature_names)} features."
            )
        weights.setflags(write=False)
        object.__setattr__(self, "weights", weights)
        object.__setattr__(self, "bias", float(self.bias))
        object.__setattr__(self, "feature_names", tuple(self.feature_names))

    @property
    def n_features(self) -> int:
        return len(self.feature_names)

    def _as_matrix(self, X: Any) -> np.ndarray:
        X = np.asarray(X, dtype=np.float64)
        if X.ndim != 2 or X.shape[1] != self.n_features:
            raise InvalidInput(
                f"Expected a matrix with {self.n_features} columns "
                f"({', '.join(self.feature_names)}), got shape {X.shape}."
            )
        return X

    def decision_function(self, X: Any) -> np.ndarray:
        """Log-odds ``X · w + b`` per row."""
        return self._as_matrix(X) @ self.weights + self.bias

    def predict(self, X: Any) -> np.ndarray:
        """Home-win probability per row, each in ``[0, 1]``."""
        return expit(self.decision_function(X))

    def predict_one(self, features: Sequence[float]) -> float:
        """Probability for one feature vector, via the same path as :meth:`predict`."""
        return float(self.predict([list(features)])[0])

    def feature_importance(self) -> List[Tuple[str, float]]:
        """``(feature, coefficient)`` pairs, largest ``|coefficient|`` first."""
        pairs = [(name, float(w)) for name, w in zip(self.feature_names, self.weights)]
        return sorted(pairs, key=lambda pair: abs(pair[1]), reverse=True)

    def to_dict(self) -> Dict[str, Any]:
        """Plain-data form; floats survive a JSON round-trip exactly."""
        return {
            "feature_names": list(self.feature_names),
            "weights": [float(w) for w in self.weights],
            "bias": self.bias,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TrainedModel":
        return cls(
            weights=np.asarray(data["weights"], dtype=np.float64),
            bias=data["bias"],
            feature_names=tuple(data["feature_names"]),
        )


class LogisticRegressionTrainer:
    """
    Fits :class:`TrainedModel` instances and scores with the latest one.

    The trainer is a context manager; leaving the ``with`` block disposes the
    fitted model, which is how leave-one-out analysis scopes one model per
    iteration::

        with LogisticRegressionTrainer(config) as trainer:
            trainer.fit(X, y, feature_names)
            probs = trainer.predict(X_test)
    """

    def __init__(self, config: Optional[TrainingConfig] = None):
        self.config = config or TrainingConfig()
        self._model: Optional[TrainedModel] = None

    def __enter__(self) -> "LogisticRegressionTrainer":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.dispose()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def model(self) -> TrainedModel:
        if self._model is None:
            raise ModelNotTrained("Model not trained: call fit() first.")
        return self._model

    def is_trained(self) -> bool:
        return self._model is not None

    def dispose(self) -> None:
        """Release the fitted model and its weight buffers."""
        self._model = None

    # ------------------------------------------------------------------
    # Training
    # ------------------------------------------------------------------

    def fit(
        self,
        X: Any,
        y: Any,
        feature_names: Sequence[str],
        epochs: Optional[int] = None,
        on_epoch_end: Optional[EpochCallback] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> FitResult:
        """
        Train a fresh model on ``(X, y)``.

        Args:
            X: ``(n, k)`` feature matrix in ``feature_names`` order.
            y: ``n`` labels, each 0 or 1.
            feature_names: Column names, stored on the resulting model.
            epochs: Overrides ``config.epochs`` for this call.
            on_epoch_end: Called as ``on_epoch_end(epoch, logs)`` after every
                epoch with ``loss``, ``accuracy``, ``val_loss``,
                ``val_accuracy``.
            cancel_event: Checked between epochs; when set, training stops
                with :class:`AnalysisCancelled` and no model is stored.

        Returns:
            Final-epoch training and validation metrics.

        Raises:
            InvalidInput: Empty data, shape mismatch, non-finite features or
                labels other than 0/1.
            TrainingFailure: Loss or weights became non-finite.
        """
        cfg = self.config
        n_epochs = cfg.epochs if epochs is None else int(epochs)
        if n_epochs < 1:
            raise InvalidInput(f"epochs must be >= 1, got {n_epochs!r}.")
        X, y = self._validate(X, y, feature_names)

        n = X.shape[0]
        split_at = n
        if cfg.validation_split > 0:
            split_at = math.floor(round(n * (1.0 - cfg.validation_split), 9))
            if split_at <= 0 or split_at >= n:
                split_at = n
        X_fit, y_fit = X[:split_at], y[:split_at]
        X_val, y_val = X[split_at:], y[split_at:]
        n_fit, n_val = X_fit.shape[0], X_val.shape[0]

        rng = np.random.default_rng(cfg.seed)
        w = np.zeros(X.shape[1], dtype=np.float64)
        b = 0.0
        m_w = np.zeros_like(w)
        v_w = np.zeros_like(w)
        m_b = v_b = 0.0
        step = 0

        train_loss = train_acc = 0.0
        val_loss: Optional[float] = None
        val_acc: Optional[float] = None

        for epoch in range(n_epochs):
            if cancel_event is not None and cancel_event.is_set():
                raise AnalysisCancelled(f"Training cancelled at epoch {epoch}.")

            order = rng.permutation(n_fit)
            loss_sum = 0.0
            correct = 0.0
            for start in range(0, n_fit, cfg.batch_size):
                idx = order[start:start + cfg.batch_size]
                xb, yb = X_fit[idx], y_fit[idx]
                p = expit(xb @ w + b)
                m = len(idx)

                loss_sum += (binary_cross_entropy(p, yb) + cfg.l2 * float(w @ w)) * m
                correct += accuracy(p, yb) * m

                residual = p - yb
                g_w = xb.T @ residual / m + 2.0 * cfg.l2 * w
                g_b = float(np.mean(residual))

                step += 1
                m_w = _BETA_1 * m_w + (1.0 - _BETA_1) * g_w
                v_w = _BETA_2 * v_w + (1.0 - _BETA_2) * g_w ** 2
                m_b = _BETA_1 * m_b + (1.0 - _BETA_1) * g_b
                v_b = _BETA_2 * v_b + (1.0 - _BETA_2) * g_b ** 2
                lr_t = cfg.learning_rate * math.sqrt(1.0 - _BETA_2 ** step) / (1.0 - _BETA_1 ** step)
                w = w - lr_t * m_w / (np.sqrt(v_w) + _ADAM_EPSILON)
                b = b - lr_t * m_b / (math.sqrt(v_b) + _ADAM_EPSILON)

            train_loss = loss_sum / n_fit
            train_acc = correct / n_fit
            if not (math.isfinite(train_loss) and np.all(np.isfinite(w)) and math.isfinite(b)):
                raise TrainingFailure(
                    f"Training diverged at epoch {epoch}: loss={train_loss!r}."
                )

            if n_val:
                p_val = expit(X_val @ w + b)
                val_loss = binary_cross_entropy(p_val, y_val) + cfg.l2 * float(w @ w)
                val_acc = accuracy(p_val, y_val)

            logger.debug(
                "Epoch %d: loss = %.4f, val_loss = %s",
                epoch, train_loss, "n/a" if val_loss is None else f"{val_loss:.4f}",
            )
            if on_epoch_end is not None:
                on_epoch_end(epoch, {
                    "loss": train_loss,
                    "accuracy": train_acc,
                    "val_loss": val_loss,
                    "val_accuracy": val_acc,
                })

        self._model = TrainedModel(weights=w, bias=b, feature_names=tuple(feature_names))
        logger.info(
            "Trained on %d rows (%d held for validation) over %d epochs: "
            "loss=%.4f acc=%.3f",
            n_fit, n_val, n_epochs, train_loss, train_acc,
        )
        return FitResult(
            train_loss=train_loss,
            train_accuracy=train_acc,
            val_loss=val_loss,
            val_accuracy=val_acc,
            epochs=n_epochs,
            n_train=n_fit,
            n_val=n_val,
        )

    @staticmethod
    def _validate(X: Any, y: Any, feature_names: Sequence[str]) -> Tuple[np.ndarray, np.ndarray]:
        if len(feature_names) == 0:
            raise InvalidInput("At least one feature must be selected.")
        X = np.asarray(X, dtype=np.float64)
        y = np.asarray(y, dtype=np.float64).reshape(-1)
        if X.ndim != 2 or X.shape[0] == 0:
            raise InvalidInput(f"X must be a non-empty 2-D matrix, got shape {X.shape}.")
        if X.shape[0] != y.shape[0]:
            raise InvalidInput(f"X has {X.shape[0]} rows but y has {y.shape[0]} labels.")
        if X.shape[1] != len(feature_names):
            raise InvalidInput(
                f"X has {X.shape[1]} columns but {len(feature_names)} feature names."
            )
        if not np.all(np.isfinite(X)):
            raise InvalidInput("X contains NaN or infinite values.")
        if not np.all((y == 0.0) | (y == 1.0)):
            raise InvalidInput("Labels must be 0 or 1.")
        return X, y

    # ------------------------------------------------------------------
    # Scoring (delegates to the current TrainedModel)
    # ------------------------------------------------------------------

    def predict(self, X: Any) -> np.ndarray:
        return self.model.predict(X)

    def predict_one(self, features: Sequence[float]) -> float:
        return self.model.predict_one(features)

    def feature_importance(self) -> List[Tuple[str, float]]:
        return self.model.feature_importance()

    @property
    def feature_names(self) -> Tuple[str, ...]:
        return self.model.feature_names

