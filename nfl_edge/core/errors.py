"""Error taxonomy for the modeling pipeline.

Every failure raised by the core and the services derives from
:class:`EdgeModelError`.  Each error may carry a ``stage`` naming the
pipeline step that failed (``"split"``, ``"fit"``, ``"evaluate"``,
``"loo_baseline"``, ``"loo_fit"``, ``"loo_evaluate"``) so a caller can tell a
data problem from a numerical one without parsing messages.

The concrete classes also inherit from the closest built-in exception so code
that already catches ``ValueError`` (odds parsing) or ``ArithmeticError``
(numerical blow-ups) keeps working.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional


class EdgeModelError(Exception):
    """Base class for all pipeline errors."""

    def __init__(self, message: str, *, stage: Optional[str] = None):
        super().__init__(message)
        self.stage = stage

    def __str__(self) -> str:
        message = super().__str__()
        if self.stage:
            return f"[{self.stage}] {message}"
        return message


class InvalidInput(EdgeModelError, ValueError):
    """Empty dataset, no features selected, or an out-of-range parameter."""


class InsufficientData(EdgeModelError):
    """Too few records to train, split or run leave-one-out analysis."""


class InvalidSplit(InvalidInput, InsufficientData):
    """A train/test split cannot produce two non-empty partitions.

    Raised for fewer than two records or a test fraction outside ``(0, 1)``.
    Catchable as either :class:`InvalidInput` or :class:`InsufficientData`.
    """


class ModelNotTrained(EdgeModelError, RuntimeError):
    """Prediction or introspection requested before ``fit``."""


class TrainingFailure(EdgeModelError, ArithmeticError):
    """Loss, weights or predictions became non-finite during training."""


class AnalysisCancelled(EdgeModelError):
    """A long-running analysis was aborted between iterations."""


@contextmanager
def pipeline_stage(name: str) -> Iterator[None]:
    """Tag any :class:`EdgeModelError` escaping the block with ``name``.

    Errors that already carry a stage keep it (the innermost stage wins).
    The error is always re-raised.

    Example::

        with pipeline_stage("fit"):
            trainer.fit(X, y, names)
    """
    try:
        yield
    except EdgeModelError as exc:
        if exc.stage is None:
            exc.stage = name
        raise
