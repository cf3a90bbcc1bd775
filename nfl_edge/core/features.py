"""Feature selection and vectorization.

The :class:`FeatureSpec` order is the contract between the vectorizer, the
trainer and leave-one-out analysis: column ``i`` of every matrix built from a
spec is ``spec[i]``, and a trained model's coefficients follow the same order.

Missing values
--------------
A feature that is absent from a record, or present but not a finite real
number, is encoded as the vectorizer's ``fill_value`` (``0.0``).  "Unknown"
and "literally zero" are therefore indistinguishable downstream.  Historical
datasets and live matchup mappers both rely on this fallback, so it is part of
the interface rather than an error path.
"""

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass
from typing import Any, Final, Iterable, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from nfl_edge.core.errors import InvalidInput
from nfl_edge.core.games import GameRecord

#: Features selected when the caller expresses no preference.
DEFAULT_FEATURES: Final[Tuple[str, ...]] = (
    "spread",
    "total",
    "rest_days_home",
    "rest_days_away",
    "rolling_form_home",
    "rolling_form_away",
)

#: Every feature a standard historical CSV provides.
KNOWN_FEATURES: Final[Tuple[str, ...]] = DEFAULT_FEATURES + (
    "divisional",
    "thursday_game",
    "international",
    "travel_miles",
)

#: Value substituted for absent or non-numeric features.
MISSING_FEATURE_VALUE: Final[float] = 0.0


class FeatureSpec(Sequence[str]):
    """Ordered, de-duplicated, non-empty list of feature keys.

    Duplicates are dropped keeping the first occurrence, so
    ``FeatureSpec(["spread", "total", "spread"])`` has two columns.
    """

    __slots__ = ("_keys",)

    def __init__(self, keys: Iterable[str]):
        seen = set()
        ordered = []
        for key in keys:
            if key not in seen:
                seen.add(key)
                ordered.append(key)
        if not ordered:
            raise InvalidInput("At least one feature must be selected.")
        self._keys: Tuple[str, ...] = tuple(ordered)

    @classmethod
    def default(cls) -> "FeatureSpec":
        return cls(DEFAULT_FEATURES)

    @property
    def keys(self) -> Tuple[str, ...]:
        return self._keys

    def __getitem__(self, index):
        return self._keys[index]

    def __len__(self) -> int:
        return len(self._keys)

    def __iter__(self) -> Iterator[str]:
        return iter(self._keys)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, FeatureSpec):
            return self._keys == other._keys
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._keys)

    def __repr__(self) -> str:
        return f"FeatureSpec({list(self._keys)!r})"


@dataclass(frozen=True)
class Dataset:
    """Design matrix ``X`` (rows = games, columns = spec order) and labels ``y``."""

    X: np.ndarray
    y: np.ndarray
    feature_names: Tuple[str, ...]

    def __len__(self) -> int:
        return int(self.X.shape[0])


def coerce_feature(value: Any, fill_value: float = MISSING_FEATURE_VALUE) -> float:
    """Return ``value`` as a float, or ``fill_value`` if it is not a finite real.

    Bools and numpy scalars count as numbers; strings, ``None``, NaN and
    infinities do not.
    """
    if isinstance(value, numbers.Real):
        as_float = float(value)
        if math.isfinite(as_float):
            return as_float
    return fill_value


class FeatureVectorizer:
    """Turns :class:`GameRecord` objects into fixed-order numeric vectors.

    Args:
        spec: The feature order to emit.
        fill_value: Substitute for absent or non-numeric features.  Keep the
            default of ``0.0`` unless every consumer of the resulting vectors
            agrees on another value.
    """

    def __init__(self, spec: FeatureSpec, fill_value: float = MISSING_FEATURE_VALUE):
        self.spec = spec
        self.fill_value = fill_value

    def vectorize(self, game: GameRecord) -> List[float]:
        return [coerce_feature(game.get(key), self.fill_value) for key in self.spec]

    def label(self, game: GameRecord) -> int:
        if game.home_win is None:
            raise InvalidInput(
                f"Game {game.away_team} @ {game.home_team} "
                f"({game.season} wk {game.week}) has no home_win label."
            )
        return game.home_win

    def matrix(self, games: Sequence[GameRecord]) -> np.ndarray:
        """Feature matrix only; labels are not required."""
        rows = [self.vectorize(g) for g in games]
        return np.asarray(rows, dtype=np.float64).reshape(len(rows), len(self.spec))

    def dataset(self, games: Sequence[GameRecord]) -> Dataset:
        """Feature matrix plus labels for labelled games.

        Raises:
            InvalidInput: If ``games`` is empty or any game lacks a label.
        """
        if not games:
            raise InvalidInput("Cannot build a dataset from zero games.")
        X = self.matrix(games)
        y = np.asarray([self.label(g) for g in games], dtype=np.float64)
        return Dataset(X=X, y=y, feature_names=self.spec.keys)


def build_dataset(
    games: Sequence[GameRecord],
    features: Iterable[str],
    fill_value: Optional[float] = None,
) -> Dataset:
    """Convenience wrapper: vectorize ``games`` over ``features``."""
    spec = features if isinstance(features, FeatureSpec) else FeatureSpec(features)
    vectorizer = FeatureVectorizer(
        spec, MISSING_FEATURE_VALUE if fill_value is None else fill_value
    )
    return vectorizer.dataset(games)
