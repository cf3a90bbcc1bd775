"""Train/test split policies.

Two strategies partition a game collection into disjoint train and test sets:

1. **Chronological** (``"time-based"``): sort by ``(season, week)`` and hold
   out the most recent games.  This mirrors deployment: the model always
   predicts games that happen after everything it was trained on.
2. **Shuffled** (``"random"``): permute, then hold out the tail.  With a
   seed the permutation comes from :class:`LinearCongruentialGenerator`, so
   the same seed, input order and length give the same split in any
   implementation language.  Without a seed numpy's default generator is used.

In both cases the test set is the last ``ceil(n * test_size)`` records of the
ordered sequence and the train set is everything before it.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Final, List, Optional, Sequence, Tuple, TypeVar, Union

import numpy as np

from nfl_edge.core.errors import InvalidSplit
from nfl_edge.core.games import GameRecord, sort_chronologically

T = TypeVar("T")

# ---------------------------------------------------------------------------
# Seeded PRNG
# ---------------------------------------------------------------------------

#: Numerical Recipes LCG parameters: state' = (A * state + C) mod 2**32.
LCG_MULTIPLIER: Final[int] = 1664525
LCG_INCREMENT: Final[int] = 1013904223
LCG_MODULUS: Final[int] = 2 ** 32

#: Default share of games held out for testing.
DEFAULT_TEST_SIZE: Final[float] = 0.2


class LinearCongruentialGenerator:
    """Portable seeded PRNG used for reproducible shuffles.

    Algorithm (all integer arithmetic)::

        state_0   = seed mod 2**32
        state_k+1 = (1664525 * state_k + 1013904223) mod 2**32
        u_k+1     = state_k+1 / 2**32            # uniform in [0, 1)

    Every language with 64-bit integers reproduces the exact sequence.
    """

    def __init__(self, seed: int):
        self.state = int(seed) % LCG_MODULUS

    def next_int(self) -> int:
        self.state = (LCG_MULTIPLIER * self.state + LCG_INCREMENT) % LCG_MODULUS
        return self.state

    def random(self) -> float:
        return self.next_int() / LCG_MODULUS


def seeded_permutation(n: int, seed: int) -> List[int]:
    """Fisher-Yates permutation of ``range(n)`` driven by the LCG.

    For ``i`` from ``n - 1`` down to ``1``: draw ``u``, set
    ``j = floor(u * (i + 1))`` and swap positions ``i`` and ``j``.
    """
    rng = LinearCongruentialGenerator(seed)
    order = list(range(n))
    for i in range(n - 1, 0, -1):
        j = int(rng.random() * (i + 1))
        order[i], order[j] = order[j], order[i]
    return order


# ---------------------------------------------------------------------------
# Split policies
# ---------------------------------------------------------------------------


class SplitMethod(str, Enum):
    TIME_BASED = "time-based"
    RANDOM = "random"


@dataclass(frozen=True)
class SplitResult:
    """Disjoint train/test partition of the input games."""

    train: Tuple[GameRecord, ...]
    test: Tuple[GameRecord, ...]
    method: SplitMethod
    seed: Optional[int] = None

    def __iter__(self):
        return iter((self.train, self.test))


def holdout_count(n: int, test_size: float) -> int:
    """Number of held-out records, ``ceil(n * test_size)``.

    Raises:
        InvalidSplit: If ``n < 2``, ``test_size`` is outside ``(0, 1)``, or
            the cut would leave the training set empty.
    """
    if n < 2:
        raise InvalidSplit(f"Need at least 2 games to split, got {n}.", stage="split")
    if not (0.0 < test_size < 1.0):
        raise InvalidSplit(
            f"test_size must be in (0, 1), got {test_size!r}.", stage="split"
        )
    # Round away float noise first: 10 * 0.3 is 3.0000000000000004.
    count = math.ceil(round(n * test_size, 9))
    if count >= n:
        raise InvalidSplit(
            f"test_size={test_size} holds out {count} of {n} games, "
            "leaving no training data.",
            stage="split",
        )
    return count


def _cut(ordered: Sequence[T], test_size: float) -> Tuple[Tuple[T, ...], Tuple[T, ...]]:
    count = holdout_count(len(ordered), test_size)
    boundary = len(ordered) - count
    return tuple(ordered[:boundary]), tuple(ordered[boundary:])


def chronological_split(
    games: Sequence[GameRecord], test_size: float = DEFAULT_TEST_SIZE
) -> SplitResult:
    """Train on older games, test on the most recent ``ceil(n * test_size)``."""
    train, test = _cut(sort_chronologically(games), test_size)
    return SplitResult(train=train, test=test, method=SplitMethod.TIME_BASED)


def shuffled_split(
    games: Sequence[GameRecord],
    test_size: float = DEFAULT_TEST_SIZE,
    seed: Optional[int] = None,
) -> SplitResult:
    """Shuffle, then hold out the tail.

    Args:
        games: Records in caller order; the order matters for reproducibility.
        test_size: Fraction of games held out, in ``(0, 1)``.
        seed: When given, the permutation is :func:`seeded_permutation` and is
            fully reproducible.  When ``None`` a fresh numpy generator is used.
    """
    n = len(games)
    holdout_count(n, test_size)
    if seed is None:
        order = np.random.default_rng().permutation(n).tolist()
    else:
        order = seeded_permutation(n, seed)
    train, test = _cut([games[i] for i in order], test_size)
    return SplitResult(train=train, test=test, method=SplitMethod.RANDOM, seed=seed)


def split_games(
    games: Sequence[GameRecord],
    method: Union[SplitMethod, str] = SplitMethod.TIME_BASED,
    test_size: float = DEFAULT_TEST_SIZE,
    seed: Optional[int] = None,
) -> SplitResult:
    """Dispatch to the split policy named by ``method``.

    ``seed`` is ignored for the chronological policy.
    """
    try:
        method = SplitMethod(method)
    except ValueError:
        raise InvalidSplit(
            f"Unknown split method {method!r}; expected 'time-based' or 'random'.",
            stage="split",
        ) from None
    if method is SplitMethod.TIME_BASED:
        return chronological_split(games, test_size)
    return shuffled_split(games, test_size, seed)
