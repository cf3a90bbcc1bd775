"""Odds mathematics: conversion, vig removal and expected value.

Every function here is **pure**: no I/O, no logging, no side effects.
Import from this module; never reimplement odds conversion locally.

Design decisions
----------------
* American odds are validated to ``|odds| >= 100``.  Values in between are
  not representable prices and usually mean a parsing error upstream.
* Vig is removed by proportional normalisation: each implied probability is
  divided by the market's total, which preserves the ratios between outcomes
  and works for any number of mutually exclusive outcomes.
* Expected value is quoted per unit staked: ``+0.05`` means a 5% expected
  profit on the stake.
"""

from __future__ import annotations

import math
from typing import Final, List, Literal, Sequence

from nfl_edge.core.errors import InvalidInput

OddsFormat = Literal["american", "decimal"]

#: American-odds magnitude floor.
_MIN_ODDS_MAGNITUDE: Final[int] = 100


# ---------------------------------------------------------------------------
# Odds conversion
# ---------------------------------------------------------------------------


def american_to_decimal(american: int | float) -> float:
    """Convert American odds to decimal (European) format.

    Decimal odds are the total payout per unit staked, stake included::

        american_to_decimal(-110) → 1.9091   (risk 110 to win 100)
        american_to_decimal(+150) → 2.5000   (risk 100 to win 150)

    Raises:
        InvalidInput: If ``|american| < 100``.
    """
    if abs(american) < _MIN_ODDS_MAGNITUDE:
        raise InvalidInput(
            f"Invalid American odds {american!r}: magnitude must be >= 100."
        )
    if american > 0:
        return american / 100.0 + 1.0
    return 100.0 / abs(american) + 1.0


def decimal_to_american(decimal_odds: float) -> int:
    """Convert decimal odds to the nearest American integer.

    Values ``>= 2.0`` map to positive (underdog) prices, values below to
    negative (favourite) prices.  Ties round half up (``-110.5 → -110``,
    ``112.5 → 113``).

    Raises:
        InvalidInput: If ``decimal_odds <= 1.0`` (no payout beyond the stake).
    """
    if decimal_odds <= 1.0:
        raise InvalidInput(f"Decimal odds {decimal_odds!r} must be > 1.0.")
    if decimal_odds >= 2.0:
        return math.floor((decimal_odds - 1.0) * 100 + 0.5)
    return math.floor(-100.0 / (decimal_odds - 1.0) + 0.5)


def implied_probability(odds: int | float, odds_format: OddsFormat = "american") -> float:
    """Raw (vig-inclusive) implied probability, ``1 / decimal_odds``.

    Examples::

        implied_probability(-110)             → 0.5238
        implied_probability(2.5, "decimal")   → 0.4000
    """
    if odds_format == "decimal":
        if odds < 1.0:
            raise InvalidInput(f"Decimal odds {odds!r} must be >= 1.0.")
        decimal = float(odds)
    elif odds_format == "american":
        decimal = american_to_decimal(odds)
    else:
        raise InvalidInput(f"Unknown odds format {odds_format!r}.")
    return 1.0 / decimal


# ---------------------------------------------------------------------------
# Vig removal
# ---------------------------------------------------------------------------


def de_vig(probabilities: Sequence[float]) -> List[float]:
    """Normalise implied probabilities of exclusive outcomes to sum to 1.

    Example::

        de_vig([0.5238, 0.5238]) → [0.5, 0.5]

    Raises:
        InvalidInput: If the list is empty, contains a negative value, or
            sums to zero.
    """
    if not probabilities:
        raise InvalidInput("de_vig needs at least one probability.")
    if any(p < 0.0 for p in probabilities):
        raise InvalidInput(f"Implied probabilities must be >= 0, got {list(probabilities)!r}.")
    total = sum(probabilities)
    if total <= 0.0:
        raise InvalidInput("Implied probabilities sum to zero.")
    return [p / total for p in probabilities]


def overround(probabilities: Sequence[float]) -> float:
    """Bookmaker margin: ``sum(implied) - 1`` (``0.0476`` for -110/-110)."""
    return sum(probabilities) - 1.0


# ---------------------------------------------------------------------------
# Expected value
# ---------------------------------------------------------------------------


def expected_value(true_probability: float, american_odds: int | float) -> float:
    """Expected profit per unit staked at ``american_odds``.

    ``EV = p · (decimal − 1) − (1 − p)``.  Positive means the price pays more
    than the probability warrants.

    Example::

        expected_value(0.60, +150) → 0.50
    """
    payout = american_to_decimal(american_odds) - 1.0
    return true_probability * payout - (1.0 - true_probability)
