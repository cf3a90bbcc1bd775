"""Kelly criterion sizing: the single source of truth for stake math.

All functions here are **pure**: no I/O, no logging.

The full Kelly fraction for a win/loss bet paying ``b`` profit per unit is::

    f*  =  (b · p − q) / b        with q = 1 − p

It is clamped at zero (a negative fraction would mean betting the other
side) and then scaled by a fractional multiplier.  Quarter Kelly
(``0.25``) is the customary choice when the probability estimate is itself
uncertain; the base functions accept any multiplier.
"""

from __future__ import annotations

from typing import Final

from nfl_edge.core.errors import InvalidInput
from nfl_edge.core.odds_math import american_to_decimal

#: Fractional multiplier used by the pricing service unless overridden.
QUARTER_KELLY: Final[float] = 0.25


def kelly_fraction(probability: float, american_odds: int | float) -> float:
    """Full Kelly fraction of bankroll, clamped to ``>= 0``.

    Examples::

        kelly_fraction(0.60, +150) → 0.3333
        kelly_fraction(0.45, -110) → 0.0     (negative EV → no bet)

    Raises:
        InvalidInput: If ``probability`` is outside ``[0, 1]``.
    """
    if not (0.0 <= probability <= 1.0):
        raise InvalidInput(f"probability must be in [0, 1], got {probability!r}.")
    b = american_to_decimal(american_odds) - 1.0
    q = 1.0 - probability
    full_kelly = (b * probability - q) / b
    return max(0.0, full_kelly)


def kelly_stake(
    probability: float,
    american_odds: int | float,
    bankroll: float,
    fraction: float = 1.0,
) -> float:
    """Dollar stake: ``max(0, f*) · bankroll · fraction``.

    Returns 0 whenever the bet's expected value is not positive, because
    ``f* = EV / b`` shares the sign of the EV.

    Example::

        kelly_stake(0.60, +150, 1000)        → 333.33
        kelly_stake(0.60, +150, 1000, 0.25)  →  83.33

    Raises:
        InvalidInput: If ``bankroll`` or ``fraction`` is negative.
    """
    if bankroll < 0.0:
        raise InvalidInput(f"bankroll must be >= 0, got {bankroll!r}.")
    if fraction < 0.0:
        raise InvalidInput(f"fraction must be >= 0, got {fraction!r}.")
    return kelly_fraction(probability, american_odds) * bankroll * fraction
