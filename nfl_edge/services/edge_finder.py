"""
Price a scored matchup against a two-way moneyline market.

Given the model's home-win probability and the market prices for both sides,
each side gets its implied probability, the vig-free probability, expected
value and a fractional-Kelly stake.  The away side is priced with ``1 - p``
and the market reports its overround.  A matchup ``has_edge`` when either
side's EV clears the minimum edge threshold.

``best_odds`` does line shopping over bookmaker payloads shaped like The Odds
API ``/odds`` response::

    [{"title": "DraftKings",
      "markets": [{"key": "h2h",
                   "outcomes": [{"name": "Kansas City Chiefs", "price": -150}, ...]}]},
     ...]

All odds math is delegated to :mod:`nfl_edge.core.odds_math` and
:mod:`nfl_edge.core.kelly`.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional

from nfl_edge.config import BettingConfig
from nfl_edge.core.errors import InvalidInput
from nfl_edge.core.kelly import kelly_stake
from nfl_edge.core.odds_math import de_vig, expected_value, implied_probability, overround

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SidePrice:
    """One side of the market, priced with the model's probability."""

    american_odds: float
    model_probability: float
    implied_probability: float
    fair_probability: float       # vig removed
    expected_value: float
    kelly_stake: float


@dataclass(frozen=True)
class MarketEdge:
    home: SidePrice
    away: SidePrice
    has_edge: bool
    overround: float              # bookmaker margin on the two prices

    @property
    def best_side(self) -> Optional[str]:
        """``"home"`` / ``"away"`` for the higher-EV side with an edge, else None."""
        if not self.has_edge:
            return None
        return "home" if self.home.expected_value >= self.away.expected_value else "away"


@dataclass(frozen=True)
class BestPrice:
    bookmaker: str
    odds: float


def price_matchup(
    model_probability: float,
    home_odds: float,
    away_odds: float,
    bankroll: Optional[float] = None,
    kelly_multiplier: Optional[float] = None,
    min_ev_edge: Optional[float] = None,
) -> MarketEdge:
    """
    Compare a home-win probability with both sides of a moneyline.

    Args:
        model_probability: Model's home-win probability in ``[0, 1]``.
        home_odds: American price on the home team.
        away_odds: American price on the away team.
        bankroll, kelly_multiplier, min_ev_edge: Default to
            :class:`~nfl_edge.config.BettingConfig`.

    Raises:
        InvalidInput: Probability outside ``[0, 1]`` or an invalid price.

    Example::

        edge = price_matchup(0.60, +150, -170)
        edge.home.expected_value   → 0.50
        edge.has_edge              → True
    """
    defaults = BettingConfig()
    bankroll = defaults.bankroll if bankroll is None else bankroll
    kelly_multiplier = defaults.kelly_multiplier if kelly_multiplier is None else kelly_multiplier
    min_ev_edge = defaults.min_ev_edge if min_ev_edge is None else min_ev_edge

    if not (0.0 <= model_probability <= 1.0):
        raise InvalidInput(
            f"model_probability must be in [0, 1], got {model_probability!r}."
        )

    implied = [implied_probability(home_odds), implied_probability(away_odds)]
    fair = de_vig(implied)

    sides = []
    for odds, p, imp, fair_p in zip(
        (home_odds, away_odds),
        (model_probability, 1.0 - model_probability),
        implied,
        fair,
    ):
        sides.append(SidePrice(
            american_odds=odds,
            model_probability=p,
            implied_probability=imp,
            fair_probability=fair_p,
            expected_value=expected_value(p, odds),
            kelly_stake=kelly_stake(p, odds, bankroll, kelly_multiplier),
        ))
    home, away = sides

    has_edge = home.expected_value > min_ev_edge or away.expected_value > min_ev_edge
    if has_edge:
        logger.debug(
            "Edge found: home EV=%.3f away EV=%.3f (p=%.3f, %s/%s)",
            home.expected_value, away.expected_value, model_probability,
            home_odds, away_odds,
        )
    return MarketEdge(home=home, away=away, has_edge=has_edge, overround=overround(implied))


def best_odds(
    bookmakers: Iterable[Dict[str, Any]],
    market_key: str,
    outcome_name: str,
) -> Optional[BestPrice]:
    """Highest price offered for ``outcome_name`` in ``market_key``.

    Bookmakers without the market or the outcome are skipped.  On a tie the
    first bookmaker listed wins.  Returns None when no bookmaker quotes it.
    """
    best: Optional[BestPrice] = None
    for book in bookmakers:
        market = next(
            (m for m in book.get("markets", []) if m.get("key") == market_key), None
        )
        if market is None:
            continue
        outcome = next(
            (o for o in market.get("outcomes", []) if o.get("name") == outcome_name), None
        )
        if outcome is None or outcome.get("price") is None:
            continue
        price = float(outcome["price"])
        if best is None or price > best.odds:
            best = BestPrice(bookmaker=book.get("title", book.get("key", "")), odds=price)
    return best
