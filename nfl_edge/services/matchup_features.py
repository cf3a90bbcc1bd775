"""
Map an upcoming matchup onto the historical feature schema.

Live markets only give teams, kickoff time and lines.  The remaining
features are estimated from the historical games a model was trained on:

============================  =============================================
Feature                       Estimate
============================  =============================================
``spread`` / ``total``        home spread point / first totals point
``rest_days_home`` / ``_away``  mean rest over the team's last 10 games
                              (missing or 0 counted as 7; 7 with no history)
``rolling_form_home`` / ``_away``  win share of the team's last 5 games
                              (0.5 with no history)
``divisional``                1 when both teams share a division
``thursday_game``             1 when kickoff (UTC) falls on a Thursday
``international``             always 0
``travel_miles``              great-circle distance between stadiums
                              (0 when either team is unknown)
============================  =============================================

The result is a label-less :class:`~nfl_edge.core.games.GameRecord`, so the
same :class:`~nfl_edge.core.features.FeatureVectorizer` that built the
training matrix builds the scoring vector.
"""

import logging
import math
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from nfl_edge.core.errors import InvalidInput
from nfl_edge.core.games import GameRecord
from nfl_edge.services.team_data import division_of, stadium_location

logger = logging.getLogger(__name__)

FORM_LOOKBACK = 5
REST_LOOKBACK = 10
DEFAULT_REST_DAYS = 7.0
DEFAULT_FORM = 0.5
EARTH_RADIUS_MILES = 3959.0

Kickoff = Union[str, datetime]


def recent_games(team: str, history: Iterable[GameRecord], count: int) -> List[GameRecord]:
    """The team's ``count`` most recent games, newest first."""
    played = [g for g in history if g.involves(team)]
    played.sort(key=lambda g: g.sort_key, reverse=True)
    return played[:count]


def rolling_form(team: str, history: Iterable[GameRecord], lookback: int = FORM_LOOKBACK) -> float:
    games = recent_games(team, history, lookback)
    if not games:
        return DEFAULT_FORM
    wins = sum(1 for g in games if g.won_by(team))
    return wins / len(games)


def estimate_rest_days(
    team: str, history: Iterable[GameRecord], lookback: int = REST_LOOKBACK
) -> float:
    games = recent_games(team, history, lookback)
    if not games:
        return DEFAULT_REST_DAYS
    total = 0.0
    for game in games:
        key = "rest_days_home" if game.home_team == team else "rest_days_away"
        rest = game.get(key)
        # 0 and missing both mean "unknown"
        total += float(rest) if rest else DEFAULT_REST_DAYS
    return total / len(games)


def is_divisional_game(home_team: str, away_team: str) -> bool:
    division = division_of(home_team)
    return division is not None and division == division_of(away_team)


def parse_kickoff(kickoff: Kickoff) -> datetime:
    """ISO-8601 string (``Z`` suffix allowed) or datetime → aware UTC datetime."""
    if isinstance(kickoff, datetime):
        moment = kickoff
    else:
        try:
            moment = datetime.fromisoformat(str(kickoff).replace("Z", "+00:00"))
        except ValueError:
            raise InvalidInput(f"Unparseable kickoff time {kickoff!r}.") from None
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def is_thursday_game(kickoff: Kickoff) -> bool:
    return parse_kickoff(kickoff).weekday() == 3


def haversine_miles(a: Tuple[float, float], b: Tuple[float, float]) -> float:
    lat1, lng1 = map(math.radians, a)
    lat2, lng2 = map(math.radians, b)
    d_lat = lat2 - lat1
    d_lng = lng2 - lng1
    h = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lng / 2) ** 2
    return EARTH_RADIUS_MILES * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def travel_miles(away_team: str, home_team: str) -> float:
    """Distance the away team travels; 0 when either stadium is unknown."""
    away = stadium_location(away_team)
    home = stadium_location(home_team)
    if away is None or home is None:
        return 0.0
    return haversine_miles(away, home)


def estimate_features(
    home_team: str,
    away_team: str,
    kickoff: Kickoff,
    history: Sequence[GameRecord],
    spread: float = 0.0,
    total: float = 0.0,
) -> Dict[str, float]:
    """Every known feature for one upcoming matchup."""
    return {
        "spread": float(spread),
        "total": float(total),
        "rest_days_home": estimate_rest_days(home_team, history),
        "rest_days_away": estimate_rest_days(away_team, history),
        "rolling_form_home": rolling_form(home_team, history),
        "rolling_form_away": rolling_form(away_team, history),
        "divisional": 1.0 if is_divisional_game(home_team, away_team) else 0.0,
        "thursday_game": 1.0 if is_thursday_game(kickoff) else 0.0,
        "international": 0.0,
        "travel_miles": travel_miles(away_team, home_team),
    }


def upcoming_game_record(
    home_team: str,
    away_team: str,
    kickoff: Kickoff,
    history: Sequence[GameRecord],
    spread: float = 0.0,
    total: float = 0.0,
    season: Optional[int] = None,
    week: int = 0,
) -> GameRecord:
    """
    Build an unlabelled :class:`GameRecord` for a game not yet played.

    Args:
        season: Defaults to the kickoff year.
        week: Unknown for live events, so 0 by default.  Select ``week`` as
            a feature only when the caller supplies it.
    """
    moment = parse_kickoff(kickoff)
    return GameRecord(
        season=moment.year if season is None else season,
        week=week,
        home_team=home_team,
        away_team=away_team,
        home_win=None,
        features=estimate_features(home_team, away_team, moment, history, spread, total),
        date=moment.isoformat(),
    )


def market_lines(event: Dict[str, Any]) -> Tuple[float, float]:
    """``(home spread, total)`` from the first bookmaker of an Odds API event.

    Missing markets read as 0.
    """
    books = event.get("bookmakers") or []
    if not books:
        return 0.0, 0.0
    markets = {m.get("key"): m for m in books[0].get("markets", [])}

    spread = 0.0
    for outcome in markets.get("spreads", {}).get("outcomes", []):
        if outcome.get("name") == event.get("home_team"):
            spread = float(outcome.get("point") or 0.0)
            break

    total = 0.0
    total_outcomes = markets.get("totals", {}).get("outcomes", [])
    if total_outcomes:
        total = float(total_outcomes[0].get("point") or 0.0)
    return spread, total


def game_record_from_event(event: Dict[str, Any], history: Sequence[GameRecord]) -> GameRecord:
    """Map an Odds API event (``home_team``, ``away_team``, ``commence_time``,
    ``bookmakers``) to an unlabelled :class:`GameRecord`."""
    try:
        home_team = event["home_team"]
        away_team = event["away_team"]
        kickoff = event["commence_time"]
    except KeyError as exc:
        raise InvalidInput(f"Odds event is missing {exc.args[0]!r}.") from None
    spread, total = market_lines(event)
    logger.debug(
        "Mapping %s @ %s (spread=%s total=%s) from %d historical games",
        away_team, home_team, spread, total, len(history),
    )
    return upcoming_game_record(home_team, away_team, kickoff, history, spread, total)
