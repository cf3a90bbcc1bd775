"""
pandas DataFrame → GameRecord adapter.

Columns ``season``, ``week``, ``home_team`` and ``away_team`` are required.
``home_win`` is the label; where it is absent or blank and both scores are
present it is derived as ``home_score > away_score``.  ``date``,
``home_score`` and ``away_score`` map onto the record; every other column
becomes a named feature.  NaN cells are treated as missing, so the vectorizer
fills them with 0.

Usage::

    df = pd.read_csv("nfl_games.csv")
    games = games_from_frame(df)
"""

import logging
from typing import Any, Dict, List, Optional

import pandas as pd

from nfl_edge.core.errors import InvalidInput
from nfl_edge.core.games import GameRecord

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("season", "week", "home_team", "away_team")
_RECORD_COLUMNS = REQUIRED_COLUMNS + ("home_win", "date", "home_score", "away_score")


def _cell(value: Any) -> Any:
    """NaN / NaT / None → None; numpy scalars → Python scalars."""
    if value is None:
        return None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        # list-like cells
        return value
    return value.item() if hasattr(value, "item") else value


_LABEL_VALUES = {0: 0, 1: 1, "0": 0, "1": 1}


def _label(row: Dict[str, Any], position: int) -> Optional[int]:
    home_win = row.get("home_win")
    if home_win is not None:
        key = home_win.strip() if isinstance(home_win, str) else home_win
        try:
            return _LABEL_VALUES[key]
        except (KeyError, TypeError):
            raise InvalidInput(
                f"Row {position} has invalid home_win {home_win!r}; expected 0 or 1."
            ) from None
    home_score, away_score = row.get("home_score"), row.get("away_score")
    if home_score is not None and away_score is not None:
        return 1 if home_score > away_score else 0
    return None


def games_from_frame(df: pd.DataFrame) -> List[GameRecord]:
    """Convert each row of ``df`` into a :class:`GameRecord`.

    Raises:
        InvalidInput: A required column is missing, or a row has a blank
            required value or an invalid ``home_win``.
    """
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise InvalidInput(f"Game data is missing required column(s): {', '.join(missing)}.")

    feature_columns = [c for c in df.columns if c not in _RECORD_COLUMNS]
    games: List[GameRecord] = []
    for position, raw in enumerate(df.to_dict(orient="records")):
        row = {str(k): _cell(v) for k, v in raw.items()}
        blank = [c for c in REQUIRED_COLUMNS if row.get(c) is None]
        if blank:
            raise InvalidInput(f"Row {position} has no value for {', '.join(blank)}.")

        features = {
            str(c): row[str(c)] for c in feature_columns if row.get(str(c)) is not None
        }
        date = row.get("date")
        games.append(GameRecord(
            season=int(row["season"]),
            week=int(row["week"]),
            home_team=str(row["home_team"]),
            away_team=str(row["away_team"]),
            home_win=_label(row, position),
            features=features,
            date=None if date is None else str(date),
            home_score=row.get("home_score"),
            away_score=row.get("away_score"),
        ))

    logger.info(
        "Loaded %d games (%d labelled) with %d feature columns",
        len(games), sum(g.is_labelled for g in games), len(feature_columns),
    )
    return games
