"""Shared fixtures: synthetic game collections."""

import pytest

from nfl_edge.core.games import GameRecord

TEAMS = [
    ("Kansas City Chiefs", "Las Vegas Raiders"),
    ("Buffalo Bills", "Miami Dolphins"),
    ("Dallas Cowboys", "New York Giants"),
    ("Green Bay Packers", "Chicago Bears"),
]


def _linear_games(n, season_length=17, first_season=2015):
    """Games whose label is a deterministic function of the spread.

    spread = ((i * 7) % 21) - 10, home_win = spread < 0, in chronological
    order of ``i``.
    """
    games = []
    for i in range(n):
        spread = ((i * 7) % 21) - 10
        home, away = TEAMS[i % len(TEAMS)]
        games.append(GameRecord(
            season=first_season + i // season_length,
            week=i % season_length + 1,
            home_team=home,
            away_team=away,
            home_win=1 if spread < 0 else 0,
            features={"spread": spread, "total": 44.5 + (i % 5)},
        ))
    return games


@pytest.fixture
def make_games():
    return _linear_games


@pytest.fixture
def linear_games():
    return _linear_games(100)
