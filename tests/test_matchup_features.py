"""
Tests for mapping upcoming matchups onto the feature schema
Run with: pytest tests/test_matchup_features.py -v
"""

from datetime import datetime, timezone

import pytest

from nfl_edge.core.errors import InvalidInput
from nfl_edge.core.features import KNOWN_FEATURES, FeatureSpec, FeatureVectorizer
from nfl_edge.core.games import GameRecord
from nfl_edge.services.matchup_features import (
    estimate_rest_days,
    game_record_from_event,
    is_divisional_game,
    is_thursday_game,
    market_lines,
    recent_games,
    rolling_form,
    travel_miles,
    upcoming_game_record,
)
from nfl_edge.services.team_data import DIVISIONS, STADIUMS, division_of

KC = "Kansas City Chiefs"
LV = "Las Vegas Raiders"
BUF = "Buffalo Bills"


def _game(week, home, away, home_win, **features):
    return GameRecord(2024, week, home, away, home_win, features)


@pytest.fixture
def history():
    return [
        _game(1, KC, BUF, 1, rest_days_home=10, rest_days_away=7),   # KC win
        _game(2, LV, KC, 1, rest_days_home=7, rest_days_away=6),     # KC loss
        _game(3, KC, LV, 1, rest_days_home=0, rest_days_away=7),     # KC win, rest unknown
        _game(4, BUF, LV, 0),                                        # no KC
    ]


class TestTeamData:

    def test_every_team_has_division_and_stadium(self):
        teams = [t for members in DIVISIONS.values() for t in members]
        assert len(teams) == 32
        assert set(teams) == set(STADIUMS)

    def test_division_lookup(self):
        assert division_of(KC) == "AFC West"
        assert division_of("London Monarchs") is None


class TestHistoryEstimates:
    """Form and rest from recent games"""

    def test_recent_games_newest_first(self, history):
        assert [g.week for g in recent_games(KC, history, 2)] == [3, 2]

    def test_rolling_form(self, history):
        assert rolling_form(KC, history) == pytest.approx(2 / 3)
        assert rolling_form(LV, history) == pytest.approx(2 / 3)

    def test_rolling_form_without_history(self, history):
        assert rolling_form("Denver Broncos", history) == 0.5

    def test_rest_days_counts_missing_as_seven(self, history):
        # weeks 3, 2, 1 → 0 (→7), 6, 10
        assert estimate_rest_days(KC, history) == pytest.approx((7 + 6 + 10) / 3)
        # LV: week 4 has no rest value
        assert estimate_rest_days(LV, history) == pytest.approx((7 + 7 + 7) / 3)

    def test_rest_days_without_history(self):
        assert estimate_rest_days(KC, []) == 7.0


class TestMatchupFlags:

    def test_divisional(self):
        assert is_divisional_game(KC, LV)
        assert not is_divisional_game(KC, BUF)
        assert not is_divisional_game("Unknown", "Other")

    def test_thursday(self):
        assert is_thursday_game("2024-09-05T20:20:00Z")
        assert not is_thursday_game("2024-09-08T17:00:00Z")
        assert is_thursday_game(datetime(2024, 9, 5, 20, 0, tzinfo=timezone.utc))

    def test_bad_kickoff(self):
        with pytest.raises(InvalidInput):
            is_thursday_game("next thursday")

    def test_travel_miles(self):
        assert 1000 < travel_miles(KC, LV) < 1300
        assert travel_miles(KC, LV) == pytest.approx(travel_miles(LV, KC))
        assert travel_miles("New York Jets", "New York Giants") == 0.0
        assert travel_miles("Unknown", KC) == 0.0


class TestUpcomingGameRecord:
    """Label-less records scored through the same vectorizer"""

    def test_all_known_features_present(self, history):
        game = upcoming_game_record(KC, LV, "2024-09-05T20:20:00Z", history,
                                    spread=-7.5, total=47.5)
        assert not game.is_labelled
        assert set(KNOWN_FEATURES) <= set(game.features)
        assert game.get("spread") == -7.5
        assert game.get("divisional") == 1.0
        assert game.get("thursday_game") == 1.0
        assert game.get("international") == 0.0
        assert game.season == 2024

    def test_vectorizes_in_spec_order(self, history):
        game = upcoming_game_record(KC, LV, "2024-09-08T17:00:00Z", history, spread=-3.0)
        vec = FeatureVectorizer(FeatureSpec(["spread", "thursday_game", "unknown_key"]))
        assert vec.vectorize(game) == [-3.0, 0.0, 0.0]


EVENT = {
    "id": "abc123",
    "commence_time": "2024-09-05T20:20:00Z",
    "home_team": KC,
    "away_team": LV,
    "bookmakers": [{
        "key": "draftkings", "title": "DraftKings",
        "markets": [
            {"key": "spreads", "outcomes": [
                {"name": LV, "price": -110, "point": 7.5},
                {"name": KC, "price": -110, "point": -7.5},
            ]},
            {"key": "totals", "outcomes": [
                {"name": "Over", "price": -110, "point": 47.5},
                {"name": "Under", "price": -110, "point": 47.5},
            ]},
        ],
    }],
}


class TestOddsEvents:

    def test_market_lines(self):
        assert market_lines(EVENT) == (-7.5, 47.5)

    def test_market_lines_without_books(self):
        assert market_lines({"home_team": KC, "bookmakers": []}) == (0.0, 0.0)

    def test_record_from_event(self, history):
        game = game_record_from_event(EVENT, history)
        assert (game.home_team, game.away_team) == (KC, LV)
        assert game.get("spread") == -7.5
        assert game.get("total") == 47.5

    def test_event_missing_teams(self, history):
        with pytest.raises(InvalidInput):
            game_record_from_event({"commence_time": "2024-09-05T20:20:00Z"}, history)
