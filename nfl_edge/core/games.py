"""The historical / upcoming game record consumed by every pipeline stage.

A :class:`GameRecord` is produced by an external loader (CSV frame, live-odds
mapper) and is never mutated afterwards.  Core attributes (season, week,
teams, label) are typed fields; every other numeric attribute lives in the
read-only ``features`` mapping and is looked up by name.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, List, Mapping, Optional

from nfl_edge.core.errors import InvalidInput

#: Attributes that live on the record itself rather than in ``features``.
#: Any of them can still be selected as a model feature.
CORE_ATTRIBUTES = (
    "season",
    "week",
    "home_team",
    "away_team",
    "home_win",
    "date",
    "home_score",
    "away_score",
)


@dataclass(frozen=True)
class GameRecord:
    """One matchup, historical (labelled) or upcoming (``home_win is None``).

    Attributes:
        season: Season year, e.g. ``2024``.
        week: Week number within the season.
        home_team: Home team identifier.
        away_team: Away team identifier.
        home_win: ``1`` if the home team won, ``0`` otherwise; ``None`` for
            games that have not been played.
        features: Named numeric attributes (``spread``, ``total``,
            ``rest_days_home`` ... plus arbitrary extension keys).  Stored as
            a read-only mapping.
        date: Optional ISO kickoff date, informational only.
        home_score: Final home score, when known.
        away_score: Final away score, when known.
    """

    season: int
    week: int
    home_team: str
    away_team: str
    home_win: Optional[int] = None
    features: Mapping[str, Any] = field(default_factory=dict)
    date: Optional[str] = None
    home_score: Optional[float] = None
    away_score: Optional[float] = None

    def __post_init__(self) -> None:
        if self.home_win is not None and self.home_win not in (0, 1):
            raise InvalidInput(
                f"home_win must be 0 or 1, got {self.home_win!r} "
                f"({self.away_team} @ {self.home_team}, {self.season} wk {self.week})"
            )
        object.__setattr__(self, "features", MappingProxyType(dict(self.features)))

    @property
    def is_labelled(self) -> bool:
        return self.home_win is not None

    @property
    def sort_key(self) -> tuple:
        """``(season, week)``, the canonical chronological key."""
        return (self.season, self.week)

    def get(self, key: str, default: Any = None) -> Any:
        """Look up ``key`` in ``features`` first, then on the record itself."""
        if key in self.features:
            return self.features[key]
        if key in CORE_ATTRIBUTES:
            return getattr(self, key)
        return default

    def involves(self, team: str) -> bool:
        return team in (self.home_team, self.away_team)

    def won_by(self, team: str) -> Optional[bool]:
        """Whether ``team`` won this game; ``None`` when unplayed or not involved."""
        if self.home_win is None or not self.involves(team):
            return None
        if team == self.home_team:
            return self.home_win == 1
        return self.home_win == 0


def sort_chronologically(games: Iterable[GameRecord]) -> List[GameRecord]:
    """Return a new list ordered by ``(season, week)`` ascending.

    The sort is stable, so games sharing a week keep their input order.
    """
    return sorted(games, key=lambda g: g.sort_key)
