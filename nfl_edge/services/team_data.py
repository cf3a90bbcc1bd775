"""Static NFL reference data: divisions and stadium coordinates.

Team names are the full display names used by The Odds API and ESPN
(``"Kansas City Chiefs"``).  Coordinates are stadium latitude / longitude in
degrees; the Jets and Giants share MetLife, the Rams and Chargers share SoFi.
"""

from typing import Dict, Final, Optional, Tuple

DIVISIONS: Final[Dict[str, Tuple[str, ...]]] = {
    "AFC East": ("Buffalo Bills", "Miami Dolphins", "New England Patriots", "New York Jets"),
    "AFC North": ("Baltimore Ravens", "Cincinnati Bengals", "Cleveland Browns", "Pittsburgh Steelers"),
    "AFC South": ("Houston Texans", "Indianapolis Colts", "Jacksonville Jaguars", "Tennessee Titans"),
    "AFC West": ("Denver Broncos", "Kansas City Chiefs", "Las Vegas Raiders", "Los Angeles Chargers"),
    "NFC East": ("Dallas Cowboys", "New York Giants", "Philadelphia Eagles", "Washington Commanders"),
    "NFC North": ("Chicago Bears", "Detroit Lions", "Green Bay Packers", "Minnesota Vikings"),
    "NFC South": ("Atlanta Falcons", "Carolina Panthers", "New Orleans Saints", "Tampa Bay Buccaneers"),
    "NFC West": ("Arizona Cardinals", "Los Angeles Rams", "San Francisco 49ers", "Seattle Seahawks"),
}

STADIUMS: Final[Dict[str, Tuple[float, float]]] = {
    # AFC East
    "New England Patriots": (42.09, -71.26),
    "Buffalo Bills": (42.77, -78.79),
    "Miami Dolphins": (25.96, -80.24),
    "New York Jets": (40.81, -74.07),
    # AFC North
    "Baltimore Ravens": (39.28, -76.62),
    "Cincinnati Bengals": (39.10, -84.52),
    "Cleveland Browns": (41.51, -81.70),
    "Pittsburgh Steelers": (40.45, -80.02),
    # AFC South
    "Houston Texans": (29.68, -95.41),
    "Indianapolis Colts": (39.76, -86.16),
    "Jacksonville Jaguars": (30.32, -81.64),
    "Tennessee Titans": (36.17, -86.77),
    # AFC West
    "Denver Broncos": (39.74, -105.02),
    "Kansas City Chiefs": (39.05, -94.48),
    "Las Vegas Raiders": (36.09, -115.18),
    "Los Angeles Chargers": (33.95, -118.34),
    # NFC East
    "Dallas Cowboys": (32.75, -97.09),
    "New York Giants": (40.81, -74.07),
    "Philadelphia Eagles": (39.90, -75.17),
    "Washington Commanders": (38.91, -76.86),
    # NFC North
    "Chicago Bears": (41.86, -87.62),
    "Detroit Lions": (42.34, -83.05),
    "Green Bay Packers": (44.50, -88.06),
    "Minnesota Vikings": (44.97, -93.26),
    # NFC South
    "Atlanta Falcons": (33.76, -84.40),
    "Carolina Panthers": (35.23, -80.85),
    "New Orleans Saints": (29.95, -90.08),
    "Tampa Bay Buccaneers": (27.98, -82.50),
    # NFC West
    "Arizona Cardinals": (33.53, -112.26),
    "Los Angeles Rams": (33.95, -118.34),
    "San Francisco 49ers": (37.40, -121.97),
    "Seattle Seahawks": (47.60, -122.33),
}

_TEAM_DIVISION: Final[Dict[str, str]] = {
    team: division for division, teams in DIVISIONS.items() for team in teams
}


def division_of(team: str) -> Optional[str]:
    """Division name for ``team``, or None for an unknown name."""
    return _TEAM_DIVISION.get(team)


def stadium_location(team: str) -> Optional[Tuple[float, float]]:
    return STADIUMS.get(team)
