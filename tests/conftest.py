"""Shared pytest fixtures for MLB preview agent tests."""

import pytest

from mlb_preview_agent.agents.stats_agent.models import TeamIdentity
from mlb_preview_agent.monitoring import configure_logging

GIANTS_ID = 137
DODGERS_ID = 119


@pytest.fixture(autouse=True)
def setup_test_logging():
    """Configure structlog for test output."""
    configure_logging("development")


@pytest.fixture
def team():
    return TeamIdentity(id=GIANTS_ID, name="San Francisco Giants", short_name="Giants", abbreviation="SF")


def make_final_game(game_date: str, home_id: int, home_score: int, away_id: int, away_score: int) -> dict:
    """Completed schedule record in the MLB Stats API shape."""
    return {
        "gamePk": int(game_date[:10].replace("-", "")) + home_id,
        "gameDate": game_date,
        "status": {"abstractGameState": "Final", "detailedState": "Final"},
        "teams": {
            "home": {"team": {"id": home_id}, "score": home_score},
            "away": {"team": {"id": away_id}, "score": away_score},
        },
    }


@pytest.fixture
def scheduled_game():
    """Giants at home to the Dodgers, records 45-42 and 52-35."""
    return {
        "gamePk": 745123,
        "gameDate": "2025-07-04T23:05:00Z",
        "officialDate": "2025-07-04",
        "gameType": "R",
        "gameNumber": 1,
        "gamesInSeries": 3,
        "seriesGameNumber": 1,
        "seriesDescription": "Regular Season",
        "status": {"abstractGameState": "Preview", "detailedState": "Scheduled"},
        "venue": {"id": 2395, "name": "Oracle Park"},
        "teams": {
            "home": {
                "team": {"id": GIANTS_ID, "name": "San Francisco Giants"},
                "leagueRecord": {"wins": 45, "losses": 42, "pct": ".517"},
                "probablePitcher": {"id": 657277, "fullName": "Logan Webb"},
            },
            "away": {
                "team": {"id": DODGERS_ID, "name": "Los Angeles Dodgers"},
                "leagueRecord": {"wins": 52, "losses": 35, "pct": ".598"},
                "probablePitcher": {"id": 808967, "fullName": "Yoshinobu Yamamoto"},
            },
        },
    }


def make_team_stats(ops: str = ".720", era: str = "3.85", wins: int = 45, losses: int = 42) -> dict:
    """/teams/{id}/stats response with hitting, pitching and fielding groups."""
    return {
        "stats": [
            {
                "group": {"displayName": "hitting"},
                "splits": [{"stat": {
                    "gamesPlayed": 87, "runs": 383, "homeRuns": 98, "avg": ".247",
                    "obp": ".315", "slg": ".405", "ops": ops, "stolenBases": 41,
                }}],
            },
            {
                "group": {"displayName": "pitching"},
                "splits": [{"stat": {
                    "wins": wins, "losses": losses, "era": era, "whip": "1.24",
                    "strikeOuts": 780, "homeRuns": 88, "baseOnBalls": 260, "saves": 24,
                }}],
            },
            {
                "group": {"displayName": "fielding"},
                "splits": [{"stat": {"errors": 41, "fielding": ".986", "doublePlays": 71}}],
            },
        ]
    }


@pytest.fixture
def giants_stats():
    return make_team_stats(ops=".720", era="3.60")


@pytest.fixture
def dodgers_stats():
    return make_team_stats(ops=".790", era="3.95", wins=52, losses=35)


@pytest.fixture
def recent_games():
    """Ten Giants games, most recent first: W, W, L, then alternating."""
    scores = [(5, 2), (4, 3), (1, 6), (3, 2), (2, 7), (6, 1), (0, 4), (8, 3), (2, 5), (7, 6)]
    return [
        make_final_game(f"2025-07-{20 - i:02d}T02:05:00Z", GIANTS_ID, own, DODGERS_ID, opp)
        for i, (own, opp) in enumerate(scores)
    ]
