"""Pydantic models for the raw data gathered for one game preview.

Upstream records are kept as the JSON the MLB Stats API returned: every field
is treated as optional, and the formatter is responsible for defaulting them.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict


class TeamIdentity(BaseModel):
    """The team the previews are written for.

    Attributes:
        id: MLB Stats API team id (e.g. 137)
        name: Full name (e.g. "San Francisco Giants")
        short_name: Club name used in prose (e.g. "Giants")
        abbreviation: Scoreboard abbreviation (e.g. "SF")
    """

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    short_name: str
    abbreviation: str

    @classmethod
    def from_settings(cls, settings) -> "TeamIdentity":
        return cls(
            id=settings.team_id,
            name=settings.team_name,
            short_name=settings.team_short_name,
            abbreviation=settings.team_abbreviation,
        )

    @property
    def aliases(self) -> list[str]:
        """Lowercase names the analysis text may use for this team."""
        return [self.short_name.lower(), self.abbreviation.lower()]


class ProbablePitchers(BaseModel):
    """Probable starters by side, as {id, fullName} person records."""

    model_config = ConfigDict(frozen=True)

    home: dict[str, Any] | None = None
    away: dict[str, Any] | None = None


class GameDataBundle(BaseModel):
    """Everything fetched for one fixture, before formatting.

    Mandatory fields are always present (possibly empty). Best-effort fields
    (`weather`, injuries, pitcher stats) are None when their fetch failed or
    returned nothing.

    Attributes:
        game: Schedule record for the fixture
        opponent: Opponent's team record from the fixture ({id, name, ...})
        is_home_game: True when the team of interest is the home side
        self_stats / opponent_stats: /teams/{id}/stats responses
        self_recent_games / opponent_recent_games: Final games, most recent first
        head_to_head: Season games between the two teams
        self_roster / opponent_roster: Active roster responses
        probable_pitchers: Starters resolved from the live feed or schedule
        home_pitcher_stats / away_pitcher_stats: /people/{id}/stats responses
        weather: gameData.weather from the live feed
        self_injuries / opponent_injuries: Injury reports (see get_injury_report)
    """

    model_config = ConfigDict(frozen=True)

    game: dict[str, Any]
    opponent: dict[str, Any]
    is_home_game: bool
    self_stats: dict[str, Any] | None = None
    opponent_stats: dict[str, Any] | None = None
    self_recent_games: list[dict[str, Any]] = []
    opponent_recent_games: list[dict[str, Any]] = []
    head_to_head: list[dict[str, Any]] = []
    self_roster: dict[str, Any] | None = None
    opponent_roster: dict[str, Any] | None = None
    probable_pitchers: ProbablePitchers = ProbablePitchers()
    home_pitcher_stats: dict[str, Any] | None = None
    away_pitcher_stats: dict[str, Any] | None = None
    weather: dict[str, Any] | None = None
    self_injuries: dict[str, Any] | None = None
    opponent_injuries: dict[str, Any] | None = None
