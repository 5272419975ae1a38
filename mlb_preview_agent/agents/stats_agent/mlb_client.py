"""MLB Stats API client with read-through caching and resilience.

All requests are GETs against https://statsapi.mlb.com/api/v1. Responses are
cached in memory by fully-qualified URL for `stats_cache_ttl` seconds and every
network call goes through the shared ResilientCaller for the sports API, so a
run of upstream failures opens one breaker for all callers.

Two calling conventions:
- request(): raises PreviewError subclasses. Used for data a preview cannot
  be built without (schedule, team stats).
- fetch(): logs and returns None on failure. Used for optional data.
"""

import time
from datetime import date, datetime, timedelta
from typing import Any

import httpx

from mlb_preview_agent.agents.stats_agent.cache import TTLCache
from mlb_preview_agent.config import Settings
from mlb_preview_agent.errors import PreviewError
from mlb_preview_agent.monitoring import get_logger
from mlb_preview_agent.resilience import ResilientCaller

log = get_logger()

SPORT_ID = 1

SCHEDULE_HYDRATE = "team,linescore,decisions,person,probablePitcher,stats"

# 40-man roster status codes for the 7/10/15/60-day injured lists
INJURED_LIST_PREFIX = "D"

STAT_GROUPS = "hitting,pitching,fielding"


def current_season() -> int:
    """MLB seasons are named by calendar year."""
    return datetime.now().year


class MLBStatsClient:
    """Async client for the MLB Stats API.

    Example:
        client = MLBStatsClient.from_settings(get_settings())
        game = await client.get_game_for_date(137, "2024-07-04")
        if game is None:
            print("Off day")
    """

    def __init__(
        self,
        base_url: str = "https://statsapi.mlb.com/api/v1",
        *,
        timeout: float = 10.0,
        user_agent: str = "mlb-preview-agent/1.0",
        cache: TTLCache | None = None,
        resilience: ResilientCaller | None = None,
    ):
        """Initialize the client.

        Args:
            base_url: API root, without trailing slash
            timeout: Per-request deadline in seconds
            user_agent: User-Agent header sent with every request
            cache: Response cache (default: 5 minute TTL)
            resilience: Shared wrapper for the sports API dependency
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.user_agent = user_agent
        self._cache = cache if cache is not None else TTLCache(ttl=300)
        self._resilience = resilience or ResilientCaller(
            "mlb_stats_api",
            timeout=timeout,
            retry_on=(httpx.HTTPError,),
            timeout_on=(httpx.TimeoutException,),
        )

    @classmethod
    def from_settings(cls, settings: Settings, resilience: ResilientCaller | None = None) -> "MLBStatsClient":
        return cls(
            settings.mlb_api_base,
            timeout=settings.api_timeout,
            user_agent=settings.user_agent,
            cache=TTLCache(ttl=settings.stats_cache_ttl),
            resilience=resilience or ResilientCaller(
                "mlb_stats_api",
                timeout=settings.api_timeout,
                max_attempts=settings.retry_max_attempts,
                base_delay=settings.retry_base_delay,
                failure_threshold=settings.breaker_failure_threshold,
                reset_timeout=settings.breaker_reset_timeout,
                retry_on=(httpx.HTTPError,),
                timeout_on=(httpx.TimeoutException,),
            ),
        )

    @property
    def resilience(self) -> ResilientCaller:
        return self._resilience

    def build_url(self, endpoint: str, params: dict | None = None) -> str:
        """Fully-qualified URL for an endpoint. None-valued params are dropped."""
        clean = {k: v for k, v in (params or {}).items() if v is not None}
        return str(httpx.URL(f"{self.base_url}{endpoint}", params=clean))

    async def request(self, endpoint: str, params: dict | None = None) -> Any:
        """GET an endpoint, serving from cache when a live entry exists.

        Raises:
            UpstreamTimeout: Deadline exceeded on every attempt
            UpstreamFault: HTTP or network failure after retries
            CircuitOpenError: Sports API breaker is open
        """
        url = self.build_url(endpoint, params)

        cached = self._cache.get(url)
        if cached is not None:
            log.debug("mlb_api_cache_hit", endpoint=endpoint)
            return cached

        start_time = time.perf_counter()
        data = await self._resilience.call(self._get_json, url)
        self._cache.set(url, data)

        duration_ms = int((time.perf_counter() - start_time) * 1000)
        log.info("mlb_api_request_completed", endpoint=endpoint, duration_ms=duration_ms)
        return data

    async def fetch(self, endpoint: str, params: dict | None = None) -> Any | None:
        """Like request(), but returns None instead of raising."""
        try:
            return await self.request(endpoint, params)
        except PreviewError as e:
            log.warning("mlb_api_request_failed", endpoint=endpoint, error=str(e))
            return None

    async def _get_json(self, url: str) -> Any:
        async with httpx.AsyncClient(
            timeout=self.timeout,
            headers={"User-Agent": self.user_agent, "Accept": "application/json"},
        ) as client:
            response = await client.get(url)
            response.raise_for_status()
        return response.json()

    # Schedule

    async def get_team_schedule(
        self,
        team_id: int,
        start_date: str | None = None,
        end_date: str | None = None,
    ) -> dict:
        """Schedule for a team between two YYYY-MM-DD dates (default: today)."""
        today = date.today().isoformat()
        return await self.request(
            "/schedule",
            {
                "sportId": SPORT_ID,
                "teamId": team_id,
                "startDate": start_date or today,
                "endDate": end_date or start_date or today,
                "hydrate": SCHEDULE_HYDRATE,
            },
        )

    async def get_game_for_date(self, team_id: int, game_date: str | None = None) -> dict | None:
        """First scheduled game for the team on a date, or None on an off day."""
        schedule = await self.get_team_schedule(team_id, game_date, game_date)
        for day in (schedule or {}).get("dates") or []:
            games = day.get("games") or []
            if games:
                return games[0]
        return None

    async def get_recent_games(
        self,
        team_id: int,
        limit: int = 10,
        days: int = 30,
        end_date: date | None = None,
    ) -> list[dict]:
        """Completed games in the last `days` days, most recent first."""
        end = end_date or date.today()
        start = end - timedelta(days=days)
        data = await self.request(
            "/schedule",
            {
                "sportId": SPORT_ID,
                "teamId": team_id,
                "startDate": start.isoformat(),
                "endDate": end.isoformat(),
                "hydrate": "team,linescore,decisions",
            },
        )

        games = [
            game
            for day in (data or {}).get("dates") or []
            for game in day.get("games") or []
            if (game.get("status") or {}).get("abstractGameState") == "Final"
        ]
        games.sort(key=lambda g: g.get("gameDate") or "", reverse=True)
        return games[:limit]

    async def get_head_to_head_record(
        self,
        team1_id: int,
        team2_id: int,
        season: int | None = None,
        hydrate: str | None = None,
    ) -> dict:
        """Raw season schedule between two teams."""
        season = season or current_season()
        return await self.request(
            "/schedule",
            {
                "sportId": SPORT_ID,
                "startDate": f"{season}-01-01",
                "endDate": f"{season}-12-31",
                "teamId": team1_id,
                "opponentId": team2_id,
                "hydrate": hydrate,
            },
        )

    async def get_head_to_head_games(self, team1_id: int, team2_id: int, season: int | None = None) -> list[dict]:
        """Season games between two teams, flattened out of the date groups."""
        data = await self.get_head_to_head_record(team1_id, team2_id, season, hydrate="team,linescore,decisions")
        return [game for day in (data or {}).get("dates") or [] for game in day.get("games") or []]

    # Teams and players

    async def get_team_stats(self, team_id: int, season: int | None = None) -> dict:
        """Season hitting, pitching and fielding aggregates for a team."""
        return await self.request(
            f"/teams/{team_id}/stats",
            {
                "stats": "season",
                "group": STAT_GROUPS,
                "season": season or current_season(),
                "sportId": SPORT_ID,
            },
        )

    async def get_team_roster(self, team_id: int, roster_type: str = "active", season: int | None = None) -> dict:
        return await self.request(
            f"/teams/{team_id}/roster",
            {
                "rosterType": roster_type,
                "season": season or current_season(),
                "hydrate": "person",
            },
        )

    async def get_player_stats(
        self,
        player_id: int,
        stats: str = "season",
        group: str | None = None,
        season: int | None = None,
    ) -> dict:
        return await self.request(
            f"/people/{player_id}/stats",
            {
                "stats": stats,
                "group": group,
                "season": season or current_season(),
                "sportId": SPORT_ID,
            },
        )

    async def get_pitcher_vs_team_stats(self, pitcher_id: int, team_id: int, season: int | None = None) -> dict:
        return await self.request(
            f"/people/{pitcher_id}/stats",
            {
                "stats": "vsTeam",
                "group": "pitching",
                "season": season or current_season(),
                "sportId": SPORT_ID,
                "opposingTeamId": team_id,
            },
        )

    async def get_standings(self, league_id: str | None = "103,104", season: int | None = None) -> dict:
        """Division standings for the AL (103) and NL (104)."""
        return await self.request(
            "/standings",
            {
                "leagueId": league_id,
                "season": season or current_season(),
                "hydrate": "team",
            },
        )

    # Game feed

    async def get_game_feed(self, game_pk: int) -> dict:
        """Live feed for a game; carries probable pitchers and weather."""
        return await self.request(f"/game/{game_pk}/feed/live")

    async def get_game_weather(self, game_pk: int) -> dict | None:
        """gameData.weather from the live feed, None when not published."""
        feed = await self.fetch(f"/game/{game_pk}/feed/live")
        weather = ((feed or {}).get("gameData") or {}).get("weather")
        return weather or None

    async def get_injury_report(self, team_id: int) -> dict:
        """Players on an injured list, read from the 40-man roster.

        The public API has no injury endpoint; injured-list placements show up
        as 40-man roster status codes D7/D10/D15/D60.

        Returns:
            {"teamId", "injuries": [{player, position, injury, status}], "lastUpdated"}
        """
        roster = await self.get_team_roster(team_id, roster_type="40Man")

        injuries = []
        for entry in (roster or {}).get("roster") or []:
            status = entry.get("status") or {}
            if not str(status.get("code", "")).startswith(INJURED_LIST_PREFIX):
                continue
            injuries.append({
                "player": (entry.get("person") or {}).get("fullName", "Unknown"),
                "position": (entry.get("position") or {}).get("abbreviation", ""),
                "injury": entry.get("note") or status.get("description", "Injured list"),
                "status": status.get("description", status.get("code")),
            })

        return {
            "teamId": team_id,
            "injuries": injuries,
            "lastUpdated": datetime.now().isoformat(),
        }

    # Maintenance

    async def health_check(self, team_id: int = 137) -> bool:
        """True when the API answers a cheap team lookup."""
        data = await self.fetch(f"/teams/{team_id}")
        return bool(data and data.get("teams"))

    def clear_cache(self) -> None:
        self._cache.clear()

    def get_cache_stats(self) -> dict:
        return self._cache.stats()
