"""Preview Agent - orchestrates fetch -> format -> complete -> parse.

Entry points:
- get_game_preview: full preview for the team's game on a date
- analyze_pitcher_matchup, get_team_momentum_analysis, analyze_head_to_head,
  get_injury_impact_analysis, get_pitching_staff_analysis, get_season_outlook:
  focused analyses with narrower payloads
- health_check

Every entry point returns a tagged dict ({"success": True, ...} or
{"success": False, "error": ...}). Operational failures (PreviewError) never
escape; programming errors do.

Data gathering for a preview:
- Mandatory (schedule, team stats, recent games, head-to-head, rosters):
  fetched concurrently, any failure aborts the preview.
- Best effort (weather, injuries, live feed, pitcher stats): a failure is
  logged and the field is left out.
"""

import asyncio
import copy
import time
import uuid
from dataclasses import asdict
from datetime import date as date_cls
from datetime import datetime
from typing import Any, Awaitable, Callable

from mlb_preview_agent.agents.analysis_agent.formatter import DataFormatter
from mlb_preview_agent.agents.analysis_agent.llm_analyzer import LLMAnalyzer
from mlb_preview_agent.agents.analysis_agent.llm_client import CompletionClient
from mlb_preview_agent.agents.analysis_agent.models import PreviewOptions
from mlb_preview_agent.agents.analysis_agent.response_parser import ResponseParser
from mlb_preview_agent.agents.stats_agent.cache import TTLCache
from mlb_preview_agent.agents.stats_agent.mlb_client import MLBStatsClient, current_season
from mlb_preview_agent.agents.stats_agent.models import GameDataBundle, ProbablePitchers, TeamIdentity
from mlb_preview_agent.config import Settings, get_settings
from mlb_preview_agent.errors import PreviewError
from mlb_preview_agent.monitoring import bind_correlation_id, get_logger, unbind_correlation_id

log = get_logger()


class GamePreviewAgent:
    """Game previews and focused analyses for one team.

    Construct once per process (see build_agent) and share: the result cache
    and the breakers inside the gateway and completion client are meant to see
    every request.

    Example:
        agent = build_agent()
        result = await agent.get_game_preview("2025-07-04")
        if result["success"]:
            print(result["analysis"]["predictions"]["outcome_label"])
    """

    def __init__(
        self,
        team: TeamIdentity,
        gateway: MLBStatsClient,
        client: CompletionClient,
        *,
        formatter: DataFormatter | None = None,
        parser: ResponseParser | None = None,
        result_cache: TTLCache | None = None,
        enable_caching: bool = True,
    ):
        """Initialize the agent.

        Args:
            team: Team the previews are written for
            gateway: MLB Stats API client
            client: Completion client for the configured LLM provider
            formatter: Payload builder (default: for `team`)
            parser: Response parser (default: for `team`)
            result_cache: Preview result cache (default: 30 minute TTL)
            enable_caching: Serve repeated previews from the result cache
        """
        self.team = team
        self.gateway = gateway
        self.client = client
        self.analyzer = LLMAnalyzer(client, team.name)
        self.formatter = formatter or DataFormatter(team)
        self.parser = parser or ResponseParser(team.aliases, team.short_name)
        self._results = result_cache if result_cache is not None else TTLCache(ttl=1800)
        self.enable_caching = enable_caching

    # Game preview

    async def get_game_preview(self, date: str | None = None, options: PreviewOptions | None = None) -> dict:
        """Preview of the team's game on `date` (YYYY-MM-DD, default today).

        Returns:
            {"success": True, "date", "game", "analysis", "metadata"} or
            {"success": False, "error", "date"}. Cached successes carry
            "from_cache": True.
        """
        options = options or PreviewOptions()
        game_date = date or date_cls.today().isoformat()
        bind_correlation_id(uuid.uuid4().hex[:12])

        try:
            cache_key = f"preview:{game_date}:{options.cache_key()}"
            if self.enable_caching:
                cached = self._results.get(cache_key)
                if cached is not None:
                    log.debug("preview_cache_hit", date=game_date)
                    return {**copy.deepcopy(cached), "from_cache": True}

            start_time = time.perf_counter()
            try:
                result = await self._build_preview(game_date, options)
            except PreviewError as e:
                log.error("preview_failed", date=game_date, error=str(e), error_type=type(e).__name__)
                return {"success": False, "error": str(e), "date": game_date}

            if result["success"]:
                if self.enable_caching:
                    self._results.set(cache_key, copy.deepcopy(result))
                log.info(
                    "preview_generated",
                    date=game_date,
                    duration_ms=int((time.perf_counter() - start_time) * 1000),
                )
            return result
        finally:
            unbind_correlation_id()

    async def _build_preview(self, game_date: str, options: PreviewOptions) -> dict:
        game = await self.gateway.get_game_for_date(self.team.id, game_date)
        if game is None:
            log.info("no_game_found", date=game_date, team=self.team.short_name)
            return {
                "success": False,
                "error": f"No {self.team.short_name} game found for the specified date",
                "date": game_date,
            }

        teams = game.get("teams") or {}
        is_home_game = ((teams.get("home") or {}).get("team") or {}).get("id") == self.team.id
        opponent = (teams.get("away" if is_home_game else "home") or {}).get("team") or {}

        bundle = await self.gather_game_data(game, opponent, is_home_game, options)
        payload = self.formatter.format_game_data(bundle, options)
        completion = await self.analyzer.analyze_game_data(payload, options)
        analysis = self.parser.parse_game_analysis(completion)

        return {
            "success": True,
            "date": game_date,
            "game": self._game_summary(game, opponent, is_home_game),
            "analysis": analysis.to_dict(),
            "metadata": {
                "analysis_generated": datetime.now().isoformat(),
                "llm_provider": self.client.provider.name,
                "model": completion.model,
                "data_points": sum(
                    1 for block in payload.values()
                    if isinstance(block, dict) and block.get("available", True)
                ),
                "tokens_used": completion.usage.total_tokens,
                "cost": completion.cost,
                "duration_ms": completion.duration_ms,
            },
        }

    async def gather_game_data(
        self,
        game: dict,
        opponent: dict,
        is_home_game: bool,
        options: PreviewOptions,
    ) -> GameDataBundle:
        """Fetch everything the formatter needs for one fixture.

        Best-effort fetches run alongside the mandatory ones but are awaited
        separately, so their failures never reach the mandatory gather.

        Raises:
            PreviewError: A mandatory fetch failed
        """
        game_pk = game.get("gamePk")
        opponent_id = opponent.get("id")

        optional: dict[str, asyncio.Task] = {}
        if options.include_weather and game_pk:
            optional["weather"] = asyncio.create_task(
                self._best_effort("weather", self.gateway.get_game_weather(game_pk))
            )
        if options.include_injuries:
            optional["self_injuries"] = asyncio.create_task(
                self._best_effort("injuries", self.gateway.get_injury_report(self.team.id))
            )
            if opponent_id:
                optional["opponent_injuries"] = asyncio.create_task(
                    self._best_effort("injuries", self.gateway.get_injury_report(opponent_id))
                )

        try:
            (
                self_stats,
                opponent_stats,
                self_recent,
                opponent_recent,
                head_to_head,
                self_roster,
                opponent_roster,
            ) = await asyncio.gather(
                self.gateway.get_team_stats(self.team.id),
                self.gateway.get_team_stats(opponent_id),
                self.gateway.get_recent_games(self.team.id),
                self.gateway.get_recent_games(opponent_id),
                self.gateway.get_head_to_head_games(self.team.id, opponent_id),
                self.gateway.get_team_roster(self.team.id),
                self.gateway.get_team_roster(opponent_id),
            )
        except PreviewError:
            for task in optional.values():
                task.cancel()
            raise

        pitchers = await self._resolve_probable_pitchers(game)
        home_stats, away_stats = await asyncio.gather(
            self._pitcher_stats(pitchers.home),
            self._pitcher_stats(pitchers.away),
        )

        extras = {key: await task for key, task in optional.items()}

        return GameDataBundle(
            game=game,
            opponent=opponent,
            is_home_game=is_home_game,
            self_stats=self_stats,
            opponent_stats=opponent_stats,
            self_recent_games=self_recent,
            opponent_recent_games=opponent_recent,
            head_to_head=head_to_head,
            self_roster=self_roster,
            opponent_roster=opponent_roster,
            probable_pitchers=pitchers,
            home_pitcher_stats=home_stats,
            away_pitcher_stats=away_stats,
            **extras,
        )

    async def _best_effort(self, source: str, awaitable: Awaitable[Any]) -> Any | None:
        try:
            return await awaitable
        except PreviewError as e:
            log.warning("optional_fetch_failed", source=source, error=str(e))
            return None

    async def _resolve_probable_pitchers(self, game: dict) -> ProbablePitchers:
        """Probable starters from the live feed, else from the schedule record."""
        teams = game.get("teams") or {}
        home = (teams.get("home") or {}).get("probablePitcher")
        away = (teams.get("away") or {}).get("probablePitcher")

        game_pk = game.get("gamePk")
        if game_pk:
            feed = await self._best_effort("game_feed", self.gateway.get_game_feed(game_pk))
            probable = ((feed or {}).get("gameData") or {}).get("probablePitchers") or {}
            home = probable.get("home") or home
            away = probable.get("away") or away

        return ProbablePitchers(home=home, away=away)

    async def _pitcher_stats(self, pitcher: dict | None) -> dict | None:
        if not pitcher or not pitcher.get("id"):
            return None
        return await self._best_effort(
            "pitcher_stats",
            self.gateway.get_player_stats(pitcher["id"], group="pitching"),
        )

    def _game_summary(self, game: dict, opponent: dict, is_home_game: bool) -> dict:
        teams = game.get("teams") or {}
        return {
            "game_pk": game.get("gamePk"),
            "date": game.get("gameDate"),
            "venue": (game.get("venue") or {}).get("name", "Unknown"),
            "status": (game.get("status") or {}).get("detailedState", "Scheduled"),
            "home_team": ((teams.get("home") or {}).get("team") or {}).get("name", "Unknown"),
            "away_team": ((teams.get("away") or {}).get("team") or {}).get("name", "Unknown"),
            "is_home_game": is_home_game,
            "opponent": opponent.get("name", "Unknown"),
        }

    # Focused analyses

    async def _focused(self, kind: str, build_payload: Callable[[], Awaitable[dict]]) -> dict:
        correlation_id = uuid.uuid4().hex[:12]
        bind_correlation_id(correlation_id)
        try:
            payload = await build_payload()
            completion = await self.analyzer.analyze_focused(kind, payload)
            analysis = self.parser.parse_focused_analysis(kind, completion)
        except PreviewError as e:
            log.error("focused_analysis_failed", kind=kind, error=str(e), error_type=type(e).__name__)
            return {"success": False, "error": str(e)}
        finally:
            unbind_correlation_id()

        log.info("focused_analysis_generated", kind=kind)
        return {"success": True, "analysis": analysis, "timestamp": datetime.now().isoformat()}

    async def analyze_pitcher_matchup(self, pitcher_id: int, opposing_team_id: int, season: int | None = None) -> dict:
        season = season or current_season()

        async def build() -> dict:
            person, pitcher_stats, vs_team, team_stats = await asyncio.gather(
                self.gateway.request(f"/people/{pitcher_id}"),
                self.gateway.get_player_stats(pitcher_id, group="pitching", season=season),
                self.gateway.get_pitcher_vs_team_stats(pitcher_id, opposing_team_id, season),
                self.gateway.get_team_stats(opposing_team_id, season),
            )
            people = (person or {}).get("people") or [{"id": pitcher_id}]
            return self.formatter.format_pitcher_matchup(people[0], pitcher_stats, vs_team, team_stats, season)

        return await self._focused("pitcher_matchup", build)

    async def get_team_momentum_analysis(self, games: int = 10) -> dict:
        async def build() -> dict:
            recent, team_stats = await asyncio.gather(
                self.gateway.get_recent_games(self.team.id, limit=games),
                self.gateway.get_team_stats(self.team.id),
            )
            standings = await self._best_effort("standings", self.gateway.get_standings())
            return self.formatter.format_momentum_data(recent, team_stats, standings)

        return await self._focused("momentum", build)

    async def analyze_head_to_head(self, opponent_id: int, season: int | None = None) -> dict:
        season = season or current_season()

        async def build() -> dict:
            h2h_games, own_stats, opponent_stats = await asyncio.gather(
                self.gateway.get_head_to_head_games(self.team.id, opponent_id, season),
                self.gateway.get_team_stats(self.team.id, season),
                self.gateway.get_team_stats(opponent_id, season),
            )
            return self.formatter.format_head_to_head_data(h2h_games, own_stats, opponent_stats, season)

        return await self._focused("head_to_head", build)

    async def get_injury_impact_analysis(self, include_minor: bool = False) -> dict:
        async def build() -> dict:
            report, roster, recent = await asyncio.gather(
                self.gateway.get_injury_report(self.team.id),
                self.gateway.get_team_roster(self.team.id),
                self.gateway.get_recent_games(self.team.id),
            )
            return self.formatter.format_injury_data(report, roster, recent, include_minor)

        return await self._focused("injury_impact", build)

    async def get_pitching_staff_analysis(self) -> dict:
        async def build() -> dict:
            roster, team_stats, recent = await asyncio.gather(
                self.gateway.get_team_roster(self.team.id),
                self.gateway.get_team_stats(self.team.id),
                self.gateway.get_recent_games(self.team.id),
            )
            return self.formatter.format_pitching_staff_data(roster, team_stats, recent)

        return await self._focused("pitching_staff", build)

    async def get_season_outlook(self) -> dict:
        async def build() -> dict:
            standings, team_stats, recent, roster = await asyncio.gather(
                self.gateway.get_standings(),
                self.gateway.get_team_stats(self.team.id),
                self.gateway.get_recent_games(self.team.id),
                self.gateway.get_team_roster(self.team.id),
            )
            return self.formatter.format_season_outlook(standings, team_stats, recent, roster)

        return await self._focused("season_outlook", build)

    # Maintenance

    async def health_check(self, check_llm: bool = False) -> dict:
        """Dependency status, breaker states, cache and usage counters.

        Args:
            check_llm: Also send a tiny prompt to the LLM provider (costs tokens)
        """
        mlb_ok = await self.gateway.health_check(self.team.id)
        llm_ok = await self.client.test_connection() if check_llm else None

        return {
            "status": "healthy" if mlb_ok and llm_ok is not False else "degraded",
            "timestamp": datetime.now().isoformat(),
            "services": {"mlb_api": mlb_ok, "llm": llm_ok},
            "circuit_breakers": {
                caller.name: asdict(caller.state())
                for caller in (self.gateway.resilience, self.client.resilience)
            },
            "caches": {
                "mlb_api": self.gateway.get_cache_stats(),
                "previews": self._results.stats(),
                "parser": self.parser.get_cache_stats(),
            },
            "usage": self.client.get_usage_stats(),
        }

    def clear_cache(self) -> None:
        self._results.clear()
        self.gateway.clear_cache()
        self.parser.clear_cache()


def build_agent(settings: Settings | None = None) -> GamePreviewAgent:
    """Wire a GamePreviewAgent from settings.

    Raises:
        ProviderConfigurationError: Unknown LLM provider or missing API key
    """
    settings = settings or get_settings()
    team = TeamIdentity.from_settings(settings)
    return GamePreviewAgent(
        team,
        MLBStatsClient.from_settings(settings),
        CompletionClient.from_settings(settings),
        result_cache=TTLCache(ttl=settings.preview_cache_ttl),
        enable_caching=settings.enable_caching,
    )
