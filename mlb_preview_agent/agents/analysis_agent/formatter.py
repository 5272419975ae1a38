"""Reshape raw MLB Stats API records into an analysis payload for the LLM.

Everything here is a pure function of its inputs: no I/O, no clock, no cache.
Formatting the same bundle twice yields the same payload.

Missing upstream data never raises. A block whose source data is missing
becomes {"available": False}; missing scalar fields default to 0 or "0.000".

Example:
    formatter = DataFormatter(team)
    payload = formatter.format_game_data(bundle, PreviewOptions())
    payload["team_stats"]["comparison"]["pitching_advantage"]  # "Giants"
"""

import re
from typing import Any

from mlb_preview_agent.agents.analysis_agent.models import PreviewOptions
from mlb_preview_agent.agents.stats_agent.models import GameDataBundle, TeamIdentity

EVEN = "Even"
OPPONENT = "Opponent"

# Relative difference below which two values are considered even
ADVANTAGE_THRESHOLD = 0.05

# Injuries at these positions are flagged as high impact
KEY_POSITIONS = {"C", "1B", "SS", "CF", "SP", "CL"}

RECENT_GAMES_WINDOW = 10
TREND_WINDOW = 5
TREND_RUN_DELTA = 0.5


def _to_float(value: Any) -> float | None:
    """Numeric value of an int, float or numeric string (".745", "3.25")."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def calculate_advantage(
    value_a: Any,
    value_b: Any,
    *,
    lower_is_better: bool = False,
    label_a: str = "A",
    label_b: str = "B",
) -> str:
    """Shared advantage rule for every side-by-side comparison.

    Two values are even when their absolute difference is under 5% of their
    average. Otherwise the larger value wins, or the smaller one when
    `lower_is_better` (ERA, WHIP). Non-numeric input is even.

    Args:
        value_a: First side's value (number or numeric string)
        value_b: Second side's value
        lower_is_better: True for run-prevention rates
        label_a: Returned when the first side wins
        label_b: Returned when the second side wins

    Returns:
        "Even", label_a or label_b
    """
    a = _to_float(value_a)
    b = _to_float(value_b)
    if a is None or b is None:
        return EVEN

    diff = abs(a - b)
    avg = abs(a + b) / 2
    if avg == 0 or diff < avg * ADVANTAGE_THRESHOLD:
        return EVEN

    a_wins = a < b if lower_is_better else a > b
    return label_a if a_wins else label_b


def _record(league_record: dict | None) -> dict:
    league_record = league_record or {}
    return {
        "wins": league_record.get("wins") or 0,
        "losses": league_record.get("losses") or 0,
    }


def _win_percentage(wins: int, losses: int) -> str:
    decisions = wins + losses
    return f"{wins / decisions:.3f}" if decisions > 0 else "0.000"


def _first_split_stat(stats_response: dict | None) -> dict | None:
    """stat dict of the first split of the first stats entry, if any."""
    entries = (stats_response or {}).get("stats") or []
    if not entries:
        return None
    splits = entries[0].get("splits") or []
    if not splits:
        return None
    return splits[0].get("stat") or {}


def _group_stats(team_stats: dict | None) -> dict[str, dict] | None:
    """Season stat dicts by group ("hitting", "pitching", "fielding").

    Responses without group labels put every field in the first split; that
    split then serves all three groups. None when there is no split at all.
    """
    entries = (team_stats or {}).get("stats") or []
    groups: dict[str, dict] = {}
    for entry in entries:
        name = (entry.get("group") or {}).get("displayName")
        splits = entry.get("splits") or []
        if name and splits:
            groups[name] = splits[0].get("stat") or {}

    if groups:
        return groups

    fallback = _first_split_stat(team_stats)
    if fallback is None:
        return None
    return {"hitting": fallback, "pitching": fallback, "fielding": fallback}


def _team_side(game: dict, team_id: int) -> str | None:
    teams = game.get("teams") or {}
    for side in ("home", "away"):
        if ((teams.get(side) or {}).get("team") or {}).get("id") == team_id:
            return side
    return None


def _scores(game: dict, team_id: int | None) -> tuple[int, int]:
    """(team score, opponent score). Without a team id the home side is used."""
    teams = game.get("teams") or {}
    side = _team_side(game, team_id) if team_id is not None else None
    side = side or "home"
    other = "away" if side == "home" else "home"
    return (
        (teams.get(side) or {}).get("score") or 0,
        (teams.get(other) or {}).get("score") or 0,
    )


def find_team_standing(standings: dict | None, team_id: int) -> dict:
    """Standing row for one team out of a /standings response."""
    for division in (standings or {}).get("records") or []:
        for row in division.get("teamRecords") or []:
            if (row.get("team") or {}).get("id") != team_id:
                continue
            splits = {
                split.get("type"): f"{split.get('wins', 0)}-{split.get('losses', 0)}"
                for split in (row.get("records") or {}).get("splitRecords") or []
            }
            return {
                "available": True,
                "division_rank": row.get("divisionRank", "N/A"),
                "games_back": row.get("gamesBack", "-"),
                "wins": row.get("wins") or 0,
                "losses": row.get("losses") or 0,
                "win_percentage": row.get("winningPercentage", "0.000"),
                "streak": (row.get("streak") or {}).get("streakCode", "N/A"),
                "home_record": splits.get("home", "N/A"),
                "away_record": splits.get("away", "N/A"),
                "last_10": splits.get("lastTen", "N/A"),
                "one_run_games": splits.get("oneRun", "N/A"),
            }
    return {"available": False}


def extract_key_team_stats(
    team_stats: dict | None,
    league_record: dict | None = None,
    standing: dict | None = None,
) -> dict:
    """Fixed statistical vocabulary for one team.

    Args:
        team_stats: /teams/{id}/stats response
        league_record: Fixture's leagueRecord for the team; authoritative for
            the win-loss record when given
        standing: Output of find_team_standing, for situational splits

    Returns:
        Team snapshot, or {"available": False} when no season split exists
    """
    groups = _group_stats(team_stats)
    if groups is None:
        return {"available": False}

    hitting = groups.get("hitting") or {}
    pitching = groups.get("pitching") or {}
    fielding = groups.get("fielding") or {}

    if league_record:
        record = _record(league_record)
    else:
        record = _record({"wins": pitching.get("wins"), "losses": pitching.get("losses")})

    games_played = hitting.get("gamesPlayed") or 0
    runs = hitting.get("runs") or 0
    standing = standing or {}

    return {
        "available": True,
        "record": record,
        "win_percentage": _win_percentage(record["wins"], record["losses"]),
        "offense": {
            "runs_per_game": round(runs / games_played, 2) if games_played else 0,
            "home_runs": hitting.get("homeRuns") or 0,
            "batting_average": hitting.get("avg") or "0.000",
            "on_base_percentage": hitting.get("obp") or "0.000",
            "slugging_percentage": hitting.get("slg") or "0.000",
            "ops": hitting.get("ops") or "0.000",
            "stolen_bases": hitting.get("stolenBases") or 0,
        },
        "pitching": {
            "earned_run_average": pitching.get("era") or 0,
            "whip": pitching.get("whip") or 0,
            "strikeouts": pitching.get("strikeOuts") or 0,
            "home_runs_allowed": pitching.get("homeRuns") or 0,
            "walks": pitching.get("baseOnBalls") or 0,
            "saves": pitching.get("saves") or 0,
        },
        "fielding": {
            "errors": fielding.get("errors") or 0,
            "fielding_percentage": fielding.get("fielding") or "0.000",
            "double_plays": fielding.get("doublePlays") or 0,
        },
        "situational": {
            "home_record": standing.get("home_record", "N/A"),
            "away_record": standing.get("away_record", "N/A"),
            "last_10": standing.get("last_10", "N/A"),
            "one_run_games": standing.get("one_run_games", "N/A"),
        },
    }


def analyze_recent_games(games: list[dict] | None, team_id: int | None = None) -> dict:
    """Form over the most recent games (input ordered most recent first)."""
    if not games:
        return {"available": False}

    recent = games[:RECENT_GAMES_WINDOW]
    wins = runs = runs_allowed = home_games = home_wins = 0

    for game in recent:
        team_score, opponent_score = _scores(game, team_id)
        won = team_score > opponent_score
        wins += won
        runs += team_score
        runs_allowed += opponent_score

        is_home = team_id is None or _team_side(game, team_id) == "home"
        if is_home:
            home_games += 1
            home_wins += won

    played = len(recent)
    return {
        "available": True,
        "record": f"{wins}-{played - wins}",
        "win_percentage": f"{wins / played:.3f}",
        "runs_per_game": f"{runs / played:.2f}",
        "runs_allowed_per_game": f"{runs_allowed / played:.2f}",
        "run_differential": runs - runs_allowed,
        "home_record": f"{home_wins}-{home_games - home_wins}" if home_games else "N/A",
        "streak": calculate_streak(recent, team_id),
        "trends": identify_trends(recent, team_id),
    }


def calculate_streak(games: list[dict], team_id: int | None = None) -> str:
    """Current streak ("W3", "L1") counted back from the most recent game."""
    if not games:
        return "N/A"

    first_team, first_opponent = _scores(games[0], team_id)
    winning = first_team > first_opponent
    streak = 0
    for game in games:
        team_score, opponent_score = _scores(game, team_id)
        if (team_score > opponent_score) != winning:
            break
        streak += 1

    return f"{'W' if winning else 'L'}{streak}"


def identify_trends(games: list[dict], team_id: int | None = None) -> list[str]:
    """Scoring trend: last 5 games against the 5 before them."""
    recent = games[:TREND_WINDOW]
    previous = games[TREND_WINDOW:TREND_WINDOW * 2]
    if len(recent) < TREND_WINDOW or not previous:
        return []

    recent_avg = sum(_scores(g, team_id)[0] for g in recent) / len(recent)
    previous_avg = sum(_scores(g, team_id)[0] for g in previous) / len(previous)

    if recent_avg > previous_avg + TREND_RUN_DELTA:
        return ["Offense improving"]
    if recent_avg < previous_avg - TREND_RUN_DELTA:
        return ["Offense struggling"]
    return []


def format_pitcher_data(pitcher: dict | None, stats: dict | None) -> dict:
    if not pitcher:
        return {"available": False}

    info = {
        "available": True,
        "name": pitcher.get("fullName", "TBD"),
        "id": pitcher.get("id"),
        "throws": (pitcher.get("pitchHand") or {}).get("description", "Unknown"),
    }

    season = _first_split_stat(stats)
    if season is not None:
        info["stats"] = {
            "wins": season.get("wins") or 0,
            "losses": season.get("losses") or 0,
            "era": season.get("era") or "0.00",
            "whip": season.get("whip") or "0.00",
            "strikeouts": season.get("strikeOuts") or 0,
            "walks": season.get("baseOnBalls") or 0,
            "innings_pitched": season.get("inningsPitched") or "0.0",
            "home_runs_allowed": season.get("homeRuns") or 0,
            "ground_outs": season.get("groundOuts") or 0,
            "air_outs": season.get("airOuts") or 0,
        }
    return info


def _pitcher_win_rate(stat: dict) -> float | None:
    wins = stat.get("wins") or 0
    losses = stat.get("losses") or 0
    return wins / (wins + losses) if wins + losses else None


def assess_weather_impact(weather: dict) -> list[str]:
    impacts = []

    if "rain" in str(weather.get("condition", "")).lower():
        impacts.append("Rain may affect play")

    wind = re.search(r"(\d+)\s*mph", str(weather.get("wind", "")), re.I)
    if wind and int(wind.group(1)) > 15:
        impacts.append("Strong wind may affect ball flight")

    temp = re.search(r"(\d+)", str(weather.get("temp", "")))
    if temp:
        degrees = int(temp.group(1))
        if degrees < 50:
            impacts.append("Cold weather may reduce offensive production")
        elif degrees > 85:
            impacts.append("Hot weather may favor hitters")

    return impacts or ["Minimal weather impact expected"]


def format_weather(weather: dict) -> dict:
    return {
        "condition": weather.get("condition") or "Unknown",
        "temperature": weather.get("temp") or "Unknown",
        "wind": weather.get("wind") or "Unknown",
        "impact": assess_weather_impact(weather),
    }


def format_team_injuries(report: dict | None) -> dict:
    injuries = (report or {}).get("injuries") or []
    if not injuries:
        return {"available": False, "count": 0}

    return {
        "available": True,
        "count": len(injuries),
        "key_injuries": [
            {
                "player": injury.get("player", "Unknown"),
                "position": injury.get("position", ""),
                "injury": injury.get("injury", "Undisclosed"),
                "status": injury.get("status", "Unknown"),
                "impact": "High impact" if injury.get("position") in KEY_POSITIONS else "Moderate impact",
            }
            for injury in injuries
        ],
    }


def _has_injuries(report: dict | None) -> bool:
    return bool((report or {}).get("injuries"))


class DataFormatter:
    """Builds analysis payloads from the perspective of one team."""

    def __init__(self, team: TeamIdentity):
        self.team = team

    def advantage(self, self_value: Any, opponent_value: Any, *, lower_is_better: bool = False) -> str:
        """calculate_advantage labelled with this team's name and "Opponent"."""
        return calculate_advantage(
            self_value,
            opponent_value,
            lower_is_better=lower_is_better,
            label_a=self.team.short_name,
            label_b=OPPONENT,
        )

    def format_game_data(self, bundle: GameDataBundle, options: PreviewOptions | None = None) -> dict:
        """Full preview payload.

        Optional blocks are added only when the option allows it and the
        source data is present and non-empty.
        """
        options = options or PreviewOptions()
        game = bundle.game
        self_side = "home" if bundle.is_home_game else "away"
        opponent_side = "away" if bundle.is_home_game else "home"
        teams = game.get("teams") or {}

        payload = {
            "game_context": self.format_game_context(game, bundle.opponent, bundle.is_home_game),
            "team_stats": self.format_team_stats(
                bundle.self_stats,
                bundle.opponent_stats,
                self_record=(teams.get(self_side) or {}).get("leagueRecord"),
                opponent_record=(teams.get(opponent_side) or {}).get("leagueRecord"),
                is_home_game=bundle.is_home_game,
            ),
            "recent_performance": {
                "self": analyze_recent_games(bundle.self_recent_games, self.team.id),
                "opponent": analyze_recent_games(bundle.opponent_recent_games, bundle.opponent.get("id")),
            },
            "pitching_matchup": self.format_pitching_matchup(bundle),
        }

        if options.include_weather and bundle.weather:
            payload["weather"] = format_weather(bundle.weather)

        if options.include_injuries and (_has_injuries(bundle.self_injuries) or _has_injuries(bundle.opponent_injuries)):
            payload["injuries"] = {
                "self": format_team_injuries(bundle.self_injuries),
                "opponent": format_team_injuries(bundle.opponent_injuries),
            }

        if options.include_head_to_head and bundle.head_to_head:
            payload["head_to_head"] = self.format_head_to_head(bundle.head_to_head)

        return payload

    def format_game_context(self, game: dict, opponent: dict, is_home_game: bool) -> dict:
        teams = game.get("teams") or {}
        self_side = "home" if is_home_game else "away"
        opponent_side = "away" if is_home_game else "home"

        return {
            "date": game.get("gameDate") or game.get("officialDate", ""),
            "venue": (game.get("venue") or {}).get("name", "Unknown"),
            "is_home_game": is_home_game,
            "opponent": {
                "name": opponent.get("name", "Unknown"),
                "id": opponent.get("id"),
                "record": _record((teams.get(opponent_side) or {}).get("leagueRecord")),
            },
            "self": {
                "name": self.team.name,
                "id": self.team.id,
                "record": _record((teams.get(self_side) or {}).get("leagueRecord")),
            },
            "game_type": game.get("gameType", "R"),
            "game_number": game.get("gameNumber", 1),
            "series_info": {
                "games_in_series": game.get("gamesInSeries") or 0,
                "series_game_number": game.get("seriesGameNumber") or 0,
                "series_description": game.get("seriesDescription", ""),
            },
        }

    def format_team_stats(
        self,
        self_stats: dict | None,
        opponent_stats: dict | None,
        *,
        self_record: dict | None = None,
        opponent_record: dict | None = None,
        is_home_game: bool | None = None,
    ) -> dict:
        own = extract_key_team_stats(self_stats, self_record)
        opponent = extract_key_team_stats(opponent_stats, opponent_record)
        return {
            "self": own,
            "opponent": opponent,
            "comparison": self.compare_team_stats(own, opponent, is_home_game),
        }

    def compare_team_stats(self, own: dict, opponent: dict, is_home_game: bool | None = None) -> dict:
        if not own["available"] or not opponent["available"]:
            return {"available": False}

        if is_home_game is None:
            home_field = "Neutral"
        else:
            home_field = self.team.short_name if is_home_game else OPPONENT

        return {
            "available": True,
            "offensive_advantage": self.advantage(own["offense"]["ops"], opponent["offense"]["ops"]),
            "pitching_advantage": self.advantage(
                own["pitching"]["earned_run_average"],
                opponent["pitching"]["earned_run_average"],
                lower_is_better=True,
            ),
            "record_advantage": self.advantage(own["win_percentage"], opponent["win_percentage"]),
            "home_field_advantage": home_field,
        }

    def format_pitching_matchup(self, bundle: GameDataBundle) -> dict:
        pitchers = bundle.probable_pitchers
        if not pitchers.home and not pitchers.away:
            return {"available": False}

        if bundle.is_home_game:
            own, opponent = pitchers.home, pitchers.away
            own_stats, opponent_stats = bundle.home_pitcher_stats, bundle.away_pitcher_stats
        else:
            own, opponent = pitchers.away, pitchers.home
            own_stats, opponent_stats = bundle.away_pitcher_stats, bundle.home_pitcher_stats

        return {
            "available": True,
            "self": format_pitcher_data(own, own_stats),
            "opponent": format_pitcher_data(opponent, opponent_stats),
            "comparison": self.compare_pitchers(own_stats, opponent_stats),
        }

    def compare_pitchers(self, own_stats: dict | None, opponent_stats: dict | None) -> dict:
        own = _first_split_stat(own_stats)
        opponent = _first_split_stat(opponent_stats)
        if own is None or opponent is None:
            return {"available": False}

        return {
            "available": True,
            "era_advantage": self.advantage(own.get("era"), opponent.get("era"), lower_is_better=True),
            "whip_advantage": self.advantage(own.get("whip"), opponent.get("whip"), lower_is_better=True),
            "strikeout_advantage": self.advantage(own.get("strikeOuts"), opponent.get("strikeOuts")),
            "record_advantage": self.advantage(_pitcher_win_rate(own), _pitcher_win_rate(opponent)),
        }

    def format_head_to_head(self, games: list[dict]) -> dict:
        """Season series summary from the games between the two teams."""
        decided = [
            game for game in games
            if (game.get("status") or {}).get("abstractGameState") == "Final"
            and _scores(game, self.team.id)[0] != _scores(game, self.team.id)[1]
        ]
        if not decided:
            return {"available": False}

        decided.sort(key=lambda g: g.get("gameDate") or "", reverse=True)
        own_wins = sum(1 for g in decided if _scores(g, self.team.id)[0] > _scores(g, self.team.id)[1])

        return {
            "available": True,
            "games_played": len(decided),
            "self_wins": own_wins,
            "opponent_wins": len(decided) - own_wins,
            "recent_trend": self._head_to_head_trend(decided),
        }

    def _head_to_head_trend(self, decided: list[dict]) -> str:
        if len(decided) < 3:
            return "Insufficient data"
        recent_wins = sum(1 for g in decided[:3] if _scores(g, self.team.id)[0] > _scores(g, self.team.id)[1])
        if recent_wins >= 2:
            return f"{self.team.short_name} favored recently"
        return "Opponent favored recently"

    # Payloads for the focused analyses

    def format_pitcher_matchup(
        self,
        pitcher: dict | None,
        pitcher_stats: dict | None,
        vs_team_stats: dict | None,
        opposing_team_stats: dict | None,
        season: int,
    ) -> dict:
        return {
            "pitcher": format_pitcher_data(pitcher or {"fullName": "Unknown"}, pitcher_stats),
            "vs_team": _first_split_stat(vs_team_stats) or {"available": False},
            "opposing_team": extract_key_team_stats(opposing_team_stats),
            "season": season,
        }

    def format_momentum_data(self, recent_games: list[dict], team_stats: dict | None, standings: dict | None) -> dict:
        standing = find_team_standing(standings, self.team.id)
        return {
            "team": self.team.name,
            "recent_performance": analyze_recent_games(recent_games, self.team.id),
            "team_stats": extract_key_team_stats(team_stats, standing=standing),
            "standing": standing,
            "games_sampled": len(recent_games),
        }

    def format_head_to_head_data(
        self,
        games: list[dict],
        own_stats: dict | None,
        opponent_stats: dict | None,
        season: int,
    ) -> dict:
        stats = self.format_team_stats(own_stats, opponent_stats)
        return {
            "team": self.team.name,
            "series": self.format_head_to_head(games) if games else {"available": False},
            "self": stats["self"],
            "opponent": stats["opponent"],
            "comparison": stats["comparison"],
            "season": season,
        }

    def format_injury_data(
        self,
        injury_report: dict | None,
        roster: dict | None,
        recent_games: list[dict],
        include_minor: bool = False,
    ) -> dict:
        injuries = format_team_injuries(injury_report)
        if injuries["available"] and not include_minor:
            injuries["key_injuries"] = [i for i in injuries["key_injuries"] if i["impact"] == "High impact"]
        return {
            "team": self.team.name,
            "injuries": injuries,
            "active_roster_size": len((roster or {}).get("roster") or []),
            "recent_performance": analyze_recent_games(recent_games, self.team.id),
            "include_minor": include_minor,
        }

    def format_pitching_staff_data(self, roster: dict | None, team_stats: dict | None, recent_games: list[dict]) -> dict:
        pitchers = [
            {
                "name": (entry.get("person") or {}).get("fullName", "Unknown"),
                "position": (entry.get("position") or {}).get("abbreviation", "P"),
            }
            for entry in (roster or {}).get("roster") or []
            if (entry.get("position") or {}).get("type") == "Pitcher"
        ]
        snapshot = extract_key_team_stats(team_stats)
        return {
            "team": self.team.name,
            "pitchers": pitchers,
            "team_pitching": snapshot.get("pitching", {"available": False}),
            "recent_performance": analyze_recent_games(recent_games, self.team.id),
        }

    def format_season_outlook(
        self,
        standings: dict | None,
        team_stats: dict | None,
        recent_games: list[dict],
        roster: dict | None,
    ) -> dict:
        standing = find_team_standing(standings, self.team.id)
        return {
            "team": self.team.name,
            "standing": standing,
            "team_stats": extract_key_team_stats(team_stats, standing=standing),
            "recent_performance": analyze_recent_games(recent_games, self.team.id),
            "active_roster_size": len((roster or {}).get("roster") or []),
        }
