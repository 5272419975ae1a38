"""Tests for DataFormatter and the shared advantage rule."""

import json

import pytest

from mlb_preview_agent.agents.analysis_agent.formatter import (
    DataFormatter,
    analyze_recent_games,
    assess_weather_impact,
    calculate_advantage,
    calculate_streak,
    extract_key_team_stats,
    find_team_standing,
    format_team_injuries,
    identify_trends,
)
from mlb_preview_agent.agents.analysis_agent.models import PreviewOptions
from mlb_preview_agent.agents.stats_agent.models import GameDataBundle, ProbablePitchers

from conftest import DODGERS_ID, GIANTS_ID, make_final_game

DODGERS = {"id": DODGERS_ID, "name": "Los Angeles Dodgers"}


def pitcher_stats(era: str, whip: str, strikeouts: int, wins: int, losses: int) -> dict:
    return {"stats": [{"splits": [{"stat": {
        "era": era, "whip": whip, "strikeOuts": strikeouts, "wins": wins, "losses": losses,
        "inningsPitched": "112.1", "baseOnBalls": 25,
    }}]}]}


@pytest.fixture
def formatter(team):
    return DataFormatter(team)


@pytest.fixture
def bundle(scheduled_game, giants_stats, dodgers_stats, recent_games):
    return GameDataBundle(
        game=scheduled_game,
        opponent=DODGERS,
        is_home_game=True,
        self_stats=giants_stats,
        opponent_stats=dodgers_stats,
        self_recent_games=recent_games,
        opponent_recent_games=[],
        head_to_head=[
            make_final_game("2025-06-01T02:05:00Z", GIANTS_ID, 4, DODGERS_ID, 2),
            make_final_game("2025-06-02T02:05:00Z", GIANTS_ID, 1, DODGERS_ID, 5),
            make_final_game("2025-06-03T02:05:00Z", DODGERS_ID, 2, GIANTS_ID, 3),
            make_final_game("2025-06-04T02:05:00Z", DODGERS_ID, 3, GIANTS_ID, 6),
        ],
        probable_pitchers=ProbablePitchers(
            home={"id": 657277, "fullName": "Logan Webb", "pitchHand": {"description": "Right"}},
            away={"id": 808967, "fullName": "Yoshinobu Yamamoto"},
        ),
        home_pitcher_stats=pitcher_stats("3.10", "1.15", 120, 8, 5),
        away_pitcher_stats=pitcher_stats("2.90", "1.02", 131, 9, 3),
        weather={"condition": "Overcast", "temp": "58", "wind": "18 mph, In From CF"},
        self_injuries={"injuries": [
            {"player": "Injured Catcher", "position": "C", "injury": "Hamstring", "status": "Injured 10-Day"},
            {"player": "Injured Reliever", "position": "P", "injury": "Elbow", "status": "Injured 15-Day"},
        ]},
        opponent_injuries=None,
    )


class TestCalculateAdvantage:
    def test_higher_wins_by_default(self):
        assert calculate_advantage(0.800, 0.700) == "A"
        assert calculate_advantage(0.700, 0.800) == "B"

    def test_lower_is_better(self):
        assert calculate_advantage(3.10, 4.20, lower_is_better=True) == "A"
        assert calculate_advantage(4.20, 3.10, lower_is_better=True) == "B"

    def test_within_five_percent_is_even(self):
        # diff 0.03 < 5% of 0.735
        assert calculate_advantage(0.750, 0.720) == "Even"

    def test_zero_average_is_even(self):
        assert calculate_advantage(0, 0) == "Even"

    def test_non_numeric_is_even(self):
        assert calculate_advantage("N/A", 0.5) == "Even"
        assert calculate_advantage(None, 3) == "Even"

    def test_numeric_strings_are_coerced(self):
        assert calculate_advantage(".790", ".720") == "A"
        assert calculate_advantage("3.25", "4.10", lower_is_better=True) == "A"

    @pytest.mark.parametrize("a,b", [(0.8, 0.7), (3.0, 3.05), (0, 0), (12, 4)])
    def test_swapping_sides_swaps_labels(self, a, b):
        forward = calculate_advantage(a, b, label_a="X", label_b="Y")
        backward = calculate_advantage(b, a, label_a="Y", label_b="X")
        assert forward == backward

    def test_custom_labels(self):
        assert calculate_advantage(5, 1, label_a="Giants", label_b="Opponent") == "Giants"


class TestTeamStats:
    def test_record_from_league_record(self, giants_stats):
        stats = extract_key_team_stats(giants_stats, {"wins": 45, "losses": 42})
        assert stats["record"] == {"wins": 45, "losses": 42}
        assert stats["win_percentage"] == "0.517"

    def test_record_falls_back_to_pitching_decisions(self, dodgers_stats):
        stats = extract_key_team_stats(dodgers_stats)
        assert stats["record"] == {"wins": 52, "losses": 35}

    def test_offense_block(self, giants_stats):
        offense = extract_key_team_stats(giants_stats)["offense"]
        assert offense["runs_per_game"] == 4.4
        assert offense["ops"] == ".720"
        assert offense["home_runs"] == 98

    def test_missing_split_is_unavailable(self):
        assert extract_key_team_stats({"stats": []}) == {"available": False}
        assert extract_key_team_stats(None) == {"available": False}

    def test_ungrouped_response_uses_first_split(self):
        stats = extract_key_team_stats({"stats": [{"splits": [{"stat": {"ops": ".701", "era": "4.01"}}]}]})
        assert stats["offense"]["ops"] == ".701"
        assert stats["pitching"]["earned_run_average"] == "4.01"

    def test_zero_decisions(self):
        stats = extract_key_team_stats({"stats": [{"splits": [{"stat": {}}]}]})
        assert stats["win_percentage"] == "0.000"
        assert stats["offense"]["runs_per_game"] == 0

    def test_comparison_for_45_42_home_team(self, formatter, giants_stats, dodgers_stats):
        result = formatter.format_team_stats(
            giants_stats,
            dodgers_stats,
            self_record={"wins": 45, "losses": 42},
            opponent_record={"wins": 52, "losses": 35},
            is_home_game=True,
        )
        comparison = result["comparison"]
        assert result["self"]["win_percentage"] == "0.517"
        assert result["opponent"]["win_percentage"] == "0.598"
        assert comparison["record_advantage"] == "Opponent"
        assert comparison["offensive_advantage"] == "Opponent"
        assert comparison["pitching_advantage"] == "Giants"
        assert comparison["home_field_advantage"] == "Giants"

    def test_comparison_unavailable_when_one_side_missing(self, formatter, giants_stats):
        result = formatter.format_team_stats(giants_stats, None)
        assert result["opponent"] == {"available": False}
        assert result["comparison"] == {"available": False}


class TestRecentForm:
    def test_recent_games_summary(self, recent_games):
        form = analyze_recent_games(recent_games, GIANTS_ID)
        assert form["record"] == "6-4"
        assert form["win_percentage"] == "0.600"
        assert form["runs_per_game"] == "3.80"
        assert form["runs_allowed_per_game"] == "3.90"
        assert form["run_differential"] == -1
        assert form["home_record"] == "6-4"
        assert form["streak"] == "W2"
        assert form["trends"] == ["Offense struggling"]

    def test_empty_games_unavailable(self):
        assert analyze_recent_games([], GIANTS_ID) == {"available": False}

    def test_streak_counts_from_most_recent(self):
        games = [
            make_final_game("2025-07-03T02:05:00Z", GIANTS_ID, 1, DODGERS_ID, 2),
            make_final_game("2025-07-02T02:05:00Z", DODGERS_ID, 5, GIANTS_ID, 0),
            make_final_game("2025-07-01T02:05:00Z", GIANTS_ID, 9, DODGERS_ID, 2),
        ]
        assert calculate_streak(games, GIANTS_ID) == "L2"

    def test_trends_need_two_windows(self, recent_games):
        assert identify_trends(recent_games[:5], GIANTS_ID) == []

    def test_improving_offense(self, recent_games):
        assert identify_trends(list(reversed(recent_games)), GIANTS_ID) == ["Offense improving"]


class TestOptionalBlocks:
    def test_weather_impacts(self):
        assert assess_weather_impact({"condition": "Rain", "temp": "72", "wind": "5 mph"}) == ["Rain may affect play"]
        assert assess_weather_impact({"condition": "Clear", "temp": "45", "wind": "20 mph"}) == [
            "Strong wind may affect ball flight",
            "Cold weather may reduce offensive production",
        ]
        assert assess_weather_impact({"temp": "91"}) == ["Hot weather may favor hitters"]
        assert assess_weather_impact({"condition": "Clear", "temp": "70", "wind": "8 mph"}) == [
            "Minimal weather impact expected"
        ]

    def test_injury_impact_by_position(self, bundle):
        injuries = format_team_injuries(bundle.self_injuries)
        assert injuries["count"] == 2
        assert [i["impact"] for i in injuries["key_injuries"]] == ["High impact", "Moderate impact"]

    def test_no_injuries_unavailable(self):
        assert format_team_injuries({"injuries": []}) == {"available": False, "count": 0}

    def test_head_to_head_summary(self, formatter, bundle):
        series = formatter.format_head_to_head(bundle.head_to_head)
        assert series == {
            "available": True,
            "games_played": 4,
            "self_wins": 3,
            "opponent_wins": 1,
            "recent_trend": "Giants favored recently",
        }

    def test_head_to_head_needs_three_games_for_trend(self, formatter, bundle):
        series = formatter.format_head_to_head(bundle.head_to_head[:2])
        assert series["recent_trend"] == "Insufficient data"


class TestFormatGameData:
    def test_full_payload(self, formatter, bundle):
        payload = formatter.format_game_data(bundle, PreviewOptions())

        assert set(payload) == {
            "game_context", "team_stats", "recent_performance",
            "pitching_matchup", "weather", "injuries", "head_to_head",
        }
        context = payload["game_context"]
        assert context["venue"] == "Oracle Park"
        assert context["is_home_game"] is True
        assert context["opponent"] == {"name": "Los Angeles Dodgers", "id": DODGERS_ID,
                                       "record": {"wins": 52, "losses": 35}}
        assert context["self"]["record"] == {"wins": 45, "losses": 42}
        assert context["series_info"]["games_in_series"] == 3

        assert payload["recent_performance"]["opponent"] == {"available": False}
        assert payload["injuries"]["opponent"] == {"available": False, "count": 0}

    def test_pitching_matchup_from_own_perspective(self, formatter, bundle):
        matchup = formatter.format_game_data(bundle)["pitching_matchup"]

        assert matchup["self"]["name"] == "Logan Webb"
        assert matchup["self"]["throws"] == "Right"
        assert matchup["opponent"]["name"] == "Yoshinobu Yamamoto"
        assert matchup["opponent"]["throws"] == "Unknown"
        assert matchup["comparison"]["era_advantage"] == "Opponent"
        assert matchup["comparison"]["strikeout_advantage"] == "Opponent"

    def test_away_game_swaps_pitchers(self, formatter, bundle):
        away = bundle.model_copy(update={"is_home_game": False})
        matchup = formatter.format_game_data(away)["pitching_matchup"]
        assert matchup["self"]["name"] == "Yoshinobu Yamamoto"

    def test_options_exclude_optional_blocks(self, formatter, bundle):
        options = PreviewOptions(include_weather=False, include_injuries=False, include_head_to_head=False)
        payload = formatter.format_game_data(bundle, options)
        assert "weather" not in payload
        assert "injuries" not in payload
        assert "head_to_head" not in payload

    def test_missing_data_degrades_without_raising(self, formatter, scheduled_game):
        sparse = GameDataBundle(game=scheduled_game, opponent=DODGERS, is_home_game=True)

        payload = formatter.format_game_data(sparse)

        assert payload["team_stats"]["self"] == {"available": False}
        assert payload["team_stats"]["comparison"] == {"available": False}
        assert payload["recent_performance"]["self"] == {"available": False}
        assert payload["pitching_matchup"] == {"available": False}
        assert set(payload) == {"game_context", "team_stats", "recent_performance", "pitching_matchup"}

    def test_formatting_is_deterministic(self, formatter, bundle):
        first = json.dumps(formatter.format_game_data(bundle), sort_keys=True)
        second = json.dumps(formatter.format_game_data(bundle), sort_keys=True)
        assert first == second


class TestFocusedPayloads:
    def test_standing_lookup(self):
        standings = {"records": [{"teamRecords": [{
            "team": {"id": GIANTS_ID},
            "divisionRank": "3",
            "gamesBack": "7.0",
            "wins": 45,
            "losses": 42,
            "winningPercentage": ".517",
            "streak": {"streakCode": "W2"},
            "records": {"splitRecords": [
                {"type": "home", "wins": 25, "losses": 18},
                {"type": "lastTen", "wins": 6, "losses": 4},
            ]},
        }]}]}

        standing = find_team_standing(standings, GIANTS_ID)

        assert standing["division_rank"] == "3"
        assert standing["home_record"] == "25-18"
        assert standing["last_10"] == "6-4"
        assert standing["away_record"] == "N/A"
        assert find_team_standing(standings, DODGERS_ID) == {"available": False}

    def test_injury_payload_filters_minor_by_default(self, formatter, bundle):
        payload = formatter.format_injury_data(bundle.self_injuries, {"roster": [{}] * 26}, [])
        assert [i["player"] for i in payload["injuries"]["key_injuries"]] == ["Injured Catcher"]
        assert payload["active_roster_size"] == 26

        with_minor = formatter.format_injury_data(bundle.self_injuries, None, [], include_minor=True)
        assert len(with_minor["injuries"]["key_injuries"]) == 2

    def test_pitching_staff_keeps_pitchers(self, formatter, giants_stats):
        roster = {"roster": [
            {"person": {"fullName": "Logan Webb"}, "position": {"abbreviation": "P", "type": "Pitcher"}},
            {"person": {"fullName": "Some Catcher"}, "position": {"abbreviation": "C", "type": "Catcher"}},
        ]}
        payload = formatter.format_pitching_staff_data(roster, giants_stats, [])
        assert payload["pitchers"] == [{"name": "Logan Webb", "position": "P"}]
        assert payload["team_pitching"]["earned_run_average"] == "3.60"

    def test_pitcher_matchup_without_vs_team_split(self, formatter, dodgers_stats):
        payload = formatter.format_pitcher_matchup(
            {"id": 657277, "fullName": "Logan Webb"},
            pitcher_stats("3.10", "1.15", 120, 8, 5),
            {"stats": []},
            dodgers_stats,
            2025,
        )
        assert payload["pitcher"]["stats"]["era"] == "3.10"
        assert payload["vs_team"] == {"available": False}
        assert payload["opposing_team"]["available"] is True
        assert payload["season"] == 2025
