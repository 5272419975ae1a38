"""Tests for ResponseParser: section extraction, predictions, players, caching."""

import pytest

from mlb_preview_agent.agents.analysis_agent.llm_client import CompletionResult, TokenUsage
from mlb_preview_agent.agents.analysis_agent.response_parser import (
    MAX_INSIGHTS,
    Outcome,
    ResponseParser,
    assess_confidence,
    calculate_readability,
    extract_bullet_points,
    extract_keywords,
)

FULL_PREVIEW = """## Game Overview
The Giants host the Dodgers in the opener of a key division series at Oracle Park.

## Pitching Matchup Analysis
Logan Webb brings a 3.10 ERA and strong command of the sinker.
- Webb keeps the ball on the ground
- Yamamoto misses bats with the splitter

## Key Offensive Matchups
Watch the matchup between the top of the order and the splitter.

## Team Momentum & Recent Form
The Giants are 6-4 over their last ten games.

## Strategic Factors
Bullpen strategy is important in late innings.

## Key Players to Watch
Watch for hot hitter Matt Chapman, whose power could swing the game.

## Weather/Venue Impact
Cool marine air at Oracle Park suppresses fly balls.

## Prediction & Narrative
The Giants should win this matchup with a clear advantage. Final score prediction: Giants 4-2.
"""


def completion(text: str) -> CompletionResult:
    return CompletionResult(content=text, usage=TokenUsage(100, 50), cost=0.001, duration_ms=10, model="m")


@pytest.fixture
def parser():
    return ResponseParser(team_aliases=["giants", "sf"], team_name="Giants")


class TestSections:
    def test_all_sections_extracted(self, parser):
        sections = parser.extract_structured_sections(FULL_PREVIEW)

        assert list(sections) == [
            "game_overview", "pitching_matchup", "offensive_matchups", "team_momentum",
            "strategic_factors", "key_players", "weather_venue", "prediction",
        ]
        assert sections["team_momentum"]["content"] == "The Giants are 6-4 over their last ten games."
        assert sections["pitching_matchup"]["bullets"] == [
            "Webb keeps the ball on the ground",
            "Yamamoto misses bats with the splitter",
        ]
        assert "3.10 ERA" in sections["pitching_matchup"]["key_terms"]

    def test_no_headings_yields_empty_structure(self, parser):
        analysis = parser.parse_game_analysis(completion("Just a paragraph without any headings."))

        assert analysis.structured == {}
        assert analysis.raw_analysis == "Just a paragraph without any headings."
        assert analysis.predictions["outcome"] == Outcome.UNKNOWN.value
        assert analysis.predictions["score"] is None

    def test_empty_text_does_not_raise(self, parser):
        analysis = parser.parse_game_analysis(completion(""))
        assert analysis.structured == {}
        assert analysis.key_insights == []
        assert analysis.player_spotlight == []
        assert analysis.metadata["analysis_length"] == 0


class TestPredictions:
    def test_self_favored(self, parser):
        text = "The Giants should win this matchup with a clear advantage"
        assert parser.extract_outcome_prediction(text) is Outcome.SELF_FAVORED

    def test_opponent_favored_when_team_expected_to_lose(self, parser):
        assert parser.extract_outcome_prediction("The Giants will likely lose this one.") is Outcome.OPPONENT_FAVORED

    def test_advantage_to_opponent(self, parser):
        text = "The pitching advantage clearly goes to the opponent tonight."
        assert parser.extract_outcome_prediction(text) is Outcome.OPPONENT_FAVORED

    @pytest.mark.parametrize("text", [
        "The Dodgers are favored to beat the Giants tonight.",
        "The Dodgers hold a clear advantage over the Giants.",
        "Los Angeles has the edge against SF in this series.",
    ])
    def test_opponent_favored_over_team(self, parser, text):
        assert parser.extract_outcome_prediction(text) is Outcome.OPPONENT_FAVORED

    def test_team_holding_advantage(self, parser):
        text = "The Giants hold a clear advantage over the Dodgers."
        assert parser.extract_outcome_prediction(text) is Outcome.SELF_FAVORED

    def test_advantage_for_team(self, parser):
        text = "The bullpen advantage belongs to the Giants."
        assert parser.extract_outcome_prediction(text) is Outcome.SELF_FAVORED

    def test_alias_matches_abbreviation(self, parser):
        assert parser.extract_outcome_prediction("We expect SF to win behind Webb.") is Outcome.SELF_FAVORED

    def test_outcome_label(self):
        assert Outcome.SELF_FAVORED.label("Giants") == "Giants favored"
        assert Outcome.UNKNOWN.label("Giants") == "No clear prediction"

    def test_predictions_block(self, parser):
        predictions = parser.extract_predictions(FULL_PREVIEW)

        assert predictions["outcome"] == "self_favored"
        assert predictions["outcome_label"] == "Giants favored"
        assert "4-2" in predictions["score"]
        assert predictions["confidence"] in {"high", "moderate", "low"}

    def test_prediction_confidence(self, parser):
        assert parser.extract_prediction_confidence("We are confident and it is likely.") == "high"
        assert parser.extract_prediction_confidence("The result is uncertain.") == "low"
        assert parser.extract_prediction_confidence("No hedging words here.") == "moderate"


class TestInsightsAndPlayers:
    def test_insights_deduplicated_and_capped(self, parser):
        text = " ".join(f"Key edge {i} is the bullpen matchup." for i in range(12))
        text += " Key edge 0 is the bullpen matchup."

        insights = parser.extract_key_insights(text)

        assert len(insights) == MAX_INSIGHTS
        assert len(set(insights)) == len(insights)

    def test_player_spotlight(self, parser):
        players = parser.extract_player_spotlight(FULL_PREVIEW)

        names = [p["name"] for p in players]
        assert "Matt Chapman" in names
        chapman = next(p for p in players if p["name"] == "Matt Chapman")
        assert chapman["reason"] == "hot streak"

    def test_headings_and_place_names_are_not_players(self, parser):
        names = [p["name"] for p in parser.extract_player_spotlight(FULL_PREVIEW)]
        assert "Key Players" not in names
        assert "The Giants" not in names

    def test_spotlight_capped_at_six(self, parser):
        text = "\n".join(
            f"Watch key player {first} {last} tonight."
            for first, last in [("Alan", "Able"), ("Bill", "Baker"), ("Carl", "Cole"), ("Dave", "Dunn"),
                                ("Eric", "Ezra"), ("Fred", "Fox"), ("Gary", "Gale")]
        )
        assert len(parser.extract_player_spotlight(text)) == 6


class TestCache:
    def test_identical_content_served_from_cache(self, parser):
        first = parser.parse_game_analysis(completion(FULL_PREVIEW))
        second = parser.parse_game_analysis(completion(FULL_PREVIEW))

        assert first is second
        assert parser.get_cache_stats()["hits"] == 1
        assert parser.get_cache_stats()["size"] == 1

    def test_shared_prefix_does_not_collide(self, parser):
        prefix = "x" * 200
        first = parser.parse_game_analysis(completion(prefix + " The Giants should win."))
        second = parser.parse_game_analysis(completion(prefix + " The Giants should lose."))

        assert first.predictions["outcome"] == "self_favored"
        assert second.predictions["outcome"] == "opponent_favored"
        assert parser.get_cache_stats()["size"] == 2

    def test_clear_cache(self, parser):
        parser.parse_game_analysis(completion(FULL_PREVIEW))
        parser.clear_cache()
        assert parser.get_cache_stats()["size"] == 0


class TestFocused:
    def test_momentum_fields(self, parser):
        text = (
            "Current Momentum: Rising after a strong homestand.\n"
            "Key Trends:\n- Run prevention improved\n- Fewer walks\n"
            "Sustainable Factors:\n- Deep rotation\n"
            "Warning Signs:\n"
            "Outlook: Should stay above .500 this month."
        )

        parsed = parser.parse_focused_analysis("momentum", completion(text))

        assert parsed["current_momentum"] == "Rising after a strong homestand."
        assert parsed["key_trends"] == ["Run prevention improved", "Fewer walks"]
        assert parsed["sustainable_factors"] == ["Deep rotation"]
        assert parsed["warning_signs"] == []
        assert parsed["outlook"] == "Should stay above .500 this month."
        assert parsed["raw_analysis"] == text

    def test_missing_labels_use_defaults(self, parser):
        parsed = parser.parse_focused_analysis("pitcher_matchup", completion("Nothing structured here."))

        assert parsed["pitcher_overview"] == "No overview available"
        assert parsed["strategic_prediction"] == "No prediction available"
        assert parsed["matchup_advantages"] == []
        assert parsed["confidence"] == "moderate"

    def test_label_variants(self, parser):
        text = "**Key Batters to Monitor:**\n1. Freddie Freeman\n2. Mookie Betts\n"
        parsed = parser.parse_focused_analysis("pitcher_matchup", completion(text))
        assert parsed["key_batters"] == ["Freddie Freeman", "Mookie Betts"]

    def test_unknown_kind_raises(self, parser):
        with pytest.raises(ValueError):
            parser.parse_focused_analysis("bullpen_vibes", completion("text"))


# --- Text helpers ---


def test_bullet_points():
    text = "- one\n* two\n• three\n1. four\nnot a bullet"
    assert extract_bullet_points(text) == ["one", "two", "three", "four"]


def test_assess_confidence():
    assert assess_confidence("They will clearly and definitely win.") == "high"
    assert assess_confidence("They might win, maybe.") == "low"
    assert assess_confidence("They play tonight.") == "moderate"


def test_readability():
    assert calculate_readability("Short one. Another short one.") == "easy"
    assert calculate_readability(" ".join(["word"] * 60) + ".") == "complex"


def test_keywords_skip_stopwords_and_short_words():
    keywords = extract_keywords("The bullpen and the bullpen and the rotation")
    assert keywords[0] == {"word": "bullpen", "count": 2}
    assert all(k["word"] not in {"the", "and"} for k in keywords)
