"""Recover structured fields from free-text LLM analyses.

Extraction is pattern based and best effort. No extractor raises on odd
input; each one falls back to a documented default (empty list, None,
"moderate", "No X available").

Section headings for the game preview come from PREVIEW_SECTIONS and labels
for focused analyses from FOCUSED_ANALYSES, the same tables the prompts are
rendered from.

Example:
    parser = ResponseParser(team_aliases=["giants", "sf"], team_name="Giants")
    analysis = parser.parse_game_analysis(result)
    analysis.predictions["outcome"]  # "self_favored"
"""

import hashlib
import re
from collections import Counter
from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum

from mlb_preview_agent.agents.analysis_agent.llm_client import CompletionResult
from mlb_preview_agent.agents.analysis_agent.prompts import PREVIEW_SECTIONS, get_focused_analysis
from mlb_preview_agent.monitoring import CacheMetrics

MAX_INSIGHTS = 8
MAX_PLAYERS = 6
MAX_KEY_TERMS_PER_PATTERN = 5
MAX_MATCHES_PER_PATTERN = 3
MAX_KEYWORDS = 10

# One sentence-ish span: stops at sentence punctuation and line breaks
_SPAN = r"[^.!?\n]*?"

BULLET_PATTERN = re.compile(r"^[ \t]*(?:[-*•]|\d+\.)[ \t]+(.+?)[ \t]*$", re.M)

KEY_TERM_PATTERNS = (
    re.compile(r"\b(?:high|low|strong|weak|excellent|poor|outstanding|struggling)\s+\w+", re.I),
    re.compile(r"\b\d+\.\d+\s+(?:ERA|WHIP|OPS|AVG)\b", re.I),
    re.compile(r"\b\d+[-–]\d+\s+record\b", re.I),
)

INSIGHT_PATTERNS = (
    re.compile(rf"\b(?:key|important|notable|significant|crucial)\b{_SPAN}\b(?:advantage|disadvantage|factor|matchup|trend)s?\b", re.I),
    re.compile(rf"\b(?:should|will|likely|expect)\b{_SPAN}\b(?:perform|struggle|dominate|favor)\w*", re.I),
    re.compile(rf"\b(?:watch|monitor|focus)\b{_SPAN}\b(?:player|matchup|situation)s?\b", re.I),
)

POSITIVE_OUTCOME = re.compile(r"\b(?:win|wins|victory|prevail\w*|advantage|favor\w*)\b")
NEGATIVE_OUTCOME = re.compile(r"\b(?:lose|loses|loss|defeat\w*|struggle\w*|disadvantage)\b")

SCORE_PATTERNS = (
    re.compile(r"\b(?:score|final)\b[^.\n]*?\d+\s*[-–]\s*\d+", re.I),
    re.compile(r"\b\d{1,2}\s*(?:-|–|to)\s*\d{1,2}\b(?!\s*record)", re.I),
)

KEY_EVENT_PATTERNS = (
    re.compile(rf"\b(?:expect|likely|should see)\b{_SPAN}\b(?:home runs?|strikeouts?|walks?|errors?)\b", re.I),
    re.compile(rf"\b(?:pitching|batting)\b{_SPAN}\b(?:dominant|dominate|struggle\w*|effective)\b", re.I),
    re.compile(rf"\b(?:late innings?|early|middle)\b{_SPAN}\b(?:key|crucial|important)\b", re.I),
)

PREDICTION_CONFIDENCE_PATTERNS = (
    re.compile(r"\b(?:confident|certain|likely|probable|possible|uncertain)\b", re.I),
    re.compile(rf"\b(?:strong|weak|moderate)\b{_SPAN}\b(?:chance|likelihood|probability)\b", re.I),
)
HIGH_CONFIDENCE_TERM = re.compile(r"\b(?:confident|certain|strong|likely)\b", re.I)
LOW_CONFIDENCE_TERM = re.compile(r"\b(?:uncertain|weak|possible)\b", re.I)

STRONG_CERTAINTY = re.compile(r"\b(?:strongly|clearly|obviously|definitely|certainly)\b", re.I)
WEAK_CERTAINTY = re.compile(r"\b(?:uncertain|possibly|might|could|maybe)\b", re.I)

PLAYER_NAME = r"\b([A-Z][a-z]+ [A-Z][a-z]+)\b"
PLAYER_PATTERNS = (
    re.compile(
        rf"(?i:\b(?:watch|key|important|spotlight)\b){_SPAN}"
        rf"(?i:\b(?:player|pitcher|batter|hitter)s?\b){_SPAN}{PLAYER_NAME}"
    ),
    re.compile(rf"{PLAYER_NAME}{_SPAN}(?i:\b(?:key|crucial|important|standout)\b)"),
)

# Capitalized words that start two-word phrases which are not player names
NAME_STOPWORDS = {
    "Analysis", "Angeles", "Bay", "Blue", "City", "Diego", "Factors", "Form", "Francisco",
    "Game", "Impact", "Key", "Los", "Matchup", "Momentum", "Narrative", "New", "Offensive",
    "Overview", "Player", "Players", "Prediction", "Recent", "Red", "San", "St", "Strategic",
    "Team", "The", "This", "Venue", "Watch", "Weather", "White", "York",
}

# First match wins
PLAYER_REASONS = (
    ("matchup", "favorable matchup"),
    ("hot", "hot streak"),
    ("struggl", "struggling recently"),
    ("power", "power threat"),
    ("speed", "speed factor"),
    ("clutch", "clutch performer"),
)

STRATEGY_PATTERNS = (
    re.compile(rf"\b(?:strategy|strategic|tactical|approach)\b{_SPAN}\b(?:important|key|crucial)\b", re.I),
    re.compile(rf"\b(?:bullpen|lineup|defensive)\b{_SPAN}\b(?:strategy|consideration)s?\b", re.I),
    re.compile(rf"\b(?:manager|coaching)\b{_SPAN}\b(?:decision|choice|option)s?\b", re.I),
)

KEYWORD_STOPWORDS = {
    "the", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with", "by",
    "is", "are", "was", "were", "be", "been", "have", "has", "had", "will", "would",
    "could", "should", "may", "might", "can", "this", "that", "these", "those",
    "a", "an", "as", "if", "so", "no", "not", "up", "out", "down", "only", "its",
    "it", "he", "she", "they", "we", "you", "i", "my", "me", "us", "our", "their",
    "from", "into", "than", "then", "them", "what", "when", "where", "which", "while",
    "about", "more", "most", "some", "such", "also", "each", "both", "very",
}


class Outcome(str, Enum):
    SELF_FAVORED = "self_favored"
    OPPONENT_FAVORED = "opponent_favored"
    EVEN = "even"
    UNKNOWN = "no_clear_prediction"

    def label(self, team_name: str) -> str:
        return {
            Outcome.SELF_FAVORED: f"{team_name} favored",
            Outcome.OPPONENT_FAVORED: "Opponent favored",
            Outcome.EVEN: "Even matchup",
            Outcome.UNKNOWN: "No clear prediction",
        }[self]


@dataclass
class GameAnalysis:
    """Parsed game preview.

    Attributes:
        raw_analysis: Model text as received
        structured: Section key -> {content, bullets, key_terms}
        key_insights: Deduplicated insight phrases (at most 8)
        predictions: {outcome, outcome_label, score, key_events, confidence}
        player_spotlight: [{name, context, reason}] (at most 6)
        strategic_factors: Strategy phrases
        metadata: {analysis_length, confidence, readability, keywords, parsed_at}
    """

    raw_analysis: str
    structured: dict = field(default_factory=dict)
    key_insights: list[str] = field(default_factory=list)
    predictions: dict = field(default_factory=dict)
    player_spotlight: list[dict] = field(default_factory=list)
    strategic_factors: list[str] = field(default_factory=list)
    metadata: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return asdict(self)


def extract_bullet_points(text: str) -> list[str]:
    """Items of "-", "*", "•" and "1." lists, in order."""
    return [m.group(1).strip() for m in BULLET_PATTERN.finditer(text or "")]


def extract_key_terms(text: str) -> list[str]:
    terms = []
    for pattern in KEY_TERM_PATTERNS:
        terms += [m.group(0) for m in pattern.finditer(text or "")][:MAX_KEY_TERMS_PER_PATTERN]
    return terms


def _matches(patterns, text: str, limit: int | None = None) -> list[str]:
    found = []
    for pattern in patterns:
        hits = [m.group(0).strip() for m in pattern.finditer(text)]
        found += hits[:limit] if limit else hits
    return found


def assess_confidence(text: str) -> str:
    """"high" / "low" by strong vs weak certainty words; ties are "moderate"."""
    strong = len(STRONG_CERTAINTY.findall(text or ""))
    weak = len(WEAK_CERTAINTY.findall(text or ""))
    if strong > weak:
        return "high"
    if weak > strong:
        return "low"
    return "moderate"


def calculate_readability(text: str) -> str:
    sentences = len(re.split(r"[.!?]+", text or ""))
    words = len((text or "").split())
    avg_words = words / sentences
    if avg_words < 15:
        return "easy"
    if avg_words < 25:
        return "moderate"
    return "complex"


def extract_keywords(text: str) -> list[dict]:
    words = re.findall(r"\b[a-z]+\b", (text or "").lower())
    counts = Counter(w for w in words if len(w) > 3 and w not in KEYWORD_STOPWORDS)
    return [{"word": word, "count": count} for word, count in counts.most_common(MAX_KEYWORDS)]


def _clean_field_text(text: str) -> str:
    text = re.sub(r"^[\s*]+", "", text)
    return re.sub(r"[\s\-*•]+$", "", text)


class ResponseParser:
    """Parses completions for one team, with a cache keyed by content hash."""

    def __init__(self, team_aliases: list[str], team_name: str = "Team"):
        """Initialize the parser.

        Args:
            team_aliases: Lowercase names the text may use for the team
                (e.g. ["giants", "sf"])
            team_name: Name used in outcome labels
        """
        self.team_name = team_name
        alias = "|".join(re.escape(a) for a in team_aliases)
        self._alias = re.compile(rf"\b(?:{alias})\b", re.I)
        # (pattern, fixed outcome); None means classify the matched phrase
        self._outcome_patterns = (
            (
                re.compile(
                    rf"\b(?:{alias})\b\s+(?:should|will|likely|are likely to|expected|are expected to)\b"
                    rf"{_SPAN}\b(?:win|lose|prevail|struggle)\w*",
                    re.I,
                ),
                None,
            ),
            (
                re.compile(
                    rf"\b(?:expect|predict|anticipate)\w*{_SPAN}\b(?:{alias})\b{_SPAN}\b(?:win|lose|victory|defeat)\w*",
                    re.I,
                ),
                None,
            ),
            # Another side favored over the team: "favored to beat the Giants"
            (
                re.compile(
                    rf"\b(?:advantage|edge|favor)\w*{_SPAN}\b(?:over|against|to beat|to defeat)\s+(?:the\s+)?(?:{alias})\b",
                    re.I,
                ),
                Outcome.OPPONENT_FAVORED,
            ),
            (
                re.compile(
                    rf"\b(?:{alias})\b\s+(?:are|is|hold|holds|have|has)\s+(?:\w+\s+){{0,3}}?(?:advantage|edge|favor\w*)\b",
                    re.I,
                ),
                Outcome.SELF_FAVORED,
            ),
            (
                re.compile(rf"\b(?:advantage|favor)\w*{_SPAN}\b(?:to|for)\s+(?:the\s+)?(?:{alias}|opponent)\b", re.I),
                None,
            ),
        )
        self._name_stopwords = NAME_STOPWORDS | set(team_name.split())
        self._cache: dict[str, GameAnalysis] = {}
        self.metrics = CacheMetrics()

    # Game preview

    def parse_game_analysis(self, result: CompletionResult) -> GameAnalysis:
        """Structured view of a preview completion. Cached by content hash."""
        content = result.content or ""
        key = self.cache_key(content)
        cached = self._cache.get(key)
        if cached is not None:
            self.metrics.hits += 1
            return cached
        self.metrics.misses += 1

        confidence = assess_confidence(content)
        analysis = GameAnalysis(
            raw_analysis=content,
            structured=self.extract_structured_sections(content),
            key_insights=self.extract_key_insights(content),
            predictions=self.extract_predictions(content),
            player_spotlight=self.extract_player_spotlight(content),
            strategic_factors=_matches(STRATEGY_PATTERNS, content, MAX_MATCHES_PER_PATTERN),
            metadata={
                "analysis_length": len(content),
                "confidence": confidence,
                "readability": calculate_readability(content),
                "keywords": extract_keywords(content),
                "parsed_at": datetime.now().isoformat(),
            },
        )
        self._cache[key] = analysis
        return analysis

    @staticmethod
    def cache_key(content: str) -> str:
        return hashlib.sha256(content.encode("utf-8")).hexdigest()

    def extract_structured_sections(self, text: str) -> dict:
        """Section key -> {content, bullets, key_terms} for each heading found."""
        sections = {}
        for section in PREVIEW_SECTIONS:
            match = section.pattern.search(text or "")
            if not match:
                continue
            body = match.group(1)
            sections[section.key] = {
                "content": body.strip(),
                "bullets": extract_bullet_points(body),
                "key_terms": extract_key_terms(body),
            }
        return sections

    def extract_key_insights(self, text: str) -> list[str]:
        return list(dict.fromkeys(_matches(INSIGHT_PATTERNS, text or "")))[:MAX_INSIGHTS]

    def extract_predictions(self, text: str) -> dict:
        outcome = self.extract_outcome_prediction(text)
        return {
            "outcome": outcome.value,
            "outcome_label": outcome.label(self.team_name),
            "score": self.extract_score_prediction(text),
            "key_events": _matches(KEY_EVENT_PATTERNS, text or "", MAX_MATCHES_PER_PATTERN),
            "confidence": self.extract_prediction_confidence(text),
        }

    def extract_outcome_prediction(self, text: str) -> Outcome:
        """Classify the first sentence that predicts a result for the team."""
        for pattern, outcome in self._outcome_patterns:
            match = pattern.search(text or "")
            if match:
                return outcome or self._interpret_outcome(match.group(0))
        return Outcome.UNKNOWN

    def _interpret_outcome(self, phrase: str) -> Outcome:
        lowered = phrase.lower()
        about_team = bool(self._alias.search(lowered))
        if POSITIVE_OUTCOME.search(lowered):
            return Outcome.SELF_FAVORED if about_team else Outcome.OPPONENT_FAVORED
        if NEGATIVE_OUTCOME.search(lowered):
            return Outcome.OPPONENT_FAVORED if about_team else Outcome.SELF_FAVORED
        return Outcome.EVEN

    def extract_score_prediction(self, text: str) -> str | None:
        for pattern in SCORE_PATTERNS:
            match = pattern.search(text or "")
            if match:
                return match.group(0).strip()
        return None

    def extract_prediction_confidence(self, text: str) -> str:
        terms = _matches(PREDICTION_CONFIDENCE_PATTERNS, text or "")
        high = sum(1 for t in terms if HIGH_CONFIDENCE_TERM.search(t))
        low = sum(1 for t in terms if LOW_CONFIDENCE_TERM.search(t))
        if high > low:
            return "high"
        if low > high:
            return "low"
        return "moderate"

    def extract_player_spotlight(self, text: str) -> list[dict]:
        """Named players near spotlight vocabulary, deduplicated, at most 6."""
        players: dict[str, dict] = {}
        for line in (text or "").splitlines():
            if line.lstrip().startswith("#"):
                continue
            for pattern in PLAYER_PATTERNS:
                for match in pattern.finditer(line):
                    name = match.group(1)
                    if name in players or set(name.split()) & self._name_stopwords:
                        continue
                    context = match.group(0).strip()
                    players[name] = {"name": name, "context": context, "reason": self._player_reason(context)}
        return list(players.values())[:MAX_PLAYERS]

    @staticmethod
    def _player_reason(context: str) -> str:
        lowered = context.lower()
        for keyword, reason in PLAYER_REASONS:
            if keyword in lowered:
                return reason
        return "key player"

    # Focused analyses

    def parse_focused_analysis(self, kind: str, result: CompletionResult) -> dict:
        """Labelled fields of a focused analysis.

        Text fields default to the template's "No X available" wording and
        bullet fields to an empty list.

        Raises:
            ValueError: Unknown analysis kind
        """
        template = get_focused_analysis(kind)
        content = result.content or ""
        parsed: dict = {"raw_analysis": content}

        fields = template.fields
        for i, labeled in enumerate(fields):
            following = fields[i + 1].label_pattern if i + 1 < len(fields) else None
            stop = rf"(?={following}|$)" if following else "$"
            match = re.search(rf"{labeled.label_pattern}[^:\n]*:(.*?){stop}", content, re.I | re.S)
            body = match.group(1) if match else ""

            if labeled.kind == "bullets":
                parsed[labeled.key] = extract_bullet_points(body)
            else:
                parsed[labeled.key] = _clean_field_text(body) or labeled.default

        parsed["confidence"] = assess_confidence(content)
        return parsed

    # Cache

    def clear_cache(self) -> None:
        self._cache.clear()

    def get_cache_stats(self) -> dict:
        return {
            "size": len(self._cache),
            "keys": list(self._cache),
            **self.metrics.to_dict(),
        }
