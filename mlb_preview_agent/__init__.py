"""MLB game preview agent.

Aggregates MLB Stats API data, asks an LLM for a game-preview narrative and
parses the narrative back into structured fields.
"""

__version__ = "1.0.0"
