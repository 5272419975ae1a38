"""CLI package for the MLB game preview agent.

Provides the `mlb-preview` command line surface over GamePreviewAgent.
"""

from mlb_preview_agent.cli.main import cli

__all__ = ["cli"]
