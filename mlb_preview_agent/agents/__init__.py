"""Agents that make up the game preview pipeline."""
