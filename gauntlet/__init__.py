"""Gauntlet - timed, progressive capture-the-flag competitions."""

__version__ = "0.1.0"
