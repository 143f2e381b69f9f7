"""Cycle Tracker: repetition boundaries from hand landmark tracking."""

__version__ = "0.1.0"
