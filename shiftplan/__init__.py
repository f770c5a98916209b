"""Shift- and calendar-aware production scheduling engine."""

__version__ = "0.1.0"
