"""Scoreline - ESPN scoreboard and odds aggregation."""

__version__ = "0.1.0"
