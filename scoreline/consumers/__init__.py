"""Consumers of normalized events: hierarchy building and presentation."""

from scoreline.consumers.grouping import GroupingBuilder, grouping_key
from scoreline.consumers.presentation import filter_window, in_window, present, sort_live_first

__all__ = [
    "GroupingBuilder",
    "filter_window",
    "grouping_key",
    "in_window",
    "present",
    "sort_live_first",
]
