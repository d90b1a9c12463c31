"""Functional core - pure business logic with no I/O."""

from .models import (
    SessionType,
    AvailabilityWindow,
    Session,
    SessionSuggestion,
    ProgressStats,
    TypeCount,
)
from .calendar import find_overlapping, intervals_overlap, is_valid_clock, whole_hours
from .suggestions import ScoringWeights, DEFAULT_WEIGHTS, generate_suggestions, score_slot
from .progress import calculate_progress_stats

__all__ = [
    # Models
    "SessionType",
    "AvailabilityWindow",
    "Session",
    "SessionSuggestion",
    "ProgressStats",
    "TypeCount",
    # Calendar
    "find_overlapping",
    "intervals_overlap",
    "is_valid_clock",
    "whole_hours",
    # Suggestions
    "ScoringWeights",
    "DEFAULT_WEIGHTS",
    "generate_suggestions",
    "score_slot",
    # Progress
    "calculate_progress_stats",
]
