"""Slot suggestion engine - pure scoring heuristics, no I/O.

Candidate slots are generated from the weekly availability windows (or a
default 06:00-22:00 window when a weekday has none), filtered against the
existing sessions, and ranked by a weighted sum of five factors:

    spacing       distance to the nearest existing session
    priority      the session type's priority
    day load      how many sessions the day already holds
    availability  how well the slot fits the user's windows
    fatigue       clustering of high-priority sessions

Every factor scores 0-100, so the weighted total does too.
"""

import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta, tzinfo

from .calendar import (
    clock_string,
    day_of_week,
    find_overlapping,
    is_during_hours,
    is_valid_clock,
    parse_clock,
    whole_hours,
)
from .models import HIGH_PRIORITY_THRESHOLD, AvailabilityWindow, Session, SessionSuggestion, SessionType

MIN_SPACING_HOURS = 2
IDEAL_SPACING_HOURS = 24
MAX_SESSIONS_PER_DAY = 4
FATIGUE_WINDOW_HOURS = 48
SLOT_STEP_MINUTES = 30
DEFAULT_DAY_START = "06:00"
DEFAULT_DAY_END = "22:00"
MIN_SCORE = 30
MAX_SUGGESTIONS = 10


@dataclass(frozen=True)
class ScoringWeights:
    """Relative weight of each scoring factor. Defaults sum to 1."""

    spacing: float = 0.30
    priority: float = 0.15
    day_load: float = 0.20
    availability: float = 0.25
    fatigue: float = 0.10


DEFAULT_WEIGHTS = ScoringWeights()


def round_half_up(value: float, digits: int = 0) -> float:
    """Round halves away from zero for positives (1.5 -> 2, 2.5 -> 3)."""
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def windows_for_day(
    availability_windows: list[AvailabilityWindow],
    weekday: int,
) -> list[AvailabilityWindow]:
    """Well-formed windows for a weekday (Sunday=0). Malformed clocks are ignored."""
    return [
        w
        for w in availability_windows
        if w.day_of_week == weekday and is_valid_clock(w.start_time) and is_valid_clock(w.end_time)
    ]


def generate_time_slots(
    day: date,
    duration_minutes: int,
    availability_windows: list[AvailabilityWindow],
    tz: tzinfo | None = None,
) -> list[datetime]:
    """
    Candidate start times for one day, every 30 minutes.

    Each window matching the weekday contributes its own slots; overlapping
    windows are not merged. A day without windows gets 06:00-22:00. Without
    a tz, slots are system local time with the offset in force on that date.
    """
    windows = windows_for_day(availability_windows, day_of_week(day))
    bounds = [(w.start_time, w.end_time) for w in windows] or [(DEFAULT_DAY_START, DEFAULT_DAY_END)]

    duration = timedelta(minutes=duration_minutes)
    step = timedelta(minutes=SLOT_STEP_MINUTES)
    slots = []
    for start_str, end_str in bounds:
        window_start = datetime.combine(day, parse_clock(start_str), tzinfo=tz)
        window_end = datetime.combine(day, parse_clock(end_str), tzinfo=tz)
        current = window_start
        while current + duration <= window_end:
            slots.append(current if tz is not None else current.astimezone())
            current += step
    return slots


def spacing_score(start: datetime, end: datetime, existing_sessions: list[Session]) -> float:
    """Score distance in whole hours to the nearest session; 0 when closer than MIN_SPACING_HOURS."""
    if not existing_sessions:
        return 100

    min_gap = math.inf
    for session in existing_sessions:
        before = whole_hours(start - session.end_time)
        after = whole_hours(session.start_time - end)
        if before > 0:
            min_gap = min(min_gap, before)
        if after > 0:
            min_gap = min(min_gap, after)

    if min_gap < MIN_SPACING_HOURS:
        return 0
    return min(100, (min_gap / IDEAL_SPACING_HOURS) * 100)


def priority_score(priority: int) -> float:
    return (priority / 5) * 100


def day_load_score(start: datetime, existing_sessions: list[Session]) -> float:
    """Penalize days that already hold several sessions."""
    day = start.date()
    count = sum(1 for s in existing_sessions if s.start_time.astimezone(start.tzinfo).date() == day)
    if count >= MAX_SESSIONS_PER_DAY:
        return 20
    return 100 - count * 15


def availability_score(
    start: datetime,
    end: datetime,
    availability_windows: list[AvailabilityWindow],
) -> float:
    """100 inside a window, 50 across a window edge or with no windows that day, else 0."""
    windows = windows_for_day(availability_windows, day_of_week(start))
    if not windows:
        return 50

    # Fixed-width "HH:mm" strings order the same way as the times they encode.
    start_str = clock_string(start)
    end_str = clock_string(end)

    if any(start_str >= w.start_time and end_str <= w.end_time for w in windows):
        return 100

    partial = any(
        (w.start_time <= start_str < w.end_time) or (w.start_time < end_str <= w.end_time)
        for w in windows
    )
    return 50 if partial else 0


def fatigue_score(start: datetime, priority: int, existing_sessions: list[Session]) -> float:
    """Penalize stacking high-priority sessions within 48 hours of each other."""
    if priority < HIGH_PRIORITY_THRESHOLD:
        return 100

    window = timedelta(hours=FATIGUE_WINDOW_HOURS)
    nearby = [
        s
        for s in existing_sessions
        if start - window <= s.start_time <= start + window
        and s.session_type.priority >= HIGH_PRIORITY_THRESHOLD
    ]

    if len(nearby) >= 3:
        return 30
    if len(nearby) >= 2:
        return 60
    return 100


def score_slot(
    start: datetime,
    end: datetime,
    session_type: SessionType,
    existing_sessions: list[Session],
    availability_windows: list[AvailabilityWindow],
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> float:
    """Weighted sum of the five factors. Not clamped."""
    return (
        spacing_score(start, end, existing_sessions) * weights.spacing
        + priority_score(session_type.priority) * weights.priority
        + day_load_score(start, existing_sessions) * weights.day_load
        + availability_score(start, end, availability_windows) * weights.availability
        + fatigue_score(start, session_type.priority, existing_sessions) * weights.fatigue
    )


def generate_reason(
    start: datetime,
    session_type: SessionType,
    existing_sessions: list[Session],
) -> str:
    """Human-readable explanation for a suggested slot."""
    reasons = []

    same_type = [s for s in existing_sessions if s.session_type_id == session_type.id]
    if same_type:
        gaps = [whole_hours(start - s.end_time) for s in same_type]
        gaps = [g for g in gaps if g > 0]
        if gaps:
            gap = min(gaps)
            name = same_type[0].session_type.name
            if gap >= IDEAL_SPACING_HOURS:
                days = round_half_up(gap / 24, 1)
                reasons.append(f"Good spacing ({days:g} days since last {name})")
            else:
                reasons.append(f"Good spacing ({gap} hours since last {name})")
    else:
        reasons.append("First session of this type")

    if is_during_hours(start, 6, 12):
        reasons.append("Uses your morning focus window")
    elif is_during_hours(start, 18, 22):
        reasons.append("Uses your evening focus window")

    if session_type.is_high_priority:
        reasons.append("High priority session")

    return ". ".join(reasons) if reasons else "Good time slot available"


def generate_suggestions(
    session_type: SessionType,
    existing_sessions: list[Session],
    availability_windows: list[AvailabilityWindow],
    duration_minutes: int = 60,
    look_ahead_days: int = 7,
    *,
    now: datetime | None = None,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> list[SessionSuggestion]:
    """
    Propose the best slots for a session type over the next N days.

    Pure function - no I/O. Never raises for well-typed input.

    Args:
        session_type: The type of session to place
        existing_sessions: All existing sessions (any type)
        availability_windows: The user's weekly windows
        duration_minutes: Length of the proposed session
        look_ahead_days: Number of calendar days to search, starting today
        now: Current time; its timezone defines the local day (naive or
            omitted means system local time)
        weights: Factor weights

    Returns:
        Up to 10 suggestions scoring at least 30, best first
    """
    if now is None:
        now = datetime.now()
    # A naive now is system local time; offsets are resolved per slot
    tz = now.tzinfo
    today = now.date()
    duration = timedelta(minutes=duration_minutes)

    suggestions = []
    for offset in range(look_ahead_days):
        day = today + timedelta(days=offset)
        for start in generate_time_slots(day, duration_minutes, availability_windows, tz):
            end = start + duration

            if find_overlapping(start, end, existing_sessions):
                continue

            score = score_slot(start, end, session_type, existing_sessions, availability_windows, weights)
            if score < MIN_SCORE:
                continue

            suggestions.append(
                SessionSuggestion(
                    session_type_id=session_type.id,
                    start_time=start,
                    end_time=end,
                    reason=generate_reason(start, session_type, existing_sessions),
                    score=int(round_half_up(score)),
                )
            )

    # sorted() is stable: equal scores keep chronological order
    suggestions = sorted(suggestions, key=lambda s: -s.score)
    return suggestions[:MAX_SUGGESTIONS]
