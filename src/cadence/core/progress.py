"""Progress statistics - pure aggregation over sessions."""

from .calendar import whole_hours
from .models import ProgressStats, Session, TypeCount
from .suggestions import round_half_up


def sessions_by_type(sessions: list[Session]) -> list[TypeCount]:
    """
    Count sessions per type, most frequent first.

    Ties keep the order in which each type first appears.
    """
    groups: dict[str, TypeCount] = {}
    for s in sessions:
        if s.session_type_id not in groups:
            groups[s.session_type_id] = TypeCount(
                session_type_id=s.session_type_id,
                session_type_name=s.session_type.name,
                count=0,
            )
        groups[s.session_type_id].count += 1

    return sorted(groups.values(), key=lambda t: -t.count)


def average_spacing(sessions: list[Session]) -> float:
    """
    Mean gap in days between consecutive sessions, ordered by start time.

    Each gap runs from one session's end to the next one's start in whole
    hours (truncated toward zero), so overlapping sessions contribute
    negative gaps.
    """
    if len(sessions) < 2:
        return 0

    ordered = sorted(sessions, key=lambda s: s.start_time)
    gaps = [
        whole_hours(curr.start_time - prev.end_time)
        for prev, curr in zip(ordered, ordered[1:])
    ]
    return sum(gaps) / len(gaps) / 24


def calculate_progress_stats(sessions: list[Session]) -> ProgressStats:
    """
    Completion statistics for a set of sessions.

    Pure function - no I/O.
    """
    total_scheduled = len(sessions)
    total_completed = sum(1 for s in sessions if s.completed)
    completion_rate = (
        int(round_half_up(total_completed / total_scheduled * 100)) if total_scheduled else 0
    )

    return ProgressStats(
        total_scheduled=total_scheduled,
        total_completed=total_completed,
        completion_rate=completion_rate,
        sessions_by_type=sessions_by_type(sessions),
        average_spacing=round_half_up(average_spacing(sessions), 1),
    )
