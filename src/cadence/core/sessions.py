"""Pure session views - no I/O dependencies."""

from datetime import datetime, timedelta

from .calendar import DAY_NAMES, day_of_week
from .models import Session


def _local(dt: datetime, now: datetime) -> datetime:
    return dt.astimezone(now.tzinfo)


def _resolve_now(now: datetime | None) -> datetime:
    if now is None:
        return datetime.now().astimezone()
    if now.tzinfo is None:
        return now.astimezone()
    return now


def is_upcoming(session: Session, now: datetime | None = None) -> bool:
    """Future and not yet completed."""
    now = _resolve_now(now)
    return session.start_time > now and not session.completed


def today_sessions(sessions: list[Session], now: datetime | None = None) -> list[Session]:
    """Sessions starting on the local calendar day of `now`."""
    now = _resolve_now(now)
    return [s for s in sessions if _local(s.start_time, now).date() == now.date()]


def upcoming_sessions(sessions: list[Session], now: datetime | None = None) -> list[Session]:
    now = _resolve_now(now)
    return [s for s in sessions if is_upcoming(s, now)]


def week_sessions(sessions: list[Session], now: datetime | None = None) -> list[Session]:
    """Sessions in the Sunday-to-Saturday week containing `now`."""
    now = _resolve_now(now)
    week_start = now.date() - timedelta(days=day_of_week(now))
    week_end = week_start + timedelta(days=6)
    return [s for s in sessions if week_start <= _local(s.start_time, now).date() <= week_end]


def group_sessions_by_day(
    sessions: list[Session],
    now: datetime | None = None,
) -> dict[str, list[Session]]:
    """
    Group sessions by weekday name, Sunday first.

    All seven days are present, empty or not.
    """
    now = _resolve_now(now)
    grouped: dict[str, list[Session]] = {name: [] for name in DAY_NAMES}
    for s in sessions:
        grouped[DAY_NAMES[day_of_week(_local(s.start_time, now))]].append(s)
    return grouped


def format_session_time(session: Session, now: datetime | None = None) -> str:
    """Local time range, e.g. "9:00 AM - 10:30 AM"."""
    now = _resolve_now(now)

    def _fmt(dt: datetime) -> str:
        local = _local(dt, now)
        return f"{local.hour % 12 or 12}:{local.minute:02d} {'AM' if local.hour < 12 else 'PM'}"

    return f"{_fmt(session.start_time)} - {_fmt(session.end_time)}"
