"""Shared fixtures."""

from datetime import datetime, timezone

import pytest

from cadence.core.models import AvailabilityWindow, Session, SessionType


@pytest.fixture
def now():
    """Monday, 08:00 UTC."""
    return datetime(2025, 1, 13, 8, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_type():
    """Factory for creating session types."""
    def _make(priority: int = 5, id: str = "type-1", name: str = "Deep Work") -> SessionType:
        return SessionType(id=id, name=name, category="Work", priority=priority)
    return _make


@pytest.fixture
def make_session(make_type):
    """Factory for creating sessions from (start, end) datetimes."""
    counter = iter(range(1, 10_000))

    def _make(
        start: datetime,
        end: datetime,
        session_type: SessionType | None = None,
        completed: bool = False,
    ) -> Session:
        session_type = session_type or make_type(priority=3, id="type-2", name="Meeting")
        return Session(
            id=f"session-{next(counter)}",
            session_type_id=session_type.id,
            session_type=session_type,
            start_time=start,
            end_time=end,
            completed=completed,
        )
    return _make


@pytest.fixture
def make_window():
    """Factory for creating availability windows."""
    counter = iter(range(1, 10_000))

    def _make(day_of_week: int, start_time: str, end_time: str) -> AvailabilityWindow:
        return AvailabilityWindow(
            id=f"avail-{next(counter)}",
            day_of_week=day_of_week,
            start_time=start_time,
            end_time=end_time,
        )
    return _make
