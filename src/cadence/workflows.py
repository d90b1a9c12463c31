"""Request-handling layer shared by the CLI and any other front end.

Each function fetches what it needs from a SessionStore, validates the
request, calls into the pure core, and returns JSON-ready data or the
changed record. Validation, not-found and conflict problems are raised as
cadence.errors exceptions.
"""

import logging
import uuid
from datetime import datetime, timezone

from .adapters.json_store import JsonFileStore
from .config import Config, load_config
from .core.calendar import find_overlapping, is_valid_clock
from .core.models import AvailabilityWindow, Session, SessionType, parse_timestamp
from .core.progress import calculate_progress_stats
from .core.suggestions import generate_suggestions
from .errors import ConflictError, NotFoundError, ValidationError
from .ports.session_store import SessionStore

logger = logging.getLogger(__name__)

DEFAULT_SESSION_TYPES = [
    {"name": "Deep Work", "category": "Work", "priority": 5},
    {"name": "Morning Meditation", "category": "Health", "priority": 4},
    {"name": "Workout", "category": "Health", "priority": 4},
    {"name": "Language Learning", "category": "Learning", "priority": 3},
    {"name": "Client Meeting", "category": "Work", "priority": 3},
    {"name": "Reading", "category": "Learning", "priority": 2},
]


def get_store(config: Config) -> JsonFileStore:
    """Resolve the session store from config."""
    return JsonFileStore(config.data_path())


def _new_id() -> str:
    return uuid.uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _require_session_type(store: SessionStore, session_type_id: str) -> SessionType:
    session_type = store.get_session_type(session_type_id)
    if session_type is None:
        raise NotFoundError("Session type", session_type_id)
    return session_type


def _coerce_time(value: datetime | str, field: str) -> datetime:
    """Accept an ISO-8601 string or datetime; naive values are UTC."""
    if isinstance(value, str):
        try:
            return parse_timestamp(value)
        except ValueError:
            raise ValidationError(f"{field} is not a valid ISO-8601 timestamp: {value!r}", field)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# ============== Suggestions & progress ==============


def get_suggestions(
    store: SessionStore,
    session_type_id: str,
    duration_minutes: int | None = None,
    look_ahead_days: int | None = None,
    *,
    now: datetime | None = None,
    config: Config | None = None,
) -> list[dict]:
    """Suggest slots for one session type."""
    config = config or load_config()
    duration_minutes = duration_minutes if duration_minutes is not None else config.default_duration_minutes
    look_ahead_days = look_ahead_days if look_ahead_days is not None else config.look_ahead_days

    if duration_minutes <= 0:
        raise ValidationError("durationMinutes must be positive", "durationMinutes")
    if look_ahead_days < 0:
        raise ValidationError("lookAheadDays must not be negative", "lookAheadDays")

    session_type = _require_session_type(store, session_type_id)
    sessions = store.list_sessions()
    windows = store.list_availability_windows()
    logger.debug(
        f"Suggesting {session_type.name}: {len(sessions)} sessions, {len(windows)} windows, "
        f"{duration_minutes} min over {look_ahead_days} days"
    )

    suggestions = generate_suggestions(
        session_type,
        sessions,
        windows,
        duration_minutes,
        look_ahead_days,
        now=now or config.local_now(),
    )
    return [s.to_dict() for s in suggestions]


def get_suggestions_for_all(
    store: SessionStore,
    session_type_ids: list[str] | None = None,
    duration_minutes: int | None = None,
    look_ahead_days: int | None = None,
    *,
    limit: int | None = None,
    now: datetime | None = None,
    config: Config | None = None,
) -> list[dict]:
    """
    Suggest slots across several session types and keep the best overall.

    Unknown type ids are skipped. Defaults to every stored type and to the
    configured top_suggestions limit.
    """
    config = config or load_config()
    limit = limit if limit is not None else config.top_suggestions
    now = now or config.local_now()
    if session_type_ids is None:
        session_type_ids = [t.id for t in store.list_session_types()]

    combined = []
    for session_type_id in session_type_ids:
        try:
            combined.extend(
                get_suggestions(
                    store,
                    session_type_id,
                    duration_minutes,
                    look_ahead_days,
                    now=now,
                    config=config,
                )
            )
        except NotFoundError as e:
            logger.warning(f"Skipping suggestions: {e}")

    combined.sort(key=lambda s: -s["score"])
    return combined[:limit]


def get_progress(store: SessionStore) -> dict:
    """Progress statistics over every stored session."""
    return calculate_progress_stats(store.list_sessions()).to_dict()


# ============== Session types ==============


def _validate_priority(priority) -> int:
    if isinstance(priority, bool) or not isinstance(priority, int) or not 1 <= priority <= 5:
        raise ValidationError("Priority must be between 1 and 5", "priority")
    return priority


def _validate_text(value: str, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} must not be empty", field)
    return value.strip()


def create_session_type(store: SessionStore, name: str, category: str, priority: int) -> SessionType:
    session_type = SessionType(
        id=_new_id(),
        name=_validate_text(name, "name"),
        category=_validate_text(category, "category"),
        priority=_validate_priority(priority),
    )
    store.add_session_type(session_type)
    logger.info(f"Created session type {session_type.name} ({session_type.id})")
    return session_type


def update_session_type(
    store: SessionStore,
    session_type_id: str,
    name: str | None = None,
    category: str | None = None,
    priority: int | None = None,
) -> SessionType:
    session_type = _require_session_type(store, session_type_id)
    if name is not None:
        session_type.name = _validate_text(name, "name")
    if category is not None:
        session_type.category = _validate_text(category, "category")
    if priority is not None:
        session_type.priority = _validate_priority(priority)
    session_type.updated_at = _utcnow()
    store.save_session_type(session_type)
    return session_type


def delete_session_type(store: SessionStore, session_type_id: str) -> None:
    store.delete_session_type(session_type_id)
    logger.info(f"Deleted session type {session_type_id}")


def seed_session_types(store: SessionStore) -> list[SessionType]:
    """Insert the default session types unless some already exist."""
    existing = store.list_session_types()
    if existing:
        logger.info(f"Store already has {len(existing)} session types, skipping seed")
        return []
    return [create_session_type(store, **t) for t in DEFAULT_SESSION_TYPES]


# ============== Availability ==============


def create_availability_window(
    store: SessionStore,
    day_of_week: int,
    start_time: str,
    end_time: str,
) -> AvailabilityWindow:
    if isinstance(day_of_week, bool) or not isinstance(day_of_week, int) or not 0 <= day_of_week <= 6:
        raise ValidationError("Day of week must be between 0 (Sunday) and 6 (Saturday)", "dayOfWeek")
    if not is_valid_clock(start_time):
        raise ValidationError("Time must be in HH:mm format", "startTime")
    if not is_valid_clock(end_time):
        raise ValidationError("Time must be in HH:mm format", "endTime")
    if start_time >= end_time:
        raise ValidationError("Start time must be before end time", "startTime")

    for w in store.list_availability_windows():
        if (w.day_of_week, w.start_time, w.end_time) == (day_of_week, start_time, end_time):
            raise ValidationError("An identical availability window already exists", "startTime")

    window = AvailabilityWindow(
        id=_new_id(),
        day_of_week=day_of_week,
        start_time=start_time,
        end_time=end_time,
    )
    store.add_availability_window(window)
    return window


def delete_availability_window(store: SessionStore, window_id: str) -> None:
    store.delete_availability_window(window_id)


# ============== Sessions ==============


def _check_interval(store: SessionStore, start: datetime, end: datetime, exclude_id: str | None = None) -> None:
    if end <= start:
        raise ValidationError("End time must be after start time", "endTime")
    conflicts = find_overlapping(start, end, store.list_sessions(), exclude_id=exclude_id)
    if conflicts:
        logger.info(f"Rejected {start.isoformat()}-{end.isoformat()}: {len(conflicts)} conflict(s)")
        raise ConflictError("Session conflicts with existing sessions", conflicts)


def create_session(
    store: SessionStore,
    session_type_id: str,
    start_time: datetime | str,
    end_time: datetime | str,
) -> Session:
    session_type = _require_session_type(store, session_type_id)
    start = _coerce_time(start_time, "startTime")
    end = _coerce_time(end_time, "endTime")
    _check_interval(store, start, end)

    session = Session(
        id=_new_id(),
        session_type_id=session_type.id,
        session_type=session_type,
        start_time=start,
        end_time=end,
    )
    store.add_session(session)
    logger.info(f"Created {session_type.name} session at {start.isoformat()}")
    return session


def update_session(
    store: SessionStore,
    session_id: str,
    completed: bool | None = None,
    start_time: datetime | str | None = None,
    end_time: datetime | str | None = None,
) -> Session:
    session = store.get_session(session_id)
    if session is None:
        raise NotFoundError("Session", session_id)

    if (start_time is None) != (end_time is None):
        raise ValidationError("startTime and endTime must be given together", "startTime")

    if start_time is not None and end_time is not None:
        start = _coerce_time(start_time, "startTime")
        end = _coerce_time(end_time, "endTime")
        _check_interval(store, start, end, exclude_id=session.id)
        session.start_time = start
        session.end_time = end

    if completed is not None:
        session.completed = completed

    session.updated_at = _utcnow()
    store.save_session(session)
    return session


def complete_session(store: SessionStore, session_id: str, completed: bool = True) -> Session:
    return update_session(store, session_id, completed=completed)


def delete_session(store: SessionStore, session_id: str) -> None:
    store.delete_session(session_id)
    logger.info(f"Deleted session {session_id}")


def list_sessions(
    store: SessionStore,
    completed: bool | None = None,
    start: datetime | str | None = None,
    end: datetime | str | None = None,
) -> list[Session]:
    return store.list_sessions(
        completed=completed,
        start=_coerce_time(start, "startDate") if start is not None else None,
        end=_coerce_time(end, "endDate") if end is not None else None,
    )
