"""Tests for the request-handling layer."""

from datetime import datetime, timezone
from pathlib import Path

import pytest

from cadence.adapters.json_store import JsonFileStore
from cadence.config import DATA_DIR, Config
from cadence.errors import ConflictError, NotFoundError, ValidationError
from cadence.workflows import (
    DEFAULT_SESSION_TYPES,
    complete_session,
    create_availability_window,
    create_session,
    create_session_type,
    delete_session,
    get_progress,
    get_store,
    get_suggestions,
    get_suggestions_for_all,
    list_sessions,
    seed_session_types,
    update_session,
    update_session_type,
)


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


@pytest.fixture
def config(tmp_path):
    return Config(data_file=str(tmp_path / "sessions.json"))


@pytest.fixture
def store(config):
    return get_store(config)


@pytest.fixture
def deep_work(store):
    return create_session_type(store, "Deep Work", "Work", 5)


@pytest.fixture
def monday():
    return utc(2025, 1, 13, 8, 0)


class TestGetStore:
    def test_uses_configured_file(self, tmp_path):
        store = get_store(Config(data_file=str(tmp_path / "x.json")))
        assert isinstance(store, JsonFileStore)
        assert store.path == tmp_path / "x.json"

    def test_expands_user_path(self):
        assert Config(data_file="~/cadence-test/s.json").data_path() == Path.home() / "cadence-test" / "s.json"

    def test_falls_back_to_default(self):
        assert Config().data_path() == DATA_DIR / "sessions.json"


class TestCreateSession:
    def test_overlap_is_rejected(self, store, deep_work):
        existing = create_session(store, deep_work.id, "2025-01-15T10:00:00Z", "2025-01-15T11:00:00Z")

        with pytest.raises(ConflictError) as exc:
            create_session(store, deep_work.id, "2025-01-15T10:30:00Z", "2025-01-15T11:30:00Z")
        assert [s.id for s in exc.value.conflicts] == [existing.id]

        created = create_session(store, deep_work.id, "2025-01-15T12:00:00Z", "2025-01-15T13:00:00Z")
        assert created.start_time == utc(2025, 1, 15, 12)
        assert len(store.list_sessions()) == 2

    def test_touching_sessions_are_allowed(self, store, deep_work):
        create_session(store, deep_work.id, utc(2025, 1, 15, 10), utc(2025, 1, 15, 11))
        create_session(store, deep_work.id, utc(2025, 1, 15, 11), utc(2025, 1, 15, 12))
        assert len(store.list_sessions()) == 2

    def test_end_must_follow_start(self, store, deep_work):
        with pytest.raises(ValidationError) as exc:
            create_session(store, deep_work.id, utc(2025, 1, 15, 11), utc(2025, 1, 15, 11))
        assert exc.value.field == "endTime"

    def test_unknown_type(self, store):
        with pytest.raises(NotFoundError):
            create_session(store, "missing", utc(2025, 1, 15, 10), utc(2025, 1, 15, 11))

    def test_malformed_timestamp(self, store, deep_work):
        with pytest.raises(ValidationError) as exc:
            create_session(store, deep_work.id, "tomorrow", "2025-01-15T11:00:00Z")
        assert exc.value.field == "startTime"

    def test_naive_times_are_utc(self, store, deep_work):
        s = create_session(store, deep_work.id, datetime(2025, 1, 15, 10), datetime(2025, 1, 15, 11))
        assert s.start_time == utc(2025, 1, 15, 10)


class TestUpdateSession:
    def test_reschedule_ignores_itself(self, store, deep_work):
        s = create_session(store, deep_work.id, utc(2025, 1, 15, 10), utc(2025, 1, 15, 11))
        updated = update_session(store, s.id, start_time=utc(2025, 1, 15, 10, 30), end_time=utc(2025, 1, 15, 11, 30))
        assert updated.start_time == utc(2025, 1, 15, 10, 30)
        assert store.get_session(s.id).end_time == utc(2025, 1, 15, 11, 30)

    def test_reschedule_onto_another_session(self, store, deep_work):
        create_session(store, deep_work.id, utc(2025, 1, 15, 10), utc(2025, 1, 15, 11))
        s = create_session(store, deep_work.id, utc(2025, 1, 15, 14), utc(2025, 1, 15, 15))
        with pytest.raises(ConflictError):
            update_session(store, s.id, start_time=utc(2025, 1, 15, 10, 30), end_time=utc(2025, 1, 15, 11, 30))

    def test_start_and_end_go_together(self, store, deep_work):
        s = create_session(store, deep_work.id, utc(2025, 1, 15, 10), utc(2025, 1, 15, 11))
        with pytest.raises(ValidationError):
            update_session(store, s.id, start_time=utc(2025, 1, 15, 12))

    def test_complete(self, store, deep_work):
        s = create_session(store, deep_work.id, utc(2025, 1, 15, 10), utc(2025, 1, 15, 11))
        assert complete_session(store, s.id).completed is True
        assert store.get_session(s.id).completed is True
        assert complete_session(store, s.id, completed=False).completed is False

    def test_missing(self, store):
        with pytest.raises(NotFoundError):
            update_session(store, "missing", completed=True)

    def test_delete(self, store, deep_work):
        s = create_session(store, deep_work.id, utc(2025, 1, 15, 10), utc(2025, 1, 15, 11))
        delete_session(store, s.id)
        assert store.list_sessions() == []


class TestListSessions:
    def test_filters(self, store, deep_work):
        a = create_session(store, deep_work.id, utc(2025, 1, 15, 10), utc(2025, 1, 15, 11))
        b = create_session(store, deep_work.id, utc(2025, 1, 16, 10), utc(2025, 1, 16, 11))
        complete_session(store, a.id)

        assert [s.id for s in list_sessions(store, completed=False)] == [b.id]
        assert [s.id for s in list_sessions(store, start="2025-01-16T00:00:00Z")] == [b.id]
        assert [s.id for s in list_sessions(store, end="2025-01-15T23:59:59Z")] == [a.id]


class TestSessionTypes:
    @pytest.mark.parametrize("priority", [0, 6, "3", True])
    def test_priority_range(self, store, priority):
        with pytest.raises(ValidationError) as exc:
            create_session_type(store, "Reading", "Learning", priority)
        assert exc.value.field == "priority"

    def test_name_required(self, store):
        with pytest.raises(ValidationError):
            create_session_type(store, "  ", "Learning", 2)

    def test_update(self, store, deep_work):
        updated = update_session_type(store, deep_work.id, priority=3)
        assert updated.priority == 3
        assert updated.name == "Deep Work"
        assert store.get_session_type(deep_work.id).priority == 3

    def test_update_missing(self, store):
        with pytest.raises(NotFoundError):
            update_session_type(store, "missing", name="x")

    def test_seed_only_once(self, store):
        created = seed_session_types(store)
        assert [t.name for t in created] == [t["name"] for t in DEFAULT_SESSION_TYPES]
        assert seed_session_types(store) == []
        assert len(store.list_session_types()) == 6


class TestAvailability:
    def test_create(self, store):
        w = create_availability_window(store, 1, "09:00", "17:00")
        assert [x.id for x in store.list_availability_windows()] == [w.id]

    @pytest.mark.parametrize(
        "day,start,end,field",
        [
            (7, "09:00", "17:00", "dayOfWeek"),
            (-1, "09:00", "17:00", "dayOfWeek"),
            (1, "9:00", "17:00", "startTime"),
            (1, "09:00", "24:00", "endTime"),
            (1, "17:00", "09:00", "startTime"),
            (1, "09:00", "09:00", "startTime"),
        ],
    )
    def test_validation(self, store, day, start, end, field):
        with pytest.raises(ValidationError) as exc:
            create_availability_window(store, day, start, end)
        assert exc.value.field == field

    def test_duplicate(self, store):
        create_availability_window(store, 1, "09:00", "17:00")
        with pytest.raises(ValidationError):
            create_availability_window(store, 1, "09:00", "17:00")
        # Overlapping but different windows are fine
        create_availability_window(store, 1, "10:00", "12:00")


class TestGetSuggestions:
    def test_unknown_type(self, store, config, monday):
        with pytest.raises(NotFoundError):
            get_suggestions(store, "missing", now=monday, config=config)

    def test_returns_serialized_suggestions(self, store, config, deep_work, monday):
        create_availability_window(store, 1, "09:00", "17:00")

        suggestions = get_suggestions(store, deep_work.id, 60, 7, now=monday, config=config)

        assert len(suggestions) == 10
        assert suggestions[0] == {
            "sessionTypeId": deep_work.id,
            "startTime": "2025-01-13T09:00:00.000Z",
            "endTime": "2025-01-13T10:00:00.000Z",
            "reason": "First session of this type. Uses your morning focus window. High priority session",
            "score": 100,
        }

    def test_tolerates_empty_data(self, store, config, deep_work, monday):
        assert get_suggestions(store, deep_work.id, now=monday, config=config)

    def test_uses_configured_defaults(self, store, deep_work, monday, tmp_path):
        config = Config(data_file=str(tmp_path / "sessions.json"), default_duration_minutes=90, look_ahead_days=0)
        assert get_suggestions(store, deep_work.id, now=monday, config=config) == []

        config.look_ahead_days = 1
        s = get_suggestions(store, deep_work.id, now=monday, config=config)[0]
        assert s["startTime"] == "2025-01-13T06:00:00.000Z"
        assert s["endTime"] == "2025-01-13T07:30:00.000Z"

    @pytest.mark.parametrize("duration,days", [(0, 7), (-30, 7), (60, -1)])
    def test_rejects_bad_parameters(self, store, config, deep_work, monday, duration, days):
        with pytest.raises(ValidationError):
            get_suggestions(store, deep_work.id, duration, days, now=monday, config=config)

    def test_existing_sessions_are_avoided(self, store, config, deep_work, monday):
        create_session(store, deep_work.id, utc(2025, 1, 13, 9), utc(2025, 1, 13, 12))
        for s in get_suggestions(store, deep_work.id, 60, 1, now=monday, config=config):
            assert not ("2025-01-13T08:30" < s["startTime"] < "2025-01-13T12:00")


class TestGetSuggestionsForAll:
    def test_merges_and_limits(self, store, config, monday):
        seed_session_types(store)
        merged = get_suggestions_for_all(store, now=monday, config=config)

        assert len(merged) == config.top_suggestions
        scores = [s["score"] for s in merged]
        assert scores == sorted(scores, reverse=True)

    def test_skips_unknown_types(self, store, config, deep_work, monday):
        merged = get_suggestions_for_all(store, [deep_work.id, "missing"], limit=3, now=monday, config=config)
        assert len(merged) == 3
        assert {s["sessionTypeId"] for s in merged} == {deep_work.id}

    def test_no_types(self, store, config, monday):
        assert get_suggestions_for_all(store, now=monday, config=config) == []


class TestGetProgress:
    def test_empty(self, store):
        assert get_progress(store) == {
            "totalScheduled": 0,
            "totalCompleted": 0,
            "completionRate": 0,
            "sessionsByType": [],
            "averageSpacing": 0,
        }

    def test_counts(self, store, deep_work):
        a = create_session(store, deep_work.id, utc(2025, 1, 15, 10), utc(2025, 1, 15, 11))
        create_session(store, deep_work.id, utc(2025, 1, 17, 11), utc(2025, 1, 17, 12))
        complete_session(store, a.id)

        progress = get_progress(store)

        assert progress["completionRate"] == 50
        assert progress["averageSpacing"] == 2.0
        assert progress["sessionsByType"] == [
            {"sessionTypeId": deep_work.id, "sessionTypeName": "Deep Work", "count": 2}
        ]
