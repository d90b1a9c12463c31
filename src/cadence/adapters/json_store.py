"""JSON file session store adapter."""

import json
import logging
from datetime import datetime
from pathlib import Path

from cadence.core.models import AvailabilityWindow, Session, SessionType
from cadence.errors import ConflictError, NotFoundError

logger = logging.getLogger(__name__)


def _empty() -> dict:
    return {"sessionTypes": [], "availabilityWindows": [], "sessions": []}


class JsonFileStore:
    """
    JSON file storage.

    Implements SessionStore protocol. All records live in one file, read on
    every call and rewritten on every change. Sessions are stored without
    their session type; the embed is resolved on read.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path).expanduser()
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def _load(self) -> dict:
        if not self.path.exists():
            return _empty()
        try:
            data = json.loads(self.path.read_text())
        except json.JSONDecodeError as e:
            logger.warning(f"Failed to parse session store {self.path}: {e}")
            raise RuntimeError(f"Session store is corrupt: {self.path}") from e
        for key, value in _empty().items():
            data.setdefault(key, value)
        return data

    def _save(self, data: dict) -> None:
        self.path.write_text(json.dumps(data, indent=2))

    @staticmethod
    def _index(records: list[dict], record_id: str) -> int | None:
        for i, record in enumerate(records):
            if record["id"] == record_id:
                return i
        return None

    # ---- session types ----

    def list_session_types(self) -> list[SessionType]:
        types = [SessionType.from_dict(t) for t in self._load()["sessionTypes"]]
        return sorted(types, key=lambda t: t.created_at, reverse=True)

    def get_session_type(self, session_type_id: str) -> SessionType | None:
        for t in self._load()["sessionTypes"]:
            if t["id"] == session_type_id:
                return SessionType.from_dict(t)
        return None

    def add_session_type(self, session_type: SessionType) -> None:
        data = self._load()
        data["sessionTypes"].append(session_type.to_dict())
        self._save(data)
        logger.debug(f"Added session type {session_type.id} ({session_type.name})")

    def save_session_type(self, session_type: SessionType) -> None:
        data = self._load()
        i = self._index(data["sessionTypes"], session_type.id)
        if i is None:
            raise NotFoundError("Session type", session_type.id)
        data["sessionTypes"][i] = session_type.to_dict()
        self._save(data)

    def delete_session_type(self, session_type_id: str) -> None:
        data = self._load()
        i = self._index(data["sessionTypes"], session_type_id)
        if i is None:
            raise NotFoundError("Session type", session_type_id)
        in_use = [s["id"] for s in data["sessions"] if s["sessionTypeId"] == session_type_id]
        if in_use:
            raise ConflictError(
                f"Session type {session_type_id} still has {len(in_use)} session(s)",
                conflicts=in_use,
            )
        del data["sessionTypes"][i]
        self._save(data)

    # ---- availability windows ----

    def list_availability_windows(self) -> list[AvailabilityWindow]:
        windows = [AvailabilityWindow.from_dict(w) for w in self._load()["availabilityWindows"]]
        return sorted(windows, key=lambda w: (w.day_of_week, w.start_time))

    def get_availability_window(self, window_id: str) -> AvailabilityWindow | None:
        for w in self._load()["availabilityWindows"]:
            if w["id"] == window_id:
                return AvailabilityWindow.from_dict(w)
        return None

    def add_availability_window(self, window: AvailabilityWindow) -> None:
        data = self._load()
        data["availabilityWindows"].append(window.to_dict())
        self._save(data)

    def delete_availability_window(self, window_id: str) -> None:
        data = self._load()
        i = self._index(data["availabilityWindows"], window_id)
        if i is None:
            raise NotFoundError("Availability window", window_id)
        del data["availabilityWindows"][i]
        self._save(data)

    # ---- sessions ----

    def _sessions(self, data: dict) -> list[Session]:
        types = {t["id"]: SessionType.from_dict(t) for t in data["sessionTypes"]}
        sessions = []
        for record in data["sessions"]:
            session_type = types.get(record["sessionTypeId"])
            if session_type is None:
                logger.warning(
                    f"Skipping session {record['id']}: unknown session type {record['sessionTypeId']}"
                )
                continue
            sessions.append(Session.from_dict(record, session_type))
        return sessions

    def list_sessions(
        self,
        completed: bool | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[Session]:
        sessions = self._sessions(self._load())
        if completed is not None:
            sessions = [s for s in sessions if s.completed == completed]
        if start is not None:
            sessions = [s for s in sessions if s.start_time >= start]
        if end is not None:
            sessions = [s for s in sessions if s.start_time <= end]
        return sorted(sessions, key=lambda s: s.start_time)

    def get_session(self, session_id: str) -> Session | None:
        for s in self._sessions(self._load()):
            if s.id == session_id:
                return s
        return None

    def add_session(self, session: Session) -> None:
        data = self._load()
        data["sessions"].append(session.to_dict(embed_type=False))
        self._save(data)
        logger.debug(f"Added session {session.id} at {session.start_time.isoformat()}")

    def save_session(self, session: Session) -> None:
        data = self._load()
        i = self._index(data["sessions"], session.id)
        if i is None:
            raise NotFoundError("Session", session.id)
        data["sessions"][i] = session.to_dict(embed_type=False)
        self._save(data)

    def delete_session(self, session_id: str) -> None:
        data = self._load()
        i = self._index(data["sessions"], session_id)
        if i is None:
            raise NotFoundError("Session", session_id)
        del data["sessions"][i]
        self._save(data)
