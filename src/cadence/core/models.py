"""Session domain records - plain values, no I/O."""

from dataclasses import dataclass, field
from datetime import datetime, timezone

HIGH_PRIORITY_THRESHOLD = 4


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp. Naive values are taken to be UTC."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def format_timestamp(dt: datetime) -> str:
    """Format as ISO-8601 UTC with millisecond precision and a Z suffix."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    utc = dt.astimezone(timezone.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class SessionType:
    """A kind of recurring activity (Deep Work, Workout, ...)."""

    id: str
    name: str
    category: str
    priority: int
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)

    @property
    def is_high_priority(self) -> bool:
        return self.priority >= HIGH_PRIORITY_THRESHOLD

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "priority": self.priority,
            "createdAt": format_timestamp(self.created_at),
            "updatedAt": format_timestamp(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SessionType":
        return cls(
            id=data["id"],
            name=data["name"],
            category=data.get("category", ""),
            priority=int(data["priority"]),
            created_at=parse_timestamp(data["createdAt"]) if data.get("createdAt") else _now(),
            updated_at=parse_timestamp(data["updatedAt"]) if data.get("updatedAt") else _now(),
        )


@dataclass
class AvailabilityWindow:
    """A recurring weekly interval. day_of_week: 0=Sunday .. 6=Saturday."""

    id: str
    day_of_week: int
    start_time: str
    end_time: str
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "dayOfWeek": self.day_of_week,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "createdAt": format_timestamp(self.created_at),
            "updatedAt": format_timestamp(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AvailabilityWindow":
        return cls(
            id=data["id"],
            day_of_week=int(data["dayOfWeek"]),
            start_time=data["startTime"],
            end_time=data["endTime"],
            created_at=parse_timestamp(data["createdAt"]) if data.get("createdAt") else _now(),
            updated_at=parse_timestamp(data["updatedAt"]) if data.get("updatedAt") else _now(),
        )


@dataclass
class Session:
    """A scheduled occurrence of a session type."""

    id: str
    session_type_id: str
    session_type: SessionType
    start_time: datetime
    end_time: datetime
    completed: bool = False
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)

    def duration_minutes(self) -> int:
        return int((self.end_time - self.start_time).total_seconds() / 60)

    def to_dict(self, embed_type: bool = True) -> dict:
        data = {
            "id": self.id,
            "sessionTypeId": self.session_type_id,
            "startTime": format_timestamp(self.start_time),
            "endTime": format_timestamp(self.end_time),
            "completed": self.completed,
            "createdAt": format_timestamp(self.created_at),
            "updatedAt": format_timestamp(self.updated_at),
        }
        if embed_type:
            data["sessionType"] = self.session_type.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict, session_type: SessionType) -> "Session":
        return cls(
            id=data["id"],
            session_type_id=data["sessionTypeId"],
            session_type=session_type,
            start_time=parse_timestamp(data["startTime"]),
            end_time=parse_timestamp(data["endTime"]),
            completed=bool(data.get("completed", False)),
            created_at=parse_timestamp(data["createdAt"]) if data.get("createdAt") else _now(),
            updated_at=parse_timestamp(data["updatedAt"]) if data.get("updatedAt") else _now(),
        )


@dataclass
class SessionSuggestion:
    """A proposed slot for a session type. Not persisted."""

    session_type_id: str
    start_time: datetime
    end_time: datetime
    reason: str
    score: int

    def to_dict(self) -> dict:
        return {
            "sessionTypeId": self.session_type_id,
            "startTime": format_timestamp(self.start_time),
            "endTime": format_timestamp(self.end_time),
            "reason": self.reason,
            "score": self.score,
        }


@dataclass
class TypeCount:
    """Number of sessions of one type."""

    session_type_id: str
    session_type_name: str
    count: int

    def to_dict(self) -> dict:
        return {
            "sessionTypeId": self.session_type_id,
            "sessionTypeName": self.session_type_name,
            "count": self.count,
        }


@dataclass
class ProgressStats:
    """Completion statistics over a set of sessions."""

    total_scheduled: int
    total_completed: int
    completion_rate: int
    sessions_by_type: list[TypeCount]
    average_spacing: float

    def to_dict(self) -> dict:
        return {
            "totalScheduled": self.total_scheduled,
            "totalCompleted": self.total_completed,
            "completionRate": self.completion_rate,
            "sessionsByType": [t.to_dict() for t in self.sessions_by_type],
            "averageSpacing": self.average_spacing,
        }
