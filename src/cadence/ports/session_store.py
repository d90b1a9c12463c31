"""Session store interface."""

from datetime import datetime
from typing import Protocol

from cadence.core.models import AvailabilityWindow, Session, SessionType


class SessionStore(Protocol):
    """Interface for persisting session types, availability windows and sessions."""

    def list_session_types(self) -> list[SessionType]:
        """Fetch all session types, newest first."""
        ...

    def get_session_type(self, session_type_id: str) -> SessionType | None:
        """Fetch a session type by id. Returns None if not found."""
        ...

    def add_session_type(self, session_type: SessionType) -> None:
        ...

    def save_session_type(self, session_type: SessionType) -> None:
        """Overwrite an existing session type."""
        ...

    def delete_session_type(self, session_type_id: str) -> None:
        ...

    def list_availability_windows(self) -> list[AvailabilityWindow]:
        """Fetch all windows ordered by day, then start time."""
        ...

    def get_availability_window(self, window_id: str) -> AvailabilityWindow | None:
        ...

    def add_availability_window(self, window: AvailabilityWindow) -> None:
        ...

    def delete_availability_window(self, window_id: str) -> None:
        ...

    def list_sessions(
        self,
        completed: bool | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[Session]:
        """Fetch sessions ordered by start time, optionally filtered."""
        ...

    def get_session(self, session_id: str) -> Session | None:
        ...

    def add_session(self, session: Session) -> None:
        ...

    def save_session(self, session: Session) -> None:
        """Overwrite an existing session."""
        ...

    def delete_session(self, session_id: str) -> None:
        ...
