"""Errors raised by the request-handling and persistence layers."""


class CadenceError(Exception):
    """Base class for caller-facing errors."""

    pass


class ValidationError(CadenceError):
    """Raised when a request carries a malformed or out-of-range value."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class NotFoundError(CadenceError):
    """Raised when a referenced record does not exist."""

    def __init__(self, kind: str, record_id: str):
        super().__init__(f"{kind} not found: {record_id}")
        self.kind = kind
        self.record_id = record_id


class ConflictError(CadenceError):
    """Raised when a write would overlap or orphan existing records."""

    def __init__(self, message: str, conflicts: list | None = None):
        super().__init__(message)
        self.conflicts = conflicts or []
