"""Ports - interfaces/protocols for external dependencies."""

from .session_store import SessionStore

__all__ = [
    "SessionStore",
]
