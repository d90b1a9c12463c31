"""Adapters - I/O implementations of ports."""

from .json_store import JsonFileStore

__all__ = [
    "JsonFileStore",
]
