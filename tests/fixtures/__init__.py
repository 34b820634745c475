"""Test fixtures package."""

from .mock_connection import MockConnection, StaticSchema, create_static_manager

__all__ = [
    "MockConnection",
    "StaticSchema",
    "create_static_manager",
]
