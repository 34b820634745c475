"""Database introspection module for automodels.

This module turns raw, dialect-specific catalog output into Blueprints,
with Schema drivers for MySQL/MariaDB, PostgreSQL and SQLite.
"""

from .models import CanonicalType, Column, ForeignTable, Key
from .blueprint import Blueprint, BlueprintBuilder
from .connection import Connection, connect
from .type_mappers import (
    ColumnNormalizer,
    MySqlColumnNormalizer,
    PostgresColumnNormalizer,
    SQLiteColumnNormalizer,
)
from .base import Reference, Schema
from .mysql import MySqlSchema
from .postgres import PostgresSchema
from .sqlite import SQLiteSchema
from .manager import SchemaManager, SchemaRegistry

__all__ = [
    # Data models
    "CanonicalType",
    "Column",
    "ForeignTable",
    "Key",
    "Blueprint",
    "BlueprintBuilder",
    # Connections
    "Connection",
    "connect",
    # Column normalizers
    "ColumnNormalizer",
    "MySqlColumnNormalizer",
    "PostgresColumnNormalizer",
    "SQLiteColumnNormalizer",
    # Schema drivers
    "Reference",
    "Schema",
    "MySqlSchema",
    "PostgresSchema",
    "SQLiteSchema",
    "SchemaManager",
    "SchemaRegistry",
]
