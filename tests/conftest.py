"""Shared pytest fixtures for automodels tests."""

import sqlite3

import pytest
from typing import Iterable, Optional, Sequence

from automodels.database import (
    BlueprintBuilder,
    CanonicalType,
    Column,
    Connection,
    ForeignTable,
    Key,
    SchemaManager,
)


SHOP_DDL = """
CREATE TABLE users (
    id INTEGER PRIMARY KEY,
    name VARCHAR(255) NOT NULL,
    email VARCHAR(255),
    created_at DATETIME,
    updated_at DATETIME
);
CREATE UNIQUE INDEX users_email_unique ON users (email);

CREATE TABLE posts (
    id INTEGER PRIMARY KEY,
    user_id INTEGER NOT NULL REFERENCES users (id),
    title VARCHAR(200) NOT NULL,
    body TEXT
);
CREATE INDEX posts_title_index ON posts (title);

CREATE TABLE profiles (
    user_id INTEGER NOT NULL,
    bio TEXT,
    UNIQUE (user_id),
    FOREIGN KEY (user_id) REFERENCES users (id)
);

CREATE TABLE roles (
    id INTEGER PRIMARY KEY,
    name VARCHAR(50) NOT NULL
);

CREATE TABLE role_user (
    role_id INTEGER NOT NULL REFERENCES roles (id),
    user_id INTEGER NOT NULL REFERENCES users (id)
);

CREATE TABLE employees (
    id INTEGER PRIMARY KEY,
    manager_id INTEGER REFERENCES employees (id),
    name TEXT NOT NULL
);

CREATE VIEW active_users AS SELECT id, name FROM users;
"""


@pytest.fixture
def sqlite_connection():
    """Factory for in-memory SQLite connections built from a DDL script."""
    connections = []

    def make(ddl: str, name: str = "default") -> Connection:
        raw = sqlite3.connect(":memory:")
        raw.executescript(ddl)
        connection = Connection(
            raw, "sqlite", name=name, database="main", placeholder="?", errors=(sqlite3.Error,)
        )
        connections.append(connection)
        return connection

    yield make

    for connection in connections:
        connection.close()


@pytest.fixture
def shop_manager(sqlite_connection):
    """SchemaManager over the sample shop database (schema ``main``)."""
    return SchemaManager(sqlite_connection(SHOP_DDL))


@pytest.fixture
def make_blueprint():
    """Factory for hand-built Blueprints.

    Columns may be names (non-null ints) or Column objects. Foreign keys are
    ``(columns, references, "schema.table")`` tuples.
    """

    def make(
        table: str,
        columns: Iterable,
        primary: Optional[Sequence[str]] = None,
        unique: Iterable[Sequence[str]] = (),
        foreign: Iterable[tuple] = (),
        schema: str = "app",
        connection: str = "default",
    ):
        builder = BlueprintBuilder(connection, schema, table)
        for column in columns:
            if isinstance(column, str):
                column = Column(name=column, type=CanonicalType.INT, nullable=False)
            builder.with_column(column)

        if primary:
            builder.with_primary_key(Key.primary(primary))

        for index, unique_columns in enumerate(unique):
            builder.with_index(Key.unique(unique_columns, index=f"{table}_unique_{index}"))

        for local, references, target in foreign:
            target_schema, target_table = target.split(".", 1)
            builder.with_relation(Key.foreign(local, references, on=ForeignTable(target_schema, target_table)))

        return builder.build()

    return make
