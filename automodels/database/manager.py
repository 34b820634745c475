"""Schema registry and the per-connection Schema Manager."""

import logging
import threading
from typing import Dict, Iterator, List, Optional, Type

from ..errors import UnknownTableError, UnsupportedDriverError
from .base import Reference, Schema
from .blueprint import Blueprint
from .connection import Connection
from .models import ForeignTable
from .mysql import MySqlSchema
from .postgres import PostgresSchema
from .sqlite import SQLiteSchema

logger = logging.getLogger(__name__)


class SchemaRegistry:
    """Maps connection driver types to Schema implementations."""

    def __init__(self, mapping: Optional[Dict[str, Type[Schema]]] = None):
        self._mapping: Dict[str, Type[Schema]] = dict(mapping or {})

    @classmethod
    def default(cls) -> "SchemaRegistry":
        return cls({
            "mysql": MySqlSchema,
            "mariadb": MySqlSchema,
            "postgresql": PostgresSchema,
            "postgres": PostgresSchema,
            "pgsql": PostgresSchema,
            "sqlite": SQLiteSchema,
        })

    def register(self, driver: str, schema: Type[Schema]) -> "SchemaRegistry":
        self._mapping[driver] = schema
        return self

    def has(self, driver: str) -> bool:
        return driver in self._mapping

    def resolve(self, driver: str) -> Type[Schema]:
        if driver not in self._mapping:
            raise UnsupportedDriverError(driver, details={"registered": sorted(self._mapping)})
        return self._mapping[driver]

    def drivers(self) -> List[str]:
        return list(self._mapping)


class SchemaManager:
    """Every Schema reachable from one connection.

    Schema names are enumerated once, on construction, and every Schema
    is built and cached right away. Build a new manager to see changes.
    """

    def __init__(self, connection: Connection, registry: Optional[SchemaRegistry] = None):
        self.connection = connection
        self.registry = registry or SchemaRegistry.default()
        self._schema_class = self.registry.resolve(connection.driver)
        self._schemas: Dict[str, Schema] = {}
        self._lock = threading.Lock()
        self._names: List[str] = []
        self.boot()

    def boot(self):
        logger.info(
            "Booting schema manager for [%s] with %s",
            self.connection.name, self._schema_class.__name__,
        )
        self._names = list(self._schema_class.schemas(self.connection))
        for name in self._names:
            self.make(name)

    def schema_names(self) -> List[str]:
        return list(self._names)

    def make(self, name: str) -> Schema:
        """Return the cached Schema for ``name``, building it on first use."""
        with self._lock:
            if name not in self._schemas:
                self._schemas[name] = self._schema_class(name, self.connection)
            return self._schemas[name]

    def referencing(self, target: Blueprint) -> List[Reference]:
        """Foreign keys pointing at ``target`` from every cached schema."""
        references: List[Reference] = []
        for schema in self:
            references.extend(schema.referencing(target))
        return references

    def blueprint(self, schema: str, table: str) -> Blueprint:
        if schema not in self._schemas:
            raise UnknownTableError(schema, table)
        return self._schemas[schema].table(table)

    def resolve(self, foreign_table: ForeignTable) -> Blueprint:
        return self.blueprint(foreign_table.schema, foreign_table.table)

    def __iter__(self) -> Iterator[Schema]:
        return iter(list(self._schemas.values()))

    def __len__(self):
        return len(self._schemas)

    def __contains__(self, name: str) -> bool:
        return name in self._schemas

    def __repr__(self):
        return f"<SchemaManager {self.connection.name} schemas={list(self._schemas)}>"
