"""Abstract base class for per-dialect Schema drivers."""

import logging
from abc import ABC, abstractmethod
from types import MappingProxyType
from typing import Dict, List, Mapping, NamedTuple

from ..errors import UnknownTableError
from .blueprint import Blueprint, BlueprintBuilder
from .connection import Connection
from .models import Key
from .type_mappers import ColumnNormalizer

logger = logging.getLogger(__name__)


class Reference(NamedTuple):
    """A foreign key of ``blueprint`` pointing at some other Blueprint."""
    blueprint: Blueprint
    foreign_key: Key


class Schema(ABC):
    """All Blueprints of one database/schema name on one connection.

    Every table and view is loaded synchronously on construction. Any
    failure propagates and no partial Schema is returned.

    Subclasses must implement the dialect hooks.
    """

    # Override in subclasses to exclude system schemas
    EXCLUDED_SCHEMAS: set = {"information_schema"}

    normalizer: ColumnNormalizer

    def __init__(self, name: str, connection: Connection):
        self.name = name
        self.connection = connection
        self._tables: Dict[str, Blueprint] = {}
        self.load()

    @classmethod
    @abstractmethod
    def schemas(cls, connection: Connection) -> List[str]:
        """List every non-system schema name visible on a connection."""
        pass

    @abstractmethod
    def fetch_tables(self) -> List[str]:
        """Names of the base tables in this schema."""
        pass

    @abstractmethod
    def fetch_views(self) -> List[str]:
        """Names of the views in this schema."""
        pass

    @abstractmethod
    def fill_columns(self, builder: BlueprintBuilder):
        """Add every column of ``builder.table``, in physical order."""
        pass

    @abstractmethod
    def fill_constraints(self, builder: BlueprintBuilder):
        """Add the primary key, indexes and foreign keys of ``builder.table``."""
        pass

    def load(self):
        tables: Dict[str, Blueprint] = {}

        for table in self.fetch_tables():
            tables[table] = self.load_table(table)

        views = self.fetch_views()
        for view in views:
            tables[view] = self.load_table(view, is_view=True)

        self._tables = tables
        logger.info(
            "Loaded schema [%s] on [%s]: %d tables, %d views",
            self.name, self.connection.name, len(tables) - len(views), len(views),
        )

    def load_table(self, table: str, is_view: bool = False) -> Blueprint:
        builder = BlueprintBuilder(self.connection.name, self.name, table, is_view=is_view)
        self.fill_columns(builder)
        if not is_view:
            self.fill_constraints(builder)

        blueprint = builder.build()
        logger.debug(
            "Loaded %s [%s]: %d columns, %d relations",
            "view" if is_view else "table",
            blueprint.qualified_table(), len(blueprint.columns()), len(blueprint.relations()),
        )
        return blueprint

    def tables(self) -> Mapping[str, Blueprint]:
        return MappingProxyType(self._tables)

    def has(self, table: str) -> bool:
        return table in self._tables

    def table(self, table: str) -> Blueprint:
        if table not in self._tables:
            raise UnknownTableError(self.name, table)
        return self._tables[table]

    def referencing(self, target: Blueprint) -> List[Reference]:
        """Foreign keys of this schema's Blueprints that point at ``target``."""
        references = []
        for blueprint in self._tables.values():
            for foreign_key in blueprint.references(target):
                references.append(Reference(blueprint, foreign_key))
        return references

    @classmethod
    def is_excluded(cls, name: str) -> bool:
        return name.lower() in cls.EXCLUDED_SCHEMAS

    def __iter__(self):
        return iter(self._tables.values())

    def __len__(self):
        return len(self._tables)

    def __repr__(self):
        return f"<{self.__class__.__name__} {self.name} ({len(self._tables)} tables)>"
