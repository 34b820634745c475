"""SQLite Schema driver.

Everything comes from ``sqlite_master`` and the ``PRAGMA`` metadata calls.
"""

from typing import Dict, List

from .base import Schema
from .blueprint import BlueprintBuilder
from .connection import Connection
from .models import ForeignTable, Key
from .type_mappers import SQLiteColumnNormalizer


def quote(identifier: str) -> str:
    return '"%s"' % identifier.replace('"', '""')


class SQLiteSchema(Schema):
    """Schema driver for SQLite. One connection holds exactly one schema."""

    EXCLUDED_SCHEMAS: set = set()

    normalizer = SQLiteColumnNormalizer()

    @classmethod
    def schemas(cls, connection: Connection) -> List[str]:
        return [connection.database or "main"]

    def fetch_tables(self) -> List[str]:
        return self._fetch_by_type("table")

    def fetch_views(self) -> List[str]:
        return self._fetch_by_type("view")

    def _fetch_by_type(self, kind: str) -> List[str]:
        rows = self.connection.select(
            "SELECT name FROM sqlite_master WHERE type = ? AND name NOT LIKE 'sqlite_%' ORDER BY name",
            (kind,),
        )
        return [row["name"] for row in rows]

    def table_info(self, table: str) -> List[Dict]:
        return self.connection.select("PRAGMA table_info(%s)" % quote(table))

    def fill_columns(self, builder: BlueprintBuilder):
        for row in self.table_info(builder.table):
            builder.with_column(self.normalizer.normalize(row))

    def fill_constraints(self, builder: BlueprintBuilder):
        self.fill_primary_key(builder)
        self.fill_indexes(builder)
        self.fill_relations(builder)

    def primary_key_columns(self, table: str) -> List[str]:
        rows = [row for row in self.table_info(table) if row["pk"]]
        return [row["name"] for row in sorted(rows, key=lambda row: row["pk"])]

    def fill_primary_key(self, builder: BlueprintBuilder):
        columns = self.primary_key_columns(builder.table)
        if columns:
            builder.with_primary_key(Key.primary(columns))

    def fill_indexes(self, builder: BlueprintBuilder):
        indexes = self.connection.select("PRAGMA index_list(%s)" % quote(builder.table))
        for index in sorted(indexes, key=lambda row: row["name"]):
            # Implicit index backing the PRIMARY KEY
            if index.get("origin") == "pk":
                continue

            rows = self.connection.select("PRAGMA index_info(%s)" % quote(index["name"]))
            columns = [row["name"] for row in sorted(rows, key=lambda row: row["seqno"])]

            # Expression indexes report no column name
            if any(column is None for column in columns):
                continue

            if index["unique"]:
                builder.with_index(Key.unique(columns, index=index["name"]))
            else:
                builder.with_index(Key.plain(columns, index=index["name"]))

    def catalog_name(self, table: str) -> str:
        """Spelling of ``table`` as stored in sqlite_master. Identifiers are case-insensitive."""
        for name in self.fetch_tables() + self.fetch_views():
            if name.lower() == table.lower():
                return name
        return table

    def fill_relations(self, builder: BlueprintBuilder):
        rows = self.connection.select("PRAGMA foreign_key_list(%s)" % quote(builder.table))

        groups: Dict[int, List[Dict]] = {}
        for row in rows:
            groups.setdefault(row["id"], []).append(row)

        for _, group in sorted(groups.items(), reverse=True):
            group = sorted(group, key=lambda row: row["seq"])
            table = self.catalog_name(group[0]["table"])
            columns = [row["from"] for row in group]
            references = [row["to"] for row in group]

            # REFERENCES users  ->  users' primary key
            if any(reference is None for reference in references):
                references = self.primary_key_columns(table)

            builder.with_relation(Key.foreign(columns, references, on=ForeignTable(self.name, table)))
