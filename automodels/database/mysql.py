"""MySQL / MariaDB Schema driver.

Constraints are recovered from the ``SHOW CREATE TABLE`` DDL text.
"""

import re
from typing import List

from .base import Schema
from .blueprint import BlueprintBuilder
from .connection import Connection
from .models import ForeignTable, Key
from .type_mappers import MySqlColumnNormalizer

PRIMARY_KEY_PATTERN = re.compile(r"\s*(PRIMARY KEY)\s+\(([^\)]+)\)", re.I | re.M)
INDEX_PATTERN = re.compile(r"\s*(UNIQUE)?\s*\b(KEY|INDEX)\s+(\w+)\s+\(([^\)]+)\)", re.I | re.M)
FOREIGN_KEY_PATTERN = re.compile(
    r"(?:CONSTRAINT\s+(\w+)\s+)?FOREIGN KEY\s+\(([^\)]+)\)\s+REFERENCES\s+([^\(\s]+)\s*\(([^\)]+)\)",
    re.I | re.M,
)
# KEY idx (name(10)) -> KEY idx (name)
INDEX_PREFIX_PATTERN = re.compile(r"\((\d+)\)")


def columnize(columns: str) -> List[str]:
    """Split a DDL column list, dropping ASC/DESC suffixes."""
    return [part.split()[0] for part in columns.split(",") if part.strip()]


def wrap(*pieces: str) -> str:
    return ".".join("`%s`" % piece.replace("`", "") for piece in pieces)


class MySqlSchema(Schema):
    """Schema driver for MySQL and MariaDB."""

    EXCLUDED_SCHEMAS = {"information_schema", "sys", "mysql", "performance_schema"}

    normalizer = MySqlColumnNormalizer()

    @classmethod
    def schemas(cls, connection: Connection) -> List[str]:
        rows = connection.select("SHOW DATABASES")
        names = [next(iter(row.values())) for row in rows]
        return [name for name in names if not cls.is_excluded(name)]

    def fetch_tables(self) -> List[str]:
        return self._fetch_by_type("BASE TABLE")

    def fetch_views(self) -> List[str]:
        return self._fetch_by_type("VIEW")

    def _fetch_by_type(self, table_type: str) -> List[str]:
        rows = self.connection.select(
            "SHOW FULL TABLES FROM %s WHERE Table_type = ?" % wrap(self.name),
            (table_type,),
        )
        column = "Tables_in_%s" % self.name
        return [row[column] if column in row else next(iter(row.values())) for row in rows]

    def fill_columns(self, builder: BlueprintBuilder):
        rows = self.connection.select("SHOW FULL COLUMNS FROM %s" % wrap(self.name, builder.table))
        for row in rows:
            builder.with_column(self.normalizer.normalize(row))

    def fill_constraints(self, builder: BlueprintBuilder):
        rows = self.connection.select("SHOW CREATE TABLE %s" % wrap(self.name, builder.table))
        row = {key.lower(): value for key, value in rows[0].items()}

        sql = row.get("create table") or row.get("create view") or ""
        sql = INDEX_PREFIX_PATTERN.sub("", sql.replace("`", ""))

        self.fill_primary_key(sql, builder)
        self.fill_indexes(sql, builder)
        self.fill_relations(sql, builder)

    def fill_primary_key(self, sql: str, builder: BlueprintBuilder):
        match = PRIMARY_KEY_PATTERN.search(sql)
        if match:
            builder.with_primary_key(Key.primary(columnize(match.group(2))))

    def fill_indexes(self, sql: str, builder: BlueprintBuilder):
        for unique, _, index, columns in INDEX_PATTERN.findall(sql):
            if unique:
                builder.with_index(Key.unique(columnize(columns), index=index))
            else:
                builder.with_index(Key.plain(columnize(columns), index=index))

    def fill_relations(self, sql: str, builder: BlueprintBuilder):
        for constraint, columns, table, references in FOREIGN_KEY_PATTERN.findall(sql):
            builder.with_relation(Key.foreign(
                columnize(columns),
                columnize(references),
                on=self.resolve_foreign_table(table),
                index=constraint,
            ))

    def resolve_foreign_table(self, table: str) -> ForeignTable:
        """``other_db.users`` -> (other_db, users); ``users`` -> (this schema, users)."""
        if "." in table:
            schema, table = table.split(".", 1)
            return ForeignTable(schema, table)
        return ForeignTable(self.name, table)
