"""PostgreSQL Schema driver.

Constraints are recovered from ``information_schema`` and the ``pg_catalog``
index tables.
"""

from collections import OrderedDict
from typing import Any, Dict, List

from .base import Schema
from .blueprint import BlueprintBuilder
from .connection import Connection
from .models import ForeignTable, Key
from .type_mappers import PostgresColumnNormalizer

SCHEMAS_SQL = "SELECT schema_name FROM information_schema.schemata ORDER BY schema_name"

TABLES_SQL = """
    SELECT table_name
    FROM information_schema.tables
    WHERE table_schema = ? AND table_type = ?
    ORDER BY table_name
"""

COLUMNS_SQL = """
    SELECT c.column_name, c.data_type, c.udt_schema, c.udt_name, c.is_nullable,
           c.column_default, c.character_maximum_length, c.numeric_precision,
           c.numeric_scale, c.is_identity,
           col_description(
               (quote_ident(c.table_schema) || '.' || quote_ident(c.table_name))::regclass,
               c.ordinal_position
           ) AS comment
    FROM information_schema.columns c
    WHERE c.table_schema = ? AND c.table_name = ?
    ORDER BY c.ordinal_position
"""

ENUM_SQL = """
    SELECT e.enumlabel
    FROM pg_type t
    JOIN pg_enum e ON e.enumtypid = t.oid
    JOIN pg_namespace n ON n.oid = t.typnamespace
    WHERE n.nspname = ? AND t.typname = ?
    ORDER BY e.enumsortorder
"""

PRIMARY_KEY_SQL = """
    SELECT kcu.column_name, tc.constraint_name
    FROM information_schema.table_constraints tc
    JOIN information_schema.key_column_usage kcu
      ON kcu.constraint_schema = tc.constraint_schema
     AND kcu.constraint_name = tc.constraint_name
     AND kcu.table_name = tc.table_name
    WHERE tc.constraint_type = 'PRIMARY KEY'
      AND tc.table_schema = ? AND tc.table_name = ?
    ORDER BY kcu.ordinal_position
"""

INDEXES_SQL = """
    SELECT i.relname AS index_name, ix.indisunique AS is_unique,
           a.attname AS column_name, k.ordinality AS position
    FROM pg_index ix
    JOIN pg_class t ON t.oid = ix.indrelid
    JOIN pg_class i ON i.oid = ix.indexrelid
    JOIN pg_namespace n ON n.oid = t.relnamespace
    CROSS JOIN LATERAL unnest(ix.indkey) WITH ORDINALITY AS k(attnum, ordinality)
    JOIN pg_attribute a ON a.attrelid = t.oid AND a.attnum = k.attnum
    WHERE n.nspname = ? AND t.relname = ? AND NOT ix.indisprimary
    ORDER BY i.relname, k.ordinality
"""

# Joining both sides of key_column_usage on position_in_unique_constraint
# keeps composite keys aligned pairwise.
FOREIGN_KEYS_SQL = """
    SELECT rc.constraint_name, kcu.column_name, kcu.ordinal_position,
           ref.table_schema AS referenced_schema,
           ref.table_name AS referenced_table,
           ref.column_name AS referenced_column
    FROM information_schema.referential_constraints rc
    JOIN information_schema.key_column_usage kcu
      ON kcu.constraint_schema = rc.constraint_schema
     AND kcu.constraint_name = rc.constraint_name
    JOIN information_schema.key_column_usage ref
      ON ref.constraint_schema = rc.unique_constraint_schema
     AND ref.constraint_name = rc.unique_constraint_name
     AND ref.ordinal_position = kcu.position_in_unique_constraint
    WHERE kcu.table_schema = ? AND kcu.table_name = ?
    ORDER BY rc.constraint_name, kcu.ordinal_position
"""


def group_rows(rows: List[Dict[str, Any]], key: str) -> "OrderedDict[str, List[Dict[str, Any]]]":
    """Group one-row-per-column results by constraint, keeping first-seen order."""
    groups: "OrderedDict[str, List[Dict[str, Any]]]" = OrderedDict()
    for row in rows:
        groups.setdefault(row[key], []).append(row)
    return groups


class PostgresSchema(Schema):
    """Schema driver for PostgreSQL."""

    EXCLUDED_SCHEMAS = {"information_schema", "pg_catalog", "pg_toast"}
    EXCLUDED_PREFIXES = ("pg_temp_", "pg_toast_temp_")

    normalizer = PostgresColumnNormalizer()

    @classmethod
    def schemas(cls, connection: Connection) -> List[str]:
        rows = connection.select(SCHEMAS_SQL)
        return [row["schema_name"] for row in rows if not cls.is_excluded(row["schema_name"])]

    @classmethod
    def is_excluded(cls, name: str) -> bool:
        return super().is_excluded(name) or name.lower().startswith(cls.EXCLUDED_PREFIXES)

    def fetch_tables(self) -> List[str]:
        rows = self.connection.select(TABLES_SQL, (self.name, "BASE TABLE"))
        return [row["table_name"] for row in rows]

    def fetch_views(self) -> List[str]:
        rows = self.connection.select(TABLES_SQL, (self.name, "VIEW"))
        return [row["table_name"] for row in rows]

    def fill_columns(self, builder: BlueprintBuilder):
        rows = self.connection.select(COLUMNS_SQL, (self.name, builder.table))
        for row in rows:
            if row.get("data_type") == "USER-DEFINED":
                row = dict(row, enum_values=self.fetch_enum(row.get("udt_schema"), row.get("udt_name")))
            builder.with_column(self.normalizer.normalize(row))

    def fetch_enum(self, schema: str, type_name: str) -> List[str]:
        rows = self.connection.select(ENUM_SQL, (schema, type_name))
        return [row["enumlabel"] for row in rows]

    def fill_constraints(self, builder: BlueprintBuilder):
        self.fill_primary_key(builder)
        self.fill_indexes(builder)
        self.fill_relations(builder)

    def fill_primary_key(self, builder: BlueprintBuilder):
        rows = self.connection.select(PRIMARY_KEY_SQL, (self.name, builder.table))
        if rows:
            builder.with_primary_key(Key.primary(
                [row["column_name"] for row in rows],
                index=rows[0]["constraint_name"],
            ))

    def fill_indexes(self, builder: BlueprintBuilder):
        rows = self.connection.select(INDEXES_SQL, (self.name, builder.table))
        for index, columns in group_rows(rows, "index_name").items():
            columns = sorted(columns, key=lambda row: row["position"])
            names = [row["column_name"] for row in columns]
            if columns[0]["is_unique"]:
                builder.with_index(Key.unique(names, index=index))
            else:
                builder.with_index(Key.plain(names, index=index))

    def fill_relations(self, builder: BlueprintBuilder):
        rows = self.connection.select(FOREIGN_KEYS_SQL, (self.name, builder.table))
        for constraint, columns in group_rows(rows, "constraint_name").items():
            columns = sorted(columns, key=lambda row: row["ordinal_position"])
            builder.with_relation(Key.foreign(
                [row["column_name"] for row in columns],
                [row["referenced_column"] for row in columns],
                on=ForeignTable(columns[0]["referenced_schema"], columns[0]["referenced_table"]),
                index=constraint,
            ))
