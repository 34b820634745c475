"""Database-specific column normalization strategies.

Each normalizer turns one raw column record, as returned by a dialect's
column-introspection call, into a canonical :class:`Column`.
"""

import re
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..errors import MalformedTypeError
from .models import CanonicalType, Column

# Leading type token, optional parenthesized segment, trailing modifiers
_TYPE_PATTERN = re.compile(r"^\s*([A-Za-z_]\w*(?:\s+[A-Za-z_]\w*)*?)\s*(?:\((.*)\))?\s*([\w\s]*)$", re.S)
_QUOTED_LITERAL = re.compile(r"'((?:[^']|'')*)'")


def _split_type(column: Optional[str], raw_type: str) -> Tuple[str, Optional[str], str]:
    """Split ``decimal(10,2) unsigned`` into ``('decimal', '10,2', 'unsigned')``."""
    unquoted = _QUOTED_LITERAL.sub("''", raw_type)
    if unquoted.count("(") != unquoted.count(")"):
        raise MalformedTypeError(column, raw_type, "unbalanced parentheses")

    match = _TYPE_PATTERN.match(raw_type)
    if not match:
        raise MalformedTypeError(column, raw_type, "no type token")

    return match.group(1).lower(), match.group(2), match.group(3).strip().lower()


def _to_int(column: Optional[str], raw_type: str, value: Any) -> int:
    try:
        return int(str(value).strip())
    except ValueError:
        raise MalformedTypeError(column, raw_type, f"[{value}] is not a number")


class ColumnNormalizer(ABC):
    """Abstract base class for column normalization.

    Subclasses provide ``MAPPINGS`` (canonical type -> dialect type tokens)
    and implement :meth:`normalize`.
    """

    MAPPINGS: Dict[CanonicalType, List[str]] = {}

    @abstractmethod
    def normalize(self, record: Mapping[str, Any]) -> Column:
        """Convert a raw column record into a Column."""
        pass

    def lookup(self, token: str) -> Optional[CanonicalType]:
        """Exact match of a type token against ``MAPPINGS``."""
        for canonical, tokens in self.MAPPINGS.items():
            if token in tokens:
                return canonical
        return None


class MySqlColumnNormalizer(ColumnNormalizer):
    """Normalizer for ``SHOW FULL COLUMNS`` rows (MySQL and MariaDB)."""

    MAPPINGS = {
        CanonicalType.STRING: [
            "varchar", "text", "string", "char", "enum", "set", "tinytext", "mediumtext",
            "longtext", "longblob", "mediumblob", "tinyblob", "blob", "json", "binary", "varbinary",
        ],
        CanonicalType.DATETIME: ["datetime", "year", "date", "time", "timestamp"],
        CanonicalType.INT: ["bigint", "int", "integer", "tinyint", "smallint", "mediumint"],
        CanonicalType.FLOAT: ["float", "decimal", "numeric", "dec", "fixed", "double", "real", "double precision"],
        CanonicalType.BOOL: ["bit", "bool", "boolean"],
    }

    BIT_MAPPINGS = {b"\x00": False, b"\x01": True}

    def normalize(self, record: Mapping[str, Any]) -> Column:
        name = record.get("Field")
        raw_type = str(record.get("Type") or "string")
        token, precision, modifiers = _split_type(name, raw_type)

        attributes: Dict[str, Any] = {
            "name": name,
            "type": self.lookup(token) or CanonicalType.STRING,
            "nullable": self._same(record.get("Null"), "YES"),
            "default": record.get("Default"),
            "comment": record.get("Comment") or None,
            "autoincrement": self._same(record.get("Extra"), "auto_increment"),
        }

        if precision is not None:
            self._parse_precision(name, raw_type, token, precision, attributes)

        if attributes["type"] == CanonicalType.INT:
            attributes["unsigned"] = "unsigned" in modifiers

        return Column(**attributes)

    def _parse_precision(self, name, raw_type, token, precision, attributes):
        if token in ("enum", "set"):
            attributes["enum"] = tuple(
                value.replace("''", "'") for value in _QUOTED_LITERAL.findall(precision)
            )
            return

        parts = [part for part in precision.split(",") if part.strip()]
        if not parts:
            raise MalformedTypeError(name, raw_type, "empty length")
        size = _to_int(name, raw_type, parts[0])

        # bit(1) / tinyint(1) flags
        if size == 1 and token in ("bit", "tinyint"):
            attributes["type"] = CanonicalType.BOOL
            if token == "bit":
                attributes["mappings"] = dict(self.BIT_MAPPINGS)
            return

        attributes["size"] = size
        if len(parts) > 1:
            attributes["scale"] = _to_int(name, raw_type, parts[1])

    @staticmethod
    def _same(value: Any, expected: str) -> bool:
        return str(value or "").lower() == expected.lower()


class PostgresColumnNormalizer(ColumnNormalizer):
    """Normalizer for ``information_schema.columns`` rows.

    Rows may carry two extra keys joined in by the schema driver:
    ``comment`` and ``enum_values``.
    """

    MAPPINGS = {
        CanonicalType.STRING: [
            "character varying", "varchar", "character", "char", "text", "citext", "uuid",
            "json", "jsonb", "xml", "inet", "cidr", "macaddr", "bytea", "bit varying",
        ],
        CanonicalType.INT: [
            "integer", "int", "int4", "smallint", "int2", "bigint", "int8",
            "serial", "bigserial", "serial4", "serial8", "smallserial",
        ],
        CanonicalType.FLOAT: ["numeric", "decimal", "double precision", "float8", "real", "float4", "money"],
        CanonicalType.BOOL: ["boolean", "bool"],
        CanonicalType.DATETIME: ["timestamp", "timestamptz", "date", "time", "timetz", "interval"],
    }

    BIT_MAPPINGS = {"0": False, "1": True}

    def normalize(self, record: Mapping[str, Any]) -> Column:
        name = record.get("column_name")
        data_type = str(record.get("data_type") or "").strip().lower()
        if not data_type:
            raise MalformedTypeError(name, record.get("data_type"), "no type token")

        attributes: Dict[str, Any] = {
            "name": name,
            "type": self._resolve(data_type),
            "nullable": record.get("is_nullable") == "YES",
            "default": self._parse_default(record.get("column_default")),
            "comment": record.get("comment") or None,
            "autoincrement": self._is_autoincrement(record),
        }

        max_length = record.get("character_maximum_length")
        if max_length:
            attributes["size"] = int(max_length)

        numeric_precision = record.get("numeric_precision")
        if numeric_precision:
            attributes["size"] = int(numeric_precision)
            numeric_scale = record.get("numeric_scale")
            if numeric_scale:
                attributes["scale"] = int(numeric_scale)

        if data_type == "bit" and attributes.get("size") == 1:
            attributes["type"] = CanonicalType.BOOL
            attributes["mappings"] = dict(self.BIT_MAPPINGS)
            attributes.pop("size")

        enum_values = record.get("enum_values")
        if enum_values:
            attributes["enum"] = tuple(enum_values)

        return Column(**attributes)

    def _resolve(self, data_type: str) -> CanonicalType:
        exact = self.lookup(data_type)
        if exact is not None:
            return exact

        # "timestamp without time zone", "character varying(255)", ...
        best, best_length = CanonicalType.STRING, 0
        for canonical, tokens in self.MAPPINGS.items():
            for token in tokens:
                if data_type.startswith(token) and len(token) > best_length:
                    best, best_length = canonical, len(token)
        return best

    @staticmethod
    def _is_autoincrement(record: Mapping[str, Any]) -> bool:
        if record.get("is_identity") == "YES":
            return True
        return "nextval(" in str(record.get("column_default") or "")

    @staticmethod
    def _parse_default(default: Any) -> Any:
        if default is None:
            return None
        default = str(default)
        if "nextval(" in default:
            return None
        if "::" in default:
            default = default[:default.index("::")]
        return default.strip("'")


class SQLiteColumnNormalizer(ColumnNormalizer):
    """Normalizer for ``PRAGMA table_info`` rows.

    SQLite types are free-form, so unknown tokens fall back to the
    type-affinity rules before defaulting to ``string``.
    """

    MAPPINGS = {
        CanonicalType.STRING: [
            "varchar", "text", "clob", "char", "character", "varying character", "nchar",
            "native character", "nvarchar", "blob", "json", "uuid",
        ],
        CanonicalType.INT: [
            "integer", "int", "tinyint", "smallint", "mediumint", "bigint",
            "unsigned big int", "int2", "int8",
        ],
        CanonicalType.FLOAT: ["real", "double", "double precision", "float", "numeric", "decimal"],
        CanonicalType.BOOL: ["boolean", "bool"],
        CanonicalType.DATETIME: ["date", "datetime", "timestamp", "time"],
    }

    AFFINITY = [
        ("int", CanonicalType.INT),
        ("char", CanonicalType.STRING),
        ("clob", CanonicalType.STRING),
        ("text", CanonicalType.STRING),
        ("real", CanonicalType.FLOAT),
        ("floa", CanonicalType.FLOAT),
        ("doub", CanonicalType.FLOAT),
        ("date", CanonicalType.DATETIME),
        ("time", CanonicalType.DATETIME),
    ]

    def normalize(self, record: Mapping[str, Any]) -> Column:
        name = record.get("name")
        raw_type = str(record.get("type") or "").strip()

        attributes: Dict[str, Any] = {
            "name": name,
            "type": CanonicalType.STRING,
            "nullable": not record.get("notnull") and not record.get("pk"),
            "default": self._parse_default(record.get("dflt_value")),
            "autoincrement": False,
        }

        if raw_type:
            token, precision, trailing = _split_type(name, raw_type)
            # "unsigned big int", "double precision"
            full = " ".join(part for part in (token, trailing) if part)
            attributes["type"] = self._resolve(full)

            if precision is not None:
                parts = [part for part in precision.split(",") if part.strip()]
                if not parts:
                    raise MalformedTypeError(name, raw_type, "empty length")
                size = _to_int(name, raw_type, parts[0])
                if size == 1 and token == "tinyint":
                    attributes["type"] = CanonicalType.BOOL
                else:
                    attributes["size"] = size
                    if len(parts) > 1:
                        attributes["scale"] = _to_int(name, raw_type, parts[1])

            is_pk = int(record.get("pk") or 0) > 0
            attributes["autoincrement"] = is_pk and "int" in full

        return Column(**attributes)

    def _resolve(self, token: str) -> CanonicalType:
        exact = self.lookup(token)
        if exact is not None:
            return exact
        for needle, canonical in self.AFFINITY:
            if needle in token:
                return canonical
        return CanonicalType.STRING

    @staticmethod
    def _parse_default(default: Any) -> Any:
        if default is None:
            return None
        return str(default).strip("'")
