"""Data models for schema metadata."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, NamedTuple, Optional, Tuple


class CanonicalType(str, Enum):
    """Dialect-independent column type."""

    STRING = "string"
    INT = "int"
    FLOAT = "float"
    BOOL = "bool"
    DATETIME = "datetime"


@dataclass(frozen=True)
class Column:
    """Represents one normalized database column."""
    name: str
    type: CanonicalType = CanonicalType.STRING
    nullable: bool = True
    default: Any = None
    comment: Optional[str] = None
    size: Optional[int] = None
    scale: Optional[int] = None
    enum: Tuple[str, ...] = ()
    autoincrement: bool = False
    unsigned: bool = False
    # Raw driver value -> bool, for flags stored as bit fields
    mappings: Optional[Dict[Any, bool]] = field(default=None, hash=False)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "name": self.name,
            "type": self.type.value,
            "nullable": self.nullable,
            "default": self.default,
            "comment": self.comment,
            "size": self.size,
            "scale": self.scale,
            "enum": list(self.enum),
            "autoincrement": self.autoincrement,
            "unsigned": self.unsigned,
        }
        if self.mappings is not None:
            data["mappings"] = {repr(raw): value for raw, value in self.mappings.items()}
        return data


class ForeignTable(NamedTuple):
    """Weak reference to a table by schema and name."""
    schema: str
    table: str


PRIMARY = "primary"
UNIQUE = "unique"
INDEX = "index"
FOREIGN = "foreign"


@dataclass(frozen=True)
class Key:
    """Represents a primary, unique, plain or foreign key.

    ``columns`` are ordered. For foreign keys ``references`` holds the
    referenced columns in the same order and ``on`` the referenced table.
    """
    name: str
    columns: Tuple[str, ...] = ()
    index: str = ""
    references: Tuple[str, ...] = ()
    on: Optional[ForeignTable] = None

    @classmethod
    def primary(cls, columns, index: str = "") -> "Key":
        return cls(name=PRIMARY, columns=tuple(columns), index=index)

    @classmethod
    def unique(cls, columns, index: str = "") -> "Key":
        return cls(name=UNIQUE, columns=tuple(columns), index=index)

    @classmethod
    def plain(cls, columns, index: str = "") -> "Key":
        return cls(name=INDEX, columns=tuple(columns), index=index)

    @classmethod
    def foreign(cls, columns, references, on: ForeignTable, index: str = "") -> "Key":
        return cls(
            name=FOREIGN,
            columns=tuple(columns),
            index=index,
            references=tuple(references),
            on=ForeignTable(*on),
        )

    @property
    def is_composite(self) -> bool:
        return len(self.columns) > 1

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "name": self.name,
            "index": self.index,
            "columns": list(self.columns),
        }
        if self.name == FOREIGN:
            data["references"] = list(self.references)
            data["on"] = {"schema": self.on.schema, "table": self.on.table} if self.on else None
        return data
