"""Blueprint: the normalized, read-only metadata of one table or view."""

from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from ..errors import DuplicateColumnError, MalformedForeignKeyError, UnknownColumnError
from .models import PRIMARY, UNIQUE, Column, Key


class BlueprintBuilder:
    """Collects columns and keys while a Schema driver loads one table.

    Every ``with_*`` method returns the builder so calls can be chained.
    """

    def __init__(self, connection: str, schema: str, table: str, is_view: bool = False):
        self.connection = connection
        self.schema = schema
        self.table = table
        self.is_view = is_view
        self._columns: Dict[str, Column] = {}
        self._indexes: List[Key] = []
        self._relations: List[Key] = []
        self._primary_key: Optional[Key] = None

    def with_column(self, column: Column) -> "BlueprintBuilder":
        if column.name in self._columns:
            raise DuplicateColumnError(self.table, column.name)
        self._columns[column.name] = column
        return self

    def with_index(self, index: Key) -> "BlueprintBuilder":
        self._indexes.append(index)
        return self

    def with_relation(self, relation: Key) -> "BlueprintBuilder":
        self._relations.append(relation)
        return self

    def with_primary_key(self, primary_key: Key) -> "BlueprintBuilder":
        self._primary_key = primary_key
        return self

    def build(self) -> "Blueprint":
        """Validate the collected keys and freeze them into a Blueprint.

        Raises:
            MalformedForeignKeyError: If a foreign key is empty, its column and
                reference lists differ in length, or it names a missing column.
        """
        for relation in self._relations:
            self._validate_relation(relation)

        return Blueprint(
            connection=self.connection,
            schema=self.schema,
            table=self.table,
            columns=self._columns,
            indexes=self._indexes,
            relations=self._relations,
            primary_key=self._primary_key,
            is_view=self.is_view,
        )

    def _validate_relation(self, relation: Key):
        details = {
            "schema": self.schema,
            "table": self.table,
            "columns": list(relation.columns),
            "references": list(relation.references),
        }

        if relation.on is None or not relation.columns or not relation.references:
            raise MalformedForeignKeyError(
                f"Foreign key [{relation.index}] on [{self.schema}.{self.table}] is incomplete",
                details=details,
            )

        if len(relation.columns) != len(relation.references):
            raise MalformedForeignKeyError(
                f"Foreign key [{relation.index}] on [{self.schema}.{self.table}] maps "
                f"{len(relation.columns)} columns onto {len(relation.references)} references",
                details=details,
            )

        missing = [name for name in relation.columns if name not in self._columns]
        if missing:
            raise MalformedForeignKeyError(
                f"Foreign key [{relation.index}] on [{self.schema}.{self.table}] "
                f"uses unknown columns {missing}",
                details=details,
            )


class Blueprint:
    """Metadata of one table or view.

    Instances are produced by :class:`BlueprintBuilder` and never change
    afterwards. Foreign keys point at other Blueprints by ``(schema, table)``
    name only; resolve them through the Schema or SchemaManager.
    """

    def __init__(
        self,
        connection: str,
        schema: str,
        table: str,
        columns: Mapping[str, Column],
        indexes: Iterable[Key] = (),
        relations: Iterable[Key] = (),
        primary_key: Optional[Key] = None,
        is_view: bool = False,
    ):
        self._connection = connection
        self._schema = schema
        self._table = table
        self._columns = MappingProxyType(dict(columns))
        self._indexes = tuple(indexes)
        self._relations = tuple(relations)
        self._primary_key = primary_key
        self._is_view = is_view

    def connection(self) -> str:
        return self._connection

    def schema(self) -> str:
        return self._schema

    def table(self) -> str:
        return self._table

    def qualified_table(self) -> str:
        return f"{self._schema}.{self._table}"

    def is_view(self) -> bool:
        return self._is_view

    def columns(self) -> Mapping[str, Column]:
        return self._columns

    def has_column(self, name: str) -> bool:
        return name in self._columns

    def column(self, name: str) -> Column:
        if name not in self._columns:
            raise UnknownColumnError(self.qualified_table(), name)
        return self._columns[name]

    def indexes(self) -> Tuple[Key, ...]:
        return self._indexes

    def unique(self) -> Tuple[Key, ...]:
        return tuple(index for index in self._indexes if index.name == UNIQUE)

    def relations(self) -> Tuple[Key, ...]:
        return self._relations

    def primary_key(self) -> Key:
        """Return the key that identifies a row.

        Falls back to the first unique key when no primary key is declared,
        and to an empty key when there is neither.
        """
        if self._primary_key is not None:
            return self._primary_key

        unique = self.unique()
        if unique:
            return unique[0]

        return Key(name=PRIMARY)

    def has_composite_primary_key(self) -> bool:
        return self.primary_key().is_composite

    def is_table(self, schema: str, table: str) -> bool:
        return self._schema == schema and self._table == table

    def references(self, other: "Blueprint") -> List[Key]:
        """Foreign keys of this Blueprint that point at ``other``."""
        return [
            relation for relation in self._relations
            if relation.on is not None and other.is_table(relation.on.schema, relation.on.table)
        ]

    def is_unique_key(self, columns: Union[Key, Iterable[str]]) -> bool:
        """Whether a single-column unique key covers one of ``columns``.

        Composite unique keys are not consulted.
        """
        if isinstance(columns, Key):
            columns = columns.columns
        candidates = set(columns)

        for index in self.unique():
            if len(index.columns) == 1 and index.columns[0] in candidates:
                return True
        return False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "connection": self._connection,
            "schema": self._schema,
            "table": self._table,
            "is_view": self._is_view,
            "columns": [column.to_dict() for column in self._columns.values()],
            "primary_key": self.primary_key().to_dict(),
            "indexes": [index.to_dict() for index in self._indexes],
            "relations": [relation.to_dict() for relation in self._relations],
        }

    def __repr__(self):
        kind = "view" if self._is_view else "table"
        return f"<Blueprint {kind} {self.qualified_table()}>"
