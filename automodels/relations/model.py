"""Naming view over one Blueprint, driven by the model configuration."""

from typing import List, Optional

from ..config import ModelConfig
from ..database.blueprint import Blueprint
from ..database.models import Key
from .naming import singular, studly

DEFAULT_NAMESPACE = "app.models"
DEFAULT_CREATED_AT = "created_at"
DEFAULT_UPDATED_AT = "updated_at"
RELATED_STRATEGY = "related"
FOREIGN_KEY_STRATEGY = "foreign_key"


class TableModel:
    """How one table is named as a model class and as relation targets."""

    def __init__(self, blueprint: Blueprint, config: Optional[ModelConfig] = None):
        self.blueprint = blueprint
        self.config = config or ModelConfig()

    def option(self, key: str, default=None):
        return self.config.get(self.blueprint, key, default)

    def schema(self) -> str:
        return self.blueprint.schema()

    def table(self, remove_prefix: bool = False) -> str:
        if remove_prefix:
            return self.remove_table_prefix(self.blueprint.table())
        return self.blueprint.table()

    def qualified_table(self) -> str:
        return self.blueprint.qualified_table()

    def table_prefix(self) -> str:
        return self.option("table_prefix", "") or ""

    def remove_table_prefix(self, table: str) -> str:
        prefix = self.table_prefix()
        if prefix and table.startswith(prefix):
            return table[len(prefix):]
        return table

    def should_pluralize_table_name(self) -> bool:
        pluralize = bool(self.option("pluralize", True))
        if self.table() in (self.option("override_pluralize_for", []) or []):
            return not pluralize
        return pluralize

    def should_lower_case_table_name(self) -> bool:
        return bool(self.option("lower_table_name_first", False))

    def record_name(self) -> str:
        """Singular, prefix-less table name, e.g. ``blog_posts`` -> ``blog_post``."""
        table = self.table(remove_prefix=True)
        if self.should_pluralize_table_name():
            return singular(table)
        return table

    def class_name(self) -> str:
        # Users can pin a class name per table
        overridden = self.option("model_names." + self.table())
        if overridden:
            return overridden

        if self.should_lower_case_table_name():
            return studly(self.record_name().lower())
        return studly(self.record_name())

    def namespace(self) -> str:
        return self.option("namespace", DEFAULT_NAMESPACE)

    def qualified_class_name(self) -> str:
        return f"{self.namespace()}.{self.class_name()}"

    def primary_key(self) -> Optional[str]:
        columns = self.blueprint.primary_key().columns
        return columns[0] if columns else None

    def uses_snake_attributes(self) -> bool:
        return bool(self.option("snake_attributes", True))

    def relation_name_strategy(self) -> str:
        return self.option("relation_name_strategy", RELATED_STRATEGY)

    def uses_property_constants(self) -> bool:
        return bool(self.option("with_property_constants", False))

    def created_at_field(self) -> str:
        return self.option("timestamps.fields.CREATED_AT", DEFAULT_CREATED_AT)

    def updated_at_field(self) -> str:
        return self.option("timestamps.fields.UPDATED_AT", DEFAULT_UPDATED_AT)

    def uses_timestamps(self) -> bool:
        enabled = self.option("timestamps.enabled", None)
        if enabled is None:
            enabled = self.option("timestamps", True)
            # "timestamps": {"fields": {...}} without an explicit flag
            if isinstance(enabled, dict):
                enabled = True
        return (
            bool(enabled)
            and self.blueprint.has_column(self.created_at_field())
            and self.blueprint.has_column(self.updated_at_field())
        )

    def properties(self) -> List[str]:
        return list(self.blueprint.columns())

    def is_primary_key(self, key: Key) -> bool:
        """Whether ``key`` covers every column of this table's identifying key."""
        columns = self.blueprint.primary_key().columns
        if not columns:
            return False
        return all(column in key.columns for column in columns)

    def is_unique_key(self, key: Key) -> bool:
        return self.blueprint.is_unique_key(key)

    def constant(self, column: str) -> str:
        """``app.models.User.EMAIL`` style reference to a column constant."""
        return f"{self.qualified_class_name()}.{column.upper()}"

    def __repr__(self):
        return f"<TableModel {self.qualified_class_name()} ({self.qualified_table()})>"
