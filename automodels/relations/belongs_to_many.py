"""Belongs-to-many through a pivot table."""

from typing import List

from ..database.models import Key
from .base import Relation, RelationKind, export, render_call
from .model import TableModel
from .naming import camel, plural, singular, snake


class BelongsToMany(Relation):
    """``users <- role_user -> roles`` gives ``User.roles``.

    Args:
        parent_command: Foreign key on the pivot pointing at ``parent``
        reference_command: Foreign key on the pivot pointing at ``reference``
        parent: Model owning the relation
        pivot: The junction table
        reference: Model on the far side of the pivot
    """

    kind = RelationKind.BELONGS_TO_MANY

    def __init__(
        self,
        parent_command: Key,
        reference_command: Key,
        parent: TableModel,
        pivot: TableModel,
        reference: TableModel,
    ):
        self.parent_command = parent_command
        self.reference_command = reference_command
        self.parent = parent
        self.pivot = pivot
        self.reference = reference
        self.related = reference

    def name(self) -> str:
        table = self.reference.table(remove_prefix=True)

        if self.parent.should_lower_case_table_name():
            table = table.lower()

        if self.parent.should_pluralize_table_name():
            table = plural(singular(table))

        if self.parent.uses_snake_attributes():
            return snake(table)
        return camel(table)

    def hint(self) -> str:
        return f"List[{self.reference.qualified_class_name()}]"

    def body(self) -> str:
        args = [self.reference.qualified_class_name()]

        if self.needs_pivot_table():
            args.append(export(self.pivot_table()))

        if self.needs_foreign_key():
            args.append(self.key(self.pivot, self.foreign_key()))

        if self.needs_other_key():
            args.append(self.key(self.pivot, self.other_key()))

        chain = []
        fields = self.pivot_fields()
        if fields:
            chain.append(f".with_pivot({', '.join(self.key(self.pivot, field) for field in fields)})")

        if self.pivot.uses_timestamps():
            chain.append(".with_timestamps()")

        return render_call(f"self.belongs_to_many({', '.join(args)})", chain)

    def parent_record_name(self) -> str:
        return snake(self.parent.record_name())

    def reference_record_name(self) -> str:
        return snake(self.reference.record_name())

    def pivot_table(self) -> str:
        if self.parent.schema() != self.pivot.schema():
            return self.pivot.qualified_table()
        return self.pivot.table()

    def needs_pivot_table(self) -> bool:
        default = "_".join(sorted([self.reference_record_name(), self.parent_record_name()])).lower()
        return self.pivot_table() != default or self.needs_foreign_key()

    def foreign_key(self) -> str:
        return self.parent_command.columns[0]

    def needs_foreign_key(self) -> bool:
        return self.foreign_key() != self.parent_record_name() + "_id" or self.needs_other_key()

    def other_key(self) -> str:
        return self.reference_command.columns[0]

    def needs_other_key(self) -> bool:
        return self.other_key() != self.reference_record_name() + "_id"

    def pivot_fields(self) -> List[str]:
        """Pivot columns other than both foreign keys and the timestamps."""
        skipped = {
            self.foreign_key(),
            self.other_key(),
            self.pivot.created_at_field(),
            self.pivot.updated_at_field(),
        }
        return [column for column in self.pivot.properties() if column not in skipped]
