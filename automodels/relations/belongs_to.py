"""Belongs-to: the forward side of every foreign key."""

from ..database.models import Key
from .base import Relation, RelationKind, export, render_call
from .model import FOREIGN_KEY_STRATEGY, TableModel
from .naming import camel, snake, strip_suffix_from_foreign_key


class BelongsTo(Relation):
    """``posts.author_id -> users.id`` gives ``Post.author`` / ``Post.user``."""

    kind = RelationKind.BELONGS_TO

    def __init__(self, command: Key, parent: TableModel, related: TableModel):
        self.command = command
        self.parent = parent
        self.related = related

    def name(self) -> str:
        if self.parent.relation_name_strategy() == FOREIGN_KEY_STRATEGY:
            name = strip_suffix_from_foreign_key(
                self.parent.uses_snake_attributes(),
                self.other_key(),
                self.foreign_key(),
            )
        else:
            name = self.related.class_name()

        if self.parent.uses_snake_attributes():
            return snake(name)
        return camel(name)

    def hint(self) -> str:
        if self.is_nullable():
            return f"Optional[{self.related.qualified_class_name()}]"
        return self.related.qualified_class_name()

    def body(self) -> str:
        args = [self.related.qualified_class_name()]

        if self.needs_foreign_key():
            args.append(self.key(self.parent, self.foreign_key()))

        if self.needs_other_key():
            args.append(self.key(self.related, self.other_key()))

        chain = [
            f".where({export(self.qualified_other_key(index))}, '=', {export(self.qualified_foreign_key(index))})"
            for index in range(1, len(self.command.references))
        ]

        return render_call(f"self.belongs_to({', '.join(args)})", chain)

    def foreign_key(self, index: int = 0) -> str:
        return self.command.columns[index]

    def qualified_foreign_key(self, index: int = 0) -> str:
        return f"{self.parent.table()}.{self.foreign_key(index)}"

    def other_key(self, index: int = 0) -> str:
        return self.command.references[index]

    def qualified_other_key(self, index: int = 0) -> str:
        return f"{self.related.table()}.{self.other_key(index)}"

    def needs_foreign_key(self) -> bool:
        default = self.related.record_name() + "_id"
        return default != self.foreign_key() or self.needs_other_key()

    def needs_other_key(self) -> bool:
        return self.related.primary_key() != self.other_key()

    def is_nullable(self) -> bool:
        return self.parent.blueprint.column(self.foreign_key()).nullable
