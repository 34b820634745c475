"""Has-one and has-many: the reverse side of a foreign key."""

from abc import abstractmethod

from ..database.models import Key
from .base import Relation, RelationKind, export, render_call
from .model import FOREIGN_KEY_STRATEGY, TableModel
from .naming import camel, plural, singular, snake, strip_suffix_from_foreign_key, ucfirst


class HasOneOrMany(Relation):
    """Shared body rendering.

    ``command`` is the foreign key on ``related`` that points at ``parent``.
    """

    def __init__(self, command: Key, parent: TableModel, related: TableModel):
        self.command = command
        self.parent = parent
        self.related = related

    @abstractmethod
    def method(self) -> str:
        pass

    def body(self) -> str:
        args = [self.related.qualified_class_name()]

        if self.needs_foreign_key():
            args.append(self.key(self.related, self.foreign_key()))

        if self.needs_local_key():
            args.append(self.key(self.parent, self.local_key()))

        chain = [
            f".where({export(self.qualified_foreign_key(index))}, '=', {export(self.qualified_local_key(index))})"
            for index in range(1, len(self.command.columns))
        ]

        return render_call(f"self.{self.method()}({', '.join(args)})", chain)

    def foreign_key(self, index: int = 0) -> str:
        return self.command.columns[index]

    def qualified_foreign_key(self, index: int = 0) -> str:
        return f"{self.related.table()}.{self.foreign_key(index)}"

    def local_key(self, index: int = 0) -> str:
        return self.command.references[index]

    def qualified_local_key(self, index: int = 0) -> str:
        return f"{self.parent.table()}.{self.local_key(index)}"

    def needs_foreign_key(self) -> bool:
        default = self.parent.record_name() + "_id"
        return default != self.foreign_key() or self.needs_local_key()

    def needs_local_key(self) -> bool:
        return self.parent.primary_key() != self.local_key()

    def _case(self, name: str) -> str:
        if self.parent.uses_snake_attributes():
            return snake(name)
        return camel(name)


class HasOne(HasOneOrMany):
    kind = RelationKind.HAS_ONE

    def method(self) -> str:
        return "has_one"

    def name(self) -> str:
        return self._case(self.related.class_name())

    def hint(self) -> str:
        return f"Optional[{self.related.qualified_class_name()}]"


class HasMany(HasOneOrMany):
    kind = RelationKind.HAS_MANY

    def method(self) -> str:
        return "has_many"

    def name(self) -> str:
        related = plural(self.related.class_name())

        if self.parent.relation_name_strategy() == FOREIGN_KEY_STRATEGY:
            stripped = strip_suffix_from_foreign_key(
                self.parent.uses_snake_attributes(),
                self.local_key(),
                self.foreign_key(),
            )
            # users.id <- posts.author_id: authored posts, not just posts
            if snake(stripped) != snake(self.parent.class_name()):
                related = related + "Where" + ucfirst(singular(stripped))

        return self._case(related)

    def hint(self) -> str:
        return f"List[{self.related.qualified_class_name()}]"


def has_one_or_many(command: Key, parent: TableModel, related: TableModel) -> HasOneOrMany:
    """HasOne when ``command`` identifies a single ``related`` row, HasMany otherwise."""
    if related.is_primary_key(command) or related.is_unique_key(command):
        return HasOne(command, parent, related)
    return HasMany(command, parent, related)
