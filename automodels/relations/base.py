"""Base class for classified relationships."""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, List

from .model import TableModel
from .naming import studly


class RelationKind(str, Enum):
    BELONGS_TO = "belongs_to"
    HAS_ONE = "has_one"
    HAS_MANY = "has_many"
    BELONGS_TO_MANY = "belongs_to_many"


def export(value: Any) -> str:
    """Render a literal argument of a relation body."""
    return repr(value)


def render_call(call: str, chain: List[str]) -> str:
    """``return self.x(...)``, wrapped in parentheses when calls are chained."""
    if not chain:
        return f"return {call}"
    lines = [f"    {call}"] + [f"    {link}" for link in chain]
    return "return (\n" + "\n".join(lines) + "\n)"


class Relation(ABC):
    """One relationship of a parent model, ready for rendering.

    ``related`` is the model the relation returns instances of.
    """

    kind: RelationKind
    parent: TableModel
    related: TableModel

    @abstractmethod
    def name(self) -> str:
        """Attribute name of the relation on the parent model."""
        pass

    @abstractmethod
    def hint(self) -> str:
        """Type hint of the relation's value, for documentation."""
        pass

    @abstractmethod
    def body(self) -> str:
        """Source of the method body that builds the relation."""
        pass

    def return_type(self) -> str:
        return studly(self.kind.value)

    def docblock(self) -> str:
        return f":rtype: {self.return_type()}[{self.related.qualified_class_name()}]"

    def key(self, model: TableModel, column: str) -> str:
        """Column argument, as a property constant when the model uses them."""
        if model.uses_property_constants():
            return model.constant(column)
        return export(column)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "name": self.name(),
            "hint": self.hint(),
            "return_type": self.return_type(),
            "related": self.related.qualified_table(),
            "body": self.body(),
        }

    def __repr__(self):
        return f"<{self.__class__.__name__} {self.parent.table()}.{self.name()} -> {self.related.table()}>"
