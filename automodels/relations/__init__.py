"""Relationship inference for automodels."""

from .base import Relation, RelationKind
from .belongs_to import BelongsTo
from .has_one_or_many import HasMany, HasOne, HasOneOrMany, has_one_or_many
from .belongs_to_many import BelongsToMany
from .model import TableModel
from .inference import RelationshipInference

__all__ = [
    "Relation",
    "RelationKind",
    "BelongsTo",
    "HasOne",
    "HasMany",
    "HasOneOrMany",
    "has_one_or_many",
    "BelongsToMany",
    "TableModel",
    "RelationshipInference",
]
