"""Relationship inference over the Blueprints of a SchemaManager."""

import logging
from fnmatch import fnmatchcase
from typing import Dict, List, Optional, Tuple

from ..config import ModelConfig
from ..database.base import Reference
from ..database.blueprint import Blueprint
from ..database.manager import SchemaManager
from ..database.models import Key
from ..errors import UnknownTableError
from .base import Relation
from .belongs_to import BelongsTo
from .belongs_to_many import BelongsToMany
from .has_one_or_many import has_one_or_many
from .model import TableModel

logger = logging.getLogger(__name__)


class RelationshipInference:
    """Classifies every foreign key around a Blueprint.

    Outgoing foreign keys always give belongs-to. Incoming ones are tested
    for a pivot table first, then split into has-one or has-many.
    """

    def __init__(self, manager: SchemaManager, config: Optional[ModelConfig] = None):
        self.manager = manager
        self.config = config or ModelConfig()
        self._models: Dict[Tuple[str, str], TableModel] = {}

    def model(self, blueprint: Blueprint) -> TableModel:
        key = (blueprint.schema(), blueprint.table())
        if key not in self._models:
            self._models[key] = TableModel(blueprint, self.config)
        return self._models[key]

    def related_model(self, foreign_key: Key) -> Optional[TableModel]:
        """Model of the table a foreign key points at, if it was loaded."""
        try:
            return self.model(self.manager.resolve(foreign_key.on))
        except UnknownTableError:
            logger.warning(
                "Foreign key %s references [%s.%s], which is not loaded; skipping",
                list(foreign_key.columns), foreign_key.on.schema, foreign_key.on.table,
            )
            return None

    def belongs_to(self, blueprint: Blueprint) -> List[BelongsTo]:
        parent = self.model(blueprint)
        relations = []
        for foreign_key in blueprint.relations():
            related = self.related_model(foreign_key)
            if related is not None:
                relations.append(BelongsTo(foreign_key, parent, related))
        return relations

    def pivot_partners(self, model: TableModel, reference: Reference) -> List[Tuple[Key, TableModel]]:
        """Far-side tables when ``reference.blueprint`` looks like a pivot of ``model``.

        The pivot's table name must contain the model's record name; once
        that is removed, the rest must contain the record name of the table
        another of its foreign keys points at.
        """
        table = reference.blueprint.table()
        record = model.record_name()
        if record not in table:
            return []

        remainder = table.replace(record, "", 1)
        partners = []
        for foreign_key in reference.blueprint.relations():
            if foreign_key == reference.foreign_key:
                continue
            target = self.related_model(foreign_key)
            if target is not None and target.record_name() in remainder:
                partners.append((foreign_key, target))
        return partners

    def classify(self, model: TableModel, reference: Reference) -> List[Relation]:
        """Relations ``model`` gets from one incoming foreign key."""
        pivot = self.model(reference.blueprint)
        partners = self.pivot_partners(model, reference)

        if partners:
            logger.debug(
                "[%s] is a pivot of [%s] and %s",
                pivot.qualified_table(), model.qualified_table(),
                [target.qualified_table() for _, target in partners],
            )
            return [
                BelongsToMany(reference.foreign_key, foreign_key, model, pivot, target)
                for foreign_key, target in partners
            ]

        relation = has_one_or_many(reference.foreign_key, model, pivot)
        logger.debug(
            "[%s] %s [%s] via %s",
            model.qualified_table(), relation.kind.value, pivot.qualified_table(),
            list(reference.foreign_key.columns),
        )
        return [relation]

    def referenced_by(self, blueprint: Blueprint) -> List[Relation]:
        model = self.model(blueprint)
        relations: List[Relation] = []
        for reference in self.manager.referencing(blueprint):
            relations.extend(self.classify(model, reference))
        return relations

    def relations(self, blueprint: Blueprint) -> Dict[str, Relation]:
        """All relations of a Blueprint keyed by name, in emission order.

        On a name collision the later relation wins.
        """
        relations: Dict[str, Relation] = {}
        for relation in self.belongs_to(blueprint) + self.referenced_by(blueprint):
            name = relation.name()
            if name in relations:
                logger.warning(
                    "Relation [%s] on [%s] is defined twice; keeping the %s",
                    name, blueprint.qualified_table(), relation.kind.value,
                )
                del relations[name]
            relations[name] = relation
        return relations

    def should_visit(self, blueprint: Blueprint) -> bool:
        table = blueprint.table()

        only = self.config.get(blueprint, "only", []) or []
        if only and not any(fnmatchcase(table, pattern) for pattern in only):
            return False

        excluded = self.config.get(blueprint, "except", []) or []
        return not any(fnmatchcase(table, pattern) for pattern in excluded)

    def map(self, schema: str) -> Dict[str, Dict[str, Relation]]:
        """Relations of every visited Blueprint in a schema, keyed by table."""
        return {
            blueprint.table(): self.relations(blueprint)
            for blueprint in self.manager.make(schema)
            if self.should_visit(blueprint)
        }
