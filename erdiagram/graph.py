"""
Graph model - Entities, properties and relationships of a diagram.

The graph is built once from input data and is read-only afterwards:
- Entities keep their insertion order (rendering and navigation depend on it)
- Relationships keep their input order and may share endpoints
- Every relationship endpoint is resolved to an existing entity property

Diagrams that need different data build a new Graph.
"""

import logging
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Optional, Union

from .models import (
    EntityDescriptor,
    EntityPropertyAccess,
    EntityRelationship,
    EntityRelationshipData,
)

logger = logging.getLogger(__name__)


class EntityReferenceError(ValueError):
    """A relationship names an entity or property that does not exist."""

    def __init__(self, entity: str, property: Optional[str] = None):
        self.entity = entity
        self.property = property
        if property is None:
            message = f"Entity not found: {entity}"
        else:
            message = f"Property not found: {entity}.{property}"
        super().__init__(message)


@dataclass(frozen=True)
class Property:
    """A named, typed property scoped to one entity."""
    entity: str
    name: str
    type: str = ""


@dataclass(frozen=True)
class Entity:
    """An entity with an ordered sequence of properties."""
    name: str
    properties: tuple[Property, ...] = ()

    def property(self, name: str) -> Optional[Property]:
        """Get a property by name."""
        for prop in self.properties:
            if prop.name == name:
                return prop
        return None


@dataclass(frozen=True, eq=False)
class Relationship:
    """
    A directed edge between two entity properties.

    Compared by identity: two relationships with the same endpoints are
    still distinct edges of the multi-graph.
    """
    source_entity: Entity
    source_property: Property
    target_entity: Entity
    target_property: Property

    @property
    def is_self_reference(self) -> bool:
        return self.source_entity is self.target_entity


class Graph:
    """
    An immutable entity relationship graph.

    Entities are stored in an insertion-ordered mapping (name -> Entity),
    relationships in an ordered tuple.
    """

    def __init__(self, entities: Mapping[str, Entity], relationships: Sequence[Relationship]):
        self._entities = MappingProxyType(dict(entities))
        self._relationships = tuple(relationships)

    @classmethod
    def from_data(cls, data: Union[EntityRelationshipData, dict]) -> "Graph":
        """Build a graph from complete input data."""
        if not isinstance(data, EntityRelationshipData):
            data = EntityRelationshipData.model_validate(data)
        return build_graph(data.entities, data.relationships)

    @property
    def entities(self) -> Mapping[str, Entity]:
        return self._entities

    @property
    def relationships(self) -> tuple[Relationship, ...]:
        return self._relationships

    def __len__(self) -> int:
        return len(self._entities)

    def __iter__(self) -> Iterator[Entity]:
        return iter(self._entities.values())

    def __contains__(self, name: object) -> bool:
        return name in self._entities

    def entity(self, name: str) -> Optional[Entity]:
        """Get an entity by name."""
        return self._entities.get(name)

    def first(self) -> Optional[Entity]:
        """Get the first entity in insertion order."""
        return next(iter(self._entities.values()), None)

    def relationships_of(self, entity: Entity) -> list[Relationship]:
        """Relationships where the entity is the source or the target."""
        return [
            r for r in self._relationships
            if r.source_entity is entity or r.target_entity is entity
        ]

    def predecessors(self, entity: Entity) -> list[Entity]:
        """Entities with a relationship pointing into the entity (excluding itself)."""
        result: dict[str, Entity] = {}
        for r in self._relationships:
            if r.target_entity is entity and r.source_entity is not entity:
                result.setdefault(r.source_entity.name, r.source_entity)
        return list(result.values())

    def successors(self, entity: Entity) -> list[Entity]:
        """Entities the entity points to (excluding itself)."""
        result: dict[str, Entity] = {}
        for r in self._relationships:
            if r.source_entity is entity and r.target_entity is not entity:
                result.setdefault(r.target_entity.name, r.target_entity)
        return list(result.values())


def _resolve(entities: Mapping[str, Entity], access: EntityPropertyAccess) -> tuple[Entity, Property]:
    entity = entities.get(access.entity)
    if entity is None:
        raise EntityReferenceError(access.entity)
    prop = entity.property(access.property)
    if prop is None:
        raise EntityReferenceError(access.entity, access.property)
    return entity, prop


def build_graph(
    entities: Mapping[str, Union[EntityDescriptor, dict]],
    relationships: Sequence[Union[EntityRelationship, dict[str, Any]]],
) -> Graph:
    """
    Build a graph from an entity dictionary and a relationship list.

    Args:
        entities: Entity name -> descriptor (ordered property list)
        relationships: Relationships between entity properties

    Returns:
        The constructed Graph

    Raises:
        EntityReferenceError: If a relationship names a missing entity or property
        pydantic.ValidationError: If the input is malformed
    """
    resolved: dict[str, Entity] = {}
    for name, descriptor in entities.items():
        if not isinstance(descriptor, EntityDescriptor):
            descriptor = EntityDescriptor.model_validate(descriptor)
        resolved[name] = Entity(
            name=name,
            properties=tuple(Property(entity=name, name=p.name, type=p.type) for p in descriptor.properties),
        )

    edges: list[Relationship] = []
    for relationship in relationships:
        if not isinstance(relationship, EntityRelationship):
            relationship = EntityRelationship.model_validate(relationship)
        source_entity, source_property = _resolve(resolved, relationship.source)
        target_entity, target_property = _resolve(resolved, relationship.target)
        edges.append(Relationship(source_entity, source_property, target_entity, target_property))

    logger.debug("Built graph with %d entities and %d relationships", len(resolved), len(edges))
    return Graph(resolved, edges)
