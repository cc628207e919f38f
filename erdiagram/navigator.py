"""
Focus/context navigation - Show one entity together with its neighbors.

The focal entity goes to the center panel, entities pointing into it to
the left panel and entities it points to to the right panel. The view is
rebuilt from scratch on every selection change.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Optional, Union

from .graph import Entity, Graph, Relationship
from .rendering import DiagramHost, EntityElement

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VisibilityPartition:
    """The neighborhood of a focal entity, split by edge direction."""
    focus: Entity
    predecessors: tuple[Entity, ...]
    successors: tuple[Entity, ...]
    self_loops: tuple[Entity, ...]
    relationships: tuple[Relationship, ...]  # Every relationship touching the focus

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "focus": self.focus.name,
            "predecessors": [e.name for e in self.predecessors],
            "successors": [e.name for e in self.successors],
            "self_loops": [e.name for e in self.self_loops],
            "relationships": len(self.relationships),
        }


def partition_for(graph: Graph, name: str) -> VisibilityPartition:
    """
    Partition the neighbors of an entity into predecessors and successors.

    An entity that is both a predecessor and a successor is only listed
    as a predecessor.

    Raises:
        KeyError: If the graph has no entity with this name
    """
    entity = graph.entity(name)
    if entity is None:
        raise KeyError(name)

    predecessors = graph.predecessors(entity)
    seen = {e.name for e in predecessors}
    successors = [e for e in graph.successors(entity) if e.name not in seen]

    relationships = graph.relationships_of(entity)
    self_loops = (entity,) if any(r.is_self_reference for r in relationships) else ()

    return VisibilityPartition(
        focus=entity,
        predecessors=tuple(predecessors),
        successors=tuple(successors),
        self_loops=self_loops,
        relationships=tuple(relationships),
    )


class Navigator:
    """
    Ego-network view over a graph, driven by selection changes.

    State is the current focal entity name; `select` recomputes the
    visibility partition and re-renders the host.
    """

    def __init__(self, graph: Graph, host: DiagramHost, elements: Mapping[str, EntityElement]):
        self.graph = graph
        self.host = host
        self.elements = elements
        self.current: Optional[str] = None
        self.partition: Optional[VisibilityPartition] = None

    @property
    def options(self) -> list[str]:
        """Entity names offered by the selector, in insertion order."""
        return list(self.elements)

    def start(self) -> Optional[VisibilityPartition]:
        """Focus the first entity; show nothing for an empty graph."""
        first = self.graph.first()
        if first is None:
            return None
        return self.select(first.name)

    def show(self, element: EntityElement) -> VisibilityPartition:
        """Handle header activation: sync the selector, then select."""
        self.host.selected = element.name
        return self.select(element.name)

    def on_selector_change(self, value: str) -> Optional[VisibilityPartition]:
        """Handle a selector change; unknown values are ignored."""
        if value not in self.elements:
            return None
        return self.select(value)

    def select(self, entity: Union[str, Entity, EntityElement]) -> VisibilityPartition:
        """
        Make an entity the focus and re-render its neighborhood.

        Raises:
            KeyError: If the entity is not part of the graph
        """
        name = entity if isinstance(entity, str) else entity.name
        partition = partition_for(self.graph, name)

        self.host.clear()

        focus = self.elements[name]
        self.host.place(focus, "center")
        self.host.add_element(focus)

        for panel, members in (("left", partition.predecessors), ("right", partition.successors)):
            for member in members:
                element = self.elements[member.name]
                self.host.place(element, panel)
                self.host.add_element(element)

        for r in partition.relationships:
            source = self.elements[r.source_entity.name].property(r.source_property.name)
            target = self.elements[r.target_entity.name].property(r.target_property.name)
            self.host.add_connector(source, target)

        self.current = name
        self.partition = partition
        self.host.selected = name
        logger.debug(
            "Focused %s: %d predecessors, %d successors, %d connectors",
            name, len(partition.predecessors), len(partition.successors), len(partition.relationships),
        )
        return partition
