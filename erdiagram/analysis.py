"""
Graph analysis - Summarization utilities for entity relationship graphs.

Provides analysis functions used by the CLI and the HTTP API to describe
a graph's structure before (or instead of) laying it out.
"""

from dataclasses import dataclass, field

from .graph import Graph


@dataclass
class ConnectedComponent:
    """A connected component of the entity graph."""
    entities: list[str] = field(default_factory=list)
    relationship_count: int = 0

    @property
    def size(self) -> int:
        return len(self.entities)


@dataclass
class EntityConnectionInfo:
    """Connection information for a single entity."""
    name: str
    property_count: int = 0
    incoming: int = 0   # Relationships pointing to this entity
    outgoing: int = 0   # Relationships pointing from this entity

    @property
    def total(self) -> int:
        return self.incoming + self.outgoing


@dataclass
class GraphSummary:
    """Complete summary of a graph's structure."""
    total_entities: int
    total_properties: int
    total_relationships: int
    self_references: int
    connected_components: int
    most_connected_entities: list[EntityConnectionInfo]
    orphan_count: int

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "total_entities": self.total_entities,
            "total_properties": self.total_properties,
            "total_relationships": self.total_relationships,
            "self_references": self.self_references,
            "connected_components": self.connected_components,
            "most_connected_entities": [
                {
                    "name": e.name,
                    "connections": e.total,
                    "incoming": e.incoming,
                    "outgoing": e.outgoing
                }
                for e in self.most_connected_entities
            ],
            "orphan_count": self.orphan_count
        }


def find_connected_components(graph: Graph) -> list[ConnectedComponent]:
    """
    Find all connected components using BFS.

    Relationships are treated as undirected. Components are returned in
    the insertion order of their first entity.

    Args:
        graph: The graph to analyze

    Returns:
        List of ConnectedComponent objects
    """
    names = list(graph.entities)
    adjacency: dict[str, set[str]] = {name: set() for name in names}
    for r in graph.relationships:
        adjacency[r.source_entity.name].add(r.target_entity.name)
        adjacency[r.target_entity.name].add(r.source_entity.name)

    component_of: dict[str, int] = {}
    components: list[ConnectedComponent] = []

    for start in names:
        if start in component_of:
            continue

        component = ConnectedComponent()
        queue = [start]
        component_of[start] = len(components)
        while queue:
            current = queue.pop(0)
            component.entities.append(current)
            for neighbor in sorted(adjacency[current], key=names.index):
                if neighbor not in component_of:
                    component_of[neighbor] = len(components)
                    queue.append(neighbor)

        components.append(component)

    for r in graph.relationships:
        components[component_of[r.source_entity.name]].relationship_count += 1

    return components


def calculate_entity_connections(graph: Graph) -> dict[str, EntityConnectionInfo]:
    """
    Calculate connection counts for all entities.

    Args:
        graph: The graph to analyze

    Returns:
        Dictionary mapping entity name to EntityConnectionInfo
    """
    connections = {
        entity.name: EntityConnectionInfo(name=entity.name, property_count=len(entity.properties))
        for entity in graph
    }
    for r in graph.relationships:
        connections[r.source_entity.name].outgoing += 1
        connections[r.target_entity.name].incoming += 1
    return connections


def summarize_graph(graph: Graph, top_n: int = 5) -> GraphSummary:
    """
    Generate a summary of a graph.

    Args:
        graph: The graph to summarize
        top_n: Number of top connected entities to include

    Returns:
        GraphSummary object with all analysis results
    """
    connections = calculate_entity_connections(graph)

    sorted_by_connections = sorted(
        connections.values(),
        key=lambda x: x.total,
        reverse=True
    )
    most_connected = [e for e in sorted_by_connections[:top_n] if e.total > 0]

    return GraphSummary(
        total_entities=len(graph),
        total_properties=sum(len(e.properties) for e in graph),
        total_relationships=len(graph.relationships),
        self_references=sum(1 for r in graph.relationships if r.is_self_reference),
        connected_components=len(find_connected_components(graph)),
        most_connected_entities=most_connected,
        orphan_count=sum(1 for e in connections.values() if e.total == 0)
    )
