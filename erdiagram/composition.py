"""
Diagram composition - Turn entity relationship data into a laid-out diagram.

Every diagram goes through the same steps:
1. Build the graph (fails before anything is rendered)
2. Create one rendering element per entity
3. Register elements and connectors with the host
4. Apply one layout strategy: elastic, navigable or spectral
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional, Union

from .graph import Graph
from .layout import ElasticLayout, SpectralLayout
from .models import DiagramDocument, ElasticLayoutOptions, EntityRelationshipData, Point
from .navigator import Navigator, VisibilityPartition
from .rendering import Connector, DiagramHost, EntityElement, Movable

logger = logging.getLogger(__name__)


# Spectral-only diagrams map [0, 1] to 10%..90% of the host
SPECTRAL_SCALE = 0.8
SPECTRAL_INSET = 0.1


class LayoutStrategy(str, Enum):
    """How a diagram positions its entities."""
    ELASTIC = "elastic"      # Spectral seed refined by elastic relaxation
    NAVIGABLE = "navigable"  # Focus entity with predecessor/successor panels
    SPECTRAL = "spectral"    # Spectral placement only


@dataclass
class EntityDiagram:
    """A composed diagram: the graph, its rendered elements and its layout."""
    graph: Graph
    host: DiagramHost
    strategy: LayoutStrategy
    elements: dict[str, EntityElement] = field(default_factory=dict)
    layout: dict[str, Point] = field(default_factory=dict)  # Normalized spectral positions
    navigator: Optional[Navigator] = None
    iterations: int = 0  # Elastic relaxation steps performed

    @property
    def connectors(self) -> list[Connector]:
        """Connectors currently rendered, including those of the navigator."""
        return self.host.connectors

    def select(self, name: str) -> VisibilityPartition:
        """Change the focus of a navigable diagram."""
        if self.navigator is None:
            raise ValueError(f"Selection requires a navigable diagram, not {self.strategy.value}")
        return self.navigator.select(name)

    def to_document(self) -> DiagramDocument:
        return self.host.to_document()

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        result = {
            "success": True,
            "strategy": self.strategy.value,
            "diagram": self.to_document().to_json_dict(),
            "layout": {name: {"x": p.x, "y": p.y} for name, p in self.layout.items()},
        }
        if self.strategy == LayoutStrategy.ELASTIC:
            result["iterations"] = self.iterations
        if self.navigator is not None:
            partition = self.navigator.partition
            result["partition"] = partition.to_dict() if partition else None
        return result


def _register(diagram: EntityDiagram, collapsed: bool):
    """Add every element (draggable) and one connector per relationship."""
    host = diagram.host
    for element in diagram.elements.values():
        element.compact(collapsed)
        host.add_element(element)
        Movable(element, host)

    for r in diagram.graph.relationships:
        source = diagram.elements[r.source_entity.name].property(r.source_property.name)
        target = diagram.elements[r.target_entity.name].property(r.target_property.name)
        host.add_connector(source, target)


def _spectral_points(diagram: EntityDiagram, elements: list[EntityElement]) -> list[Point]:
    edges = [
        (diagram.elements[r.source_entity.name], diagram.elements[r.target_entity.name])
        for r in diagram.graph.relationships
    ]
    points = SpectralLayout(elements, edges).calculate()
    diagram.layout = {element.name: point for element, point in zip(elements, points)}
    return points


def _apply_elastic(diagram: EntityDiagram, options: Optional[ElasticLayoutOptions]):
    host = diagram.host
    _register(diagram, collapsed=True)
    host.shuffle()

    # One element list drives both phases
    elements = list(diagram.elements.values())
    points = _spectral_points(diagram, elements)
    for element, point in zip(elements, points):
        element.x = point.x * host.width
        element.y = point.y * host.height

    layout = ElasticLayout(options, host, elements, host.is_connected)
    diagram.iterations = layout.initialize()


def _apply_navigable(diagram: EntityDiagram, options: Optional[ElasticLayoutOptions]):
    navigator = Navigator(diagram.graph, diagram.host, diagram.elements)
    diagram.navigator = navigator

    for element in diagram.elements.values():
        element.compact(False)
        element.on_header_activated(navigator.show)
    diagram.host.options = navigator.options

    navigator.start()


def _apply_spectral(diagram: EntityDiagram, options: Optional[ElasticLayoutOptions]):
    host = diagram.host
    _register(diagram, collapsed=True)

    elements = list(diagram.elements.values())
    points = _spectral_points(diagram, elements)
    for element, point in zip(elements, points):
        element.x = (SPECTRAL_SCALE * point.x + SPECTRAL_INSET) * host.width
        element.y = (SPECTRAL_SCALE * point.y + SPECTRAL_INSET) * host.height


_STRATEGIES: dict[LayoutStrategy, Callable[[EntityDiagram, Optional[ElasticLayoutOptions]], None]] = {
    LayoutStrategy.ELASTIC: _apply_elastic,
    LayoutStrategy.NAVIGABLE: _apply_navigable,
    LayoutStrategy.SPECTRAL: _apply_spectral,
}


def compose_diagram(
    host: DiagramHost,
    data: Union[EntityRelationshipData, Graph, dict],
    strategy: Union[LayoutStrategy, str] = LayoutStrategy.ELASTIC,
    options: Union[ElasticLayoutOptions, dict, None] = None,
) -> EntityDiagram:
    """
    Build a diagram from entity relationship data.

    Args:
        host: The rendering host to draw into
        data: Input data (or an already built graph)
        strategy: Layout strategy to apply
        options: Elastic layout options (elastic strategy only)

    Returns:
        The composed EntityDiagram

    Raises:
        EntityReferenceError: If a relationship names a missing entity or
            property; the host is left untouched
    """
    strategy = LayoutStrategy(strategy)
    graph = data if isinstance(data, Graph) else Graph.from_data(data)
    if options is not None and not isinstance(options, ElasticLayoutOptions):
        options = ElasticLayoutOptions.model_validate(options)

    host.add_class("diagram")
    host.add_class(strategy.value)

    diagram = EntityDiagram(
        graph=graph,
        host=host,
        strategy=strategy,
        elements={entity.name: EntityElement(entity) for entity in graph},
    )
    _STRATEGIES[strategy](diagram, options)

    logger.info(
        "Composed %s diagram with %d entities and %d relationships",
        strategy.value, len(graph), len(graph.relationships),
    )
    return diagram


# --- Factory ---

def create_elastic_diagram(
    host: DiagramHost,
    data: Union[EntityRelationshipData, dict],
    options: Union[ElasticLayoutOptions, dict, None] = None,
) -> EntityDiagram:
    return compose_diagram(host, data, LayoutStrategy.ELASTIC, options)


def create_navigable_diagram(host: DiagramHost, data: Union[EntityRelationshipData, dict]) -> EntityDiagram:
    return compose_diagram(host, data, LayoutStrategy.NAVIGABLE)


def create_spectral_diagram(host: DiagramHost, data: Union[EntityRelationshipData, dict]) -> EntityDiagram:
    return compose_diagram(host, data, LayoutStrategy.SPECTRAL)


class EntityRelationshipFactory:
    """Stateless entry point grouping the three diagram constructors."""

    def create_elastic_diagram(self, host, data, options=None) -> EntityDiagram:
        return create_elastic_diagram(host, data, options)

    def create_navigable_diagram(self, host, data) -> EntityDiagram:
        return create_navigable_diagram(host, data)

    def create_spectral_diagram(self, host, data) -> EntityDiagram:
        return create_spectral_diagram(host, data)


erd = EntityRelationshipFactory()
