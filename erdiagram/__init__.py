"""
Entity Relationship Diagrams - Graph model, layout and diagram composition.

This package provides the functionality shared by the HTTP API and the CLI:
building entity graphs, spectral and elastic layout, focus/context
navigation and the in-memory rendering host.
"""

from .models import (
    # Enums
    BoundaryMode,
    # Input models
    EntityProperty,
    EntityDescriptor,
    EntityPropertyAccess,
    EntityRelationship,
    EntityRelationshipData,
    ElasticLayoutOptions,
    # Output models
    Point,
    EntityNode,
    ConnectorEdge,
    DiagramDocument,
)

from .graph import Entity, Property, Relationship, Graph, EntityReferenceError, build_graph
from .layout import SpectralLayout, ElasticLayout
from .rendering import DiagramHost, EntityElement, PropertyElement, Connector, Movable
from .navigator import Navigator, VisibilityPartition, partition_for
from .composition import (
    LayoutStrategy,
    EntityDiagram,
    EntityRelationshipFactory,
    compose_diagram,
    create_elastic_diagram,
    create_navigable_diagram,
    create_spectral_diagram,
    erd,
)
from .validation import validate_data, validation_summary, ValidationIssue, IssueSeverity
from .analysis import summarize_graph, find_connected_components

__all__ = [
    # Enums
    "BoundaryMode",
    # Input models
    "EntityProperty",
    "EntityDescriptor",
    "EntityPropertyAccess",
    "EntityRelationship",
    "EntityRelationshipData",
    "ElasticLayoutOptions",
    # Output models
    "Point",
    "EntityNode",
    "ConnectorEdge",
    "DiagramDocument",
    # Graph
    "Entity",
    "Property",
    "Relationship",
    "Graph",
    "EntityReferenceError",
    "build_graph",
    # Layout
    "SpectralLayout",
    "ElasticLayout",
    # Rendering
    "DiagramHost",
    "EntityElement",
    "PropertyElement",
    "Connector",
    "Movable",
    # Navigation
    "Navigator",
    "VisibilityPartition",
    "partition_for",
    # Composition
    "LayoutStrategy",
    "EntityDiagram",
    "EntityRelationshipFactory",
    "compose_diagram",
    "create_elastic_diagram",
    "create_navigable_diagram",
    "create_spectral_diagram",
    "erd",
    # Validation
    "validate_data",
    "validation_summary",
    "ValidationIssue",
    "IssueSeverity",
    # Analysis
    "summarize_graph",
    "find_connected_components",
]
