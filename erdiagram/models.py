"""
Core data models for entity relationship diagrams.

These models define the canonical schema for diagram input and output:
- Entities with ordered, typed properties
- Relationships from a source entity property to a target entity property
- Elastic layout options
- The rendered diagram document (nodes with positions, edges between properties)
"""

from enum import Enum
from typing import NamedTuple, Optional
from pydantic import BaseModel, Field, field_validator


class BoundaryMode(str, Enum):
    """How elastic layout keeps elements inside the host region."""
    CLAMP = "clamp"    # Stop at the wall
    BOUNCE = "bounce"  # Reflect velocity at the wall


class Point(NamedTuple):
    """A normalized 2-D point, both coordinates in [0, 1]."""
    x: float
    y: float


class EntityProperty(BaseModel):
    """A single (name, type) pair of an entity."""
    name: str
    type: str = ""


class EntityDescriptor(BaseModel):
    """The ordered property list of an entity."""
    properties: list[EntityProperty] = Field(default_factory=list)

    @field_validator("properties")
    @classmethod
    def unique_property_names(cls, properties: list[EntityProperty]) -> list[EntityProperty]:
        """Property names must be unique within one entity."""
        seen: set[str] = set()
        for prop in properties:
            if prop.name in seen:
                raise ValueError(f"Duplicate property name: {prop.name}")
            seen.add(prop.name)
        return properties


class EntityPropertyAccess(BaseModel):
    """One endpoint of a relationship: an entity and one of its properties."""
    entity: str
    property: str


class EntityRelationship(BaseModel):
    """A directed relationship from one entity property to another."""
    source: EntityPropertyAccess
    target: EntityPropertyAccess


class EntityRelationshipData(BaseModel):
    """
    The complete diagram input.
    This is what an external loader hands over (usually parsed from JSON).
    """
    entities: dict[str, EntityDescriptor] = Field(default_factory=dict)
    relationships: list[EntityRelationship] = Field(default_factory=list)

    @classmethod
    def from_json_dict(cls, data: dict) -> "EntityRelationshipData":
        """Create input data from a parsed JSON dict."""
        return cls.model_validate(data)


class ElasticLayoutOptions(BaseModel):
    """Tuning knobs for elastic relaxation."""
    spring_stiffness: float = Field(default=0.05, gt=0, le=1)
    spring_length: float = Field(default=180.0, ge=0)
    repulsion: float = Field(default=20000.0, ge=0)
    damping: float = Field(default=0.5, gt=0, lt=1)
    iterations: int = Field(default=300, ge=0, le=10000)
    convergence: float = Field(default=0.05, ge=0)
    min_distance: float = Field(default=20.0, gt=0)
    max_displacement: float = Field(default=50.0, gt=0)
    boundary: BoundaryMode = BoundaryMode.CLAMP
    padding: float = Field(default=0.0, ge=0)


# --- Output Document ---

class EntityNode(BaseModel):
    """A rendered entity in the diagram document."""
    id: str
    label: str
    x: float
    y: float
    width: float
    height: float
    panel: Optional[str] = None  # "left", "center", "right" in navigable diagrams
    collapsed: bool = False
    draggable: bool = False
    properties: list[EntityProperty] = Field(default_factory=list)


class ConnectorEdge(BaseModel):
    """A connector between two entity properties."""
    id: str
    source: str  # Source entity name
    target: str  # Target entity name
    source_property: str
    target_property: str


class DiagramDocument(BaseModel):
    """
    The complete rendered diagram.
    This is what the rendering host serializes for a front end.
    """
    width: float
    height: float
    classes: list[str] = Field(default_factory=list)
    nodes: list[EntityNode] = Field(default_factory=list)
    edges: list[ConnectorEdge] = Field(default_factory=list)

    def to_json_dict(self) -> dict:
        """Convert to JSON-serializable dict."""
        return self.model_dump(mode="json")
