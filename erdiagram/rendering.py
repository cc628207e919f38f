"""
Rendering host - In-memory stand-in for the diagram canvas.

This module implements the rendering collaborator used by composition:
- Entity elements with per-property sub-elements and a collapse toggle
- Connectors between property sub-elements
- Left/center/right panels for navigable diagrams
- Drag behavior clamped to the host region
- Serialization to a DiagramDocument for a front end
"""

import random
from collections.abc import Callable
from typing import Optional

from .graph import Entity, EntityReferenceError, Property
from .models import ConnectorEdge, DiagramDocument, EntityNode, EntityProperty

PANELS = ("left", "center", "right")

# Default element metrics in pixels
DEFAULT_ELEMENT_WIDTH = 150
HEADER_HEIGHT = 30
ROW_HEIGHT = 20

DEFAULT_HOST_WIDTH = 960
DEFAULT_HOST_HEIGHT = 640


class PropertyElement:
    """The sub-element rendering one property row of an entity."""

    def __init__(self, parent: "EntityElement", prop: Property):
        self.parent = parent
        self.name = prop.name
        self.type = prop.type

    def __repr__(self) -> str:
        return f"PropertyElement({self.parent.name}.{self.name})"


class EntityElement:
    """
    The rendered form of an entity: a header and one row per property.

    The header carries a collapse/expand toggle and can be activated
    (clicked); activation callbacks are registered explicitly.
    """

    def __init__(self, entity: Entity, width: float = DEFAULT_ELEMENT_WIDTH):
        self.entity = entity
        self.name = entity.name
        self.x = 0.0
        self.y = 0.0
        self.width = width
        self.collapsed = False
        self.panel: Optional[str] = None
        self.movable: Optional["Movable"] = None
        self._properties = {p.name: PropertyElement(self, p) for p in entity.properties}
        self._on_header_activated: list[Callable[["EntityElement"], None]] = []

    def __repr__(self) -> str:
        return f"EntityElement({self.name})"

    @property
    def height(self) -> float:
        """Header height plus one row per property unless collapsed."""
        if self.collapsed:
            return HEADER_HEIGHT
        return HEADER_HEIGHT + ROW_HEIGHT * len(self._properties)

    @property
    def properties(self) -> list[PropertyElement]:
        return list(self._properties.values())

    def property(self, name: str) -> PropertyElement:
        """Get the sub-element of a property by name."""
        try:
            return self._properties[name]
        except KeyError:
            raise EntityReferenceError(self.name, name) from None

    def compact(self, state: Optional[bool] = None):
        """Collapse (True), expand (False) or toggle (None) the property rows."""
        self.collapsed = (not self.collapsed) if state is None else state

    def toggle(self):
        """Handle a click on the header toggle."""
        self.compact()

    # --- Header Callbacks ---

    def on_header_activated(self, callback: Callable[["EntityElement"], None]):
        """Register a callback for header activation."""
        self._on_header_activated.append(callback)

    def activate_header(self):
        """Notify all registered callbacks that the header was activated."""
        for callback in self._on_header_activated:
            callback(self)

    def to_node(self) -> EntityNode:
        return EntityNode(
            id=self.name,
            label=self.name,
            x=self.x,
            y=self.y,
            width=self.width,
            height=self.height,
            panel=self.panel,
            collapsed=self.collapsed,
            draggable=self.movable is not None,
            properties=[EntityProperty(name=p.name, type=p.type) for p in self._properties.values()],
        )


class Connector:
    """An arrow from one property sub-element to another."""

    def __init__(self, connector_id: str, source: PropertyElement, target: PropertyElement):
        self.id = connector_id
        self.source = source
        self.target = target

    def __repr__(self) -> str:
        return f"Connector({self.source.parent.name}.{self.source.name} -> {self.target.parent.name}.{self.target.name})"

    def to_edge(self) -> ConnectorEdge:
        return ConnectorEdge(
            id=self.id,
            source=self.source.parent.name,
            target=self.target.parent.name,
            source_property=self.source.name,
            target_property=self.target.name,
        )


class DiagramHost:
    """
    The host region elements and connectors are rendered into.

    Features:
    - O(1) connectivity checks via an index of connected element pairs
    - Seeded shuffling for reproducible initial placement
    - Named panels (left, center, right) for focus-and-context views
    """

    def __init__(
        self,
        width: float = DEFAULT_HOST_WIDTH,
        height: float = DEFAULT_HOST_HEIGHT,
        seed: Optional[int] = None,
    ):
        if width <= 0 or height <= 0:
            raise ValueError("Host width and height must be positive")
        self.width = width
        self.height = height
        self.css_classes: list[str] = []
        self.selected: Optional[str] = None  # Current value of the entity selector
        self.options: list[str] = []         # Entries of the entity selector
        self._random = random.Random(seed)
        self._elements: list[EntityElement] = []
        self._connectors: list[Connector] = []
        self._pairs: set[frozenset[int]] = set()  # {id(a), id(b)} of connected elements
        self._panels: dict[str, list[EntityElement]] = {name: [] for name in PANELS}
        self._next_connector = 1

    # --- Properties ---

    @property
    def elements(self) -> list[EntityElement]:
        return list(self._elements)

    @property
    def connectors(self) -> list[Connector]:
        return list(self._connectors)

    def add_class(self, name: str):
        if name not in self.css_classes:
            self.css_classes.append(name)

    # --- Elements and Connectors ---

    def add_element(self, element: EntityElement):
        """Add an element to the host (no-op if already present)."""
        if any(e is element for e in self._elements):
            return
        self._elements.append(element)

    def add_connector(self, source: PropertyElement, target: PropertyElement) -> Connector:
        """Connect two property sub-elements with an arrow."""
        connector = Connector(f"c{self._next_connector}", source, target)
        self._next_connector += 1
        self._connectors.append(connector)
        self._pairs.add(frozenset((id(source.parent), id(target.parent))))
        return connector

    def is_connected(self, a: EntityElement, b: EntityElement) -> bool:
        """Check whether a connector links the two elements (either direction)."""
        return frozenset((id(a), id(b))) in self._pairs

    def clear(self):
        """Remove all elements, connectors and panel contents."""
        for element in self._elements:
            element.panel = None
        self._elements.clear()
        self._connectors.clear()
        self._pairs.clear()
        for members in self._panels.values():
            members.clear()

    def shuffle(self):
        """Place every element at a random position inside the host."""
        for element in self._elements:
            element.x = self._random.uniform(0, max(0.0, self.width - element.width))
            element.y = self._random.uniform(0, max(0.0, self.height - element.height))

    # --- Panels ---

    def panel(self, name: str) -> list[EntityElement]:
        """Get the elements placed in a panel."""
        if name not in self._panels:
            raise ValueError(f"Unknown panel: {name}")
        return list(self._panels[name])

    def place(self, element: EntityElement, panel: str):
        """Append an element to a panel and lay the panel out as a column."""
        if panel not in self._panels:
            raise ValueError(f"Unknown panel: {panel}")
        members = self._panels[panel]
        members.append(element)
        element.panel = panel
        self._stack(panel)

    def _stack(self, panel: str):
        # Rows are spaced by ROW_HEIGHT, squeezed so the column fits the host height
        members = self._panels[panel]
        column = PANELS.index(panel)
        column_width = self.width / len(PANELS)
        gap = float(ROW_HEIGHT)
        if len(members) > 1:
            room = self.height - sum(e.height for e in members)
            gap = min(gap, max(0.0, room / (len(members) - 1)))

        y = 0.0
        for member in members:
            member.x = column * column_width + max(0.0, (column_width - member.width) / 2)
            member.y = min(y, max(0.0, self.height - member.height))
            y += member.height + gap

    # --- Serialization ---

    def to_document(self) -> DiagramDocument:
        """Serialize the host state to a document."""
        return DiagramDocument(
            width=self.width,
            height=self.height,
            classes=list(self.css_classes),
            nodes=[e.to_node() for e in self._elements],
            edges=[c.to_edge() for c in self._connectors],
        )


class Movable:
    """Drag behavior attached to a rendered element."""

    def __init__(self, element: EntityElement, host: DiagramHost):
        self.element = element
        self.host = host
        element.movable = self

    def move_to(self, x: float, y: float):
        """Move the element, keeping it inside the host."""
        self.element.x = min(max(0.0, x), max(0.0, self.host.width - self.element.width))
        self.element.y = min(max(0.0, y), max(0.0, self.host.height - self.element.height))

    def move_by(self, dx: float, dy: float):
        self.move_to(self.element.x + dx, self.element.y + dy)
