"""
Layout algorithms for diagram elements.

Provides the two layout phases used by entity diagrams:
- Spectral: Global placement from eigenvectors of the graph Laplacian
- Elastic: Local refinement using spring physics inside a bounded host

Spectral placement returns normalized points and leaves its nodes alone.
Elastic relaxation modifies element positions in-place.
"""

import logging
import math
from collections import deque
from collections.abc import Callable, Mapping, Sequence
from typing import Any, Optional, Protocol, Union

import numpy as np

from .models import BoundaryMode, ElasticLayoutOptions, Point

logger = logging.getLogger(__name__)


# Eigenvector components closer than this are treated as equal
EPSILON = 1e-9

# Margin kept inside each grid cell when components are tiled
CELL_INSET = 0.1


class Region(Protocol):
    """Anything with a width and a height (the host of a layout)."""
    width: float
    height: float


class Positioned(Protocol):
    """A movable element with a top-left position and a size."""
    x: float
    y: float
    width: float
    height: float


def _endpoints(edge: Any) -> tuple[Any, Any]:
    if isinstance(edge, tuple):
        return edge
    if isinstance(edge, Mapping):
        return edge["source"], edge["target"]
    return edge.source, edge.target


def circle_points(count: int) -> list[Point]:
    """Evenly place `count` points on the circle inscribed in the unit square."""
    points = []
    for i in range(count):
        angle = 2 * math.pi * i / count
        points.append(Point(0.5 + 0.5 * math.cos(angle), 0.5 + 0.5 * math.sin(angle)))
    return points


def _orient(vector: np.ndarray) -> np.ndarray:
    # Eigenvectors are defined up to sign; make the largest component positive
    idx = int(np.argmax(np.abs(vector)))
    if vector[idx] < 0:
        return -vector
    return vector


def _normalize(vector: np.ndarray) -> np.ndarray:
    low = float(vector.min())
    span = float(vector.max()) - low
    if span < EPSILON:
        return np.full(vector.shape, 0.5)
    return np.clip((vector - low) / span, 0.0, 1.0)


def _embed(adjacency: np.ndarray) -> list[Point]:
    """Spectral points of a connected graph given by its adjacency matrix."""
    n = len(adjacency)
    if n == 1:
        return [Point(0.5, 0.5)]

    laplacian = np.diag(adjacency.sum(axis=1)) - adjacency
    _, vectors = np.linalg.eigh(laplacian)

    axes = []
    for k in (1, 2):
        if k < n:
            axes.append(_normalize(_orient(vectors[:, k])))
        else:
            axes.append(np.full(n, 0.5))

    return [Point(float(x), float(y)) for x, y in zip(axes[0], axes[1])]


class SpectralLayout:
    """
    Arrange nodes using the spectral embedding of the graph.

    Uses the eigenvectors of the two smallest non-trivial eigenvalues of the
    graph Laplacian (L = D - A) as x and y coordinates. Parallel edges add
    weight, self-loops are ignored and edge direction does not matter.

    Edges refer to nodes by identity: every endpoint must be one of the
    objects passed in `nodes`.
    """

    def __init__(self, nodes: Sequence[Any], edges: Sequence[Any]):
        self.nodes = list(nodes)
        index = {id(node): i for i, node in enumerate(self.nodes)}

        self.edges: list[tuple[int, int]] = []
        for edge in edges:
            source, target = _endpoints(edge)
            if id(source) not in index or id(target) not in index:
                raise ValueError("Edge endpoint is not one of the layout nodes")
            self.edges.append((index[id(source)], index[id(target)]))

    def adjacency(self) -> np.ndarray:
        """Symmetric weighted adjacency matrix of the layout nodes."""
        n = len(self.nodes)
        matrix = np.zeros((n, n))
        for i, j in self.edges:
            if i == j:
                continue
            matrix[i, j] += 1
            matrix[j, i] += 1
        return matrix

    def components(self) -> list[list[int]]:
        """Node indices of each connected component, in node order."""
        adjacency = self.adjacency()
        seen: set[int] = set()
        result = []
        for start in range(len(self.nodes)):
            if start in seen:
                continue
            seen.add(start)
            component = []
            queue = deque([start])
            while queue:
                i = queue.popleft()
                component.append(i)
                for j in np.flatnonzero(adjacency[i]):
                    j = int(j)
                    if j not in seen:
                        seen.add(j)
                        queue.append(j)
            result.append(sorted(component))
        return result

    def calculate(self) -> list[Point]:
        """
        Compute one normalized point per node, in node order.

        A disconnected graph is embedded one component at a time, each
        component in its own cell of a grid over the unit square.

        Returns:
            Points with both coordinates in [0, 1]
        """
        n = len(self.nodes)
        if n == 0:
            return []
        if n == 1:
            return [Point(0.5, 0.5)]

        adjacency = self.adjacency()
        if not adjacency.any():
            # No structure to embed
            return circle_points(n)

        components = self.components()
        if len(components) == 1:
            return _embed(adjacency)

        columns = math.ceil(math.sqrt(len(components)))
        rows = math.ceil(len(components) / columns)
        points: list[Optional[Point]] = [None] * n
        for c, component in enumerate(components):
            column, row = c % columns, c // columns
            local = _embed(adjacency[np.ix_(component, component)])
            for i, p in zip(component, local):
                points[i] = Point(
                    (column + CELL_INSET + p.x * (1 - 2 * CELL_INSET)) / columns,
                    (row + CELL_INSET + p.y * (1 - 2 * CELL_INSET)) / rows,
                )
        return points


class ElasticLayout:
    """
    Refine element positions using a force-directed simulation.

    Simulates physical forces:
    - All elements repel each other (like charged particles)
    - Connected elements attract each other (like springs with a rest length)

    Positions stay within the host region at every step. Reaching the
    iteration bound is a normal way to finish.
    """

    def __init__(
        self,
        options: Union[ElasticLayoutOptions, dict, None],
        host: Region,
        elements: Sequence[Positioned],
        is_connected: Callable[[Any, Any], bool],
    ):
        if not isinstance(options, ElasticLayoutOptions):
            options = ElasticLayoutOptions.model_validate(options or {})
        self.options = options
        self.host = host
        self.elements = list(elements)
        self.is_connected = is_connected

    def bounds(self, element: Positioned) -> tuple[float, float, float, float]:
        """Allowed top-left range (min_x, min_y, max_x, max_y) for an element."""
        pad = self.options.padding
        min_x = min(pad, max(0.0, self.host.width - element.width))
        min_y = min(pad, max(0.0, self.host.height - element.height))
        max_x = max(min_x, self.host.width - element.width - pad)
        max_y = max(min_y, self.host.height - element.height - pad)
        return min_x, min_y, max_x, max_y

    def _constrain(self, element: Positioned, velocity: Optional[list[float]] = None):
        min_x, min_y, max_x, max_y = self.bounds(element)
        bounce = velocity is not None and self.options.boundary == BoundaryMode.BOUNCE

        if element.x < min_x or element.x > max_x:
            element.x = min(max(element.x, min_x), max_x)
            if bounce:
                velocity[0] = -velocity[0]
        if element.y < min_y or element.y > max_y:
            element.y = min(max(element.y, min_y), max_y)
            if bounce:
                velocity[1] = -velocity[1]

    def _connectivity(self) -> list[list[bool]]:
        n = len(self.elements)
        connected = [[False] * n for _ in range(n)]
        for i in range(n):
            for j in range(i + 1, n):
                linked = bool(self.is_connected(self.elements[i], self.elements[j]))
                connected[i][j] = connected[j][i] = linked
        return connected

    def initialize(self) -> int:
        """
        Run the simulation, moving elements in-place.

        Returns:
            The number of iterations performed
        """
        opts = self.options
        elements = self.elements
        n = len(elements)

        for element in elements:
            self._constrain(element)
        if n < 2:
            return 0

        connected = self._connectivity()
        velocities = [[0.0, 0.0] for _ in range(n)]

        for iteration in range(opts.iterations):
            forces = [[0.0, 0.0] for _ in range(n)]
            centers = [(e.x + e.width / 2, e.y + e.height / 2) for e in elements]

            for i in range(n):
                for j in range(i + 1, n):
                    dx = centers[i][0] - centers[j][0]
                    dy = centers[i][1] - centers[j][1]
                    dist = math.sqrt(dx * dx + dy * dy)
                    if dist < EPSILON:
                        # Coincident elements: separate along a fixed direction
                        angle = 2 * math.pi * (i * n + j) / (n * n)
                        ux, uy = math.cos(angle), math.sin(angle)
                    else:
                        ux, uy = dx / dist, dy / dist

                    # Coulomb's law: F = k / r^2
                    clamped = max(opts.min_distance, dist)
                    force = opts.repulsion / (clamped * clamped)

                    # Hooke's law: F = -k * (r - rest)
                    if connected[i][j]:
                        force -= opts.spring_stiffness * (dist - opts.spring_length)

                    forces[i][0] += force * ux
                    forces[i][1] += force * uy
                    forces[j][0] -= force * ux
                    forces[j][1] -= force * uy

            largest_step = 0.0
            for k, element in enumerate(elements):
                velocity = velocities[k]
                velocity[0] = (velocity[0] + forces[k][0]) * opts.damping
                velocity[1] = (velocity[1] + forces[k][1]) * opts.damping

                speed = math.hypot(velocity[0], velocity[1])
                if speed > opts.max_displacement:
                    velocity[0] *= opts.max_displacement / speed
                    velocity[1] *= opts.max_displacement / speed

                old_x, old_y = element.x, element.y
                element.x += velocity[0]
                element.y += velocity[1]
                self._constrain(element, velocity)
                largest_step = max(largest_step, math.hypot(element.x - old_x, element.y - old_y))

            if largest_step < opts.convergence:
                logger.debug("Elastic layout converged after %d iterations", iteration + 1)
                return iteration + 1

        logger.debug("Elastic layout stopped at iteration bound %d", opts.iterations)
        return opts.iterations
