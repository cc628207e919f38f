"""
Layout Tests
============

Spectral placement (global, normalized) and elastic relaxation (local,
bounded, in-place).
"""

import math
from types import SimpleNamespace

import pytest
from pydantic import ValidationError

from erdiagram import ElasticLayout, ElasticLayoutOptions, Point, SpectralLayout
from erdiagram.models import BoundaryMode


class Box:
    def __init__(self, x, y, width=150, height=30):
        self.x = x
        self.y = y
        self.width = width
        self.height = height

    def center(self):
        return (self.x + self.width / 2, self.y + self.height / 2)


def distance(a, b):
    (ax, ay), (bx, by) = a.center(), b.center()
    return math.hypot(ax - bx, ay - by)


def inside(box, region, padding=0.0):
    return (
        padding - 1e-9 <= box.x <= region.width - box.width - padding + 1e-9
        and padding - 1e-9 <= box.y <= region.height - box.height - padding + 1e-9
    )


class TestSpectralLayout:

    def test_deterministic(self):
        """Same node order and edge set give the same points."""
        nodes = [object() for _ in range(6)]
        edges = [(nodes[0], nodes[1]), (nodes[1], nodes[2]), (nodes[2], nodes[3]),
                 (nodes[3], nodes[0]), (nodes[4], nodes[5]), (nodes[1], nodes[4])]

        first = SpectralLayout(nodes, edges).calculate()
        second = SpectralLayout(nodes, edges).calculate()

        assert first == second

    def test_one_point_per_node_in_unit_square(self):
        nodes = [object() for _ in range(8)]
        edges = [(nodes[i], nodes[(i * 3 + 1) % 8]) for i in range(8)]

        points = SpectralLayout(nodes, edges).calculate()

        assert len(points) == 8
        assert all(0.0 <= p.x <= 1.0 and 0.0 <= p.y <= 1.0 for p in points)

    def test_no_edges(self):
        """Without edges every node still gets a valid point."""
        nodes = ["a", "b", "c", "d"]

        points = SpectralLayout(nodes, []).calculate()

        assert len(points) == 4
        assert all(0.0 <= p.x <= 1.0 and 0.0 <= p.y <= 1.0 for p in points)
        assert len(set(points)) == 4

    def test_self_loops_only_count_as_no_edges(self):
        nodes = [object(), object()]

        points = SpectralLayout(nodes, [(nodes[0], nodes[0])]).calculate()

        assert len(points) == 2
        assert points[0] != points[1]

    def test_empty_and_single(self):
        assert SpectralLayout([], []).calculate() == []
        assert SpectralLayout(["only"], []).calculate() == [Point(0.5, 0.5)]

    def test_path_puts_middle_node_in_the_middle(self):
        a, b, c = object(), object(), object()

        points = SpectralLayout([a, b, c], [(a, b), (b, c)]).calculate()

        assert points[1].x == pytest.approx(0.5, abs=1e-6)
        assert sorted([points[0].x, points[2].x]) == pytest.approx([0.0, 1.0], abs=1e-6)

    def test_two_nodes_use_full_width(self):
        a, b = object(), object()

        points = SpectralLayout([a, b], [(a, b)]).calculate()

        assert sorted(p.x for p in points) == pytest.approx([0.0, 1.0])
        assert all(p.y == 0.5 for p in points)

    def test_separate_components_do_not_overlap(self):
        """Each component gets its own area; linked nodes never share a point."""
        a, b, c, d, e = (object() for _ in range(5))

        points = SpectralLayout([a, b, c, d, e], [(a, b)]).calculate()

        assert len(set(points)) == 5
        assert all(0.0 <= p.x <= 1.0 and 0.0 <= p.y <= 1.0 for p in points)

    def test_two_linked_pairs(self):
        a, b, c, d = (object() for _ in range(4))

        points = SpectralLayout([a, b, c, d], [(a, b), (c, d)]).calculate()

        assert len(set(points)) == 4
        # Pairs are tiled side by side: both of one pair left of both of the other
        assert max(points[0].x, points[1].x) < min(points[2].x, points[3].x)

    def test_components(self):
        a, b, c, d = (object() for _ in range(4))

        layout = SpectralLayout([a, b, c, d], [(a, c), (d, d)])

        assert layout.components() == [[0, 2], [1], [3]]

    def test_edge_formats(self):
        """Edges may be pairs, mappings or objects with source/target."""
        a, b, c = object(), object(), object()
        as_pairs = SpectralLayout([a, b, c], [(a, b), (b, c)]).calculate()
        as_dicts = SpectralLayout([a, b, c], [{"source": a, "target": b}, {"source": b, "target": c}]).calculate()
        as_objects = SpectralLayout(
            [a, b, c],
            [SimpleNamespace(source=a, target=b), SimpleNamespace(source=b, target=c)],
        ).calculate()

        assert as_pairs == as_dicts == as_objects

    def test_endpoints_matched_by_identity(self):
        """An equal but different object is not one of the nodes."""
        a, b = [1], [2]
        with pytest.raises(ValueError):
            SpectralLayout([a, b], [([1], b)])


class TestElasticLayout:

    def region(self, width=800, height=600):
        return SimpleNamespace(width=width, height=height)

    def chain(self, boxes):
        def is_connected(a, b):
            i, j = boxes.index(a), boxes.index(b)
            return abs(i - j) == 1
        return is_connected

    @pytest.mark.parametrize("options", [
        {},
        {"boundary": "bounce"},
        {"repulsion": 500000, "iterations": 50},
        {"spring_stiffness": 1.0, "spring_length": 0, "damping": 0.9},
        {"padding": 25, "max_displacement": 500},
    ])
    def test_elements_stay_inside_host(self, options):
        region = self.region()
        boxes = [Box(x, y) for x, y in [(-50, 10), (700, 590), (300, 300), (300, 300), (1000, -20), (10, 10)]]
        opts = ElasticLayoutOptions.model_validate(options)

        ElasticLayout(opts, region, boxes, self.chain(boxes)).initialize()

        assert all(inside(box, region, opts.padding) for box in boxes)

    def test_connected_elements_pull_together(self):
        region = self.region(2000, 2000)
        linked = [Box(500, 500), Box(1100, 500)]
        apart = [Box(500, 500), Box(1100, 500)]

        ElasticLayout({}, region, linked, lambda a, b: True).initialize()
        ElasticLayout({}, region, apart, lambda a, b: False).initialize()

        assert distance(*linked) < 600
        assert distance(*linked) < distance(*apart)

    def test_coincident_elements_separate(self):
        region = self.region()
        boxes = [Box(300, 300), Box(300, 300)]

        ElasticLayout({}, region, boxes, lambda a, b: False).initialize()

        assert distance(*boxes) > 0

    def test_predicate_called_once_per_pair(self):
        region = self.region()
        boxes = [Box(100 * i, 50 * i) for i in range(5)]
        calls = []

        def is_connected(a, b):
            calls.append((a, b))
            return False

        ElasticLayout({"iterations": 20}, region, boxes, is_connected).initialize()

        assert len(calls) == 10

    def test_iteration_bound(self):
        region = self.region()
        boxes = [Box(100, 100), Box(400, 300), Box(200, 500)]

        steps = ElasticLayout({"iterations": 3, "convergence": 0}, region, boxes, lambda a, b: True).initialize()

        assert steps == 3

    def test_zero_iterations_only_clamps(self):
        region = self.region()
        boxes = [Box(-100, 900), Box(100, 100)]

        steps = ElasticLayout({"iterations": 0}, region, boxes, lambda a, b: True).initialize()

        assert steps == 0
        assert (boxes[0].x, boxes[0].y) == (0, 600 - 30)
        assert (boxes[1].x, boxes[1].y) == (100, 100)

    def test_single_element_is_clamped(self):
        region = self.region()
        box = Box(2000, 2000)

        assert ElasticLayout(None, region, [box], lambda a, b: False).initialize() == 0
        assert inside(box, region)

    def test_converges_before_bound(self):
        region = self.region(2000, 2000)
        boxes = [Box(100, 100), Box(1700, 1700)]

        steps = ElasticLayout({"iterations": 5000}, region, boxes, lambda a, b: False).initialize()

        assert steps < 5000

    def test_options_validated(self):
        with pytest.raises(ValidationError):
            ElasticLayoutOptions(damping=1.5)
        with pytest.raises(ValidationError):
            ElasticLayoutOptions(iterations=-1)
        assert ElasticLayoutOptions(boundary="bounce").boundary == BoundaryMode.BOUNCE
