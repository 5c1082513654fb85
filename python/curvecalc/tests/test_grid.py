# Tests for grid.py - Sweep axes

import pytest

from curvecalc.grid import Axis, normalize_axis


class TestAxis:
    """Tests for Axis construction and points."""

    def test_points(self):
        ax = Axis('x', -1.0, 1.0, 2)
        assert list(ax.points()) == [-1.0, 0.0, 1.0]
        assert len(ax) == 3

    def test_step(self):
        assert Axis('x', 0, 10, 4).step == 2.5

    def test_endpoints_included(self):
        ax = Axis('x', -3, 3, 6)
        pts = list(ax.points())
        assert pts[0] == -3.0
        assert pts[-1] == 3.0

    def test_descending(self):
        assert list(Axis('x', 1, -1, 2).points()) == [1.0, 0.0, -1.0]

    def test_points_from_index(self):
        ax = Axis('x', 0.0, 1.0, 10)
        assert list(ax.points(range(3, 5))) == [ax.point(3), ax.point(4)]

    def test_invalid_steps(self):
        with pytest.raises(ValueError):
            Axis('x', 0, 1, 0)
        with pytest.raises(ValueError):
            Axis('x', 0, 1, 2.5)

    def test_invalid_bounds(self):
        with pytest.raises(ValueError):
            Axis('x', 0, float('inf'), 2)
        with pytest.raises(ValueError):
            Axis('x', float('nan'), 1, 2)


class TestPartition:
    """Partitions cover every index once, in order."""

    @pytest.mark.parametrize("steps,n", [(2, 1), (2, 2), (6, 3), (10, 4), (3, 10)])
    def test_cover(self, steps, n):
        ax = Axis('x', 0, 1, steps)
        blocks = ax.partition(n)
        assert len(blocks) == min(n, len(ax))
        indices = [i for block in blocks for i in block]
        assert indices == list(range(len(ax)))

    def test_near_equal_sizes(self):
        sizes = [len(b) for b in Axis('x', 0, 1, 9).partition(3)]
        assert max(sizes) - min(sizes) <= 1

    def test_partitioned_points_match(self):
        ax = Axis('x', -3, 3, 6)
        joined = [p for block in ax.partition(3) for p in ax.points(block)]
        assert joined == list(ax.points())

    def test_invalid(self):
        with pytest.raises(ValueError):
            Axis('x', 0, 1, 2).partition(0)


class TestNormalizeAxis:

    def test_tuple(self):
        ax = normalize_axis((0.0, 1.0), 4, 'y')
        assert ax == Axis('y', 0.0, 1.0, 4)

    def test_axis_passthrough(self):
        ax = Axis('x', 0, 1, 2)
        assert normalize_axis(ax) is ax

    def test_tuple_needs_steps(self):
        with pytest.raises(ValueError):
            normalize_axis((0.0, 1.0))

    def test_bad_type(self):
        with pytest.raises(TypeError):
            normalize_axis([0.0, 1.0], 2)
