from __future__ import annotations

import numpy as np
import pytest

from falling_block_rl.game import Coordinate, Grid


def test_coordinate_is_a_value_type():
    a = Coordinate(2, 3)
    assert a == Coordinate(2, 3)
    assert a != Coordinate(3, 2)
    assert hash(a) == hash(Coordinate(2, 3))
    assert -a == Coordinate(-2, -3)
    assert a.offset(1, -1) == Coordinate(3, 2)
    x, y = a
    assert (x, y) == (2, 3)


def test_get_set_round_trip():
    grid = Grid(4, 3)
    grid.set(3, 2, 5)
    assert grid.get(3, 2) == 5
    assert grid.get(0, 0) == 0


@pytest.mark.parametrize("x, y", [(-1, 0), (0, -1), (4, 0), (0, 3)])
def test_out_of_range_access_fails(x, y):
    grid = Grid(4, 3)
    assert not grid.contains(x, y)
    with pytest.raises(IndexError):
        grid.get(x, y)
    with pytest.raises(IndexError):
        grid.set(x, y, 1)


def test_coordinates_are_column_major_bottom_first():
    grid = Grid(2, 3)
    assert list(grid.coordinates()) == [
        (0, 2), (0, 1), (0, 0),
        (1, 2), (1, 1), (1, 0),
    ]


def test_coordinates_can_be_restarted():
    grid = Grid(5, 4)
    first = list(grid.coordinates())
    assert first == list(grid.coordinates())
    assert len(set(first)) == 20


def test_fill_copy_and_array_snapshot():
    grid = Grid(3, 2, dtype=np.int8, fill=0)
    grid.fill(7)
    clone = grid.copy()
    clone.set(0, 0, 1)
    assert grid.get(0, 0) == 7
    snapshot = grid.to_array()
    assert snapshot.shape == (2, 3)
    snapshot[0, 0] = 0
    assert grid.get(0, 0) == 7
    grid.fill()
    assert grid.get(2, 1) == 0


def test_rejects_empty_dimensions():
    with pytest.raises(ValueError):
        Grid(0, 5)
