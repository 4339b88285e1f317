from __future__ import annotations

from typing import Any, Iterator

import numpy as np

from .coords import Coordinate


class Grid:
    """Fixed-size 2D container addressed as (x, y).

    Storage is a dense numpy array of shape (height, width). Access outside
    [0, width) x [0, height) raises IndexError; callers that need edge
    semantics (walls, open sky) add them on top.
    """

    def __init__(self, width: int, height: int, dtype: Any = np.int8, fill: Any = 0) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"Grid dimensions must be positive, got {width}x{height}")
        self.width = int(width)
        self.height = int(height)
        self._fill = fill
        self._data = np.full((self.height, self.width), fill, dtype=dtype)

    def contains(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def _check(self, x: int, y: int) -> None:
        if not self.contains(x, y):
            raise IndexError(f"({x}, {y}) is outside a {self.width}x{self.height} grid")

    def get(self, x: int, y: int) -> Any:
        self._check(x, y)
        return self._data[y, x]

    def set(self, x: int, y: int, value: Any) -> None:
        self._check(x, y)
        self._data[y, x] = value

    def coordinates(self) -> Iterator[Coordinate]:
        # Column-major, bottom row first within each column
        for x in range(self.width):
            for y in range(self.height - 1, -1, -1):
                yield Coordinate(x, y)

    def fill(self, value: Any = None) -> None:
        self._data.fill(self._fill if value is None else value)

    def copy(self) -> "Grid":
        clone = Grid(self.width, self.height, dtype=self._data.dtype, fill=self._fill)
        clone._data = self._data.copy()
        return clone

    def to_array(self) -> np.ndarray:
        return self._data.copy()
