from __future__ import annotations

from typing import Iterator

import numpy as np

from .grid import Grid
from .pieces import Color


class Playfield:
    """The stack of locked blocks.

    Each cell holds a color code; ``Color.NONE`` marks an empty cell and any
    other code a solid block of that color. Outside the grid the left, right
    and bottom edges count as solid while the space above row 0 is open, so
    pieces may spawn and rotate partially above the field.
    """

    def __init__(self, width: int = 10, height: int = 20) -> None:
        self._cells = Grid(width, height, dtype=np.int8, fill=Color.NONE)

    @property
    def width(self) -> int:
        return self._cells.width

    @property
    def height(self) -> int:
        return self._cells.height

    def reset(self) -> None:
        self._cells.fill(Color.NONE)

    def contains(self, x: int, y: int) -> bool:
        return self._cells.contains(x, y)

    def get_color(self, x: int, y: int) -> Color:
        if not self._cells.contains(x, y):
            return Color.NONE
        return Color(int(self._cells.get(x, y)))

    def set_block(self, x: int, y: int, color: Color) -> None:
        if color == Color.NONE:
            raise ValueError("A solid block needs a color, use clear_block() to empty a cell")
        if self._cells.contains(x, y):
            self._cells.set(x, y, color)

    def clear_block(self, x: int, y: int) -> None:
        if self._cells.contains(x, y):
            self._cells.set(x, y, Color.NONE)

    def is_block_solid(self, x: int, y: int) -> bool:
        if self._cells.contains(x, y):
            return bool(self._cells.get(x, y) != Color.NONE)
        # Walls and floor are solid, the sky is not
        if x < 0 or x >= self.width:
            return True
        return y >= self.height

    def cast_down(self, x: int, y: int, state: bool) -> int:
        """First row at or below ``y`` whose solidity equals ``state``, else height."""
        if self.is_block_solid(x, y) == state:
            return y
        while y < self.height:
            if self.is_block_solid(x, y) == state:
                return y
            y += 1
        return self.height

    def cast_up(self, x: int, y: int, state: bool) -> int:
        """First row at or above ``y`` whose solidity equals ``state``, else 0."""
        if self.is_block_solid(x, y) == state:
            return y
        while y >= 0:
            if self.is_block_solid(x, y) == state:
                return y
            y -= 1
        return 0

    def check_row_for_clear(self, row: int) -> bool:
        return all(self.is_block_solid(x, row) for x in range(self.width))

    def detect_clears(self) -> Iterator[int]:
        """Yield full rows from the top of the field down."""
        for row in range(self.height):
            if self.check_row_for_clear(row):
                yield row

    def clear_row(self, row: int) -> None:
        """Remove ``row`` by shifting everything above it down one row."""
        if not 0 <= row < self.height:
            raise IndexError(f"Row {row} is outside a field of height {self.height}")
        for y in range(row, 0, -1):
            for x in range(self.width):
                self._cells.set(x, y, self._cells.get(x, y - 1))
        for x in range(self.width):
            self._cells.set(x, 0, Color.NONE)

    def to_array(self) -> np.ndarray:
        return self._cells.to_array()
