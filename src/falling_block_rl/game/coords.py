from __future__ import annotations

from typing import NamedTuple


class Coordinate(NamedTuple):
    x: int
    y: int

    def __neg__(self) -> "Coordinate":
        return Coordinate(-self.x, -self.y)

    def offset(self, dx: int, dy: int) -> "Coordinate":
        return Coordinate(self.x + dx, self.y + dy)
