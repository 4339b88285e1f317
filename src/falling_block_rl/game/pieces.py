from __future__ import annotations

from enum import IntEnum, IntFlag
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from .coords import Coordinate
from .errors import InvariantViolation, PieceDefinitionError
from .grid import Grid


class PieceKind(IntEnum):
    I = 1
    O = 2
    T = 3
    S = 4
    Z = 5
    J = 6
    L = 7


class Color(IntEnum):
    NONE = 0
    CYAN = 1
    YELLOW = 2
    MAGENTA = 3
    GREEN = 4
    RED = 5
    BLUE = 6
    GRAY = 7


class _BlockState(IntFlag):
    EMPTY = 0
    SOLID = 1
    SHADOW = 2


RotationMap = Sequence[str]
KickEntries = Mapping[Tuple[int, int], Sequence[Tuple[int, int]]]


class KickTable:
    """Ordered wall-kick offsets indexed by (from_rotation, to_rotation).

    Registering a -> b also stores the negated offsets under b -> a, so both
    directions are plain table reads.
    """

    SIZE = 4

    def __init__(self, entries: KickEntries) -> None:
        self._table: List[List[Optional[Tuple[Coordinate, ...]]]] = [
            [None] * self.SIZE for _ in range(self.SIZE)
        ]
        for (a, b), offsets in entries.items():
            self._add(a, b, offsets)
        self._validate()

    def _add(self, a: int, b: int, offsets: Sequence[Tuple[int, int]]) -> None:
        if not (0 <= a < self.SIZE and 0 <= b < self.SIZE) or a == b:
            raise PieceDefinitionError(f"Invalid kick transition ({a}, {b})")
        if len(offsets) == 0:
            raise PieceDefinitionError(f"Kick transition ({a}, {b}) has no offsets")
        forward = tuple(Coordinate(int(dx), int(dy)) for dx, dy in offsets)
        self._table[a][b] = forward
        self._table[b][a] = tuple(-offset for offset in forward)

    def _validate(self) -> None:
        for a in range(self.SIZE):
            for b in ((a + 1) % self.SIZE, (a - 1) % self.SIZE):
                if self._table[a][b] is None:
                    raise PieceDefinitionError(f"Kick table is missing transition ({a}, {b})")

    def get(self, a: int, b: int) -> Tuple[Coordinate, ...]:
        if not (0 <= a < self.SIZE and 0 <= b < self.SIZE):
            raise InvariantViolation(f"Rotation transition ({a}, {b}) out of range")
        entry = self._table[a][b]
        if entry is None:
            raise InvariantViolation(f"No kicks registered for rotation ({a}, {b})")
        return entry

    def transitions(self) -> Iterator[Tuple[int, int]]:
        for a in range(self.SIZE):
            for b in range(self.SIZE):
                if self._table[a][b] is not None:
                    yield a, b


class Tetromino:
    """Immutable piece descriptor.

    Each rotation state is a small grid of solid/shadow flags built from a
    literal map ("X" solid, "." empty). A solid cell is a shadow caster when
    the cell below it is empty or off the bottom of the map, i.e. it is the
    lowest solid cell of its column run.
    """

    def __init__(
        self,
        name: str,
        kind: PieceKind,
        color: Color,
        kicks: KickTable,
        rotations: Sequence[RotationMap],
    ) -> None:
        if kicks is None:
            raise PieceDefinitionError(f"{name}: kick table is required")
        if len(rotations) not in (1, 2, 4):
            raise PieceDefinitionError(f"{name}: expected 1, 2 or 4 rotation states, got {len(rotations)}")

        self.name = name
        self.kind = kind
        self.color = color
        self.kicks = kicks
        self.height = len(rotations[0])
        self.width = len(rotations[0][0]) if self.height else 0
        if self.width == 0:
            raise PieceDefinitionError(f"{name}: empty rotation map")

        self._rotations: List[Grid] = []
        self._cells: List[Tuple[Coordinate, ...]] = []
        for index, rows in enumerate(rotations):
            grid = self._build_rotation(index, rows)
            self._rotations.append(grid)
            self._cells.append(
                tuple(c for c in grid.coordinates() if grid.get(c.x, c.y) & _BlockState.SOLID)
            )

    def _build_rotation(self, index: int, rows: RotationMap) -> Grid:
        if len(rows) != self.height or any(len(row) != self.width for row in rows):
            raise PieceDefinitionError(
                f"{self.name}: rotation {index} is not {self.width}x{self.height}"
            )
        grid = Grid(self.width, self.height, dtype=np.int8, fill=_BlockState.EMPTY)
        solid = 0
        for x, y in grid.coordinates():
            ch = rows[y][x]
            if ch == "X":
                grid.set(x, y, _BlockState.SOLID)
                solid += 1
            elif ch != ".":
                raise PieceDefinitionError(f"{self.name}: unexpected character {ch!r} in rotation {index}")
        if solid != 4:
            raise PieceDefinitionError(f"{self.name}: rotation {index} has {solid} solid cells, expected 4")

        for x, y in grid.coordinates():
            if grid.get(x, y) & _BlockState.SOLID:
                if not grid.contains(x, y + 1) or grid.get(x, y + 1) == _BlockState.EMPTY:
                    grid.set(x, y, grid.get(x, y) | _BlockState.SHADOW)
        return grid

    @property
    def rotation_count(self) -> int:
        return len(self._rotations)

    def _block(self, x: int, y: int, rotation: int) -> int:
        if x < 0 or y < 0 or x >= self.width or y >= self.height:
            return _BlockState.EMPTY
        return int(self._rotations[rotation % self.rotation_count].get(x, y))

    def is_solid(self, x: int, y: int, rotation: int) -> bool:
        return bool(self._block(x, y, rotation) & _BlockState.SOLID)

    def is_shadow_block(self, x: int, y: int, rotation: int) -> bool:
        return bool(self._block(x, y, rotation) & _BlockState.SHADOW)

    def cells(self, rotation: int) -> Tuple[Coordinate, ...]:
        """Solid cells of a rotation, column-major with the bottom row first."""
        return self._cells[rotation % self.rotation_count]

    def kicks_for(self, current: int, target: int) -> Tuple[Coordinate, ...]:
        return self.kicks.get(current, target)

    def __repr__(self) -> str:
        return f"Tetromino({self.name})"


JLSTZ_KICKS = KickTable({
    (0, 1): [(0, 0), (-1, 0), (-1, 1), (0, -2), (-1, -2)],
    (1, 2): [(0, 0), (1, 0), (1, -1), (0, 2), (1, 2)],
    (2, 3): [(0, 0), (1, 0), (1, 1), (0, -2), (1, -2)],
    (3, 0): [(0, 0), (-1, 0), (-1, -1), (0, 2), (-1, 2)],
})

I_KICKS = KickTable({
    (0, 1): [(0, 0), (-2, 0), (1, 0), (-2, -1), (1, 2)],
    (1, 2): [(0, 0), (-1, 0), (2, 0), (-1, 2), (2, -1)],
    (2, 3): [(0, 0), (2, 0), (-1, 0), (2, 1), (-1, -2)],
    (3, 0): [(0, 0), (1, 0), (-2, 0), (1, -2), (-2, 1)],
})

O_KICKS = KickTable({
    (0, 1): [(0, 0)],
    (1, 2): [(0, 0)],
    (2, 3): [(0, 0)],
    (3, 0): [(0, 0)],
})


ROTATION_MAPS: Dict[PieceKind, Tuple[RotationMap, ...]] = {
    PieceKind.I: (
        ("....",
         "XXXX",
         "....",
         "...."),
        ("..X.",
         "..X.",
         "..X.",
         "..X."),
        ("....",
         "....",
         "XXXX",
         "...."),
        (".X..",
         ".X..",
         ".X..",
         ".X.."),
    ),
    PieceKind.T: (
        (".X.",
         "XXX",
         "..."),
        (".X.",
         ".XX",
         ".X."),
        ("...",
         "XXX",
         ".X."),
        (".X.",
         "XX.",
         ".X."),
    ),
    PieceKind.L: (
        ("..X",
         "XXX",
         "..."),
        (".X.",
         ".X.",
         ".XX"),
        ("...",
         "XXX",
         "X.."),
        ("XX.",
         ".X.",
         ".X."),
    ),
    PieceKind.J: (
        ("X..",
         "XXX",
         "..."),
        (".XX",
         ".X.",
         ".X."),
        ("...",
         "XXX",
         "..X"),
        (".X.",
         ".X.",
         "XX."),
    ),
    PieceKind.S: (
        (".XX",
         "XX.",
         "..."),
        (".X.",
         ".XX",
         "..X"),
        ("...",
         ".XX",
         "XX."),
        ("X..",
         "XX.",
         ".X."),
    ),
    PieceKind.Z: (
        ("XX.",
         ".XX",
         "..."),
        ("..X",
         ".XX",
         ".X."),
        ("...",
         "XX.",
         ".XX"),
        (".X.",
         "XX.",
         "X.."),
    ),
    PieceKind.O: (
        ("XX",
         "XX"),
    ),
}

PIECE_COLORS: Dict[PieceKind, Color] = {
    PieceKind.I: Color.CYAN,
    PieceKind.O: Color.YELLOW,
    PieceKind.T: Color.MAGENTA,
    PieceKind.S: Color.GREEN,
    PieceKind.Z: Color.RED,
    PieceKind.J: Color.BLUE,
    PieceKind.L: Color.GRAY,
}


def _kicks_for_kind(kind: PieceKind) -> KickTable:
    if kind == PieceKind.I:
        return I_KICKS
    if kind == PieceKind.O:
        return O_KICKS
    return JLSTZ_KICKS


def _build_catalog() -> Mapping[PieceKind, Tetromino]:
    catalog = {
        kind: Tetromino(kind.name, kind, PIECE_COLORS[kind], _kicks_for_kind(kind), ROTATION_MAPS[kind])
        for kind in PieceKind
    }
    return MappingProxyType(catalog)


PIECES: Mapping[PieceKind, Tetromino] = _build_catalog()

# Canonical order of a fresh bag before shuffling
BAG_ORDER: Tuple[Tetromino, ...] = tuple(
    PIECES[kind]
    for kind in (PieceKind.I, PieceKind.J, PieceKind.L, PieceKind.S, PieceKind.Z, PieceKind.O, PieceKind.T)
)
