from __future__ import annotations

import random
from typing import Callable, Iterable

import pytest

from falling_block_rl.game import Color, FallingBlockGame, Playfield


class UnshuffledRandom(random.Random):
    """Keeps every bag in canonical order: I, J, L, S, Z, O, T."""

    def shuffle(self, x, *args, **kwargs) -> None:  # type: ignore[override]
        return None


def fill_rows(field: Playfield, rows: Iterable[int], skip_columns: Iterable[int] = (), color: Color = Color.RED) -> None:
    skipped = set(skip_columns)
    for y in rows:
        for x in range(field.width):
            if x not in skipped:
                field.set_block(x, y, color)


def lock_active(game: FallingBlockGame) -> None:
    """Advance the clock one drop tick at a time until the active piece locks."""
    locked = game.pieces_locked
    while game.pieces_locked == locked and not game.game_over:
        game.update(game.active.drop_time + 1)


@pytest.fixture
def game() -> FallingBlockGame:
    return FallingBlockGame(rng=UnshuffledRandom())


@pytest.fixture
def field() -> Playfield:
    return Playfield()


@pytest.fixture
def fill() -> Callable[..., None]:
    return fill_rows


@pytest.fixture
def lock() -> Callable[[FallingBlockGame], None]:
    return lock_active


@pytest.fixture
def unshuffled() -> random.Random:
    return UnshuffledRandom()
