from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import IntEnum
from typing import Callable, Dict, Iterator, List, Optional

import numpy as np

from .coords import Coordinate
from .pieces import Color, Tetromino
from .playfield import Playfield
from .randomizer import BagRandomizer
from .rules import ScoringRules

logger = logging.getLogger(__name__)


class Action(IntEnum):
    MOVE_LEFT = 0
    MOVE_RIGHT = 1
    SOFT_DROP = 2
    HARD_DROP = 3
    ROTATE_CW = 4
    ROTATE_CCW = 5
    HOLD = 6
    NONE = 7


@dataclass
class GameConfig:
    width: int = 10
    height: int = 20
    random_seed: Optional[int] = None
    spawn_y: int = -1


@dataclass(frozen=True)
class GameOverInfo:
    score: int
    level: int
    lines_cleared: int


@dataclass
class ActivePiece:
    piece: Tetromino
    rotation: int = 0
    x: int = 0
    y: int = 0
    drop_duration: int = 0
    drop_time: int = 0
    grace: bool = False
    did_hard_drop: bool = False

    def cells(self) -> Iterator[Coordinate]:
        for cell in self.piece.cells(self.rotation):
            yield Coordinate(self.x + cell.x, self.y + cell.y)


GameOverCallback = Callable[[GameOverInfo], None]


class FallingBlockGame:
    """Falling block simulation driven by elapsed time and input events.

    The host calls :meth:`update` once per frame with the elapsed
    milliseconds and :meth:`handle_input` for each discrete input. A piece
    falls one row per drop tick. The first tick that cannot move it down
    starts a short grace period; a second failed tick locks it. Accepted
    horizontal moves and rotations cancel the grace flag.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rules: Optional[ScoringRules] = None,
        rng: Optional[random.Random] = None,
        on_game_over: Optional[GameOverCallback] = None,
    ) -> None:
        self.config = config or GameConfig()
        self.rules = rules or ScoringRules()
        self.rng = rng or random.Random(self.config.random_seed)
        self.on_game_over = on_game_over
        self.playfield = Playfield(self.config.width, self.config.height)
        self.bag = BagRandomizer(self.rng)
        self.active: ActivePiece
        self.hold_piece: Optional[Tetromino] = None
        self.can_hold = True
        self.score = 0
        self.level = 0
        self.level_lines = 0
        self.lines_cleared_total = 0
        self.pieces_locked = 0
        self.game_over = False
        self.game_over_info: Optional[GameOverInfo] = None
        self.reset()

    def reset(self, seed: Optional[int] = None) -> None:
        if seed is not None:
            self.rng.seed(seed)
        self.playfield.reset()
        self.bag.reset()
        self.hold_piece = None
        self.can_hold = True
        self.score = 0
        self.level = 0
        self.level_lines = 0
        self.lines_cleared_total = 0
        self.pieces_locked = 0
        self.game_over = False
        self.game_over_info = None
        self._spawn(self.bag.draw())

    # ---------- Render queries ----------
    @property
    def current_piece(self) -> Tetromino:
        return self.active.piece

    @property
    def rotation(self) -> int:
        return self.active.rotation

    @property
    def x(self) -> int:
        return self.active.x

    @property
    def y(self) -> int:
        return self.active.y

    @property
    def next_piece(self) -> Tetromino:
        return self.bag.peek()

    def is_block_solid(self, x: int, y: int) -> bool:
        return self.playfield.is_block_solid(x, y)

    def get_color(self, x: int, y: int) -> Color:
        return self.playfield.get_color(x, y)

    def piece_cells(self) -> List[Coordinate]:
        return list(self.active.cells())

    # ---------- Piece lifecycle ----------
    def _spawn(self, piece: Tetromino) -> None:
        self.active = ActivePiece(piece)
        self._reset_piece_position()

    def _reset_piece_position(self) -> None:
        active = self.active
        active.rotation = 0
        active.x = (self.playfield.width - active.piece.width) // 2
        active.y = self.config.spawn_y
        active.grace = False
        active.drop_duration = self.rules.drop_duration(self.level)
        active.drop_time = active.drop_duration

    def _is_obstructed(self) -> bool:
        return any(self.playfield.is_block_solid(x, y) for x, y in self.active.cells())

    def try_move(self, dx: int, dy: int) -> bool:
        active = self.active
        old_x, old_y = active.x, active.y
        active.x += dx
        active.y += dy
        if not self._is_obstructed():
            return True
        active.x, active.y = old_x, old_y
        return False

    def try_rotate(self, rotation: int) -> bool:
        active = self.active
        old_rotation, old_x, old_y = active.rotation, active.x, active.y
        kicks = active.piece.kicks_for(old_rotation, rotation)
        active.rotation = rotation
        for dx, dy in kicks:
            active.x = old_x + dx
            active.y = old_y + dy
            if not self._is_obstructed():
                return True
        active.rotation, active.x, active.y = old_rotation, old_x, old_y
        return False

    def shadow_distance(self) -> int:
        """Rows the active piece can fall before it rests on the stack."""
        active = self.active
        field = self.playfield
        distance = field.height
        for x, y in active.cells():
            if not active.piece.is_shadow_block(x - active.x, y - active.y, active.rotation):
                continue
            dist = field.cast_down(x, y, True) - 1 - y
            if dist < 0:
                # Piece is inside the stack, measure how far up the opening is
                dist = field.cast_up(x, y, False) - y
            distance = min(distance, dist)
        return max(distance, 0)

    def ghost_y(self) -> int:
        return self.active.y + self.shadow_distance()

    # ---------- Input ----------
    def _accepting_input(self) -> bool:
        return not self.game_over and not self.active.did_hard_drop

    def _shift(self, dx: int) -> bool:
        if not self._accepting_input():
            return False
        if self.try_move(dx, 0):
            self.active.grace = False
            return True
        return False

    def _rotate(self, delta: int) -> bool:
        if not self._accepting_input():
            return False
        if self.try_rotate((self.active.rotation + delta) % 4):
            self.active.grace = False
            return True
        return False

    def move_left(self) -> bool:
        return self._shift(-1)

    def move_right(self) -> bool:
        return self._shift(1)

    def rotate_cw(self) -> bool:
        return self._rotate(1)

    def rotate_ccw(self) -> bool:
        return self._rotate(-1)

    def soft_drop(self) -> bool:
        if not self._accepting_input() or self.shadow_distance() <= 0:
            return False
        # Falls on the next update
        self.active.drop_time = 0
        return True

    def hard_drop(self) -> bool:
        if not self._accepting_input():
            return False
        distance = self.shadow_distance()
        if distance <= 0:
            return False
        self.active.y += distance
        self.active.did_hard_drop = True
        self.active.drop_time = 0
        return True

    def hold(self) -> bool:
        if not self._accepting_input() or not self.can_hold:
            return False
        current = self.active.piece
        if self.hold_piece is None:
            self.hold_piece = current
            self._spawn(self.bag.draw())
        else:
            swapped = self.hold_piece
            self.hold_piece = current
            self._spawn(swapped)
        self.can_hold = False
        logger.debug("Held %s, now playing %s", self.hold_piece.name, self.active.piece.name)
        return True

    def handle_input(self, action: Action) -> bool:
        handlers: Dict[Action, Callable[[], bool]] = {
            Action.MOVE_LEFT: self.move_left,
            Action.MOVE_RIGHT: self.move_right,
            Action.SOFT_DROP: self.soft_drop,
            Action.HARD_DROP: self.hard_drop,
            Action.ROTATE_CW: self.rotate_cw,
            Action.ROTATE_CCW: self.rotate_ccw,
            Action.HOLD: self.hold,
        }
        handler = handlers.get(Action(action))
        if handler is None:
            return False
        return handler()

    def accepted_actions(self) -> Dict[Action, bool]:
        """Which inputs the engine would currently take, without applying them."""
        accepting = self._accepting_input()
        can_fall = accepting and self.shadow_distance() > 0
        return {
            Action.MOVE_LEFT: accepting and self._fits(-1, 0, self.active.rotation),
            Action.MOVE_RIGHT: accepting and self._fits(1, 0, self.active.rotation),
            Action.SOFT_DROP: can_fall,
            Action.HARD_DROP: can_fall,
            Action.ROTATE_CW: accepting and self._can_rotate(1),
            Action.ROTATE_CCW: accepting and self._can_rotate(-1),
            Action.HOLD: accepting and self.can_hold,
            Action.NONE: True,
        }

    def _fits(self, dx: int, dy: int, rotation: int) -> bool:
        active = self.active
        return not any(
            self.playfield.is_block_solid(active.x + dx + c.x, active.y + dy + c.y)
            for c in active.piece.cells(rotation)
        )

    def _can_rotate(self, delta: int) -> bool:
        target = (self.active.rotation + delta) % 4
        kicks = self.active.piece.kicks_for(self.active.rotation, target)
        return any(self._fits(dx, dy, target) for dx, dy in kicks)

    # ---------- Timing ----------
    def update(self, delta: int) -> None:
        if delta < 0:
            raise ValueError(f"Elapsed time must be non-negative, got {delta}")
        if self.game_over:
            return
        self.active.drop_time -= delta
        while not self.game_over and self.active.drop_time < 0:
            self._drop_tick()

    def _drop_tick(self) -> None:
        active = self.active
        if self.try_move(0, 1):
            active.grace = False
            active.drop_duration = self.rules.drop_duration(self.level)
        elif active.grace:
            # Second failed tick, the grace period is over
            self._lock_piece()
            return
        else:
            active.grace = True
            active.drop_duration = self.rules.grace_ms
            logger.debug("%s touched down at (%d, %d)", active.piece.name, active.x, active.y)
        active.drop_time += active.drop_duration

    def _lock_piece(self) -> int:
        active = self.active
        cells = list(active.cells())
        if any(y < 0 for _, y in cells):
            self._trigger_game_over()
            return 0

        for x, y in cells:
            self.playfield.set_block(x, y, active.piece.color)

        # Detection yields rows top-down; clearing in that order keeps later indices valid
        rows = list(self.playfield.detect_clears())
        for row in rows:
            self.playfield.clear_row(row)

        lines = len(rows)
        if lines > 0:
            gained = self.rules.score_for_lines(lines)
            if active.did_hard_drop:
                gained += self.rules.hard_drop_bonus
            self.score += gained
            self.lines_cleared_total += lines
            previous_level = self.level
            self.level, self.level_lines = self.rules.advance(self.level, self.level_lines, lines)
            logger.info("Cleared %d line(s) for %d points (score %d)", lines, gained, self.score)
            if self.level != previous_level:
                logger.info("Reached level %d", self.level)

        self.pieces_locked += 1
        logger.debug("Locked %s at (%d, %d) rotation %d", active.piece.name, active.x, active.y, active.rotation)
        self.can_hold = True
        self._spawn(self.bag.draw())
        return lines

    def _trigger_game_over(self) -> None:
        self.game_over = True
        self.game_over_info = GameOverInfo(
            score=self.score,
            level=self.level,
            lines_cleared=self.lines_cleared_total,
        )
        logger.warning("Game over: score %d, level %d", self.score, self.level)
        if self.on_game_over is not None:
            self.on_game_over(self.game_over_info)

    # ---------- Snapshots ----------
    def get_state(self) -> np.ndarray:
        # Active piece overlaid as negative kind codes
        state = self.playfield.to_array()
        if not self.game_over:
            for x, y in self.active.cells():
                if self.playfield.contains(x, y):
                    state[y, x] = -int(self.active.piece.kind)
        return state

    def get_stats(self) -> dict:
        return {
            "score": self.score,
            "level": self.level,
            "level_lines": self.level_lines,
            "lines_cleared": self.lines_cleared_total,
            "pieces_locked": self.pieces_locked,
            "game_over": self.game_over,
        }
