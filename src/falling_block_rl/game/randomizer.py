from __future__ import annotations

import random
from collections import deque
from typing import Deque, List, Optional

from .pieces import BAG_ORDER, Tetromino


class BagRandomizer:
    """7-bag piece generator backing the next queue.

    Whenever one piece or fewer is queued, a shuffled copy of all seven
    pieces is appended behind whatever is left.
    """

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.rng = rng or random.Random()
        self._queue: Deque[Tetromino] = deque()

    def __len__(self) -> int:
        return len(self._queue)

    def _refill(self) -> None:
        if len(self._queue) <= 1:
            bag = list(BAG_ORDER)
            self.rng.shuffle(bag)
            self._queue.extend(bag)

    def peek(self) -> Tetromino:
        self._refill()
        return self._queue[0]

    def draw(self) -> Tetromino:
        self._refill()
        return self._queue.popleft()

    def preview(self, count: int) -> List[Tetromino]:
        self._refill()
        return list(self._queue)[:count]

    def reset(self, rng: Optional[random.Random] = None) -> None:
        if rng is not None:
            self.rng = rng
        self._queue.clear()
