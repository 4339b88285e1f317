from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from .errors import InvariantViolation


@dataclass
class ScoringRules:
    line_clear_scores: tuple[int, int, int, int] = (40, 100, 300, 1200)
    hard_drop_bonus: int = 1
    lines_per_level: int = 10
    max_level: int = 10
    # Drop timing in milliseconds
    max_drop_ms: int = 500
    min_drop_ms: int = 75
    grace_ms: int = 250

    def score_for_lines(self, lines: int) -> int:
        if lines == 0:
            return 0
        if 1 <= lines <= len(self.line_clear_scores):
            return self.line_clear_scores[lines - 1]
        raise InvariantViolation(f"Got an unusual amount of lines cleared: {lines}")

    def drop_duration(self, level: int) -> int:
        t = level / float(self.max_level)
        return self.max_drop_ms + int((self.min_drop_ms - self.max_drop_ms) * t)

    def advance(self, level: int, level_lines: int, cleared: int) -> Tuple[int, int]:
        """Return the (level, level_lines) pair after clearing ``cleared`` lines."""
        level_lines += cleared
        if level_lines > self.lines_per_level:
            level_lines = 0
            if level < self.max_level:
                level += 1
        return level, level_lines
