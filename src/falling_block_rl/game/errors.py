from __future__ import annotations


class PieceDefinitionError(ValueError):
    """Raised at import time when a piece map or kick table is malformed."""


class InvariantViolation(RuntimeError):
    """Raised when the engine reaches a state that indicates a defect."""
