"""Game module for Falling Block RL.

Exports the simulation engine and supporting classes:
- Coordinate: Immutable (x, y) pair
- Grid: Bounds-checked 2D container
- Tetromino / PIECES: Piece catalog with rotation states and wall kicks
- Playfield: Stack grid with collision, ray casts and line clearing
- BagRandomizer: 7-bag next queue
- ScoringRules: Line clear scores, level progression and drop timing
- FallingBlockGame: Piece lifecycle, timing and input handling
"""

from .coords import Coordinate
from .errors import InvariantViolation, PieceDefinitionError
from .grid import Grid
from .pieces import BAG_ORDER, PIECES, Color, KickTable, PieceKind, Tetromino
from .playfield import Playfield
from .randomizer import BagRandomizer
from .rules import ScoringRules
from .core import Action, ActivePiece, FallingBlockGame, GameConfig, GameOverInfo

__all__ = [
    "Coordinate",
    "Grid",
    "PieceKind",
    "Color",
    "KickTable",
    "Tetromino",
    "PIECES",
    "BAG_ORDER",
    "Playfield",
    "BagRandomizer",
    "ScoringRules",
    "Action",
    "ActivePiece",
    "GameConfig",
    "GameOverInfo",
    "FallingBlockGame",
    "PieceDefinitionError",
    "InvariantViolation",
]
