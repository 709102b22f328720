"""
Errors raised while turning a game record into evaluated positions.

Only request-level failures are exceptions. Remote lookup misses and local
engine failures are recovered inside the evaluation pipeline and never reach
the caller.
"""

from typing import Optional


class ReviewError(ValueError):
    """Base class for errors that reject an analysis request."""


class MalformedRecord(ReviewError):
    """The game record could not be parsed into a move list."""


class InvalidStartingPosition(ReviewError):
    """The starting FEN is not a valid chess position."""

    def __init__(self, fen: str, reason: Optional[str] = None):
        self.fen = fen
        message = f"Invalid starting position: {fen}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class InvalidMove(ReviewError):
    """
    A move in the record is illegal in the position it is played from.

    Attributes:
        ply: 1-based index of the offending move
        san: The move token as it appeared in the record
    """

    def __init__(self, ply: int, san: str):
        self.ply = ply
        self.san = san
        super().__init__(f"Illegal move at ply {ply}: {san}")
