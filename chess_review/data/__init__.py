"""
Data module: game records and per-ply position records.
"""

from chess_review.data.pgn_parser import PGNParser, ParsedGame, parse_pgn
from chess_review.data.positions import (
    BoardState,
    Evaluation,
    EvaluationLine,
    EvaluationRun,
    EvaluationSource,
    Move,
)

__all__ = [
    "PGNParser",
    "ParsedGame",
    "parse_pgn",
    "BoardState",
    "Evaluation",
    "EvaluationLine",
    "EvaluationRun",
    "EvaluationSource",
    "Move",
]
