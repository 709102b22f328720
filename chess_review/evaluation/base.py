"""
Abstract Local Engine Interface

This module defines the interface the worker pool uses to run local
evaluations. Any engine that implements it can back the pool, so tests and
alternative engines plug in without touching the scheduler.

Key Principles:
    1. One instance runs one evaluation at a time
    2. evaluate() blocks until the search finishes and may raise on failure
    3. depth is readable from other threads while evaluate() runs
    4. Returned scores are from White's perspective

Convention:
    - Lines are ranked from 1 (best)
    - Centipawns for material scores, plies to mate for forced mates
"""

from abc import ABC, abstractmethod
from typing import List

from chess_review.data.positions import EvaluationLine


class LocalEngine(ABC):
    """
    Abstract base class for local evaluation engines.

    Methods:
        evaluate(fen, depth): Returns ranked candidate lines
        depth: Current search depth of a running evaluation
        stop(): Abort a running evaluation
    """

    @abstractmethod
    def evaluate(self, fen: str, depth: int) -> List[EvaluationLine]:
        """
        Evaluate a position to a fixed depth.

        Args:
            fen: Position to evaluate
            depth: Target search depth

        Returns:
            Ranked candidate lines (may be empty for terminal positions)
        """
        pass

    @property
    @abstractmethod
    def depth(self) -> int:
        """Current search depth, non-decreasing during one evaluation."""
        pass

    def stop(self):
        """Abort a running evaluation. No-op by default."""

    def __repr__(self) -> str:
        """String representation of engine."""
        return f"{self.__class__.__name__}()"
