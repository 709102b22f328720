"""
Position records produced by replay and filled in by evaluation.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

CENTIPAWN = "cp"
MATE = "mate"


class EvaluationSource(str, Enum):
    """Where a position's evaluation came from."""

    CLOUD = "cloud"
    LOCAL = "local"
    UNRESOLVED = "unresolved"


@dataclass(frozen=True)
class Evaluation:
    """Score of a position, always from White's point of view."""

    type: str  # "cp" or "mate"
    value: int  # centipawns, or plies to mate

    def __post_init__(self):
        if self.type not in (CENTIPAWN, MATE):
            raise ValueError(f"Unknown evaluation type: {self.type}")

    @property
    def is_mate(self) -> bool:
        """Check if evaluation is a forced mate."""
        return self.type == MATE

    @classmethod
    def neutral(cls) -> "Evaluation":
        """Zero centipawn evaluation."""
        return cls(CENTIPAWN, 0)

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "value": self.value}


@dataclass(frozen=True)
class EvaluationLine:
    """One ranked candidate continuation for a position."""

    rank: int  # 1 = best
    depth: int
    move_uci: str
    evaluation: Evaluation

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rank": self.rank,
            "depth": self.depth,
            "move_uci": self.move_uci,
            "evaluation": self.evaluation.to_dict(),
        }


@dataclass(frozen=True)
class Move:
    """A played move in notation (SAN) and coordinate (UCI) form."""

    san: str
    uci: str

    def to_dict(self) -> Dict[str, str]:
        return {"san": self.san, "uci": self.uci}


@dataclass
class BoardState:
    """
    One ply of a replayed game.

    Only the evaluation fields are mutated after replay. Scheduling state
    for local engines is kept by the worker pool, not on the record.
    """

    fen: str
    move: Optional[Move] = None
    top_lines: Optional[List[EvaluationLine]] = None
    cutoff_evaluation: Optional[Evaluation] = None
    source: Optional[EvaluationSource] = None

    @property
    def is_evaluated(self) -> bool:
        """True once candidate lines are set, even an empty set."""
        return self.top_lines is not None

    @property
    def is_unresolved(self) -> bool:
        return self.source is EvaluationSource.UNRESOLVED

    @property
    def is_settled(self) -> bool:
        """True once the position needs no further evaluation work."""
        return self.is_evaluated or self.is_unresolved

    def set_lines(self, lines: List[EvaluationLine], source: EvaluationSource) -> bool:
        """
        Record candidate lines unless another source already did.

        Returns:
            True if the lines were stored
        """
        if self.top_lines is not None:
            return False
        self.top_lines = list(lines)
        self.source = source
        return True

    def mark_unresolved(self):
        if self.top_lines is None:
            self.source = EvaluationSource.UNRESOLVED

    def best_evaluation(self) -> Optional[Evaluation]:
        """Evaluation of the rank-1 line, if any."""
        for line in self.top_lines or []:
            if line.rank == 1:
                return line.evaluation
        return None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"fen": self.fen}
        if self.move is not None:
            data["move"] = self.move.to_dict()
        if self.top_lines is not None:
            data["top_lines"] = [line.to_dict() for line in self.top_lines]
        if self.cutoff_evaluation is not None:
            data["cutoff_evaluation"] = self.cutoff_evaluation.to_dict()
        if self.source is not None:
            data["worker"] = self.source.value
        return data


@dataclass
class EvaluationRun:
    """Result of one evaluation acquisition run."""

    positions: List[BoardState] = field(default_factory=list)
    timed_out: bool = False

    @property
    def unresolved(self) -> List[int]:
        """Indices of positions left without candidate lines."""
        return [i for i, state in enumerate(self.positions) if not state.is_evaluated]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "positions": [state.to_dict() for state in self.positions],
            "timed_out": self.timed_out,
        }
