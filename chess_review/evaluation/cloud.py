"""
Lichess cloud evaluation client.

Looks positions up in the Lichess cloud evaluation cache, which holds deep
multi-PV analyses for positions other users have already analysed.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests

from chess_review.config import LICHESS_CLOUD_EVAL_URL
from chess_review.data.positions import CENTIPAWN, MATE, Evaluation, EvaluationLine

logger = logging.getLogger(__name__)

# Lichess writes castling as king-takes-rook, engines as king-moves-two
CLOUD_UCI_FIXES = {
    "e8h8": "e8g8",
    "e1h1": "e1g1",
    "e8a8": "e8c8",
    "e1a1": "e1c1",
}

AUTHORITATIVE_LINE_COUNT = 2


@dataclass(frozen=True)
class LookupResult:
    """Outcome of a single cloud lookup."""

    available: bool
    lines: List[EvaluationLine] = field(default_factory=list)

    @property
    def is_authoritative(self) -> bool:
        """A hit only counts when both requested lines came back."""
        return self.available and len(self.lines) == AUTHORITATIVE_LINE_COUNT


UNAVAILABLE = LookupResult(available=False)


class CloudEvaluationClient:
    """Fetch ranked evaluations for a FEN from the cloud evaluation service."""

    def __init__(
        self,
        depth: int = 16,
        url: str = LICHESS_CLOUD_EVAL_URL,
        timeout: float = 10.0,
        multipv: int = AUTHORITATIVE_LINE_COUNT,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize cloud client.

        Args:
            depth: Nominal depth recorded on returned lines
            url: Cloud evaluation endpoint
            timeout: Request timeout in seconds
            multipv: Number of lines to request
            session: HTTP session to reuse (created if None)
        """
        self.depth = depth
        self.url = url
        self.timeout = timeout
        self.multipv = multipv
        self.session = session or requests.Session()

    def lookup(self, fen: str, depth: Optional[int] = None) -> LookupResult:
        """
        Look up a position.

        Network errors, non-success responses and malformed payloads all
        come back as UNAVAILABLE.

        Args:
            fen: Position to look up
            depth: Nominal depth recorded on the lines (defaults to self.depth)

        Returns:
            LookupResult with lines ranked from 1
        """
        try:
            response = self.session.get(
                self.url,
                params={"fen": fen, "multiPv": self.multipv},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning(f"Cloud lookup failed: {e}")
            return UNAVAILABLE

        if not response.ok:
            logger.debug(f"Cloud lookup miss ({response.status_code}) for {fen}")
            return UNAVAILABLE

        try:
            lines = self._parse_lines(response.json(), depth or self.depth)
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning(f"Malformed cloud evaluation payload: {e}")
            return UNAVAILABLE

        return LookupResult(available=True, lines=lines)

    def _parse_lines(self, payload: Dict[str, Any], depth: int) -> List[EvaluationLine]:
        """
        Normalize the payload's principal variations.

        Args:
            payload: Decoded JSON body with a "pvs" list
            depth: Depth recorded on every line

        Returns:
            Lines ranked by position in the list
        """
        lines = []
        for index, pv in enumerate(payload["pvs"]):
            if pv.get("cp") is not None:
                evaluation = Evaluation(CENTIPAWN, int(pv["cp"]))
            elif pv.get("mate") is not None:
                evaluation = Evaluation(MATE, int(pv["mate"]))
            else:
                raise ValueError(f"pv {index + 1} has neither cp nor mate")

            moves = pv.get("moves", "").split()
            move_uci = moves[0] if moves else ""
            move_uci = CLOUD_UCI_FIXES.get(move_uci, move_uci)

            lines.append(
                EvaluationLine(
                    rank=index + 1,
                    depth=depth,
                    move_uci=move_uci,
                    evaluation=evaluation,
                )
            )

        return lines

    def close(self):
        """Close the underlying HTTP session."""
        self.session.close()
