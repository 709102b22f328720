"""
PGN parser that turns a game record into an ordered list of move tokens.
"""

import io
import logging
from dataclasses import dataclass, field
from typing import List, Optional

import chess
import chess.pgn

from chess_review.errors import MalformedRecord

logger = logging.getLogger(__name__)

SAN_ERRORS = (chess.IllegalMoveError, chess.InvalidMoveError, chess.AmbiguousMoveError)


@dataclass
class ParsedGame:
    """Mainline of a game record, before any legality check beyond the parser's."""

    headers: chess.pgn.Headers
    moves: List[str] = field(default_factory=list)

    @property
    def starting_fen(self) -> Optional[str]:
        """FEN from the record's SetUp/FEN headers, if present."""
        return self.headers.get("FEN")


class MoveTokenCollector(chess.pgn.BaseVisitor[ParsedGame]):
    """
    Collect raw mainline SAN tokens.

    Tokens are recorded before python-chess checks them, so an illegal move
    is kept as the last token and reported by replay with its ply index.
    Variations are skipped.
    """

    def begin_game(self):
        self.headers = chess.pgn.Headers()
        self.moves: List[str] = []
        self.errors: List[Exception] = []
        self.found_headers = False

    def visit_header(self, tagname: str, tagvalue: str):
        self.found_headers = True
        self.headers[tagname] = tagvalue

    def begin_variation(self):
        return chess.pgn.SKIP

    def parse_san(self, board: chess.Board, san: str) -> chess.Move:
        self.moves.append(san)
        return super().parse_san(board, san)

    def handle_error(self, error: Exception):
        # Bad SAN stops the mainline here, replay reports it with its ply
        if not isinstance(error, SAN_ERRORS):
            self.errors.append(error)

    def result(self) -> ParsedGame:
        if self.errors:
            raise MalformedRecord(f"Failed to parse invalid PGN: {self.errors[0]}")
        if not self.found_headers and not self.moves:
            raise MalformedRecord("No game found in PGN.")
        return ParsedGame(headers=self.headers, moves=self.moves)


class PGNParser:
    """Parse a single PGN game record."""

    def parse(self, pgn_text: str) -> ParsedGame:
        """
        Parse a PGN string into its mainline move tokens.

        Args:
            pgn_text: Game record in PGN format (headers optional)

        Returns:
            ParsedGame with headers and SAN tokens in play order

        Raises:
            MalformedRecord: If the text holds no game
        """
        if pgn_text is None or not pgn_text.strip():
            raise MalformedRecord("Enter a PGN to analyse.")

        try:
            game = chess.pgn.read_game(io.StringIO(pgn_text), Visitor=MoveTokenCollector)
        except MalformedRecord:
            raise
        except (ValueError, KeyError) as e:
            raise MalformedRecord(f"Failed to parse invalid PGN: {e}") from e

        if game is None:
            raise MalformedRecord("Enter a PGN to analyse.")

        logger.debug(f"Parsed PGN with {len(game.moves)} mainline moves")
        return game


def parse_pgn(pgn_text: str) -> ParsedGame:
    """Parse a PGN string with a default parser."""
    return PGNParser().parse(pgn_text)
