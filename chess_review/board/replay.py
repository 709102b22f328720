"""
Board Replay

This module replays a list of SAN move tokens on a virtual board and records
one BoardState per ply.

Output:
    states[0]      starting position, no move
    states[i]      position after the i-th move, with the move in SAN and
                   coordinate form

Coordinate Form:
    Origin square followed by destination square (e.g. "g1f3"). Engines speak
    coordinates only, so the downstream classifier matches engine output
    against this form. Promotion pieces are not included and castling is
    written as the king moving two squares (e1g1, e1c1, e8g8, e8c8).
"""

from typing import List, Optional, Sequence

import chess

from chess_review.data.positions import BoardState, Move
from chess_review.errors import InvalidMove, InvalidStartingPosition


def coordinate_move(move: chess.Move) -> str:
    """
    Convert a python-chess move to origin+destination form.

    Args:
        move: Move as played on a standard board

    Returns:
        Four character coordinate string, e.g. "e2e4"
    """
    return chess.square_name(move.from_square) + chess.square_name(move.to_square)


def create_board(fen: Optional[str] = None) -> chess.Board:
    """
    Create a board from a FEN, or the standard starting position.

    Raises:
        InvalidStartingPosition: If the FEN cannot be loaded
    """
    if fen is None:
        return chess.Board()

    try:
        return chess.Board(fen)
    except ValueError as e:
        raise InvalidStartingPosition(fen, str(e)) from e


def replay(
    starting_fen: Optional[str], move_tokens: Sequence[str]
) -> List[BoardState]:
    """
    Replay moves from a starting position.

    Fails on the first illegal move; no partial sequence is returned.

    Args:
        starting_fen: Starting position (None = standard start)
        move_tokens: Moves in standard algebraic notation, in play order

    Returns:
        len(move_tokens) + 1 board states

    Raises:
        InvalidStartingPosition: If starting_fen is not a valid position
        InvalidMove: If a move is illegal, ambiguous or unparsable
    """
    board = create_board(starting_fen)
    states = [BoardState(fen=board.fen())]

    for ply, san in enumerate(move_tokens, start=1):
        try:
            move = board.parse_san(san)
        except ValueError as e:
            raise InvalidMove(ply, san) from e

        # Null moves ("--") are not legal moves
        if not move:
            raise InvalidMove(ply, san)

        board.push(move)
        states.append(
            BoardState(fen=board.fen(), move=Move(san=san, uci=coordinate_move(move)))
        )

    return states
