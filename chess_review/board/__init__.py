"""
Board Module

Replays a recorded game on a python-chess board to produce the per-ply
positions that get evaluated.

Data Flow:
    SAN move tokens → replay() → [BoardState, ...] (one per ply, plus start)
"""

from chess_review.board.replay import coordinate_move, create_board, replay

__all__ = ['coordinate_move', 'create_board', 'replay']
