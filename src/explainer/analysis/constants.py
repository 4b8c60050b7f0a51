"""Piece values, names and square sets shared across analysis submodules."""

import chess

__all__ = [
    "KING_VALUE",
    "EXTENDED_CENTER",
    "MINOR_PIECES",
    "get_piece_value",
    "piece_value",
    "piece_name",
]

# Finite stand-in for the king where a number is needed (ordering, SEE)
KING_VALUE = 100

MINOR_PIECES = (chess.KNIGHT, chess.BISHOP)

# (row, col) with row 0 = rank 8: c3-f6
EXTENDED_CENTER = [(r, c) for r in range(2, 6) for c in range(2, 6)]


def get_piece_value(piece_type: chess.PieceType, *, king=None) -> int:
    """Material value in pawns. The caller decides what a king is worth.

    king=None (default) returns None for the king so arithmetic on it fails
    loudly if the caller forgot to decide how the king should count.
    """
    return {
        chess.PAWN: 1, chess.KNIGHT: 3, chess.BISHOP: 3,
        chess.ROOK: 5, chess.QUEEN: 9, chess.KING: king,
    }[piece_type]


def piece_name(piece_type: chess.PieceType) -> str:
    """Lowercase English name: chess.ROOK -> 'rook'."""
    return chess.piece_name(piece_type)


def piece_value(piece: chess.Piece) -> int:
    """Material value of a piece, counting the king as KING_VALUE."""
    return get_piece_value(piece.piece_type, king=KING_VALUE)
