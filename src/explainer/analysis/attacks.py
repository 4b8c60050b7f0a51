"""Board and attack primitives.

Pure queries over a Board: which squares a piece reaches, who attacks or
defends a square, and the cheapest piece a side can bring to it. Every
detector is composed from these functions; nothing above this module walks
rays on its own.

Public functions reject off-board squares with ValueError. Internal helpers
(the walkers) only ever see squares that already passed that check.
"""

import chess

from explainer.analysis.board import Board, Square, on_board
from explainer.analysis.constants import piece_value

__all__ = [
    "can_attack",
    "is_attacked_by",
    "attackers",
    "count_attackers",
    "count_defenders",
    "lowest_attacker_value",
    "lowest_defender_value",
    "walk_ray",
    "line_direction",
    "squares_between",
    "is_path_clear",
    "checkers",
    "gives_check",
    "in_check",
    "flight_squares",
    "king_zone",
    "RAY_DIRS",
]

_ORTHOGONAL = [(0, 1), (0, -1), (1, 0), (-1, 0)]
_DIAGONAL = [(1, 1), (1, -1), (-1, 1), (-1, -1)]
_KING_OFFSETS = _ORTHOGONAL + _DIAGONAL

RAY_DIRS: dict[chess.PieceType, list[tuple[int, int]]] = {
    chess.ROOK: _ORTHOGONAL,
    chess.BISHOP: _DIAGONAL,
    chess.QUEEN: _ORTHOGONAL + _DIAGONAL,
}


def _sign(x: int) -> int:
    return (x > 0) - (x < 0)


def _require(*squares) -> None:
    for sq in squares:
        if not (isinstance(sq, tuple) and len(sq) == 2 and on_board(sq)):
            raise ValueError(f"square off the board: {sq!r}")


# ---------------------------------------------------------------------------
# Lines and rays
# ---------------------------------------------------------------------------


def line_direction(a: Square, b: Square) -> tuple[int, int] | None:
    """Unit step from a toward b when they share a rank, file or diagonal."""
    dr, dc = b[0] - a[0], b[1] - a[1]
    if dr == 0 and dc == 0:
        return None
    if dr != 0 and dc != 0 and abs(dr) != abs(dc):
        return None
    return _sign(dr), _sign(dc)


def squares_between(a: Square, b: Square) -> list[Square]:
    """Squares strictly between a and b on a shared line (empty if not aligned)."""
    step = line_direction(a, b)
    if step is None:
        return []
    result = []
    row, col = a[0] + step[0], a[1] + step[1]
    while (row, col) != b:
        result.append((row, col))
        row, col = row + step[0], col + step[1]
    return result


def is_path_clear(board: Board, a: Square, b: Square) -> bool:
    return all(board.piece_at(sq) is None for sq in squares_between(a, b))


def walk_ray(
    board: Board,
    start: Square,
    direction: tuple[int, int],
) -> tuple[Square | None, Square | None]:
    """Walk a ray from start, return (first_hit, second_hit) or None."""
    dr, dc = direction
    row, col = start[0] + dr, start[1] + dc
    first = None
    while 0 <= row < 8 and 0 <= col < 8:
        if board.piece_at((row, col)) is not None:
            if first is None:
                first = (row, col)
            else:
                return first, (row, col)
        row += dr
        col += dc
    return first, None


# ---------------------------------------------------------------------------
# Movement rules, one entry per piece type
# ---------------------------------------------------------------------------


def _pawn_reach(board: Board, from_sq: Square, piece: chess.Piece, to_sq: Square) -> bool:
    forward = -1 if piece.color == chess.WHITE else 1
    return to_sq[0] - from_sq[0] == forward and abs(to_sq[1] - from_sq[1]) == 1


def _knight_reach(board: Board, from_sq: Square, piece: chess.Piece, to_sq: Square) -> bool:
    return {abs(to_sq[0] - from_sq[0]), abs(to_sq[1] - from_sq[1])} == {1, 2}


def _king_reach(board: Board, from_sq: Square, piece: chess.Piece, to_sq: Square) -> bool:
    return max(abs(to_sq[0] - from_sq[0]), abs(to_sq[1] - from_sq[1])) == 1


def _slider_reach(board: Board, from_sq: Square, piece: chess.Piece, to_sq: Square) -> bool:
    step = line_direction(from_sq, to_sq)
    return step in RAY_DIRS[piece.piece_type] and is_path_clear(board, from_sq, to_sq)


_ATTACK_RULES = {
    chess.PAWN: _pawn_reach,
    chess.KNIGHT: _knight_reach,
    chess.BISHOP: _slider_reach,
    chess.ROOK: _slider_reach,
    chess.QUEEN: _slider_reach,
    chess.KING: _king_reach,
}


def _reaches(board: Board, from_sq: Square, piece: chess.Piece, to_sq: Square) -> bool:
    if from_sq == to_sq:
        return False
    return _ATTACK_RULES[piece.piece_type](board, from_sq, piece, to_sq)


def can_attack(board: Board, from_sq: Square, piece: chess.Piece, to_sq: Square) -> bool:
    """Could piece standing on from_sq capture on to_sq?

    Ignores side to move and check legality. The piece does not have to
    actually stand on from_sq, which lets callers ask hypothetical questions.
    Pawns attack diagonally forward only.
    """
    _require(from_sq, to_sq)
    return _reaches(board, from_sq, piece, to_sq)


# ---------------------------------------------------------------------------
# Attackers and defenders
# ---------------------------------------------------------------------------


def attackers(board: Board, sq: Square, color: chess.Color) -> list[Square]:
    """Squares of color's pieces that attack sq, in FEN order."""
    _require(sq)
    return [
        from_sq for from_sq, piece in board.pieces(color)
        if _reaches(board, from_sq, piece, sq)
    ]


def is_attacked_by(board: Board, sq: Square, by_color: chess.Color) -> bool:
    _require(sq)
    return any(_reaches(board, from_sq, piece, sq) for from_sq, piece in board.pieces(by_color))


def count_attackers(board: Board, sq: Square, color: chess.Color) -> int:
    return len(attackers(board, sq, color))


def count_defenders(board: Board, sq: Square, color: chess.Color) -> int:
    """Pieces of color guarding sq (the piece standing on sq never guards itself)."""
    return len(attackers(board, sq, color))


def _lowest_value(board: Board, squares: list[Square]) -> int:
    values = [piece_value(board.piece_at(s)) for s in squares]
    return min(values) if values else 0


def lowest_attacker_value(board: Board, sq: Square, color: chess.Color) -> int:
    """Value of color's cheapest piece attacking sq, 0 if none."""
    return _lowest_value(board, attackers(board, sq, color))


def lowest_defender_value(board: Board, sq: Square, color: chess.Color) -> int:
    """Value of color's cheapest piece guarding sq, 0 if none."""
    return _lowest_value(board, attackers(board, sq, color))


# ---------------------------------------------------------------------------
# King-related queries
# ---------------------------------------------------------------------------


def checkers(board: Board, color: chess.Color) -> list[Square]:
    """color's pieces currently attacking the enemy king."""
    king = board.king(not color)
    if king is None:
        return []
    return attackers(board, king, color)


def gives_check(board: Board, color: chess.Color) -> bool:
    """Is color checking the enemy king on this board?"""
    return bool(checkers(board, color))


def in_check(board: Board, color: chess.Color) -> bool:
    king = board.king(color)
    return king is not None and is_attacked_by(board, king, not color)


def flight_squares(board: Board, sq: Square) -> list[Square]:
    """Squares the piece on sq could step to: empty or holding an enemy piece.

    Pawns get their single push plus diagonal captures; everything else
    uses its attack pattern.
    """
    _require(sq)
    piece = board.piece_at(sq)
    if piece is None:
        return []
    result = []
    if piece.piece_type == chess.PAWN:
        forward = -1 if piece.color == chess.WHITE else 1
        push = (sq[0] + forward, sq[1])
        if on_board(push) and board.piece_at(push) is None:
            result.append(push)
    for row in range(8):
        for col in range(8):
            target = (row, col)
            occupant = board.piece_at(target)
            if occupant is not None and occupant.color == piece.color:
                continue
            if piece.piece_type == chess.PAWN and occupant is None:
                continue
            if _reaches(board, sq, piece, target):
                result.append(target)
    return result


def king_zone(board: Board, color: chess.Color) -> list[Square]:
    """Squares adjacent to color's king (empty list if there is no king)."""
    king = board.king(color)
    if king is None:
        return []
    zone = []
    for dr, dc in _KING_OFFSETS:
        sq = (king[0] + dr, king[1] + dc)
        if on_board(sq):
            zone.append(sq)
    return zone
