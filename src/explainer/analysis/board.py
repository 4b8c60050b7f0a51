"""Board grid, squares and moves for the analysis layer.

The grid is indexed (row, col) with row 0 = rank 8, matching FEN order.
python-chess parses FEN placement and UCI move codes; the grid holds the
position that the attack primitives and detectors reason about. No
legality is assumed: any arrangement of pieces is a valid Board.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass

import chess

Square = tuple[int, int]

_MOVE_CODE = re.compile(r"^[a-h][1-8][a-h][1-8][qrbn]?$")


def on_board(sq: Square) -> bool:
    row, col = sq
    return 0 <= row < 8 and 0 <= col < 8


def to_chess_square(sq: Square) -> chess.Square:
    row, col = sq
    return chess.square(col, 7 - row)


def from_chess_square(square: chess.Square) -> Square:
    return 7 - chess.square_rank(square), chess.square_file(square)


def square_name(sq: Square) -> str:
    """(row, col) -> algebraic name: (7, 4) -> 'e1'."""
    return chess.square_name(to_chess_square(sq))


def parse_square(name: str) -> Square:
    """Algebraic name -> (row, col). Raises ValueError on bad names."""
    return from_chess_square(chess.parse_square(name))


@dataclass(frozen=True)
class Move:
    from_sq: Square
    to_sq: Square
    promotion: chess.PieceType | None = None

    @classmethod
    def from_code(cls, code: str) -> Move:
        """Parse a 4-5 character move code ('e2e4', 'e7e8q').

        Raises ValueError for anything outside that pattern, including
        null moves and drops that python-chess would otherwise accept.
        """
        text = code.strip().lower() if isinstance(code, str) else ""
        if not _MOVE_CODE.match(text):
            raise ValueError(f"malformed move code: {code!r}")
        move = chess.Move.from_uci(text)
        return cls(
            from_chess_square(move.from_square),
            from_chess_square(move.to_square),
            move.promotion,
        )

    def code(self) -> str:
        suffix = chess.piece_symbol(self.promotion) if self.promotion else ""
        return f"{square_name(self.from_sq)}{square_name(self.to_sq)}{suffix}"

    def __str__(self) -> str:
        return self.code()


class Board:
    """Fixed 8x8 grid of python-chess pieces (None = empty)."""

    __slots__ = ("_grid",)

    def __init__(self, fen: str | None = None):
        self._grid: list[list[chess.Piece | None]] = [[None] * 8 for _ in range(8)]
        if fen is not None:
            self.set_fen(fen)

    def set_fen(self, fen: str) -> None:
        """Load the placement field of a FEN; side to move, castling etc. are ignored."""
        placement = fen.strip().split(" ")[0] if isinstance(fen, str) else ""
        base = chess.BaseBoard(placement)
        self.clear()
        for square, piece in base.piece_map().items():
            self.set_piece_at(from_chess_square(square), piece)

    def board_fen(self) -> str:
        return self.to_chess_board(chess.WHITE).board_fen()

    # -- cell access --------------------------------------------------------

    def piece_at(self, sq: Square) -> chess.Piece | None:
        if not on_board(sq):
            raise ValueError(f"square off the board: {sq!r}")
        return self._grid[sq[0]][sq[1]]

    def set_piece_at(self, sq: Square, piece: chess.Piece | None) -> None:
        if not on_board(sq):
            raise ValueError(f"square off the board: {sq!r}")
        self._grid[sq[0]][sq[1]] = piece

    def remove_piece_at(self, sq: Square) -> chess.Piece | None:
        piece = self.piece_at(sq)
        self._grid[sq[0]][sq[1]] = None
        return piece

    def pieces(self, color: chess.Color | None = None) -> Iterator[tuple[Square, chess.Piece]]:
        """Occupied squares in FEN order, optionally filtered by color."""
        for row in range(8):
            for col in range(8):
                piece = self._grid[row][col]
                if piece is not None and (color is None or piece.color == color):
                    yield (row, col), piece

    def king(self, color: chess.Color) -> Square | None:
        for sq, piece in self.pieces(color):
            if piece.piece_type == chess.KING:
                return sq
        return None

    # -- whole-board operations --------------------------------------------

    def clear(self) -> None:
        for row in self._grid:
            row[:] = [None] * 8

    def copy(self) -> Board:
        board = Board()
        board.copy_from(self)
        return board

    def copy_from(self, other: Board) -> None:
        for row in range(8):
            self._grid[row][:] = other._grid[row]

    def push(self, move: Move) -> chess.Piece | None:
        """Play move in place; returns the captured piece, if any.

        Handles the castling rook hop, promotion, and en passant removal.
        Nothing else about legality is checked.
        """
        piece = self.piece_at(move.from_sq)
        if piece is None:
            raise ValueError(f"no piece on {square_name(move.from_sq)}")
        (fr, fc), (tr, tc) = move.from_sq, move.to_sq
        captured = self.piece_at(move.to_sq)

        if piece.piece_type == chess.KING and fr == tr and abs(tc - fc) == 2:
            rook_from = (fr, 7 if tc > fc else 0)
            rook = self.piece_at(rook_from)
            if rook is not None and rook.piece_type == chess.ROOK and rook.color == piece.color:
                self.set_piece_at((fr, (fc + tc) // 2), rook)
                self.set_piece_at(rook_from, None)
        elif piece.piece_type == chess.PAWN and fc != tc and captured is None:
            beside = self.piece_at((fr, tc))
            if beside is not None and beside.piece_type == chess.PAWN and beside.color != piece.color:
                captured = self.remove_piece_at((fr, tc))

        self.set_piece_at(move.from_sq, None)
        if move.promotion:
            piece = chess.Piece(move.promotion, piece.color)
        self.set_piece_at(move.to_sq, piece)
        return captured

    def apply_move(self, move: Move) -> Board:
        """Copy of this board with move played."""
        board = self.copy()
        board.push(move)
        return board

    def to_chess_board(self, turn: chess.Color) -> chess.Board:
        """python-chess Board with this placement, no castling or en passant rights."""
        board = chess.Board(None)
        board.set_piece_map({to_chess_square(sq): piece for sq, piece in self.pieces()})
        board.turn = turn
        return board

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self._grid == other._grid

    def __repr__(self) -> str:
        return f"Board({self.board_fen()!r})"
