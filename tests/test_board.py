"""Tests for the Board grid, square helpers and Move parsing."""

import chess
import pytest

from explainer.analysis.board import Board, Move, parse_square, square_name

START = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"


# ---------------------------------------------------------------------------
# Squares
# ---------------------------------------------------------------------------


def test_square_names_follow_fen_rows():
    """Row 0 is rank 8, so e1 sits on the last row."""
    assert parse_square("e1") == (7, 4)
    assert parse_square("a8") == (0, 0)
    assert square_name((7, 4)) == "e1"
    assert square_name((0, 7)) == "h8"


def test_parse_square_rejects_garbage():
    with pytest.raises(ValueError):
        parse_square("z9")


# ---------------------------------------------------------------------------
# Board construction
# ---------------------------------------------------------------------------


class TestBoard:
    def test_start_position(self):
        board = Board(START)
        assert board.piece_at(parse_square("e1")) == chess.Piece(chess.KING, chess.WHITE)
        assert board.piece_at(parse_square("d8")) == chess.Piece(chess.QUEEN, chess.BLACK)
        assert board.piece_at(parse_square("e4")) is None
        assert len(list(board.pieces())) == 32
        assert len(list(board.pieces(chess.BLACK))) == 16

    def test_board_fen_round_trip(self):
        fen = "4k3/8/q7/1N6/8/8/8/4K3"
        assert Board(fen).board_fen() == fen

    def test_invalid_fen_raises(self):
        with pytest.raises(ValueError):
            Board("not a fen")

    def test_off_board_access_raises(self):
        board = Board(START)
        with pytest.raises(ValueError):
            board.piece_at((8, 0))
        with pytest.raises(ValueError):
            board.set_piece_at((0, -1), None)

    def test_king_lookup(self):
        board = Board("4k3/8/8/8/8/8/8/4K3")
        assert board.king(chess.WHITE) == parse_square("e1")
        assert board.king(chess.BLACK) == parse_square("e8")
        assert Board("8/8/8/8/8/8/8/8").king(chess.WHITE) is None

    def test_copy_is_independent(self):
        board = Board(START)
        clone = board.copy()
        assert clone == board
        clone.remove_piece_at(parse_square("e2"))
        assert clone != board
        assert board.piece_at(parse_square("e2")) is not None

    def test_clear(self):
        board = Board(START)
        board.clear()
        assert board == Board()

    def test_to_chess_board(self):
        board = Board("4k3/8/8/8/8/8/8/R3K3")
        cb = board.to_chess_board(chess.BLACK)
        assert cb.turn == chess.BLACK
        assert cb.piece_at(chess.A1) == chess.Piece(chess.ROOK, chess.WHITE)
        assert cb.board_fen() == board.board_fen()


# ---------------------------------------------------------------------------
# Moves
# ---------------------------------------------------------------------------


class TestMove:
    def test_from_code(self):
        move = Move.from_code("e2e4")
        assert move.from_sq == parse_square("e2")
        assert move.to_sq == parse_square("e4")
        assert move.promotion is None
        assert move.code() == "e2e4"

    def test_promotion_code(self):
        move = Move.from_code("e7e8q")
        assert move.promotion == chess.QUEEN
        assert str(move) == "e7e8q"

    def test_code_is_case_and_space_tolerant(self):
        assert Move.from_code(" E2E4 ") == Move.from_code("e2e4")

    @pytest.mark.parametrize("code", ["", "e2", "e2e", "z9z9", "0000", "e2e4k", "e2-e4", "Nf3"])
    def test_malformed_codes_raise(self, code):
        with pytest.raises(ValueError):
            Move.from_code(code)

    def test_non_string_raises(self):
        with pytest.raises(ValueError):
            Move.from_code(None)


class TestPush:
    def test_capture_returns_victim(self):
        board = Board("4k3/8/8/3b4/8/8/8/3RK3")
        captured = board.push(Move.from_code("d1d5"))
        assert captured == chess.Piece(chess.BISHOP, chess.BLACK)
        assert board.piece_at(parse_square("d5")) == chess.Piece(chess.ROOK, chess.WHITE)
        assert board.piece_at(parse_square("d1")) is None

    def test_apply_move_leaves_original_alone(self):
        board = Board(START)
        after = board.apply_move(Move.from_code("e2e4"))
        assert board.piece_at(parse_square("e2")) is not None
        assert after.piece_at(parse_square("e4")) == chess.Piece(chess.PAWN, chess.WHITE)

    def test_castling_moves_rook(self):
        board = Board("r3k2r/8/8/8/8/8/8/R3K2R")
        board.push(Move.from_code("e1g1"))
        assert board.piece_at(parse_square("g1")).piece_type == chess.KING
        assert board.piece_at(parse_square("f1")).piece_type == chess.ROOK
        assert board.piece_at(parse_square("h1")) is None

        board.push(Move.from_code("e8c8"))
        assert board.piece_at(parse_square("d8")).piece_type == chess.ROOK
        assert board.piece_at(parse_square("a8")) is None

    def test_en_passant_removes_pawn(self):
        board = Board("4k3/8/8/3pP3/8/8/8/4K3")
        captured = board.push(Move.from_code("e5d6"))
        assert captured == chess.Piece(chess.PAWN, chess.BLACK)
        assert board.piece_at(parse_square("d5")) is None
        assert board.piece_at(parse_square("d6")) == chess.Piece(chess.PAWN, chess.WHITE)

    def test_promotion(self):
        board = Board("4k3/P7/8/8/8/8/8/4K3")
        board.push(Move.from_code("a7a8n"))
        assert board.piece_at(parse_square("a8")) == chess.Piece(chess.KNIGHT, chess.WHITE)

    def test_push_from_empty_square_raises(self):
        board = Board("4k3/8/8/8/8/8/8/4K3")
        with pytest.raises(ValueError):
            board.push(Move.from_code("a1a2"))
