"""Tests for board and attack primitives."""

import chess
import pytest

from explainer.analysis.attacks import (
    _ATTACK_RULES,
    attackers,
    can_attack,
    checkers,
    count_attackers,
    count_defenders,
    flight_squares,
    in_check,
    is_attacked_by,
    king_zone,
    lowest_attacker_value,
    lowest_defender_value,
    squares_between,
    walk_ray,
)
from explainer.analysis.board import Board, parse_square as sq

WHITE_PAWN = chess.Piece(chess.PAWN, chess.WHITE)
BLACK_PAWN = chess.Piece(chess.PAWN, chess.BLACK)
KNIGHT = chess.Piece(chess.KNIGHT, chess.WHITE)
ROOK = chess.Piece(chess.ROOK, chess.WHITE)
BISHOP = chess.Piece(chess.BISHOP, chess.WHITE)
QUEEN = chess.Piece(chess.QUEEN, chess.WHITE)
KING = chess.Piece(chess.KING, chess.WHITE)


def test_every_piece_type_has_a_movement_rule():
    assert set(_ATTACK_RULES) == set(chess.PIECE_TYPES)


# ---------------------------------------------------------------------------
# can_attack
# ---------------------------------------------------------------------------


class TestCanAttack:
    def test_pawns_attack_diagonally_forward_only(self):
        board = Board()
        assert can_attack(board, sq("e4"), WHITE_PAWN, sq("d5"))
        assert can_attack(board, sq("e4"), WHITE_PAWN, sq("f5"))
        assert not can_attack(board, sq("e4"), WHITE_PAWN, sq("e5"))
        assert not can_attack(board, sq("e4"), WHITE_PAWN, sq("d3"))
        assert can_attack(board, sq("e5"), BLACK_PAWN, sq("d4"))
        assert not can_attack(board, sq("e5"), BLACK_PAWN, sq("d6"))

    def test_knight_jumps(self):
        board = Board("8/8/8/8/3N4/2ppp3/8/8")
        assert can_attack(board, sq("d4"), KNIGHT, sq("e6"))
        assert can_attack(board, sq("d4"), KNIGHT, sq("b3"))
        assert not can_attack(board, sq("d4"), KNIGHT, sq("d5"))

    def test_sliders_are_blocked(self):
        board = Board("8/8/8/8/R2p3r/8/8/8")
        assert can_attack(board, sq("a4"), ROOK, sq("d4"))
        assert not can_attack(board, sq("a4"), ROOK, sq("h4"))
        assert not can_attack(board, sq("a4"), ROOK, sq("b5"))

    def test_bishop_and_queen_lines(self):
        board = Board()
        assert can_attack(board, sq("c1"), BISHOP, sq("h6"))
        assert not can_attack(board, sq("c1"), BISHOP, sq("c8"))
        assert can_attack(board, sq("d1"), QUEEN, sq("d8"))
        assert can_attack(board, sq("d1"), QUEEN, sq("h5"))
        assert not can_attack(board, sq("d1"), QUEEN, sq("e3"))

    def test_king_reach(self):
        board = Board()
        assert can_attack(board, sq("e1"), KING, sq("f2"))
        assert not can_attack(board, sq("e1"), KING, sq("e3"))

    def test_piece_never_attacks_own_square(self):
        board = Board()
        assert not can_attack(board, sq("d4"), QUEEN, sq("d4"))

    def test_off_board_squares_raise(self):
        board = Board()
        with pytest.raises(ValueError):
            can_attack(board, (8, 0), ROOK, (0, 0))
        with pytest.raises(ValueError):
            attackers(board, (-1, 3), chess.WHITE)
        with pytest.raises(ValueError):
            is_attacked_by(board, (0, 9), chess.BLACK)


# ---------------------------------------------------------------------------
# Attackers and defenders
# ---------------------------------------------------------------------------


class TestAttackers:
    # Black pawn d5 hit by Nc3, Rd1 and Pe4; guarded by Nf6 and Qd8
    FEN = "3qk3/8/5n2/3p4/4P3/2N5/8/3RK3"

    def test_attackers_and_counts(self):
        board = Board(self.FEN)
        assert set(attackers(board, sq("d5"), chess.WHITE)) == {sq("c3"), sq("d1"), sq("e4")}
        assert count_attackers(board, sq("d5"), chess.WHITE) == 3
        assert count_defenders(board, sq("d5"), chess.BLACK) == 2

    def test_lowest_values(self):
        board = Board(self.FEN)
        assert lowest_attacker_value(board, sq("d5"), chess.WHITE) == 1
        assert lowest_defender_value(board, sq("d5"), chess.BLACK) == 3

    def test_lowest_value_is_zero_without_pieces(self):
        board = Board(self.FEN)
        assert lowest_attacker_value(board, sq("a6"), chess.WHITE) == 0

    def test_attackers_in_fen_order(self):
        board = Board(self.FEN)
        assert attackers(board, sq("d5"), chess.WHITE) == [sq("e4"), sq("c3"), sq("d1")]


# ---------------------------------------------------------------------------
# Lines, rays and king queries
# ---------------------------------------------------------------------------


def test_squares_between():
    assert squares_between(sq("e1"), sq("e8")) == [sq(f"e{r}") for r in range(2, 8)]
    assert squares_between(sq("a1"), sq("c3")) == [sq("b2")]
    assert squares_between(sq("a1"), sq("b3")) == []


def test_walk_ray_returns_first_two_hits():
    board = Board("4r3/8/8/4k3/8/8/8/4R3")
    first, second = walk_ray(board, sq("e1"), (-1, 0))
    assert first == sq("e5")
    assert second == sq("e8")
    assert walk_ray(board, sq("e1"), (0, 1)) == (None, None)


def test_checkers_and_in_check():
    board = Board("4k3/8/8/8/8/8/8/4R1K1")
    assert checkers(board, chess.WHITE) == [sq("e1")]
    assert in_check(board, chess.BLACK)
    assert not in_check(board, chess.WHITE)


def test_flight_squares():
    board = Board("4k3/8/8/3p4/4P3/8/8/4K3")
    assert set(flight_squares(board, sq("e4"))) == {sq("e5"), sq("d5")}
    assert set(flight_squares(board, sq("e1"))) == {sq("d1"), sq("f1"), sq("d2"), sq("e2"), sq("f2")}


def test_king_zone_at_edge():
    board = Board("7k/8/8/8/8/8/8/K7")
    assert set(king_zone(board, chess.WHITE)) == {sq("a2"), sq("b2"), sq("b1")}
    assert king_zone(Board(), chess.WHITE) == []
