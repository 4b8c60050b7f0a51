"""Defensive reasons: what a move newly protects.

The counterpart to the tactic battery. Compares the position before and
after the move from the mover's side: pieces that gained defenders, a piece
that escaped an attack, an interposition on an attacking line, and king
safety (leaving check, parrying a mate-in-one, fewer attacked king squares).
"""

import logging

import chess

from explainer.analysis.attacks import (
    RAY_DIRS,
    attackers,
    can_attack,
    count_attackers,
    count_defenders,
    in_check,
    is_attacked_by,
    king_zone,
    squares_between,
)
from explainer.analysis.board import Board, Move, square_name
from explainer.analysis.constants import piece_name, piece_value
from explainer.analysis.pool import BoardPool
from explainer.analysis.tactics.types import Category, Finding

logger = logging.getLogger(__name__)

__all__ = ["analyze_defenses", "has_mate_in_one"]

MAX_DEFENSES = 2


def has_mate_in_one(board: Board, color: chess.Color) -> bool:
    """Does color, to move on board, have an immediate checkmate?"""
    cb = board.to_chess_board(color)
    for move in list(cb.legal_moves):
        cb.push(move)
        mate = cb.is_checkmate()
        cb.pop()
        if mate:
            return True
    return False


def _newly_defended(before: Board, after: Board, move: Move, color: chess.Color) -> list[Finding]:
    found = []
    enemy = not color
    for sq, piece in after.pieces(color):
        if sq == move.to_sq or piece.piece_type == chess.KING:
            continue
        if before.piece_at(sq) != piece or not is_attacked_by(before, sq, enemy):
            continue
        defenders_before = count_defenders(before, sq, color)
        attackers_before = count_attackers(before, sq, enemy)
        defenders_after = count_defenders(after, sq, color)
        attackers_after = count_attackers(after, sq, enemy)

        was_vulnerable = defenders_before == 0 or attackers_before > defenders_before
        now_safe = defenders_after > 0 and defenders_after >= attackers_after
        if was_vulnerable and now_safe and defenders_after > defenders_before:
            value = piece_value(piece)
            found.append(Finding(
                f"defends {piece_name(piece.piece_type)} on {square_name(sq)}",
                min(value, 5),
                Category.DEFENSE,
            ))
    return found


def _escape(before: Board, after: Board, move: Move, piece: chess.Piece, color: chess.Color) -> list[Finding]:
    if piece.piece_type == chess.KING:
        return []
    value = piece_value(piece)
    enemy = not color
    if value < 3 or not is_attacked_by(before, move.from_sq, enemy):
        return []

    hitters = attackers(before, move.from_sq, enemy)
    cheaper_attacker = min(piece_value(before.piece_at(s)) for s in hitters) < value
    outnumbered = len(hitters) > count_defenders(before, move.from_sq, color)
    if not (cheaper_attacker or outnumbered):
        return []
    if is_attacked_by(after, move.to_sq, enemy):
        return []
    return [Finding(f"saves {piece_name(piece.piece_type)}", min(value - 1, 4), Category.DEFENSE)]


def _blocks(before: Board, after: Board, move: Move, color: chess.Color) -> list[Finding]:
    found = []
    enemy = not color
    for sq, piece in before.pieces(color):
        if sq == move.from_sq:
            continue
        value = piece_value(piece)
        if value < 3:
            continue
        through = False
        for slider_sq, slider in before.pieces(enemy):
            if slider.piece_type not in RAY_DIRS:
                continue
            if move.to_sq in squares_between(slider_sq, sq) and can_attack(before, slider_sq, slider, sq):
                through = True
                break
        if through and not is_attacked_by(after, sq, enemy):
            found.append(Finding(
                f"blocks attack on {piece_name(piece.piece_type)}",
                min(value // 2 + 1, 4),
                Category.DEFENSE,
            ))
    return found


def _king_safety(before: Board, after: Board, color: chess.Color) -> list[Finding]:
    enemy = not color
    if after.king(color) is None:
        return []
    if in_check(before, color) and not in_check(after, color):
        return [Finding("gets out of check", 5, Category.DEFENSE)]
    if has_mate_in_one(before, enemy) and not has_mate_in_one(after, enemy):
        return [Finding("stops mate threat", 5, Category.DEFENSE)]

    attacked_before = sum(1 for s in king_zone(before, color) if is_attacked_by(before, s, enemy))
    attacked_after = sum(1 for s in king_zone(after, color) if is_attacked_by(after, s, enemy))
    if attacked_before >= 2 and attacked_after < attacked_before:
        return [Finding("improves king safety", 3, Category.DEFENSE)]
    return []


def analyze_defenses(
    board: Board,
    move: Move,
    color: chess.Color | None = None,
    *,
    pool: BoardPool | None = None,
) -> list[Finding]:
    """Up to two defensive findings for move, most important first.

    color defaults to the color of the moving piece. Bad input (no piece on
    the source square, inconsistent boards) yields an empty list.
    """
    pool = pool if pool is not None else BoardPool()
    try:
        piece = board.piece_at(move.from_sq)
        if piece is None:
            return []
        color = piece.color if color is None else color
        with pool.rent(board) as after:
            after.push(move)
            found = (
                _newly_defended(board, after, move, color)
                + _escape(board, after, move, piece, color)
                + _blocks(board, after, move, color)
                + _king_safety(board, after, color)
            )
    except (ValueError, LookupError, AttributeError) as e:
        logger.warning("Defense analysis failed for %s: %s", move, e)
        return []

    found.sort(key=lambda f: f.importance, reverse=True)
    result: list[Finding] = []
    for finding in found:
        if finding.text in {f.text for f in result}:
            continue
        result.append(finding)
        if len(result) == MAX_DEFENSES:
            break
    return result
