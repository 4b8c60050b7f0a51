"""Is a threatened gain real? SEE-backed judgements shared by the detectors.

A threat counts when the exchange it starts nets material: undefended
targets always do, defended targets only when the trade is favorable.
"""

import chess

from explainer.analysis.attacks import can_attack
from explainer.analysis.board import Board, Square
from explainer.analysis.constants import piece_value
from explainer.analysis.see import capture_gain, evaluate_exchange
from explainer.analysis.tactics.types import MoveContext


def is_winnable(ctx: MoveContext, target: Square, attacker_sq: Square, board: Board | None = None) -> bool:
    """Would the piece on attacker_sq come out ahead by capturing on target?"""
    board = board if board is not None else ctx.after
    attacker = board.piece_at(attacker_sq)
    victim = board.piece_at(target)
    if attacker is None or victim is None or victim.piece_type == chess.KING:
        return False
    return evaluate_exchange(board, target, attacker, attacker.color, attacker_sq, pool=ctx.pool) > 0


def is_safe_from_capture(ctx: MoveContext, square: Square, board: Board | None = None) -> bool:
    """Can the opponent of the piece on square not profitably take it?"""
    board = board if board is not None else ctx.after
    piece = board.piece_at(square)
    if piece is None:
        return True
    return capture_gain(board, square, not piece.color, pool=ctx.pool) <= 0


def mover_targets(ctx: MoveContext, min_value: int = 1) -> list[Square]:
    """Enemy pieces the moved piece attacks on the post-move board.

    Kings are included regardless of min_value; order is most valuable first.
    """
    moved = ctx.moved
    targets = []
    for sq, piece in ctx.after.pieces(ctx.enemy):
        if piece.piece_type != chess.KING and piece_value(piece) < min_value:
            continue
        if can_attack(ctx.after, ctx.dest, moved, sq):
            targets.append(sq)
    targets.sort(key=lambda s: piece_value(ctx.after.piece_at(s)), reverse=True)
    return targets


def new_real_threats(ctx: MoveContext, min_value: int = 3) -> list[Square]:
    """Enemy non-king pieces the mover can now win that it could not win before."""
    threats = []
    for sq, piece in ctx.after.pieces(ctx.enemy):
        if piece.piece_type == chess.KING or piece_value(piece) < min_value:
            continue
        if capture_gain(ctx.after, sq, ctx.color, pool=ctx.pool) <= 0:
            continue
        if ctx.board.piece_at(sq) == piece and capture_gain(ctx.board, sq, ctx.color, pool=ctx.pool) > 0:
            continue
        threats.append(sq)
    threats.sort(key=lambda s: piece_value(ctx.after.piece_at(s)), reverse=True)
    return threats
