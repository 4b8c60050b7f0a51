"""Ray-based tactical detection: double check, discovered attacks, pins, skewers, x-rays."""

import chess

from explainer.analysis.attacks import (
    RAY_DIRS,
    can_attack,
    checkers,
    is_attacked_by,
    squares_between,
    walk_ray,
)
from explainer.analysis.board import Square
from explainer.analysis.constants import piece_name, piece_value
from explainer.analysis.see import evaluate_exchange, legal_captures
from explainer.analysis.tactics.types import Category, Finding, MoveContext, detector
from explainer.analysis.tactics.valuation import is_safe_from_capture, is_winnable, mover_targets


def _enemy_pairs(ctx: MoveContext):
    """(front_sq, behind_sq) for each ray of the moved slider hitting two enemy pieces."""
    moved = ctx.moved
    for direction in RAY_DIRS.get(moved.piece_type, ()):
        first, second = walk_ray(ctx.after, ctx.dest, direction)
        if first is None or second is None:
            continue
        front = ctx.after.piece_at(first)
        behind = ctx.after.piece_at(second)
        if front.color == ctx.enemy and behind.color == ctx.enemy:
            yield first, second


def _can_break_line(ctx: MoveContext, front_sq: Square) -> bool:
    """Can the front piece capture the slider without losing material?"""
    front = ctx.after.piece_at(front_sq)
    if not can_attack(ctx.after, front_sq, front, ctx.dest):
        return False
    return evaluate_exchange(ctx.after, ctx.dest, front, front.color, front_sq, pool=ctx.pool) >= 0


def _king_resolves_by_capture(ctx: MoveContext) -> bool:
    """Can the checked side answer by taking the slider without losing material?"""
    for _, sq in legal_captures(ctx.after, ctx.dest, ctx.enemy):
        piece = ctx.after.piece_at(sq)
        if evaluate_exchange(ctx.after, ctx.dest, piece, ctx.enemy, sq, pool=ctx.pool) >= 0:
            return True
    return False


@detector(importance=9, category=Category.CHECK, checks=True)
def detect_double_check(ctx: MoveContext) -> str | Finding | None:
    checking = checkers(ctx.after, ctx.color)
    if len(checking) >= 2 and ctx.dest in checking:
        return "double check"
    return None


@detector(importance=8, category=Category.TACTIC)
def detect_discovered_attack(ctx: MoveContext) -> str | Finding | None:
    """A friendly slider's line, blocked by the moved piece, now reaches an enemy target."""
    after, board = ctx.after, ctx.board
    best = None
    for slider_sq, slider in after.pieces(ctx.color):
        if slider_sq == ctx.dest or slider.piece_type not in RAY_DIRS:
            continue
        for target_sq, target in after.pieces(ctx.enemy):
            if ctx.source not in squares_between(slider_sq, target_sq):
                continue
            if not can_attack(after, slider_sq, slider, target_sq):
                continue
            if can_attack(board, slider_sq, slider, target_sq):
                continue

            if target.piece_type == chess.KING:
                if ctx.dest in checkers(after, ctx.color):
                    return None  # double check covers it
                for sq in mover_targets(ctx, min_value=5):
                    if after.piece_at(sq).piece_type != chess.KING and is_winnable(ctx, sq, ctx.dest):
                        name = piece_name(after.piece_at(sq).piece_type)
                        return Finding(f"discovered check, wins {name}", 8, Category.TACTIC, checks=True)
                return Finding("discovered check", 8, Category.TACTIC, checks=True)

            if piece_value(target) >= 5 and is_winnable(ctx, target_sq, slider_sq):
                if best is None or piece_value(target) > piece_value(after.piece_at(best)):
                    best = target_sq
    if best is not None:
        return f"discovered attack on {piece_name(after.piece_at(best).piece_type)}"
    return None


@detector(importance=7, category=Category.TACTIC)
def detect_pin(ctx: MoveContext) -> str | Finding | None:
    """The moved slider pins an enemy piece to its king or to a bigger piece."""
    if not is_safe_from_capture(ctx, ctx.dest):
        return None
    min_gain = ctx.settings.relative_pin_min_gain
    for front_sq, behind_sq in _enemy_pairs(ctx):
        front = ctx.after.piece_at(front_sq)
        behind = ctx.after.piece_at(behind_sq)
        if front.piece_type == chess.KING:
            continue
        if _can_break_line(ctx, front_sq):
            continue
        if behind.piece_type == chess.KING:
            return f"pins {piece_name(front.piece_type)} to king (absolute)"
        if piece_value(behind) <= piece_value(front):
            continue

        # Once the pinned piece steps aside, is the piece behind defended?
        with ctx.pool.rent(ctx.after) as sim:
            sim.remove_piece_at(front_sq)
            defended = is_attacked_by(sim, behind_sq, ctx.enemy)
        gain = piece_value(behind) - (piece_value(ctx.moved) if defended else 0)
        if not defended or gain >= min_gain:
            return f"pins {piece_name(front.piece_type)} to {piece_name(behind.piece_type)}"
    return None


@detector(importance=7, category=Category.TACTIC)
def detect_skewer(ctx: MoveContext) -> str | Finding | None:
    """The moved slider hits a big piece that must move and expose one behind it."""
    if not is_safe_from_capture(ctx, ctx.dest):
        return None
    for front_sq, behind_sq in _enemy_pairs(ctx):
        front = ctx.after.piece_at(front_sq)
        behind = ctx.after.piece_at(behind_sq)
        if behind.piece_type == chess.KING:
            continue
        if front.piece_type == chess.KING:
            if _king_resolves_by_capture(ctx):
                continue
        else:
            if piece_value(front) <= piece_value(behind):
                continue
            # A defended front piece worth less than the attacker need not move
            if piece_value(ctx.moved) > piece_value(front) and is_attacked_by(ctx.after, front_sq, ctx.enemy):
                continue
        if _can_break_line(ctx, front_sq):
            continue
        with ctx.pool.rent(ctx.after) as sim:
            sim.remove_piece_at(front_sq)
            wins = evaluate_exchange(sim, behind_sq, ctx.moved, ctx.color, ctx.dest, pool=ctx.pool) > 0
        if wins:
            text = f"skewers {piece_name(front.piece_type)}, winning {piece_name(behind.piece_type)}"
            return Finding(text, 7, Category.TACTIC, checks=front.piece_type == chess.KING)
    return None


@detector(importance=4, category=Category.TACTIC)
def detect_xray(ctx: MoveContext) -> str | Finding | None:
    """The slider wins the front piece and keeps hitting a valuable piece behind it."""
    if not is_safe_from_capture(ctx, ctx.dest):
        return None
    for front_sq, behind_sq in _enemy_pairs(ctx):
        front = ctx.after.piece_at(front_sq)
        behind = ctx.after.piece_at(behind_sq)
        if chess.KING in (front.piece_type, behind.piece_type):
            continue
        if piece_value(behind) < 3 or piece_value(front) < piece_value(behind):
            continue
        if is_winnable(ctx, front_sq, ctx.dest):
            return f"x-ray attack on {piece_name(behind.piece_type)}"
    return None
