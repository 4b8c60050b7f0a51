"""Piece-centric tactical detection: threats, forks, defenders, trapped and hanging pieces, mates."""

import re

import chess

from explainer.analysis.attacks import (
    attackers,
    can_attack,
    checkers,
    count_defenders,
    flight_squares,
    gives_check,
    is_attacked_by,
    is_path_clear,
    king_zone,
)
from explainer.analysis.board import Board, Square, on_board, square_name
from explainer.analysis.constants import piece_name, piece_value
from explainer.analysis.see import capture_gain, evaluate_exchange, see_of_move
from explainer.analysis.tactics.types import Category, Finding, MoveContext, detector
from explainer.analysis.tactics.valuation import (
    is_safe_from_capture,
    is_winnable,
    mover_targets,
    new_real_threats,
)

_UCI_RE = re.compile(r"^[a-h][1-8]([a-h][1-8])[qrbn]?$")
_SAN_DEST_RE = re.compile(r"([a-h][1-8])(=?[QRBN])?$")


def _name_at(board: Board, sq: Square) -> str:
    return piece_name(board.piece_at(sq).piece_type)


def _is_checkmate(board: Board, color: chess.Color) -> bool:
    """Is color checkmated on board? Verified locally with python-chess."""
    if board.king(color) is None:
        return False
    return board.to_chess_board(color).is_checkmate()


def _has_safe_escape(ctx: MoveContext, sq: Square) -> bool:
    """Can the enemy piece on sq step somewhere it is not lost for nothing?

    A flight square counts when the mover's best capture there does not
    exceed whatever the piece picks up by going there.
    """
    piece = ctx.after.piece_at(sq)
    for flight in flight_squares(ctx.after, sq):
        with ctx.pool.rent(ctx.after) as sim:
            taken = sim.piece_at(flight)
            sim.set_piece_at(flight, sim.remove_piece_at(sq))
            loss = capture_gain(sim, flight, not piece.color, pool=ctx.pool)
        picked_up = piece_value(taken) if taken is not None else 0
        if loss <= picked_up:
            return True
    return False


# ---------------------------------------------------------------------------
# Threats and forks
# ---------------------------------------------------------------------------


@detector(importance=8, category=Category.THREAT)
def detect_threat_creation(ctx: MoveContext) -> str | Finding | None:
    """A cheaper piece newly attacks a more valuable one."""
    after = ctx.after
    if gives_check(after, ctx.color):
        return None
    valuable = [
        sq for sq in mover_targets(ctx, min_value=ctx.settings.fork_min_target_value)
        if after.piece_at(sq).piece_type != chess.KING
    ]
    if len(valuable) >= 2:
        return None
    if not is_safe_from_capture(ctx, ctx.dest):
        return None
    moved_value = piece_value(ctx.moved)
    for sq in mover_targets(ctx, min_value=moved_value + 1):
        target = after.piece_at(sq)
        if target.piece_type == chess.KING:
            continue
        if ctx.board.piece_at(sq) == target and is_attacked_by(ctx.board, sq, ctx.color):
            continue
        return f"creates threat on {piece_name(target.piece_type)}"
    return None


@detector(importance=8, category=Category.TACTIC)
def detect_fork(ctx: MoveContext) -> str | Finding | None:
    """The moved piece attacks two or more valuable enemy pieces at once."""
    after, moved = ctx.after, ctx.moved
    targets = mover_targets(ctx, min_value=ctx.settings.fork_min_target_value)
    if len(targets) < 2:
        return None
    types = {after.piece_at(sq).piece_type for sq in targets}
    has_king = chess.KING in types

    # The king must answer the check, so the queen falls regardless of defenders
    if has_king and chess.QUEEN in types and moved.piece_type == chess.KNIGHT:
        return Finding("royal fork (king and queen)", 9, Category.TACTIC, checks=True)

    if not is_safe_from_capture(ctx, ctx.dest):
        return None

    if has_king:
        if chess.QUEEN in types and chess.ROOK in types:
            return Finding("family fork (king, queen, and rook)", 9, Category.TACTIC, checks=True)
        if chess.QUEEN in types and piece_value(moved) < 9:
            return Finding("royal fork (king and queen)", 9, Category.TACTIC, checks=True)
        for sq in targets:
            if after.piece_at(sq).piece_type == chess.KING:
                continue
            if is_winnable(ctx, sq, ctx.dest):
                return Finding(f"forks king and {_name_at(after, sq)}", 8, Category.TACTIC, checks=True)
        return None

    if not any(is_winnable(ctx, sq, ctx.dest) for sq in targets):
        return None
    first, second = targets[0], targets[1]
    return f"forks {_name_at(after, first)} and {_name_at(after, second)}"


# ---------------------------------------------------------------------------
# Defenders: removal, overloading, deflection
# ---------------------------------------------------------------------------


@detector(importance=6, category=Category.TACTIC)
def detect_removal_of_defender(ctx: MoveContext) -> str | Finding | None:
    """The captured piece was the only guard of another valuable piece."""
    captured = ctx.captured
    if captured is None or captured.piece_type == chess.KING:
        return None
    if see_of_move(ctx.board, ctx.move, pool=ctx.pool) < 0:
        return None
    for sq, piece in ctx.after.pieces(ctx.enemy):
        if piece.piece_type == chess.KING or piece_value(piece) < 3:
            continue
        if ctx.board.piece_at(sq) != piece:
            continue
        if not can_attack(ctx.board, ctx.dest, captured, sq):
            continue
        if count_defenders(ctx.board, sq, ctx.enemy) != 1:
            continue
        if is_attacked_by(ctx.after, sq, ctx.enemy):
            continue
        if is_attacked_by(ctx.after, sq, ctx.color):
            return f"removes defender of {piece_name(piece.piece_type)}"
    return None


def _sole_charges(board: Board, defender_sq: Square, color: chess.Color) -> list[Square]:
    """Valuable pieces of color, under attack, whose only guard is defender_sq."""
    defender = board.piece_at(defender_sq)
    charges = []
    for sq, piece in board.pieces(color):
        if sq == defender_sq or piece.piece_type == chess.KING or piece_value(piece) < 3:
            continue
        if not can_attack(board, defender_sq, defender, sq):
            continue
        if not is_attacked_by(board, sq, not color):
            continue
        if count_defenders(board, sq, color) == 1:
            charges.append(sq)
    charges.sort(key=lambda s: piece_value(board.piece_at(s)), reverse=True)
    return charges


@detector(importance=6, category=Category.TACTIC)
def detect_overloading(ctx: MoveContext) -> str | Finding | None:
    """One enemy piece is the sole guard of two attacked pieces."""
    after, moved = ctx.after, ctx.moved
    for dsq, defender in after.pieces(ctx.enemy):
        if defender.piece_type == chess.KING:
            continue
        charges = _sole_charges(after, dsq, ctx.enemy)
        if len(charges) < 2:
            continue
        if not any(can_attack(after, ctx.dest, moved, c) for c in charges):
            continue
        with ctx.pool.rent(after) as sim:
            sim.remove_piece_at(dsq)
            real = any(capture_gain(sim, c, ctx.color, pool=ctx.pool) > 0 for c in charges)
        if real:
            return (
                f"overloads defender of {_name_at(after, charges[0])} "
                f"and {_name_at(after, charges[1])}"
            )
    return None


@detector(importance=6, category=Category.TACTIC)
def detect_deflection(ctx: MoveContext) -> str | Finding | None:
    """The moved piece lures away the only guard of a king square or valuable piece."""
    after = ctx.after
    zone = [sq for sq in king_zone(after, ctx.enemy) if after.piece_at(sq) is None]
    valuable = [
        sq for sq, piece in after.pieces(ctx.enemy)
        if piece.piece_type != chess.KING and piece_value(piece) >= 3
    ]
    for dsq in attackers(after, ctx.dest, ctx.enemy):
        defender = after.piece_at(dsq)
        if defender.piece_type == chess.KING:
            continue
        for critical in zone + valuable:
            if critical == dsq:
                continue
            guards = attackers(after, critical, ctx.enemy)
            if critical in zone:
                guards = [g for g in guards if after.piece_at(g).piece_type != chess.KING]
            if guards != [dsq]:
                continue
            # Something other than the lure must still be hitting the square
            hitters = [a for a in attackers(after, critical, ctx.color) if a != ctx.dest]
            if not hitters:
                continue
            if critical in zone:
                if any(after.piece_at(a).piece_type in (chess.ROOK, chess.QUEEN) for a in hitters):
                    return "deflects key defender"
                continue
            with ctx.pool.rent(after) as sim:
                sim.remove_piece_at(dsq)
                if capture_gain(sim, critical, ctx.color, pool=ctx.pool) > 0:
                    return "deflects key defender"
    return None


# ---------------------------------------------------------------------------
# Hanging and trapped pieces
# ---------------------------------------------------------------------------


@detector(importance=6, category=Category.CAPTURE)
def detect_hanging(ctx: MoveContext) -> str | Finding | None:
    """The moved piece attacks an undefended enemy piece that cannot get away."""
    after, moved = ctx.after, ctx.moved
    for sq in mover_targets(ctx):
        target = after.piece_at(sq)
        if target.piece_type == chess.KING:
            continue
        value = piece_value(target)
        if value < 3 and value < piece_value(moved):
            continue
        if is_attacked_by(after, sq, ctx.enemy):
            continue
        if _has_safe_escape(ctx, sq):
            continue
        see = evaluate_exchange(after, sq, moved, ctx.color, ctx.dest, pool=ctx.pool)
        if see <= 0:
            continue
        text = f"wins undefended {piece_name(target.piece_type)}"
        if ctx.settings.show_see_values:
            text += f" (SEE +{see})"
        return text
    return None


@detector(importance=5, category=Category.TACTIC)
def detect_trapped(ctx: MoveContext) -> str | Finding | None:
    """An attacked enemy piece near the move has nowhere safe to go."""
    after, moved = ctx.after, ctx.moved
    for sq, piece in after.pieces(ctx.enemy):
        if piece.piece_type in (chess.KING, chess.PAWN) or piece_value(piece) < 3:
            continue
        hitters = attackers(after, sq, ctx.color)
        if not hitters:
            continue
        flights = flight_squares(after, sq)
        near = ctx.dest in hitters or any(can_attack(after, ctx.dest, moved, f) for f in flights)
        if not near:
            continue
        if capture_gain(after, sq, ctx.color, pool=ctx.pool) <= 0:
            continue
        if _has_safe_escape(ctx, sq):
            continue
        return f"traps {piece_name(piece.piece_type)}"
    return None


# ---------------------------------------------------------------------------
# Narrow structural patterns
# ---------------------------------------------------------------------------


@detector(importance=7, category=Category.TACTIC)
def detect_back_rank(ctx: MoveContext) -> str | Finding | None:
    """A heavy piece hits or eyes the back rank of a king boxed in by its own pieces."""
    after, moved = ctx.after, ctx.moved
    if moved.piece_type not in (chess.ROOK, chess.QUEEN):
        return None
    king = after.king(ctx.enemy)
    back_row = 0 if ctx.enemy == chess.BLACK else 7
    if king is None or king[0] != back_row:
        return None

    forward = 1 if ctx.enemy == chess.BLACK else -1
    for dc in (-1, 0, 1):
        escape = (back_row + forward, king[1] + dc)
        if not on_board(escape):
            continue
        occupant = after.piece_at(escape)
        if occupant is not None and occupant.color == ctx.enemy:
            continue
        if is_attacked_by(after, escape, ctx.color):
            continue
        return None

    if not is_safe_from_capture(ctx, ctx.dest):
        return None
    if can_attack(after, ctx.dest, moved, king):
        if _is_checkmate(after, ctx.enemy):
            return Finding("back rank mate", 10, Category.TACTIC, checks=True)
        return Finding("back rank mate threat", 7, Category.TACTIC, checks=True)
    if ctx.dest[0] == back_row:
        return "threatens back rank"

    for col in range(8):
        entry = (back_row, col)
        if after.piece_at(entry) is not None or is_attacked_by(after, entry, ctx.enemy):
            continue
        if can_attack(after, ctx.dest, moved, entry) and is_path_clear(after, entry, king):
            return "threatens back rank"
    return None


def _is_passed(board: Board, sq: Square, color: chess.Color) -> bool:
    forward = -1 if color == chess.WHITE else 1
    row = sq[0] + forward
    while 0 <= row < 8:
        for col in (sq[1] - 1, sq[1], sq[1] + 1):
            if 0 <= col < 8:
                piece = board.piece_at((row, col))
                if piece is not None and piece.piece_type == chess.PAWN and piece.color != color:
                    return False
        row += forward
    return True


@detector(importance=5, category=Category.TACTIC)
def detect_promotion_threat(ctx: MoveContext) -> str | Finding | None:
    after, moved = ctx.after, ctx.moved
    if moved.piece_type != chess.PAWN:
        return None
    forward = -1 if ctx.color == chess.WHITE else 1
    promo_row = 0 if ctx.color == chess.WHITE else 7
    distance = abs(promo_row - ctx.dest[0])
    if not is_safe_from_capture(ctx, ctx.dest):
        return None

    if distance == 1:
        ahead = (ctx.dest[0] + forward, ctx.dest[1])
        if after.piece_at(ahead) is None and (
            not is_attacked_by(after, ahead, ctx.enemy) or is_attacked_by(after, ahead, ctx.color)
        ):
            return "threatens promotion"
        for dc in (-1, 1):
            diag = (ctx.dest[0] + forward, ctx.dest[1] + dc)
            if on_board(diag):
                occupant = after.piece_at(diag)
                if occupant is not None and occupant.color == ctx.enemy:
                    return "threatens promotion"
        return None

    if distance == 2 and _is_passed(after, ctx.dest, ctx.color):
        path = [(ctx.dest[0] + forward, ctx.dest[1]), (promo_row, ctx.dest[1])]
        if all(after.piece_at(s) is None for s in path):
            return "advances passed pawn"
    return None


@detector(importance=10, category=Category.TACTIC, checks=True)
def detect_smothered_mate(ctx: MoveContext) -> str | Finding | None:
    after, moved = ctx.after, ctx.moved
    if moved.piece_type != chess.KNIGHT:
        return None
    king = after.king(ctx.enemy)
    if king is None or not can_attack(after, ctx.dest, moved, king):
        return None
    for sq in king_zone(after, ctx.enemy):
        occupant = after.piece_at(sq)
        if occupant is None or occupant.color != ctx.enemy:
            return None
    if _is_checkmate(after, ctx.enemy):
        return "smothered mate"
    return None


def _lands_on(token: str, sq: Square) -> bool:
    """Does a PV move token (UCI or SAN) end on sq?"""
    token = token.strip().rstrip("+#!?")
    m = _UCI_RE.match(token) or _SAN_DEST_RE.search(token)
    return m is not None and m.group(1) == square_name(sq)


@detector(importance=5, category=Category.SACRIFICE, checks=True)
def detect_decoy(ctx: MoveContext) -> str | Finding | None:
    """A checking piece offered to lure the king, confirmed by the PV reply."""
    after, moved = ctx.after, ctx.moved
    if piece_value(moved) < 3 or not ctx.pv_lines:
        return None
    king = after.king(ctx.enemy)
    if king is None or not can_attack(after, ctx.dest, moved, king):
        return None
    if is_safe_from_capture(ctx, ctx.dest):
        return None
    free = [s for s in flight_squares(after, king) if not is_attacked_by(after, s, ctx.color)]
    if len(free) > ctx.settings.decoy_max_king_squares:
        return None

    moves = ctx.pv_lines[0].moves
    if len(moves) < 2 or not _lands_on(moves[0], ctx.dest) or not _lands_on(moves[1], ctx.dest):
        return None
    return "decoy sacrifice"


@detector(importance=6, category=Category.TACTIC)
def detect_double_attack(ctx: MoveContext) -> str | Finding | None:
    """The move creates two real threats at once (a check counts as one)."""
    threats = new_real_threats(ctx)
    if gives_check(ctx.after, ctx.color):
        if threats:
            return Finding("double attack: check and wins material", 6, Category.TACTIC, checks=True)
        return None
    if len(threats) < 2:
        return None
    if not any(can_attack(ctx.after, ctx.dest, ctx.moved, s) for s in threats):
        return None
    return f"double attack on {_name_at(ctx.after, threats[0])} and {_name_at(ctx.after, threats[1])}"


@detector(importance=2, category=Category.CHECK, checks=True)
def detect_check(ctx: MoveContext) -> str | Finding | None:
    if not gives_check(ctx.after, ctx.color):
        return None
    if ctx.dest in checkers(ctx.after, ctx.color):
        others = [
            sq for sq in mover_targets(ctx, min_value=3)
            if ctx.after.piece_at(sq).piece_type != chess.KING
        ]
        if others:
            return "check with attack"
    return "gives check"
