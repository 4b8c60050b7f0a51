"""Quiet-move reasons: promotion, pawn pushes, centralization, development, castling."""

import chess

from explainer.analysis.constants import EXTENDED_CENTER, MINOR_PIECES
from explainer.analysis.tactics.types import Category, Finding, MoveContext, detector

__all__ = [
    "detect_promotion",
    "detect_pawn_push",
    "detect_centralization",
    "detect_development",
    "detect_castling",
    "POSITIONAL_DETECTORS",
]


@detector(importance=4, category=Category.POSITIONAL)
def detect_promotion(ctx: MoveContext) -> str | Finding | None:
    if ctx.piece.piece_type != chess.PAWN or not ctx.move.promotion:
        return None
    return f"promotes to {chess.piece_symbol(ctx.move.promotion).upper()}"


@detector(importance=2, category=Category.POSITIONAL)
def detect_pawn_push(ctx: MoveContext) -> str | Finding | None:
    if ctx.piece.piece_type != chess.PAWN:
        return None
    advance = ctx.source[0] - ctx.dest[0] if ctx.color == chess.WHITE else ctx.dest[0] - ctx.source[0]
    if advance == 2:
        return "aggressive pawn push"
    return None


@detector(importance=2, category=Category.POSITIONAL)
def detect_centralization(ctx: MoveContext) -> str | Finding | None:
    if ctx.piece.piece_type not in MINOR_PIECES:
        return None
    if ctx.dest in EXTENDED_CENTER and ctx.source not in EXTENDED_CENTER:
        return "centralizes piece"
    return None


@detector(importance=1, category=Category.POSITIONAL)
def detect_development(ctx: MoveContext) -> str | Finding | None:
    if ctx.piece.piece_type not in MINOR_PIECES:
        return None
    home_row = 7 if ctx.color == chess.WHITE else 0
    if ctx.source[0] == home_row and ctx.dest[0] != home_row:
        return "develops piece"
    return None


@detector(importance=3, category=Category.POSITIONAL)
def detect_castling(ctx: MoveContext) -> str | Finding | None:
    if ctx.piece.piece_type != chess.KING or ctx.source[0] != ctx.dest[0]:
        return None
    step = ctx.dest[1] - ctx.source[1]
    if step == 2:
        return "castles kingside for safety"
    if step == -2:
        return "castles queenside"
    return None


POSITIONAL_DETECTORS = [
    detect_promotion,
    detect_pawn_push,
    detect_centralization,
    detect_development,
    detect_castling,
]
