"""Capture verdicts: fair trade, winning capture, exchange sacrifice, sacrifice, brilliancy.

Combines the SEE value of a capture with the engine's evaluation before
and after the move. All thresholds come from Settings.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass

import chess

from explainer.analysis.attacks import attackers, is_attacked_by
from explainer.analysis.board import Board, Move
from explainer.analysis.constants import MINOR_PIECES, piece_name, piece_value
from explainer.analysis.evaluation import Evaluation, mover_score
from explainer.analysis.pool import BoardPool
from explainer.analysis.see import evaluate_exchange
from explainer.config import Settings

logger = logging.getLogger(__name__)

__all__ = ["CaptureKind", "SacrificeVerdict", "classify_capture"]


class CaptureKind(enum.Enum):
    FAIR_TRADE = "fair_trade"
    WINNING_CAPTURE = "winning_capture"
    LOSING_CAPTURE = "losing_capture"
    EXCHANGE_SACRIFICE = "exchange_sacrifice"
    SACRIFICE = "sacrifice"
    BRILLIANT = "brilliant"


@dataclass(frozen=True)
class SacrificeVerdict:
    kind: CaptureKind
    text: str
    see: int

    @property
    def is_sacrifice(self) -> bool:
        return self.kind in (CaptureKind.EXCHANGE_SACRIFICE, CaptureKind.SACRIFICE, CaptureKind.BRILLIANT)

    @property
    def is_brilliant(self) -> bool:
        return self.kind == CaptureKind.BRILLIANT


_SACRIFICE_TEXT = {
    chess.QUEEN: "queen sacrifice",
    chess.ROOK: "rook sacrifice",
    chess.BISHOP: "piece sacrifice",
    chess.KNIGHT: "piece sacrifice",
}


def _pawn_can_recapture(after: Board, sq, color: chess.Color) -> bool:
    """Can an enemy pawn take the piece on sq? (pin legality is ignored)"""
    return any(
        after.piece_at(s).piece_type == chess.PAWN for s in attackers(after, sq, not color)
    )


def _is_brilliant(
    after: Board,
    move: Move,
    piece: chess.Piece,
    victim: chess.Piece,
    before_score: float | None,
    after_score: float,
    settings: Settings,
) -> bool:
    if piece_value(piece) < 3 or piece.piece_type == chess.KING:
        return False
    if before_score is None or before_score >= settings.decisive_advantage:
        return False
    if after_score <= -settings.bad_position:
        return False
    if piece_value(victim) >= piece_value(piece):
        return False
    if _pawn_can_recapture(after, move.to_sq, piece.color):
        return False
    return not is_attacked_by(after, move.to_sq, piece.color)


def _plain_capture(see: int, piece: chess.Piece, victim: chess.Piece, defended: bool, settings: Settings) -> SacrificeVerdict:
    name = piece_name(victim.piece_type)
    if see > 0:
        if defended and piece_value(piece) == piece_value(victim):
            return SacrificeVerdict(CaptureKind.FAIR_TRADE, f"trades {name}", see)
        text = f"wins {name} (SEE +{see})" if settings.show_see_values else f"wins {name}"
        return SacrificeVerdict(CaptureKind.WINNING_CAPTURE, text, see)
    if see == 0:
        return SacrificeVerdict(CaptureKind.FAIR_TRADE, f"trades {name}" if defended else f"captures {name}", see)
    text = f"captures {name} (loses exchange)" if settings.show_see_values else f"captures {name}"
    return SacrificeVerdict(CaptureKind.LOSING_CAPTURE, text, see)


def classify_capture(
    board: Board,
    move: Move,
    eval_after: Evaluation | None = None,
    eval_before: Evaluation | None = None,
    *,
    settings: Settings | None = None,
    pool: BoardPool | None = None,
) -> SacrificeVerdict | None:
    """Classify a capture. Returns None for non-captures and bad input.

    Evaluations are read from the mover's point of view (see
    Settings.white_point_of_view). Without eval_after no capture is called
    a sacrifice, since compensation cannot be judged.
    """
    settings = settings if settings is not None else Settings()
    pool = pool if pool is not None else BoardPool(settings.pool_max_size)
    try:
        piece = board.piece_at(move.from_sq)
        victim = board.piece_at(move.to_sq)
    except ValueError as e:
        logger.warning("Cannot classify %s: %s", move, e)
        return None
    if piece is None or victim is None or victim.color == piece.color:
        return None

    color = piece.color
    see = evaluate_exchange(board, move.to_sq, piece, color, move.from_sq, pool=pool)
    defended = is_attacked_by(board, move.to_sq, not color)
    after_score = mover_score(eval_after, color, settings) if eval_after is not None else None
    before_score = mover_score(eval_before, color, settings) if eval_before is not None else None

    sacrifice_text = None
    kind = None
    if after_score is not None and defended:
        if (piece.piece_type == chess.ROOK and victim.piece_type in MINOR_PIECES
                and see < -1 and after_score > settings.exchange_sacrifice_min_eval):
            kind = CaptureKind.EXCHANGE_SACRIFICE
            sacrifice_text = "exchange sacrifice (rook for minor piece)"
        elif (see <= -settings.sacrifice_min_material and piece.piece_type in _SACRIFICE_TEXT
              and after_score > settings.sacrifice_min_eval):
            kind = CaptureKind.SACRIFICE
            sacrifice_text = _SACRIFICE_TEXT[piece.piece_type]

    if kind is None:
        return _plain_capture(see, piece, victim, defended, settings)

    with pool.rent(board) as after:
        after.push(move)
        brilliant = _is_brilliant(after, move, after.piece_at(move.to_sq), victim, before_score, after_score, settings)
    if brilliant:
        return SacrificeVerdict(CaptureKind.BRILLIANT, f"brilliant {piece_name(piece.piece_type)} sacrifice", see)
    return SacrificeVerdict(kind, sacrifice_text, see)
