"""Move-quality classification from the evaluation before and after a move."""

from __future__ import annotations

import enum
from dataclasses import dataclass

from explainer.analysis.evaluation import Evaluation
from explainer.config import Settings

__all__ = ["MoveQuality", "QualityVerdict", "classify_move_quality"]


class MoveQuality(enum.Enum):
    BRILLIANT = "brilliant"
    BEST = "best"
    EXCELLENT = "excellent"
    GOOD = "good"
    INACCURACY = "inaccuracy"
    MISTAKE = "mistake"
    BLUNDER = "blunder"
    FORCED = "forced"


_SYMBOLS = {
    MoveQuality.BRILLIANT: "!!",
    MoveQuality.INACCURACY: "?!",
    MoveQuality.MISTAKE: "?",
    MoveQuality.BLUNDER: "??",
}


@dataclass(frozen=True)
class QualityVerdict:
    quality: MoveQuality
    description: str
    loss: float  # pawns given up relative to the position before the move

    @property
    def symbol(self) -> str:
        return _SYMBOLS.get(self.quality, "")


def classify_move_quality(
    eval_before: Evaluation,
    eval_after: Evaluation,
    *,
    is_best_move: bool = False,
    is_forced: bool = False,
    is_sacrifice: bool = False,
    settings: Settings | None = None,
) -> QualityVerdict:
    """Classify a move; both evaluations are from the mover's point of view.

    Mate transitions dominate: dropping a forced mate or walking into one is
    a blunder whatever the pawn scores say.
    """
    settings = settings if settings is not None else Settings()
    loss = eval_before.score - eval_after.score

    if is_forced:
        return QualityVerdict(MoveQuality.FORCED, "Forced", loss)
    if eval_before.mate is not None and eval_before.mate > 0 and not (
        eval_after.mate is not None and eval_after.mate > 0
    ):
        return QualityVerdict(MoveQuality.BLUNDER, "Blunder - missed checkmate", loss)
    if eval_after.mate is not None and eval_after.mate < 0 and not (
        eval_before.mate is not None and eval_before.mate < 0
    ):
        return QualityVerdict(MoveQuality.BLUNDER, "Blunder - allows checkmate", loss)
    if is_best_move and is_sacrifice and loss <= 0:
        return QualityVerdict(MoveQuality.BRILLIANT, "Brilliant", loss)
    if loss >= settings.blunder_threshold:
        return QualityVerdict(MoveQuality.BLUNDER, "Blunder", loss)
    if loss >= settings.mistake_threshold:
        return QualityVerdict(MoveQuality.MISTAKE, "Mistake", loss)
    if loss >= settings.inaccuracy_threshold:
        return QualityVerdict(MoveQuality.INACCURACY, "Inaccuracy", loss)
    if is_best_move:
        return QualityVerdict(MoveQuality.BEST, "Best", loss)
    if loss <= settings.excellent_threshold:
        return QualityVerdict(MoveQuality.EXCELLENT, "Excellent", loss)
    return QualityVerdict(MoveQuality.GOOD, "Good", loss)
