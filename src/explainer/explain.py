"""Explanation composer: turns one engine move into a couple of short reasons.

The composer runs the detectors in priority order and keeps the first
max_reasons distinct findings:

    forcing signal -> tactical battery -> perpetual check -> capture verdict
    -> plain check -> positional reasons -> evaluation fallback

Alongside the reasons it reports the SEE of a capture, the sacrifice verdict,
defensive findings, a move-quality verdict when the prior evaluation is
known, and any detector errors. explain() never raises.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

import chess

from explainer.analysis.board import Board, Move
from explainer.analysis.defense import analyze_defenses
from explainer.analysis.evaluation import (
    Evaluation,
    PvLine,
    is_singular_move,
    mover_score,
    parse_evaluation,
    parse_pv_line,
)
from explainer.analysis.pool import BoardPool
from explainer.analysis.positional import POSITIONAL_DETECTORS
from explainer.analysis.quality import QualityVerdict, classify_move_quality
from explainer.analysis.sacrifice import SacrificeVerdict, classify_capture
from explainer.analysis.tactics import (
    TACTICAL_DETECTORS,
    Category,
    DetectionError,
    Finding,
    MoveContext,
    iter_results,
)
from explainer.analysis.tactics.finders import detect_check
from explainer.analysis.tactics.lines import detect_forcing_signal, detect_perpetual_check
from explainer.config import Settings

logger = logging.getLogger(__name__)

__all__ = ["Explanation", "MoveExplainer", "explain_move"]

_SACRIFICE_IMPORTANCE = 8
_CAPTURE_IMPORTANCE = 5


@dataclass
class Explanation:
    reasons: list[str] = field(default_factory=list)
    findings: list[Finding] = field(default_factory=list)
    see: int | None = None
    sacrifice: SacrificeVerdict | None = None
    defenses: list[Finding] = field(default_factory=list)
    quality: QualityVerdict | None = None
    errors: list[DetectionError] = field(default_factory=list)

    @property
    def text(self) -> str:
        return ", ".join(self.reasons)

    def to_dict(self) -> dict:
        return {
            "reasons": list(self.reasons),
            "text": self.text,
            "see": self.see,
            "sacrifice": self.sacrifice.kind.value if self.sacrifice else None,
            "defenses": [f.text for f in self.defenses],
            "quality": self.quality.quality.value if self.quality else None,
            "errors": [f"{e.detector}: {e.message}" for e in self.errors],
        }


class _Reasons:
    """Collects distinct findings up to a limit."""

    def __init__(self, limit: int):
        self.limit = limit
        self.kept: list[Finding] = []

    @property
    def full(self) -> bool:
        return len(self.kept) >= self.limit

    @property
    def mentions_check(self) -> bool:
        return any(f.checks for f in self.kept)

    def add(self, finding: Finding) -> None:
        if self.full or any(f.text == finding.text for f in self.kept):
            return
        self.kept.append(finding)


def _optional_eval(value: Evaluation | str | None, label: str) -> Evaluation | None:
    if value is None or isinstance(value, Evaluation):
        return value
    try:
        return parse_evaluation(value)
    except ValueError as e:
        logger.warning("Ignoring %s: %s", label, e)
        return None


def _pv_lines(lines: Iterable[PvLine | str]) -> list[PvLine]:
    parsed = []
    for line in lines:
        if isinstance(line, PvLine):
            parsed.append(line)
        elif isinstance(line, str):
            parsed.append(parse_pv_line(line))
        else:
            logger.warning("Ignoring PV line of type %s", type(line).__name__)
    return parsed


def _verdict_finding(verdict: SacrificeVerdict) -> Finding:
    if verdict.is_sacrifice:
        return Finding(verdict.text, _SACRIFICE_IMPORTANCE, Category.SACRIFICE)
    return Finding(verdict.text, _CAPTURE_IMPORTANCE, Category.CAPTURE)


class MoveExplainer:
    """Explains moves with one Settings and one scratch-board pool.

    Safe to share between threads: the only mutable shared state is the pool.
    """

    def __init__(self, settings: Settings | None = None, pool: BoardPool | None = None):
        self.settings = settings if settings is not None else Settings()
        self.pool = pool if pool is not None else BoardPool(self.settings.pool_max_size)

    def _from_mover(self, evaluation: Evaluation | None, color: chess.Color) -> Evaluation | None:
        if evaluation is None:
            return None
        if self.settings.white_point_of_view and color == chess.BLACK:
            return evaluation.flipped()
        return evaluation

    def fallback(self, evaluation: Evaluation | None, color: chess.Color) -> str:
        """Generic reason when no detector has anything to say."""
        if evaluation is None:
            return "improves position"
        score = mover_score(evaluation, color, self.settings)
        if abs(score) > self.settings.winning_eval:
            return "maintains winning advantage" if score > 0 else "fights back in difficult position"
        if abs(score) < self.settings.balanced_eval:
            return "maintains balance"
        return "improves position"

    def explain(
        self,
        board: Board | str,
        move: Move | str,
        evaluation: Evaluation | str | None = None,
        pv_lines: Iterable[PvLine | str] = (),
        *,
        eval_before: Evaluation | str | None = None,
        second_evaluation: Evaluation | str | None = None,
        forced: bool = False,
        is_best_move: bool = True,
    ) -> Explanation:
        try:
            if not isinstance(board, Board):
                board = Board(board)
            if not isinstance(move, Move):
                move = Move.from_code(move)
            lines = _pv_lines(pv_lines)
            after_eval = _optional_eval(evaluation, "evaluation")
            before_eval = _optional_eval(eval_before, "evaluation before move")
            second_eval = _optional_eval(second_evaluation, "second-best evaluation")
            singular = (
                after_eval is not None and second_eval is not None
                and is_singular_move(after_eval, second_eval, self.settings)
            )
            ctx = MoveContext.build(
                board, move,
                pool=self.pool,
                settings=self.settings,
                pv_lines=lines,
                forced=forced,
                singular=singular,
            )
        except (ValueError, TypeError, AttributeError) as e:
            logger.warning("Cannot explain move %r: %s", move, e)
            return Explanation()

        try:
            return self._compose(ctx, after_eval, before_eval, is_best_move)
        except Exception as e:
            logger.error("Explanation failed for %s: %s", move, e)
            return Explanation(reasons=[self.fallback(after_eval, ctx.color)])

    def _compose(
        self,
        ctx: MoveContext,
        after_eval: Evaluation | None,
        before_eval: Evaluation | None,
        is_best_move: bool,
    ) -> Explanation:
        result = Explanation()
        reasons = _Reasons(self.settings.max_reasons)

        def take(detectors) -> None:
            if reasons.full:
                return
            for item in iter_results(ctx, detectors):
                if isinstance(item, DetectionError):
                    result.errors.append(item)
                    continue
                reasons.add(item)
                if reasons.full:
                    return

        verdict = classify_capture(
            ctx.board, ctx.move, after_eval, before_eval,
            settings=self.settings, pool=self.pool,
        )
        if verdict is not None:
            result.see = verdict.see
            result.sacrifice = verdict

        take([detect_forcing_signal, *TACTICAL_DETECTORS, detect_perpetual_check])
        if verdict is not None:
            reasons.add(_verdict_finding(verdict))
        if not reasons.mentions_check:
            take([detect_check])
        take(POSITIONAL_DETECTORS)

        result.findings = list(reasons.kept)
        result.reasons = [f.text for f in reasons.kept]
        if not result.reasons:
            result.reasons = [self.fallback(after_eval, ctx.color)]

        result.defenses = analyze_defenses(ctx.board, ctx.move, ctx.color, pool=self.pool)

        if before_eval is not None and after_eval is not None:
            result.quality = classify_move_quality(
                self._from_mover(before_eval, ctx.color),
                self._from_mover(after_eval, ctx.color),
                is_best_move=is_best_move,
                is_forced=ctx.forced,
                is_sacrifice=verdict is not None and verdict.is_sacrifice,
                settings=self.settings,
            )
        return result


def explain_move(
    board: Board | str,
    move: Move | str,
    evaluation: Evaluation | str | None = None,
    pv_lines: Iterable[PvLine | str] = (),
    *,
    settings: Settings | None = None,
    **kwargs,
) -> Explanation:
    """One-shot convenience wrapper around MoveExplainer.explain."""
    return MoveExplainer(settings).explain(board, move, evaluation, pv_lines, **kwargs)
