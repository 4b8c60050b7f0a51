"""Detector result types and the per-move context every detector reads."""

from __future__ import annotations

import enum
import functools
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

import chess

from explainer.analysis.board import Board, Move, Square, square_name
from explainer.analysis.evaluation import PvLine
from explainer.analysis.pool import BoardPool
from explainer.config import Settings

logger = logging.getLogger(__name__)


class Category(enum.Enum):
    FORCING = "forcing"
    THREAT = "threat"
    TACTIC = "tactic"
    CHECK = "check"
    CAPTURE = "capture"
    SACRIFICE = "sacrifice"
    DEFENSE = "defense"
    POSITIONAL = "positional"
    GENERIC = "generic"


@dataclass(frozen=True)
class Finding:
    """One short reason a move is good."""
    text: str
    importance: int
    category: Category
    checks: bool = False  # text already conveys that the move gives check


@dataclass(frozen=True)
class DetectionError:
    """A detector hit bad input or an inconsistent board and gave up."""
    detector: str
    message: str


DetectorResult = Finding | DetectionError | None


@dataclass
class MoveContext:
    """Everything a detector may look at for one move. Built once per analysis."""
    board: Board
    after: Board
    move: Move
    piece: chess.Piece
    color: chess.Color
    captured: chess.Piece | None
    pool: BoardPool
    settings: Settings
    pv_lines: list[PvLine] = field(default_factory=list)
    forced: bool = False     # the only legal reply (caller-supplied)
    singular: bool = False   # clearly better than the runner-up line

    @classmethod
    def build(
        cls,
        board: Board,
        move: Move,
        *,
        pool: BoardPool,
        settings: Settings,
        pv_lines: Iterable[PvLine] = (),
        forced: bool = False,
        singular: bool = False,
    ) -> MoveContext:
        piece = board.piece_at(move.from_sq)
        if piece is None:
            raise ValueError(f"no piece on {square_name(move.from_sq)}")
        after = board.copy()
        captured = after.push(move)
        return cls(
            board=board,
            after=after,
            move=move,
            piece=piece,
            color=piece.color,
            captured=captured,
            pool=pool,
            settings=settings,
            pv_lines=list(pv_lines),
            forced=forced,
            singular=singular,
        )

    @property
    def source(self) -> Square:
        return self.move.from_sq

    @property
    def dest(self) -> Square:
        return self.move.to_sq

    @property
    def enemy(self) -> chess.Color:
        return not self.color

    @property
    def moved(self) -> chess.Piece:
        """The piece standing on dest after the move (the promoted piece, if any)."""
        return self.after.piece_at(self.dest) or self.piece


def detector(
    *, importance: int, category: Category, checks: bool = False,
) -> Callable[[Callable[[MoveContext], str | Finding | None]], Callable[[MoveContext], DetectorResult]]:
    """Turn a text-returning check into a detector that never raises.

    The wrapped function returns a reason string, a ready-made Finding, or
    None. Any exception becomes a DetectionError so callers can tell a
    broken input from a quiet position.
    """
    def decorate(fn):
        @functools.wraps(fn)
        def run(ctx: MoveContext) -> DetectorResult:
            try:
                result = fn(ctx)
            except Exception as e:
                logger.warning("Detector %s failed: %s", fn.__name__, e)
                return DetectionError(fn.__name__, str(e) or type(e).__name__)
            if result is None or isinstance(result, Finding):
                return result
            return Finding(result, importance, category, checks)

        run.importance = importance
        run.category = category
        return run
    return decorate
