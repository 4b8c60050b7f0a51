"""Engine evaluation strings and principal-variation lines.

The engine layer hands us text: "+1.50", "-0.75", "Mate in 3", "Mate in -2",
and PV lines such as "Nf3+ Kg8 Qh7# (+M1)" or "e2e4 e7e5 (+0.30)". This
module turns that text into Evaluation and PvLine values. Parsing failures
raise ValueError; callers at the entry points decide how to degrade.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

import chess

from explainer.config import Settings

# Pawn score standing in for a forced mate in threshold comparisons
MATE_SCORE = 100.0

_NUMERIC_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)$")
_MATE_RE = re.compile(r"^mate\s+in\s+([+-]?\d+)$", re.IGNORECASE)
_SHORT_MATE_RE = re.compile(r"^([+-]?)#?M?([+-]?\d+)$", re.IGNORECASE)
_TRAILING_EVAL_RE = re.compile(r"\(([^()]*)\)\s*$")
_MOVE_NUMBER_RE = re.compile(r"^\d+\.(\.\.)?$")


@dataclass(frozen=True)
class Evaluation:
    """A parsed engine score: either pawns or a signed mate distance."""
    pawns: float | None = None
    mate: int | None = None  # > 0: side this score belongs to mates

    @property
    def score(self) -> float:
        """One number for thresholds; mates map to +/-MATE_SCORE."""
        if self.mate is not None:
            return MATE_SCORE if self.mate > 0 else -MATE_SCORE
        return self.pawns if self.pawns is not None else 0.0

    @property
    def is_mate(self) -> bool:
        return self.mate is not None

    def flipped(self) -> Evaluation:
        if self.mate is not None:
            return Evaluation(mate=-self.mate)
        return Evaluation(pawns=-self.pawns if self.pawns is not None else None)

    def __str__(self) -> str:
        if self.mate is not None:
            return f"Mate in {self.mate}"
        return f"{self.score:+.2f}"


def parse_evaluation(text: str) -> Evaluation:
    """Parse "+1.50", "-0.75", "Mate in N", "Mate in -N" (also "#N"/"M-N").

    Raises ValueError for anything else, including "Mate in 0".
    """
    if not isinstance(text, str):
        raise ValueError(f"evaluation must be text, got {type(text).__name__}")
    s = text.strip()
    if _NUMERIC_RE.match(s):
        return Evaluation(pawns=float(s))

    m = _MATE_RE.match(s)
    if m:
        mate = int(m.group(1))
    else:
        m = _SHORT_MATE_RE.match(s)
        if not m or not ("#" in s or "m" in s.lower()):
            raise ValueError(f"unparseable evaluation: {text!r}")
        mate = int(m.group(2))
        if m.group(1) == "-":
            mate = -mate
    if mate == 0:
        raise ValueError(f"mate distance must be non-zero: {text!r}")
    return Evaluation(mate=mate)


def mover_score(evaluation: Evaluation, color: chess.Color, settings: Settings) -> float:
    """Score from the mover's point of view, honoring white_point_of_view."""
    if settings.white_point_of_view and color == chess.BLACK:
        return -evaluation.score
    return evaluation.score


def is_singular_move(best: Evaluation, second: Evaluation, settings: Settings) -> bool:
    """True when the best line beats the runner-up by at least singular_gap pawns."""
    return best.score - second.score >= settings.singular_gap


@dataclass
class PvLine:
    moves: list[str] = field(default_factory=list)
    checks: list[bool] = field(default_factory=list)
    evaluation: Evaluation | None = None

    def __len__(self) -> int:
        return len(self.moves)


def parse_pv_line(text: str) -> PvLine:
    """Split a PV line into moves, per-ply check flags, and a trailing evaluation.

    Move numbers ("12." / "12...") are dropped. A trailing parenthesized
    evaluation that does not parse is ignored rather than rejected, since
    engines annotate lines in many dialects.
    """
    line = text.strip()
    evaluation = None
    m = _TRAILING_EVAL_RE.search(line)
    if m:
        try:
            evaluation = parse_evaluation(m.group(1))
        except ValueError:
            evaluation = None
        line = line[:m.start()].strip()

    pv = PvLine(evaluation=evaluation)
    for token in line.split():
        if _MOVE_NUMBER_RE.match(token):
            continue
        token = token.rstrip("!?")
        pv.checks.append(token.endswith(("+", "#")))
        pv.moves.append(token.rstrip("+#"))
    return pv
