"""Position and move analysis: primitives, SEE, tactic detectors, defenses, verdicts.

All functions are pure with respect to the boards they are given; scratch
work happens on boards rented from a BoardPool.
"""

from explainer.analysis.attacks import (
    attackers,
    can_attack,
    count_attackers,
    count_defenders,
    is_attacked_by,
    lowest_attacker_value,
    lowest_defender_value,
)
from explainer.analysis.board import Board, Move, Square, parse_square, square_name
from explainer.analysis.constants import get_piece_value, piece_value
from explainer.analysis.defense import analyze_defenses
from explainer.analysis.evaluation import (
    Evaluation,
    PvLine,
    is_singular_move,
    parse_evaluation,
    parse_pv_line,
)
from explainer.analysis.pool import BoardPool
from explainer.analysis.quality import MoveQuality, QualityVerdict, classify_move_quality
from explainer.analysis.sacrifice import CaptureKind, SacrificeVerdict, classify_capture
from explainer.analysis.see import capture_gain, evaluate_exchange, see_of_move
from explainer.analysis.tactics import (
    Category,
    DetectionError,
    Finding,
    MoveContext,
    detect_tactics,
)

__all__ = [
    # Board
    "Board",
    "Move",
    "Square",
    "parse_square",
    "square_name",
    "get_piece_value",
    "piece_value",
    # Primitives
    "can_attack",
    "attackers",
    "is_attacked_by",
    "count_attackers",
    "count_defenders",
    "lowest_attacker_value",
    "lowest_defender_value",
    # SEE
    "evaluate_exchange",
    "see_of_move",
    "capture_gain",
    # Pool
    "BoardPool",
    # Evaluation
    "Evaluation",
    "PvLine",
    "parse_evaluation",
    "parse_pv_line",
    "is_singular_move",
    # Detectors
    "Category",
    "DetectionError",
    "Finding",
    "MoveContext",
    "detect_tactics",
    "analyze_defenses",
    # Verdicts
    "CaptureKind",
    "SacrificeVerdict",
    "classify_capture",
    "MoveQuality",
    "QualityVerdict",
    "classify_move_quality",
]
