"""Tests for the explanation composer."""

from concurrent.futures import ThreadPoolExecutor

import pytest

from explainer import Explanation, MoveExplainer, Settings, explain_move
from explainer.analysis.board import Board
from explainer.analysis.quality import MoveQuality
from explainer.analysis.sacrifice import CaptureKind


@pytest.fixture
def explainer():
    return MoveExplainer(Settings(_env_file=None))


ROOK_TAKES_BISHOP = ("4k3/8/8/3b4/8/8/8/3RK3 w - - 0 1", "d1d5")
QUIET_KING = ("4k3/8/8/8/8/8/8/4K3 w - - 0 1", "e1e2")


# ---------------------------------------------------------------------------
# Reasons
# ---------------------------------------------------------------------------


class TestReasons:
    def test_winning_capture(self, explainer):
        result = explainer.explain(*ROOK_TAKES_BISHOP, "+3.00")
        assert result.reasons == ["wins bishop (SEE +3)"]
        assert result.see == 3
        assert result.sacrifice.kind == CaptureKind.WINNING_CAPTURE

    def test_queen_trade(self, explainer):
        result = explainer.explain("3rk3/8/8/3q4/8/8/8/3QK3 w - - 0 1", "d1d5", "0.00")
        assert result.reasons[0] == "trades queen"
        assert result.see == 0

    def test_royal_fork_leads(self, explainer):
        result = explainer.explain("4k3/8/q7/1N6/8/8/8/4K3 w - - 0 1", "b5c7", "+8.50")
        assert result.reasons[0] == "royal fork (king and queen)"
        assert "gives check" not in result.reasons
        assert len(result.reasons) <= 2

    def test_skewer(self, explainer):
        result = explainer.explain("4r3/8/8/4k3/8/8/7K/R7 w - - 0 1", "a1e1", "+5.00")
        assert result.reasons[0] == "skewers king, winning rook"
        assert "gives check" not in result.reasons

    def test_at_most_max_reasons(self):
        explainer = MoveExplainer(Settings(_env_file=None, max_reasons=1))
        result = explainer.explain("4k3/8/q7/1N6/8/8/8/4K3 w - - 0 1", "b5c7", "+8.50")
        assert result.reasons == ["royal fork (king and queen)"]

    def test_reasons_are_unique(self, explainer):
        result = explainer.explain("4k3/8/q7/1N6/8/8/8/4K3 w - - 0 1", "b5c7")
        assert len(result.reasons) == len(set(result.reasons))

    def test_forced_move_signal(self, explainer):
        result = explainer.explain(*QUIET_KING, "0.00", forced=True)
        assert result.reasons[0] == "only legal move"

    def test_singular_move_signal(self, explainer):
        result = explainer.explain(*QUIET_KING, "+2.00", second_evaluation="0.00")
        assert result.reasons[0] == "only good move"

    def test_perpetual_from_pv(self, explainer):
        pv = ["Qe8+ Kh7 Qh5+ Qh6+ Qe8+ Kh7 Qh5+ Qh6+ (0.00)"]
        result = explainer.explain(*QUIET_KING, "0.00", pv)
        assert result.reasons == ["perpetual check"]

    def test_positional_reasons(self, explainer):
        result = explainer.explain("4k3/8/8/8/8/8/8/4K1N1 w - - 0 1", "g1f3", "0.10")
        assert result.reasons == ["centralizes piece", "develops piece"]


# ---------------------------------------------------------------------------
# Evaluation fallback
# ---------------------------------------------------------------------------


class TestFallback:
    @pytest.mark.parametrize("evaluation, text", [
        ("+4.00", "maintains winning advantage"),
        ("-4.00", "fights back in difficult position"),
        ("Mate in 3", "maintains winning advantage"),
        ("+0.10", "maintains balance"),
        ("-0.20", "maintains balance"),
        ("+1.00", "improves position"),
        ("+3.00", "improves position"),
    ])
    def test_eval_text(self, explainer, evaluation, text):
        assert explainer.explain(*QUIET_KING, evaluation).reasons == [text]

    def test_unparseable_eval(self, explainer):
        result = explainer.explain(*QUIET_KING, "??")
        assert result.reasons == ["improves position"]
        assert result.quality is None

    def test_missing_eval(self, explainer):
        assert explainer.explain(*QUIET_KING).reasons == ["improves position"]


# ---------------------------------------------------------------------------
# Malformed input
# ---------------------------------------------------------------------------


class TestMalformedInput:
    @pytest.mark.parametrize("move", ["", "e9e4", "xx", "e2e4e5", None])
    def test_bad_move(self, explainer, move):
        assert explainer.explain(QUIET_KING[0], move, "0.00") == Explanation()

    def test_bad_fen(self, explainer):
        assert explainer.explain("garbage", "e2e4", "0.00") == Explanation()

    def test_empty_source_square(self, explainer):
        assert explainer.explain(QUIET_KING[0], "a1a2", "0.00") == Explanation()

    def test_empty_explanation_text(self):
        assert Explanation().text == ""


# ---------------------------------------------------------------------------
# Side outputs
# ---------------------------------------------------------------------------


class TestSideOutputs:
    def test_quality_when_prior_eval_known(self, explainer):
        result = explainer.explain(*QUIET_KING, "-2.50", eval_before="+1.00", is_best_move=False)
        assert result.quality.quality == MoveQuality.BLUNDER

    def test_defenses_reported(self, explainer):
        result = explainer.explain("4r2k/8/8/8/8/8/8/4K3 w - - 0 1", "e1d1", "0.00")
        assert [f.text for f in result.defenses] == ["gets out of check"]

    def test_to_dict(self, explainer):
        data = explainer.explain(*ROOK_TAKES_BISHOP, "+3.00").to_dict()
        assert data["reasons"] == ["wins bishop (SEE +3)"]
        assert data["text"] == "wins bishop (SEE +3)"
        assert data["see"] == 3
        assert data["sacrifice"] == "winning_capture"
        assert data["errors"] == []

    def test_accepts_board_object(self, explainer):
        board = Board(ROOK_TAKES_BISHOP[0])
        result = explainer.explain(board, "d1d5", "+3.00")
        assert result.reasons == ["wins bishop (SEE +3)"]
        assert board.board_fen() == "4k3/8/8/3b4/8/8/8/3RK3"


def test_explain_move_wrapper():
    result = explain_move(*ROOK_TAKES_BISHOP, "+3.00", settings=Settings(_env_file=None))
    assert result.reasons == ["wins bishop (SEE +3)"]


def test_shared_explainer_across_threads(explainer):
    """One explainer (and its pool) serves concurrent callers."""
    cases = [
        (ROOK_TAKES_BISHOP, "wins bishop (SEE +3)"),
        (("4r3/8/8/4k3/8/8/7K/R7 w - - 0 1", "a1e1"), "skewers king, winning rook"),
        (("4k3/8/q7/1N6/8/8/8/4K3 w - - 0 1", "b5c7"), "royal fork (king and queen)"),
    ] * 20

    def run(case):
        (fen, move), expected = case
        return explainer.explain(fen, move, "+3.00").reasons[0] == expected

    with ThreadPoolExecutor(max_workers=6) as executor:
        assert all(executor.map(run, cases))
    assert explainer.pool.rented == 0
