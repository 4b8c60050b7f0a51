"""Tests for move-quality classification."""

from explainer.analysis.evaluation import Evaluation
from explainer.analysis.quality import MoveQuality, classify_move_quality
from explainer.config import Settings

SETTINGS = Settings(_env_file=None)


def _quality(before, after, **kwargs):
    kwargs.setdefault("settings", SETTINGS)
    return classify_move_quality(before, after, **kwargs).quality


def pawns(x):
    return Evaluation(pawns=x)


class TestThresholds:
    def test_blunder(self):
        assert _quality(pawns(1.0), pawns(-2.0)) == MoveQuality.BLUNDER

    def test_mistake(self):
        assert _quality(pawns(1.0), pawns(0.0)) == MoveQuality.MISTAKE

    def test_inaccuracy(self):
        assert _quality(pawns(1.0), pawns(0.5)) == MoveQuality.INACCURACY

    def test_excellent(self):
        assert _quality(pawns(1.0), pawns(0.95)) == MoveQuality.EXCELLENT

    def test_good(self):
        assert _quality(pawns(1.0), pawns(0.8)) == MoveQuality.GOOD

    def test_best_move_without_loss(self):
        assert _quality(pawns(1.0), pawns(0.8), is_best_move=True) == MoveQuality.BEST

    def test_best_move_still_judged_by_loss(self):
        assert _quality(pawns(1.0), pawns(-3.0), is_best_move=True) == MoveQuality.BLUNDER


class TestSpecialCases:
    def test_forced_wins_over_everything(self):
        assert _quality(pawns(1.0), pawns(-5.0), is_forced=True) == MoveQuality.FORCED

    def test_missed_checkmate(self):
        verdict = classify_move_quality(Evaluation(mate=2), pawns(5.0), settings=SETTINGS)
        assert verdict.quality == MoveQuality.BLUNDER
        assert verdict.description == "Blunder - missed checkmate"
        assert verdict.symbol == "??"

    def test_allows_checkmate(self):
        verdict = classify_move_quality(pawns(0.5), Evaluation(mate=-3), settings=SETTINGS)
        assert verdict.description == "Blunder - allows checkmate"

    def test_keeping_a_mate_is_fine(self):
        assert _quality(Evaluation(mate=3), Evaluation(mate=2), is_best_move=True) == MoveQuality.BEST

    def test_brilliant_sacrifice(self):
        verdict = classify_move_quality(
            pawns(0.2), pawns(0.4), is_best_move=True, is_sacrifice=True, settings=SETTINGS,
        )
        assert verdict.quality == MoveQuality.BRILLIANT
        assert verdict.symbol == "!!"

    def test_sacrifice_that_loses_is_not_brilliant(self):
        assert _quality(pawns(0.2), pawns(-0.5), is_best_move=True, is_sacrifice=True) == MoveQuality.INACCURACY

    def test_custom_thresholds(self):
        strict = Settings(_env_file=None, mistake_threshold=0.5)
        assert _quality(pawns(1.0), pawns(0.4), settings=strict) == MoveQuality.MISTAKE
