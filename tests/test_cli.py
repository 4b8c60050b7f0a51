"""Tests for the command-line entry point."""

import json

import pytest

from explainer.cli import build_parser, main

FEN = "4k3/8/8/3b4/8/8/8/3RK3 w - - 0 1"


def _run(capsys, argv):
    code = main(argv)
    return code, json.loads(capsys.readouterr().out)


def test_prints_json(capsys):
    code, data = _run(capsys, [FEN, "d1d5", "--eval", "+3.00"])
    assert code == 0
    assert data["reasons"] == ["wins bishop (SEE +3)"]
    assert data["see"] == 3


def test_no_see_flag(capsys):
    _, data = _run(capsys, [FEN, "d1d5", "--no-see"])
    assert data["reasons"] == ["wins bishop"]


def test_quality_and_pv(capsys):
    argv = [
        "4k3/8/8/8/8/8/8/4K3 w - - 0 1", "e1e2",
        "--eval", "0.00", "--eval-before", "0.00",
        "--pv", "Qe8+ Kh7 Qh5+ Qh6+ Qe8+ Kh7 Qh5+ Qh6+",
    ]
    _, data = _run(capsys, argv)
    assert data["reasons"] == ["perpetual check"]
    assert data["quality"] == "best"


def test_bad_move_exits_nonzero(capsys):
    code, data = _run(capsys, [FEN, "zz"])
    assert code == 1
    assert data["reasons"] == []


def test_parser_requires_fen_and_move():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])
