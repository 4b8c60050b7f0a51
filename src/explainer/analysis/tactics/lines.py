"""Signals that come from outside the board: forced/singular moves and PV-derived perpetual check."""

from explainer.analysis.tactics.types import Category, Finding, MoveContext, detector


@detector(importance=10, category=Category.FORCING)
def detect_forcing_signal(ctx: MoveContext) -> str | Finding | None:
    if ctx.forced:
        return "only legal move"
    if ctx.singular:
        return "only good move"
    return None


@detector(importance=7, category=Category.CHECK, checks=True)
def detect_perpetual_check(ctx: MoveContext) -> str | Finding | None:
    """The main line is mostly checks and cycles through the same pair of moves.

    The check ratio is measured over every ply of the line, both sides included.
    """
    if not ctx.pv_lines:
        return None
    settings = ctx.settings
    pv = ctx.pv_lines[0]
    if len(pv) < settings.perpetual_min_plies:
        return None

    if sum(pv.checks) < settings.perpetual_check_ratio * len(pv.checks):
        return None

    seen = set()
    window = min(len(pv.moves), settings.perpetual_window)
    for i in range(0, window - 1, 2):
        pair = (pv.moves[i], pv.moves[i + 1])
        if pair in seen:
            return "perpetual check"
        seen.add(pair)
    return None
