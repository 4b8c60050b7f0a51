"""Explain why an engine move is good, in one or two short reasons."""

from explainer.config import Settings
from explainer.explain import Explanation, MoveExplainer, explain_move

__all__ = ["Explanation", "MoveExplainer", "Settings", "explain_move"]
