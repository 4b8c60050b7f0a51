"""Tactical motif detection: an ordered battery of independent detectors.

Each detector takes a MoveContext and returns a Finding, a DetectionError,
or None. Order matters: earlier detectors are more specific, and the
composer keeps only the first few findings.
"""

from collections.abc import Iterable, Iterator

from explainer.analysis.tactics.finders import (
    detect_back_rank,
    detect_check,
    detect_decoy,
    detect_deflection,
    detect_double_attack,
    detect_fork,
    detect_hanging,
    detect_overloading,
    detect_promotion_threat,
    detect_removal_of_defender,
    detect_smothered_mate,
    detect_threat_creation,
    detect_trapped,
)
from explainer.analysis.tactics.lines import detect_forcing_signal, detect_perpetual_check
from explainer.analysis.tactics.rays import (
    detect_discovered_attack,
    detect_double_check,
    detect_pin,
    detect_skewer,
    detect_xray,
)
from explainer.analysis.tactics.types import (
    Category,
    DetectionError,
    DetectorResult,
    Finding,
    MoveContext,
    detector,
)

__all__ = [
    "Category",
    "DetectionError",
    "DetectorResult",
    "Finding",
    "MoveContext",
    "detector",
    "TACTICAL_DETECTORS",
    "BATTERY",
    "iter_results",
    "detect_tactics",
]

# Board patterns, most specific first
TACTICAL_DETECTORS = [
    detect_threat_creation,
    detect_double_check,
    detect_discovered_attack,
    detect_pin,
    detect_skewer,
    detect_fork,
    detect_removal_of_defender,
    detect_overloading,
    detect_deflection,
    detect_hanging,
    detect_trapped,
    detect_back_rank,
    detect_promotion_threat,
    detect_smothered_mate,
    detect_xray,
    detect_decoy,
    detect_double_attack,
]

BATTERY = [
    detect_forcing_signal,
    *TACTICAL_DETECTORS,
    detect_perpetual_check,
    detect_check,
]


def iter_results(ctx: MoveContext, detectors: Iterable) -> Iterator[Finding | DetectionError]:
    """Run detectors in order, yielding every non-empty result lazily."""
    for run in detectors:
        result = run(ctx)
        if result is not None:
            yield result


def detect_tactics(ctx: MoveContext, limit: int | None = None) -> list[Finding]:
    """Findings from the full battery in priority order, deduplicated by text."""
    findings: list[Finding] = []
    for result in iter_results(ctx, BATTERY):
        if isinstance(result, DetectionError):
            continue
        if any(f.text == result.text for f in findings):
            continue
        findings.append(result)
        if limit is not None and len(findings) >= limit:
            break
    return findings
