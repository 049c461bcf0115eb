"""
Deterministic review scoring
"""

from typing import Dict, Iterable

from plancritic.models.review_models import Issue, Severity

MAX_SCORE = 100
MIN_SCORE = 0

SEVERITY_PENALTIES: Dict[str, int] = {
    Severity.CRITICAL.value: 20,
    Severity.WARN.value: 7,
    Severity.INFO.value: 2,
}


def compute_score(issues: Iterable[Issue]) -> int:
    """
    Score a review from its issue severities.

    Starts at 100 and subtracts 20 per CRITICAL, 7 per WARN and 2 per INFO,
    clamped to [0, 100]. Unrecognized severities cost nothing.
    """
    score = MAX_SCORE
    for issue in issues:
        score -= SEVERITY_PENALTIES.get(issue.severity, 0)
    return max(MIN_SCORE, min(MAX_SCORE, score))
