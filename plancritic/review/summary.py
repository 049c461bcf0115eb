"""
Summary derivation from the issue list
"""

from typing import Iterable

from plancritic.models.review_models import Issue, Severity, Summary, Verdict
from plancritic.review.scoring import compute_score


def compute_summary(issues: Iterable[Issue]) -> Summary:
    """
    Derive verdict, score and severity counts from issues.

    This is the only source of verdict and score; whatever summary the model
    returned is replaced by this one during post-processing.
    """
    issues = list(issues)
    critical = warn = info = 0
    has_blocking_critical = False

    for issue in issues:
        if issue.severity == Severity.CRITICAL:
            critical += 1
            if issue.blocking:
                has_blocking_critical = True
        elif issue.severity == Severity.WARN:
            warn += 1
        elif issue.severity == Severity.INFO:
            info += 1

    if has_blocking_critical:
        verdict = Verdict.NOT_EXECUTABLE
    elif critical or warn:
        verdict = Verdict.EXECUTABLE_WITH_CLARIFICATIONS
    else:
        verdict = Verdict.EXECUTABLE_AS_IS

    return Summary(
        verdict=verdict.value,
        score=compute_score(issues),
        critical_count=critical,
        warn_count=warn,
        info_count=info,
    )
