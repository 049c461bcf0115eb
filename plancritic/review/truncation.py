"""
Capping of issue and question counts
"""

import logging

from plancritic.models.review_models import (
    TRUNCATION_ISSUE_ID,
    Category,
    Evidence,
    Issue,
    Review,
    Severity,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_ISSUES = 50
DEFAULT_MAX_QUESTIONS = 20


def truncation_notice() -> Issue:
    """Synthetic issue appended when output was cut"""
    return Issue(
        id=TRUNCATION_ISSUE_ID,
        severity=Severity.WARN.value,
        category=Category.AMBIGUITY.value,
        title="Output truncated",
        description=(
            "The number of issues or questions exceeded the configured limits. "
            "Increase limits to see all results."
        ),
        recommendation="Re-run with higher limits.",
        evidence=[
            Evidence(
                source="plan",
                path="plan",
                line_start=1,
                line_end=1,
                quote="(truncation notice)",
            )
        ],
    )


def truncate(review: Review, max_issues: int = 0, max_questions: int = 0) -> Review:
    """
    Cap issues and questions, returning a new review.

    When issues overflow, the first max_issues - 1 are kept so the notice
    fits inside the limit; questions keep their first max_questions. Callers
    sort first, since the kept prefix is meant to be the most severe subset.
    """
    if max_issues <= 0:
        max_issues = DEFAULT_MAX_ISSUES
    if max_questions <= 0:
        max_questions = DEFAULT_MAX_QUESTIONS

    issues = list(review.issues)
    questions = list(review.questions)
    truncated = False

    if len(issues) > max_issues:
        logger.info(f"Truncating {len(issues)} issues to {max_issues - 1}")
        issues = issues[: max_issues - 1]
        truncated = True

    if len(questions) > max_questions:
        logger.info(f"Truncating {len(questions)} questions to {max_questions}")
        questions = questions[:max_questions]
        truncated = True

    if truncated:
        issues.append(truncation_notice())

    return review.model_copy(update={"issues": issues, "questions": questions})
