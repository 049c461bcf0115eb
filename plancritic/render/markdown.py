"""
Markdown report for a finished review
"""

from typing import List

from plancritic.models.review_models import Evidence, Issue, Review, Severity

_ISSUE_SECTIONS = (
    (Severity.CRITICAL, "Critical Issues"),
    (Severity.WARN, "Warnings"),
    (Severity.INFO, "Info"),
)


def _evidence_lines(evidence: List[Evidence]) -> List[str]:
    return [f"> {ev.quote} (L{ev.line_start}-{ev.line_end})" for ev in evidence]


def _issue_lines(issue: Issue) -> List[str]:
    return [
        f"### {issue.title} [{issue.severity} / {issue.category}]",
        "",
        issue.description,
        "",
        *_evidence_lines(issue.evidence),
        "",
        f"**Impact:** {issue.impact}",
        "",
        f"**Recommendation:** {issue.recommendation}",
        "",
    ]


def render_markdown(review: Review) -> str:
    """
    Format a review as a Markdown report

    Issues are grouped by severity; issues with an unrecognized severity are
    counted in the summary line but not listed.
    """
    summary = review.summary
    lines = [
        "# PlanCritic Review",
        "",
        f"**Verdict:** {summary.verdict}",
        f"**Score:** {summary.score} / 100",
        f"**Issues:** {summary.critical_count} critical, "
        f"{summary.warn_count} warnings, {summary.info_count} info",
        "",
    ]

    for severity, heading in _ISSUE_SECTIONS:
        issues = [issue for issue in review.issues if issue.severity == severity]
        if issues:
            lines.extend([f"## {heading}", ""])
            for issue in issues:
                lines.extend(_issue_lines(issue))

    if not review.issues:
        lines.extend(["No issues found.", ""])

    if review.questions:
        lines.extend(["## Questions", ""])
        for question in review.questions:
            lines.extend(
                [
                    f"### {question.question} [{question.severity}]",
                    "",
                    question.why_needed,
                    "",
                    *_evidence_lines(question.evidence),
                ]
            )
            if question.suggested_answers:
                lines.extend(["", "**Suggested answers:**"])
                lines.extend(f"- {answer}" for answer in question.suggested_answers)
            lines.append("")

    if review.patches:
        lines.extend(["## Suggested Patches", ""])
        for patch in review.patches:
            lines.extend([f"### {patch.title}", "", "```diff", patch.diff_unified, "```", ""])

    if review.input.context_files:
        lines.extend(["## Context Used", ""])
        lines.extend(f"- {context.path}" for context in review.input.context_files)
        lines.append("")

    lines.append("")
    return "\n".join(lines)
