"""
Structural and semantic validation of a candidate review
"""

from dataclasses import dataclass
from typing import List, Sequence, Set

from plancritic.models.review_models import (
    EVIDENCE_SOURCES,
    Category,
    Evidence,
    Issue,
    PatchType,
    Question,
    Review,
    Severity,
    Verdict,
)
from plancritic.review.scoring import compute_score


@dataclass(frozen=True)
class ValidationError:
    """Single schema violation, addressed by a dotted/bracketed path"""

    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


def validate(review: Review, plan_line_count: int = 0) -> List[ValidationError]:
    """
    Check a review against the review schema.

    Every rule is evaluated so that a single repair round-trip can address all
    problems at once. plan_line_count of 0 disables the plan line-range check.
    The review is not modified.

    Returns:
        List of errors; empty when the review is valid
    """
    errors: List[ValidationError] = []

    if not review.tool:
        errors.append(ValidationError("tool", "required"))
    if not review.version:
        errors.append(ValidationError("version", "required"))
    if not Verdict.is_valid(review.summary.verdict):
        errors.append(
            ValidationError(
                "summary.verdict", f"invalid verdict: {review.summary.verdict!r}"
            )
        )

    errors.extend(_validate_summary_consistency(review))

    issue_ids: Set[str] = set()
    for index, issue in enumerate(review.issues):
        errors.extend(
            _validate_issue(f"issues[{index}]", issue, issue_ids, plan_line_count)
        )

    question_ids: Set[str] = set()
    for index, question in enumerate(review.questions):
        errors.extend(
            _validate_question(
                f"questions[{index}]", question, question_ids, plan_line_count
            )
        )

    for index, patch in enumerate(review.patches):
        prefix = f"patches[{index}]"
        if not patch.id:
            errors.append(ValidationError(f"{prefix}.id", "required"))
        if not PatchType.is_valid(patch.type):
            errors.append(ValidationError(f"{prefix}.type", f"invalid: {patch.type!r}"))
        if not patch.title:
            errors.append(ValidationError(f"{prefix}.title", "required"))
        if not patch.diff_unified:
            errors.append(ValidationError(f"{prefix}.diff_unified", "required"))

    return errors


def _validate_summary_consistency(review: Review) -> List[ValidationError]:
    errors: List[ValidationError] = []
    summary = review.summary

    expected_score = compute_score(review.issues)
    if summary.score != expected_score:
        errors.append(
            ValidationError(
                "summary.score",
                f"score {summary.score} does not match computed {expected_score}",
            )
        )

    tallies = {
        "critical_count": (Severity.CRITICAL, summary.critical_count),
        "warn_count": (Severity.WARN, summary.warn_count),
        "info_count": (Severity.INFO, summary.info_count),
    }
    for field_name, (severity, reported) in tallies.items():
        actual = sum(1 for issue in review.issues if issue.severity == severity)
        if reported != actual:
            errors.append(
                ValidationError(
                    f"summary.{field_name}", f"expected {actual}, got {reported}"
                )
            )
    return errors


def _validate_id(prefix: str, item_id: str, seen: Set[str]) -> List[ValidationError]:
    if not item_id:
        return [ValidationError(f"{prefix}.id", "required")]
    if item_id in seen:
        return [ValidationError(f"{prefix}.id", f"duplicate ID: {item_id!r}")]
    seen.add(item_id)
    return []


def _validate_issue(
    prefix: str, issue: Issue, seen_ids: Set[str], plan_line_count: int
) -> List[ValidationError]:
    errors = _validate_id(prefix, issue.id, seen_ids)

    if not Severity.is_valid(issue.severity):
        errors.append(ValidationError(f"{prefix}.severity", f"invalid: {issue.severity!r}"))
    if not Category.is_valid(issue.category):
        errors.append(ValidationError(f"{prefix}.category", f"invalid: {issue.category!r}"))
    if not issue.title:
        errors.append(ValidationError(f"{prefix}.title", "required"))
    if not issue.description:
        errors.append(ValidationError(f"{prefix}.description", "required"))

    errors.extend(_validate_evidence_list(prefix, issue.evidence, plan_line_count))
    return errors


def _validate_question(
    prefix: str, question: Question, seen_ids: Set[str], plan_line_count: int
) -> List[ValidationError]:
    errors = _validate_id(prefix, question.id, seen_ids)

    if not Severity.is_valid(question.severity):
        errors.append(
            ValidationError(f"{prefix}.severity", f"invalid: {question.severity!r}")
        )
    if not question.question:
        errors.append(ValidationError(f"{prefix}.question", "required"))
    if not question.why_needed:
        errors.append(ValidationError(f"{prefix}.why_needed", "required"))

    errors.extend(_validate_evidence_list(prefix, question.evidence, plan_line_count))
    return errors


def _validate_evidence_list(
    prefix: str, evidence: Sequence[Evidence], plan_line_count: int
) -> List[ValidationError]:
    if not evidence:
        return [
            ValidationError(f"{prefix}.evidence", "at least one evidence entry required")
        ]

    errors: List[ValidationError] = []
    for index, entry in enumerate(evidence):
        errors.extend(
            validate_evidence(f"{prefix}.evidence[{index}]", entry, plan_line_count)
        )
    return errors


def validate_evidence(
    prefix: str, evidence: Evidence, plan_line_count: int = 0
) -> List[ValidationError]:
    """Check a single evidence entry"""
    errors: List[ValidationError] = []

    if evidence.source not in EVIDENCE_SOURCES:
        errors.append(
            ValidationError(
                f"{prefix}.source",
                f"must be 'plan' or 'context', got {evidence.source!r}",
            )
        )
    if not evidence.path:
        errors.append(ValidationError(f"{prefix}.path", "required"))
    if evidence.line_start < 1:
        errors.append(ValidationError(f"{prefix}.line_start", "must be >= 1"))
    if evidence.line_end < evidence.line_start:
        errors.append(ValidationError(f"{prefix}.line_end", "must be >= line_start"))
    if (
        plan_line_count > 0
        and evidence.source == "plan"
        and evidence.line_end > plan_line_count
    ):
        errors.append(
            ValidationError(
                f"{prefix}.line_end",
                f"exceeds plan line count ({plan_line_count})",
            )
        )
    if not evidence.quote:
        errors.append(ValidationError(f"{prefix}.quote", "required"))
    return errors
