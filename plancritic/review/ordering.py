"""
Deterministic ordering of issues and questions
"""

from typing import Iterable, List, Sequence, Tuple, Union

from plancritic.models.review_models import Evidence, Issue, Question, Severity


def _first_line(evidence: Sequence[Evidence]) -> int:
    if not evidence:
        return 0
    return evidence[0].line_start


def _sort_key(item: Union[Issue, Question]) -> Tuple[int, int]:
    return Severity.rank(item.severity), _first_line(item.evidence)


def sort_issues(issues: Iterable[Issue]) -> List[Issue]:
    """Stable sort by severity (CRITICAL first), then first evidence line"""
    return sorted(issues, key=_sort_key)


def sort_questions(questions: Iterable[Question]) -> List[Question]:
    """Stable sort by severity (CRITICAL first), then first evidence line"""
    return sorted(questions, key=_sort_key)
