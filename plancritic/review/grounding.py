"""
Grounding checks: detect claims about repository state the model cannot know
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Set, Tuple

from plancritic.models.review_models import UNVERIFIED_TAG, Review, Severity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GroundingRules:
    """Immutable table of phrases that suggest invented repository knowledge"""

    phrases: Tuple[str, ...]

    def __post_init__(self):
        object.__setattr__(
            self, "phrases", tuple(phrase.lower() for phrase in self.phrases)
        )

    def matches(self, text: str) -> List[str]:
        """Return every phrase contained in text, case-insensitively"""
        lowered = text.lower()
        return [phrase for phrase in self.phrases if phrase in lowered]


DEFAULT_GROUNDING_RULES = GroundingRules(
    phrases=(
        "the codebase uses",
        "the repository contains",
        "the existing implementation",
        "currently the system",
        "as seen in the source",
        "the project's",
        "the current codebase",
        "looking at the code",
        "in the source code",
        "the existing code",
    )
)


@dataclass(frozen=True)
class GroundingViolation:
    """Phrase found in one text field of an issue or question"""

    item_id: str
    field: str
    phrase: str


def check_grounding(
    review: Review, rules: GroundingRules = DEFAULT_GROUNDING_RULES
) -> List[GroundingViolation]:
    """Scan issue and question text for fabrication phrases"""
    violations: List[GroundingViolation] = []

    for issue in review.issues:
        fields = (
            ("description", issue.description),
            ("impact", issue.impact),
            ("recommendation", issue.recommendation),
        )
        violations.extend(_scan(issue.id, fields, rules))

    for question in review.questions:
        fields = (
            ("question", question.question),
            ("why_needed", question.why_needed),
        )
        violations.extend(_scan(question.id, fields, rules))

    return violations


def _scan(
    item_id: str, fields: Iterable[Tuple[str, str]], rules: GroundingRules
) -> List[GroundingViolation]:
    return [
        GroundingViolation(item_id=item_id, field=name, phrase=phrase)
        for name, text in fields
        for phrase in rules.matches(text)
    ]


def apply_grounding_downgrades(
    review: Review, violations: Iterable[GroundingViolation]
) -> Review:
    """
    Tag violating issues UNVERIFIED and cap their severity at WARN.

    Each issue is handled once however many violations it has. Questions are
    reported by check_grounding but left untouched here. Returns a new review;
    running it again with the same violations changes nothing.
    """
    violated_ids: Set[str] = {violation.item_id for violation in violations}
    if not violated_ids:
        return review

    issues = []
    for issue in review.issues:
        if issue.id not in violated_ids:
            issues.append(issue)
            continue

        update = {}
        if UNVERIFIED_TAG not in issue.tags:
            update["tags"] = [*issue.tags, UNVERIFIED_TAG]
        if issue.severity == Severity.CRITICAL:
            logger.debug(f"Downgrading {issue.id} from CRITICAL to WARN")
            update["severity"] = Severity.WARN.value
        issues.append(issue.model_copy(update=update) if update else issue)

    return review.model_copy(update={"issues": issues})
