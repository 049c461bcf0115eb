"""
Deterministic post-processing of review output
"""

from .grounding import (
    DEFAULT_GROUNDING_RULES,
    GroundingRules,
    GroundingViolation,
    apply_grounding_downgrades,
    check_grounding,
)
from .ordering import sort_issues, sort_questions
from .scoring import compute_score
from .summary import compute_summary
from .truncation import DEFAULT_MAX_ISSUES, DEFAULT_MAX_QUESTIONS, truncate
from .validation import ValidationError, validate

__all__ = [
    "DEFAULT_GROUNDING_RULES",
    "DEFAULT_MAX_ISSUES",
    "DEFAULT_MAX_QUESTIONS",
    "GroundingRules",
    "GroundingViolation",
    "ValidationError",
    "apply_grounding_downgrades",
    "check_grounding",
    "compute_score",
    "compute_summary",
    "sort_issues",
    "sort_questions",
    "truncate",
    "validate",
]
