"""
Data models for plan review output
"""

from enum import Enum
from typing import Any, ClassVar, Dict, List, Tuple

from pydantic import (
    BaseModel,
    Field,
    SerializerFunctionWrapHandler,
    model_serializer,
    model_validator,
)


class _ClosedEnum(str, Enum):
    """String enum over a fixed set of values with a validity predicate"""

    @classmethod
    def is_valid(cls, value: Any) -> bool:
        """Return True when value is one of the enum's members"""
        if isinstance(value, cls):
            return True
        return value in cls._value2member_map_

    def __str__(self) -> str:
        return self.value


class Verdict(_ClosedEnum):
    """Overall executability of the plan"""

    EXECUTABLE_AS_IS = "EXECUTABLE_AS_IS"
    EXECUTABLE_WITH_CLARIFICATIONS = "EXECUTABLE_WITH_CLARIFICATIONS"
    NOT_EXECUTABLE = "NOT_EXECUTABLE"


class Severity(_ClosedEnum):
    """Importance of an issue or question"""

    INFO = "INFO"
    WARN = "WARN"
    CRITICAL = "CRITICAL"

    @classmethod
    def rank(cls, value: Any) -> int:
        """Sort key, lower is more severe; unrecognized values sort last"""
        return _SEVERITY_RANK.get(value, 3)


_SEVERITY_RANK: Dict[str, int] = {
    Severity.CRITICAL.value: 0,
    Severity.WARN.value: 1,
    Severity.INFO.value: 2,
}


class Category(_ClosedEnum):
    """Kind of problem an issue describes"""

    CONTRADICTION = "CONTRADICTION"
    AMBIGUITY = "AMBIGUITY"
    MISSING_PREREQUISITE = "MISSING_PREREQUISITE"
    MISSING_ACCEPTANCE_CRITERIA = "MISSING_ACCEPTANCE_CRITERIA"
    RISK_SECURITY = "RISK_SECURITY"
    RISK_DATA = "RISK_DATA"
    RISK_OPERATIONS = "RISK_OPERATIONS"
    TEST_GAP = "TEST_GAP"
    SCOPE_CREEP_RISK = "SCOPE_CREEP_RISK"
    UNREALISTIC_STEP = "UNREALISTIC_STEP"
    ORDERING_DEPENDENCY = "ORDERING_DEPENDENCY"
    UNSPECIFIED_INTERFACE = "UNSPECIFIED_INTERFACE"
    NON_DETERMINISM = "NON_DETERMINISM"


class PatchType(_ClosedEnum):
    """Kind of suggested patch"""

    PLAN_TEXT_EDIT = "PLAN_TEXT_EDIT"


class CheckStatus(_ClosedEnum):
    """Result of a single checklist item"""

    PASS = "PASS"
    FAIL = "FAIL"
    NA = "N/A"


EVIDENCE_SOURCES: Tuple[str, ...] = ("plan", "context")
TRUNCATION_ISSUE_ID = "ISSUE-TRUNC"
UNVERIFIED_TAG = "UNVERIFIED"


class ReviewModel(BaseModel):
    """
    Base for review JSON objects.

    Enum-valued fields are plain strings so that unknown values survive
    parsing and reach the schema validator. Numbers and booleans are strict:
    "100" or "yes" is a parse error rather than a coerced value. Fields listed
    in omit_if_empty are dropped from the serialized output when empty.
    """

    omit_if_empty: ClassVar[Tuple[str, ...]] = ()

    @model_validator(mode="before")
    @classmethod
    def _null_as_absent(cls, data: Any) -> Any:
        # JSON null takes the field's zero value
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data

    @model_serializer(mode="wrap")
    def _drop_empty_optionals(
        self, handler: SerializerFunctionWrapHandler
    ) -> Dict[str, Any]:
        data = handler(self)
        for name in self.omit_if_empty:
            if name in data and not data[name]:
                del data[name]
        return data


class Evidence(ReviewModel):
    """Citation into the plan or a context file"""

    source: str = Field("", description="'plan' or 'context'")
    path: str = Field("", description="File the quote comes from")
    line_start: int = Field(0, strict=True, description="First cited line, 1-based")
    line_end: int = Field(0, strict=True, description="Last cited line, inclusive")
    quote: str = Field("", description="Verbatim excerpt")


class Issue(ReviewModel):
    """Problem detected in the plan"""

    omit_if_empty: ClassVar[Tuple[str, ...]] = ("tags",)

    id: str = Field("", description="ISSUE-NNNN")
    severity: str = Field("", description="INFO, WARN or CRITICAL")
    category: str = Field("", description="One of the Category values")
    title: str = ""
    description: str = ""
    evidence: List[Evidence] = Field(default_factory=list)
    impact: str = ""
    recommendation: str = ""
    blocking: bool = Field(False, strict=True)
    tags: List[str] = Field(default_factory=list)


class Question(ReviewModel):
    """Ambiguity that must be resolved before execution"""

    omit_if_empty: ClassVar[Tuple[str, ...]] = ("blocks", "suggested_answers")

    id: str = Field("", description="Q-NNNN")
    severity: str = ""
    question: str = ""
    why_needed: str = ""
    blocks: List[str] = Field(default_factory=list, description="Plan step IDs")
    evidence: List[Evidence] = Field(default_factory=list)
    suggested_answers: List[str] = Field(default_factory=list)


class Patch(ReviewModel):
    """Suggested edit to the plan text"""

    id: str = ""
    type: str = ""
    title: str = ""
    diff_unified: str = ""


class CheckItem(ReviewModel):
    """Single check within a checklist"""

    check: str = ""
    status: str = ""


class Checklist(ReviewModel):
    """Result of evaluating a profile checklist"""

    id: str = ""
    title: str = ""
    checks: List[CheckItem] = Field(default_factory=list)


class Summary(ReviewModel):
    """Verdict, score and severity counts derived from the issues"""

    verdict: str = ""
    score: int = Field(0, strict=True)
    critical_count: int = Field(0, strict=True)
    warn_count: int = Field(0, strict=True)
    info_count: int = Field(0, strict=True)


class ContextFile(ReviewModel):
    """Context file path and content hash"""

    path: str = ""
    hash: str = ""


class Input(ReviewModel):
    """Files and settings the review was produced from"""

    omit_if_empty: ClassVar[Tuple[str, ...]] = ("context_files", "profile")

    plan_file: str = ""
    plan_hash: str = ""
    context_files: List[ContextFile] = Field(default_factory=list)
    profile: str = ""
    strict: bool = Field(False, strict=True)


class Meta(ReviewModel):
    """Model and settings used for the review"""

    model: str = ""
    temperature: float = Field(0.0, strict=True)


class Review(ReviewModel):
    """Top-level review output"""

    omit_if_empty: ClassVar[Tuple[str, ...]] = ("patches", "checklists")

    tool: str = ""
    version: str = ""
    input: Input = Field(default_factory=Input)
    summary: Summary = Field(default_factory=Summary)
    questions: List[Question] = Field(default_factory=list)
    issues: List[Issue] = Field(default_factory=list)
    patches: List[Patch] = Field(default_factory=list)
    checklists: List[Checklist] = Field(default_factory=list)
    meta: Meta = Field(default_factory=Meta)
