"""
Review service for orchestrating plan reviews
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence

from plancritic.agents.prompts import PromptOptions, build_prompt
from plancritic.agents.providers import GenerationSettings, LLMProvider
from plancritic.exceptions import InputException, PlanCriticException
from plancritic.inputs import ContextFile, Plan, infer_step_ids, load_context, load_plan
from plancritic.models.review_models import (
    ContextFile as InputContextFile,
    Input,
    Issue,
    Meta,
    Question,
    Review,
    Severity,
    Verdict,
)
from plancritic.profiles import Profile, load_builtin
from plancritic.review import (
    DEFAULT_GROUNDING_RULES,
    DEFAULT_MAX_ISSUES,
    DEFAULT_MAX_QUESTIONS,
    GroundingRules,
    apply_grounding_downgrades,
    check_grounding,
    compute_summary,
    sort_issues,
    sort_questions,
    truncate,
)
from plancritic.services.repair import RepairOrchestrator
from plancritic.utils.redaction import DEFAULT_REDACTOR, Redactor
from plancritic.utils.version import get_version

logger = logging.getLogger(__name__)

TOOL_NAME = "plancritic"
DEBUG_PROMPT_FILE = "plancritic-debug-prompt.txt"
DEFAULT_MODEL_LABEL = "(default)"

_THRESHOLD_RANKS = {"critical": 0, "warn": 1, "info": 2}

_VERDICT_LEVELS = {
    Verdict.EXECUTABLE_AS_IS.value: 0,
    Verdict.EXECUTABLE_WITH_CLARIFICATIONS.value: 1,
    Verdict.NOT_EXECUTABLE.value: 2,
}

FAIL_ON_LEVELS = {
    "executable": 0,
    "clarifications": 1,
    "not_executable": 2,
    "not-executable": 2,
    "critical": 2,
}


def severity_threshold_rank(threshold: str) -> int:
    """Rank of the least severe level to keep; anything unrecognized keeps everything"""
    return _THRESHOLD_RANKS.get(threshold.lower(), 2)


def _passes_threshold(severity: str, max_rank: int) -> bool:
    return Severity.is_valid(severity) and Severity.rank(severity) <= max_rank


def filter_issues_by_severity(issues: Sequence[Issue], threshold: str) -> List[Issue]:
    max_rank = severity_threshold_rank(threshold)
    return [issue for issue in issues if _passes_threshold(issue.severity, max_rank)]


def filter_questions_by_severity(
    questions: Sequence[Question], threshold: str
) -> List[Question]:
    max_rank = severity_threshold_rank(threshold)
    return [q for q in questions if _passes_threshold(q.severity, max_rank)]


def verdict_meets_threshold(verdict: str, fail_on: str) -> bool:
    """
    Whether a verdict is at or beyond the --fail-on level

    Raises:
        InputException: when fail_on is not a recognized level
    """
    threshold = FAIL_ON_LEVELS.get(fail_on.lower())
    if threshold is None:
        raise InputException(
            message=f"unrecognized --fail-on value {fail_on!r} "
            f"(expected one of: {', '.join(FAIL_ON_LEVELS)})",
            details={"fail_on": fail_on},
        )

    level = _VERDICT_LEVELS.get(verdict)
    if level is None:
        return False
    return level >= threshold


@dataclass
class ReviewRequest:
    """Inputs and options for one plan review"""

    plan_path: str
    context_paths: Sequence[str] = ()
    profile: str = "general"
    strict: bool = False
    model: str = ""
    temperature: float = 0.2
    max_tokens: int = 4096
    seed: Optional[int] = None
    timeout: Optional[float] = None
    severity_threshold: str = "info"
    redact: bool = True
    debug: bool = False
    max_issues: int = DEFAULT_MAX_ISSUES
    max_questions: int = DEFAULT_MAX_QUESTIONS


@dataclass
class ReviewInputs:
    """Plan, context files and profile for one review, redacted if requested"""

    plan: Plan
    contexts: List[ContextFile] = field(default_factory=list)
    profile: Optional[Profile] = None
    # Line count of the plan file on disk; evidence is checked against it
    plan_line_count: int = 0


def load_inputs(
    request: ReviewRequest, redactor: Redactor = DEFAULT_REDACTOR
) -> ReviewInputs:
    """
    Load and validate every file input of a review

    Raises:
        InputException: unreadable plan/context or unknown profile
    """
    plan = load_plan(request.plan_path)
    contexts = [load_context(path) for path in request.context_paths]
    plan_line_count = len(plan.lines)
    logger.debug(
        f"Loaded plan ({plan_line_count} lines) and {len(contexts)} context file(s)"
    )

    if request.redact:
        plan = plan.with_text(redactor.redact(plan.raw))
        contexts = [ctx.with_text(redactor.redact(ctx.raw)) for ctx in contexts]

    profile = load_builtin(request.profile) if request.profile else None
    return ReviewInputs(
        plan=plan, contexts=contexts, profile=profile, plan_line_count=plan_line_count
    )


class ReviewService:
    """Service for running a plan through generation, repair and post-processing"""

    def __init__(
        self,
        provider: LLMProvider,
        redactor: Redactor = DEFAULT_REDACTOR,
        grounding_rules: GroundingRules = DEFAULT_GROUNDING_RULES,
        debug_prompt_path: str = DEBUG_PROMPT_FILE,
    ):
        self.provider = provider
        self.redactor = redactor
        self.grounding_rules = grounding_rules
        self.debug_prompt_path = debug_prompt_path

    def review(
        self, request: ReviewRequest, inputs: Optional[ReviewInputs] = None
    ) -> Review:
        """
        Run a complete plan review

        Args:
            request: Plan, context and option values
            inputs: Files already loaded with load_inputs; loaded here when omitted

        Returns:
            Post-processed review with deterministic summary and ordering

        Raises:
            InputException: unreadable plan/context or unknown profile
            AIProviderException: the provider call failed
            ReviewParseException: the output could not be parsed after repair
            SchemaValidationException: the output was still invalid after repair
        """
        logger.info(
            f"Starting review of {request.plan_path}",
            extra={"operation": "review_start", "provider": self.provider.name},
        )

        if inputs is None:
            inputs = load_inputs(request, self.redactor)
        plan = inputs.plan

        prompt = build_prompt(
            PromptOptions(
                plan=plan,
                contexts=inputs.contexts,
                profile=inputs.profile,
                strict=request.strict,
                step_ids=infer_step_ids(plan.lines),
                max_issues=request.max_issues,
                max_questions=request.max_questions,
            )
        )
        if request.debug:
            self._write_debug_prompt(prompt)

        settings = GenerationSettings(
            model=request.model,
            temperature=request.temperature,
            max_tokens=request.max_tokens,
            seed=request.seed,
            timeout=request.timeout,
        )
        orchestrator = RepairOrchestrator(
            self.provider, settings, plan_line_count=inputs.plan_line_count
        )
        review = orchestrator.run(prompt)

        review = self.post_process(review, request)
        review = self._fill_metadata(review, request, inputs)

        logger.info(
            f"Review of {plan.name} finished: {review.summary.verdict} "
            f"(score {review.summary.score})",
            extra={
                "operation": "review_success",
                "issues_found": len(review.issues),
                "questions_found": len(review.questions),
                "attempts": orchestrator.attempts,
            },
        )
        return review

    def post_process(self, review: Review, request: ReviewRequest) -> Review:
        """
        Deterministic clean-up of a validated review

        The model's own summary is replaced, items are sorted and then
        truncated; strict mode downgrades ungrounded issues before the final
        summary, and the severity threshold is applied last.
        """
        review = review.model_copy(
            update={
                "summary": compute_summary(review.issues),
                "issues": sort_issues(review.issues),
                "questions": sort_questions(review.questions),
            }
        )
        review = truncate(review, request.max_issues, request.max_questions)

        if request.strict:
            violations = check_grounding(review, self.grounding_rules)
            if violations:
                logger.info(
                    f"Grounding violations found: {len(violations)}, applying downgrades",
                    extra={"operation": "grounding_downgrade"},
                )
                review = apply_grounding_downgrades(review, violations)
                review = review.model_copy(
                    update={
                        "summary": compute_summary(review.issues),
                        "issues": sort_issues(review.issues),
                    }
                )

        issues = filter_issues_by_severity(review.issues, request.severity_threshold)
        questions = filter_questions_by_severity(
            review.questions, request.severity_threshold
        )
        return review.model_copy(
            update={
                "issues": issues,
                "questions": questions,
                "summary": compute_summary(issues),
            }
        )

    def _write_debug_prompt(self, prompt: str) -> None:
        path = Path(self.debug_prompt_path)
        try:
            path.write_text(prompt, encoding="utf-8")
            path.chmod(0o600)
        except OSError as e:
            logger.warning(f"Failed to write debug prompt to {path}: {e}")
            return
        logger.info(f"Wrote debug prompt to {path}")

    def _fill_metadata(
        self, review: Review, request: ReviewRequest, inputs: ReviewInputs
    ) -> Review:
        try:
            version = get_version()
        except (FileNotFoundError, ValueError) as e:
            raise PlanCriticException(
                message="cannot determine plancritic version", original_error=e
            )

        return review.model_copy(
            update={
                "tool": TOOL_NAME,
                "version": version,
                "input": Input(
                    plan_file=inputs.plan.name,
                    plan_hash=inputs.plan.hash,
                    context_files=[
                        InputContextFile(path=ctx.name, hash=ctx.hash)
                        for ctx in inputs.contexts
                    ],
                    profile=request.profile,
                    strict=request.strict,
                ),
                "meta": Meta(
                    model=f"{self.provider.name}/{request.model or DEFAULT_MODEL_LABEL}",
                    temperature=request.temperature,
                ),
            }
        )
