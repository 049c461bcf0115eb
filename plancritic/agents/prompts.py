"""
Prompt text for plan reviews and schema repairs
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from plancritic.inputs import ContextFile, Plan, StepID, line_numbered
from plancritic.profiles import Profile, format_for_prompt
from plancritic.review.truncation import DEFAULT_MAX_ISSUES, DEFAULT_MAX_QUESTIONS
from plancritic.review.validation import ValidationError

PREAMBLE = """You are a plan critic. Your task is to review a software implementation plan and produce a structured critique.

You MUST output ONLY valid JSON matching the schema below. No markdown, no prose outside JSON.

"""

OUTPUT_SCHEMA = """## Output JSON Schema

{
  "tool": "plancritic",
  "version": "1.0",
  "input": {
    "plan_file": string,
    "plan_hash": "sha256:...",
    "context_files": [{"path": string, "hash": "sha256:..."}],
    "profile": string,
    "strict": boolean
  },
  "summary": {
    "verdict": "EXECUTABLE_AS_IS" | "EXECUTABLE_WITH_CLARIFICATIONS" | "NOT_EXECUTABLE",
    "score": integer (0-100),
    "critical_count": integer,
    "warn_count": integer,
    "info_count": integer
  },
  "questions": [{
    "id": "Q-NNNN",
    "severity": "INFO" | "WARN" | "CRITICAL",
    "question": string,
    "why_needed": string,
    "blocks": [string],
    "evidence": [{"source": "plan"|"context", "path": string, "line_start": int, "line_end": int, "quote": string}],
    "suggested_answers": [string]
  }],
  "issues": [{
    "id": "ISSUE-NNNN",
    "severity": "INFO" | "WARN" | "CRITICAL",
    "category": "CONTRADICTION"|"AMBIGUITY"|"MISSING_PREREQUISITE"|"MISSING_ACCEPTANCE_CRITERIA"|"RISK_SECURITY"|"RISK_DATA"|"RISK_OPERATIONS"|"TEST_GAP"|"SCOPE_CREEP_RISK"|"UNREALISTIC_STEP"|"ORDERING_DEPENDENCY"|"UNSPECIFIED_INTERFACE"|"NON_DETERMINISM",
    "title": string,
    "description": string,
    "evidence": [{...}],
    "impact": string,
    "recommendation": string,
    "blocking": boolean,
    "tags": [string]
  }],
  "patches": [{
    "id": "PATCH-NNNN",
    "type": "PLAN_TEXT_EDIT",
    "title": string,
    "diff_unified": string
  }],
  "checklists": [{
    "id": string,
    "title": string,
    "checks": [{"check": string, "status": "PASS"|"FAIL"|"N/A"}]
  }],
  "meta": {
    "model": string,
    "temperature": float
  }
}"""

RULES = """## Rules

1. Cite evidence for every issue and question using exact line numbers and quotes from the plan or context.
2. Do NOT invent facts about the repository, codebase, or environment that are not present in the plan or context files.
3. Keep the number of questions minimal: only ask what is needed to unblock execution.
4. Order issues by severity (CRITICAL first, then WARN, then INFO), then by line number of first evidence.
5. The verdict must be one of: EXECUTABLE_AS_IS, EXECUTABLE_WITH_CLARIFICATIONS, NOT_EXECUTABLE.
6. Compute the score starting at 100, subtracting 20 per CRITICAL, 7 per WARN, 2 per INFO, clamped at 0.

"""

STRICT_MODE = """## Strict Grounding Mode (ENABLED)

- Treat everything NOT present in the plan or context files as UNKNOWN.
- Do NOT claim "the repo uses X" unless X appears in the provided context.
- Recommendations may be generic but MUST be labeled as such ("If applicable...").
- Any uncertain inference MUST be tagged with "assumption" and severity capped at WARN.

"""


@dataclass
class PromptOptions:
    """Everything the review prompt is assembled from"""

    plan: Plan
    contexts: Sequence[ContextFile] = ()
    profile: Optional[Profile] = None
    strict: bool = False
    step_ids: List[StepID] = field(default_factory=list)
    max_issues: int = 0
    max_questions: int = 0


def _quote_attr(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def build_prompt(options: PromptOptions) -> str:
    """
    Assemble the review prompt.

    Sections, in order: preamble, output schema, rules, strict-mode block,
    profile, line-numbered plan, context files, inferred steps and the output
    caps. Only basenames of files are included.
    """
    parts = [PREAMBLE, OUTPUT_SCHEMA, "\n\n", RULES]

    if options.strict:
        parts.append(STRICT_MODE)

    if options.profile is not None:
        parts.append(format_for_prompt(options.profile))
        parts.append("\n")

    plan = options.plan
    parts.append(
        f"<plan path={_quote_attr(plan.name)}>\n{line_numbered(plan.lines)}</plan>\n\n"
    )

    for context in options.contexts:
        parts.append(
            f"<context path={_quote_attr(context.name)}>\n"
            f"{line_numbered(context.lines)}</context>\n\n"
        )

    if options.step_ids:
        parts.append("## Inferred Plan Steps\n\n")
        for step in options.step_ids:
            parts.append(f"- {step.id} (L{step.line_start}): {step.text}\n")
        parts.append("\n")

    max_issues = options.max_issues if options.max_issues > 0 else DEFAULT_MAX_ISSUES
    max_questions = options.max_questions if options.max_questions > 0 else DEFAULT_MAX_QUESTIONS
    parts.append(f"Return at most {max_issues} issues and {max_questions} questions.\n")

    return "".join(parts)


def build_repair_prompt(original_output: str, errors: Sequence[ValidationError]) -> str:
    """Ask the model to fix only the listed validation errors in its previous output"""
    error_lines = "".join(f"- {error.path}: {error.message}\n" for error in errors)
    return (
        "The JSON output you returned has validation errors. "
        "Fix ONLY the errors listed below and return the corrected JSON.\n\n"
        "## Validation Errors\n\n"
        f"{error_lines}"
        "\n## Original Output\n\n```json\n"
        f"{original_output}"
        "\n```\n\nReturn ONLY the corrected JSON. No prose.\n"
    )
