"""Pytest configuration and fixtures for the PlanCritic tests."""

import logging
from pathlib import Path
from typing import Callable, List

import pytest

from plancritic.config.settings import get_settings
from plancritic.models.review_models import Evidence, Issue, Question, Review
from plancritic.review import compute_summary

PROVIDER_ENV_VARS = (
    "ANTHROPIC_API_KEY",
    "ANTHROPIC_BASE_URL",
    "OPENAI_API_KEY",
    "OPENAI_BASE_URL",
    "AI_MODEL",
    "LOG_LEVEL",
    "MAX_ISSUES",
    "MAX_QUESTIONS",
)

SAMPLE_PLAN = """# Add caching layer

## 1. Provision Redis
Create a Redis instance for the session cache.

## 2. Wire the client
- Add the Redis client to the API service
- Configure timeouts as needed

## 3. Deploy
Roll out to production.
"""


# ============================================================================
# Environment Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Run every test without provider keys, .env files or cached settings."""
    for name in PROVIDER_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()

    # The CLI reconfigures the root logger onto the runner's stderr
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    get_settings.cache_clear()


# ============================================================================
# File Fixtures
# ============================================================================


@pytest.fixture
def write_file(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing a file under tmp_path and returning its path."""

    def _write(name: str, content: str) -> Path:
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def plan_file(write_file) -> Path:
    """A small markdown plan on disk."""
    return write_file("plan.md", SAMPLE_PLAN)


# ============================================================================
# Review Fixtures
# ============================================================================


def _evidence(line_start: int = 1, line_end: int = 0, **overrides) -> Evidence:
    values = {
        "source": "plan",
        "path": "plan.md",
        "line_start": line_start,
        "line_end": line_end or line_start,
        "quote": "Provision Redis",
    }
    values.update(overrides)
    return Evidence(**values)


def _issue(
    issue_id: str = "ISSUE-0001",
    severity: str = "WARN",
    line: int = 1,
    **overrides,
) -> Issue:
    values = {
        "id": issue_id,
        "severity": severity,
        "category": "AMBIGUITY",
        "title": f"Issue {issue_id}",
        "description": "Step is underspecified.",
        "evidence": [_evidence(line)],
        "impact": "Implementer has to guess.",
        "recommendation": "Spell out the step.",
        "blocking": False,
    }
    values.update(overrides)
    return Issue(**values)


def _question(
    question_id: str = "Q-0001", severity: str = "WARN", line: int = 1, **overrides
) -> Question:
    values = {
        "id": question_id,
        "severity": severity,
        "question": "Which Redis version?",
        "why_needed": "Client options differ between versions.",
        "evidence": [_evidence(line)],
    }
    values.update(overrides)
    return Question(**values)


def _review(
    issues: List[Issue] = None, questions: List[Question] = None, **overrides
) -> Review:
    """A review whose summary is consistent with its issues."""
    issues = list(issues or [])
    values = {
        "tool": "plancritic",
        "version": "1.0",
        "summary": compute_summary(issues),
        "issues": issues,
        "questions": list(questions or []),
    }
    values.update(overrides)
    return Review(**values)


@pytest.fixture
def make_evidence():
    """Factory for evidence entries."""
    return _evidence


@pytest.fixture
def make_issue():
    """Factory for schema-valid issues."""
    return _issue


@pytest.fixture
def make_question():
    """Factory for schema-valid questions."""
    return _question


@pytest.fixture
def make_review():
    """Factory for reviews with a consistent summary."""
    return _review


@pytest.fixture
def valid_review() -> Review:
    """A schema-valid review with one blocking critical issue and one question."""
    return _review(
        issues=[
            _issue(
                "ISSUE-0001",
                "CRITICAL",
                line=4,
                category="MISSING_PREREQUISITE",
                blocking=True,
            ),
            _issue("ISSUE-0002", "INFO", line=9),
        ],
        questions=[_question("Q-0001", "WARN", line=9)],
    )


@pytest.fixture
def valid_response(valid_review: Review) -> str:
    """Provider output that passes schema validation on the first attempt."""
    return valid_review.model_dump_json()
