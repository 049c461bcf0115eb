"""
Validate-and-repair loop around a single review generation
"""

import logging
from enum import Enum
from typing import List, Optional, Tuple

from plancritic.agents.parsers import parse_review
from plancritic.agents.prompts import build_repair_prompt
from plancritic.agents.providers import GenerationSettings, LLMProvider
from plancritic.exceptions import ReviewParseException, SchemaValidationException
from plancritic.models.review_models import Review
from plancritic.review.validation import ValidationError, validate

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 2

# Path reported to the model when its previous output could not be parsed at all
PARSE_ERROR_PATH = "(response)"


class RepairState(str, Enum):
    PENDING = "PENDING"
    VALIDATED = "VALIDATED"
    FAILED = "FAILED"


class RepairOrchestrator:
    """
    Drive one provider through at most two generations.

    The first response is parsed and validated; if either step fails, a repair
    prompt listing every problem plus the verbatim output goes back to the
    provider once. A failure on the second response is terminal and raises the
    second attempt's error. Provider errors propagate immediately.
    """

    def __init__(
        self,
        provider: LLMProvider,
        settings: GenerationSettings,
        plan_line_count: int = 0,
    ):
        self.provider = provider
        self.settings = settings
        self.plan_line_count = plan_line_count
        self.state = RepairState.PENDING
        self.attempts = 0
        self.last_errors: List[ValidationError] = []

    def run(self, prompt: str) -> Review:
        """
        Generate, validate and, if needed, repair a review

        Raises:
            AIProviderException: when the provider call fails
            ReviewParseException: when the repaired response is not review JSON
            SchemaValidationException: when the repaired response is still invalid
        """
        if self.state is not RepairState.PENDING:
            raise RuntimeError(f"orchestrator already ran (state {self.state.value})")

        raw = self._generate(prompt)
        review, errors = self._check(raw)
        if review is not None and not errors:
            return self._validated(review)

        logger.warning(
            f"Attempt 1 failed validation with {len(errors)} error(s), requesting repair",
            extra={"operation": "review_repair", "error_count": len(errors)},
        )
        for error in errors:
            logger.debug(f"  {error}")

        raw = self._generate(build_repair_prompt(raw, errors))
        try:
            review, errors = self._check(raw, final=True)
        except ReviewParseException:
            self.state = RepairState.FAILED
            raise

        if errors:
            self.state = RepairState.FAILED
            self.last_errors = errors
            raise SchemaValidationException(
                message="LLM output failed schema validation after repair",
                errors=errors,
                attempt=self.attempts,
            )
        return self._validated(review)

    def _generate(self, prompt: str) -> str:
        self.attempts += 1
        try:
            raw = self.provider.generate(prompt, self.settings)
        except Exception:
            self.state = RepairState.FAILED
            raise
        logger.info(
            f"Received response {self.attempts}/{MAX_ATTEMPTS} ({len(raw)} bytes)",
            extra={"operation": "review_generate", "attempt": self.attempts},
        )
        return raw

    def _check(
        self, raw: str, final: bool = False
    ) -> Tuple[Optional[Review], List[ValidationError]]:
        try:
            review = parse_review(raw, attempt=self.attempts)
        except ReviewParseException as e:
            if final:
                raise
            return None, [ValidationError(path=PARSE_ERROR_PATH, message=e.message)]

        errors = validate(review, self.plan_line_count)
        self.last_errors = errors
        return review, errors

    def _validated(self, review: Review) -> Review:
        self.state = RepairState.VALIDATED
        self.last_errors = []
        logger.info(
            f"Review validated after {self.attempts} attempt(s)",
            extra={"operation": "review_validated", "attempt": self.attempts},
        )
        return review
