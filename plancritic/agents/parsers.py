"""
Parsing of raw LLM responses into review objects
"""

import json
import logging
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from plancritic.exceptions import ReviewParseException
from plancritic.models.review_models import Review

logger = logging.getLogger(__name__)

_FENCE = "```"


def extract_json(text: str) -> str:
    """
    Strip whitespace and a surrounding markdown code fence.

    Handles ```json and bare ``` openers, and a missing closing fence.
    """
    text = text.strip()
    if not text.startswith(_FENCE):
        return text

    newline = text.find("\n")
    text = text[newline + 1 :] if newline != -1 else ""
    text = text.rstrip()
    if text.endswith(_FENCE):
        text = text[: -len(_FENCE)]
    return text.strip()


def _decode(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        # Prose around the payload: fall back to the first complete object
        start = text.find("{")
        if start == -1:
            raise
        obj, _ = json.JSONDecoder().raw_decode(text[start:])
        return obj


def parse_review(raw_text: str, attempt: Optional[int] = None) -> Review:
    """
    Parse provider output into a Review.

    Absent fields take their zero values, so only malformed JSON or values of
    the wrong shape fail here; everything else is left to the schema validator.

    Raises:
        ReviewParseException: when the text is not a review-shaped JSON object
    """
    payload = extract_json(raw_text)
    try:
        obj = _decode(payload)
    except json.JSONDecodeError as e:
        logger.warning(f"JSON decode error: {e}")
        raise ReviewParseException(
            message=f"response is not valid JSON: {e}",
            attempt=attempt,
            original_error=e,
        )

    if not isinstance(obj, dict):
        raise ReviewParseException(
            message=f"response JSON is a {type(obj).__name__}, expected an object",
            attempt=attempt,
        )

    try:
        return Review.model_validate(obj)
    except PydanticValidationError as e:
        logger.warning(f"Review structure error: {e}")
        raise ReviewParseException(
            message=f"response JSON does not match the review structure: {e.error_count()} error(s)",
            attempt=attempt,
            original_error=e,
        )
