"""
JSON serialization of a finished review
"""

from plancritic.models.review_models import Review


def render_json(review: Review) -> str:
    """Two-space indented JSON with a trailing newline; field order is fixed by the model"""
    return review.model_dump_json(indent=2) + "\n"
