"""
Custom exception hierarchy for PlanCritic
"""

from typing import Any, Dict, List, Optional


class PlanCriticException(Exception):
    """Base exception for all PlanCritic errors"""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.original_error = original_error

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message


class InputException(PlanCriticException):
    """Plan, context, profile or flag input errors"""

    def __init__(self, message: str, path: Optional[str] = None, **kwargs):
        details = kwargs.get("details", {})
        if path:
            details["path"] = path

        super().__init__(message, details, kwargs.get("original_error"))
        self.path = path


class ConfigurationException(PlanCriticException):
    """Configuration validation errors"""

    def __init__(self, message: str, config_key: Optional[str] = None, **kwargs):
        details = kwargs.get("details", {})
        if config_key:
            details["config_key"] = config_key

        super().__init__(message, details, kwargs.get("original_error"))


class AIProviderException(PlanCriticException):
    """AI provider resolution or generation errors"""

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        model: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.get("details", {})
        if provider:
            details["provider"] = provider
        if model:
            details["model"] = model

        super().__init__(message, details, kwargs.get("original_error"))
        self.provider = provider
        self.model = model


class ReviewParseException(PlanCriticException):
    """Provider response is not well-formed review JSON"""

    def __init__(self, message: str, attempt: Optional[int] = None, **kwargs):
        details = kwargs.get("details", {})
        if attempt:
            details["attempt"] = attempt

        super().__init__(message, details, kwargs.get("original_error"))
        self.attempt = attempt


class SchemaValidationException(PlanCriticException):
    """Review JSON parsed but violates the review schema"""

    def __init__(
        self,
        message: str,
        errors: Optional[List[Any]] = None,
        attempt: Optional[int] = None,
        **kwargs,
    ):
        details = kwargs.get("details", {})
        if errors:
            details["error_count"] = len(errors)
        if attempt:
            details["attempt"] = attempt

        super().__init__(message, details, kwargs.get("original_error"))
        self.errors = list(errors or [])
        self.attempt = attempt
