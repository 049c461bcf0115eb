"""
Utility modules for PlanCritic
"""

from .redaction import DEFAULT_REDACTOR, Redactor
from .version import get_version

__all__ = ["DEFAULT_REDACTOR", "Redactor", "get_version"]
