"""
Review profiles
"""

from .loader import (
    Contradiction,
    Heuristics,
    Profile,
    ProfileChecklist,
    format_for_prompt,
    list_builtin,
    load_builtin,
)

__all__ = [
    "Contradiction",
    "Heuristics",
    "Profile",
    "ProfileChecklist",
    "format_for_prompt",
    "list_builtin",
    "load_builtin",
]
