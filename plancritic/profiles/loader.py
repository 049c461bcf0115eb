"""
Built-in review profiles: domain constraints, checklists and heuristics
"""

import logging
from importlib.resources import files as pkg_files
from typing import Any, Dict, List

import yaml
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from plancritic.exceptions import InputException

logger = logging.getLogger(__name__)

_BUILTIN_PACKAGE = "plancritic.profiles"
_BUILTIN_DIR = "builtin"
_SUFFIX = ".yaml"


class ProfileChecklist(BaseModel):
    """Named group of checks"""

    id: str
    title: str = ""
    checks: List[str] = Field(default_factory=list)


class Contradiction(BaseModel):
    """Pair of phrases that contradict each other when both appear in a plan"""

    trigger_a: str
    trigger_b: str
    severity: str = "WARN"
    note: str = ""


class Heuristics(BaseModel):
    contradictions: List[Contradiction] = Field(default_factory=list)
    ambiguity_triggers: List[str] = Field(default_factory=list)


class Profile(BaseModel):
    """Review profile loaded from YAML"""

    name: str
    version: int = 1
    description: str = ""
    constraints: Dict[str, Any] = Field(default_factory=dict)
    checklists: List[ProfileChecklist] = Field(default_factory=list)
    heuristics: Heuristics = Field(default_factory=Heuristics)


def _builtin_root():
    return pkg_files(_BUILTIN_PACKAGE).joinpath(_BUILTIN_DIR)


def list_builtin() -> List[str]:
    """Names of the profiles shipped with the package, sorted"""
    return sorted(
        entry.name[: -len(_SUFFIX)]
        for entry in _builtin_root().iterdir()
        if entry.is_file() and entry.name.endswith(_SUFFIX)
    )


def load_builtin(name: str) -> Profile:
    """
    Load a built-in profile by name

    Raises:
        InputException: when the profile does not exist or cannot be parsed
    """
    resource = _builtin_root().joinpath(name + _SUFFIX)
    if not name or not resource.is_file():
        raise InputException(
            message=f"unknown profile {name!r} (available: {', '.join(list_builtin())})",
            details={"profile": name},
        )

    try:
        data = yaml.safe_load(resource.read_text(encoding="utf-8")) or {}
        profile = Profile.model_validate(data)
    except (yaml.YAMLError, PydanticValidationError) as e:
        raise InputException(
            message=f"cannot parse profile {name!r}: {e}",
            details={"profile": name},
            original_error=e,
        )

    logger.debug(f"Loaded profile {profile.name} v{profile.version}")
    return profile


def _render_constraints(constraints: Dict[str, Any], indent: str = "") -> List[str]:
    lines = []
    for key in sorted(constraints):
        value = constraints[key]
        if isinstance(value, dict):
            lines.append(f"{indent}- {key}:")
            lines.extend(_render_constraints(value, indent + "  "))
        elif isinstance(value, list):
            lines.append(f"{indent}- {key}:")
            lines.extend(f"{indent}  - {_scalar(item)}" for item in value)
        else:
            lines.append(f"{indent}- {key}: {_scalar(value)}")
    return lines


def _scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _quoted(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def format_for_prompt(profile: Profile) -> str:
    """Render a profile as a markdown section for the review prompt"""
    parts = [f"## Profile: {profile.name}\n\n"]

    if profile.description:
        parts.append(f"{profile.description.strip()}\n\n")

    if profile.constraints:
        parts.append("### Constraints\n\n")
        parts.append("".join(f"{line}\n" for line in _render_constraints(profile.constraints)))
        parts.append("\n")

    if profile.checklists:
        parts.append("### Checklists\n\n")
        for checklist in profile.checklists:
            parts.append(f"**{checklist.title}** ({checklist.id})\n")
            parts.append("".join(f"- {check}\n" for check in checklist.checks))
            parts.append("\n")

    heuristics = profile.heuristics
    if heuristics.contradictions or heuristics.ambiguity_triggers:
        parts.append("### Heuristics\n\n")
        if heuristics.contradictions:
            parts.append("Watch for these contradiction pairs:\n")
            for pair in heuristics.contradictions:
                parts.append(
                    f"- {_quoted(pair.trigger_a)} vs {_quoted(pair.trigger_b)}"
                    f" → {pair.severity} ({pair.note})\n"
                )
            parts.append("\n")
        if heuristics.ambiguity_triggers:
            parts.append("Flag these vague phrases as ambiguity:\n")
            parts.append("".join(f"- {_quoted(t)}\n" for t in heuristics.ambiguity_triggers))
            parts.append("\n")

    return "".join(parts)
