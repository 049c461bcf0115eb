"""
Loading of plan and context files
"""

import hashlib
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence, Tuple, Union

from plancritic.exceptions import InputException

logger = logging.getLogger(__name__)

# "## Title" or "## 1. Title"
_HEADING_PATTERN = re.compile(r"^#{1,6}\s+(?:\d+[.)]\s*)?(.+)")
# "1. Step text"
_NUMBERED_PATTERN = re.compile(r"^\d+[.)]\s+(.+)")
# "- Step text"
_DASH_PATTERN = re.compile(r"^-\s+(.+)")

_STEP_PATTERNS = (_HEADING_PATTERN, _NUMBERED_PATTERN, _DASH_PATTERN)


@dataclass
class SourceFile:
    """A text file handed to the reviewer, with its SHA-256 digest"""

    path: str
    raw: str
    hash: str

    @property
    def lines(self) -> List[str]:
        return self.raw.split("\n")

    @property
    def name(self) -> str:
        """Basename, the only part of the path shown to the model"""
        return Path(self.path).name

    def with_text(self, raw: str) -> "SourceFile":
        """Copy with replaced content; the hash still identifies the file on disk"""
        return type(self)(path=self.path, raw=raw, hash=self.hash)


class Plan(SourceFile):
    """The plan under review"""


class ContextFile(SourceFile):
    """Supporting material the reviewer may cite"""


@dataclass(frozen=True)
class StepID:
    """Step heading or bullet detected in the plan"""

    id: str
    line_start: int
    line_end: int
    text: str


def _read(path: Union[str, Path], kind: str) -> Tuple[str, str]:
    file_path = Path(path)
    try:
        data = file_path.read_bytes()
    except OSError as e:
        raise InputException(
            message=f"cannot read {kind} file: {e.strerror or e}",
            path=str(path),
            original_error=e,
        )

    try:
        raw = data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise InputException(
            message=f"{kind} file is not valid UTF-8",
            path=str(path),
            original_error=e,
        )

    digest = f"sha256:{hashlib.sha256(data).hexdigest()}"
    logger.debug(f"Loaded {kind} {path} ({len(data)} bytes, {digest})")
    return raw, digest


def load_plan(path: Union[str, Path]) -> Plan:
    """Read a plan file and hash its bytes"""
    raw, digest = _read(path, "plan")
    return Plan(path=str(path), raw=raw, hash=digest)


def load_context(path: Union[str, Path]) -> ContextFile:
    """Read a context file and hash its bytes"""
    raw, digest = _read(path, "context")
    return ContextFile(path=str(path), raw=raw, hash=digest)


def _line_number_width(total_lines: int) -> int:
    if total_lines >= 10000:
        return 5
    if total_lines >= 1000:
        return 4
    return 3


def line_numbered(lines: Sequence[str]) -> str:
    """Prefix every line with its 1-based number, e.g. 'L007: text'"""
    width = _line_number_width(len(lines))
    return "".join(f"L{number:0{width}d}: {line}\n" for number, line in enumerate(lines, 1))


def infer_step_ids(lines: Sequence[str]) -> List[StepID]:
    """
    Assign P-NNN identifiers to plan steps.

    Markdown headings, numbered bullets and dash bullets each count as a step,
    numbered in order of appearance.
    """
    steps: List[StepID] = []

    for index, line in enumerate(lines):
        trimmed = line.strip()
        if not trimmed:
            continue

        for pattern in _STEP_PATTERNS:
            match = pattern.match(trimmed)
            if match:
                break
        else:
            continue

        steps.append(
            StepID(
                id=f"P-{len(steps) + 1:03d}",
                line_start=index + 1,
                line_end=index + 1,
                text=match.group(1).strip(),
            )
        )

    return steps
