"""
Secret redaction applied to plan and context text before it leaves the machine
"""

import re
from dataclasses import dataclass
from typing import Iterable, Match, Pattern, Tuple

REDACTED = "[REDACTED]"

DEFAULT_SECRET_PATTERNS: Tuple[str, ...] = (
    # AWS access key IDs
    r"AKIA[0-9A-Z]{16}",
    # AWS secret access keys
    r"(?i)(aws_secret_access_key|aws_secret)\s*[:=]\s*[A-Za-z0-9/+=]{40}",
    # Private key blocks
    r"-----BEGIN [A-Z ]+PRIVATE KEY-----[\s\S]*?-----END [A-Z ]+PRIVATE KEY-----",
    # Bearer tokens
    r"Bearer\s+[A-Za-z0-9\-._~+/]+=*",
    # Generic key/secret/token/password assignments
    r"(?i)(api[_-]?key|api[_-]?secret|secret[_-]?key|token|password|passwd|credentials)\s*[:=]\s*\S+",
)


@dataclass(frozen=True)
class Redactor:
    """Ordered set of compiled secret patterns"""

    patterns: Tuple[Pattern[str], ...]

    @classmethod
    def from_strings(cls, patterns: Iterable[str]) -> "Redactor":
        return cls(patterns=tuple(re.compile(pattern) for pattern in patterns))

    def redact(self, text: str) -> str:
        """
        Replace every secret match with [REDACTED], pattern by pattern.

        Newlines inside a match are kept after the marker, so line numbers in
        the redacted text still point at the same lines of the original file.
        """
        for pattern in self.patterns:
            text = pattern.sub(_redacted_match, text)
        return text


def _redacted_match(match: Match[str]) -> str:
    return REDACTED + "\n" * match.group(0).count("\n")


DEFAULT_REDACTOR = Redactor.from_strings(DEFAULT_SECRET_PATTERNS)
