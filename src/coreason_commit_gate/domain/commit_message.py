"""
Conventional commit grammar: ``type(scope)!: description``.
"""

import re
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel

from coreason_commit_gate.exceptions import CommitMessageError


class CommitType(str, Enum):
    FEAT = "feat"
    FIX = "fix"
    DOCS = "docs"
    STYLE = "style"
    REFACTOR = "refactor"
    PERF = "perf"
    TEST = "test"
    BUILD = "build"
    CI = "ci"
    CHORE = "chore"
    REVERT = "revert"

    @classmethod
    def values(cls) -> List[str]:
        return [member.value for member in cls]


HEADER_PATTERN = re.compile(
    r"^(?P<type>[^\s():!]+)(?:\((?P<scope>[^()]*)\))?(?P<breaking>!)?:(?P<space>\s*)(?P<description>.*)$"
)

# Everything below this line is discarded by git when committing with --verbose
SCISSORS_LINE = "# ------------------------ >8 ------------------------"

# Messages generated by git itself
IGNORED_PREFIXES = ("Merge ", 'Revert "', "fixup! ", "squash! ", "amend! ")

DEFAULT_HEADER_MAX_LENGTH = 100


class ConventionalCommit(BaseModel):
    type: CommitType
    scope: Optional[str] = None
    breaking: bool = False
    description: str
    body: Optional[str] = None

    model_config = {"frozen": True}


def clean_message(raw: str) -> List[str]:
    """Drops comment lines and the verbose diff, then trims blank lines at both ends."""
    lines: List[str] = []
    for line in raw.splitlines():
        if line.rstrip() == SCISSORS_LINE:
            break
        if line.startswith("#"):
            continue
        lines.append(line.rstrip())

    while lines and not lines[0].strip():
        lines.pop(0)
    while lines and not lines[-1].strip():
        lines.pop()
    return lines


def is_ignored(header: str) -> bool:
    return header.startswith(IGNORED_PREFIXES)


def _check_header(header: str, header_max_length: int) -> List[str]:
    violations: List[str] = []

    if len(header) > header_max_length:
        violations.append(f"header must not be longer than {header_max_length} characters (got {len(header)})")

    match = HEADER_PATTERN.match(header)
    if not match:
        violations.append(
            f"header must match 'type(scope): description', got '{header}'. "
            f"Allowed types: {', '.join(CommitType.values())}"
        )
        return violations

    commit_type = match.group("type")
    if commit_type not in CommitType.values():
        violations.append(f"type '{commit_type}' must be one of: {', '.join(CommitType.values())}")

    scope = match.group("scope")
    if scope is not None and not scope.strip():
        violations.append("scope must not be empty when parentheses are given")

    if match.group("space") != " ":
        violations.append("exactly one space is required after the colon")

    if not match.group("description").strip():
        violations.append("description must not be empty")

    return violations


def validate_commit_message(raw: str, header_max_length: int = DEFAULT_HEADER_MAX_LENGTH) -> List[str]:
    """
    Checks a raw commit message against the conventional commit grammar.

    Returns:
        Every violation found. Empty when the message is valid.
    """
    lines = clean_message(raw)
    if not lines:
        return ["commit message must not be empty"]

    header = lines[0]
    if is_ignored(header):
        return []

    violations = _check_header(header, header_max_length)
    if len(lines) > 1 and lines[1].strip():
        violations.append("body must be separated from the header by a blank line")
    return violations


def parse_commit_message(raw: str, header_max_length: int = DEFAULT_HEADER_MAX_LENGTH) -> Optional[ConventionalCommit]:
    """
    Parses a conventional commit message.

    Returns:
        The parsed commit, or None for git-generated messages (merges, fixups).

    Raises:
        CommitMessageError: If the message breaks the grammar.
    """
    violations = validate_commit_message(raw, header_max_length)
    if violations:
        raise CommitMessageError(violations)

    lines = clean_message(raw)
    if is_ignored(lines[0]):
        return None

    match = HEADER_PATTERN.match(lines[0])
    if match is None:
        raise CommitMessageError([f"header must match 'type(scope): description', got '{lines[0]}'"])
    body = "\n".join(lines[2:]).strip() or None
    return ConventionalCommit(
        type=CommitType(match.group("type")),
        scope=match.group("scope"),
        breaking=match.group("breaking") is not None or _has_breaking_footer(lines[2:]),
        description=match.group("description").strip(),
        body=body,
    )


def _has_breaking_footer(body_lines: List[str]) -> bool:
    return any(line.startswith(("BREAKING CHANGE:", "BREAKING-CHANGE:")) for line in body_lines)
