"""Parser for the branch-health policy document.

The policy format is a small, indentation-scoped subset of YAML: ``key: value``
pairs, nested mappings, ``- item`` lists and ``#`` comments. The parser knows
nothing about the policy schema. It never raises; lines it cannot make sense of
are dropped, which downstream means "use the default".

Example::

    staleness:
      warning: 14   # days
    ignoreBranches:
      - main
      - release/*

parses to ``{"staleness": {"warning": 14}, "ignoreBranches": ["main", "release/*"]}``.
"""

import math
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Union

from branch_health.logging_config import get_logger

logger = get_logger(__name__)

PolicyScalar = Union[str, int, float, bool]
PolicyValue = Union[PolicyScalar, List["PolicyValue"], Dict[str, "PolicyValue"]]
PolicyMapping = Dict[str, PolicyValue]

_LIST_ITEM_RE = re.compile(r"^(\s*)-\s*(.*)$")
_KEY_VALUE_RE = re.compile(r"^(\s*)([^:]+):\s*(.*)$")
_INT_RE = re.compile(r"^[-+]?\d+$")
_FLOAT_RE = re.compile(r"^[-+]?(\d+\.\d*|\.\d+|\d+)([eE][-+]?\d+)?$")


@dataclass
class _Frame:
    """One level of the indentation stack.

    For a mapping level ``container`` is the mapping being filled. For a list
    level ``container`` is the mapping that owns the list and ``array_key``
    names it.
    """

    indent: int
    container: PolicyMapping
    array_key: Optional[str] = None


def parse_scalar(raw: str) -> PolicyScalar:
    """Convert a raw scalar to bool, int, float or (trimmed) str.

    A number is produced only when it prints back as the same literal, so
    ``007``, ``+4`` and ``2.10`` stay text.
    """
    value = raw.strip()
    if value == "true":
        return True
    if value == "false":
        return False
    if _INT_RE.match(value):
        number = int(value)
        if str(number) == value:
            return number
        return value
    if _FLOAT_RE.match(value):
        number = float(value)
        if math.isfinite(number) and str(number) == value:
            return number
    return value


def _strip_inline_comment(value: str) -> str:
    comment_index = value.find("#")
    if comment_index != -1:
        value = value[:comment_index]
    return value.strip()


def _is_content(line: str) -> bool:
    stripped = line.strip()
    return bool(stripped) and not stripped.startswith("#")


def _next_content_line(lines: List[str], start: int) -> str:
    """Return the next non-blank, non-comment line (trimmed), or ''."""
    for line in lines[start:]:
        if _is_content(line):
            return line.strip()
    return ""


def parse_policy(text: str) -> PolicyMapping:
    """Parse a policy document into nested dicts, lists and scalars."""
    result: PolicyMapping = {}
    stack: List[_Frame] = [_Frame(indent=-1, container=result)]
    lines = [line.rstrip("\r") for line in text.split("\n")]

    for index, line in enumerate(lines):
        if not _is_content(line):
            continue

        indent = len(line) - len(line.lstrip())

        # Close every level that this line is not nested inside of
        while len(stack) > 1 and stack[-1].indent >= indent:
            stack.pop()
        frame = stack[-1]

        list_match = _LIST_ITEM_RE.match(line)
        if list_match:
            target = frame.container.get(frame.array_key) if frame.array_key else None
            if isinstance(target, list):
                target.append(parse_scalar(_strip_inline_comment(list_match.group(2))))
            else:
                logger.debug(f"Skipping list item outside of a list on line {index + 1}")
            continue

        key_match = _KEY_VALUE_RE.match(line)
        if not key_match or not key_match.group(2).strip():
            logger.debug(f"Skipping malformed policy line {index + 1}: {line.strip()!r}")
            continue

        key = key_match.group(2).strip()
        value = _strip_inline_comment(key_match.group(3))

        if value:
            frame.container[key] = parse_scalar(value)
        elif _next_content_line(lines, index + 1).startswith("-"):
            frame.container[key] = []
            stack.append(_Frame(indent=indent, container=frame.container, array_key=key))
        else:
            child: PolicyMapping = {}
            frame.container[key] = child
            stack.append(_Frame(indent=indent, container=child))

    return result
