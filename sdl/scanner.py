# ============================================================================
# CLAUDE CONTEXT - LINE SCANNER
# ============================================================================
# EPOCH: 1 - SDL ENGINE
# STATUS: Engine - Source to significant statements
# PURPOSE: Strip comments and blank lines, keep physical line numbers
# LAST_REVIEWED: 17 OCT 2026
# EXPORTS: Statement, scan, split_outside_parens
# DEPENDENCIES: none
# ============================================================================
"""
Line Scanner

SDL is line-oriented. The scanner turns source text into a list of
statements, each remembering the 1-based physical line it came from so
diagnostics can be mapped back into the editor.

A physical line may hold several statements: "entity A { b: B }" is
scanned as "entity A {", "b: B" and "}". Braces, "//" and "@" inside
parentheses are left alone (they may appear in @default(...) values).
"""

from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class Statement:
    """One significant statement and its source line."""
    line: int
    text: str


def _strip_comment(text: str) -> str:
    """
    Drop a trailing // comment that is outside parentheses.

    A "//" directly after "<alnum>:" is a URL scheme separator
    (@default=http://example.com) and does not start a comment.
    """
    depth = 0
    for i, ch in enumerate(text):
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth = max(depth - 1, 0)
        elif ch == "/" and depth == 0 and text.startswith("//", i) and not _is_scheme(text, i):
            return text[:i]
    return text


def _is_scheme(text: str, i: int) -> bool:
    return i >= 2 and text[i - 1] == ":" and text[i - 2].isalnum()


def _split_braces(text: str) -> List[str]:
    """Split after '{' and around '}' outside parentheses."""
    parts = []
    current = []
    depth = 0
    for ch in text:
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth = max(depth - 1, 0)

        if depth == 0 and ch == "{":
            current.append(ch)
            parts.append("".join(current))
            current = []
        elif depth == 0 and ch == "}":
            parts.append("".join(current))
            parts.append("}")
            current = []
        else:
            current.append(ch)
    parts.append("".join(current))
    return [p.strip() for p in parts if p.strip()]


def scan(source: str) -> List[Statement]:
    """
    Scan SDL source into significant statements.

    Args:
        source: Raw SDL text

    Returns:
        Statements in source order
    """
    statements = []
    for index, raw in enumerate(source.splitlines(), start=1):
        text = raw.strip()
        if not text or text.startswith("//"):
            continue
        text = _strip_comment(text).strip()
        for part in _split_braces(text):
            statements.append(Statement(line=index, text=part))
    return statements


def split_outside_parens(text: str, separator: str) -> List[str]:
    """
    Split on a single-character separator that is outside parentheses.

    Used for modifier clauses ("@") and enum values (",").
    """
    parts = []
    current = []
    depth = 0
    for ch in text:
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth = max(depth - 1, 0)

        if ch == separator and depth == 0:
            parts.append("".join(current))
            current = []
        else:
            current.append(ch)
    parts.append("".join(current))
    return parts
