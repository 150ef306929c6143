"""Lexical language detection for raw submission source."""

from __future__ import annotations

import re
from enum import Enum


class Language(str, Enum):
    C = "c"
    CPP = "cpp"
    PYTHON = "python"
    JAVASCRIPT = "javascript"
    JAVA = "java"
    UNKNOWN = "unknown"


_C_FAMILY = (
    re.compile(r"^\s*#\s*include\s*[<\"]", re.MULTILINE),
    # Anchored to line start so Java's "public static void main" is not C.
    re.compile(r"^\s*(?:int|void)\s+main\s*\([^)]*\)\s*\{", re.MULTILINE),
)
_CPP_STREAMS = re.compile(r"\b(?:cout|cin|cerr)\b|<iostream>")

_COMMENTS = re.compile(r"/\*[\s\S]*?\*/|//[^\n]*|#[^\n]*")

_PYTHON = (
    re.compile(r"^\s*def\s+\w+\s*\(", re.MULTILINE),
    # Python imports never end in ';', which keeps Java/JS imports out.
    re.compile(
        r"^\s*(?:import\s+[\w.]+(?:\s+as\s+\w+)?(?:\s*,\s*[\w.]+(?:\s+as\s+\w+)?)*"
        r"|from\s+[\w.]+\s+import\s+[^;\n]+)\s*$",
        re.MULTILINE,
    ),
    re.compile(r"(?<![\w.])print\s*\("),
    re.compile(r"^\s*for\s+\w+(?:\s*,\s*\w+)*\s+in\s+", re.MULTILINE),
)

_JAVASCRIPT = (
    re.compile(r"\bfunction\b\s*\w*\s*\("),
    # A declaration statement, so prose such as "let n be the rows" does not count.
    re.compile(r"(?:^|[(;])\s*(?:const|let)\s+(?:[\w$]+\s*[=;,]|[\[{])", re.MULTILINE),
    re.compile(r"\bconsole\.log\s*\("),
)

_JAVA = (
    re.compile(r"\bpublic\s+(?:final\s+|abstract\s+)?class\s+\w+"),
    re.compile(r"\bpublic\s+static\s+void\s+main\b"),
    re.compile(r"\bSystem\.out\.print"),
)


def _matches_any(patterns: tuple[re.Pattern[str], ...], code: str) -> bool:
    return any(p.search(code) for p in patterns)


def detect_language(code: str | None) -> Language:
    """Return the best-guess language family of *code*.

    Families are checked most-specific-first (C/C++, Python, JavaScript,
    Java) and the first one whose signature matches wins.
    Comments are stripped before every check after the C family, whose
    `#include` signature would otherwise read as a comment.
    """
    if not code or not code.strip():
        return Language.UNKNOWN

    if _matches_any(_C_FAMILY, code):
        return Language.CPP if _CPP_STREAMS.search(code) else Language.C

    code = _COMMENTS.sub("", code)
    if _matches_any(_PYTHON, code):
        return Language.PYTHON
    if _matches_any(_JAVASCRIPT, code):
        return Language.JAVASCRIPT
    if _matches_any(_JAVA, code):
        return Language.JAVA
    return Language.UNKNOWN
