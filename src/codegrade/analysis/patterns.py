"""Per-language lexical probes used by the structure and dump-code analyses.

Every probe is a tuple of compiled patterns; a probe fires when any of its
patterns matches. Literal-output patterns capture the string argument in a
``lit`` group.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from codegrade.language import Language

Patterns = tuple[re.Pattern[str], ...]

PATTERN_PROBLEM_KEYWORDS = re.compile(
    r"pattern|pyramid|triangle|diamond|matrix|array", re.IGNORECASE
)

_DQ_STRING = r'"(?:[^"\\\n]|\\.)*"'
_SQ_STRING = r"'(?:[^'\\\n]|\\.)*'"
_PY_PLAIN_STRING = (
    r"(?:[rRuUbB]|[bB][rR]|[rR][bB])?"
    r"(?:\"\"\"[\s\S]*?\"\"\"|'''[\s\S]*?'''|" + _DQ_STRING + "|" + _SQ_STRING + ")"
)
# An f-string is still a literal while it has no {placeholder}; {{ and }} are escapes.
_F_DQ_STRING = r'"(?:\{\{|\}\}|\\.|[^"{}\\\n])*"'
_F_SQ_STRING = r"'(?:\{\{|\}\}|\\.|[^'{}\\\n])*'"
_PY_F_STRING = (
    r"(?:[fF][rR]?|[rR][fF])"
    r"(?:\"\"\"(?:\{\{|\}\}|[^{}])*?\"\"\"|'''(?:\{\{|\}\}|[^{}])*?'''|"
    + _F_DQ_STRING
    + "|"
    + _F_SQ_STRING
    + ")"
)
_PY_STRING = r"(?:" + _PY_F_STRING + "|" + _PY_PLAIN_STRING + ")"
_JS_TEMPLATE = r"`(?:[^`\\$]|\\.|\$(?!\{))*`"


@dataclass(frozen=True)
class LanguagePatterns:
    loops: Patterns
    variables: Patterns
    input_handling: Patterns
    literal_outputs: Patterns
    functions: Patterns
    comments: Patterns


_C_LOOPS = (re.compile(r"\b(?:for|while)\s*\("), re.compile(r"\bdo\s*\{"))
_C_COMMENTS = (re.compile(r"//|/\*"),)

C_PATTERNS = LanguagePatterns(
    loops=_C_LOOPS,
    variables=(
        re.compile(
            r"\b(?:int|float|double|char|string|auto|long|short|bool|unsigned|size_t)"
            r"\s+\**\w+\s*[;=,\[]"
        ),
    ),
    input_handling=(re.compile(r"\b(?:cin|scanf|getline|fgets|getchar)\b"),),
    literal_outputs=(
        re.compile(
            r"\bcout\s*<<\s*(?P<lit>" + _DQ_STRING + r")\s*"
            r"(?:<<\s*(?:std::)?endl\s*|<<\s*\"\\n\"\s*|<<\s*'\\n'\s*)?;"
        ),
        re.compile(r"\b(?:printf|puts)\s*\(\s*(?P<lit>" + _DQ_STRING + r")\s*\)\s*;"),
    ),
    functions=(
        re.compile(
            r"\b(?:void|int|float|double|char|bool|long|auto|string)\s+\**\w+\s*\("
        ),
    ),
    comments=_C_COMMENTS,
)

PYTHON_PATTERNS = LanguagePatterns(
    loops=(
        re.compile(r"^\s*while\b.*:", re.MULTILINE),
        re.compile(r"\bfor\s+\w+(?:\s*,\s*\w+)*\s+in\b"),
    ),
    variables=(
        re.compile(
            r"^\s*[A-Za-z_]\w*(?:\s*,\s*[A-Za-z_]\w*)*\s*(?:[-+*/%]|//|\*\*)?=(?!=)\s*(?![\s'\"])",
            re.MULTILINE,
        ),
    ),
    input_handling=(re.compile(r"\binput\s*\("), re.compile(r"\bsys\.stdin\b")),
    literal_outputs=(
        re.compile(r"(?<![\w.])print\s*\(\s*(?P<lit>" + _PY_STRING + r")\s*\)"),
    ),
    functions=(re.compile(r"^\s*(?:async\s+)?def\s+\w+\s*\(", re.MULTILINE),),
    comments=(re.compile(r"(?:^|\s)#", re.MULTILINE),),
)

JAVASCRIPT_PATTERNS = LanguagePatterns(
    loops=_C_LOOPS,
    variables=(re.compile(r"\b(?:var|let|const)\s+[\w$]+\s*[;=,]"),),
    input_handling=(
        re.compile(r"\b(?:prompt|readline)\b"),
        re.compile(r"\bprocess\.stdin\b"),
    ),
    literal_outputs=(
        re.compile(
            r"\bconsole\.log\s*\(\s*(?P<lit>"
            + _DQ_STRING
            + "|"
            + _SQ_STRING
            + "|"
            + _JS_TEMPLATE
            + r")\s*\)\s*;?"
        ),
    ),
    functions=(re.compile(r"\bfunction\b\s*[\w$]*\s*\("), re.compile(r"=>")),
    comments=_C_COMMENTS,
)

JAVA_PATTERNS = LanguagePatterns(
    loops=_C_LOOPS,
    variables=(
        re.compile(
            r"\b(?:int|float|double|char|String|long|short|boolean|byte|var)"
            r"(?:\[\])?\s+\w+\s*[;=,\[]"
        ),
    ),
    input_handling=(
        re.compile(r"\b(?:Scanner|BufferedReader)\b"),
        re.compile(r"\bSystem\.in\b"),
    ),
    literal_outputs=(
        re.compile(
            r"\bSystem\.out\.print(?:ln)?\s*\(\s*(?P<lit>" + _DQ_STRING + r")\s*\)\s*;"
        ),
    ),
    functions=(
        re.compile(
            r"\b(?:public|private|protected|static)\s+(?:static\s+|final\s+)*"
            r"[\w<>\[\]]+\s+\w+\s*\("
        ),
    ),
    comments=_C_COMMENTS,
)


def _union(*families: LanguagePatterns) -> LanguagePatterns:
    def merge(attr: str) -> Patterns:
        merged: list[re.Pattern[str]] = []
        for family in families:
            for pattern in getattr(family, attr):
                if pattern not in merged:
                    merged.append(pattern)
        return tuple(merged)

    return LanguagePatterns(
        loops=merge("loops"),
        variables=merge("variables"),
        input_handling=merge("input_handling"),
        literal_outputs=merge("literal_outputs"),
        functions=merge("functions"),
        comments=merge("comments"),
    )


GENERIC_PATTERNS = _union(C_PATTERNS, PYTHON_PATTERNS, JAVASCRIPT_PATTERNS, JAVA_PATTERNS)

_PATTERNS: dict[Language, LanguagePatterns] = {
    Language.C: C_PATTERNS,
    Language.CPP: C_PATTERNS,
    Language.PYTHON: PYTHON_PATTERNS,
    Language.JAVASCRIPT: JAVASCRIPT_PATTERNS,
    Language.JAVA: JAVA_PATTERNS,
}


def get_patterns(language: Language) -> LanguagePatterns:
    """Return the probe table for *language*, falling back to the generic union."""
    return _PATTERNS.get(language, GENERIC_PATTERNS)


def matches_any(patterns: Patterns, code: str) -> bool:
    return any(p.search(code) for p in patterns)
