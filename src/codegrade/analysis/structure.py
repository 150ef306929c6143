"""Structural feature extraction: does the submission look like real code?"""

from __future__ import annotations

import logging
import re

from codegrade.analysis.base import LiteralOutput, SourceScan
from codegrade.analysis.patterns import LanguagePatterns, get_patterns, matches_any
from codegrade.language import Language, detect_language
from codegrade.models import StructuralFeatures

BASE_STRUCTURE_SCORE = 50.0
LOOPS_BONUS = 15.0
VARIABLES_BONUS = 15.0
INPUT_HANDLING_BONUS = 10.0
NO_HARDCODED_OUTPUT_BONUS = 10.0
FUNCTIONS_BONUS = 10.0
COMMENTS_BONUS = 5.0
INDENTATION_BONUS = 5.0

# Text allowed between two literal outputs for them to count as back-to-back.
_GAP_NOISE = re.compile(r"//[^\n]*|/\*[\s\S]*?\*/|#[^\n]*|[\s;]+")
_LITERAL_BODY = re.compile(r"^[rRuUbBfF]{0,2}(\"\"\"|'''|[\"'`])([\s\S]*)\1$")
_LINE_BREAK = re.compile(r"\\n|\n")


def find_literal_outputs(code: str, patterns: LanguagePatterns) -> list[LiteralOutput]:
    """Return non-overlapping literal output calls in source order."""
    found = [
        LiteralOutput(start=m.start(), end=m.end(), literal=m.group("lit"))
        for pattern in patterns.literal_outputs
        for m in pattern.finditer(code)
    ]
    found.sort(key=lambda o: (o.start, -o.end))

    outputs: list[LiteralOutput] = []
    for output in found:
        if outputs and output.start < outputs[-1].end:
            continue
        outputs.append(output)
    return outputs


def has_back_to_back_outputs(code: str, outputs: list[LiteralOutput]) -> bool:
    """True when two literal outputs are separated only by whitespace,
    semicolons or comments (no loop or other statement in between)."""
    for previous, current in zip(outputs, outputs[1:]):
        gap = code[previous.end : current.start]
        if not _GAP_NOISE.sub("", gap):
            return True
    return False


def literal_segments(literal: str) -> list[str]:
    """Split a string literal on embedded newlines, dropping blank segments."""
    match = _LITERAL_BODY.match(literal)
    body = match.group(2) if match else literal
    return [segment for segment in _LINE_BREAK.split(body) if segment.strip()]


def is_multiline_literal(literal: str) -> bool:
    return len(literal_segments(literal)) >= 2


def has_consistent_indentation(code: str) -> bool:
    """At least two indented lines, one indent character, and every space
    indent a multiple of the smallest one."""
    indents = [
        line[: len(line) - len(line.lstrip())]
        for line in code.splitlines()
        if line.strip() and line[:1] in (" ", "\t")
    ]
    if len(indents) < 2:
        return False

    chars = set("".join(indents))
    if len(chars) != 1:
        return False
    if chars == {"\t"}:
        return True

    unit = min(len(indent) for indent in indents)
    return all(len(indent) % unit == 0 for indent in indents)


def scan_source(code: str, language: Language | None = None) -> SourceScan:
    """Run every lexical probe for *language* (detected when omitted)."""
    if language is None:
        language = detect_language(code)
    patterns = get_patterns(language)
    outputs = find_literal_outputs(code, patterns)

    return SourceScan(
        language=language,
        has_loops=matches_any(patterns.loops, code),
        has_variables=matches_any(patterns.variables, code),
        has_input_handling=matches_any(patterns.input_handling, code),
        has_functions=matches_any(patterns.functions, code),
        has_comments=matches_any(patterns.comments, code),
        has_consistent_indentation=has_consistent_indentation(code),
        literal_outputs=tuple(outputs),
        has_consecutive_literal_outputs=has_back_to_back_outputs(code, outputs),
    )


def structure_score(scan: SourceScan) -> float:
    score = BASE_STRUCTURE_SCORE
    if scan.has_loops:
        score += LOOPS_BONUS
    if scan.has_variables:
        score += VARIABLES_BONUS
    if scan.has_input_handling:
        score += INPUT_HANDLING_BONUS
    if not scan.has_consecutive_literal_outputs:
        score += NO_HARDCODED_OUTPUT_BONUS
    if scan.has_functions:
        score += FUNCTIONS_BONUS
    if scan.has_comments:
        score += COMMENTS_BONUS
    if scan.has_consistent_indentation:
        score += INDENTATION_BONUS
    return min(max(score, 0.0), 100.0)


def analyze_structure(
    code: str,
    language: Language | None = None,
    *,
    is_dump_code: bool = False,
    scan: SourceScan | None = None,
    logger: logging.Logger | None = None,
) -> StructuralFeatures:
    """Extract structural features and the 0-100 structure score.

    ``is_dump_code`` is the dump-code verdict for the same source; it is
    carried on the features but does not affect the score.
    """
    if logger is None:
        logger = logging.getLogger(__name__)
    if scan is None:
        scan = scan_source(code, language)

    score = structure_score(scan)
    logger.debug(
        f"Structure ({scan.language.value}): loops={scan.has_loops} "
        f"variables={scan.has_variables} input={scan.has_input_handling} "
        f"hardcoded_output={scan.has_consecutive_literal_outputs} "
        f"functions={scan.has_functions} comments={scan.has_comments} "
        f"indentation={scan.has_consistent_indentation} score={score}"
    )

    return StructuralFeatures(
        is_dump_code=is_dump_code,
        has_loops=scan.has_loops,
        has_variables=scan.has_variables,
        has_input_handling=scan.has_input_handling,
        has_hardcoded_output=scan.has_consecutive_literal_outputs,
        structure_score=score,
        has_functions=scan.has_functions,
        has_comments=scan.has_comments,
        has_consistent_indentation=scan.has_consistent_indentation,
    )
