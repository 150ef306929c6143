"""Dump-code detection: submissions that print the expected output literally.

The rules are scoped to pattern-printing problems (stars, pyramids,
triangles, matrices). Without the pattern-problem signal nothing is ever
rejected, however many literal prints the source contains.
"""

from __future__ import annotations

import logging

from codegrade.analysis.base import (
    DumpCodeContext,
    DumpCodeRule,
    DumpCodeVerdict,
    SourceScan,
)
from codegrade.analysis.patterns import PATTERN_PROBLEM_KEYWORDS
from codegrade.analysis.structure import is_multiline_literal, scan_source
from codegrade.language import Language

MAX_LITERAL_OUTPUTS = 3

HARDCODED_SOLUTION_REASON = (
    "Hard-coded solution detected. Your code should use loops to generate "
    "patterns dynamically instead of printing each line manually."
)
CONSECUTIVE_PRINTS_REASON = (
    "Multiple hard-coded print statements detected. Your solution should use "
    "loops for pattern generation."
)
MULTILINE_LITERAL_REASON = (
    "Hard-coded multi-line string detected. Your solution should generate "
    "output programmatically using loops."
)


def _too_many_literal_outputs(ctx: DumpCodeContext) -> bool:
    return (
        ctx.pattern_problem
        and not ctx.scan.has_loops
        and len(ctx.scan.literal_outputs) > MAX_LITERAL_OUTPUTS
    )


def _consecutive_literal_outputs(ctx: DumpCodeContext) -> bool:
    return (
        ctx.pattern_problem
        and not ctx.scan.has_loops
        and ctx.scan.has_consecutive_literal_outputs
    )


def _multiline_literal(ctx: DumpCodeContext) -> bool:
    return ctx.pattern_problem and any(
        is_multiline_literal(output.literal) for output in ctx.scan.literal_outputs
    )


DUMP_CODE_RULES: tuple[DumpCodeRule, ...] = (
    DumpCodeRule(
        "hardcoded_solution", _too_many_literal_outputs, HARDCODED_SOLUTION_REASON
    ),
    DumpCodeRule(
        "consecutive_literal_prints", _consecutive_literal_outputs, CONSECUTIVE_PRINTS_REASON
    ),
    DumpCodeRule("multiline_literal", _multiline_literal, MULTILINE_LITERAL_REASON),
)


def is_pattern_problem(
    code: str, problem_text: str | None = None, *, hint: bool = False
) -> bool:
    """Sniff the source and problem text for pattern-problem keywords."""
    if hint:
        return True
    if PATTERN_PROBLEM_KEYWORDS.search(code):
        return True
    return bool(problem_text and PATTERN_PROBLEM_KEYWORDS.search(problem_text))


def detect_dump_code(
    code: str,
    language: Language | None = None,
    *,
    pattern_problem: bool = False,
    problem_text: str | None = None,
    scan: SourceScan | None = None,
    rules: tuple[DumpCodeRule, ...] = DUMP_CODE_RULES,
    logger: logging.Logger | None = None,
) -> DumpCodeVerdict:
    """Evaluate *rules* in order; the first rule that fires rejects.

    ``pattern_problem`` forces the pattern-problem signal on, for callers that
    know the assignment is a pattern-generation task.
    """
    if logger is None:
        logger = logging.getLogger(__name__)
    if scan is None:
        scan = scan_source(code, language)

    context = DumpCodeContext(
        scan=scan,
        pattern_problem=is_pattern_problem(code, problem_text, hint=pattern_problem),
    )
    if not context.pattern_problem:
        logger.debug("No pattern-problem signal, dump-code rules skipped")
        return DumpCodeVerdict(is_dump_code=False)

    for rule in rules:
        if rule.matches(context):
            logger.info(f"Dump code detected by rule '{rule.name}'")
            return DumpCodeVerdict(is_dump_code=True, reason=rule.reason, rule=rule.name)

    logger.debug(
        f"Pattern problem, {len(scan.literal_outputs)} literal output(s), "
        f"loops={scan.has_loops}: not dump code"
    )
    return DumpCodeVerdict(is_dump_code=False)
