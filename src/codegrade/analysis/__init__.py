"""Source analysis: structural features and dump-code detection."""

from __future__ import annotations

import logging

from codegrade.analysis.base import DumpCodeRule, DumpCodeVerdict, SubmissionAnalysis
from codegrade.analysis.dump_code import DUMP_CODE_RULES, detect_dump_code
from codegrade.analysis.structure import analyze_structure, scan_source
from codegrade.language import detect_language


def analyze_submission(
    code: str,
    *,
    pattern_problem: bool = False,
    problem_text: str | None = None,
    logger: logging.Logger | None = None,
) -> SubmissionAnalysis:
    """Detect the language, scan once, then run both analyses over the scan."""
    language = detect_language(code)
    scan = scan_source(code, language)
    verdict = detect_dump_code(
        code,
        language,
        pattern_problem=pattern_problem,
        problem_text=problem_text,
        scan=scan,
        logger=logger,
    )
    features = analyze_structure(
        code, language, is_dump_code=verdict.is_dump_code, scan=scan, logger=logger
    )
    return SubmissionAnalysis(language=language, features=features, verdict=verdict)


__all__ = [
    "DUMP_CODE_RULES",
    "DumpCodeRule",
    "DumpCodeVerdict",
    "SubmissionAnalysis",
    "analyze_structure",
    "analyze_submission",
    "detect_dump_code",
    "scan_source",
]
