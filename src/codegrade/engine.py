"""Grading entry point: one submission in, one immutable result out."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from codegrade.feedback import (
    REJECTION_FEEDBACK,
    REJECTION_WEAKNESS,
    generate_feedback,
    summarize_metrics,
)
from codegrade.grades import (
    FuzzyGrade,
    LetterGrade,
    fuzzy_grade,
    letter_grade,
    normalize_score,
)
from codegrade.language import Language
from codegrade.models import AssessmentInput
from codegrade.rubric import (
    ScoringRubric,
    calculate_weighted_score,
    effective_code_quality,
    resolve_analysis,
)


@dataclass(frozen=True)
class AssessmentResult:
    """Final grade for one submission.

    Attributes:
        rubric: Weighted metrics and totals.
        normalized_score: ``100 * total_score / max_possible_score`` (0-100).
        letter_grade: Letter grade (A+ .. F).
        fuzzy_grade: 5-way categorical grade.
        feedback: Ordered remarks.
        strengths: "Strong <metric>" for metrics scoring 90 or more.
        weaknesses: "Needs improvement in <metric>" for metrics scoring 70 or less.
        rejected: True when the submission was rejected as dump code.
        rejection_reason: Why it was rejected.
        language: Detected language, None when no source was analyzed.
        performance_summary: "Execution time: <n>ms" when a timing was supplied.
        memory_summary: "Memory usage: <n>KB" when a measurement was supplied.
    """

    rubric: ScoringRubric
    normalized_score: float
    letter_grade: LetterGrade
    fuzzy_grade: FuzzyGrade
    feedback: tuple[str, ...] = field(default_factory=tuple)
    strengths: tuple[str, ...] = field(default_factory=tuple)
    weaknesses: tuple[str, ...] = field(default_factory=tuple)
    rejected: bool = False
    rejection_reason: str | None = None
    language: Language | None = None
    performance_summary: str | None = None
    memory_summary: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Plain JSON-compatible document (no enums, tuples or references)."""
        return {
            "rubric": self.rubric.to_dict(),
            "normalized_score": self.normalized_score,
            "letter_grade": self.letter_grade.value,
            "fuzzy_grade": self.fuzzy_grade.value,
            "feedback": list(self.feedback),
            "strengths": list(self.strengths),
            "weaknesses": list(self.weaknesses),
            "rejected": self.rejected,
            "rejection_reason": self.rejection_reason,
            "language": self.language.value if self.language is not None else None,
            "performance_summary": self.performance_summary,
            "memory_summary": self.memory_summary,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> AssessmentResult:
        language = data.get("language")
        return cls(
            rubric=ScoringRubric.from_dict(data["rubric"]),
            normalized_score=data["normalized_score"],
            letter_grade=LetterGrade(data["letter_grade"]),
            fuzzy_grade=FuzzyGrade(data["fuzzy_grade"]),
            feedback=tuple(data.get("feedback", ())),
            strengths=tuple(data.get("strengths", ())),
            weaknesses=tuple(data.get("weaknesses", ())),
            rejected=data.get("rejected", False),
            rejection_reason=data.get("rejection_reason"),
            language=Language(language) if language is not None else None,
            performance_summary=data.get("performance_summary"),
            memory_summary=data.get("memory_summary"),
        )


def _format_measure(value: float) -> str:
    # Full precision without a trailing ".0" for whole numbers.
    return f"{value:.15g}"


def assess(
    assessment: AssessmentInput | Mapping[str, Any],
    *,
    logger: logging.Logger | None = None,
) -> AssessmentResult:
    """Grade one submission.

    Accepts an :class:`AssessmentInput` or a mapping in the upstream
    (camelCase) or snake_case shape; a mapping that fails validation raises
    ``pydantic.ValidationError``. The input is never modified.
    """
    if logger is None:
        logger = logging.getLogger(__name__)
    if not isinstance(assessment, AssessmentInput):
        assessment = AssessmentInput.model_validate(assessment)

    analysis = resolve_analysis(assessment, logger)
    language = analysis.language if analysis is not None else None
    rubric = calculate_weighted_score(assessment, analysis, logger=logger)

    if rubric.rejected:
        logger.info(f"Submission rejected: {rubric.rejection_reason}")
        return AssessmentResult(
            rubric=rubric,
            normalized_score=0.0,
            letter_grade=LetterGrade.F,
            fuzzy_grade=FuzzyGrade.FAILED,
            feedback=REJECTION_FEEDBACK,
            strengths=(),
            weaknesses=(REJECTION_WEAKNESS,),
            rejected=True,
            rejection_reason=rubric.rejection_reason,
            language=language,
        )

    normalized = normalize_score(rubric.total_score, rubric.max_possible_score)
    feedback = generate_feedback(
        assessment, rubric, code_quality=effective_code_quality(assessment, analysis)
    )
    strengths, weaknesses = summarize_metrics(rubric.metrics)

    result = AssessmentResult(
        rubric=rubric,
        normalized_score=normalized,
        letter_grade=letter_grade(normalized),
        fuzzy_grade=fuzzy_grade(normalized),
        feedback=tuple(feedback),
        strengths=tuple(strengths),
        weaknesses=tuple(weaknesses),
        rejected=False,
        rejection_reason=None,
        language=language,
        performance_summary=(
            f"Execution time: {_format_measure(assessment.execution_time)}ms"
            if assessment.execution_time
            else None
        ),
        memory_summary=(
            f"Memory usage: {_format_measure(assessment.memory_usage)}KB"
            if assessment.memory_usage
            else None
        ),
    )
    logger.info(
        f"Graded submission: score={normalized:.2f} letter={result.letter_grade.value} "
        f"fuzzy={result.fuzzy_grade.value}"
    )
    return result
