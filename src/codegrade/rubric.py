"""Weighted rubric computation.

Weights do not sum to 1: every consumer normalizes by ``max_possible_score``,
so optional metrics can be present or absent without rebalancing the table.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from codegrade.analysis import SubmissionAnalysis, analyze_submission
from codegrade.analysis.dump_code import HARDCODED_SOLUTION_REASON
from codegrade.models import (
    MAX_PERCENT,
    AssessmentInput,
    StructuralFeatures,
    clamp_percentage,
)

CORRECTNESS = "Correctness"
TEST_CASES = "Test Cases"
CODE_STRUCTURE = "Code Structure"
EFFICIENCY = "Efficiency"
TIME_COMPLEXITY = "Time Complexity"
SPACE_COMPLEXITY = "Space Complexity"
READABILITY = "Readability"
CODE_STYLE = "Code Style"
ERROR_HANDLING = "Error Handling"
SOLUTION_MATCH = "Solution Match"

METRIC_WEIGHTS: dict[str, float] = {
    CORRECTNESS: 0.25,
    TEST_CASES: 0.25,
    CODE_STRUCTURE: 0.10,
    EFFICIENCY: 0.15,
    TIME_COMPLEXITY: 0.05,
    SPACE_COMPLEXITY: 0.05,
    READABILITY: 0.10,
    CODE_STYLE: 0.05,
    ERROR_HANDLING: 0.05,
    SOLUTION_MATCH: 0.05,
}

# Presentation groups; a metric may belong to more than one.
METRIC_CATEGORIES: dict[str, tuple[str, ...]] = {
    "correctness": (CORRECTNESS, TEST_CASES),
    "efficiency": (EFFICIENCY, TIME_COMPLEXITY, SPACE_COMPLEXITY),
    "style": (READABILITY, CODE_STYLE, CODE_STRUCTURE),
    "advanced": (ERROR_HANDLING, SOLUTION_MATCH),
}

UNKNOWN_COMPLEXITY_SCORE = 50.0
REJECTED_MAX_POSSIBLE_SCORE = 100.0


def canonical_complexity(label: str | None) -> str:
    """Normalize a Big-O label: lowercase, no whitespace, ``²`` as ``^2``."""
    if not label:
        return ""
    return (
        "".join(label.split())
        .lower()
        .replace("²", "^2")
        .replace("³", "^3")
    )


COMPLEXITY_SCORES: dict[str, float] = {
    canonical_complexity(label): score
    for label, score in (
        ("O(1)", 100.0),
        ("O(log n)", 95.0),
        ("O(n)", 90.0),
        ("O(n log n)", 85.0),
        ("O(n^2)", 70.0),
        ("O(2^n)", 40.0),
        ("O(n!)", 30.0),
    )
}


def complexity_score(label: str | None) -> float:
    """Score a complexity label; lower complexity scores higher, unknown is 50."""
    return COMPLEXITY_SCORES.get(canonical_complexity(label), UNKNOWN_COMPLEXITY_SCORE)


def pass_rate_score(passed: int, total: int) -> float:
    if total <= 0:
        return 0.0
    return clamp_percentage(passed / total * MAX_PERCENT, TEST_CASES)


@dataclass(frozen=True)
class ScoreMetric:
    """One weighted rubric row."""

    name: str
    weight: float
    score: float
    details: str = ""
    max_score: float = MAX_PERCENT

    @property
    def weighted_score(self) -> float:
        return self.score * self.weight

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "weight": self.weight,
            "score": self.score,
            "max_score": self.max_score,
            "details": self.details,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ScoreMetric:
        return cls(
            name=data["name"],
            weight=data["weight"],
            score=data["score"],
            details=data.get("details", ""),
            max_score=data.get("max_score", MAX_PERCENT),
        )


@dataclass(frozen=True)
class ScoringRubric:
    """Ordered weighted metrics with their totals.

    Attributes:
        metrics: Included metrics, in table order.
        total_weight: Sum of included weights.
        total_score: Sum of ``score * weight``.
        max_possible_score: Sum of ``max_score * weight``.
        rejection_reason: Set when the submission was rejected as dump code;
            ``metrics`` is then empty.
    """

    metrics: tuple[ScoreMetric, ...] = field(default_factory=tuple)
    total_weight: float = 0.0
    total_score: float = 0.0
    max_possible_score: float = 0.0
    rejection_reason: str | None = None

    @property
    def rejected(self) -> bool:
        return self.rejection_reason is not None

    def get(self, name: str) -> ScoreMetric | None:
        return next((m for m in self.metrics if m.name == name), None)

    def categorized_metrics(self) -> dict[str, list[str]]:
        """Metric names per presentation category, only those present."""
        present = [m.name for m in self.metrics]
        return {
            category: [name for name in present if name in members]
            for category, members in METRIC_CATEGORIES.items()
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "metrics": [m.to_dict() for m in self.metrics],
            "total_weight": self.total_weight,
            "total_score": self.total_score,
            "max_possible_score": self.max_possible_score,
            "categorized_metrics": self.categorized_metrics(),
            "rejection_reason": self.rejection_reason,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ScoringRubric:
        return cls(
            metrics=tuple(ScoreMetric.from_dict(m) for m in data.get("metrics", [])),
            total_weight=data["total_weight"],
            total_score=data["total_score"],
            max_possible_score=data["max_possible_score"],
            rejection_reason=data.get("rejection_reason"),
        )


def rejected_rubric(reason: str) -> ScoringRubric:
    return ScoringRubric(
        metrics=(),
        total_weight=0.0,
        total_score=0.0,
        max_possible_score=REJECTED_MAX_POSSIBLE_SCORE,
        rejection_reason=reason,
    )


class RubricBuilder:
    """Collects metrics in table order and reduces them into a rubric."""

    def __init__(self, weights: dict[str, float] | None = None):
        self.weights = weights if weights is not None else METRIC_WEIGHTS
        self._metrics: list[ScoreMetric] = []

    def add(self, name: str, score: float, details: str = "") -> RubricBuilder:
        self._metrics.append(
            ScoreMetric(
                name=name,
                weight=self.weights[name],
                score=clamp_percentage(score, name),
                details=details,
            )
        )
        return self

    def add_optional(
        self, name: str, score: float | None, details: str = ""
    ) -> RubricBuilder:
        """Append the metric only when its source signal is present."""
        if score is None:
            return self
        return self.add(name, score, details)

    def build(self) -> ScoringRubric:
        metrics = tuple(self._metrics)
        return ScoringRubric(
            metrics=metrics,
            total_weight=sum(m.weight for m in metrics),
            total_score=sum(m.weighted_score for m in metrics),
            max_possible_score=sum(m.max_score * m.weight for m in metrics),
        )


def resolve_analysis(
    assessment: AssessmentInput, logger: logging.Logger | None = None
) -> SubmissionAnalysis | None:
    """Analyze ``raw_code`` when present; None means analysis is skipped."""
    if logger is None:
        logger = logging.getLogger(__name__)
    if not assessment.raw_code:
        if assessment.code_quality is None:
            logger.debug("No raw code or code quality supplied, skipping analysis")
        return None
    return analyze_submission(
        assessment.raw_code,
        pattern_problem=assessment.pattern_problem,
        problem_text=assessment.problem_text,
        logger=logger,
    )


def effective_code_quality(
    assessment: AssessmentInput, analysis: SubmissionAnalysis | None
) -> StructuralFeatures | None:
    """Upstream ``code_quality`` wins; otherwise the computed features."""
    if assessment.code_quality is not None:
        return assessment.code_quality
    return analysis.features if analysis is not None else None


def calculate_weighted_score(
    assessment: AssessmentInput,
    analysis: SubmissionAnalysis | None = None,
    *,
    logger: logging.Logger | None = None,
) -> ScoringRubric:
    """Build the weighted rubric for one submission.

    Dump code short-circuits to an empty, rejected rubric. ``analysis`` is
    computed from ``raw_code`` when not supplied.
    """
    if logger is None:
        logger = logging.getLogger(__name__)
    if analysis is None:
        analysis = resolve_analysis(assessment, logger)

    if analysis is not None and analysis.verdict.is_dump_code:
        return rejected_rubric(analysis.verdict.reason or HARDCODED_SOLUTION_REASON)
    upstream = assessment.code_quality
    if analysis is None and upstream is not None and upstream.is_dump_code:
        logger.info("Upstream code quality marks the submission as dump code")
        return rejected_rubric(HARDCODED_SOLUTION_REASON)

    code_quality = effective_code_quality(assessment, analysis)

    builder = RubricBuilder()
    builder.add(
        CORRECTNESS,
        assessment.correctness,
        "Measures if the code produces the correct output",
    )
    builder.add(
        TEST_CASES,
        pass_rate_score(assessment.test_cases_passed, assessment.total_test_cases),
        f"Passed {assessment.test_cases_passed} of "
        f"{assessment.total_test_cases} test cases",
    )
    builder.add_optional(
        CODE_STRUCTURE,
        code_quality.structure_score if code_quality is not None else None,
        "Quality of code organization and structure",
    )
    builder.add(EFFICIENCY, assessment.efficiency, "Overall algorithmic efficiency")
    builder.add(
        TIME_COMPLEXITY,
        complexity_score(assessment.time_complexity),
        f"Time complexity: {assessment.time_complexity or 'unknown'}",
    )
    builder.add(
        SPACE_COMPLEXITY,
        complexity_score(assessment.space_complexity),
        f"Space complexity: {assessment.space_complexity or 'unknown'}",
    )
    builder.add(READABILITY, assessment.readability, "Code clarity and documentation")
    builder.add_optional(CODE_STYLE, assessment.code_style, "Adherence to style guidelines")
    builder.add_optional(
        ERROR_HANDLING,
        assessment.error_handling,
        "Quality of error handling and edge cases",
    )
    builder.add_optional(
        SOLUTION_MATCH,
        assessment.fuzzy_match_score,
        "Similarity to expected solution patterns",
    )

    rubric = builder.build()
    logger.debug(
        f"Rubric: {len(rubric.metrics)} metrics, total={rubric.total_score:.2f}, "
        f"max={rubric.max_possible_score:.2f}"
    )
    return rubric
