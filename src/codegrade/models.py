"""Input models for the grading engine.

Upstream services send camelCase documents (``rawCode``, ``testCasesPassed``);
Python callers may use the snake_case field names. Numeric signals are clamped
into range rather than rejected so grading stays available when an upstream
signal is slightly off.
"""

from __future__ import annotations

import logging
import math

from pydantic import BaseModel, ConfigDict, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

MAX_PERCENT = 100.0


def clamp_percentage(value: float, field_name: str = "value") -> float:
    """Clamp *value* into [0, 100]; NaN becomes 0."""
    if math.isnan(value):
        logger.warning(f"{field_name} is NaN, using 0")
        return 0.0
    if value < 0.0 or value > MAX_PERCENT:
        clamped = min(max(value, 0.0), MAX_PERCENT)
        logger.warning(f"{field_name}={value} out of range, clamped to {clamped}")
        return clamped
    return value


class _InputModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="forbid",
    )


class StructuralFeatures(_InputModel):
    """Structural probes over a submission and the score derived from them.

    Produced by :func:`codegrade.analysis.structure.analyze_structure`, or
    supplied upstream as ``codeQuality`` when analysis ran elsewhere.
    """

    is_dump_code: bool = False
    has_loops: bool = False
    has_variables: bool = False
    has_input_handling: bool = False
    has_hardcoded_output: bool = False
    structure_score: float
    has_functions: bool = False
    has_comments: bool = False
    has_consistent_indentation: bool = False

    @field_validator("structure_score")
    @classmethod
    def clamp_structure_score(cls, v: float) -> float:
        return clamp_percentage(v, "structure_score")


class TestCaseDetail(_InputModel):
    __test__ = False  # keep pytest from collecting this as a test class

    id: str
    name: str
    passed: bool
    expected_output: str = ""
    actual_output: str = ""
    execution_time: float | None = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: object) -> object:
        return str(v) if isinstance(v, int) else v


class AssessmentInput(_InputModel):
    """Everything the engine needs to grade one submission.

    ``correctness`` and the test counts are required; the remaining core
    signals default to the lowest score so that correctness-only grading is
    possible. Optional metrics are only scored when present.
    """

    raw_code: str | None = None
    correctness: float
    efficiency: float = 0.0
    readability: float = 0.0
    total_test_cases: int
    test_cases_passed: int
    time_complexity: str | None = None
    space_complexity: str | None = None
    code_style: float | None = None
    error_handling: float | None = None
    fuzzy_match_score: float | None = None
    execution_time: float | None = None
    memory_usage: float | None = None
    code_quality: StructuralFeatures | None = None
    test_case_details: tuple[TestCaseDetail, ...] = ()
    pattern_problem: bool = False
    problem_text: str | None = None

    @field_validator(
        "correctness",
        "efficiency",
        "readability",
        "code_style",
        "error_handling",
        "fuzzy_match_score",
    )
    @classmethod
    def clamp_percentages(cls, v: float | None, info: ValidationInfo) -> float | None:
        if v is None:
            return None
        return clamp_percentage(v, info.field_name)

    @field_validator("total_test_cases")
    @classmethod
    def clamp_total(cls, v: int) -> int:
        if v < 0:
            logger.warning(f"total_test_cases={v} is negative, using 0")
            return 0
        return v

    @field_validator("test_cases_passed")
    @classmethod
    def clamp_passed(cls, v: int, info: ValidationInfo) -> int:
        if v < 0:
            logger.warning(f"test_cases_passed={v} is negative, using 0")
            return 0
        total = info.data.get("total_test_cases")
        if total is not None and v > total:
            logger.warning(
                f"test_cases_passed={v} exceeds total_test_cases={total}, clamped"
            )
            return total
        return v

    @field_validator("execution_time", "memory_usage")
    @classmethod
    def clamp_measurements(cls, v: float | None, info: ValidationInfo) -> float | None:
        if v is None:
            return None
        if not math.isfinite(v) or v < 0:
            logger.warning(f"{info.field_name}={v} is invalid, using 0")
            return 0.0
        return v

    @property
    def test_pass_rate(self) -> float:
        """Percentage of passed test cases; 0 when there are no test cases."""
        if self.total_test_cases <= 0:
            return 0.0
        return self.test_cases_passed / self.total_test_cases * MAX_PERCENT
