"""Student-facing feedback, strengths and weaknesses."""

from __future__ import annotations

from codegrade.models import AssessmentInput, StructuralFeatures
from codegrade.rubric import ScoreMetric, ScoringRubric, canonical_complexity

REJECTION_FEEDBACK: tuple[str, str] = (
    "Your solution contains hard-coded outputs instead of a proper algorithmic approach.",
    "Your submission has been rejected because it uses hard-coded outputs "
    "instead of proper programming constructs.",
)
REJECTION_WEAKNESS = "Using hard-coded outputs instead of algorithms"

STRUCTURE_THRESHOLD = 70.0
CORRECTNESS_FAIL_THRESHOLD = 70.0
CORRECTNESS_EDGE_CASE_THRESHOLD = 90.0
STYLE_THRESHOLD = 80.0
READABILITY_THRESHOLD = 80.0
ERROR_HANDLING_THRESHOLD = 70.0
SOLUTION_MATCH_THRESHOLD = 70.0
SLOW_EXECUTION_MS = 1000.0
STRENGTH_THRESHOLD = 90.0
WEAKNESS_THRESHOLD = 70.0

_POLYNOMIAL = frozenset(canonical_complexity(c) for c in ("O(n^2)", "O(n^3)"))
_EXPONENTIAL = frozenset(canonical_complexity(c) for c in ("O(2^n)", "O(n!)"))
_LOW_SPACE = frozenset(canonical_complexity(c) for c in ("O(1)", "O(log n)"))


def _structure_feedback(quality: StructuralFeatures) -> list[str]:
    if quality.structure_score >= STRUCTURE_THRESHOLD:
        return []
    remarks = [
        "Your code structure needs improvement. Consider using appropriate "
        "loops, functions, and variables."
    ]
    if not quality.has_loops:
        remarks.append("Your solution should use loops to handle repetitive tasks.")
    if not quality.has_variables:
        remarks.append("Use variables to make your code more flexible and easier to maintain.")
    if not quality.has_input_handling:
        remarks.append(
            "Consider adding input handling to make your solution work with different inputs."
        )
    return remarks


def _test_feedback(assessment: AssessmentInput) -> list[str]:
    if assessment.test_pass_rate >= 100.0:
        return []
    remarks = [
        f"Passed {assessment.test_cases_passed} out of "
        f"{assessment.total_test_cases} test cases."
    ]
    failed = [case.name for case in assessment.test_case_details if not case.passed]
    if failed:
        remarks.append(f"Failed test cases: {', '.join(failed)}")
    return remarks


def generate_feedback(
    assessment: AssessmentInput,
    rubric: ScoringRubric,
    code_quality: StructuralFeatures | None = None,
) -> list[str]:
    """Ordered remarks for a graded submission.

    Each rule fires independently and appends in a fixed order. A rejected
    rubric yields only the two rejection messages. ``code_quality`` defaults
    to the one supplied on the input.
    """
    if rubric.rejected:
        return list(REJECTION_FEEDBACK)

    feedback: list[str] = []
    quality = code_quality if code_quality is not None else assessment.code_quality
    if quality is not None:
        feedback.extend(_structure_feedback(quality))

    if assessment.correctness < CORRECTNESS_FAIL_THRESHOLD:
        feedback.append(
            "The solution doesn't correctly solve the problem. Review the requirements carefully."
        )
    elif assessment.correctness < CORRECTNESS_EDGE_CASE_THRESHOLD:
        feedback.append(
            "The solution works but may not handle all edge cases. Consider additional testing."
        )

    feedback.extend(_test_feedback(assessment))

    time_label = canonical_complexity(assessment.time_complexity)
    if time_label in _POLYNOMIAL:
        feedback.append(
            "Consider optimizing your solution to improve time complexity. "
            "Look for nested loops that could be simplified."
        )
    elif time_label in _EXPONENTIAL:
        feedback.append(
            "Your solution has exponential time complexity. Consider dynamic "
            "programming or memoization to optimize."
        )

    space_label = canonical_complexity(assessment.space_complexity)
    if space_label and space_label not in _LOW_SPACE:
        feedback.append(
            "Consider ways to reduce memory usage in your solution. Look for "
            "opportunities to use in-place algorithms."
        )

    if assessment.code_style is not None and assessment.code_style < STYLE_THRESHOLD:
        feedback.append(
            "Your code could benefit from better adherence to style guidelines. "
            "Consider consistent indentation and naming conventions."
        )

    if assessment.readability < READABILITY_THRESHOLD:
        feedback.append(
            "Improve code readability with better variable names, function "
            "decomposition, and appropriate comments."
        )

    if (
        assessment.error_handling is not None
        and assessment.error_handling < ERROR_HANDLING_THRESHOLD
    ):
        feedback.append(
            "Your solution could benefit from better error handling and "
            "validation of input parameters."
        )

    if (
        assessment.fuzzy_match_score is not None
        and assessment.fuzzy_match_score < SOLUTION_MATCH_THRESHOLD
    ):
        feedback.append(
            "Your approach differs significantly from common solution patterns. "
            "Consider reviewing standard algorithms for this problem type."
        )

    if (
        assessment.execution_time is not None
        and assessment.execution_time > SLOW_EXECUTION_MS
    ):
        feedback.append(
            f"Your solution took {assessment.execution_time / 1000:.2f}s to execute. "
            "Consider optimizing for better performance."
        )

    return feedback


def summarize_metrics(
    metrics: tuple[ScoreMetric, ...] | list[ScoreMetric],
) -> tuple[list[str], list[str]]:
    """Derive (strengths, weaknesses) from the final metric list."""
    strengths: list[str] = []
    weaknesses: list[str] = []
    for metric in metrics:
        if metric.score >= STRENGTH_THRESHOLD:
            strengths.append(f"Strong {metric.name.lower()}")
        elif metric.score <= WEAKNESS_THRESHOLD:
            weaknesses.append(f"Needs improvement in {metric.name.lower()}")
    return strengths, weaknesses
