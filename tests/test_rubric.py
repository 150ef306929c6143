"""Tests for the weighted rubric."""

from __future__ import annotations

import pytest

from codegrade.analysis.dump_code import HARDCODED_SOLUTION_REASON
from codegrade.models import AssessmentInput, StructuralFeatures
from codegrade.rubric import (
    CODE_STRUCTURE,
    CODE_STYLE,
    CORRECTNESS,
    EFFICIENCY,
    ERROR_HANDLING,
    METRIC_WEIGHTS,
    READABILITY,
    SOLUTION_MATCH,
    SPACE_COMPLEXITY,
    TEST_CASES,
    TIME_COMPLEXITY,
    RubricBuilder,
    ScoringRubric,
    calculate_weighted_score,
    canonical_complexity,
    complexity_score,
    pass_rate_score,
)

CORE_METRICS = [
    CORRECTNESS,
    TEST_CASES,
    EFFICIENCY,
    TIME_COMPLEXITY,
    SPACE_COMPLEXITY,
    READABILITY,
]


def _input(**overrides) -> AssessmentInput:
    fields = {"correctness": 80, "total_test_cases": 4, "test_cases_passed": 3}
    fields.update(overrides)
    return AssessmentInput(**fields)


@pytest.mark.parametrize(
    "label,expected",
    [
        ("O(1)", 100.0),
        ("O(log n)", 95.0),
        ("O(n)", 90.0),
        ("O(n log n)", 85.0),
        ("O(n^2)", 70.0),
        ("O(2^n)", 40.0),
        ("O(n!)", 30.0),
        ("o(N LOG N)", 85.0),
        ("O(n²)", 70.0),
        ("O(n^3)", 50.0),
        ("", 50.0),
        (None, 50.0),
    ],
)
def test_complexity_score(label, expected):
    assert complexity_score(label) == expected


def test_canonical_complexity():
    assert canonical_complexity(" O( n log n ) ") == "o(nlogn)"
    assert canonical_complexity("O(n³)") == "o(n^3)"
    assert canonical_complexity(None) == ""


def test_pass_rate_score():
    assert pass_rate_score(3, 4) == 75.0
    assert pass_rate_score(0, 0) == 0.0
    assert pass_rate_score(5, 5) == 100.0


def test_core_only_rubric_has_always_present_metrics():
    rubric = calculate_weighted_score(_input())

    assert [m.name for m in rubric.metrics] == CORE_METRICS
    assert rubric.max_possible_score == pytest.approx(85.0)
    assert rubric.total_weight == pytest.approx(0.85)
    # 80*.25 + 75*.25 + 0 + 50*.05 + 50*.05 + 0
    assert rubric.total_score == pytest.approx(43.75)
    assert not rubric.rejected


def test_optional_metrics_only_when_supplied():
    rubric = calculate_weighted_score(
        _input(code_style=90, error_handling=60, fuzzy_match_score=75)
    )
    names = [m.name for m in rubric.metrics]

    assert names == CORE_METRICS + [
        CODE_STYLE,
        ERROR_HANDLING,
        SOLUTION_MATCH,
    ]
    assert rubric.max_possible_score == pytest.approx(100.0)


def test_all_metrics_present_in_table_order(pyramid_loop_code):
    rubric = calculate_weighted_score(
        _input(
            raw_code=pyramid_loop_code,
            code_style=90,
            error_handling=60,
            fuzzy_match_score=75,
        )
    )
    assert [m.name for m in rubric.metrics] == list(METRIC_WEIGHTS)
    assert rubric.total_weight == pytest.approx(1.1)
    assert rubric.max_possible_score == pytest.approx(110.0)


def test_structure_metric_from_raw_code(pyramid_loop_code):
    rubric = calculate_weighted_score(_input(raw_code=pyramid_loop_code))
    structure = rubric.get(CODE_STRUCTURE)

    assert structure is not None
    assert structure.score == 100.0
    assert structure.weight == 0.10


def test_upstream_code_quality_wins_over_analysis(pyramid_loop_code):
    quality = StructuralFeatures(structure_score=40)
    rubric = calculate_weighted_score(
        _input(raw_code=pyramid_loop_code, code_quality=quality)
    )
    assert rubric.get(CODE_STRUCTURE).score == 40.0


def test_dump_code_rejects_with_empty_metrics(pyramid_dump_code):
    rubric = calculate_weighted_score(
        _input(raw_code=pyramid_dump_code, pattern_problem=True)
    )

    assert rubric.rejected
    assert rubric.metrics == ()
    assert rubric.total_score == 0.0
    assert rubric.max_possible_score == 100.0
    assert rubric.rejection_reason == HARDCODED_SOLUTION_REASON


def test_upstream_dump_code_flag_rejects_without_raw_code():
    quality = StructuralFeatures(is_dump_code=True, structure_score=50)
    rubric = calculate_weighted_score(_input(code_quality=quality))

    assert rubric.rejected
    assert rubric.rejection_reason == HARDCODED_SOLUTION_REASON


def test_metric_details():
    rubric = calculate_weighted_score(_input(time_complexity="O(n)"))

    assert rubric.get(TEST_CASES).details == "Passed 3 of 4 test cases"
    assert rubric.get(TIME_COMPLEXITY).details == "Time complexity: O(n)"
    assert rubric.get(SPACE_COMPLEXITY).details == "Space complexity: unknown"


def test_zero_test_cases_scores_zero_without_error():
    rubric = calculate_weighted_score(_input(total_test_cases=0, test_cases_passed=0))
    assert rubric.get(TEST_CASES).score == 0.0


def test_builder_skips_missing_optional_signal():
    rubric = (
        RubricBuilder()
        .add(CORRECTNESS, 100)
        .add_optional(CODE_STYLE, None)
        .add_optional(ERROR_HANDLING, 50)
        .build()
    )
    assert [m.name for m in rubric.metrics] == [CORRECTNESS, ERROR_HANDLING]
    assert rubric.total_score == pytest.approx(25.0 + 2.5)
    assert rubric.max_possible_score == pytest.approx(30.0)


def test_builder_clamps_scores():
    rubric = RubricBuilder().add(CORRECTNESS, 150).add(READABILITY, -5).build()
    assert rubric.get(CORRECTNESS).score == 100.0
    assert rubric.get(READABILITY).score == 0.0


def test_categorized_metrics_only_lists_present_metrics():
    rubric = calculate_weighted_score(_input(code_style=90))
    categories = rubric.categorized_metrics()

    assert categories["correctness"] == [CORRECTNESS, TEST_CASES]
    assert categories["efficiency"] == [EFFICIENCY, TIME_COMPLEXITY, SPACE_COMPLEXITY]
    assert categories["style"] == [READABILITY, CODE_STYLE]
    assert categories["advanced"] == []


def test_rubric_dict_round_trip():
    rubric = calculate_weighted_score(_input(code_style=90, time_complexity="O(n)"))
    assert ScoringRubric.from_dict(rubric.to_dict()) == rubric


def test_input_is_not_modified():
    assessment = _input(raw_code="for i in range(3):\n    print(i)\n")
    before = assessment.model_dump()
    calculate_weighted_score(assessment)
    assert assessment.model_dump() == before
