"""Score normalization and grade bucketing."""

from __future__ import annotations

import math
from enum import Enum


class LetterGrade(str, Enum):
    A_PLUS = "A+"
    A = "A"
    A_MINUS = "A-"
    B_PLUS = "B+"
    B = "B"
    B_MINUS = "B-"
    C_PLUS = "C+"
    C = "C"
    C_MINUS = "C-"
    D_PLUS = "D+"
    D = "D"
    D_MINUS = "D-"
    F = "F"


class FuzzyGrade(str, Enum):
    EXCELLENT = "Excellent"
    ABOVE_AVERAGE = "Above Average"
    AVERAGE = "Average"
    PASSED = "Passed"
    FAILED = "Failed"


# Inclusive lower bounds, highest first.
LETTER_THRESHOLDS: tuple[tuple[float, LetterGrade], ...] = (
    (97.0, LetterGrade.A_PLUS),
    (93.0, LetterGrade.A),
    (90.0, LetterGrade.A_MINUS),
    (87.0, LetterGrade.B_PLUS),
    (83.0, LetterGrade.B),
    (80.0, LetterGrade.B_MINUS),
    (77.0, LetterGrade.C_PLUS),
    (73.0, LetterGrade.C),
    (70.0, LetterGrade.C_MINUS),
    (67.0, LetterGrade.D_PLUS),
    (63.0, LetterGrade.D),
    (60.0, LetterGrade.D_MINUS),
)

FUZZY_THRESHOLDS: tuple[tuple[float, FuzzyGrade], ...] = (
    (90.0, FuzzyGrade.EXCELLENT),
    (80.0, FuzzyGrade.ABOVE_AVERAGE),
    (70.0, FuzzyGrade.AVERAGE),
    (60.0, FuzzyGrade.PASSED),
)


def normalize_score(total_score: float, max_possible_score: float) -> float:
    """Scale *total_score* to 0-100; 0 when nothing could be scored."""
    if max_possible_score <= 0:
        return 0.0
    normalized = total_score / max_possible_score * 100.0
    if math.isnan(normalized):
        return 0.0
    return min(max(normalized, 0.0), 100.0)


def letter_grade(normalized_score: float) -> LetterGrade:
    for lower_bound, grade in LETTER_THRESHOLDS:
        if normalized_score >= lower_bound:
            return grade
    return LetterGrade.F


def fuzzy_grade(normalized_score: float) -> FuzzyGrade:
    for lower_bound, grade in FUZZY_THRESHOLDS:
        if normalized_score >= lower_bound:
            return grade
    return FuzzyGrade.FAILED
