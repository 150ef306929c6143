"""Automated code-submission grading engine."""

from codegrade.engine import AssessmentResult, assess
from codegrade.grades import FuzzyGrade, LetterGrade
from codegrade.language import Language, detect_language
from codegrade.models import AssessmentInput, StructuralFeatures, TestCaseDetail
from codegrade.rubric import ScoreMetric, ScoringRubric

__all__ = [
    "AssessmentInput",
    "AssessmentResult",
    "FuzzyGrade",
    "Language",
    "LetterGrade",
    "ScoreMetric",
    "ScoringRubric",
    "StructuralFeatures",
    "TestCaseDetail",
    "assess",
    "detect_language",
]
