from __future__ import annotations

from pathlib import Path

from junitparser import Failure, JUnitXml, TestCase, TestSuite

from codegrade.engine import AssessmentResult
from codegrade.grades import FuzzyGrade

# Metric rows below this score are reported as failures.
METRIC_FAILURE_THRESHOLD = 60.0


def _suite_for(batch_name: str, name: str, result: AssessmentResult) -> TestSuite:
    suite = TestSuite(f"{batch_name} / {name}")

    properties = {
        "normalized_score": f"{result.normalized_score:.2f}",
        "letter_grade": result.letter_grade.value,
        "fuzzy_grade": result.fuzzy_grade.value,
        "rejected": str(result.rejected).lower(),
        "language": result.language.value if result.language is not None else None,
        "rejection_reason": result.rejection_reason,
    }
    for key, val in properties.items():
        if val is not None:
            suite.add_property(key, val)

    dump_case = TestCase("dump_code")
    dump_case.classname = name
    if result.rejected:
        dump_case.result = Failure(result.rejection_reason or "rejected as dump code")
    suite.add_testcase(dump_case)

    for metric in result.rubric.metrics:
        case = TestCase(f"metric:{metric.name}")
        case.classname = name
        if metric.score < METRIC_FAILURE_THRESHOLD:
            case.result = Failure(f"score={metric.score:.2f} {metric.details}".strip())
        suite.add_testcase(case)

    grade_case = TestCase("grade")
    grade_case.classname = name
    if result.fuzzy_grade is FuzzyGrade.FAILED:
        grade_case.result = Failure(
            f"normalized score {result.normalized_score:.2f} "
            f"({result.letter_grade.value}, {result.fuzzy_grade.value})"
        )
    suite.add_testcase(grade_case)
    return suite


def write_junit(
    run_dir: Path, results: dict[str, AssessmentResult], batch_name: str = "batch"
) -> Path:
    """Write junit.xml with one suite per submission, return path."""
    xml = JUnitXml()
    for name, result in results.items():
        # Use append (not +=) to preserve properties
        xml.append(_suite_for(batch_name, name, result))

    junit_path = run_dir / "junit.xml"
    xml.write(str(junit_path), pretty=True)
    return junit_path


def count_failures(junit_path: Path) -> int:
    """Total failures recorded in a junit.xml file."""
    xml = JUnitXml.fromfile(str(junit_path))
    return sum(suite.failures for suite in xml)
