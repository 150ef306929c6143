"""Tests for assessment input and batch manifest loading."""

import json
import textwrap
from pathlib import Path

import pytest
from pydantic import ValidationError

from codegrade.config import BatchConfig, SubmissionConfig, load_assessment, load_batch
from codegrade.models import AssessmentInput, TestCaseDetail


@pytest.fixture()
def tmp_yaml(tmp_path):
    """Helper that writes YAML content to a temp file and returns its path."""

    def _write(content: str, name: str = "batch.yaml") -> Path:
        p = tmp_path / name
        p.write_text(textwrap.dedent(content))
        return p

    return _write


def test_assessment_input_accepts_camel_case_and_snake_case():
    camel = AssessmentInput.model_validate(
        {"correctness": 90, "testCasesPassed": 2, "totalTestCases": 3, "codeStyle": 70}
    )
    snake = AssessmentInput(
        correctness=90, test_cases_passed=2, total_test_cases=3, code_style=70
    )
    assert camel == snake


def test_assessment_input_defaults():
    assessment = AssessmentInput(correctness=50, test_cases_passed=0, total_test_cases=2)

    assert assessment.efficiency == 0.0
    assert assessment.readability == 0.0
    assert assessment.time_complexity is None
    assert assessment.code_quality is None
    assert assessment.test_case_details == ()
    assert assessment.pattern_problem is False


def test_assessment_input_rejects_unknown_fields():
    with pytest.raises(ValidationError):
        AssessmentInput.model_validate(
            {"correctness": 90, "testCasesPassed": 2, "totalTestCases": 3, "bogus": 1}
        )


def test_negative_counts_and_measurements_are_zeroed():
    assessment = AssessmentInput(
        correctness=50,
        test_cases_passed=-1,
        total_test_cases=-3,
        execution_time=-5,
        memory_usage=float("nan"),
    )
    assert assessment.total_test_cases == 0
    assert assessment.test_cases_passed == 0
    assert assessment.execution_time == 0.0
    assert assessment.memory_usage == 0.0
    assert assessment.test_pass_rate == 0.0


@pytest.mark.parametrize("value", [float("inf"), float("-inf")])
def test_infinite_measurements_are_zeroed(value):
    assessment = AssessmentInput(
        correctness=50,
        test_cases_passed=1,
        total_test_cases=1,
        execution_time=value,
        memory_usage=value,
    )
    assert assessment.execution_time == 0.0
    assert assessment.memory_usage == 0.0


def test_clamping_logs_a_warning(caplog):
    with caplog.at_level("WARNING", logger="codegrade.models"):
        AssessmentInput(correctness=250, test_cases_passed=1, total_test_cases=1)
    assert "correctness=250" in caplog.text


def test_test_case_detail_coerces_integer_id():
    detail = TestCaseDetail.model_validate(
        {"id": 7, "name": "edge", "passed": False, "expectedOutput": "1"}
    )
    assert detail.id == "7"
    assert detail.expected_output == "1"


def test_load_assessment_yaml(tmp_yaml):
    path = tmp_yaml(
        """\
        correctness: 88
        testCasesPassed: 4
        totalTestCases: 5
        timeComplexity: "O(n log n)"
        """,
        name="input.yaml",
    )
    assessment = load_assessment(path)
    assert assessment.correctness == 88
    assert assessment.time_complexity == "O(n log n)"


def test_load_assessment_json_with_code_override(tmp_path):
    path = tmp_path / "input.json"
    path.write_text(
        json.dumps(
            {
                "rawCode": "ignored",
                "correctness": 70,
                "testCasesPassed": 1,
                "totalTestCases": 2,
            }
        )
    )
    code = tmp_path / "solution.py"
    code.write_text("print('hello')\n")

    assessment = load_assessment(path, code)
    assert assessment.raw_code == "print('hello')\n"


def test_load_assessment_requires_mapping(tmp_yaml):
    path = tmp_yaml("- 1\n- 2\n", name="input.yaml")
    with pytest.raises(ValueError, match="mapping"):
        load_assessment(path)


def test_load_batch_resolves_code_files_relative_to_manifest(tmp_yaml, tmp_path):
    (tmp_path / "subs").mkdir()
    (tmp_path / "subs" / "alice.py").write_text("for i in range(3):\n    print(i)\n")
    path = tmp_yaml("""\
        name: loops
        defaults:
          efficiency: 75
        submissions:
          - name: alice
            code_file: subs/alice.py
            correctness: 90
            testCasesPassed: 3
            totalTestCases: 3
    """)
    cfg = load_batch(path)

    assert cfg.name == "loops"
    submission = cfg.submissions[0]
    assert Path(submission.code_file) == (tmp_path / "subs" / "alice.py").resolve()

    assessment = submission.to_assessment_input(cfg.defaults)
    assert assessment.efficiency == 75
    assert assessment.correctness == 90
    assert assessment.raw_code.startswith("for i in range(3)")


def test_submission_fields_override_defaults():
    submission = SubmissionConfig(
        name="bob", correctness=60, testCasesPassed=1, totalTestCases=2, efficiency=40
    )
    assessment = submission.to_assessment_input({"efficiency": 90, "readability": 85})
    assert assessment.efficiency == 40
    assert assessment.readability == 85


def test_inline_raw_code_wins_over_code_file(tmp_path):
    submission = SubmissionConfig(
        name="carol",
        code_file=str(tmp_path / "missing.py"),
        rawCode="x = 1\n",
        correctness=60,
        testCasesPassed=1,
        totalTestCases=2,
    )
    assert submission.to_assessment_input().raw_code == "x = 1\n"


def test_code_file_expands_environment_variables(monkeypatch, tmp_path):
    monkeypatch.setenv("SUBMISSIONS_DIR", str(tmp_path))
    submission = SubmissionConfig(name="dave", code_file="${SUBMISSIONS_DIR}/dave.py")
    assert submission.code_file == f"{tmp_path}/dave.py"


def test_code_file_with_unset_variable_fails(monkeypatch):
    monkeypatch.delenv("CODEGRADE_UNSET_DIR", raising=False)
    with pytest.raises(ValidationError, match="unset variable"):
        SubmissionConfig(name="erin", code_file="${CODEGRADE_UNSET_DIR}/erin.py")


def test_missing_code_file_raises_os_error(tmp_path):
    submission = SubmissionConfig(
        name="frank",
        code_file=str(tmp_path / "missing.py"),
        correctness=60,
        testCasesPassed=1,
        totalTestCases=2,
    )
    with pytest.raises(OSError):
        submission.to_assessment_input()


def test_batch_requires_submissions():
    with pytest.raises(ValidationError, match="must not be empty"):
        BatchConfig(submissions=[])


def test_batch_rejects_duplicate_names():
    with pytest.raises(ValidationError, match="Duplicate submission names: alice"):
        BatchConfig(submissions=[{"name": "alice"}, {"name": "alice"}])


def test_batch_rejects_unknown_top_level_keys(tmp_yaml):
    path = tmp_yaml("""\
        submissions:
          - name: alice
        assistants: {}
    """)
    with pytest.raises(ValidationError):
        load_batch(path)


def test_invalid_submission_fields_fail_at_grading_time():
    submission = SubmissionConfig(name="gina", testCasesPassed=1, totalTestCases=1)
    with pytest.raises(ValidationError):
        submission.to_assessment_input()
