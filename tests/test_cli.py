import json
import textwrap

from typer.testing import CliRunner

from codegrade.cli import app

runner = CliRunner()


def _write_input(tmp_path, **extra):
    payload = {"correctness": 90, "testCasesPassed": 4, "totalTestCases": 4}
    payload.update(extra)
    path = tmp_path / "input.json"
    path.write_text(json.dumps(payload))
    return path


def test_assess_prints_result_json(tmp_path):
    path = _write_input(tmp_path)
    result = runner.invoke(app, ["assess", str(path)])

    assert result.exit_code == 0
    document = json.loads(result.output)
    assert document["rejected"] is False
    assert "normalized_score" in document


def test_assess_reads_code_file(tmp_path):
    path = _write_input(tmp_path, problemText="Print a star pattern")
    code = tmp_path / "solution.py"
    code.write_text('print("*")\nprint("**")\n')

    result = runner.invoke(app, ["assess", str(path), "--code", str(code)])

    assert result.exit_code == 0
    document = json.loads(result.output)
    assert document["rejected"] is True
    assert document["language"] == "python"


def test_assess_writes_output_file(tmp_path):
    path = _write_input(tmp_path)
    out = tmp_path / "out" / "result.json"
    result = runner.invoke(app, ["assess", str(path), "--output", str(out)])

    assert result.exit_code == 0
    assert json.loads(out.read_text())["letter_grade"]
    assert str(out) in result.output


def test_assess_missing_input():
    result = runner.invoke(app, ["assess", "nonexistent.json"])
    assert result.exit_code != 0


def test_assess_invalid_input(tmp_path):
    path = tmp_path / "input.json"
    path.write_text(json.dumps({"testCasesPassed": 1, "totalTestCases": 1}))
    result = runner.invoke(app, ["assess", str(path)])

    assert result.exit_code == 1
    assert "invalid assessment input" in result.output


def test_batch_missing_manifest():
    result = runner.invoke(app, ["batch", "nonexistent.yaml"])
    assert result.exit_code != 0


def test_batch_passes_when_nothing_fails(tmp_path):
    manifest = tmp_path / "batch.yaml"
    manifest.write_text(textwrap.dedent("""\
        defaults:
          efficiency: 100
          readability: 100
          timeComplexity: "O(1)"
          spaceComplexity: "O(1)"
        submissions:
          - name: perfect
            correctness: 100
            testCasesPassed: 2
            totalTestCases: 2
    """))
    result = runner.invoke(
        app, ["batch", str(manifest), "--output-dir", str(tmp_path / "runs")]
    )

    assert result.exit_code == 0
    assert "Run complete" in result.output
    assert "0 rejected, 0 failed" in result.output


def test_batch_exits_non_zero_on_rejection(tmp_path):
    (tmp_path / "dump.py").write_text('print("*")\nprint("**")\n')
    manifest = tmp_path / "batch.yaml"
    manifest.write_text(textwrap.dedent("""\
        defaults:
          problemText: "Print a triangle"
        submissions:
          - name: dumped
            code_file: dump.py
            correctness: 100
            testCasesPassed: 2
            totalTestCases: 2
    """))
    result = runner.invoke(
        app, ["batch", str(manifest), "--output-dir", str(tmp_path / "runs")]
    )

    assert result.exit_code == 1
    assert "1 rejected" in result.output


def test_batch_rejects_duplicate_names(tmp_path):
    manifest = tmp_path / "batch.yaml"
    manifest.write_text(textwrap.dedent("""\
        submissions:
          - name: same
          - name: same
    """))
    result = runner.invoke(app, ["batch", str(manifest)])

    assert result.exit_code == 1
    assert "Duplicate submission names" in result.output


def test_init_creates_example_files(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    result = runner.invoke(app, ["init"])
    assert result.exit_code == 0
    assert (tmp_path / "codegrade" / "batch.yaml").exists()
    assert (tmp_path / "codegrade" / "submissions" / "example.py").exists()


def test_init_with_custom_directory(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    result = runner.invoke(app, ["init", "--dir", "my-custom-dir"])
    assert result.exit_code == 0
    assert (tmp_path / "my-custom-dir" / "batch.yaml").exists()


def test_init_skips_existing_manifest(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "codegrade").mkdir()
    (tmp_path / "codegrade" / "batch.yaml").write_text("keep: me\n")

    result = runner.invoke(app, ["init"])

    assert result.exit_code == 0
    assert "skipping" in result.output
    assert (tmp_path / "codegrade" / "batch.yaml").read_text() == "keep: me\n"


def test_init_example_batch_grades_cleanly(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    runner.invoke(app, ["init"])
    result = runner.invoke(
        app, ["batch", "codegrade/batch.yaml", "--output-dir", str(tmp_path / "runs")]
    )
    assert result.exit_code == 0


def test_schema_generate_command_writes_files(tmp_path):
    out = tmp_path / "schema.json"
    doc = tmp_path / "schema.md"
    result = runner.invoke(
        app, ["schema", "generate", "--out", str(out), "--doc", str(doc)]
    )
    assert result.exit_code == 0
    assert out.exists()
    assert doc.exists()


def test_schema_generate_defaults_to_init_directory(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    result = runner.invoke(app, ["schema", "generate"])
    assert result.exit_code == 0
    assert (tmp_path / "codegrade" / "schemas" / "assessment.schema.json").exists()
    assert (tmp_path / "codegrade" / "docs" / "schema.md").exists()
