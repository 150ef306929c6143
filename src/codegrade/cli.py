from __future__ import annotations

import json
from pathlib import Path

import typer

app = typer.Typer(name="codegrade", help="Grade code submissions")
schema_app = typer.Typer(name="schema", help="Generate schema tooling")
app.add_typer(schema_app, name="schema")


@app.command()
def assess(
    input_file: str = typer.Argument(help="Path to an assessment input (YAML or JSON)"),
    code: str | None = typer.Option(
        None, "--code", help="Read the submission source from this file"
    ),
    output: str | None = typer.Option(
        None, "--output", "-o", help="Write the result JSON here instead of stdout"
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output to terminal"
    ),
):
    """Grade a single submission and print the result as JSON."""
    import logging

    from pydantic import ValidationError

    from codegrade.config import load_assessment
    from codegrade.engine import assess as assess_submission

    input_path = Path(input_file)
    if not input_path.exists():
        typer.echo(f"Error: input file not found: {input_file}", err=True)
        raise typer.Exit(1)
    code_path = Path(code) if code is not None else None
    if code_path is not None and not code_path.exists():
        typer.echo(f"Error: code file not found: {code}", err=True)
        raise typer.Exit(1)

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG, format="[%(asctime)s] %(levelname)s %(message)s"
        )

    try:
        assessment = load_assessment(input_path, code_path)
    except ValidationError as e:
        typer.echo(f"Error: invalid assessment input:\n{e}", err=True)
        raise typer.Exit(1)
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    result = assess_submission(assessment)
    document = json.dumps(result.to_dict(), indent=2)

    if output is not None:
        output_path = Path(output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(document + "\n")
        typer.echo(
            f"{result.letter_grade.value} ({result.normalized_score:.2f}) -> {output_path}"
        )
    else:
        typer.echo(document)


@app.command()
def batch(
    manifest: str = typer.Argument(help="Path to batch manifest YAML"),
    submission: str | None = typer.Option(None, help="Grade only this submission"),
    output_dir: str = typer.Option("runs", help="Output directory for run results"),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output to terminal"
    ),
    parallel: int = typer.Option(
        1, "--parallel", "-p", min=1, max=100, help="Number of submissions graded at once"
    ),
):
    """Grade every submission listed in a batch manifest."""
    from codegrade.batch import BatchGrader
    from codegrade.config import load_batch

    manifest_path = Path(manifest)
    if not manifest_path.exists():
        typer.echo(f"Error: manifest not found: {manifest}", err=True)
        raise typer.Exit(1)

    try:
        batch_config = load_batch(manifest_path)
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    grader = BatchGrader(
        config=batch_config,
        output_dir=Path(output_dir),
        submission_filter=submission,
        verbose=verbose,
        parallel=parallel,
    )

    try:
        run_dir = grader.execute()
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if grader.interrupted:
        typer.echo(f"Partial run saved: {run_dir}")
    else:
        typer.echo(f"Run complete: {run_dir}")
    typer.echo(f"Results: {run_dir / 'results.json'}")
    if not verbose:
        typer.echo(f"Debug log: {run_dir / 'debug.log'}")

    summary = grader.summary
    if summary is not None:
        typer.echo(
            f"Graded {summary.count}: {summary.rejected_count} rejected, "
            f"{summary.failed_count} failed, pass rate {summary.pass_rate}%"
        )

    # Exit with non-zero if anything was rejected, failed, errored or interrupted
    if grader.interrupted or grader.errors:
        raise typer.Exit(1)
    if summary is not None and (summary.rejected_count or summary.failed_count):
        raise typer.Exit(1)


@app.command()
def init(
    dir: str = typer.Option(
        "codegrade", "--dir", help="Directory to initialize a grading project in"
    ),
):
    """Initialize a grading project with an example batch manifest."""
    project_dir = Path(dir)

    if not project_dir.exists():
        project_dir.mkdir(parents=True, exist_ok=True)

    manifest = project_dir / "batch.yaml"
    if manifest.exists():
        typer.echo(f"batch.yaml already exists in {dir}, skipping.")
        return

    manifest.write_text("""\
name: star-pyramid
defaults:
  efficiency: 80
  readability: 80
  timeComplexity: "O(n^2)"
  spaceComplexity: "O(1)"
  problemText: "Print a pyramid pattern of n rows"

submissions:
  - name: example-student
    code_file: ./submissions/example.py
    correctness: 90
    testCasesPassed: 4
    totalTestCases: 5
""")

    submissions = project_dir / "submissions"
    submissions.mkdir(parents=True, exist_ok=True)
    (submissions / "example.py").write_text("""\
# Print a pyramid of stars
n = int(input())
for i in range(1, n + 1):
    print(" " * (n - i) + "*" * (2 * i - 1))
""")

    typer.echo(f"Initialized grading project in {dir}:")
    typer.echo("  batch.yaml                - example batch manifest")
    typer.echo("  submissions/example.py    - example submission")


@schema_app.command("generate")
def schema_generate(
    dir: str = typer.Option(
        "codegrade", "--dir", help="Project directory for default schema/doc outputs"
    ),
    out: str | None = typer.Option(
        None,
        help="Output path for JSON Schema (defaults to <dir>/schemas/assessment.schema.json)",
    ),
    doc: str | None = typer.Option(
        None, help="Output path for schema docs (defaults to <dir>/docs/schema.md)"
    ),
):
    """Generate JSON Schema and docs for the assessment input format."""
    from codegrade.schema import write_json_schema, write_schema_doc

    project_dir = Path(dir)
    out_path = (
        Path(out)
        if out is not None
        else project_dir / "schemas" / "assessment.schema.json"
    )
    doc_path = Path(doc) if doc is not None else project_dir / "docs" / "schema.md"
    write_json_schema(out_path)
    write_schema_doc(doc_path)
    typer.echo(f"Wrote schema: {out_path}")
    typer.echo(f"Wrote docs: {doc_path}")
