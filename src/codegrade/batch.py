from __future__ import annotations

import json
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import yaml

from codegrade.config import BatchConfig, SubmissionConfig
from codegrade.engine import AssessmentResult, assess
from codegrade.metrics import BatchSummary, summarize_results
from codegrade.verbose import setup_logger

SubmissionName = str


class BatchGrader:
    """Grades every submission of a batch manifest in parallel."""

    def __init__(
        self,
        config: BatchConfig,
        output_dir: Path,
        submission_filter: str | None = None,
        verbose: bool = False,
        parallel: int = 1,
    ):
        self.config = config
        self.output_dir = output_dir
        self.submission_filter = submission_filter
        self.verbose = verbose
        self.parallel = parallel
        self.interrupted = False
        self.results: dict[SubmissionName, AssessmentResult] = {}
        self.errors: dict[SubmissionName, str] = {}
        self.summary: BatchSummary | None = None

    def execute(self) -> Path:
        """Grade all submissions. Returns the run directory."""
        run_id = datetime.now(timezone.utc).strftime("%Y-%m-%d_%H%M%S")
        run_dir = self.output_dir / run_id
        run_dir.mkdir(parents=True, exist_ok=True)

        logger = setup_logger(
            run_dir / "debug.log", verbose=self.verbose, logger_name="codegrade_batch"
        )
        logger.debug(f"Starting batch '{self.config.name}'")

        submissions = self.config.submissions
        if self.submission_filter:
            submissions = [s for s in submissions if s.name == self.submission_filter]
            if not submissions:
                raise ValueError(f"No submission named '{self.submission_filter}'")

        print(f"Grading {len(submissions)} submission(s) with parallelism {self.parallel}...")

        completed: dict[SubmissionName, AssessmentResult] = {}
        with ThreadPoolExecutor(max_workers=self.parallel) as executor:
            future_to_name = {
                executor.submit(self._grade, submission, logger): submission.name
                for submission in submissions
            }

            completed_count = 0
            try:
                for future in as_completed(future_to_name):
                    name = future_to_name[future]
                    completed_count += 1
                    progress = f"[{completed_count}/{len(future_to_name)}]"
                    try:
                        result = future.result()
                    except (ValueError, OSError) as e:
                        # Unreadable code or invalid input fails only this submission
                        self.errors[name] = str(e)
                        print(f"  {progress} ERROR  {name}: {e}")
                        logger.error(f"Submission '{name}' could not be graded: {e}")
                        continue

                    completed[name] = result
                    status = "REJECTED" if result.rejected else result.fuzzy_grade.value.upper()
                    print(
                        f"  {progress} {status}  {name} "
                        f"({result.normalized_score:.1f}, {result.letter_grade.value})"
                    )
            except KeyboardInterrupt:
                self.interrupted = True
                logger.warning("Batch interrupted by user (Ctrl+C). Saving partial results...")
                cancelled_count = sum(1 for future in future_to_name if future.cancel())
                logger.info(f"Cancelled {cancelled_count} pending submission(s).")
                for future, name in future_to_name.items():
                    if name in completed or not future.done() or future.cancelled():
                        continue
                    try:
                        completed[name] = future.result(timeout=0)
                    except Exception as e:
                        logger.debug(f"Failed to collect result for {name}: {e}")

        # Preserve manifest order in every output
        order = [s.name for s in submissions]
        self.results = {name: completed[name] for name in order if name in completed}
        self.summary = summarize_results(self.results)
        self._write_results(run_dir, order)

        logger.debug(
            f"Batch '{self.config.name}' finished: {len(self.results)} graded, "
            f"{len(self.errors)} error(s)"
        )
        return run_dir

    def _grade(
        self, submission: SubmissionConfig, logger: logging.Logger
    ) -> AssessmentResult:
        """Grade a single submission."""
        logger.debug(f"Grading submission '{submission.name}'")
        assessment = submission.to_assessment_input(self.config.defaults)
        return assess(assessment, logger=logger)

    def _write_results(self, run_dir: Path, order: list[SubmissionName]) -> None:
        """Write results.json, summary.json, junit.xml and meta.yaml."""
        from codegrade.reporting.junit import write_junit

        results_doc = {name: result.to_dict() for name, result in self.results.items()}
        (run_dir / "results.json").write_text(json.dumps(results_doc, indent=2) + "\n")

        assert self.summary is not None
        (run_dir / "summary.json").write_text(
            json.dumps(self.summary.to_dict(), indent=2) + "\n"
        )

        write_junit(run_dir, self.results, batch_name=self.config.name)

        try:
            import importlib.metadata

            codegrade_version = importlib.metadata.version("codegrade")
        except Exception:
            codegrade_version = "unknown"

        meta: dict[str, Any] = {
            "run_id": run_dir.name,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "batch": self.config.name,
            "submissions": order,
            "codegrade_version": codegrade_version,
            "parallel": self.parallel,
        }
        if self.errors:
            meta["errors"] = dict(self.errors)
        if self.interrupted:
            meta["interrupted"] = True

        (run_dir / "meta.yaml").write_text(yaml.dump(meta, default_flow_style=False))
