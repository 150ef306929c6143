from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, asdict
from typing import Any

import numpy as np

from codegrade.engine import AssessmentResult
from codegrade.grades import FuzzyGrade, LetterGrade


@dataclass
class MetricStatistics:
    """Statistics for a single metric across submissions."""

    avg: float | None
    min: float | None
    max: float | None
    stddev: float | None

    def to_dict(self) -> dict[str, float | None]:
        return asdict(self)


@dataclass
class BatchSummary:
    """Summary of a graded batch."""

    count: int
    rejected_count: int
    failed_count: int
    pass_rate: float
    normalized_score: MetricStatistics
    metric_stats: dict[str, MetricStatistics]
    letter_grades: dict[str, int]
    fuzzy_grades: dict[str, int]

    def to_dict(self) -> dict[str, Any]:
        return {
            "count": self.count,
            "rejected_count": self.rejected_count,
            "failed_count": self.failed_count,
            "pass_rate": self.pass_rate,
            "normalized_score": self.normalized_score.to_dict(),
            "metric_stats": {k: v.to_dict() for k, v in self.metric_stats.items()},
            "letter_grades": self.letter_grades,
            "fuzzy_grades": self.fuzzy_grades,
        }


def compute_stats(values: list[float | int | None]) -> MetricStatistics:
    """Compute avg, min, max, stddev for a list of numeric values."""
    nums = [v for v in values if v is not None]
    if not nums:
        return MetricStatistics(avg=None, min=None, max=None, stddev=None)

    arr = np.array(nums, dtype=float)
    return MetricStatistics(
        avg=round(float(np.mean(arr)), 4),
        min=round(float(np.min(arr)), 4),
        max=round(float(np.max(arr)), 4),
        stddev=round(float(np.std(arr)), 4),
    )


def summarize_results(results: dict[str, AssessmentResult]) -> BatchSummary:
    """Aggregate per-submission results into batch statistics.

    Rejected submissions count toward the score statistics with their score of
    0; per-metric statistics only cover submissions that were scored.
    """
    graded = list(results.values())
    count = len(graded)

    metric_names: list[str] = []
    for result in graded:
        for metric in result.rubric.metrics:
            if metric.name not in metric_names:
                metric_names.append(metric.name)

    metric_stats: dict[str, MetricStatistics] = {}
    for name in metric_names:
        values = []
        for result in graded:
            metric = result.rubric.get(name)
            values.append(metric.score if metric is not None else None)
        metric_stats[name] = compute_stats(values)

    letter_counts = Counter(r.letter_grade for r in graded)
    fuzzy_counts = Counter(r.fuzzy_grade for r in graded)
    failed_count = fuzzy_counts.get(FuzzyGrade.FAILED, 0)

    return BatchSummary(
        count=count,
        rejected_count=sum(1 for r in graded if r.rejected),
        failed_count=failed_count,
        pass_rate=round((count - failed_count) / count * 100, 1) if count else 0.0,
        normalized_score=compute_stats([r.normalized_score for r in graded]),
        metric_stats=metric_stats,
        letter_grades={g.value: letter_counts[g] for g in LetterGrade if letter_counts[g]},
        fuzzy_grades={g.value: fuzzy_counts[g] for g in FuzzyGrade if fuzzy_counts[g]},
    )
