"""Base data structures for source analysis."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from codegrade.language import Language
from codegrade.models import StructuralFeatures


@dataclass(frozen=True)
class LiteralOutput:
    """An output call whose only argument is a string literal.

    Attributes:
        start: Offset of the call in the source.
        end: Offset just past the call (including a trailing ';').
        literal: The literal as written, quotes and prefixes included.
    """

    start: int
    end: int
    literal: str


@dataclass(frozen=True)
class SourceScan:
    """Raw probe results for one source text, shared by the feature
    extractor and the dump-code rules."""

    language: Language
    has_loops: bool
    has_variables: bool
    has_input_handling: bool
    has_functions: bool
    has_comments: bool
    has_consistent_indentation: bool
    literal_outputs: tuple[LiteralOutput, ...]
    has_consecutive_literal_outputs: bool


@dataclass(frozen=True)
class DumpCodeContext:
    scan: SourceScan
    pattern_problem: bool


@dataclass(frozen=True)
class DumpCodeRule:
    """A named dump-code heuristic.

    Attributes:
        name: Stable identifier, reported alongside a rejection.
        predicate: Returns True when the rule fires for a context.
        reason: Student-facing explanation used as the rejection reason.
    """

    name: str
    predicate: Callable[[DumpCodeContext], bool]
    reason: str

    def matches(self, context: DumpCodeContext) -> bool:
        return self.predicate(context)


@dataclass(frozen=True)
class DumpCodeVerdict:
    is_dump_code: bool
    reason: str | None = None
    rule: str | None = None


@dataclass(frozen=True)
class SubmissionAnalysis:
    """Language, structural features and dump-code verdict for one source."""

    language: Language
    features: StructuralFeatures
    verdict: DumpCodeVerdict
