from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from expandvars import expandvars
from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from codegrade.models import AssessmentInput


class SubmissionConfig(BaseModel):
    """One submission in a batch manifest.

    Any key other than ``name`` and ``code_file`` is an
    :class:`AssessmentInput` field and is validated when the submission is
    graded.
    """

    model_config = ConfigDict(extra="allow")
    name: str
    code_file: str | None = None

    @field_validator("code_file")
    @classmethod
    def expand_code_file(cls, v: str | None) -> str | None:
        if v is None:
            return None
        try:
            return expandvars(v, nounset=True)
        except Exception as exc:
            raise ValueError(
                f"code_file '{v}' references an unset variable: {exc}"
            ) from exc

    def assessment_fields(self) -> dict[str, Any]:
        return dict(self.model_extra or {})

    def to_assessment_input(
        self, defaults: dict[str, Any] | None = None
    ) -> AssessmentInput:
        """Merge *defaults* under this submission's fields and validate.

        ``code_file`` is read into ``raw_code`` unless raw code is given inline.
        """
        fields = {**(defaults or {}), **self.assessment_fields()}
        inline_code = "raw_code" in fields or "rawCode" in fields
        if self.code_file is not None and not inline_code:
            fields["raw_code"] = Path(self.code_file).read_text(encoding="utf-8")
        return AssessmentInput.model_validate(fields)


class BatchConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")
    name: str = "batch"
    defaults: dict[str, Any] = {}
    submissions: list[SubmissionConfig]

    @field_validator("submissions")
    @classmethod
    def submissions_must_not_be_empty(
        cls, v: list[SubmissionConfig]
    ) -> list[SubmissionConfig]:
        if not v:
            raise ValueError("submissions must not be empty")
        return v

    @model_validator(mode="after")
    def names_must_be_unique(self) -> BatchConfig:
        seen: set[str] = set()
        duplicates = []
        for submission in self.submissions:
            if submission.name in seen:
                duplicates.append(submission.name)
            seen.add(submission.name)
        if duplicates:
            raise ValueError(f"Duplicate submission names: {', '.join(duplicates)}")
        return self


def _read_document(path: Path) -> dict[str, Any]:
    # JSON is a subset of YAML, so one loader covers both formats.
    with open(path, encoding="utf-8") as f:
        raw = yaml.safe_load(f)
    if not isinstance(raw, dict):
        raise ValueError(f"{path} must contain a mapping at the top level")
    return raw


def load_assessment(path: Path, code_path: Path | None = None) -> AssessmentInput:
    """Load and validate one assessment input document (YAML or JSON).

    ``code_path`` overrides any raw code in the document.
    """
    raw = _read_document(path)
    if code_path is not None:
        raw.pop("rawCode", None)
        raw["raw_code"] = code_path.read_text(encoding="utf-8")
    return AssessmentInput.model_validate(raw)


def load_batch(path: Path) -> BatchConfig:
    """Load and validate a batch manifest from a YAML file."""
    config_dir = path.parent.resolve()
    config = BatchConfig(**_read_document(path))

    # Resolve relative code_file paths relative to the manifest location
    for submission in config.submissions:
        if submission.code_file is None:
            continue
        code_path = Path(submission.code_file)
        if not code_path.is_absolute():
            submission.code_file = str((config_dir / code_path).resolve())

    return config
