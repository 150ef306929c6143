"""Generate JSON Schema and docs for the assessment input format."""

from __future__ import annotations

import json
from pathlib import Path

from codegrade.models import AssessmentInput
from codegrade.rubric import COMPLEXITY_SCORES, METRIC_WEIGHTS


def _ensure_parent(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def _collect_refs(obj: object) -> set[str]:
    """Return all ``$defs`` names referenced via ``$ref`` inside *obj*."""
    refs: set[str] = set()
    if isinstance(obj, dict):
        if "$ref" in obj:
            ref = obj["$ref"]
            if ref.startswith("#/$defs/"):
                refs.add(ref.removeprefix("#/$defs/"))
        for v in obj.values():
            refs |= _collect_refs(v)
    elif isinstance(obj, list):
        for v in obj:
            refs |= _collect_refs(v)
    return refs


def _order_defs(defs: dict) -> dict:
    """Topologically sort ``$defs`` so referenced types precede referencing types."""
    ordered: dict[str, dict] = {}
    visited: set[str] = set()

    def _visit(name: str) -> None:
        if name in visited or name not in defs:
            return
        visited.add(name)
        for dep in _collect_refs(defs[name]):
            _visit(dep)
        ordered[name] = defs[name]

    for name in defs:
        _visit(name)
    return ordered


def generate_json_schema() -> dict:
    schema = AssessmentInput.model_json_schema(by_alias=True)
    if "$defs" in schema:
        schema["$defs"] = _order_defs(schema["$defs"])
    return schema


def write_json_schema(path: Path) -> None:
    _ensure_parent(path)
    schema = generate_json_schema()
    path.write_text(json.dumps(schema, indent=2) + "\n")


def _describe_type(prop: dict) -> str:
    if "$ref" in prop:
        return prop["$ref"].removeprefix("#/$defs/")
    if "anyOf" in prop:
        return " | ".join(_describe_type(p) for p in prop["anyOf"])
    if prop.get("type") == "array":
        return f"array of {_describe_type(prop.get('items', {}))}"
    return prop.get("type", "any")


def generate_schema_doc() -> str:
    schema = generate_json_schema()
    required = set(schema.get("required", []))

    lines: list[str] = []
    lines.append("# codegrade assessment input")
    lines.append("")
    lines.append("This doc is generated from the Pydantic models.")
    lines.append("")
    lines.append("## Fields")
    for name, prop in schema.get("properties", {}).items():
        marker = "required" if name in required else "optional"
        lines.append(f"- `{name}`: {_describe_type(prop)} ({marker})")
    lines.append("")
    lines.append("## Metric weights")
    for metric, weight in METRIC_WEIGHTS.items():
        lines.append(f"- {metric}: {weight}")
    lines.append("")
    lines.append("## Complexity scores")
    lines.append(
        "Labels are compared case- and whitespace-insensitively; unknown labels score 50."
    )
    for label, score in COMPLEXITY_SCORES.items():
        lines.append(f"- `{label}`: {score:g}")
    lines.append("")
    return "\n".join(lines)


def write_schema_doc(path: Path) -> None:
    _ensure_parent(path)
    path.write_text(generate_schema_doc())
