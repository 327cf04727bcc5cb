"""Extraction data models: field records and the function-point report."""

from __future__ import annotations

import uuid
from typing import Any, Literal

from pydantic import BaseModel, Field, computed_field, model_validator
from pydantic.alias_generators import to_camel

from fieldscope.pipeline.scoring import calculate_function_points

FieldType = Literal[
    "text", "number", "date", "select", "checkbox", "radio", "file", "email", "url", "textarea"
]
Complexity = Literal["Low", "Average", "High"]
FieldCategory = Literal["entrada", "saida", "neutro", "derivado"]


def new_field_id() -> str:
    return uuid.uuid4().hex


class BoundingBox(BaseModel):
    """Position of an OCR text element on the source image."""

    x: float
    y: float
    width: float
    height: float


class ExtractedField(BaseModel):
    """A single field found on a screen, with its classification and score.

    ``fp_value`` is computed from ``(type, complexity)`` and cannot be set.
    A payload that carries a contradicting ``fpValue`` is rejected.
    """

    model_config = {"alias_generator": to_camel, "populate_by_name": True}

    id: str = Field(default_factory=new_field_id)
    name: str
    type: FieldType = "text"
    required: bool = False
    description: str | None = None
    complexity: Complexity = "Low"
    source: str
    field_category: FieldCategory = "neutro"
    confidence: float | None = Field(default=None, ge=0.0, le=1.0)
    position: BoundingBox | None = None

    @model_validator(mode="before")
    @classmethod
    def _check_supplied_fp_value(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        supplied = data.get("fpValue", data.get("fp_value"))
        if supplied is None:
            return data
        expected = calculate_function_points(
            data.get("type", "text"), data.get("complexity", "Low")
        )
        if supplied != expected:
            raise ValueError(
                f"fpValue {supplied} does not match {expected} for "
                f"type={data.get('type')!r} complexity={data.get('complexity')!r}"
            )
        return {k: v for k, v in data.items() if k not in ("fpValue", "fp_value")}

    @computed_field(alias="fpValue")
    @property
    def fp_value(self) -> int:
        return calculate_function_points(self.type, self.complexity)


class BreakdownBucket(BaseModel):
    """Counts per complexity tier for one IFPUG category."""

    low: int = 0
    average: int = 0
    high: int = 0
    total: int = 0
    fp: int = 0


def _empty_breakdown() -> dict[str, BreakdownBucket]:
    return {key: BreakdownBucket() for key in ("EI", "EO", "EQ", "ILF", "EIF")}


class FunctionPointAnalysis(BaseModel):
    """Aggregate function-point report over a field list."""

    model_config = {"alias_generator": to_camel, "populate_by_name": True}

    total_fields: int = 0
    total_function_points: int = 0
    fields: list[ExtractedField] = Field(default_factory=list)
    detailed_breakdown: dict[str, BreakdownBucket] = Field(default_factory=_empty_breakdown)
