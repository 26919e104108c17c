"""Pipeline and stage schemas."""

from __future__ import annotations

from typing import Any

from pydantic import Field, field_validator

from .object import WireModel


class StageCreate(WireModel):
    label: str
    display_order: int = Field(0, alias="displayOrder")
    metadata: dict[str, str] = Field(default_factory=dict)

    @field_validator("metadata", mode="before")
    @classmethod
    def _metadata_strings(cls, v: Any) -> Any:
        if isinstance(v, dict):
            return {k: str(val) for k, val in v.items()}
        return v


class StageUpdate(WireModel):
    label: str | None = None
    display_order: int | None = Field(None, alias="displayOrder")
    metadata: dict[str, str] | None = None

    @field_validator("metadata", mode="before")
    @classmethod
    def _metadata_strings(cls, v: Any) -> Any:
        if isinstance(v, dict):
            return {k: str(val) for k, val in v.items()}
        return v


class PipelineCreate(WireModel):
    label: str
    display_order: int = Field(0, alias="displayOrder")
    stages: list[StageCreate] = Field(default_factory=list)


class PipelineUpdate(WireModel):
    label: str | None = None
    display_order: int | None = Field(None, alias="displayOrder")
    archived: bool | None = None


class PipelineReplace(WireModel):
    label: str
    display_order: int = Field(0, alias="displayOrder")
    stages: list[StageCreate] | None = None


def stage_wire(stage) -> dict:
    return {
        "id": str(stage.id),
        "label": stage.label,
        "displayOrder": stage.display_order,
        "metadata": stage.metadata_json or {},
        "archived": stage.archived,
        "createdAt": stage.created_at,
        "updatedAt": stage.updated_at,
    }


def pipeline_wire(pipeline) -> dict:
    return {
        "id": str(pipeline.id),
        "label": pipeline.label,
        "displayOrder": pipeline.display_order,
        "stages": [stage_wire(s) for s in pipeline.stages],
        "archived": pipeline.archived,
        "createdAt": pipeline.created_at,
        "updatedAt": pipeline.updated_at,
    }
