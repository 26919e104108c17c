"""CRM object request and response schemas (HubSpot v3 wire shapes)."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def stringify_properties(value: Any) -> Any:
    """Coerce property values to strings; every value is stored as text."""
    if not isinstance(value, dict):
        return value
    out = {}
    for key, raw in value.items():
        if raw is None:
            out[key] = ""
        elif isinstance(raw, bool):
            out[key] = "true" if raw else "false"
        else:
            out[key] = str(raw)
    return out


class WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ValueWithTimestamp(WireModel):
    value: str
    timestamp: str
    source_type: str = Field("API", alias="sourceType")


class SimplePublicObject(WireModel):
    id: str
    properties: dict[str, str] = Field(default_factory=dict)
    created_at: str = Field(alias="createdAt")
    updated_at: str = Field(alias="updatedAt")
    archived: bool = False
    archived_at: str | None = Field(None, alias="archivedAt")
    properties_with_history: dict[str, list[ValueWithTimestamp]] | None = Field(
        None, alias="propertiesWithHistory"
    )

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class ObjectPage(WireModel):
    results: list[SimplePublicObject] = Field(default_factory=list)
    after: str | None = None

    def to_wire(self, base_path: str = "") -> dict:
        body: dict[str, Any] = {"results": [o.to_wire() for o in self.results]}
        if self.after:
            body["paging"] = {"next": {
                "after": self.after,
                "link": f"{base_path}?after={self.after}",
            }}
        return body


class BatchResult(WireModel):
    status: str = "COMPLETE"
    results: list[SimplePublicObject] = Field(default_factory=list)
    started_at: str = Field(alias="startedAt")
    completed_at: str = Field("", alias="completedAt")
    num_errors: int = Field(0, alias="numErrors")

    def to_wire(self) -> dict:
        return {
            "status": self.status,
            "results": [o.to_wire() for o in self.results],
            "startedAt": self.started_at,
            "completedAt": self.completed_at,
            "numErrors": self.num_errors,
        }


# ── Inputs ─────────────────────────────────────────────────────────────────

class PropertiesInput(WireModel):
    properties: dict[str, str] = Field(default_factory=dict)

    @field_validator("properties", mode="before")
    @classmethod
    def _coerce_properties(cls, v: Any) -> Any:
        return stringify_properties(v)


class ObjectCreate(PropertiesInput):
    properties: dict[str, str]


class ObjectUpdate(PropertiesInput):
    pass


class BatchUpdateInput(PropertiesInput):
    id: str

    @field_validator("id", mode="before")
    @classmethod
    def _id_to_str(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v


class UpsertInput(PropertiesInput):
    id: str | None = None
    id_property: str | None = Field(None, alias="idProperty")


class ObjectId(WireModel):
    id: str

    @field_validator("id", mode="before")
    @classmethod
    def _id_to_str(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v


class BatchCreateRequest(WireModel):
    inputs: list[ObjectCreate] = Field(default_factory=list)


class BatchReadRequest(WireModel):
    inputs: list[ObjectId] = Field(default_factory=list)
    properties: list[str] = Field(default_factory=list)
    properties_with_history: list[str] = Field(default_factory=list, alias="propertiesWithHistory")
    id_property: str | None = Field(None, alias="idProperty")


class BatchUpdateRequest(WireModel):
    inputs: list[BatchUpdateInput] = Field(default_factory=list)


class BatchUpsertRequest(WireModel):
    inputs: list[UpsertInput] = Field(default_factory=list)


class BatchArchiveRequest(WireModel):
    inputs: list[ObjectId] = Field(default_factory=list)


class MergeRequest(WireModel):
    primary_object_id: str = Field(alias="primaryObjectId")
    object_id_to_merge: str = Field(alias="objectIdToMerge")

    @field_validator("primary_object_id", "object_id_to_merge", mode="before")
    @classmethod
    def _ids_to_str(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v
