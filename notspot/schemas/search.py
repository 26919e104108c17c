"""Search request and response schemas."""

from __future__ import annotations

from typing import Any

from pydantic import Field, field_validator

from .object import SimplePublicObject, WireModel


def _scalar_to_str(v: Any) -> Any:
    if isinstance(v, bool):
        return "true" if v else "false"
    if isinstance(v, (int, float)):
        return str(v)
    return v


class Filter(WireModel):
    property_name: str = Field("", alias="propertyName")
    operator: str = ""
    value: str | None = None
    high_value: str | None = Field(None, alias="highValue")
    values: list[str] = Field(default_factory=list)

    @field_validator("value", "high_value", mode="before")
    @classmethod
    def _coerce_scalar(cls, v: Any) -> Any:
        return _scalar_to_str(v)

    @field_validator("values", mode="before")
    @classmethod
    def _coerce_values(cls, v: Any) -> Any:
        if v is None:
            return []
        if isinstance(v, list):
            return [_scalar_to_str(item) for item in v]
        return v


class FilterGroup(WireModel):
    filters: list[Filter] = Field(default_factory=list)


class Sort(WireModel):
    property_name: str = Field(alias="propertyName")
    direction: str = "ASCENDING"


class PublicObjectSearchRequest(WireModel):
    filter_groups: list[FilterGroup] = Field(default_factory=list, alias="filterGroups")
    query: str | None = None
    sorts: list[Sort] = Field(default_factory=list)
    properties: list[str] = Field(default_factory=list)
    limit: int = 0
    after: str | None = None

    @field_validator("after", mode="before")
    @classmethod
    def _after_to_str(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v


class SearchResult(WireModel):
    total: int = 0
    results: list[SimplePublicObject] = Field(default_factory=list)
    after: str | None = None

    def to_wire(self) -> dict:
        body: dict[str, Any] = {
            "total": self.total,
            "results": [o.to_wire() for o in self.results],
        }
        if self.after is not None:
            body["paging"] = {"next": {"after": self.after}}
        return body
