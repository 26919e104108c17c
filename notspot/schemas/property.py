"""Property definition and property group schemas."""

from __future__ import annotations

from pydantic import Field

from .object import WireModel


class PropertyOption(WireModel):
    label: str
    value: str
    display_order: int = Field(0, alias="displayOrder")
    hidden: bool = False


class PropertyCreate(WireModel):
    name: str
    label: str
    type: str = "string"
    field_type: str = Field("text", alias="fieldType")
    group_name: str = Field("", alias="groupName")
    description: str = ""
    options: list[PropertyOption] = Field(default_factory=list)
    display_order: int = Field(0, alias="displayOrder")
    has_unique_value: bool = Field(False, alias="hasUniqueValue")
    hidden: bool = False
    form_field: bool = Field(False, alias="formField")
    calculated: bool = False
    external_options: bool = Field(False, alias="externalOptions")


class PropertyUpdate(WireModel):
    label: str | None = None
    description: str | None = None
    group_name: str | None = Field(None, alias="groupName")
    field_type: str | None = Field(None, alias="fieldType")
    options: list[PropertyOption] | None = None
    display_order: int | None = Field(None, alias="displayOrder")
    hidden: bool | None = None
    form_field: bool | None = Field(None, alias="formField")


class PropertyGroupCreate(WireModel):
    name: str
    label: str
    display_order: int = Field(0, alias="displayOrder")


class PropertyGroupUpdate(WireModel):
    label: str | None = None
    display_order: int | None = Field(None, alias="displayOrder")


class PropertyBatchCreateRequest(WireModel):
    inputs: list[PropertyCreate] = Field(default_factory=list)


class PropertyName(WireModel):
    name: str


class PropertyBatchNamesRequest(WireModel):
    inputs: list[PropertyName] = Field(default_factory=list)


# ── Wire serialisers ───────────────────────────────────────────────────────

def property_wire(pd) -> dict:
    body = {
        "name": pd.name,
        "label": pd.label,
        "type": pd.type,
        "fieldType": pd.field_type,
        "groupName": pd.group_name,
        "description": pd.description or "",
        "options": pd.options_json or [],
        "displayOrder": pd.display_order,
        "hasUniqueValue": pd.has_unique_value,
        "hidden": pd.hidden,
        "formField": pd.form_field,
        "calculated": pd.calculated,
        "externalOptions": pd.external_options,
        "archived": pd.archived,
        "hubspotDefined": pd.hubspot_defined,
        "createdAt": pd.created_at,
        "updatedAt": pd.updated_at,
    }
    if pd.archived_at:
        body["archivedAt"] = pd.archived_at
    if pd.hubspot_defined:
        body["modificationMetadata"] = {
            "archivable": False,
            "readOnlyDefinition": True,
            "readOnlyOptions": False,
            "readOnlyValue": False,
        }
    return body


def group_wire(group) -> dict:
    return {
        "name": group.name,
        "label": group.label,
        "displayOrder": group.display_order,
        "archived": group.archived,
    }
