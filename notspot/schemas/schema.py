"""Custom object schema (``/crm/v3/schemas``) request shapes."""

from __future__ import annotations

from pydantic import Field

from .object import WireModel
from .property import PropertyCreate


class SchemaLabels(WireModel):
    singular: str = ""
    plural: str = ""


class SchemaCreate(WireModel):
    name: str
    labels: SchemaLabels = Field(default_factory=SchemaLabels)
    primary_display_property: str | None = Field(None, alias="primaryDisplayProperty")
    properties: list[PropertyCreate] = Field(default_factory=list)
    associated_objects: list[str] = Field(default_factory=list, alias="associatedObjects")
    description: str | None = None


class SchemaUpdate(WireModel):
    labels: SchemaLabels | None = None
    primary_display_property: str | None = Field(None, alias="primaryDisplayProperty")
    description: str | None = None


class SchemaAssociationCreate(WireModel):
    from_object_type_id: str | None = Field(None, alias="fromObjectTypeId")
    to_object_type_id: str = Field(alias="toObjectTypeId")
    name: str | None = None


def schema_association_wire(at) -> dict:
    return {
        "id": str(at.id),
        "fromObjectTypeId": at.from_object_type,
        "toObjectTypeId": at.to_object_type,
        "name": at.label or "",
    }


def schema_wire(schema) -> dict:
    from .property import property_wire

    ot = schema.object_type
    return {
        "id": ot.id,
        "name": ot.name,
        "labels": {"singular": ot.label_singular, "plural": ot.label_plural},
        "primaryDisplayProperty": ot.primary_display_property or "",
        "fullyQualifiedName": ot.fully_qualified_name or "",
        "objectTypeId": ot.id,
        "description": ot.description or "",
        "properties": [property_wire(p) for p in schema.properties],
        "associations": [schema_association_wire(a) for a in schema.associations],
        "archived": ot.archived,
        "createdAt": ot.created_at,
        "updatedAt": ot.updated_at,
    }
