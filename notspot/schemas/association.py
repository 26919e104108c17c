"""Association (v4) request and response schemas."""

from __future__ import annotations

from typing import Any

from pydantic import Field, field_validator

from .object import WireModel


def _int_to_str(v: Any) -> Any:
    return str(v) if isinstance(v, int) else v


class AssociationSpec(WireModel):
    association_category: str = Field("HUBSPOT_DEFINED", alias="associationCategory")
    association_type_id: int = Field(alias="associationTypeId")


class AssociationTypeInfo(WireModel):
    category: str
    type_id: int = Field(alias="typeId")
    label: str | None = None

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)


class AssociationResult(WireModel):
    to_object_id: str = Field(alias="toObjectId")
    association_types: list[AssociationTypeInfo] = Field(
        default_factory=list, alias="associationTypes"
    )

    def to_wire(self) -> dict:
        return {
            "toObjectId": self.to_object_id,
            "associationTypes": [t.to_wire() for t in self.association_types],
        }


class LabelsBetweenObjectPair(WireModel):
    from_object_type_id: str = Field(alias="fromObjectTypeId")
    from_object_id: str = Field(alias="fromObjectId")
    to_object_type_id: str = Field(alias="toObjectTypeId")
    to_object_id: str = Field(alias="toObjectId")
    labels: list[AssociationTypeInfo] = Field(default_factory=list)

    def to_batch_item(self) -> dict:
        return {
            "from": {"id": self.from_object_id},
            "to": [{
                "toObjectId": self.to_object_id,
                "associationTypes": [t.to_wire() for t in self.labels],
            }],
        }


# ── Inputs ─────────────────────────────────────────────────────────────────

class ObjectRef(WireModel):
    id: str

    @field_validator("id", mode="before")
    @classmethod
    def _id_to_str(cls, v: Any) -> Any:
        return _int_to_str(v)


class AssociationPair(WireModel):
    from_: ObjectRef = Field(alias="from")
    to: ObjectRef


class AssociationPairWithTypes(AssociationPair):
    types: list[AssociationSpec] = Field(default_factory=list)


class BatchPairRequest(WireModel):
    inputs: list[AssociationPair] = Field(default_factory=list)


class BatchPairWithTypesRequest(WireModel):
    inputs: list[AssociationPairWithTypes] = Field(default_factory=list)


class BatchIdsRequest(WireModel):
    inputs: list[ObjectRef] = Field(default_factory=list)


class LabelCreate(WireModel):
    label: str
    name: str | None = None
    inverse_label: str | None = Field(None, alias="inverseLabel")
    association_category: str | None = Field(None, alias="associationCategory")


class LabelUpdate(WireModel):
    association_type_id: int = Field(alias="associationTypeId")
    label: str
    inverse_label: str | None = Field(None, alias="inverseLabel")
