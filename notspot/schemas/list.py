"""List request and response shapes."""

from __future__ import annotations

from typing import Any

from pydantic import Field

from .object import WireModel


class ListCreate(WireModel):
    name: str = ""
    object_type_id: str = Field("", alias="objectTypeId")
    processing_type: str = Field("MANUAL", alias="processingType")
    filter_branch: dict[str, Any] | None = Field(None, alias="filterBranch")


class ListNameUpdate(WireModel):
    name: str = ""


class ListFiltersUpdate(WireModel):
    filter_branch: dict[str, Any] | None = Field(None, alias="filterBranch")


class ListSearch(WireModel):
    query: str = ""
    offset: int = 0
    count: int = 25


class MembershipChange(WireModel):
    record_ids_to_add: list[str | int] = Field(default_factory=list, alias="recordIdsToAdd")
    record_ids_to_remove: list[str | int] = Field(default_factory=list, alias="recordIdsToRemove")


def list_wire(lst) -> dict:
    body = {
        "listId": str(lst.id),
        "name": lst.name,
        "objectTypeId": lst.object_type_id,
        "processingType": lst.processing_type,
        "processingStatus": lst.processing_status,
        "listVersion": lst.list_version,
        "size": lst.size or 0,
        "createdAt": lst.created_at,
        "updatedAt": lst.updated_at,
    }
    if lst.filter_branch is not None:
        body["filterBranch"] = lst.filter_branch
    if lst.deleted_at:
        body["deletedAt"] = lst.deleted_at
    return body


def membership_wire(membership) -> dict:
    return {
        "recordId": str(membership.object_id),
        "listId": str(membership.list_id),
        "addedAt": membership.added_at,
    }


def membership_change_wire(added: list[str], removed: list[str], missing: list[str]) -> dict:
    # HubSpot sends both spellings of the added/removed keys.
    return {
        "recordIdsAdded": added,
        "recordsIdsAdded": added,
        "recordIdsMissing": missing,
        "recordIdsRemoved": removed,
        "recordsIdsRemoved": removed,
    }
