"""Export request and status shapes."""

from __future__ import annotations

from pydantic import Field

from .object import WireModel


class ExportRequest(WireModel):
    export_type: str = Field("VIEW", alias="exportType")
    export_name: str = Field("", alias="exportName")
    object_type: str = Field("", alias="objectType")
    object_properties: list[str] = Field(default_factory=list, alias="objectProperties")


def export_status_wire(job, download_url: str | None = None) -> dict:
    body = {
        "id": str(job.id),
        "status": job.state,
        "createdAt": job.created_at,
        "updatedAt": job.updated_at,
    }
    if job.state == "COMPLETE":
        result = {"recordCount": job.record_count}
        if download_url:
            result["downloadUrl"] = download_url
        body["result"] = result
    return body
