"""Import request and response shapes."""

from __future__ import annotations

from typing import Any

from pydantic import Field

from .object import WireModel


class ColumnMapping(WireModel):
    column_object_type_id: str = Field("", alias="columnObjectTypeId")
    column_name: str = Field("", alias="columnName")
    property_name: str = Field("", alias="propertyName")


class FileImportPage(WireModel):
    has_header: bool = Field(False, alias="hasHeader")
    column_mappings: list[ColumnMapping] = Field(default_factory=list, alias="columnMappings")


class ImportFile(WireModel):
    file_name: str = Field("", alias="fileName")
    file_format: str = Field("CSV", alias="fileFormat")
    file_import_page: FileImportPage = Field(
        default_factory=FileImportPage, alias="fileImportPage"
    )


class ImportRequest(WireModel):
    name: str = ""
    import_operations: dict[str, Any] = Field(default_factory=dict, alias="importOperations")
    files: list[ImportFile] = Field(default_factory=list)

    def operation(self) -> tuple[str, str]:
        """(object type, operation) of the first import operation.

        Accepts both ``{"0-1": "UPSERT"}`` and
        ``{"x": {"objectTypeId": "0-1", "importOperationType": "UPSERT"}}``; without
        any operation the first column mapping decides the type and rows are created.
        """
        for key, op in self.import_operations.items():
            if isinstance(op, dict):
                type_ref = op.get("objectTypeId") or key
                return type_ref, str(op.get("importOperationType") or "CREATE").upper()
            return key, str(op or "CREATE").upper()
        mappings = self.files[0].file_import_page.column_mappings if self.files else []
        return (mappings[0].column_object_type_id if mappings else ""), "CREATE"


def import_wire(job) -> dict:
    body = {
        "id": str(job.id),
        "state": job.state,
        "optOutImport": job.opt_out_import,
        "metadata": job.metadata_json or {},
        "createdAt": job.created_at,
        "updatedAt": job.updated_at,
    }
    if job.name:
        body["name"] = job.name
    return body


def import_error_wire(err) -> dict:
    body = {
        "id": str(err.id),
        "errorType": err.error_type,
        "message": err.message,
        "createdAt": err.created_at,
    }
    if err.invalid_value:
        body["invalidValue"] = err.invalid_value
    if err.object_type_id:
        body["objectType"] = err.object_type_id
    if err.line_number:
        body["lineNumber"] = err.line_number
    return body
