"""NotSpot models - re-exports all models and Base.metadata."""

from .base import Base, TimestampMixin, ArchivableMixin, utc_timestamp
from .object_type import ObjectType
from .crm_object import CrmObject, PropertyValue, PropertyValueHistory
from .association import Association, AssociationType, HUBSPOT_DEFINED, USER_DEFINED
from .property import PropertyDefinition, PropertyGroup
from .pipeline import Pipeline, PipelineStage
from .owner import Owner
from .list import CrmList, ListMembership
from .import_job import ImportJob, ImportRowError
from .export_job import ExportJob

__all__ = [
    "Base",
    "TimestampMixin",
    "ArchivableMixin",
    "utc_timestamp",
    "ObjectType",
    "CrmObject",
    "PropertyValue",
    "PropertyValueHistory",
    "Association",
    "AssociationType",
    "HUBSPOT_DEFINED",
    "USER_DEFINED",
    "PropertyDefinition",
    "PropertyGroup",
    "Pipeline",
    "PipelineStage",
    "Owner",
    "CrmList",
    "ListMembership",
    "ImportJob",
    "ImportRowError",
    "ExportJob",
]
