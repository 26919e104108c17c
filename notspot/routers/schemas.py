"""Custom object schema routes, served under both HubSpot prefixes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..schemas.schema import (
    SchemaAssociationCreate,
    SchemaCreate,
    SchemaUpdate,
    schema_association_wire,
    schema_wire,
)
from ..services import schema_svc

router = APIRouter(tags=["schemas"])

PREFIXES = ("/crm/v3/schemas", "/crm-object-schemas/v3/schemas")


async def list_schemas(db: AsyncSession = Depends(get_db)):
    schemas = await schema_svc.list_schemas(db)
    return {"results": [schema_wire(s) for s in schemas]}


async def create_schema(data: SchemaCreate, db: AsyncSession = Depends(get_db)):
    schema = await schema_svc.create_schema(db, data)
    return schema_wire(schema)


async def get_schema(object_type: str, db: AsyncSession = Depends(get_db)):
    schema = await schema_svc.get_schema(db, object_type)
    return schema_wire(schema)


async def update_schema(
    object_type: str, data: SchemaUpdate, db: AsyncSession = Depends(get_db)
):
    schema = await schema_svc.update_schema(db, object_type, data)
    return schema_wire(schema)


async def archive_schema(object_type: str, db: AsyncSession = Depends(get_db)):
    await schema_svc.archive_schema(db, object_type)
    return Response(status_code=204)


async def create_association(
    object_type: str, data: SchemaAssociationCreate, db: AsyncSession = Depends(get_db)
):
    at = await schema_svc.create_association(db, object_type, data)
    return schema_association_wire(at)


async def delete_association(
    object_type: str, association_id: str, db: AsyncSession = Depends(get_db)
):
    await schema_svc.delete_association(db, object_type, association_id)
    return Response(status_code=204)


for prefix in PREFIXES:
    router.add_api_route(prefix, list_schemas, methods=["GET"])
    router.add_api_route(prefix, create_schema, methods=["POST"], status_code=201)
    router.add_api_route(prefix + "/{object_type}", get_schema, methods=["GET"])
    router.add_api_route(prefix + "/{object_type}", update_schema, methods=["PATCH"])
    router.add_api_route(prefix + "/{object_type}", archive_schema, methods=["DELETE"], status_code=204)
    router.add_api_route(
        prefix + "/{object_type}/associations", create_association, methods=["POST"], status_code=201
    )
    router.add_api_route(
        prefix + "/{object_type}/associations/{association_id}", delete_association,
        methods=["DELETE"], status_code=204,
    )
