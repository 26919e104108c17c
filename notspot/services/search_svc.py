"""Search compiler: filter groups, full-text query and sorting over the EAV table.

Every filter occurrence gets its own LEFT OUTER JOIN of ``property_value``
under a unique alias, so a missing property shows up as NULL and the negative
operators can match it. The count and the page query are built from the same
clause builder.
"""

from __future__ import annotations

import operator as op
from dataclasses import dataclass
from typing import Any

from sqlalchemy import and_, distinct, false, func, or_, select, true
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased, outerjoin

from ..errors import ValidationError
from ..models.crm_object import CrmObject, PropertyValue
from ..schemas.search import Filter, PublicObjectSearchRequest, SearchResult
from . import property_value_svc as pv_svc
from .object_svc import to_public
from .type_svc import resolve_object_type

MAX_FILTER_GROUPS = 5
MAX_FILTERS_PER_GROUP = 6
DEFAULT_SEARCH_LIMIT = 10
MAX_SEARCH_LIMIT = 200
MAX_SEARCH_TOTAL = 10_000

# Properties matched by the free-text ``query``.
SEARCHABLE_PROPERTIES = (
    "email", "firstname", "lastname", "name", "domain", "company",
    "hs_object_id", "phone", "website",
)

_COMPARISONS = {
    "EQ": op.eq,
    "LT": op.lt,
    "LTE": op.le,
    "GT": op.gt,
    "GTE": op.ge,
}

OPERATORS = frozenset(_COMPARISONS) | {
    "NEQ", "BETWEEN", "IN", "NOT_IN", "HAS_PROPERTY", "NOT_HAS_PROPERTY",
    "CONTAINS_TOKEN", "NOT_CONTAINS_TOKEN",
}


@dataclass
class SearchClauses:
    from_clause: Any
    where: Any
    sort_value: Any = None
    descending: bool = False


def validate_search_request(req: PublicObjectSearchRequest) -> int:
    """Check request shape before any query runs. Returns the numeric offset."""
    if len(req.filter_groups) > MAX_FILTER_GROUPS:
        raise ValidationError(f"A maximum of {MAX_FILTER_GROUPS} filterGroups is allowed")
    for i, group in enumerate(req.filter_groups):
        if len(group.filters) > MAX_FILTERS_PER_GROUP:
            raise ValidationError(
                f"A maximum of {MAX_FILTERS_PER_GROUP} filters per group is allowed (group {i})"
            )
        for f in group.filters:
            if not f.property_name:
                raise ValidationError("Filter propertyName is required")
            if f.operator not in OPERATORS:
                raise ValidationError(f"Invalid operator: {f.operator!r}")

    if not req.after:
        return 0
    try:
        offset = int(req.after)
    except ValueError:
        raise ValidationError(f"Invalid after cursor {req.after!r}") from None
    if offset < 0:
        raise ValidationError(f"Invalid after cursor {req.after!r}")
    return offset


def filter_clause(value, f: Filter):
    """SQL predicate for one filter against a joined ``value`` column."""
    operand = f.value if f.value is not None else ""
    name = f.operator

    if name in _COMPARISONS:
        return _COMPARISONS[name](value, operand)
    if name == "NEQ":
        return or_(value.is_(None), value != operand)
    if name == "BETWEEN":
        return value.between(operand, f.high_value if f.high_value is not None else "")
    if name == "IN":
        return value.in_(f.values) if f.values else false()
    if name == "NOT_IN":
        return or_(value.is_(None), value.not_in(f.values)) if f.values else true()
    if name == "HAS_PROPERTY":
        return value.is_not(None)
    if name == "NOT_HAS_PROPERTY":
        return value.is_(None)
    if name == "CONTAINS_TOKEN":
        return value.contains(operand, autoescape=True)
    if name == "NOT_CONTAINS_TOKEN":
        return or_(value.is_(None), ~value.contains(operand, autoescape=True))
    raise ValidationError(f"Unsupported operator: {name!r}")


def build_search_clauses(type_id: str, req: PublicObjectSearchRequest) -> SearchClauses:
    joined = None

    def join(alias, onclause):
        nonlocal joined
        joined = outerjoin(joined if joined is not None else CrmObject, alias, onclause)

    group_clauses = []
    for group in req.filter_groups:
        predicates = []
        for f in group.filters:
            pv = aliased(PropertyValue)
            join(pv, and_(pv.object_id == CrmObject.id, pv.property_name == f.property_name))
            predicates.append(filter_clause(pv.value, f))
        if predicates:
            group_clauses.append(and_(*predicates))

    where = and_(CrmObject.object_type_id == type_id, CrmObject.archived.is_(False))
    if group_clauses:
        where = and_(where, or_(*group_clauses))

    if req.query:
        pv_q = aliased(PropertyValue)
        join(pv_q, pv_q.object_id == CrmObject.id)
        where = and_(
            where,
            pv_q.property_name.in_(SEARCHABLE_PROPERTIES),
            pv_q.value.contains(req.query, autoescape=True),
        )

    sort_value = None
    descending = False
    if req.sorts:
        sort = req.sorts[0]
        pv_s = aliased(PropertyValue)
        join(pv_s, and_(pv_s.object_id == CrmObject.id, pv_s.property_name == sort.property_name))
        sort_value = pv_s.value
        descending = sort.direction.upper() == "DESCENDING"

    from_clause = joined if joined is not None else CrmObject
    return SearchClauses(from_clause, where, sort_value, descending)


async def search_objects(
    db: AsyncSession, object_type: str, req: PublicObjectSearchRequest
) -> SearchResult:
    offset = validate_search_request(req)
    type_id = await resolve_object_type(db, object_type)

    limit = req.limit if req.limit > 0 else DEFAULT_SEARCH_LIMIT
    limit = min(limit, MAX_SEARCH_LIMIT)
    if offset + limit > MAX_SEARCH_TOTAL:
        limit = MAX_SEARCH_TOTAL - offset
        if limit <= 0:
            return SearchResult(total=0)

    clauses = build_search_clauses(type_id, req)

    count_stmt = (
        select(func.count(distinct(CrmObject.id)))
        .select_from(clauses.from_clause)
        .where(clauses.where)
    )
    total = min((await db.execute(count_stmt)).scalar_one(), MAX_SEARCH_TOTAL)

    if clauses.sort_value is not None:
        order = clauses.sort_value.desc() if clauses.descending else clauses.sort_value.asc()
        page_stmt = (
            select(CrmObject.id, clauses.sort_value)
            .distinct()
            .select_from(clauses.from_clause)
            .where(clauses.where)
            .order_by(order, CrmObject.id)
        )
    else:
        page_stmt = (
            select(CrmObject.id)
            .distinct()
            .select_from(clauses.from_clause)
            .where(clauses.where)
            .order_by(CrmObject.id)
        )
    page_stmt = page_stmt.limit(limit).offset(offset)
    ids = [row[0] for row in (await db.execute(page_stmt)).all()]

    objects = {}
    if ids:
        result = await db.execute(select(CrmObject).where(CrmObject.id.in_(ids)))
        objects = {o.id: o for o in result.scalars().all()}
    names = pv_svc.wanted_properties(req.properties) if req.properties else None
    values = await pv_svc.get_properties_bulk(db, ids, names)

    next_offset = offset + limit
    return SearchResult(
        total=total,
        results=[to_public(objects[i], values[i]) for i in ids if i in objects],
        after=str(next_offset) if next_offset < total else None,
    )
