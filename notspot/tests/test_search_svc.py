"""Test the search compiler."""

from __future__ import annotations

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession

from notspot.errors import NotFoundError, ValidationError
from notspot.schemas.search import PublicObjectSearchRequest
from notspot.services import object_svc, search_svc

PEOPLE = [
    {"email": "ada@example.com", "firstname": "Ada", "lastname": "Lovelace", "lifecyclestage": "lead"},
    {"email": "grace@example.com", "firstname": "Grace", "lastname": "Hopper", "lifecyclestage": "customer"},
    {"email": "alan@example.org", "firstname": "Alan", "lastname": "Turing", "lifecyclestage": "lead"},
    {"email": "edsger@example.org", "firstname": "Edsger", "lifecyclestage": "customer"},
    {"email": "barbara@example.net", "firstname": "Barbara", "lastname": "Liskov"},
]


@pytest_asyncio.fixture
async def people(db: AsyncSession):
    return [await object_svc.create_object(db, "contacts", props) for props in PEOPLE]


def _request(**kwargs) -> PublicObjectSearchRequest:
    return PublicObjectSearchRequest.model_validate(kwargs)


def _emails(result) -> list[str]:
    return [o.properties["email"] for o in result.results]


@pytest.mark.asyncio
async def test_empty_request_returns_all_live(db: AsyncSession, people):
    result = await search_svc.search_objects(db, "contacts", _request(properties=["email"]))
    assert result.total == 5
    assert _emails(result) == [p["email"] for p in PEOPLE]


@pytest.mark.asyncio
async def test_pagination_uses_numeric_offset(db: AsyncSession, people):
    first = await search_svc.search_objects(db, "contacts", _request(limit=2))
    assert len(first.results) == 2
    assert first.after == "2"

    second = await search_svc.search_objects(db, "contacts", _request(limit=2, after="2"))
    assert second.after == "4"
    assert [o.id for o in second.results] == [p.id for p in people[2:4]]

    last = await search_svc.search_objects(db, "contacts", _request(limit=2, after="4"))
    assert len(last.results) == 1
    assert last.after is None
    assert "paging" not in last.to_wire()


@pytest.mark.asyncio
async def test_filters_in_a_group_are_anded(db: AsyncSession, people):
    req = _request(
        filterGroups=[{"filters": [
            {"propertyName": "lifecyclestage", "operator": "EQ", "value": "lead"},
            {"propertyName": "email", "operator": "CONTAINS_TOKEN", "value": "example.org"},
        ]}],
        properties=["email"],
    )
    result = await search_svc.search_objects(db, "contacts", req)
    assert _emails(result) == ["alan@example.org"]
    assert result.total == 1


@pytest.mark.asyncio
async def test_groups_are_ored(db: AsyncSession, people):
    req = _request(
        filterGroups=[
            {"filters": [{"propertyName": "firstname", "operator": "EQ", "value": "Ada"}]},
            {"filters": [{"propertyName": "firstname", "operator": "EQ", "value": "Grace"}]},
        ],
        properties=["email"],
    )
    result = await search_svc.search_objects(db, "contacts", req)
    assert _emails(result) == ["ada@example.com", "grace@example.com"]


@pytest.mark.asyncio
async def test_negative_operators_match_missing_property(db: AsyncSession, people):
    neq = _request(
        filterGroups=[{"filters": [
            {"propertyName": "lifecyclestage", "operator": "NEQ", "value": "lead"},
        ]}],
        properties=["email"],
    )
    result = await search_svc.search_objects(db, "contacts", neq)
    assert _emails(result) == ["grace@example.com", "edsger@example.org", "barbara@example.net"]

    missing = _request(
        filterGroups=[{"filters": [{"propertyName": "lastname", "operator": "NOT_HAS_PROPERTY"}]}],
        properties=["email"],
    )
    result = await search_svc.search_objects(db, "contacts", missing)
    assert _emails(result) == ["edsger@example.org"]


@pytest.mark.asyncio
async def test_in_and_between(db: AsyncSession, people):
    req = _request(
        filterGroups=[{"filters": [
            {"propertyName": "firstname", "operator": "IN", "values": ["Ada", "Alan"]},
        ]}],
        properties=["email"],
    )
    assert _emails(await search_svc.search_objects(db, "contacts", req)) == [
        "ada@example.com", "alan@example.org",
    ]

    between = _request(
        filterGroups=[{"filters": [
            {"propertyName": "lastname", "operator": "BETWEEN", "value": "H", "highValue": "M"},
        ]}],
        properties=["email"],
    )
    assert _emails(await search_svc.search_objects(db, "contacts", between)) == [
        "ada@example.com", "grace@example.com", "barbara@example.net",
    ]


@pytest.mark.asyncio
async def test_full_text_query(db: AsyncSession, people):
    result = await search_svc.search_objects(
        db, "contacts", _request(query="example.org", properties=["email"])
    )
    assert _emails(result) == ["alan@example.org", "edsger@example.org"]
    assert result.total == 2


@pytest.mark.asyncio
async def test_sort_descending(db: AsyncSession, people):
    req = _request(
        sorts=[{"propertyName": "firstname", "direction": "DESCENDING"}],
        properties=["firstname"],
        limit=3,
    )
    result = await search_svc.search_objects(db, "contacts", req)
    assert [o.properties["firstname"] for o in result.results] == ["Grace", "Edsger", "Barbara"]


@pytest.mark.asyncio
async def test_archived_objects_are_excluded(db: AsyncSession, people):
    await object_svc.archive_object(db, "contacts", people[0].id)
    result = await search_svc.search_objects(db, "contacts", _request())
    assert result.total == 4
    assert people[0].id not in [o.id for o in result.results]


@pytest.mark.asyncio
async def test_too_many_filter_groups(db: AsyncSession):
    groups = [{"filters": [{"propertyName": "email", "operator": "HAS_PROPERTY"}]}] * 6
    with pytest.raises(ValidationError):
        await search_svc.search_objects(db, "contacts", _request(filterGroups=groups))


@pytest.mark.asyncio
async def test_too_many_filters_in_group(db: AsyncSession):
    filters = [{"propertyName": "email", "operator": "HAS_PROPERTY"}] * 7
    with pytest.raises(ValidationError):
        await search_svc.search_objects(db, "contacts", _request(filterGroups=[{"filters": filters}]))


@pytest.mark.asyncio
async def test_invalid_operator_and_cursor(db: AsyncSession):
    bad_op = _request(filterGroups=[{"filters": [
        {"propertyName": "email", "operator": "LIKE", "value": "x"},
    ]}])
    with pytest.raises(ValidationError):
        await search_svc.search_objects(db, "contacts", bad_op)
    with pytest.raises(ValidationError):
        await search_svc.search_objects(db, "contacts", _request(after="page-two"))


@pytest.mark.asyncio
async def test_validation_runs_before_type_lookup(db: AsyncSession):
    bad = _request(filterGroups=[{"filters": [{"propertyName": "", "operator": "EQ"}]}])
    with pytest.raises(ValidationError):
        await search_svc.search_objects(db, "no_such_type", bad)
    with pytest.raises(NotFoundError):
        await search_svc.search_objects(db, "no_such_type", _request())


def test_validate_returns_offset():
    assert search_svc.validate_search_request(_request()) == 0
    assert search_svc.validate_search_request(_request(after=20)) == 20


@pytest.mark.asyncio
async def test_empty_value_lists_short_circuit(db: AsyncSession, people):
    empty_in = _request(filterGroups=[{"filters": [
        {"propertyName": "firstname", "operator": "IN", "values": []},
    ]}])
    result = await search_svc.search_objects(db, "contacts", empty_in)
    assert result.total == 0
    assert result.results == []

    empty_not_in = _request(filterGroups=[{"filters": [
        {"propertyName": "firstname", "operator": "NOT_IN", "values": []},
    ]}])
    result = await search_svc.search_objects(db, "contacts", empty_not_in)
    assert result.total == 5


@pytest.mark.asyncio
async def test_not_in_and_not_contains_token_match_missing_property(db: AsyncSession, people):
    not_in = _request(
        filterGroups=[{"filters": [
            {"propertyName": "lastname", "operator": "NOT_IN", "values": ["Lovelace", "Hopper"]},
        ]}],
        properties=["email"],
    )
    assert _emails(await search_svc.search_objects(db, "contacts", not_in)) == [
        "alan@example.org", "edsger@example.org", "barbara@example.net",
    ]

    not_contains = _request(
        filterGroups=[{"filters": [
            {"propertyName": "lifecyclestage", "operator": "NOT_CONTAINS_TOKEN", "value": "lea"},
        ]}],
        properties=["email"],
    )
    assert _emails(await search_svc.search_objects(db, "contacts", not_contains)) == [
        "grace@example.com", "edsger@example.org", "barbara@example.net",
    ]


@pytest.mark.asyncio
async def test_offset_past_ceiling_returns_empty_page(db: AsyncSession, people):
    result = await search_svc.search_objects(db, "contacts", _request(after="10000"))
    assert result.total == 0
    assert result.results == []
    assert result.after is None
    assert "paging" not in result.to_wire()


@pytest.mark.asyncio
async def test_offset_near_ceiling_is_not_an_error(db: AsyncSession, people):
    result = await search_svc.search_objects(db, "contacts", _request(after="9999", limit=10))
    assert result.results == []
    assert result.total == 5
    assert result.after is None
