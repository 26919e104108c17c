"""Idempotent seed of the builtin CRM catalogue.

Order matters: object types first, then property groups and definitions,
pipelines, association types and owners. Rows that already exist are left
untouched, so the seed can run on every startup.
"""

from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import Base
from ..models.association import HUBSPOT_DEFINED, AssociationType
from ..models.object_type import ObjectType
from ..models.owner import Owner
from ..models.pipeline import Pipeline, PipelineStage
from ..models.property import PropertyDefinition, PropertyGroup

log = logging.getLogger(__name__)

SEED_TIMESTAMP = "2024-01-01T00:00:00.000Z"

# (id, name, singular, plural, primary display property)
OBJECT_TYPES = [
    ("0-1", "contacts", "Contact", "Contacts", "email"),
    ("0-2", "companies", "Company", "Companies", "name"),
    ("0-3", "deals", "Deal", "Deals", "dealname"),
    ("0-5", "tickets", "Ticket", "Tickets", "subject"),
    ("0-7", "products", "Product", "Products", None),
    ("0-8", "line_items", "Line Item", "Line Items", None),
    ("0-14", "quotes", "Quote", "Quotes", None),
    ("0-18", "communications", "Communication", "Communications", None),
    ("0-19", "feedback_submissions", "Feedback Submission", "Feedback Submissions", None),
    ("0-27", "tasks", "Task", "Tasks", "hs_task_subject"),
    ("0-46", "notes", "Note", "Notes", "hs_note_body"),
    ("0-47", "meetings", "Meeting", "Meetings", "hs_meeting_title"),
    ("0-48", "calls", "Call", "Calls", "hs_call_body"),
    ("0-49", "emails", "Email", "Emails", "hs_email_subject"),
    ("0-53", "invoices", "Invoice", "Invoices", None),
    ("0-74", "goals", "Goal", "Goals", None),
    ("0-116", "postal_mail", "Postal Mail", "Postal Mails", None),
    ("0-123", "orders", "Order", "Orders", None),
    ("0-136", "leads", "Lead", "Leads", None),
    ("0-142", "carts", "Cart", "Carts", None),
]

PROPERTY_GROUPS = {
    "0-1": ("contactinformation", "Contact Information"),
    "0-2": ("companyinformation", "Company Information"),
    "0-3": ("dealinformation", "Deal Information"),
    "0-5": ("ticketinformation", "Ticket Information"),
    "0-27": ("engagement_info", "Task Information"),
    "0-46": ("engagement_info", "Note Information"),
    "0-47": ("engagement_info", "Meeting Information"),
    "0-48": ("engagement_info", "Call Information"),
    "0-49": ("engagement_info", "Email Information"),
}

# (name, label, type, field type)
COMMON_PROPERTIES = [
    ("hs_object_id", "Object ID", "number", "number"),
    ("hs_createdate", "Create date", "datetime", "date"),
    ("hs_lastmodifieddate", "Last modified date", "datetime", "date"),
]

# (name, label, type, field type, unique)
OBJECT_PROPERTIES = {
    "0-1": [
        ("email", "Email", "string", "text", True),
        ("firstname", "First Name", "string", "text", False),
        ("lastname", "Last Name", "string", "text", False),
        ("phone", "Phone Number", "string", "phonenumber", False),
        ("company", "Company Name", "string", "text", False),
        ("lifecyclestage", "Lifecycle Stage", "enumeration", "radio", False),
        ("hubspot_owner_id", "Owner", "string", "text", False),
    ],
    "0-2": [
        ("name", "Name", "string", "text", False),
        ("domain", "Company Domain Name", "string", "text", True),
        ("industry", "Industry", "enumeration", "select", False),
        ("lifecyclestage", "Lifecycle Stage", "enumeration", "radio", False),
        ("hubspot_owner_id", "Owner", "string", "text", False),
    ],
    "0-3": [
        ("dealname", "Deal Name", "string", "text", False),
        ("dealstage", "Deal Stage", "enumeration", "radio", False),
        ("pipeline", "Pipeline", "enumeration", "radio", False),
        ("amount", "Amount", "number", "number", False),
        ("closedate", "Close Date", "date", "date", False),
        ("hubspot_owner_id", "Owner", "string", "text", False),
    ],
    "0-5": [
        ("subject", "Ticket Name", "string", "text", False),
        ("content", "Ticket Description", "string", "textarea", False),
        ("hs_pipeline", "Pipeline", "enumeration", "radio", False),
        ("hs_pipeline_stage", "Ticket Status", "enumeration", "radio", False),
        ("hs_ticket_priority", "Priority", "enumeration", "select", False),
        ("hubspot_owner_id", "Owner", "string", "text", False),
    ],
    "0-27": [
        ("hs_task_subject", "Task Title", "string", "text", False),
        ("hs_task_body", "Task Notes", "string", "textarea", False),
        ("hs_task_status", "Task Status", "enumeration", "select", False),
    ],
    "0-46": [
        ("hs_note_body", "Note Body", "string", "textarea", False),
    ],
    "0-47": [
        ("hs_meeting_title", "Meeting Name", "string", "text", False),
        ("hs_meeting_start_time", "Start Time", "datetime", "date", False),
        ("hs_meeting_end_time", "End Time", "datetime", "date", False),
    ],
    "0-48": [
        ("hs_call_body", "Call Notes", "string", "textarea", False),
        ("hs_call_direction", "Call Direction", "enumeration", "select", False),
        ("hs_call_duration", "Call Duration", "number", "number", False),
    ],
    "0-49": [
        ("hs_email_subject", "Email Subject", "string", "text", False),
        ("hs_email_text", "Email Body", "string", "textarea", False),
    ],
}

# (id, from type, to type, label); ids are fixed so clients can hard-code them.
ASSOCIATION_TYPES = [
    (1, "0-1", "0-2", None), (2, "0-2", "0-1", None),
    (279, "0-1", "0-2", "Primary"), (280, "0-2", "0-1", "Primary"),
    (3, "0-1", "0-3", None), (4, "0-3", "0-1", None),
    (5, "0-2", "0-3", None), (6, "0-3", "0-2", None),
    (15, "0-1", "0-5", None), (16, "0-5", "0-1", None),
    (19, "0-3", "0-8", None), (20, "0-8", "0-3", None),
    (25, "0-2", "0-5", None), (26, "0-5", "0-2", None),
]

# Engagement types pair with contacts, companies and deals from id 202 on,
# two ids (engagement->record, record->engagement) per pair.
ENGAGEMENT_TYPES = ["0-46", "0-48", "0-49", "0-27", "0-47"]


def engagement_association_types() -> list[tuple[int, str, str, None]]:
    rows = []
    next_id = 202
    for engagement in ENGAGEMENT_TYPES:
        for target in ("0-1", "0-2", "0-3"):
            rows.append((next_id, engagement, target, None))
            rows.append((next_id + 1, target, engagement, None))
            next_id += 2
    return rows


PIPELINES = [
    ("deals", "Sales Pipeline", [
        ("Appointment Scheduled", {"probability": "0.2"}),
        ("Qualified To Buy", {"probability": "0.3"}),
        ("Presentation Scheduled", {"probability": "0.4"}),
        ("Decision Maker Bought-In", {"probability": "0.6"}),
        ("Contract Sent", {"probability": "0.8"}),
        ("Closed Won", {"probability": "1.0", "isClosed": "true"}),
        ("Closed Lost", {"probability": "0.0", "isClosed": "true"}),
    ]),
    ("tickets", "Support Pipeline", [
        ("New", {"ticketState": "OPEN"}),
        ("Waiting on contact", {"ticketState": "OPEN"}),
        ("Waiting on us", {"ticketState": "OPEN"}),
        ("Closed", {"ticketState": "CLOSED"}),
    ]),
]

OWNERS = [
    ("admin@example.com", "Admin", "User", 1001),
    ("sales@example.com", "Sales", "Rep", 1002),
    ("support@example.com", "Support", "Agent", 1003),
]


async def seed_object_types(db: AsyncSession) -> int:
    created = 0
    for type_id, name, singular, plural, primary in OBJECT_TYPES:
        if await db.get(ObjectType, type_id) is not None:
            continue
        db.add(ObjectType(
            id=type_id, name=name, label_singular=singular, label_plural=plural,
            primary_display_property=primary, is_custom=False,
            created_at=SEED_TIMESTAMP, updated_at=SEED_TIMESTAMP,
        ))
        created += 1
    await db.flush()
    return created


async def seed_properties(db: AsyncSession) -> int:
    created = 0
    for type_id, (group_name, group_label) in PROPERTY_GROUPS.items():
        if await db.get(PropertyGroup, (type_id, group_name)) is None:
            db.add(PropertyGroup(object_type_id=type_id, name=group_name, label=group_label))

        rows = [(n, l, t, ft, False) for n, l, t, ft in COMMON_PROPERTIES]
        rows += OBJECT_PROPERTIES.get(type_id, [])
        for name, label, prop_type, field_type, unique in rows:
            if await db.get(PropertyDefinition, (type_id, name)) is not None:
                continue
            db.add(PropertyDefinition(
                object_type_id=type_id, name=name, label=label, type=prop_type,
                field_type=field_type, group_name=group_name, has_unique_value=unique,
                hubspot_defined=True, options_json=[],
                created_at=SEED_TIMESTAMP, updated_at=SEED_TIMESTAMP,
            ))
            created += 1
        await db.flush()
    return created


async def seed_pipelines(db: AsyncSession) -> int:
    """One default pipeline per type, only when the type has none yet."""
    created = 0
    for type_name, label, stages in PIPELINES:
        type_id = (await db.execute(
            select(ObjectType.id).where(ObjectType.name == type_name)
        )).scalar_one_or_none()
        if type_id is None:
            continue
        existing = await db.execute(
            select(func.count(Pipeline.id)).where(Pipeline.object_type_id == type_id)
        )
        if existing.scalar_one() > 0:
            continue
        db.add(Pipeline(
            object_type_id=type_id, label=label, display_order=0,
            created_at=SEED_TIMESTAMP, updated_at=SEED_TIMESTAMP,
            stages=[
                PipelineStage(
                    label=stage_label, display_order=order, metadata_json=metadata,
                    created_at=SEED_TIMESTAMP, updated_at=SEED_TIMESTAMP,
                )
                for order, (stage_label, metadata) in enumerate(stages)
            ],
        ))
        created += 1
    await db.flush()
    return created


async def seed_association_types(db: AsyncSession) -> int:
    created = 0
    for type_id, from_type, to_type, label in ASSOCIATION_TYPES + engagement_association_types():
        if await db.get(AssociationType, type_id) is not None:
            continue
        db.add(AssociationType(
            id=type_id, from_object_type=from_type, to_object_type=to_type,
            category=HUBSPOT_DEFINED, label=label,
        ))
        created += 1
    await db.flush()
    return created


async def seed_owners(db: AsyncSession) -> int:
    if (await db.execute(select(func.count(Owner.id)))).scalar_one() > 0:
        return 0
    for email, first, last, user_id in OWNERS:
        db.add(Owner(
            email=email, first_name=first, last_name=last, user_id=user_id,
            created_at=SEED_TIMESTAMP, updated_at=SEED_TIMESTAMP,
        ))
    await db.flush()
    return len(OWNERS)


async def seed_all(db: AsyncSession) -> dict[str, int]:
    """Run every seed step in order and commit. Returns rows created per step."""
    counts = {
        "object_types": await seed_object_types(db),
        "properties": await seed_properties(db),
        "pipelines": await seed_pipelines(db),
        "association_types": await seed_association_types(db),
        "owners": await seed_owners(db),
    }
    await db.commit()
    log.info("Seed complete: %s", counts)
    return counts


async def reset_store(db: AsyncSession) -> dict[str, int]:
    """Drop and recreate every table on the session's connection, then reseed."""
    db.expunge_all()
    conn = await db.connection()
    await conn.run_sync(Base.metadata.drop_all)
    await conn.run_sync(Base.metadata.create_all)
    log.warning("Store reset: all tables dropped and recreated")
    return await seed_all(db)
