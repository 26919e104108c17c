"""Owner response shape."""

from __future__ import annotations


def owner_wire(owner) -> dict:
    return {
        "id": str(owner.id),
        "email": owner.email,
        "firstName": owner.first_name or "",
        "lastName": owner.last_name or "",
        "userId": owner.user_id,
        "userIdIncludingInactive": owner.user_id,
        "type": "PERSON",
        "teams": [],
        "archived": owner.archived,
        "createdAt": owner.created_at,
        "updatedAt": owner.updated_at,
    }
