"""Query-string helpers shared by the CRM routers."""

from __future__ import annotations

from ..config import settings
from ..errors import ValidationError


def split_csv(values: list[str] | None) -> list[str]:
    """Accept both ``?properties=a,b`` and repeated ``?properties=a&properties=b``."""
    out: list[str] = []
    for raw in values or []:
        out.extend(p.strip() for p in raw.split(",") if p.strip())
    return out


def check_batch_size(inputs: list, limit: int | None = None) -> None:
    limit = limit or settings.max_batch_size
    if len(inputs) > limit:
        raise ValidationError(f"Batch size {len(inputs)} exceeds the maximum of {limit} inputs")
