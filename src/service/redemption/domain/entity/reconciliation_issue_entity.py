from datetime import datetime, timezone
from enum import StrEnum
from typing import Optional

import attrs
from uuid_utils import UUID


class ReconciliationKind(StrEnum):
    INVENTORY_OVERSELL = 'inventory_oversell'


@attrs.define
class ReconciliationIssue:
    """A completed purchase whose inventory side effect could not be applied."""

    kind: ReconciliationKind
    purchase_id: UUID
    ticket_id: int
    quantity: int
    reason: str
    resolved: bool = False
    id: Optional[int] = None
    created_at: datetime = attrs.field(factory=lambda: datetime.now(timezone.utc))
