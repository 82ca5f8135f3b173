from datetime import datetime, timezone
from enum import StrEnum
from typing import Any, Optional

import attrs
from uuid_utils import UUID

from src.platform.types.uuid7_utils_types import new_uuid7


class AuditAction(StrEnum):
    CHECK_IN = 'check_in'
    CHECK_IN_CONFLICT = 'check_in_conflict'
    STATUS_CHANGE = 'status_change'
    ACCESS_ATTEMPT = 'access_attempt'


class AuditEntityType(StrEnum):
    TICKET_PURCHASE = 'ticket_purchase'
    TICKET = 'ticket'


@attrs.define(frozen=True)
class AuditLogEntry:
    """Append-only record; never updated once written."""

    action: AuditAction
    entity_type: AuditEntityType
    entity_id: str
    details: dict[str, Any]
    created_by: Optional[int]
    id: UUID = attrs.field(factory=new_uuid7)
    created_at: datetime = attrs.field(factory=lambda: datetime.now(timezone.utc))
