from datetime import datetime
from typing import Optional

import attrs

from src.service.redemption.domain.entity.ticket_purchase_entity import TicketPurchase


@attrs.define(frozen=True)
class CheckInRecord:
    """Values written by the conditional check-in update."""

    redemption_code: str
    check_in_time: datetime
    check_in_photo_ref: Optional[str]


@attrs.define(frozen=True)
class RedemptionResult:
    purchase: TicketPurchase
    was_offline_sync: bool
    client_captured_at: Optional[datetime] = None
