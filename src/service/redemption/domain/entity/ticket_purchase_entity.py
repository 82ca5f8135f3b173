from datetime import datetime, timezone
from enum import StrEnum
import secrets
import string
from typing import Optional

import attrs
from uuid_utils import UUID

from src.platform.exception.exceptions import NotRedeemableError
from src.platform.logging.loguru_io import Logger
from src.platform.types.uuid7_utils_types import new_uuid7
from src.service.redemption.domain.entity.ticket_entity import Ticket


class PurchaseStatus(StrEnum):
    PENDING = 'pending'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'
    REFUNDED = 'refunded'


REDEMPTION_CODE_PREFIX = 'TIX-'
REDEMPTION_CODE_LENGTH = 8
_REDEMPTION_CODE_ALPHABET = string.ascii_uppercase + string.digits


def generate_redemption_code() -> str:
    suffix = ''.join(
        secrets.choice(_REDEMPTION_CODE_ALPHABET) for _ in range(REDEMPTION_CODE_LENGTH)
    )
    return f'{REDEMPTION_CODE_PREFIX}{suffix}'


@attrs.define
class TicketPurchase:
    id: UUID
    ticket_id: int
    event_id: int
    purchaser_id: int
    quantity: int
    unit_price: int
    total_amount: int
    redemption_code: str
    status: PurchaseStatus = PurchaseStatus.PENDING
    is_checked_in: bool = False
    check_in_time: Optional[datetime] = None
    check_in_photo_ref: Optional[str] = None
    purchased_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    @Logger.io
    def create(cls, *, ticket: Ticket, purchaser_id: int, quantity: int) -> 'TicketPurchase':
        """
        New purchase for `ticket`.

        Free and RSVP tickets need no payment and start out completed, so the
        inventory hook fires at creation. Paid tickets wait in pending until
        the payment confirmation completes them.
        """
        ticket.ensure_purchasable(quantity=quantity)
        now = datetime.now(timezone.utc)
        return cls(
            id=new_uuid7(),
            ticket_id=ticket.id or 0,
            event_id=ticket.event_id,
            purchaser_id=purchaser_id,
            quantity=quantity,
            unit_price=ticket.price,
            total_amount=ticket.price * quantity,
            redemption_code=generate_redemption_code(),
            status=PurchaseStatus.COMPLETED if ticket.is_free else PurchaseStatus.PENDING,
            purchased_at=now,
            updated_at=now,
        )

    def with_new_redemption_code(self) -> 'TicketPurchase':
        return attrs.evolve(self, redemption_code=generate_redemption_code())

    def ensure_redeemable(self, *, event_id: Optional[int] = None) -> None:
        if self.status != PurchaseStatus.COMPLETED:
            raise NotRedeemableError(
                f'Ticket {self.redemption_code} is {self.status.value}, not valid for entry'
            )
        if event_id is not None and event_id != self.event_id:
            raise NotRedeemableError(
                f'Ticket {self.redemption_code} is for a different event (event {self.event_id})'
            )
