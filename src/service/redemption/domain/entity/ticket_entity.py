from datetime import datetime, timezone
from enum import StrEnum
from typing import Optional

import attrs

from src.platform.exception.exceptions import DomainError
from src.platform.logging.loguru_io import Logger


class TicketStatus(StrEnum):
    ACTIVE = 'active'
    INACTIVE = 'inactive'
    SOLD_OUT = 'sold-out'


class TicketType(StrEnum):
    FREE = 'free'
    PAID = 'paid'
    RSVP = 'rsvp'


DEFAULT_TICKET_QUANTITY = 100


@attrs.define
class Ticket:
    """A sellable ticket category of one event and its remaining inventory."""

    event_id: int
    name: str
    ticket_type: TicketType
    price: int
    quantity: int
    remaining_quantity: int
    status: TicketStatus = TicketStatus.ACTIVE
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    @Logger.io
    def create(
        cls,
        *,
        event_id: int,
        name: str,
        ticket_type: TicketType,
        price: int = 0,
        quantity: int = DEFAULT_TICKET_QUANTITY,
    ) -> 'Ticket':
        if quantity < 1:
            raise DomainError('Ticket quantity must be at least 1')
        if price < 0:
            raise DomainError('Ticket price must not be negative')
        if ticket_type != TicketType.PAID and price:
            raise DomainError(f'{ticket_type.value} tickets cannot have a price')
        if ticket_type == TicketType.PAID and not price:
            raise DomainError('Paid tickets must have a price')

        now = datetime.now(timezone.utc)
        return cls(
            event_id=event_id,
            name=name,
            ticket_type=ticket_type,
            price=price,
            quantity=quantity,
            remaining_quantity=quantity,
            status=TicketStatus.ACTIVE,
            created_at=now,
            updated_at=now,
        )

    @property
    def is_free(self) -> bool:
        return self.ticket_type in (TicketType.FREE, TicketType.RSVP)

    def ensure_purchasable(self, *, quantity: int) -> None:
        if quantity < 1:
            raise DomainError('Quantity must be at least 1')
        if self.status != TicketStatus.ACTIVE:
            raise DomainError('Ticket is not available for purchase')
        if self.remaining_quantity < quantity:
            raise DomainError(f'Only {self.remaining_quantity} tickets remaining')

