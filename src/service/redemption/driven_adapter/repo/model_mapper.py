"""Model <-> entity conversion shared by the ledger repositories"""

from datetime import datetime, timezone
from typing import Optional

from uuid_utils import UUID

from src.service.redemption.domain.entity.ticket_entity import Ticket, TicketStatus, TicketType
from src.service.redemption.domain.entity.ticket_purchase_entity import (
    PurchaseStatus,
    TicketPurchase,
)
from src.service.redemption.driven_adapter.model.ticket_model import TicketModel
from src.service.redemption.driven_adapter.model.ticket_purchase_model import (
    TicketPurchaseModel,
)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes; everything is stored in UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def ticket_model_to_entity(model: TicketModel) -> Ticket:
    return Ticket(
        id=model.id,
        event_id=model.event_id,
        name=model.name,
        ticket_type=TicketType(model.ticket_type),
        price=model.price,
        quantity=model.quantity,
        remaining_quantity=model.remaining_quantity,
        status=TicketStatus(model.status),
        created_at=as_utc(model.created_at),
        updated_at=as_utc(model.updated_at),
    )


def purchase_model_to_entity(model: TicketPurchaseModel) -> TicketPurchase:
    return TicketPurchase(
        id=UUID(model.id),
        ticket_id=model.ticket_id,
        event_id=model.event_id,
        purchaser_id=model.purchaser_id,
        quantity=model.quantity,
        unit_price=model.unit_price,
        total_amount=model.total_amount,
        redemption_code=model.redemption_code,
        status=PurchaseStatus(model.status),
        is_checked_in=model.is_checked_in,
        check_in_time=as_utc(model.check_in_time),
        check_in_photo_ref=model.check_in_photo_ref,
        purchased_at=as_utc(model.purchased_at),
        updated_at=as_utc(model.updated_at),
    )
