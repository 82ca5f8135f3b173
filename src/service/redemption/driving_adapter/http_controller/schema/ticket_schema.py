from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from src.platform.types.uuid7_utils_types import UtilsUUID7
from src.service.redemption.domain.entity.ticket_entity import (
    DEFAULT_TICKET_QUANTITY,
    TicketType,
)


class TicketCreateRequest(BaseModel):
    event_id: int
    name: str = Field(min_length=1, max_length=200)
    ticket_type: TicketType
    price: int = 0
    quantity: int = DEFAULT_TICKET_QUANTITY

    class Config:
        json_schema_extra = {
            'examples': [
                {'event_id': 3, 'name': 'General Admission', 'ticket_type': 'free', 'quantity': 200},
                {'event_id': 3, 'name': 'VIP', 'ticket_type': 'paid', 'price': 1500, 'quantity': 20},
            ]
        }


class TicketResponse(BaseModel):
    id: int
    event_id: int
    name: str
    ticket_type: str
    price: int
    quantity: int
    remaining_quantity: int
    status: str


class TicketPurchaseCreateRequest(BaseModel):
    ticket_id: int
    quantity: int = Field(default=1, ge=1)

    class Config:
        json_schema_extra = {'example': {'ticket_id': 1, 'quantity': 2}}


class ReconciliationIssueResponse(BaseModel):
    id: int
    kind: str
    purchase_id: UtilsUUID7
    ticket_id: int
    quantity: int
    reason: str
    resolved: bool
    created_at: Optional[datetime] = None
