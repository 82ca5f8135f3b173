from datetime import datetime
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from src.platform.types.uuid7_utils_types import UtilsUUID7


class CheckInRequest(BaseModel):
    """Online scans and replayed offline scans share this body; replays carry offlineTimestamp."""

    model_config = ConfigDict(
        json_schema_extra={
            'examples': [
                {'ticketId': 'TIX-7K2QW9ZD'},
                {
                    'ticketId': 'TIX-7K2QW9ZD',
                    'photoData': 'data:image/jpeg;base64,/9j/4AAQSkZJRg==',
                    'offlineTimestamp': '2025-03-01T18:04:11.250Z',
                    'userId': 12,
                    'eventId': 3,
                },
            ]
        }
    )

    redemption_code: Optional[str] = Field(
        None, validation_alias=AliasChoices('ticketId', 'redemptionCode', 'redemption_code')
    )
    photo_data: Optional[str] = Field(
        None, validation_alias=AliasChoices('photoData', 'photo_data')
    )
    offline_timestamp: Optional[datetime] = Field(
        None, validation_alias=AliasChoices('offlineTimestamp', 'offline_timestamp')
    )
    user_id: Optional[int] = Field(None, validation_alias=AliasChoices('userId', 'user_id'))
    event_id: Optional[int] = Field(None, validation_alias=AliasChoices('eventId', 'event_id'))


class TicketPurchaseResponse(BaseModel):
    model_config = {
        'json_schema_extra': {
            'example': {
                'id': '01936d8f-5e73-7c4e-a9c5-123456789abc',
                'ticket_id': 1,
                'event_id': 3,
                'purchaser_id': 7,
                'quantity': 1,
                'total_amount': 0,
                'redemption_code': 'TIX-7K2QW9ZD',
                'status': 'completed',
                'is_checked_in': True,
                'check_in_time': '2025-03-01T18:05:02.113Z',
                'check_in_photo_ref': 'check-in/check-in-TIX-7K2QW9ZD-1740852302113.jpg',
                'purchased_at': '2025-02-20T09:00:00Z',
            }
        },
    }

    id: UtilsUUID7
    ticket_id: int
    event_id: int
    purchaser_id: int
    quantity: int
    total_amount: int
    redemption_code: str
    status: str
    is_checked_in: bool
    check_in_time: Optional[datetime] = None
    check_in_photo_ref: Optional[str] = None
    purchased_at: Optional[datetime] = None


class CheckInResponse(BaseModel):
    success: bool = True
    status: str = 'checked_in'
    ticket_purchase: TicketPurchaseResponse = Field(serialization_alias='ticketPurchase')
    was_offline_sync: bool = Field(serialization_alias='wasOfflineSync')


class AuditLogEntryResponse(BaseModel):
    id: UtilsUUID7
    action: str
    entity_type: str
    entity_id: str
    details: dict[str, Any]
    created_by: Optional[int] = None
    created_at: datetime
