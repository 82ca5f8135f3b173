from datetime import datetime, timezone
from typing import Optional

import attrs


def _now() -> datetime:
    return datetime.now(timezone.utc)


@attrs.define
class CachedTicket:
    """Display-only copy of a ticket for the offline verify screen."""

    id: str
    event_id: str
    event_title: str
    participant_name: str
    ticket_type: str
    redemption_code: str
    is_checked_in: bool = False
    cached_at: datetime = attrs.field(factory=_now)


@attrs.define
class CachedEvent:
    id: str
    title: str
    description: str = ''
    date: Optional[str] = None
    location: str = ''
    cached_at: datetime = attrs.field(factory=_now)
