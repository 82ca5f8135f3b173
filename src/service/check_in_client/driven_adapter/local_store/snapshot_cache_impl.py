from datetime import datetime, timezone
from typing import Callable, ContextManager, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from src.platform.logging.loguru_io import Logger
from src.service.check_in_client.app.interface.i_snapshot_cache import ISnapshotCache
from src.service.check_in_client.domain.entity.cached_snapshot_entity import (
    CachedEvent,
    CachedTicket,
)
from src.service.check_in_client.driven_adapter.local_store.model.cached_snapshot_model import (
    CachedEventModel,
    CachedTicketModel,
)


def _utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class SnapshotCacheImpl(ISnapshotCache):
    """Upsert-by-id cache of tickets and events for the offline verify screen."""

    def __init__(self, session_factory: Callable[..., ContextManager[Session]]) -> None:
        self.session_factory = session_factory

    @Logger.io
    def cache_ticket(self, *, ticket: CachedTicket) -> None:
        with self.session_factory() as session:
            session.merge(
                CachedTicketModel(
                    id=ticket.id,
                    event_id=ticket.event_id,
                    event_title=ticket.event_title,
                    participant_name=ticket.participant_name,
                    ticket_type=ticket.ticket_type,
                    redemption_code=ticket.redemption_code,
                    is_checked_in=ticket.is_checked_in,
                    cached_at=datetime.now(timezone.utc),
                )
            )
            session.commit()

    def list_cached_tickets(self) -> list[CachedTicket]:
        with self.session_factory() as session:
            result = session.execute(select(CachedTicketModel).order_by(CachedTicketModel.id))
            return [self._ticket_to_entity(model) for model in result.scalars().all()]

    @Logger.io
    def find_cached_ticket(self, *, redemption_code: str) -> Optional[CachedTicket]:
        with self.session_factory() as session:
            model = session.execute(
                select(CachedTicketModel).where(
                    CachedTicketModel.redemption_code == redemption_code
                )
            ).scalars().first()
            return self._ticket_to_entity(model) if model else None

    @Logger.io
    def cache_event(self, *, event: CachedEvent) -> None:
        with self.session_factory() as session:
            session.merge(
                CachedEventModel(
                    id=event.id,
                    title=event.title,
                    description=event.description,
                    date=event.date,
                    location=event.location,
                    cached_at=datetime.now(timezone.utc),
                )
            )
            session.commit()

    def list_cached_events(self) -> list[CachedEvent]:
        with self.session_factory() as session:
            result = session.execute(select(CachedEventModel).order_by(CachedEventModel.id))
            return [
                CachedEvent(
                    id=model.id,
                    title=model.title,
                    description=model.description,
                    date=model.date,
                    location=model.location,
                    cached_at=_utc(model.cached_at),
                )
                for model in result.scalars().all()
            ]

    def _ticket_to_entity(self, model: CachedTicketModel) -> CachedTicket:
        return CachedTicket(
            id=model.id,
            event_id=model.event_id,
            event_title=model.event_title,
            participant_name=model.participant_name,
            ticket_type=model.ticket_type,
            redemption_code=model.redemption_code,
            is_checked_in=model.is_checked_in,
            cached_at=_utc(model.cached_at),
        )
