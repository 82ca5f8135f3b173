from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.service.check_in_client.driven_adapter.local_store.local_base import LocalBase


class CachedTicketModel(LocalBase):
    __tablename__ = 'cached_ticket'

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    event_id: Mapped[str] = mapped_column(String(64), nullable=False)
    event_title: Mapped[str] = mapped_column(String(255), nullable=False)
    participant_name: Mapped[str] = mapped_column(String(255), nullable=False)
    ticket_type: Mapped[str] = mapped_column(String(50), nullable=False)
    redemption_code: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    is_checked_in: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    cached_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class CachedEventModel(LocalBase):
    __tablename__ = 'cached_event'

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default='')
    date: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    location: Mapped[str] = mapped_column(String(255), nullable=False, default='')
    cached_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
