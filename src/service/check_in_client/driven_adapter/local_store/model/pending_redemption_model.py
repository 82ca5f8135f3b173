from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.service.check_in_client.driven_adapter.local_store.local_base import LocalBase


class PendingRedemptionModel(LocalBase):
    __tablename__ = 'pending_redemption'
    # AUTOINCREMENT: a removed local_id is never handed out again
    __table_args__ = {'sqlite_autoincrement': True}

    local_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    redemption_code: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    captured_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    operator_user_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    event_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    evidence_photo: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
