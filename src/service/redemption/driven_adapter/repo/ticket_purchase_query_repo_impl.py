from typing import AsyncContextManager, Callable, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from uuid_utils import UUID

from src.platform.logging.loguru_io import Logger
from src.service.redemption.app.interface.i_ticket_purchase_query_repo import (
    ITicketPurchaseQueryRepo,
)
from src.service.redemption.domain.entity.ticket_purchase_entity import TicketPurchase
from src.service.redemption.driven_adapter.model.ticket_purchase_model import (
    TicketPurchaseModel,
)
from src.service.redemption.driven_adapter.repo.model_mapper import purchase_model_to_entity


class TicketPurchaseQueryRepoImpl(ITicketPurchaseQueryRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]) -> None:
        self.session_factory = session_factory

    @Logger.io
    async def get_by_id(self, *, purchase_id: UUID) -> Optional[TicketPurchase]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(TicketPurchaseModel).where(TicketPurchaseModel.id == str(purchase_id))
            )
            model = result.scalar_one_or_none()
            return purchase_model_to_entity(model) if model else None

    @Logger.io
    async def get_by_redemption_code(self, *, redemption_code: str) -> Optional[TicketPurchase]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(TicketPurchaseModel).where(
                    TicketPurchaseModel.redemption_code == redemption_code
                )
            )
            model = result.scalar_one_or_none()
            return purchase_model_to_entity(model) if model else None
