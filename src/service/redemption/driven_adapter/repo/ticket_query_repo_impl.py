from typing import AsyncContextManager, Callable, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.redemption.app.interface.i_ticket_query_repo import ITicketQueryRepo
from src.service.redemption.domain.entity.ticket_entity import Ticket
from src.service.redemption.driven_adapter.model.ticket_model import TicketModel
from src.service.redemption.driven_adapter.repo.model_mapper import ticket_model_to_entity


class TicketQueryRepoImpl(ITicketQueryRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]) -> None:
        self.session_factory = session_factory

    @Logger.io
    async def get_by_id(self, *, ticket_id: int) -> Optional[Ticket]:
        async with self.session_factory() as session:
            result = await session.execute(select(TicketModel).where(TicketModel.id == ticket_id))
            model = result.scalar_one_or_none()
            return ticket_model_to_entity(model) if model else None
