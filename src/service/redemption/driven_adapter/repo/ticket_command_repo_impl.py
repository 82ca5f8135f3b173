from datetime import datetime, timezone
from typing import AsyncContextManager, Callable, Optional

from sqlalchemy import case, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.redemption.app.interface.i_ticket_command_repo import ITicketCommandRepo
from src.service.redemption.domain.entity.ticket_entity import Ticket, TicketStatus
from src.service.redemption.driven_adapter.model.ticket_model import TicketModel
from src.service.redemption.driven_adapter.repo.model_mapper import ticket_model_to_entity


class TicketCommandRepoImpl(ITicketCommandRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]) -> None:
        self.session_factory = session_factory

    @Logger.io
    async def create(self, *, ticket: Ticket) -> Ticket:
        async with self.session_factory() as session:
            model = TicketModel(
                event_id=ticket.event_id,
                name=ticket.name,
                ticket_type=ticket.ticket_type.value,
                price=ticket.price,
                quantity=ticket.quantity,
                remaining_quantity=ticket.remaining_quantity,
                status=ticket.status.value,
            )
            session.add(model)
            await session.commit()
            await session.refresh(model)
            return ticket_model_to_entity(model)

    @Logger.io
    async def decrement_remaining(self, *, ticket_id: int, quantity: int) -> Optional[Ticket]:
        # SET expressions read the pre-update row, so concurrent decrements serialize
        # on the row lock and each one floors at zero on its own
        still_available = TicketModel.remaining_quantity > quantity
        stmt = (
            update(TicketModel)
            .where(TicketModel.id == ticket_id)
            .values(
                remaining_quantity=case(
                    (still_available, TicketModel.remaining_quantity - quantity), else_=0
                ),
                status=case(
                    (still_available, TicketModel.status), else_=TicketStatus.SOLD_OUT.value
                ),
                updated_at=datetime.now(timezone.utc),
            )
            .returning(TicketModel)
            .execution_options(synchronize_session=False)
        )
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            model = result.scalar_one_or_none()
            ticket = ticket_model_to_entity(model) if model else None
            await session.commit()
            if ticket is None:
                return None

            Logger.base.info(
                f'🎟️ [INVENTORY] ticket={ticket_id} -{quantity} '
                f'remaining={ticket.remaining_quantity} status={ticket.status.value}'
            )
            return ticket
