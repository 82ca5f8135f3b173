from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.redemption.app.interface.i_ticket_command_repo import ITicketCommandRepo
from src.service.redemption.domain.entity.ticket_entity import (
    DEFAULT_TICKET_QUANTITY,
    Ticket,
    TicketType,
)


class CreateTicketUseCase:
    def __init__(self, *, ticket_command_repo: ITicketCommandRepo) -> None:
        self.ticket_command_repo = ticket_command_repo

    @classmethod
    @inject
    def depends(
        cls,
        ticket_command_repo: ITicketCommandRepo = Depends(Provide[Container.ticket_command_repo]),
    ) -> Self:
        return cls(ticket_command_repo=ticket_command_repo)

    @Logger.io
    async def create(
        self,
        *,
        event_id: int,
        name: str,
        ticket_type: TicketType,
        price: int = 0,
        quantity: int = DEFAULT_TICKET_QUANTITY,
    ) -> Ticket:
        ticket = Ticket.create(
            event_id=event_id,
            name=name,
            ticket_type=ticket_type,
            price=price,
            quantity=quantity,
        )
        created = await self.ticket_command_repo.create(ticket=ticket)
        Logger.base.info(
            f'🎫 [TICKET] Created {created.ticket_type.value} ticket {created.id} '
            f'for event {event_id} (quantity={quantity})'
        )
        return created
