from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.di import Container
from src.platform.exception.exceptions import ConflictError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.redemption.app.command.decrement_ticket_inventory_use_case import (
    DecrementTicketInventoryUseCase,
)
from src.service.redemption.app.interface.i_ticket_purchase_command_repo import (
    ITicketPurchaseCommandRepo,
)
from src.service.redemption.app.interface.i_ticket_query_repo import ITicketQueryRepo
from src.service.redemption.domain.entity.ticket_purchase_entity import (
    PurchaseStatus,
    TicketPurchase,
)


MAX_REDEMPTION_CODE_ATTEMPTS = 5


class CreateTicketPurchaseUseCase:
    """
    Create a ticket purchase

    Flow:
    1. Load the ticket and check it is active with enough remaining inventory
    2. Persist the purchase with a fresh redemption code (regenerated on collision)
    3. Free/RSVP purchases are born completed, so the inventory decrement fires now;
       paid purchases stay pending until CompleteTicketPurchaseUseCase runs
    """

    def __init__(
        self,
        *,
        ticket_query_repo: ITicketQueryRepo,
        ticket_purchase_command_repo: ITicketPurchaseCommandRepo,
        decrement_ticket_inventory_use_case: DecrementTicketInventoryUseCase,
    ) -> None:
        self.ticket_query_repo = ticket_query_repo
        self.ticket_purchase_command_repo = ticket_purchase_command_repo
        self.decrement_ticket_inventory_use_case = decrement_ticket_inventory_use_case
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        ticket_query_repo: ITicketQueryRepo = Depends(Provide[Container.ticket_query_repo]),
        ticket_purchase_command_repo: ITicketPurchaseCommandRepo = Depends(
            Provide[Container.ticket_purchase_command_repo]
        ),
        decrement_ticket_inventory_use_case: DecrementTicketInventoryUseCase = Depends(
            Provide[Container.decrement_ticket_inventory_use_case]
        ),
    ) -> Self:
        return cls(
            ticket_query_repo=ticket_query_repo,
            ticket_purchase_command_repo=ticket_purchase_command_repo,
            decrement_ticket_inventory_use_case=decrement_ticket_inventory_use_case,
        )

    @Logger.io
    async def create(self, *, ticket_id: int, purchaser_id: int, quantity: int) -> TicketPurchase:
        with self.tracer.start_as_current_span(
            'use_case.create_ticket_purchase',
            attributes={'ticket.id': ticket_id, 'purchase.quantity': quantity},
        ):
            ticket = await self.ticket_query_repo.get_by_id(ticket_id=ticket_id)
            if not ticket:
                raise NotFoundError('Ticket not found')

            purchase = TicketPurchase.create(
                ticket=ticket, purchaser_id=purchaser_id, quantity=quantity
            )
            created = await self._persist_with_unique_code(purchase=purchase)
            Logger.base.info(
                f'🧾 [PURCHASE] {created.id} ticket={ticket_id} x{quantity} '
                f'status={created.status.value}'
            )

            if created.status == PurchaseStatus.COMPLETED:
                await self.decrement_ticket_inventory_use_case.execute(purchase=created)

            return created

    async def _persist_with_unique_code(self, *, purchase: TicketPurchase) -> TicketPurchase:
        for attempt in range(1, MAX_REDEMPTION_CODE_ATTEMPTS + 1):
            try:
                return await self.ticket_purchase_command_repo.create(purchase=purchase)
            except ConflictError:
                if attempt == MAX_REDEMPTION_CODE_ATTEMPTS:
                    raise
                Logger.base.warning(
                    f'🔁 [PURCHASE] Redemption code collision, regenerating (attempt {attempt})'
                )
                purchase = purchase.with_new_redemption_code()
        raise ConflictError('Could not allocate a redemption code')
