from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from uuid_utils import UUID

from src.platform.config.di import Container
from src.platform.exception.exceptions import DomainError, ForbiddenError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.redemption.app.command.decrement_ticket_inventory_use_case import (
    DecrementTicketInventoryUseCase,
)
from src.service.redemption.app.interface.i_ticket_purchase_command_repo import (
    ITicketPurchaseCommandRepo,
)
from src.service.redemption.app.interface.i_ticket_purchase_query_repo import (
    ITicketPurchaseQueryRepo,
)
from src.service.redemption.domain.entity.ticket_purchase_entity import (
    PurchaseStatus,
    TicketPurchase,
)
from src.service.redemption.domain.entity.user_entity import UserEntity, UserRole


class CompleteTicketPurchaseUseCase:
    """Payment confirmation: pending -> completed, then the inventory hook. Safe to repeat."""

    def __init__(
        self,
        *,
        ticket_purchase_command_repo: ITicketPurchaseCommandRepo,
        ticket_purchase_query_repo: ITicketPurchaseQueryRepo,
        decrement_ticket_inventory_use_case: DecrementTicketInventoryUseCase,
    ) -> None:
        self.ticket_purchase_command_repo = ticket_purchase_command_repo
        self.ticket_purchase_query_repo = ticket_purchase_query_repo
        self.decrement_ticket_inventory_use_case = decrement_ticket_inventory_use_case

    @classmethod
    @inject
    def depends(
        cls,
        ticket_purchase_command_repo: ITicketPurchaseCommandRepo = Depends(
            Provide[Container.ticket_purchase_command_repo]
        ),
        ticket_purchase_query_repo: ITicketPurchaseQueryRepo = Depends(
            Provide[Container.ticket_purchase_query_repo]
        ),
        decrement_ticket_inventory_use_case: DecrementTicketInventoryUseCase = Depends(
            Provide[Container.decrement_ticket_inventory_use_case]
        ),
    ) -> Self:
        return cls(
            ticket_purchase_command_repo=ticket_purchase_command_repo,
            ticket_purchase_query_repo=ticket_purchase_query_repo,
            decrement_ticket_inventory_use_case=decrement_ticket_inventory_use_case,
        )

    @Logger.io
    async def complete(self, *, purchase_id: UUID, requested_by: UserEntity) -> TicketPurchase:
        existing = await self.ticket_purchase_query_repo.get_by_id(purchase_id=purchase_id)
        if not existing:
            raise NotFoundError('Ticket purchase not found')
        if existing.purchaser_id != requested_by.id and requested_by.role not in (
            UserRole.SUPERADMIN,
            UserRole.ORGANIZER,
        ):
            raise ForbiddenError('Only the purchaser can complete this purchase')

        completed = await self.ticket_purchase_command_repo.mark_completed_if_pending(
            purchase_id=purchase_id
        )
        if completed:
            Logger.base.info(f'💳 [PURCHASE] {purchase_id} pending -> completed')
            await self.decrement_ticket_inventory_use_case.execute(purchase=completed)
            return completed

        # Lost the transition: either an earlier call completed it or it left pending
        current = await self.ticket_purchase_query_repo.get_by_id(purchase_id=purchase_id)
        if current and current.status == PurchaseStatus.COMPLETED:
            return current
        status = current.status.value if current else 'missing'
        raise DomainError(f'Cannot complete a {status} purchase')
