from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import RedemptionCodeNotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.redemption.app.interface.i_audit_log_repo import IAuditLogRepo
from src.service.redemption.app.interface.i_ticket_purchase_query_repo import (
    ITicketPurchaseQueryRepo,
)
from src.service.redemption.domain.entity.audit_log_entity import AuditLogEntry
from src.service.redemption.domain.entity.ticket_purchase_entity import TicketPurchase


class GetTicketPurchaseByCodeUseCase:
    """Verify screen: what a code belongs to and whether it was already used."""

    def __init__(
        self,
        *,
        ticket_purchase_query_repo: ITicketPurchaseQueryRepo,
        audit_log_repo: IAuditLogRepo,
    ) -> None:
        self.ticket_purchase_query_repo = ticket_purchase_query_repo
        self.audit_log_repo = audit_log_repo

    @classmethod
    @inject
    def depends(
        cls,
        ticket_purchase_query_repo: ITicketPurchaseQueryRepo = Depends(
            Provide[Container.ticket_purchase_query_repo]
        ),
        audit_log_repo: IAuditLogRepo = Depends(Provide[Container.audit_log_repo]),
    ) -> Self:
        return cls(
            ticket_purchase_query_repo=ticket_purchase_query_repo,
            audit_log_repo=audit_log_repo,
        )

    @Logger.io
    async def get_by_code(self, *, redemption_code: str) -> TicketPurchase:
        purchase = await self.ticket_purchase_query_repo.get_by_redemption_code(
            redemption_code=redemption_code
        )
        if not purchase:
            raise RedemptionCodeNotFoundError(redemption_code)
        return purchase

    @Logger.io
    async def get_history(self, *, redemption_code: str) -> list[AuditLogEntry]:
        purchase = await self.get_by_code(redemption_code=redemption_code)
        return await self.audit_log_repo.list_for_entity(entity_id=str(purchase.id))
