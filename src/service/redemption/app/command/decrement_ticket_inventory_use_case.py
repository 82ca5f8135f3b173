"""
Decrement Ticket Inventory Use Case - purchase completion hook
"""

from typing import Optional

from opentelemetry import trace

from src.platform.exception.exceptions import InventoryOversellError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.redemption_metrics import metrics
from src.service.redemption.app.interface.i_reconciliation_issue_repo import (
    IReconciliationIssueRepo,
)
from src.service.redemption.app.interface.i_ticket_command_repo import ITicketCommandRepo
from src.service.redemption.domain.entity.reconciliation_issue_entity import (
    ReconciliationIssue,
    ReconciliationKind,
)
from src.service.redemption.domain.entity.ticket_entity import Ticket, TicketStatus
from src.service.redemption.domain.entity.ticket_purchase_entity import TicketPurchase


class DecrementTicketInventoryUseCase:
    """
    Runs once per purchase, right after it transitions into completed.

    The purchase is already committed as completed when this runs, so a failed
    decrement never rolls it back: the failure is recorded as an
    inventory_oversell reconciliation issue for manual follow-up.

    Dependencies:
    - ticket_command_repo: atomic floor-at-zero decrement
    - reconciliation_issue_repo: records decrements that could not be applied
    """

    def __init__(
        self,
        *,
        ticket_command_repo: ITicketCommandRepo,
        reconciliation_issue_repo: IReconciliationIssueRepo,
    ) -> None:
        self.ticket_command_repo = ticket_command_repo
        self.reconciliation_issue_repo = reconciliation_issue_repo
        self.tracer = trace.get_tracer(__name__)

    @Logger.io
    async def execute(self, *, purchase: TicketPurchase) -> Optional[Ticket]:
        with self.tracer.start_as_current_span(
            'use_case.decrement_ticket_inventory',
            attributes={
                'ticket.id': purchase.ticket_id,
                'purchase.id': str(purchase.id),
                'purchase.quantity': purchase.quantity,
            },
        ):
            try:
                ticket = await self._decrement(purchase=purchase)
            except Exception as e:
                await self._flag_oversell(purchase=purchase, error=e)
                return None

            result = 'sold_out' if ticket.status == TicketStatus.SOLD_OUT else 'applied'
            metrics.record_inventory_decrement(result=result)
            return ticket

    async def _decrement(self, *, purchase: TicketPurchase) -> Ticket:
        ticket = await self.ticket_command_repo.decrement_remaining(
            ticket_id=purchase.ticket_id, quantity=purchase.quantity
        )
        if ticket is None:
            raise InventoryOversellError(
                ticket_id=purchase.ticket_id,
                quantity=purchase.quantity,
                reason='ticket row not found',
            )
        return ticket

    async def _flag_oversell(self, *, purchase: TicketPurchase, error: Exception) -> None:
        reason = error.reason if isinstance(error, InventoryOversellError) else str(error)
        metrics.record_inventory_decrement(result='oversell')
        Logger.base.error(
            f'🚨 [INVENTORY] Decrement failed for purchase {purchase.id} '
            f'(ticket={purchase.ticket_id}, quantity={purchase.quantity}): {reason}'
        )
        try:
            await self.reconciliation_issue_repo.create(
                issue=ReconciliationIssue(
                    kind=ReconciliationKind.INVENTORY_OVERSELL,
                    purchase_id=purchase.id,
                    ticket_id=purchase.ticket_id,
                    quantity=purchase.quantity,
                    reason=reason,
                )
            )
        except Exception as e:
            Logger.base.exception(
                f'🚨 [INVENTORY] Could not record reconciliation issue for {purchase.id}: {e}'
            )
