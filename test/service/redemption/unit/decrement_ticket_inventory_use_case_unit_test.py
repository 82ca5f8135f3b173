from unittest.mock import AsyncMock

import pytest

from src.platform.types.uuid7_utils_types import new_uuid7
from src.service.redemption.app.command.decrement_ticket_inventory_use_case import (
    DecrementTicketInventoryUseCase,
)
from src.service.redemption.domain.entity.reconciliation_issue_entity import (
    ReconciliationKind,
)
from src.service.redemption.domain.entity.ticket_entity import Ticket, TicketStatus, TicketType
from src.service.redemption.domain.entity.ticket_purchase_entity import (
    PurchaseStatus,
    TicketPurchase,
)


pytestmark = pytest.mark.unit


def _purchase(quantity: int = 2) -> TicketPurchase:
    return TicketPurchase(
        id=new_uuid7(),
        ticket_id=7,
        event_id=3,
        purchaser_id=31,
        quantity=quantity,
        unit_price=0,
        total_amount=0,
        redemption_code='TIX-DECR0001',
        status=PurchaseStatus.COMPLETED,
    )


def _ticket(*, remaining: int, status: TicketStatus = TicketStatus.ACTIVE) -> Ticket:
    return Ticket(
        id=7,
        event_id=3,
        name='General',
        ticket_type=TicketType.FREE,
        price=0,
        quantity=10,
        remaining_quantity=remaining,
        status=status,
    )


class TestDecrementTicketInventory:
    def setup_method(self):
        self.ticket_command_repo = AsyncMock()
        self.reconciliation_issue_repo = AsyncMock()
        self.use_case = DecrementTicketInventoryUseCase(
            ticket_command_repo=self.ticket_command_repo,
            reconciliation_issue_repo=self.reconciliation_issue_repo,
        )

    @pytest.mark.asyncio
    async def test_decrements_by_purchase_quantity(self):
        self.ticket_command_repo.decrement_remaining.return_value = _ticket(remaining=8)

        ticket = await self.use_case.execute(purchase=_purchase(quantity=2))

        assert ticket is not None
        assert ticket.remaining_quantity == 8
        self.ticket_command_repo.decrement_remaining.assert_awaited_once_with(
            ticket_id=7, quantity=2
        )
        self.reconciliation_issue_repo.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_sold_out_ticket_is_returned(self):
        self.ticket_command_repo.decrement_remaining.return_value = _ticket(
            remaining=0, status=TicketStatus.SOLD_OUT
        )

        ticket = await self.use_case.execute(purchase=_purchase())

        assert ticket is not None
        assert ticket.status == TicketStatus.SOLD_OUT

    @pytest.mark.asyncio
    async def test_missing_ticket_row_is_flagged_for_reconciliation(self):
        # Given: the ticket row vanished
        self.ticket_command_repo.decrement_remaining.return_value = None
        purchase = _purchase()

        # When
        result = await self.use_case.execute(purchase=purchase)

        # Then: the purchase is not rolled back, an issue is recorded instead
        assert result is None
        issue = self.reconciliation_issue_repo.create.await_args.kwargs['issue']
        assert issue.kind == ReconciliationKind.INVENTORY_OVERSELL
        assert issue.purchase_id == purchase.id
        assert issue.reason == 'ticket row not found'

    @pytest.mark.asyncio
    async def test_storage_failure_is_flagged_not_raised(self):
        self.ticket_command_repo.decrement_remaining.side_effect = RuntimeError('db gone')

        result = await self.use_case.execute(purchase=_purchase())

        assert result is None
        issue = self.reconciliation_issue_repo.create.await_args.kwargs['issue']
        assert issue.reason == 'db gone'

    @pytest.mark.asyncio
    async def test_failed_issue_write_is_only_logged(self):
        self.ticket_command_repo.decrement_remaining.side_effect = RuntimeError('db gone')
        self.reconciliation_issue_repo.create.side_effect = RuntimeError('still gone')

        assert await self.use_case.execute(purchase=_purchase()) is None
