from unittest.mock import AsyncMock

import attrs
import pytest

from src.platform.exception.exceptions import DomainError, ForbiddenError, NotFoundError
from src.platform.types.uuid7_utils_types import new_uuid7
from src.service.redemption.app.command.complete_ticket_purchase_use_case import (
    CompleteTicketPurchaseUseCase,
)
from src.service.redemption.domain.entity.ticket_purchase_entity import (
    PurchaseStatus,
    TicketPurchase,
)
from src.service.redemption.domain.entity.user_entity import UserEntity, UserRole


pytestmark = pytest.mark.unit

PURCHASER = UserEntity(id=31, email='buyer@test.com', role=UserRole.PARTICIPANT)


def _purchase(status: PurchaseStatus = PurchaseStatus.PENDING) -> TicketPurchase:
    return TicketPurchase(
        id=new_uuid7(),
        ticket_id=7,
        event_id=3,
        purchaser_id=31,
        quantity=1,
        unit_price=1500,
        total_amount=1500,
        redemption_code='TIX-PAID0001',
        status=status,
    )


class TestCompleteTicketPurchase:
    def setup_method(self):
        self.command_repo = AsyncMock()
        self.query_repo = AsyncMock()
        self.decrement = AsyncMock()
        self.use_case = CompleteTicketPurchaseUseCase(
            ticket_purchase_command_repo=self.command_repo,
            ticket_purchase_query_repo=self.query_repo,
            decrement_ticket_inventory_use_case=self.decrement,
        )

    @pytest.mark.asyncio
    async def test_pending_purchase_completes_and_decrements_once(self):
        pending = _purchase()
        completed = attrs.evolve(pending, status=PurchaseStatus.COMPLETED)
        self.query_repo.get_by_id.return_value = pending
        self.command_repo.mark_completed_if_pending.return_value = completed

        result = await self.use_case.complete(purchase_id=pending.id, requested_by=PURCHASER)

        assert result.status == PurchaseStatus.COMPLETED
        self.decrement.execute.assert_awaited_once_with(purchase=completed)

    @pytest.mark.asyncio
    async def test_repeat_call_returns_completed_without_second_decrement(self):
        # Given: an earlier call already won the transition
        completed = _purchase(PurchaseStatus.COMPLETED)
        self.query_repo.get_by_id.return_value = completed
        self.command_repo.mark_completed_if_pending.return_value = None

        # When
        result = await self.use_case.complete(purchase_id=completed.id, requested_by=PURCHASER)

        # Then
        assert result.status == PurchaseStatus.COMPLETED
        self.decrement.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_cancelled_purchase_cannot_complete(self):
        cancelled = _purchase(PurchaseStatus.CANCELLED)
        self.query_repo.get_by_id.return_value = cancelled
        self.command_repo.mark_completed_if_pending.return_value = None

        with pytest.raises(DomainError, match='Cannot complete a cancelled purchase'):
            await self.use_case.complete(purchase_id=cancelled.id, requested_by=PURCHASER)

    @pytest.mark.asyncio
    async def test_unknown_purchase(self):
        self.query_repo.get_by_id.return_value = None

        with pytest.raises(NotFoundError):
            await self.use_case.complete(purchase_id=new_uuid7(), requested_by=PURCHASER)

    @pytest.mark.asyncio
    async def test_other_participant_is_forbidden(self):
        self.query_repo.get_by_id.return_value = _purchase()
        stranger = UserEntity(id=99, email='other@test.com', role=UserRole.PARTICIPANT)

        with pytest.raises(ForbiddenError):
            await self.use_case.complete(purchase_id=new_uuid7(), requested_by=stranger)

        self.command_repo.mark_completed_if_pending.assert_not_called()

    @pytest.mark.asyncio
    async def test_organizer_may_complete_on_behalf(self):
        pending = _purchase()
        self.query_repo.get_by_id.return_value = pending
        self.command_repo.mark_completed_if_pending.return_value = attrs.evolve(
            pending, status=PurchaseStatus.COMPLETED
        )
        organizer = UserEntity(id=21, email='org@test.com', role=UserRole.ORGANIZER)

        result = await self.use_case.complete(purchase_id=pending.id, requested_by=organizer)

        assert result.status == PurchaseStatus.COMPLETED
