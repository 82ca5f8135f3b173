from datetime import datetime, timezone
from typing import AsyncContextManager, Callable, Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from uuid_utils import UUID

from src.platform.exception.exceptions import ConflictError
from src.platform.logging.loguru_io import Logger
from src.service.redemption.app.interface.i_ticket_purchase_command_repo import (
    ITicketPurchaseCommandRepo,
)
from src.service.redemption.domain.entity.ticket_purchase_entity import (
    PurchaseStatus,
    TicketPurchase,
)
from src.service.redemption.domain.value_object.redemption_result import CheckInRecord
from src.service.redemption.driven_adapter.model.ticket_purchase_model import (
    TicketPurchaseModel,
)
from src.service.redemption.driven_adapter.repo.model_mapper import purchase_model_to_entity


class TicketPurchaseCommandRepoImpl(ITicketPurchaseCommandRepo):
    """
    Purchase ledger writes

    Check-in and completion are single `UPDATE ... WHERE <expected state> RETURNING`
    statements: the row either moves out of the expected state in this statement
    or the caller is told it lost (None).
    """

    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]) -> None:
        self.session_factory = session_factory

    @Logger.io
    async def create(self, *, purchase: TicketPurchase) -> TicketPurchase:
        async with self.session_factory() as session:
            model = TicketPurchaseModel(
                id=str(purchase.id),
                ticket_id=purchase.ticket_id,
                event_id=purchase.event_id,
                purchaser_id=purchase.purchaser_id,
                quantity=purchase.quantity,
                unit_price=purchase.unit_price,
                total_amount=purchase.total_amount,
                redemption_code=purchase.redemption_code,
                status=purchase.status.value,
                is_checked_in=False,
                purchased_at=purchase.purchased_at,
                updated_at=purchase.updated_at,
            )
            session.add(model)
            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                raise ConflictError('Redemption code already exists') from e
            await session.refresh(model)
            return purchase_model_to_entity(model)

    @Logger.io
    async def mark_completed_if_pending(self, *, purchase_id: UUID) -> Optional[TicketPurchase]:
        stmt = (
            update(TicketPurchaseModel)
            .where(
                TicketPurchaseModel.id == str(purchase_id),
                TicketPurchaseModel.status == PurchaseStatus.PENDING.value,
            )
            .values(
                status=PurchaseStatus.COMPLETED.value,
                updated_at=datetime.now(timezone.utc),
            )
            .returning(TicketPurchaseModel)
            .execution_options(synchronize_session=False)
        )
        return await self._execute_transition(stmt)

    @Logger.io
    async def mark_checked_in_if_not_yet(
        self, *, check_in: CheckInRecord
    ) -> Optional[TicketPurchase]:
        stmt = (
            update(TicketPurchaseModel)
            .where(
                TicketPurchaseModel.redemption_code == check_in.redemption_code,
                TicketPurchaseModel.is_checked_in.is_(False),
                TicketPurchaseModel.status == PurchaseStatus.COMPLETED.value,
            )
            .values(
                is_checked_in=True,
                check_in_time=check_in.check_in_time,
                check_in_photo_ref=check_in.check_in_photo_ref,
                updated_at=check_in.check_in_time,
            )
            .returning(TicketPurchaseModel)
            .execution_options(synchronize_session=False)
        )
        return await self._execute_transition(stmt)

    async def _execute_transition(self, stmt) -> Optional[TicketPurchase]:
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            model = result.scalar_one_or_none()
            purchase = purchase_model_to_entity(model) if model else None
            await session.commit()
            return purchase
