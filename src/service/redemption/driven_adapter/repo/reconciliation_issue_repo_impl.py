from typing import AsyncContextManager, Callable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from uuid_utils import UUID

from src.platform.logging.loguru_io import Logger
from src.service.redemption.app.interface.i_reconciliation_issue_repo import (
    IReconciliationIssueRepo,
)
from src.service.redemption.domain.entity.reconciliation_issue_entity import (
    ReconciliationIssue,
    ReconciliationKind,
)
from src.service.redemption.driven_adapter.model.reconciliation_issue_model import (
    ReconciliationIssueModel,
)
from src.service.redemption.driven_adapter.repo.model_mapper import as_utc


class ReconciliationIssueRepoImpl(IReconciliationIssueRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]) -> None:
        self.session_factory = session_factory

    @Logger.io
    async def create(self, *, issue: ReconciliationIssue) -> ReconciliationIssue:
        async with self.session_factory() as session:
            model = ReconciliationIssueModel(
                kind=issue.kind.value,
                purchase_id=str(issue.purchase_id),
                ticket_id=issue.ticket_id,
                quantity=issue.quantity,
                reason=issue.reason[:1000],
                resolved=issue.resolved,
                created_at=issue.created_at,
            )
            session.add(model)
            await session.commit()
            await session.refresh(model)
            return self._model_to_entity(model)

    @Logger.io
    async def list_unresolved(self) -> list[ReconciliationIssue]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(ReconciliationIssueModel)
                .where(ReconciliationIssueModel.resolved.is_(False))
                .order_by(ReconciliationIssueModel.id)
            )
            return [self._model_to_entity(model) for model in result.scalars().all()]

    def _model_to_entity(self, model: ReconciliationIssueModel) -> ReconciliationIssue:
        return ReconciliationIssue(
            id=model.id,
            kind=ReconciliationKind(model.kind),
            purchase_id=UUID(model.purchase_id),
            ticket_id=model.ticket_id,
            quantity=model.quantity,
            reason=model.reason,
            resolved=model.resolved,
            created_at=as_utc(model.created_at),  # type: ignore[arg-type]
        )
