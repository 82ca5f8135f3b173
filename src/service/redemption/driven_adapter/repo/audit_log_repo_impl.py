from typing import AsyncContextManager, Callable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from uuid_utils import UUID

from src.platform.logging.loguru_io import Logger
from src.service.redemption.app.interface.i_audit_log_repo import IAuditLogRepo
from src.service.redemption.domain.entity.audit_log_entity import (
    AuditAction,
    AuditEntityType,
    AuditLogEntry,
)
from src.service.redemption.driven_adapter.model.audit_log_model import AuditLogModel
from src.service.redemption.driven_adapter.repo.model_mapper import as_utc


class AuditLogRepoImpl(IAuditLogRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]) -> None:
        self.session_factory = session_factory

    @Logger.io
    async def append(self, *, entry: AuditLogEntry) -> None:
        async with self.session_factory() as session:
            session.add(
                AuditLogModel(
                    id=str(entry.id),
                    action=entry.action.value,
                    entity_type=entry.entity_type.value,
                    entity_id=entry.entity_id,
                    details=entry.details,
                    created_by=entry.created_by,
                    created_at=entry.created_at,
                )
            )
            await session.commit()

    @Logger.io
    async def list_for_entity(self, *, entity_id: str) -> list[AuditLogEntry]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(AuditLogModel)
                .where(AuditLogModel.entity_id == entity_id)
                .order_by(AuditLogModel.created_at, AuditLogModel.id)
            )
            return [
                AuditLogEntry(
                    id=UUID(model.id),
                    action=AuditAction(model.action),
                    entity_type=AuditEntityType(model.entity_type),
                    entity_id=model.entity_id,
                    details=model.details,
                    created_by=model.created_by,
                    created_at=as_utc(model.created_at),  # type: ignore[arg-type]
                )
                for model in result.scalars().all()
            ]
