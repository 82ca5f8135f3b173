from abc import ABC, abstractmethod

from src.service.redemption.domain.entity.audit_log_entity import AuditLogEntry


class IAuditLogRepo(ABC):
    """Append-only audit sink keyed by entity id"""

    @abstractmethod
    async def append(self, *, entry: AuditLogEntry) -> None:
        pass

    @abstractmethod
    async def list_for_entity(self, *, entity_id: str) -> list[AuditLogEntry]:
        pass
