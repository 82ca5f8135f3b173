from abc import ABC, abstractmethod
from typing import Optional

from uuid_utils import UUID

from src.service.redemption.domain.entity.ticket_purchase_entity import TicketPurchase


class ITicketPurchaseQueryRepo(ABC):
    @abstractmethod
    async def get_by_id(self, *, purchase_id: UUID) -> Optional[TicketPurchase]:
        pass

    @abstractmethod
    async def get_by_redemption_code(self, *, redemption_code: str) -> Optional[TicketPurchase]:
        pass
