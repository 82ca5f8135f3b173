from abc import ABC, abstractmethod
from typing import Optional

from src.service.redemption.domain.entity.ticket_entity import Ticket


class ITicketQueryRepo(ABC):
    @abstractmethod
    async def get_by_id(self, *, ticket_id: int) -> Optional[Ticket]:
        pass
