from abc import ABC, abstractmethod
from typing import Optional

from src.service.redemption.domain.entity.ticket_entity import Ticket


class ITicketCommandRepo(ABC):
    """Ticket inventory writes"""

    @abstractmethod
    async def create(self, *, ticket: Ticket) -> Ticket:
        pass

    @abstractmethod
    async def decrement_remaining(self, *, ticket_id: int, quantity: int) -> Optional[Ticket]:
        """
        Atomically apply `remaining = max(0, remaining - quantity)` and flip the
        status to sold-out when it reaches zero.

        Returns:
            The updated ticket, or None if the ticket does not exist
        """
        pass
