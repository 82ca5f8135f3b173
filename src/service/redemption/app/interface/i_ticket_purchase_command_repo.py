from abc import ABC, abstractmethod
from typing import Optional

from uuid_utils import UUID

from src.service.redemption.domain.entity.ticket_purchase_entity import TicketPurchase
from src.service.redemption.domain.value_object.redemption_result import CheckInRecord


class ITicketPurchaseCommandRepo(ABC):
    """Purchase ledger writes. Every state transition is a single conditional update."""

    @abstractmethod
    async def create(self, *, purchase: TicketPurchase) -> TicketPurchase:
        """
        Raises:
            ConflictError: the redemption code is already taken
        """
        pass

    @abstractmethod
    async def mark_completed_if_pending(self, *, purchase_id: UUID) -> Optional[TicketPurchase]:
        """
        pending -> completed.

        Returns:
            The completed purchase, or None when the purchase was not pending
            (already completed, cancelled, refunded or missing)
        """
        pass

    @abstractmethod
    async def mark_checked_in_if_not_yet(
        self, *, check_in: CheckInRecord
    ) -> Optional[TicketPurchase]:
        """
        Set is_checked_in for a completed, not yet checked-in purchase.

        Returns:
            The checked-in purchase, or None when another call already won the code
            (or the purchase is not redeemable)
        """
        pass
