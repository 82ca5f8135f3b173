from abc import ABC, abstractmethod

from src.service.check_in_client.domain.entity.offline_redemption_attempt_entity import (
    OfflineRedemptionAttempt,
)
from src.service.check_in_client.domain.value_object.redemption_outcome import RedemptionReply


class IRedemptionGateway(ABC):
    @abstractmethod
    async def redeem(
        self, *, attempt: OfflineRedemptionAttempt, replayed: bool
    ) -> RedemptionReply:
        """
        Call the check-in endpoint once.

        Never raises on transport or server errors; those come back as
        RedemptionOutcome.TRANSIENT. `replayed` sends the capture time as
        offlineTimestamp.
        """
        pass
