from abc import ABC, abstractmethod

from src.service.check_in_client.domain.entity.offline_redemption_attempt_entity import (
    OfflineRedemptionAttempt,
)


class IRedemptionQueue(ABC):
    """Durable, ordered store of scans waiting for the server. Every call commits before returning."""

    @abstractmethod
    def enqueue(self, *, attempt: OfflineRedemptionAttempt) -> int:
        """
        Returns:
            The assigned local_id (monotonically increasing)
        """
        pass

    @abstractmethod
    def list_pending(self) -> list[OfflineRedemptionAttempt]:
        """All queued attempts in insertion order"""
        pass

    @abstractmethod
    def remove(self, *, local_id: int) -> None:
        """Delete one attempt; removing an id that is already gone is a no-op"""
        pass

    @abstractmethod
    def count_pending(self) -> int:
        pass
