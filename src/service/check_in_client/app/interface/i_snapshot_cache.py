from abc import ABC, abstractmethod
from typing import Optional

from src.service.check_in_client.domain.entity.cached_snapshot_entity import (
    CachedEvent,
    CachedTicket,
)


class ISnapshotCache(ABC):
    @abstractmethod
    def cache_ticket(self, *, ticket: CachedTicket) -> None:
        pass

    @abstractmethod
    def list_cached_tickets(self) -> list[CachedTicket]:
        pass

    @abstractmethod
    def find_cached_ticket(self, *, redemption_code: str) -> Optional[CachedTicket]:
        pass

    @abstractmethod
    def cache_event(self, *, event: CachedEvent) -> None:
        pass

    @abstractmethod
    def list_cached_events(self) -> list[CachedEvent]:
        pass
