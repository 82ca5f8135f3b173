from collections.abc import Callable
from datetime import datetime, timezone
from typing import Optional
from unittest.mock import AsyncMock

import attrs
import pytest

from src.service.check_in_client.app.interface.i_connectivity_monitor import (
    IConnectivityMonitor,
)
from src.service.check_in_client.app.interface.i_redemption_queue import IRedemptionQueue
from src.service.check_in_client.domain.entity.offline_redemption_attempt_entity import (
    OfflineRedemptionAttempt,
)
from src.service.check_in_client.domain.value_object.redemption_outcome import (
    RedemptionOutcome,
    RedemptionReply,
)


class InMemoryRedemptionQueue(IRedemptionQueue):
    def __init__(self) -> None:
        self._attempts: dict[int, OfflineRedemptionAttempt] = {}
        self._next_id = 1

    def enqueue(self, *, attempt: OfflineRedemptionAttempt) -> int:
        local_id = self._next_id
        self._next_id += 1
        self._attempts[local_id] = attrs.evolve(attempt, local_id=local_id)
        return local_id

    def list_pending(self) -> list[OfflineRedemptionAttempt]:
        return [self._attempts[local_id] for local_id in sorted(self._attempts)]

    def remove(self, *, local_id: int) -> None:
        self._attempts.pop(local_id, None)

    def count_pending(self) -> int:
        return len(self._attempts)


class FakeConnectivityMonitor(IConnectivityMonitor):
    def __init__(self, *, online: bool = False) -> None:
        self.online = online
        self.listeners: list[Callable[[], None]] = []

    @property
    def is_online(self) -> bool:
        return self.online

    def add_reconnect_listener(self, listener: Callable[[], None]) -> Callable[[], None]:
        self.listeners.append(listener)
        return lambda: self.listeners.remove(listener)

    def reconnect(self) -> None:
        self.online = True
        for listener in list(self.listeners):
            listener()


def _reply(outcome: RedemptionOutcome, message: Optional[str] = None) -> RedemptionReply:
    check_in_time = (
        datetime(2025, 3, 1, 18, 5, tzinfo=timezone.utc)
        if outcome in (RedemptionOutcome.REDEEMED, RedemptionOutcome.ALREADY_REDEEMED)
        else None
    )
    return RedemptionReply(outcome=outcome, check_in_time=check_in_time, message=message)


def _scripted_gateway(outcomes: dict[str, list[RedemptionOutcome]]) -> AsyncMock:
    """Answers each code with its outcomes in order; the last one repeats."""
    remaining = {code: list(seq) for code, seq in outcomes.items()}

    async def redeem(*, attempt: OfflineRedemptionAttempt, replayed: bool) -> RedemptionReply:
        seq = remaining[attempt.redemption_code]
        outcome = seq.pop(0) if len(seq) > 1 else seq[0]
        return _reply(outcome)

    gateway = AsyncMock()
    gateway.redeem.side_effect = redeem
    return gateway


@pytest.fixture
def memory_queue() -> InMemoryRedemptionQueue:
    return InMemoryRedemptionQueue()


@pytest.fixture
def offline_monitor() -> FakeConnectivityMonitor:
    return FakeConnectivityMonitor(online=False)


@pytest.fixture
def online_monitor() -> FakeConnectivityMonitor:
    return FakeConnectivityMonitor(online=True)


@pytest.fixture
def scripted_gateway() -> Callable[[dict[str, list[RedemptionOutcome]]], AsyncMock]:
    return _scripted_gateway
