"""
Sync Manager - drains the local redemption queue into the check-in endpoint

Triggers: the connectivity monitor's offline -> online transition, a periodic
timer (only while online) and request_sync(). At most one drain runs at a time.
"""

from collections import defaultdict
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional

import anyio
import anyio.to_thread
from anyio.abc import TaskGroup, TaskStatus
import attrs

from src.platform.logging.loguru_io import Logger
from src.platform.metrics.redemption_metrics import metrics
from src.service.check_in_client.app.interface.i_connectivity_monitor import (
    IConnectivityMonitor,
)
from src.service.check_in_client.app.interface.i_redemption_gateway import IRedemptionGateway
from src.service.check_in_client.app.interface.i_redemption_queue import IRedemptionQueue
from src.service.check_in_client.domain.entity.offline_redemption_attempt_entity import (
    OfflineRedemptionAttempt,
)
from src.service.check_in_client.domain.value_object.redemption_outcome import (
    RedemptionOutcome,
)
from src.service.check_in_client.domain.value_object.sync_state import SyncStats, SyncStatus


SyncListener = Callable[[SyncStatus, SyncStats], None]


@attrs.define
class _DrainTally:
    successful: int = 0
    failed: int = 0
    rejected: int = 0
    rejected_codes: list[str] = attrs.field(factory=list)


class SyncManager:
    """
    Drain rules, per queued attempt:
    - redeemed or already redeemed (first write wins) -> removed, successful
    - unknown or unredeemable code -> removed, rejected
    - anything else, including a gateway that raises -> kept, failed; a re-drain is scheduled after retry_delay,
      at most max_retries times in a row

    Attempts run concurrently, except that attempts for the same code run one
    after another in queue order.
    """

    def __init__(
        self,
        *,
        queue: IRedemptionQueue,
        gateway: IRedemptionGateway,
        connectivity_monitor: IConnectivityMonitor,
        sync_interval: float = 300.0,
        retry_delay: float = 30.0,
        max_retries: int = 3,
        max_concurrency: int = 8,
    ) -> None:
        self.queue = queue
        self.gateway = gateway
        self.connectivity_monitor = connectivity_monitor
        self.sync_interval = sync_interval
        self.retry_delay = retry_delay
        self.max_retries = max_retries
        self.max_concurrency = max_concurrency

        self._status = SyncStatus.IDLE
        self._stats = SyncStats()
        self._retry_count = 0
        self._listeners: list[SyncListener] = []
        self._task_group: Optional[TaskGroup] = None
        self._remove_reconnect_listener: Optional[Callable[[], None]] = None

    @property
    def status(self) -> SyncStatus:
        return self._status

    @property
    def stats(self) -> SyncStats:
        return self._stats

    @property
    def retry_count(self) -> int:
        return self._retry_count

    # ========== Lifecycle ==========

    async def start(self, *, task_group: TaskGroup) -> None:
        self._remove_reconnect_listener = self.connectivity_monitor.add_reconnect_listener(
            self.request_sync
        )
        await task_group.start(self._run)
        Logger.base.info(
            f'🔄 [SYNC] Started (interval={self.sync_interval}s, retry={self.retry_delay}s '
            f'x{self.max_retries}, pending={self.queue.count_pending()})'
        )

    async def _run(self, *, task_status: TaskStatus[None] = anyio.TASK_STATUS_IGNORED) -> None:
        # Timer, retries and triggered drains all live in this group so stop() can cancel them
        async with anyio.create_task_group() as tg:
            self._task_group = tg
            tg.start_soon(self._periodic_loop)  # pyrefly: ignore[bad-argument-type]
            task_status.started()

    def stop(self) -> None:
        """Cancel the timer, pending retries and any running drain; detach listeners."""
        if self._task_group is not None:
            self._task_group.cancel_scope.cancel()
            self._task_group = None
        if self._remove_reconnect_listener is not None:
            self._remove_reconnect_listener()
            self._remove_reconnect_listener = None
        self._listeners.clear()
        self._retry_count = 0
        self._status = SyncStatus.IDLE
        Logger.base.info('🛑 [SYNC] Stopped')

    def request_sync(self) -> None:
        """Fire-and-forget drain; used by the reconnect hook and the manual sync button."""
        self._spawn(self.sync)

    # ========== Observers ==========

    def subscribe(self, listener: SyncListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        status, stats = self._status, self._stats
        for listener in list(self._listeners):
            try:
                listener(status, stats)
            except Exception as e:
                Logger.base.exception(f'❌ [SYNC] Listener {listener!r} failed: {e}')

    # ========== Drain ==========

    async def sync(self) -> bool:
        """
        Drain the queue once.

        Returns:
            False when a drain is already running or any attempt is still queued
            because of a transient failure; True otherwise
        """
        if self._status == SyncStatus.SYNCING:
            return False

        self._status = SyncStatus.SYNCING
        self._notify()

        try:
            attempts = await anyio.to_thread.run_sync(self.queue.list_pending)
            tally = _DrainTally()
            if attempts:
                Logger.base.info(f'🔄 [SYNC] Draining {len(attempts)} queued check-ins')
                await self._replay_all(attempts=attempts, tally=tally)
        except Exception as e:
            Logger.base.exception(f'❌ [SYNC] Drain aborted: {e}')
            self._status = SyncStatus.FAILED
            self._notify()
            return False

        self._stats = SyncStats(
            total=len(attempts),
            successful=tally.successful,
            failed=tally.failed,
            rejected=tally.rejected,
            last_sync_time=datetime.now(timezone.utc),
            rejected_codes=tuple(tally.rejected_codes),
        )
        pending = await anyio.to_thread.run_sync(self.queue.count_pending)
        self._settle(failed=tally.failed)
        metrics.record_sync_drain(
            status=self._status.value,
            successful=tally.successful,
            rejected=tally.rejected,
            failed=tally.failed,
            pending=pending,
        )
        Logger.base.info(
            f'🔄 [SYNC] {self._status.value}: total={self._stats.total} '
            f'successful={tally.successful} rejected={tally.rejected} failed={tally.failed}'
        )
        self._notify()
        return tally.failed == 0

    def _settle(self, *, failed: int) -> None:
        if failed == 0:
            self._status = SyncStatus.COMPLETED
            self._retry_count = 0
        elif self._retry_count < self.max_retries:
            self._status = SyncStatus.FAILED
            self._retry_count += 1
            Logger.base.warning(
                f'⏳ [SYNC] {failed} check-ins still queued, retry {self._retry_count}/'
                f'{self.max_retries} in {self.retry_delay}s'
            )
            self._spawn(self._retry_after_delay)
        else:
            self._status = SyncStatus.FAILED
            self._retry_count = 0
            Logger.base.error(
                f'❌ [SYNC] Giving up after {self.max_retries} retries, {failed} check-ins '
                f'wait for the next reconnect or timer'
            )

    async def _replay_all(
        self, *, attempts: list[OfflineRedemptionAttempt], tally: _DrainTally
    ) -> None:
        by_code: dict[str, list[OfflineRedemptionAttempt]] = defaultdict(list)
        for attempt in attempts:
            by_code[attempt.redemption_code].append(attempt)

        limiter = anyio.CapacityLimiter(self.max_concurrency)
        async with anyio.create_task_group() as tg:
            for same_code_attempts in by_code.values():
                tg.start_soon(self._replay_in_order, same_code_attempts, tally, limiter)

    async def _replay_in_order(
        self,
        attempts: list[OfflineRedemptionAttempt],
        tally: _DrainTally,
        limiter: anyio.CapacityLimiter,
    ) -> None:
        async with limiter:
            for attempt in attempts:
                await self._replay_one(attempt=attempt, tally=tally)

    async def _replay_one(self, *, attempt: OfflineRedemptionAttempt, tally: _DrainTally) -> None:
        assert attempt.local_id is not None
        try:
            reply = await self.gateway.redeem(attempt=attempt, replayed=True)
        except Exception as e:
            Logger.base.exception(
                f'❌ [SYNC] {attempt.redemption_code} replay raised {type(e).__name__}: {e}'
            )
            tally.failed += 1
            return

        if not reply.outcome.is_definitive:
            tally.failed += 1
        elif reply.outcome in (RedemptionOutcome.REDEEMED, RedemptionOutcome.ALREADY_REDEEMED):
            if reply.outcome == RedemptionOutcome.ALREADY_REDEEMED:
                Logger.base.warning(
                    f'⚠️ [SYNC] {attempt.redemption_code} was already checked in at '
                    f'{reply.check_in_time}; dropping the offline scan from {attempt.captured_at}'
                )
            await anyio.to_thread.run_sync(self._remove, attempt.local_id)
            tally.successful += 1
        else:
            Logger.base.warning(
                f'🚫 [SYNC] {attempt.redemption_code} rejected ({reply.outcome.value}): '
                f'{reply.message}'
            )
            await anyio.to_thread.run_sync(self._remove, attempt.local_id)
            tally.rejected += 1
            tally.rejected_codes.append(attempt.redemption_code)

    def _remove(self, local_id: int) -> None:
        self.queue.remove(local_id=local_id)

    # ========== Scheduling ==========

    def _spawn(self, func: Callable[[], Awaitable[object]]) -> None:
        if self._task_group is None:
            Logger.base.warning('⚠️ [SYNC] Not started, ignoring sync request')
            return
        self._task_group.start_soon(func)  # pyrefly: ignore[bad-argument-type]

    async def _retry_after_delay(self) -> None:
        await anyio.sleep(self.retry_delay)
        await self.sync()

    async def _periodic_loop(self) -> None:
        while True:
            await anyio.sleep(self.sync_interval)
            if self.connectivity_monitor.is_online:
                await self.sync()
