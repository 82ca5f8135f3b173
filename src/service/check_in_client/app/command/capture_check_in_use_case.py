from typing import Optional

from src.platform.logging.loguru_io import Logger
from src.service.check_in_client.app.interface.i_connectivity_monitor import (
    IConnectivityMonitor,
)
from src.service.check_in_client.app.interface.i_redemption_gateway import IRedemptionGateway
from src.service.check_in_client.app.interface.i_redemption_queue import IRedemptionQueue
from src.service.check_in_client.domain.entity.offline_redemption_attempt_entity import (
    OfflineRedemptionAttempt,
)
from src.service.check_in_client.domain.value_object.capture_result import (
    CaptureOutcome,
    CaptureResult,
)
from src.service.check_in_client.domain.value_object.redemption_outcome import (
    RedemptionOutcome,
)


_CAPTURE_OUTCOME: dict[RedemptionOutcome, CaptureOutcome] = {
    RedemptionOutcome.REDEEMED: CaptureOutcome.CHECKED_IN,
    RedemptionOutcome.ALREADY_REDEEMED: CaptureOutcome.ALREADY_USED,
    RedemptionOutcome.NOT_FOUND: CaptureOutcome.NOT_FOUND,
    RedemptionOutcome.NOT_REDEEMABLE: CaptureOutcome.NOT_REDEEMABLE,
}


class CaptureCheckInUseCase:
    """
    One scan at the gate.

    Online: redeem directly and report the server's verdict. Offline, or when
    the call fails transiently: queue the scan for the Sync Manager and report
    saved_offline. Endpoint errors never escape; local store errors do.
    """

    def __init__(
        self,
        *,
        queue: IRedemptionQueue,
        gateway: IRedemptionGateway,
        connectivity_monitor: IConnectivityMonitor,
    ) -> None:
        self.queue = queue
        self.gateway = gateway
        self.connectivity_monitor = connectivity_monitor

    @Logger.io
    async def execute(
        self,
        *,
        redemption_code: str,
        operator_user_id: Optional[int],
        evidence_photo: Optional[str] = None,
        event_id: Optional[int] = None,
    ) -> CaptureResult:
        attempt = OfflineRedemptionAttempt.capture(
            redemption_code=redemption_code,
            operator_user_id=operator_user_id,
            event_id=event_id,
            evidence_photo=evidence_photo,
        )

        if not self.connectivity_monitor.is_online:
            return self._save_offline(attempt)

        try:
            reply = await self.gateway.redeem(attempt=attempt, replayed=False)
        except Exception as e:
            Logger.base.exception(
                f'❌ [CAPTURE] {attempt.redemption_code} redeem raised {type(e).__name__}: {e}'
            )
            return self._save_offline(attempt)

        if not reply.outcome.is_definitive:
            Logger.base.warning(
                f'📴 [CAPTURE] {attempt.redemption_code} could not reach the server, queueing'
            )
            return self._save_offline(attempt)

        return CaptureResult(
            outcome=_CAPTURE_OUTCOME[reply.outcome],
            redemption_code=attempt.redemption_code,
            check_in_time=reply.check_in_time,
            message=reply.message,
        )

    def _save_offline(self, attempt: OfflineRedemptionAttempt) -> CaptureResult:
        local_id = self.queue.enqueue(attempt=attempt)
        return CaptureResult(
            outcome=CaptureOutcome.SAVED_OFFLINE,
            redemption_code=attempt.redemption_code,
            check_in_time=attempt.captured_at,
            local_id=local_id,
        )
