from unittest.mock import AsyncMock

import pytest

from src.service.check_in_client.app.command.capture_check_in_use_case import (
    CaptureCheckInUseCase,
)
from src.service.check_in_client.domain.value_object.capture_result import CaptureOutcome
from src.service.check_in_client.domain.value_object.redemption_outcome import (
    RedemptionOutcome,
)


pytestmark = pytest.mark.unit

CODE = 'TIX-GATE0001'


class TestCaptureCheckIn:
    @pytest.mark.asyncio
    async def test_offline_scan_is_queued_without_calling_the_server(
        self, memory_queue, offline_monitor, scripted_gateway
    ):
        # Given
        gateway = scripted_gateway({CODE: [RedemptionOutcome.REDEEMED]})
        use_case = CaptureCheckInUseCase(
            queue=memory_queue, gateway=gateway, connectivity_monitor=offline_monitor
        )

        # When
        result = await use_case.execute(
            redemption_code=f'  {CODE}\n', operator_user_id=11, evidence_photo='abc='
        )

        # Then: saved locally with the device time
        assert result.outcome == CaptureOutcome.SAVED_OFFLINE
        assert result.local_id is not None
        [queued] = memory_queue.list_pending()
        assert queued.redemption_code == CODE
        assert queued.evidence_photo == 'abc='
        assert queued.captured_at == result.check_in_time
        gateway.redeem.assert_not_called()

    @pytest.mark.asyncio
    async def test_online_scan_goes_straight_to_the_server(
        self, memory_queue, online_monitor, scripted_gateway
    ):
        gateway = scripted_gateway({CODE: [RedemptionOutcome.REDEEMED]})
        use_case = CaptureCheckInUseCase(
            queue=memory_queue, gateway=gateway, connectivity_monitor=online_monitor
        )

        result = await use_case.execute(redemption_code=CODE, operator_user_id=11)

        assert result.outcome == CaptureOutcome.CHECKED_IN
        assert result.check_in_time is not None
        assert gateway.redeem.await_args.kwargs['replayed'] is False
        assert memory_queue.count_pending() == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        'server_outcome,expected',
        [
            (RedemptionOutcome.ALREADY_REDEEMED, CaptureOutcome.ALREADY_USED),
            (RedemptionOutcome.NOT_FOUND, CaptureOutcome.NOT_FOUND),
            (RedemptionOutcome.NOT_REDEEMABLE, CaptureOutcome.NOT_REDEEMABLE),
        ],
    )
    async def test_definitive_refusals_are_reported_not_queued(
        self, memory_queue, online_monitor, scripted_gateway, server_outcome, expected
    ):
        use_case = CaptureCheckInUseCase(
            queue=memory_queue,
            gateway=scripted_gateway({CODE: [server_outcome]}),
            connectivity_monitor=online_monitor,
        )

        result = await use_case.execute(redemption_code=CODE, operator_user_id=11)

        assert result.outcome == expected
        assert memory_queue.count_pending() == 0

    @pytest.mark.asyncio
    async def test_server_unreachable_falls_back_to_the_queue(
        self, memory_queue, online_monitor, scripted_gateway
    ):
        use_case = CaptureCheckInUseCase(
            queue=memory_queue,
            gateway=scripted_gateway({CODE: [RedemptionOutcome.TRANSIENT]}),
            connectivity_monitor=online_monitor,
        )

        result = await use_case.execute(redemption_code=CODE, operator_user_id=11)

        assert result.outcome == CaptureOutcome.SAVED_OFFLINE
        assert memory_queue.count_pending() == 1

    @pytest.mark.asyncio
    async def test_gateway_crash_falls_back_to_the_queue(self, memory_queue, online_monitor):
        gateway = AsyncMock()
        gateway.redeem.side_effect = RuntimeError('response decoder crashed')
        use_case = CaptureCheckInUseCase(
            queue=memory_queue, gateway=gateway, connectivity_monitor=online_monitor
        )

        result = await use_case.execute(redemption_code=CODE, operator_user_id=11)

        assert result.outcome == CaptureOutcome.SAVED_OFFLINE
        [queued] = memory_queue.list_pending()
        assert queued.local_id == result.local_id
