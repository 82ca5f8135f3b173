from datetime import datetime
from typing import Any, Optional

import httpx
from opentelemetry import trace
import orjson

from src.platform.logging.loguru_io import Logger
from src.platform.observability.tracing import inject_trace_context
from src.service.check_in_client.app.interface.i_redemption_gateway import IRedemptionGateway
from src.service.check_in_client.domain.entity.offline_redemption_attempt_entity import (
    OfflineRedemptionAttempt,
)
from src.service.check_in_client.domain.value_object.redemption_outcome import (
    RedemptionOutcome,
    RedemptionReply,
)


CHECK_IN_PATH = '/api/check-in'

# answers that replaying cannot change
_DEFINITIVE_STATUS: dict[int, RedemptionOutcome] = {
    404: RedemptionOutcome.NOT_FOUND,
    400: RedemptionOutcome.NOT_REDEEMABLE,
    422: RedemptionOutcome.NOT_REDEEMABLE,
}


def _parse_time(value: Any) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        return None


class RedemptionGatewayImpl(IRedemptionGateway):
    """
    httpx client for the check-in endpoint.

    Maps every response to a RedemptionOutcome; transport errors, timeouts,
    5xx and 401/403 all become TRANSIENT so the attempt stays queued.
    """

    def __init__(
        self,
        *,
        base_url: str,
        access_token: str = '',
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = base_url.rstrip('/')
        self.access_token = access_token
        self._client = client or httpx.AsyncClient(base_url=self.base_url, timeout=timeout)
        self.tracer = trace.get_tracer(__name__)

    async def aclose(self) -> None:
        await self._client.aclose()

    def _headers(self) -> dict[str, str]:
        headers = {'Content-Type': 'application/json'}
        if self.access_token:
            headers['Authorization'] = f'Bearer {self.access_token}'
        return inject_trace_context(headers=headers)

    def _body(self, *, attempt: OfflineRedemptionAttempt, replayed: bool) -> dict[str, Any]:
        body: dict[str, Any] = {'ticketId': attempt.redemption_code}
        if attempt.evidence_photo:
            body['photoData'] = attempt.evidence_photo
        if attempt.operator_user_id is not None:
            body['userId'] = attempt.operator_user_id
        if attempt.event_id is not None:
            body['eventId'] = attempt.event_id
        if replayed:
            body['offlineTimestamp'] = attempt.captured_at.isoformat()
        return body

    @Logger.io
    async def redeem(
        self, *, attempt: OfflineRedemptionAttempt, replayed: bool
    ) -> RedemptionReply:
        with self.tracer.start_as_current_span(
            'gateway.redeem',
            attributes={'redemption.code': attempt.redemption_code, 'replayed': replayed},
        ):
            try:
                response = await self._client.post(
                    CHECK_IN_PATH,
                    content=orjson.dumps(self._body(attempt=attempt, replayed=replayed)),
                    headers=self._headers(),
                )
            except httpx.HTTPError as e:
                Logger.base.warning(
                    f'📡 [GATEWAY] {attempt.redemption_code} unreachable: {type(e).__name__}: {e}'
                )
                return RedemptionReply(outcome=RedemptionOutcome.TRANSIENT, message=str(e))

            return self._to_reply(response)

    def _to_reply(self, response: httpx.Response) -> RedemptionReply:
        try:
            body = orjson.loads(response.content) if response.content else {}
        except orjson.JSONDecodeError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        message = body.get('error')

        if response.status_code == 200:
            purchase = body.get('ticketPurchase') or {}
            return RedemptionReply(
                outcome=RedemptionOutcome.REDEEMED,
                check_in_time=_parse_time(purchase.get('check_in_time')),
                check_in_photo_ref=purchase.get('check_in_photo_ref'),
            )

        if response.status_code == 409:
            existing = body.get('existingCheckIn') or {}
            return RedemptionReply(
                outcome=RedemptionOutcome.ALREADY_REDEEMED,
                check_in_time=_parse_time(existing.get('timestamp')),
                check_in_photo_ref=existing.get('photo'),
                message=message,
            )

        outcome = _DEFINITIVE_STATUS.get(response.status_code, RedemptionOutcome.TRANSIENT)
        if outcome == RedemptionOutcome.TRANSIENT:
            Logger.base.warning(
                f'📡 [GATEWAY] check-in answered {response.status_code}, will retry: {message}'
            )
        return RedemptionReply(outcome=outcome, message=message)
