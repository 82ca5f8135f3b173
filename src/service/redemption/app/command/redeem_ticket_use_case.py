"""
Redeem Ticket Use Case - the check-in endpoint's core

Exactly one caller wins a redemption code: the check-and-set is a single
conditional UPDATE in the ledger, and every loser is answered with the
winner's check-in time.
"""

import base64
from datetime import datetime, timezone
import time
from typing import Any, Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.di import Container
from src.platform.exception.exceptions import (
    AlreadyRedeemedError,
    CheckInInterruptedError,
    CustomBaseError,
    NotRedeemableError,
    RedemptionCodeNotFoundError,
)
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.redemption_metrics import metrics
from src.platform.types.uuid7_utils_types import new_uuid7
from src.service.redemption.app.interface.i_audit_log_repo import IAuditLogRepo
from src.service.redemption.app.interface.i_media_store import IMediaStore
from src.service.redemption.app.interface.i_ticket_purchase_command_repo import (
    ITicketPurchaseCommandRepo,
)
from src.service.redemption.app.interface.i_ticket_purchase_query_repo import (
    ITicketPurchaseQueryRepo,
)
from src.service.redemption.domain.entity.audit_log_entity import (
    AuditAction,
    AuditEntityType,
    AuditLogEntry,
)
from src.service.redemption.domain.entity.ticket_purchase_entity import TicketPurchase
from src.service.redemption.domain.value_object.redemption_result import (
    CheckInRecord,
    RedemptionResult,
)


def decode_evidence_photo(photo_data: str) -> bytes:
    """Accepts raw base64 or a `data:image/...;base64,` URL."""
    if photo_data.startswith('data:'):
        _, _, photo_data = photo_data.partition(',')
    return base64.b64decode(photo_data, validate=True)


_OUTCOME_BY_ERROR: dict[type[CustomBaseError], str] = {
    AlreadyRedeemedError: 'already_redeemed',
    RedemptionCodeNotFoundError: 'not_found',
    NotRedeemableError: 'not_redeemable',
    CheckInInterruptedError: 'interrupted',
}


class RedeemTicketUseCase:
    """
    Flow:
    1. Look the code up (unknown -> NotFound, already used -> AlreadyRedeemed,
       not completed or wrong event -> NotRedeemable)
    2. Store the evidence photo (best effort; a failed upload still admits)
    3. Conditional update `is_checked_in = false -> true` stamped with server time;
       a lost race drops the stored photo, and a row that is still unused answers 503
    4. Append one audit entry for the success or the conflict (best effort)

    Dependencies:
    - ticket_purchase_command_repo: the conditional check-in update
    - ticket_purchase_query_repo: code lookup, and the winner after a lost race
    - audit_log_repo: append-only audit trail
    - media_store: evidence photos
    """

    def __init__(
        self,
        *,
        ticket_purchase_command_repo: ITicketPurchaseCommandRepo,
        ticket_purchase_query_repo: ITicketPurchaseQueryRepo,
        audit_log_repo: IAuditLogRepo,
        media_store: IMediaStore,
    ) -> None:
        self.ticket_purchase_command_repo = ticket_purchase_command_repo
        self.ticket_purchase_query_repo = ticket_purchase_query_repo
        self.audit_log_repo = audit_log_repo
        self.media_store = media_store
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        ticket_purchase_command_repo: ITicketPurchaseCommandRepo = Depends(
            Provide[Container.ticket_purchase_command_repo]
        ),
        ticket_purchase_query_repo: ITicketPurchaseQueryRepo = Depends(
            Provide[Container.ticket_purchase_query_repo]
        ),
        audit_log_repo: IAuditLogRepo = Depends(Provide[Container.audit_log_repo]),
        media_store: IMediaStore = Depends(Provide[Container.media_store]),
    ) -> Self:
        return cls(
            ticket_purchase_command_repo=ticket_purchase_command_repo,
            ticket_purchase_query_repo=ticket_purchase_query_repo,
            audit_log_repo=audit_log_repo,
            media_store=media_store,
        )

    @Logger.io
    async def redeem(
        self,
        *,
        redemption_code: str,
        operator_user_id: Optional[int],
        evidence_photo: Optional[str] = None,
        client_captured_at: Optional[datetime] = None,
        event_id: Optional[int] = None,
    ) -> RedemptionResult:
        started = time.perf_counter()
        was_offline_sync = client_captured_at is not None

        with self.tracer.start_as_current_span(
            'use_case.redeem_ticket',
            attributes={
                'redemption.code': redemption_code,
                'redemption.offline_sync': was_offline_sync,
            },
        ):
            try:
                purchase = await self._check_in(
                    redemption_code=redemption_code,
                    operator_user_id=operator_user_id,
                    evidence_photo=evidence_photo,
                    client_captured_at=client_captured_at,
                    event_id=event_id,
                )
            except CustomBaseError as e:
                metrics.record_redemption(
                    outcome=_OUTCOME_BY_ERROR.get(type(e), 'error'),
                    offline_sync=was_offline_sync,
                    duration=time.perf_counter() - started,
                )
                raise

            metrics.record_redemption(
                outcome='checked_in',
                offline_sync=was_offline_sync,
                duration=time.perf_counter() - started,
            )
            Logger.base.info(
                f'✅ [CHECK-IN] {redemption_code} by operator={operator_user_id} '
                f'at {purchase.check_in_time} offline_sync={was_offline_sync}'
            )
            return RedemptionResult(
                purchase=purchase,
                was_offline_sync=was_offline_sync,
                client_captured_at=client_captured_at,
            )

    async def _check_in(
        self,
        *,
        redemption_code: str,
        operator_user_id: Optional[int],
        evidence_photo: Optional[str],
        client_captured_at: Optional[datetime],
        event_id: Optional[int],
    ) -> TicketPurchase:
        purchase = await self.ticket_purchase_query_repo.get_by_redemption_code(
            redemption_code=redemption_code
        )
        if not purchase:
            self._log_rejection(
                redemption_code=redemption_code,
                operator_user_id=operator_user_id,
                event_id=event_id,
                reason='unknown code',
            )
            raise RedemptionCodeNotFoundError(redemption_code)
        if purchase.is_checked_in:
            await self._reject_as_already_redeemed(
                winner=purchase,
                operator_user_id=operator_user_id,
                client_captured_at=client_captured_at,
            )
        self._ensure_redeemable(
            purchase=purchase, operator_user_id=operator_user_id, event_id=event_id
        )

        check_in_time = datetime.now(timezone.utc)
        photo_ref = await self._store_evidence(
            redemption_code=redemption_code, evidence_photo=evidence_photo, at=check_in_time
        )

        checked_in = await self.ticket_purchase_command_repo.mark_checked_in_if_not_yet(
            check_in=CheckInRecord(
                redemption_code=redemption_code,
                check_in_time=check_in_time,
                check_in_photo_ref=photo_ref,
            )
        )
        if not checked_in:
            # Lost the race between lookup and update
            await self._discard_evidence(photo_ref=photo_ref)
            winner = await self.ticket_purchase_query_repo.get_by_redemption_code(
                redemption_code=redemption_code
            )
            if not winner:
                raise RedemptionCodeNotFoundError(redemption_code)
            if winner.is_checked_in:
                await self._reject_as_already_redeemed(
                    winner=winner,
                    operator_user_id=operator_user_id,
                    client_captured_at=client_captured_at,
                )
            self._ensure_redeemable(
                purchase=winner, operator_user_id=operator_user_id, event_id=event_id
            )
            Logger.base.warning(
                f'🔁 [CHECK-IN] {redemption_code} update matched nothing while still unused '
                f'(operator={operator_user_id}), asking the caller to retry'
            )
            raise CheckInInterruptedError(redemption_code)

        await self._append_audit(
            action=AuditAction.CHECK_IN,
            purchase=checked_in,
            operator_user_id=operator_user_id,
            details={
                'redemption_code': redemption_code,
                'check_in_time': check_in_time.isoformat(),
                'photo': photo_ref,
                'offlineTimestamp': client_captured_at.isoformat() if client_captured_at else None,
                'wasOfflineSync': client_captured_at is not None,
                'event_id': checked_in.event_id,
            },
        )
        return checked_in

    async def _reject_as_already_redeemed(
        self,
        *,
        winner: TicketPurchase,
        operator_user_id: Optional[int],
        client_captured_at: Optional[datetime],
    ) -> None:
        await self._append_audit(
            action=AuditAction.CHECK_IN_CONFLICT,
            purchase=winner,
            operator_user_id=operator_user_id,
            details={
                'redemption_code': winner.redemption_code,
                'existing_check_in_time': (
                    winner.check_in_time.isoformat() if winner.check_in_time else None
                ),
                'offlineTimestamp': client_captured_at.isoformat() if client_captured_at else None,
                'wasOfflineSync': client_captured_at is not None,
            },
        )
        Logger.base.warning(
            f'⚠️ [CHECK-IN] {winner.redemption_code} already used at {winner.check_in_time} '
            f'(operator={operator_user_id})'
        )
        raise AlreadyRedeemedError(
            redemption_code=winner.redemption_code,
            check_in_time=winner.check_in_time,
            check_in_photo_ref=winner.check_in_photo_ref,
        )

    def _ensure_redeemable(
        self,
        *,
        purchase: TicketPurchase,
        operator_user_id: Optional[int],
        event_id: Optional[int],
    ) -> None:
        try:
            purchase.ensure_redeemable(event_id=event_id)
        except NotRedeemableError as e:
            self._log_rejection(
                redemption_code=purchase.redemption_code,
                operator_user_id=operator_user_id,
                event_id=event_id,
                reason=e.message,
            )
            raise

    @staticmethod
    def _log_rejection(
        *,
        redemption_code: str,
        operator_user_id: Optional[int],
        event_id: Optional[int],
        reason: str,
    ) -> None:
        Logger.base.warning(
            f'🚫 [CHECK-IN] {redemption_code} rejected at {datetime.now(timezone.utc).isoformat()} '
            f'(operator={operator_user_id}, event={event_id}): {reason}'
        )

    async def _discard_evidence(self, *, photo_ref: Optional[str]) -> None:
        if not photo_ref:
            return
        try:
            await self.media_store.delete(ref=photo_ref)
        except Exception as e:
            Logger.base.warning(f'📷 [CHECK-IN] Orphan evidence {photo_ref} not removed: {e}')

    async def _store_evidence(
        self, *, redemption_code: str, evidence_photo: Optional[str], at: datetime
    ) -> Optional[str]:
        if not evidence_photo:
            return None
        try:
            payload = decode_evidence_photo(evidence_photo)
            return await self.media_store.save(
                payload=payload,
                name_hint=(
                    f'check-in-{redemption_code}-{int(at.timestamp() * 1000)}-'
                    f'{new_uuid7().hex[-8:]}.jpg'
                ),
            )
        except Exception as e:
            metrics.evidence_upload_failures.inc()
            Logger.base.warning(f'📷 [CHECK-IN] Evidence for {redemption_code} not stored: {e}')
            return None

    async def _append_audit(
        self,
        *,
        action: AuditAction,
        purchase: TicketPurchase,
        operator_user_id: Optional[int],
        details: dict[str, Any],
    ) -> None:
        try:
            await self.audit_log_repo.append(
                entry=AuditLogEntry(
                    action=action,
                    entity_type=AuditEntityType.TICKET_PURCHASE,
                    entity_id=str(purchase.id),
                    details=details,
                    created_by=operator_user_id,
                )
            )
        except Exception as e:
            metrics.audit_write_failures.inc()
            Logger.base.error(
                f'📝 [AUDIT] {action.value} for {purchase.redemption_code} not written: {e}'
            )
