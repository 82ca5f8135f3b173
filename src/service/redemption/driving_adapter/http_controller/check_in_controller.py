from fastapi import APIRouter, Depends, status
from opentelemetry import trace

from src.platform.exception.exceptions import DomainError
from src.platform.logging.loguru_io import Logger
from src.service.redemption.app.command.redeem_ticket_use_case import RedeemTicketUseCase
from src.service.redemption.app.query.get_ticket_purchase_by_code_use_case import (
    GetTicketPurchaseByCodeUseCase,
)
from src.service.redemption.domain.entity.ticket_purchase_entity import TicketPurchase
from src.service.redemption.domain.entity.user_entity import UserEntity
from src.service.redemption.driving_adapter.http_controller.auth.role_auth import (
    require_check_in_operator,
    require_ticket_manager,
)
from src.service.redemption.driving_adapter.http_controller.schema.check_in_schema import (
    AuditLogEntryResponse,
    CheckInRequest,
    CheckInResponse,
    TicketPurchaseResponse,
)


router = APIRouter()
tracer = trace.get_tracer(__name__)


def to_purchase_response(purchase: TicketPurchase) -> TicketPurchaseResponse:
    return TicketPurchaseResponse(
        id=purchase.id,
        ticket_id=purchase.ticket_id,
        event_id=purchase.event_id,
        purchaser_id=purchase.purchaser_id,
        quantity=purchase.quantity,
        total_amount=purchase.total_amount,
        redemption_code=purchase.redemption_code,
        status=purchase.status.value,
        is_checked_in=purchase.is_checked_in,
        check_in_time=purchase.check_in_time,
        check_in_photo_ref=purchase.check_in_photo_ref,
        purchased_at=purchase.purchased_at,
    )


@router.post('', status_code=status.HTTP_200_OK)
@Logger.io
async def check_in(
    request: CheckInRequest,
    current_user: UserEntity = Depends(require_check_in_operator),
    use_case: RedeemTicketUseCase = Depends(RedeemTicketUseCase.depends),
) -> CheckInResponse:
    """
    Redeem a ticket at the gate.

    409 carries the first check-in's time and photo; replayed offline scans
    send offlineTimestamp, which only goes to the audit trail.
    """
    if not request.redemption_code:
        raise DomainError('Missing ticket ID')

    with tracer.start_as_current_span('controller.check_in') as span:
        span.set_attribute('redemption.code', request.redemption_code)
        span.set_attribute('operator.id', current_user.id or 0)

        result = await use_case.redeem(
            redemption_code=request.redemption_code,
            operator_user_id=request.user_id or current_user.id,
            evidence_photo=request.photo_data,
            client_captured_at=request.offline_timestamp,
            event_id=request.event_id,
        )

        return CheckInResponse(
            ticket_purchase=to_purchase_response(result.purchase),
            was_offline_sync=result.was_offline_sync,
        )


@router.get('/{redemption_code}', status_code=status.HTTP_200_OK)
@Logger.io
async def verify_ticket(
    redemption_code: str,
    current_user: UserEntity = Depends(require_check_in_operator),
    use_case: GetTicketPurchaseByCodeUseCase = Depends(GetTicketPurchaseByCodeUseCase.depends),
) -> TicketPurchaseResponse:
    purchase = await use_case.get_by_code(redemption_code=redemption_code)
    return to_purchase_response(purchase)


@router.get('/{redemption_code}/history', status_code=status.HTTP_200_OK)
@Logger.io
async def get_check_in_history(
    redemption_code: str,
    current_user: UserEntity = Depends(require_ticket_manager),
    use_case: GetTicketPurchaseByCodeUseCase = Depends(GetTicketPurchaseByCodeUseCase.depends),
) -> list[AuditLogEntryResponse]:
    entries = await use_case.get_history(redemption_code=redemption_code)
    return [
        AuditLogEntryResponse(
            id=entry.id,
            action=entry.action.value,
            entity_type=entry.entity_type.value,
            entity_id=entry.entity_id,
            details=entry.details,
            created_by=entry.created_by,
            created_at=entry.created_at,
        )
        for entry in entries
    ]
