from fastapi import APIRouter, Depends, status
from opentelemetry import trace

from src.platform.logging.loguru_io import Logger
from src.platform.types.uuid7_utils_types import UtilsUUID7
from src.service.redemption.app.command.complete_ticket_purchase_use_case import (
    CompleteTicketPurchaseUseCase,
)
from src.service.redemption.app.command.create_ticket_purchase_use_case import (
    CreateTicketPurchaseUseCase,
)
from src.service.redemption.app.command.create_ticket_use_case import CreateTicketUseCase
from src.service.redemption.app.query.list_reconciliation_issues_use_case import (
    ListReconciliationIssuesUseCase,
)
from src.service.redemption.domain.entity.user_entity import UserEntity
from src.service.redemption.driving_adapter.http_controller.auth.role_auth import (
    get_current_user,
    require_superadmin,
    require_ticket_manager,
)
from src.service.redemption.driving_adapter.http_controller.check_in_controller import (
    to_purchase_response,
)
from src.service.redemption.driving_adapter.http_controller.schema.check_in_schema import (
    TicketPurchaseResponse,
)
from src.service.redemption.driving_adapter.http_controller.schema.ticket_schema import (
    ReconciliationIssueResponse,
    TicketCreateRequest,
    TicketPurchaseCreateRequest,
    TicketResponse,
)


ticket_router = APIRouter()
purchase_router = APIRouter()
tracer = trace.get_tracer(__name__)


@ticket_router.post('', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_ticket(
    request: TicketCreateRequest,
    current_user: UserEntity = Depends(require_ticket_manager),
    use_case: CreateTicketUseCase = Depends(CreateTicketUseCase.depends),
) -> TicketResponse:
    ticket = await use_case.create(
        event_id=request.event_id,
        name=request.name,
        ticket_type=request.ticket_type,
        price=request.price,
        quantity=request.quantity,
    )
    return TicketResponse(
        id=ticket.id or 0,
        event_id=ticket.event_id,
        name=ticket.name,
        ticket_type=ticket.ticket_type.value,
        price=ticket.price,
        quantity=ticket.quantity,
        remaining_quantity=ticket.remaining_quantity,
        status=ticket.status.value,
    )


@purchase_router.post('', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_ticket_purchase(
    request: TicketPurchaseCreateRequest,
    current_user: UserEntity = Depends(get_current_user),
    use_case: CreateTicketPurchaseUseCase = Depends(CreateTicketPurchaseUseCase.depends),
) -> TicketPurchaseResponse:
    with tracer.start_as_current_span('controller.create_ticket_purchase') as span:
        span.set_attribute('ticket_id', request.ticket_id)
        span.set_attribute('purchaser_id', current_user.id or 0)

        purchase = await use_case.create(
            ticket_id=request.ticket_id,
            purchaser_id=current_user.id or 0,
            quantity=request.quantity,
        )
        return to_purchase_response(purchase)


@purchase_router.post('/{purchase_id}/complete', status_code=status.HTTP_200_OK)
@Logger.io
async def complete_ticket_purchase(
    purchase_id: UtilsUUID7,
    current_user: UserEntity = Depends(get_current_user),
    use_case: CompleteTicketPurchaseUseCase = Depends(CompleteTicketPurchaseUseCase.depends),
) -> TicketPurchaseResponse:
    purchase = await use_case.complete(purchase_id=purchase_id, requested_by=current_user)
    return to_purchase_response(purchase)


@purchase_router.get('/reconciliation-issues', status_code=status.HTTP_200_OK)
@Logger.io
async def list_reconciliation_issues(
    current_user: UserEntity = Depends(require_superadmin),
    use_case: ListReconciliationIssuesUseCase = Depends(ListReconciliationIssuesUseCase.depends),
) -> list[ReconciliationIssueResponse]:
    issues = await use_case.list_unresolved()
    return [
        ReconciliationIssueResponse(
            id=issue.id or 0,
            kind=issue.kind.value,
            purchase_id=issue.purchase_id,
            ticket_id=issue.ticket_id,
            quantity=issue.quantity,
            reason=issue.reason,
            resolved=issue.resolved,
            created_at=issue.created_at,
        )
        for issue in issues
    ]
