from datetime import datetime
from typing import Any, Optional


class CustomBaseError(Exception):
    """Base class for all custom exceptions - controls logging behavior in @Logger.io"""

    def __init__(self, message: str, status_code: int = 500) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)

    def to_response(self) -> dict[str, Any]:
        return {'error': self.message}


class DomainError(CustomBaseError):
    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message, status_code)


class ForbiddenError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 403)


class NotFoundError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 404)


class ConflictError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 409)


class AuthenticationError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 401)


class RedemptionCodeNotFoundError(NotFoundError):
    def __init__(self, redemption_code: str) -> None:
        self.redemption_code = redemption_code
        super().__init__('Ticket not found')


class AlreadyRedeemedError(ConflictError):
    """The code was already used for entry; carries the winning check-in."""

    def __init__(
        self,
        *,
        redemption_code: str,
        check_in_time: Optional[datetime],
        check_in_photo_ref: Optional[str],
    ) -> None:
        self.redemption_code = redemption_code
        self.check_in_time = check_in_time
        self.check_in_photo_ref = check_in_photo_ref
        super().__init__('This ticket has already been used for entry')

    def to_response(self) -> dict[str, Any]:
        return {
            'error': self.message,
            'existingCheckIn': {
                'timestamp': self.check_in_time.isoformat() if self.check_in_time else None,
                'photo': self.check_in_photo_ref,
            },
        }


class NotRedeemableError(CustomBaseError):
    """Purchase exists but may not be used for entry (unpaid, refunded, other event)."""

    def __init__(self, message: str) -> None:
        super().__init__(message, 422)


class InventoryOversellError(CustomBaseError):
    def __init__(self, *, ticket_id: int, quantity: int, reason: str) -> None:
        self.ticket_id = ticket_id
        self.quantity = quantity
        self.reason = reason
        super().__init__(
            f'Inventory decrement failed for ticket {ticket_id} (quantity={quantity}): {reason}',
            500,
        )


class CheckInInterruptedError(CustomBaseError):
    """The conditional check-in matched no row although the ticket is still unused."""

    def __init__(self, redemption_code: str) -> None:
        self.redemption_code = redemption_code
        super().__init__('Ticket changed during check-in, please retry', 503)
