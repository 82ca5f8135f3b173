"""
Wire Modules Configuration

Defines the modules that need dependency injection wiring.
Shared between production and test environments.
"""

from types import ModuleType

from src.service.redemption.app.command import (
    complete_ticket_purchase_use_case,
    create_ticket_purchase_use_case,
    create_ticket_use_case,
    redeem_ticket_use_case,
)
from src.service.redemption.app.query import (
    get_ticket_purchase_by_code_use_case,
    list_reconciliation_issues_use_case,
)
from src.service.redemption.driving_adapter.http_controller.auth import role_auth


WIRE_MODULES: list[ModuleType] = [
    redeem_ticket_use_case,
    create_ticket_use_case,
    create_ticket_purchase_use_case,
    complete_ticket_purchase_use_case,
    get_ticket_purchase_by_code_use_case,
    list_reconciliation_issues_use_case,
    role_auth,
]
