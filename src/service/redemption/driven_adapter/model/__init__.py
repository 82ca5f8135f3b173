"""
Database Models

Import all models here to ensure they are registered with SQLAlchemy
"""

from src.service.redemption.driven_adapter.model.audit_log_model import AuditLogModel
from src.service.redemption.driven_adapter.model.reconciliation_issue_model import (
    ReconciliationIssueModel,
)
from src.service.redemption.driven_adapter.model.ticket_model import TicketModel
from src.service.redemption.driven_adapter.model.ticket_purchase_model import (
    TicketPurchaseModel,
)

__all__ = [
    'AuditLogModel',
    'ReconciliationIssueModel',
    'TicketModel',
    'TicketPurchaseModel',
]
