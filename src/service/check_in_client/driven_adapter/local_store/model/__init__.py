"""
Local Store Models

Import all models here to ensure they are registered with LocalBase
"""

from src.service.check_in_client.driven_adapter.local_store.model.cached_snapshot_model import (
    CachedEventModel,
    CachedTicketModel,
)
from src.service.check_in_client.driven_adapter.local_store.model.pending_redemption_model import (
    PendingRedemptionModel,
)

__all__ = [
    'CachedEventModel',
    'CachedTicketModel',
    'PendingRedemptionModel',
]
