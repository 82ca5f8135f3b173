from datetime import datetime
from enum import StrEnum
from typing import Optional

import attrs


class SyncStatus(StrEnum):
    IDLE = 'idle'
    SYNCING = 'syncing'
    COMPLETED = 'completed'
    FAILED = 'failed'


@attrs.define(frozen=True)
class SyncStats:
    """
    Counters of the most recent drain.

    - successful: redeemed now, or already redeemed (conflict absorbed)
    - rejected: unknown or unredeemable codes, dropped from the queue
    - failed: still queued, will be replayed
    """

    total: int = 0
    successful: int = 0
    failed: int = 0
    rejected: int = 0
    last_sync_time: Optional[datetime] = None
    rejected_codes: tuple[str, ...] = ()
