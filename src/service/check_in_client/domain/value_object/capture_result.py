from datetime import datetime
from enum import StrEnum
from typing import Optional

import attrs


class CaptureOutcome(StrEnum):
    CHECKED_IN = 'checked_in'
    ALREADY_USED = 'already_used'
    NOT_FOUND = 'not_found'
    NOT_REDEEMABLE = 'not_redeemable'
    SAVED_OFFLINE = 'saved_offline'


@attrs.define(frozen=True)
class CaptureResult:
    outcome: CaptureOutcome
    redemption_code: str
    check_in_time: Optional[datetime] = None
    message: Optional[str] = None
    local_id: Optional[int] = None
