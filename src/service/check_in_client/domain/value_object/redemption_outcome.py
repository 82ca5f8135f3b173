from datetime import datetime
from enum import StrEnum
from typing import Optional

import attrs


class RedemptionOutcome(StrEnum):
    REDEEMED = 'redeemed'
    ALREADY_REDEEMED = 'already_redeemed'
    NOT_FOUND = 'not_found'
    NOT_REDEEMABLE = 'not_redeemable'
    # Network error, timeout, 5xx, or an auth failure a later retry may fix
    TRANSIENT = 'transient'

    @property
    def is_definitive(self) -> bool:
        return self != RedemptionOutcome.TRANSIENT


@attrs.define(frozen=True)
class RedemptionReply:
    """The server's answer to one redeem call, as the device sees it."""

    outcome: RedemptionOutcome
    check_in_time: Optional[datetime] = None
    check_in_photo_ref: Optional[str] = None
    message: Optional[str] = None
