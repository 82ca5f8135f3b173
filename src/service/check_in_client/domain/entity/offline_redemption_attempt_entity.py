from datetime import datetime, timezone
from typing import Optional

import attrs


@attrs.define(frozen=True)
class OfflineRedemptionAttempt:
    """
    A scan recorded on the device that still has to reach the server.

    Never mutated once queued: it is removed when the server gives a definitive
    answer and left untouched otherwise.
    """

    redemption_code: str
    captured_at: datetime
    operator_user_id: Optional[int] = None
    event_id: Optional[int] = None
    evidence_photo: Optional[str] = None
    local_id: Optional[int] = None

    @classmethod
    def capture(
        cls,
        *,
        redemption_code: str,
        operator_user_id: Optional[int],
        event_id: Optional[int] = None,
        evidence_photo: Optional[str] = None,
    ) -> 'OfflineRedemptionAttempt':
        return cls(
            redemption_code=redemption_code.strip(),
            captured_at=datetime.now(timezone.utc),
            operator_user_id=operator_user_id,
            event_id=event_id,
            evidence_photo=evidence_photo or None,
        )
