from datetime import timezone
from typing import Callable, ContextManager

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from src.platform.logging.loguru_io import Logger
from src.service.check_in_client.app.interface.i_redemption_queue import IRedemptionQueue
from src.service.check_in_client.domain.entity.offline_redemption_attempt_entity import (
    OfflineRedemptionAttempt,
)
from src.service.check_in_client.driven_adapter.local_store.model.pending_redemption_model import (
    PendingRedemptionModel,
)


class RedemptionQueueImpl(IRedemptionQueue):
    def __init__(self, session_factory: Callable[..., ContextManager[Session]]) -> None:
        self.session_factory = session_factory

    @Logger.io
    def enqueue(self, *, attempt: OfflineRedemptionAttempt) -> int:
        with self.session_factory() as session:
            model = PendingRedemptionModel(
                redemption_code=attempt.redemption_code,
                captured_at=attempt.captured_at,
                operator_user_id=attempt.operator_user_id,
                event_id=attempt.event_id,
                evidence_photo=attempt.evidence_photo,
            )
            session.add(model)
            session.commit()
            Logger.base.info(
                f'📥 [QUEUE] Stored {attempt.redemption_code} as #{model.local_id} for later sync'
            )
            return model.local_id

    @Logger.io
    def list_pending(self) -> list[OfflineRedemptionAttempt]:
        with self.session_factory() as session:
            result = session.execute(
                select(PendingRedemptionModel).order_by(PendingRedemptionModel.local_id)
            )
            return [self._model_to_entity(model) for model in result.scalars().all()]

    @Logger.io
    def remove(self, *, local_id: int) -> None:
        with self.session_factory() as session:
            session.execute(
                delete(PendingRedemptionModel).where(PendingRedemptionModel.local_id == local_id)
            )
            session.commit()

    def count_pending(self) -> int:
        with self.session_factory() as session:
            return session.execute(
                select(func.count()).select_from(PendingRedemptionModel)
            ).scalar_one()

    def _model_to_entity(self, model: PendingRedemptionModel) -> OfflineRedemptionAttempt:
        captured_at = model.captured_at
        if captured_at.tzinfo is None:
            captured_at = captured_at.replace(tzinfo=timezone.utc)
        return OfflineRedemptionAttempt(
            local_id=model.local_id,
            redemption_code=model.redemption_code,
            captured_at=captured_at,
            operator_user_id=model.operator_user_id,
            event_id=model.event_id,
            evidence_photo=model.evidence_photo,
        )
