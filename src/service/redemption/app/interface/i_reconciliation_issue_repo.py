from abc import ABC, abstractmethod

from src.service.redemption.domain.entity.reconciliation_issue_entity import (
    ReconciliationIssue,
)


class IReconciliationIssueRepo(ABC):
    """Issues flagged for manual reconciliation"""

    @abstractmethod
    async def create(self, *, issue: ReconciliationIssue) -> ReconciliationIssue:
        pass

    @abstractmethod
    async def list_unresolved(self) -> list[ReconciliationIssue]:
        pass
