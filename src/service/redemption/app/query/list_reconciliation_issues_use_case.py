from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.redemption.app.interface.i_reconciliation_issue_repo import (
    IReconciliationIssueRepo,
)
from src.service.redemption.domain.entity.reconciliation_issue_entity import (
    ReconciliationIssue,
)


class ListReconciliationIssuesUseCase:
    def __init__(self, *, reconciliation_issue_repo: IReconciliationIssueRepo) -> None:
        self.reconciliation_issue_repo = reconciliation_issue_repo

    @classmethod
    @inject
    def depends(
        cls,
        reconciliation_issue_repo: IReconciliationIssueRepo = Depends(
            Provide[Container.reconciliation_issue_repo]
        ),
    ) -> Self:
        return cls(reconciliation_issue_repo=reconciliation_issue_repo)

    @Logger.io
    async def list_unresolved(self) -> list[ReconciliationIssue]:
        return await self.reconciliation_issue_repo.list_unresolved()
