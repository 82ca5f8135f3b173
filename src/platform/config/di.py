"""
https://python-dependency-injector.ets-labs.org/index.html
https://python-dependency-injector.ets-labs.org/examples/fastapi-sqlalchemy.html
"""

from dependency_injector import containers, providers

from src.platform.config.core_setting import Settings
from src.platform.database.db_setting import Database
from src.service.redemption.app.command.decrement_ticket_inventory_use_case import (
    DecrementTicketInventoryUseCase,
)
from src.service.redemption.driven_adapter.media.local_media_store_impl import (
    LocalMediaStoreImpl,
)
from src.service.redemption.driven_adapter.repo.audit_log_repo_impl import AuditLogRepoImpl
from src.service.redemption.driven_adapter.repo.reconciliation_issue_repo_impl import (
    ReconciliationIssueRepoImpl,
)
from src.service.redemption.driven_adapter.repo.ticket_command_repo_impl import (
    TicketCommandRepoImpl,
)
from src.service.redemption.driven_adapter.repo.ticket_purchase_command_repo_impl import (
    TicketPurchaseCommandRepoImpl,
)
from src.service.redemption.driven_adapter.repo.ticket_purchase_query_repo_impl import (
    TicketPurchaseQueryRepoImpl,
)
from src.service.redemption.driven_adapter.repo.ticket_query_repo_impl import (
    TicketQueryRepoImpl,
)
from src.service.redemption.driving_adapter.http_controller.auth.jwt_auth import JwtAuth


class Container(containers.DeclarativeContainer):
    # Configuration
    config_service = providers.Singleton(Settings)

    # Database: primary for the ledger, replica (if configured) for catalog reads
    database = providers.Singleton(Database, read_only=False)
    read_database = providers.Singleton(Database, read_only=True)

    # Repositories (stateless - use session_factory per-request)
    ticket_command_repo = providers.Singleton(
        TicketCommandRepoImpl, session_factory=database.provided.session
    )
    ticket_query_repo = providers.Singleton(
        TicketQueryRepoImpl, session_factory=read_database.provided.session
    )
    # Redemption lookups must see the winner of a just-lost race, so never the replica
    ticket_purchase_command_repo = providers.Singleton(
        TicketPurchaseCommandRepoImpl, session_factory=database.provided.session
    )
    ticket_purchase_query_repo = providers.Singleton(
        TicketPurchaseQueryRepoImpl, session_factory=database.provided.session
    )
    audit_log_repo = providers.Singleton(
        AuditLogRepoImpl, session_factory=database.provided.session
    )
    reconciliation_issue_repo = providers.Singleton(
        ReconciliationIssueRepoImpl, session_factory=database.provided.session
    )

    # Evidence photos
    media_store = providers.Singleton(
        LocalMediaStoreImpl, base_dir=config_service.provided.MEDIA_DIR
    )

    # Auth service
    jwt_auth = providers.Singleton(JwtAuth)

    # Purchase completion hook (shared by create and complete)
    decrement_ticket_inventory_use_case = providers.Singleton(
        DecrementTicketInventoryUseCase,
        ticket_command_repo=ticket_command_repo,
        reconciliation_issue_repo=reconciliation_issue_repo,
    )


container = Container()


def setup() -> None:
    container.config_service()


def cleanup() -> None:
    container.reset_singletons()
