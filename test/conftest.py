"""
Test Configuration and Fixtures

This module provides:
- Environment setup before any application module reads settings
- A throwaway SQLite ledger per test (aiosqlite), so conditional updates run for real
- Repository, use case and token fixtures shared by the redemption tests
- Seed helpers that go through the real purchase flow
- The FastAPI app served in-process over httpx (ASGITransport)
- A throwaway device-local store per test for the check-in client tests

Architecture:
- Unit tests (test/**/unit/): AsyncMock collaborators, no database
- Integration tests (test/**/integration/): real SQLite files under tmp_path
"""

# =============================================================================
# CRITICAL: Environment setup MUST happen before any other imports
# Settings are read once at import time (src.platform.config.core_setting)
# =============================================================================
import os
from pathlib import Path


def _early_setup_test_environment() -> None:
    """Set test environment variables before any module imports."""
    test_log_dir = Path(__file__).parent / 'test_log'
    test_log_dir.mkdir(exist_ok=True)
    os.environ['TEST_LOG_DIR'] = str(test_log_dir)

    # Never reach for a real Postgres from tests
    os.environ['DATABASE_URL'] = f'sqlite+aiosqlite:///{test_log_dir / "unused_ledger.db"}'
    os.environ['CHECK_IN_LOCAL_DB_PATH'] = str(test_log_dir / 'unused_local.db')
    os.environ.setdefault('SECRET_KEY', 'test_secret_key_for_redemption_tests')


_early_setup_test_environment()

from collections.abc import AsyncGenerator, AsyncIterator, Awaitable, Callable, Generator  # noqa: E402
from contextlib import asynccontextmanager  # noqa: E402

from dependency_injector import providers  # noqa: E402
from fastapi import FastAPI  # noqa: E402
import httpx  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402

from src.platform.app_factory import create_app  # noqa: E402
from src.platform.config.di import container  # noqa: E402
from src.platform.config.wire_modules import WIRE_MODULES  # noqa: E402
from src.platform.database.db_setting import (  # noqa: E402
    AsyncEngineManager,
    Database,
    create_db_and_tables,
)
from src.service.check_in_client.driven_adapter.local_store.local_db_setting import (  # noqa: E402
    LocalDatabase,
)
from src.service.check_in_client.driven_adapter.local_store.redemption_queue_impl import (  # noqa: E402
    RedemptionQueueImpl,
)
from src.service.redemption.app.command.create_ticket_purchase_use_case import (  # noqa: E402
    CreateTicketPurchaseUseCase,
)
from src.service.redemption.app.command.decrement_ticket_inventory_use_case import (  # noqa: E402
    DecrementTicketInventoryUseCase,
)
from src.service.redemption.driven_adapter.media.local_media_store_impl import (  # noqa: E402
    LocalMediaStoreImpl,
)
import src.service.redemption.driven_adapter.model  # noqa: E402, F401
from src.service.redemption.driven_adapter.repo.audit_log_repo_impl import (  # noqa: E402
    AuditLogRepoImpl,
)
from src.service.redemption.driven_adapter.repo.reconciliation_issue_repo_impl import (  # noqa: E402
    ReconciliationIssueRepoImpl,
)
from src.service.redemption.driven_adapter.repo.ticket_command_repo_impl import (  # noqa: E402
    TicketCommandRepoImpl,
)
from src.service.redemption.driven_adapter.repo.ticket_purchase_command_repo_impl import (  # noqa: E402
    TicketPurchaseCommandRepoImpl,
)
from src.service.redemption.driven_adapter.repo.ticket_purchase_query_repo_impl import (  # noqa: E402
    TicketPurchaseQueryRepoImpl,
)
from src.service.redemption.driven_adapter.repo.ticket_query_repo_impl import (  # noqa: E402
    TicketQueryRepoImpl,
)
from src.service.redemption.domain.entity.ticket_entity import Ticket, TicketType  # noqa: E402
from src.service.redemption.domain.entity.ticket_purchase_entity import TicketPurchase  # noqa: E402
from src.service.redemption.domain.entity.user_entity import UserEntity, UserRole  # noqa: E402
from src.service.redemption.driving_adapter.http_controller.auth.jwt_auth import (  # noqa: E402
    JwtAuth,
)


# =============================================================================
# Server ledger (SQLite per test)
# =============================================================================
@pytest_asyncio.fixture
async def engine_manager(tmp_path: Path) -> AsyncGenerator[AsyncEngineManager, None]:
    manager = AsyncEngineManager(url=f'sqlite+aiosqlite:///{tmp_path / "ledger.db"}')
    await create_db_and_tables(manager)
    yield manager
    await manager.dispose()


@pytest.fixture
def database(engine_manager: AsyncEngineManager) -> Database:
    return Database(engine_manager=engine_manager)


@pytest.fixture
def ticket_command_repo(database: Database) -> TicketCommandRepoImpl:
    return TicketCommandRepoImpl(session_factory=database.session)


@pytest.fixture
def ticket_query_repo(database: Database) -> TicketQueryRepoImpl:
    return TicketQueryRepoImpl(session_factory=database.session)


@pytest.fixture
def ticket_purchase_command_repo(database: Database) -> TicketPurchaseCommandRepoImpl:
    return TicketPurchaseCommandRepoImpl(session_factory=database.session)


@pytest.fixture
def ticket_purchase_query_repo(database: Database) -> TicketPurchaseQueryRepoImpl:
    return TicketPurchaseQueryRepoImpl(session_factory=database.session)


@pytest.fixture
def audit_log_repo(database: Database) -> AuditLogRepoImpl:
    return AuditLogRepoImpl(session_factory=database.session)


@pytest.fixture
def reconciliation_issue_repo(database: Database) -> ReconciliationIssueRepoImpl:
    return ReconciliationIssueRepoImpl(session_factory=database.session)


@pytest.fixture
def media_store(tmp_path: Path) -> LocalMediaStoreImpl:
    return LocalMediaStoreImpl(base_dir=str(tmp_path / 'media'))


@pytest.fixture
def decrement_ticket_inventory_use_case(
    ticket_command_repo: TicketCommandRepoImpl,
    reconciliation_issue_repo: ReconciliationIssueRepoImpl,
) -> DecrementTicketInventoryUseCase:
    return DecrementTicketInventoryUseCase(
        ticket_command_repo=ticket_command_repo,
        reconciliation_issue_repo=reconciliation_issue_repo,
    )


# =============================================================================
# Operators and tokens
# =============================================================================
@pytest.fixture
def jwt_auth() -> JwtAuth:
    return JwtAuth()


def make_user(role: UserRole, user_id: int) -> UserEntity:
    return UserEntity(
        id=user_id, email=f'{role.value}{user_id}@example.com', name=role.value, role=role
    )


@pytest.fixture
def volunteer() -> UserEntity:
    return make_user(UserRole.VOLUNTEER, 11)


@pytest.fixture
def organizer() -> UserEntity:
    return make_user(UserRole.ORGANIZER, 21)


@pytest.fixture
def participant() -> UserEntity:
    return make_user(UserRole.PARTICIPANT, 31)


@pytest.fixture
def superadmin() -> UserEntity:
    return make_user(UserRole.SUPERADMIN, 1)


# =============================================================================
# Check-in device local store (SQLite per test)
# =============================================================================
@pytest.fixture
def local_db_path(tmp_path: Path) -> Path:
    return tmp_path / 'device' / 'check_in.db'


@pytest.fixture
def local_database(local_db_path: Path) -> Generator[LocalDatabase, None, None]:
    local_database = LocalDatabase(db_path=local_db_path)
    yield local_database
    local_database.dispose()


@pytest.fixture
def redemption_queue(local_database: LocalDatabase) -> RedemptionQueueImpl:
    return RedemptionQueueImpl(session_factory=local_database.session)


# =============================================================================
# Seed data (through the real purchase flow)
# =============================================================================
SeedTicket = Callable[..., Awaitable[Ticket]]
SeedPurchase = Callable[..., Awaitable[TicketPurchase]]


@pytest.fixture
def create_ticket_purchase_use_case(
    ticket_query_repo: TicketQueryRepoImpl,
    ticket_purchase_command_repo: TicketPurchaseCommandRepoImpl,
    decrement_ticket_inventory_use_case: DecrementTicketInventoryUseCase,
) -> CreateTicketPurchaseUseCase:
    return CreateTicketPurchaseUseCase(
        ticket_query_repo=ticket_query_repo,
        ticket_purchase_command_repo=ticket_purchase_command_repo,
        decrement_ticket_inventory_use_case=decrement_ticket_inventory_use_case,
    )


@pytest.fixture
def seed_ticket(ticket_command_repo: TicketCommandRepoImpl) -> SeedTicket:
    async def _seed(
        *,
        event_id: int = 3,
        ticket_type: TicketType = TicketType.FREE,
        price: int = 0,
        quantity: int = 10,
    ) -> Ticket:
        return await ticket_command_repo.create(
            ticket=Ticket.create(
                event_id=event_id,
                name=f'{ticket_type.value} admission',
                ticket_type=ticket_type,
                price=price,
                quantity=quantity,
            )
        )

    return _seed


@pytest.fixture
def seed_purchase(
    seed_ticket: SeedTicket,
    create_ticket_purchase_use_case: CreateTicketPurchaseUseCase,
    participant: UserEntity,
) -> SeedPurchase:
    """Free tickets come back completed (redeemable); paid ones pending."""

    async def _seed(
        *,
        ticket: Ticket | None = None,
        ticket_type: TicketType = TicketType.FREE,
        quantity: int = 1,
    ) -> TicketPurchase:
        if ticket is None:
            price = 1500 if ticket_type == TicketType.PAID else 0
            ticket = await seed_ticket(ticket_type=ticket_type, price=price)
        return await create_ticket_purchase_use_case.create(
            ticket_id=ticket.id or 0, purchaser_id=participant.id or 0, quantity=quantity
        )

    return _seed


# =============================================================================
# HTTP (app served in-process; no lifespan, the container points at the test ledger)
# =============================================================================
@asynccontextmanager
async def lifespan_for_tests(_app: FastAPI) -> AsyncIterator[None]:
    yield


@pytest.fixture
def api_app(database: Database, media_store: LocalMediaStoreImpl) -> Generator[FastAPI, None, None]:
    container.database.override(providers.Object(database))
    container.read_database.override(providers.Object(database))
    container.media_store.override(providers.Object(media_store))
    container.reset_singletons()
    container.wire(modules=WIRE_MODULES)

    yield create_app(lifespan=lifespan_for_tests, title_suffix=' (Test)')

    container.unwire()
    container.reset_override()
    container.reset_singletons()


@pytest_asyncio.fixture
async def api_client(api_app: FastAPI) -> AsyncGenerator[httpx.AsyncClient, None]:
    transport = httpx.ASGITransport(app=api_app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url='http://testserver') as client:
        yield client


@pytest.fixture
def auth_headers(jwt_auth: JwtAuth) -> Callable[[UserEntity], dict[str, str]]:
    def _headers(user: UserEntity) -> dict[str, str]:
        return {'Authorization': f'Bearer {jwt_auth.create_jwt_token(user)}'}

    return _headers
