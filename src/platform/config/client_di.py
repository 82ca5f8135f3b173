"""
Check-in device container

Kept apart from the server Container: a device never opens the ledger
database, and the server never opens a local queue.
"""

from dependency_injector import containers, providers

from src.platform.config.core_setting import Settings
from src.service.check_in_client.app.command.capture_check_in_use_case import (
    CaptureCheckInUseCase,
)
from src.service.check_in_client.app.service.sync_manager import SyncManager
from src.service.check_in_client.driven_adapter.http.connectivity_monitor_impl import (
    ConnectivityMonitorImpl,
)
from src.service.check_in_client.driven_adapter.http.redemption_gateway_impl import (
    RedemptionGatewayImpl,
)
from src.service.check_in_client.driven_adapter.local_store.local_db_setting import (
    LocalDatabase,
)
from src.service.check_in_client.driven_adapter.local_store.redemption_queue_impl import (
    RedemptionQueueImpl,
)
from src.service.check_in_client.driven_adapter.local_store.snapshot_cache_impl import (
    SnapshotCacheImpl,
)


class ClientContainer(containers.DeclarativeContainer):
    config_service = providers.Singleton(Settings)

    # Local durable store (queue + snapshot cache share one SQLite file)
    local_database = providers.Singleton(LocalDatabase)
    redemption_queue = providers.Singleton(
        RedemptionQueueImpl, session_factory=local_database.provided.session
    )
    snapshot_cache = providers.Singleton(
        SnapshotCacheImpl, session_factory=local_database.provided.session
    )

    # Server access
    redemption_gateway = providers.Singleton(
        RedemptionGatewayImpl,
        base_url=config_service.provided.CHECK_IN_SERVER_URL,
        access_token=config_service.provided.CHECK_IN_ACCESS_TOKEN.get_secret_value.call(),
        timeout=config_service.provided.HTTP_TIMEOUT_SECONDS,
    )
    connectivity_monitor = providers.Singleton(
        ConnectivityMonitorImpl,
        base_url=config_service.provided.CHECK_IN_SERVER_URL,
        probe_interval=config_service.provided.CONNECTIVITY_PROBE_SECONDS,
        timeout=config_service.provided.HTTP_TIMEOUT_SECONDS,
    )

    capture_check_in_use_case = providers.Singleton(
        CaptureCheckInUseCase,
        queue=redemption_queue,
        gateway=redemption_gateway,
        connectivity_monitor=connectivity_monitor,
    )
    sync_manager = providers.Singleton(
        SyncManager,
        queue=redemption_queue,
        gateway=redemption_gateway,
        connectivity_monitor=connectivity_monitor,
        sync_interval=config_service.provided.SYNC_INTERVAL_SECONDS,
        retry_delay=config_service.provided.SYNC_RETRY_DELAY_SECONDS,
        max_retries=config_service.provided.SYNC_MAX_RETRIES,
    )


client_container = ClientContainer()
